"""Request-side value objects: descriptors, identities, responses and retry state."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, NamedTuple, Optional
from urllib.parse import urlsplit

from .common import Headers, HttpMethod, NormalizedParams

READ_METHODS = frozenset({"GET"})


def _freeze(value: Any) -> Any:
    """Turns nested lists/dicts into hashable tuples so params can be keyed."""
    if isinstance(value, Mapping):
        return tuple(sorted((str(k), _freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [_freeze(v) for v in value]
        if isinstance(value, (set, frozenset)):
            items.sort(key=repr)
        return tuple(items)
    return value


def normalize_params(params: Optional[Mapping[str, Any]]) -> NormalizedParams:
    """Returns params as a sorted tuple of (key, frozen value) pairs."""
    if not params:
        return ()
    return tuple(sorted((str(k), _freeze(v)) for k, v in params.items()))


def url_path(url: str) -> str:
    """Path component used for prefix matching ('/api/x' for 'http://h/api/x?q=1')."""
    parts = urlsplit(url)
    return parts.path or url


@dataclass(frozen=True)
class RequestDescriptor:
    """An outgoing call as issued by application code. Immutable once issued."""
    method: str
    url: str
    params: Mapping[str, Any] = field(default_factory=dict)
    body: Any = None
    headers: Headers = field(default_factory=dict)
    no_cache: bool = False

    def __post_init__(self):
        # Normalize once so identities and cache keys agree
        object.__setattr__(self, "method", HttpMethod(self.method.upper()))

    @property
    def is_read(self) -> bool:
        return self.method in READ_METHODS


class RequestIdentity(NamedTuple):
    """Dedupe and cache key: method + URL + normalized query params (no body)."""
    method: str
    url: str
    params: NormalizedParams

    @classmethod
    def of(cls, descriptor: RequestDescriptor) -> "RequestIdentity":
        return cls(descriptor.method, descriptor.url, normalize_params(descriptor.params))

    def __str__(self) -> str:
        query = "&".join(f"{k}={v}" for k, v in self.params)
        return f"{self.method} {self.url}" + (f"?{query}" if query else "")


@dataclass
class HttpResponse:
    """Transport-level response. The core only interprets `status`."""
    status: int
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    url: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400


@dataclass
class RetryContext:
    """Retry bookkeeping attached to one issued call."""
    attempts: int = 0

    def advance(self) -> int:
        """Records one more retry and returns the new attempt count."""
        self.attempts += 1
        return self.attempts
