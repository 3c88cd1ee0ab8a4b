"""In-memory response cache with per-prefix TTLs and capacity eviction.

Only idempotent reads are cached. Expiry is lazy (checked on lookup) and
eviction is by insertion order: a hit does not refresh an entry's position.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from reqflow.domain.interfaces.cache import ResponseStore
from reqflow.domain.models.request import HttpResponse, RequestDescriptor, RequestIdentity, url_path
from reqflow.domain.models.routing import PrefixTable

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 50
DEFAULT_TTL_SECONDS = 60.0


@dataclass
class CacheEntry:
    """Internal representation of a cache entry with expiry."""
    key: RequestIdentity
    response: HttpResponse
    expiry_time: float


class ResponseCache(ResponseStore):
    """TTL-bounded identity -> response store."""

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        ttl_table: Optional[Iterable[Tuple[str, float]]] = None,
        uncacheable_prefixes: Iterable[str] = ("/api/auth/",),
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive.")
        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self.ttl_table: PrefixTable[float] = PrefixTable(ttl_table)
        self.uncacheable = PrefixTable([(prefix, True) for prefix in uncacheable_prefixes])
        self._clock = clock
        # dict preserves insertion order, so the first key is the oldest entry
        self._entries: Dict[RequestIdentity, CacheEntry] = {}
        logger.info(f"ResponseCache initialized: max={max_entries}, default_ttl={default_ttl}s")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, descriptor: RequestDescriptor) -> bool:
        return RequestIdentity.of(descriptor) in self._entries

    def is_cacheable(self, descriptor: RequestDescriptor) -> bool:
        if not descriptor.is_read or descriptor.no_cache:
            return False
        return not self.uncacheable.any_match(descriptor.url)

    def ttl_for(self, url: str) -> float:
        return self.ttl_table.value_for(url, self.default_ttl)

    # --- ResponseStore Interface Implementation ---

    def lookup(self, descriptor: RequestDescriptor) -> Optional[HttpResponse]:
        if not self.is_cacheable(descriptor):
            return None
        key = RequestIdentity.of(descriptor)
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for key: {key}")
            return None
        if self._clock() >= entry.expiry_time:
            del self._entries[key]
            logger.debug(f"Cache entry expired for key: {key}. Removed.")
            return None
        logger.debug(f"Cache hit for key: {key}")
        return entry.response

    def store(self, descriptor: RequestDescriptor, response: HttpResponse) -> bool:
        if not self.is_cacheable(descriptor):
            return False
        key = RequestIdentity.of(descriptor)
        # Re-storing a key moves it to the newest position
        self._entries.pop(key, None)
        if len(self._entries) >= self.max_entries:
            oldest_key = next(iter(self._entries))
            del self._entries[oldest_key]
            logger.debug(f"Cache full, evicted oldest key: {oldest_key}")
        ttl = self.ttl_for(descriptor.url)
        self._entries[key] = CacheEntry(key=key, response=response, expiry_time=self._clock() + ttl)
        logger.debug(f"Stored response in cache: key={key}, ttl={ttl}s")
        return True

    def clear(self, prefix: Optional[str] = None) -> int:
        if prefix is None:
            removed = len(self._entries)
            self._entries.clear()
            logger.info(f"Cleared response cache ({removed} entries).")
            return removed
        doomed = [key for key in self._entries if url_path(key.url).startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        logger.debug(f"Cleared {len(doomed)} cache entries under prefix: {prefix}")
        return len(doomed)
