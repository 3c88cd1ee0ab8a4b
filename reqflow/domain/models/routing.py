"""Prefix tables used to classify URLs into endpoint classes."""

from typing import Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

from .common import DEFAULT_ENDPOINT_CLASS, EndpointClass, EndpointPrefix
from .request import url_path

V = TypeVar("V")


class PrefixTable(Generic[V]):
    """Ordered (prefix, value) pairs matched against a URL's path."""

    def __init__(self, entries: Union[Mapping[str, V], Iterable[Tuple[str, V]], None] = None):
        if entries is None:
            entries = ()
        elif isinstance(entries, Mapping):
            entries = entries.items()
        self._entries: List[Tuple[EndpointPrefix, V]] = [
            (EndpointPrefix(prefix), value) for prefix, value in entries
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"PrefixTable({self._entries!r})"

    def matches(self, url: str) -> List[Tuple[EndpointPrefix, V]]:
        path = url_path(url)
        return [(prefix, value) for prefix, value in self._entries if path.startswith(prefix)]

    def longest_match(self, url: str) -> Optional[Tuple[EndpointPrefix, V]]:
        found = self.matches(url)
        if not found:
            return None
        return max(found, key=lambda entry: len(entry[0]))

    def largest_value(self, url: str, default: V) -> V:
        """Largest value among all matching prefixes (conservative tie-break)."""
        found = self.matches(url)
        if not found:
            return default
        return max(value for _, value in found)

    def value_for(self, url: str, default: V) -> V:
        """Value of the longest matching prefix."""
        match = self.longest_match(url)
        return match[1] if match else default

    def endpoint_class(self, url: str) -> EndpointClass:
        match = self.longest_match(url)
        return EndpointClass(match[0]) if match else DEFAULT_ENDPOINT_CLASS

    def any_match(self, url: str) -> bool:
        return bool(self.matches(url))
