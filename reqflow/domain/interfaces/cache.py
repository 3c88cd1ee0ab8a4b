"""Interface for response caching.

Defines the contract for storing, retrieving and invalidating responses of
idempotent requests.
"""

import abc
from typing import Iterable, Optional

from ..models.request import HttpResponse, RequestDescriptor


class ResponseStore(abc.ABC):
    """Abstract Base Class for response caching operations."""

    @abc.abstractmethod
    def lookup(self, descriptor: RequestDescriptor) -> Optional[HttpResponse]:
        """Returns the cached response for the request, or None on a miss.

        Expired entries are removed and reported as a miss.
        """
        pass

    @abc.abstractmethod
    def store(self, descriptor: RequestDescriptor, response: HttpResponse) -> bool:
        """Stores a response if the request is cacheable.

        Returns:
            True if the response was stored.
        """
        pass

    @abc.abstractmethod
    def clear(self, prefix: Optional[str] = None) -> int:
        """Clears every entry, or only those whose URL path starts with prefix.

        Returns:
            The number of entries removed.
        """
        pass

    def invalidate(self, endpoints: Optional[Iterable[str]] = None) -> int:
        """Clears the given endpoint prefixes, or everything when None."""
        if endpoints is None:
            return self.clear()
        return sum(self.clear(endpoint) for endpoint in endpoints)
