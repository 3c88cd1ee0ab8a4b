"""Interface for the HTTP transport.

The orchestration core treats the transport as an opaque, possibly-failing
network boundary. It interprets nothing beyond the status code and the
presence or absence of a response.
"""

import abc
from typing import Any, Mapping, Optional

from ..models.common import Headers
from ..models.request import HttpResponse


class Transport(abc.ABC):
    """Abstract Base Class for sending a single HTTP request."""

    @abc.abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        headers: Optional[Headers] = None,
    ) -> HttpResponse:
        """Sends one request and returns whatever response the server gave.

        Args:
            method: Upper-cased HTTP method.
            url: Absolute URL or path relative to the transport's base URL.
            params: Query parameters.
            body: JSON-serializable request body, if any.
            headers: Request headers.

        Returns:
            The response, for any status code.

        Raises:
            TransportError: If no response was obtained (connection refused,
                DNS failure, timeout, ...).
        """
        pass

    async def aclose(self) -> None:
        """Releases any network resources held by the transport."""
        return None
