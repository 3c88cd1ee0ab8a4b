"""Transport implementation backed by an httpx.AsyncClient.

Hides the specifics of the httpx library: every HTTP status comes back as an
HttpResponse, and failures to get any response become TransportError.
"""

import logging
from typing import Any, Mapping, Optional

import httpx

from reqflow.domain.interfaces.transport import Transport
from reqflow.domain.models.common import Headers
from reqflow.domain.models.errors import TransportError
from reqflow.domain.models.request import HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpxTransport(Transport):
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initializes the transport.

        Args:
            base_url: Prefix for relative request URLs.
            timeout: Per-request timeout in seconds.
            client: Pre-built client (e.g. with a mock transport in tests).
        """
        self.base_url = base_url
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        logger.info(f"HttpxTransport initialized: base_url={base_url}, timeout={timeout}s")

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def send(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        headers: Optional[Headers] = None,
    ) -> HttpResponse:
        try:
            response = await self._client.request(
                method,
                url,
                params=dict(params) if params else None,
                json=body,
                headers=headers,
            )
        except httpx.TransportError as e:
            logger.debug(f"No response for {method} {url}: {type(e).__name__}: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e
        return HttpResponse(
            status=response.status_code,
            body=self._decode(response),
            headers=dict(response.headers),
            url=str(response.url),
        )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            try:
                return response.json()
            except ValueError:
                logger.warning(f"Response from {response.url} claimed JSON but did not parse.")
        return response.text

    async def aclose(self) -> None:
        await self._client.aclose()
