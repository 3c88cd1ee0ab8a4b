"""Application-facing client session.

Wraps a RequestOrchestrator with verb helpers and owns the authentication
state transitions: signing in or out installs or drops the bearer header and
resets all cached, throttle and dedupe state so no data leaks across users.
Token issuance itself is the application's business.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from reqflow.core.orchestrator import RequestOrchestrator
from reqflow.domain.models.request import HttpResponse, RequestDescriptor

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"


class ClientSession:
    def __init__(self, orchestrator: RequestOrchestrator):
        self.orchestrator = orchestrator

    @property
    def is_authenticated(self) -> bool:
        return AUTHORIZATION_HEADER in self.orchestrator.default_headers

    def sign_in(self, token: str) -> None:
        self.orchestrator.default_headers[AUTHORIZATION_HEADER] = f"Bearer {token}"
        self.orchestrator.reset()
        logger.info("Session signed in; orchestration state cleared.")

    def sign_out(self) -> None:
        self.orchestrator.default_headers.pop(AUTHORIZATION_HEADER, None)
        self.orchestrator.reset()
        logger.info("Session signed out; orchestration state cleared.")

    def invalidate(self, endpoints: Optional[Iterable[str]] = None) -> int:
        """Drops cached responses under the given prefixes (all when None)."""
        return self.orchestrator.invalidate(endpoints)

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        no_cache: bool = False,
    ) -> HttpResponse:
        descriptor = RequestDescriptor(
            method=method,
            url=url,
            params=dict(params or {}),
            body=body,
            headers=dict(headers or {}),
            no_cache=no_cache,
        )
        return await self.orchestrator.issue(descriptor)

    async def get(self, url: str, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> HttpResponse:
        return await self.request("GET", url, params=params, **kwargs)

    async def post(self, url: str, body: Any = None, **kwargs: Any) -> HttpResponse:
        return await self.request("POST", url, body=body, **kwargs)

    async def put(self, url: str, body: Any = None, **kwargs: Any) -> HttpResponse:
        return await self.request("PUT", url, body=body, **kwargs)

    async def patch(self, url: str, body: Any = None, **kwargs: Any) -> HttpResponse:
        return await self.request("PATCH", url, body=body, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> HttpResponse:
        return await self.request("DELETE", url, **kwargs)

    async def aclose(self) -> None:
        await self.orchestrator.aclose()
