"""Tracks the latest in-flight call per request identity.

Issuing a call whose identity is already pending cancels the older call, so
only the most recent one can ever deliver a result (last writer wins).
"""

import asyncio
import logging
from typing import Dict, Optional

from reqflow.domain.models.request import RequestIdentity

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cancellation handle for one issued call.

    The token cancels the asyncio task running the call, interrupting it at
    whichever suspension point it is waiting on.
    """

    def __init__(self, identity: RequestIdentity):
        self.identity = identity
        self._cancelled = False
        self._call: Optional[asyncio.Future] = None

    def __repr__(self) -> str:
        return f"CancellationToken({self.identity}, cancelled={self._cancelled})"

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def attach(self, call: asyncio.Future) -> None:
        self._call = call
        if self._cancelled:
            call.cancel()

    def cancel(self) -> bool:
        """Signals cancellation. Returns False if it was already cancelled."""
        if self._cancelled:
            return False
        self._cancelled = True
        if self._call is not None and not self._call.done():
            self._call.cancel()
        return True


class RequestDeduplicator:
    """Maps identity -> token of the most recently issued call."""

    def __init__(self):
        self._pending: Dict[RequestIdentity, CancellationToken] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, identity: RequestIdentity) -> bool:
        return identity in self._pending

    def active_token(self, identity: RequestIdentity) -> Optional[CancellationToken]:
        return self._pending.get(identity)

    def register(self, identity: RequestIdentity) -> CancellationToken:
        """Cancels any pending call with this identity and installs a fresh token."""
        previous = self._pending.pop(identity, None)
        if previous is not None and previous.cancel():
            logger.debug(f"Superseded pending request: {identity}")
        token = CancellationToken(identity)
        self._pending[identity] = token
        return token

    def release(self, identity: RequestIdentity, token: Optional[CancellationToken] = None) -> None:
        """Forgets the identity once its call completed.

        When a token is given, only that token's entry is removed; a newer
        call that already replaced it stays registered.
        """
        current = self._pending.get(identity)
        if current is None:
            return
        if token is not None and current is not token:
            return
        del self._pending[identity]

    def clear(self) -> None:
        """Forgets every handle without cancelling the calls behind them."""
        self._pending.clear()
