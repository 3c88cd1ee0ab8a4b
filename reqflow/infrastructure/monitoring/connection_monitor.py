"""Tracks whether the API is reachable and announces transitions.

The state flips to offline on the first network failure and back online on
the next response of any status, emitting one notice per transition.
"""

import logging
from typing import Optional

from reqflow.domain.interfaces.notifier import Notifier, NoticeKind
from reqflow.domain.interfaces.transport import Transport
from reqflow.domain.models.errors import TransportError
from reqflow.infrastructure.monitoring.notifier import LoggingNotifier

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_PATH = "/api/health"


class ConnectionMonitor:
    def __init__(self, notifier: Optional[Notifier] = None, online: bool = True):
        self.notifier = notifier or LoggingNotifier()
        self._online = online

    @property
    def online(self) -> bool:
        return self._online

    def record_failure(self) -> None:
        if self._online:
            self._online = False
            logger.warning("Connection lost.")
            self.notifier.notify(NoticeKind.CONNECTION_LOST, "Connection lost. Working offline...")

    def record_response(self) -> None:
        if not self._online:
            self._online = True
            logger.info("Connection restored.")
            self.notifier.notify(NoticeKind.CONNECTION_RESTORED, "Connection restored!")

    async def check(self, transport: Transport, health_url: str = DEFAULT_HEALTH_PATH) -> bool:
        """Probes the API with a HEAD request outside the orchestration pipeline."""
        try:
            await transport.send("HEAD", health_url)
        except TransportError as e:
            logger.debug(f"Health check against {health_url} failed: {e}")
            self.record_failure()
            return False
        self.record_response()
        return True
