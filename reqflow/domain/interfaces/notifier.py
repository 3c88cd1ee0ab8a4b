"""Interface for user-visible notices (connection lost, rate limited, ...).

Notices are fire-and-forget; the core never consumes a return value.
"""

import abc
import enum


class NoticeKind(enum.Enum):
    CONNECTION_LOST = "connection_lost"
    CONNECTION_RESTORED = "connection_restored"
    RATE_LIMITED = "rate_limited"
    REQUEST_FAILED = "request_failed"


class Notifier(abc.ABC):
    """Abstract Base Class for presenting transient notices to the user."""

    @abc.abstractmethod
    def notify(self, kind: NoticeKind, message: str) -> None:
        """Presents a notice.

        Args:
            kind: What happened.
            message: Human readable text, e.g. 'Rate limit exceeded. Retrying in 2s...'.
        """
        pass
