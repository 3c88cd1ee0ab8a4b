"""Notifier that writes user-facing notices to the log."""

import logging

from reqflow.domain.interfaces.notifier import Notifier, NoticeKind

logger = logging.getLogger(__name__)

_WARNING_KINDS = {NoticeKind.CONNECTION_LOST, NoticeKind.RATE_LIMITED, NoticeKind.REQUEST_FAILED}


class LoggingNotifier(Notifier):
    def notify(self, kind: NoticeKind, message: str) -> None:
        level = logging.WARNING if kind in _WARNING_KINDS else logging.INFO
        logger.log(level, f"[{kind.value}] {message}")
