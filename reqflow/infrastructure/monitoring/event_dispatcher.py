"""Minimal synchronous publish/subscribe for domain events."""

import logging
from typing import Callable, List

from reqflow.domain.events.request_events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class EventDispatcher:
    """Delivers every published event to each subscriber, in subscription order."""

    def __init__(self):
        self._handlers: List[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                # A broken subscriber must not fail the call being orchestrated
                logger.error(f"Event handler {handler!r} failed for {type(event).__name__}: {e}", exc_info=True)
