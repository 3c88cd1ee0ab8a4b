"""Domain Events emitted while orchestrating a call.

Examples include events for when calls are deferred, queued, retried,
superseded, fail, or succeed.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class RequestIssued(DomainEvent):
    """Event triggered when application code issues a call."""
    identity: str
    endpoint_class: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestServedFromCache(DomainEvent):
    """Event triggered when a call short-circuits on a cache hit."""
    identity: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestDeferred(DomainEvent):
    """Event triggered when a call is paced by the throttler."""
    identity: str
    endpoint_class: str
    wait_time_seconds: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestQueued(DomainEvent):
    """Event triggered when a call to a critical endpoint enters the queue."""
    identity: str
    waiting: int
    running: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestSucceeded(DomainEvent):
    identity: str
    status: int
    latency_ms: float
    attempts: int = 0
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestFailed(DomainEvent):
    """Event triggered when a call fails definitively (after retries)."""
    identity: str
    error_kind: str
    error_message: str
    status: Optional[int] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestSuperseded(DomainEvent):
    """Event triggered when a newer identical call cancels this one."""
    identity: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed call."""
    identity: str
    attempt_number: int
    delay_seconds: float
    error_kind: str
    timestamp: float = field(default_factory=time.time)
