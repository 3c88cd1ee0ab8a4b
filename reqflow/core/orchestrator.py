"""The request orchestration pipeline.

Each issued call walks a small state machine:

    Created -> Deduped -> CacheChecked -> Throttled -> (Queued | Direct)
            -> Executing -> (Succeeded | Retrying -> Executing | Failed | Cancelled)

Every suspension point (throttle wait, queue admission, transport I/O and
retry backoff) runs inside one asyncio task per call, so superseding the call
cancels it wherever it is waiting. Shared state is only touched between
suspension points, so no locking is needed on a single event loop.
"""

import asyncio
import enum
import logging
import time
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from reqflow.domain.events.request_events import (
    DomainEvent, RequestIssued, RequestServedFromCache, RequestDeferred,
    RequestQueued, RequestSucceeded, RequestFailed, RequestSuperseded, RetryScheduled,
)
from reqflow.domain.interfaces.notifier import Notifier, NoticeKind
from reqflow.domain.interfaces.transport import Transport
from reqflow.domain.models.errors import (
    ErrorKind, NetworkFailure, RequestCancelled, RequestError, RetriesExhausted,
    TransportError, error_for_status,
)
from reqflow.domain.models.request import HttpResponse, RequestDescriptor, RequestIdentity, RetryContext
from reqflow.domain.models.routing import PrefixTable
from reqflow.infrastructure.cache.response_cache import ResponseCache
from reqflow.infrastructure.config.orchestrator_config import OrchestratorConfig
from reqflow.infrastructure.monitoring.connection_monitor import ConnectionMonitor
from reqflow.infrastructure.monitoring.event_dispatcher import EventDispatcher
from reqflow.infrastructure.monitoring.notifier import LoggingNotifier
from reqflow.infrastructure.resilience.deduplicator import CancellationToken, RequestDeduplicator
from reqflow.infrastructure.resilience.request_queue import RequestQueue
from reqflow.infrastructure.resilience.retry_policy import RetryDecision, RetryPolicy
from reqflow.infrastructure.resilience.throttler import RequestThrottler

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class CallState(enum.Enum):
    CREATED = "created"
    DEDUPED = "deduped"
    CACHE_CHECKED = "cache_checked"
    THROTTLED = "throttled"
    QUEUED = "queued"
    DIRECT = "direct"
    EXECUTING = "executing"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class _Call:
    """Per-call bookkeeping: identity, token, retry context and current state."""

    def __init__(self, descriptor: RequestDescriptor, identity: RequestIdentity, endpoint_class: str):
        self.descriptor = descriptor
        self.identity = identity
        self.endpoint_class = endpoint_class
        self.retry = RetryContext()
        self.token: Optional[CancellationToken] = None
        self.state = CallState.CREATED

    def advance(self, state: CallState) -> None:
        logger.debug(f"{self.identity}: {self.state.value} -> {state.value}")
        self.state = state


class RequestOrchestrator:
    """Runs every outgoing call through dedupe, cache, throttle, queue and retry."""

    def __init__(
        self,
        transport: Transport,
        config: Optional[OrchestratorConfig] = None,
        notifier: Optional[Notifier] = None,
        events: Optional[EventDispatcher] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        """Initializes the orchestrator and its components.

        Args:
            transport: Sends the actual HTTP requests.
            config: Orchestration settings; defaults apply when None.
            notifier: Receives user-visible notices.
            events: Dispatcher for lifecycle events.
            clock: Monotonic time source shared by cache and throttler.
            sleep: Coroutine used for throttle and backoff waits.
        """
        self.transport = transport
        self.config = config or OrchestratorConfig()
        self.notifier = notifier or LoggingNotifier()
        self.events = events or EventDispatcher()
        self._sleep = sleep

        self.cache = ResponseCache(
            max_entries=self.config.max_cache_entries,
            default_ttl=self.config.default_ttl,
            ttl_table=self.config.ttl_table,
            uncacheable_prefixes=self.config.uncacheable_prefixes,
            clock=clock,
        )
        self.throttler = RequestThrottler(
            interval_table=self.config.interval_table,
            default_interval=self.config.default_interval,
            clock=clock,
        )
        self.deduplicator = RequestDeduplicator()
        self.queue = RequestQueue(max_concurrent=self.config.max_concurrent)
        self.retry_policy = RetryPolicy(
            max_attempts=self.config.max_retry_attempts,
            base_delay=self.config.retry_base_delay,
        )
        self.critical = PrefixTable([(prefix, True) for prefix in self.config.critical_prefixes])
        self.connection = ConnectionMonitor(self.notifier)
        self.default_headers: Dict[str, str] = {}
        logger.info(f"RequestOrchestrator initialized with {len(self.critical)} critical prefixes")

    # --- Public API ---

    async def issue(self, descriptor: RequestDescriptor) -> HttpResponse:
        """Runs one call through the pipeline.

        Returns:
            The server's response, or a cached one.

        Raises:
            RequestCancelled: A newer call with the same identity superseded this one.
            RequestError: Any other terminal failure, tagged with its ErrorKind.
        """
        call = _Call(descriptor, RequestIdentity.of(descriptor), self.throttler.endpoint_class(descriptor.url))
        self._publish(RequestIssued(identity=str(call.identity), endpoint_class=call.endpoint_class))

        call.token = self.deduplicator.register(call.identity)
        call.advance(CallState.DEDUPED)
        runner = asyncio.ensure_future(self._run(call))
        call.token.attach(runner)
        try:
            response = await runner
        except asyncio.CancelledError:
            if not call.token.cancelled:
                raise
            raise self._superseded(call) from None
        except RequestError:
            if call.token.cancelled:
                raise self._superseded(call) from None
            raise
        finally:
            self.deduplicator.release(call.identity, call.token)
        # The runner may have finished just before a newer call replaced it
        if call.token.cancelled:
            raise self._superseded(call)
        return response

    def is_critical(self, url: str) -> bool:
        return self.critical.any_match(url)

    def invalidate(self, endpoints: Optional[Iterable[str]] = None) -> int:
        return self.cache.invalidate(endpoints)

    def reset(self) -> None:
        """Clears cache, throttle and dedupe state (on sign-in / sign-out)."""
        self.cache.clear()
        self.throttler.reset()
        self.deduplicator.clear()
        logger.info("Orchestration state reset.")

    async def check_connection(self, health_url: str = "/api/health") -> bool:
        return await self.connection.check(self.transport, health_url)

    async def aclose(self) -> None:
        await self.transport.aclose()

    # --- Pipeline ---

    async def _run(self, call: _Call) -> HttpResponse:
        cached = self.cache.lookup(call.descriptor)
        call.advance(CallState.CACHE_CHECKED)
        if cached is not None:
            call.advance(CallState.SUCCEEDED)
            self._publish(RequestServedFromCache(identity=str(call.identity)))
            return cached

        await self._pace(call)
        started = time.perf_counter()
        while True:
            try:
                response = await self._dispatch(call)
            except RequestError as error:
                if self.retry_policy.classify(error, call.retry) is RetryDecision.RETRYABLE:
                    await self._back_off(call, error)
                    continue
                raise self._fail(call, error)

            call.advance(CallState.SUCCEEDED)
            if not call.token.cancelled:
                self.cache.store(call.descriptor, response)
            latency_ms = (time.perf_counter() - started) * 1000
            self._publish(RequestSucceeded(
                identity=str(call.identity), status=response.status,
                latency_ms=latency_ms, attempts=call.retry.attempts,
            ))
            return response

    async def _pace(self, call: _Call) -> None:
        """Waits until the throttler stamps this dispatch."""
        delay = self.throttler.delay_required(call.descriptor)
        while delay > 0:
            self._publish(RequestDeferred(
                identity=str(call.identity), endpoint_class=call.endpoint_class, wait_time_seconds=delay,
            ))
            await self._sleep(delay)
            delay = self.throttler.delay_required(call.descriptor)
        call.advance(CallState.THROTTLED)

    async def _dispatch(self, call: _Call) -> HttpResponse:
        if self.is_critical(call.descriptor.url):
            call.advance(CallState.QUEUED)
            self._publish(RequestQueued(
                identity=str(call.identity), waiting=self.queue.waiting, running=self.queue.running,
            ))
            return await self.queue.submit(partial(self._send, call))
        call.advance(CallState.DIRECT)
        return await self._send(call)

    async def _send(self, call: _Call) -> HttpResponse:
        call.advance(CallState.EXECUTING)
        descriptor = call.descriptor
        headers = {**self.default_headers, **descriptor.headers}
        try:
            response = await self.transport.send(
                descriptor.method, descriptor.url, descriptor.params or None, descriptor.body, headers,
            )
        except TransportError as e:
            self.connection.record_failure()
            raise NetworkFailure(descriptor, message=str(e), cause=e) from e
        self.connection.record_response()
        if response.status >= 400:
            raise error_for_status(descriptor, response)
        return response

    async def _back_off(self, call: _Call, error: RequestError) -> None:
        call.advance(CallState.RETRYING)
        attempt = call.retry.advance()
        delay = self.retry_policy.next_delay(attempt)
        logger.warning(
            f"Retryable {error.kind.value} for {call.identity} "
            f"(retry {attempt}/{self.retry_policy.max_attempts}). Waiting {delay:.2f}s..."
        )
        if error.kind is ErrorKind.RATE_LIMITED:
            self.notifier.notify(NoticeKind.RATE_LIMITED, f"Rate limit exceeded. Retrying in {delay:g}s...")
        self._publish(RetryScheduled(
            identity=str(call.identity), attempt_number=attempt,
            delay_seconds=delay, error_kind=error.kind.value,
        ))
        await self._sleep(delay)

    def _fail(self, call: _Call, error: RequestError) -> RequestError:
        call.advance(CallState.FAILED)
        terminal = self.retry_policy.terminal_error(error, call.retry)
        logger.error(f"Request failed definitively: {call.identity}: {terminal}")
        self._publish(RequestFailed(
            identity=str(call.identity), error_kind=terminal.kind.value,
            error_message=str(terminal), status=terminal.status,
        ))
        root = terminal.last_error if isinstance(terminal, RetriesExhausted) else terminal
        if root.kind is ErrorKind.RATE_LIMITED:
            self.notifier.notify(NoticeKind.REQUEST_FAILED, "Too many requests. Please try again later.")
        elif root.kind is ErrorKind.NETWORK_FAILURE:
            self.notifier.notify(NoticeKind.REQUEST_FAILED, "Network error. Please check your connection.")
        return terminal

    def _superseded(self, call: _Call) -> RequestCancelled:
        call.advance(CallState.CANCELLED)
        logger.debug(f"Request superseded by a newer identical call: {call.identity}")
        self._publish(RequestSuperseded(identity=str(call.identity)))
        return RequestCancelled(call.descriptor)

    def _publish(self, event: DomainEvent) -> None:
        self.events.publish(event)
