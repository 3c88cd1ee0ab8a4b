"""Per endpoint-class minimum-interval throttler.

Soft pacing: a throttled call is told how long to wait, never rejected.
"""

import time
import logging
from typing import Callable, Dict, Iterable, Optional, Tuple

from reqflow.domain.models.common import EndpointClass
from reqflow.domain.models.request import RequestDescriptor
from reqflow.domain.models.routing import PrefixTable

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_SECONDS = 0.3


class RequestThrottler:
    """Tracks the last permitted dispatch per endpoint class."""

    def __init__(
        self,
        interval_table: Optional[Iterable[Tuple[str, float]]] = None,
        default_interval: float = DEFAULT_MIN_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initializes the throttler.

        Args:
            interval_table: (prefix, minimum seconds between dispatches) pairs.
            default_interval: Interval for URLs matching no configured prefix.
            clock: Monotonic time source in seconds.
        """
        if default_interval < 0:
            raise ValueError("default_interval must not be negative.")
        self.intervals: PrefixTable[float] = PrefixTable(interval_table)
        self.default_interval = default_interval
        self._clock = clock
        self.last_dispatch: Dict[EndpointClass, float] = {}
        logger.info(f"RequestThrottler initialized: default={default_interval}s, {len(self.intervals)} prefix rules")

    def endpoint_class(self, url: str) -> EndpointClass:
        return self.intervals.endpoint_class(url)

    def min_interval(self, url: str) -> float:
        return self.intervals.largest_value(url, self.default_interval)

    def delay_required(self, descriptor: RequestDescriptor) -> float:
        """Returns how long the call must wait; stamps the dispatch when it is zero."""
        endpoint_class = self.endpoint_class(descriptor.url)
        interval = self.min_interval(descriptor.url)
        now = self._clock()
        last = self.last_dispatch.get(endpoint_class)
        if last is not None:
            elapsed = now - last
            if elapsed < interval:
                delay = interval - elapsed
                logger.debug(f"Throttling {endpoint_class}: waiting {delay:.3f}s (interval {interval}s)")
                return delay
        self.last_dispatch[endpoint_class] = now
        return 0.0

    def reset(self) -> None:
        self.last_dispatch.clear()
