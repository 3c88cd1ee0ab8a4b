"""Explicit configuration for the request orchestration layer.

All durations are in seconds.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from reqflow.infrastructure.config.settings import get_config

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 8
DEFAULT_CRITICAL_PREFIXES = [
    "/api/auth/login",
    "/api/auth/register",
    "/api/students",
    "/api/classes",
    "/api/attendance",
]
DEFAULT_INTERVAL_SECONDS = 0.3
DEFAULT_INTERVAL_TABLE = [
    ("/api/auth/", 2.0),
    ("/api/students", 0.5),
    ("/api/classes", 0.5),
]
DEFAULT_TTL_SECONDS = 60.0
DEFAULT_TTL_TABLE = [
    ("/api/students", 120.0),
    ("/api/classes", 120.0),
    ("/api/teachers", 300.0),
    ("/api/dashboard", 60.0),
]
DEFAULT_UNCACHEABLE_PREFIXES = ["/api/auth/"]
DEFAULT_MAX_CACHE_ENTRIES = 50
DEFAULT_MAX_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY_SECONDS = 1.0


def _prefixes(value: Any) -> List[str]:
    """Accepts a list of prefixes or a comma-separated string (as set in the environment)."""
    if isinstance(value, str):
        return [prefix.strip() for prefix in value.split(",") if prefix.strip()]
    return [str(prefix) for prefix in value]


def _table(value: Any) -> List[Tuple[str, float]]:
    """Accepts a {prefix: seconds} mapping, a list of [prefix, seconds] pairs,
    or a string of comma-separated prefix=seconds pairs.
    """
    if isinstance(value, Mapping):
        items = value.items()
    elif isinstance(value, str):
        items = []
        for pair in value.split(","):
            if not pair.strip():
                continue
            prefix, sep, seconds = pair.partition("=")
            if not sep or not prefix.strip():
                raise ValueError(f"Expected prefix=seconds, got '{pair.strip()}'.")
            items.append((prefix.strip(), seconds.strip()))
    else:
        items = value
    return [(str(prefix), float(seconds)) for prefix, seconds in items]


@dataclass
class OrchestratorConfig:
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    critical_prefixes: List[str] = field(default_factory=lambda: list(DEFAULT_CRITICAL_PREFIXES))
    interval_table: List[Tuple[str, float]] = field(default_factory=lambda: list(DEFAULT_INTERVAL_TABLE))
    default_interval: float = DEFAULT_INTERVAL_SECONDS
    ttl_table: List[Tuple[str, float]] = field(default_factory=lambda: list(DEFAULT_TTL_TABLE))
    default_ttl: float = DEFAULT_TTL_SECONDS
    uncacheable_prefixes: List[str] = field(default_factory=lambda: list(DEFAULT_UNCACHEABLE_PREFIXES))
    max_cache_entries: int = DEFAULT_MAX_CACHE_ENTRIES
    max_retry_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS
    retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY_SECONDS

    def __post_init__(self):
        self.interval_table = _table(self.interval_table)
        self.ttl_table = _table(self.ttl_table)
        self.critical_prefixes = _prefixes(self.critical_prefixes)
        self.uncacheable_prefixes = _prefixes(self.uncacheable_prefixes)
        if self.max_concurrent <= 0 or self.max_cache_entries <= 0:
            raise ValueError("max_concurrent and max_cache_entries must be positive.")
        if self.max_retry_attempts < 0:
            raise ValueError("max_retry_attempts must not be negative.")
        durations = [self.default_interval, self.default_ttl, self.retry_base_delay]
        durations += [seconds for _, seconds in self.interval_table + self.ttl_table]
        if any(seconds < 0 for seconds in durations):
            raise ValueError("Intervals, TTLs and retry delays must not be negative.")

    @classmethod
    def from_settings(cls) -> "OrchestratorConfig":
        """Builds the config from the settings layer, falling back to defaults."""
        config = cls(
            max_concurrent=int(get_config('orchestrator.max_concurrent', DEFAULT_MAX_CONCURRENT)),
            critical_prefixes=_prefixes(get_config('orchestrator.critical_prefixes', DEFAULT_CRITICAL_PREFIXES)),
            interval_table=_table(get_config('throttle.intervals', DEFAULT_INTERVAL_TABLE)),
            default_interval=float(get_config('throttle.default_interval', DEFAULT_INTERVAL_SECONDS)),
            ttl_table=_table(get_config('cache.ttl', DEFAULT_TTL_TABLE)),
            default_ttl=float(get_config('cache.default_ttl', DEFAULT_TTL_SECONDS)),
            uncacheable_prefixes=_prefixes(get_config('cache.uncacheable_prefixes', DEFAULT_UNCACHEABLE_PREFIXES)),
            max_cache_entries=int(get_config('cache.max_entries', DEFAULT_MAX_CACHE_ENTRIES)),
            max_retry_attempts=int(get_config('retry.max_attempts', DEFAULT_MAX_RETRY_ATTEMPTS)),
            retry_base_delay=float(get_config('retry.base_delay', DEFAULT_RETRY_BASE_DELAY_SECONDS)),
        )
        logger.debug(f"Orchestrator config loaded from settings: {config}")
        return config

    def as_dict(self) -> Dict[str, Any]:
        return {
            "max_concurrent": self.max_concurrent,
            "critical_prefixes": list(self.critical_prefixes),
            "interval_table": list(self.interval_table),
            "default_interval": self.default_interval,
            "ttl_table": list(self.ttl_table),
            "default_ttl": self.default_ttl,
            "uncacheable_prefixes": list(self.uncacheable_prefixes),
            "max_cache_entries": self.max_cache_entries,
            "max_retry_attempts": self.max_retry_attempts,
            "retry_base_delay": self.retry_base_delay,
        }
