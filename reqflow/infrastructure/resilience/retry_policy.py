"""Retry classification and exponential backoff.

Network failures, 429 and 5xx responses are transient and retried with a
doubling delay (1s, 2s, 4s, ...). Any other 4xx is terminal immediately. A
transient failure that outlives the retry budget becomes `RetriesExhausted`.
"""

import enum
import logging

from reqflow.domain.models.errors import ErrorKind, RequestError, RetriesExhausted
from reqflow.domain.models.request import RetryContext

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_SECONDS = 1.0

RETRYABLE_KINDS = frozenset({
    ErrorKind.NETWORK_FAILURE,
    ErrorKind.RATE_LIMITED,
    ErrorKind.SERVER_FAILURE,
})


class RetryDecision(enum.Enum):
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


class RetryPolicy:
    """Decides whether a failed call is retried and how long to back off."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
    ):
        """Initializes the RetryPolicy.

        Args:
            max_attempts: Maximum number of retries after the first attempt.
            base_delay: Delay in seconds before the first retry; doubles after.
        """
        if max_attempts < 0 or base_delay < 0:
            raise ValueError("max_attempts and base_delay must not be negative.")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        logger.info(f"RetryPolicy initialized: max_attempts={max_attempts}, base_delay={base_delay}s")

    @staticmethod
    def is_transient(error: RequestError) -> bool:
        return error.kind in RETRYABLE_KINDS

    def classify(self, error: RequestError, context: RetryContext) -> RetryDecision:
        if self.is_transient(error) and context.attempts < self.max_attempts:
            return RetryDecision.RETRYABLE
        return RetryDecision.TERMINAL

    def next_delay(self, attempt: int) -> float:
        """Backoff before retry number `attempt` (1-based): base * 2^(attempt-1)."""
        if attempt < 1:
            raise ValueError("attempt is 1-based.")
        return self.base_delay * (2 ** (attempt - 1))

    def terminal_error(self, error: RequestError, context: RetryContext) -> RequestError:
        """Wraps a transient failure that ran out of retries; other errors pass through."""
        if self.is_transient(error):
            return RetriesExhausted(error, context.attempts)
        return error
