"""Failure taxonomy for orchestrated calls.

Every failure an issued call can resolve with is a `RequestError` tagged with
an `ErrorKind`, so application code can decide how to present it. The
original payload (response, status, underlying exception) is kept unchanged.
"""

import enum
from typing import Optional

from .request import HttpResponse, RequestDescriptor


class ErrorKind(enum.Enum):
    CANCELLED = "cancelled"
    NETWORK_FAILURE = "network_failure"
    RATE_LIMITED = "rate_limited"
    SERVER_FAILURE = "server_failure"
    CLIENT_FAILURE = "client_failure"
    RETRIES_EXHAUSTED = "retries_exhausted"


class TransportError(Exception):
    """Raised by transports when no response could be obtained."""


class RequestError(Exception):
    """Base class for every failure an issued call can resolve with."""
    kind: ErrorKind = ErrorKind.CLIENT_FAILURE

    def __init__(
        self,
        descriptor: RequestDescriptor,
        message: Optional[str] = None,
        response: Optional[HttpResponse] = None,
        cause: Optional[BaseException] = None,
    ):
        self.descriptor = descriptor
        self.response = response
        self.cause = cause
        super().__init__(message or self._default_message())

    @property
    def status(self) -> Optional[int]:
        return self.response.status if self.response is not None else None

    def _default_message(self) -> str:
        suffix = f" (status {self.status})" if self.status is not None else ""
        return f"{self.kind.value}: {self.descriptor.method} {self.descriptor.url}{suffix}"


class RequestCancelled(RequestError):
    """Superseded by a newer identical call. Never surfaced to the user."""
    kind = ErrorKind.CANCELLED


class NetworkFailure(RequestError):
    kind = ErrorKind.NETWORK_FAILURE


class RateLimited(RequestError):
    kind = ErrorKind.RATE_LIMITED


class ServerFailure(RequestError):
    kind = ErrorKind.SERVER_FAILURE


class ClientFailure(RequestError):
    kind = ErrorKind.CLIENT_FAILURE


class RetriesExhausted(RequestError):
    """A retryable failure that kept failing after the maximum number of retries."""
    kind = ErrorKind.RETRIES_EXHAUSTED

    def __init__(self, last_error: RequestError, attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            last_error.descriptor,
            message=f"Max retries ({attempts}) exceeded. Last error: {last_error}",
            response=last_error.response,
            cause=last_error,
        )


def error_for_status(descriptor: RequestDescriptor, response: HttpResponse) -> RequestError:
    """Maps a non-successful HTTP response to its taxonomy class."""
    status = response.status
    if status == 429:
        return RateLimited(descriptor, response=response)
    if 500 <= status <= 599:
        return ServerFailure(descriptor, response=response)
    return ClientFailure(descriptor, response=response)
