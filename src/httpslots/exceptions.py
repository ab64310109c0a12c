"""Exception hierarchy for httpslots.

All exceptions inherit from :class:`HttpSlotsError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`httpslots.exit_codes`.
The CLI entry point catches ``HttpSlotsError`` and exits with the
appropriate code.

Subclass hierarchy::

    HttpSlotsError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 1)
    +-- RequestError        (exit 5 with a response, 6 without)
    +-- RequestCancelled    (exit 130)

:class:`RequestError` mirrors the error shape a raw transport produces:
the request that failed, an optional error ``code``, the raw transport
request and, when the server answered, the :class:`~httpslots.models.Response`.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Optional

from httpslots.exit_codes import (
    EXIT_CANCELLED,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_ERROR,
    EXIT_INVALID_USAGE,
)

if TYPE_CHECKING:
    from httpslots.models import RequestConfig, Response


class HttpSlotsError(Exception):
    """Base exception for all httpslots errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`httpslots.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(HttpSlotsError):
    """Raised for invalid CLI arguments or malformed request options."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(HttpSlotsError):
    """Raised for configuration problems (invalid JSON, missing adapter, bad settings)."""

    exit_code = EXIT_GENERIC_FAILURE


class RequestError(HttpSlotsError):
    """A failed request attempt.

    Raised by the transport adapter for network and protocol failures and
    for responses whose status fails ``validate_status``, and synthesized by
    :class:`~httpslots.slots.request.RequestSlot` when a custom status
    extractor reports an unacceptable application-level status.

    Args:
        message: Human-readable error description.
        config: The :class:`~httpslots.models.RequestConfig` that failed.
        code: Optional machine-readable error code (``ETIMEDOUT``, ...).
        request: The raw transport request object, when one was built.
        response: The response, when the server answered.
        status: Explicit status overriding ``response.status``.
    """

    def __init__(
        self,
        message: str,
        config: Optional[RequestConfig] = None,
        code: Optional[str] = None,
        request: Any = None,
        response: Optional[Response] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(
            message,
            exit_code=EXIT_HTTP_ERROR if response is not None else EXIT_CONNECTION_ERROR,
        )
        self.config = config
        self.code = code
        self.request = request
        self.response = response
        self._status = status

    @property
    def status(self) -> Optional[int]:
        """The status this failure carries, or ``None`` for network-level errors."""
        if self._status is not None:
            return self._status
        if self.response is not None:
            return self.response.status
        return None


class RequestCancelled(HttpSlotsError):
    """The distinguished cancellation signal.

    Never retried and never re-wrapped: every layer passes it through
    unchanged so callers can tell "my request was cancelled" apart from
    "the request failed".
    """

    exit_code = EXIT_CANCELLED

    def __init__(self, message: str = "Request cancelled", config: Optional[RequestConfig] = None) -> None:
        super().__init__(message)
        self.config = config


def is_cancel(exc: BaseException) -> bool:
    """Return ``True`` if *exc* represents a cancellation."""
    return isinstance(exc, (RequestCancelled, asyncio.CancelledError))
