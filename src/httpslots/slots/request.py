"""The innermost pipeline stage: transport call plus retry loop.

:class:`RequestSlot` calls the raw transport, lets optional interceptors see
each attempt's raw outcome, turns an unacceptable application-level status
into a failure, and asks a retry predicate whether to go again. Attempts are
strictly sequential and the error that finally surfaces is always the one
the last attempt produced, never an error from the retry machinery.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Callable, Optional

from httpslots.exceptions import ConfigError, RequestError
from httpslots.models import RequestConfig, Response
from httpslots.slots.base import Continuation

logger = logging.getLogger(__name__)

OnResolve = Callable[[Response], Response]
OnReject = Callable[[Exception], Response]
ResultInterceptors = tuple[Optional[OnResolve], Optional[OnReject]]
ShouldRetry = Callable[[BaseException, RequestConfig, int], Awaitable[bool]]


def default_validate_status(status: int) -> bool:
    """Accept 2xx statuses."""
    return 200 <= status < 300


class RequestSlot:
    """Transport loop with retry.

    Args:
        adapter: The raw transport, ``async (config) -> Response``.
        get_http_status: Default status extractor used when a request does
            not set its own ``get_http_status``. Useful for APIs that report
            failures inside a 200 response body.

    Raises:
        ConfigError: If *adapter* is missing.
    """

    def __init__(
        self,
        adapter: Optional[Continuation],
        get_http_status: Optional[Callable[[Response], int]] = None,
    ) -> None:
        if adapter is None:
            raise ConfigError("A transport adapter is required.")
        self._adapter = adapter
        self._get_http_status = get_http_status

    async def hit(
        self,
        config: RequestConfig,
        interceptors: ResultInterceptors,
        should_retry: ShouldRetry,
    ) -> Response:
        """Send *config*, retrying while *should_retry* agrees.

        Args:
            config: The request to send.
            interceptors: ``(on_resolve, on_reject)`` applied to the raw
                outcome of every attempt. ``on_reject`` may recover by
                returning a response or re-raise.
            should_retry: ``async (error, config, attempt) -> bool``;
                ``attempt`` starts at 1.
        """
        attempt = 0
        while True:
            try:
                response = await self._attempt(config, interceptors)
                self._check_status(config, response)
                return response
            except Exception as exc:
                if not await self._should_continue(should_retry, exc, config, attempt + 1):
                    raise
                attempt += 1

    async def _attempt(self, config: RequestConfig, interceptors: ResultInterceptors) -> Response:
        on_resolve, on_reject = interceptors
        try:
            response = await self._adapter(config)
        except Exception as exc:
            if on_reject is None:
                raise
            return on_reject(exc)
        if on_resolve is not None:
            response = on_resolve(response)
        return response

    def _check_status(self, config: RequestConfig, response: Response) -> None:
        get_http_status = config.get_http_status or self._get_http_status
        if get_http_status is None:
            return
        validate_status = config.validate_status or default_validate_status
        status = get_http_status(response)
        if not validate_status(status):
            raise RequestError(
                f"Request failed with status code {status}",
                response.config or config,
                request=response.request,
                response=response,
                status=status,
            )

    @staticmethod
    async def _should_continue(
        should_retry: ShouldRetry,
        error: Exception,
        config: RequestConfig,
        attempt: int,
    ) -> bool:
        try:
            return await should_retry(error, config, attempt)
        except Exception as exc:
            logger.debug("Retry predicate failed, giving up: %s", exc)
            return False
