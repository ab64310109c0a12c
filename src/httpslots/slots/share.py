"""In-flight request deduplication ("sharing").

While a request is on the wire, identical requests (same fingerprint) do
not start a second transport call: they attach to the one already running
and each receives its own copy of the outcome. The in-flight entry is
removed as soon as the call settles, on success and on failure alike, so a
failed call never poisons later requests with the same fingerprint.

Registration happens synchronously, before the first ``await``, which is
what keeps "at most one in-flight call per fingerprint" race-free on the
single-threaded event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from httpslots.exceptions import RequestError, is_cancel
from httpslots.models import RequestConfig, Response, ShareOptions
from httpslots.options import is_force_enable, merge_slot_options
from httpslots.slots.base import Continuation, Slot, build_fingerprint, clone_response

logger = logging.getLogger(__name__)


class ShareSlot(Slot):
    """Collapse concurrent identical requests into one continuation call.

    Args:
        options: Global share setting -- ``None``, a boolean, a
            :class:`~httpslots.models.ShareOptions` or a mapping.

    The fingerprint is wider than the cache's: ``timeout`` and the size
    limits are included since two requests differing there are not
    interchangeable.
    """

    format_keys = (
        "base_url",
        "url",
        "method",
        "params",
        "data",
        "headers",
        "timeout",
        "max_content_length",
        "max_body_length",
    )

    def __init__(self, options: Any = None) -> None:
        self._options = options
        self._threads: dict[str, asyncio.Future[Response]] = {}

    async def hit(self, config: RequestConfig, continuation: Continuation) -> Response:
        options = merge_slot_options(ShareOptions, self._options, config.share)
        enable = (
            options.enable
            and (
                is_force_enable(config.share, ShareOptions)
                or config.method in options.allowed_methods
            )
            and (options.validate_request is None or options.validate_request(config))
        )
        if not enable:
            return await continuation(config)

        key = build_fingerprint(config, self.format_keys, options.format)

        thread = self._threads.get(key)
        if thread is not None:
            logger.debug("Sharing in-flight %s %s", config.method.upper(), config.full_url)
            try:
                response = await asyncio.shield(thread)
            except Exception as exc:
                if is_cancel(exc):
                    raise
                raise _recontextualise(exc, config) from exc
            return clone_response(response, config)

        logger.debug("Sending shared %s %s", config.method.upper(), config.full_url)
        thread = asyncio.ensure_future(continuation(config))
        self._threads[key] = thread
        thread.add_done_callback(lambda done: self._release(key, done))
        # The settled response itself is never handed out; every caller gets a copy.
        response = await asyncio.shield(thread)
        return clone_response(response, config)

    def _release(self, key: str, thread: asyncio.Future[Response]) -> None:
        if self._threads.get(key) is thread:
            del self._threads[key]
        if not thread.cancelled():
            # Mark the outcome as retrieved even when every waiter has gone.
            thread.exception()

    def __len__(self) -> int:
        return len(self._threads)


def _recontextualise(exc: Exception, config: RequestConfig) -> RequestError:
    """Re-raise a shared failure as if *config*'s own request had failed."""
    response = getattr(exc, "response", None)
    return RequestError(
        str(exc),
        config,
        code=getattr(exc, "code", None),
        request=getattr(exc, "request", None),
        response=clone_response(response, config) if isinstance(response, Response) else None,
        status=getattr(exc, "status", None),
    )
