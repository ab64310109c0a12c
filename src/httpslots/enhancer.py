"""Pipeline wiring.

:class:`Enhancer` wraps a raw transport so that callers keep the same
``async (config) -> Response`` interface while gaining caching, sharing and
retry::

    CacheSlot -> ShareSlot -> RequestSlot (asks RetrySlot) -> adapter

Caching short-circuits before any network or sharing bookkeeping, sharing
only sees cache misses, and retries run inside the shared call so every
sharer benefits from them once.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from httpslots.models import CacheOptions, RequestConfig, Response, RetryOptions, ShareOptions
from httpslots.options import SlotSetting
from httpslots.slots import CacheSlot, RequestSlot, RetrySlot, ShareSlot, compose
from httpslots.slots.base import Continuation
from httpslots.slots.request import ResultInterceptors


class Enhancer:
    """Callable pipeline built around *adapter*.

    Args:
        adapter: The raw transport, ``async (config) -> Response``.
        cache: Global cache setting (``None``, bool, options or mapping).
        share: Global share setting.
        retry: Global retry setting.
        get_http_status: Default status extractor for
            :class:`~httpslots.slots.request.RequestSlot`.
        interceptors: ``(on_resolve, on_reject)`` applied to every attempt.
        clock: Time source for the cache.

    Raises:
        ConfigError: If a setting has an unsupported shape or *adapter* is
            missing.

    Example::

        enhancer = Enhancer(HttpxAdapter(client), retry={"max_times": 5})
        response = await enhancer(RequestConfig(url="https://api.example.com/users"))
    """

    def __init__(
        self,
        adapter: Optional[Continuation],
        cache: Any = None,
        share: Any = None,
        retry: Any = None,
        get_http_status: Optional[Callable[[Response], int]] = None,
        interceptors: ResultInterceptors = (None, None),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        # Settings are validated here, not on first request.
        self.cache_slot = CacheSlot(SlotSetting.coerce(cache, CacheOptions), clock=clock)
        self.share_slot = ShareSlot(SlotSetting.coerce(share, ShareOptions))
        self.retry_slot = RetrySlot(SlotSetting.coerce(retry, RetryOptions))
        self.request_slot = RequestSlot(adapter, get_http_status)
        self._interceptors = interceptors
        self._send = compose([self.cache_slot, self.share_slot], self._transport)

    async def __call__(self, config: RequestConfig) -> Response:
        return await self._send(config)

    async def _transport(self, config: RequestConfig) -> Response:
        return await self.request_slot.hit(config, self._interceptors, self.retry_slot.validate)
