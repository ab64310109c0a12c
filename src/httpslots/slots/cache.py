"""In-memory response caching for the request pipeline.

:class:`CacheSlot` answers repeated read requests from memory for
``max_age`` seconds. Only time-based expiry exists: there is no size bound
and no eviction, and an expired entry is dropped lazily the next time its
key is read. Failures are never cached, so the next request for the same
key always gets a fresh attempt.

Cache keys are fingerprints of ``base_url``, ``url``, ``method``,
``params``, ``data`` and ``headers`` (see
:func:`~httpslots.slots.base.build_fingerprint`), optionally reduced by the
``format`` option so that irrelevant fields do not prevent hits.

See Also:
    :class:`~httpslots.models.CacheOptions` -- the Pydantic model that
    controls ``enable``, ``max_age``, ``allowed_methods`` and ``format``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from httpslots.models import CacheOptions, RequestConfig, Response
from httpslots.options import merge_slot_options
from httpslots.slots.base import Continuation, Slot, build_fingerprint, clone_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A stored response and the clock reading at which it was stored."""

    time: float
    response: Response


class CacheSlot(Slot):
    """Time-based response cache.

    Args:
        options: Global cache setting -- ``None``, a boolean, a
            :class:`~httpslots.models.CacheOptions` or a mapping.
        clock: Returns the current time in seconds. Defaults to
            :func:`time.monotonic`.

    Example::

        slot = CacheSlot(CacheOptions(max_age=30))
        response = await slot.hit(config, transport)
    """

    format_keys = ("base_url", "url", "method", "params", "data", "headers")

    def __init__(self, options: Any = None, clock: Callable[[], float] = time.monotonic) -> None:
        self._options = options
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    async def hit(self, config: RequestConfig, continuation: Continuation) -> Response:
        options = merge_slot_options(CacheOptions, self._options, config.cache)
        if not options.enable or config.method not in options.allowed_methods:
            return await continuation(config)

        key = build_fingerprint(config, self.format_keys, options.format)

        entry = self._entries.get(key)
        if entry is not None:
            if entry.time + options.max_age >= self._clock():
                logger.debug("Cache hit for %s %s", config.method.upper(), config.full_url)
                return clone_response(entry.response, config)
            logger.debug("Cache entry expired for %s %s", config.method.upper(), config.full_url)
            del self._entries[key]

        response = await continuation(config)
        self._entries[key] = CacheEntry(
            time=self._clock(),
            response=clone_response(response, response.config),
        )
        return response

    def clear(self) -> None:
        """Remove every entry, expired or not."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
