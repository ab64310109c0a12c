"""Shared pieces of the slot engines.

Every enhancement engine is a *slot*: a pipeline stage with one coroutine,
:meth:`Slot.hit`, that receives the request and a *continuation* -- the next
stage, another slot or the raw transport -- and either short-circuits or
delegates. Because all slots share this contract, :func:`compose` can stack
them in any order.

This module also holds the two primitives the cache and share slots both
rely on: request fingerprinting (:func:`build_fingerprint`) and response
isolation (:func:`clone_response`).
"""

from __future__ import annotations

import abc
import copy
import hashlib
import json
from collections.abc import Awaitable, Sequence
from typing import Any, Callable, Optional

from httpslots.models import RequestConfig, Response

Continuation = Callable[[RequestConfig], Awaitable[Response]]
"""The next pipeline stage: ``async (config) -> Response``."""


class Slot(abc.ABC):
    """Abstract base class for a pipeline stage."""

    @abc.abstractmethod
    async def hit(self, config: RequestConfig, continuation: Continuation) -> Response:
        """Handle *config*, calling *continuation* unless this slot can answer itself."""


def compose(slots: Sequence[Slot], terminal: Continuation) -> Continuation:
    """Chain *slots* (outermost first) in front of *terminal*.

    Example::

        send = compose([cache_slot, share_slot], transport)
        response = await send(config)
    """
    continuation = terminal
    for slot in reversed(slots):
        continuation = _bind(slot, continuation)
    return continuation


def _bind(slot: Slot, continuation: Continuation) -> Continuation:
    async def _stage(config: RequestConfig) -> Response:
        return await slot.hit(config, continuation)

    return _stage


def build_fingerprint(
    config: RequestConfig,
    keys: Sequence[str],
    format: Optional[Callable[[dict[str, Any]], Any]] = None,
) -> str:
    """Derive the key identifying "the same logical request".

    Reads *keys* from *config*, passes a deep copy through *format* when one
    is given, and hashes the canonical JSON of the result. *config* is never
    modified, even when *format* mutates its argument.
    """
    subset: Any = {key: getattr(config, key) for key in keys}
    if format is not None:
        subset = format(copy.deepcopy(subset))
    raw = json.dumps(subset, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(raw.encode()).hexdigest()


def clone_response(response: Response, config: Optional[RequestConfig]) -> Response:
    """Return an independently owned copy of *response* tagged with *config*.

    ``headers`` and ``data`` are deep-copied so that mutations made by one
    owner never reach another; the raw transport ``request`` is carried over.
    """
    return response.model_copy(
        update={
            "headers": copy.deepcopy(response.headers),
            "data": copy.deepcopy(response.data),
            "config": config,
        }
    )
