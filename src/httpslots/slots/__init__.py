"""The request enhancement engines.

Classes:
    :class:`CacheSlot` -- time-based response cache.
    :class:`ShareSlot` -- in-flight request deduplication.
    :class:`RetrySlot` -- retry eligibility and delay.
    :class:`RequestSlot` -- transport call with the retry loop.

:class:`CacheSlot` and :class:`ShareSlot` implement :class:`Slot` and can be
stacked in any order with :func:`compose`.
"""

from httpslots.slots.base import Continuation, Slot, build_fingerprint, clone_response, compose
from httpslots.slots.cache import CacheSlot
from httpslots.slots.request import RequestSlot
from httpslots.slots.retry import RetrySlot
from httpslots.slots.share import ShareSlot

__all__ = [
    "CacheSlot",
    "Continuation",
    "RequestSlot",
    "RetrySlot",
    "ShareSlot",
    "Slot",
    "build_fingerprint",
    "clone_response",
    "compose",
]
