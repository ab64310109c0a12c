"""Retry eligibility.

:class:`RetrySlot` decides, after a failed attempt, whether the request
should be tried again. It does not run the loop itself -- that is
:class:`~httpslots.slots.request.RequestSlot`'s job -- it only answers the
question and, when the answer is yes, waits ``delay`` seconds before
answering so the next attempt starts after the pause.

A failure is retried only if every condition holds:

* the effective ``enable`` option is true;
* ``attempt <= max_times`` (``attempt`` is 1 for the first retry decision,
  so ``max_times=3`` allows four attempts in total);
* the failure is not a cancellation;
* the method is in ``allowed_methods`` or the request forces retry;
* if the failure carries a status, it matches ``allowed_http_status``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any, Optional, Union

from httpslots.exceptions import is_cancel
from httpslots.models import RequestConfig, RetryOptions
from httpslots.options import is_force_enable, merge_slot_options

logger = logging.getLogger(__name__)


class RetrySlot:
    """Retry-eligibility engine.

    Args:
        options: Global retry setting -- ``None``, a boolean, a
            :class:`~httpslots.models.RetryOptions` or a mapping.
    """

    def __init__(self, options: Any = None) -> None:
        self._options = options

    async def validate(self, error: BaseException, config: RequestConfig, attempt: int) -> bool:
        """Return whether *config* should be attempted again after *error*.

        Args:
            error: The failure of the latest attempt.
            config: The request being retried.
            attempt: Number of the retry being considered, starting at 1.
        """
        options = merge_slot_options(RetryOptions, self._options, config.retry)
        status = _error_status(error)

        enable = (
            options.enable
            and attempt <= options.max_times
            and not is_cancel(error)
            and (
                is_force_enable(config.retry, RetryOptions)
                or config.method in options.allowed_methods
            )
            and (status is None or is_allowed_status(status, options.allowed_http_status))
        )

        if not enable:
            return False

        logger.debug(
            "Retrying %s %s in %.3fs (retry %d/%d)",
            config.method.upper(),
            config.full_url,
            options.delay,
            attempt,
            options.max_times,
        )
        await asyncio.sleep(options.delay)
        return True


def is_allowed_status(status: int, allowed: Iterable[Union[int, tuple[int, int]]]) -> bool:
    """Whether *status* equals one entry of *allowed* or falls in one inclusive range."""
    for entry in allowed:
        if isinstance(entry, int):
            if entry == status:
                return True
        elif entry[0] <= status <= entry[1]:
            return True
    return False


def _error_status(error: BaseException) -> Optional[int]:
    """The status *error* carries, directly or through its ``response``."""
    status = getattr(error, "status", None)
    if status is None:
        status = getattr(getattr(error, "response", None), "status", None)
    return status
