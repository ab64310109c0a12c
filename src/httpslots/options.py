"""Slot setting resolution.

A slot can be configured globally (on the :class:`~httpslots.enhancer.Enhancer`)
and overridden per request. Both places accept the same loose shapes --
``None``, ``True``, ``False``, an options model or a plain mapping -- which
:meth:`SlotSetting.coerce` turns into an explicit tagged value:

* ``UNSET`` -- defer to whatever came before.
* ``FORCE_ENABLED`` / ``FORCE_DISABLED`` -- switch the slot on or off.
* ``DETAILED`` -- overlay the options' explicitly-set fields.

:func:`merge_slot_options` applies defaults, then the global setting, then
the per-request setting, so a per-request value always wins when it was
explicitly set.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from httpslots.exceptions import ConfigError

O = TypeVar("O", bound=BaseModel)


class SlotMode(str, enum.Enum):
    """Tag of a :class:`SlotSetting`."""

    UNSET = "unset"
    FORCE_ENABLED = "force_enabled"
    FORCE_DISABLED = "force_disabled"
    DETAILED = "detailed"


@dataclass(frozen=True)
class SlotSetting(Generic[O]):
    """One layer of slot configuration."""

    mode: SlotMode = SlotMode.UNSET
    options: Optional[O] = None

    @classmethod
    def coerce(cls, value: Any, options_cls: type[O]) -> SlotSetting[O]:
        """Build a setting from any accepted shape.

        Raises:
            ConfigError: If *value* is a mapping that fails validation or an
                unsupported type.
        """
        if isinstance(value, SlotSetting):
            return value
        if value is None:
            return cls(SlotMode.UNSET)
        if value is True:
            return cls(SlotMode.FORCE_ENABLED)
        if value is False:
            return cls(SlotMode.FORCE_DISABLED)
        if isinstance(value, options_cls):
            return cls(SlotMode.DETAILED, value)
        if isinstance(value, Mapping):
            try:
                return cls(SlotMode.DETAILED, options_cls.model_validate(dict(value)))
            except ValidationError as exc:
                raise ConfigError(f"Invalid {options_cls.__name__}: {exc}") from exc
        raise ConfigError(
            f"Unsupported {options_cls.__name__} setting: {value!r}"
        )

    @property
    def is_force_enable(self) -> bool:
        if self.mode is SlotMode.FORCE_ENABLED:
            return True
        if self.mode is SlotMode.DETAILED and self.options is not None:
            return "enable" in self.options.model_fields_set and getattr(self.options, "enable") is True
        return False

    def apply(self, options: O) -> O:
        """Return *options* with this layer applied; *options* is left untouched."""
        if self.mode is SlotMode.FORCE_ENABLED:
            return options.model_copy(update={"enable": True})
        if self.mode is SlotMode.FORCE_DISABLED:
            return options.model_copy(update={"enable": False})
        if self.mode is SlotMode.DETAILED and self.options is not None:
            explicit = {
                name: getattr(self.options, name) for name in self.options.model_fields_set
            }
            return options.model_copy(update=explicit)
        return options


def merge_slot_options(options_cls: type[O], global_value: Any, request_value: Any) -> O:
    """Resolve the effective options for one request.

    Args:
        options_cls: The slot's options model (e.g. :class:`~httpslots.models.CacheOptions`).
        global_value: The setting the slot was constructed with.
        request_value: The request's own override (``config.cache`` etc.).

    Returns:
        A fresh options instance; neither input is modified.
    """
    effective = options_cls()
    for value in (global_value, request_value):
        effective = SlotSetting.coerce(value, options_cls).apply(effective)
    return effective


def is_force_enable(request_value: Any, options_cls: type[BaseModel]) -> bool:
    """Whether a per-request override forces the slot on, bypassing ``allowed_methods``."""
    return SlotSetting.coerce(request_value, options_cls).is_force_enable
