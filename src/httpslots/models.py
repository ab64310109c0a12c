"""Canonical Pydantic models shared across all httpslots modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Request/response models** -- what flows through the pipeline:
    :class:`HTTPMethod`, :class:`RequestConfig` and :class:`Response`.

**Slot option models** -- per-engine settings, usable both globally (on an
:class:`~httpslots.enhancer.Enhancer`) and per request:
    :class:`CacheOptions`, :class:`ShareOptions` and :class:`RetryOptions`.
Each carries its defaults; only fields that were explicitly set take part in
a merge (see :func:`~httpslots.options.merge_slot_options`).

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestDefaults`, :class:`OutputConfig` and :class:`GlobalConfig`.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Callable, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


DEFAULT_CACHE_MAX_AGE = 10 * 60.0
DEFAULT_RETRY_MAX_TIMES = 3
DEFAULT_RETRY_DELAY = 0.1


def _lower_methods(value: Any) -> Any:
    if isinstance(value, (list, tuple, set)):
        return [(m.value if isinstance(m, enum.Enum) else str(m)).lower() for m in value]
    return value


MethodList = Annotated[list[str], BeforeValidator(_lower_methods)]


class HTTPMethod(str, enum.Enum):
    """HTTP methods understood by the slots' ``allowed_methods`` lists."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"


# --- Slot options ---


class CacheOptions(BaseModel):
    """Settings for :class:`~httpslots.slots.cache.CacheSlot`.

    ``format`` receives a deep copy of the fingerprint fields and may return
    any JSON-serialisable value (or a string); mutating its argument never
    affects the request actually sent.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    enable: bool = Field(default=True, description="Whether responses may be cached")
    max_age: float = Field(
        default=DEFAULT_CACHE_MAX_AGE, description="Cache entry lifetime in seconds"
    )
    allowed_methods: MethodList = Field(
        default_factory=lambda: [HTTPMethod.GET.value],
        description="Methods whose responses may be cached",
    )
    format: Optional[Callable[[dict[str, Any]], Any]] = Field(default=None, exclude=True)


class ShareOptions(BaseModel):
    """Settings for :class:`~httpslots.slots.share.ShareSlot`."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    enable: bool = Field(default=True, description="Whether identical in-flight requests are shared")
    allowed_methods: MethodList = Field(
        default_factory=lambda: [
            HTTPMethod.GET.value,
            HTTPMethod.HEAD.value,
            HTTPMethod.PUT.value,
            HTTPMethod.PATCH.value,
            HTTPMethod.DELETE.value,
        ],
        description="Methods eligible for sharing",
    )
    format: Optional[Callable[[dict[str, Any]], Any]] = Field(default=None, exclude=True)
    validate_request: Optional[Callable[[Any], bool]] = Field(default=None, exclude=True)


class RetryOptions(BaseModel):
    """Settings for :class:`~httpslots.slots.retry.RetrySlot`.

    ``allowed_http_status`` entries are either an exact status or an
    inclusive ``(low, high)`` range.
    """

    enable: bool = Field(default=True, description="Whether failed requests may be retried")
    max_times: int = Field(default=DEFAULT_RETRY_MAX_TIMES, description="Maximum number of retries")
    delay: float = Field(default=DEFAULT_RETRY_DELAY, description="Pause before each retry in seconds")
    allowed_methods: MethodList = Field(
        default_factory=lambda: [
            HTTPMethod.GET.value,
            HTTPMethod.HEAD.value,
            HTTPMethod.PUT.value,
            HTTPMethod.PATCH.value,
            HTTPMethod.DELETE.value,
        ],
        description="Methods eligible for retry",
    )
    allowed_http_status: list[Union[int, tuple[int, int]]] = Field(
        default_factory=lambda: [(100, 199), 429, (500, 599)],
        description="Statuses (or inclusive ranges) that may be retried",
    )


SlotValue = Union[bool, CacheOptions, ShareOptions, RetryOptions, None]


# --- Request / response ---


class RequestConfig(BaseModel):
    """A single logical request as seen by every pipeline stage.

    The slots never mutate it. ``cache``, ``share`` and ``retry`` hold the
    per-request override for the matching slot: ``None`` defers to the
    global setting, ``True``/``False`` force the slot on/off, and an options
    object overrides individual fields.

    Extra fields are preserved so host applications can attach their own
    bookkeeping.

    Example::

        RequestConfig(
            base_url="https://api.example.com",
            url="/users",
            method="GET",
            params={"page": 2},
            retry=RetryOptions(max_times=5),
        )
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    base_url: Optional[str] = None
    url: str = ""
    method: str = HTTPMethod.GET.value
    params: Optional[dict[str, Any]] = None
    data: Any = None
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: Optional[float] = Field(default=None, description="Timeout in seconds")
    max_content_length: Optional[int] = Field(
        default=None, description="Maximum accepted response body size in bytes"
    )
    max_body_length: Optional[int] = Field(
        default=None, description="Maximum request body size in bytes"
    )
    validate_status: Optional[Callable[[int], bool]] = None
    get_http_status: Optional[Callable[[Any], int]] = None
    cache: Union[bool, CacheOptions, None] = None
    share: Union[bool, ShareOptions, None] = None
    retry: Union[bool, RetryOptions, None] = None

    @field_validator("method", mode="before")
    @classmethod
    def _lower_method(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @property
    def full_url(self) -> str:
        """``base_url`` joined with ``url`` (absolute ``url`` wins)."""
        if not self.base_url or self.url.startswith(("http://", "https://")):
            return self.url
        return f"{self.base_url.rstrip('/')}/{self.url.lstrip('/')}" if self.url else self.base_url


class Response(BaseModel):
    """A transport response, tagged with the request that produced it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: int
    status_text: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    data: Any = None
    config: Optional[RequestConfig] = None
    request: Any = None


# --- Configuration ---


class RequestDefaults(BaseModel):
    """Default HTTP settings applied by :class:`~httpslots.client.AsyncClient`."""

    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/httpslots/config.json``.

    Loaded and saved by :func:`~httpslots.config.load_global_config` and
    :func:`~httpslots.config.save_global_config`. The ``cache``, ``share``
    and ``retry`` fields are the global slot settings: ``None`` keeps the
    defaults, a boolean enables/disables the slot, and an object sets
    individual options. See :func:`~httpslots.config.resolve_config` for the
    full precedence chain.
    """

    base_url: Optional[str] = None
    request: RequestDefaults = Field(default_factory=RequestDefaults)
    cache: Union[bool, CacheOptions, None] = None
    share: Union[bool, ShareOptions, None] = None
    retry: Union[bool, RetryOptions, None] = None
    output: OutputConfig = Field(default_factory=OutputConfig)
