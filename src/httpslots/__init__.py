"""httpslots -- caching, request sharing and retry for async HTTP calls.

This package wraps a raw transport call (``async (config) -> Response``) in a
pipeline of *slots* so that callers keep the same interface while gaining:

* response caching with time-based expiry (:class:`~httpslots.slots.CacheSlot`),
* deduplication of identical in-flight requests (:class:`~httpslots.slots.ShareSlot`),
* retry with status-aware eligibility (:class:`~httpslots.slots.RetrySlot`
  driving :class:`~httpslots.slots.RequestSlot`).

Typical use::

    async with AsyncClient("https://api.example.com") as client:
        users = await client.get("/users")

Modules:
    app: Typer application and CLI entry point.
    enhancer: Pipeline wiring around a raw transport.
    models: Pydantic models shared across the entire package.
    options: Global/per-request slot setting resolution.
    config: XDG-aware configuration management.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
