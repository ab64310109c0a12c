"""HTTP client module for httpslots.

Classes:
    :class:`AsyncClient` -- async client backed by :class:`httpx.AsyncClient`
    and the caching/sharing/retry pipeline.
    :class:`HttpxAdapter` -- the raw transport used by the pipeline.

Example::

    from httpslots.client import AsyncClient

    async with AsyncClient("https://api.example.com") as client:
        resp = await client.get("/users")
"""

from httpslots.client.async_client import AsyncClient
from httpslots.client.transport import HttpxAdapter

__all__ = ["AsyncClient", "HttpxAdapter"]
