"""Asynchronous HTTP client with caching, sharing and retry.

This module provides :class:`AsyncClient`, which owns an
:class:`httpx.AsyncClient` and routes every request through an
:class:`~httpslots.enhancer.Enhancer`: responses to reads are cached,
identical concurrent requests share one transport call, and failed attempts
are retried with a fixed delay.

See Also:
    :class:`~httpslots.client.transport.HttpxAdapter` for the raw transport.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import httpx

from httpslots.client.transport import HttpxAdapter
from httpslots.enhancer import Enhancer
from httpslots.models import GlobalConfig, RequestConfig, Response
from httpslots.output import get_output
from httpslots.slots.request import ResultInterceptors


class AsyncClient:
    """Asynchronous HTTP client for API calls.

    Must be used as an async context manager. Caches and in-flight share
    maps live for the lifetime of the client; two clients never share them.

    Args:
        base_url: Prefix for relative request paths.
        cache: Global cache setting (``None``, bool, options or mapping).
        share: Global share setting.
        retry: Global retry setting.
        get_http_status: Default status extractor for all requests.
        interceptors: ``(on_resolve, on_reject)`` applied to every attempt.
        timeout: Default request timeout in seconds.
        verify_ssl: Verify SSL certificates.
        transport: Optional httpx transport (e.g. :class:`httpx.MockTransport`).

    Example::

        async with AsyncClient("https://api.example.com", retry={"max_times": 5}) as client:
            response = await client.get("/users")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        cache: Any = None,
        share: Any = None,
        retry: Any = None,
        get_http_status: Optional[Callable[[Response], int]] = None,
        interceptors: ResultInterceptors = (None, None),
        timeout: float = 30,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._settings = {"cache": cache, "share": share, "retry": retry}
        self._get_http_status = get_http_status
        self._interceptors = interceptors
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._enhancer: Optional[Enhancer] = None

    @classmethod
    def from_config(cls, config: GlobalConfig, **kwargs: Any) -> AsyncClient:
        """Build a client from a resolved :class:`~httpslots.models.GlobalConfig`.

        Keyword arguments override the values taken from *config*.
        """
        params: dict[str, Any] = {
            "base_url": config.base_url,
            "cache": config.cache,
            "share": config.share,
            "retry": config.retry,
            "timeout": config.request.timeout,
            "verify_ssl": config.request.verify_ssl,
        }
        params.update(kwargs)
        return cls(**params)

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            verify=self._verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        self._enhancer = Enhancer(
            HttpxAdapter(self._client),
            get_http_status=self._get_http_status,
            interceptors=self._interceptors,
            **self._settings,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
        self._enhancer = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def request(self, method: str, path: str, **kwargs: Any) -> Response:
        """Send a request through the enhancement pipeline.

        Args:
            method: HTTP method, any case.
            path: URL path appended to ``base_url``, or an absolute URL.
            **kwargs: Any other :class:`~httpslots.models.RequestConfig`
                field -- ``params``, ``headers``, ``data``, ``timeout``,
                ``validate_status``, or the per-request ``cache``, ``share``
                and ``retry`` overrides.

        Returns:
            The :class:`~httpslots.models.Response`.

        Raises:
            RequestError: When the final attempt fails.
            RequestCancelled: When the request is cancelled.
        """
        assert self._enhancer is not None, "Client not initialised -- use as async context manager"

        kwargs.setdefault("base_url", self._base_url)
        config = RequestConfig(method=method, url=path, **kwargs)
        get_output().debug(f"{config.method.upper()} {config.full_url}")
        return await self._enhancer(config)

    async def get(self, path: str, **kwargs: Any) -> Response:
        """Send a GET request. See :meth:`request`."""
        return await self.request("GET", path, **kwargs)

    async def head(self, path: str, **kwargs: Any) -> Response:
        """Send a HEAD request. See :meth:`request`."""
        return await self.request("HEAD", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Response:
        """Send a POST request. See :meth:`request`."""
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Response:
        """Send a PUT request. See :meth:`request`."""
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Response:
        """Send a PATCH request. See :meth:`request`."""
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Response:
        """Send a DELETE request. See :meth:`request`."""
        return await self.request("DELETE", path, **kwargs)
