"""Raw transport adapter backed by :class:`httpx.AsyncClient`.

:class:`HttpxAdapter` is the innermost collaborator of the pipeline: one call
performs exactly one HTTP exchange. It translates a
:class:`~httpslots.models.RequestConfig` into an httpx request, converts the
httpx response into a :class:`~httpslots.models.Response`, and reports every
failure as :class:`~httpslots.exceptions.RequestError` so the slots see one
uniform error shape.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from httpslots.exceptions import RequestError
from httpslots.models import RequestConfig, Response
from httpslots.slots.request import default_validate_status


class HttpxAdapter:
    """Send one request through an :class:`httpx.AsyncClient`.

    Args:
        client: An open client. Its own ``base_url``, timeout and transport
            apply unless the request overrides them.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def __call__(self, config: RequestConfig) -> Response:
        kwargs = self._build_kwargs(config)

        try:
            raw = await self._client.request(**kwargs)
        except httpx.TimeoutException as exc:
            raise RequestError(
                f"Timeout exceeded: {exc}", config, code="ETIMEDOUT"
            ) from exc
        except httpx.HTTPError as exc:
            raise RequestError(
                f"Network error: {exc}", config, code="ENETWORK"
            ) from exc

        if config.max_content_length is not None and len(raw.content) > config.max_content_length:
            raise RequestError(
                f"max_content_length size of {config.max_content_length} exceeded",
                config,
                code="ERR_CONTENT_LENGTH",
                request=raw.request,
            )

        response = Response(
            status=raw.status_code,
            status_text=raw.reason_phrase or "",
            headers=dict(raw.headers),
            data=_decode_body(raw),
            config=config,
            request=raw.request,
        )

        validate_status = config.validate_status or default_validate_status
        if not validate_status(response.status):
            raise RequestError(
                f"Request failed with status code {response.status}",
                config,
                code="ERR_BAD_RESPONSE",
                request=raw.request,
                response=response,
            )
        return response

    def _build_kwargs(self, config: RequestConfig) -> dict[str, Any]:
        """Translate *config* into :meth:`httpx.AsyncClient.request` arguments."""
        kwargs: dict[str, Any] = {
            "method": config.method.upper(),
            "url": config.full_url,
            "headers": config.headers,
            "params": config.params,
        }
        if config.timeout is not None:
            kwargs["timeout"] = config.timeout

        body = config.data
        if body is None:
            return kwargs
        if isinstance(body, (dict, list)):
            content = json.dumps(body).encode()
            kwargs["content"] = content
            if not any(name.lower() == "content-type" for name in config.headers):
                kwargs["headers"] = {**config.headers, "content-type": "application/json"}
        elif isinstance(body, str):
            content = body.encode()
            kwargs["content"] = content
        else:
            content = bytes(body)
            kwargs["content"] = content

        if config.max_body_length is not None and len(content) > config.max_body_length:
            raise RequestError(
                f"max_body_length size of {config.max_body_length} exceeded",
                config,
                code="ERR_BODY_LENGTH",
            )
        return kwargs


def _decode_body(raw: httpx.Response) -> Any:
    """Decode JSON bodies, fall back to text, ``None`` when empty."""
    if not raw.content:
        return None
    try:
        return raw.json()
    except ValueError:
        return raw.text
