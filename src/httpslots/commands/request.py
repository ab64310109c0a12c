"""Request command -- send a request through the slot pipeline.

``httpslots request`` is a small debugging aid: it sends one request (or the
same request several times, sequentially or concurrently) through an
:class:`~httpslots.client.AsyncClient` and reports how many transport calls
were actually made, which makes cache hits, shared calls and retries visible.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import typer

from httpslots.client import AsyncClient
from httpslots.client.response import format_api_response
from httpslots.exceptions import HttpSlotsError, InvalidUsageError
from httpslots.models import GlobalConfig, Response, RetryOptions
from httpslots.output import error, info


def _open_client(config: GlobalConfig, **kwargs: Any) -> AsyncClient:
    return AsyncClient.from_config(config, **kwargs)


def request_command(
    ctx: typer.Context,
    method: str = typer.Argument(help="HTTP method (get, post, ...)."),
    url: str = typer.Argument(help="Absolute URL, or a path relative to the base URL."),
    param: list[str] = typer.Option(
        [], "--param", "-P", help="Query parameter as key=value (repeatable)."
    ),
    header: list[str] = typer.Option(
        [], "--header", "-H", help="Header as 'Name: value' (repeatable)."
    ),
    data: Optional[str] = typer.Option(
        None, "--data", "-d", help="Request body. Valid JSON is sent as JSON."
    ),
    repeat: int = typer.Option(1, "--repeat", min=1, help="Send the request N times."),
    concurrent: bool = typer.Option(
        False, "--concurrent", help="Send repeated requests concurrently."
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable response caching."),
    no_share: bool = typer.Option(False, "--no-share", help="Disable request sharing."),
    no_retry: bool = typer.Option(False, "--no-retry", help="Disable retries."),
    max_retries: Optional[int] = typer.Option(
        None, "--max-retries", min=0, help="Maximum number of retries."
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Timeout in seconds."),
) -> None:
    """Send a request and print the response.

    Example::

        httpslots request get https://httpbin.org/get -P page=2
        httpslots request get /users --repeat 5 --concurrent
    """
    from httpslots.config import resolve_config

    obj = ctx.obj or {}
    try:
        config = resolve_config(cli_base_url=obj.get("base_url"), cli_format=obj.get("format"))
        if no_cache:
            config.cache = False
        if no_share:
            config.share = False
        if no_retry:
            config.retry = False
        elif max_retries is not None:
            config.retry = _with_max_times(config.retry, max_retries)

        request_kwargs: dict[str, Any] = {
            "params": _parse_pairs(param, "=", "--param") or None,
            "headers": _parse_pairs(header, ":", "--header"),
            "data": _parse_body(data),
        }
        if timeout is not None:
            request_kwargs["timeout"] = timeout

        response, calls = asyncio.run(
            _send(config, method, url, request_kwargs, repeat, concurrent)
        )
    except HttpSlotsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_api_response(response)
    info(f"{repeat} request(s), {calls} transport call(s)")


async def _send(
    config: GlobalConfig,
    method: str,
    url: str,
    request_kwargs: dict[str, Any],
    repeat: int,
    concurrent: bool,
) -> tuple[Response, int]:
    """Send the request *repeat* times; return the last response and the transport call count."""
    calls = 0

    def on_resolve(response: Response) -> Response:
        nonlocal calls
        calls += 1
        return response

    def on_reject(exc: Exception) -> Response:
        nonlocal calls
        calls += 1
        raise exc

    async with _open_client(config, interceptors=(on_resolve, on_reject)) as client:
        if concurrent:
            responses = await asyncio.gather(
                *(client.request(method, url, **request_kwargs) for _ in range(repeat))
            )
            response = responses[-1]
        else:
            for _ in range(repeat):
                response = await client.request(method, url, **request_kwargs)
    return response, calls


def _with_max_times(setting: Any, max_times: int) -> RetryOptions:
    if isinstance(setting, RetryOptions):
        return setting.model_copy(update={"max_times": max_times})
    if setting is False:
        return RetryOptions(enable=False, max_times=max_times)
    return RetryOptions(max_times=max_times)


def _parse_pairs(items: list[str], separator: str, option: str) -> dict[str, str]:
    """Split ``key<separator>value`` items into a dict.

    Raises:
        InvalidUsageError: If an item has no separator.
    """
    pairs: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition(separator)
        if not sep or not key.strip():
            raise InvalidUsageError(f"Invalid {option} value: {item!r}")
        pairs[key.strip()] = value.strip()
    return pairs


def _parse_body(body: Optional[str]) -> Any:
    """Parse *body* as JSON if possible, returning the raw string on failure."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body
