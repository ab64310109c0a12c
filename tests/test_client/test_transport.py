"""Tests for the httpx-backed transport adapter."""

from __future__ import annotations

import json

import httpx
import pytest

from httpslots.client.transport import HttpxAdapter
from httpslots.exceptions import RequestError


def _adapter(handler) -> HttpxAdapter:
    return HttpxAdapter(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestSuccess:
    @pytest.mark.asyncio
    async def test_json_body_is_decoded(self, make_request) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"users": []})

        request = make_request()
        response = await _adapter(handler)(request)

        assert response.status == 200
        assert response.status_text == "OK"
        assert response.data == {"users": []}
        assert response.headers["content-type"] == "application/json"
        assert response.config is request
        assert isinstance(response.request, httpx.Request)

    @pytest.mark.asyncio
    async def test_text_body_falls_back_to_text(self, make_request) -> None:
        adapter = _adapter(lambda request: httpx.Response(200, text="hello"))
        response = await adapter(make_request())
        assert response.data == "hello"

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self, make_request) -> None:
        adapter = _adapter(lambda request: httpx.Response(204))
        response = await adapter(make_request())
        assert response.data is None

    @pytest.mark.asyncio
    async def test_url_method_params_and_headers_are_sent(self, make_request) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        await _adapter(handler)(
            make_request(method="delete", url="/users/1", params={"hard": "true"})
        )

        sent = seen[0]
        assert sent.method == "DELETE"
        assert sent.url.path == "/users/1"
        assert sent.url.host == "api.example.com"
        assert sent.url.params["hard"] == "true"
        assert sent.headers["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_dict_data_is_sent_as_json(self, make_request) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": 7})

        await _adapter(handler)(make_request(method="post", data={"name": "x"}))

        assert json.loads(seen[0].content) == {"name": "x"}
        assert seen[0].headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_explicit_content_type_is_kept(self, make_request) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        await _adapter(handler)(
            make_request(
                method="post",
                data=["a"],
                headers={"Content-Type": "application/vnd.api+json"},
            )
        )
        assert seen[0].headers.get_list("content-type") == ["application/vnd.api+json"]

    @pytest.mark.asyncio
    async def test_string_data_is_encoded(self, make_request) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        await _adapter(handler)(make_request(method="put", data="raw text"))
        assert seen[0].content == b"raw text"


class TestFailures:
    @pytest.mark.asyncio
    async def test_error_status_raises_with_response(self, make_request) -> None:
        adapter = _adapter(lambda request: httpx.Response(503, json={"error": "down"}))

        with pytest.raises(RequestError) as exc_info:
            await adapter(make_request())

        error = exc_info.value
        assert error.status == 503
        assert error.code == "ERR_BAD_RESPONSE"
        assert error.response.data == {"error": "down"}
        assert error.exit_code == 5

    @pytest.mark.asyncio
    async def test_custom_validate_status(self, make_request) -> None:
        adapter = _adapter(lambda request: httpx.Response(404))
        response = await adapter(make_request(validate_status=lambda status: status < 500))
        assert response.status == 404

    @pytest.mark.asyncio
    async def test_network_error(self, make_request) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RequestError) as exc_info:
            await _adapter(handler)(make_request())

        error = exc_info.value
        assert error.code == "ENETWORK"
        assert error.status is None
        assert error.exit_code == 6
        assert isinstance(error.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout(self, make_request) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(RequestError) as exc_info:
            await _adapter(handler)(make_request())
        assert exc_info.value.code == "ETIMEDOUT"

    @pytest.mark.asyncio
    async def test_max_content_length(self, make_request) -> None:
        adapter = _adapter(lambda request: httpx.Response(200, content=b"x" * 100))

        with pytest.raises(RequestError) as exc_info:
            await adapter(make_request(max_content_length=10))
        assert exc_info.value.code == "ERR_CONTENT_LENGTH"

    @pytest.mark.asyncio
    async def test_max_body_length(self, make_request) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        with pytest.raises(RequestError) as exc_info:
            await _adapter(handler)(make_request(method="post", data="x" * 20, max_body_length=5))
        assert exc_info.value.code == "ERR_BODY_LENGTH"
        assert calls == []
