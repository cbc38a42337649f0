"""
Tests for the HTTP runtime used by node packages.
"""

import json

import httpx
import pytest

from addtowallet.workflows.engine.errors import NodeApiError
from addtowallet.workflows.engine.runtime.http import HTTPRuntime


@pytest.mark.asyncio
async def test_request_returns_status_data_headers():
    transport = httpx.MockTransport(
        lambda r: httpx.Response(201, json={"ok": True}, headers={"X-Trace": "t1"})
    )

    result = await HTTPRuntime.request("POST", "https://api.test/x", body={"a": 1}, transport=transport)

    assert result["status"] == 201
    assert result["data"] == {"ok": True}
    assert result["headers"]["x-trace"] == "t1"


@pytest.mark.asyncio
async def test_get_sends_no_body():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    await HTTPRuntime.request("get", "https://api.test/x", body={"ignored": True}, transport=httpx.MockTransport(handler))

    assert seen[0].method == "GET"
    assert seen[0].content == b""


@pytest.mark.asyncio
async def test_request_json_posts_body():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"cardId": "c1"})

    data = await HTTPRuntime.request_json(
        "POST", "https://api.test/x", body={"cardTitle": "t"}, transport=httpx.MockTransport(handler)
    )

    assert data == {"cardId": "c1"}
    assert seen == [{"cardTitle": "t"}]


@pytest.mark.asyncio
async def test_request_json_raises_on_error_status():
    transport = httpx.MockTransport(lambda r: httpx.Response(500, json={"message": "boom"}))

    with pytest.raises(NodeApiError, match="status code 500: boom") as exc_info:
        await HTTPRuntime.request_json("POST", "https://api.test/x", transport=transport)

    assert exc_info.value.response_body == {"message": "boom"}


@pytest.mark.asyncio
async def test_request_json_rejects_non_json():
    transport = httpx.MockTransport(lambda r: httpx.Response(200, text="<html>"))

    with pytest.raises(NodeApiError, match="Expected a JSON response"):
        await HTTPRuntime.request_json("GET", "https://api.test/x", transport=transport)


@pytest.mark.asyncio
async def test_network_failure_becomes_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NodeApiError, match="Network request failed"):
        await HTTPRuntime.request("GET", "https://api.test/x", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_timeout_becomes_api_error():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(NodeApiError, match="timed out"):
        await HTTPRuntime.request("GET", "https://api.test/x", transport=httpx.MockTransport(handler))
