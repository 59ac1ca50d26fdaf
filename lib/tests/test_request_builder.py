from __future__ import annotations

import asyncio
import base64
import io
from urllib.parse import parse_qsl

import httpx
import pytest
import respx

from mailwire_client import (
    ApiError,
    CallOptions,
    ClientConfig,
    RequestBuilder,
)

BASE_URL = "https://api.example.test/v3"
EXPECTED_AUTH = "Basic " + base64.b64encode(b"api:key-test").decode("ascii")


def _builder(router: respx.MockRouter, **overrides) -> RequestBuilder:
    cfg = ClientConfig(
        username=overrides.pop("username", "api"),
        key=overrides.pop("key", "key-test"),
        base_url=BASE_URL,
        **overrides,
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(router.async_handler), base_url=BASE_URL)
    return RequestBuilder(cfg, client=client)


@pytest.mark.asyncio
async def test_get_sends_basic_auth_and_query() -> None:
    router = respx.MockRouter()
    route = router.get(f"{BASE_URL}/domains").mock(return_value=httpx.Response(200, json={"items": []}))
    builder = _builder(router)

    result = await builder.get("/domains", {"limit": "10"})

    assert result.status == 200
    assert result.body == {"items": []}
    request = route.calls.last.request
    assert request.method == "GET"
    assert request.headers["Authorization"] == EXPECTED_AUTH
    assert request.url.params["limit"] == "10"
    assert len(request.url.params) == 1


@pytest.mark.asyncio
async def test_empty_query_sends_no_query_string() -> None:
    router = respx.MockRouter()
    route = router.get(f"{BASE_URL}/domains").mock(return_value=httpx.Response(200, json={}))
    builder = _builder(router)

    await builder.get("/domains", {})

    request = route.calls.last.request
    assert request.url.query == b""
    assert "?" not in str(request.url)


@pytest.mark.asyncio
async def test_options_query_takes_precedence() -> None:
    router = respx.MockRouter()
    route = router.get(f"{BASE_URL}/events").mock(return_value=httpx.Response(200, json={}))
    builder = _builder(router)

    await builder.query("get", "/events", {"a": "1"}, CallOptions(query={"b": "2"}))

    assert dict(route.calls.last.request.url.params) == {"b": "2"}


@pytest.mark.asyncio
async def test_head_and_options_verbs() -> None:
    router = respx.MockRouter()
    head_route = router.head(f"{BASE_URL}/ping").mock(return_value=httpx.Response(200))
    options_route = router.options(f"{BASE_URL}/ping").mock(return_value=httpx.Response(204))
    builder = _builder(router)

    head = await builder.head("/ping")
    opts = await builder.options("/ping")

    assert (head.status, head.body) == (200, None)
    assert (opts.status, opts.body) == (204, None)
    assert head_route.called and options_route.called


@pytest.mark.asyncio
async def test_post_sends_urlencoded_body() -> None:
    router = respx.MockRouter()
    route = router.post(f"{BASE_URL}/messages").mock(return_value=httpx.Response(200, json={"message": "Queued"}))
    builder = _builder(router)

    result = await builder.post("/messages", {"to": "a@example.test", "subject": "Hello"})

    assert result.body == {"message": "Queued"}
    request = route.calls.last.request
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert parse_qsl(request.content.decode()) == [("to", "a@example.test"), ("subject", "Hello")]


@pytest.mark.asyncio
async def test_delete_without_data_sends_no_body() -> None:
    router = respx.MockRouter()
    route = router.delete(f"{BASE_URL}/domains/example.test").mock(return_value=httpx.Response(200, json={}))
    builder = _builder(router)

    await builder.delete("/domains/example.test")

    request = route.calls.last.request
    assert request.method == "DELETE"
    assert request.content == b""


@pytest.mark.asyncio
async def test_put_and_patch_use_their_verbs() -> None:
    router = respx.MockRouter()
    put_route = router.put(f"{BASE_URL}/lists/x").mock(return_value=httpx.Response(200, json={}))
    patch_route = router.patch(f"{BASE_URL}/lists/x").mock(return_value=httpx.Response(200, json={}))
    builder = _builder(router)

    await builder.put("/lists/x", {"name": "one"})
    await builder.patch("/lists/x", {"name": "two"})

    assert put_route.calls.last.request.content == b"name=one"
    assert patch_route.calls.last.request.content == b"name=two"


@pytest.mark.asyncio
async def test_header_precedence_and_authorization_lock() -> None:
    router = respx.MockRouter()
    route = router.post(f"{BASE_URL}/messages").mock(return_value=httpx.Response(200, json={}))
    builder = _builder(
        router,
        headers={"X-Mailer": "default", "X-Team": "core", "Content-Type": "application/json"},
    )

    await builder.post(
        "/messages",
        {"a": "1"},
        CallOptions(headers={"X-Mailer": "call", "Authorization": "Bearer nope"}),
    )

    request = route.calls.last.request
    assert request.headers["X-Mailer"] == "call"
    assert request.headers["X-Team"] == "core"
    assert request.headers["Authorization"] == EXPECTED_AUTH
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"


@pytest.mark.asyncio
async def test_call_headers_can_override_content_type() -> None:
    router = respx.MockRouter()
    route = router.post(f"{BASE_URL}/raw").mock(return_value=httpx.Response(200, json={}))
    builder = _builder(router)

    await builder.command(
        "post",
        "/raw",
        '{"a": 1}',
        CallOptions(headers={"Content-Type": "application/json"}),
    )

    request = route.calls.last.request
    assert request.headers["Content-Type"] == "application/json"
    assert request.content == b'{"a": 1}'


@pytest.mark.asyncio
async def test_post_multi_sends_multipart_with_boundary() -> None:
    router = respx.MockRouter()
    route = router.post(f"{BASE_URL}/messages").mock(return_value=httpx.Response(200, json={"id": "1"}))
    builder = _builder(router, headers={"Content-Type": "application/json"})

    result = await builder.post_multi(
        "/messages",
        {
            "to": ["a@example.test", "b@example.test"],
            "subject": "Report",
            "cc": None,
            "attachment": {"data": b"PDFDATA", "filename": "report.pdf", "contentType": "application/pdf"},
            "inline": io.BytesIO(b"IMG"),
        },
    )

    assert result.body == {"id": "1"}
    request = route.calls.last.request
    content_type = request.headers["Content-Type"]
    assert content_type.startswith("multipart/form-data; boundary=")
    body = request.content
    assert body.count(b'name="to"') == 2
    assert b'name="cc"' not in body
    assert b'name="attachment"; filename="report.pdf"' in body
    assert b"Content-Type: application/pdf" in body
    assert b"PDFDATA" in body
    assert b"IMG" in body


@pytest.mark.asyncio
async def test_put_multi_uses_put() -> None:
    router = respx.MockRouter()
    route = router.put(f"{BASE_URL}/templates/t").mock(return_value=httpx.Response(200, json={}))
    builder = _builder(router)

    await builder.put_multi("/templates/t", {"description": "new"})

    request = route.calls.last.request
    assert request.method == "PUT"
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b"new" in request.content


@pytest.mark.asyncio
async def test_error_response_raises_api_error() -> None:
    router = respx.MockRouter()
    router.post(f"{BASE_URL}/messages").mock(
        return_value=httpx.Response(400, json={"message": "'to' parameter is missing"})
    )
    builder = _builder(router)

    with pytest.raises(ApiError) as excinfo:
        await builder.post("/messages", {"subject": "x"})

    assert excinfo.value.status == 400
    assert excinfo.value.body == {"message": {"message": "'to' parameter is missing"}}


@pytest.mark.asyncio
async def test_transport_failure_propagates_unchanged() -> None:
    router = respx.MockRouter()
    router.get(f"{BASE_URL}/domains").mock(side_effect=httpx.ConnectError("connection refused"))
    builder = _builder(router)

    with pytest.raises(httpx.ConnectError):
        await builder.get("/domains")


@pytest.mark.asyncio
async def test_read_timeout_propagates_unchanged() -> None:
    router = respx.MockRouter()
    router.get(f"{BASE_URL}/slow").mock(side_effect=httpx.ReadTimeout("read timed out"))
    builder = _builder(router)

    with pytest.raises(httpx.TimeoutException):
        await builder.get("/slow")


@pytest.mark.asyncio
async def test_concurrent_calls_do_not_share_state() -> None:
    def _echo(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"tag": request.headers["X-Tag"], "body": request.content.decode()},
        )

    router = respx.MockRouter()
    router.post(f"{BASE_URL}/echo").mock(side_effect=_echo)
    builder = _builder(router)

    results = await asyncio.gather(
        *(
            builder.post("/echo", {"n": str(i)}, CallOptions(headers={"X-Tag": f"t{i}"}))
            for i in range(25)
        )
    )

    for i, result in enumerate(results):
        assert result.body == {"tag": f"t{i}", "body": f"n={i}"}


@pytest.mark.asyncio
async def test_owned_client_is_closed_but_injected_is_not() -> None:
    router = respx.MockRouter(assert_all_called=False)
    builder = _builder(router)
    await builder.aclose()
    assert not builder._client.is_closed

    async with RequestBuilder(ClientConfig(username="u", key="k", base_url=BASE_URL)) as owned:
        inner = owned._client
    assert inner.is_closed
