from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

from courier import Http, HttpDefaults, HttpxTransport, MemoryCache, StaticLocation, TransportError


def _client(handler, **kwargs) -> Http:
    transport = HttpxTransport(
        base_url="https://api.example",
        transport=httpx.MockTransport(handler),
    )
    kwargs.setdefault("location", StaticLocation("https://api.example/"))
    return Http(transport, **kwargs)


@pytest.mark.asyncio
async def test_request_goes_over_httpx_with_sorted_query_and_defaults() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"data": [1, 2]},
            headers=[("X-Multi", "1"), ("X-Multi", "2")],
            request=request,
        )

    async with _client(handler) as http:
        response = await http.get("/items", params={"b": "x y", "a": 1})

    assert str(seen[0].url) == "https://api.example/items?a=1&b=x+y"
    assert seen[0].headers["accept"] == "application/json, text/plain, */*"
    assert response.status == 200
    assert response.body == {"data": [1, 2]}
    assert response.header("x-multi") == "1, 2"
    assert response.header("Content-Type") == "application/json"


@pytest.mark.asyncio
async def test_post_sends_json_encoded_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, text="created", request=request)

    async with _client(handler) as http:
        response = await http.post("/items", {"name": "widget"})

    assert seen[0].method == "POST"
    assert seen[0].content == b'{"name": "widget"}'
    assert seen[0].headers["content-type"] == "application/json;charset=utf-8"
    assert response.status == 201
    assert response.body == "created"


@pytest.mark.asyncio
async def test_non_2xx_is_a_response_not_an_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "nope"}, request=request)

    async with _client(handler) as http:
        response = await http.get("/missing")

    assert response.status == 404
    assert response.body == {"error": "nope"}


@pytest.mark.asyncio
async def test_network_failure_maps_to_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler) as http:
        with pytest.raises(TransportError) as excinfo:
            await http.get("/items")

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert excinfo.value.response is None


@pytest.mark.asyncio
async def test_cookies_only_sent_with_credentials_and_xsrf_read_from_jar() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="ok", request=request)

    transport = HttpxTransport(
        base_url="https://api.example",
        transport=httpx.MockTransport(handler),
    )
    transport.cookies.set("session", "abc")
    transport.cookies.set("XSRF-TOKEN", "tok")

    async with Http(transport, location=StaticLocation("https://api.example/")) as http:
        await http.get("/anonymous")
        await http.get("/private", with_credentials=True)

    assert "cookie" not in seen[0].headers
    assert seen[0].headers["x-xsrf-token"] == "tok"
    assert "session=abc" in seen[1].headers["cookie"]


@pytest.mark.asyncio
async def test_deduplicates_concurrent_gets_over_httpx() -> None:
    calls: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        await asyncio.sleep(0.01)
        return httpx.Response(200, json={"n": len(calls)}, request=request)

    async with _client(handler, defaults=HttpDefaults(cache=MemoryCache())) as http:
        first, second = await asyncio.gather(http.get("/slow"), http.get("/slow"))
        third = await http.get("/slow")

    assert calls == ["https://api.example/slow"]
    assert first.body == second.body == third.body == {"n": 1}


@pytest.mark.asyncio
@respx.mock
async def test_default_transport_with_respx() -> None:
    route = respx.get("https://api.example/users/1").mock(
        return_value=httpx.Response(200, json={"id": 1, "name": "Ada"})
    )

    async with Http() as http:
        response = await http.get("https://api.example/users/1")

    assert route.called
    assert response.body == {"id": 1, "name": "Ada"}


@pytest.mark.asyncio
async def test_externally_owned_client_is_not_closed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204, request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    async with Http(HttpxTransport(client=client)) as http:
        response = await http.delete("https://api.example/items/1")

    assert response.status == 204
    assert response.body == ""
    assert not client.is_closed
    await client.aclose()


@pytest.mark.asyncio
async def test_binary_bodies_stay_bytes_and_text_bodies_are_decoded() -> None:
    png = b"\x89PNG\r\n\x1a\n\x00\xff"

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/logo.png":
            return httpx.Response(
                200, content=png, headers={"Content-Type": "image/png"}, request=request
            )
        return httpx.Response(
            200,
            content="a,b\n1,2\n".encode(),
            headers={"Content-Type": "text/csv; charset=utf-8"},
            request=request,
        )

    transport = HttpxTransport(
        base_url="https://api.example",
        transport=httpx.MockTransport(handler),
    )
    async with Http(transport) as http:
        image = await http.get("/logo.png")
        table = await http.get("/report.csv")

    assert image.body == png
    assert table.body == "a,b\n1,2\n"
