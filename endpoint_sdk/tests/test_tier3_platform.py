"""Tests for tier3_platform modules (httpx transports over MockTransport)."""
from __future__ import annotations

import json
from typing import Annotated

import httpx
import pytest
from pydantic import BaseModel

from endpoint_sdk.tier0_core.config import _reset_config
from endpoint_sdk.tier0_core.errors import (
    ConfigurationError,
    RequestBuildError,
    RequestError,
    ServerResponseError,
)
from endpoint_sdk.tier0_core.http import Method, Skip
from endpoint_sdk.tier1_runtime.endpoint import Endpoint, endpoint
from endpoint_sdk.tier1_runtime.middleware import HeaderMiddleware, ResultKeyMiddleware
from endpoint_sdk.tier3_platform.api_client import ApiClient, BlockingApiClient

BASE = "https://api.example.com/v1/"


class Age(BaseModel):
    age: int


@endpoint("users/{id}", response=Age)
class GetUser(Endpoint):
    id: Annotated[int, Skip]


@endpoint("users", method=Method.POST, response=Age)
class CreateUser(Endpoint):
    name: str
    age: int


class MockServer:
    """Routes httpx requests to a canned response and records them."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.response = response or httpx.Response(200, json={"age": 30})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


def _failing(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def server() -> MockServer:
    return MockServer()


# ── ApiClient ──────────────────────────────────────────────────────────────

class TestApiClient:
    @pytest.mark.asyncio
    async def test_get_request(self, server):
        async with httpx.AsyncClient(transport=httpx.MockTransport(server)) as http:
            client = ApiClient(BASE, http=http)
            result = await GetUser(id=42).exec(client)

        sent = server.requests[0]
        assert sent.method == "GET"
        assert sent.url == "https://api.example.com/v1/users/42"
        assert sent.content == b""
        assert result.status_code == 200
        assert result.parse() == Age(age=30)

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self, server):
        async with httpx.AsyncClient(transport=httpx.MockTransport(server)) as http:
            await CreateUser(name="a", age=5).exec(ApiClient(BASE, http=http))

        sent = server.requests[0]
        assert sent.method == "POST"
        assert sent.content == b'{"name":"a","age":5}'
        assert sent.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_server_error(self):
        server = MockServer(httpx.Response(500, text="oops"))
        async with httpx.AsyncClient(transport=httpx.MockTransport(server)) as http:
            with pytest.raises(ServerResponseError) as exc_info:
                await GetUser(id=1).exec(ApiClient(BASE, http=http))
        assert exc_info.value.status_code == 500
        assert exc_info.value.content == "oops"

    @pytest.mark.asyncio
    async def test_network_failure_is_request_error(self):
        async with httpx.AsyncClient(transport=httpx.MockTransport(_failing)) as http:
            with pytest.raises(RequestError) as exc_info:
                await GetUser(id=1).exec(ApiClient(BASE, http=http))
        assert exc_info.value.method == "GET"
        assert exc_info.value.url == "https://api.example.com/v1/users/1"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_invalid_header_is_request_build_error(self, server):
        async with httpx.AsyncClient(transport=httpx.MockTransport(server)) as http:
            client = ApiClient(BASE, http=http)
            with pytest.raises(RequestBuildError):
                await GetUser(id=1).with_middleware(HeaderMiddleware({"X-Count": 3})).exec(client)
        assert server.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [{"X-Note": "a\r\nInjected: 1"}, {"X-Note\n": "a"}])
    async def test_line_break_in_header_is_request_build_error(self, server, header):
        async with httpx.AsyncClient(transport=httpx.MockTransport(server)) as http:
            client = ApiClient(BASE, http=http)
            with pytest.raises(RequestBuildError) as exc_info:
                await GetUser(id=1).with_middleware(HeaderMiddleware(header)).exec(client)
        assert exc_info.value.method == "GET"
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_middleware_through_transport(self):
        server = MockServer(httpx.Response(200, json={"result": {"age": 41}}))
        async with httpx.AsyncClient(transport=httpx.MockTransport(server)) as http:
            result = await (
                GetUser(id=7)
                .with_middleware(ResultKeyMiddleware())
                .exec(ApiClient(BASE, http=http))
            )
        assert result.parse().age == 41

    @pytest.mark.asyncio
    async def test_base_url_from_config(self, monkeypatch, server):
        monkeypatch.setenv("ENDPOINT_BASE_URL", "https://config.example.com")
        _reset_config()
        async with httpx.AsyncClient(transport=httpx.MockTransport(server)) as http:
            client = ApiClient(http=http)
            await GetUser(id=2).exec(client)
        assert client.base == "https://config.example.com"
        assert server.requests[0].url == "https://config.example.com/users/2"

    def test_missing_base_url_raises(self, monkeypatch):
        monkeypatch.delenv("ENDPOINT_BASE_URL", raising=False)
        _reset_config()
        with pytest.raises(ConfigurationError):
            ApiClient()

    @pytest.mark.asyncio
    async def test_owned_client_uses_config(self, monkeypatch):
        monkeypatch.setenv("ENDPOINT_TIMEOUT", "7.5")
        monkeypatch.setenv("ENDPOINT_USER_AGENT", "tests/1.0")
        _reset_config()
        async with ApiClient(BASE, headers={"X-API-Token": "t"}) as client:
            assert client.http.timeout.read == 7.5
            assert client.http.headers["user-agent"] == "tests/1.0"
            assert client.http.headers["x-api-token"] == "t"
        assert client.http.is_closed

    @pytest.mark.asyncio
    async def test_borrowed_client_left_open(self, server):
        http = httpx.AsyncClient(transport=httpx.MockTransport(server))
        async with ApiClient(BASE, http=http):
            pass
        assert not http.is_closed
        await http.aclose()


# ── BlockingApiClient ──────────────────────────────────────────────────────

class TestBlockingApiClient:
    def test_get_request(self, server):
        with httpx.Client(transport=httpx.MockTransport(server)) as http:
            result = GetUser(id=42).exec_block(BlockingApiClient(BASE, http=http))
        assert server.requests[0].url == "https://api.example.com/v1/users/42"
        assert result.parse().age == 30

    def test_post_sends_json_body(self, server):
        with httpx.Client(transport=httpx.MockTransport(server)) as http:
            CreateUser(name="a", age=5).exec_block(BlockingApiClient(BASE, http=http))
        assert json.loads(server.requests[0].content) == {"name": "a", "age": 5}

    def test_server_error(self):
        server = MockServer(httpx.Response(500, text="oops"))
        with httpx.Client(transport=httpx.MockTransport(server)) as http:
            with pytest.raises(ServerResponseError) as exc_info:
                GetUser(id=1).exec_block(BlockingApiClient(BASE, http=http))
        assert exc_info.value.status_code == 500
        assert exc_info.value.content == "oops"

    def test_network_failure_is_request_error(self):
        with httpx.Client(transport=httpx.MockTransport(_failing)) as http:
            with pytest.raises(RequestError):
                GetUser(id=1).exec_block(BlockingApiClient(BASE, http=http))

    def test_line_break_in_header_is_request_build_error(self, server):
        middleware = HeaderMiddleware({"X-Note": "a\r\nInjected: 1"})
        with httpx.Client(transport=httpx.MockTransport(server)) as http:
            with pytest.raises(RequestBuildError):
                GetUser(id=1).with_middleware(middleware).exec_block(BlockingApiClient(BASE, http=http))
        assert server.requests == []

    def test_get_sends_no_body(self, server):
        with httpx.Client(transport=httpx.MockTransport(server)) as http:
            GetUser(id=3).exec_block(BlockingApiClient(BASE, http=http))
        assert server.requests[0].content == b""

    def test_empty_response_parses_to_none(self):
        server = MockServer(httpx.Response(204))
        with httpx.Client(transport=httpx.MockTransport(server)) as http:
            result = GetUser(id=1).exec_block(BlockingApiClient(BASE, http=http))
        assert result.status_code == 204
        assert result.parse() is None

    def test_context_manager_closes_owned_client(self):
        with BlockingApiClient(BASE) as client:
            assert not client.http.is_closed
        assert client.http.is_closed
