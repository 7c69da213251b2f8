"""
endpoint_sdk.tier3_platform.api_client
────────────────────────────────────────
httpx-backed transports for executing endpoints. A backing httpx client is
reused across calls so connection pooling, timeouts and TLS settings are
shared; retries and pooling policy stay with httpx.

Backed by: httpx (async and sync).

Usage::

    async with ApiClient("https://reqres.in/") as client:
        result = await GetUser(id=2).exec(client)

    with BlockingApiClient("https://reqres.in/") as client:
        result = GetUser(id=2).exec_block(client)
"""
from __future__ import annotations

import re
from typing import Any

import httpx

from endpoint_sdk.tier0_core.config import get_config
from endpoint_sdk.tier0_core.errors import (
    ConfigurationError,
    RequestBuildError,
    RequestError,
    ResponseError,
)
from endpoint_sdk.tier0_core.http import Request, Response
from endpoint_sdk.tier1_runtime.client import AsyncClient, Client

_LINE_BREAK = re.compile(r"[\r\n]")


def _resolve_base(base_url: str | None) -> str:
    base = base_url or get_config().base_url
    if not base:
        raise ConfigurationError(
            "No base URL given and ENDPOINT_BASE_URL is not set"
        )
    return base


def _client_options(timeout: float | None, headers: dict[str, str] | None) -> dict[str, Any]:
    config = get_config()
    return {
        "timeout": timeout if timeout is not None else config.timeout,
        "verify": config.verify_ssl,
        "follow_redirects": config.follow_redirects,
        "headers": {"User-Agent": config.user_agent, **(headers or {})},
    }


def _to_httpx(http: httpx.Client | httpx.AsyncClient, request: Request) -> httpx.Request:
    for name, value in request.headers.items():
        if any(isinstance(part, str) and _LINE_BREAK.search(part) for part in (name, value)):
            raise RequestBuildError(
                f"Header {name!r} contains a line break",
                method=request.method.value,
                url=str(request.url),
            )
    try:
        return http.build_request(
            request.method.value,
            request.url,
            headers=request.headers,
            content=request.body,
        )
    except (httpx.InvalidURL, AttributeError, TypeError, ValueError) as exc:
        raise RequestBuildError(
            f"Could not build HTTP request: {exc}",
            method=request.method.value,
            url=str(request.url),
        ) from exc


def _from_httpx(response: httpx.Response) -> Response:
    return Response(
        status_code=response.status_code,
        body=response.content,
        headers=dict(response.headers),
    )


class ApiClient(AsyncClient):
    """
    Async transport over ``httpx.AsyncClient``.

    Pass *http* to reuse a preconfigured httpx client (custom transports,
    auth, proxies); the ApiClient then leaves closing it to the caller.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = _resolve_base(base_url)
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(**_client_options(timeout, headers))

    @property
    def base(self) -> str:
        return self._base_url

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http

    async def send(self, request: Request) -> Response:
        http_request = _to_httpx(self._http, request)
        try:
            response = await self._http.send(http_request, stream=True)
        except httpx.HTTPError as exc:
            raise RequestError(
                f"Request to {request.url} failed: {exc}",
                method=request.method.value,
                url=str(request.url),
            ) from exc
        try:
            await response.aread()
        except httpx.HTTPError as exc:
            raise ResponseError(f"Could not read response body: {exc}") from exc
        finally:
            await response.aclose()
        return _from_httpx(response)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


class BlockingApiClient(Client):
    """Blocking transport over ``httpx.Client``."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http: httpx.Client | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = _resolve_base(base_url)
        self._owns_http = http is None
        self._http = http or httpx.Client(**_client_options(timeout, headers))

    @property
    def base(self) -> str:
        return self._base_url

    @property
    def http(self) -> httpx.Client:
        return self._http

    def send(self, request: Request) -> Response:
        http_request = _to_httpx(self._http, request)
        try:
            response = self._http.send(http_request, stream=True)
        except httpx.HTTPError as exc:
            raise RequestError(
                f"Request to {request.url} failed: {exc}",
                method=request.method.value,
                url=str(request.url),
            ) from exc
        try:
            response.read()
        except httpx.HTTPError as exc:
            raise ResponseError(f"Could not read response body: {exc}") from exc
        finally:
            response.close()
        return _from_httpx(response)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> BlockingApiClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["ApiClient", "BlockingApiClient"]


__sdk_export__ = {
    "exports": ["ApiClient", "BlockingApiClient"],
    "description": "httpx-backed async and blocking transports",
    "tier": "tier3_platform",
    "module": "api_client",
}
