"""
endpoint_sdk test configuration.

All tests run against in-process transports, no network access required.
Override by setting environment variables before running pytest.
"""
from __future__ import annotations

import os

import pytest

# ── Force test settings ────────────────────────────────────────────────────
# These must be set before any endpoint_sdk modules are imported.

os.environ.setdefault("ENDPOINT_ENV", "test")
os.environ.setdefault("ENDPOINT_LOG_FORMAT", "console")
os.environ.setdefault("ENDPOINT_LOG_LEVEL", "WARNING")

from endpoint_sdk.tier0_core.http import Request, Response  # noqa: E402
from endpoint_sdk.tier1_runtime.client import AsyncClient, Client  # noqa: E402

BASE_URL = "https://api.example.com"


# ── Transport doubles ──────────────────────────────────────────────────────

class StubClient(Client):
    """Blocking transport returning a canned response and recording requests."""

    def __init__(self, response: Response | None = None, base: str = BASE_URL) -> None:
        self._base = base
        self.response = response or Response(status_code=200)
        self.requests: list[Request] = []

    @property
    def base(self) -> str:
        return self._base

    def send(self, request: Request) -> Response:
        self.requests.append(request)
        return self.response


class AsyncStubClient(AsyncClient):
    """Async transport returning a canned response and recording requests."""

    def __init__(self, response: Response | None = None, base: str = BASE_URL) -> None:
        self._base = base
        self.response = response or Response(status_code=200)
        self.requests: list[Request] = []

    @property
    def base(self) -> str:
        return self._base

    async def send(self, request: Request) -> Response:
        self.requests.append(request)
        return self.response


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """
    Reset cached config and request context between tests so env changes
    and contexts never bleed from one test into the next.
    """
    from endpoint_sdk.tier0_core.config import _reset_config
    from endpoint_sdk.tier1_runtime.context import clear_request_context

    _reset_config()
    yield
    _reset_config()
    clear_request_context()


@pytest.fixture
def stub_client() -> StubClient:
    """Return a blocking StubClient answering 200 with an empty body."""
    return StubClient()


@pytest.fixture
def async_stub_client() -> AsyncStubClient:
    """Return an AsyncStubClient answering 200 with an empty body."""
    return AsyncStubClient()
