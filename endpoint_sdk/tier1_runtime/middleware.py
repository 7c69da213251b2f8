"""
endpoint_sdk.tier1_runtime.middleware
───────────────────────────────────────
Request/response hooks applied around a single endpoint execution.

A middleware may mutate the outgoing Request before it is sent and the raw
Response before it is parsed. Both hooks default to pass-through, so a
subclass only overrides what it needs. Hooks signal failure by raising; the
execution pipeline aborts on the first error.

Only one middleware is attached per execution. To combine several, write a
middleware that calls the others.

Usage::

    class ApiPrefix(Middleware):
        def on_request(self, endpoint, request):
            request.headers["X-API-Token"] = "mytoken"

    result = await GetUser(id=42).with_middleware(ApiPrefix()).exec(client)
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic_core import from_json, to_json

from endpoint_sdk.tier0_core.errors import MiddlewareError, ResponseParseError
from endpoint_sdk.tier0_core.http import Request, Response, decode_content
from endpoint_sdk.tier0_core.logging import get_logger
from endpoint_sdk.tier1_runtime.context import get_context

log = get_logger(__name__)


class Middleware:
    """Base middleware: both hooks are no-ops."""

    def on_request(self, endpoint: Any, request: Request) -> None:
        """Mutate *request* before it is sent."""
        return None

    def on_response(self, endpoint: Any, response: Response) -> None:
        """Mutate *response* before it is returned as an EndpointResult."""
        return None


# ── Built-in middlewares ──────────────────────────────────────────────────────

class HeaderMiddleware(Middleware):
    """Set static headers (API tokens, custom user agents, ...) on every request."""

    def __init__(self, headers: Mapping[str, str]) -> None:
        self.headers = dict(headers)

    def on_request(self, endpoint: Any, request: Request) -> None:
        request.headers.update(self.headers)


class PathPrefixMiddleware(Middleware):
    """
    Prepend path segments to every request URL, e.g. ``api`` turns
    ``https://h/users`` into ``https://h/api/users``.
    """

    def __init__(self, prefix: str) -> None:
        self.prefix = "/" + prefix.strip("/")

    def on_request(self, endpoint: Any, request: Request) -> None:
        path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        if path == "/":
            path = ""
        request.url = request.url.copy_with(path=self.prefix + path)
        log.debug("middleware.path_prefixed", url=str(request.url))


class ContextMiddleware(Middleware):
    """
    Propagate the active RequestContext as ``x-request-id`` and
    ``x-trace-id`` headers. Headers already present are left untouched.
    """

    def on_request(self, endpoint: Any, request: Request) -> None:
        ctx = get_context()
        if ctx is None:
            return
        request.headers.setdefault("x-request-id", ctx.request_id)
        if ctx.trace_id:
            request.headers.setdefault("x-trace-id", ctx.trace_id)


class ResultKeyMiddleware(Middleware):
    """
    Unwrap a transport-level envelope: replace the response body with the
    JSON value stored under *key* (``{"result": {...}}`` → ``{...}``).
    """

    def __init__(self, key: str = "result") -> None:
        self.key = key

    def on_response(self, endpoint: Any, response: Response) -> None:
        if not response.body:
            return
        try:
            document = from_json(response.body)
        except ValueError as exc:
            raise ResponseParseError(
                f"Response body is not valid JSON: {exc}",
                content=decode_content(response.body),
                raw=response.body,
            ) from exc
        if not isinstance(document, dict) or self.key not in document:
            raise MiddlewareError(
                f"Response body has no {self.key!r} key",
                middleware=type(self).__name__,
                hook="on_response",
            )
        response.body = to_json(document[self.key])


__sdk_export__ = {
    "exports": [
        "Middleware", "HeaderMiddleware", "PathPrefixMiddleware",
        "ContextMiddleware", "ResultKeyMiddleware",
    ],
    "description": "Request/response mutation hooks for endpoint execution",
    "tier": "tier1_runtime",
    "module": "middleware",
}
