"""
endpoint_sdk.tier0_core.http
─────────────────────────────
HTTP primitives shared by every layer: status code constants, request
methods, body content types, endpoint field roles, the request/response
descriptors handed to and returned by transports, and the generic response
envelope base class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, Field

T = TypeVar("T")


# ── Status code constants ──────────────────────────────────────────────────

class HTTP:
    """Standard HTTP status codes."""

    # 2xx
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204
    MULTI_STATUS = 207
    ALREADY_REPORTED = 208

    # 3xx
    MOVED_PERMANENTLY = 301
    FOUND = 302
    NOT_MODIFIED = 304

    # 4xx
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    TOO_MANY_REQUESTS = 429

    # 5xx
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504


# Inclusive 200..208
HTTP_SUCCESS_CODES = range(HTTP.OK, HTTP.ALREADY_REPORTED + 1)


# ── Enums ──────────────────────────────────────────────────────────────────

class Method(str, Enum):
    """HTTP request methods, including the non-standard LIST verb."""

    CONNECT = "CONNECT"
    DELETE = "DELETE"
    GET = "GET"
    HEAD = "HEAD"
    LIST = "LIST"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"
    POST = "POST"
    PUT = "PUT"
    TRACE = "TRACE"


class RequestType(str, Enum):
    """Content type of a request body."""

    JSON = "application/json"


class ResponseType(str, Enum):
    """Content type of a response body."""

    JSON = "application/json"


class FieldRole(Enum):
    """Where an endpoint field appears on the wire."""

    QUERY = "query"
    BODY = "body"
    RAW = "raw"
    SKIP = "skip"
    UNTAGGED = "untagged"

    def __repr__(self) -> str:
        return f"FieldRole.{self.name}"


# Markers for ``Annotated[...]`` field declarations
Query = FieldRole.QUERY
Body = FieldRole.BODY
Raw = FieldRole.RAW
Skip = FieldRole.SKIP


# ── Descriptors ────────────────────────────────────────────────────────────

@dataclass
class Request:
    """
    Fully resolved request ready to hand to a transport. Built fresh for
    every execution; middleware may mutate it once before it is sent.
    """
    method: Method
    url: httpx.URL
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None

    @property
    def body_size(self) -> int:
        return len(self.body) if self.body else 0


@dataclass
class Response:
    """Raw response as returned by a transport."""
    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code in HTTP_SUCCESS_CODES

    def text(self) -> str | None:
        return decode_content(self.body)


def decode_content(body: bytes) -> str | None:
    """Decode *body* as UTF-8, or return None if it is not valid text."""
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        return None


# ── Response envelopes ────────────────────────────────────────────────────

class Wrapper(BaseModel, Generic[T]):
    """
    Base class for generic response envelopes.

    Some APIs return the actual payload nested inside a common outer shape.
    Subclass this with the payload as the first type parameter::

        class Paginated(Wrapper[T], Generic[T]):
            page: int
            data: T

    ``EndpointResult.wrap(Paginated)`` binds T to the endpoint's response
    type and deserializes the whole response into the envelope.
    """


class ApiResponse(Wrapper[T], Generic[T]):
    """Common ``{"data", "error", "request_id", "meta"}`` envelope."""
    data: T | None = None
    error: str | None = None
    request_id: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


__sdk_export__ = {
    "exports": [
        "HTTP", "HTTP_SUCCESS_CODES", "Method", "RequestType", "ResponseType",
        "FieldRole", "Query", "Body", "Raw", "Skip", "Request", "Response",
        "Wrapper", "ApiResponse", "decode_content",
    ],
    "description": "HTTP primitives, request/response descriptors and envelopes",
    "tier": "tier0_core",
    "module": "http",
}
