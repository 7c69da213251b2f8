"""
endpoint_sdk.tier0_core.errors
───────────────────────────────
Error taxonomy for endpoint execution. Every failure in the pipeline is
raised as a ClientError subclass with a stable machine-readable code, a
detail message and structured metadata. Underlying causes are chained with
``raise ... from exc`` so the underlying exception stays reachable.

Nothing in the SDK retries or swallows these errors.
"""
from __future__ import annotations

from typing import Any


# ── Base error ────────────────────────────────────────────────────────────────

class ClientError(Exception):
    """
    Base class for all endpoint SDK errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - detail: human readable description of what failed
    - metadata: structured context (url, method, ...) for diagnostics
    """

    code: str = "client_error"
    message: str = "An error occurred in processing the request."

    def __init__(
        self,
        detail: str | None = None,
        *,
        code: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.detail = detail or self.__class__.message
        self.metadata = metadata
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.detail,
                **{k: v for k, v in self.metadata.items() if v is not None},
            }
        }


# ── Definition and build errors ───────────────────────────────────────────────

class EndpointDefinitionError(ClientError):
    """An endpoint class or wrapper type is declared inconsistently."""
    code = "endpoint_definition_error"
    message = "Invalid endpoint definition."


class EndpointBuildError(ClientError):
    """Endpoint instance could not be constructed from the given data."""
    code = "endpoint_build_error"
    message = "Error building endpoint."

    def __init__(
        self,
        detail: str | None = None,
        *,
        fields: dict[str, str] | None = None,
        **metadata: Any,
    ) -> None:
        self.fields = fields or {}
        super().__init__(detail, **metadata)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.fields:
            d["error"]["fields"] = self.fields
        return d


class PathInterpolationError(ClientError):
    """A path template placeholder could not be resolved to a value."""
    code = "path_interpolation_error"
    message = "Error interpolating endpoint path."

    def __init__(
        self,
        detail: str | None = None,
        *,
        template: str | None = None,
        placeholder: str | None = None,
        **metadata: Any,
    ) -> None:
        self.template = template
        self.placeholder = placeholder
        super().__init__(detail, template=template, placeholder=placeholder, **metadata)


class UrlParseError(ClientError):
    """The base address is not an absolute URL."""
    code = "url_parse_error"
    message = "Error parsing URL."

    def __init__(self, detail: str | None = None, *, url: str | None = None, **metadata: Any) -> None:
        self.url = url
        super().__init__(detail, url=url, **metadata)


class UrlBuildError(ClientError):
    """The final URL could not be assembled."""
    code = "url_build_error"
    message = "Error building URL."

    def __init__(self, detail: str | None = None, *, url: str | None = None, **metadata: Any) -> None:
        self.url = url
        super().__init__(detail, url=url, **metadata)


class DataParseError(ClientError):
    """Endpoint data could not be serialized for the wire."""
    code = "data_parse_error"
    message = "Error parsing endpoint into data."


class UrlQueryParseError(DataParseError):
    """A query field holds a value that cannot be URL-encoded."""
    code = "url_query_parse_error"
    message = "Error serializing URL query parameters."


# ── Transport errors ──────────────────────────────────────────────────────────

class RequestBuildError(ClientError):
    """The transport rejected the request descriptor (e.g. bad header value)."""
    code = "request_build_error"
    message = "Error building HTTP request."

    def __init__(
        self,
        detail: str | None = None,
        *,
        method: str | None = None,
        url: str | None = None,
        **metadata: Any,
    ) -> None:
        self.method = method
        self.url = url
        super().__init__(detail, method=method, url=url, **metadata)


class RequestError(ClientError):
    """Network-level failure while sending the request."""
    code = "request_error"
    message = "Error sending HTTP request."

    def __init__(
        self,
        detail: str | None = None,
        *,
        method: str | None = None,
        url: str | None = None,
        **metadata: Any,
    ) -> None:
        self.method = method
        self.url = url
        super().__init__(detail, method=method, url=url, **metadata)


class ResponseError(ClientError):
    """The response arrived but its body could not be retrieved."""
    code = "response_error"
    message = "Error retrieving HTTP response."


class ServerResponseError(ClientError):
    """The server answered with a status code outside the success range."""
    code = "server_response_error"
    message = "Server returned error."

    def __init__(
        self,
        detail: str | None = None,
        *,
        status_code: int,
        content: str | None = None,
        **metadata: Any,
    ) -> None:
        self.status_code = status_code
        self.content = content
        super().__init__(
            detail or f"Server returned error: HTTP {status_code}",
            status_code=status_code,
            content=content,
            **metadata,
        )


class ResponseParseError(ClientError):
    """Response bytes failed to deserialize into the requested type."""
    code = "response_parse_error"
    message = "Error parsing HTTP response."

    def __init__(
        self,
        detail: str | None = None,
        *,
        content: str | None = None,
        raw: bytes = b"",
        **metadata: Any,
    ) -> None:
        self.content = content
        self.raw = raw
        super().__init__(detail, content=content, **metadata)


class MiddlewareError(ClientError):
    """A middleware hook failed; the remaining pipeline steps are aborted."""
    code = "middleware_error"
    message = "Middleware failed."

    def __init__(
        self,
        detail: str | None = None,
        *,
        middleware: str | None = None,
        hook: str | None = None,
        **metadata: Any,
    ) -> None:
        self.middleware = middleware
        self.hook = hook
        super().__init__(detail, middleware=middleware, hook=hook, **metadata)


class ConfigurationError(ClientError):
    """Misconfiguration detected when constructing a client."""
    code = "configuration_error"
    message = "Invalid client configuration."


__sdk_export__ = {
    "exports": [
        "ClientError", "EndpointDefinitionError", "EndpointBuildError",
        "PathInterpolationError", "UrlParseError", "UrlBuildError",
        "DataParseError", "UrlQueryParseError", "RequestBuildError",
        "RequestError", "ResponseError", "ServerResponseError",
        "ResponseParseError", "MiddlewareError", "ConfigurationError",
    ],
    "description": "Typed error taxonomy for endpoint execution",
    "tier": "tier0_core",
    "module": "errors",
}
