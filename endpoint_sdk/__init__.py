"""
endpoint_sdk
────────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from endpoint_sdk.tier0_core.errors import (
    ClientError,
    ConfigurationError,
    DataParseError,
    EndpointBuildError,
    EndpointDefinitionError,
    MiddlewareError,
    PathInterpolationError,
    RequestBuildError,
    RequestError,
    ResponseError,
    ResponseParseError,
    ServerResponseError,
    UrlBuildError,
    UrlParseError,
    UrlQueryParseError,
)
from endpoint_sdk.tier0_core.http import (
    HTTP,
    HTTP_SUCCESS_CODES,
    ApiResponse,
    Body,
    FieldRole,
    Method,
    Query,
    Raw,
    Request,
    RequestType,
    Response,
    ResponseType,
    Skip,
    Wrapper,
)
from endpoint_sdk.tier0_core.config import get_config, EndpointConfig
from endpoint_sdk.tier0_core.logging import get_logger

from endpoint_sdk.tier1_runtime.context import (
    get_context,
    set_context,
    new_context,
    RequestContext,
)
from endpoint_sdk.tier1_runtime.url import build_url
from endpoint_sdk.tier1_runtime.serialize import build_body, build_query, parse
from endpoint_sdk.tier1_runtime.client import AsyncClient, Client
from endpoint_sdk.tier1_runtime.middleware import (
    Middleware,
    HeaderMiddleware,
    PathPrefixMiddleware,
    ContextMiddleware,
    ResultKeyMiddleware,
)
from endpoint_sdk.tier1_runtime.endpoint import (
    endpoint,
    Endpoint,
    EndpointSpec,
    EndpointResult,
    MutatedEndpoint,
)

from endpoint_sdk.tier3_platform.api_client import ApiClient, BlockingApiClient

__version__ = "0.1.0"
__all__ = [
    # errors
    "ClientError", "ConfigurationError", "DataParseError", "EndpointBuildError",
    "EndpointDefinitionError", "MiddlewareError", "PathInterpolationError",
    "RequestBuildError", "RequestError", "ResponseError", "ResponseParseError",
    "ServerResponseError", "UrlBuildError", "UrlParseError", "UrlQueryParseError",
    # http
    "HTTP", "HTTP_SUCCESS_CODES", "ApiResponse", "Body", "FieldRole", "Method",
    "Query", "Raw", "Request", "RequestType", "Response", "ResponseType",
    "Skip", "Wrapper",
    # config
    "get_config", "EndpointConfig",
    # logging
    "get_logger",
    # context
    "get_context", "set_context", "new_context", "RequestContext",
    # url / serialize
    "build_url", "build_body", "build_query", "parse",
    # transports
    "AsyncClient", "Client", "ApiClient", "BlockingApiClient",
    # middleware
    "Middleware", "HeaderMiddleware", "PathPrefixMiddleware",
    "ContextMiddleware", "ResultKeyMiddleware",
    # endpoints
    "endpoint", "Endpoint", "EndpointSpec", "EndpointResult", "MutatedEndpoint",
]
