"""
endpoint_sdk.tier1_runtime.endpoint
─────────────────────────────────────
Declarative HTTP endpoints and their execution pipeline.

An endpoint is a Pydantic model describing one call-site's worth of input.
The ``@endpoint`` decorator compiles the class into an EndpointSpec (path
template, method, per-field wire roles, response type). Executing an
instance runs one pass of:

    build request → middleware.on_request → client.execute
                  → middleware.on_response → EndpointResult

Parsing is deferred to the EndpointResult so the same raw bytes can be read
as the response type or as a generic envelope around it.

Usage::

    @endpoint("users/{id}", response=User)
    class GetUser(Endpoint):
        id: Annotated[int, Skip]
        verbose: Annotated[bool | None, Query] = None

    result = await GetUser(id=42).exec(client)
    user = result.parse()
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import types
from typing import Any, Generic, TypeVar, Union, get_args, get_origin

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from endpoint_sdk.tier0_core.errors import (
    ClientError,
    EndpointBuildError,
    EndpointDefinitionError,
    MiddlewareError,
    PathInterpolationError,
)
from endpoint_sdk.tier0_core.http import (
    FieldRole,
    Method,
    Request,
    RequestType,
    Response,
    ResponseType,
    Wrapper,
)
from endpoint_sdk.tier0_core.logging import get_logger
from endpoint_sdk.tier1_runtime.client import AsyncClient, Client
from endpoint_sdk.tier1_runtime.middleware import Middleware
from endpoint_sdk.tier1_runtime.serialize import build_body, build_query, fields_with, parse
from endpoint_sdk.tier1_runtime.url import build_url as compose_url
from endpoint_sdk.tier1_runtime.url import interpolate_path, placeholders

log = get_logger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound="Endpoint")
W = TypeVar("W", bound=Wrapper)

_RAW_TYPES = (bytes, bytearray, str, type(None))


# ── Definition layer ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class EndpointSpec:
    """Resolved description of an endpoint class."""
    path: str
    method: Method
    field_roles: Mapping[str, FieldRole] = field(default_factory=dict)
    response: Any = None
    request_type: RequestType = RequestType.JSON
    response_type: ResponseType = ResponseType.JSON


def _is_raw_type(annotation: Any) -> bool:
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        return all(_is_raw_type(arg) for arg in get_args(annotation))
    if origin is not None:
        return False
    return isinstance(annotation, type) and issubclass(annotation, _RAW_TYPES)


def _field_roles(cls: type[BaseModel], path: str) -> dict[str, FieldRole]:
    fields = cls.model_fields
    for name in placeholders(path):
        if name not in fields:
            raise PathInterpolationError(
                f"{cls.__name__}: path placeholder {{{name}}} does not match any field",
                template=path,
                placeholder=name,
            )

    roles: dict[str, FieldRole] = {}
    for name, info in fields.items():
        markers = [m for m in info.metadata if isinstance(m, FieldRole)]
        if len(markers) > 1:
            raise EndpointDefinitionError(
                f"{cls.__name__}.{name} declares more than one role: {markers}"
            )
        roles[name] = markers[0] if markers else FieldRole.UNTAGGED

    raw = fields_with(roles, FieldRole.RAW)
    if len(raw) > 1:
        raise EndpointDefinitionError(
            f"{cls.__name__} declares more than one raw field: {raw}"
        )
    for name in raw:
        if not _is_raw_type(fields[name].annotation):
            raise EndpointDefinitionError(
                f"{cls.__name__}.{name} is Raw but typed {fields[name].annotation!r}; "
                "raw fields must be bytes, bytearray or str"
            )
    return roles


def endpoint(
    path: str,
    *,
    method: Method | str = Method.GET,
    response: Any = None,
    request_type: RequestType = RequestType.JSON,
    response_type: ResponseType = ResponseType.JSON,
) -> Callable[[type[E]], type[E]]:
    """
    Class decorator compiling an Endpoint subclass into an EndpointSpec.

    Args:
        path:          Relative path; ``{field}`` placeholders are filled from
                       the instance's fields.
        method:        HTTP method (Method member or its name).
        response:      Type the response body deserializes into. None means
                       the endpoint returns no content.
        request_type:  Encoding of the request body.
        response_type: Encoding of the response body.
    """
    try:
        resolved_method = Method(method.upper() if isinstance(method, str) else method)
    except ValueError as exc:
        raise EndpointDefinitionError(f"Unknown HTTP method {method!r}") from exc

    def decorator(cls: type[E]) -> type[E]:
        if not (isinstance(cls, type) and issubclass(cls, Endpoint)):
            raise EndpointDefinitionError(
                f"@endpoint can only decorate Endpoint subclasses, got {cls!r}"
            )
        cls.__endpoint_spec__ = EndpointSpec(
            path=path,
            method=resolved_method,
            field_roles=_field_roles(cls, path),
            response=response,
            request_type=request_type,
            response_type=response_type,
        )
        return cls

    return decorator


# ── Results ───────────────────────────────────────────────────────────────────

def _wrapper_value_type(wrapper: type[Wrapper]) -> Any:
    for klass in wrapper.__mro__:
        meta = getattr(klass, "__pydantic_generic_metadata__", None)
        if meta and meta["args"]:
            return meta["args"][0]
    return None


def _bind_wrapper(wrapper: type[W], response: Any) -> type[W]:
    if not (isinstance(wrapper, type) and issubclass(wrapper, Wrapper)):
        raise EndpointDefinitionError(f"{wrapper!r} is not a Wrapper subclass")
    if wrapper.__pydantic_generic_metadata__["parameters"]:
        if response is None:
            raise EndpointDefinitionError(
                f"Cannot bind {wrapper.__name__}: endpoint declares no response type"
            )
        return wrapper[response]
    value = _wrapper_value_type(wrapper)
    if value != response:
        raise EndpointDefinitionError(
            f"{wrapper.__name__} wraps {value!r}, endpoint responds with {response!r}"
        )
    return wrapper


class EndpointResult(Generic[T]):
    """
    The raw response of one endpoint execution. Nothing is parsed until
    ``parse()`` or ``wrap()`` is called.
    """

    def __init__(
        self,
        response: Response,
        response_model: Any = None,
        response_type: ResponseType = ResponseType.JSON,
    ) -> None:
        self.response = response
        self.response_model = response_model
        self.response_type = response_type

    @property
    def status_code(self) -> int:
        return self.response.status_code

    def raw(self) -> bytes:
        """Return the response body exactly as received."""
        return self.response.body

    def parse(self) -> T | None:
        """
        Deserialize the body into the endpoint's response type. Returns None
        for an empty body or an endpoint without a response type.
        """
        if self.response_model is None:
            return None
        return parse(self.response.body, self.response_model, self.response_type)

    def wrap(self, wrapper: type[W]) -> W | None:
        """
        Deserialize the body into *wrapper*, a generic envelope whose first
        type parameter is the endpoint's response type. An unbound generic
        wrapper is bound to the response type automatically.
        """
        bound = _bind_wrapper(wrapper, self.response_model)
        return parse(self.response.body, bound, self.response_type)

    def __repr__(self) -> str:
        return f"EndpointResult(status_code={self.status_code}, body_bytes={len(self.response.body)})"


# ── Execution pipeline ────────────────────────────────────────────────────────

def _apply_hook(middleware: Middleware, hook: str, endpoint: Endpoint, target: Any) -> None:
    try:
        getattr(middleware, hook)(endpoint, target)
    except ClientError:
        raise
    except Exception as exc:
        raise MiddlewareError(
            f"{type(middleware).__name__}.{hook} failed: {exc}",
            middleware=type(middleware).__name__,
            hook=hook,
        ) from exc


def _prepare(endpoint: Endpoint, base: str, middleware: Middleware | None) -> Request:
    spec = endpoint.endpoint_spec()
    log.info("endpoint.exec", endpoint=type(endpoint).__name__, method=spec.method.value)
    request = endpoint.build_request(base)
    if middleware is not None:
        _apply_hook(middleware, "on_request", endpoint, request)
    return request


def _finish(endpoint: Endpoint, response: Response, middleware: Middleware | None) -> EndpointResult:
    spec = endpoint.endpoint_spec()
    if middleware is not None:
        _apply_hook(middleware, "on_response", endpoint, response)
    return EndpointResult(response, spec.response, spec.response_type)


class Endpoint(BaseModel):
    """
    Base class for endpoint definitions. Fields describe the call's input;
    ``Annotated`` markers decide where each one goes on the wire:

        Query: appended to the URL query string
        Body:  serialized into the request body
        Raw:   bytes sent verbatim as the body (at most one per endpoint)
        Skip:  not sent at all

    Unmarked fields form the body when no Body or Raw field exists. A field
    named in the path template follows the same rules, so mark it Skip to
    keep it out of the body.
    """

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def endpoint_spec(cls) -> EndpointSpec:
        spec = cls.__dict__.get("__endpoint_spec__")
        if spec is None:
            raise EndpointDefinitionError(f"{cls.__name__} is not decorated with @endpoint")
        return spec

    @classmethod
    def build(cls: type[E], **data: Any) -> E:
        """
        Construct an endpoint, raising EndpointBuildError (not Pydantic's
        ValidationError) when the data is invalid.
        """
        try:
            return cls(**data)
        except ValidationError as exc:
            fields = {
                ".".join(str(loc) for loc in err["loc"]): err["msg"]
                for err in exc.errors()
            }
            raise EndpointBuildError(
                f"Invalid data for {cls.__name__}",
                fields=fields,
            ) from exc

    # ── Compilation steps ─────────────────────────────────────────────────

    def resolve_path(self) -> str:
        values = {name: getattr(self, name) for name in type(self).model_fields}
        return interpolate_path(self.endpoint_spec().path, values)

    def query_pairs(self) -> list[tuple[str, str]]:
        return build_query(self, self.endpoint_spec().field_roles)

    def request_body(self) -> bytes | None:
        spec = self.endpoint_spec()
        return build_body(self, spec.field_roles, spec.request_type)

    def build_url(self, base: str) -> httpx.URL:
        return compose_url(base, self.resolve_path(), self.query_pairs())

    def build_request(self, base: str) -> Request:
        """Return the Request this endpoint sends against *base*."""
        spec = self.endpoint_spec()
        url = self.build_url(base)
        body = self.request_body()
        headers: dict[str, str] = {}
        if body is not None:
            headers["Content-Type"] = spec.request_type.value
        return Request(method=spec.method, url=url, headers=headers, body=body)

    # ── Execution ─────────────────────────────────────────────────────────

    async def exec(self, client: AsyncClient) -> EndpointResult:
        """Execute against a non-blocking client."""
        request = _prepare(self, client.base, None)
        response = await client.execute(request)
        return _finish(self, response, None)

    def exec_block(self, client: Client) -> EndpointResult:
        """Execute against a blocking client."""
        request = _prepare(self, client.base, None)
        response = client.execute(request)
        return _finish(self, response, None)

    def with_middleware(self: E, middleware: Middleware) -> MutatedEndpoint[E]:
        return MutatedEndpoint(self, middleware)


class MutatedEndpoint(Generic[E]):
    """
    An endpoint with one middleware attached. Exposes the same request and
    execution surface; the middleware sees every request before it is sent
    and every successful response before it is returned.
    """

    def __init__(self, endpoint: E, middleware: Middleware) -> None:
        self.endpoint = endpoint
        self.middleware = middleware

    def endpoint_spec(self) -> EndpointSpec:
        return self.endpoint.endpoint_spec()

    def build_request(self, base: str) -> Request:
        request = self.endpoint.build_request(base)
        _apply_hook(self.middleware, "on_request", self.endpoint, request)
        return request

    async def exec(self, client: AsyncClient) -> EndpointResult:
        request = _prepare(self.endpoint, client.base, self.middleware)
        # a cancelled send raises here, so on_response never sees it
        response = await client.execute(request)
        return _finish(self.endpoint, response, self.middleware)

    def exec_block(self, client: Client) -> EndpointResult:
        request = _prepare(self.endpoint, client.base, self.middleware)
        response = client.execute(request)
        return _finish(self.endpoint, response, self.middleware)

    def __repr__(self) -> str:
        return f"MutatedEndpoint({self.endpoint!r}, middleware={type(self.middleware).__name__})"


__sdk_export__ = {
    "exports": [
        "endpoint", "Endpoint", "EndpointSpec", "EndpointResult", "MutatedEndpoint",
    ],
    "description": "Declarative endpoints and the execution pipeline",
    "tier": "tier1_runtime",
    "module": "endpoint",
}
