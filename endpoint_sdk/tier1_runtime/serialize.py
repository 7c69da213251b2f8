"""
endpoint_sdk.tier1_runtime.serialize
───────────────────────────────────────
Wire serialization for endpoints: which fields become the request body,
how query fields are encoded, and how response bytes deserialize into the
declared response type.

Formats: json (pydantic-core). The RequestType/ResponseType switch is the
only place a new encoding needs to be added.
"""
from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from endpoint_sdk.tier0_core.errors import (
    DataParseError,
    ResponseParseError,
    UrlQueryParseError,
)
from endpoint_sdk.tier0_core.http import (
    FieldRole,
    RequestType,
    ResponseType,
    decode_content,
)

T = TypeVar("T")

# Serialized forms that carry no information and are never sent
_EMPTY_BODIES = frozenset({b"", b"{}", b"null"})


@lru_cache(maxsize=256)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def serialize(obj: Any, request_type: RequestType = RequestType.JSON) -> bytes:
    """
    Serialize a Pydantic model or plain data to bytes.

    Usage:
        data = serialize({"name": "a", "age": 5})   # → b'{"name":"a","age":5}'
    """
    if request_type is RequestType.JSON:
        try:
            if isinstance(obj, BaseModel):
                return obj.model_dump_json(by_alias=True).encode()
            return to_json(obj)
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            raise DataParseError(f"Could not serialize {type(obj).__name__}: {exc}") from exc
    raise DataParseError(f"Unsupported request type: {request_type!r}")


def deserialize(
    data: bytes,
    tp: type[T] | Any,
    response_type: ResponseType = ResponseType.JSON,
) -> T:
    """
    Deserialize bytes into *tp* (a Pydantic model, dataclass, TypedDict,
    builtin container, ...). Raises ResponseParseError on malformed input.
    """
    if response_type is ResponseType.JSON:
        try:
            return _adapter(tp).validate_json(data)
        except ValidationError as exc:
            raise ResponseParseError(
                f"Could not parse response as {getattr(tp, '__name__', tp)!s}: {exc}",
                content=decode_content(data),
                raw=data,
            ) from exc
    raise ResponseParseError(f"Unsupported response type: {response_type!r}", raw=data)


def parse(
    body: bytes,
    tp: type[T] | Any,
    response_type: ResponseType = ResponseType.JSON,
) -> T | None:
    """
    Parse a response body. A zero-length body means "no content" and yields
    None; a non-empty body that fails to deserialize raises
    ResponseParseError.
    """
    if not body:
        return None
    return deserialize(body, tp, response_type)


# ── Endpoint field selection ──────────────────────────────────────────────

def fields_with(field_roles: Mapping[str, FieldRole], role: FieldRole) -> list[str]:
    """Names of the fields holding *role*, in declaration order."""
    return [name for name, r in field_roles.items() if r is role]


def build_body(
    endpoint: BaseModel,
    field_roles: Mapping[str, FieldRole],
    request_type: RequestType = RequestType.JSON,
) -> bytes | None:
    """
    Resolve and serialize the request body of *endpoint*.

    First match wins:
      1. a RAW field: its bytes are returned verbatim
      2. BODY fields: serialized together as one object
      3. UNTAGGED fields: serialized together as one object
      4. otherwise no body

    Fields whose value is None are omitted entirely, and a body that
    serializes to nothing (``{}`` or ``null``) becomes no body at all.
    """
    raw = fields_with(field_roles, FieldRole.RAW)
    if raw:
        value = getattr(endpoint, raw[0])
        if value is None:
            return None
        if isinstance(value, str):
            value = value.encode()
        if not isinstance(value, (bytes, bytearray)):
            raise DataParseError(
                f"Raw field {raw[0]!r} of {type(endpoint).__name__} holds "
                f"{type(value).__name__}, expected bytes or str"
            )
        return bytes(value) or None

    names = fields_with(field_roles, FieldRole.BODY) or fields_with(field_roles, FieldRole.UNTAGGED)
    include = {name for name in names if getattr(endpoint, name) is not None}
    if not include:
        return None

    try:
        data = endpoint.model_dump(mode="json", include=include, by_alias=True)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise DataParseError(
            f"Could not serialize body of {type(endpoint).__name__}: {exc}"
        ) from exc
    body = serialize(data, request_type)
    return None if body in _EMPTY_BODIES else body


def _query_value(key: str, value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, bool):
        return ["true" if value else "false"]
    if isinstance(value, (str, int, float)):
        return [str(value)]
    if isinstance(value, list):
        return [v for item in value for v in _query_value(key, item)]
    raise UrlQueryParseError(
        f"Query parameter {key!r} has unsupported value of type {type(value).__name__}"
    )


def build_query(
    endpoint: BaseModel,
    field_roles: Mapping[str, FieldRole],
) -> list[tuple[str, str]]:
    """
    Return the (key, value) query pairs of *endpoint*, in field order.

    None values are skipped, booleans encode as ``true``/``false`` and lists
    repeat the key once per item. Nested objects are rejected.
    """
    names = fields_with(field_roles, FieldRole.QUERY)
    if not names:
        return []
    try:
        data = endpoint.model_dump(mode="json", include=set(names), by_alias=True)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise UrlQueryParseError(
            f"Could not serialize query of {type(endpoint).__name__}: {exc}"
        ) from exc
    return [(key, v) for key, value in data.items() for v in _query_value(key, value)]


__sdk_export__ = {
    "exports": ["serialize", "deserialize", "parse", "fields_with", "build_body", "build_query"],
    "description": "Body/query serialization and response deserialization",
    "tier": "tier1_runtime",
    "module": "serialize",
}
