"""
endpoint_sdk.tier1_runtime.url
────────────────────────────────
Builds the absolute URL of an endpoint call: interpolates ``{field}``
placeholders in the relative path, joins it onto the client's base address
and appends query parameters.

Joining never produces an empty path segment and never drops a separator,
whatever the combination of trailing/leading slashes on the two halves.
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any
from urllib.parse import quote

import httpx

from endpoint_sdk.tier0_core.errors import (
    PathInterpolationError,
    UrlBuildError,
    UrlParseError,
)
from endpoint_sdk.tier0_core.logging import get_logger

log = get_logger(__name__)

_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")

# RFC 3986 pchar minus the percent sign, which is always escaped
_SEGMENT_SAFE = "!$&'()*+,;=:@"


def placeholders(template: str) -> list[str]:
    """Return the placeholder names in *template*, in order of appearance."""
    return [name.strip() for name in _PLACEHOLDER.findall(template)]


def _format_value(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def interpolate_path(template: str, values: Mapping[str, Any]) -> str:
    """
    Substitute every ``{name}`` in *template* with ``values[name]``.

    Raises PathInterpolationError if a placeholder names no value, is empty,
    or resolves to None.
    """

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1).strip()
        if not name.isidentifier():
            raise PathInterpolationError(
                f"Invalid path placeholder {match.group(0)!r} in {template!r}",
                template=template,
                placeholder=name,
            )
        if name not in values:
            raise PathInterpolationError(
                f"Path placeholder {{{name}}} does not match any endpoint field",
                template=template,
                placeholder=name,
            )
        value = values[name]
        if value is None:
            raise PathInterpolationError(
                f"Path placeholder {{{name}}} has no value",
                template=template,
                placeholder=name,
            )
        return _format_value(value)

    return _PLACEHOLDER.sub(_substitute, template)


def _join_path(base_path: str, relative_path: str) -> str:
    segments = [quote(seg, safe=_SEGMENT_SAFE) for seg in relative_path.split("/") if seg]
    base_path = base_path.rstrip("/")
    if not segments:
        return base_path or "/"
    return "/".join([base_path, *segments])


def build_url(
    base: str,
    relative_path: str,
    query: Sequence[tuple[str, str]] = (),
) -> httpx.URL:
    """
    Combine *base*, *relative_path* and *query* into one absolute URL.

    Usage:
        build_url("https://h/base/", "/foobar")     # → https://h/base/foobar
        build_url("https://h", "users/42", [("page", "2")])
    """
    log.debug("url.build", base=base, path=relative_path)

    try:
        url = httpx.URL(base)
    except (httpx.InvalidURL, TypeError) as exc:
        raise UrlParseError(f"Invalid base URL {base!r}: {exc}", url=str(base)) from exc
    if not url.scheme or not url.host:
        raise UrlParseError(f"Base URL {base!r} is not absolute", url=str(base))

    base_path = url.raw_path.decode("ascii").split("?", 1)[0]
    try:
        url = url.copy_with(path=_join_path(base_path, relative_path))
        for key, value in query:
            url = url.copy_add_param(key, value)
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise UrlBuildError(
            f"Could not build URL from {base!r} and {relative_path!r}: {exc}",
            url=str(base),
        ) from exc
    return url


__sdk_export__ = {
    "exports": ["placeholders", "interpolate_path", "build_url"],
    "description": "Path interpolation, base/path joining and query encoding",
    "tier": "tier1_runtime",
    "module": "url",
}
