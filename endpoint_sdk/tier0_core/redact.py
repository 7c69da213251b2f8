"""
endpoint_sdk.tier0_core.redact
───────────────────────────────
Credential scrubbing for what the SDK logs about outgoing calls: header
mappings, URLs (userinfo passwords and query-string secrets) and structlog
event dicts. Nothing here touches the request that is actually sent.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

REDACTED = "[REDACTED]"

# Compared lower-cased
_SENSITIVE_HEADERS: frozenset[str] = frozenset({
    "authorization", "proxy-authorization", "cookie", "set-cookie",
    "x-api-key", "x-api-token", "x-auth-token", "x-csrf-token",
})

# Event keys and query parameter names
_SENSITIVE_NAMES: frozenset[str] = frozenset({
    "password", "passwd", "secret", "token", "access_token", "refresh_token",
    "api_key", "apikey", "client_secret", "private_key", "signature",
})

_AUTH_SCHEME = re.compile(r"\b(Bearer|Basic|Token)\s+[A-Za-z0-9\-._~+/]+=*", re.I)
_USERINFO = re.compile(r"(//[^/@:\s]+:)[^/@\s]+@")
_QUERY_SECRET = re.compile(
    r"([?&](?:%s)=)[^&#\s]*" % "|".join(re.escape(n) for n in sorted(_SENSITIVE_NAMES)),
    re.I,
)


def is_sensitive(name: str) -> bool:
    """True if a header, query parameter or log key named *name* holds a secret."""
    lowered = name.lower()
    return lowered in _SENSITIVE_HEADERS or lowered in _SENSITIVE_NAMES


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of *headers* with credential-bearing values replaced."""
    return {k: REDACTED if is_sensitive(k) else v for k, v in headers.items()}


def redact_dict(data: Mapping[str, Any], *, deep: bool = True) -> dict[str, Any]:
    """
    Return a copy of *data* with sensitive keys replaced by REDACTED,
    recursing into nested mappings and lists of mappings when *deep*.
    """
    result: dict[str, Any] = {}
    for k, v in data.items():
        if isinstance(k, str) and is_sensitive(k):
            result[k] = REDACTED
        elif deep and isinstance(v, Mapping):
            result[k] = redact_dict(v)
        elif deep and isinstance(v, list):
            result[k] = [redact_dict(i) if isinstance(i, Mapping) else i for i in v]
        else:
            result[k] = v
    return result


def scrub_string(text: str) -> str:
    """Scrub auth-scheme tokens, URL userinfo passwords and query-string secrets."""
    text = _AUTH_SCHEME.sub(rf"\1 {REDACTED}", text)
    text = _USERINFO.sub(rf"\1{REDACTED}@", text)
    return _QUERY_SECRET.sub(rf"\1{REDACTED}", text)


def structlog_redact_processor(
    logger: Any,
    method: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog processor: redact sensitive keys, then scrub a ``url`` value."""
    event_dict = redact_dict(event_dict)
    url = event_dict.get("url")
    if isinstance(url, str):
        event_dict["url"] = scrub_string(url)
    return event_dict


__sdk_export__ = {
    "exports": ["redact_dict", "redact_headers", "scrub_string", "is_sensitive"],
    "description": "Credential redaction for headers, URLs and log events",
    "tier": "tier0_core",
    "module": "redact",
}
