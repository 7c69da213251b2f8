"""
endpoint_sdk.tier1_runtime.context
────────────────────────────────────
Request context: correlation IDs carried across async boundaries into logs
and, through ContextMiddleware, into outgoing request headers.

Uses Python contextvars for async-safe, framework-agnostic storage.
Mirrored into structlog contextvars so every log line carries the IDs.
"""
from __future__ import annotations

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog


# ── Domain model ─────────────────────────────────────────────────────────────

@dataclass
class RequestContext:
    """Correlation metadata for the calls made in the current scope."""
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    trace_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


# ── ContextVar storage ────────────────────────────────────────────────────────

_ctx: ContextVar[RequestContext | None] = ContextVar(
    "endpoint_request_context",
    default=None,
)


# ── Public API ────────────────────────────────────────────────────────────────

def get_context() -> RequestContext | None:
    """Return the current request context, if one has been set."""
    return _ctx.get()


def set_context(ctx: RequestContext) -> None:
    """Set the request context for the current async scope."""
    _ctx.set(ctx)
    structlog.contextvars.bind_contextvars(
        request_id=ctx.request_id,
        trace_id=ctx.trace_id,
    )


def new_context(trace_id: str | None = None, **metadata: Any) -> RequestContext:
    """Create and activate a new request context. Returns the new context."""
    ctx = RequestContext(trace_id=trace_id, metadata=metadata)
    set_context(ctx)
    return ctx


def clear_request_context() -> None:
    _ctx.set(None)
    structlog.contextvars.unbind_contextvars("request_id", "trace_id")


__sdk_export__ = {
    "exports": ["RequestContext", "get_context", "set_context", "new_context"],
    "description": "Request context via contextvars (request_id, trace_id)",
    "tier": "tier1_runtime",
    "module": "context",
}
