"""
endpoint_sdk.tier0_core.logging
────────────────────────────────
Structured logs for endpoint execution. Every event carries the active
request_id/trace_id and passes through credential redaction before it is
rendered.

Minimal stack: structlog (stdout JSON or console)
Configure via: ENDPOINT_LOG_LEVEL, ENDPOINT_LOG_FORMAT=json|console

Output goes to the ``endpoint_sdk`` stdlib logger only; the host
application's root logger is left alone.
"""
from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from endpoint_sdk.tier0_core.config import EndpointConfig, get_config
from endpoint_sdk.tier0_core.redact import structlog_redact_processor

_LOGGER_NAME = "endpoint_sdk"


# ── Configuration ─────────────────────────────────────────────────────────────

def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog_redact_processor,
    ]


def _renderer(config: EndpointConfig) -> Any:
    if config.log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def _configure(config: EndpointConfig) -> None:
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(config),
            ],
        )
    )

    sdk_logger = logging.getLogger(_LOGGER_NAME)
    sdk_logger.handlers = [handler]
    sdk_logger.setLevel(level)
    sdk_logger.propagate = False


# ── Public API ────────────────────────────────────────────────────────────────

_configured = False


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structured logger; configures structlog on first use.

    Usage:
        log = get_logger(__name__)
        log.info("client.sending", method="GET", url="https://api/users/1")
    """
    global _configured
    if not _configured:
        _configure(get_config())
        _configured = True
    return structlog.get_logger(name or _LOGGER_NAME)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every log event emitted from the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__sdk_export__ = {
    "exports": ["get_logger", "bind_context", "clear_context"],
    "description": "structlog-based structured logging with redaction",
    "tier": "tier0_core",
    "module": "logging",
}
