"""
endpoint_sdk._registry
─────────────────────────
Internal module registry: the single source of truth for which modules
exist and which names each one exports.

Adding a new module:
  1. Implement it in the right tier
  2. Add ``__sdk_export__`` to the module (``exports``, ``description``,
     ``tier``, ``module``)
  3. Add one tuple to TIER_MODULES below

``endpoint_sdk.__init__`` still imports its public names explicitly; the
registry is what the test-suite checks those imports against.
"""
from __future__ import annotations

import importlib
from typing import Any

# Ordered list of (tier_path, module_name) for every implemented module.
TIER_MODULES: list[tuple[str, str]] = [
    # tier0_core: primitives
    ("tier0_core", "errors"),
    ("tier0_core", "http"),
    ("tier0_core", "config"),
    ("tier0_core", "logging"),
    ("tier0_core", "redact"),
    # tier1_runtime: endpoint compilation and execution
    ("tier1_runtime", "context"),
    ("tier1_runtime", "url"),
    ("tier1_runtime", "serialize"),
    ("tier1_runtime", "client"),
    ("tier1_runtime", "middleware"),
    ("tier1_runtime", "endpoint"),
    # tier3_platform: concrete transports
    ("tier3_platform", "api_client"),
]


def describe_modules() -> list[dict[str, Any]]:
    """Return the ``__sdk_export__`` metadata of every registered module."""
    described: list[dict[str, Any]] = []
    for tier_path, module_name in TIER_MODULES:
        mod = importlib.import_module(f"endpoint_sdk.{tier_path}.{module_name}")
        described.append(getattr(mod, "__sdk_export__", {}))
    return described


def collect_exports() -> dict[str, Any]:
    """
    Resolve every exported name across registered modules.

    Returns:
        Mapping of exported name → object. A name declared in
        ``__sdk_export__`` that the module does not define raises
        AttributeError, so a stale declaration fails loudly.
    """
    exports: dict[str, Any] = {}
    for tier_path, module_name in TIER_MODULES:
        qualified = f"endpoint_sdk.{tier_path}.{module_name}"
        mod = importlib.import_module(qualified)
        export_meta: dict[str, Any] = getattr(mod, "__sdk_export__", {})
        for name in export_meta.get("exports", []):
            if not hasattr(mod, name):
                raise AttributeError(f"{qualified} declares export {name!r} but does not define it")
            exports[name] = getattr(mod, name)
    return exports
