"""
Schema guard for site assessment configs.

Sits on top of analytics.config_schema and:
  * lazily imports the modules that register field specs; and
  * checks a raw config dict against every registered spec before any
    numbers reach the engine.

Usage::

    from analytics.schema_guard import validate_config

    validate_config(
        raw_config=config,
        config_path="inputs/hyderabad_factory.yaml",
        modules=["assessment"],
    )
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from analytics.config_schema import RequiredFieldSpec, get_required_fields
from finance.utils import get_nested

logger = logging.getLogger(__name__)

PathSpec = Tuple[str, ...]


class ConfigValidationError(RuntimeError):
    """Raised when an assessment config is missing required fields."""


# Logical module name -> import path whose import registers its specs
_MODULE_IMPORTS: Dict[str, str] = {
    "assessment": "analytics.assessment_loader",
}


def _ensure_module_registered(name: str) -> None:
    module_path = _MODULE_IMPORTS.get(name)
    if not module_path:
        return
    importlib.import_module(module_path)


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def resolve_field(raw_config: Mapping[str, Any], paths: Sequence[PathSpec]) -> Any:
    """
    Return the first non-None value found along the candidate paths.

    Blank strings are treated as missing, the same way an empty form field is.
    """
    for path in paths:
        if not path:
            continue
        val = get_nested(raw_config, path)
        if isinstance(val, str) and not val.strip():
            continue
        if val is not None:
            return val
    return None


def _check_spec(raw_config: Mapping[str, Any], spec: RequiredFieldSpec) -> bool:
    val = resolve_field(raw_config, spec.paths)
    if val is None:
        return not spec.required
    if spec.validator is None:
        return True
    try:
        return bool(spec.validator(val))
    except (TypeError, ValueError):
        return False


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_config(
    raw_config: Mapping[str, Any],
    config_path: str,
    modules: Sequence[str] = ("assessment",),
) -> List[str]:
    """
    Validate a raw YAML/JSON config against the registered field specs.

    Steps:
      1) Import each module so its registration runs.
      2) Check every spec; error-severity failures are collected.
      3) Raise ConfigValidationError listing all failures at once.

    Returns:
        Messages for warning-severity fields that failed (never raised).

    Raises:
        ConfigValidationError: if any error-severity field is missing or
        invalid.
    """
    for m in modules:
        _ensure_module_registered(m)

    specs: List[RequiredFieldSpec] = []
    for m in modules:
        specs.extend(get_required_fields(m))

    missing: List[str] = []
    advisories: List[str] = []

    for spec in specs:
        if _check_spec(raw_config, spec):
            continue
        path_labels = [".".join(p) for p in spec.paths] or ["<no paths registered>"]
        message = f"{spec.name} (paths: {', '.join(path_labels)})"
        if spec.severity.lower() == "error":
            missing.append(message)
        else:
            advisories.append(message)

    for message in advisories:
        logger.warning("Config '%s': check field %s", config_path, message)

    if missing:
        details = "; ".join(sorted(missing))
        raise ConfigValidationError(
            f"Config '{config_path}' is missing or has invalid required fields: {details}"
        )

    return advisories


__all__ = [
    "ConfigValidationError",
    "resolve_field",
    "validate_config",
]
