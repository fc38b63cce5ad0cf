from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

ValidatorFn = Callable[[Any], bool]
PathSpec = Tuple[str, ...]


@dataclass(frozen=True)
class RequiredFieldSpec:
    """
    Canonical description of an assessment config field.

    Attributes
    ----------
    module:
        Logical owner (e.g. "assessment").
    name:
        Logical key ("net_units", "contract_demand", ...).
    paths:
        Candidate YAML paths tried in order, each a tuple of keys such as
        ("site", "contract_demand_kva").
    required:
        True = must be present before the engine is invoked.
    severity:
        "error" or "warning" (warnings are listed but never block).
    description:
        Human-friendly explanation used in error messages / schema dumps.
    validator:
        Optional predicate that returns True when the resolved value is
        acceptable.
    """

    module: str
    name: str
    paths: Sequence[PathSpec]
    required: bool = True
    severity: str = "error"
    description: str = ""
    validator: Optional[ValidatorFn] = field(default=None)


# Global registry keyed by module name
_REGISTRY: Dict[str, List[RequiredFieldSpec]] = {}


def register_required_fields(
    module: str,
    specs: Iterable[RequiredFieldSpec],
) -> None:
    """
    Register field specs for a module, normally at import time.

    Re-registering a (module, name) pair replaces the earlier spec so module
    reloads do not produce duplicate errors.
    """
    current = _REGISTRY.setdefault(module, [])
    for spec in specs:
        current[:] = [s for s in current if s.name != spec.name]
        current.append(spec)


def get_required_fields(module: Optional[str] = None) -> List[RequiredFieldSpec]:
    """Return registered specs, optionally filtered by module."""
    if module is None:
        out: List[RequiredFieldSpec] = []
        for specs in _REGISTRY.values():
            out.extend(specs)
        return out
    return list(_REGISTRY.get(module, []))


def build_schema_dataframe() -> pd.DataFrame:
    """
    Flatten the registry into a DataFrame for inspection.

    Columns: module, name, path_candidates, required, severity, description.
    Handy for handing the expected input sheet to whoever fills in site
    surveys.
    """
    columns = [
        "module",
        "name",
        "path_candidates",
        "required",
        "severity",
        "description",
    ]
    rows: List[Dict[str, Any]] = [
        {
            "module": spec.module,
            "name": spec.name,
            "path_candidates": [".".join(p) for p in spec.paths],
            "required": spec.required,
            "severity": spec.severity,
            "description": spec.description,
        }
        for spec in get_required_fields()
    ]

    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(rows, columns=columns)
    return df.sort_values(["module", "name"]).reset_index(drop=True)


__all__ = [
    "RequiredFieldSpec",
    "register_required_fields",
    "get_required_fields",
    "build_schema_dataframe",
    "ValidatorFn",
    "PathSpec",
]
