"""
Site assessment configuration loader.

Responsibilities:
- Load YAML / JSON assessment files.
- Register the fields a site survey must provide before the engine runs.
- Turn raw (often hand-typed) values into SiteInputs / FinancingInputs,
  substituting the sales-form defaults for blank or unparseable entries.

The engine itself never validates; everything that can go wrong with raw
text is handled here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from analytics.config_schema import RequiredFieldSpec, register_required_fields
from analytics.schema_guard import resolve_field
from finance.contracts import FinancingInputs, FinancingModel, SiteInputs
from finance.policies import DEFAULT_REGION, REGION_POLICIES
from finance.utils import as_bool, as_float

logger = logging.getLogger(__name__)


class AssessmentConfigError(ValueError):
    """Configuration-level error for assessment loading."""


def _is_number(v: Any) -> bool:
    return as_float(v) is not None


def _non_blank(v: Any) -> bool:
    return bool(str(v).strip())


_ASSESSMENT_SPECS = [
    RequiredFieldSpec(
        module="assessment",
        name="customer_name",
        paths=[("customer", "name")],
        description="Customer or business name shown on the report.",
        validator=_non_blank,
    ),
    RequiredFieldSpec(
        module="assessment",
        name="pin_code",
        paths=[("customer", "pin_code"), ("site", "pin_code")],
        description="PIN code used for the irradiation lookup.",
        validator=_non_blank,
    ),
    RequiredFieldSpec(
        module="assessment",
        name="net_units",
        paths=[("site", "net_units")],
        description="Monthly net consumption from the power bill (kWh).",
        validator=_is_number,
    ),
    RequiredFieldSpec(
        module="assessment",
        name="contract_demand",
        paths=[("site", "contract_demand_kva"), ("site", "cmd")],
        description="Contracted maximum demand (kVA).",
        validator=_is_number,
    ),
    RequiredFieldSpec(
        module="assessment",
        name="available_space",
        paths=[("site", "available_space_sqft")],
        description="Shadow-free roof or ground area (sqft).",
        validator=_is_number,
    ),
    RequiredFieldSpec(
        module="assessment",
        name="region",
        paths=[("site", "region")],
        required=False,
        severity="warning",
        description="Policy region key; unknown keys use the default region.",
        validator=lambda v: str(v) in REGION_POLICIES,
    ),
]

register_required_fields("assessment", _ASSESSMENT_SPECS)


# Sales-form defaults for optional values
DEFAULTS: Dict[str, Any] = {
    "space_utilization_pct": 90.0,
    "region": DEFAULT_REGION,
    "tariff_per_unit": 7.5,
    "system_cost_per_kw": 1000.0,
    "tax_pct": 18.0,
    "enhancement_cost_per_kva": 500.0,
    "sqft_per_kw": 100.0,
    "model": FinancingModel.BANK.value,
    "bank_interest_rate_pct": 8.9,
    "flat_rate_pct": 8.75,
    "loan_term_years": 6.0,
    "private_bank": False,
    "business_type": "industry",
}


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def _load_raw_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Assessment config not found: {path}")

    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as f:
        if suffix in (".yml", ".yaml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise AssessmentConfigError(
                f"Unsupported assessment config extension '{suffix}' for {path}"
            )

    if data is None:
        raise AssessmentConfigError(f"Empty configuration in file: {path}")

    if not isinstance(data, dict):
        raise AssessmentConfigError(
            f"Expected a mapping at top level of {path}, "
            f"got {type(data).__name__}"
        )

    return data


def _section(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, Mapping):
        raise AssessmentConfigError(
            f"Section '{name}' must be a mapping, got {type(value).__name__}"
        )
    return value


def _number(section: Mapping[str, Any], key: str, default: float, *aliases: str) -> float:
    raw: Optional[Any] = None
    for k in (key,) + aliases:
        if k in section:
            raw = section[k]
            break
    value = as_float(raw)
    if value is None:
        if raw not in (None, ""):
            logger.warning("Unparseable value %r for '%s'; using %s", raw, key, default)
        return float(default)
    return value


def _optional_number(section: Mapping[str, Any], key: str) -> Optional[float]:
    raw = section.get(key)
    value = as_float(raw)
    if value is None and raw not in (None, ""):
        logger.warning("Unparseable value %r for '%s'; treating it as not supplied", raw, key)
    return value


def _text(section: Mapping[str, Any], key: str, default: str = "") -> str:
    raw = section.get(key)
    return default if raw is None else str(raw).strip()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_assessment_config(path: str | Path) -> Dict[str, Any]:
    """
    Load an assessment file and attach meta.source_path for traceability.

    Does not validate fields; call analytics.schema_guard.validate_config or
    use analytics.evaluate_assessment for the full chain.
    """
    p = Path(path)
    cfg = _load_raw_config(p)
    meta = cfg.setdefault("meta", {})
    if isinstance(meta, dict):
        meta.setdefault("source_path", str(p))
    return cfg


def build_site_inputs(config: Mapping[str, Any]) -> SiteInputs:
    """Build SiteInputs from the customer/site/pricing sections."""
    customer = _section(config, "customer")
    site = _section(config, "site")
    pricing = _section(config, "pricing")

    transformer = _optional_number(site, "transformer_capacity_kva")
    region = _text(site, "region", DEFAULTS["region"]) or DEFAULTS["region"]
    if region not in REGION_POLICIES:
        logger.debug("Region '%s' not in policy table; default policy applies", region)

    pin_code = resolve_field(config, [("customer", "pin_code"), ("site", "pin_code")])

    return SiteInputs(
        customer_name=_text(customer, "name"),
        business_type=_text(customer, "business_type", DEFAULTS["business_type"]),
        address=_text(customer, "address"),
        pin_code="" if pin_code is None else str(pin_code).strip(),
        contact_number=_text(customer, "contact_number"),
        email=_text(customer, "email"),
        net_units=_number(site, "net_units", 0.0),
        contract_demand=_number(site, "contract_demand_kva", 0.0, "cmd"),
        transformer_capacity=transformer,
        available_space=_number(site, "available_space_sqft", 0.0),
        space_utilization=_number(site, "space_utilization_pct", DEFAULTS["space_utilization_pct"]),
        region_key=region,
        tariff_per_unit=_number(pricing, "tariff_per_unit", DEFAULTS["tariff_per_unit"]),
        system_cost_per_kw=_number(pricing, "system_cost_per_kw", DEFAULTS["system_cost_per_kw"]),
        tax_percent=_number(pricing, "tax_pct", DEFAULTS["tax_pct"], "gst_pct"),
        enhancement_cost_per_kva=_number(
            pricing, "enhancement_cost_per_kva", DEFAULTS["enhancement_cost_per_kva"]
        ),
        sqft_per_kw=_number(pricing, "sqft_per_kw", DEFAULTS["sqft_per_kw"]),
    )


def build_financing_inputs(config: Mapping[str, Any]) -> FinancingInputs:
    """Build FinancingInputs from the financing section."""
    financing = _section(config, "financing")

    model_raw = financing.get("model", DEFAULTS["model"])
    try:
        model = FinancingModel.from_value(model_raw)
    except ValueError as exc:
        choices = ", ".join(m.value for m in FinancingModel)
        raise AssessmentConfigError(
            f"financing.model must be one of {choices}; got {model_raw!r}"
        ) from exc

    return FinancingInputs(
        financing_model=model,
        bank_interest_rate=_number(
            financing, "bank_interest_rate_pct", DEFAULTS["bank_interest_rate_pct"]
        ),
        flat_rate=_number(financing, "flat_rate_pct", DEFAULTS["flat_rate_pct"], "udb_flat_rate_pct"),
        uses_private_bank=as_bool(financing.get("private_bank"), DEFAULTS["private_bank"]),
        loan_term_years=_number(financing, "loan_term_years", DEFAULTS["loan_term_years"]),
    )


def build_inputs(config: Mapping[str, Any]) -> Tuple[SiteInputs, FinancingInputs]:
    """Build both engine input records from a loaded config."""
    return build_site_inputs(config), build_financing_inputs(config)


__all__ = [
    "AssessmentConfigError",
    "DEFAULTS",
    "load_assessment_config",
    "build_site_inputs",
    "build_financing_inputs",
    "build_inputs",
]
