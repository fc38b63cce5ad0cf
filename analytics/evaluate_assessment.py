"""Central site assessment evaluator: load, validate, build inputs, assess."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from analytics.assessment_loader import build_inputs, load_assessment_config
from analytics.export_helpers import result_to_record
from analytics.schema_guard import validate_config
from finance.assessment import assess
from finance.contracts import (
    AmortizationRow,
    CalculationResult,
    FinancingInputs,
    FinancingModel,
    SiteInputs,
)
from finance.loan import amortize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssessmentReport:
    """Everything a presentation layer needs for one assessment."""

    site: SiteInputs
    financing: FinancingInputs
    result: CalculationResult
    schedule: Tuple[AmortizationRow, ...] = ()
    config_path: Optional[str] = None
    advisories: Tuple[str, ...] = ()


def bank_schedule(result: CalculationResult, financing: FinancingInputs) -> List[AmortizationRow]:
    """Monthly schedule for the bank offer; other offers are not amortizing."""
    if FinancingModel.from_value(financing.financing_model) is not FinancingModel.BANK:
        return []
    return amortize(result.loan_principal, financing.bank_interest_rate, financing.loan_term_years)


def evaluate_config(config: Mapping[str, Any], config_path: str = "<memory>") -> AssessmentReport:
    """Validate an already-loaded config and run the engine on it."""
    advisories = validate_config(config, config_path=config_path, modules=["assessment"])
    site, financing = build_inputs(config)
    result = assess(site, financing)

    logger.info(
        "Assessment '%s': %.1f kW recommended, coverage %.1f%%, payback %s months",
        site.customer_name,
        result.recommended_kw,
        result.coverage_percent,
        result.payback_months if result.payback_reachable else "n/a",
    )
    for warning in result.warnings:
        logger.info("Assessment '%s' warning: %s", site.customer_name, warning)

    return AssessmentReport(
        site=site,
        financing=financing,
        result=result,
        schedule=tuple(bank_schedule(result, financing)),
        config_path=config_path,
        advisories=tuple(advisories),
    )


def evaluate_assessment(config_path: str | Path) -> AssessmentReport:
    """
    Evaluate one assessment file end to end.

    Raises
    ------
    FileNotFoundError
        When the file does not exist.
    AssessmentConfigError
        For unreadable files or an unknown financing model.
    ConfigValidationError
        When required survey fields are missing.
    """
    path = Path(config_path)
    logger.info("Loading assessment: %s", path)
    config = load_assessment_config(path)
    return evaluate_config(config, config_path=str(path))


def evaluate_assessment_as_dict(config_path: str | Path) -> Dict[str, Any]:
    """Flat dict form of evaluate_assessment for JSON consumers."""
    report = evaluate_assessment(config_path)
    out = result_to_record(report.result, site_label=report.site.customer_name)
    out["config_path"] = report.config_path
    out["financing_model"] = FinancingModel.from_value(report.financing.financing_model).value
    out["region"] = report.site.region_key
    return out


__all__ = [
    "AssessmentReport",
    "bank_schedule",
    "evaluate_config",
    "evaluate_assessment",
    "evaluate_assessment_as_dict",
]
