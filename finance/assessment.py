"""Site assessment engine: sizing, generation, cost, financing and payback.

``assess`` is a pure function of its two input records. It never raises for
well-typed inputs; suspicious data (no consumption, a weak transformer,
generation above consumption) is reported through ordered warning strings
so sales staff always get a number back.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

from finance.contracts import CalculationResult, FinancingInputs, SiteInputs
from finance.irradiation import yield_factor
from finance.loan import finance_project
from finance.policies import RegionPolicy, policy_for

logger = logging.getLogger(__name__)

DEFAULT_TRANSFORMER_MULTIPLIER = 0.50
TRANSFORMER_HEADROOM = 0.8
DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365
PRIVATE_BANK_PAYBACK_PENALTY_YEARS = 1.0

WARN_TRANSFORMER = "Transformer capacity may restrict CMD - consult electrical team"
WARN_SPACE_RATIO = "Space required per kW must be positive - space-limited capacity set to 0"
WARN_SPACE_VALUE = "Available space is not a finite number - space-limited capacity set to 0"
WARN_NO_CONSUMPTION = "Net units consumed is zero or negative - please verify bill data"
WARN_OVER_COVERAGE = "Estimated generation exceeds consumption - verify net metering policy"
WARN_NO_SAVINGS = "No annual savings - payback period cannot be reached"
WARN_PAYBACK_UNDEFINED = "Payback period could not be computed - verify cost and tariff inputs"


# ============================================================================
# SIZING
# ============================================================================


def _transformer_limit(site: SiteInputs, policy: RegionPolicy) -> Optional[float]:
    """Transformer-permitted kW; a policy multiplier of None or 0.0 falls back to 0.50."""
    # A blank or zero rating on the form means "not supplied".
    if not site.transformer_capacity:
        return None
    multiplier = policy.transformer_multiplier or DEFAULT_TRANSFORMER_MULTIPLIER
    return site.transformer_capacity * multiplier


def _space_limit(site: SiteInputs, warnings: List[str]) -> float:
    if not site.sqft_per_kw > 0:
        warnings.append(WARN_SPACE_RATIO)
        return 0.0
    usable_sqft = site.available_space * (site.space_utilization / 100.0)
    capacity = usable_sqft / site.sqft_per_kw
    if not math.isfinite(capacity):
        warnings.append(WARN_SPACE_VALUE)
        return 0.0
    return float(math.floor(capacity))


# ============================================================================
# CORE ENGINE
# ============================================================================


def assess(site: SiteInputs, financing: FinancingInputs) -> CalculationResult:
    """
    Size a solar system for ``site`` and price it under ``financing``.

    Returns
    -------
    CalculationResult
        Immutable snapshot; warnings appear in the order they were raised.
    """
    warnings: List[str] = []
    policy = policy_for(site.region_key)

    # Capacity permitted by regulation
    permitted_by_contract = site.contract_demand * policy.contract_demand_multiplier
    permitted_by_transformer = _transformer_limit(site, policy)
    if permitted_by_transformer is not None:
        if site.transformer_capacity * TRANSFORMER_HEADROOM < site.contract_demand:
            warnings.append(WARN_TRANSFORMER)
        permitted_by_policy = min(permitted_by_contract, permitted_by_transformer)
    else:
        permitted_by_policy = permitted_by_contract

    space_limited = _space_limit(site, warnings)
    recommended = min(permitted_by_policy, space_limited)

    # Generation (fixed 30/365-day months and years)
    units_per_kw = yield_factor(site.pin_code)
    daily_units = recommended * units_per_kw
    monthly_units = daily_units * DAYS_PER_MONTH
    annual_units = daily_units * DAYS_PER_YEAR

    if site.net_units > 0:
        coverage = monthly_units / site.net_units * 100.0
    else:
        coverage = 0.0
        warnings.append(WARN_NO_CONSUMPTION)

    if coverage > 100:
        warnings.append(WARN_OVER_COVERAGE)

    # System cost
    base_cost = recommended * site.system_cost_per_kw
    tax_amount = base_cost * (site.tax_percent / 100.0)
    total_cost = base_cost + tax_amount

    # Contract demand enhancement opportunity
    enhancement_needed = space_limited > permitted_by_policy
    additional_kw = max(0.0, space_limited - permitted_by_policy)
    if policy.contract_demand_multiplier > 0:
        required_cmd = additional_kw / policy.contract_demand_multiplier
    else:
        required_cmd = 0.0
    enhancement_cost = required_cmd * site.enhancement_cost_per_kva

    # Financing
    terms = finance_project(total_cost, financing)
    warnings.extend(terms.warnings)
    total_repayable = terms.total_repayable

    # ROI
    annual_savings = annual_units * site.tariff_per_unit
    payback_years = math.inf
    payback_months: Optional[int] = None
    if annual_savings > 0:
        years = total_repayable / annual_savings
        if financing.uses_private_bank:
            years += PRIVATE_BANK_PAYBACK_PENALTY_YEARS
        if math.isfinite(years * 12):
            payback_years = years
            payback_months = math.ceil(years * 12)
        else:
            warnings.append(WARN_PAYBACK_UNDEFINED)
    else:
        warnings.append(WARN_NO_SAVINGS)

    logger.debug(
        "Assessed %s: policy=%s recommended=%.1fkW coverage=%.1f%% payback=%s warnings=%d",
        site.customer_name or "<unnamed>",
        policy.name,
        recommended,
        coverage,
        payback_months,
        len(warnings),
    )

    return CalculationResult(
        permitted_by_contract_kw=permitted_by_contract,
        permitted_by_transformer_kw=permitted_by_transformer,
        permitted_by_policy_kw=permitted_by_policy,
        space_limited_kw=space_limited,
        recommended_kw=recommended,
        units_per_kw_per_day=units_per_kw,
        daily_units=daily_units,
        monthly_units=monthly_units,
        annual_units=annual_units,
        coverage_percent=coverage,
        base_system_cost=base_cost,
        tax_amount=tax_amount,
        total_system_cost=total_cost,
        enhancement_needed=enhancement_needed,
        additional_kw_possible=additional_kw,
        required_additional_contract_demand=required_cmd,
        enhancement_cost_total=enhancement_cost,
        down_payment=terms.down_payment,
        loan_principal=terms.loan_principal,
        total_interest=terms.total_interest,
        monthly_payment=terms.monthly_payment,
        total_repayable=total_repayable,
        annual_savings=annual_savings,
        payback_years=payback_years,
        payback_months=payback_months,
        warnings=tuple(warnings),
    )


__all__ = [
    "WARN_TRANSFORMER",
    "WARN_SPACE_RATIO",
    "WARN_NO_CONSUMPTION",
    "WARN_OVER_COVERAGE",
    "WARN_NO_SAVINGS",
    "WARN_SPACE_VALUE",
    "WARN_PAYBACK_UNDEFINED",
    "assess",
]
