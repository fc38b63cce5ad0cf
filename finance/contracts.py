"""Site assessment contracts and data structures.

Central repository for the dataclasses exchanged between the loader, the
assessment engine and the export layer. Everything here is frozen: inputs
are built fresh per calculation and results are snapshots of one input set.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional, Tuple


# =============================================================================
# Inputs
# =============================================================================


class FinancingModel(str, Enum):
    """Closed set of financing offers; values match the sales form."""

    BANK = "bank"
    FLAT_RATE = "udb"
    ZERO_INVESTMENT = "zero"

    @classmethod
    def from_value(cls, value: Any) -> "FinancingModel":
        """Resolve a form value or member name ("udb", "FLAT_RATE", ...)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text.lower() == member.value or text.upper() == member.name:
                return member
        raise ValueError(f"Unknown financing model: {value!r}")


@dataclass(frozen=True)
class SiteInputs:
    """Electrical, space and pricing parameters of one customer site."""

    net_units: float
    contract_demand: float
    available_space: float
    customer_name: str = ""
    business_type: str = "industry"
    address: str = ""
    pin_code: str = ""
    contact_number: str = ""
    email: str = ""
    transformer_capacity: Optional[float] = None
    space_utilization: float = 90.0
    region_key: str = "telangana"
    tariff_per_unit: float = 7.5
    system_cost_per_kw: float = 1000.0
    tax_percent: float = 18.0
    enhancement_cost_per_kva: float = 500.0
    sqft_per_kw: float = 100.0


@dataclass(frozen=True)
class FinancingInputs:
    financing_model: FinancingModel = FinancingModel.BANK
    bank_interest_rate: float = 8.9
    flat_rate: float = 8.75
    uses_private_bank: bool = False
    loan_term_years: float = 6.0


# =============================================================================
# Outputs
# =============================================================================


@dataclass(frozen=True)
class FinancingTerms:
    """Outcome of one financing branch, before ROI is applied."""

    down_payment: float
    loan_principal: float
    total_interest: float
    monthly_payment: float
    warnings: Tuple[str, ...] = ()

    @property
    def total_repayable(self) -> float:
        return self.down_payment + self.loan_principal + self.total_interest


@dataclass(frozen=True)
class AmortizationRow:
    """One month of an amortizing loan."""

    period: int
    payment: float
    interest: float
    principal_paid: float
    balance: float


@dataclass(frozen=True)
class CalculationResult:
    """Complete sizing and financials for one site assessment.

    ``payback_years`` is ``math.inf`` and ``payback_months`` is ``None`` when
    the system produces no savings; see ``payback_reachable``.
    """

    # Capacity (kW)
    permitted_by_contract_kw: float
    permitted_by_transformer_kw: Optional[float]
    permitted_by_policy_kw: float
    space_limited_kw: float
    recommended_kw: float

    # Generation
    units_per_kw_per_day: float
    daily_units: float
    monthly_units: float
    annual_units: float
    coverage_percent: float

    # Costs
    base_system_cost: float
    tax_amount: float
    total_system_cost: float

    # Contract demand enhancement
    enhancement_needed: bool
    additional_kw_possible: float
    required_additional_contract_demand: float
    enhancement_cost_total: float

    # Financing
    down_payment: float
    loan_principal: float
    total_interest: float
    monthly_payment: float
    total_repayable: float

    # ROI
    annual_savings: float
    payback_years: float
    payback_months: Optional[int]

    warnings: Tuple[str, ...] = ()

    @property
    def potential_capacity_kw(self) -> float:
        """Capacity the site could host after a contract demand enhancement."""
        return self.recommended_kw + self.additional_kw_possible

    @property
    def payback_reachable(self) -> bool:
        return self.payback_months is not None

    def as_dict(self) -> Dict[str, Any]:
        """Flat mapping of every field; warnings become a list."""
        out: Dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        out["warnings"] = list(self.warnings)
        out["potential_capacity_kw"] = self.potential_capacity_kw
        return out


__all__ = [
    "FinancingModel",
    "SiteInputs",
    "FinancingInputs",
    "FinancingTerms",
    "AmortizationRow",
    "CalculationResult",
]
