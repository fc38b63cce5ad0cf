"""
Unit tests for finance.assessment.assess.

Covers:
- Capacity sizing (contract demand, transformer, space) and its invariants.
- Generation, coverage and the consumption warnings.
- Cost, enhancement opportunity and ROI, including the private bank
  penalty and the zero-savings guard.
"""

from __future__ import annotations

import math
from dataclasses import replace

import pytest

from finance import assessment as assessment_mod
from finance.assessment import (
    WARN_NO_CONSUMPTION,
    WARN_NO_SAVINGS,
    WARN_OVER_COVERAGE,
    WARN_PAYBACK_UNDEFINED,
    WARN_SPACE_RATIO,
    WARN_SPACE_VALUE,
    WARN_TRANSFORMER,
    assess,
)
from finance.contracts import FinancingInputs, FinancingModel, SiteInputs
from finance.loan import LOAN_TERM_WARNING
from finance.policies import RegionPolicy


def _site(**overrides) -> SiteInputs:
    """Telangana site that is limited by policy (80 kW) rather than space (90 kW)."""
    base = SiteInputs(
        customer_name="Test Works",
        pin_code="500081",
        net_units=10_000.0,
        contract_demand=100.0,
        available_space=10_000.0,
        space_utilization=90.0,
        region_key="telangana",
        tariff_per_unit=7.5,
        system_cost_per_kw=1000.0,
        tax_percent=18.0,
        enhancement_cost_per_kva=500.0,
        sqft_per_kw=100.0,
    )
    return replace(base, **overrides)


def _bank(**overrides) -> FinancingInputs:
    base = FinancingInputs(
        financing_model=FinancingModel.BANK,
        bank_interest_rate=8.9,
        flat_rate=8.75,
        uses_private_bank=False,
        loan_term_years=6,
    )
    return replace(base, **overrides)


def test_policy_limited_scenario_from_sales_example():
    result = assess(_site(), _bank())

    assert result.permitted_by_contract_kw == pytest.approx(80.0)
    assert result.permitted_by_transformer_kw is None
    assert result.permitted_by_policy_kw == pytest.approx(80.0)
    assert result.space_limited_kw == 90
    assert result.recommended_kw == pytest.approx(80.0)


def test_recommended_is_min_of_policy_and_space():
    for space in (0.0, 500.0, 5_000.0, 8_888.0, 10_000.0, 50_000.0):
        result = assess(_site(available_space=space), _bank())
        assert result.recommended_kw == min(result.permitted_by_policy_kw, result.space_limited_kw)
        assert result.recommended_kw <= result.permitted_by_policy_kw
        assert result.recommended_kw <= result.space_limited_kw


def test_space_limited_capacity_is_monotonic_in_space():
    previous = -1.0
    for space in range(0, 20_001, 250):
        result = assess(_site(available_space=float(space)), _bank())
        assert result.space_limited_kw >= previous
        previous = result.space_limited_kw


def test_space_limited_capacity_is_floored():
    # 1,234 sqft * 90% / 100 sqft per kW = 11.106 kW -> 11 kW
    result = assess(_site(available_space=1_234.0), _bank())
    assert result.space_limited_kw == 11
    assert result.recommended_kw == 11


def test_non_positive_sqft_per_kw_yields_zero_space_capacity_with_warning():
    result = assess(_site(sqft_per_kw=0.0), _bank())
    assert result.space_limited_kw == 0
    assert result.recommended_kw == 0
    assert WARN_SPACE_RATIO in result.warnings


@pytest.mark.parametrize("space", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_space_yields_zero_space_capacity_with_warning(space):
    result = assess(_site(available_space=space), _bank())

    assert result.space_limited_kw == 0
    assert result.recommended_kw == 0
    assert WARN_SPACE_VALUE in result.warnings


def test_nan_sqft_per_kw_is_treated_as_non_positive():
    result = assess(_site(sqft_per_kw=float("nan")), _bank())
    assert result.space_limited_kw == 0
    assert WARN_SPACE_RATIO in result.warnings


def test_transformer_limit_and_warning():
    # 100 kVA * 0.8 = 80 < 150 kVA CMD -> warning; limit = 100 * 0.50
    result = assess(_site(contract_demand=150.0, transformer_capacity=100.0), _bank())

    assert result.permitted_by_contract_kw == pytest.approx(120.0)
    assert result.permitted_by_transformer_kw == pytest.approx(50.0)
    assert result.permitted_by_policy_kw == pytest.approx(50.0)
    assert result.warnings[0] == WARN_TRANSFORMER


def test_adequate_transformer_raises_no_warning():
    result = assess(_site(contract_demand=150.0, transformer_capacity=250.0), _bank())

    assert result.permitted_by_transformer_kw == pytest.approx(125.0)
    assert result.permitted_by_policy_kw == pytest.approx(120.0)
    assert WARN_TRANSFORMER not in result.warnings


def test_transformer_multiplier_defaults_to_half_when_policy_has_none():
    result = assess(
        _site(region_key="karnataka", contract_demand=100.0, transformer_capacity=150.0),
        _bank(),
    )
    assert result.permitted_by_contract_kw == pytest.approx(100.0)
    assert result.permitted_by_transformer_kw == pytest.approx(75.0)


def test_zero_transformer_multiplier_falls_back_to_half(monkeypatch):
    custom = RegionPolicy(name="Custom", contract_demand_multiplier=1.0, transformer_multiplier=0.0)
    monkeypatch.setattr(assessment_mod, "policy_for", lambda key: custom)

    result = assess(_site(contract_demand=100.0, transformer_capacity=150.0), _bank())
    assert result.permitted_by_transformer_kw == pytest.approx(75.0)


def test_zero_transformer_capacity_counts_as_not_supplied():
    result = assess(_site(transformer_capacity=0.0), _bank())
    assert result.permitted_by_transformer_kw is None
    assert WARN_TRANSFORMER not in result.warnings


def test_generation_and_coverage():
    result = assess(_site(), _bank())

    assert result.units_per_kw_per_day == pytest.approx(5.2)
    assert result.daily_units == pytest.approx(416.0)
    assert result.monthly_units == pytest.approx(12_480.0)
    assert result.annual_units == pytest.approx(151_840.0)
    assert result.coverage_percent == pytest.approx(124.8)
    assert WARN_OVER_COVERAGE in result.warnings


def test_zero_consumption_gives_zero_coverage_and_warning():
    result = assess(_site(net_units=0.0), _bank())

    assert result.coverage_percent == 0
    assert math.isfinite(result.coverage_percent)
    assert WARN_NO_CONSUMPTION in result.warnings
    assert WARN_OVER_COVERAGE not in result.warnings


def test_negative_consumption_is_treated_like_zero():
    result = assess(_site(net_units=-50.0), _bank())
    assert result.coverage_percent == 0
    assert WARN_NO_CONSUMPTION in result.warnings


def test_unknown_region_and_pin_fall_back_silently():
    result = assess(_site(region_key="atlantis", pin_code="999999"), _bank())

    assert result.units_per_kw_per_day == pytest.approx(4.5)
    # default region is telangana (80% of CMD)
    assert result.permitted_by_contract_kw == pytest.approx(80.0)
    assert WARN_TRANSFORMER not in result.warnings


def test_cost_breakdown():
    result = assess(_site(), _bank())

    assert result.base_system_cost == pytest.approx(80_000.0)
    assert result.tax_amount == pytest.approx(14_400.0)
    assert result.total_system_cost == pytest.approx(94_400.0)


def test_enhancement_opportunity_when_space_exceeds_policy():
    result = assess(_site(), _bank())

    assert result.enhancement_needed is True
    assert result.additional_kw_possible == pytest.approx(10.0)
    assert result.required_additional_contract_demand == pytest.approx(12.5)
    assert result.enhancement_cost_total == pytest.approx(6_250.0)
    assert result.potential_capacity_kw == pytest.approx(90.0)


def test_no_enhancement_when_space_is_binding():
    result = assess(_site(available_space=2_000.0), _bank())

    assert result.enhancement_needed is False
    assert result.additional_kw_possible == 0
    assert result.required_additional_contract_demand == 0
    assert result.enhancement_cost_total == 0


def test_bank_financing_totals_are_consistent():
    result = assess(_site(), _bank())

    assert result.down_payment == pytest.approx(9_440.0)
    assert result.loan_principal == pytest.approx(84_960.0)
    assert result.total_interest == pytest.approx(result.monthly_payment * 72 - result.loan_principal)
    assert result.total_repayable == pytest.approx(
        result.down_payment + result.loan_principal + result.total_interest
    )


def test_bank_zero_rate_has_no_interest():
    result = assess(_site(), _bank(bank_interest_rate=0.0))

    assert result.total_interest == 0
    assert result.monthly_payment == result.loan_principal / (6 * 12)


def test_bank_zero_rate_fractional_term_is_exact():
    result = assess(_site(), _bank(bank_interest_rate=0.0, loan_term_years=2.51))

    assert result.monthly_payment == result.loan_principal / (2.51 * 12)
    assert result.warnings == (WARN_OVER_COVERAGE,)


@pytest.mark.parametrize("term", [float("inf"), float("nan")])
def test_non_finite_loan_term_does_not_raise(term):
    result = assess(_site(), _bank(loan_term_years=term))

    assert result.monthly_payment == 0
    assert result.total_interest == 0
    assert LOAN_TERM_WARNING in result.warnings
    assert result.payback_reachable


def test_flat_rate_financing():
    result = assess(_site(), _bank(financing_model=FinancingModel.FLAT_RATE))

    assert result.down_payment == 0
    assert result.loan_principal == pytest.approx(94_400.0)
    assert result.total_interest == pytest.approx(94_400.0 * 0.0875 * 6)
    assert result.monthly_payment == pytest.approx((94_400.0 + 49_560.0) / 72)


def test_zero_investment_prices_like_flat_rate():
    flat = assess(_site(), _bank(financing_model=FinancingModel.FLAT_RATE))
    zero = assess(_site(), _bank(financing_model=FinancingModel.ZERO_INVESTMENT))

    assert zero.down_payment == flat.down_payment
    assert zero.total_interest == flat.total_interest
    assert zero.monthly_payment == flat.monthly_payment


def test_payback_is_finite_and_positive_with_savings():
    result = assess(_site(), _bank())

    assert result.annual_savings == pytest.approx(151_840.0 * 7.5)
    assert result.payback_reachable
    assert 0 < result.payback_years < math.inf
    assert result.payback_years == pytest.approx(result.total_repayable / result.annual_savings)
    assert result.payback_months == math.ceil(result.payback_years * 12)


def test_private_bank_adds_exactly_one_year():
    base = assess(_site(), _bank(uses_private_bank=False))
    private = assess(_site(), _bank(uses_private_bank=True))

    assert private.payback_years - base.payback_years == pytest.approx(1.0, abs=1e-12)
    assert private.payback_months == math.ceil(private.payback_years * 12)


def test_zero_savings_payback_is_unreachable():
    result = assess(_site(tariff_per_unit=0.0), _bank())

    assert result.annual_savings == 0
    assert result.payback_years == math.inf
    assert result.payback_months is None
    assert not result.payback_reachable
    assert result.warnings[-1] == WARN_NO_SAVINGS


def test_infinite_cost_leaves_payback_undefined():
    result = assess(_site(system_cost_per_kw=float("inf")), _bank())

    assert result.payback_years == math.inf
    assert result.payback_months is None
    assert not result.payback_reachable
    assert result.warnings[-1] == WARN_PAYBACK_UNDEFINED


def test_zero_capacity_site_does_not_raise():
    result = assess(_site(available_space=0.0, net_units=0.0), _bank())

    assert result.recommended_kw == 0
    assert result.total_system_cost == 0
    assert result.monthly_payment == 0
    assert result.payback_months is None


def test_warnings_keep_raise_order():
    result = assess(
        _site(contract_demand=300.0, transformer_capacity=200.0, net_units=0.0, tariff_per_unit=0.0),
        _bank(),
    )
    assert list(result.warnings) == [WARN_TRANSFORMER, WARN_NO_CONSUMPTION, WARN_NO_SAVINGS]


def test_assess_is_idempotent():
    site, financing = _site(), _bank()
    assert assess(site, financing) == assess(site, financing)


def test_financing_model_may_be_given_as_form_value():
    as_enum = assess(_site(), _bank(financing_model=FinancingModel.FLAT_RATE))
    as_text = assess(_site(), _bank(financing_model="udb"))
    assert as_text.total_interest == as_enum.total_interest
