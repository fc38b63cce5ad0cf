"""
Tests for analytics.projections chart/report frames.
"""

from __future__ import annotations

import math

import pytest

from analytics.projections import (
    MAX_PROJECTION_YEARS,
    cost_breakdown,
    generation_vs_consumption,
    payback_projection,
    schedule_frame,
)
from finance.assessment import assess
from finance.contracts import FinancingInputs, FinancingModel, SiteInputs
from finance.loan import amortize


@pytest.fixture
def result():
    site = SiteInputs(
        customer_name="Test Works",
        pin_code="500081",
        net_units=10_000.0,
        contract_demand=100.0,
        available_space=10_000.0,
    )
    return assess(site, FinancingInputs(financing_model=FinancingModel.BANK))


def test_generation_vs_consumption_has_twelve_months(result):
    df = generation_vs_consumption(result, 10_000.0)

    assert len(df) == 12
    assert list(df["month"])[:2] == ["M1", "M2"]
    assert (df["generation_kwh"] == result.monthly_units).all()
    assert (df["consumption_kwh"] == 10_000.0).all()


def test_cost_breakdown_components(result):
    df = cost_breakdown(result)

    assert list(df["component"]) == ["Base Cost", "Tax", "Interest"]
    assert df["amount"].sum() == pytest.approx(
        result.base_system_cost + result.tax_amount + result.total_interest
    )


def test_payback_projection_runs_to_payback_year(result):
    df = payback_projection(result)

    assert list(df["year"]) == list(range(0, math.ceil(result.payback_years) + 1))
    assert df["cumulative_savings"].iloc[0] == 0
    assert df["loan_balance"].iloc[0] == pytest.approx(result.total_repayable)
    assert (df["loan_balance"] >= 0).all()


def test_payback_projection_without_savings_uses_loan_term():
    site = SiteInputs(
        net_units=10_000.0,
        contract_demand=100.0,
        available_space=10_000.0,
        tariff_per_unit=0.0,
    )
    unreachable = assess(site, FinancingInputs(loan_term_years=6))

    df = payback_projection(unreachable)
    assert df["year"].iloc[-1] >= 6
    assert df["loan_balance"].iloc[-1] == pytest.approx(0.0, abs=1e-6)
    assert (df["cumulative_savings"] == 0).all()


def test_schedule_frame_columns():
    df = schedule_frame(amortize(50_000.0, 9.0, 1))

    assert list(df.columns) == ["period", "payment", "interest", "principal_paid", "balance"]
    assert len(df) == 12

    empty = schedule_frame([])
    assert empty.empty
    assert "balance" in empty.columns


def test_payback_projection_default_horizon_is_capped():
    site = SiteInputs(
        net_units=10_000.0,
        contract_demand=100.0,
        available_space=10_000.0,
        tariff_per_unit=1e-9,
    )
    slow = assess(site, FinancingInputs(loan_term_years=6))
    assert slow.payback_reachable
    assert slow.payback_years > 1e6

    df = payback_projection(slow)
    assert list(df["year"]) == list(range(0, MAX_PROJECTION_YEARS + 1))

    # an explicit horizon is honoured as given
    assert len(payback_projection(slow, horizon_years=40)) == 41
