"""Report and chart data derived from a CalculationResult.

Each helper returns a tidy pandas DataFrame that a dashboard or workbook can
plot directly. Nothing here recomputes sizing or financing; it only reshapes
the engine's snapshot.
"""

from __future__ import annotations

import math
from typing import Iterable

import pandas as pd

from finance.contracts import AmortizationRow, CalculationResult

MAX_PROJECTION_YEARS = 30


def generation_vs_consumption(result: CalculationResult, monthly_consumption: float) -> pd.DataFrame:
    """Twelve months of flat generation against the billed consumption."""
    return pd.DataFrame(
        {
            "month": [f"M{i}" for i in range(1, 13)],
            "generation_kwh": [result.monthly_units] * 12,
            "consumption_kwh": [float(monthly_consumption)] * 12,
        }
    )


def cost_breakdown(result: CalculationResult) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "component": ["Base Cost", "Tax", "Interest"],
            "amount": [result.base_system_cost, result.tax_amount, result.total_interest],
        }
    )


def payback_projection(result: CalculationResult, horizon_years: int | None = None) -> pd.DataFrame:
    """
    Cumulative savings against the outstanding repayable amount, per year.

    The horizon defaults to the payback year (rounded up). When payback is
    unreachable the loan term implied by the monthly payment is used instead,
    falling back to a single year-0 row. The default horizon never exceeds
    ``MAX_PROJECTION_YEARS``; pass ``horizon_years`` to chart further out.
    """
    if horizon_years is None:
        horizon = 0.0
        if result.payback_reachable:
            horizon = result.payback_years
        elif result.monthly_payment > 0:
            horizon = result.total_repayable / (result.monthly_payment * 12)
        if not math.isfinite(horizon) or horizon < 0:
            horizon = 0.0
        horizon_years = min(math.ceil(horizon), MAX_PROJECTION_YEARS)

    years = list(range(0, int(horizon_years) + 1))
    annual_payment = result.monthly_payment * 12
    return pd.DataFrame(
        {
            "year": years,
            "cumulative_savings": [result.annual_savings * y for y in years],
            "loan_balance": [max(0.0, result.total_repayable - annual_payment * y) for y in years],
        }
    )


def schedule_frame(rows: Iterable[AmortizationRow]) -> pd.DataFrame:
    """Amortization rows as a DataFrame, one row per month."""
    columns = ["period", "payment", "interest", "principal_paid", "balance"]
    records = [
        {
            "period": row.period,
            "payment": row.payment,
            "interest": row.interest,
            "principal_paid": row.principal_paid,
            "balance": row.balance,
        }
        for row in rows
    ]
    return pd.DataFrame(records, columns=columns)


__all__ = [
    "MAX_PROJECTION_YEARS",
    "generation_vs_consumption",
    "cost_breakdown",
    "payback_projection",
    "schedule_frame",
]
