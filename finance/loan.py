"""Loan maths for solar financing offers.

Three offers are supported:

- BANK: 10% advance, 90% loan at a diminishing (amortizing) rate.
- FLAT_RATE: 100% loan, interest precomputed on the full principal.
- ZERO_INVESTMENT: marketed as tiered by capacity band, but priced with the
  flat-rate formula until a tier table exists.

The annuity formula lives in ``periodic_payment`` only; both the engine's
bank branch and ``amortize`` go through it so they cannot drift apart.
"""

from __future__ import annotations

import logging
import math
from typing import List

from finance.contracts import (
    AmortizationRow,
    FinancingInputs,
    FinancingModel,
    FinancingTerms,
)

logger = logging.getLogger(__name__)

BANK_DOWN_PAYMENT_SHARE = 0.10
MONTHS_PER_YEAR = 12

LOAN_TERM_WARNING = "Loan term must be a positive number of years - monthly payment not computed"


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def monthly_rate(annual_rate_percent: float) -> float:
    """Convert an annual percentage rate into a monthly decimal rate."""
    return float(annual_rate_percent) / MONTHS_PER_YEAR / 100.0


def loan_periods(years: float) -> float:
    """Length of a term of ``years`` in months.

    Kept fractional: a 2.51-year term prices over 30.12 months, not 30.
    """
    return float(years) * MONTHS_PER_YEAR


def _has_instalments(periods: float) -> bool:
    return math.isfinite(periods) and periods > 0


def periodic_payment(principal: float, periodic_rate: float, periods: float) -> float:
    """Calculate annuity payment (Excel PMT equivalent, positive sign)."""
    if not _has_instalments(periods):
        return 0.0
    if periodic_rate == 0:
        return principal / periods
    try:
        growth = math.pow(1 + periodic_rate, periods)
    except ValueError:
        # rate below -100% per month with a fractional term
        return math.nan
    except OverflowError:
        # growth / (growth - 1) tends to 1
        return principal * periodic_rate
    if growth == 1:
        return principal / periods
    return principal * periodic_rate * growth / (growth - 1)


# ============================================================================
# FINANCING BRANCHES
# ============================================================================


def _bank_loan(total_cost: float, financing: FinancingInputs, periods: float) -> FinancingTerms:
    down_payment = total_cost * BANK_DOWN_PAYMENT_SHARE
    principal = total_cost - down_payment
    rate = monthly_rate(financing.bank_interest_rate)

    payment = periodic_payment(principal, rate, periods)
    if rate == 0 or not _has_instalments(periods):
        interest = 0.0
    else:
        interest = payment * periods - principal

    return FinancingTerms(
        down_payment=down_payment,
        loan_principal=principal,
        total_interest=interest,
        monthly_payment=payment,
    )


def _flat_rate_loan(total_cost: float, financing: FinancingInputs, periods: float) -> FinancingTerms:
    principal = total_cost
    if not _has_instalments(periods):
        interest = 0.0
        payment = 0.0
    else:
        interest = principal * (financing.flat_rate / 100.0) * financing.loan_term_years
        payment = (principal + interest) / periods

    return FinancingTerms(
        down_payment=0.0,
        loan_principal=principal,
        total_interest=interest,
        monthly_payment=payment,
    )


def finance_project(total_cost: float, financing: FinancingInputs) -> FinancingTerms:
    """
    Price the loan for a system costing ``total_cost`` under one offer.

    Parameters
    ----------
    total_cost:
        System cost including tax.
    financing:
        Selected offer, rates and term.

    Returns
    -------
    FinancingTerms
        Down payment, principal, interest and monthly payment. A term that is not a
        positive number of years yields zero payment and interest plus a warning.
    """
    periods = loan_periods(financing.loan_term_years)
    model = FinancingModel.from_value(financing.financing_model)

    if model is FinancingModel.BANK:
        terms = _bank_loan(total_cost, financing, periods)
    elif model is FinancingModel.FLAT_RATE:
        terms = _flat_rate_loan(total_cost, financing, periods)
    elif model is FinancingModel.ZERO_INVESTMENT:
        # TODO: price by capacity band once sales publishes the tier table.
        terms = _flat_rate_loan(total_cost, financing, periods)
    else:  # pragma: no cover - closed enum
        raise ValueError(f"Unhandled financing model: {model!r}")

    if not _has_instalments(periods):
        logger.debug("Loan term %s years gives no instalments", financing.loan_term_years)
        terms = FinancingTerms(
            down_payment=terms.down_payment,
            loan_principal=terms.loan_principal,
            total_interest=terms.total_interest,
            monthly_payment=terms.monthly_payment,
            warnings=(LOAN_TERM_WARNING,),
        )

    return terms


def suggested_loan_term(system_kw: float, financing_model: FinancingModel) -> int:
    """Default term offered by sales: 5 years above 100 kW, else 7 (zero) or 6."""
    if system_kw > 100:
        return 5
    if FinancingModel.from_value(financing_model) is FinancingModel.ZERO_INVESTMENT:
        return 7
    return 6


# ============================================================================
# AMORTIZATION SCHEDULE
# ============================================================================


def amortize(principal: float, annual_rate_percent: float, years: float) -> List[AmortizationRow]:
    """
    Build a month-by-month schedule for an amortizing loan.

    Values are returned unrounded, like the engine's bank branch; rounding is
    left to whatever renders the schedule. A fractional final month gets a
    short last instalment, and the balance is floored at 0 so the last row
    closes the loan.
    """
    periods = loan_periods(years)
    if not _has_instalments(periods):
        return []
    rate = monthly_rate(annual_rate_percent)
    payment = periodic_payment(principal, rate, periods)
    months = math.ceil(round(periods, 9))

    rows: List[AmortizationRow] = []
    balance = float(principal)

    for period in range(1, months + 1):
        interest = balance * rate
        instalment = payment if period < months else min(payment, balance + interest)
        principal_paid = instalment - interest
        balance = max(0.0, balance - principal_paid)
        rows.append(
            AmortizationRow(
                period=period,
                payment=instalment,
                interest=interest,
                principal_paid=principal_paid,
                balance=balance,
            )
        )

    return rows


__all__ = [
    "BANK_DOWN_PAYMENT_SHARE",
    "LOAN_TERM_WARNING",
    "monthly_rate",
    "loan_periods",
    "periodic_payment",
    "finance_project",
    "suggested_loan_term",
    "amortize",
]
