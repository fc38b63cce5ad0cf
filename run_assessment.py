#!/usr/bin/env python3
"""Command-line entry point for site assessments.

Thin wrapper around :mod:`analytics.evaluate_assessment`:

- run_assessment(config) -> AssessmentReport, for scripts and tests.
- main(argv) -> exit code, for manual runs and the ``solar-assess`` script.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from analytics.assessment_loader import AssessmentConfigError
from analytics.evaluate_assessment import AssessmentReport, evaluate_assessment
from analytics.export_helpers import AssessmentWorkbook, result_to_record
from analytics.schema_guard import ConfigValidationError

logger = logging.getLogger("solar_assess")


def run_assessment(config: str) -> AssessmentReport:
    return evaluate_assessment(config)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Size and price a rooftop solar system for one site"
    )
    parser.add_argument("config", type=str, help="Path to assessment config (YAML or JSON)")
    parser.add_argument(
        "--format",
        default="text",
        choices=["text", "json"],
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Also print the monthly amortization schedule (bank loans only)",
    )
    parser.add_argument("--xlsx", type=str, default=None, help="Write an Excel workbook here")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    return parser.parse_args(argv)


def _print_text(report: AssessmentReport, show_schedule: bool) -> None:
    r = report.result
    print(f"✓ Site: {report.site.customer_name} ({report.site.region_key}, PIN {report.site.pin_code})")
    print(f"  Recommended capacity: {r.recommended_kw:.1f} kW")
    print(f"    by contract demand: {r.permitted_by_contract_kw:.1f} kW")
    if r.permitted_by_transformer_kw is not None:
        print(f"    by transformer:     {r.permitted_by_transformer_kw:.1f} kW")
    print(f"    by space:           {r.space_limited_kw:.1f} kW")
    print(f"  Generation: {r.monthly_units:,.0f} units/month, {r.annual_units:,.0f} units/year")
    print(f"  Coverage: {r.coverage_percent:.1f}%")
    print(f"  Total system cost: {r.total_system_cost:,.0f} (tax {r.tax_amount:,.0f})")
    print(f"  Down payment: {r.down_payment:,.0f}  Loan: {r.loan_principal:,.0f}")
    print(f"  Monthly payment: {r.monthly_payment:,.0f}  Interest: {r.total_interest:,.0f}")
    print(f"  Annual savings: {r.annual_savings:,.0f}")
    if r.payback_reachable:
        print(f"  Payback: {r.payback_years:.1f} years ({r.payback_months} months)")
    else:
        print("  Payback: not reachable")
    if r.enhancement_needed:
        print(
            f"  CMD enhancement: +{r.required_additional_contract_demand:.1f} kVA "
            f"unlocks {r.additional_kw_possible:.1f} kW (cost {r.enhancement_cost_total:,.0f})"
        )
    for warning in r.warnings:
        print(f"  ! {warning}")

    if show_schedule and report.schedule:
        print("")
        print(f"  {'Month':>5} {'Payment':>12} {'Interest':>12} {'Principal':>12} {'Balance':>14}")
        for row in report.schedule:
            print(
                f"  {row.period:>5} {row.payment:>12,.0f} {row.interest:>12,.0f} "
                f"{row.principal_paid:>12,.0f} {row.balance:>14,.0f}"
            )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        report = run_assessment(args.config)
    except (FileNotFoundError, AssessmentConfigError, ConfigValidationError) as exc:
        logger.error("%s", exc)
        return 2

    if args.format == "json":
        record = result_to_record(report.result, site_label=report.site.customer_name)
        if args.schedule:
            record["schedule"] = [asdict(row) for row in report.schedule]
        print(json.dumps(record, indent=2))
    else:
        _print_text(report, args.schedule)

    if args.xlsx:
        with AssessmentWorkbook(args.xlsx) as workbook:
            workbook.write_assessment(report.result, report.site.net_units, report.schedule)

    return 0


if __name__ == "__main__":
    sys.exit(main())
