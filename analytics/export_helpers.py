from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Union

import pandas as pd
from openpyxl.styles import Font

from analytics import projections
from finance.contracts import AmortizationRow, CalculationResult

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# =====================================================================
# Flat record / JSON / CSV
# =====================================================================


def _json_safe(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def result_to_record(result: CalculationResult, site_label: Optional[str] = None) -> Dict[str, Any]:
    """Flat record of named scalars; non-finite numbers become None.

    An unreachable payback (``inf``) is therefore exported as ``null`` so
    the record stays valid JSON.
    """
    record: Dict[str, Any] = {}
    if site_label is not None:
        record["site"] = site_label
    for key, value in result.as_dict().items():
        record[key] = _json_safe(value)
    return record


def write_json(result: CalculationResult, path: PathLike, site_label: Optional[str] = None) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(result_to_record(result, site_label), f, indent=2)
    logger.info("Wrote assessment JSON to %s", out)
    return out


def summary_frame(result: CalculationResult) -> pd.DataFrame:
    """Two-column (metric, value) view of the result without warnings."""
    record = result_to_record(result)
    record.pop("warnings", None)
    return pd.DataFrame({"metric": list(record.keys()), "value": list(record.values())})


def write_summary_csv(result: CalculationResult, path: PathLike) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    summary_frame(result).to_csv(out, index=False)
    logger.info("Wrote assessment summary CSV to %s", out)
    return out


def export_pdf(result: CalculationResult, path: PathLike) -> Path:
    """Placeholder for the printable customer proposal."""
    raise NotImplementedError("PDF export is not available; use the Excel workbook instead")


# =====================================================================
# Excel workbook
# =====================================================================


class AssessmentWorkbook:
    """Writes one site assessment to an Excel workbook.

    Sheets: Summary, Warnings, Generation, Costs, Payback and (when a
    schedule is supplied) Amortization. Headers are bold, filtered and
    frozen so the file is usable as-is in a proposal pack.
    """

    def __init__(self, output_path: PathLike) -> None:
        self.output_path = Path(output_path)
        # Created lazily so nothing touches disk until a sheet is written.
        self._writer: Optional[pd.ExcelWriter] = None

    def __enter__(self) -> "AssessmentWorkbook":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.save()

    def _ensure_writer(self) -> pd.ExcelWriter:
        if self._writer is None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._writer = pd.ExcelWriter(self.output_path, engine="openpyxl")
        return self._writer

    def save(self) -> None:
        """Persist the workbook to disk. Safe to call more than once."""
        if self._writer is not None:
            self._writer.close()
            self._writer = None
            logger.info("AssessmentWorkbook: wrote workbook to %s", self.output_path)

    def add_dataframe_sheet(
        self,
        sheet_name: str,
        df: pd.DataFrame,
        freeze_panes: Optional[str] = "A2",
        format_headers: bool = True,
        auto_filter: bool = True,
    ) -> None:
        """Write ``df`` to ``sheet_name`` with light formatting."""
        writer = self._ensure_writer()
        df.to_excel(writer, sheet_name=sheet_name, index=False)
        ws = writer.sheets[sheet_name]

        if format_headers:
            for cell in ws[1]:
                cell.font = Font(bold=True)
        if auto_filter and not df.empty:
            ws.auto_filter.ref = ws.dimensions
        if freeze_panes:
            ws.freeze_panes = freeze_panes

        for column_cells in ws.columns:
            width = max(len(str(c.value)) if c.value is not None else 0 for c in column_cells)
            ws.column_dimensions[column_cells[0].column_letter].width = min(max(width + 2, 10), 60)

    def write_assessment(
        self,
        result: CalculationResult,
        monthly_consumption: float,
        schedule: Optional[Iterable[AmortizationRow]] = None,
    ) -> None:
        """Write every standard sheet for ``result``."""
        self.add_dataframe_sheet("Summary", summary_frame(result))
        self.add_dataframe_sheet(
            "Warnings", pd.DataFrame({"warning": list(result.warnings)}, columns=["warning"])
        )
        self.add_dataframe_sheet(
            "Generation", projections.generation_vs_consumption(result, monthly_consumption)
        )
        self.add_dataframe_sheet("Costs", projections.cost_breakdown(result))
        self.add_dataframe_sheet("Payback", projections.payback_projection(result))
        rows = list(schedule or [])
        if rows:
            self.add_dataframe_sheet("Amortization", projections.schedule_frame(rows))

    @property
    def sheet_names(self) -> Sequence[str]:
        if self._writer is None:
            return []
        return list(self._writer.sheets)


__all__ = [
    "AssessmentWorkbook",
    "export_pdf",
    "result_to_record",
    "summary_frame",
    "write_json",
    "write_summary_csv",
]
