"""Processing limits enforcement.

Clamps the workbook to a bounded iteration plan before any check runs.
Clamping never fails the run; each truncation is documented as a
"Processing Limits" warning finding instead.
"""

from dataclasses import dataclass, field
from typing import List
import logging

from sheetsane.config import DEFAULT_LIMITS, ProcessingLimits
from sheetsane.core.models import CellRange, Finding, Severity, Sheet, Workbook

logger = logging.getLogger(__name__)

CATEGORY = "Processing Limits"


@dataclass
class SheetPlan:
    """A processed sheet together with its clamped cell range."""

    sheet: Sheet
    clamped_range: CellRange
    rows_clamped: bool = False
    cols_clamped: bool = False
    findings: List[Finding] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.sheet.name


@dataclass
class ProcessingPlan:
    """Ordered subset of sheets to process plus workbook-level findings."""

    sheets: List[SheetPlan]
    dropped_sheets: List[str] = field(default_factory=list)
    findings: List[Finding] = field(default_factory=list)

    @property
    def sheet_names(self) -> List[str]:
        return [plan.name for plan in self.sheets]


def clamp_sheet(sheet: Sheet, limits: ProcessingLimits = DEFAULT_LIMITS) -> SheetPlan:
    """Clamp one sheet's used range to the row and column ceilings.

    Args:
        sheet: Sheet to clamp
        limits: Processing ceilings

    Returns:
        SheetPlan with the clamped range and at most one limits finding
    """
    used = sheet.used_range
    total_rows = used.row_count
    total_cols = used.column_count
    rows_exceeded = total_rows > limits.max_rows_per_sheet
    cols_exceeded = total_cols > limits.max_cols_per_sheet

    clamped = CellRange(
        min_row=used.min_row,
        min_col=used.min_col,
        max_row=used.min_row + limits.max_rows_per_sheet - 1 if rows_exceeded else used.max_row,
        max_col=used.min_col + limits.max_cols_per_sheet - 1 if cols_exceeded else used.max_col,
    )

    findings = []
    if rows_exceeded or cols_exceeded:
        exceeded = []
        if rows_exceeded:
            exceeded.append(f"{total_rows} rows (limit: {limits.max_rows_per_sheet})")
        if cols_exceeded:
            exceeded.append(f"{total_cols} columns (limit: {limits.max_cols_per_sheet})")

        logger.warning(f"Sheet '{sheet.name}' clamped: {', '.join(exceeded)}")
        findings.append(
            Finding(
                severity=Severity.WARNING,
                category=CATEGORY,
                sheet=sheet.name,
                description=(
                    f'Sheet "{sheet.name}" exceeds processing limits: {", ".join(exceeded)}. '
                    f"Only the first {limits.max_rows_per_sheet} rows and "
                    f"{limits.max_cols_per_sheet} columns will be analyzed."
                ),
                suggestion=(
                    "Consider splitting large sheets or analyzing in sections. "
                    "Results may be incomplete for this sheet."
                ),
            )
        )

    return SheetPlan(
        sheet=sheet,
        clamped_range=clamped,
        rows_clamped=rows_exceeded,
        cols_clamped=cols_exceeded,
        findings=findings,
    )


def build_plan(workbook: Workbook, limits: ProcessingLimits = DEFAULT_LIMITS) -> ProcessingPlan:
    """Build the clamped iteration plan for a workbook.

    Args:
        workbook: Parsed workbook
        limits: Processing ceilings

    Returns:
        ProcessingPlan covering the first ``max_sheets`` sheets
    """
    kept = workbook.sheets[: limits.max_sheets]
    dropped = [sheet.name for sheet in workbook.sheets[limits.max_sheets:]]

    findings = []
    if dropped:
        total = len(workbook.sheets)
        processed_names = ", ".join(sheet.name for sheet in kept)
        logger.warning(
            f"Workbook has {total} sheets; skipping {len(dropped)} beyond the limit of {limits.max_sheets}"
        )
        findings.append(
            Finding(
                severity=Severity.WARNING,
                category=CATEGORY,
                sheet="-",
                description=(
                    f"Workbook contains {total} sheets. Only the first {limits.max_sheets} "
                    f"sheets will be analyzed due to processing limits. "
                    f"Skipped sheets: {', '.join(dropped)}"
                ),
                suggestion=(
                    "Consider splitting your workbook or analyzing sheets in batches. "
                    f"Only sheets: {processed_names} will be processed."
                ),
            )
        )

    return ProcessingPlan(
        sheets=[clamp_sheet(sheet, limits) for sheet in kept],
        dropped_sheets=dropped,
        findings=findings,
    )
