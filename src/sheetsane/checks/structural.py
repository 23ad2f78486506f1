"""Structural checks: workbook integrity, hidden sheets, headers, empty data.

Each check is a pure function returning its own list of findings.
"""

from collections import Counter
from typing import List
import logging

from sheetsane.core.limits import SheetPlan
from sheetsane.core.models import Finding, Severity, Workbook

logger = logging.getLogger(__name__)


def column_letter(index: int) -> str:
    """Convert a zero-based column index to its spreadsheet letter.

    Bijective base-26: 0 -> "A", 25 -> "Z", 26 -> "AA", 701 -> "ZZ".
    """
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    letters = ""
    n = index
    while n >= 0:
        letters = chr(n % 26 + ord("A")) + letters
        n = n // 26 - 1
    return letters


def check_workbook_integrity(workbook: Workbook) -> List[Finding]:
    """Verify that the workbook contains at least one sheet."""
    if workbook.sheets:
        return []
    logger.warning("Workbook contains no sheets")
    return [
        Finding(
            severity=Severity.ERROR,
            category="Workbook Integrity",
            sheet="-",
            description="No sheets found in workbook",
            suggestion="Ensure the Excel file contains at least one worksheet with data.",
        )
    ]


def check_hidden_sheets(workbook: Workbook) -> List[Finding]:
    """Report all hidden sheets in a single finding."""
    hidden = [sheet.name for sheet in workbook.sheets if sheet.hidden]
    if not hidden:
        return []
    names = ", ".join(hidden)
    logger.warning(f"Hidden sheets found: {names}")
    return [
        Finding(
            severity=Severity.WARNING,
            category="Hidden Sheets",
            sheet=names,
            description=f"{len(hidden)} hidden sheet(s) found: {names}",
            suggestion="Review hidden sheets for important data that may be overlooked.",
        )
    ]


def check_header_quality(plan: SheetPlan) -> List[Finding]:
    """Check the header row for missing, blank and duplicate headers.

    The header row is the first row of the sheet's used range; only the
    clamped columns are inspected. A completely blank header row yields a
    single error and suppresses the blank-column warning. Duplicate header
    text is compared exactly (case-sensitive), blanks excluded.

    Args:
        plan: Sheet plan with the clamped range

    Returns:
        List of findings (at most one missing/blank finding plus at most one
        duplicate finding)
    """
    sheet = plan.sheet
    rng = plan.clamped_range
    findings = []

    empty_columns = []
    header_counts = Counter()
    for col in range(rng.min_col, rng.max_col + 1):
        value = sheet.header(col)
        if not value.strip():
            empty_columns.append(column_letter(col))
        else:
            header_counts[value] += 1

    if len(empty_columns) == rng.column_count:
        findings.append(
            Finding(
                severity=Severity.ERROR,
                category="Header Quality",
                sheet=sheet.name,
                description="Missing header row - first row is completely blank",
                suggestion="Add descriptive column headers in the first row.",
            )
        )
    elif empty_columns:
        columns = ", ".join(empty_columns)
        findings.append(
            Finding(
                severity=Severity.WARNING,
                category="Header Quality",
                sheet=sheet.name,
                column=columns,
                description=f"Empty column headers in columns: {columns}",
                suggestion="Add headers to all columns for better data clarity.",
            )
        )

    duplicates = [name for name, count in header_counts.items() if count > 1]
    if duplicates:
        findings.append(
            Finding(
                severity=Severity.WARNING,
                category="Header Quality",
                sheet=sheet.name,
                description=f"Duplicate column headers: {', '.join(duplicates)}",
                suggestion="Rename duplicate headers to ensure unique column identifiers.",
            )
        )

    return findings


def check_empty_data(plan: SheetPlan) -> List[Finding]:
    """Flag a sheet whose used range holds only the header row."""
    sheet = plan.sheet
    if sheet.used_range.row_count != 1:
        return []
    return [
        Finding(
            severity=Severity.WARNING,
            category="Empty Data",
            sheet=sheet.name,
            description="Sheet contains only header row with no data rows",
            suggestion="Add data rows or remove empty sheet if not needed.",
        )
    ]
