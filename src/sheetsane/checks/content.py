"""Content checks: formula error values, data type anomalies, duplicate keys.

All scans stay inside the sheet plan's clamped range. Absent cells are blank.
"""

import math
import re
from typing import Dict, List, Optional
import logging

from sheetsane.checks.structural import column_letter
from sheetsane.core.limits import SheetPlan
from sheetsane.core.models import CellKind, Finding, KeyColumnSelection, Severity

logger = logging.getLogger(__name__)

EXCEL_ERRORS = (
    "#REF!",
    "#DIV/0!",
    "#NAME?",
    "#VALUE!",
    "#N/A",
    "#NULL!",
    "#NUM!",
    "#GETTING_DATA",
)

ERROR_SUGGESTIONS: Dict[str, str] = {
    "#REF!": "Fix broken cell references. A referenced cell may have been deleted.",
    "#DIV/0!": "Check formulas dividing by zero. Add error handling or fix denominator.",
    "#NAME?": "Fix undefined function or named range. Check for typos in formula names.",
    "#VALUE!": "Correct data type mismatch. Ensure formula inputs are correct types.",
    "#N/A": "Fix lookup formula - value not found. Check lookup criteria and data.",
    "#NULL!": "Correct range intersection error. Use proper range operators.",
    "#NUM!": "Fix invalid numeric value in formula. Check for out-of-range numbers.",
    "#GETTING_DATA": "Wait for external data to load or check data connection.",
}
DEFAULT_ERROR_SUGGESTION = "Review and fix the formula error."

DATE_PATTERNS = (
    re.compile(r"^\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}$"),
    re.compile(r"^\d{4}[/\-.]\d{1,2}[/\-.]\d{1,2}$"),
    re.compile(r"^(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)", re.IGNORECASE),
)

MAX_LISTED_REFS = 10
MAX_LISTED_GROUPS = 5
MAX_LISTED_ROWS = 3
MIN_VALUES_FOR_ANOMALY = 5
TEXT_DATE_RATIO = 0.2
NUMERIC_MAJORITY_RATIO = 0.5
TEXT_MINORITY_RATIO = 0.2

# Date cells are stored as serial numbers, so they count as numeric here
NUMERIC_KINDS = (CellKind.NUMERIC, CellKind.DATE)


def get_error_suggestion(token: str) -> str:
    return ERROR_SUGGESTIONS.get(token, DEFAULT_ERROR_SUGGESTION)


def looks_like_date(value: str) -> bool:
    return any(pattern.search(value) for pattern in DATE_PATTERNS)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def check_formula_errors(plan: SheetPlan) -> List[Finding]:
    """Scan the clamped range for error values, one finding per token.

    A cell is erroring when its kind is ERROR or its string value equals one
    of the known error tokens. References are listed in row-major scan
    order, capped at ten.

    Args:
        plan: Sheet plan with the clamped range

    Returns:
        One error finding per distinct token, in order of first appearance
    """
    sheet = plan.sheet
    rng = plan.clamped_range
    groups: Dict[str, List[str]] = {}

    for row in range(rng.min_row, rng.max_row + 1):
        for col in range(rng.min_col, rng.max_col + 1):
            cell = sheet.cells.get((row, col))
            if cell is None:
                continue
            if cell.kind == CellKind.ERROR:
                token = cell.display or str(cell.value)
            elif cell.kind == CellKind.STRING and cell.value in EXCEL_ERRORS:
                token = cell.value
            else:
                continue
            groups.setdefault(token, []).append(f"{column_letter(col)}{row + 1}")

    findings = []
    for token, refs in groups.items():
        if len(refs) > MAX_LISTED_REFS:
            display = ", ".join(refs[:MAX_LISTED_REFS]) + f" and {len(refs) - MAX_LISTED_REFS} more"
        else:
            display = ", ".join(refs)
        logger.debug(f"Sheet '{sheet.name}': {len(refs)} cell(s) with {token}")
        findings.append(
            Finding(
                severity=Severity.ERROR,
                category="Formula Errors",
                sheet=sheet.name,
                cell_ref=display,
                description=f"{len(refs)} cell(s) contain {token} error: {display}",
                suggestion=get_error_suggestion(token),
            )
        )
    return findings


def check_data_type_anomalies(plan: SheetPlan) -> List[Finding]:
    """Detect text-formatted dates and mixed numeric/text columns.

    Columns with fewer than five non-blank data values are skipped. The two
    anomalies are evaluated independently and may both fire on a column.

    Args:
        plan: Sheet plan with the clamped range

    Returns:
        List of warning findings
    """
    sheet = plan.sheet
    rng = plan.clamped_range
    findings = []

    for col in range(rng.min_col, rng.max_col + 1):
        label = sheet.header(col) or column_letter(col)

        values = []
        for row in range(rng.min_row + 1, rng.max_row + 1):
            cell = sheet.cells.get((row, col))
            if cell is not None and cell.kind != CellKind.BLANK:
                values.append(cell)

        total = len(values)
        if total < MIN_VALUES_FOR_ANOMALY:
            continue

        text_dates = sum(
            1 for cell in values
            if cell.kind == CellKind.STRING and looks_like_date(cell.value)
        )
        if text_dates > 0 and text_dates / total > TEXT_DATE_RATIO:
            percent = _round_half_up(text_dates / total * 100)
            findings.append(
                Finding(
                    severity=Severity.WARNING,
                    category="Data Type Anomaly",
                    sheet=sheet.name,
                    column=label,
                    description=f"{text_dates} values ({percent}%) appear to be text-formatted dates",
                    suggestion="Convert text dates to proper Excel date format for better sorting and calculations.",
                )
            )

        numeric = sum(1 for cell in values if cell.kind in NUMERIC_KINDS)
        text = sum(1 for cell in values if cell.kind == CellKind.STRING)
        if numeric > total * NUMERIC_MAJORITY_RATIO and text > total * TEXT_MINORITY_RATIO:
            findings.append(
                Finding(
                    severity=Severity.WARNING,
                    category="Data Type Anomaly",
                    sheet=sheet.name,
                    column=label,
                    description=(
                        f"Mixed data types: {numeric} numeric and {text} text values "
                        "in a predominantly numeric column"
                    ),
                    suggestion="Standardize column data types. Convert text numbers to numeric format.",
                )
            )

    return findings


def check_duplicate_keys(
    plan: SheetPlan, selection: Optional[KeyColumnSelection]
) -> List[Finding]:
    """Report duplicate values in the caller-selected key column.

    Runs only when the selection targets this sheet. Values are compared by
    their stringified form over the clamped data rows; row numbers are
    1-indexed as shown in a spreadsheet application.

    Args:
        plan: Sheet plan with the clamped range
        selection: Key column chosen by the caller, or None

    Returns:
        At most one error finding
    """
    if selection is None or selection.sheet != plan.name:
        return []

    sheet = plan.sheet
    rng = plan.clamped_range
    rows_by_value: Dict[str, List[int]] = {}

    for row in range(rng.min_row + 1, rng.max_row + 1):
        cell = sheet.cells.get((row, selection.column_index))
        if cell is None or cell.kind == CellKind.BLANK:
            continue
        rows_by_value.setdefault(cell.text, []).append(row + 1)

    duplicates = [(value, rows) for value, rows in rows_by_value.items() if len(rows) > 1]
    if not duplicates:
        return []

    affected = sum(len(rows) for _, rows in duplicates)
    shown = []
    for value, rows in duplicates[:MAX_LISTED_GROUPS]:
        listed = ", ".join(str(r) for r in rows[:MAX_LISTED_ROWS])
        ellipsis = "..." if len(rows) > MAX_LISTED_ROWS else ""
        shown.append(f'"{value}" (rows {listed}{ellipsis})')
    more = (
        f" and {len(duplicates) - MAX_LISTED_GROUPS} more"
        if len(duplicates) > MAX_LISTED_GROUPS
        else ""
    )

    logger.warning(
        f"Sheet '{sheet.name}': {len(duplicates)} duplicate key value(s) in '{selection.column}'"
    )
    return [
        Finding(
            severity=Severity.ERROR,
            category="Duplicate Keys",
            sheet=selection.sheet,
            column=selection.column,
            row_numbers=tuple(r for _, rows in duplicates for r in rows),
            description=(
                f"{len(duplicates)} duplicate values found affecting {affected} rows: "
                f"{'; '.join(shown)}{more}"
            ),
            suggestion="Remove or fix duplicate key values to ensure data integrity.",
        )
    ]
