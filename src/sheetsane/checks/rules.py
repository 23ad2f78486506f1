"""Check registry.

Workbook checks receive the parsed Workbook, sheet checks receive one
SheetPlan. Both return a list of findings. Registration order is execution
order, which fixes the order of findings in every result.
"""

from typing import Callable, List, Tuple

from sheetsane.checks.content import check_data_type_anomalies, check_formula_errors
from sheetsane.checks.structural import (
    check_empty_data,
    check_header_quality,
    check_hidden_sheets,
)
from sheetsane.core.limits import SheetPlan
from sheetsane.core.models import Finding, Workbook

WorkbookCheck = Callable[[Workbook], List[Finding]]
SheetCheck = Callable[[SheetPlan], List[Finding]]

REGISTERED_WORKBOOK_CHECKS: List[Tuple[str, WorkbookCheck]] = [
    ("hidden_sheets", check_hidden_sheets),
]

REGISTERED_SHEET_CHECKS: List[Tuple[str, SheetCheck]] = [
    ("header_quality", check_header_quality),
    ("empty_data", check_empty_data),
    ("formula_errors", check_formula_errors),
    ("data_type_anomalies", check_data_type_anomalies),
]

# Labels shown to a caller before the full analysis runs
CHECK_LABELS: List[str] = [
    "Workbook integrity check",
    "Hidden sheets detection",
    "Header quality analysis",
    "Empty data detection",
    "Formula error scanning",
    "Excel error value detection",
    "Data type anomaly detection",
]
DUPLICATE_KEY_LABEL = "Duplicate key detection"


def get_workbook_checks() -> List[Tuple[str, WorkbookCheck]]:
    """Get all registered workbook-level checks.

    Returns:
        List of tuples (check_name, check_function)
    """
    return REGISTERED_WORKBOOK_CHECKS.copy()


def get_sheet_checks() -> List[Tuple[str, SheetCheck]]:
    """Get all registered per-sheet checks.

    Returns:
        List of tuples (check_name, check_function)
    """
    return REGISTERED_SHEET_CHECKS.copy()


def checks_to_run(include_duplicate_keys: bool) -> List[str]:
    labels = CHECK_LABELS.copy()
    if include_duplicate_keys:
        labels.append(DUPLICATE_KEY_LABEL)
    return labels
