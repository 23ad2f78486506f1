"""Analysis pipeline: parse, clamp, check, score and assemble.

The pipeline is a single synchronous pass. Each check returns its own list
of findings; this module concatenates them in a fixed order:

1. workbook integrity (short-circuits when the workbook has no sheets)
2. workbook-level processing limits
3. hidden sheets
4. per processed sheet: sheet processing limits, header quality, empty
   data, formula errors, data type anomalies, duplicate keys
"""

from datetime import datetime, timezone
from typing import List, Optional
import logging

from sheetsane.checks.candidates import find_candidates
from sheetsane.checks.content import check_duplicate_keys
from sheetsane.checks.rules import checks_to_run, get_sheet_checks, get_workbook_checks
from sheetsane.checks.structural import check_workbook_integrity
from sheetsane.config import DEFAULT_LIMITS, ProcessingLimits
from sheetsane.core.limits import build_plan
from sheetsane.core.models import (
    AnalysisPreview,
    AnalysisResult,
    Finding,
    KeyColumnSelection,
    Severity,
    SheetInfo,
    Workbook,
)
from sheetsane.core.reader import ExcelReader
from sheetsane.core.scoring import calculate_score

logger = logging.getLogger(__name__)


def get_sheet_info(workbook: Workbook) -> List[SheetInfo]:
    """Summarise every sheet from its unclamped used range."""
    sheets = []
    for sheet in workbook.sheets:
        rng = sheet.used_range
        sheets.append(
            SheetInfo(
                name=sheet.name,
                is_hidden=sheet.hidden,
                row_count=rng.row_count,
                column_count=rng.column_count,
                headers=[sheet.header(col) for col in range(rng.min_col, rng.max_col + 1)],
                has_data=rng.row_count > 1,
            )
        )
    return sheets


def _timestamp(analyzed_at: Optional[datetime]) -> str:
    moment = analyzed_at or datetime.now(timezone.utc)
    return moment.isoformat()


def assemble_result(
    file_id: str,
    file_name: str,
    findings: List[Finding],
    sheets: List[SheetInfo],
    analyzed_at: Optional[datetime] = None,
) -> AnalysisResult:
    """Combine findings, sheet metadata and score into the final result."""
    score, explanation = calculate_score(findings)
    return AnalysisResult(
        file_id=file_id,
        file_name=file_name,
        analyzed_at=_timestamp(analyzed_at),
        score=score,
        score_explanation=explanation,
        error_count=sum(1 for f in findings if f.severity == Severity.ERROR),
        warning_count=sum(1 for f in findings if f.severity == Severity.WARNING),
        info_count=sum(1 for f in findings if f.severity == Severity.INFO),
        findings=list(findings),
        sheets=sheets,
    )


def run_analysis(
    workbook: Workbook,
    file_id: str,
    file_name: str,
    key_column: Optional[KeyColumnSelection] = None,
    limits: ProcessingLimits = DEFAULT_LIMITS,
    analyzed_at: Optional[datetime] = None,
) -> AnalysisResult:
    """Run every check over a parsed workbook.

    Args:
        workbook: Parsed workbook model
        file_id: Caller-chosen file identifier
        file_name: Original file name
        key_column: Optional column to check for duplicate values. A
            selection naming a sheet beyond the sheet limit finds nothing.
        limits: Processing ceilings
        analyzed_at: Optional timestamp; defaults to the current UTC time

    Returns:
        Complete AnalysisResult
    """
    sheets = get_sheet_info(workbook)

    findings = check_workbook_integrity(workbook)
    if findings:
        return assemble_result(file_id, file_name, findings, [], analyzed_at)

    plan = build_plan(workbook, limits)
    findings.extend(plan.findings)

    for check_name, check_function in get_workbook_checks():
        found = check_function(workbook)
        logger.debug(f"Check '{check_name}': {len(found)} finding(s)")
        findings.extend(found)

    sheet_checks = get_sheet_checks()
    for sheet_plan in plan.sheets:
        findings.extend(sheet_plan.findings)
        for check_name, check_function in sheet_checks:
            found = check_function(sheet_plan)
            logger.debug(f"Check '{check_name}' on '{sheet_plan.name}': {len(found)} finding(s)")
            findings.extend(found)
        findings.extend(check_duplicate_keys(sheet_plan, key_column))

    result = assemble_result(file_id, file_name, findings, sheets, analyzed_at)
    logger.info(
        f"Analyzed {file_name}: score {result.score}/100 "
        f"({result.error_count} errors, {result.warning_count} warnings, {result.info_count} info)"
    )
    return result


def analyze_workbook(
    data: bytes,
    file_id: str,
    file_name: str,
    key_column: Optional[KeyColumnSelection] = None,
    limits: ProcessingLimits = DEFAULT_LIMITS,
    analyzed_at: Optional[datetime] = None,
) -> AnalysisResult:
    """Parse workbook bytes and run the full analysis.

    Raises:
        ParseError: If the bytes are not a readable workbook
    """
    workbook = ExcelReader(limits).parse(data)
    return run_analysis(workbook, file_id, file_name, key_column, limits, analyzed_at)


def build_preview(
    workbook: Workbook, file_id: str, file_name: str, file_size: int
) -> AnalysisPreview:
    candidates = find_candidates(workbook)
    return AnalysisPreview(
        file_id=file_id,
        file_name=file_name,
        file_size=file_size,
        sheets=get_sheet_info(workbook),
        potential_key_columns=candidates,
        checks_to_run=checks_to_run(include_duplicate_keys=bool(candidates)),
    )


def generate_preview(
    data: bytes,
    file_id: str,
    file_name: str,
    file_size: Optional[int] = None,
    limits: ProcessingLimits = DEFAULT_LIMITS,
) -> AnalysisPreview:
    """Generate the lightweight preview shown before a full analysis.

    Raises:
        ParseError: If the bytes are not a readable workbook
    """
    workbook = ExcelReader(limits).parse(data)
    size = len(data) if file_size is None else file_size
    return build_preview(workbook, file_id, file_name, size)
