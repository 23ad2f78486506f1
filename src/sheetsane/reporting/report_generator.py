"""Excel report generation from analysis results.

The report only formats what the analysis produced; it never re-derives
findings.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from sheetsane.core.models import AnalysisResult, Finding

logger = logging.getLogger(__name__)

COLORS = {
    "primary": "16A34A",
    "error": "DC2626",
    "warning": "F59E0B",
    "info": "3B82F6",
    "text": "1F2937",
    "text_light": "6B7280",
    "background": "F9FAFB",
}

FINDING_COLUMNS = [
    ("Severity", 12),
    ("Category", 22),
    ("Sheet", 20),
    ("Column", 16),
    ("Cells", 30),
    ("Description", 70),
    ("Suggestion", 60),
]


def severity_color(severity: str) -> str:
    return COLORS.get(severity, COLORS["text"])


def score_color(score: int) -> str:
    if score >= 80:
        return COLORS["primary"]
    if score >= 50:
        return COLORS["warning"]
    return COLORS["error"]


def findings_to_frame(result: AnalysisResult) -> pd.DataFrame:
    """Flatten the findings of a result into a DataFrame.

    Args:
        result: Analysis result

    Returns:
        DataFrame with one row per finding, in result order
    """
    rows = [{
        "severity": f.severity.value,
        "category": f.category,
        "sheet": f.sheet,
        "column": f.column,
        "cell_ref": f.cell_ref,
        "row_numbers": ", ".join(str(r) for r in f.row_numbers) if f.row_numbers else None,
        "description": f.description,
        "suggestion": f.suggestion,
    } for f in result.findings]
    columns = [
        "severity", "category", "sheet", "column",
        "cell_ref", "row_numbers", "description", "suggestion",
    ]
    return pd.DataFrame(rows, columns=columns)


def export_findings_csv(result: AnalysisResult, output_path: Path) -> Path:
    """Write the findings of a result to a CSV file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    findings_to_frame(result).to_csv(output_path, index=False)
    logger.info(f"Exported {len(result.findings)} findings to {output_path}")
    return output_path


def suggestions_by_category(findings: List[Finding]) -> Dict[str, List[str]]:
    """Group distinct suggestions by category, in order of first appearance."""
    grouped: Dict[str, List[str]] = {}
    for finding in findings:
        suggestions = grouped.setdefault(finding.category, [])
        if finding.suggestion not in suggestions:
            suggestions.append(finding.suggestion)
    return grouped


class ReportGenerator:
    """Generate Excel reports from analysis results."""

    def __init__(self, output_dir: Path):
        """Initialize report generator.

        Args:
            output_dir: Directory for output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"ReportGenerator initialized, output dir: {output_dir}")

    def get_output_path(self, result: AnalysisResult) -> Path:
        stem = Path(result.file_name).stem or result.file_id
        return self.output_dir / f"{stem}_SheetSane_Report.xlsx"

    def generate_report(
        self, result: AnalysisResult, force_overwrite: bool = False
    ) -> Optional[Path]:
        """Render a result to an Excel workbook.

        Args:
            result: Analysis result
            force_overwrite: If True, overwrite an existing report file

        Returns:
            Path to the generated report, or None if skipped
        """
        output_path = self.get_output_path(result)
        if output_path.exists() and not force_overwrite:
            logger.info(f"Report already exists: {output_path}")
            logger.info("Skipping generation (use force_overwrite=True to regenerate)")
            return None

        wb = Workbook()
        self._render_summary(wb.active, result)
        self._render_findings(wb.create_sheet("Findings"), result.findings)
        self._render_suggestions(wb.create_sheet("Suggestions"), result.findings)

        wb.save(output_path)
        wb.close()

        logger.info(f"Report generated successfully: {output_path}")
        return output_path

    def _render_summary(self, ws: Worksheet, result: AnalysisResult) -> None:
        ws.title = "Summary"
        ws.column_dimensions["A"].width = 22
        ws.column_dimensions["B"].width = 80

        ws["A1"] = "SheetSane"
        ws["A1"].font = Font(size=20, bold=True, color=COLORS["primary"])
        ws["A2"] = "Spreadsheet Sanity Report"
        ws["A2"].font = Font(size=14, color=COLORS["text"])

        ws["A4"] = "Score"
        ws["B4"] = result.score
        ws["B4"].font = Font(size=28, bold=True, color=score_color(result.score))
        ws["B4"].alignment = Alignment(horizontal="left")
        ws["A5"] = "out of 100"
        ws["A5"].font = Font(color=COLORS["text_light"])

        try:
            analyzed = datetime.fromisoformat(result.analyzed_at).strftime("%Y-%m-%d %H:%M:%S")
        except ValueError:
            analyzed = result.analyzed_at

        info_rows = [
            ("File", result.file_name, None),
            ("Analyzed", analyzed, None),
            ("Sheets", len(result.sheets), None),
            ("Errors", result.error_count, COLORS["error"]),
            ("Warnings", result.warning_count, COLORS["warning"]),
            ("Info", result.info_count, COLORS["info"]),
        ]
        row = 7
        for label, value, color in info_rows:
            ws.cell(row=row, column=1, value=label).font = Font(bold=True)
            value_cell = ws.cell(row=row, column=2, value=value)
            if color:
                value_cell.font = Font(bold=True, color=color)
            row += 1

        row += 1
        ws.cell(row=row, column=1, value="Summary").font = Font(size=14, bold=True)
        row += 1
        explanation = ws.cell(row=row, column=1, value=result.score_explanation)
        explanation.alignment = Alignment(wrap_text=True, vertical="top")
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=2)

        row += 2
        ws.cell(row=row, column=1, value="Sheets Analyzed").font = Font(size=14, bold=True)
        for sheet in result.sheets:
            row += 1
            hidden_tag = " (hidden)" if sheet.is_hidden else ""
            data_tag = f"{sheet.row_count - 1} rows" if sheet.has_data else "No data"
            ws.cell(
                row=row,
                column=1,
                value=f"• {sheet.name}{hidden_tag}: {sheet.column_count} columns, {data_tag}",
            )

    def _render_findings(self, ws: Worksheet, findings: List[Finding]) -> None:
        for col, (title, width) in enumerate(FINDING_COLUMNS, start=1):
            cell = ws.cell(row=1, column=col, value=title)
            cell.font = Font(bold=True, color=COLORS["text_light"])
            cell.fill = PatternFill("solid", fgColor=COLORS["background"])
            ws.column_dimensions[cell.column_letter].width = width
        ws.freeze_panes = "A2"

        if not findings:
            ws.cell(row=2, column=1, value="No issues found.")
            return

        for row, finding in enumerate(findings, start=2):
            values = [
                finding.severity.value.upper(),
                finding.category,
                finding.sheet,
                finding.column or "",
                finding.cell_ref or "",
                finding.description,
                finding.suggestion,
            ]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.alignment = Alignment(wrap_text=True, vertical="top")
            ws.cell(row=row, column=1).font = Font(
                bold=True, color=severity_color(finding.severity.value)
            )

    def _render_suggestions(self, ws: Worksheet, findings: List[Finding]) -> None:
        ws.column_dimensions["A"].width = 24
        ws.column_dimensions["B"].width = 90
        ws["A1"] = "Recommendations"
        ws["A1"].font = Font(size=14, bold=True)

        grouped = suggestions_by_category(findings)
        if not grouped:
            ws["A3"] = "Your spreadsheet looks good. No changes recommended."
            return

        row = 3
        for category, suggestions in grouped.items():
            ws.cell(row=row, column=1, value=category).font = Font(bold=True)
            for suggestion in suggestions:
                ws.cell(row=row, column=2, value=f"• {suggestion}").alignment = Alignment(
                    wrap_text=True
                )
                row += 1
