"""Report rendering for analysis results."""

from sheetsane.reporting.report_generator import (
    ReportGenerator,
    export_findings_csv,
    findings_to_frame,
)


__all__ = [
    'ReportGenerator',
    'export_findings_csv',
    'findings_to_frame',
]
