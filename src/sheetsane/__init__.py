"""SheetSane - Spreadsheet quality analysis.

This package parses Excel workbooks, runs deterministic structural and
data-quality checks, and converts the findings into a 0-100 quality score.

Main components:
- core: Workbook model, reader, processing limits, scoring, analysis pipeline,
  result storage
- checks: Structural and content checks, key column detection
- reporting: Excel and CSV rendering of analysis results
"""

__version__ = "0.1.0"

from sheetsane.core.analyzer import analyze_workbook, generate_preview, run_analysis
from sheetsane.core.db import InMemoryResultStore, ResultStore, SQLResultStore
from sheetsane.core.models import (
    AnalysisPreview,
    AnalysisResult,
    ColumnCandidate,
    Finding,
    KeyColumnSelection,
    Severity,
)
from sheetsane.core.processor import DocumentProcessor
from sheetsane.core.reader import ExcelReader
from sheetsane.errors import ParseError, SheetSaneError

__all__ = [
    "analyze_workbook",
    "generate_preview",
    "run_analysis",
    "AnalysisPreview",
    "AnalysisResult",
    "ColumnCandidate",
    "Finding",
    "KeyColumnSelection",
    "Severity",
    "DocumentProcessor",
    "ExcelReader",
    "InMemoryResultStore",
    "ResultStore",
    "SQLResultStore",
    "ParseError",
    "SheetSaneError",
]
