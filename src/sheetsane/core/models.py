"""Workbook model and analysis output structures."""

from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class CellKind(str, Enum):
    """Closed set of cell value variants."""

    NUMERIC = "numeric"
    STRING = "string"
    BOOLEAN = "boolean"
    ERROR = "error"
    DATE = "date"
    BLANK = "blank"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Cell:
    """A single cell value tagged with its kind.

    Attributes:
        kind: Value variant
        value: Python value (float/int, str, bool, error token, datetime or None)
        display: Raw display string when the source format provides one
    """

    kind: CellKind
    value: Any = None
    display: Optional[str] = None

    @property
    def text(self) -> str:
        """Stringified value used for headers, samples and key comparison."""
        if self.kind == CellKind.BLANK or self.value is None:
            return ""
        if self.kind == CellKind.BOOLEAN:
            return "TRUE" if self.value else "FALSE"
        if self.kind == CellKind.NUMERIC:
            if isinstance(self.value, float) and self.value.is_integer():
                return str(int(self.value))
            return str(self.value)
        if self.kind == CellKind.DATE and isinstance(self.value, (date, datetime)):
            return self.value.isoformat()
        return str(self.value)


BLANK_CELL = Cell(CellKind.BLANK)


@dataclass(frozen=True)
class CellRange:
    """Zero-based, inclusive rectangular range."""

    min_row: int = 0
    min_col: int = 0
    max_row: int = 0
    max_col: int = 0

    @property
    def row_count(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def column_count(self) -> int:
        return self.max_col - self.min_col + 1


@dataclass
class Sheet:
    """One worksheet: name, visibility, used range and sparse cells."""

    name: str
    hidden: bool = False
    used_range: CellRange = field(default_factory=CellRange)
    cells: Dict[Tuple[int, int], Cell] = field(default_factory=dict)

    @property
    def header_row(self) -> int:
        return self.used_range.min_row

    def cell(self, row: int, col: int) -> Cell:
        """Return the cell at (row, col), blank when absent."""
        return self.cells.get((row, col), BLANK_CELL)

    def header(self, col: int) -> str:
        return self.cell(self.header_row, col).text


@dataclass
class Workbook:
    """Ordered sequence of sheets in declaration order."""

    sheets: List[Sheet] = field(default_factory=list)

    @property
    def sheet_names(self) -> List[str]:
        return [sheet.name for sheet in self.sheets]


@dataclass(frozen=True)
class Finding:
    """A single detected issue. Never mutated after creation."""

    severity: Severity
    category: str
    sheet: str
    description: str
    suggestion: str
    column: Optional[str] = None
    cell_ref: Optional[str] = None
    row_numbers: Optional[Tuple[int, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        if self.row_numbers is not None:
            data["row_numbers"] = list(self.row_numbers)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Finding":
        data = dict(data)
        data["severity"] = Severity(data["severity"])
        if data.get("row_numbers") is not None:
            data["row_numbers"] = tuple(data["row_numbers"])
        return cls(**data)


@dataclass(frozen=True)
class ColumnCandidate:
    """A column whose header looks like an identifier."""

    sheet: str
    column: str
    column_index: int
    sample_values: Tuple[str, ...] = ()


@dataclass(frozen=True)
class KeyColumnSelection:
    """The caller's choice of column for duplicate-key detection."""

    sheet: str
    column: str
    column_index: int


@dataclass
class SheetInfo:
    name: str
    is_hidden: bool
    row_count: int
    column_count: int
    headers: List[str]
    has_data: bool


@dataclass
class AnalysisPreview:
    """Lightweight summary produced before a full analysis."""

    file_id: str
    file_name: str
    file_size: int
    sheets: List[SheetInfo]
    potential_key_columns: List[ColumnCandidate]
    checks_to_run: List[str]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for candidate in data["potential_key_columns"]:
            candidate["sample_values"] = list(candidate["sample_values"])
        return data


@dataclass
class AnalysisResult:
    """Terminal artifact of one analysis run.

    error_count + warning_count + info_count always equals len(findings).
    """

    file_id: str
    file_name: str
    analyzed_at: str
    score: int
    score_explanation: str
    error_count: int
    warning_count: int
    info_count: int
    findings: List[Finding]
    sheets: List[SheetInfo]

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result to a JSON-ready dictionary.

        Returns:
            Dictionary representation of the result
        """
        return {
            "file_id": self.file_id,
            "file_name": self.file_name,
            "analyzed_at": self.analyzed_at,
            "score": self.score,
            "score_explanation": self.score_explanation,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "findings": [finding.to_dict() for finding in self.findings],
            "sheets": [asdict(sheet) for sheet in self.sheets],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        """Create an AnalysisResult from a dictionary.

        Args:
            data: Dictionary produced by to_dict()

        Returns:
            AnalysisResult instance
        """
        return cls(
            file_id=data["file_id"],
            file_name=data["file_name"],
            analyzed_at=data["analyzed_at"],
            score=int(data["score"]),
            score_explanation=data["score_explanation"],
            error_count=int(data["error_count"]),
            warning_count=int(data["warning_count"]),
            info_count=int(data["info_count"]),
            findings=[Finding.from_dict(f) for f in data["findings"]],
            sheets=[SheetInfo(**s) for s in data["sheets"]],
        )
