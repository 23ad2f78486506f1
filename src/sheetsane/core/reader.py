"""Excel reader: turns raw workbook bytes into the sheet/cell model.

Modern XML-zip workbooks are read with openpyxl, legacy BIFF workbooks with
xlrd. The format is chosen from the leading magic bytes, never from the file
name.
"""

from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Optional
import logging

import xlrd
from openpyxl.chartsheet import Chartsheet
from openpyxl.reader.excel import ExcelReader as OpenpyxlReader

from sheetsane.checks.candidates import MAX_SAMPLE_VALUES
from sheetsane.config import DEFAULT_LIMITS, ProcessingLimits
from sheetsane.core.models import Cell, CellKind, CellRange, Sheet, Workbook
from sheetsane.errors import ParseError

logger = logging.getLogger(__name__)

ZIP_MAGIC = b"PK\x03\x04"
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

# Stream name present in an OLE2 wrapper around an encrypted OOXML package
ENCRYPTION_INFO_STREAM = "EncryptionInfo".encode("utf-16-le")

HIDDEN_STATES = ("hidden", "veryHidden")

# Header row plus the rows sampled for key column candidates
PREVIEW_ROWS = 1 + MAX_SAMPLE_VALUES


def _openpyxl_cell(cell) -> Optional[Cell]:
    value = cell.value
    if value is None or value == "":
        return None
    if cell.data_type == "e":
        return Cell(CellKind.ERROR, str(value), str(value))
    if cell.is_date or isinstance(value, datetime):
        return Cell(CellKind.DATE, value)
    if isinstance(value, bool):
        return Cell(CellKind.BOOLEAN, value)
    if isinstance(value, (int, float)):
        return Cell(CellKind.NUMERIC, value)
    return Cell(CellKind.STRING, str(value))


def _xlrd_cell(cell, datemode: int) -> Optional[Cell]:
    ctype = cell.ctype
    if ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if ctype == xlrd.XL_CELL_TEXT:
        if cell.value == "":
            return None
        return Cell(CellKind.STRING, cell.value)
    if ctype == xlrd.XL_CELL_NUMBER:
        return Cell(CellKind.NUMERIC, cell.value)
    if ctype == xlrd.XL_CELL_BOOLEAN:
        return Cell(CellKind.BOOLEAN, bool(cell.value))
    if ctype == xlrd.XL_CELL_ERROR:
        token = xlrd.error_text_from_code.get(cell.value, "#ERROR")
        return Cell(CellKind.ERROR, token, token)
    if ctype == xlrd.XL_CELL_DATE:
        try:
            return Cell(CellKind.DATE, xlrd.xldate_as_datetime(cell.value, datemode))
        except (xlrd.xldate.XLDateError, ValueError, OverflowError) as e:
            logger.debug(f"Date conversion failed for {cell.value!r}: {e}")
            return Cell(CellKind.NUMERIC, cell.value)
    return Cell(CellKind.STRING, str(cell.value))


class ExcelReader:
    """Handles reading Excel workbooks into the Workbook model.

    Every sheet keeps its full used range, but cells are only read inside
    the processing limits. Sheets beyond the sheet limit are read up to
    their sample rows, which is all the preview needs from them.

    Args:
        limits: Processing ceilings that bound cell iteration
    """

    def __init__(self, limits: ProcessingLimits = DEFAULT_LIMITS):
        self.limits = limits

    def parse(self, data: bytes) -> Workbook:
        """Parse raw workbook bytes.

        Args:
            data: Workbook file contents

        Returns:
            Workbook model with every sheet in declaration order

        Raises:
            ParseError: If the bytes are not a readable, unencrypted workbook
        """
        if not data:
            raise ParseError("Could not read file: no data")

        if data.startswith(ZIP_MAGIC):
            return self._parse_xlsx(data)

        if data.startswith(OLE2_MAGIC):
            if ENCRYPTION_INFO_STREAM in data:
                raise ParseError("Could not read file: workbook is password-protected")
            return self._parse_xls(data)

        raise ParseError("Could not read file: not a recognised spreadsheet format")

    def load_file(self, file_path: Path) -> Workbook:
        """Read and parse a workbook from disk.

        Args:
            file_path: Path to the workbook file

        Returns:
            Workbook model

        Raises:
            FileNotFoundError: If the file does not exist
            ParseError: If the file is not a readable workbook
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        workbook = self.parse(file_path.read_bytes())
        logger.info(f"Successfully loaded workbook: {file_path.name}")
        return workbook

    def _row_limit(self, sheet_index: int) -> int:
        if sheet_index < self.limits.max_sheets:
            return self.limits.max_rows_per_sheet
        return PREVIEW_ROWS

    def _parse_xlsx(self, data: bytes) -> Workbook:
        try:
            reader = OpenpyxlReader(BytesIO(data), data_only=True)
            reader.read()
        except Exception as e:
            logger.error(f"Failed to load XLSX workbook: {e}")
            raise ParseError() from e

        source = reader.wb
        # Chartsheets lose their visibility on load, the workbook part keeps it
        states = {child.name: child.state for child in reader.parser.sheets}

        try:
            sheets = []
            for index, name in enumerate(source.sheetnames):
                ws = source[name]
                hidden = states.get(name, ws.sheet_state) in HIDDEN_STATES

                if isinstance(ws, Chartsheet):
                    sheets.append(Sheet(name=name, hidden=hidden))
                    continue

                last_row = min(ws.max_row, ws.min_row + self._row_limit(index) - 1)
                last_col = min(ws.max_column, ws.min_column + self.limits.max_cols_per_sheet - 1)
                cells = {}
                for row in ws.iter_rows(
                    min_row=ws.min_row,
                    max_row=last_row,
                    min_col=ws.min_column,
                    max_col=last_col,
                ):
                    for source_cell in row:
                        cell = _openpyxl_cell(source_cell)
                        if cell is not None:
                            cells[(source_cell.row - 1, source_cell.column - 1)] = cell

                used_range = CellRange(
                    min_row=ws.min_row - 1,
                    min_col=ws.min_column - 1,
                    max_row=ws.max_row - 1,
                    max_col=ws.max_column - 1,
                )
                sheets.append(
                    Sheet(name=name, hidden=hidden, used_range=used_range, cells=cells)
                )
        finally:
            source.close()

        logger.debug(f"Parsed XLSX workbook with {len(sheets)} sheet(s)")
        return Workbook(sheets=sheets)

    def _parse_xls(self, data: bytes) -> Workbook:
        try:
            source = xlrd.open_workbook(file_contents=data, on_demand=True)
        except xlrd.XLRDError as e:
            logger.error(f"Failed to load XLS workbook: {e}")
            if "encrypted" in str(e).lower():
                raise ParseError(
                    "Could not read file: workbook is password-protected"
                ) from e
            raise ParseError() from e
        except Exception as e:
            logger.error(f"Failed to load XLS workbook: {e}")
            raise ParseError() from e

        try:
            sheets = []
            for index in range(source.nsheets):
                ws = source.sheet_by_index(index)
                last_col = min(ws.ncols, self.limits.max_cols_per_sheet)
                cells = {}
                for row in range(min(ws.nrows, self._row_limit(index))):
                    for col, source_cell in enumerate(ws.row_slice(row, 0, last_col)):
                        cell = _xlrd_cell(source_cell, source.datemode)
                        if cell is not None:
                            cells[(row, col)] = cell

                used_range = CellRange(
                    min_row=0,
                    min_col=0,
                    max_row=max(ws.nrows - 1, 0),
                    max_col=max(ws.ncols - 1, 0),
                )
                sheets.append(
                    Sheet(
                        name=ws.name,
                        hidden=ws.visibility in (1, 2),
                        used_range=used_range,
                        cells=cells,
                    )
                )
                source.unload_sheet(index)
        finally:
            source.release_resources()

        logger.debug(f"Parsed XLS workbook with {len(sheets)} sheet(s)")
        return Workbook(sheets=sheets)


def parse(data: bytes, limits: ProcessingLimits = DEFAULT_LIMITS) -> Workbook:
    """Parse workbook bytes with a reader bound to the given limits."""
    return ExcelReader(limits).parse(data)
