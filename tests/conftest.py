"""Shared fixtures for building workbooks in memory."""

from datetime import date, datetime
from io import BytesIO

import pytest
from openpyxl import Workbook as OpenpyxlWorkbook

from sheetsane.core.models import Cell, CellKind, CellRange, Sheet


def _to_cell(value):
    if isinstance(value, Cell):
        return value
    if isinstance(value, bool):
        return Cell(CellKind.BOOLEAN, value)
    if isinstance(value, (int, float)):
        return Cell(CellKind.NUMERIC, value)
    if isinstance(value, (date, datetime)):
        return Cell(CellKind.DATE, value)
    return Cell(CellKind.STRING, str(value))


def build_sheet(name, rows, hidden=False):
    """Build a model Sheet from a list of rows (first row is the header).

    None entries are left out of the cell map. The used range spans all
    given rows and the widest row.
    """
    cells = {}
    width = max((len(row) for row in rows), default=1) or 1
    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            if value is not None:
                cells[(r, c)] = _to_cell(value)
    used_range = CellRange(
        min_row=0,
        min_col=0,
        max_row=max(len(rows) - 1, 0),
        max_col=width - 1,
    )
    return Sheet(name=name, hidden=hidden, used_range=used_range, cells=cells)


def build_xlsx(sheets, hidden=None):
    """Build XLSX bytes with openpyxl.

    Args:
        sheets: Mapping of sheet name to a list of rows
        hidden: Optional mapping of sheet name to "hidden" or "veryHidden"
    """
    hidden = hidden or {}
    wb = OpenpyxlWorkbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for row in rows:
            ws.append(row)
        if name in hidden:
            ws.sheet_state = hidden[name]

    buffer = BytesIO()
    wb.save(buffer)
    wb.close()
    return buffer.getvalue()


@pytest.fixture
def make_sheet():
    """Factory fixture returning model sheets."""
    return build_sheet


@pytest.fixture
def make_xlsx():
    """Factory fixture returning XLSX bytes."""
    return build_xlsx


@pytest.fixture
def orders_xlsx():
    """Small orders workbook with a duplicate header and one error cell."""
    return build_xlsx({
        "Orders": [
            ["id", "name", "id"],
            [1, "alpha", 1],
            [2, "#VALUE!", 2],
            [3, "gamma", 3],
        ]
    })


@pytest.fixture
def sample_excel_file(tmp_path, orders_xlsx):
    """Write the orders workbook to disk."""
    file_path = tmp_path / "orders.xlsx"
    file_path.write_bytes(orders_xlsx)
    return file_path
