"""Key column candidate detection for the preview step."""

import re
from typing import List
import logging

from sheetsane.core.models import CellKind, ColumnCandidate, Workbook

logger = logging.getLogger(__name__)

KEY_COLUMN_PATTERN = re.compile(
    r"^(id|_id|sku|order|email|order_id|orderid|user_id|userid|product_id|productid)$",
    re.IGNORECASE,
)

MAX_SAMPLE_VALUES = 5


def is_key_column_name(header: str) -> bool:
    return bool(KEY_COLUMN_PATTERN.match(header))


def find_candidates(workbook: Workbook) -> List[ColumnCandidate]:
    """Find columns whose header looks like an identifier.

    Every sheet and every column of the used range is inspected. Samples are
    taken from the first five data rows, skipping blank cells.

    Args:
        workbook: Parsed workbook

    Returns:
        Candidates in sheet order then column order, not deduplicated
    """
    candidates = []
    for sheet in workbook.sheets:
        rng = sheet.used_range
        for col in range(rng.min_col, rng.max_col + 1):
            header = sheet.header(col)
            if not is_key_column_name(header):
                continue

            samples = []
            last_row = min(rng.min_row + MAX_SAMPLE_VALUES, rng.max_row)
            for row in range(rng.min_row + 1, last_row + 1):
                cell = sheet.cells.get((row, col))
                if cell is not None and cell.kind != CellKind.BLANK:
                    samples.append(cell.text)

            candidates.append(
                ColumnCandidate(
                    sheet=sheet.name,
                    column=header,
                    column_index=col,
                    sample_values=tuple(samples),
                )
            )

    logger.debug(f"Found {len(candidates)} key column candidate(s)")
    return candidates
