"""Row parsing and cost partitioning for BOQ sheets.

Responsibilities:
- Recognise blank rows
- Turn one data row into a ``BoqItem`` using a ``ColumnMap``
- Assign each item to a cost bucket by description keywords
- Pull the project name out of the title block above the header
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from cable_ingest.converters.boq._numeric import parse_numeric
from cable_ingest.converters.boq._schema import cell_text
from cable_ingest.core.constants import DEFAULT_COST_BUCKET, DEFAULT_COST_BUCKET_KEYWORDS
from cable_ingest.models.boq import BoqItem

if TYPE_CHECKING:
    from collections import Counter
    from collections.abc import Sequence

    from cable_ingest.converters.boq._schema import ColumnMap

logger = logging.getLogger("cable_ingest.converters.boq")

DEFAULT_UNIT = "unit"

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")

_PROJECT_MARKERS = ("project", "proyek")
_PROJECT_SCAN_ROWS = 5


def is_blank_row(row: Sequence[object] | None) -> bool:
    """Whether every cell is falsy (``None``, ``0``, empty or whitespace text)."""
    if not row:
        return True
    return all(not (cell.strip() if isinstance(cell, str) else cell) for cell in row)


def _cell(row: Sequence[object], index: int | None) -> object:
    if index is None or index >= len(row):
        return None
    return row[index]


def parse_item_number(value: object) -> int | None:
    """Item number from a ``no`` cell: numbers, or the leading integer of text."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if value == value else None  # NaN
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group())
    return None


def classify_cost_bucket(
    description: str,
    bucket_keywords: tuple[tuple[str, tuple[str, ...]], ...] = DEFAULT_COST_BUCKET_KEYWORDS,
    default: str = DEFAULT_COST_BUCKET,
) -> str:
    """Return the first bucket whose keyword appears in *description*.

    Descriptions matching no keyword fall into *default* (material).
    """
    lowered = description.lower()
    for bucket, keywords in bucket_keywords:
        if any(keyword in lowered for keyword in keywords):
            return bucket
    return default


def _non_negative(value: float, field: str, skipped: Counter[str]) -> float:
    if value < 0:
        logger.debug("Clamping negative %s %s to 0", field, value)
        skipped["negative_value"] += 1
        return 0.0
    return value


def parse_item_row(
    row: Sequence[object],
    columns: ColumnMap,
    *,
    sequence: int,
    skipped: Counter[str],
    bucket_keywords: tuple[tuple[str, tuple[str, ...]], ...] = DEFAULT_COST_BUCKET_KEYWORDS,
    default_bucket: str = DEFAULT_COST_BUCKET,
) -> BoqItem | None:
    """Parse one data row into a ``BoqItem``.

    Args:
        row: Raw cell values.
        columns: Resolved column map.
        sequence: Item number to use when the ``no`` column is missing
            or not numeric.
        skipped: Per-call skip counter, updated in place.

    Returns:
        The item, or ``None`` when the description is blank.
    """
    description = cell_text(_cell(row, columns.description)).strip()
    if not description:
        skipped["blank_description"] += 1
        return None

    unit = DEFAULT_UNIT if columns.unit is None else cell_text(_cell(row, columns.unit)).strip()
    quantity = _non_negative(parse_numeric(_cell(row, columns.quantity)), "quantity", skipped)
    unit_price = _non_negative(
        parse_numeric(_cell(row, columns.unit_price)), "unit price", skipped
    )
    if columns.total_price is not None:
        total_price = _non_negative(
            parse_numeric(_cell(row, columns.total_price)), "total price", skipped
        )
    else:
        total_price = quantity * unit_price

    no = parse_item_number(_cell(row, columns.no))
    category = cell_text(_cell(row, columns.category)).strip().lower() or None

    return BoqItem(
        no=no if no is not None else sequence,
        description=description,
        unit=unit,
        quantity=quantity,
        unit_price=unit_price,
        total_price=total_price,
        category=category,
        cost_bucket=classify_cost_bucket(description, bucket_keywords, default_bucket),
    )


def extract_project_name(rows: Sequence[Sequence[object]], header_index: int) -> str | None:
    """Project name from a title row above the header.

    Looks at most 5 rows above the header for one mentioning
    ``project``/``proyek`` and returns its remaining cells joined.
    """
    for row in rows[: min(header_index, _PROJECT_SCAN_ROWS)]:
        if not row:
            continue
        joined = " ".join(cell_text(cell) for cell in row).lower()
        if any(marker in joined for marker in _PROJECT_MARKERS):
            content = " ".join(cell_text(cell) for cell in row[1:]).strip()
            if content:
                return " ".join(content.split())
    return None
