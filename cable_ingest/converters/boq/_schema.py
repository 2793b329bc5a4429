"""Header-row detection and column mapping for BOQ sheets.

BOQ workbooks arrive with title blocks above the table and with
English or Indonesian column names ("Uraian", "Satuan", "Harga Satuan").
``map_columns`` is a pure function of the header row so it can be
tested, and swapped for another locale, without touching row parsing.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from cable_ingest.core.constants import DEFAULT_HEADER_SCAN_ROWS

logger = logging.getLogger("cable_ingest.converters.boq")

HEADER_MARKERS: tuple[str, ...] = ("no", "description", "unit", "deskripsi", "uraian", "qty")

# A field maps to the leftmost header cell containing any of its synonyms.
COLUMN_SYNONYMS: dict[str, tuple[str, ...]] = {
    "no": ("no", "item", "nomor", "#"),
    "description": ("description", "deskripsi", "uraian", "item name", "pekerjaan", "nama"),
    "unit": ("unit", "satuan", "uom"),
    "quantity": ("quantity", "qty", "jumlah", "volume", "vol"),
    "unit_price": ("unit price", "harga satuan", "price", "harga"),
    "total_price": ("total price", "total", "harga total", "amount", "jumlah harga"),
    "category": ("category", "kategori", "type", "tipe", "jenis"),
}

# Columns scanned for a free-text description when no header names one
_DESCRIPTION_PROBE_COLUMNS = range(1, 5)
_MIN_DESCRIPTION_SAMPLE_LENGTH = 3


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Column index per canonical BOQ field; ``None`` when unmapped."""

    no: int | None = None
    description: int | None = None
    unit: int | None = None
    quantity: int | None = None
    unit_price: int | None = None
    total_price: int | None = None
    category: int | None = None

    def to_dict(self) -> dict[str, int | None]:
        return {name: getattr(self, name) for name in COLUMN_SYNONYMS}


def cell_text(value: object) -> str:
    """Render a cell as text; blank cells become ``""``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_header(row: Sequence[object]) -> list[str]:
    """Lowercase and strip each header cell."""
    return [cell_text(cell).lower().strip() for cell in row]


def detect_header_row(
    rows: Sequence[Sequence[object]],
    scan_rows: int = DEFAULT_HEADER_SCAN_ROWS,
) -> int:
    """Return the index of the header row.

    Scans at most *scan_rows* rows for the first one whose concatenated
    lowercase text mentions a BOQ column marker. Falls back to row 0.
    """
    for index, row in enumerate(rows[:scan_rows]):
        if not row:
            continue
        joined = "".join(cell_text(cell) for cell in row).lower()
        if any(marker in joined for marker in HEADER_MARKERS):
            logger.debug("Header row detected | index=%d", index)
            return index
    logger.debug("No header markers in first %d rows; using row 0", scan_rows)
    return 0


def find_column(headers: Sequence[str], synonyms: Sequence[str]) -> int | None:
    """Index of the first header cell containing any of *synonyms*."""
    for index, header in enumerate(headers):
        if header and any(synonym in header for synonym in synonyms):
            return index
    return None


def map_columns(header_row: Sequence[object]) -> ColumnMap:
    """Map canonical BOQ fields to column indices by header name."""
    headers = normalize_header(header_row)
    return ColumnMap(
        **{field: find_column(headers, synonyms) for field, synonyms in COLUMN_SYNONYMS.items()}
    )


def resolve_description_column(
    columns: ColumnMap,
    header_row: Sequence[object],
    first_data_row: Sequence[object] | None,
) -> ColumnMap:
    """Fill in the description column when no header names it.

    Fallback order:
    1. the first of columns 1-4 whose first data-row value is a string
       longer than 3 characters
    2. column 1, when the header has at least 3 columns
    """
    if columns.description is not None:
        return columns

    width = len(header_row)
    if first_data_row:
        for index in _DESCRIPTION_PROBE_COLUMNS:
            if index >= min(width, 5) or index >= len(first_data_row):
                break
            sample = first_data_row[index]
            if isinstance(sample, str) and len(sample.strip()) > _MIN_DESCRIPTION_SAMPLE_LENGTH:
                logger.info("Using column %d as description (sample text)", index)
                return replace(columns, description=index)

    if width >= 3:
        logger.info("Using column 1 as description (default layout)")
        return replace(columns, description=1)

    logger.warning("No description column found | headers=%s", normalize_header(header_row))
    return columns
