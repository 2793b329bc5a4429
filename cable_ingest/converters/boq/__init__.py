"""BOQ conversion: spreadsheet rows to a typed bill of quantities.

Input is a 2-D sequence of raw cell values (first worksheet, as read by
``cable_ingest.core.ingress.read_sheet_rows``). The conversion is split
into focused stages:
- **_schema**: header-row detection and column mapping
- **_numeric**: locale-tolerant numeric coercion
- **_rows**: row parsing, cost buckets, project name

Error handling:
- Fewer than 2 rows aborts the conversion (``EmptyInputError``)
- No parseable item aborts the conversion (``NoValidItemsError``)
- Blank rows, blank descriptions and negative values are skipped or
  clamped, logged and counted in ``diagnostics``
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

from cable_ingest.converters.boq._numeric import normalize_number_text, parse_numeric
from cable_ingest.converters.boq._rows import (
    classify_cost_bucket,
    extract_project_name,
    is_blank_row,
    parse_item_number,
    parse_item_row,
)
from cable_ingest.converters.boq._schema import (
    COLUMN_SYNONYMS,
    HEADER_MARKERS,
    ColumnMap,
    detect_header_row,
    map_columns,
    resolve_description_column,
)
from cable_ingest.core.config import IngestConfig
from cable_ingest.core.constants import LABOR, MATERIAL
from cable_ingest.core.exceptions import ValidationError
from cable_ingest.models.boq import BoqData, BoqItem, BoqSummary
from cable_ingest.models.diagnostics import ConversionDiagnostics

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger("cable_ingest.converters.boq")

MIN_ROWS = 2

__all__ = [
    "COLUMN_SYNONYMS",
    "HEADER_MARKERS",
    "ColumnMap",
    "EmptyInputError",
    "NoValidItemsError",
    "classify_cost_bucket",
    "convert_boq",
    "detect_header_row",
    "extract_project_name",
    "map_columns",
    "normalize_number_text",
    "parse_item_number",
    "parse_numeric",
    "resolve_description_column",
    "summarize",
]


class EmptyInputError(ValidationError):
    """Raised when a sheet has fewer than two rows."""

    default_stage = "convert_boq"
    default_code = "BOQ_EMPTY_INPUT"


class NoValidItemsError(ValidationError):
    """Raised when no row of a sheet yields an item."""

    default_stage = "convert_boq"
    default_code = "BOQ_NO_VALID_ITEMS"


def convert_boq(
    rows: Sequence[Sequence[object]], *, config: IngestConfig | None = None
) -> BoqData:
    """Convert spreadsheet rows into ``BoqData``.

    Args:
        rows: Raw cell values, row-major. Rows may be ragged or empty.
        config: Ingestion configuration; defaults to ``IngestConfig()``.

    Returns:
        Items in sheet order with a cost summary. Skipped rows are
        counted in ``data.diagnostics``.

    Raises:
        EmptyInputError: If there are fewer than 2 rows.
        NoValidItemsError: If no data row yields an item.
    """
    config = config or IngestConfig()
    if len(rows) < MIN_ROWS:
        msg = f"BOQ sheet has {len(rows)} row(s); need a header and at least one item"
        raise EmptyInputError(msg)

    header_index = detect_header_row(rows, config.header_scan_rows)
    header_row = rows[header_index] or ()
    data_rows = rows[header_index + 1 :]

    columns = resolve_description_column(
        map_columns(header_row),
        header_row,
        data_rows[0] if data_rows else None,
    )
    logger.debug("BOQ columns | header=%d | map=%s", header_index, columns.to_dict())

    skipped: Counter[str] = Counter()
    items: list[BoqItem] = []
    for row in data_rows:
        if is_blank_row(row):
            skipped["blank_row"] += 1
            continue
        item = parse_item_row(
            row,
            columns,
            sequence=len(items) + 1,
            skipped=skipped,
            bucket_keywords=config.cost_bucket_keywords,
            default_bucket=config.default_cost_bucket,
        )
        if item is not None:
            items.append(item)

    if not items:
        msg = f"No valid BOQ items in {len(data_rows)} data row(s)"
        raise NoValidItemsError(msg)

    data = BoqData(
        items=tuple(items),
        summary=summarize(items),
        project_name=extract_project_name(rows, header_index),
        diagnostics=ConversionDiagnostics.from_counter(skipped),
    )
    logger.info(
        "BOQ converted | rows=%d | items=%d | total_cost=%.2f | skipped=%d",
        len(data_rows),
        len(data.items),
        data.summary.total_cost,
        data.diagnostics.total_skipped,
    )
    return data


def summarize(items: Sequence[BoqItem]) -> BoqSummary:
    """Aggregate item totals; the buckets partition ``total_cost``."""
    by_bucket: dict[str, float] = {MATERIAL: 0.0, LABOR: 0.0}
    for item in items:
        by_bucket[item.cost_bucket] = by_bucket.get(item.cost_bucket, 0.0) + item.total_price
    return BoqSummary(
        total_items=len(items),
        total_cost=sum(item.total_price for item in items),
        material_cost=by_bucket[MATERIAL],
        labor_cost=by_bucket[LABOR],
        cost_by_bucket=by_bucket,
    )
