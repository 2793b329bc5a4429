"""Thin file-ingress helpers in front of the pure converters.

The converters perform no I/O. This module is the only place files are
read, and only after the upload checks pass:

- **validate_upload**: extension allow-list and byte-size limit per kind
- **load_kml_file**: read a ``.kml`` file and hand it to ``convert_kml``
- **read_sheet_rows**: first worksheet of an ``.xlsx`` as raw cell rows
- **load_boq_file**: ``read_sheet_rows`` followed by ``convert_boq``
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from cable_ingest.core.config import IngestConfig
from cable_ingest.core.constants import BOQ_EXTENSIONS, KML_EXTENSIONS
from cable_ingest.core.exceptions import ValidationError

if TYPE_CHECKING:
    from cable_ingest.models.boq import BoqData
    from cable_ingest.models.feature import FeatureCollection

logger = logging.getLogger("cable_ingest.core.ingress")

UploadKind = Literal["kml", "boq"]


class UploadRejectedError(ValidationError):
    """Raised when an upload has the wrong extension or is too large."""

    default_stage = "ingress"
    default_code = "UPLOAD_REJECTED"


class UnsupportedFormatError(ValidationError):
    """Raised for spreadsheet formats that cannot be decoded (e.g. ``.xls``)."""

    default_stage = "ingress"
    default_code = "UNSUPPORTED_FORMAT"


# ---------------------------------------------------------------------------
# Upload validation
# ---------------------------------------------------------------------------


def validate_upload(
    filename: str,
    size_bytes: int,
    kind: UploadKind,
    config: IngestConfig | None = None,
) -> None:
    """Check an upload's extension and size before it is read.

    Args:
        filename: Client-supplied file name; only the suffix is used.
        size_bytes: Upload size in bytes.
        kind: ``"kml"`` or ``"boq"``.
        config: Supplies the size limits; defaults to ``IngestConfig()``.

    Raises:
        UploadRejectedError: If the extension is not allowed for *kind*
            or the file exceeds the configured limit.
        ValueError: If *kind* is unknown.
    """
    config = config or IngestConfig()
    if kind == "kml":
        extensions, limit = KML_EXTENSIONS, config.max_kml_bytes
    elif kind == "boq":
        extensions, limit = BOQ_EXTENSIONS, config.max_boq_bytes
    else:
        msg = f"Unknown upload kind: {kind!r}"
        raise ValueError(msg)

    suffix = Path(filename).suffix.lower()
    if suffix not in extensions:
        msg = (
            f"File '{filename}' is not an accepted {kind} upload "
            f"(expected {', '.join(sorted(extensions))})"
        )
        raise UploadRejectedError(msg)

    if size_bytes > limit:
        msg = f"File '{filename}' is {size_bytes} bytes; the {kind} limit is {limit} bytes"
        raise UploadRejectedError(msg)

    logger.debug("Upload accepted | file=%s | kind=%s | bytes=%d", filename, kind, size_bytes)


# ---------------------------------------------------------------------------
# File adapters
# ---------------------------------------------------------------------------


def load_kml_file(path: str | Path, config: IngestConfig | None = None) -> FeatureCollection:
    """Validate, read and convert a KML file."""
    from cable_ingest.converters.kml import convert_kml

    path = Path(path)
    validate_upload(path.name, path.stat().st_size, "kml", config)
    return convert_kml(path.read_bytes(), config=config)


def read_sheet_rows(path: str | Path) -> list[list[object]]:
    """Return the first worksheet of a workbook as lists of cell values.

    Formulas are read as their cached values. Trailing empty rows are
    kept; the BOQ converter skips them.

    Raises:
        UnsupportedFormatError: For legacy ``.xls`` workbooks.
    """
    import openpyxl

    path = Path(path)
    if path.suffix.lower() == ".xls":
        msg = f"Legacy .xls workbook '{path.name}' is not supported; save it as .xlsx"
        raise UnsupportedFormatError(msg)

    workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        rows = [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    logger.debug("Sheet read | file=%s | sheet=%s | rows=%d", path.name, sheet.title, len(rows))
    return rows


def load_boq_file(path: str | Path, config: IngestConfig | None = None) -> BoqData:
    """Validate, read and convert a BOQ workbook."""
    from cable_ingest.converters.boq import convert_boq

    path = Path(path)
    validate_upload(path.name, path.stat().st_size, "boq", config)
    return convert_boq(read_sheet_rows(path), config=config)
