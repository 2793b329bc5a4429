"""Unified ingestion exception taxonomy.

Every domain exception inherits from ``IngestError`` and carries
structured context fields so callers can turn a fatal conversion
failure into a user-facing message without string matching.

Taxonomy categories
-------------------
- ``ValidationError``: input rejected (malformed file, empty sheet).
- ``PermanentError``: unrecoverable failure that retrying or different
  input cannot fix (invalid configuration).

Per-element problems (a bad coordinate tuple, a blank BOQ row) are
never raised; converters skip them and count them in diagnostics.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging and API responses.
"""

from __future__ import annotations


class IngestError(Exception):
    """Base exception for all ingestion-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Stage where the error occurred
            (e.g. ``"convert_kml"``, ``"convert_boq"``).
        code: Machine-readable error code (e.g. ``"KML_PARSE_FAILED"``).
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ValidationError):
            return "validation"
        return "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(IngestError):
    """Input or domain-model validation failure."""


class PermanentError(IngestError):
    """Unrecoverable domain failure."""
