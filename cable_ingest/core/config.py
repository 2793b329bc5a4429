"""Ingestion configuration loaded from environment variables.

All values have defaults matching ``cable_ingest.core.constants``.
Regional variants (extra soil types, different depths, localized
cost-bucket keywords) are injected by constructing ``IngestConfig``
directly or through the ``INGEST_*`` environment variables.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out
    of its valid range, so bad configuration surfaces at startup rather
    than halfway through a conversion.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field

from cable_ingest.core.constants import (
    DEFAULT_COST_BUCKET,
    DEFAULT_COST_BUCKET_KEYWORDS,
    DEFAULT_DEPTH_M,
    DEFAULT_HEADER_SCAN_ROWS,
    DEFAULT_MAX_BOQ_BYTES,
    DEFAULT_MAX_KML_BYTES,
    DEFAULT_SOIL_DEPTHS,
    DEFAULT_SOIL_KEYWORDS,
)
from cable_ingest.core.exceptions import PermanentError

_TRUTHY = frozenset({"1", "true", "yes", "on"})


class ConfigValidationError(PermanentError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class IngestConfig:
    """Immutable ingestion configuration.

    Attributes:
        soil_depths: Trench depth in metres per soil type.
        default_depth_m: Depth for soil types missing from ``soil_depths``.
        soil_keywords: Ordered ``(soil_type, keywords)`` pairs for
            text classification.
        cost_bucket_keywords: Ordered ``(bucket, keywords)`` pairs for
            BOQ cost partitioning.
        default_cost_bucket: Bucket for descriptions matching no keyword.
        emit_polygons: Emit Polygon placemarks as features.
        header_scan_rows: How many leading rows to scan for a BOQ header.
        max_kml_bytes: Upload size limit for KML files.
        max_boq_bytes: Upload size limit for BOQ workbooks.
    """

    soil_depths: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SOIL_DEPTHS))
    default_depth_m: float = DEFAULT_DEPTH_M
    soil_keywords: tuple[tuple[str, tuple[str, ...]], ...] = DEFAULT_SOIL_KEYWORDS
    cost_bucket_keywords: tuple[tuple[str, tuple[str, ...]], ...] = DEFAULT_COST_BUCKET_KEYWORDS
    default_cost_bucket: str = DEFAULT_COST_BUCKET
    emit_polygons: bool = False
    header_scan_rows: int = DEFAULT_HEADER_SCAN_ROWS
    max_kml_bytes: int = DEFAULT_MAX_KML_BYTES
    max_boq_bytes: int = DEFAULT_MAX_BOQ_BYTES

    def depth_for(self, soil_type: str) -> float:
        """Return the trench depth in metres for *soil_type*."""
        return self.soil_depths.get(soil_type, self.default_depth_m)

    @classmethod
    def from_env(cls) -> IngestConfig:
        """Load and validate configuration from environment variables.

        ``INGEST_SOIL_DEPTHS`` is merged over the default depth mapping;
        ``INGEST_COST_BUCKET_KEYWORDS`` replaces the default buckets.

        Raises:
            ConfigValidationError: If a value is out of range or a JSON
                variable cannot be decoded or has the wrong shape.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``INGEST_MAX_KML_BYTES=abc``).
        """
        depths = dict(DEFAULT_SOIL_DEPTHS)
        depths.update(_json_env("INGEST_SOIL_DEPTHS", {}))

        buckets_raw = _json_env("INGEST_COST_BUCKET_KEYWORDS", None)
        buckets = DEFAULT_COST_BUCKET_KEYWORDS
        if buckets_raw is not None:
            buckets = _bucket_keywords("INGEST_COST_BUCKET_KEYWORDS", buckets_raw)

        config = cls(
            soil_depths={str(k): float(v) for k, v in depths.items()},
            default_depth_m=float(os.getenv("INGEST_DEFAULT_DEPTH_M", str(DEFAULT_DEPTH_M))),
            cost_bucket_keywords=buckets,
            default_cost_bucket=os.getenv("INGEST_DEFAULT_COST_BUCKET", DEFAULT_COST_BUCKET),
            emit_polygons=os.getenv("INGEST_EMIT_POLYGONS", "").strip().lower() in _TRUTHY,
            header_scan_rows=int(
                os.getenv("INGEST_HEADER_SCAN_ROWS", str(DEFAULT_HEADER_SCAN_ROWS))
            ),
            max_kml_bytes=int(os.getenv("INGEST_MAX_KML_BYTES", str(DEFAULT_MAX_KML_BYTES))),
            max_boq_bytes=int(os.getenv("INGEST_MAX_BOQ_BYTES", str(DEFAULT_MAX_BOQ_BYTES))),
        )
        validate_config(config)
        return config


def _json_env(key: str, default: dict | None) -> dict | None:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise ConfigValidationError(key, raw, f"must be a JSON object ({exc})") from exc
    if not isinstance(value, dict):
        raise ConfigValidationError(key, raw, "must be a JSON object")
    return value


def _bucket_keywords(key: str, raw: dict) -> tuple[tuple[str, tuple[str, ...]], ...]:
    buckets = []
    for name, keywords in raw.items():
        if not isinstance(keywords, list) or not all(
            isinstance(k, str) and k.strip() for k in keywords
        ):
            raise ConfigValidationError(
                key,
                {name: keywords},
                "each bucket must map to a list of non-empty strings",
            )
        buckets.append((str(name), tuple(k.strip().lower() for k in keywords)))
    return tuple(buckets)


def validate_config(config: IngestConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    for soil_type, depth in config.soil_depths.items():
        if depth < 0:
            raise ConfigValidationError(
                "INGEST_SOIL_DEPTHS",
                {soil_type: depth},
                "depths must be >= 0 (metres)",
            )

    if config.default_depth_m < 0:
        raise ConfigValidationError(
            "INGEST_DEFAULT_DEPTH_M",
            config.default_depth_m,
            "must be >= 0 (metres)",
        )

    if config.header_scan_rows <= 0:
        raise ConfigValidationError(
            "INGEST_HEADER_SCAN_ROWS",
            config.header_scan_rows,
            "must be > 0",
        )

    if config.max_kml_bytes <= 0:
        raise ConfigValidationError(
            "INGEST_MAX_KML_BYTES",
            config.max_kml_bytes,
            "must be > 0 (bytes)",
        )

    if config.max_boq_bytes <= 0:
        raise ConfigValidationError(
            "INGEST_MAX_BOQ_BYTES",
            config.max_boq_bytes,
            "must be > 0 (bytes)",
        )

    if not config.default_cost_bucket.strip():
        raise ConfigValidationError(
            "INGEST_DEFAULT_COST_BUCKET",
            config.default_cost_bucket,
            "must not be empty",
        )

    for bucket, keywords in config.cost_bucket_keywords:
        if isinstance(keywords, str) or not all(
            isinstance(k, str) and k.strip() for k in keywords
        ):
            raise ConfigValidationError(
                "INGEST_COST_BUCKET_KEYWORDS",
                {bucket: keywords},
                "each bucket must map to a list of non-empty strings",
            )
