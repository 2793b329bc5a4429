"""Shared ingestion constants.

Soil types, their default trench depths, classification keyword sets,
cost-bucket keywords and upload limits. ``IngestConfig`` copies these
as its defaults; converters read them through the config so regional
variants can be injected without code changes.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Soil types
# ---------------------------------------------------------------------------

PASIR = "Pasir"
"""Sand."""

TANAH_LIAT = "Tanah Liat"
"""Clay. Also the fallback classification."""

BATUAN = "Batuan"
"""Rock."""

DEFAULT_SOIL_DEPTHS: dict[str, float] = {
    PASIR: 1.5,
    TANAH_LIAT: 2.0,
    BATUAN: 2.5,
}
"""Trench depth in metres per soil type."""

DEFAULT_DEPTH_M: float = 2.0
"""Depth for soil types missing from the depth mapping."""

# Ordered: the first soil type whose keyword appears in the text wins.
DEFAULT_SOIL_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (PASIR, ("pasir", "sand")),
    (BATUAN, ("batuan", "batu", "rock")),
    (TANAH_LIAT, ("tanah liat", "clay", "liat")),
)

# ---------------------------------------------------------------------------
# BOQ cost buckets
# ---------------------------------------------------------------------------

MATERIAL = "material"
LABOR = "labor"

# Ordered: labor keywords are checked before material keywords.
DEFAULT_COST_BUCKET_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (LABOR, ("labor", "pekerja", "upah")),
    (MATERIAL, ("material", "bahan")),
)

DEFAULT_COST_BUCKET: str = MATERIAL
"""Bucket for descriptions matching no keyword."""

# ---------------------------------------------------------------------------
# Upload limits
# ---------------------------------------------------------------------------

KML_EXTENSIONS: frozenset[str] = frozenset({".kml"})
BOQ_EXTENSIONS: frozenset[str] = frozenset({".xlsx", ".xlsm"})

DEFAULT_MAX_KML_BYTES: int = 10 * 1024 * 1024
DEFAULT_MAX_BOQ_BYTES: int = 5 * 1024 * 1024

DEFAULT_HEADER_SCAN_ROWS: int = 10
