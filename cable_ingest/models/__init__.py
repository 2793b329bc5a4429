"""Data models and schemas.

Defines the data structures produced by the converters:
- Feature / FeatureCollection: converted KML placemarks
- Style / RgbaColor: resolved KML visual styles
- BoqItem / BoqSummary / BoqData: converted bill of quantities
- ConversionDiagnostics: per-element skip counters
- ProjectStatistics: per-project route statistics
"""

from cable_ingest.models.boq import BoqData, BoqItem, BoqSummary
from cable_ingest.models.diagnostics import ConversionDiagnostics
from cable_ingest.models.feature import (
    LINE_STRING,
    POINT,
    POLYGON,
    Coordinate,
    Feature,
    FeatureCollection,
    Segment,
)
from cable_ingest.models.statistics import ProjectStatistics, compute_statistics
from cable_ingest.models.style import RgbaColor, Style

__all__ = [
    "LINE_STRING",
    "POINT",
    "POLYGON",
    "BoqData",
    "BoqItem",
    "BoqSummary",
    "ConversionDiagnostics",
    "Coordinate",
    "Feature",
    "FeatureCollection",
    "ProjectStatistics",
    "RgbaColor",
    "Segment",
    "Style",
    "compute_statistics",
]
