"""Data model for converted KML features.

A Feature represents a single cable route (LineString), marker (Point)
or, when polygon emission is enabled, area (Polygon) extracted from a
KML Placemark, with its soil classification, resolved style and
metadata. ``to_dict()`` produces the GeoJSON shape the map layer reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cable_ingest.models.diagnostics import ConversionDiagnostics
from cable_ingest.models.style import Style

if TYPE_CHECKING:
    from collections.abc import Iterator

Coordinate = tuple[float, float]
"""``(lon, lat)`` in WGS 84 degrees."""

LINE_STRING = "LineString"
POINT = "Point"
POLYGON = "Polygon"

GEOMETRY_TYPES = frozenset({LINE_STRING, POINT, POLYGON})


@dataclass(frozen=True, slots=True)
class Segment:
    """One leg of a cable route between consecutive vertices.

    Attributes:
        start: Start coordinate.
        end: End coordinate.
        distance: Great-circle length in metres (>= 0).
        bearing: Forward azimuth in degrees, [0, 360).
    """

    start: Coordinate
    end: Coordinate
    distance: float
    bearing: float

    def to_dict(self) -> dict[str, object]:
        return {
            "startPoint": list(self.start),
            "endPoint": list(self.end),
            "distance": self.distance,
            "bearing": self.bearing,
        }


@dataclass(frozen=True, slots=True)
class Feature:
    """A single converted Placemark.

    Attributes:
        geometry_type: ``"LineString"``, ``"Point"`` or ``"Polygon"``.
        coordinates: Vertices as ``(lon, lat)`` tuples. One entry for a
            Point; the exterior ring for a Polygon.
        id: Sequential feature id (``"cable-001"``).
        name: Placemark name, or ``"Feature {n}"``.
        soil_type: Soil classification.
        depth: Trench depth in metres derived from ``soil_type``.
        style: Resolved style, if the Placemark referenced one.
        metadata: Placemark metadata (description, timestamps, ExtendedData).
        segments: Route legs (LineString only).
        total_distance: Sum of segment distances in metres (LineString only).
        interior_coords: Hole rings (Polygon only).
        area_ha: Geodesic area in hectares (Polygon only).
    """

    geometry_type: str
    coordinates: tuple[Coordinate, ...]
    id: str
    name: str
    soil_type: str
    depth: float
    style: Style | None = None
    metadata: dict[str, Any] | None = None
    segments: tuple[Segment, ...] | None = None
    total_distance: float | None = None
    interior_coords: tuple[tuple[Coordinate, ...], ...] | None = None
    area_ha: float | None = None

    def __post_init__(self) -> None:
        if self.geometry_type not in GEOMETRY_TYPES:
            msg = f"Unsupported geometry type: {self.geometry_type!r}"
            raise ValueError(msg)

    @property
    def is_line(self) -> bool:
        return self.geometry_type == LINE_STRING

    def geometry_dict(self) -> dict[str, object]:
        """GeoJSON geometry object."""
        coordinates: object
        if self.geometry_type == POINT:
            coordinates = list(self.coordinates[0])
        elif self.geometry_type == POLYGON:
            rings = [self.coordinates, *(self.interior_coords or ())]
            coordinates = [[list(c) for c in ring] for ring in rings]
        else:
            coordinates = [list(c) for c in self.coordinates]
        return {"type": self.geometry_type, "coordinates": coordinates}

    def to_dict(self) -> dict[str, object]:
        """Serialise to a GeoJSON Feature with camelCase properties."""
        properties: dict[str, object] = {
            "id": self.id,
            "name": self.name,
            "soilType": self.soil_type,
            "depth": self.depth,
        }
        if self.segments is not None:
            properties["segments"] = [s.to_dict() for s in self.segments]
        if self.total_distance is not None:
            properties["totalDistance"] = self.total_distance
        if self.area_ha is not None:
            properties["areaHa"] = self.area_ha
        if self.style is not None:
            properties["style"] = self.style.to_dict()
        if self.metadata:
            properties["metadata"] = dict(self.metadata)
        return {
            "type": "Feature",
            "geometry": self.geometry_dict(),
            "properties": properties,
        }


@dataclass(frozen=True, slots=True)
class FeatureCollection:
    """Ordered features of one KML document.

    ``diagnostics`` records what was skipped; it is excluded from
    equality because it is not part of the conversion result.
    """

    features: tuple[Feature, ...] = ()
    diagnostics: ConversionDiagnostics = field(
        default_factory=ConversionDiagnostics, compare=False
    )

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    def to_dict(self) -> dict[str, object]:
        """Serialise to a GeoJSON FeatureCollection."""
        return {
            "type": "FeatureCollection",
            "features": [f.to_dict() for f in self.features],
        }
