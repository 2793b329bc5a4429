"""Polygon extraction for KML conversion (opt-in).

Only used when ``IngestConfig.emit_polygons`` is set. Open rings are
closed, rings need at least 3 distinct points, self-intersections are
repaired with shapely where possible, and areas are measured on the
WGS 84 ellipsoid with ``pyproj.Geod``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cable_ingest.converters.kml._constants import MIN_POLYGON_VERTICES, SQ_METRES_PER_HECTARE
from cable_ingest.converters.kml._geometry import parse_coordinates_text
from cable_ingest.converters.kml._validation import (
    KmlValidationError,
    find_all,
    find_first,
    first_text,
)

if TYPE_CHECKING:
    from lxml.etree import _Element

    from cable_ingest.models.feature import Coordinate

logger = logging.getLogger("cable_ingest.converters.kml")

_AREAL_TYPES = ("Polygon", "MultiPolygon")


def parse_polygon(
    polygon_elem: _Element, label: str
) -> tuple[list[Coordinate], list[list[Coordinate]]]:
    """Read a ``<Polygon>`` as a closed exterior ring and its holes.

    *label* names the feature in log lines and error messages. Holes
    whose coordinates are empty are ignored.

    Raises:
        KmlValidationError: If a ring has fewer than 3 distinct points,
            or the shape is invalid and cannot be repaired into an
            area with non-zero size.
    """
    outer = find_first(polygon_elem, "outerBoundaryIs")
    outer_text = first_text(outer, "coordinates") if outer is not None else ""
    exterior = _closed_ring(parse_coordinates_text(outer_text), label, "outer")

    holes: list[list[Coordinate]] = []
    for inner in find_all(polygon_elem, "innerBoundaryIs"):
        ring = parse_coordinates_text(first_text(inner, "coordinates"))
        if ring:
            holes.append(_closed_ring(ring, label, "inner"))

    _check_area(exterior, holes, label)
    return exterior, holes


def _closed_ring(coords: list[Coordinate], label: str, boundary: str) -> list[Coordinate]:
    if coords and coords[0] != coords[-1]:
        logger.debug("Closing open %s ring of '%s'", boundary, label)
        coords = [*coords, coords[0]]

    distinct = len(set(coords))
    if len(coords) < MIN_POLYGON_VERTICES or distinct < 3:
        msg = f"'{label}': {boundary} ring has {distinct} distinct point(s), need at least 3"
        raise KmlValidationError(msg)
    return coords


def _check_area(exterior: list[Coordinate], holes: list[list[Coordinate]], label: str) -> None:
    from shapely.geometry import Polygon
    from shapely.validation import explain_validity, make_valid

    shape = Polygon(exterior, holes)
    if not shape.is_valid:
        logger.warning("Repairing polygon '%s' | reason=%s", label, explain_validity(shape))
        shape = make_valid(shape)
        if shape.geom_type not in _AREAL_TYPES:
            msg = f"'{label}': repair produced a {shape.geom_type}, not an area"
            raise KmlValidationError(msg)

    if shape.is_empty or shape.area == 0:
        msg = f"'{label}': polygon has zero area"
        raise KmlValidationError(msg)


def geodesic_area_ha(exterior: list[Coordinate], interior: list[list[Coordinate]]) -> float:
    """Geodesic polygon area in hectares, holes subtracted."""
    from pyproj import Geod

    geod = Geod(ellps="WGS84")

    def ring_area(ring: list[Coordinate]) -> float:
        area_m2, _perimeter = geod.polygon_area_perimeter(
            [c[0] for c in ring], [c[1] for c in ring]
        )
        return abs(area_m2)

    total = ring_area(exterior) - sum(ring_area(ring) for ring in interior)
    return max(total, 0.0) / SQ_METRES_PER_HECTARE
