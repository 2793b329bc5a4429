"""Tests for opt-in polygon extraction.

Covers:
- Ring closing and hole extraction
- Degenerate rings rejected
- Self-intersecting rings repaired, collinear rings rejected
- Geodesic area with holes subtracted
"""

from __future__ import annotations

import logging

import pytest

from cable_ingest.converters.kml import KmlValidationError
from cable_ingest.converters.kml._polygon import geodesic_area_ha, parse_polygon
from cable_ingest.converters.kml._validation import find_first, parse_document

NS = 'xmlns="http://www.opengis.net/kml/2.2"'
SQUARE = "106.0,-6.0 106.01,-6.0 106.01,-6.01 106.0,-6.01 106.0,-6.0"
HOLE = "106.0025,-6.0025 106.0075,-6.0025 106.0075,-6.0075 106.0025,-6.0075 106.0025,-6.0025"


def _ring(boundary: str, coordinates: str) -> str:
    return (
        f"<{boundary}><LinearRing><coordinates>{coordinates}</coordinates>"
        f"</LinearRing></{boundary}>"
    )


def _polygon(outer: str | None, *inner: str):
    body = "" if outer is None else _ring("outerBoundaryIs", outer)
    body += "".join(_ring("innerBoundaryIs", ring) for ring in inner)
    root = parse_document(f"<kml {NS}><Polygon>{body}</Polygon></kml>")
    return find_first(root, "Polygon")


class TestParsePolygon:
    """Ring extraction and validation."""

    def test_closed_square(self) -> None:
        exterior, holes = parse_polygon(_polygon(SQUARE), "Blok")
        assert len(exterior) == 5
        assert holes == []

    def test_open_ring_closed(self) -> None:
        exterior, _ = parse_polygon(_polygon("0,0 1,0 1,1 0,1"), "Blok")
        assert len(exterior) == 5
        assert exterior[0] == exterior[-1] == (0.0, 0.0)

    def test_hole_read_and_closed(self) -> None:
        _, holes = parse_polygon(_polygon("0,0 4,0 4,4 0,4", "1,1 2,1 2,2 1,2"), "Blok")
        assert len(holes) == 1
        assert holes[0][0] == holes[0][-1]

    def test_empty_hole_ignored(self) -> None:
        _, holes = parse_polygon(_polygon(SQUARE, " "), "Blok")
        assert holes == []

    @pytest.mark.parametrize(
        "outer",
        [None, "", "0,0 1,1", "1,1 1,1 1,1 1,1", "0,0 1,0 0,0"],
    )
    def test_degenerate_outer_ring(self, outer: str | None) -> None:
        with pytest.raises(KmlValidationError, match="distinct point"):
            parse_polygon(_polygon(outer), "Blok")

    def test_degenerate_hole(self) -> None:
        with pytest.raises(KmlValidationError, match="inner ring"):
            parse_polygon(_polygon(SQUARE, "106.0,-6.0 106.001,-6.0"), "Blok")

    def test_bow_tie_repaired(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="cable_ingest.converters.kml"):
            exterior, _ = parse_polygon(_polygon("0,0 1,1 1,0 0,1 0,0"), "Bow")
        assert len(exterior) == 5
        assert "Repairing polygon 'Bow'" in caplog.text

    def test_collinear_ring_rejected(self) -> None:
        with pytest.raises(KmlValidationError, match="'Line'"):
            parse_polygon(_polygon("0,0 1,0 2,0 0,0"), "Line")


class TestGeodesicArea:
    """WGS 84 areas in hectares."""

    def test_square_near_equator(self) -> None:
        exterior, _ = parse_polygon(_polygon(SQUARE), "Blok")
        assert 120 < geodesic_area_ha(exterior, []) < 125

    def test_hole_subtracted(self) -> None:
        exterior, holes = parse_polygon(_polygon(SQUARE, HOLE), "Blok")
        full = geodesic_area_ha(exterior, [])
        assert geodesic_area_ha(exterior, holes) == pytest.approx(0.75 * full, rel=1e-2)

    def test_orientation_independent(self) -> None:
        ring = [(106.0, -6.0), (106.01, -6.0), (106.01, -6.01), (106.0, -6.01), (106.0, -6.0)]
        assert geodesic_area_ha(ring, []) == pytest.approx(geodesic_area_ha(ring[::-1], []))
