"""Tests for end-to-end KML conversion.

Covers:
- Styled, namespaced survey export (01_cable_routes_styled.kml)
- Feature ids, default names, soil types and depths
- StyleMap, inline and unresolved styles
- Metadata and ExtendedData
- Skip diagnostics (too few points, bad coordinates, polygons)
- Opt-in polygon emission (02_work_areas_polygons.kml)
- Malformed XML rejection (03_malformed_unclosed_tags.kml)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from cable_ingest.converters.kml import KmlParseError, convert_kml
from cable_ingest.core.config import IngestConfig
from cable_ingest.core.constants import BATUAN, PASIR, TANAH_LIAT
from cable_ingest.models.feature import LINE_STRING, POINT, POLYGON, FeatureCollection
from cable_ingest.models.style import RgbaColor

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def routes(routes_text: str) -> FeatureCollection:
    return convert_kml(routes_text)


class TestStyledRoutes:
    """Conversion of the styled sample export."""

    def test_feature_order_and_ids(self, routes: FeatureCollection) -> None:
        assert [f.id for f in routes] == [
            "cable-001",
            "cable-002",
            "cable-003",
            "cable-004",
            "cable-005",
        ]
        assert [f.name for f in routes] == [
            "Jalur Utama",
            "Galian Batuan Keras",
            "Feature 3",
            "Segment Clay",
            "Inline styled",
        ]

    def test_geometry_types(self, routes: FeatureCollection) -> None:
        assert [f.geometry_type for f in routes] == [
            LINE_STRING,
            LINE_STRING,
            POINT,
            LINE_STRING,
            LINE_STRING,
        ]

    def test_route_segments(self, routes: FeatureCollection) -> None:
        route = routes.features[0]
        assert route.coordinates == ((106.99, -6.24), (106.995, -6.24), (106.995, -6.245))
        assert route.segments is not None
        assert len(route.segments) == 2
        assert route.segments[0].distance == pytest.approx(552.7, rel=1e-3)
        assert route.segments[0].bearing == pytest.approx(90.0, abs=0.1)
        assert route.segments[1].distance == pytest.approx(556.0, rel=1e-3)
        assert route.segments[1].bearing == pytest.approx(180.0, abs=0.1)
        assert route.total_distance == pytest.approx(
            sum(s.distance for s in route.segments)
        )

    def test_point_keeps_single_coordinate(self, routes: FeatureCollection) -> None:
        point = routes.features[2]
        assert point.coordinates == ((107.0, -6.245),)
        assert point.segments is None
        assert point.total_distance is None

    def test_soil_types_and_depths(self, routes: FeatureCollection) -> None:
        assert [(f.soil_type, f.depth) for f in routes] == [
            (PASIR, 1.5),  # StyleMap -> yellow line
            (BATUAN, 2.5),  # name keyword beats the yellow line
            (BATUAN, 2.5),  # grey icon
            (TANAH_LIAT, 2.0),  # name keyword
            (TANAH_LIAT, 2.0),  # inline red line
        ]

    def test_stylemap_resolved_through_normal_pair(self, routes: FeatureCollection) -> None:
        style = routes.features[0].style
        assert style is not None
        assert style.line_color == RgbaColor(255, 255, 0, 1.0)
        assert style.line_width == 3.0

    def test_icon_style_on_point(self, routes: FeatureCollection) -> None:
        style = routes.features[2].style
        assert style is not None
        assert style.icon_scale == 1.2
        assert style.icon_href is not None
        assert style.icon_href.endswith("wht-blank.png")
        assert style.label_color == RgbaColor(255, 255, 255, 0.5)

    def test_unresolved_style_leaves_feature_unstyled(
        self, routes: FeatureCollection
    ) -> None:
        assert routes.features[3].style is None

    def test_inline_style_used(self, routes: FeatureCollection) -> None:
        style = routes.features[4].style
        assert style is not None
        assert style.line_color == RgbaColor(255, 0, 0, 1.0)

    def test_metadata(self, routes: FeatureCollection) -> None:
        assert routes.features[0].metadata == {
            "description": "Feeder from the central office",
            "operator": "PT Kabel Nusantara",
        }
        assert routes.features[3].metadata == {
            "timestamp": "2024-03-01T08:00:00Z",
            "visibility": False,
        }
        assert routes.features[1].metadata is None

    def test_diagnostics(self, routes: FeatureCollection) -> None:
        assert routes.diagnostics.skipped == {
            "invalid_coordinate": 1,
            "too_few_points": 1,
            "unresolved_style": 1,
            "unsupported_geometry": 1,
        }
        assert routes.diagnostics.total_skipped == 4

    def test_bytes_input_matches_text(self, routes_kml: Path, routes: FeatureCollection) -> None:
        assert convert_kml(routes_kml.read_bytes()) == routes

    def test_to_dict_is_geojson(self, routes: FeatureCollection) -> None:
        data = routes.to_dict()
        assert data["type"] == "FeatureCollection"
        first = data["features"][0]
        assert first["geometry"]["type"] == "LineString"
        assert first["properties"]["soilType"] == PASIR
        assert first["properties"]["style"]["lineColor"] == "rgba(255, 255, 0, 1.00)"
        point = data["features"][2]
        assert point["geometry"]["coordinates"] == [107.0, -6.245]

    def test_summary_logged(
        self, routes_text: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="cable_ingest.converters.kml"):
            convert_kml(routes_text)
        assert "KML converted | placemarks=7 | features=5" in caplog.text


class TestDocumentEdgeCases:
    """Documents without usable content."""

    def test_no_placemarks(self) -> None:
        collection = convert_kml('<kml xmlns="http://www.opengis.net/kml/2.2"><Document/></kml>')
        assert len(collection) == 0
        assert collection.diagnostics.total_skipped == 0

    def test_placemark_without_geometry(self) -> None:
        collection = convert_kml("<kml><Placemark><name>Empty</name></Placemark></kml>")
        assert len(collection) == 0
        assert collection.diagnostics.count("no_geometry") == 1

    def test_point_without_coordinates(self) -> None:
        collection = convert_kml("<kml><Placemark><Point><coordinates/></Point></Placemark></kml>")
        assert len(collection) == 0
        assert collection.diagnostics.count("no_coordinates") == 1

    def test_default_names_count_emitted_features(self) -> None:
        kml = (
            "<kml>"
            "<Placemark><Point><coordinates>1,2</coordinates></Point></Placemark>"
            "<Placemark><LineString><coordinates>1,2</coordinates></LineString></Placemark>"
            "<Placemark><Point><coordinates>3,4</coordinates></Point></Placemark>"
            "</kml>"
        )
        collection = convert_kml(kml)
        assert [(f.id, f.name) for f in collection] == [
            ("cable-001", "Feature 1"),
            ("cable-002", "Feature 2"),
        ]

    def test_linestring_inside_multigeometry(self) -> None:
        kml = (
            "<kml><Placemark><name>Multi</name><MultiGeometry>"
            "<LineString><coordinates>0,0 0,1</coordinates></LineString>"
            "<Point><coordinates>5,5</coordinates></Point>"
            "</MultiGeometry></Placemark></kml>"
        )
        (feature,) = convert_kml(kml).features
        assert feature.geometry_type == LINE_STRING

    def test_style_without_supported_substyles_dropped(self) -> None:
        kml = (
            "<kml><Document>"
            '<Style id="info"><BalloonStyle><text>$[name]</text></BalloonStyle></Style>'
            "<Placemark><styleUrl>#info</styleUrl>"
            "<Point><coordinates>1,2</coordinates></Point></Placemark>"
            "</Document></kml>"
        )
        collection = convert_kml(kml)
        (feature,) = collection.features
        assert feature.style is None
        assert "style" not in feature.to_dict()["properties"]
        assert collection.diagnostics.total_skipped == 0

    def test_empty_shared_style_falls_back_to_inline(self) -> None:
        kml = (
            "<kml><Document>"
            '<Style id="info"><BalloonStyle><text>x</text></BalloonStyle></Style>'
            "<Placemark><styleUrl>#info</styleUrl>"
            "<Style><LineStyle><color>ff0000ff</color></LineStyle></Style>"
            "<LineString><coordinates>0,0 0,1</coordinates></LineString></Placemark>"
            "</Document></kml>"
        )
        (feature,) = convert_kml(kml).features
        assert feature.style is not None
        assert feature.style.line_color == RgbaColor(255, 0, 0, 1.0)

    def test_custom_depths(self) -> None:
        config = IngestConfig(soil_depths={TANAH_LIAT: 1.8})
        kml = "<kml><Placemark><Point><coordinates>1,2</coordinates></Point></Placemark></kml>"
        (feature,) = convert_kml(kml, config=config).features
        assert feature.soil_type == TANAH_LIAT
        assert feature.depth == 1.8

    def test_non_kml_root_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="cable_ingest.converters.kml"):
            collection = convert_kml("<gpx><Placemark/></gpx>")
        assert len(collection) == 0
        assert "not <kml>" in caplog.text


class TestMalformedInput:
    """Fatal parse failures."""

    def test_unclosed_tags(self, malformed_kml: Path) -> None:
        with pytest.raises(KmlParseError, match="Not valid XML") as exc_info:
            convert_kml(malformed_kml.read_text(encoding="utf-8"))
        assert exc_info.value.code == "KML_PARSE_FAILED"
        assert exc_info.value.stage == "convert_kml"

    @pytest.mark.parametrize("content", ["", "   ", b"", b"\n"])
    def test_empty_document(self, content: str | bytes) -> None:
        with pytest.raises(KmlParseError, match="empty"):
            convert_kml(content)

    def test_not_xml(self) -> None:
        with pytest.raises(KmlParseError):
            convert_kml("this is not xml")

    def test_entities_not_expanded(self) -> None:
        kml = (
            '<?xml version="1.0"?>'
            '<!DOCTYPE kml [<!ENTITY secret SYSTEM "file:///etc/passwd">]>'
            "<kml><Placemark><name>&secret;</name>"
            "<Point><coordinates>1,2</coordinates></Point></Placemark></kml>"
        )
        collection = convert_kml(kml)
        assert "root:" not in collection.features[0].name


class TestPolygons:
    """Polygon handling (02_work_areas_polygons.kml)."""

    def test_skipped_by_default(self, polygons_kml: Path) -> None:
        collection = convert_kml(polygons_kml.read_bytes())
        assert len(collection) == 0
        assert collection.diagnostics.count("unsupported_geometry") == 3

    def test_emitted_when_enabled(self, polygons_kml: Path) -> None:
        config = IngestConfig(emit_polygons=True)
        collection = convert_kml(polygons_kml.read_bytes(), config=config)

        assert [(f.id, f.name) for f in collection] == [
            ("cable-001", "Lahan Pasir"),
            ("cable-002", "Blok Galian (part 1)"),
            ("cable-003", "Blok Galian (part 2)"),
        ]
        assert all(f.geometry_type == POLYGON for f in collection)
        assert collection.diagnostics.count("invalid_placemark") == 1

    def test_area_and_holes(self, polygons_kml: Path) -> None:
        config = IngestConfig(emit_polygons=True)
        holed, part0, part1 = convert_kml(polygons_kml.read_bytes(), config=config).features

        assert holed.soil_type == PASIR
        assert holed.interior_coords is not None
        assert len(holed.interior_coords) == 1
        assert holed.area_ha is not None
        assert 115 < holed.area_ha < 120
        assert part0.area_ha is not None
        assert 120 < part0.area_ha < 125
        assert part0.area_ha == pytest.approx(part1.area_ha, rel=1e-3)

    def test_unclosed_ring_auto_closed(self, polygons_kml: Path) -> None:
        config = IngestConfig(emit_polygons=True)
        part0 = convert_kml(polygons_kml.read_bytes(), config=config).features[1]
        assert len(part0.coordinates) == 5
        assert part0.coordinates[0] == part0.coordinates[-1]

    def test_polygon_geojson_rings(self, polygons_kml: Path) -> None:
        config = IngestConfig(emit_polygons=True)
        holed = convert_kml(polygons_kml.read_bytes(), config=config).features[0]
        geometry = holed.to_dict()["geometry"]
        assert geometry["type"] == "Polygon"
        assert len(geometry["coordinates"]) == 2
        assert "areaHa" in holed.to_dict()["properties"]

    def test_multigeometry_with_bad_part_dropped_whole(self) -> None:
        kml = (
            "<kml><Placemark><name>Blok</name><MultiGeometry>"
            "<Polygon><outerBoundaryIs><LinearRing><coordinates>"
            "106.0,-6.0 106.01,-6.0 106.01,-6.01 106.0,-6.01 106.0,-6.0"
            "</coordinates></LinearRing></outerBoundaryIs></Polygon>"
            "<Polygon><outerBoundaryIs><LinearRing><coordinates>"
            "106.0,-6.0 106.01,-6.0"
            "</coordinates></LinearRing></outerBoundaryIs></Polygon>"
            "</MultiGeometry></Placemark></kml>"
        )
        collection = convert_kml(kml, config=IngestConfig(emit_polygons=True))
        assert len(collection) == 0
        assert collection.diagnostics.skipped == {"invalid_placemark": 1}
