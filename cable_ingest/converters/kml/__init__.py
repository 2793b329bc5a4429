"""KML conversion pipeline.

Converts a KML survey export into a ``FeatureCollection`` of cable
routes (LineString) and markers (Point), each with a soil
classification, trench depth, resolved style and metadata.

The conversion is split into focused stages:
- **_validation**: XML parsing, namespace-agnostic element lookup
- **_geometry**: coordinate text, Haversine distance, bearing, segments
- **_styles**: ABGR color decoding, Style/StyleMap table
- **_soil**: keyword and color based soil classification
- **_normalization**: Placemark metadata and ExtendedData
- **_polygon**: ring validation and geodesic area (opt-in)

Per-Placemark outcomes, in document order:
- no usable geometry -> dropped
- LineString with >= 2 valid points -> route with segments, emitted
- Point -> marker, emitted
- Polygon -> emitted only when ``IngestConfig.emit_polygons`` is set

Error handling:
- Malformed XML aborts the conversion (``KmlParseError``)
- Everything else (bad coordinate tuple, unresolved style, invalid
  Placemark) is skipped, logged and counted in ``diagnostics``
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

from cable_ingest.converters.kml._constants import (
    EARTH_RADIUS_M,
    FEATURE_ID_PREFIX,
    KML_NAMESPACE,
    MIN_LINESTRING_POINTS,
)
from cable_ingest.converters.kml._geometry import (
    build_segments,
    format_bearing,
    format_distance,
    haversine_distance,
    initial_bearing,
    parse_coordinates_text,
    total_distance,
)
from cable_ingest.converters.kml._normalization import extract_extended_data, extract_metadata
from cable_ingest.converters.kml._polygon import geodesic_area_ha, parse_polygon
from cable_ingest.converters.kml._soil import ColorRule, SoilClassifier
from cable_ingest.converters.kml._styles import (
    abgr_to_rgba,
    build_style_table,
    parse_style,
    resolve_style_url,
)
from cable_ingest.converters.kml._validation import (
    KmlParseError,
    KmlValidationError,
    find_all,
    find_child,
    find_first,
    first_text,
    parse_document,
    text_of,
)
from cable_ingest.core.config import IngestConfig
from cable_ingest.models.diagnostics import ConversionDiagnostics
from cable_ingest.models.feature import (
    LINE_STRING,
    POINT,
    POLYGON,
    Feature,
    FeatureCollection,
)

if TYPE_CHECKING:
    from lxml.etree import _Element

    from cable_ingest.models.style import Style

logger = logging.getLogger("cable_ingest.converters.kml")

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "EARTH_RADIUS_M",
    "KML_NAMESPACE",
    "MIN_LINESTRING_POINTS",
    "ColorRule",
    "KmlParseError",
    "KmlValidationError",
    "SoilClassifier",
    "abgr_to_rgba",
    "build_segments",
    "build_style_table",
    "convert_kml",
    "extract_extended_data",
    "extract_metadata",
    "format_bearing",
    "format_distance",
    "haversine_distance",
    "initial_bearing",
    "parse_coordinates_text",
    "parse_style",
    "resolve_style_url",
    "total_distance",
]


def convert_kml(content: str | bytes, *, config: IngestConfig | None = None) -> FeatureCollection:
    """Convert a KML document into a ``FeatureCollection``.

    Args:
        content: KML document text (``str``) or raw bytes.
        config: Ingestion configuration; defaults to ``IngestConfig()``.

    Returns:
        Features in document order. Possibly empty. Skipped elements are
        counted in ``collection.diagnostics``.

    Raises:
        KmlParseError: If the document is empty or not well-formed XML.
    """
    config = config or IngestConfig()
    root = parse_document(content)
    converter = _DocumentConverter(
        styles=build_style_table(root),
        classifier=SoilClassifier.from_config(config),
        config=config,
    )

    placemarks = find_all(root, "Placemark")
    for placemark in placemarks:
        converter.convert(placemark)

    collection = FeatureCollection(
        features=tuple(converter.features),
        diagnostics=ConversionDiagnostics.from_counter(converter.skipped),
    )
    logger.info(
        "KML converted | placemarks=%d | features=%d | segments=%d | skipped=%d",
        len(placemarks),
        len(collection.features),
        sum(len(f.segments or ()) for f in collection.features),
        collection.diagnostics.total_skipped,
    )
    return collection


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


class _DocumentConverter:
    """Per-document conversion state. Not shared between calls."""

    def __init__(
        self,
        *,
        styles: dict[str, Style],
        classifier: SoilClassifier,
        config: IngestConfig,
    ) -> None:
        self.styles = styles
        self.classifier = classifier
        self.config = config
        self.features: list[Feature] = []
        self.skipped: Counter[str] = Counter()

    def convert(self, placemark: _Element) -> None:
        """Convert one Placemark, appending zero or more features."""
        number = len(self.features) + 1
        name = text_of(find_child(placemark, "name")) or f"Feature {number}"
        try:
            self._convert(placemark, name)
        except (KmlValidationError, ValueError) as exc:
            logger.warning("Skipping invalid Placemark '%s': %s", name, exc)
            self.skipped["invalid_placemark"] += 1

    def _convert(self, placemark: _Element, name: str) -> None:
        line = find_first(placemark, "LineString")
        if line is not None:
            coords = self._coordinates(line)
            if len(coords) < MIN_LINESTRING_POINTS:
                logger.debug(
                    "Dropping LineString '%s' with %d valid point(s)", name, len(coords)
                )
                self.skipped["too_few_points"] += 1
                return
            segments = build_segments(coords)
            self._emit(
                placemark,
                name,
                geometry_type=LINE_STRING,
                coordinates=tuple(coords),
                segments=segments,
                total_distance=total_distance(segments),
            )
            return

        point = find_first(placemark, "Point")
        if point is not None:
            coords = self._coordinates(point)
            if not coords:
                self.skipped["no_coordinates"] += 1
                return
            self._emit(placemark, name, geometry_type=POINT, coordinates=(coords[0],))
            return

        polygons = find_all(placemark, "Polygon")
        if polygons and self.config.emit_polygons:
            parts = []
            for part, polygon in enumerate(polygons, 1):
                display_name = f"{name} (part {part})" if len(polygons) > 1 else name
                exterior, interior = parse_polygon(polygon, display_name)
                area_ha = geodesic_area_ha(exterior, interior)
                parts.append((display_name, exterior, interior, area_ha))
            # All parts validate before any is emitted.
            for display_name, exterior, interior, area_ha in parts:
                self._emit(
                    placemark,
                    display_name,
                    geometry_type=POLYGON,
                    coordinates=tuple(exterior),
                    interior_coords=tuple(tuple(ring) for ring in interior),
                    area_ha=area_ha,
                )
            return

        reason = "unsupported_geometry" if polygons else "no_geometry"
        logger.debug("Dropping Placemark '%s': %s", name, reason)
        self.skipped[reason] += 1

    def _coordinates(self, geometry: _Element) -> list[tuple[float, float]]:
        text = first_text(geometry, "coordinates")
        coords = parse_coordinates_text(text)
        dropped = len(text.split()) - len(coords)
        if dropped:
            self.skipped["invalid_coordinate"] += dropped
        return coords

    def _style_for(self, placemark: _Element) -> Style | None:
        url = text_of(find_child(placemark, "styleUrl"))
        style = resolve_style_url(url, self.styles) if url else None
        if url and style is None:
            logger.debug("Unresolved styleUrl %r", url)
            self.skipped["unresolved_style"] += 1
        elif style is not None and style.is_empty:
            style = None
        if style is None:
            inline = find_child(placemark, "Style")
            if inline is not None:
                parsed = parse_style(inline)
                style = None if parsed.is_empty else parsed
        return style

    def _emit(self, placemark: _Element, name: str, **geometry: object) -> None:
        style = self._style_for(placemark)
        metadata = extract_metadata(placemark)
        soil_type = self.classifier.classify(
            name=name,
            description=str(metadata.get("description", "")),
            style=style,
        )
        number = len(self.features) + 1
        self.features.append(
            Feature(
                id=f"{FEATURE_ID_PREFIX}-{number:03d}",
                name=name,
                soil_type=soil_type,
                depth=self.config.depth_for(soil_type),
                style=style,
                metadata=metadata or None,
                **geometry,  # type: ignore[arg-type]
            )
        )
