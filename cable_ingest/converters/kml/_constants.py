"""Shared constants for KML conversion."""

from __future__ import annotations

# KML 2.2 namespace
KML_NAMESPACE = "http://www.opengis.net/kml/2.2"

# Mean Earth radius used by the Haversine formula, metres
EARTH_RADIUS_M = 6_371_000.0

# Minimum valid vertices for a cable route
MIN_LINESTRING_POINTS = 2

# Minimum vertices for a valid polygon ring (3 distinct + closing = 4)
MIN_POLYGON_VERTICES = 4

SQ_METRES_PER_HECTARE = 10_000.0

FEATURE_ID_PREFIX = "cable"
