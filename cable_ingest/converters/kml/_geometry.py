"""Coordinate parsing and route geometry for KML conversion.

Responsibilities:
- Parse KML coordinate text to (lon, lat) tuples
- Great-circle distance (Haversine) and forward-azimuth bearing
- Per-segment route breakdown and total route length
- Human-readable distance and bearing formatting

Invalid numeric input never produces NaN or infinity: distance and
bearing fall back to 0.0. Callers must not read a zero distance as
proof that the inputs were valid.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from cable_ingest.converters.kml._constants import EARTH_RADIUS_M
from cable_ingest.models.feature import Segment

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cable_ingest.models.feature import Coordinate

_COMPASS_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")

# ---------------------------------------------------------------------------
# Coordinate text
# ---------------------------------------------------------------------------


def parse_coordinates_text(text: str) -> list[Coordinate]:
    """Parse KML coordinate text (``lon,lat[,alt] lon,lat ...``) to (lon, lat) tuples.

    Tokens that do not hold two finite numbers are dropped.
    """
    coords: list[Coordinate] = []
    for token in text.split():
        parts = token.split(",")
        if len(parts) < 2:
            continue
        try:
            lon = float(parts[0])
            lat = float(parts[1])
        except ValueError:
            continue
        if math.isfinite(lon) and math.isfinite(lat):
            coords.append((lon, lat))
    return coords


# ---------------------------------------------------------------------------
# Distance and bearing
# ---------------------------------------------------------------------------


def _is_finite_pair(*coords: Coordinate) -> bool:
    return all(math.isfinite(value) for coord in coords for value in coord)


def haversine_distance(start: Coordinate, end: Coordinate) -> float:
    """Great-circle distance in metres between two ``(lon, lat)`` points.

    Returns 0.0 for non-finite input.
    """
    if not _is_finite_pair(start, end):
        return 0.0

    lon1, lat1 = start
    lon2, lat2 = end
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    distance = EARTH_RADIUS_M * c
    return distance if math.isfinite(distance) else 0.0


def initial_bearing(start: Coordinate, end: Coordinate) -> float:
    """Forward azimuth in degrees, normalised to ``[0, 360)``.

    Returns 0.0 for non-finite input and for coincident points.
    """
    if not _is_finite_pair(start, end):
        return 0.0

    lon1, lat1 = start
    lon2, lat2 = end
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lon2 - lon1)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)

    bearing = (math.degrees(math.atan2(y, x)) + 360.0) % 360.0
    if not math.isfinite(bearing) or bearing >= 360.0:
        return 0.0
    return bearing


# ---------------------------------------------------------------------------
# Route breakdown
# ---------------------------------------------------------------------------


def build_segments(coords: Sequence[Coordinate]) -> tuple[Segment, ...]:
    """Build one ``Segment`` per consecutive vertex pair."""
    return tuple(
        Segment(
            start=start,
            end=end,
            distance=haversine_distance(start, end),
            bearing=initial_bearing(start, end),
        )
        for start, end in zip(coords, coords[1:])
    )


def total_distance(segments: Sequence[Segment]) -> float:
    """Route length in metres: the sum of segment distances."""
    return sum(segment.distance for segment in segments)


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------


def format_distance(distance_m: float) -> str:
    """Format a distance with a unit suited to its magnitude.

    >>> format_distance(0.5)
    '50 cm'
    >>> format_distance(12.5)
    '12.50 m'
    >>> format_distance(1500)
    '1.50 km'
    """
    if distance_m < 1:
        return f"{distance_m * 100:.0f} cm"
    if distance_m < 1000:
        return f"{distance_m:.2f} m"
    return f"{distance_m / 1000:.2f} km"


def format_bearing(bearing: float) -> str:
    """Format a bearing with its 8-point compass direction.

    >>> format_bearing(135.0)
    '135.0° SE'
    """
    index = math.floor(bearing / 45 + 0.5) % len(_COMPASS_POINTS)
    return f"{bearing:.1f}° {_COMPASS_POINTS[index]}"
