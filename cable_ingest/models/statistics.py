"""Pydantic project statistics model.

Summarises a converted ``FeatureCollection`` for the project overview:
how many markers, routes and areas it holds and how much cable route
length falls on each soil type (which drives excavation cost).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from cable_ingest.models.feature import LINE_STRING, POINT, POLYGON

if TYPE_CHECKING:
    from cable_ingest.models.feature import FeatureCollection


class ProjectStatistics(BaseModel):
    """Aggregate counts and lengths of one KML document.

    Attributes:
        total_points: Number of Point features.
        total_lines: Number of LineString features.
        total_polygons: Number of Polygon features (0 unless polygon
            emission is enabled).
        total_distance: Summed route length in whole metres.
        total_features: Number of features of any kind.
        distance_by_soil_type: Route length in metres per soil type.
    """

    total_points: int = Field(default=0, alias="totalPoints")
    total_lines: int = Field(default=0, alias="totalLines")
    total_polygons: int = Field(default=0, alias="totalPolygons")
    total_distance: int = Field(default=0, alias="totalDistance")
    total_features: int = Field(default=0, alias="totalFeatures")
    distance_by_soil_type: dict[str, float] = Field(
        default_factory=dict, alias="distanceBySoilType"
    )

    model_config = {"populate_by_name": True}

    def to_dict(self) -> dict[str, object]:
        """Serialise using the camelCase aliases."""
        return self.model_dump(by_alias=True)


def compute_statistics(collection: FeatureCollection) -> ProjectStatistics:
    """Count features by geometry type and total the route length."""
    counts = {POINT: 0, LINE_STRING: 0, POLYGON: 0}
    distance = 0.0
    by_soil: dict[str, float] = {}

    for feature in collection.features:
        counts[feature.geometry_type] += 1
        if feature.geometry_type == LINE_STRING and feature.total_distance:
            distance += feature.total_distance
            by_soil[feature.soil_type] = by_soil.get(feature.soil_type, 0.0) + feature.total_distance

    return ProjectStatistics(
        total_points=counts[POINT],
        total_lines=counts[LINE_STRING],
        total_polygons=counts[POLYGON],
        total_distance=round(distance),
        total_features=len(collection.features),
        distance_by_soil_type=by_soil,
    )
