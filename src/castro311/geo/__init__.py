"""Coordinate reprojection and map framing."""

from castro311.geo.projection import (
    Bounds,
    MapView,
    compute_bounds,
    feature_latlng,
    project,
    to_display_geojson,
)

__all__ = [
    "Bounds",
    "MapView",
    "compute_bounds",
    "feature_latlng",
    "project",
    "to_display_geojson",
]
