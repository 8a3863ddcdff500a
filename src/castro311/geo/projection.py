"""
Reprojection of case locations for display.

Source features are stored in Web Mercator (EPSG:3857) x/y. The map shows
WGS84 (EPSG:4326) latitude/longitude, so every point is reprojected with
pyproj before placement and when framing the map.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from pyproj import Transformer

from castro311.features import make_collection, point_coordinates

logger = logging.getLogger(__name__)

SOURCE_CRS = "EPSG:3857"
DISPLAY_CRS = "EPSG:4326"

# always_xy: input is (x, y) and output is (lon, lat) regardless of axis order
mercator_to_wgs84 = Transformer.from_crs(SOURCE_CRS, DISPLAY_CRS, always_xy=True)

LatLng = Tuple[float, float]


def project(x: float, y: float) -> LatLng:
    """Project an EPSG:3857 (x, y) pair to (latitude, longitude)."""
    lon, lat = mercator_to_wgs84.transform(x, y)
    return lat, lon


def feature_latlng(feature: Dict[str, Any]) -> Optional[LatLng]:
    """(latitude, longitude) of a Point feature, or None without a usable point."""
    coords = point_coordinates(feature)
    if coords is None:
        return None
    return project(*coords)


@dataclass(frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    def as_latlngs(self) -> List[List[float]]:
        """Corner pairs in the ``[[south, west], [north, east]]`` form map widgets take."""
        return [[self.south, self.west], [self.north, self.east]]


def compute_bounds(collection: Dict[str, Any]) -> Optional[Bounds]:
    """
    Smallest rectangle covering every projected point of the collection.

    Returns None if no feature has a usable point.
    """
    points = [feature_latlng(f) for f in collection.get("features") or []]
    points = [p for p in points if p is not None]
    if not points:
        return None

    lats = [lat for lat, _ in points]
    lons = [lon for _, lon in points]
    return Bounds(south=min(lats), west=min(lons), north=max(lats), east=max(lons))


@dataclass(frozen=True)
class MapView:
    """Where the map is framed. Starts over San Francisco's Castro district."""

    center: LatLng = (37.75, -122.45)
    zoom: int = 12
    bounds: Optional[Bounds] = None

    def fit(self, collection: Dict[str, Any]) -> "MapView":
        """
        Frame the view to the collection's points.

        An empty collection leaves the view as it was.
        """
        bounds = compute_bounds(collection)
        if bounds is None:
            return self
        return replace(self, bounds=bounds)


def to_display_geojson(collection: Dict[str, Any]) -> Dict[str, Any]:
    """
    Copy of the collection with Point coordinates in EPSG:4326 ``[lon, lat]``.

    Features without a usable point are left out. The source collection is
    not modified.
    """
    features = []
    for feature in collection.get("features") or []:
        latlng = feature_latlng(feature)
        if latlng is None:
            continue
        lat, lon = latlng
        geometry = {k: v for k, v in feature["geometry"].items() if k != "bbox"}
        geometry.update(type="Point", coordinates=[lon, lat])
        display = {k: v for k, v in feature.items() if k != "bbox"}
        display["geometry"] = geometry
        features.append(display)

    skipped = len(collection.get("features") or []) - len(features)
    if skipped:
        logger.debug(f"Skipped {skipped} features without point geometry")

    # crs and bbox describe the source projection
    template = {k: v for k, v in collection.items() if k not in ("features", "crs", "bbox")}
    return make_collection(features, template)
