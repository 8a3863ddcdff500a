"""
Accessors for GeoJSON service-request features.

Features are kept as the dicts the WFS service returns. These helpers read
them without raising on records that are missing properties or geometry.
"""

from typing import Any, Dict, Iterable, Optional, Tuple

STATUS_OPEN = "Open"
STATUS_CLOSED = "Closed"


def properties_of(feature: Dict[str, Any]) -> Dict[str, Any]:
    """Return the feature's properties, or an empty dict if absent."""
    props = feature.get("properties") if isinstance(feature, dict) else None
    return props if isinstance(props, dict) else {}


def status_of(feature: Dict[str, Any]) -> Optional[str]:
    return properties_of(feature).get("status")


def request_type_of(feature: Dict[str, Any]) -> Optional[str]:
    """Request type label; anything other than a string counts as uncategorized."""
    value = properties_of(feature).get("request_type")
    return value if isinstance(value, str) else None


def case_id_of(feature: Dict[str, Any]) -> Optional[Any]:
    """Case id if it is a string or number, otherwise None."""
    value = properties_of(feature).get("case_id")
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return value


def point_coordinates(feature: Dict[str, Any]) -> Optional[Tuple[float, float]]:
    """
    Return the (x, y) pair of a Point feature.

    Returns None when the geometry is missing, not a Point, or its
    coordinates are not numeric.
    """
    geometry = feature.get("geometry") if isinstance(feature, dict) else None
    if not isinstance(geometry, dict) or geometry.get("type", "Point") != "Point":
        return None

    coords = geometry.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None

    try:
        return float(coords[0]), float(coords[1])
    except (TypeError, ValueError):
        return None


def make_collection(
    features: Iterable[Dict[str, Any]],
    template: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build a FeatureCollection whose declared count matches its features.

    Top-level members of ``template`` (crs, timeStamp, ...) are carried over;
    the template itself is left untouched.
    """
    features = list(features)
    collection = {"type": "FeatureCollection"}
    if template:
        collection.update(template)
    collection["features"] = features
    collection["numberReturned"] = len(features)
    return collection
