"""Derive the features shown on the map from the current selection."""

from typing import Any, Callable, Dict, Optional

from castro311.features import STATUS_OPEN, make_collection, request_type_of, status_of

StatusPredicate = Callable[[Dict[str, Any]], bool]


def is_open(feature: Dict[str, Any]) -> bool:
    return status_of(feature) == STATUS_OPEN


def visible_subset(
    collection: Dict[str, Any],
    status_predicate: StatusPredicate = is_open,
    selected_type: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Return the features that pass the status predicate and match the
    selected request type (any type when ``selected_type`` is None).

    The result is a new FeatureCollection keeping the source order and the
    source's other top-level members; the source is not modified.
    """
    template = {k: v for k, v in collection.items() if k != "features"}
    features = [
        f
        for f in collection.get("features") or []
        if status_predicate(f)
        and (selected_type is None or request_type_of(f) == selected_type)
    ]
    return make_collection(features, template)
