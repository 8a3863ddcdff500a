"""
Case statistics and request-type rankings.

Both are pure derivations of the unified FeatureCollection and are safe to
recompute at any time.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from castro311.features import STATUS_CLOSED, STATUS_OPEN, request_type_of, status_of


@dataclass(frozen=True)
class Stats:
    """Case counts for the sidebar. ``open + closed <= total``."""

    total: int = 0
    open: int = 0
    closed: int = 0


@dataclass(frozen=True)
class CategoryCount:
    """Number of open cases for one request type."""

    request_type: Optional[str]
    count: int


def compute_stats(features: List[Dict[str, Any]]) -> Stats:
    # Statuses other than Open/Closed (or missing) count toward total only
    statuses = [status_of(f) for f in features]
    return Stats(
        total=len(features),
        open=statuses.count(STATUS_OPEN),
        closed=statuses.count(STATUS_CLOSED),
    )


def rank_open_types(features: Iterable[Dict[str, Any]]) -> List[CategoryCount]:
    """
    Count open cases per request type, most frequent first.

    Ties keep the order in which request types were first seen. Features
    without a request type are grouped under ``None``.
    """
    counts: Dict[Optional[str], List[int]] = {}  # type -> [first_seen, count]
    for feature in features:
        if status_of(feature) != STATUS_OPEN:
            continue
        entry = counts.setdefault(request_type_of(feature), [len(counts), 0])
        entry[1] += 1

    ranked = sorted(counts.items(), key=lambda item: (-item[1][1], item[1][0]))
    return [CategoryCount(request_type=t, count=c) for t, (_, c) in ranked]


def summarize(collection: Dict[str, Any]) -> Tuple[Stats, List[CategoryCount]]:
    """
    Derive stats and open request-type rankings from a collection.

    The collection is only read.
    """
    features = collection.get("features") or []
    return compute_stats(features), rank_open_types(features)
