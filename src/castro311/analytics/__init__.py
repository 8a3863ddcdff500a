"""Statistics, rankings and view filtering over the loaded features."""

from castro311.analytics.aggregator import (
    Stats,
    CategoryCount,
    compute_stats,
    rank_open_types,
    summarize,
)
from castro311.analytics.view_filter import is_open, visible_subset

__all__ = [
    "Stats",
    "CategoryCount",
    "compute_stats",
    "rank_open_types",
    "summarize",
    "is_open",
    "visible_subset",
]
