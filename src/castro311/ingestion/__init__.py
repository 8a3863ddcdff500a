"""Data ingestion module for the Castro 311 WFS layer."""

from castro311.ingestion.api_client import (
    Castro311APIClient,
    WFSConfig,
    DataQualityReport,
    PageAccumulator,
    fold_page,
    build_collection,
    fetch_all_features,
)

__all__ = [
    "Castro311APIClient",
    "WFSConfig",
    "DataQualityReport",
    "PageAccumulator",
    "fold_page",
    "build_collection",
    "fetch_all_features",
]
