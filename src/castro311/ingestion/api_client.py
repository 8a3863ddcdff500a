"""
Castro 311 WFS Client

This module provides a client for fetching 311 service request features from
the Castro district GeoServer layer (WFS 2.0 GetFeature, GeoJSON output).

The client pages through the layer with ``count``/``startIndex`` until the
server returns a short page, and merges every page into a single
FeatureCollection.
"""

import os
import asyncio
import logging
from itertools import chain
from typing import Optional, Dict, List, Any, Tuple
from dataclasses import dataclass
from urllib.parse import urlencode

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from castro311.exceptions import LoadError
from castro311.features import (
    STATUS_CLOSED,
    STATUS_OPEN,
    case_id_of,
    make_collection,
    point_coordinates,
    request_type_of,
    status_of,
)

logger = logging.getLogger(__name__)


@dataclass
class WFSConfig:
    """Configuration for the Castro 311 GeoServer WFS endpoint."""

    base_url: str = "https://geoserver.danielmyers.xyz/geoserver/census/ows"
    type_name: str = "census:castro_311"
    service: str = "WFS"
    version: str = "2.0.0"
    output_format: str = "application/json"
    page_size: int = 1000
    timeout: Optional[float] = 30  # per page; None waits forever
    max_retries: int = 0  # a failed page aborts the load
    retry_backoff: float = 0.5

    @classmethod
    def from_env(cls) -> "WFSConfig":
        """Create config from environment variables."""
        timeout = os.getenv("CASTRO311_TIMEOUT")
        return cls(
            base_url=os.getenv("CASTRO311_WFS_URL", cls.base_url),
            type_name=os.getenv("CASTRO311_TYPE_NAME", cls.type_name),
            page_size=int(os.getenv("CASTRO311_PAGE_SIZE", cls.page_size)),
            timeout=float(timeout) if timeout else cls.timeout,
        )


@dataclass(frozen=True)
class PageAccumulator:
    """
    State carried from one page request to the next.

    Features are kept as one tuple per page so folding a page only copies
    page references. ``last_page`` keeps the most recent response so its
    top-level members (crs, timeStamp, ...) end up on the merged collection.
    """

    chunks: Tuple[Tuple[Dict[str, Any], ...], ...] = ()
    feature_count: int = 0
    start_index: int = 0
    pages: int = 0
    last_page: Optional[Dict[str, Any]] = None
    done: bool = False

    @property
    def features(self) -> Tuple[Dict[str, Any], ...]:
        return tuple(chain.from_iterable(self.chunks))


def fold_page(acc: PageAccumulator, page: Dict[str, Any], page_size: int) -> PageAccumulator:
    """
    Fold one page into the accumulator.

    A page with fewer than ``page_size`` features is the last one. Count
    fields in the response are ignored.
    """
    features = page["features"]
    return PageAccumulator(
        chunks=acc.chunks + (tuple(features),),
        feature_count=acc.feature_count + len(features),
        start_index=acc.start_index + page_size,
        pages=acc.pages + 1,
        last_page=page,
        done=len(features) < page_size,
    )


def build_collection(acc: PageAccumulator) -> Dict[str, Any]:
    """Build the unified FeatureCollection from a finished accumulator."""
    template = dict(acc.last_page) if acc.last_page else None
    return make_collection(chain.from_iterable(acc.chunks), template)


def parse_page(payload: Any, start_index: int) -> Dict[str, Any]:
    """Check that a response body is a GeoJSON FeatureCollection page."""
    if not isinstance(payload, dict) or not isinstance(payload.get("features"), list):
        logger.error(f"Malformed WFS response at startIndex {start_index}")
        raise LoadError(
            f"Malformed response at startIndex {start_index}: expected a 'features' array",
            start_index=start_index,
        )
    return payload


@dataclass
class DataQualityReport:
    """Report on data quality for a loaded feature collection."""

    total_records: int
    missing_case_id: int
    missing_status: int
    unknown_status: int
    missing_request_type: int
    missing_geometry: int
    duplicate_case_ids: int

    @property
    def is_valid(self) -> bool:
        """Check if data passes basic quality thresholds."""
        if self.total_records == 0:
            return True  # An empty layer is a valid result

        threshold = 0.05

        missing_rate = self.missing_case_id / self.total_records
        dupe_rate = self.duplicate_case_ids / self.total_records

        return missing_rate < threshold and dupe_rate < threshold

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "total_records": self.total_records,
            "missing_case_id": self.missing_case_id,
            "missing_status": self.missing_status,
            "unknown_status": self.unknown_status,
            "missing_request_type": self.missing_request_type,
            "missing_geometry": self.missing_geometry,
            "duplicate_case_ids": self.duplicate_case_ids,
            "is_valid": self.is_valid,
        }


class Castro311APIClient:
    """
    Client for the Castro 311 WFS layer.

    Features:
    - Exhaustive pagination, terminated by the first short page
    - Sequential page requests (sync or awaited one at a time)
    - Data quality validation

    Example:
        with Castro311APIClient() as client:
            collection = client.load_all()
            report = client.validate_features(collection["features"])

    The short-page rule assumes the server never returns a short page before
    the true end of the layer. When the last page is exactly full, one extra
    request returns an empty page and the load ends there.
    """

    def __init__(self, config: Optional[WFSConfig] = None, session: Optional[requests.Session] = None):
        """Initialize the API client."""
        self.config = config or WFSConfig.from_env()
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session, with retries only if configured."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=self.config.retry_backoff,
            status_forcelist=[429, 500, 502, 503, 504],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({"Accept": "application/json"})

        return session

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Castro311APIClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _build_query(self, start_index: int, page_size: int) -> str:
        """Build the GetFeature query string."""
        params = {
            "service": self.config.service,
            "version": self.config.version,
            "request": "GetFeature",
            "typeNames": self.config.type_name,
            "outputFormat": self.config.output_format,
            "count": page_size,
            "startIndex": start_index,
        }
        return urlencode(params)

    def _fetch_page(self, start_index: int, page_size: int) -> Dict[str, Any]:
        """Fetch a single page of features."""
        url = f"{self.config.base_url}?{self._build_query(start_index, page_size)}"

        logger.debug(f"Fetching: {url}")

        try:
            response = self.session.get(url, timeout=self.config.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"WFS request failed at startIndex {start_index}: {e}")
            raise LoadError(
                f"Request failed at startIndex {start_index}: {e}",
                start_index=start_index,
            ) from e

        return parse_page(payload, start_index)

    def _page_size(self, page_size: Optional[int]) -> int:
        page_size = self.config.page_size if page_size is None else page_size
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        return page_size

    def _finish(self, acc: PageAccumulator) -> Dict[str, Any]:
        collection = build_collection(acc)
        logger.info(
            f"Completed load: {collection['numberReturned']} features in {acc.pages} pages"
        )
        return collection

    def load_all(self, page_size: Optional[int] = None) -> Dict[str, Any]:
        """
        Load every feature of the layer, page by page.

        Args:
            page_size: Features per request (defaults to config.page_size)

        Returns:
            FeatureCollection with all features in request order and
            ``numberReturned`` equal to their count

        Raises:
            LoadError: if any page fails; nothing is returned in that case
        """
        page_size = self._page_size(page_size)
        acc = PageAccumulator()

        while not acc.done:
            page = self._fetch_page(acc.start_index, page_size)
            acc = fold_page(acc, page, page_size)
            logger.info(f"Fetched page {acc.pages}: {acc.feature_count} features so far")

        return self._finish(acc)

    async def load_all_async(self, page_size: Optional[int] = None) -> Dict[str, Any]:
        """
        Coroutine version of :meth:`load_all`.

        Each page is awaited before the next is requested, so ordering and
        failure behaviour match the synchronous loader.
        """
        page_size = self._page_size(page_size)
        acc = PageAccumulator()

        while not acc.done:
            page = await asyncio.to_thread(self._fetch_page, acc.start_index, page_size)
            acc = fold_page(acc, page, page_size)
            logger.info(f"Fetched page {acc.pages}: {acc.feature_count} features so far")

        return self._finish(acc)

    def validate_features(self, features: List[Dict[str, Any]]) -> DataQualityReport:
        """
        Validate a list of features for data quality.

        Args:
            features: List of GeoJSON feature dicts

        Returns:
            DataQualityReport with validation results
        """
        statuses = [status_of(f) for f in features]
        case_ids = [case_id_of(f) for f in features]
        present_ids = [c for c in case_ids if c not in (None, "")]

        report = DataQualityReport(
            total_records=len(features),
            missing_case_id=len(case_ids) - len(present_ids),
            missing_status=sum(1 for s in statuses if s is None),
            unknown_status=sum(
                1 for s in statuses if s is not None and s not in (STATUS_OPEN, STATUS_CLOSED)
            ),
            missing_request_type=sum(1 for f in features if not request_type_of(f)),
            missing_geometry=sum(1 for f in features if point_coordinates(f) is None),
            duplicate_case_ids=len(present_ids) - len(set(present_ids)),
        )

        logger.info(f"Data Quality Report: {report.to_dict()}")

        if not report.is_valid:
            logger.warning("Data quality validation FAILED")

        return report


def fetch_all_features(page_size: Optional[int] = None) -> Dict[str, Any]:
    """Convenience function for loading the whole layer."""
    with Castro311APIClient() as client:
        return client.load_all(page_size=page_size)
