"""
Dashboard session state.

A session holds the loaded collection, its derived stats and rankings, the
selected request type and the map framing. Sessions are immutable: selection
changes return a new session.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from castro311.analytics import CategoryCount, Stats, summarize, visible_subset
from castro311.geo import MapView
from castro311.ingestion import Castro311APIClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSession:
    collection: Dict[str, Any]
    stats: Stats = field(default_factory=Stats)
    top_types: List[CategoryCount] = field(default_factory=list)
    selected_type: Optional[str] = None
    view: MapView = field(default_factory=MapView)

    # Holds a dict and a list, so sessions compare by value but are not hashable
    __hash__ = None

    @classmethod
    def from_collection(cls, collection: Dict[str, Any], view: Optional[MapView] = None) -> "DashboardSession":
        """Summarize a loaded collection and frame the map to its open cases."""
        stats, top_types = summarize(collection)
        session = cls(collection=collection, stats=stats, top_types=top_types, view=view or MapView())
        logger.info(f"Session ready: {stats.total} total, {stats.open} open, {stats.closed} closed")
        return replace(session, view=session.view.fit(session.visible()))

    @classmethod
    def load(cls, client: Castro311APIClient, page_size: Optional[int] = None) -> "DashboardSession":
        """Load the whole layer and start a session on it. Raises LoadError on failure."""
        return cls.from_collection(client.load_all(page_size=page_size))

    @classmethod
    async def load_async(cls, client: Castro311APIClient, page_size: Optional[int] = None) -> "DashboardSession":
        """Coroutine version of :meth:`load`."""
        return cls.from_collection(await client.load_all_async(page_size=page_size))

    def visible(self) -> Dict[str, Any]:
        """Open cases of the selected request type (all types when none is selected)."""
        return visible_subset(self.collection, selected_type=self.selected_type)

    def select(self, request_type: Optional[str]) -> "DashboardSession":
        """
        Select a request type and re-frame the map to its open cases.

        If nothing is visible after the change, the previous framing is kept.
        """
        session = replace(self, selected_type=request_type)
        return replace(session, view=self.view.fit(session.visible()))

    def reset(self) -> "DashboardSession":
        return self.select(None)

    @property
    def can_reset(self) -> bool:
        return self.selected_type is not None
