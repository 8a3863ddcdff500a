"""Exceptions raised by the castro311 data pipeline."""

from typing import Optional


class Castro311Error(Exception):
    """Base class for castro311 errors."""


class LoadError(Castro311Error):
    """
    A page request failed while loading the dataset.

    The whole load is aborted; no partial collection is returned.
    """

    def __init__(self, message: str, start_index: Optional[int] = None):
        super().__init__(message)
        self.start_index = start_index
