"""Castro 311 service-request dashboard: data loading, summaries and map views."""

from castro311.exceptions import Castro311Error, LoadError
from castro311.session import DashboardSession

__all__ = ["Castro311Error", "LoadError", "DashboardSession"]
