"""Reference data providers."""

from cc_report.providers.repository import RepositoryData

__all__ = ["RepositoryData"]
