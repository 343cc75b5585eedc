"""Fetchers for remote metadata and listing documents."""

from dist_check.fetchers.base import BaseFetcher, get_session
from dist_check.fetchers.index_page import IndexPageCache
from dist_check.fetchers.metadata import MetadataFetcher
from dist_check.fetchers.prerequisites import PrerequisitesFetcher

__all__ = [
    "BaseFetcher",
    "get_session",
    "IndexPageCache",
    "MetadataFetcher",
    "PrerequisitesFetcher",
]
