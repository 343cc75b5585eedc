"""Authoritative version data from repository metadata files."""

import logging
import xml.etree.ElementTree as ET
from typing import Optional

import requests

from dist_check.errors import FetchError
from dist_check.fetchers.base import DEFAULT_TIMEOUT, BaseFetcher
from dist_check.models import ArtifactDescriptor, AuthoritativeRecord
from dist_check.versions import Version

logger = logging.getLogger(__name__)

DEFAULT_REPO_BASE_URL = "https://repo.maven.apache.org/maven2/"


def parse_metadata(content: str, url: Optional[str] = None) -> AuthoritativeRecord:
    """Parse a ``maven-metadata.xml`` document.

    The latest version is ``versioning/latest``, falling back to
    ``versioning/release`` and then to the highest listed version.

    Raises:
        FetchError: If the document is not XML or names no version.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise FetchError(f"Malformed metadata at {url}: {e}", url=url) from e

    versions = tuple(
        v.text.strip() for v in root.findall("versioning/versions/version") if v.text and v.text.strip()
    )
    latest = (
        (root.findtext("versioning/latest") or "").strip()
        or (root.findtext("versioning/release") or "").strip()
        or (max(versions, key=Version) if versions else "")
    )
    if not latest:
        raise FetchError(f"No version found in metadata at {url}", url=url)

    return AuthoritativeRecord(
        latest_version=latest,
        last_updated_raw=(root.findtext("versioning/lastUpdated") or "").strip() or None,
        versions=versions,
    )


class MetadataFetcher(BaseFetcher):
    """Fetch the authoritative record of a configured artifact."""

    def __init__(
        self,
        repo_base_url: str = DEFAULT_REPO_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(session=session, timeout=timeout)
        self.repo_base_url = repo_base_url if repo_base_url.endswith("/") else repo_base_url + "/"

    def fetch(self, descriptor: ArtifactDescriptor) -> AuthoritativeRecord:
        """Fetch and parse the metadata of ``descriptor``.

        Raises:
            FetchError: If the metadata is unreachable or malformed.
        """
        url = descriptor.metadata_url(self.repo_base_url)
        logger.info("Fetching metadata for %s from %s", descriptor, url)
        return parse_metadata(self.get_text(url), url=url)
