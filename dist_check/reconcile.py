"""Compare repository metadata against listing pages."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Iterable, Optional, Sequence

from dist_check.errors import ConfigurationError, FetchError
from dist_check.fetchers.index_page import IndexPageCache
from dist_check.fetchers.metadata import MetadataFetcher
from dist_check.matcher import IndexMatcher
from dist_check.models import (
    LISTING_PAGES,
    ArtifactDescriptor,
    CheckStatus,
    ListingPage,
    ReconciliationReport,
    ReconciliationResult,
)

logger = logging.getLogger(__name__)

# Announcements may lag the repository by a few days
DATE_TOLERANCE_DAYS = 7


def is_date_similar(date1: Optional[str], date2: Optional[str]) -> bool:
    """True when two ``YYYY-MM-DD`` dates are less than a week apart."""
    try:
        d1 = datetime.strptime((date1 or "").strip(), "%Y-%m-%d")
        d2 = datetime.strptime((date2 or "").strip(), "%Y-%m-%d")
    except ValueError:
        return False
    return abs((d1 - d2).days) < DATE_TOLERANCE_DAYS


def is_ignored(ignore_failures: Iterable[str], artifact_id: str, version: Optional[str]) -> bool:
    """Whether ``artifactId`` or ``artifactId:version`` is on the ignore list."""
    keys = {artifact_id}
    if version:
        keys.add(f"{artifact_id}:{version}")
    return any(entry.strip() in keys for entry in ignore_failures)


def error_line(result: ReconciliationResult) -> str:
    return (
        f"{result.descriptor.artifact_id}: found {result.listing_version} "
        f"instead of {result.authoritative_version} in {result.listing_url}"
    )


def warning_line(result: ReconciliationResult) -> Optional[str]:
    artifact_id = result.descriptor.artifact_id
    if result.status is CheckStatus.DATE_MISMATCH:
        return (
            f"{artifact_id}: index date {result.listing_date} differs from "
            f"metadata date {result.authoritative_date} in {result.listing_url}"
        )
    if result.status is CheckStatus.NOT_FOUND:
        return f"{artifact_id}: no entry for version {result.authoritative_version} in {result.listing_url}"
    if result.status is CheckStatus.FETCH_ERROR:
        return f"{artifact_id}: {result.error}"
    return None


class ReconciliationEngine:
    """Check every configured artifact against the listing it belongs to."""

    def __init__(
        self,
        metadata_fetcher: MetadataFetcher,
        index_pages: IndexPageCache,
        matcher: Optional[IndexMatcher] = None,
        pages: Optional[dict[str, ListingPage]] = None,
        ignore_failures: Sequence[str] = (),
        max_workers: int = 1,
    ):
        self.metadata_fetcher = metadata_fetcher
        self.index_pages = index_pages
        self.matcher = matcher or IndexMatcher()
        self.pages = LISTING_PAGES if pages is None else pages
        self.ignore_failures = list(ignore_failures)
        self.max_workers = max(1, max_workers)

    def page_for(self, descriptor: ArtifactDescriptor) -> ListingPage:
        page = self.pages.get(descriptor.listing_url)
        if page is None:
            raise ConfigurationError(
                f"{descriptor.artifact_id}: unknown index page {descriptor.listing_url}"
            )
        return page

    def reconcile(self, descriptor: ArtifactDescriptor) -> ReconciliationResult:
        """Check one descriptor. Fetch failures become a FETCH_ERROR result."""
        page = self.page_for(descriptor)
        result = ReconciliationResult(descriptor=descriptor, status=CheckStatus.FETCH_ERROR)

        try:
            record = self.metadata_fetcher.fetch(descriptor)
        except FetchError as e:
            result.error = str(e)
            return self._flag_ignored(result)

        result.authoritative_date = record.release_date
        result.authoritative_version = descriptor.forced_version or record.current_version(
            descriptor.version_range
        )
        if result.authoritative_version is None:
            result.error = f"no published version matches range {descriptor.version_range}"
            return self._flag_ignored(result)

        try:
            document = self.index_pages.get(page.url)
        except FetchError as e:
            result.error = str(e)
            return self._flag_ignored(result)

        match = self.matcher.match(document, page, descriptor)
        result.listing_version = match.version
        result.listing_date = match.date

        if not match.found:
            result.status = CheckStatus.NOT_FOUND
        elif result.authoritative_version != match.version:
            result.status = CheckStatus.VERSION_MISMATCH
        elif page.has_date_column and not is_date_similar(result.authoritative_date, match.date):
            result.status = CheckStatus.DATE_MISMATCH
        else:
            result.status = CheckStatus.MATCH
        return self._flag_ignored(result)

    def _flag_ignored(self, result: ReconciliationResult) -> ReconciliationResult:
        if result.status is not CheckStatus.MATCH:
            result.ignored = is_ignored(
                self.ignore_failures, result.descriptor.artifact_id, result.authoritative_version
            )
        return result

    def run(self, descriptors: Iterable[ArtifactDescriptor]) -> ReconciliationReport:
        """Reconcile every descriptor that names a listing page.

        Results are grouped by listing URL and keep configuration order
        within a group, whether or not fetches ran concurrently.

        Raises:
            ConfigurationError: If a descriptor names an unknown listing page.
        """
        checked = [d for d in descriptors if d.listing_url is not None]
        for descriptor in checked:
            self.page_for(descriptor)

        logger.info("Checking %d artifacts against index pages", len(checked))
        if self.max_workers > 1 and len(checked) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(self.reconcile, checked))
        else:
            results = [self.reconcile(d) for d in checked]

        report = ReconciliationReport()
        for result in results:
            report.results_by_listing.setdefault(result.listing_url, []).append(result)
            if result.ignored:
                continue
            if result.status is CheckStatus.VERSION_MISMATCH:
                report.error_lines.append(error_line(result))
            else:
                line = warning_line(result)
                if line:
                    report.warning_lines.append(line)
        return report
