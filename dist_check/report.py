"""Plain-text rendering of a reconciliation report."""

from pathlib import Path
from typing import Mapping, Optional

from tabulate import tabulate

from dist_check.models import (
    LISTING_PAGES,
    CheckStatus,
    ListingPage,
    ReconciliationReport,
    ReconciliationResult,
)

FAILURES_FILENAME = "check-index-page.log"

STATUS_MARKERS = {
    CheckStatus.MATCH: "✅",
    CheckStatus.DATE_MISMATCH: "⚠",
    CheckStatus.NOT_FOUND: "⚠",
    CheckStatus.VERSION_MISMATCH: "✗",
    CheckStatus.FETCH_ERROR: "✗",
}


def _dated(date: Optional[str], version: Optional[str], with_date: bool) -> str:
    version = version or "-"
    if with_date:
        return f"{date or '-'} - {version}"
    return version


def _row(result: ReconciliationResult, with_date: bool) -> list[str]:
    marker = STATUS_MARKERS[result.status]
    if result.ignored:
        marker += " (ignored)"
    return [
        result.descriptor.artifact_id,
        _dated(result.authoritative_date, result.authoritative_version, with_date),
        _dated(result.listing_date, result.listing_version, with_date),
        f"{marker} {result.status.value}",
    ]


def render_report(
    report: ReconciliationReport, pages: Optional[Mapping[str, ListingPage]] = None
) -> str:
    """One table per index page, followed by errors and warnings."""
    pages = LISTING_PAGES if pages is None else pages
    sections = []

    for url, results in report.results_by_listing.items():
        page = pages.get(url)
        name = page.name if page else url
        with_date = bool(page and page.has_date_column)
        headers = [
            f"Component ({len(results)})",
            "maven-metadata.xml " + ("lastUpdated - latest" if with_date else "latest"),
            "index page",
            "status",
        ]
        table = tabulate([_row(r, with_date) for r in results], headers=headers, tablefmt="github")
        sections.append(f"{name} index page: {url}\n\n{table}")

    if report.error_lines:
        sections.append("ERRORS:\n" + "\n".join(f"  ✗ {line}" for line in report.error_lines))
    if report.warning_lines:
        sections.append("WARNINGS:\n" + "\n".join(f"  ⚠ {line}" for line in report.warning_lines))

    return "\n\n".join(sections)


def write_failures_log(report: ReconciliationReport, output_dir: Path) -> Path:
    """Write one line per version mismatch, for tooling that tails the log."""
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / FAILURES_FILENAME
    with open(output_path, "w", encoding="utf-8") as f:
        for line in report.error_lines:
            f.write(line + "\n")
    return output_path
