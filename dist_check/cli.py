"""Command line entry point.

Usage:
    dist-check check-index-pages --config dist-tool.conf
    dist-check check-index-pages --config dist-tool.conf --ignore maven-ant-plugin --workers 4
    dist-check prerequisites --config dist-tool.conf
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from dist_check.config import (
    CheckSettings,
    apply_forced_versions,
    load_configuration,
    load_settings,
)
from dist_check.errors import ConfigurationError
from dist_check.fetchers.base import get_session
from dist_check.fetchers.index_page import IndexPageCache
from dist_check.fetchers.metadata import MetadataFetcher
from dist_check.fetchers.prerequisites import (
    PLUGINS_BASE_URL,
    PrerequisitesFetcher,
    group_by_maven_version,
)
from dist_check.reconcile import ReconciliationEngine
from dist_check.report import render_report, write_failures_log


def _parse_force(values: Sequence[str]) -> dict[str, str]:
    forced = {}
    for value in values:
        artifact_id, sep, version = value.partition("=")
        if not sep or not artifact_id or not version:
            raise ConfigurationError(f"--force expects ARTIFACT=VERSION, got {value!r}")
        forced[artifact_id] = version
    return forced


def build_settings(args: argparse.Namespace) -> CheckSettings:
    """Settings file values, overridden by command line flags."""
    settings = load_settings(args.settings)
    updates = {}
    if args.config is not None:
        updates["configuration_file"] = args.config
    if args.repo is not None:
        updates["repo_base_url"] = args.repo
    if getattr(args, "ignore", None):
        updates["ignore_failures"] = settings.ignore_failures + args.ignore
    if getattr(args, "force", None):
        updates["force_versions"] = {**settings.force_versions, **_parse_force(args.force)}
    if getattr(args, "workers", None) is not None:
        updates["max_workers"] = args.workers
    if getattr(args, "output_dir", None) is not None:
        updates["output_dir"] = args.output_dir
    try:
        settings = CheckSettings.model_validate({**settings.model_dump(), **updates})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid command line settings: {e}") from e

    if settings.configuration_file is None:
        raise ConfigurationError("No configuration file given (use --config)")
    return settings


def check_index_pages(settings: CheckSettings) -> int:
    descriptors = apply_forced_versions(
        load_configuration(settings.configuration_file), settings.force_versions
    )
    print(f"Loaded {len(descriptors)} artifacts from {settings.configuration_file}")

    session = get_session(retries=settings.retries)
    engine = ReconciliationEngine(
        MetadataFetcher(settings.repo_base_url, session=session, timeout=settings.timeout),
        IndexPageCache(session=session, timeout=settings.timeout),
        ignore_failures=settings.ignore_failures,
        max_workers=settings.max_workers,
    )
    report = engine.run(descriptors)

    print()
    print(render_report(report))
    log_path = write_failures_log(report, settings.output_dir)
    print(f"\nFailures written to {log_path}")

    results = report.results
    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print(f"Artifacts checked: {len(results)}")
    print(f"Errors:            {len(report.error_lines)}")
    print(f"Warnings:          {len(report.warning_lines)}")

    return 1 if report.has_failures else 0


def prerequisites(settings: CheckSettings) -> int:
    descriptors = load_configuration(settings.configuration_file)
    plugins = [d.artifact_id for d in descriptors if d.listing_url == PLUGINS_BASE_URL]
    print(f"Fetching prerequisites of {len(plugins)} plugins...")

    fetcher = PrerequisitesFetcher(
        session=get_session(retries=settings.retries), timeout=settings.timeout
    )
    grouped = group_by_maven_version(fetcher.collect(plugins))

    for maven_version, items in grouped.items():
        print(f"\nMaven {maven_version}:")
        for item in items:
            print(f"  {item.plugin:<40} JDK {item.jdk_version}")

    if fetcher.errors:
        print("\nERRORS:")
        for error in fetcher.errors:
            print(f"  ✗ {error}")
    return 1 if fetcher.errors else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dist-check",
        description="Check that index pages advertise the latest released versions",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, help="Artifact configuration file")
    common.add_argument("--settings", type=Path, help="JSON settings file")
    common.add_argument("--repo", help="Repository base URL")

    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser(
        "check-index-pages", parents=[common], help="Compare metadata with index pages"
    )
    check.add_argument(
        "--ignore",
        nargs="+",
        default=[],
        metavar="ID[:VERSION]",
        help="Artifacts whose failures are not reported",
    )
    check.add_argument(
        "--force",
        nargs="+",
        default=[],
        metavar="ID=VERSION",
        help="Expected version overriding the repository metadata",
    )
    check.add_argument("--workers", type=int, default=None, help="Concurrent fetches (default: 1)")
    check.add_argument("--output-dir", type=Path, default=None, help="Where to write the failures log")

    subparsers.add_parser(
        "prerequisites", parents=[common], help="List Maven/JDK prerequisites of plugins"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = build_settings(args)
        if args.command == "prerequisites":
            return prerequisites(settings)
        return check_index_pages(settings)
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
