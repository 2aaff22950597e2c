"""CLI entry point for the TestRail command line utility."""

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiohttp

from trailer.case_cache import dump_case_cache, load_case_cache
from trailer.client import TestRailClient
from trailer.config import DownloadOptions, TestRailConfig, UploadOptions
from trailer.errors import TrailerError
from trailer.models.report import TestSuite
from trailer.models.testrail import Result
from trailer.payload import build_payload
from trailer.pending import PendingResults
from trailer.report import parse_file
from trailer.uploader import ResultUploader, UploadReport, UploadState

log = logging.getLogger("trailer")


def load_reports(paths: Sequence[Path]) -> Sequence[TestSuite]:
    """Parse every report file, failing on the first unparseable one."""
    suites: list[TestSuite] = []
    for path in paths:
        suites.extend(parse_file(path))
    return suites


def format_results(results: Sequence[Result]) -> list[dict[str, Any]]:
    """Format accepted results for JSON output."""
    return [result.model_dump(mode="json", exclude_none=True) for result in results]


def log_upload_summary(log: logging.Logger, report: UploadReport) -> None:
    """Log the outcome of an upload."""
    if report.removed:
        log.info(
            "Removed %d unknown case(s): %s",
            len(report.removed),
            ", ".join(f"C{case_id}" for case_id in report.removed),
        )

    if report.state is UploadState.SUCCEEDED:
        log.info(
            "Uploaded %d result(s) after %d attempt(s)",
            len(report.results),
            report.attempts,
        )
    else:
        log.warning("No results uploaded after %d attempt(s)", report.attempts)


async def run_upload(options: UploadOptions, config: TestRailConfig) -> int:
    """Upload report results to a TestRail run and return exit code."""
    suites = load_reports(options.reports)
    log.info("Parsed %d suite(s) from %d file(s)", len(suites), len(options.reports))

    pending = PendingResults()
    pending.add_suites(options.comment, suites)

    if options.dry_run:
        payload = build_payload(pending)
        log.info("Dry run, %d result(s) not uploaded", len(payload.results))
        print(json.dumps(payload.to_json(), indent=2))
        return 0

    async with TestRailClient.from_config(config) as client:
        uploader = ResultUploader(client=client, attempts=options.attempts)
        report = await uploader.upload(options.run_id, pending)

    log_upload_summary(log, report)
    if report.results:
        print(json.dumps(format_results(report.results), indent=2))

    return 0


async def run_download(
    options: DownloadOptions,
    config: TestRailConfig,
    now: datetime | None = None,
) -> int:
    """Refresh the case cache of a suite and return exit code."""
    async with TestRailClient.from_config(config) as client:
        cases = await client.get_cases(options.project_id, options.suite_id)

    cache = load_case_cache(options.file, options.project_id, options.suite_id)
    cache, updated = cache.merge(cases, now or datetime.now(UTC))

    if not updated:
        log.info("Case cache is up to date")
        return 0

    data = dump_case_cache(cache)
    if options.file is not None:
        try:
            options.file.write_text(data)
        except OSError as exc:
            raise TrailerError(
                f"Error writing suite data to output file: {exc}"
            ) from exc
        log.info("Wrote %d case(s) to %s", len(cache.cases), options.file)
    else:
        log.info("%s", data)

    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="trailer", description="TestRail command line utility"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    upload = commands.add_parser(
        "upload", aliases=["u"], help="Upload JUnit XML reports to TestRail"
    )
    upload.add_argument(
        "-v", "--verbose", action="store_true", help="turn on debug logs"
    )
    upload.add_argument(
        "-d",
        "--dry",
        action="store_true",
        help="print readable results without updating TestRail run",
    )
    upload.add_argument(
        "-i",
        "--ignore-failures",
        type=int,
        default=1,
        help="ignore failures and retry this number of times",
    )
    upload.add_argument(
        "-r",
        "--run-id",
        type=int,
        default=0,
        help="TestRail run ID to target for the update",
    )
    upload.add_argument(
        "-c",
        "--comment",
        default="",
        help="prefix to use when commenting on TestRail updates",
    )
    upload.add_argument(
        "reports", nargs="*", type=Path, help="input JUnit XML report files"
    )
    upload.set_defaults(handler=_handle_upload)

    download = commands.add_parser(
        "download", aliases=["d"], help="Download case specs from TestRail"
    )
    download.add_argument(
        "-v", "--verbose", action="store_true", help="turn on debug logs"
    )
    download.add_argument(
        "-p",
        "--project-id",
        type=int,
        default=0,
        help="TestRail project ID to download cases from",
    )
    download.add_argument(
        "-s",
        "--suite-id",
        type=int,
        default=0,
        help="TestRail suite ID to download cases from",
    )
    download.add_argument(
        "-f", "--file", type=Path, help="File to write downloaded cases to"
    )
    download.set_defaults(handler=_handle_download)

    return parser


def _handle_upload(args: argparse.Namespace, config: TestRailConfig) -> int:
    options = UploadOptions(
        run_id=args.run_id,
        reports=tuple(args.reports),
        comment=args.comment,
        attempts=args.ignore_failures,
        dry_run=args.dry,
    )
    return asyncio.run(run_upload(options, config))


def _handle_download(args: argparse.Namespace, config: TestRailConfig) -> int:
    options = DownloadOptions(
        project_id=args.project_id, suite_id=args.suite_id, file=args.file
    )
    return asyncio.run(run_download(options, config))


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = TestRailConfig.from_env(os.environ)
        exit_code = args.handler(args, config)
    except (TrailerError, aiohttp.ClientError, TimeoutError) as exc:
        log.error("%s", exc)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
