"""Decode JUnit XML reports into test suites.

A report comes in one of two shapes: a single ``<testsuite>`` root, or a
wrapper root (usually ``<testsuites>``) holding several ``<testsuite>``
children. The single-suite shape is tried first; a suite without test cases
does not count as a match, since it cannot be told apart from a wrapper.
"""

import logging
import math
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

from trailer.errors import ReportParseError
from trailer.models.report import Failure, Skipped, TestCase, TestSuite

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class SingleSuite:
    """Report whose root element is a single test suite."""

    suite: TestSuite

    @property
    def suites(self) -> Sequence[TestSuite]:
        return [self.suite]


@dataclass(frozen=True, kw_only=True)
class MultiSuite:
    """Report whose root element wraps several test suites."""

    suites: Sequence[TestSuite]


@dataclass(frozen=True, kw_only=True)
class Unparseable:
    """Report matching neither recognized shape."""

    reason: str


ParsedReport: TypeAlias = SingleSuite | MultiSuite | Unparseable


def decode_report(data: bytes) -> ParsedReport:
    """Decode raw report bytes into one of the recognized shapes."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        return Unparseable(reason=f"invalid XML: {exc}")

    if (single := decode_single_suite(root)) is not None:
        return single

    if (multi := decode_multiple_suites(root)) is not None:
        return multi

    return Unparseable(reason="no test suites with test cases found")


def decode_single_suite(root: ET.Element) -> SingleSuite | None:
    """Decode a ``<testsuite>`` root holding at least one test case."""
    if root.tag != "testsuite":
        return None

    suite = _suite_from_element(root)
    if not suite.test_cases:
        return None

    return SingleSuite(suite=suite)


def decode_multiple_suites(root: ET.Element) -> MultiSuite | None:
    """Decode a wrapper root holding at least one ``<testsuite>`` child."""
    suites = [_suite_from_element(child) for child in root.findall("testsuite")]
    if not suites:
        return None

    return MultiSuite(suites=suites)


def parse_report(data: bytes, source: str = "<bytes>") -> Sequence[TestSuite]:
    """Parse report bytes into test suites.

    Raises:
        ReportParseError: If the report matches neither shape

    """
    match decode_report(data):
        case SingleSuite() | MultiSuite() as parsed:
            log.debug("Parsed %d suite(s) from %s", len(parsed.suites), source)
            return parsed.suites
        case Unparseable(reason=reason):
            raise ReportParseError(
                f"failed to parse any testsuites from xml file: {source} ({reason})"
            )


def parse_file(path: Path) -> Sequence[TestSuite]:
    """Read and parse a report file."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ReportParseError(f"failed to read xml file: {path}: {exc}") from exc

    return parse_report(data, source=str(path))


def _suite_from_element(element: ET.Element) -> TestSuite:
    return TestSuite(
        name=element.get("name", ""),
        test_cases=[_case_from_element(case) for case in element.findall("testcase")],
    )


def _case_from_element(element: ET.Element) -> TestCase:
    skipped = None
    if (skipped_element := element.find("skipped")) is not None:
        skipped = Skipped(message=skipped_element.get("message"))

    failure = None
    if (failure_element := element.find("failure")) is not None:
        # Surefire and pytest put the message in the attribute, Ginkgo in the text
        message = (failure_element.text or "").strip() or failure_element.get(
            "message", ""
        )
        failure = Failure(message=message, type=failure_element.get("type"))

    return TestCase(
        name=element.get("name", ""),
        classname=element.get("classname", ""),
        time=_parse_time(element.get("time")),
        skipped=skipped,
        failure=failure,
    )


def _parse_time(value: str | None) -> float:
    if not value:
        return 0.0
    try:
        seconds = float(value)
    except ValueError:
        seconds = math.nan
    if not math.isfinite(seconds):
        log.debug("Ignoring unparsable testcase time %r", value)
        return 0.0
    return seconds
