"""Tests for report decoding."""

from pathlib import Path

import pytest

from trailer.errors import ReportParseError
from trailer.report import (
    MultiSuite,
    SingleSuite,
    Unparseable,
    decode_report,
    parse_file,
    parse_report,
)
from trailer.testing.reports import (
    case_element,
    multi_suite_report,
    single_suite_report,
    suite_element,
)

SINGLE_SUITE = b"""<?xml version="1.0" encoding="UTF-8"?>
  <testsuite name="Test Suite" tests="4" failures="0" errors="0" time="795">
      <testcase name="testcase1" classname="class1" time="10.193520112"></testcase>
      <testcase name="testcase2" classname="class1" time="0.234914942"></testcase>
      <testcase name="testcase3" classname="class1" time="0.233229868"></testcase>
      <testcase name="testcase4" classname="class1" time="0.221499186"></testcase>
  </testsuite>"""

MULTI_SUITE = b"""<?xml version="1.0" encoding="UTF-8"?>
<testsuites name="Mocha Tests" time="15.358" tests="4" failures="0">
  <testsuite name="Root Suite" timestamp="2019-09-06T00:23:17" tests="0" time="0">
      <testcase name="testcase1" classname="class1" time="10.193520112"></testcase>
  </testsuite>
  <testsuite name="Test Suite" tests="4" failures="0" errors="0" time="795">
      <testcase name="testcase2" classname="class1" time="10.193520112"></testcase>
      <testcase name="testcase3" classname="class1" time="0.234914942"></testcase>
      <testcase name="testcase4" classname="class1" time="0.233229868"></testcase>
      <testcase name="testcase5" classname="class1" time="0.221499186"></testcase>
  </testsuite>
</testsuites>"""

UNTERMINATED_WRAPPER = b"""<?xml version="1.0" encoding="UTF-8"?>
<testsuites name="Mocha Tests" time="15.358" tests="4" failures="0">
  <testsuite name="Test Suite" tests="1">
      <testcase name="testcase1" classname="class1" time="10.193520112"></testcase>
  </testsuite>"""


class TestDecodeReport:
    """Tests for decode_report."""

    def test_decodes_single_suite(self) -> None:
        """Decodes a testsuite root with all of its cases."""
        parsed = decode_report(SINGLE_SUITE)

        assert isinstance(parsed, SingleSuite)
        assert parsed.suite.name == "Test Suite"
        assert len(parsed.suite.test_cases) == 4
        assert parsed.suite.test_cases[0].name == "testcase1"
        assert parsed.suite.test_cases[0].time == pytest.approx(10.193520112)

    def test_decodes_wrapped_suites(self) -> None:
        """Decodes every suite of a testsuites wrapper."""
        parsed = decode_report(MULTI_SUITE)

        assert isinstance(parsed, MultiSuite)
        assert len(parsed.suites) == 2
        assert sum(len(suite.test_cases) for suite in parsed.suites) == 5

    def test_single_suite_without_cases_is_unparseable(self) -> None:
        """A testsuite root without test cases matches neither shape."""
        parsed = decode_report(b'<testsuite name="empty" tests="0"></testsuite>')

        assert isinstance(parsed, Unparseable)

    def test_wrapper_keeps_empty_suites(self) -> None:
        """Suites without cases inside a wrapper are still returned."""
        report = multi_suite_report(
            [
                suite_element([], name="Root Suite"),
                suite_element([case_element("a")], name="Inner"),
            ]
        )

        parsed = decode_report(report)

        assert isinstance(parsed, MultiSuite)
        assert [suite.name for suite in parsed.suites] == ["Root Suite", "Inner"]

    def test_wrapper_without_suites_is_unparseable(self) -> None:
        """A wrapper without testsuite children matches neither shape."""
        parsed = decode_report(b'<testsuites name="none"></testsuites>')

        assert isinstance(parsed, Unparseable)

    def test_malformed_xml_is_unparseable(self) -> None:
        """Malformed XML matches neither shape."""
        parsed = decode_report(UNTERMINATED_WRAPPER)

        assert isinstance(parsed, Unparseable)
        assert "invalid XML" in parsed.reason

    def test_reads_skip_and_failure_markers(self) -> None:
        """Reads skipped and failure children of a test case."""
        report = single_suite_report(
            [
                case_element("skipped one", skipped=True),
                case_element("failed one", failure="expected 1 got 2"),
                case_element("passed one"),
            ]
        )

        parsed = decode_report(report)

        assert isinstance(parsed, SingleSuite)
        skipped, failed, passed = parsed.suite.test_cases
        assert skipped.skipped is not None
        assert skipped.failure is None
        assert failed.failure is not None
        assert failed.failure.message == "expected 1 got 2"
        assert failed.failure.type == "AssertionError"
        assert passed.skipped is None
        assert passed.failure is None

    def test_failure_message_falls_back_to_attribute(self) -> None:
        """Uses the message attribute when the failure element has no text."""
        report = (
            b'<testsuite name="s"><testcase name="t" time="1">'
            b'<failure message="boom"/></testcase></testsuite>'
        )

        parsed = decode_report(report)

        assert isinstance(parsed, SingleSuite)
        failure = parsed.suite.test_cases[0].failure
        assert failure is not None
        assert failure.message == "boom"

    @pytest.mark.parametrize("time", ["", "abc", "NaN", "inf", "-inf"])
    def test_unparsable_time_is_zero(self, time: str) -> None:
        """Treats a missing or invalid time attribute as zero seconds."""
        parsed = decode_report(single_suite_report([case_element("t", time=time)]))

        assert isinstance(parsed, SingleSuite)
        assert parsed.suite.test_cases[0].time == 0.0


class TestParseReport:
    """Tests for parse_report and parse_file."""

    def test_returns_single_suite_as_sequence(self) -> None:
        """Returns a one-element list for a single suite."""
        suites = parse_report(SINGLE_SUITE)

        assert len(suites) == 1
        assert len(suites[0].test_cases) == 4

    def test_raises_for_unparseable_report(self) -> None:
        """Raises ReportParseError naming the source."""
        with pytest.raises(ReportParseError, match="report.xml"):
            parse_report(b"<html></html>", source="report.xml")

    def test_parses_file(self, tmp_path: Path) -> None:
        """Reads and parses a report file."""
        path = tmp_path / "report.xml"
        path.write_bytes(MULTI_SUITE)

        suites = parse_file(path)

        assert len(suites) == 2

    def test_raises_for_missing_file(self, tmp_path: Path) -> None:
        """Raises ReportParseError when the file cannot be read."""
        with pytest.raises(ReportParseError, match="failed to read"):
            parse_file(tmp_path / "missing.xml")
