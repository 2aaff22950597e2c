"""Build add_results_for_cases payloads from pending results."""

from collections.abc import Mapping

from trailer.models.result import OutcomeRecord, OutcomeStatus
from trailer.models.testrail import AddResultsForCases, ResultForCase, TestRailStatus
from trailer.pending import PendingResults

STATUS_TO_TESTRAIL: Mapping[OutcomeStatus, TestRailStatus] = {
    OutcomeStatus.PASSED: TestRailStatus.PASSED,
    OutcomeStatus.FAILED: TestRailStatus.FAILED,
    OutcomeStatus.SKIPPED: TestRailStatus.UNTESTED,
}


def format_timespan(seconds: float) -> str | None:
    """Render elapsed seconds in TestRail timespan notation.

    TestRail accepts whole seconds only, so the value is truncated (3725.9
    becomes "1h 2m 5s"). Returns None when nothing is left.
    """
    total = int(seconds)
    if total <= 0:
        return None

    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = [
        f"{value}{unit}"
        for value, unit in ((hours, "h"), (minutes, "m"), (secs, "s"))
        if value
    ]
    return " ".join(parts)


def result_for_case(case_id: int, record: OutcomeRecord) -> ResultForCase:
    """Encode a single outcome record."""
    status = STATUS_TO_TESTRAIL[record.status]
    return ResultForCase(
        case_id=case_id,
        status_id=status,
        comment=record.message if status is TestRailStatus.FAILED else None,
        elapsed=format_timespan(record.elapsed),
    )


def build_payload(pending: PendingResults) -> AddResultsForCases:
    """Project pending results onto a request body, ordered by case ID.

    Skipped records stay pending locally but are never sent.
    """
    return AddResultsForCases(
        results=[
            result_for_case(case_id, record)
            for case_id, record in sorted(pending.items())
            if record.status is not OutcomeStatus.SKIPPED
        ]
    )
