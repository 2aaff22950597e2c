"""Pending result set built from parsed test suites."""

import logging
from collections.abc import ItemsView, Iterable, Mapping, Sequence

from trailer.case_ids import extract_case_ids
from trailer.models.report import TestCase, TestSuite
from trailer.models.result import OutcomeRecord, OutcomeStatus

log = logging.getLogger(__name__)


def outcome_for_case(comment: str, case: TestCase) -> OutcomeRecord:
    """Reduce a single test case observation to an outcome record.

    A failure marker wins over a skip marker, which wins over the passed
    default.
    """
    if case.failure is not None:
        return OutcomeRecord(
            status=OutcomeStatus.FAILED,
            message=f"{comment}\n\n{case.failure.message}",
            elapsed=case.time,
        )
    if case.skipped is not None:
        return OutcomeRecord(status=OutcomeStatus.SKIPPED, elapsed=case.time)
    return OutcomeRecord(status=OutcomeStatus.PASSED, elapsed=case.time)


def merge_outcome(
    results: dict[int, OutcomeRecord], case_id: int, record: OutcomeRecord
) -> None:
    """Merge a record into results in place. A stored failure is never replaced."""
    existing = results.get(case_id)
    if existing is not None and existing.status is OutcomeStatus.FAILED:
        log.debug("Keeping failed result for case %d", case_id)
        return
    results[case_id] = record


class PendingResults:
    """Results keyed by case ID, awaiting submission to TestRail."""

    def __init__(self, results: Mapping[int, OutcomeRecord] | None = None) -> None:
        self._results: dict[int, OutcomeRecord] = dict(results or {})

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, case_id: object) -> bool:
        return case_id in self._results

    def __repr__(self) -> str:
        return f"PendingResults({self._results!r})"

    def get(self, case_id: int) -> OutcomeRecord | None:
        return self._results.get(case_id)

    def case_ids(self) -> Sequence[int]:
        """Case IDs in ascending order."""
        return sorted(self._results)

    def items(self) -> ItemsView[int, OutcomeRecord]:
        return self._results.items()

    def add_outcome(self, case_id: int, record: OutcomeRecord) -> None:
        """Merge a single observation for a case."""
        merge_outcome(self._results, case_id, record)

    def add_suites(self, comment: str, suites: Iterable[TestSuite]) -> None:
        """Merge every test case observation from the given suites.

        The merge is all or nothing: if a case ID cannot be extracted, the
        error propagates and no observation from this call is kept.

        Args:
            comment: Prefix prepended to failure messages
            suites: Parsed test suites

        Raises:
            ExtractionError: If a case ID token cannot be converted

        """
        staged = dict(self._results)
        observed = 0
        for suite in suites:
            for case in suite.test_cases:
                case_ids = extract_case_ids(case.name)
                if not case_ids:
                    log.debug("No case ID in test name: %s", case.name)
                    continue
                record = outcome_for_case(comment, case)
                for case_id in case_ids:
                    merge_outcome(staged, case_id, record)
                    observed += 1

        self._results = staged
        log.info(
            "Merged %d observation(s), %d case(s) pending", observed, len(staged)
        )

    def remove_result(self, case_id: int) -> None:
        """Drop the result for a case, if any."""
        self._results.pop(case_id, None)
