"""Submission of pending results with removal of rejected cases."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from trailer.case_ids import RejectionParser, UnknownCaseRejectionParser
from trailer.client import TestRailClient
from trailer.errors import ConfigurationError, SubmissionError, TestRailAPIError
from trailer.models.testrail import Result
from trailer.payload import build_payload
from trailer.pending import PendingResults

log = logging.getLogger(__name__)


class UploadState(StrEnum):
    """Terminal state of an upload."""

    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, kw_only=True)
class UploadReport:
    """Outcome of an upload."""

    state: UploadState
    attempts: int
    results: Sequence[Result] = ()
    removed: Sequence[int] = ()


@dataclass(frozen=True, kw_only=True)
class ResultUploader:
    """Submits pending results, retrying after TestRail rejects unknown cases.

    Each attempt builds a fresh payload from the pending results. When the
    API rejects the request because some cases are unknown to the run, those
    cases are removed and the next attempt goes out without them. Any other
    API error stops the upload.
    """

    client: TestRailClient
    attempts: int = 1
    rejection_parser: RejectionParser = field(
        default_factory=UnknownCaseRejectionParser
    )

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ConfigurationError(
                f"attempts must be a positive integer, got {self.attempts}"
            )

    async def upload(self, run_id: int, pending: PendingResults) -> UploadReport:
        """Upload pending results to a run.

        Args:
            run_id: TestRail run ID to add results to
            pending: Pending results, rejected cases are removed in place

        Returns:
            Report with the terminal state and accepted results

        Raises:
            SubmissionError: If TestRail answers with an unrecoverable error

        """
        removed: list[int] = []

        for attempt in range(1, self.attempts + 1):
            payload = build_payload(pending)
            log.info(
                "Uploading %d result(s) to run %d (attempt %d/%d)",
                len(payload.results),
                run_id,
                attempt,
                self.attempts,
            )

            try:
                results = await self.client.add_results_for_cases(run_id, payload)
            except TestRailAPIError as exc:
                rejected = self.rejection_parser.parse(str(exc))
                if not rejected:
                    raise SubmissionError(
                        f"Failed to upload test results to TestRail: {exc}"
                    ) from exc

                log.warning(
                    "TestRail rejected unknown case(s): %s",
                    ", ".join(f"C{case_id}" for case_id in rejected),
                )
                for case_id in rejected:
                    pending.remove_result(case_id)
                removed.extend(rejected)
                continue

            if results:
                return UploadReport(
                    state=UploadState.SUCCEEDED,
                    attempts=attempt,
                    results=results,
                    removed=removed,
                )

            log.info("No results uploaded")

        return UploadReport(
            state=UploadState.EXHAUSTED, attempts=self.attempts, removed=removed
        )
