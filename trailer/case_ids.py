"""Extraction of TestRail case identifiers from free text."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from trailer.errors import ExtractionError

log = logging.getLogger(__name__)

CASE_MARKER = "TestRailC"

CASE_ID_PATTERN = re.compile(rf"{CASE_MARKER}([0-9]+)")
UNKNOWN_CASE_PATTERN = re.compile(r"case C([0-9]+) unknown")


def extract_case_ids(name: str) -> Sequence[int]:
    """Return case IDs embedded in a test name, in order of appearance.

    TestRail case IDs start at 1, so a zero token (``TestRailC0``) is logged
    and skipped.

    Args:
        name: Test case display name (e.g., "login works TestRailC123")

    Returns:
        Case IDs, empty when the name carries no marker

    Raises:
        ExtractionError: If a token cannot be converted to an integer

    """
    case_ids = []
    for token in CASE_ID_PATTERN.findall(name):
        case_id = _to_case_id(token)
        if case_id == 0:
            log.warning("Skipping invalid case ID %s%s in %r", CASE_MARKER, token, name)
            continue
        case_ids.append(case_id)
    return case_ids


def _to_case_id(token: str) -> int:
    try:
        return int(token)
    except ValueError as exc:
        raise ExtractionError(f"failed to convert case ID to integer: {token}") from exc


class RejectionParser(Protocol):
    """Extracts case IDs rejected by the remote service from its error text."""

    def parse(self, text: str) -> Sequence[int]:
        """Return rejected case IDs, empty when the error is not a rejection."""
        ...


@dataclass(frozen=True)
class UnknownCaseRejectionParser:
    """Matches TestRail's ``case C<id> unknown`` validation errors."""

    pattern: re.Pattern[str] = field(default=UNKNOWN_CASE_PATTERN)

    def parse(self, text: str) -> Sequence[int]:
        return [int(case_id) for case_id in self.pattern.findall(text)]
