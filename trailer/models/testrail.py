"""Pydantic models for TestRail API requests and responses."""

from collections.abc import Sequence
from enum import IntEnum

from pydantic import BaseModel, Field

from trailer.models.base import Model


class TestRailStatus(IntEnum):
    """Built-in TestRail result status IDs."""

    __test__ = False

    PASSED = 1
    BLOCKED = 2
    UNTESTED = 3
    RETEST = 4
    FAILED = 5


class ResultForCase(Model):
    """A single entry of an add_results_for_cases request."""

    case_id: int
    status_id: TestRailStatus
    comment: str | None = None
    elapsed: str | None = None


class AddResultsForCases(Model):
    """Request body for add_results_for_cases."""

    results: Sequence[ResultForCase] = Field(default_factory=list)

    def to_json(self) -> dict[str, object]:
        """Serialize to the JSON body expected by the API."""
        return self.model_dump(mode="json", exclude_none=True)


class Result(BaseModel):
    """A result accepted by TestRail."""

    id: int
    test_id: int
    status_id: int | None = None
    comment: str | None = None
    elapsed: str | None = None
    created_on: int | None = None


class Case(BaseModel):
    """A test case from get_cases."""

    id: int
    title: str
    suite_id: int | None = None
    section_id: int | None = None
    updated_on: int = 0


class PageLinks(BaseModel):
    """Pagination links in bulk responses."""

    next: str | None = None
    prev: str | None = None


class CasesPage(BaseModel):
    """Paginated response from get_cases."""

    offset: int = 0
    limit: int = 0
    size: int = 0
    links: PageLinks = Field(default_factory=PageLinks, alias="_links")
    cases: Sequence[Case]
