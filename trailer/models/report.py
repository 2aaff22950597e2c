"""Models for test suites decoded from JUnit XML reports."""

from collections.abc import Sequence

from pydantic import Field

from trailer.models.base import Model


class Failure(Model):
    """Failure marker attached to a test case."""

    message: str = Field(default="", description="Free-text failure message")
    type: str | None = Field(default=None, description="Failure type attribute")


class Skipped(Model):
    """Skip marker attached to a test case."""

    message: str | None = Field(default=None, description="Optional skip reason")


class TestCase(Model):
    """A single executed test case."""

    __test__ = False

    name: str = Field(..., description="Display name, may embed case identifiers")
    classname: str = Field(default="", description="Owning class or module")
    time: float = Field(default=0.0, description="Elapsed time in seconds")
    skipped: Skipped | None = Field(default=None, description="Skip marker")
    failure: Failure | None = Field(default=None, description="Failure marker")


class TestSuite(Model):
    """A named, ordered group of test cases."""

    __test__ = False

    name: str = Field(default="", description="Suite name")
    test_cases: Sequence[TestCase] = Field(
        default_factory=list, description="Test cases in document order"
    )
