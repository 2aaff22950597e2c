"""Error types raised by trailer."""


class TrailerError(Exception):
    """Base class for fatal trailer errors."""


class ConfigurationError(TrailerError):
    """Raised when credentials or required options are missing or invalid."""


class ReportParseError(TrailerError):
    """Raised when a report matches neither the single nor the wrapped suite shape."""


class ExtractionError(TrailerError):
    """Raised when a case identifier token cannot be converted to a case ID."""


class CaseCacheError(TrailerError):
    """Raised when a case cache file cannot be read."""


class TestRailAPIError(TrailerError):
    """Raised when the TestRail API answers with a non-success status."""

    __test__ = False

    def __init__(self, status: int, reason: str, message: str) -> None:
        super().__init__(f"{status} {reason}: {message}")
        self.status = status
        self.reason = reason
        self.message = message


class SubmissionError(TrailerError):
    """Raised when result submission fails in a way that cannot be retried."""
