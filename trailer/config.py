"""Process configuration for trailer."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, SecretStr

from trailer.errors import ConfigurationError

DEFAULT_URL = "https://docker.testrail.com"


class TestRailConfig(BaseModel):
    """Connection settings for the TestRail API."""

    __test__ = False

    username: str
    token: SecretStr
    url: str = DEFAULT_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "TestRailConfig":
        """Build configuration from TESTRAIL_* environment variables.

        Raises:
            ConfigurationError: If TESTRAIL_USERNAME or TESTRAIL_TOKEN is unset

        """
        username = environ.get("TESTRAIL_USERNAME", "")
        token = environ.get("TESTRAIL_TOKEN", "")
        if not username or not token:
            raise ConfigurationError("Need to set TESTRAIL_USERNAME and TESTRAIL_TOKEN")

        return cls(
            username=username,
            token=SecretStr(token),
            url=environ.get("TESTRAIL_URL") or DEFAULT_URL,
        )


@dataclass(frozen=True, kw_only=True)
class UploadOptions:
    """Options for the upload command."""

    run_id: int
    reports: Sequence[Path]
    comment: str = ""
    attempts: int = 1
    dry_run: bool = False

    def __post_init__(self) -> None:
        if self.run_id == 0:
            raise ConfigurationError("Must set --run-id to a non-zero integer")
        if self.attempts < 1:
            raise ConfigurationError(
                "Must set --ignore-failures to a positive integer"
            )
        if not self.reports:
            raise ConfigurationError("Must pass at least one report file")


@dataclass(frozen=True, kw_only=True)
class DownloadOptions:
    """Options for the download command."""

    project_id: int
    suite_id: int
    file: Path | None = None

    def __post_init__(self) -> None:
        if self.project_id == 0:
            raise ConfigurationError("Must set --project-id to a non-zero integer")
        if self.suite_id == 0:
            raise ConfigurationError("Must set --suite-id to a non-zero integer")
