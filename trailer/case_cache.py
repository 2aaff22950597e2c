"""Incremental YAML cache of case titles for a TestRail suite."""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

import yaml
from pydantic import Field, ValidationError, field_serializer

from trailer.errors import CaseCacheError
from trailer.models.base import Model
from trailer.models.testrail import Case

log = logging.getLogger(__name__)

EPOCH = datetime.fromtimestamp(0, tz=UTC)


class CaseCache(Model):
    """Case titles of a suite, keyed by case ID."""

    project_id: int
    suite_id: int
    last_updated: datetime = Field(
        default=EPOCH, description="Time of the last change to the cache"
    )
    cases: dict[int, str] = Field(default_factory=dict)

    @field_serializer("last_updated")
    def serialize_last_updated(self, value: datetime) -> str:
        return value.isoformat()

    def merge(self, cases: Iterable[Case], now: datetime) -> tuple["CaseCache", bool]:
        """Merge cases updated after the last refresh.

        Returns:
            The new cache and whether any case was added or changed. The
            timestamp only moves when something changed.

        """
        updated = {
            case.id: case.title
            for case in cases
            if datetime.fromtimestamp(case.updated_on, tz=UTC) > self.last_updated
        }
        if not updated:
            return self, False

        log.info("Updating %d case(s) in cache", len(updated))
        return (
            self.model_copy(
                update={"cases": {**self.cases, **updated}, "last_updated": now}
            ),
            True,
        )


def load_case_cache(path: Path | None, project_id: int, suite_id: int) -> CaseCache:
    """Load the cache at path, or start an empty one if there is none."""
    if path is None or not path.exists():
        return CaseCache(project_id=project_id, suite_id=suite_id)

    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise CaseCacheError(f"Error reading file: {path}: {exc}") from exc

    try:
        cache = CaseCache.model_validate(data or {})
    except ValidationError as exc:
        raise CaseCacheError(f"Error unmarshaling suite data: {exc}") from exc

    if cache.last_updated.tzinfo is None:
        cache = cache.model_copy(
            update={"last_updated": cache.last_updated.replace(tzinfo=UTC)}
        )
    return cache


def dump_case_cache(cache: CaseCache) -> str:
    """Serialize the cache to YAML."""
    return yaml.safe_dump(cache.model_dump(), sort_keys=False)
