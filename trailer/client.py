"""Asynchronous client for the TestRail API v2."""

import json
import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import ValidationError

from trailer.config import TestRailConfig
from trailer.errors import TestRailAPIError
from trailer.models.testrail import AddResultsForCases, Case, CasesPage, Result

log = logging.getLogger(__name__)

API_PREFIX = "index.php?/api/v2/"


@dataclass(frozen=True, kw_only=True)
class TestRailClient:
    """Thin wrapper over the TestRail endpoints used by trailer."""

    __test__ = False

    config: TestRailConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: TestRailConfig
    ) -> AsyncGenerator["TestRailClient", None]:
        """Create client with managed session lifecycle."""
        auth = aiohttp.BasicAuth(config.username, config.token.get_secret_value())
        headers = {"Content-Type": "application/json"}
        async with aiohttp.ClientSession(auth=auth, headers=headers) as session:
            yield cls(config=config, session=session)

    def api_url(self, path: str) -> str:
        """Build an absolute API URL.

        TestRail routes requests through the query string, so ``path`` may be
        an endpoint (``get_cases/1``) or an API path from a pagination link
        (``/api/v2/get_cases/1&offset=250``).
        """
        base = self.config.url.rstrip("/")
        if path.startswith("/api/v2/"):
            return f"{base}/index.php?{path}"
        return f"{base}/{API_PREFIX}{path}"

    async def add_results_for_cases(
        self, run_id: int, payload: AddResultsForCases
    ) -> Sequence[Result]:
        """Submit results for cases of a test run and return the accepted results."""
        url = self.api_url(f"add_results_for_cases/{run_id}")
        log.debug("Submitting %d result(s) to run %d", len(payload.results), run_id)

        async with self.session.post(url, json=payload.to_json()) as response:
            data = await self._read_json(response)
            try:
                return [Result.model_validate(item) for item in data or []]
            except (TypeError, ValidationError) as exc:
                raise _unexpected_response(response, exc) from exc

    async def get_cases(self, project_id: int, suite_id: int) -> Sequence[Case]:
        """Get all cases of a suite, following pagination links."""
        path: str | None = f"get_cases/{project_id}&suite_id={suite_id}"
        cases: list[Case] = []

        while path is not None:
            async with self.session.get(self.api_url(path)) as response:
                data = await self._read_json(response)
                try:
                    # TestRail before 6.7 returns a bare list without pagination
                    if isinstance(data, list):
                        cases.extend(Case.model_validate(item) for item in data)
                        break
                    page = CasesPage.model_validate(data)
                except ValidationError as exc:
                    raise _unexpected_response(response, exc) from exc

            cases.extend(page.cases)
            path = page.links.next

        log.debug(
            "Fetched %d case(s) for project %d suite %d",
            len(cases),
            project_id,
            suite_id,
        )
        return cases

    async def _read_json(self, response: aiohttp.ClientResponse) -> Any:
        text = await response.text()
        if response.status >= 300:
            raise TestRailAPIError(
                response.status, response.reason or "", _error_message(text)
            )
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError as exc:
            raise _unexpected_response(response, exc) from exc


def _unexpected_response(
    response: aiohttp.ClientResponse, exc: Exception
) -> TestRailAPIError:
    return TestRailAPIError(
        response.status, response.reason or "", f"unexpected response body: {exc}"
    )


def _error_message(text: str) -> str:
    """Extract the error field of a TestRail error body, if present."""
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return text
