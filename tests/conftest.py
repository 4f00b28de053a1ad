"""Pytest configuration for issuesync tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from issuesync.config import SyncConfig, build_config  # noqa: E402
from issuesync.github_rest import GitHubAPIError  # noqa: E402
from issuesync.logging import configure_logging  # noqa: E402


class FakeTracker:
    """In-memory stand-in for the async GitHub client."""

    def __init__(
        self,
        issues: list[dict[str, Any]] | None = None,
        *,
        list_error: Exception | None = None,
        update_error: Exception | None = None,
    ):
        self.issues = list(issues or [])
        self.list_error = list_error
        self.update_error = update_error
        self.list_calls = 0
        self.updates: list[dict[str, Any]] = []

    async def list_issues(self) -> list[dict[str, Any]]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return [dict(entry) for entry in self.issues]

    async def update_issue(self, **kwargs: Any) -> None:
        if self.update_error is not None:
            raise self.update_error
        self.updates.append(kwargs)


def api_issue(
    number: int,
    title: str,
    *,
    state: str = "open",
    body: str | None = "",
    labels: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "number": number,
        "title": title,
        "state": state,
        "body": body,
        "labels": [{"name": name, "color": "ededed"} for name in labels or []],
    }


@pytest.fixture(autouse=True)
def _fresh_logger(capsys: pytest.CaptureFixture[str]) -> None:
    # Bind the global logger's handler to the capsys stdout of this test.
    configure_logging(json_logging=False, level="INFO")


@pytest.hookimpl(hookwrapper=True, trylast=True)
def pytest_runtest_call(item: pytest.Item) -> Any:
    # Setup-phase capture streams are closed before the test body runs, so
    # re-bind the global logger's handler to the call-phase stdout.
    configure_logging(json_logging=False, level="INFO")
    yield


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., SyncConfig]:
    def _make(**overrides: Any) -> SyncConfig:
        params: dict[str, Any] = {
            "token": "tkn",
            "repo": "acme/widgets",
            "issues_dir": tmp_path / "issues",
        }
        params.update(overrides)
        return build_config(**params)

    return _make



@pytest.fixture
def api_error() -> GitHubAPIError:
    return GitHubAPIError("GitHub API PATCH failed with 502", status=502, response_text="bad gateway")
