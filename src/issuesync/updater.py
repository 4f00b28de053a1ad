"""Upload path: one edited ``issue-<number>.md`` file -> one issue update."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .concurrency import IssueTracker
from .config import SyncConfig
from .errors import IssueNumberError, SyncError, UpdateError
from .frontmatter import decode
from .github_rest import GitHubAPIError
from .logging import get_logger
from .models import STATE_CLOSED, STATE_OPEN, is_issue_file

_ISSUE_NUMBER = re.compile(r"[+-]?[0-9]+")


@dataclass
class UpdateRequest:
    """Fields sent to the tracker. ``None`` means leave the remote value alone."""

    number: int
    body: str
    title: str | None = None
    state: str | None = None
    labels: list[str] | None = None


def parse_issue_number(frontmatter: Mapping[str, str]) -> int:
    raw = frontmatter.get("number")
    if raw is None:
        raise IssueNumberError("Could not determine issue number: no 'number' field")
    # ASCII digits only; int() would also take "1_000" and non-ASCII digits.
    text = raw.strip()
    if not _ISSUE_NUMBER.fullmatch(text):
        raise IssueNumberError(f"Could not determine issue number: {raw!r} is not an integer")
    return int(text)


def parse_state(value: str | None) -> str | None:
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in (STATE_OPEN, STATE_CLOSED):
        return lowered
    return None


def parse_labels(value: str | None) -> list[str] | None:
    """Split ``[a, b]`` / ``a, b`` into label names.

    An empty result yields ``None`` so a blank field never wipes remote labels.
    """
    if value is None:
        return None
    labels = [part.strip().strip("[]").strip() for part in value.split(",")]
    labels = [label for label in labels if label]
    return labels or None


def build_update_request(frontmatter: Mapping[str, str], body: str) -> UpdateRequest:
    return UpdateRequest(
        number=parse_issue_number(frontmatter),
        body=body,
        title=frontmatter.get("title"),
        state=parse_state(frontmatter.get("state")),
        labels=parse_labels(frontmatter.get("labels")),
    )


async def sync_local_to_remote(
    config: SyncConfig, path: Path, client: IssueTracker
) -> UpdateRequest | None:
    """Push the frontmatter and body of ``path`` to its issue.

    Returns ``None`` without touching the network when ``path`` is not an
    existing ``.md`` file.
    """
    path = Path(path)
    if not path.is_file() or not is_issue_file(path):
        return None

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SyncError(f"Failed to read file: {path}", path=path) from exc

    local = decode(content)
    try:
        request = build_update_request(local.frontmatter, local.body)
    except IssueNumberError as exc:
        exc.path = path
        raise

    try:
        await client.update_issue(
            number=request.number,
            body=request.body,
            title=request.title,
            state=request.state,
            labels=request.labels,
        )
    except GitHubAPIError as exc:
        raise UpdateError(
            f"Failed to update issue #{request.number} in {config.repo} from {path}",
            issue_number=request.number,
            path=path,
        ) from exc

    get_logger().log_issue_action(
        f"Updated issue #{request.number} on GitHub from {path}", request.number, str(path)
    )
    return request


__all__ = [
    "UpdateRequest",
    "build_update_request",
    "parse_issue_number",
    "parse_labels",
    "parse_state",
    "sync_local_to_remote",
]
