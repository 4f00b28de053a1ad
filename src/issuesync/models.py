from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

ISSUE_FILE_SUFFIX = ".md"
ISSUE_FILE_PREFIX = "issue-"
STATE_OPEN = "open"
STATE_CLOSED = "closed"


@dataclass
class Issue:
    """Local projection of a remote GitHub issue.

    The tracker owns the authoritative copy; instances are rebuilt from the
    API payload on every download pass and never cached between cycles.
    """

    number: int
    title: str
    body: str | None = None
    state: str = STATE_OPEN
    labels: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Issue:
        body_any = payload.get("body")
        return cls(
            number=int(payload["number"]),
            title=str(payload.get("title") or ""),
            body=body_any if isinstance(body_any, str) else None,
            state=str(payload.get("state") or STATE_OPEN),
            labels=extract_labels(payload.get("labels")),
        )


def extract_labels(raw: Any) -> list[str]:
    """Best-effort label names from an issue payload.

    GitHub returns label objects (``{"name": ...}``) but older payloads and
    some proxies hand back bare strings. Anything else is not modelled, so
    the whole list degrades to empty rather than failing the sync.
    """
    if not isinstance(raw, list):
        return []
    names: list[str] = []
    for entry in raw:
        if isinstance(entry, str):
            name: Any = entry
        elif isinstance(entry, dict):
            name = entry.get("name")
        else:
            return []
        if not isinstance(name, str):
            return []
        if name.strip():
            names.append(name.strip())
    return names


@dataclass
class LocalIssueFile:
    """Decoded view of an ``issue-<number>.md`` file."""

    frontmatter: dict[str, str]
    body: str


def issue_filename(number: int) -> str:
    return f"{ISSUE_FILE_PREFIX}{number}{ISSUE_FILE_SUFFIX}"


def issue_path(issues_dir: Path, number: int) -> Path:
    return issues_dir / issue_filename(number)


def is_issue_file(path: Path) -> bool:
    return path.suffix == ISSUE_FILE_SUFFIX


__all__ = [
    "Issue",
    "LocalIssueFile",
    "extract_labels",
    "issue_filename",
    "issue_path",
    "is_issue_file",
    "ISSUE_FILE_SUFFIX",
    "STATE_OPEN",
    "STATE_CLOSED",
]
