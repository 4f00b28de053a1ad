"""Download path: GitHub issues -> ``issue-<number>.md`` files."""

from __future__ import annotations

from pathlib import Path

from .concurrency import IssueTracker
from .config import SyncConfig
from .errors import FetchError
from .frontmatter import encode_issue
from .github_rest import GitHubAPIError
from .logging import get_logger
from .models import Issue, issue_path


def ensure_issues_dir(issues_dir: Path) -> None:
    try:
        issues_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FetchError(
            f"Failed to create issues directory: {issues_dir}", path=issues_dir
        ) from exc


def write_issue_file(issues_dir: Path, issue: Issue) -> Path:
    """Overwrite the issue's file wholesale with the encoded issue."""
    path = issue_path(issues_dir, issue.number)
    try:
        # newline="" keeps the bytes identical across platforms and passes.
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(encode_issue(issue))
    except OSError as exc:
        raise FetchError(
            f"Failed to write file: {path}", issue_number=issue.number, path=path
        ) from exc
    return path


async def sync_remote_to_local(config: SyncConfig, client: IssueTracker) -> list[Path]:
    """Write every remote issue into ``config.issues_dir``.

    Files are written in the order the tracker returns them (newest first).
    The first failure aborts the pass; files already written stay written.
    """
    logger = get_logger()
    ensure_issues_dir(config.issues_dir)
    try:
        payloads = await client.list_issues()
    except GitHubAPIError as exc:
        raise FetchError(f"Failed to list issues from GitHub for {config.repo}") from exc

    written: list[Path] = []
    with logger.timed_operation("sync_remote_to_local", repo=config.repo):
        for payload in payloads:
            try:
                issue = Issue.from_api(payload)
            except (KeyError, TypeError, ValueError) as exc:
                raise FetchError(f"Malformed issue payload from {config.repo}") from exc
            path = write_issue_file(config.issues_dir, issue)
            written.append(path)
            logger.log_issue_action(
                f"Synced issue #{issue.number} to {path}", issue.number, str(path)
            )
    return written


__all__ = ["ensure_issues_dir", "sync_remote_to_local", "write_issue_file"]
