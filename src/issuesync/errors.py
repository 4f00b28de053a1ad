"""Error taxonomy and redaction.

Sync failures are raised as :class:`SyncError` subclasses so the scheduler
can log them with the issue number and file path attached. Anything that
ends up in a log line first goes through :func:`redact`.

Public API:
- SyncError / FetchError / UpdateError / IssueNumberError
- classify_error(exc) -> ErrorInfo
- redact(text) -> str
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"gh[osu]_[A-Za-z0-9]{20,40}"),  # OAuth / app tokens
    re.compile(r"(?i)bearer\s+[A-Za-z0-9_\-.]{8,}"),
]

_REDACTION_PLACEHOLDER = "<redacted>"


class SyncError(RuntimeError):
    """Base class for failures of a single download or upload cycle."""

    def __init__(
        self,
        message: str,
        *,
        issue_number: int | None = None,
        path: Path | None = None,
    ):
        super().__init__(message)
        self.issue_number = issue_number
        self.path = path


class FetchError(SyncError):
    """A download pass could not list issues or write a file."""


class UpdateError(SyncError):
    """The tracker rejected or never answered an issue update."""


class IssueNumberError(SyncError):
    """A local file has no usable ``number`` field in its frontmatter."""


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    """Replace token-looking substrings with a placeholder."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def _chain_text(exc: BaseException) -> str:
    parts: list[str] = []
    current: BaseException | None = exc
    while current is not None and len(parts) < 5:
        parts.append(str(current))
        current = current.__cause__
    return " | ".join(p for p in parts if p)


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception and its cause chain.

    - HTTP 401/403 or "bad credentials" -> 'github.auth'
    - rate limit wording -> 'github.rate_limit', transient
    - timeouts and connection failures -> 'network', transient
    - OSError anywhere in the chain -> 'filesystem'
    - missing/unparsable issue number -> 'parse'
    - fallback -> 'generic'

    The ``transient`` flag is informational only; nothing retries on it.
    """
    msg = _chain_text(exc)
    low = msg.lower()
    kind = exc.__class__.__name__
    status = _find_status(exc)

    if "rate limit" in low or "secondary rate" in low:
        return ErrorInfo("github.rate_limit", redact(msg), kind, transient=True)
    if status in (401, 403) or "bad credentials" in low:
        return ErrorInfo("github.auth", redact(msg), kind, details={"status": status})
    if any(k in low for k in ("timeout", "timed out", "connection", "temporarily unavailable")):
        return ErrorInfo("network", redact(msg), kind, transient=True)
    if isinstance(exc, IssueNumberError):
        return ErrorInfo("parse", redact(msg), kind)
    if _has_cause(exc, OSError):
        return ErrorInfo("filesystem", redact(msg), kind)
    return ErrorInfo("generic", redact(msg), kind)


def _find_status(exc: BaseException) -> int | None:
    current: BaseException | None = exc
    while current is not None:
        status = getattr(current, "status", None)
        if isinstance(status, int):
            return status
        current = current.__cause__
    return None


def _has_cause(exc: BaseException, kind: type[BaseException]) -> bool:
    current: BaseException | None = exc
    while current is not None:
        if isinstance(current, kind):
            return True
        current = current.__cause__
    return False


__all__ = [
    "ErrorInfo",
    "FetchError",
    "IssueNumberError",
    "SyncError",
    "UpdateError",
    "classify_error",
    "redact",
]
