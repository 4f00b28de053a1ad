"""Frontmatter codec for issue markdown files.

File layout::

    ---
    number: 12
    title: Fix the thing
    state: open
    labels: [bug, urgent]
    ---

    Free-form issue body.

Values are written raw. A value containing the ``---`` marker is not escaped
and will truncate the header when read back; that is a known limitation of
the format.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .models import Issue, LocalIssueFile

MARKER = "---"
FIELD_ORDER = ("number", "title", "state", "labels")


def format_labels(labels: Iterable[str]) -> str:
    return "[" + ", ".join(labels) + "]"


def issue_frontmatter(issue: Issue) -> dict[str, str]:
    return {
        "number": str(issue.number),
        "title": issue.title,
        "state": issue.state,
        "labels": format_labels(issue.labels),
    }


def encode(frontmatter: Mapping[str, str], body: str) -> str:
    """Render a header block followed by a blank line and ``body`` verbatim.

    Known fields come first in their canonical order (``number`` leading);
    any extra keys follow in mapping order.
    """
    keys = [k for k in FIELD_ORDER if k in frontmatter]
    keys += [k for k in frontmatter if k not in FIELD_ORDER]
    lines = [MARKER]
    lines.extend(f"{key}: {frontmatter[key]}" for key in keys)
    lines.append(MARKER)
    return "\n".join(lines) + "\n\n" + body


def encode_issue(issue: Issue) -> str:
    return encode(issue_frontmatter(issue), issue.body or "")


def render_file(local: LocalIssueFile) -> str:
    return encode(local.frontmatter, local.body)


def decode(text: str) -> LocalIssueFile:
    # No header, or a header still being typed: everything is body.
    if not text.startswith(MARKER):
        return LocalIssueFile(frontmatter={}, body=text)
    start = len(MARKER)
    end = text.find(MARKER, start)
    if end == -1:
        return LocalIssueFile(frontmatter={}, body=text)

    frontmatter: dict[str, str] = {}
    for line in text[start:end].splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        frontmatter[key.strip()] = value.strip()

    # The blank separator line goes with the surrounding whitespace.
    body = text[end + len(MARKER) :].strip()
    return LocalIssueFile(frontmatter=frontmatter, body=body)


__all__ = [
    "MARKER",
    "decode",
    "encode",
    "encode_issue",
    "format_labels",
    "issue_frontmatter",
    "render_file",
]
