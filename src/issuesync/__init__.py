"""issuesync - keep a directory of markdown files in sync with GitHub issues.

One issue maps to one ``issue-<number>.md`` file holding a small frontmatter
header (number, title, state, labels) and the issue body.

from issuesync import SyncRunner, build_config

cfg = build_config(token="...", repo="octo/widgets", watch=False)
SyncRunner(cfg).run()

The CLI (``issuesync`` / ``python -m issuesync``) wraps the same runner.
"""

from __future__ import annotations

# Defined before the submodule imports; github_rest reads it for User-Agent.
__version__ = "0.1.0"

from .config import ConfigError, SyncConfig, build_config  # noqa: E402
from .frontmatter import decode, encode_issue  # noqa: E402
from .models import Issue, LocalIssueFile  # noqa: E402
from .runner import SyncRunner  # noqa: E402

__all__ = [
    "ConfigError",
    "Issue",
    "LocalIssueFile",
    "SyncConfig",
    "SyncRunner",
    "build_config",
    "decode",
    "encode_issue",
    "__version__",
]
