"""issuesync command line.

Performs one download of every issue into the issues directory, then with
``--watch`` keeps polling GitHub and pushes local edits back as they happen.

Settings are layered: YAML config file < environment < flags.
"""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from issuesync import __version__
from issuesync.config import (
    CONFIG_DEFAULT,
    ConfigError,
    SyncConfig,
    build_config,
    load_config_file,
    settings_from_env,
)
from issuesync.env_auth import EnvAuthConfig, create_env_auth_manager
from issuesync.errors import SyncError, classify_error, redact
from issuesync.logging import configure_logging, get_logger
from issuesync.runner import SyncRunner

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="issuesync",
        description="Synchronizes GitHub issues with a local directory",
        formatter_class=_HelpFormatter,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--token", metavar="TOKEN", help="GitHub API token (env: GITHUB_TOKEN)")
    p.add_argument(
        "--repo",
        metavar="OWNER/REPO",
        help="GitHub repository in format owner/repo (env: GITHUB_REPO)",
    )
    p.add_argument(
        "--issues-dir",
        metavar="DIR",
        help="Sets the directory for issues (default: ./issues, env: ISSUES_DIR)",
    )
    p.add_argument(
        "--watch",
        action="store_true",
        default=None,
        help="Watch for changes and sync automatically",
    )
    p.add_argument(
        "--interval",
        metavar="SECONDS",
        help="Sync interval in seconds when using --watch (default: 300, env: SYNC_INTERVAL)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"YAML settings file (default: {CONFIG_DEFAULT} if present)",
    )
    p.add_argument("--log-json", action="store_true", default=None, help="Emit JSON log lines")
    p.add_argument("--log-level", metavar="LEVEL", help="Log level (default: INFO)")
    return p


def resolve_config(
    args: argparse.Namespace, environ: Mapping[str, str] | None = None
) -> SyncConfig:
    """Merge config file, environment and flags into a :class:`SyncConfig`.

    A ``.env`` file, when present, is loaded into the environment first.
    """
    manager = create_env_auth_manager(EnvAuthConfig())
    if args.config:
        settings: dict[str, Any] = load_config_file(args.config, required=True)
    else:
        settings = load_config_file(CONFIG_DEFAULT, required=False)
    settings.update(settings_from_env(environ))
    flags = {
        "repo": args.repo,
        "issues_dir": args.issues_dir,
        "interval": args.interval,
        "watch": args.watch,
        "log_json": args.log_json,
        "log_level": args.log_level,
    }
    settings.update({k: v for k, v in flags.items() if v is not None})

    token = args.token
    if not token:
        token = manager.get_github_token()
        if not token:
            hints = "; ".join(manager.get_authentication_recommendations())
            raise ConfigError(f"GitHub token is required. {hints}")

    return build_config(
        token=token,
        repo=settings.get("repo"),
        issues_dir=settings.get("issues_dir"),
        watch=bool(settings.get("watch", False)),
        interval=settings.get("interval"),
        api_url=settings.get("api_url"),
        log_json=bool(settings.get("log_json", False)),
        log_level=str(settings.get("log_level") or "INFO"),
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        config = resolve_config(args, os.environ)
    except ConfigError as exc:
        print(f"error: {redact(str(exc))}", file=sys.stderr)
        return EXIT_USAGE

    configure_logging(json_logging=config.log_json, level=config.log_level)
    logger = get_logger()
    logger.debug("configuration resolved", repo=config.repo, issues_dir=str(config.issues_dir))

    try:
        return SyncRunner(config).run()
    except SyncError as exc:
        info = classify_error(exc)
        logger.log_error(
            "Startup failed",
            error=info.message,
            category=info.category,
        )
        return EXIT_FAILURE
    except KeyboardInterrupt:  # pragma: no cover - interactive stop
        logger.info("Interrupted; exiting")
        return EXIT_INTERRUPTED


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
