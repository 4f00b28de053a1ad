from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml

from .github_rest import DEFAULT_API_URL

CONFIG_DEFAULT = "issuesync.config.yaml"
DEFAULT_ISSUES_DIR = "./issues"
DEFAULT_INTERVAL = 300.0


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class SyncConfig:
    """Process-wide settings, built once at startup and never mutated.

    Instances are shared between the poll thread and the watch callback
    without locking.
    """

    token: str = field(repr=False)
    repo_owner: str
    repo_name: str
    issues_dir: Path
    watch: bool = False
    sync_interval: float = DEFAULT_INTERVAL
    api_url: str = DEFAULT_API_URL
    log_json: bool = False
    log_level: str = "INFO"

    @property
    def repo(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"


def split_repo(repo: str) -> tuple[str, str]:
    parts = repo.strip().split("/")
    if len(parts) != 2 or not all(p.strip() for p in parts):  # noqa: PLR2004
        raise ConfigError("Repository must be in format owner/repo")
    return parts[0].strip(), parts[1].strip()


def parse_interval(value: Any, default: float = DEFAULT_INTERVAL) -> float:
    """Seconds between scheduled downloads; bad input means ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        seconds = float(str(value).strip())
    except ValueError:
        return default
    if seconds != seconds or seconds <= 0:  # NaN or non-positive
        return default
    return seconds


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def load_config_file(path: str | Path, *, required: bool = True) -> dict[str, Any]:
    """Read an optional YAML settings file into flat keyword settings.

    Recognised layout::

        github:
          repo: owner/name
          api_url: https://api.github.com
        sync:
          issues_dir: ./issues
          interval: 300
          watch: false
        logging:
          json_enabled: false
          level: INFO
    """
    p = Path(path)
    if not p.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {p}")
        return {}
    try:
        loaded = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {p}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Configuration file {p} must contain a mapping")
    raw = cast(dict[str, Any], loaded)
    gh = cast(dict[str, Any], raw.get("github", {}) or {})
    sync = cast(dict[str, Any], raw.get("sync", {}) or {})
    logging_config = cast(dict[str, Any], raw.get("logging", {}) or {})

    out: dict[str, Any] = {}
    if gh.get("repo"):
        out["repo"] = str(gh["repo"])
    if gh.get("api_url"):
        out["api_url"] = str(gh["api_url"])
    if sync.get("issues_dir"):
        out["issues_dir"] = str(sync["issues_dir"])
    if "interval" in sync:
        out["interval"] = sync["interval"]
    if "watch" in sync:
        out["watch"] = _as_bool(sync["watch"])
    if "json_enabled" in logging_config:
        out["log_json"] = _as_bool(logging_config["json_enabled"])
    if logging_config.get("level"):
        out["log_level"] = str(logging_config["level"])
    return out


def settings_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    out: dict[str, Any] = {}
    if env.get("GITHUB_REPO"):
        out["repo"] = env["GITHUB_REPO"]
    if env.get("ISSUES_DIR"):
        out["issues_dir"] = env["ISSUES_DIR"]
    if env.get("SYNC_INTERVAL"):
        out["interval"] = env["SYNC_INTERVAL"]
    return out


def build_config(
    *,
    token: str | None,
    repo: str | None,
    issues_dir: str | Path | None = None,
    watch: bool = False,
    interval: Any = None,
    api_url: str | None = None,
    log_json: bool = False,
    log_level: str = "INFO",
) -> SyncConfig:
    if not token:
        raise ConfigError(
            "GitHub token is required (pass --token or set GITHUB_TOKEN)"
        )
    if not repo:
        raise ConfigError("Repository is required (pass --repo owner/repo or set GITHUB_REPO)")
    owner, name = split_repo(repo)
    return SyncConfig(
        token=token,
        repo_owner=owner,
        repo_name=name,
        issues_dir=Path(issues_dir or DEFAULT_ISSUES_DIR),
        watch=bool(watch),
        sync_interval=parse_interval(interval),
        api_url=api_url or DEFAULT_API_URL,
        log_json=bool(log_json),
        log_level=log_level or "INFO",
    )


__all__ = [
    "CONFIG_DEFAULT",
    "ConfigError",
    "SyncConfig",
    "build_config",
    "load_config_file",
    "parse_interval",
    "settings_from_env",
    "split_repo",
]
