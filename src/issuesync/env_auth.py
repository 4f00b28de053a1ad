"""Environment-based token discovery.

The CLI ``--token`` flag wins; otherwise the token comes from the process
environment, optionally seeded from a ``.env`` file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger

TOKEN_ALTERNATIVES = ("GH_TOKEN", "GITHUB_ACCESS_TOKEN", "GH_ACCESS_TOKEN", "GITHUB_PAT")
DOTENV_LOCATIONS = (".env", ".env.local")


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    github_token_var: str = "GITHUB_TOKEN"


class EnvironmentAuthManager:
    """Looks up a GitHub token in environment variables and ``.env`` files."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self.dotenv_file: Path | None = None
        if config.load_dotenv:
            self._load_dotenv()

    def _load_dotenv(self) -> None:
        candidates = [self.config.dotenv_path] if self.config.dotenv_path else DOTENV_LOCATIONS
        for location in candidates:
            env_path = Path(location)
            if env_path.is_file():
                # Existing environment variables take precedence over the file.
                load_dotenv(str(env_path), override=False)
                self.dotenv_file = env_path
                self.logger.debug(f"Loaded environment variables from {env_path}")
                return

    def get_github_token(self) -> str | None:
        token = os.getenv(self.config.github_token_var)
        if token:
            self.logger.debug("Found GitHub token in environment variables")
            return token
        for alt_var in TOKEN_ALTERNATIVES:
            token = os.getenv(alt_var)
            if token:
                self.logger.debug(f"Found GitHub token in {alt_var}")
                return token
        return None

    def get_authentication_recommendations(self) -> list[str]:
        if self.get_github_token():
            return []
        return [
            "Pass --token <TOKEN>",
            f"Or set the {self.config.github_token_var} environment variable",
            f"Or create .env file with {self.config.github_token_var}=your_token",
        ]


def create_env_auth_manager(config: EnvAuthConfig | None = None) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config)


__all__ = ["EnvAuthConfig", "EnvironmentAuthManager", "create_env_auth_manager"]
