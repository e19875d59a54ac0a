"""rulekeeper configuration.

Loads from ~/.rulekeeper/config.yaml with environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from . import defaults as D


@dataclass
class RulesConfig:
    """Connection settings for the rules service."""

    origin: str = D.DEFAULT_ORIGIN
    token: str = ""  # OAuth bearer token, loaded from env only (never saved)
    project: str | None = D.DEFAULT_PROJECT
    timeout: float = D.DEFAULT_TIMEOUT  # seconds per request

    CONFIG_FILE: Path = field(
        default_factory=lambda: Path.home() / ".rulekeeper" / "config.yaml",
        repr=False,
    )

    @classmethod
    def load(cls, config_path: Path | None = None) -> RulesConfig:
        """Load config from file and environment variables.

        Priority (highest wins):
          1. Environment variables (RULEKEEPER_ORIGIN, RULEKEEPER_TOKEN, etc.)
          2. Config file (~/.rulekeeper/config.yaml or custom path)
          3. Defaults

        Args:
            config_path: Optional path to a YAML config file.

        Returns:
            Populated RulesConfig instance.
        """
        config = cls()
        file_path = config_path or config.CONFIG_FILE

        if file_path.exists():
            try:
                with open(file_path) as f:
                    data = yaml.safe_load(f) or {}

                config.origin = data.get("origin", config.origin)
                config.project = data.get("project", config.project)
                config.timeout = float(data.get("timeout", config.timeout))
            except (yaml.YAMLError, OSError, ValueError, AttributeError):
                pass

        # Environment variables override file config
        config.origin = os.environ.get("RULEKEEPER_ORIGIN", config.origin)
        config.token = os.environ.get("RULEKEEPER_TOKEN", config.token)
        config.project = os.environ.get("RULEKEEPER_PROJECT", config.project)

        if env_timeout := os.environ.get("RULEKEEPER_TIMEOUT"):
            config.timeout = float(env_timeout)

        return config

    def save(self, config_path: Path | None = None) -> None:
        """Save current config to file with owner-only permissions.

        The token is never written.
        """
        file_path = config_path or self.CONFIG_FILE
        file_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "origin": self.origin,
            "project": self.project,
            "timeout": self.timeout,
        }

        with open(file_path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False)

        file_path.chmod(0o600)
