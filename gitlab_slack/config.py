"""Configuration loading — project list from JSON, secrets from the environment."""

from __future__ import annotations

import json
import os
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from gitlab_slack.models import AppConfig

DEFAULT_CONFIG_PATH = "config/projects.json"


class ConfigError(Exception):
    """Raised when the project configuration is unusable."""


def load_config(config_path: str) -> AppConfig:
    """Load and validate the project configuration file.

    Channels are normalized to start with ``#``. An empty project list or a
    duplicated project ID is rejected.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        config = AppConfig.model_validate(json.loads(path.read_text()))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    if not config.projects:
        raise ConfigError(f"No projects defined in {config_path}")

    duplicates = sorted(pid for pid, n in Counter(p.id for p in config.projects).items() if n > 1)
    if duplicates:
        raise ConfigError(f"Duplicate project IDs in {config_path}: {duplicates}")

    return config


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from environment variables."""

    config_path: str
    gitlab_base_url: str
    gitlab_api_token: str
    slack_webhook_url: str
    webhook_token: str | None = None
    audit_log_path: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            config_path=os.environ.get("GITLAB_SLACK_CONFIG", DEFAULT_CONFIG_PATH),
            gitlab_base_url=os.environ["GITLAB_BASE_URL"],
            gitlab_api_token=os.environ["GITLAB_API_TOKEN"],
            slack_webhook_url=os.environ["SLACK_WEBHOOK_URL"],
            webhook_token=os.environ.get("GITLAB_WEBHOOK_TOKEN") or None,
            audit_log_path=os.environ.get("AUDIT_LOG_PATH") or None,
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )
