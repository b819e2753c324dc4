"""Shared test fixtures for gitlab-slack."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from gitlab_slack.audit.logger import AuditLogger
from gitlab_slack.models import Attachment, OutputMessage, ProjectConfig

GITLAB_URL = "https://gitlab.example.com"


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def config_dir() -> Path:
    return Path(__file__).parent.parent / "config"


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a config file from a dict (or raw text) and return its path."""

    def _write(content: dict[str, Any] | str) -> str:
        path = tmp_path / "projects.json"
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return str(path)

    return _write


# --- Factory functions for test data ---


def make_merge_request_event(**attributes: Any) -> dict[str, Any]:
    """Factory for a merge_request webhook payload.

    Keyword arguments override keys of ``object_attributes``.
    """
    mr: dict[str, Any] = {
        "iid": 42,
        "action": "open",
        "title": "Add release notes",
        "description": "Adds **release** notes\nSecond line",
        "url": f"{GITLAB_URL}/group/app/merge_requests/42",
        "source_branch": "feature/notes",
        "target_branch": "main",
        "source": {"web_url": f"{GITLAB_URL}/jdoe/app"},
        "target": {"web_url": f"{GITLAB_URL}/group/app"},
    }
    mr.update(attributes)
    return {
        "object_kind": "merge_request",
        "user": {"username": "jdoe"},
        "project": {"path_with_namespace": "group/app"},
        "labels": [],
        "object_attributes": mr,
    }


def make_project_config(**kwargs: Any) -> ProjectConfig:
    defaults: dict[str, Any] = {
        "id": 260,
        "name": "group/app",
        "channel": "#releases",
    }
    defaults.update(kwargs)
    return ProjectConfig(**defaults)


def make_output_message(**kwargs: Any) -> OutputMessage:
    defaults: dict[str, Any] = {
        "text": "hello",
        "attachments": [
            Attachment(color="#31B93D", title="Title", title_link="https://x/1"),
        ],
    }
    defaults.update(kwargs)
    return OutputMessage(**defaults)
