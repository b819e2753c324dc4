"""Shared Pydantic data models for gitlab-slack."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

CHANNEL_MARKER = "#"

# --- Enums ---


class AuditEventType(str, Enum):
    RELAY_DELIVERED = "relay_delivered"
    RELAY_IGNORED = "relay_ignored"
    RELAY_FAILED = "relay_failed"
    AUTH_FAILURE = "auth_failure"


# --- Configuration Models ---


class ProjectConfig(BaseModel):
    """Static per-project configuration, keyed by GitLab project ID."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""  # only used for logging
    channel: str | None = None
    patterns: list[str] = Field(default_factory=list)

    @field_validator("channel")
    @classmethod
    def _normalize_channel(cls, value: str | None) -> str | None:
        if not value:
            return None
        if not value.startswith(CHANNEL_MARKER):
            return CHANNEL_MARKER + value
        return value

    @field_validator("patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid label pattern {pattern!r}: {e}") from e
        return value

    def tracks_label(self, title: str) -> bool:
        """Return True if a label title matches any configured pattern (case-insensitive)."""
        return any(re.search(p, title, re.IGNORECASE) for p in self.patterns)


class AppConfig(BaseModel):
    port: int = 4646
    projects: list[ProjectConfig]

    def project_map(self) -> dict[int, ProjectConfig]:
        return {p.id: p for p in self.projects}


# --- Message Models ---


class HandlerKind(BaseModel):
    """Static metadata for a kind of event handler."""

    model_config = ConfigDict(frozen=True)

    name: str  # matched against the event's object_kind
    title: str


class Attachment(BaseModel):
    color: str
    title: str
    title_link: str
    fallback: str | None = None
    text: str | None = None
    mrkdwn_in: list[str] = Field(default_factory=lambda: ["text"])


class OutputMessage(BaseModel):
    """A formatted Slack message. The dispatcher may assign ``channel`` once."""

    text: str
    attachments: list[Attachment] = Field(default_factory=list)
    channel: str | None = None
    parse: str = "none"
    kind: HandlerKind | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body of a Slack incoming-webhook request."""
        return self.model_dump(exclude={"kind"}, exclude_none=True)


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    object_kind: str | None = None
    project_id: int | None = None
    action: str
    result: str  # "success" | "failure" | "ignored"
    details: dict[str, object] | None = None
