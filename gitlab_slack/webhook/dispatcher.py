"""Webhook dispatch pipeline.

Pipeline stages for one inbound GitLab event:
1. Classify and format (formatter registry)
2. Drop events that produced no message
3. Resolve the project ID (once per event)
4. Apply the project's channel override to every message
5. Deliver all messages concurrently; fail if any delivery failed
6. Audit log
"""

from __future__ import annotations

import asyncio
import logging
import pprint
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

from gitlab_slack.models import AuditEvent, AuditEventType, OutputMessage, ProjectConfig
from gitlab_slack.webhook.resolver import ProjectLookup, get_project_id

if TYPE_CHECKING:
    from gitlab_slack.audit.logger import AuditLogger
    from gitlab_slack.handlers.registry import HandlerRegistry

logger = logging.getLogger(__name__)


class MessageSender(Protocol):
    async def send(self, message: OutputMessage) -> None: ...


class DeliveryError(Exception):
    """Raised after fan-out when one or more messages could not be delivered."""

    def __init__(self, failures: list[BaseException], attempted: int) -> None:
        self.failures = failures
        self.attempted = attempted
        super().__init__(
            f"{len(failures)} of {attempted} message(s) failed to deliver: {failures[0]}"
        )


class EventDispatcher:
    """Turns GitLab webhook payloads into delivered Slack messages."""

    def __init__(
        self,
        project_configs: Mapping[int, ProjectConfig],
        gitlab: ProjectLookup,
        slack: MessageSender,
        registry: HandlerRegistry,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._projects = project_configs
        self._gitlab = gitlab
        self._slack = slack
        self._registry = registry
        self._audit = audit_logger

    async def handle(self, data: dict[str, Any]) -> None:
        """Run the dispatch pipeline for one event payload."""
        kind = data.get("object_kind")

        # Stage 1: Classify and format
        outputs = self._registry.format(data)

        # Stage 2: Nothing to send
        if not outputs:
            logger.info("IGNORED no handler processed the %s message", kind or "unknown")
            logger.debug("Message body:\n%s", pprint.pformat(data, depth=5))
            self._log_audit(AuditEventType.RELAY_IGNORED, kind, None, "ignored")
            return

        # Stage 3: Resolve project
        project_id = await get_project_id(data, self._gitlab)
        project = self._projects.get(project_id) if project_id is not None else None

        # Stage 4: Channel override
        if project and project.channel:
            for output in outputs:
                output.channel = project.channel

        # Stage 5: Deliver
        results = await asyncio.gather(
            *(self._slack.send(output) for output in outputs),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]

        # Stage 6: Audit log
        details: dict[str, object] = {
            "messages": len(outputs),
            "channel": project.channel if project else None,
        }
        if failures:
            details["errors"] = [str(f) for f in failures]
            self._log_audit(AuditEventType.RELAY_FAILED, kind, project_id, "failure", details)
            raise DeliveryError(failures, len(outputs)) from failures[0]

        logger.info(
            "Delivered %d %s message(s) for project %s",
            len(outputs), kind, project.name if project and project.name else project_id,
        )
        self._log_audit(AuditEventType.RELAY_DELIVERED, kind, project_id, "success", details)

    def _log_audit(
        self,
        event_type: AuditEventType,
        kind: str | None,
        project_id: int | None,
        result: str,
        details: dict[str, object] | None = None,
    ) -> None:
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=event_type,
                object_kind=kind,
                project_id=project_id,
                action="dispatch",
                result=result,
                details=details,
            ))
