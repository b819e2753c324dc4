"""Merge request event formatter."""

from __future__ import annotations

import logging
import re
from typing import Any

from gitlab_slack.markup.converter import convert_markdown_to_slack
from gitlab_slack.models import Attachment, HandlerKind, OutputMessage

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|[\r\n]")

_ACTION_VERBS = {
    "open": "opened",
    "reopen": "reopened",
}


class MergeRequestFormatter:
    """Formats ``merge_request`` events.

    Updates are always ignored as they fire on every metadata edit. Only
    open and reopen produce a message; other actions produce nothing.
    """

    KIND = HandlerKind(name="merge_request", title="Merge Request")
    COLOR = "#31B93D"

    def __init__(self, gitlab_base_url: str) -> None:
        self.kind = self.KIND
        self._gitlab_base_url = gitlab_base_url.rstrip("/")

    def format(self, data: dict[str, Any]) -> OutputMessage | None:
        mr = data["object_attributes"]
        action = mr.get("action")

        if action == "update":
            logger.debug("Ignored merge request (update)")
            return None

        verb = _ACTION_VERBS.get(action)
        if verb is None:
            logger.debug("Unhandled merge request action '%s'", action)
            return None

        raw_description = mr.get("description") or ""
        first_line = _LINE_BREAK.split(raw_description, maxsplit=1)[0]
        source_url = mr["source"]["web_url"]
        target_url = mr["target"]["web_url"]
        username = data["user"]["username"]
        labels = data.get("labels") or []

        attachment = Attachment(
            color=(labels[0].get("color") if labels else None) or self.COLOR,
            title=mr["title"],
            title_link=mr["url"],
            fallback=f"{mr['title']}\n{raw_description}",
            text=convert_markdown_to_slack(first_line, source_url),
        )
        text = (
            f"<{self._gitlab_base_url}/{username}|{username}> {verb} merge request "
            f"*!{mr['iid']}* — "
            f"*source:* <{source_url}/tree/{mr['source_branch']}|{mr['source_branch']}> — "
            f"*target:* <{target_url}/tree/{mr['target_branch']}|{mr['target_branch']}>"
        )

        logger.debug("Merge request !%s handled", mr["iid"])
        return OutputMessage(text=text, attachments=[attachment], kind=self.KIND)
