"""Formatter registry — maps an event's ``object_kind`` to its formatter."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from gitlab_slack.models import HandlerKind, OutputMessage

logger = logging.getLogger(__name__)

FormatResult = OutputMessage | list[OutputMessage | None] | None


class Formatter(Protocol):
    """Turns one raw event payload into zero, one or many Slack messages."""

    kind: HandlerKind

    def format(self, data: dict[str, Any]) -> FormatResult: ...


class HandlerRegistry:
    """Kind name to formatter mapping used by the dispatcher."""

    def __init__(self, formatters: list[Formatter] | None = None) -> None:
        self._formatters: dict[str, Formatter] = {}
        for formatter in formatters or []:
            self.register(formatter)

    def register(self, formatter: Formatter) -> None:
        name = formatter.kind.name
        if name in self._formatters:
            raise ValueError(f"Formatter already registered for kind '{name}'")
        self._formatters[name] = formatter

    def get(self, kind_name: str) -> Formatter | None:
        return self._formatters.get(kind_name)

    def kinds(self) -> list[HandlerKind]:
        return [f.kind for f in self._formatters.values()]

    def format(self, data: dict[str, Any]) -> list[OutputMessage]:
        """Format an event into a (possibly empty) list of messages.

        Unknown or missing kinds produce an empty list without invoking any
        formatter. Errors raised by a formatter propagate.
        """
        kind_name = data.get("object_kind")
        if not kind_name:
            return []
        formatter = self.get(kind_name)
        if formatter is None:
            logger.debug("No formatter registered for kind '%s'", kind_name)
            return []

        result = formatter.format(data)
        if result is None:
            return []
        if isinstance(result, OutputMessage):
            return [result]
        return [output for output in result if output is not None]
