"""Project ID resolution for inbound GitLab events."""

from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)


class ProjectLookup(Protocol):
    async def get_project(self, encoded_path: str) -> dict[str, Any]: ...


async def get_project_id(data: dict[str, Any], api: ProjectLookup) -> int | None:
    """Return the project ID of an event, or None if it cannot be determined.

    The root ``project_id`` wins. Otherwise the project is looked up by its
    ``path_with_namespace``; lookup failures propagate.
    """
    project_id = data.get("project_id")
    if project_id is not None:
        return project_id

    path = (data.get("project") or {}).get("path_with_namespace")
    if path:
        project = await api.get_project(quote(path, safe=""))
        project_id = project.get("id")

    if project_id is None:
        logger.info("Could not find project ID in a %s message", data.get("object_kind"))

    return project_id
