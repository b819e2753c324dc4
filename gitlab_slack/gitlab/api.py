"""Minimal GitLab REST API client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class GitLabApiError(Exception):
    """Raised when the GitLab API answers with a non-success status."""

    def __init__(self, status_code: int, path: str) -> None:
        self.status_code = status_code
        self.path = path
        super().__init__(f"GitLab API request for '{path}' failed with status {status_code}")


class GitLabApi:
    """Looks up project descriptors on a GitLab instance."""

    def __init__(self, base_url: str, token: str, timeout: float = 30.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout

    async def get_project(self, encoded_path: str) -> dict[str, Any]:
        """Fetch a project by ID or URL-encoded ``path_with_namespace``.

        Transport errors propagate as ``httpx`` exceptions.
        """
        url = f"{self._base_url}/api/v4/projects/{encoded_path}"
        headers = {"PRIVATE-TOKEN": self._token}

        async with httpx.AsyncClient(verify=True) as client:
            resp = await client.get(url, headers=headers, timeout=self._timeout)

        if resp.status_code >= 400:
            logger.warning("GitLab project lookup for %s returned %d", encoded_path, resp.status_code)
            raise GitLabApiError(resp.status_code, encoded_path)

        project: dict[str, Any] = resp.json()
        return project
