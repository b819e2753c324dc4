"""Tests for project ID resolution."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from gitlab_slack.gitlab.api import GitLabApiError
from gitlab_slack.webhook.resolver import get_project_id


class TestGetProjectId:
    @pytest.mark.asyncio
    async def test_direct_project_id_skips_lookup(self) -> None:
        api = AsyncMock()
        data = {"object_kind": "push", "project_id": 15, "project": {"path_with_namespace": "g/p"}}
        assert await get_project_id(data, api) == 15
        api.get_project.assert_not_called()

    @pytest.mark.asyncio
    async def test_project_id_zero_is_direct(self) -> None:
        api = AsyncMock()
        assert await get_project_id({"project_id": 0}, api) == 0
        api.get_project.assert_not_called()

    @pytest.mark.asyncio
    async def test_lookup_by_encoded_path(self) -> None:
        api = AsyncMock()
        api.get_project.return_value = {"id": 260, "name": "app"}
        data = {"object_kind": "merge_request", "project": {"path_with_namespace": "group/sub/app"}}

        assert await get_project_id(data, api) == 260
        api.get_project.assert_awaited_once_with("group%2Fsub%2Fapp")

    @pytest.mark.asyncio
    async def test_nothing_to_resolve_returns_none(self, caplog: pytest.LogCaptureFixture) -> None:
        api = AsyncMock()
        with caplog.at_level("INFO", logger="gitlab_slack.webhook.resolver"):
            assert await get_project_id({"object_kind": "merge_request"}, api) is None
        api.get_project.assert_not_called()
        assert "merge_request" in caplog.text

    @pytest.mark.asyncio
    async def test_empty_project_descriptor(self) -> None:
        api = AsyncMock()
        assert await get_project_id({"project": {}}, api) is None
        api.get_project.assert_not_called()

    @pytest.mark.asyncio
    async def test_lookup_failure_propagates(self) -> None:
        api = AsyncMock()
        api.get_project.side_effect = GitLabApiError(404, "group%2Fapp")
        with pytest.raises(GitLabApiError):
            await get_project_id({"project": {"path_with_namespace": "group/app"}}, api)
