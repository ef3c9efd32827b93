"""
Tests for delivering rendered maps into page containers.

Educational notes:
- The hosting service is replaced by an AsyncMock returning canned data
- Collaborator modules are MagicMocks so we can check how they were started
- Failures must be logged, never raised
"""

import logging

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.learningmap.renderer import container_id, render_learningmap


class TestContainerId:
    def test_page_container(self):
        assert container_id(5) == "learningmap-render-container-5"

    def test_modal_container(self):
        assert container_id(5, inmodal=True) == "learningmap-render-container-5-modal"


class TestRenderLearningmap:
    @pytest.mark.asyncio
    async def test_injects_content(self):
        fetch = AsyncMock(return_value={"content": "<svg />"})
        containers = {"learningmap-render-container-5": ""}

        result = await render_learningmap(5, fetch, containers)

        assert result is True
        fetch.assert_awaited_once_with(5)
        assert containers["learningmap-render-container-5"] == "<svg />"

    @pytest.mark.asyncio
    async def test_initializes_collaborators(self):
        fetch = AsyncMock(return_value={"content": "<svg />"})
        containers = {"learningmap-render-container-5-modal": ""}
        linkmodal, liveupdater = MagicMock(), MagicMock()

        await render_learningmap(5, fetch, containers, [linkmodal, liveupdater], inmodal=True)

        linkmodal.init.assert_called_once_with(5, True)
        liveupdater.init.assert_called_once_with(5, True)

    @pytest.mark.asyncio
    async def test_fetch_failure_is_logged_and_swallowed(self, caplog):
        fetch = AsyncMock(side_effect=ConnectionError("offline"))
        containers = {"learningmap-render-container-5": "old"}
        collaborator = MagicMock()

        with caplog.at_level(logging.ERROR):
            result = await render_learningmap(5, fetch, containers, [collaborator])

        assert result is False
        assert containers["learningmap-render-container-5"] == "old"
        collaborator.init.assert_not_called()
        assert "offline" in caplog.text

    @pytest.mark.asyncio
    async def test_missing_container(self):
        fetch = AsyncMock(return_value={"content": "<svg />"})
        containers: dict[str, str] = {}

        assert await render_learningmap(5, fetch, containers) is False
        assert containers == {}

    @pytest.mark.asyncio
    async def test_failing_collaborator_does_not_stop_others(self):
        fetch = AsyncMock(return_value={"content": "<svg />"})
        containers = {"learningmap-render-container-5": ""}
        broken, working = MagicMock(), MagicMock()
        broken.init.side_effect = RuntimeError("boom")

        result = await render_learningmap(5, fetch, containers, [broken, working])

        assert result is True
        working.init.assert_called_once_with(5, False)
