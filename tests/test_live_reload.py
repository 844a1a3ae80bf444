"""Tests for live reload."""

import asyncio
import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import web
from folio.live.reload import DEFAULT_WATCH_PATTERNS, LiveReloadManager, create_live_reload_routes


@pytest.fixture
def manager(content_root: Path) -> LiveReloadManager:
    return LiveReloadManager(content_root)


class TestMatchesPatterns:
    """Tests for LiveReloadManager.matches_patterns()."""

    def test__defaults__cover_markdown_and_stylesheets(self) -> None:
        assert DEFAULT_WATCH_PATTERNS == ["**/*.md", "**/style.css"]

    @pytest.mark.parametrize("relative", ["doc.md", "a/b/doc.md", "style.css", "blog/style.css"])
    def test__matching_path__is_watched(
        self, manager: LiveReloadManager, content_root: Path, relative: str
    ) -> None:
        assert manager.matches_patterns(content_root / relative)

    @pytest.mark.parametrize("relative", ["image.png", "other.css", ".git/x.md", "a/.hidden.md"])
    def test__other_path__is_not_watched(
        self, manager: LiveReloadManager, content_root: Path, relative: str
    ) -> None:
        assert not manager.matches_patterns(content_root / relative)

    def test__outside_root__is_not_watched(
        self, manager: LiveReloadManager, outside_dir: Path
    ) -> None:
        assert not manager.matches_patterns(outside_dir / "secret.md")

    def test__custom_patterns__replace_defaults(self, content_root: Path) -> None:
        manager = LiveReloadManager(content_root, watch_patterns=["*.txt"])

        assert manager.matches_patterns(content_root / "notes" / "a.txt")
        assert not manager.matches_patterns(content_root / "a.md")


class TestToUrlPath:
    """Tests for LiveReloadManager.to_url_path()."""

    @pytest.mark.parametrize(
        ("relative", "expected"),
        [
            ("post.md", "/post"),
            ("blog/post.md", "/blog/post"),
            ("index.md", "/"),
            ("blog/index.md", "/blog/"),
            ("blog/style.css", "/blog/style.css"),
        ],
    )
    def test__changed_file__maps_to_url(
        self, manager: LiveReloadManager, content_root: Path, relative: str, expected: str
    ) -> None:
        assert manager.to_url_path(content_root / relative) == expected


class TestBroadcast:
    """Tests for reload notifications."""

    @pytest.mark.asyncio
    async def test__connected_client__receives_reload(
        self, manager: LiveReloadManager, aiohttp_client: Any
    ) -> None:
        app = web.Application()
        app.router.add_routes(create_live_reload_routes(manager))
        client = await aiohttp_client(app)

        ws = await client.ws_connect("/ws/live-reload")
        # Give the server a chance to register the connection
        for _ in range(50):
            if manager.connection_count:
                break
            await asyncio.sleep(0.01)
        await manager._broadcast_reload("/blog/post")
        message = await ws.receive_str(timeout=5)
        await ws.close()

        assert json.loads(message) == {"type": "reload", "path": "/blog/post"}

    @pytest.mark.asyncio
    async def test__send_failure__drops_socket_and_keeps_watching(
        self, manager: LiveReloadManager
    ) -> None:
        """A socket that fails with a non-connection error is dropped, not raised."""
        broken = MagicMock(closed=False)
        broken.send_str = AsyncMock(side_effect=RuntimeError("transport closed"))
        manager._sockets.add(broken)

        await manager._broadcast_reload("/x")

        broken.send_str.assert_awaited_once()
        assert manager.connection_count == 0

    @pytest.mark.asyncio
    async def test__no_clients__is_noop(self, manager: LiveReloadManager) -> None:
        await manager._broadcast_reload("/x")

    @pytest.mark.asyncio
    async def test__start_then_stop__is_clean(self, manager: LiveReloadManager) -> None:
        await manager.start()
        await manager.stop()
        await manager.stop()
