"""WebSocket-based live reload.

Watches the content root and tells connected browsers which page changed,
so they can reload it.
"""

import asyncio
import contextlib
import json
import logging
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

logger = logging.getLogger(__name__)

DEFAULT_WATCH_PATTERNS = ["**/*.md", "**/style.css"]


class LiveReloadManager:
    """Owns the file watcher task and the set of connected reload sockets."""

    def __init__(self, content_root: Path, watch_patterns: list[str] | None = None) -> None:
        """Initialize the live reload manager.

        Args:
            content_root: Resolved directory to watch for changes
            watch_patterns: Glob patterns to watch (default: markdown and stylesheets)
        """
        self._content_root = content_root
        self._watch_patterns = watch_patterns or DEFAULT_WATCH_PATTERNS
        self._sockets: set[web.WebSocketResponse] = set()
        self._watcher: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()

    @property
    def connection_count(self) -> int:
        """Number of open reload sockets."""
        return len(self._sockets)

    async def start(self) -> None:
        """Start watching. Calling it again while running does nothing."""
        if self._watcher is not None:
            return
        logger.info("Watching %s for changes", self._content_root)
        self._stop_event.clear()
        self._watcher = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop watching and close every open socket."""
        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            self._stop_event.set()
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher

        sockets = list(self._sockets)
        self._sockets.clear()
        await asyncio.gather(*(ws.close() for ws in sockets), return_exceptions=True)

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Keep a client socket open until it disconnects.

        Clients never send anything meaningful; incoming messages are read
        only to notice when the connection goes away.
        """
        ws = web.WebSocketResponse(heartbeat=30)
        await ws.prepare(request)
        self._sockets.add(ws)
        logger.debug("Live reload client connected (%d open)", len(self._sockets))

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    logger.debug("Live reload socket error: %s", ws.exception())
                    break
        finally:
            self._sockets.discard(ws)
        return ws

    async def _watch_files(self) -> None:
        async for changes in awatch(self._content_root, stop_event=self._stop_event):
            urls = {
                self.to_url_path(Path(raw_path))
                for change, raw_path in changes
                if change != Change.deleted and self.matches_patterns(Path(raw_path))
            }
            for url in sorted(urls):
                await self._broadcast_reload(url)

    def matches_patterns(self, path: Path) -> bool:
        """Check if a path inside the content root matches any watch pattern."""
        if not path.is_relative_to(self._content_root):
            return False
        relative = path.relative_to(self._content_root)

        if any(part.startswith(".") for part in relative.parts):
            return False
        # Relative patterns match from the right, so "*.md" covers any depth
        return any(relative.match(pattern.removeprefix("**/")) for pattern in self._watch_patterns)

    def to_url_path(self, file_path: Path) -> str:
        """Convert a changed file to the URL that displays it.

        Examples:
            ``blog/post.md`` is ``/blog/post``, ``blog/index.md`` is
            ``/blog/`` and ``blog/style.css`` stays ``/blog/style.css``.
        """
        relative = file_path.relative_to(self._content_root)
        if relative.suffix != ".md":
            return "/" + relative.as_posix()
        if relative.name == "index.md":
            parent = relative.parent.as_posix()
            return "/" if parent == "." else f"/{parent}/"
        return "/" + relative.with_suffix("").as_posix()

    async def _broadcast_reload(self, path: str) -> None:
        open_sockets = [ws for ws in self._sockets if not ws.closed]
        if not open_sockets:
            return

        logger.debug("Broadcasting reload for %s to %d clients", path, len(open_sockets))
        message = json.dumps({"type": "reload", "path": path})
        results = await asyncio.gather(
            *(ws.send_str(message) for ws in open_sockets), return_exceptions=True
        )
        for ws, result in zip(open_sockets, results):
            if isinstance(result, ConnectionError):
                # Gone mid-send; the handler's finally block will also drop it
                logger.debug("Live reload client went away: %s", result)
                self._sockets.discard(ws)
            elif isinstance(result, Exception):
                logger.warning("Dropping live reload client after send failure: %r", result)
                self._sockets.discard(ws)
            elif isinstance(result, BaseException):
                raise result


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket."""
    return [web.get("/ws/live-reload", manager.handle_websocket)]
