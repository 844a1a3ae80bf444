"""aiohttp server for Folio.

Application factory and route registration.
"""

import logging
from pathlib import Path

from aiohttp import web

from folio.api.config import create_config_routes
from folio.api.editor import create_editor_routes, editor_auth_middleware
from folio.api.errors import content_error_middleware
from folio.api.pages import create_pages_routes
from folio.app_keys import (
    content_root_key,
    editor_enabled_key,
    editor_token_key,
    live_reload_enabled_key,
    renderer_key,
)
from folio.config import Config
from folio.core.errors import NotFoundError
from folio.core.pages import PageRenderer, is_static_path
from folio.core.paths import resolve_content_root, resolve_read
from folio.live import LiveReloadManager
from folio.live.reload import create_live_reload_routes

logger = logging.getLogger(__name__)

live_reload_manager_key = web.AppKey("live_reload_manager", LiveReloadManager)


async def serve_static(request: web.Request) -> web.FileResponse:
    """Serve static assets (stylesheets, images, ...) from the content root.

    Only static extensions are served; the path is resolved like any other
    client path, so symlinks cannot escape the content root.
    """
    path = request.match_info["path"]
    if not is_static_path(path):
        raise NotFoundError()

    resolved = await resolve_read(request.app[content_root_key], path)
    return web.FileResponse(resolved)


def create_app(config: Config, content_root: Path | None = None) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        content_root: Already resolved content root; resolved from
            config.content.root when omitted

    Returns:
        Configured aiohttp application
    """
    if content_root is None:
        content_root = resolve_content_root(config.content.root)

    middlewares = [content_error_middleware]
    if config.editor.enabled:
        middlewares.append(editor_auth_middleware)
    app = web.Application(middlewares=middlewares)

    app[content_root_key] = content_root
    app[renderer_key] = PageRenderer(content_root)
    app[editor_enabled_key] = config.editor.enabled
    app[editor_token_key] = config.editor.token or ""
    app[live_reload_enabled_key] = config.live_reload.enabled

    # API routes (must be registered first to take precedence over static files)
    app.router.add_routes(create_pages_routes())
    app.router.add_routes(create_config_routes())
    if config.editor.enabled:
        if not config.editor.token:
            logger.warning("Editor enabled without a token; anyone who can reach the server can edit")
        app.router.add_routes(create_editor_routes())

    if config.live_reload.enabled:
        manager = LiveReloadManager(content_root, watch_patterns=config.live_reload.watch_patterns)
        app[live_reload_manager_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    app.router.add_get("/{path:.+}", serve_static)

    return app


async def _start_live_reload(app: web.Application) -> None:
    await app[live_reload_manager_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    await app[live_reload_manager_key].stop()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port, print=None)
