"""Application keys for type-safe app configuration access."""

from pathlib import Path

from aiohttp import web

from folio.core.pages import PageRenderer

renderer_key = web.AppKey("renderer", PageRenderer)
content_root_key = web.AppKey("content_root", Path)
editor_enabled_key = web.AppKey("editor_enabled", bool)
editor_token_key = web.AppKey("editor_token", str)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
