"""Config API endpoint."""

from aiohttp import web

from folio.app_keys import editor_enabled_key, live_reload_enabled_key


def create_config_routes() -> list[web.RouteDef]:
    return [web.get("/api/config", get_config)]


async def get_config(request: web.Request) -> web.Response:
    return web.json_response(
        {
            "liveReloadEnabled": request.app[live_reload_enabled_key],
            "editorEnabled": request.app[editor_enabled_key],
        }
    )
