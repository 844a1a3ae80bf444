"""Editor API endpoints.

File tree, document read/write, preview and file management. Registered
only when the editor is enabled. When a token is configured, every editor
request must carry it as a bearer token.
"""

import hmac
import logging
from collections.abc import Awaitable, Callable

from aiohttp import web

from folio.app_keys import content_root_key, editor_token_key
from folio.core import workspace
from folio.core.tree import build_tree

logger = logging.getLogger(__name__)

EDITOR_PREFIX = "/api/editor/"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def create_editor_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/editor/tree", get_tree),
        web.get("/api/editor/file", get_file),
        web.put("/api/editor/file", put_file),
        web.delete("/api/editor/file", delete_file),
        web.post("/api/editor/new-file", post_new_file),
        web.post("/api/editor/new-dir", post_new_dir),
        web.post("/api/editor/rename", post_rename),
        web.post("/api/editor/preview", post_preview),
    ]


@web.middleware
async def editor_auth_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Require the configured bearer token on editor routes."""
    token = request.app[editor_token_key]
    if not token or not request.path.startswith(EDITOR_PREFIX):
        return await handler(request)

    scheme, _, supplied = request.headers.get("Authorization", "").partition(" ")
    if scheme != "Bearer" or not hmac.compare_digest(
        supplied.encode("utf-8"), token.encode("utf-8")
    ):
        logger.warning("Rejected editor request without valid token: %s", request.path)
        return web.json_response({"error": "Unauthorized"}, status=401)
    return await handler(request)


async def get_tree(request: web.Request) -> web.Response:
    content_root = request.app[content_root_key]
    tree = await build_tree(content_root, content_root)
    return web.json_response({"items": [node.to_dict() for node in tree]})


async def get_file(request: web.Request) -> web.Response:
    path = _query_path(request)
    content = await workspace.read_document(request.app[content_root_key], path)
    return web.json_response({"path": path, "content": content})


async def put_file(request: web.Request) -> web.Response:
    data = await _json_fields(request, "path", "content")
    await workspace.save_document(request.app[content_root_key], data["path"], data["content"])
    return web.json_response({"status": "saved", "path": data["path"]})


async def delete_file(request: web.Request) -> web.Response:
    path = _query_path(request)
    await workspace.delete_path(request.app[content_root_key], path)
    return web.json_response({"status": "deleted", "path": path})


async def post_new_file(request: web.Request) -> web.Response:
    data = await _json_fields(request, "path")
    created = await workspace.create_document(request.app[content_root_key], data["path"])
    return web.json_response({"status": "created", "path": created}, status=201)


async def post_new_dir(request: web.Request) -> web.Response:
    data = await _json_fields(request, "path")
    await workspace.create_directory(request.app[content_root_key], data["path"])
    return web.json_response({"status": "created", "path": data["path"]}, status=201)


async def post_rename(request: web.Request) -> web.Response:
    data = await _json_fields(request, "old_path", "new_path")
    await workspace.rename_path(request.app[content_root_key], data["old_path"], data["new_path"])
    return web.json_response({"status": "renamed", "path": data["new_path"]})


async def post_preview(request: web.Request) -> web.Response:
    data = await _json_fields(request, "content")
    return web.json_response({"html": workspace.render_preview(data["content"])})


def _query_path(request: web.Request) -> str:
    path = request.query.get("path")
    if not path:
        raise web.HTTPBadRequest(text="Missing path parameter")
    return path


async def _json_fields(request: web.Request, *names: str) -> dict[str, str]:
    """Read a JSON object body and require string values for names."""
    try:
        data = await request.json()
    except ValueError as e:
        raise web.HTTPBadRequest(text="Request body must be JSON") from e

    if not isinstance(data, dict):
        raise web.HTTPBadRequest(text="Request body must be a JSON object")

    fields: dict[str, str] = {}
    for name in names:
        value = data.get(name)
        if not isinstance(value, str):
            raise web.HTTPBadRequest(text=f"{name} must be a string")
        fields[name] = value
    return fields
