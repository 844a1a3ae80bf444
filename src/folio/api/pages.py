"""Pages API endpoint.

Returns rendered documents and directory listings as JSON.
"""

import asyncio
from datetime import UTC, datetime
from email.utils import format_datetime
from hashlib import md5

from aiohttp import web

from folio.app_keys import renderer_key
from folio.core.pages import DocumentPage, ListingPage, StaticFile


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/pages/{path:.*}", get_page),
    ]


async def get_page(request: web.Request) -> web.StreamResponse:
    path = request.match_info["path"]
    renderer = request.app[renderer_key]

    page = await renderer.render(f"/{path}")

    match page:
        case DocumentPage():
            return await _document_response(request, page)
        case ListingPage():
            return web.json_response(
                {
                    "kind": "listing",
                    "meta": {"path": page.url_path},
                    "stylesheet": page.stylesheet,
                    "cover_image": page.cover_image,
                    "breadcrumbs": [b.to_dict() for b in page.breadcrumbs],
                    "entries": [entry.to_dict() for entry in page.entries],
                }
            )
        case StaticFile():
            return web.FileResponse(page.path)


async def _document_response(request: web.Request, page: DocumentPage) -> web.Response:
    etag = _compute_etag(page.html)
    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    stat = await asyncio.to_thread(page.source_path.stat)
    last_modified = datetime.fromtimestamp(stat.st_mtime, tz=UTC)

    response_data = {
        "kind": "document",
        "meta": {
            "path": page.url_path,
            "last_modified": last_modified.isoformat(),
            **page.front_matter.to_dict(),
        },
        "stylesheet": page.stylesheet,
        "cover_image": page.cover_image,
        "breadcrumbs": [b.to_dict() for b in page.breadcrumbs],
        "content": page.html,
    }

    return web.json_response(
        response_data,
        headers={
            "ETag": etag,
            "Last-Modified": format_datetime(last_modified, usegmt=True),
            "Cache-Control": "private, max-age=60",
        },
    )


def _compute_etag(content: str) -> str:
    # 64 bits of the digest are enough to detect changed content
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
