"""Mapping of content errors to JSON responses."""

import logging
from collections.abc import Awaitable, Callable

from aiohttp import web

from folio.core.errors import AlreadyExistsError, IoFailure, NotFoundError

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def content_error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Translate content errors raised by handlers into JSON error responses.

    NotFoundError responses carry no detail beyond the requested path.
    """
    try:
        return await handler(request)
    except NotFoundError:
        return web.json_response({"error": "Not found", "path": request.path}, status=404)
    except AlreadyExistsError as e:
        return web.json_response({"error": str(e)}, status=409)
    except IoFailure as e:
        logger.error("%s %s failed: %s", request.method, request.path, e.__cause__ or e)
        return web.json_response({"error": "Internal server error"}, status=500)
