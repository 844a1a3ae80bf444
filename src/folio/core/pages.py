"""Page dispatch and rendering.

Decides what a URL path denotes (document, directory, static file) and
produces the data the HTTP layer needs to respond. Nothing is cached;
every call resolves and renders again.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from folio.core.assets import AssetKind, locate_asset
from folio.core.breadcrumbs import Breadcrumb, build_breadcrumbs
from folio.core.errors import NotFoundError, translate_os_error
from folio.core.front_matter import FrontMatter, parse_document
from folio.core.inference import infer_missing
from folio.core.listing import INDEX_DOCUMENT, MARKDOWN_SUFFIX, DirectoryEntry, build_listing
from folio.core.paths import resolve_read
from folio.core.renderer import RenderMode, render

logger = logging.getLogger(__name__)

STATIC_EXTENSIONS = frozenset(
    {
        "css", "js", "mjs", "png", "jpg", "jpeg", "gif", "svg", "webp", "ico", "avif",
        "woff", "woff2", "ttf", "otf", "eot", "txt", "pdf", "mp4", "webm", "mp3", "ogg", "wav",
    }
)
INDEX_HTML_SUFFIX = "/index.html"


@dataclass(frozen=True)
class DocumentPage:
    """Rendered markdown document."""

    url_path: str
    source_path: Path
    front_matter: FrontMatter
    html: str
    stylesheet: str | None
    cover_image: str | None
    breadcrumbs: list[Breadcrumb]


@dataclass(frozen=True)
class ListingPage:
    """Directory without an index document."""

    url_path: str
    directory: Path
    entries: list[DirectoryEntry]
    stylesheet: str | None
    cover_image: str | None
    breadcrumbs: list[Breadcrumb]


@dataclass(frozen=True)
class StaticFile:
    """File served verbatim."""

    path: Path


RenderedPage = DocumentPage | ListingPage | StaticFile


def is_static_path(path: str) -> bool:
    """Check whether a path has a static-file extension."""
    return _extension(path) in STATIC_EXTENSIONS


class PageRenderer:
    """Renders documents and listings below a content root."""

    def __init__(self, content_root: Path) -> None:
        """Initialize renderer.

        Args:
            content_root: Resolved content root
        """
        self._content_root = content_root

    @property
    def content_root(self) -> Path:
        """Resolved content root."""
        return self._content_root

    async def render(self, url_path: str) -> RenderedPage:
        """Render whatever a decoded URL path denotes.

        Args:
            url_path: Decoded URL path, e.g. ``/blog/post`` or ``/blog/``

        Returns:
            DocumentPage, ListingPage or StaticFile

        Raises:
            NotFoundError: If nothing servable exists at the path
            IoFailure: On filesystem errors other than missing files
        """
        if ".." in url_path.split("/"):
            raise NotFoundError()

        relative = url_path.strip("/")
        if not relative or url_path.endswith("/"):
            return await self._render_directory_path(relative, url_path)

        if url_path.endswith(INDEX_HTML_SUFFIX) or relative == "index.html":
            directory_url = url_path.removesuffix("index.html")
            return await self._render_directory_path(directory_url.strip("/"), directory_url)

        try:
            resolved = await resolve_read(self._content_root, relative)
        except NotFoundError:
            resolved = None

        if resolved is not None:
            if await asyncio.to_thread(resolved.is_dir):
                return await self.render_directory(resolved, url_path)
            extension = _extension(relative)
            if extension == "md":
                return await self.render_document(resolved, url_path)
            if extension in STATIC_EXTENSIONS:
                return StaticFile(path=resolved)

        # Clean URL
        document = await resolve_read(self._content_root, relative + MARKDOWN_SUFFIX)
        return await self.render_document(document, url_path)

    async def render_document(self, resolved: Path, url_path: str) -> DocumentPage:
        """Render a resolved markdown document in trusted mode."""
        try:
            raw = await asyncio.to_thread(resolved.read_text, encoding="utf-8", errors="replace")
        except OSError as e:
            raise translate_os_error(e) from e

        parsed = parse_document(raw)
        front_matter = await infer_missing(parsed.front_matter, parsed.body, resolved)
        stylesheet, cover_image = await self._locate_assets(resolved)

        return DocumentPage(
            url_path=url_path,
            source_path=resolved,
            front_matter=front_matter,
            html=render(parsed.body, RenderMode.TRUSTED),
            stylesheet=stylesheet,
            cover_image=cover_image,
            breadcrumbs=build_breadcrumbs(url_path),
        )

    async def render_directory(self, resolved: Path, url_path: str) -> DocumentPage | ListingPage:
        """Render a directory's index document, or list it if there is none."""
        index = resolved / INDEX_DOCUMENT
        if await asyncio.to_thread(index.is_file):
            return await self.render_document(index, url_path)

        entries = await build_listing(self._content_root, resolved)
        stylesheet, cover_image = await self._locate_assets(resolved)
        return ListingPage(
            url_path=url_path or "/",
            directory=resolved,
            entries=entries,
            stylesheet=stylesheet,
            cover_image=cover_image,
            breadcrumbs=build_breadcrumbs(url_path),
        )

    async def _render_directory_path(self, relative: str, url_path: str) -> DocumentPage | ListingPage:
        if relative:
            resolved = await resolve_read(self._content_root, relative)
        else:
            resolved = self._content_root
        if not await asyncio.to_thread(resolved.is_dir):
            raise NotFoundError()
        return await self.render_directory(resolved, url_path)

    async def _locate_assets(self, resolved: Path) -> tuple[str | None, str | None]:
        stylesheet, cover_image = await asyncio.gather(
            locate_asset(self._content_root, resolved, AssetKind.STYLESHEET),
            locate_asset(self._content_root, resolved, AssetKind.COVER_IMAGE),
        )
        return stylesheet, cover_image


def _extension(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()
