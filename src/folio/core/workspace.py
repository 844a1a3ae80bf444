"""Editor operations on the content tree.

Every client path goes through resolve_read() or resolve_write(). None of
these operations lock: two requests racing on the same target (say, a
rename and a delete) interleave in whatever order the filesystem applies
them.
"""

import asyncio
import logging
import shutil
from pathlib import Path

from folio.core.errors import AlreadyExistsError, IoFailure, NotFoundError, translate_os_error
from folio.core.listing import MARKDOWN_SUFFIX
from folio.core.paths import resolve_read, resolve_write, sanitize_relative_path
from folio.core.renderer import RenderMode, render

logger = logging.getLogger(__name__)


async def read_document(content_root: Path, relative_path: str) -> str:
    """Read a document's raw text.

    Raises:
        NotFoundError: If the path is rejected or missing
        IoFailure: On other filesystem errors, including non-UTF-8 content
    """
    resolved = await resolve_read(content_root, relative_path)
    try:
        return await asyncio.to_thread(resolved.read_text, encoding="utf-8")
    except OSError as e:
        raise translate_os_error(e) from e
    except UnicodeDecodeError as e:
        raise IoFailure(f"Not valid UTF-8: {relative_path}") from e


async def save_document(content_root: Path, relative_path: str, content: str) -> Path:
    """Write content to a document, creating it and its parents if needed.

    Returns:
        Resolved path that was written
    """
    target = await resolve_write(content_root, relative_path)
    await _run(_write_text, target, content)
    logger.info("Saved %s (%d characters)", target, len(content))
    return target


async def create_document(content_root: Path, relative_path: str) -> str:
    """Create an empty document, appending ``.md`` when missing.

    Returns:
        Normalized relative path of the new document

    Raises:
        AlreadyExistsError: If the document already exists
    """
    normalized = sanitize_relative_path(relative_path)
    if not normalized.endswith(MARKDOWN_SUFFIX):
        normalized += MARKDOWN_SUFFIX

    target = await resolve_write(content_root, normalized)
    if await asyncio.to_thread(target.exists):
        raise AlreadyExistsError(f"File already exists: {normalized}")

    await _run(_write_text, target, "")
    logger.info("Created %s", target)
    return normalized


async def create_directory(content_root: Path, relative_path: str) -> Path:
    """Create a directory and any missing parents."""
    target = await resolve_write(content_root, relative_path)
    await _run(target.mkdir, parents=True, exist_ok=True)
    logger.info("Created directory %s", target)
    return target


async def delete_path(content_root: Path, relative_path: str) -> None:
    """Delete a file, or a directory with everything below it.

    Raises:
        NotFoundError: If the path is rejected, missing, or the content root
    """
    target = await resolve_read(content_root, relative_path)
    if target == content_root:
        raise NotFoundError()

    if await asyncio.to_thread(target.is_dir):
        await _run(shutil.rmtree, target)
    else:
        await _run(target.unlink)
    logger.info("Deleted %s", target)


async def rename_path(content_root: Path, old_path: str, new_path: str) -> Path:
    """Move a file or directory to a new path inside the content root.

    Returns:
        Resolved destination path

    Raises:
        AlreadyExistsError: If the destination exists
    """
    source = await resolve_read(content_root, old_path)
    if source == content_root:
        raise NotFoundError()

    destination = await resolve_write(content_root, new_path)
    if await asyncio.to_thread(destination.exists):
        raise AlreadyExistsError(f"Destination already exists: {new_path}")

    await _run(source.rename, destination)
    logger.info("Renamed %s to %s", source, destination)
    return destination


def render_preview(content: str) -> str:
    """Render unsaved editor input with raw HTML escaped."""
    return render(content, RenderMode.UNTRUSTED)


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def _run(func, /, *args, **kwargs) -> None:
    try:
        await asyncio.to_thread(func, *args, **kwargs)
    except OSError as e:
        raise translate_os_error(e) from e
