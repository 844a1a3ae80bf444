"""Client path resolution confined to the content root.

Every path handed to the filesystem on behalf of a client goes through
resolve_read() or resolve_write(). Both reject ``..`` segments before any
filesystem call, check lexical containment, then resolve symlinks and check
containment again against the resolved content root. Only the second check
is authoritative; the first ones keep obviously bad input away from the
filesystem.
"""

import asyncio
import logging
from pathlib import Path

from folio.core.errors import NotFoundError, translate_os_error

logger = logging.getLogger(__name__)


def resolve_content_root(path: Path) -> Path:
    """Resolve the configured content root once at startup.

    Args:
        path: Configured content root (may be relative or a symlink)

    Returns:
        Absolute, symlink-resolved directory path

    Raises:
        FileNotFoundError: If the directory does not exist
        NotADirectoryError: If the path is not a directory
    """
    resolved = path.expanduser().resolve(strict=True)
    if not resolved.is_dir():
        raise NotADirectoryError(f"Content root is not a directory: {resolved}")
    return resolved


def sanitize_relative_path(path: str) -> str:
    """Normalize a client-supplied path to ``seg/seg/...`` form.

    Leading slashes, empty segments and ``.`` segments are dropped.

    Raises:
        NotFoundError: If the path is empty after normalization, contains a
            ``..`` segment, or contains a NUL character
    """
    if "\x00" in path:
        raise NotFoundError()
    segments = path.split("/")
    if ".." in segments:
        raise NotFoundError()
    kept = [segment for segment in segments if segment not in ("", ".")]
    if not kept:
        raise NotFoundError()
    return "/".join(kept)


def relative_posix(content_root: Path, path: Path) -> str:
    """Return path relative to the content root, ``/``-separated."""
    return path.relative_to(content_root).as_posix()


def is_contained(content_root: Path, path: Path) -> bool:
    """Check component-wise that path is content_root or below it."""
    return path == content_root or path.is_relative_to(content_root)


async def resolve_read(content_root: Path, relative_path: str) -> Path:
    """Resolve a path that must already exist.

    Args:
        content_root: Resolved content root
        relative_path: Client path, percent-decoding already applied

    Returns:
        Symlink-resolved path inside content_root

    Raises:
        NotFoundError: If the path is rejected or does not exist
        IoFailure: On any other filesystem error
    """
    joined = _join(content_root, relative_path)
    resolved = await _canonicalize(joined)
    _ensure_contained(content_root, resolved)
    return resolved


async def resolve_write(content_root: Path, relative_path: str) -> Path:
    """Resolve a path whose final component may not exist yet.

    Only the parent directory is symlink-resolved; missing parents are
    created, but only after the nearest existing ancestor has been verified
    to lie inside the content root. The sanitized file name is appended to
    the resolved parent. If the target already exists as a symlink, its
    destination must also be inside the content root.

    Concurrent writers to the same target are not serialized here.

    Raises:
        NotFoundError: If the path is rejected or escapes the content root
        IoFailure: On any other filesystem error
    """
    joined = _join(content_root, relative_path)
    parent = joined.parent

    if not await asyncio.to_thread(parent.is_dir):
        await _create_parents(content_root, parent)

    resolved_parent = await _canonicalize(parent)
    _ensure_contained(content_root, resolved_parent)

    target = resolved_parent / joined.name
    if await asyncio.to_thread(target.is_symlink):
        _ensure_contained(content_root, await _canonicalize(target))
    return target


def _join(content_root: Path, relative_path: str) -> Path:
    joined = content_root / sanitize_relative_path(relative_path)
    if not joined.is_relative_to(content_root):
        raise NotFoundError()
    return joined


def _ensure_contained(content_root: Path, resolved: Path) -> None:
    if not is_contained(content_root, resolved):
        logger.warning("Rejected path outside content root: %s", resolved)
        raise NotFoundError()


async def _canonicalize(path: Path) -> Path:
    try:
        return await asyncio.to_thread(path.resolve, strict=True)
    except OSError as e:
        raise translate_os_error(e) from e
    except RuntimeError as e:
        # Symlink loop
        raise NotFoundError() from e


async def _create_parents(content_root: Path, parent: Path) -> None:
    anchor = parent
    while not await asyncio.to_thread(anchor.exists):
        anchor = anchor.parent
    _ensure_contained(content_root, await _canonicalize(anchor))

    try:
        await asyncio.to_thread(parent.mkdir, parents=True, exist_ok=True)
    except OSError as e:
        raise translate_os_error(e) from e
