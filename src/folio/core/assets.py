"""Inherited asset lookup.

A directory's stylesheet and cover image apply to everything below it
unless a nearer directory provides its own. Lookup walks from the
document's directory up to the content root and returns the first match as
a root-relative URL.
"""

import asyncio
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from folio.core.paths import is_contained, relative_posix

STYLESHEET_NAME = "style.css"
COVER_IMAGE_STEM = "meta"
COVER_IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "avif", "svg")


class AssetKind(Enum):
    """Kinds of inherited asset."""

    STYLESHEET = "stylesheet"
    COVER_IMAGE = "cover_image"


def ancestor_dirs(content_root: Path, resolved_path: Path) -> list[Path]:
    """List directories from the path's own directory up to content_root.

    Args:
        content_root: Resolved content root
        resolved_path: Resolved file or directory inside content_root

    Returns:
        Directories nearest first, ending with content_root; empty if the
        path lies outside content_root
    """
    start = resolved_path if resolved_path.is_dir() else resolved_path.parent
    if not is_contained(content_root, start):
        return []

    dirs = [start]
    current = start
    while current != content_root:
        current = current.parent
        dirs.append(current)
    return dirs


def _stylesheet_candidates(directory: Path) -> list[Path]:
    return [directory / STYLESHEET_NAME]


def _cover_image_candidates(directory: Path) -> list[Path]:
    return [directory / f"{COVER_IMAGE_STEM}.{ext}" for ext in COVER_IMAGE_EXTENSIONS]


_CANDIDATES: dict[AssetKind, Callable[[Path], list[Path]]] = {
    AssetKind.STYLESHEET: _stylesheet_candidates,
    AssetKind.COVER_IMAGE: _cover_image_candidates,
}


async def locate_asset(content_root: Path, resolved_path: Path, kind: AssetKind) -> str | None:
    """Find the nearest inherited asset of the given kind.

    Args:
        content_root: Resolved content root
        resolved_path: Resolved document or directory path
        kind: Asset to look for

    Returns:
        Root-relative URL such as ``/blog/style.css``, or None
    """
    return await asyncio.to_thread(_find_nearest, content_root, resolved_path, _CANDIDATES[kind])


def _find_nearest(
    content_root: Path,
    resolved_path: Path,
    candidates: Callable[[Path], list[Path]],
) -> str | None:
    for directory in ancestor_dirs(content_root, resolved_path):
        for candidate in candidates(directory):
            if candidate.is_file():
                return "/" + relative_posix(content_root, candidate)
    return None
