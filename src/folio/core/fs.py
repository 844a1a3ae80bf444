"""Filesystem helpers shared by the listing and tree builders."""

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

HIDDEN_PREFIX = "."


@dataclass(frozen=True)
class ScannedEntry:
    """Visible directory entry."""

    name: str
    path: Path
    is_dir: bool


def scan_directory(directory: Path) -> list[ScannedEntry]:
    """List visible regular files and directories, unsorted.

    Hidden names, symlinks and names that are not valid UTF-8 are skipped,
    as are entries that cannot be stat'ed.

    Raises:
        OSError: If the directory itself cannot be read
    """
    entries: list[ScannedEntry] = []
    with os.scandir(directory) as it:
        for entry in it:
            name = entry.name
            if name.startswith(HIDDEN_PREFIX):
                continue
            if not _is_utf8(name):
                logger.warning("Skipping undecodable file name in %s", directory)
                continue

            try:
                if entry.is_symlink():
                    continue
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError as e:
                logger.warning("Cannot stat %s: %s", entry.path, e)
                continue

            if is_dir or is_file:
                entries.append(ScannedEntry(name=name, path=Path(entry.path), is_dir=is_dir))
    return entries


async def read_text_lenient(path: Path) -> str | None:
    """Read a UTF-8 file, returning None if it is missing or unreadable."""
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read %s: %s", path, e)
        return None


def _is_utf8(name: str) -> bool:
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
