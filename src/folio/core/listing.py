"""Public directory listing.

Lists the markdown documents and subdirectories of one directory with
their metadata. A subdirectory is described by its own ``index.md``; an
``index.md`` next to the listed documents represents the directory itself
and is not listed.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from folio.core.errors import translate_os_error
from folio.core.front_matter import parse_document
from folio.core.fs import ScannedEntry, read_text_lenient, scan_directory
from folio.core.inference import infer_date, infer_missing, infer_summary, infer_title
from folio.core.paths import relative_posix

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"
INDEX_DOCUMENT = "index.md"


@dataclass(frozen=True)
class DirectoryEntry:
    """One entry of a public listing."""

    display_name: str
    url: str
    is_directory: bool
    title: str | None = None
    date: str | None = None
    summary: str | None = None
    author: str | None = None

    def to_dict(self) -> dict[str, str | bool | None]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def directory_url(content_root: Path, directory: Path) -> str:
    """Return the URL of a directory inside the content root, with trailing slash."""
    if directory == content_root:
        return "/"
    return "/" + relative_posix(content_root, directory) + "/"


async def build_listing(content_root: Path, directory: Path) -> list[DirectoryEntry]:
    """Build the sorted public listing of a resolved directory.

    Args:
        content_root: Resolved content root
        directory: Resolved directory inside content_root

    Returns:
        Entries ordered by sort_listing()

    Raises:
        NotFoundError: If the directory does not exist
        IoFailure: If the directory cannot be read
    """
    try:
        scanned = await asyncio.to_thread(scan_directory, directory)
    except OSError as e:
        raise translate_os_error(e) from e

    base_url = directory_url(content_root, directory)
    described = await asyncio.gather(*(_describe(entry, base_url) for entry in scanned))
    return sort_listing([entry for entry in described if entry is not None])


def sort_listing(entries: list[DirectoryEntry]) -> list[DirectoryEntry]:
    """Order dated entries newest first, then undated entries by name.

    Entries sharing a date are ordered by name.
    """
    dated = sorted((e for e in entries if e.date is not None), key=lambda e: e.display_name)
    dated.sort(key=lambda e: e.date or "", reverse=True)
    undated = sorted((e for e in entries if e.date is None), key=lambda e: e.display_name)
    return dated + undated


async def _describe(entry: ScannedEntry, base_url: str) -> DirectoryEntry | None:
    if entry.is_dir:
        return await _describe_directory(entry, base_url)
    return await _describe_document(entry, base_url)


async def _describe_directory(entry: ScannedEntry, base_url: str) -> DirectoryEntry:
    # The directory's own timestamp dates it; index.md only supplies text.
    date = await infer_date(entry.path)
    title = summary = author = None

    raw = await read_text_lenient(entry.path / INDEX_DOCUMENT)
    if raw is not None:
        parsed = parse_document(raw)
        front_matter = parsed.front_matter
        title = front_matter.title
        if title is None:
            title = infer_title(parsed.body)
        summary = front_matter.summary
        if summary is None:
            summary = infer_summary(parsed.body)
        author = front_matter.author

    return DirectoryEntry(
        display_name=entry.name,
        url=f"{base_url}{entry.name}/",
        is_directory=True,
        title=title,
        date=date,
        summary=summary,
        author=author,
    )


async def _describe_document(entry: ScannedEntry, base_url: str) -> DirectoryEntry | None:
    if not entry.name.endswith(MARKDOWN_SUFFIX):
        return None
    if entry.name == INDEX_DOCUMENT:
        return None

    stem = entry.name.removesuffix(MARKDOWN_SUFFIX)
    raw = await read_text_lenient(entry.path)
    parsed = parse_document(raw or "")
    front_matter = await infer_missing(parsed.front_matter, parsed.body, entry.path)

    return DirectoryEntry(
        display_name=stem,
        url=f"{base_url}{stem}",
        is_directory=False,
        title=front_matter.title,
        date=front_matter.date,
        summary=front_matter.summary,
        author=front_matter.author,
    )
