"""Metadata inference for fields missing from front matter.

Title and summary come from the markdown body; date comes from filesystem
timestamps and is best effort only (copies and clones reset it).
"""

import asyncio
import logging
import os
import re
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from folio.core.front_matter import FrontMatter

logger = logging.getLogger(__name__)

_FENCE_MARKERS = ("```", "~~~")
_SETEXT_UNDERLINE_RE = re.compile(r"^(=+|-+)$")
_THEMATIC_BREAK_RE = re.compile(r"^([-*_])( *\1){2,}$")


def infer_title(body: str) -> str | None:
    """Return the text of the first ``# `` heading, if any."""
    for line in body.splitlines():
        trimmed = line.strip()
        if trimmed.startswith("# "):
            title = trimmed[2:].strip()
            if title:
                return title
    return None


def infer_summary(body: str) -> str | None:
    """Return the first paragraph that is not a heading.

    Lines inside fenced code blocks are ignored. ATX headings (``# ...``)
    end a paragraph that has already started. A Setext underline (``===``
    or ``---`` directly under text) turns the collected lines into a
    heading, so they are discarded.

    Returns:
        Paragraph lines joined with single spaces, or None
    """
    lines: list[str] = []
    in_paragraph = False
    fence: str | None = None
    prev_was_text = False

    for line in body.splitlines():
        trimmed = line.strip()

        marker = _fence_marker(trimmed)
        if fence is not None:
            if marker == fence:
                fence = None
            continue
        if marker is not None:
            if in_paragraph:
                break
            fence = marker
            prev_was_text = False
            continue

        if not trimmed:
            if in_paragraph:
                break
            prev_was_text = False
        elif prev_was_text and _SETEXT_UNDERLINE_RE.match(trimmed):
            lines.clear()
            in_paragraph = False
            prev_was_text = False
        elif trimmed.startswith("#") or _THEMATIC_BREAK_RE.match(trimmed):
            if in_paragraph:
                break
            prev_was_text = False
        else:
            in_paragraph = True
            lines.append(trimmed)
            prev_was_text = True

    if not lines:
        return None
    return " ".join(lines)


def _fence_marker(trimmed: str) -> str | None:
    for marker in _FENCE_MARKERS:
        if trimmed.startswith(marker):
            return marker
    return None


async def infer_date(path: Path) -> str | None:
    """Return the file's creation date as local ``YYYY-MM-DD``.

    Falls back to the modification time where creation time is not
    recorded (most Linux filesystems).
    """
    try:
        stat = await asyncio.to_thread(os.stat, path)
    except OSError as e:
        logger.debug("Cannot stat %s for date inference: %s", path, e)
        return None

    timestamp = getattr(stat, "st_birthtime", None)
    if timestamp is None:
        logger.debug("Creation time unavailable for %s, using mtime", path)
        timestamp = stat.st_mtime
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d")


async def infer_missing(front_matter: FrontMatter, body: str, resolved_path: Path) -> FrontMatter:
    """Fill title, summary and date where front matter left them unset.

    Args:
        front_matter: Metadata parsed from the document
        body: Markdown body without front matter
        resolved_path: Resolved document path, used for the date

    Returns:
        New FrontMatter; fields already set are kept as they are
    """
    title = front_matter.title
    if title is None:
        title = infer_title(body)

    summary = front_matter.summary
    if summary is None:
        summary = infer_summary(body)

    date = front_matter.date
    if date is None:
        date = await infer_date(resolved_path)

    return replace(front_matter, title=title, summary=summary, date=date)
