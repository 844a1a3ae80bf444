"""Front matter extraction.

A document may start with a YAML block delimited by ``---`` lines. Parsing
never fails: a missing closing delimiter leaves the whole text as body, and
malformed YAML yields empty metadata.
"""

import logging
from dataclasses import asdict, dataclass
import yaml

logger = logging.getLogger(__name__)

BOM = "\ufeff"
DELIMITER = "---"

# Plain scalars YAML reads as null; BaseLoader returns them as text
_NULL_SCALARS = frozenset({"", "~", "null", "Null", "NULL"})


@dataclass(frozen=True)
class FrontMatter:
    """Document metadata. Every field is optional."""

    title: str | None = None
    summary: str | None = None
    author: str | None = None
    date: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class ParsedDocument:
    """Front matter and the remaining markdown body."""

    front_matter: FrontMatter
    body: str


def parse_document(raw_text: str) -> ParsedDocument:
    """Split raw document text into front matter and body.

    Args:
        raw_text: Full document text, possibly starting with a BOM

    Returns:
        ParsedDocument; front matter is empty when absent or malformed
    """
    text = raw_text.removeprefix(BOM)

    if text.startswith(DELIMITER + "\n"):
        rest = text[len(DELIMITER) + 1 :]
    elif text.startswith(DELIMITER + "\r\n"):
        rest = text[len(DELIMITER) + 2 :]
    else:
        return ParsedDocument(front_matter=FrontMatter(), body=text)

    bounds = _find_closing_delimiter(rest)
    if bounds is None:
        return ParsedDocument(front_matter=FrontMatter(), body=text)

    block_end, body_start = bounds
    return ParsedDocument(
        front_matter=_parse_block(rest[:block_end]),
        body=rest[body_start:],
    )


def _find_closing_delimiter(text: str) -> tuple[int, int] | None:
    """Locate a line that is exactly ``---``.

    Returns:
        (start of the delimiter line, start of the body) or None. The
        delimiter must be followed by ``\\n``, ``\\r\\n`` or end of input;
        lines like ``---extra`` are skipped.
    """
    position = 0
    while True:
        line_end = text.find("\n", position)
        if line_end == -1:
            if text[position:] == DELIMITER:
                return position, len(text)
            return None

        line = text[position:line_end]
        if line in (DELIMITER, DELIMITER + "\r"):
            return position, line_end + 1
        position = line_end + 1


def _parse_block(block: str) -> FrontMatter:
    try:
        # BaseLoader keeps every scalar as written: no yes/no booleans,
        # octal numbers or timestamps
        data = yaml.load(block, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        logger.warning("Ignoring malformed front matter: %s", e)
        return FrontMatter()

    if data is None:
        return FrontMatter()
    if not isinstance(data, dict):
        logger.warning("Ignoring front matter that is not a mapping")
        return FrontMatter()

    return FrontMatter(
        title=_as_text(data.get("title")),
        summary=_as_text(data.get("summary")),
        author=_as_text(data.get("author")),
        date=_as_text(data.get("date")),
    )


def _as_text(value: object) -> str | None:
    if not isinstance(value, str) or value in _NULL_SCALARS:
        return None
    return value
