"""Markdown to HTML rendering.

Uses mistune with GitHub-flavored extensions. Trusted mode passes raw HTML
in the source through unchanged and is used for published content.
Untrusted mode escapes it and is used for previews of unsaved editor input.
"""

import html
import logging
from enum import Enum

import mistune

logger = logging.getLogger(__name__)

GFM_PLUGINS = ["strikethrough", "table", "url", "task_lists", "footnotes"]


class RenderMode(Enum):
    """Whether raw HTML in the source may pass through."""

    TRUSTED = "trusted"
    UNTRUSTED = "untrusted"


_MARKDOWN: dict[RenderMode, mistune.Markdown] = {
    RenderMode.TRUSTED: mistune.create_markdown(escape=False, plugins=GFM_PLUGINS),
    RenderMode.UNTRUSTED: mistune.create_markdown(escape=True, plugins=GFM_PLUGINS),
}


def render(body: str, mode: RenderMode) -> str:
    """Render a markdown body to HTML.

    Never raises: if the converter fails, the body is returned as escaped
    paragraphs instead.

    Args:
        body: Markdown text without front matter
        mode: Trusted or untrusted rendering

    Returns:
        HTML fragment
    """
    logger.debug("Rendering %d characters of markdown (%s)", len(body), mode.value)
    try:
        result = _MARKDOWN[mode](body)
    except Exception:
        logger.exception("Markdown rendering failed, using plain fallback")
        return render_plain(body)
    return str(result)


def render_plain(body: str) -> str:
    """Minimal conversion: blank-line separated blocks become escaped paragraphs."""
    paragraphs = [block.strip() for block in body.replace("\r\n", "\n").split("\n\n")]
    return "".join(f"<p>{html.escape(p)}</p>\n" for p in paragraphs if p)
