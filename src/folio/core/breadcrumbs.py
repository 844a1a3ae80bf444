"""Breadcrumb trail for a URL path."""

from dataclasses import dataclass

MARKDOWN_SUFFIX = ".md"


@dataclass(frozen=True)
class Breadcrumb:
    """Breadcrumb navigation item. The current segment has no url."""

    label: str
    url: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return {"label": self.label, "url": self.url}


def build_breadcrumbs(url_path: str) -> list[Breadcrumb]:
    """Build breadcrumbs starting with Home.

    Intermediate segments link to their directory URL (with trailing
    slash). The last segment is the current page and is not linked; a
    ``.md`` suffix on it is dropped.

    Args:
        url_path: Decoded URL path, e.g. ``/blog/2024/post``

    Returns:
        List of Breadcrumb, root first
    """
    segments = [segment for segment in url_path.strip("/").split("/") if segment]
    if not segments:
        return [Breadcrumb(label="Home")]

    crumbs = [Breadcrumb(label="Home", url="/")]
    for i, segment in enumerate(segments[:-1]):
        crumbs.append(Breadcrumb(label=segment, url="/" + "/".join(segments[: i + 1]) + "/"))
    crumbs.append(Breadcrumb(label=segments[-1].removesuffix(MARKDOWN_SUFFIX)))
    return crumbs
