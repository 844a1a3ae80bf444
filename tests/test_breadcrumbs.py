"""Tests for breadcrumb trails."""

from folio.core.breadcrumbs import Breadcrumb, build_breadcrumbs


def test__root__is_home_only() -> None:
    assert build_breadcrumbs("/") == [Breadcrumb(label="Home")]


def test__nested_document__lists_each_ancestor() -> None:
    assert build_breadcrumbs("/blog/2024/post") == [
        Breadcrumb(label="Home", url="/"),
        Breadcrumb(label="blog", url="/blog/"),
        Breadcrumb(label="2024", url="/blog/2024/"),
        Breadcrumb(label="post"),
    ]


def test__directory_url_with_trailing_slash__ends_at_directory() -> None:
    assert build_breadcrumbs("/blog/") == [
        Breadcrumb(label="Home", url="/"),
        Breadcrumb(label="blog"),
    ]


def test__markdown_suffix__is_dropped_from_last_segment() -> None:
    assert build_breadcrumbs("/guide.md")[-1] == Breadcrumb(label="guide")


def test__item__serializes_to_dict() -> None:
    assert Breadcrumb(label="blog", url="/blog/").to_dict() == {"label": "blog", "url": "/blog/"}
