"""Tests for pages API endpoint."""

from pathlib import Path

import pytest
from aiohttp.test_utils import TestClient
from folio.config import Config
from folio.server import create_app


@pytest.fixture
def client(test_config: Config, content_root: Path, aiohttp_client) -> TestClient:
    """Create test client with configured app."""
    app = create_app(test_config, content_root)
    return aiohttp_client(app)


class TestGetPage:
    """Tests for GET /api/pages/{path}."""

    @pytest.mark.asyncio
    async def test__existing_page__returns_rendered_content(
        self, content_root: Path, client
    ) -> None:
        """Return rendered document with inferred metadata."""
        (content_root / "guide.md").write_text("# Guide\n\nThis is a guide.")

        test_client = await client
        response = await test_client.get("/api/pages/guide")

        assert response.status == 200
        data = await response.json()
        assert data["kind"] == "document"
        assert data["meta"]["title"] == "Guide"
        assert data["meta"]["summary"] == "This is a guide."
        assert data["meta"]["path"] == "/guide"
        assert "This is a guide" in data["content"]

    @pytest.mark.asyncio
    async def test__missing_page__returns_404(self, client) -> None:
        """Return 404 for non-existent page."""
        test_client = await client
        response = await test_client.get("/api/pages/nonexistent")

        assert response.status == 404
        data = await response.json()
        assert data == {"error": "Not found", "path": "/api/pages/nonexistent"}

    @pytest.mark.asyncio
    async def test__symlink_escape__returns_404(
        self, content_root: Path, outside_dir: Path, client
    ) -> None:
        """A symlink pointing outside the content root is not served."""
        (content_root / "leak.md").symlink_to(outside_dir / "secret.md")

        test_client = await client
        response = await test_client.get("/api/pages/leak")

        assert response.status == 404
        assert "Secret" not in await response.text()

    @pytest.mark.asyncio
    async def test__front_matter__overrides_inferred_metadata(
        self, content_root: Path, client
    ) -> None:
        """Explicit front matter wins over inferred values."""
        (content_root / "post.md").write_text(
            "---\ntitle: Explicit\nauthor: Sam\ndate: 2024-05-01\n---\n# Heading\n\nBody.\n"
        )

        test_client = await client
        response = await test_client.get("/api/pages/post")

        data = await response.json()
        assert data["meta"]["title"] == "Explicit"
        assert data["meta"]["author"] == "Sam"
        assert data["meta"]["date"] == "2024-05-01"
        assert "---" not in data["content"]

    @pytest.mark.asyncio
    async def test__index_md__resolves_for_directory_path(
        self, content_root: Path, client
    ) -> None:
        """Resolve directory path to index.md."""
        domain = content_root / "domain"
        domain.mkdir()
        (domain / "index.md").write_text("# Domain Index\n\nIndex content.")

        test_client = await client
        response = await test_client.get("/api/pages/domain/")

        assert response.status == 200
        data = await response.json()
        assert data["kind"] == "document"
        assert data["meta"]["title"] == "Domain Index"

    @pytest.mark.asyncio
    async def test__directory_without_index__returns_listing(
        self, content_root: Path, client
    ) -> None:
        """List a directory that has no index document."""
        blog = content_root / "blog"
        blog.mkdir()
        (blog / "style.css").write_text("body {}")
        (blog / "new.md").write_text("---\ndate: 2024-03-01\n---\n# New\n")
        (blog / "old.md").write_text("---\ndate: 2024-01-01\n---\n# Old\n")

        test_client = await client
        response = await test_client.get("/api/pages/blog/")

        assert response.status == 200
        data = await response.json()
        assert data["kind"] == "listing"
        assert data["meta"]["path"] == "/blog/"
        assert data["stylesheet"] == "/blog/style.css"
        assert [e["display_name"] for e in data["entries"]] == ["new", "old"]
        assert data["entries"][0] == {
            "display_name": "new",
            "url": "/blog/new",
            "is_directory": False,
            "title": "New",
            "date": "2024-03-01",
            "summary": None,
            "author": None,
        }

    @pytest.mark.asyncio
    async def test__root__returns_listing(self, content_root: Path, client) -> None:
        """The empty path lists the content root."""
        (content_root / "a.md").write_text("# A")

        test_client = await client
        response = await test_client.get("/api/pages/")

        data = await response.json()
        assert data["kind"] == "listing"
        assert data["breadcrumbs"] == [{"label": "Home", "url": None}]

    @pytest.mark.asyncio
    async def test__static_path__returns_file(self, content_root: Path, client) -> None:
        """Static files under the pages API are served verbatim."""
        (content_root / "notes.txt").write_text("plain notes")

        test_client = await client
        response = await test_client.get("/api/pages/notes.txt")

        assert response.status == 200
        assert await response.text() == "plain notes"

    @pytest.mark.asyncio
    async def test__response__includes_breadcrumbs(self, content_root: Path, client) -> None:
        """Include breadcrumbs in response."""
        nested = content_root / "domain" / "subdomain"
        nested.mkdir(parents=True)
        (nested / "guide.md").write_text("# Nested Guide\n\nContent.")

        test_client = await client
        response = await test_client.get("/api/pages/domain/subdomain/guide")

        data = await response.json()
        assert data["breadcrumbs"] == [
            {"label": "Home", "url": "/"},
            {"label": "domain", "url": "/domain/"},
            {"label": "subdomain", "url": "/domain/subdomain/"},
            {"label": "guide", "url": None},
        ]

    @pytest.mark.asyncio
    async def test__response__includes_inherited_assets(
        self, content_root: Path, client
    ) -> None:
        """Stylesheet and cover image are inherited from ancestors."""
        (content_root / "style.css").write_text("body {}")
        section = content_root / "section"
        section.mkdir()
        (section / "meta.jpg").write_bytes(b"jpg")
        (section / "page.md").write_text("Text.")

        test_client = await client
        response = await test_client.get("/api/pages/section/page")

        data = await response.json()
        assert data["stylesheet"] == "/style.css"
        assert data["cover_image"] == "/section/meta.jpg"

    @pytest.mark.asyncio
    async def test__response__includes_cache_headers(
        self, content_root: Path, client
    ) -> None:
        """Include ETag, Last-Modified and Cache-Control headers."""
        (content_root / "guide.md").write_text("# Guide\n\nContent.")

        test_client = await client
        response = await test_client.get("/api/pages/guide")

        assert response.status == 200
        assert response.headers["ETag"].startswith('"')
        assert "Last-Modified" in response.headers
        assert response.headers["Cache-Control"] == "private, max-age=60"

    @pytest.mark.asyncio
    async def test__matching_etag__returns_304(self, content_root: Path, client) -> None:
        """Return 304 Not Modified when ETag matches."""
        (content_root / "guide.md").write_text("# Guide\n\nContent.")

        test_client = await client
        first = await test_client.get("/api/pages/guide")
        etag = first.headers["ETag"]

        second = await test_client.get("/api/pages/guide", headers={"If-None-Match": etag})

        assert second.status == 304

    @pytest.mark.asyncio
    async def test__changed_content__returns_new_etag(self, content_root: Path, client) -> None:
        """Edits on disk are visible on the next request."""
        (content_root / "guide.md").write_text("# Guide\n\nOld.")

        test_client = await client
        first = await test_client.get("/api/pages/guide")
        (content_root / "guide.md").write_text("# Guide\n\nNew.")

        second = await test_client.get(
            "/api/pages/guide", headers={"If-None-Match": first.headers["ETag"]}
        )

        assert second.status == 200
        assert "New." in (await second.json())["content"]

    @pytest.mark.asyncio
    async def test__response__meta_includes_last_modified(
        self, content_root: Path, client
    ) -> None:
        """Include last_modified in meta."""
        (content_root / "guide.md").write_text("# Guide")

        test_client = await client
        response = await test_client.get("/api/pages/guide")

        data = await response.json()
        assert "T" in data["meta"]["last_modified"]
