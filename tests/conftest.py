"""Shared test fixtures."""

from pathlib import Path

import pytest
from folio.config import Config, ContentConfig, EditorConfig, LiveReloadConfig, ServerConfig


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Create a resolved, empty content root."""
    root = tmp_path / "www"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def outside_dir(tmp_path: Path) -> Path:
    """Create a directory next to (not inside) the content root."""
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.md").write_text("# Secret\n\nDo not serve.")
    return outside.resolve()


@pytest.fixture
def test_config(content_root: Path) -> Config:
    """Create a test configuration rooted at content_root."""
    return Config(
        server=ServerConfig(),
        content=ContentConfig(root=content_root),
        editor=EditorConfig(enabled=True),
        live_reload=LiveReloadConfig(enabled=False),
    )
