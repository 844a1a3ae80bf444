"""Folio configuration.

Settings come from a ``folio.toml`` file, found next to or above the
working directory unless a path is given, with CLI flags layered on top.
Every section and key is optional.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "folio.toml"
DEFAULT_CONTENT_DIR = "www"


@dataclass
class ServerConfig:
    """Address the HTTP server binds to."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class ContentConfig:
    """Location of the served markdown tree."""

    root: Path = field(default_factory=lambda: Path(DEFAULT_CONTENT_DIR))


@dataclass
class EditorConfig:
    """Editor API switch and optional bearer token."""

    enabled: bool = False
    token: str | None = None


@dataclass
class LiveReloadConfig:
    """Live reload switch and the globs that trigger a reload."""

    enabled: bool = False
    watch_patterns: list[str] | None = None


@dataclass
class Config:
    """Complete Folio configuration."""

    server: ServerConfig
    content: ContentConfig
    editor: EditorConfig
    live_reload: LiveReloadConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration.

        Args:
            config_path: Explicit config file; when None, ``folio.toml`` is
                looked up from the working directory upwards

        Returns:
            Config, all defaults if no file was found

        Raises:
            FileNotFoundError: If config_path is given but missing
            ValueError: If the file is not valid TOML or a value has the
                wrong type
        """
        if config_path is None:
            config_path = cls._discover_config()
            if config_path is None:
                return cls._default()
        elif not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        return cls._load_from_file(config_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        cwd = Path.cwd()
        for directory in (cwd, *cwd.parents):
            candidate = directory / CONFIG_FILENAME
            if candidate.exists():
                return candidate
        return None

    @classmethod
    def _default(cls) -> "Config":
        return cls(
            server=ServerConfig(),
            content=ContentConfig(),
            editor=EditorConfig(),
            live_reload=LiveReloadConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

        return cls(
            server=cls._parse_server(_section(data, "server")),
            content=cls._parse_content(_section(data, "content"), path.parent),
            editor=cls._parse_editor(_section(data, "editor")),
            live_reload=cls._parse_live_reload(_section(data, "live_reload")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: dict[str, Any]) -> ServerConfig:
        defaults = ServerConfig()
        return ServerConfig(
            host=_typed(data, "server.host", str, defaults.host),
            port=_typed(data, "server.port", int, defaults.port),
        )

    @classmethod
    def _parse_content(cls, data: dict[str, Any], config_dir: Path) -> ContentConfig:
        """Relative roots are taken relative to the config file's directory."""
        root = _typed(data, "content.root", str, DEFAULT_CONTENT_DIR)
        return ContentConfig(root=config_dir / root)

    @classmethod
    def _parse_editor(cls, data: dict[str, Any]) -> EditorConfig:
        token = _typed(data, "editor.token", str, None)
        return EditorConfig(
            enabled=_typed(data, "editor.enabled", bool, False),
            token=token or None,
        )

    @classmethod
    def _parse_live_reload(cls, data: dict[str, Any]) -> LiveReloadConfig:
        patterns = _typed(data, "live_reload.watch_patterns", list, None)
        if patterns is not None and not all(isinstance(p, str) for p in patterns):
            raise ValueError("live_reload.watch_patterns items must be strings")
        return LiveReloadConfig(
            enabled=_typed(data, "live_reload.enabled", bool, False),
            watch_patterns=patterns,
        )

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        root: Path | None = None,
        editor_enabled: bool | None = None,
        live_reload_enabled: bool | None = None,
    ) -> "Config":
        """Return a copy with the given CLI values applied.

        Arguments left as None keep the configured value; self is not
        modified.
        """
        server_changes = _present(host=host, port=port)
        content_changes = _present(root=root)
        editor_changes = _present(enabled=editor_enabled)
        live_reload_changes = _present(enabled=live_reload_enabled)

        return replace(
            self,
            server=replace(self.server, **server_changes),
            content=replace(self.content, **content_changes),
            editor=replace(self.editor, **editor_changes),
            live_reload=replace(self.live_reload, **live_reload_changes),
        )


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ValueError(f"{name} section must be a dictionary")
    return value


_TYPE_NAMES = {str: "a string", int: "an integer", bool: "a boolean", list: "a list"}


def _typed(section: dict[str, Any], dotted_key: str, expected: type, default: Any) -> Any:
    """Fetch a key, checking its type. Booleans never count as integers."""
    value = section.get(dotted_key.rsplit(".", 1)[-1], default)
    if value is default:
        return value
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ValueError(f"{dotted_key} must be {_TYPE_NAMES[expected]}")
    return value


def _present(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}
