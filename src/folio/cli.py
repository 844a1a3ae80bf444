"""CLI interface for Folio.

Command-line tool for serving and rendering markdown documents.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from folio.config import Config
from folio.core.front_matter import parse_document
from folio.core.inference import infer_missing
from folio.core.renderer import RenderMode, render


@click.group()
def cli() -> None:
    """Folio - serve a directory of markdown documents as a website."""


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover folio.toml)",
)
@click.option(
    "--root",
    "-r",
    envvar="FOLIO_ROOT",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Content root directory (overrides config)",
)
@click.option(
    "--host",
    envvar="FOLIO_HOST",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    envvar="FOLIO_PORT",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--editor/--no-editor",
    default=None,
    help="Enable/disable the editor API (overrides config, default: disabled)",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: disabled)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def serve(
    config_path: Path | None,
    root: Path | None,
    host: str | None,
    port: int | None,
    editor: bool | None,
    live_reload: bool | None,
    verbose: bool,
) -> None:
    """Start the server."""
    from folio.server import run_server

    _configure_logging(verbose)

    try:
        config = Config.load(config_path).with_overrides(
            host=host,
            port=port,
            root=root,
            editor_enabled=editor,
            live_reload_enabled=live_reload,
        )
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    if not config.content.root.is_dir():
        raise click.ClickException(f"Content root does not exist: {config.content.root}")

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Content root: {config.content.root.resolve()}")
    click.echo(f"Editor: {'enabled' if config.editor.enabled else 'disabled'}")
    click.echo(f"Live reload: {'enabled' if config.live_reload.enabled else 'disabled'}")

    run_server(config)


@cli.command("render")
@click.argument("markdown_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--untrusted",
    is_flag=True,
    help="Escape raw HTML instead of passing it through",
)
def render_command(markdown_file: Path, untrusted: bool) -> None:
    """Render a markdown file to HTML on stdout.

    Front matter (with inferred title, summary and date) is printed to
    stderr.
    """
    try:
        raw = markdown_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {markdown_file}: {e}") from e

    parsed = parse_document(raw)
    front_matter = asyncio.run(infer_missing(parsed.front_matter, parsed.body, markdown_file))

    for key, value in front_matter.to_dict().items():
        if value is not None:
            click.echo(f"{key}: {value}", err=True)

    mode = RenderMode.UNTRUSTED if untrusted else RenderMode.TRUSTED
    click.echo(render(parsed.body, mode), nl=False)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


if __name__ == "__main__":
    cli()
