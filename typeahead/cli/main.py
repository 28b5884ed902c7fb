#!/usr/bin/env python3
"""Main entry point for the typeahead command."""

import asyncio
import sys
from pathlib import Path

import click

from ..core.completion import create_completion_service
from ..core.config import Settings, configure_logging, settings

DEFAULT_EDITOR_LOG = "typeahead.log"


@click.group()
@click.version_option(package_name="typeahead")
def main() -> None:
    """Typeahead - inline, accept/dismiss writing suggestions."""


@main.command()
@click.argument("file", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--provider",
    type=click.Choice(["openai", "anthropic", "ollama", "mock"]),
    help="Completion provider (overrides config)",
)
@click.option("--model", help="Model name (overrides config)")
@click.option("--remote", "remote_url", help="Use a running completion server at this URL")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Where to write logs while the editor is open")
def edit(
    file: Path | None,
    provider: str | None,
    model: str | None,
    remote_url: str | None,
    log_file: str | None,
) -> None:
    """Open FILE (or an empty buffer) in the suggestion editor.

    Examples:
        typeahead edit notes.md                 # Edit with configured provider
        typeahead edit --provider mock          # Offline demo suggestions
        typeahead edit --remote http://127.0.0.1:8484
    """
    from .console_app import EditorApp

    cfg = _apply_overrides(settings, provider=provider, model=model, remote_url=remote_url)
    # The editor owns the screen, so logs always go to a file.
    cfg.logging.file = log_file or cfg.logging.file or DEFAULT_EDITOR_LOG
    configure_logging(cfg.logging, force=True)

    try:
        text = file.read_text(encoding="utf-8") if file is not None and file.exists() else ""
        service = create_completion_service(cfg)
        label = f"remote {cfg.completion.remote_url}" if cfg.completion.remote_url else cfg.llm.provider
        app = EditorApp(service, text=text, path=file, suggestions=cfg.suggestions, provider_label=label)
        asyncio.run(app.run())

    except KeyboardInterrupt:
        sys.exit(0)
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option("--host", help="Bind address (overrides config)")
@click.option("--port", type=int, help="Port (overrides config)")
@click.option("--reload/--no-reload", default=None, help="Auto-reload on code changes")
def serve(host: str | None, port: int | None, reload: bool | None) -> None:
    """Run the completion server."""
    from ..main import run

    run(host=host, port=port, reload=reload)


def _apply_overrides(
    base: Settings,
    *,
    provider: str | None = None,
    model: str | None = None,
    remote_url: str | None = None,
) -> Settings:
    cfg = base.model_copy(deep=True)
    if provider is not None:
        cfg.llm.provider = provider  # type: ignore[assignment]
        if model is None:
            cfg.llm.model = None
    if model is not None:
        cfg.llm.model = model
    if remote_url is not None:
        cfg.completion.remote_url = remote_url
    return cfg


if __name__ == "__main__":
    main()
