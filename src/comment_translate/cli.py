"""Typer CLI definition for comment-translate."""

import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

import typer

from .backends import BackendRegistry
from .cache.manager import TranslationCacheManager
from .config import generate_config, load_config
from .translate.errors import BackendFailureError, BackendUnavailableError
from .translate.pipeline import TranslationPipeline

app = typer.Typer(help="Translate code comments using Google or codebuddy")


def process_text_input(text: str | None) -> str:
    """Process text input and return the text to translate.

    Raises:
        ValueError: If no text is provided
    """
    if text is None or not text.strip():
        raise ValueError("No text provided")

    return text


@app.command()
def translate(
    text: str | None = typer.Argument(None, help="Text to translate"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read text from file"),
    target: str | None = typer.Option(
        None, "-t", "--target", help="Target language (from config if omitted)"
    ),
    source: str | None = typer.Option(
        None, "-s", "--source", help="Source language (auto-detect if omitted)"
    ),
    service: str | None = typer.Option(
        None, "-p", "--service", help="Translation service (from config if omitted)"
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Do not read or write the translation cache"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Show verbose error messages and cache activity"
    ),
    list_services: bool = typer.Option(
        False, "--list-services", help="List available translation services and exit"
    ),
    init_config: bool = typer.Option(
        False, "--init-config", help="Write the default config file and exit"
    ),
) -> None:
    """Translate text (a code comment) into the target language."""
    # Configure logging for debug mode
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    if list_services:
        for name in BackendRegistry.available():
            typer.echo(name)
        raise typer.Exit(0)

    if init_config:
        path = generate_config()
        typer.echo(f"Config written to {path}")
        raise typer.Exit(0)

    # Get text from argument, file, or stdin (in priority order)
    if text is None:
        if file:
            try:
                text = file.read_text()
            except FileNotFoundError as e:
                if debug:
                    typer.echo(f"Debug - File not found: {file} ({e!r})", err=True)
                else:
                    typer.echo(f"Error: File not found: {file}", err=True)
                raise typer.Exit(1) from None
            except UnicodeDecodeError as e:
                if debug:
                    typer.echo(f"Debug - Decode error: {file} ({e!r})", err=True)
                else:
                    typer.echo(
                        f"Error: Unable to decode file as text: {file}", err=True
                    )
                raise typer.Exit(1) from None
        elif not sys.stdin.isatty():
            text = sys.stdin.read().strip()

    try:
        input_text = process_text_input(text)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    # Resolve config values for flags not provided
    config = load_config()
    translate_config = config.translate
    overrides = {
        key: value
        for key, value in (
            ("service", service),
            ("target_language", target),
            ("source_language", source),
        )
        if value
    }
    if overrides:
        translate_config = replace(translate_config, **overrides)

    pipeline = TranslationPipeline(
        TranslationCacheManager(
            max_entries=config.cache.max_entries,
            enabled=config.cache.enabled and not no_cache,
        ),
        BackendRegistry.resolve(translate_config.service),
        translate_config,
    )

    try:
        result = asyncio.run(pipeline.translate(input_text))
    except BackendUnavailableError as e:
        if debug:
            typer.echo(f"Debug - Backend unavailable: {e!r}", err=True)
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except BackendFailureError as e:
        if debug:
            typer.echo(f"Debug - Translation error: {e!r}", err=True)
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except Exception as e:
        if debug:
            typer.echo(f"Debug - Unexpected error: {e!r}", err=True)
        else:
            typer.echo("Error: An unexpected error occurred", err=True)
        raise typer.Exit(1) from None

    if result is None:
        typer.echo(
            f"Error: Text is longer than {translate_config.max_length} bytes",
            err=True,
        )
        raise typer.Exit(1)

    typer.echo(result)
