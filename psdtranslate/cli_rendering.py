"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics
and translation run summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PsdTranslateError
from .models.datatypes import TranslationOutcome


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PsdTranslateError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_translation_summary(outcome: TranslationOutcome) -> None:
    """Print run id, translated layers, and the download URL."""

    typer.echo(f"Run id: {outcome.run_id}")
    typer.echo(f"Translated layers: {len(outcome.units)}")
    for unit in outcome.units:
        typer.echo(f"  {unit.position + 1}. {unit.layer_name}: {unit.translated_text}")
    typer.echo(f"Output object: {outcome.output_key}")
    typer.echo(f"Download URL: {outcome.download_url}")
