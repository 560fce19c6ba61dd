"""Command-line interface for psdtranslate.

Responsibilities:
- Expose user-facing commands for translating documents and serving the API.
- Convert CLI arguments into `PsdTranslateConfig` and run the pipeline.
- Manage secrets stored in the OS keyring.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import echo_translation_summary, exit_with_command_error
from .config import ConfigLoader, PsdTranslateConfig, RuntimeSecretSources
from .credentials import SECRET_NAMES, create_credential_store
from .errors import PipelineStageError
from .io.download import SignedUrlDownloader
from .models.datatypes import TranslationRequest
from .parsing import normalize_optional_string, translated_document_name
from .pipeline import PsdTranslationPipeline
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="psdtranslate",
    no_args_is_help=True,
    help="Translate text layers of Photoshop documents.",
)


class BuildProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_config(config_path: Path | None) -> PsdTranslateConfig:
    """Load config from YAML when requested, else from the environment."""

    if config_path is None:
        try:
            return ConfigLoader.from_env()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=f"Invalid environment configuration: {exc}",
                hint="Fix the `PSDTRANSLATE_*` variables and rerun.",
            ) from exc

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _resolve_runtime_config(
    config_path: Path | None,
    cli_secrets: dict[str, str | None],
) -> PsdTranslateConfig:
    """Resolve config and secrets with `cli` > keyring > env > file precedence."""

    base_config = _load_config(config_path)
    cli_values = {
        key: value
        for key, value in (
            (key, normalize_optional_string(raw)) for key, raw in cli_secrets.items()
        )
        if value is not None
    }
    config = base_config.with_resolved_secrets(
        RuntimeSecretSources(
            cli=cli_values,
            secure=create_credential_store().load_all(),
            env=os.environ,
        )
    )
    try:
        config.require_service_credentials()
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Set secrets via env vars, `--config`, or `psdtranslate credentials --set <name>`.",
        ) from exc
    return config


@app.command("translate")
def translate_command(
    input_psd: Annotated[Path, typer.Argument(help="Path to the PSD document.")],
    target_lang: Annotated[
        str | None,
        typer.Option("--target-lang", "-t", help="Target language code (default: EN)."),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Where to save the translated PSD."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="YAML config file."),
    ] = None,
    adobe_client_id: Annotated[
        str | None, typer.Option("--adobe-client-id", help="Adobe client id.")
    ] = None,
    deepl_api_key: Annotated[
        str | None, typer.Option("--deepl-api-key", help="DeepL API key.")
    ] = None,
) -> None:
    """Translate one PSD, download the result, and clean up staged objects."""

    pipeline: PsdTranslationPipeline | None = None
    try:
        if not input_psd.exists():
            raise PipelineStageError(
                stage="input",
                detail=f"Input PSD not found: `{input_psd}`.",
                hint="Pass an existing `.psd` file path.",
            )
        config = _resolve_runtime_config(
            config_file,
            {"adobe_client_id": adobe_client_id, "deepl_api_key": deepl_api_key},
        )
        progress = BuildProgressIndicator(command_name="translate")
        pipeline = PsdTranslationPipeline(
            config,
            run_logger=RunLogger(),
            stage_progress_callback=progress.on_stage_start,
        )
        outcome = pipeline.run(
            TranslationRequest(
                document=input_psd.read_bytes(),
                file_name=input_psd.name,
                target_lang=target_lang or config.default_target_lang,
            )
        )
        destination = out or input_psd.with_name(translated_document_name(input_psd.name))
        SignedUrlDownloader(timeout_seconds=config.http_timeout_seconds).download(
            outcome.download_url, destination
        )
    except Exception as exc:
        exit_with_command_error("translate", exc)
    finally:
        if pipeline is not None:
            pipeline.stager.flush_pending()

    echo_translation_summary(outcome)
    typer.echo(f"Saved: {destination}")


@app.command("serve")
def serve_command(
    host: Annotated[str, typer.Option("--host", help="Bind host.")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Bind port.")] = 8000,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="YAML config file."),
    ] = None,
) -> None:
    """Serve the translation HTTP endpoint with uvicorn."""

    import uvicorn

    from .api.app import create_app

    try:
        config = _resolve_runtime_config(config_file, {})
        api = create_app(config)
    except Exception as exc:
        exit_with_command_error("serve", exc)

    uvicorn.run(api, host=host, port=port)


@app.command("credentials")
def credentials_command(
    set_secret: Annotated[
        str | None,
        typer.Option(
            "--set",
            help=f"Prompt for a secret with hidden input and store it ({', '.join(SECRET_NAMES)}).",
        ),
    ] = None,
    clear_secret: Annotated[
        str | None,
        typer.Option("--clear", help="Clear a stored secret."),
    ] = None,
) -> None:
    """Manage securely stored service secrets."""

    if set_secret and clear_secret:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--set` and `--clear` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_secret:
        prompted = normalize_optional_string(
            typer.prompt(
                f"{set_secret} (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No secret entered.",
                    hint="Provide a non-empty value when using `--set`.",
                ),
            )
        try:
            credential_store.set_secret(set_secret, prompted)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store `{set_secret}` securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo(f"`{set_secret}` stored in secure credential storage.")
        return

    if clear_secret:
        try:
            removed = credential_store.clear_secret(clear_secret)
        except ValueError as exc:
            exit_with_command_error("credentials", exc)
        if removed:
            typer.echo(f"Stored `{clear_secret}` cleared from secure credential storage.")
        else:
            typer.echo(f"No stored `{clear_secret}` found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    typer.echo(f"Secure credential storage: {availability}")
    for name in SECRET_NAMES:
        status = "present" if credential_store.get_secret(name) is not None else "not set"
        typer.echo(f"{name}: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
