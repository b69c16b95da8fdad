from __future__ import annotations

import json
import logging
from pathlib import Path
from time import perf_counter
from typing import Callable, TypeVar

import typer

from ltcsync.config import Settings, load_settings
from ltcsync.ingest.pipeline import build_session, probe_file
from ltcsync.logging_config import configure_logging
from ltcsync.padding import generate_padding_files
from ltcsync.report.exporter import export_session, export_session_outputs, render_session_table, session_rows
from ltcsync.sessions import EditingSession

app = typer.Typer(help="Group audio/video files by the LTC timecode embedded in their audio.")
config_app = typer.Typer(help="Configuration commands.")

app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _run_with_progress(step_index: int, total_steps: int, label: str, work: Callable[[], T]) -> T:
    typer.echo(f"[{step_index}/{total_steps}] {label}...", err=True)
    started_at = perf_counter()
    try:
        result = work()
    except Exception:
        elapsed = perf_counter() - started_at
        typer.echo(f"[{step_index}/{total_steps}] {label} failed after {elapsed:.1f}s", err=True)
        raise
    elapsed = perf_counter() - started_at
    typer.echo(f"[{step_index}/{total_steps}] {label} done in {elapsed:.1f}s", err=True)
    return result


def _bootstrap(config_path: Path | None) -> Settings:
    settings = load_settings(config_path)
    configure_logging(settings.logging)
    logger.debug("Loaded runtime settings from %s", config_path)
    return settings


def _report_problems(problems: list[tuple[str, str]]) -> None:
    for path, message in problems:
        typer.echo(f"Skipped {path}: {message}", err=True)


def _config_option() -> Path | None:
    return typer.Option(
        None,
        "--config",
        "-c",
        envvar="LTCSYNC_CONFIG",
        help="Path to YAML configuration file.",
    )


@config_app.command("show")
def show_config(config_path: Path | None = _config_option()) -> None:
    """Print resolved runtime configuration."""

    settings = _bootstrap(config_path)
    typer.echo(json.dumps(settings.model_dump(mode="json"), indent=2))


@app.command()
def probe(
    media_path: Path = typer.Argument(..., help="Audio or video file to inspect."),
    config_path: Path | None = _config_option(),
) -> None:
    """Probe one file, decode its LTC and print the timing summary as JSON."""

    settings = _bootstrap(config_path)
    try:
        media_file = probe_file(media_path, settings)
    except (RuntimeError, ValueError) as exc:
        logger.error("Probe failed: %s", exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(json.dumps(media_file.to_dict(), indent=2))


@app.command()
def scan(
    media_paths: list[Path] = typer.Argument(..., help="Audio and video files to group."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Export grouping to .json or .csv."),
    export: bool = typer.Option(
        False,
        "--export",
        help="Write session.json and session.csv into the configured pipeline.output_dir.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print grouping rows as JSON instead of a table."),
    config_path: Path | None = _config_option(),
) -> None:
    """Group files into sessions of temporally overlapping recordings."""

    settings = _bootstrap(config_path)
    session = _build(media_paths, settings, total_steps=2 if output or export else 1)

    def _export() -> list[Path]:
        exported = [export_session(session, output)] if output else []
        if export:
            exported.extend(export_session_outputs(session, settings.pipeline.output_dir).values())
        return exported

    if output or export:
        for path in _run_with_progress(2, 2, "Export grouping", _export):
            logger.info("Exported grouping to %s", path)

    if as_json:
        typer.echo(json.dumps(session_rows(session), indent=2))
    else:
        typer.echo(render_session_table(session), nl=False)


@app.command()
def pad(
    media_paths: list[Path] = typer.Argument(..., help="Audio and video files to group and pad."),
    config_path: Path | None = _config_option(),
) -> None:
    """Write padding files so every file lines up with the start of its group."""

    settings = _bootstrap(config_path)
    session = _build(media_paths, settings, total_steps=2)
    written, failures = _run_with_progress(
        2,
        2,
        "Write padding files",
        lambda: generate_padding_files(session, ffmpeg_binary=settings.tools.ffmpeg),
    )
    _report_problems(failures)
    typer.echo(json.dumps({"padding_files": [str(path) for path in written]}, indent=2))
    if failures:
        raise typer.Exit(code=1)


def _build(media_paths: list[Path], settings: Settings, total_steps: int) -> EditingSession:
    try:
        session, problems = _run_with_progress(
            1,
            total_steps,
            f"Probe {len(media_paths)} file(s)",
            lambda: build_session(media_paths, settings),
        )
    except (RuntimeError, ValueError) as exc:
        logger.error("Scan failed: %s", exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    _report_problems(problems)
    return session


if __name__ == "__main__":
    app()
