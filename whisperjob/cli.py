"""
whisperjob.cli - Typer CLI entry point.

Runs single transcription jobs locally, converts between transcript
formats, and checks the engine setup.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from whisperjob import __version__
from whisperjob.config import CONFIG_FILENAME, create_default_config, load_config, write_config
from whisperjob.engine.command import AUTO_DETECT, LANGUAGES, PlatformCapabilities, resolve_engine_binary
from whisperjob.engine.events import LanguageDetected, Progress, TranscriptEvent
from whisperjob.exceptions import ConfigError, DependencyError, FormatError, ValidationError
from whisperjob.io import read_text, write_text
from whisperjob.jobs.processor import Job, JobProcessor
from whisperjob.jobs.uploads import save_record_file
from whisperjob.logging import configure_logging
from whisperjob.transcript.formats import format_from_suffix, parse, render
from whisperjob.transcript.models import OutputFormat
from whisperjob.validation import (
    check_disk_space,
    check_engine,
    check_ffmpeg,
    check_model,
    validate_media_file,
)

app = typer.Typer(
    name="whisperjob",
    help="Queue-driven whisper.cpp transcription.\n\n"
    "Transcodes recordings, runs whisper.cpp and exports WebVTT, SRT, LRC "
    "or plain text transcripts.",
    add_completion=False,
)
console = Console()

# Free space wanted in the records directory for an upload and its WAV.
MIN_FREE_MB = 500


def version_callback(value: bool) -> None:
    if value:
        console.print(f"whisperjob {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """whisperjob - queue-driven whisper.cpp transcription."""
    configure_logging(verbose)


def _print_event(event: TranscriptEvent) -> None:
    if isinstance(event, Progress):
        for seg in event.segments:
            console.print(f"[dim]{seg.start} → {seg.end}[/dim] {escape(seg.content)}")
    elif isinstance(event, LanguageDetected):
        console.print(f"[cyan]Detected language: {escape(event.code)}[/cyan]")


def _parse_formats(formats: list[str]) -> list[OutputFormat]:
    try:
        return [OutputFormat(fmt.lower()) for fmt in formats]
    except ValueError:
        valid = ", ".join(fmt.value for fmt in OutputFormat)
        console.print(f"[red]Error: --format must be one of: {valid}[/red]")
        raise typer.Exit(1)


@app.command("transcribe")
def transcribe_cmd(
    media: Path = typer.Argument(..., help="Audio or video file to transcribe"),
    formats: list[str] = typer.Option(
        ["vtt"], "--format", "-f", help="Output format: vtt, srt, lrc or txt (repeatable)"
    ),
    output_dir: Path = typer.Option(Path("."), "--output-dir", "-o", help="Where to write transcripts"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Language code"),
    prompt: Optional[str] = typer.Option(None, "--prompt", help="Initial prompt for the engine"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name (tiny, base, ...)"),
    model_path: Optional[Path] = typer.Option(None, "--model-path", help="Explicit ggml model file"),
    gpu: Optional[bool] = typer.Option(None, "--gpu/--no-gpu", help="Use the GPU build (Windows)"),
    accel: Optional[bool] = typer.Option(None, "--accel/--no-accel", help="Use the Core ML build (macOS)"),
    max_len: Optional[int] = typer.Option(None, "--max-len", help="Maximum segment length in characters"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Kill the engine after N seconds"),
) -> None:
    """Transcribe one file and write transcripts to the output directory."""
    output_formats = _parse_formats(formats)

    try:
        validate_media_file(media)
        config = load_config(
            config_file,
            overrides={
                "language": language,
                "prompt": prompt,
                "model": model,
                "model_path": model_path,
                "gpu_enabled": gpu,
                "accel_enabled": accel,
                "max_segment_length": max_len,
                "engine_timeout_seconds": timeout,
            },
        )
    except (ValidationError, ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    # The job deletes its input when done, so it works on a copy.
    record = save_record_file(config.records_dir, media.name, media.read_bytes())
    job = Job(job_id=record.name, input_path=record)

    processor = JobProcessor(config, PlatformCapabilities.detect(), on_event=_print_event)
    console.print(f"[cyan]Transcribing {media.name}...[/cyan]")
    result = processor.process(job)

    if not result.ok:
        assert result.error is not None
        console.print(f"[red]Error: {result.error.code.value}[/red]")
        if result.error.message:
            console.print(f"[dim]{escape(result.error.message)}[/dim]")
        raise typer.Exit(1)

    segments = result.segments()
    table = Table(title="Transcripts")
    table.add_column("Format", style="cyan")
    table.add_column("File", style="green")
    for fmt in output_formats:
        out_path = output_dir / f"{media.stem}.{fmt.value}"
        write_text(out_path, render(segments, fmt))
        table.add_row(fmt.value, str(out_path))
    console.print(table)
    console.print(f"\n[green]✓[/green] {len(segments)} segment(s)")


@app.command("convert")
def convert_cmd(
    source: Path = typer.Argument(..., help="WebVTT or SRT file"),
    to: str = typer.Option(..., "--to", "-t", help="Target format: vtt, srt, lrc or txt"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file"),
) -> None:
    """Convert a transcript between formats."""
    target = _parse_formats([to])[0]
    if not source.exists():
        console.print(f"[red]Error: File not found: {source}[/red]")
        raise typer.Exit(1)

    try:
        segments = parse(read_text(source), format_from_suffix(source.suffix))
    except FormatError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    out_path = output or source.with_suffix(f".{target.value}")
    write_text(out_path, render(segments, target))
    console.print(f"[green]✓[/green] Wrote {len(segments)} segment(s) to {out_path}")


@app.command("languages")
def languages_cmd() -> None:
    """List supported language codes."""
    table = Table(title="Languages")
    table.add_column("Code", style="cyan")
    table.add_column("Language", style="green")
    table.add_row(AUTO_DETECT, "detect from the audio")
    for code, name in LANGUAGES.items():
        table.add_row(code, name)
    console.print(table)


@app.command("init-config")
def init_config_cmd(
    path: Path = typer.Argument(Path(CONFIG_FILENAME), help="Where to write the config"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a default configuration file."""
    if path.exists() and not force:
        console.print(f"[red]Error: '{path}' already exists[/red]")
        raise typer.Exit(1)
    write_config(create_default_config(), path)
    console.print(f"[green]✓[/green] Wrote {path}")


def _check_records_space(records_dir: Path) -> dict[str, str]:
    try:
        info = check_disk_space(records_dir, MIN_FREE_MB)
    except ValidationError as e:
        raise DependencyError("disk", str(e)) from e
    if not info["sufficient"]:
        raise DependencyError(
            "disk",
            f"Only {info['available_mb']} MB free for {records_dir}",
            f"Free at least {MIN_FREE_MB} MB",
        )
    return {"available": f"{info['available_mb']} MB free"}


@app.command("check")
def check_cmd(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """Check FFmpeg, the engine build, the model and free disk space."""
    try:
        config = load_config(config_file)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    binary = resolve_engine_binary(
        config.engine_root_path(),
        PlatformCapabilities.detect(),
        config.gpu_enabled,
        config.accel_enabled,
    )
    checks = [
        ("FFmpeg", lambda: check_ffmpeg(config.ffmpeg_binary)),
        ("Engine", lambda: check_engine(binary.executable)),
        ("Model", lambda: check_model(config.resolved_model_path)),
        ("Disk", lambda: _check_records_space(config.records_dir)),
    ]

    table = Table(title="Environment")
    table.add_column("Dependency", style="cyan")
    table.add_column("Status", style="yellow")
    failed = 0
    for name, check in checks:
        try:
            info = check()
            table.add_row(name, f"[green]✓ {escape(next(iter(info.values())))}[/green]")
        except DependencyError as e:
            failed += 1
            hint = f" ({e.install_hint})" if e.install_hint else ""
            table.add_row(name, f"[red]{escape(e.message + hint)}[/red]")
    console.print(table)

    if failed:
        raise typer.Exit(1)
