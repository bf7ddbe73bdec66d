"""
memoscribe.cli - Typer CLI entry point.

Provides the memoscribe subcommands.
"""

from __future__ import annotations

import asyncio
import shutil
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from memoscribe import __version__
from memoscribe.config import (
    CONFIG_FILENAME,
    MemoConfig,
    create_default_config,
    find_vault_dir,
    load_config,
    write_config,
)
from memoscribe.exceptions import ConfigError, MemoscribeError
from memoscribe.logging import configure_logging
from memoscribe.utils import format_bytes, format_duration, generate_file_name

app = typer.Typer(
    name="memoscribe",
    help="Voice memo to Markdown notes.\n\n"
    "Transcribes recordings with a Whisper-compatible service and streams "
    "LLM-generated notes into your Markdown files.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"memoscribe {__version__}")
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
    """memoscribe - Voice memo to Markdown notes."""
    configure_logging(verbose)


def _load_vault(start: Path | None = None) -> tuple[Path, MemoConfig]:
    vault_dir = find_vault_dir(start)
    if not vault_dir:
        console.print(f"[red]Error: No {CONFIG_FILENAME} found[/red]")
        console.print("[dim]Run 'memoscribe init' in your notes directory first[/dim]")
        raise typer.Exit(1)
    try:
        return vault_dir, load_config(vault_dir)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _create_session(config: MemoConfig):
    from memoscribe.llm.client import create_client_from_config
    from memoscribe.session import MemoSession
    from memoscribe.transcribe.backend import LiteLLMTranscriber

    return MemoSession(
        config=config,
        transcriber=LiteLLMTranscriber(api_key=config.api_key),
        generator=create_client_from_config(config),
        on_progress=lambda message: console.print(f"[dim]  {message}...[/dim]"),
    )


@app.command("init")
def init_vault(
    path: str = typer.Option(".", "--path", "-d", help="Notes directory"),
    api_key: str | None = typer.Option(None, "--api-key", "-k", help="OpenAI API key"),
    model: str | None = typer.Option(None, "--model", "-m", help="Note generation model"),
) -> None:
    """Create a memoscribe.yaml with default settings."""
    vault_dir = Path(path)
    config_path = vault_dir / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[red]Error: '{config_path}' already exists[/red]")
        raise typer.Exit(1)

    try:
        config = create_default_config(api_key=api_key, model=model)
        MemoConfig(**config)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    write_config(config, config_path)
    console.print(f"[green]✓[/green] Created {config_path}")
    if not api_key:
        console.print(f"[dim]  Set api_key in {CONFIG_FILENAME} before transcribing[/dim]")


@app.command("transcribe")
def transcribe_note(
    note: Path = typer.Argument(..., help="Markdown note containing an audio link"),
    line: int | None = typer.Option(
        None, "--line", "-l", help="Cursor line (defaults to the end of the note)"
    ),
) -> None:
    """Transcribe the last audio file linked in a note and write notes below it."""
    from memoscribe.notes.buffer import NoteFile
    from memoscribe.notes.links import find_audio_link, resolve_audio_path

    if not note.is_file():
        console.print(f"[red]Error: Note not found: {note}[/red]")
        raise typer.Exit(1)

    vault_dir, config = _load_vault(note.resolve().parent)
    buffer = NoteFile(note, write_through=True)
    cursor = buffer.last_line() if line is None else max(0, min(line, buffer.last_line()))

    try:
        link = find_audio_link("\n".join(buffer.lines[: cursor + 1]))
        audio_path = resolve_audio_path(link, vault_dir)
        console.print(f"[cyan]Transcribing {audio_path.name}...[/cyan]")

        session = _create_session(config)
        asyncio.run(
            session.process_audio(
                audio_path.read_bytes(),
                audio_path.suffix.lstrip("."),
                buffer,
                cursor,
            )
        )
    except MemoscribeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        buffer.save()

    console.print(f"[green]✓[/green] Notes written to {note}")


@app.command("memo")
def add_memo(
    audio: Path = typer.Argument(..., help="Recorded audio file"),
    note: Path | None = typer.Option(
        None, "--note", "-n", help="Note to append to (a new note is created if omitted)"
    ),
    transcribe: bool = typer.Option(
        True, "--transcribe/--no-transcribe", help="Transcribe and generate notes"
    ),
) -> None:
    """Store a recording in the vault, link it from a note and generate notes."""
    from memoscribe.notes.buffer import NoteFile
    from memoscribe.notes.links import insert_link

    if not audio.is_file():
        console.print(f"[red]Error: Audio file not found: {audio}[/red]")
        raise typer.Exit(1)

    vault_dir, config = _load_vault()
    recordings_dir = vault_dir / config.recording_file_path
    recordings_dir.mkdir(parents=True, exist_ok=True)

    stored = recordings_dir / generate_file_name("recording", audio.suffix or ".wav")
    shutil.copyfile(audio, stored)
    relative = stored.relative_to(vault_dir).as_posix()

    if note is None:
        stamp = int(datetime.now().timestamp() * 1000)
        note = recordings_dir / f"New Recording {stamp}.md"
        console.print(f"[dim]  Created {note.relative_to(vault_dir).as_posix()}[/dim]")

    buffer = NoteFile(note, write_through=True)
    cursor = buffer.last_line()
    # the recording is only discarded after a transcript was generated
    if config.keep_audio or not transcribe:
        insert_link(buffer, cursor, relative)

    try:
        if transcribe:
            session = _create_session(config)
            asyncio.run(
                session.process_audio(stored.read_bytes(), stored.suffix.lstrip("."), buffer, cursor)
            )
            if not config.keep_audio:
                stored.unlink(missing_ok=True)
    except MemoscribeError as e:
        console.print(f"[red]Error: {e}[/red]")
        if not config.keep_audio:
            console.print(f"[dim]  Recording kept at {relative}[/dim]")
        raise typer.Exit(1)
    finally:
        buffer.save()

    console.print(f"[green]✓[/green] Memo saved to {note}")


@app.command("inspect")
def inspect_audio(
    audio: Path = typer.Argument(..., help="Audio file to inspect"),
) -> None:
    """Show how a recording will be split and encoded for transcription."""
    from memoscribe.audio.chunker import split_signal
    from memoscribe.audio.decode import decode_audio
    from memoscribe.audio.resample import resample
    from memoscribe.audio.wav import encoded_size

    if not audio.is_file():
        console.print(f"[red]Error: Audio file not found: {audio}[/red]")
        raise typer.Exit(1)

    vault_dir = find_vault_dir()

    try:
        config = load_config(vault_dir) if vault_dir else MemoConfig()
        signal = decode_audio(audio.read_bytes(), audio.suffix.lstrip("."))
        console.print(
            f"[dim]  {signal.channels} channel(s), {signal.sample_rate} Hz, "
            f"{format_duration(signal.duration)}[/dim]"
        )
        signal = resample(signal, config.target_sample_rate)
    except MemoscribeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    chunks = split_signal(signal, config.chunk_duration_seconds)

    table = Table(title=f"Chunks ({config.target_sample_rate} Hz)")
    table.add_column("Chunk", style="cyan")
    table.add_column("Start", style="green")
    table.add_column("Duration", style="green")
    table.add_column("WAV Size", style="yellow")

    oversized = 0
    for chunk in chunks:
        size = encoded_size(chunk)
        over = size > config.max_chunk_bytes
        oversized += over
        table.add_row(
            str(chunk.index + 1),
            format_duration(chunk.start_frame / chunk.sample_rate),
            format_duration(chunk.signal.duration),
            f"[red]{format_bytes(size)}[/red]" if over else format_bytes(size),
        )

    console.print(table)

    if oversized:
        console.print(
            f"[red]{oversized} chunk(s) exceed {config.max_chunk_mb:.0f} MB; "
            "lower chunk_duration_seconds[/red]"
        )
        raise typer.Exit(1)
