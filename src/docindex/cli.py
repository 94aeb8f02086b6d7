"""Command line interface for DocIndex."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from docindex.config import AppConfig
from docindex.index.loader import (
    ArtifactError,
    decode_artifact,
    is_valid_binding,
    load_artifact,
    load_bundled,
    validate_records,
)
from docindex.index.writer import write_artifact
from docindex.models import Snapshot
from docindex.web.app import create_app


console = Console()
app = typer.Typer(help="DocIndex - inspect and serve generated documentation search indexes")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _load_snapshot(config: AppConfig) -> Snapshot:
    resolved = config.resolve_artifact_path(Path.cwd())
    try:
        if resolved is None:
            return Snapshot(index=load_bundled(strict=config.strict))
        return load_artifact(resolved, strict=config.strict)
    except ArtifactError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def show(
    artifact: Optional[Path] = typer.Argument(None, help="Artifact file (defaults to the bundled index)"),
    limit: int = typer.Option(0, help="Show at most this many records (0 for all)"),
    lenient: bool = typer.Option(False, "--lenient", help="Skip or patch invalid records instead of failing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Print the records of an artifact in their original order."""
    _setup_logging(verbose)
    snapshot = _load_snapshot(AppConfig(artifact_path=artifact, strict=not lenient))
    index = snapshot.index
    if not index:
        console.print("[yellow]Artifact contains no documents.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Link")

    shown = index[:limit] if limit > 0 else index
    for record in shown:
        table.add_row(str(record.id), record.title, record.link)

    console.print(table)
    if len(shown) < len(index):
        console.print(f"Showing {len(shown)} of {len(index)} documents.")


@app.command()
def validate(
    artifact: Path = typer.Argument(..., help="Artifact file to check", exists=True, dir_okay=False),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Check an artifact against the record invariants."""
    _setup_logging(verbose)
    try:
        text = artifact.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"[red]Unable to read artifact {artifact}: {exc}[/red]")
        raise typer.Exit(code=1)

    try:
        items = decode_artifact(text)
    except ArtifactError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    issues = validate_records(items)
    if not issues:
        console.print(f"[green]OK[/green]: {len(items)} documents, no issues.")
        return

    for issue in issues:
        console.print(f"[red]{issue}[/red]")
    console.print(f"{len(issues)} issue(s) in {len(items)} documents.")
    raise typer.Exit(code=1)


@app.command()
def info(
    artifact: Optional[Path] = typer.Argument(None, help="Artifact file (defaults to the bundled index)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Summarize an artifact: record count and file fingerprint."""
    _setup_logging(verbose)
    snapshot = _load_snapshot(AppConfig(artifact_path=artifact))
    metadata = snapshot.metadata

    console.print(f"Documents: {len(snapshot.index)}")
    if metadata is None:
        console.print("Source: bundled SignServer manual index")
        return
    console.print(f"Source: {metadata.path}")
    console.print(f"Size: {metadata.size} bytes")
    console.print(f"SHA256: {metadata.sha256}")


@app.command()
def export(
    artifact: Path = typer.Argument(..., help="Artifact file to read"),
    output: Path = typer.Argument(..., help="Destination file, replaced as a whole"),
    fmt: str = typer.Option("js", "--format", help="Output format: js or json"),
    binding: str = typer.Option(AppConfig().binding, help="Global name assigned in js output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Re-serialize an artifact as a script or as plain JSON."""
    _setup_logging(verbose)
    fmt = fmt.lower()
    if fmt not in {"js", "json"}:
        raise typer.BadParameter(f"Unknown format: {fmt}")
    if fmt == "js" and not is_valid_binding(binding):
        raise typer.BadParameter(f"Invalid binding name: {binding!r}")

    snapshot = _load_snapshot(AppConfig(artifact_path=artifact))
    metadata = write_artifact(snapshot.index, output, binding=binding if fmt == "js" else None)
    console.print(
        f"Wrote {len(snapshot.index)} documents to [bold]{metadata.path}[/bold] "
        f"({metadata.size} bytes)"
    )


@app.command()
def dump(
    artifact: Optional[Path] = typer.Argument(None, help="Artifact file (defaults to the bundled index)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Print the records as indented JSON."""
    _setup_logging(verbose)
    snapshot = _load_snapshot(AppConfig(artifact_path=artifact))
    typer.echo(json.dumps(snapshot.index.to_dicts(), indent=2, ensure_ascii=False))


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    artifact: Optional[Path] = typer.Option(None, "--artifact", help="Artifact file to serve"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Start the web interface."""
    _setup_logging(verbose)
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    config = AppConfig(artifact_path=artifact)
    snapshot = _load_snapshot(config)
    source = snapshot.metadata.path if snapshot.metadata else "bundled index"

    console.print(
        f"Starting web interface on http://{host}:{port} "
        f"({len(snapshot.index)} documents from {source})"
    )
    uvicorn.run(
        create_app(snapshot, config),
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":  # pragma: no cover
    app()
