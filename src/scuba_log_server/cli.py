"""CLI entry point for scuba-log-server."""

import asyncio
from pathlib import Path

import typer
import uvicorn

from scuba_log_server import __version__
from scuba_log_server.core.config import settings
from scuba_log_server.core.logging import configure_logging
from scuba_log_server.interchange.errors import ContentFormatError, FileAccessError
from scuba_log_server.interchange.units import UnitSystem
from scuba_log_server.services.interchange import (
    ImportPreview,
    ImportResult,
    InterchangeFormat,
    InterchangeService,
)

app = typer.Typer(
    name="scuba-log",
    help="Dive log import and export (CSV and UDDF)",
    no_args_is_help=True,
)


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind to (overrides config)"),
    port: int = typer.Option(None, help="Port to bind to (overrides config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the API server.

    Example:
        scuba-log serve
        scuba-log serve --host 0.0.0.0 --port 8080 --reload
    """
    uvicorn.run(
        "scuba_log_server.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"scuba-log-server v{__version__}")


@app.command("init-db")
def init_db() -> None:
    """Create the dive table if it does not exist."""
    from scuba_log_server.core.database import close_database, init_database

    async def run() -> None:
        try:
            await init_database()
        finally:
            await close_database()

    asyncio.run(run())
    typer.echo("Database ready")


def _confirm_renames(preview: ImportPreview) -> bool:
    typer.echo(preview.summary())
    for rename in preview.renames:
        typer.echo(f"  {rename.original!r} -> {rename.renamed!r}")
    return typer.confirm("Import with renamed titles?", default=False)


@app.command("import")
def import_file(
    path: Path = typer.Argument(..., help="CSV, UDDF or XML file to import"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Rename duplicate titles without asking"),
) -> None:
    """Import dives from a file.

    The file is previewed first; when titles collide the prompt runs with no
    database work in flight, then the import is committed in a new session.

    Example:
        scuba-log import ScubaLog_Export_2025-07-15.csv
    """
    configure_logging(json_output=False)
    from scuba_log_server.core.database import close_database, get_session, init_database
    from scuba_log_server.services.repository import SqlDiveRepository

    async def load() -> ImportPreview:
        try:
            await init_database()
            async with get_session() as session:
                service = InterchangeService(SqlDiveRepository(session))
                return await service.preview_file(path, max_bytes=settings.max_import_bytes)
        finally:
            await close_database()

    async def commit(preview: ImportPreview) -> ImportResult:
        try:
            async with get_session() as session:
                service = InterchangeService(SqlDiveRepository(session))
                return await service.commit_import(preview)
        finally:
            await close_database()

    try:
        preview = asyncio.run(load())
    except FileAccessError as exc:
        typer.echo(f"Failed to read file: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except ContentFormatError as exc:
        typer.echo(f"Import error: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    if preview.has_conflicts and not yes and not _confirm_renames(preview):
        typer.echo("Import cancelled")
        return

    result = asyncio.run(commit(preview))
    plural = "" if result.imported == 1 else "s"
    typer.echo(f"{result.imported} dive{plural} imported successfully.")


@app.command("export")
def export_file(
    fmt: InterchangeFormat = typer.Option(
        InterchangeFormat.CSV, "--format", "-f", help="Output format"
    ),
    units: UnitSystem = typer.Option(None, "--units", "-u", help="CSV unit system"),
    output: Path = typer.Option(None, "--output", "-o", help="Directory to write to"),
) -> None:
    """Export every dive to a file named ScubaLog_Export_<date>.<ext>.

    Example:
        scuba-log export --format uddf --output ~/Desktop
    """
    configure_logging(json_output=False)
    from scuba_log_server.core.database import close_database, get_session, init_database
    from scuba_log_server.services.repository import SqlDiveRepository

    async def run() -> Path:
        try:
            await init_database()
            async with get_session() as session:
                service = InterchangeService(SqlDiveRepository(session))
                return await service.export_to_directory(
                    output or settings.export_directory,
                    fmt,
                    units or settings.default_unit_system,
                )
        finally:
            await close_database()

    try:
        target = asyncio.run(run())
    except FileAccessError as exc:
        typer.echo(f"Failed to write export: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Exported to {target}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
