"""Main CLI application entry point."""

import base64
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table

from .. import config
from ..storage.drawing_store import (
    CONTENT_SUFFIX,
    Drawing,
    DrawingNotFoundError,
    DrawingStore,
    DrawingStoreError,
)
from .utils.formatting import create_metadata_panel, format_file_size, format_timestamp, truncate_text

# Create Typer app
app = typer.Typer(help="Manage locally stored excaliapp drawings.")
console = Console()

# Get logger
logger = logging.getLogger(__name__)


def _store(ctx: typer.Context) -> DrawingStore:
    """Build the store on first use so --help never touches the disk."""
    if ctx.obj.get("store") is None:
        try:
            ctx.obj["store"] = config.get_drawing_store(ctx.obj["settings"])
        except DrawingStoreError as e:
            _fail(ctx, e)
    return ctx.obj["store"]


def _fail(ctx: typer.Context, error: Exception) -> NoReturn:
    """Report a store error and exit with status 1."""
    logger.debug(f"Command failed: {type(error).__name__}: {error}")
    console.print(f"[red]Error: {escape(str(error))}")
    if ctx.obj.get("debug"):
        console.print_exception()
    raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None,
        help="Storage directory (overrides EXCALIAPP_DATA_DIR and the platform default)"
    ),
    skip_invalid: bool = typer.Option(
        False,
        help="Skip malformed metadata files when listing instead of failing"
    ),
    debug: bool = typer.Option(
        False,
        help="Enable debug output"
    ),
):
    """Manage locally stored excaliapp drawings."""
    settings = config.settings
    updates = {}
    if data_dir:
        updates["data_dir"] = data_dir
    if skip_invalid:
        updates["skip_invalid_metadata"] = True
    if updates:
        settings = settings.model_copy(update=updates)

    settings.setup_logging(debug=debug)

    ctx.obj = {"debug": debug, "settings": settings, "store": None}


@app.command("list")
def list_drawings(ctx: typer.Context):
    """List stored drawings."""
    try:
        drawings = _store(ctx).list_files()
    except DrawingStoreError as e:
        _fail(ctx, e)

    if not drawings:
        console.print("No drawings in storage")
        return

    table = Table(title=f"Drawings ({len(drawings)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="blue")
    table.add_column("Owner", style="yellow")
    table.add_column("Public", style="green")
    table.add_column("Created", style="magenta")
    table.add_column("Updated", style="magenta")

    for drawing in drawings:
        table.add_row(
            escape(drawing.id),
            escape(truncate_text(drawing.name, 40)),
            escape(drawing.user_id),
            "yes" if drawing.is_public else "no",
            format_timestamp(drawing.created_at),
            format_timestamp(drawing.updated_at),
        )

    console.print(table)


@app.command()
def show(
    ctx: typer.Context,
    drawing_id: str = typer.Argument(..., help="Drawing ID"),
    content: bool = typer.Option(False, "--content", help="Print the drawing content"),
):
    """Show a drawing's metadata."""
    try:
        drawing = _store(ctx).get_file(drawing_id)
    except DrawingStoreError as e:
        _fail(ctx, e)

    if content:
        typer.echo(drawing.content.encode("utf-8", errors="surrogateescape"))
        return

    console.print(create_metadata_panel(
        {
            "id": drawing.id,
            "owner": drawing.user_id,
            "public": drawing.is_public,
            "created": drawing.created_at,
            "updated": drawing.updated_at,
            "thumbnail": drawing.has_thumbnail,
            "size": format_file_size(len(drawing.content.encode("utf-8", errors="surrogateescape"))),
            "storage": drawing.location.value if drawing.location else None,
        },
        title=drawing.name,
    ))


@app.command()
def save(
    ctx: typer.Context,
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True,
                                  help="File holding the serialized drawing"),
    drawing_id: Optional[str] = typer.Option(None, "--id", help="Drawing ID (new ID if omitted)"),
    name: Optional[str] = typer.Option(None, help="Drawing name (defaults to the file name)"),
    user: str = typer.Option("", help="Owner identifier"),
    public: bool = typer.Option(False, "--public/--private", help="Visibility flag"),
    thumbnail: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, readable=True,
                                             help="Preview image to store with the metadata"),
):
    """Create or update a drawing from a file."""
    try:
        data = source.read_bytes().decode("utf-8", errors="surrogateescape")
        encoded_thumbnail = base64.b64encode(thumbnail.read_bytes()).decode("ascii") if thumbnail else ""
    except OSError as e:
        _fail(ctx, e)

    try:
        drawing = Drawing(
            id=drawing_id or "",
            user_id=user,
            name=name or source.stem,
            content=data,
            thumbnail=encoded_thumbnail,
            is_public=public,
        )
        saved = _store(ctx).save_file(drawing)
    except (DrawingStoreError, ValueError) as e:
        _fail(ctx, e)

    console.print(f"[green]Saved drawing {escape(saved.id)}")


@app.command()
def export(
    ctx: typer.Context,
    drawing_id: str = typer.Argument(..., help="Drawing ID"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Destination file (stdout if omitted)"),
):
    """Write a drawing's content to a file."""
    try:
        drawing = _store(ctx).get_file(drawing_id)
    except DrawingStoreError as e:
        _fail(ctx, e)

    if output is None:
        typer.echo(drawing.content.encode("utf-8", errors="surrogateescape"))
        return

    try:
        output.write_bytes(drawing.content.encode("utf-8", errors="surrogateescape"))
    except OSError as e:
        _fail(ctx, e)
    console.print(f"[green]Exported {escape(drawing.id)} to {escape(str(output))}")


@app.command()
def delete(
    ctx: typer.Context,
    drawing_id: str = typer.Argument(..., help="Drawing ID"),
    force: bool = typer.Option(False, "--force", help="Do not ask for confirmation"),
):
    """Delete a drawing permanently."""
    store = _store(ctx)
    if not force:
        try:
            name = store.get_file(drawing_id).name
        except DrawingNotFoundError:
            # Incomplete pairs can still be removed
            name = drawing_id
        except DrawingStoreError as e:
            _fail(ctx, e)
        if not Confirm.ask(f"Delete drawing {escape(drawing_id)}: {escape(name)}?"):
            console.print("[yellow]Operation cancelled")
            return

    try:
        store.delete_file(drawing_id)
    except DrawingNotFoundError as e:
        if not (e.path and e.path.name.endswith(CONTENT_SUFFIX)):
            _fail(ctx, e)
        console.print(f"[yellow]Deleted drawing {escape(drawing_id)}, its content file was already missing")
        return
    except DrawingStoreError as e:
        _fail(ctx, e)
    console.print(f"[green]Deleted drawing {escape(drawing_id)}")


@app.command()
def duplicate(
    ctx: typer.Context,
    drawing_id: str = typer.Argument(..., help="Drawing ID"),
    name: Optional[str] = typer.Option(None, help="Name for the copy"),
):
    """Copy a drawing under a new ID."""
    try:
        copy = _store(ctx).duplicate_file(drawing_id, name)
    except DrawingStoreError as e:
        _fail(ctx, e)
    console.print(f"[green]Created {escape(copy.name)} as {escape(copy.id)}")


@app.command()
def where(ctx: typer.Context):
    """Print the storage directory."""
    typer.echo(str(_store(ctx).root))


if __name__ == "__main__":
    app()
