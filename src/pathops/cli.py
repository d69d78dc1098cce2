"""CLI commands using Typer."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from pathops.context import OpsContext

import typer
from rich.console import Console
from rich.logging import RichHandler

from pathops import __version__
from pathops.context import create_context
from pathops.copy_engine import copy
from pathops.errors import PathOpsError
from pathops.move_engine import move
from pathops.options import CopyOptions, GlobOptions, MoveOptions, RemoveOptions, WriteOptions
from pathops.primitives import empty_dir, exists, output_file, remove_async

app = typer.Typer(
    name="pathops",
    help="Recursive copy, move and removal with symlink-aware safety checks",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"pathops v{__version__}")
        raise typer.Exit()


def verbose_callback(value: bool) -> None:
    """Send debug logging to the terminal."""
    if value:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", callback=verbose_callback, help="Log every step"),
    ] = False,
) -> None:
    """Recursive copy, move and removal with symlink-aware safety checks."""
    pass


def _show_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def _show_error(message: str) -> None:
    err_console.print(f"[red]✗[/red] {message}")


def _fail(error: Exception) -> typer.Exit:
    _show_error(str(error))
    return typer.Exit(1)


# ============================================================================
# Transfer Commands
# ============================================================================


@app.command("copy")
def copy_command(
    src: Annotated[str, typer.Argument(help="Source path")],
    dest: Annotated[str, typer.Argument(help="Destination path")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing files")
    ] = False,
    error_on_exist: Annotated[
        bool, typer.Option("--error-on-exist", help="Fail if a destination file exists")
    ] = False,
    dereference: Annotated[
        bool, typer.Option("--dereference", "-L", help="Follow symlinks in the source")
    ] = False,
    preserve_timestamps: Annotated[
        bool, typer.Option("--preserve-timestamps", "-p", help="Keep access/modify times")
    ] = False,
    verbatim_symlinks: Annotated[
        bool, typer.Option("--verbatim-symlinks", help="Keep relative link targets as-is")
    ] = False,
    recursive: Annotated[
        bool, typer.Option("--recursive/--no-recursive", help="Descend into directories")
    ] = True,
    _context=None,
) -> None:
    """Copy a file, link or directory tree."""
    ctx: OpsContext = _context or create_context()
    options = CopyOptions(
        recursive=recursive,
        force=force,
        error_on_exist=error_on_exist,
        dereference=dereference,
        preserve_timestamps=preserve_timestamps,
        verbatim_symlinks=verbatim_symlinks,
    )

    try:
        copy(src, dest, options, fs=ctx.filesystem)
    except (PathOpsError, OSError) as e:
        raise _fail(e) from e
    _show_success(f"Copied '{src}' to '{dest}'")


@app.command("move")
def move_command(
    src: Annotated[str, typer.Argument(help="Source path")],
    dest: Annotated[str, typer.Argument(help="Destination path")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Replace an existing destination")
    ] = False,
    _context=None,
) -> None:
    """Move a file, link or directory tree."""
    ctx: OpsContext = _context or create_context()

    try:
        move(src, dest, MoveOptions(force=force), fs=ctx.filesystem)
    except (PathOpsError, OSError) as e:
        raise _fail(e) from e
    _show_success(f"Moved '{src}' to '{dest}'")


# ============================================================================
# Primitive Commands
# ============================================================================


@app.command("remove")
def remove_command(
    paths: Annotated[list[str], typer.Argument(help="Paths or glob patterns")],
    glob: Annotated[
        bool, typer.Option("--glob", "-g", help="Treat paths as glob patterns")
    ] = False,
    dot: Annotated[
        bool, typer.Option("--dot", help="Let glob wildcards match dot-files")
    ] = False,
    force: Annotated[
        bool, typer.Option("--force/--no-force", help="Ignore missing paths")
    ] = True,
    _context=None,
) -> None:
    """Remove files or directory trees."""
    ctx: OpsContext = _context or create_context()
    options = RemoveOptions(force=force, glob=GlobOptions(dot=dot) if glob else False)

    try:
        asyncio.run(remove_async(paths, options, fs=ctx.async_filesystem))
    except (PathOpsError, OSError) as e:
        raise _fail(e) from e
    _show_success(f"Removed {len(paths)} path(s)" if not glob else "Removed glob matches")


@app.command("empty-dir")
def empty_dir_command(
    directory: Annotated[str, typer.Argument(help="Directory to empty or create")],
    _context=None,
) -> None:
    """Empty a directory, creating it if needed."""
    ctx: OpsContext = _context or create_context()

    try:
        empty_dir(directory, fs=ctx.filesystem)
    except (PathOpsError, OSError) as e:
        raise _fail(e) from e
    _show_success(f"Emptied '{directory}'")


@app.command("output-file")
def output_file_command(
    path: Annotated[str, typer.Argument(help="File to write")],
    content: Annotated[str, typer.Argument(help="Text to write")],
    encoding: Annotated[
        str, typer.Option("--encoding", "-e", help="Text encoding")
    ] = "utf-8",
    _context=None,
) -> None:
    """Write text to a file, creating parent directories."""
    ctx: OpsContext = _context or create_context()

    try:
        output_file(path, content, WriteOptions(encoding=encoding), fs=ctx.filesystem)
    except OSError as e:
        raise _fail(e) from e
    _show_success(f"Wrote '{path}'")


@app.command("exists")
def exists_command(
    path: Annotated[str, typer.Argument(help="Path to check")],
    _context=None,
) -> None:
    """Exit with 0 if the path exists, 1 otherwise."""
    ctx: OpsContext = _context or create_context()

    try:
        found = exists(path, fs=ctx.filesystem)
    except OSError as e:
        raise _fail(e) from e
    if not found:
        console.print(f"[yellow]'{path}' does not exist[/yellow]")
        raise typer.Exit(1)
    console.print(f"'{path}' exists")


if __name__ == "__main__":
    app()
