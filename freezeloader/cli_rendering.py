"""CLI output and error rendering helpers.

This module centralizes user-facing presentation for command diagnostics,
fatal bootstrap errors, and resolved search-path reports.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import BootstrapFatalError
from .models.datatypes import BootstrapContext, ResolvedExecutable

FATAL_DIALOG_TITLE = "freezeloader Fatal Error"


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, BootstrapFatalError):
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


def report_fatal(message: str, gui: bool = False) -> None:
    """Present a fatal bootstrap error on standard error or in a modal dialog."""

    if gui:
        _show_fatal_dialog(message)
        return
    typer.echo(f"Fatal error: {message}", err=True)


def _show_fatal_dialog(message: str) -> None:
    """Show `message` in a modal error dialog."""

    import tkinter
    from tkinter import messagebox

    try:
        root = tkinter.Tk()
    except tkinter.TclError:
        typer.echo(f"Fatal error: {message}", err=True)
        return
    root.withdraw()
    try:
        messagebox.showerror(FATAL_DIALOG_TITLE, message, parent=root)
    finally:
        root.destroy()


def echo_executable(executable: ResolvedExecutable) -> None:
    """Print the resolved executable path and its directory."""

    typer.echo(f"Program: {executable.program}")
    typer.echo(f"Executable: {executable.path or '(not found)'}")
    typer.echo(f"Executable directory: {executable.directory or '(not found)'}")


def echo_bootstrap_context(context: BootstrapContext) -> None:
    """Print strategy, discovery results, archive and every search-path entry."""

    typer.echo(f"Strategy: {context.strategy}")
    echo_executable(context.executable)
    resolution = context.resolution
    if resolution is not None:
        typer.echo(f"Prefix: {resolution.prefix} ({resolution.prefix_outcome.value})")
        typer.echo(
            f"Exec prefix: {resolution.exec_prefix} ({resolution.exec_prefix_outcome.value})"
        )
    typer.echo(f"Archive: {context.archive_path}")
    typer.echo("Search path:")
    for entry in context.search_path.entries:
        typer.echo(f"  {entry}")
    if context.used_static_fallback:
        typer.echo("Static fallback: yes")
