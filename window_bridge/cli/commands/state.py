"""CLI — Window and display inspection commands."""

from __future__ import annotations

import asyncio
import json

import typer
from rich.console import Console
from rich.table import Table

from window_bridge.config import get_settings
from window_bridge.manager import build_manager
from window_bridge.protocol.models import Bounds

console = Console()


def _fmt_bounds(bounds: Bounds) -> str:
    return f"{bounds.x:g},{bounds.y:g} {bounds.width:g}x{bounds.height:g}"


def show_state(
    json_output: bool = typer.Option(False, "--json", help="Print the raw WindowState JSON."),
) -> None:
    """Show the current windows, displays and active app."""
    manager = build_manager(get_settings())
    window_state = asyncio.run(manager.get_window_state())

    if json_output:
        typer.echo(json.dumps(window_state.to_wire(), indent=2))
        return

    console.print(f"[bold]Active app:[/bold] {window_state.active_app}")
    cpu = window_state.cpu_info
    if cpu is not None:
        console.print(f"[bold]CPU:[/bold] {cpu.model}, {cpu.cores} cores, {cpu.usage:.1f}%")
        if cpu.processes:
            busiest = ", ".join(f"{p.name} ({p.cpu_usage:.1f}%)" for p in cpu.processes)
            console.print(f"[bold]Busiest:[/bold] {busiest}")

    table = Table(title=f"Windows ({len(window_state.windows)})")
    table.add_column("ID", style="cyan", overflow="fold")
    table.add_column("App")
    table.add_column("Bounds")
    table.add_column("State")
    table.add_column("CPU %", justify="right")
    table.add_column("Mem MB", justify="right")

    for window in window_state.windows:
        flags = []
        if window.is_minimized:
            flags.append("[yellow]minimized[/yellow]")
        if window.is_maximized:
            flags.append("maximized")
        table.add_row(
            window.id,
            window.app_name,
            _fmt_bounds(window.bounds),
            " ".join(flags) or "-",
            "-" if window.cpu_usage is None else f"{window.cpu_usage:.1f}",
            "-" if window.memory_usage is None else f"{window.memory_usage:.1f}",
        )
    console.print(table)


def show_displays() -> None:
    """List attached displays (top-left origin coordinates)."""
    manager = build_manager(get_settings())
    displays = asyncio.run(manager.displays.list_displays())

    table = Table(title="Displays")
    table.add_column("ID", style="cyan")
    table.add_column("Primary")
    table.add_column("Bounds")

    for display in displays:
        table.add_row(
            display.id,
            "[green]yes[/green]" if display.is_primary else "no",
            _fmt_bounds(display.bounds),
        )
    console.print(table)
