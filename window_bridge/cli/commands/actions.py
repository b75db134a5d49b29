"""CLI — Window action commands."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from window_bridge.config import get_settings
from window_bridge.manager import build_manager

console = Console()


def _status(ok: bool | None) -> str:
    if ok is None:
        return "[dim]skipped[/dim]"
    return "[green]ok[/green]" if ok else "[red]failed[/red]"


def exec_actions(
    actions_file: Path = typer.Argument(
        help="JSON file holding one action object or an array of actions. Use - for stdin."
    ),
) -> None:
    """Execute window actions. Batches stop at the first failure."""
    if str(actions_file) == "-":
        raw = sys.stdin.read()
        source = "stdin"
    else:
        if not actions_file.exists():
            console.print(f"[red]File not found: {actions_file}[/red]")
            raise typer.Exit(1)
        raw = actions_file.read_text()
        source = str(actions_file)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON from {source}: {exc}[/red]")
        raise typer.Exit(1)

    if isinstance(data, dict):
        batch = [data]
    elif isinstance(data, list):
        batch = data
    else:
        console.print("[red]Expected an action object or an array of actions.[/red]")
        raise typer.Exit(1)

    manager = build_manager(get_settings())
    if isinstance(data, dict):
        results = [asyncio.run(manager.execute_action(data))]
    else:
        results = asyncio.run(manager.execute_actions(batch))

    table = Table(title="Actions")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Target", style="cyan", overflow="fold")
    table.add_column("Result")

    for index, action in enumerate(batch):
        ok = results[index] if index < len(results) else None
        if isinstance(action, dict):
            action_type = str(action.get("type", "?"))
            target = action.get("targetWindow") or action.get("target_window")
            if target is None:
                targets = action.get("targetWindows") or action.get("target_windows") or []
                target = ", ".join(str(t) for t in targets)
        else:
            action_type, target = "?", ""
        table.add_row(str(index), action_type, str(target), _status(ok))
    console.print(table)

    if len(results) < len(batch) or not all(results):
        raise typer.Exit(1)


def arrange_windows(
    arrangement: str = typer.Argument(
        help="tile-left, tile-right, tile-grid, cascade or center."
    ),
    window_ids: list[str] = typer.Argument(help="Window ids in slot order."),
) -> None:
    """Arrange windows on the primary display."""
    manager = build_manager(get_settings())
    result = asyncio.run(manager.executor.arrange(window_ids, arrangement))

    if not result.recognized:
        console.print(f"[red]Unknown arrangement: {arrangement}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Arrangement: {result.arrangement}")
    table.add_column("Window", style="cyan", overflow="fold")
    table.add_column("Position")
    table.add_column("Size")
    table.add_column("Result")

    for outcome in result.outcomes:
        p = outcome.placement
        table.add_row(
            p.window_id,
            f"{p.x:g},{p.y:g}",
            f"{p.width:g}x{p.height:g}",
            _status(outcome.applied),
        )
    console.print(table)

    if not result.all_applied:
        raise typer.Exit(1)


def quit_app(
    app_name: str = typer.Argument(help="Application process name, e.g. Safari."),
) -> None:
    """Quit an application."""
    manager = build_manager(get_settings())
    if asyncio.run(manager.quit_app(app_name)):
        console.print(f"[green]Quit requested:[/green] {app_name}")
    else:
        console.print(f"[red]Could not quit {app_name}[/red]")
        raise typer.Exit(1)
