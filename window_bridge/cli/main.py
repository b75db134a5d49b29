"""Window Bridge CLI — Entry point.

Usage:
    window-bridge state [--json]
    window-bridge displays
    window-bridge exec <actions.json>
    window-bridge arrange <arrangement> <window_id>...
    window-bridge quit <app_name>
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from window_bridge.cli.commands import actions, state
from window_bridge.config import LoggingConfig, Settings, override_settings
from window_bridge.exceptions import ConfigError
from window_bridge.logging import configure_logging

app = typer.Typer(
    name="window-bridge",
    help="Window Bridge — enumerate windows and apply layout actions.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

console = Console(stderr=True)

app.command("state")(state.show_state)
app.command("displays")(state.show_displays)
app.command("exec")(actions.exec_actions)
app.command("arrange")(actions.arrange_windows)
app.command("quit")(actions.quit_app)


@app.callback()
def main_callback(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to a YAML config file."),
    log_level: str | None = typer.Option(None, "--log-level", help="Override logging level."),
    log_format: str | None = typer.Option(None, "--log-format", help="console or json."),
) -> None:
    try:
        settings = Settings.load(config)
    except ConfigError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(1)

    overrides: dict[str, str] = {}
    if log_level:
        overrides["level"] = log_level.lower()
    if log_format:
        overrides["format"] = log_format.lower()
    if overrides:
        try:
            logging_config = LoggingConfig.model_validate(
                {**settings.logging.model_dump(), **overrides}
            )
        except ValidationError as exc:
            console.print(f"[red]Invalid logging option: {exc.errors()[0]['msg']}[/red]")
            raise typer.Exit(1)
        settings = settings.model_copy(update={"logging": logging_config})

    configure_logging(
        level=settings.logging.level,
        format=settings.logging.format,
        log_file=settings.logging.file,
    )
    override_settings(settings)


if __name__ == "__main__":
    app()
