"""Unit tests — window-bridge CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from window_bridge.arrangement import ArrangementResult, Placement, PlacementOutcome
from window_bridge.cli.main import app
from window_bridge.config import Settings, get_settings
from window_bridge.protocol.models import (
    Bounds,
    CpuInfo,
    Display,
    ProcessInfo,
    WindowInfo,
    WindowState,
)

runner = CliRunner()


@pytest.fixture
def mock_manager():
    manager = MagicMock()
    manager.get_window_state = AsyncMock(
        return_value=WindowState(
            windows=[
                WindowInfo(
                    id="Safari-GitHub",
                    app_name="Safari",
                    title="GitHub",
                    bounds=Bounds(x=0, y=23, width=800, height=600),
                    cpu_usage=4.5,
                    memory_usage=310.2,
                ),
                WindowInfo(
                    id="Finder-Docs",
                    app_name="Finder",
                    title="Docs",
                    bounds=Bounds(width=400, height=300),
                    is_minimized=True,
                    is_visible=False,
                ),
            ],
            displays=[Display(id="1", is_primary=True, bounds=Bounds(width=1920, height=1080))],
            active_app="Safari",
        )
    )
    manager.displays.list_displays = AsyncMock(
        return_value=[
            Display(id="1", is_primary=True, bounds=Bounds(width=1920, height=1080)),
            Display(id="2", bounds=Bounds(x=1920, width=2560, height=1440)),
        ]
    )
    manager.execute_action = AsyncMock(return_value=True)
    manager.execute_actions = AsyncMock(return_value=[True, True])
    manager.quit_app = AsyncMock(return_value=True)
    manager.executor.arrange = AsyncMock()

    with patch("window_bridge.config.Settings.load", return_value=Settings()), \
         patch("window_bridge.cli.main.configure_logging"), \
         patch("window_bridge.cli.commands.state.build_manager", return_value=manager), \
         patch("window_bridge.cli.commands.actions.build_manager", return_value=manager):
        yield manager


@pytest.mark.unit
class TestMainApp:
    def test_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])
        assert "Usage" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("state", "displays", "exec", "arrange", "quit"):
            assert command in result.output

    def test_missing_config_file_exits(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--config", str(tmp_path / "nope.yaml"), "displays"])
        assert result.exit_code == 1

    def test_log_options_override_settings(self, mock_manager) -> None:
        with patch("window_bridge.cli.main.configure_logging") as mock_configure:
            result = runner.invoke(app, ["--log-level", "DEBUG", "--log-format", "json", "displays"])
        assert result.exit_code == 0
        assert mock_configure.call_args.kwargs["level"] == "debug"
        assert mock_configure.call_args.kwargs["format"] == "json"
        assert get_settings().logging.level == "debug"

    def test_invalid_log_level_exits(self, mock_manager) -> None:
        result = runner.invoke(app, ["--log-level", "chatty", "displays"])
        assert result.exit_code == 1


@pytest.mark.unit
class TestStateCommands:
    def test_state_table(self, mock_manager) -> None:
        result = runner.invoke(app, ["state"])
        assert result.exit_code == 0
        assert "Active app" in result.output
        assert "Safari" in result.output
        assert "minimized" in result.output

    def test_state_json(self, mock_manager) -> None:
        result = runner.invoke(app, ["state", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["activeApp"] == "Safari"
        assert data["windows"][0]["appName"] == "Safari"
        assert data["windows"][0]["cpuUsage"] == 4.5
        assert data["displays"][0]["isPrimary"] is True

    def test_state_with_cpu_info(self, mock_manager) -> None:
        base = mock_manager.get_window_state.return_value
        mock_manager.get_window_state.return_value = base.model_copy(
            update={
                "cpu_info": CpuInfo(
                    model="Apple M2",
                    cores=8,
                    usage=23.4,
                    processes=[ProcessInfo(pid=9, name="Xcode", cpu_usage=18.0, memory_usage=900.0)],
                )
            }
        )
        result = runner.invoke(app, ["state"])
        assert result.exit_code == 0
        assert "Apple M2, 8 cores, 23.4%" in result.output
        assert "Xcode (18.0%)" in result.output

        result = runner.invoke(app, ["state", "--json"])
        assert json.loads(result.stdout)["cpuInfo"]["processes"][0]["memoryUsage"] == 900.0

    def test_displays(self, mock_manager) -> None:
        result = runner.invoke(app, ["displays"])
        assert result.exit_code == 0
        assert "2560x1440" in result.output


@pytest.mark.unit
class TestExecCommand:
    def test_single_action_from_file(self, mock_manager, tmp_path: Path) -> None:
        action_file = tmp_path / "action.json"
        action_file.write_text(json.dumps({"type": "close", "targetWindow": "Safari-GitHub"}))
        result = runner.invoke(app, ["exec", str(action_file)])
        assert result.exit_code == 0
        mock_manager.execute_action.assert_awaited_once_with(
            {"type": "close", "targetWindow": "Safari-GitHub"}
        )
        assert "ok" in result.output

    def test_batch_from_stdin(self, mock_manager) -> None:
        batch = [
            {"type": "focus", "targetWindow": "Safari-GitHub"},
            {"type": "minimize", "targetWindow": "Finder-Docs"},
        ]
        result = runner.invoke(app, ["exec", "-"], input=json.dumps(batch))
        assert result.exit_code == 0
        mock_manager.execute_actions.assert_awaited_once_with(batch)

    def test_batch_failure_exits_nonzero(self, mock_manager) -> None:
        mock_manager.execute_actions.return_value = [True, False]
        batch = [
            {"type": "focus", "targetWindow": "Safari-GitHub"},
            {"type": "minimize", "targetWindow": "Nope"},
            {"type": "close", "targetWindow": "Finder-Docs"},
        ]
        result = runner.invoke(app, ["exec", "-"], input=json.dumps(batch))
        assert result.exit_code == 1
        assert "failed" in result.output
        assert "skipped" in result.output

    def test_single_failure_exits_nonzero(self, mock_manager) -> None:
        mock_manager.execute_action.return_value = False
        result = runner.invoke(app, ["exec", "-"], input='{"type": "close", "targetWindow": "X-y"}')
        assert result.exit_code == 1

    def test_invalid_json(self, mock_manager) -> None:
        result = runner.invoke(app, ["exec", "-"], input="{not json")
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_missing_file(self, mock_manager, tmp_path: Path) -> None:
        result = runner.invoke(app, ["exec", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_scalar_payload_rejected(self, mock_manager) -> None:
        result = runner.invoke(app, ["exec", "-"], input="42")
        assert result.exit_code == 1
        mock_manager.execute_action.assert_not_awaited()


@pytest.mark.unit
class TestArrangeCommand:
    def test_arrange(self, mock_manager) -> None:
        placement = Placement("Safari-GitHub", 0, 23, 960, 1057)
        mock_manager.executor.arrange.return_value = ArrangementResult(
            arrangement="tile-left",
            recognized=True,
            outcomes=[PlacementOutcome(placement, moved=True, resized=True)],
        )
        result = runner.invoke(app, ["arrange", "tile-left", "Safari-GitHub"])
        assert result.exit_code == 0
        mock_manager.executor.arrange.assert_awaited_once_with(["Safari-GitHub"], "tile-left")
        assert "960x1057" in result.output

    def test_unknown_arrangement(self, mock_manager) -> None:
        mock_manager.executor.arrange.return_value = ArrangementResult(
            arrangement="spiral", recognized=False
        )
        result = runner.invoke(app, ["arrange", "spiral", "Safari-GitHub"])
        assert result.exit_code == 1
        assert "Unknown arrangement" in result.output

    def test_partial_failure(self, mock_manager) -> None:
        placement = Placement("Mail-Inbox", 0, 23, 960, 1057)
        mock_manager.executor.arrange.return_value = ArrangementResult(
            arrangement="tile-left",
            recognized=True,
            outcomes=[PlacementOutcome(placement, moved=False, resized=False)],
        )
        result = runner.invoke(app, ["arrange", "tile-left", "Mail-Inbox"])
        assert result.exit_code == 1


@pytest.mark.unit
class TestQuitCommand:
    def test_quit(self, mock_manager) -> None:
        result = runner.invoke(app, ["quit", "Safari"])
        assert result.exit_code == 0
        mock_manager.quit_app.assert_awaited_once_with("Safari")

    def test_quit_failure(self, mock_manager) -> None:
        mock_manager.quit_app.return_value = False
        result = runner.invoke(app, ["quit", "Safari"])
        assert result.exit_code == 1
