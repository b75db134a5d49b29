"""Shared pytest fixtures for the window-bridge test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from window_bridge.bridge.base import (
    AccessibilityBridge,
    DisplayService,
    ProcessWindows,
    RawDisplay,
    RawWindow,
    WindowRef,
)
from window_bridge.config import Settings, override_settings
from window_bridge.displays import DisplayEnumerator
from window_bridge.executor import ActionExecutor
from window_bridge.protocol.constants import CLOSE_BUTTON, MINIMIZE_BUTTON, ZOOM_BUTTON

ALL_CONTROLS = frozenset({MINIMIZE_BUTTON, ZOOM_BUTTON, CLOSE_BUTTON})

# Calls that change window or app state, as recorded by FakeBridge.
WRITE_OPS = frozenset(
    {
        "activate",
        "set_frontmost",
        "set_position",
        "set_size",
        "set_minimized",
        "click_control",
        "keystroke",
        "quit_app",
    }
)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeBridge(AccessibilityBridge):
    """In-memory accessibility bridge.

    ``apps`` maps app name to its windows in accessibility order.  Every call
    is appended to ``calls`` as ``(operation, *args)``.  Set ``failures[op]``
    to an exception to make that operation raise.
    """

    def __init__(self, apps: dict[str, list[RawWindow]] | None = None) -> None:
        self.apps: dict[str, list[RawWindow]] = apps or {}
        self.process_errors: dict[str, str] = {}
        self.hidden_processes: list[str] = []
        self.frontmost = next(iter(self.apps), "Finder")
        self.icons: dict[str, str] = {}
        self.controls: dict[str, frozenset[str]] = {}
        self.failures: dict[str, Exception] = {}
        self.calls: list[tuple] = []

    # -- helpers -------------------------------------------------------------

    def _record(self, op: str, *args: object) -> None:
        self.calls.append((op, *args))
        if op in self.failures:
            raise self.failures[op]

    def _window(self, ref: WindowRef) -> RawWindow:
        return next(w for w in self.apps[ref.app_name] if w.index == ref.index)

    def ops(self) -> list[str]:
        return [call[0] for call in self.calls]

    def writes(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in WRITE_OPS]

    # -- reads ---------------------------------------------------------------

    async def snapshot(self) -> list[ProcessWindows]:
        self._record("snapshot")
        processes = [
            ProcessWindows(app_name=name, windows=list(windows))
            for name, windows in self.apps.items()
        ]
        for name, error in self.process_errors.items():
            processes.append(ProcessWindows(app_name=name, error=error))
        return processes

    async def list_windows(self, app_name: str) -> list[RawWindow]:
        self._record("list_windows", app_name)
        return list(self.apps.get(app_name, []))

    async def list_processes(self) -> list[str]:
        self._record("list_processes")
        return [*self.apps, *self.hidden_processes]

    async def frontmost_app(self) -> str:
        self._record("frontmost_app")
        return self.frontmost

    async def app_icon(self, app_name: str) -> str | None:
        self._record("app_icon", app_name)
        return self.icons.get(app_name)

    # -- writes --------------------------------------------------------------

    async def activate(self, app_name: str) -> None:
        self._record("activate", app_name)
        self.frontmost = app_name

    async def set_frontmost(self, app_name: str) -> None:
        self._record("set_frontmost", app_name)
        self.frontmost = app_name

    async def set_position(self, ref: WindowRef, x: float, y: float) -> None:
        self._record("set_position", ref.app_name, ref.index, x, y)
        window = self._window(ref)
        window.x, window.y = x, y

    async def set_size(self, ref: WindowRef, width: float, height: float) -> None:
        self._record("set_size", ref.app_name, ref.index, width, height)
        window = self._window(ref)
        window.width, window.height = width, height

    async def set_minimized(self, ref: WindowRef, minimized: bool) -> None:
        self._record("set_minimized", ref.app_name, ref.index, minimized)
        self._window(ref).minimized = minimized

    async def click_control(self, ref: WindowRef, subrole: str | None = None) -> bool:
        self._record("click_control", ref.app_name, ref.index, subrole)
        controls = self.controls.get(ref.app_name, ALL_CONTROLS)
        if subrole is None:
            return bool(controls)
        return subrole in controls

    async def keystroke(self, app_name: str, key: str, modifiers: list[str]) -> None:
        self._record("keystroke", app_name, key, tuple(modifiers))

    async def quit_app(self, app_name: str) -> None:
        self._record("quit_app", app_name)


class FakeDisplayService(DisplayService):
    def __init__(self, displays: list[RawDisplay] | None = None) -> None:
        self.displays = displays if displays is not None else [
            RawDisplay(id="1", x=0, y=0, width=1920, height=1080, is_primary=True)
        ]
        self.error: Exception | None = None

    async def list_displays(self) -> list[RawDisplay]:
        if self.error is not None:
            raise self.error
        return list(self.displays)


def window(index: int, title: str = "", x: float = 100, y: float = 100,
           width: float = 800, height: float = 600, minimized: bool = False) -> RawWindow:
    return RawWindow(index=index, title=title, x=x, y=y, width=width, height=height,
                     minimized=minimized)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    settings = Settings(
        logging={"level": "debug", "format": "console", "file": None},
    )
    override_settings(settings)
    return settings


# ---------------------------------------------------------------------------
# Bridge
# ---------------------------------------------------------------------------


@pytest.fixture
def make_window():
    return window


@pytest.fixture
def make_bridge():
    return FakeBridge


@pytest.fixture
def bridge() -> FakeBridge:
    return FakeBridge(
        {
            "Safari": [window(0, "Start Page"), window(1, "GitHub")],
            "Terminal": [window(0, "")],
            "Finder": [window(0, "Downloads", minimized=True)],
        }
    )


@pytest.fixture
def display_service() -> FakeDisplayService:
    return FakeDisplayService()


@pytest.fixture
def displays(display_service: FakeDisplayService) -> DisplayEnumerator:
    return DisplayEnumerator(display_service)


@pytest.fixture
def executor(bridge: FakeBridge, displays: DisplayEnumerator) -> ActionExecutor:
    return ActionExecutor(bridge, displays)
