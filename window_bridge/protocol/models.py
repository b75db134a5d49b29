"""Window protocol — Canonical data models.

Every record that crosses the planner/UI boundary is defined here and
validated through Pydantic v2.  Attributes are snake_case in Python and
camelCase on the wire (``appName``, ``targetWindow``); both spellings are
accepted on input.  Do not add business logic here — only data shapes and
their invariants.
"""

from __future__ import annotations

import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, object]:
        """Return the JSON-compatible camelCase representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ActionType(str, Enum):
    """Closed set of structural window commands."""

    MOVE = "move"
    RESIZE = "resize"
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"
    RESTORE = "restore"
    FOCUS = "focus"
    ARRANGE = "arrange"
    CLOSE = "close"


class Arrangement(str, Enum):
    """Named multi-window layout patterns."""

    TILE_LEFT = "tile-left"
    TILE_RIGHT = "tile-right"
    TILE_GRID = "tile-grid"
    CASCADE = "cascade"
    CENTER = "center"


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class Position(_WireModel):
    x: float
    y: float


class Size(_WireModel):
    width: float
    height: float


class Bounds(_WireModel):
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains_point(self, px: float, py: float) -> bool:
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height


# ---------------------------------------------------------------------------
# Snapshot records
# ---------------------------------------------------------------------------


class WindowInfo(_WireModel):
    """One enumerated window.  Rebuilt on every enumeration, never cached."""

    id: str = Field(description="Composite identity, see window_bridge.identity.")
    app_name: str
    app_icon: str | None = Field(default=None, description="PNG data URL, when resolved.")
    title: str
    bounds: Bounds
    is_minimized: bool = False
    is_focused: bool = False
    is_visible: bool = True
    is_maximized: bool = False
    cpu_usage: float | None = None
    memory_usage: float | None = Field(default=None, description="Resident memory in MB.")


class Display(_WireModel):
    id: str
    is_primary: bool = False
    bounds: Bounds


class ProcessInfo(_WireModel):
    pid: int
    name: str
    cpu_usage: float = 0.0
    memory_usage: float = Field(default=0.0, description="Resident memory in MB.")


class CpuInfo(_WireModel):
    """Host CPU summary with the busiest processes, highest usage first."""

    model: str = "Unknown"
    cores: int = 1
    usage: float = Field(default=0.0, description="System-wide CPU percent.")
    processes: list[ProcessInfo] = Field(default_factory=list)


class WindowState(_WireModel):
    """Immutable snapshot of the window server at ``timestamp`` (epoch ms)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    windows: list[WindowInfo] = Field(default_factory=list)
    displays: list[Display] = Field(default_factory=list)
    active_app: str = "Unknown"
    cpu_info: CpuInfo | None = None
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


class ActionParameters(_WireModel):
    position: Position | None = None
    size: Size | None = None
    arrangement: Arrangement | None = None
    display: str | None = Field(
        default=None,
        description="Advisory display id.  Arrangements always target the primary display.",
    )


_SINGLE_WINDOW_TYPES = frozenset(ActionType) - {ActionType.ARRANGE}


class WindowAction(_WireModel):
    """A single structural command addressed to one window or, for
    ``arrange``, to an ordered list of windows."""

    type: ActionType
    target_window: str | None = None
    target_windows: list[str] | None = None
    parameters: ActionParameters = Field(default_factory=ActionParameters)
    reasoning: str = Field(default="", description="Free text from the planner. Not load-bearing.")

    @model_validator(mode="after")
    def _check_targets(self) -> "WindowAction":
        if self.type in _SINGLE_WINDOW_TYPES:
            if not self.target_window:
                raise ValueError(f"'{self.type.value}' requires targetWindow")
            if self.target_windows:
                raise ValueError(f"'{self.type.value}' does not accept targetWindows")
        else:
            if not self.target_windows:
                raise ValueError("'arrange' requires a non-empty targetWindows list")
            if self.target_window:
                raise ValueError("'arrange' does not accept targetWindow")
            if self.parameters.arrangement is None:
                raise ValueError("'arrange' requires parameters.arrangement")

        if self.type is ActionType.MOVE and self.parameters.position is None:
            raise ValueError("'move' requires parameters.position")
        if self.type is ActionType.RESIZE and self.parameters.size is None:
            raise ValueError("'resize' requires parameters.size")
        return self
