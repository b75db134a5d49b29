"""Window protocol — wire models and constants."""

from window_bridge.protocol.models import (
    ActionParameters,
    ActionType,
    Arrangement,
    Bounds,
    Display,
    Position,
    Size,
    WindowAction,
    WindowInfo,
    WindowState,
)

__all__ = [
    "ActionParameters",
    "ActionType",
    "Arrangement",
    "Bounds",
    "Display",
    "Position",
    "Size",
    "WindowAction",
    "WindowInfo",
    "WindowState",
]
