"""Accessibility bridge — contract and the macOS JXA implementation."""

from window_bridge.bridge.base import (
    AccessibilityBridge,
    DisplayService,
    ProcessWindows,
    RawDisplay,
    RawWindow,
    WindowRef,
)
from window_bridge.bridge.jxa import JXABridge, JXADisplayService, ScriptRunner

__all__ = [
    "AccessibilityBridge",
    "DisplayService",
    "JXABridge",
    "JXADisplayService",
    "ProcessWindows",
    "RawDisplay",
    "RawWindow",
    "ScriptRunner",
    "WindowRef",
]
