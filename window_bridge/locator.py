"""Window location — resolve a decoded identity against the live window list.

A window matches when its title equals the decoded title, or when the decoded
title is synthetic (contains ``"window-"``) and its positional token equals
the window's index.  The window list is re-read at call time, so a reorder
between enumeration and execution can make a synthetic id hit a different
window.
"""

from __future__ import annotations

from window_bridge.bridge.base import AccessibilityBridge, RawWindow, WindowRef
from window_bridge.exceptions import WindowNotFoundError
from window_bridge.identity import DecodedIdentity, synthetic_index


def matches(window: RawWindow, position: int, title: str) -> bool:
    if window.title == title:
        return True
    token = synthetic_index(title)
    return token is not None and str(position) == token


def find_window(windows: list[RawWindow], title: str) -> RawWindow | None:
    for position, window in enumerate(windows):
        if matches(window, position, title):
            return window
    return None


async def locate(bridge: AccessibilityBridge, target: DecodedIdentity) -> tuple[WindowRef, RawWindow]:
    """Return a fresh reference to the target window.

    Raises:
        WindowNotFoundError: If no current window of the app matches.
    """
    windows = await bridge.list_windows(target.app_name)
    window = find_window(windows, target.title)
    if window is None:
        raise WindowNotFoundError(target.app_name, target.title)
    return WindowRef(app_name=target.app_name, index=window.index, title=window.title), window
