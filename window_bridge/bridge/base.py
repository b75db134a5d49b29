"""Accessibility bridge — abstract contract.

The bridge is the only code that talks to the window server.  Every method is
a coroutine and every call re-resolves its target by (app name, window index)
at call time; implementations must not hold window handles between calls.

Implementations raise :class:`~window_bridge.exceptions.BridgeError`
subclasses for failures they detect.  Callers must still be prepared for any
exception, since the automation layer underneath is not fully predictable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class RawWindow:
    """One window as reported by the accessibility tree.

    Fields the bridge could not read are ``None``.  ``error`` is set when the
    window could not be introspected at all.
    """

    index: int
    title: str = ""
    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
    minimized: bool | None = None
    error: str | None = None


@dataclass
class ProcessWindows:
    """A visible process and the windows it owns, in accessibility order."""

    app_name: str
    windows: list[RawWindow] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class WindowRef:
    """Address of a window for a single bridge call."""

    app_name: str
    index: int
    title: str = ""


@dataclass
class RawDisplay:
    """A display as reported by the OS display service (top-left origin)."""

    id: str
    x: float
    y: float
    width: float
    height: float
    is_primary: bool = False


class AccessibilityBridge(ABC):
    """Primitives exposed by the OS automation interface."""

    # -- Reads ---------------------------------------------------------------

    @abstractmethod
    async def snapshot(self) -> list[ProcessWindows]:
        """Return every visible process with its windows in one round trip."""

    @abstractmethod
    async def list_windows(self, app_name: str) -> list[RawWindow]:
        """Return the current windows of *app_name* in accessibility order."""

    @abstractmethod
    async def list_processes(self) -> list[str]:
        """Return the names of visible processes."""

    @abstractmethod
    async def frontmost_app(self) -> str:
        """Return the name of the frontmost process."""

    @abstractmethod
    async def app_icon(self, app_name: str) -> str | None:
        """Return a PNG data URL for *app_name*'s icon, or None."""

    # -- Writes --------------------------------------------------------------

    @abstractmethod
    async def activate(self, app_name: str) -> None:
        """Bring *app_name* to the foreground via its scripting interface."""

    @abstractmethod
    async def set_frontmost(self, app_name: str) -> None:
        """Mark the process frontmost through the accessibility tree."""

    @abstractmethod
    async def set_position(self, ref: WindowRef, x: float, y: float) -> None: ...

    @abstractmethod
    async def set_size(self, ref: WindowRef, width: float, height: float) -> None: ...

    @abstractmethod
    async def set_minimized(self, ref: WindowRef, minimized: bool) -> None: ...

    @abstractmethod
    async def click_control(self, ref: WindowRef, subrole: str | None = None) -> bool:
        """Click the window control with *subrole*, or its first control if None.

        Returns False when no such control exists.
        """

    @abstractmethod
    async def keystroke(self, app_name: str, key: str, modifiers: list[str]) -> None:
        """Send a key chord (e.g. ``"w"`` + ``["command"]``) to the foreground app."""

    @abstractmethod
    async def quit_app(self, app_name: str) -> None: ...


class DisplayService(ABC):
    """Source of attached display geometry."""

    @abstractmethod
    async def list_displays(self) -> list[RawDisplay]: ...
