"""Action executor — the single entry point for window commands.

``ActionExecutor.execute`` takes one :class:`WindowAction` (or its wire
mapping) and returns ``True`` when it was applied, ``False`` otherwise.  It
never raises.  Failure causes are visible only in the logs
(``action_failed`` with ``error_kind``):

    malformed_identity    the id has no app/title separator
    window_not_found      no current window matches the decoded target
    bridge_unavailable    the automation call raised, timed out or is missing
    invalid_action / unknown_action / unknown_arrangement
                          input outside the closed enums or failing validation

No retries happen here; the caller decides whether to re-query the window
state and try again.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import ValidationError

from window_bridge.arrangement import ArrangementEngine, ArrangementResult
from window_bridge.bridge.base import AccessibilityBridge
from window_bridge.config import DetectionConfig, LayoutConfig
from window_bridge.displays import DisplayEnumerator, containing_display
from window_bridge.enumerator import looks_maximized, raw_bounds
from window_bridge.exceptions import (
    InvalidActionError,
    UnknownActionError,
    UnknownArrangementError,
    WindowBridgeError,
)
from window_bridge.identity import decode
from window_bridge.locator import locate
from window_bridge.logging import get_logger
from window_bridge.protocol.constants import CLOSE_BUTTON, MINIMIZE_BUTTON, ZOOM_BUTTON
from window_bridge.protocol.models import ActionType, Arrangement, Bounds, Display, WindowAction

log = get_logger(__name__)

_ACTION_TYPES = {t.value for t in ActionType}
_ARRANGEMENTS = {a.value for a in Arrangement}


def coerce_action(action: WindowAction | Mapping[str, Any]) -> WindowAction:
    """Validate a wire mapping into a :class:`WindowAction`.

    Raises:
        UnknownActionError:      ``type`` is outside the action set.
        UnknownArrangementError: ``parameters.arrangement`` is outside the set.
        InvalidActionError:      any other validation failure.
    """
    if isinstance(action, WindowAction):
        return action
    if not isinstance(action, Mapping):
        raise InvalidActionError(f"Expected a mapping, got {type(action).__name__}")

    action_type = action.get("type")
    if action_type not in _ACTION_TYPES:
        raise UnknownActionError(str(action_type))

    parameters = action.get("parameters")
    if isinstance(parameters, Mapping):
        arrangement = parameters.get("arrangement")
        if arrangement is not None and arrangement not in _ARRANGEMENTS:
            raise UnknownArrangementError(str(arrangement))

    try:
        return WindowAction.model_validate(dict(action))
    except ValidationError as exc:
        raise InvalidActionError(
            f"Invalid '{action_type}' action: {exc.error_count()} error(s)",
            errors=exc.errors(include_url=False),
        ) from exc


class ActionExecutor:
    def __init__(
        self,
        bridge: AccessibilityBridge,
        displays: DisplayEnumerator,
        layout: LayoutConfig | None = None,
        detection: DetectionConfig | None = None,
    ) -> None:
        self._bridge = bridge
        self._displays = displays
        self._layout = layout or LayoutConfig()
        self._detection = detection or DetectionConfig()
        self._engine = ArrangementEngine(self._move_by_id, self._resize_by_id, self._layout)
        self._handlers: dict[ActionType, Callable[[WindowAction], Awaitable[bool]]] = {
            ActionType.MOVE: self._move,
            ActionType.RESIZE: self._resize,
            ActionType.MINIMIZE: self._minimize,
            ActionType.MAXIMIZE: self._maximize,
            ActionType.RESTORE: self._restore,
            ActionType.FOCUS: self._focus,
            ActionType.CLOSE: self._close,
            ActionType.ARRANGE: self._arrange,
        }
        self.last_arrangement: ArrangementResult | None = None

    @property
    def engine(self) -> ArrangementEngine:
        return self._engine

    async def execute(self, action: WindowAction | Mapping[str, Any]) -> bool:
        """Apply *action*.  Returns False on any failure; never raises."""
        action_type = "unknown"
        target: Any = None
        try:
            parsed = coerce_action(action)
            action_type = parsed.type.value
            target = parsed.target_window or parsed.target_windows
            handler = self._handlers.get(parsed.type)
            if handler is None:
                raise UnknownActionError(action_type)
            result = await handler(parsed)
        except WindowBridgeError as exc:
            log.warning(
                "action_failed",
                action_type=action_type,
                target=target,
                error_kind=exc.kind,
                error=exc.message,
            )
            return False
        except Exception as exc:
            log.warning(
                "action_failed",
                action_type=action_type,
                target=target,
                error_kind="bridge_unavailable",
                error=f"{type(exc).__name__}: {exc}",
            )
            return False

        log.info("action_completed", action_type=action_type, target=target, success=result)
        return result

    async def arrange(self, window_ids: list[str], arrangement: str | Arrangement) -> ArrangementResult:
        """Arrange windows on the primary display and return per-window outcomes."""
        display = await self._displays.primary()
        result = await self._engine.apply(window_ids, arrangement, display)
        self.last_arrangement = result
        return result

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _move(self, action: WindowAction) -> bool:
        target = decode(action.target_window)
        ref, _ = await locate(self._bridge, target)
        position = action.parameters.position
        await self._bridge.set_position(ref, position.x, position.y)
        return True

    async def _resize(self, action: WindowAction) -> bool:
        target = decode(action.target_window)
        ref, _ = await locate(self._bridge, target)
        size = action.parameters.size
        await self._bridge.set_size(ref, size.width, size.height)
        return True

    async def _minimize(self, action: WindowAction) -> bool:
        target = decode(action.target_window)
        await self._bridge.activate(target.app_name)
        ref, _ = await locate(self._bridge, target)
        if not await self._bridge.click_control(ref, MINIMIZE_BUTTON):
            log.info("control_unavailable", control=MINIMIZE_BUTTON, app_name=target.app_name)
            return False
        return True

    async def _maximize(self, action: WindowAction) -> bool:
        target = decode(action.target_window)
        await self._bridge.activate(target.app_name)
        ref, raw = await locate(self._bridge, target)
        if await self._bridge.click_control(ref, ZOOM_BUTTON):
            return True

        # No zoom control: fill the usable area of the window's display.
        display = await self._display_for(raw_bounds(raw))
        b = display.bounds
        inset = self._layout.menu_bar_inset
        await self._bridge.set_position(ref, b.x, b.y + inset)
        await self._bridge.set_size(ref, b.width, b.height - inset)
        log.info("maximize_fallback", app_name=target.app_name, display=display.id)
        return True

    async def _restore(self, action: WindowAction) -> bool:
        target = decode(action.target_window)
        await self._bridge.activate(target.app_name)
        ref, raw = await locate(self._bridge, target)

        if raw.minimized:
            await self._bridge.set_minimized(ref, False)
            await self._bridge.activate(target.app_name)
            return True

        bounds = raw_bounds(raw)
        displays = await self._displays.list_displays()
        if looks_maximized(bounds, displays, self._detection, for_restore=True):
            display = containing_display(bounds, displays) or self._displays.fallback()
            origin = self._layout.restore_origin
            await self._bridge.set_position(ref, display.bounds.x + origin, display.bounds.y + origin)
            await self._bridge.set_size(ref, self._layout.restore_width, self._layout.restore_height)
            return True

        await self._bridge.activate(target.app_name)
        return True

    async def _focus(self, action: WindowAction) -> bool:
        target = decode(action.target_window)
        ref, raw = await locate(self._bridge, target)
        if raw.minimized:
            await self._bridge.set_minimized(ref, False)
        await self._bridge.set_frontmost(target.app_name)
        # Clicking the first control forces the window to the front; no
        # control is not a failure.
        await self._bridge.click_control(ref, None)
        return True

    async def _close(self, action: WindowAction) -> bool:
        target = decode(action.target_window)
        ref, _ = await locate(self._bridge, target)
        if await self._bridge.click_control(ref, CLOSE_BUTTON):
            return True
        await self._bridge.activate(target.app_name)
        await self._bridge.keystroke(target.app_name, "w", ["command"])
        return True

    async def _arrange(self, action: WindowAction) -> bool:
        result = await self.arrange(action.target_windows or [], action.parameters.arrangement)
        return result.recognized

    # ------------------------------------------------------------------
    # Per-window operations used by the arrangement engine
    # ------------------------------------------------------------------

    async def _move_by_id(self, window_id: str, x: float, y: float) -> bool:
        try:
            ref, _ = await locate(self._bridge, decode(window_id))
            await self._bridge.set_position(ref, x, y)
        except Exception as exc:
            log.info("placement_move_failed", window_id=window_id, error=str(exc))
            return False
        return True

    async def _resize_by_id(self, window_id: str, width: float, height: float) -> bool:
        try:
            ref, _ = await locate(self._bridge, decode(window_id))
            await self._bridge.set_size(ref, width, height)
        except Exception as exc:
            log.info("placement_resize_failed", window_id=window_id, error=str(exc))
            return False
        return True

    async def _display_for(self, bounds: Bounds) -> Display:
        displays = await self._displays.list_displays()
        return containing_display(bounds, displays) or self._displays.fallback()
