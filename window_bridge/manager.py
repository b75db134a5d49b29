"""Window manager facade — the surface consumed by planners and the CLI.

    manager = build_manager(Settings.load())
    state = await manager.get_window_state()
    ok = await manager.execute_action({"type": "minimize", "targetWindow": state.windows[0].id})

Every call re-resolves windows from scratch.  The only state kept between
calls is the last non-host active app name, used when the host UI itself is
frontmost.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from window_bridge.bridge.base import AccessibilityBridge, DisplayService
from window_bridge.bridge.jxa import JXABridge, JXADisplayService, ScriptRunner
from window_bridge.config import Settings
from window_bridge.displays import DisplayEnumerator
from window_bridge.enumerator import WindowEnumerator
from window_bridge.executor import ActionExecutor
from window_bridge.logging import bind_batch_context, clear_batch_context, get_logger
from window_bridge.protocol.models import WindowAction, WindowState
from window_bridge.resources import ResourceSampler, enrich

log = get_logger(__name__)

UNKNOWN_APP = "Unknown"


class WindowManager:
    def __init__(
        self,
        bridge: AccessibilityBridge,
        display_service: DisplayService,
        settings: Settings | None = None,
        resource_sampler: ResourceSampler | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._bridge = bridge
        self.displays = DisplayEnumerator(display_service, self._settings.displays)
        self.enumerator = WindowEnumerator(
            bridge, self._settings.enumeration, self._settings.detection
        )
        self.executor = ActionExecutor(
            bridge, self.displays, self._settings.layout, self._settings.detection
        )
        self._resources = resource_sampler
        if self._resources is None and self._settings.resources.enabled:
            self._resources = ResourceSampler(
                interval=self._settings.resources.sample_interval,
                top_n=self._settings.resources.top_processes,
            )
        self._host_apps = set(self._settings.bridge.host_app_names)
        self._last_active_app: str | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    async def get_window_state(self) -> WindowState:
        """Snapshot windows, displays and the active app.

        With resource sampling on, windows carry per-app usage and the state
        carries a ``cpu_info`` summary.

        Never raises.  ``windows == []`` may mean enumeration failed.
        """
        displays = await self.displays.list_displays()
        windows = await self.enumerator.enumerate(displays)
        active_app = await self.get_active_app()

        cpu_info = None
        if self._resources is not None:
            try:
                sample = await self._resources.sample()
                windows = enrich(windows, sample.apps)
                cpu_info = sample.cpu_info
            except Exception as exc:
                log.warning("resource_sampling_failed", error=str(exc))

        return WindowState(
            windows=windows, displays=displays, active_app=active_app, cpu_info=cpu_info
        )

    async def get_active_app(self) -> str:
        """Return the frontmost app, looking past the host UI when it has focus."""
        try:
            frontmost = await self._bridge.frontmost_app()
            if frontmost and frontmost not in self._host_apps:
                self._last_active_app = frontmost
                return frontmost

            for name in await self._bridge.list_processes():
                if name not in self._host_apps:
                    self._last_active_app = name
                    return name
        except Exception as exc:
            log.warning("active_app_lookup_failed", error=str(exc))
            return UNKNOWN_APP

        return self._last_active_app or frontmost or UNKNOWN_APP

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def execute_action(self, action: WindowAction | Mapping[str, Any]) -> bool:
        return await self.executor.execute(action)

    async def execute_actions(
        self, actions: Sequence[WindowAction | Mapping[str, Any]]
    ) -> list[bool]:
        """Run *actions* in order, stopping after the first failure.

        The returned list ends with the failing ``False`` when one occurred,
        so it is shorter than *actions* whenever the batch was cut short.
        """
        batch_id = uuid.uuid4().hex[:12]
        results: list[bool] = []
        try:
            for index, action in enumerate(actions):
                bind_batch_context(batch_id=batch_id, action_index=index)
                ok = await self.executor.execute(action)
                results.append(ok)
                if not ok:
                    log.warning("batch_aborted", failed_index=index, remaining=len(actions) - index - 1)
                    break
        finally:
            clear_batch_context()

        log.info("batch_completed", succeeded=sum(results), total=len(actions))
        return results

    async def focus_app(self, app_name: str) -> bool:
        try:
            await self._bridge.activate(app_name)
        except Exception as exc:
            log.warning("focus_app_failed", app_name=app_name, error=str(exc))
            return False
        return True

    async def quit_app(self, app_name: str) -> bool:
        """Quit *app_name*; falls back to the quit chord on the foregrounded app."""
        try:
            await self._bridge.quit_app(app_name)
            return True
        except Exception as exc:
            log.info("quit_app_scripting_failed", app_name=app_name, error=str(exc))

        try:
            await self._bridge.activate(app_name)
            await self._bridge.keystroke(app_name, "q", ["command"])
        except Exception as exc:
            log.warning("quit_app_failed", app_name=app_name, error=str(exc))
            return False
        return True


def build_manager(settings: Settings) -> WindowManager:
    """Wire the macOS JXA bridge according to *settings*."""
    runner = ScriptRunner(settings.bridge.osascript_path, settings.bridge.timeout_seconds)
    return WindowManager(
        bridge=JXABridge(runner, icon_size=settings.enumeration.icon_size),
        display_service=JXADisplayService(runner),
        settings=settings,
    )
