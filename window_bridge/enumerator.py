"""Window enumeration — builds fresh :class:`WindowInfo` records.

One call is one bridge round trip (``snapshot``) plus, when icons are
enabled, one icon lookup per distinct app name.  Icons live in an
:class:`IconCache` scoped to a single enumeration pass; nothing survives
between calls.

Failure policy:
  - a window or process that cannot be introspected is skipped;
  - a failed snapshot yields ``[]``.  An empty list therefore means
    "no windows, or enumeration failed" and must not be treated as an error.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from window_bridge.bridge.base import AccessibilityBridge, RawWindow
from window_bridge.config import DetectionConfig, EnumerationConfig
from window_bridge.displays import containing_display
from window_bridge.identity import encode
from window_bridge.logging import get_logger
from window_bridge.protocol.constants import DEFAULT_WINDOW_EXTENT, UNTITLED_WINDOW
from window_bridge.protocol.models import Bounds, Display, WindowInfo

log = get_logger(__name__)

IconResolver = Callable[[str], Awaitable[str | None]]


class IconCache:
    """``app name -> icon data`` for one enumeration pass.

    The first lookup for an app name decides its icon (including ``None``
    when resolution fails); later processes with the same name reuse it.
    """

    def __init__(self, resolver: IconResolver) -> None:
        self._resolver = resolver
        self._icons: dict[str, str | None] = {}

    def __contains__(self, app_name: str) -> bool:
        return app_name in self._icons

    def __len__(self) -> int:
        return len(self._icons)

    async def get(self, app_name: str) -> str | None:
        if app_name in self._icons:
            return self._icons[app_name]
        try:
            icon = await self._resolver(app_name)
        except Exception as exc:
            log.debug("icon_lookup_failed", app_name=app_name, error=str(exc))
            icon = None
        self._icons[app_name] = icon
        return icon


def looks_maximized(
    bounds: Bounds,
    displays: list[Display] | None,
    detection: DetectionConfig,
    *,
    for_restore: bool = False,
) -> bool:
    """Size-based maximized heuristic.

    Compares the window against the display containing it; with no known
    displays the configured reference resolution stands in.  Restore uses
    its own, stricter ratios.
    """
    display = containing_display(bounds, displays or [])
    if display is not None:
        ref_width, ref_height = display.bounds.width, display.bounds.height
    else:
        ref_width, ref_height = detection.reference_width, detection.reference_height
    if for_restore:
        width_ratio, height_ratio = detection.restore_width_ratio, detection.restore_height_ratio
    else:
        width_ratio, height_ratio = detection.maximized_width_ratio, detection.maximized_height_ratio
    return bounds.width >= ref_width * width_ratio and bounds.height >= ref_height * height_ratio


def raw_bounds(raw: RawWindow) -> Bounds:
    return Bounds(
        x=raw.x or 0,
        y=raw.y or 0,
        width=raw.width or DEFAULT_WINDOW_EXTENT,
        height=raw.height or DEFAULT_WINDOW_EXTENT,
    )


class WindowEnumerator:
    def __init__(
        self,
        bridge: AccessibilityBridge,
        config: EnumerationConfig | None = None,
        detection: DetectionConfig | None = None,
    ) -> None:
        self._bridge = bridge
        self._config = config or EnumerationConfig()
        self._detection = detection or DetectionConfig()

    def new_icon_cache(self) -> IconCache:
        return IconCache(self._bridge.app_icon)

    async def enumerate(
        self,
        displays: list[Display] | None = None,
        icon_cache: IconCache | None = None,
    ) -> list[WindowInfo]:
        """Return every readable window of every visible process.

        Args:
            displays:   Displays used by the maximized heuristic.
            icon_cache: Cache for this pass.  A fresh one is created when
                        icons are enabled and none is given.
        """
        try:
            processes = await self._bridge.snapshot()
        except Exception as exc:
            log.warning("window_enumeration_failed", error=str(exc))
            return []

        if icon_cache is None and self._config.include_icons:
            icon_cache = self.new_icon_cache()

        windows: list[WindowInfo] = []
        for process in processes:
            if process.error is not None:
                log.debug("process_skipped", app_name=process.app_name, error=process.error)
                continue
            if not process.windows:
                continue

            icon = await icon_cache.get(process.app_name) if icon_cache is not None else None
            for raw in process.windows:
                info = self._build(process.app_name, raw, icon, displays)
                if info is not None:
                    windows.append(info)

        log.debug("windows_enumerated", count=len(windows), processes=len(processes))
        return windows

    def _build(
        self,
        app_name: str,
        raw: RawWindow,
        icon: str | None,
        displays: list[Display] | None,
    ) -> WindowInfo | None:
        if raw.error is not None:
            log.debug("window_skipped", app_name=app_name, index=raw.index, error=raw.error)
            return None
        try:
            bounds = raw_bounds(raw)
            is_minimized = bool(raw.minimized)
            return WindowInfo(
                id=encode(app_name, raw.title, raw.index),
                app_name=app_name,
                app_icon=icon,
                title=raw.title or UNTITLED_WINDOW,
                bounds=bounds,
                is_minimized=is_minimized,
                is_focused=False,
                is_visible=not is_minimized,
                is_maximized=looks_maximized(bounds, displays, self._detection),
            )
        except Exception as exc:
            log.debug("window_skipped", app_name=app_name, index=raw.index, error=str(exc))
            return None
