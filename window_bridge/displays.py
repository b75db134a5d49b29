"""Display enumeration with a guaranteed fallback.

Arrangement math and the maximized heuristic both need real display bounds.
:class:`DisplayEnumerator` never returns an empty list: when the display
service fails or reports nothing, it yields one synthetic primary display at
the configured fallback resolution.
"""

from __future__ import annotations

from window_bridge.bridge.base import DisplayService, RawDisplay
from window_bridge.config import DisplayConfig
from window_bridge.logging import get_logger
from window_bridge.protocol.models import Bounds, Display

log = get_logger(__name__)


class DisplayEnumerator:
    def __init__(self, service: DisplayService, config: DisplayConfig | None = None) -> None:
        self._service = service
        self._config = config or DisplayConfig()

    def fallback(self) -> Display:
        return Display(
            id=self._config.fallback_id,
            is_primary=True,
            bounds=Bounds(
                x=0, y=0, width=self._config.fallback_width, height=self._config.fallback_height
            ),
        )

    async def list_displays(self) -> list[Display]:
        """Return attached displays with exactly one flagged primary."""
        try:
            raw = await self._service.list_displays()
        except Exception as exc:
            log.warning("display_enumeration_failed", error=str(exc))
            return [self.fallback()]

        if not raw:
            log.warning("display_enumeration_empty")
            return [self.fallback()]
        return normalize(raw)

    async def primary(self) -> Display:
        return primary_display(await self.list_displays())


def normalize(raw: list[RawDisplay]) -> list[Display]:
    """Convert raw displays, keeping the first primary flag (or the first display)."""
    primary_index = next((i for i, d in enumerate(raw) if d.is_primary), 0)
    return [
        Display(
            id=d.id,
            is_primary=i == primary_index,
            bounds=Bounds(x=d.x, y=d.y, width=d.width, height=d.height),
        )
        for i, d in enumerate(raw)
    ]


def primary_display(displays: list[Display]) -> Display:
    for display in displays:
        if display.is_primary:
            return display
    return displays[0]


def containing_display(bounds: Bounds, displays: list[Display]) -> Display | None:
    """Return the display containing the centre of *bounds*, else the primary.

    Returns None only when *displays* is empty.
    """
    if not displays:
        return None
    cx, cy = bounds.center
    for display in displays:
        if display.bounds.contains_point(cx, cy):
            return display
    return primary_display(displays)
