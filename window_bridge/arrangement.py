"""Arrangement engine — multi-window layout math and application.

``plan`` is pure: ids + arrangement name + display → one :class:`Placement`
per window that the arrangement touches (slot = position in the id list).
``apply`` issues a move then a resize for each placement, one window after
another.  There is no rollback: a failed call leaves earlier windows where
they were put.  ``ArrangementResult.recognized`` is the aggregate signal
(the arrangement name was valid); per-window outcomes are reported alongside
it and do not affect it.

Layouts on a display of W × H with menu-bar inset m (usable height U = H - m):

    tile-left / tile-right   first 2 ids, halves of W, full U
    tile-grid                first 4 ids, 2×2 cells of W/2 × U/2
    cascade                  all ids, offset (50 + 30i), size 0.6W × 0.6U
    center                   first id, 0.8W × 0.8U, centred in the usable area
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from window_bridge.config import LayoutConfig
from window_bridge.exceptions import UnknownArrangementError
from window_bridge.logging import get_logger
from window_bridge.protocol.models import Arrangement, Display

log = get_logger(__name__)

WindowOperation = Callable[[str, float, float], Awaitable[bool]]


@dataclass(frozen=True)
class Placement:
    window_id: str
    x: float
    y: float
    width: float
    height: float


@dataclass
class PlacementOutcome:
    placement: Placement
    moved: bool
    resized: bool

    @property
    def applied(self) -> bool:
        return self.moved and self.resized


@dataclass
class ArrangementResult:
    arrangement: str
    recognized: bool
    outcomes: list[PlacementOutcome] = field(default_factory=list)

    @property
    def all_applied(self) -> bool:
        return self.recognized and all(o.applied for o in self.outcomes)


class ArrangementEngine:
    """Computes layouts and applies them through *move* / *resize* callbacks.

    The callbacks take ``(window_id, a, b)`` and return whether the call
    succeeded; they must not raise.
    """

    def __init__(
        self,
        move: WindowOperation,
        resize: WindowOperation,
        layout: LayoutConfig | None = None,
    ) -> None:
        self._move = move
        self._resize = resize
        self._layout = layout or LayoutConfig()
        self._planners: dict[Arrangement, Callable[[list[str], Display], list[Placement]]] = {
            Arrangement.TILE_LEFT: self._tile_halves,
            Arrangement.TILE_RIGHT: self._tile_halves,
            Arrangement.TILE_GRID: self._tile_grid,
            Arrangement.CASCADE: self._cascade,
            Arrangement.CENTER: self._center,
        }

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def plan(
        self, window_ids: list[str], arrangement: str | Arrangement, display: Display
    ) -> list[Placement]:
        """Return the placements for *arrangement*.

        Raises:
            UnknownArrangementError: If the name is not a known arrangement.
        """
        try:
            key = Arrangement(arrangement)
        except ValueError:
            raise UnknownArrangementError(str(arrangement)) from None
        return self._planners[key](list(window_ids), display)

    def _usable(self, display: Display) -> tuple[float, float, float, float]:
        """Return (origin x, origin y below the menu bar, width, usable height)."""
        inset = self._layout.menu_bar_inset
        b = display.bounds
        return b.x, b.y + inset, b.width, b.height - inset

    def _tile_halves(self, ids: list[str], display: Display) -> list[Placement]:
        ox, oy, width, usable = self._usable(display)
        half = width / 2
        return [
            Placement(window_id, ox + slot * half, oy, half, usable)
            for slot, window_id in enumerate(ids[:2])
        ]

    def _tile_grid(self, ids: list[str], display: Display) -> list[Placement]:
        ox, oy, width, usable = self._usable(display)
        cell_w, cell_h = width / 2, usable / 2
        placements = []
        for slot, window_id in enumerate(ids[:4]):
            row, col = divmod(slot, 2)
            placements.append(Placement(window_id, ox + col * cell_w, oy + row * cell_h, cell_w, cell_h))
        return placements

    def _cascade(self, ids: list[str], display: Display) -> list[Placement]:
        # Anchored at the display origin, not below the menu bar; no wraparound.
        b = display.bounds
        _, _, width, usable = self._usable(display)
        scale = self._layout.cascade_scale
        placements = []
        for slot, window_id in enumerate(ids):
            offset = self._layout.cascade_origin + slot * self._layout.cascade_step
            placements.append(
                Placement(window_id, b.x + offset, b.y + offset, width * scale, usable * scale)
            )
        return placements

    def _center(self, ids: list[str], display: Display) -> list[Placement]:
        if not ids:
            return []
        ox, oy, width, usable = self._usable(display)
        scale = self._layout.center_scale
        w, h = width * scale, usable * scale
        return [Placement(ids[0], ox + (width - w) / 2, oy + (usable - h) / 2, w, h)]

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    async def apply(
        self, window_ids: list[str], arrangement: str | Arrangement, display: Display
    ) -> ArrangementResult:
        name = arrangement.value if isinstance(arrangement, Arrangement) else str(arrangement)
        try:
            placements = self.plan(window_ids, arrangement, display)
        except UnknownArrangementError as exc:
            log.warning("arrangement_unknown", arrangement=exc.arrangement)
            return ArrangementResult(arrangement=name, recognized=False)

        result = ArrangementResult(arrangement=name, recognized=True)
        for placement in placements:
            moved = await self._move(placement.window_id, placement.x, placement.y)
            resized = await self._resize(placement.window_id, placement.width, placement.height)
            log.debug(
                "placement_applied",
                window_id=placement.window_id,
                moved=moved,
                resized=resized,
            )
            result.outcomes.append(PlacementOutcome(placement, moved, resized))

        log.info(
            "arrangement_applied",
            arrangement=name,
            windows=len(placements),
            failed=sum(1 for o in result.outcomes if not o.applied),
        )
        return result
