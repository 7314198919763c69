"""
ui/draw_road.py
===============
Renders the four-way intersection: road surfaces, the footprint box,
median separators, dashed lane markings outside the footprint, and
stop lines on every approach.

All methods are *pure renderers*: they read geometry and draw to a surface.
"""

from __future__ import annotations

from typing import Iterator, Tuple

import pygame

from sim.vehicle import FOOTPRINT_HALF_WIDTH_M, LANE_WIDTH_M, LANES_PER_DIRECTION
from ui.types import Camera

# ── Constants ─────────────────────────────────────────────────────────────────
_ARM_LEN_M = 400.0  # longer than any visible arm

ROAD_HALF_W = FOOTPRINT_HALF_WIDTH_M


def _i2(p: Tuple[float, float]) -> Tuple[int, int]:
    return int(p[0]), int(p[1])


def _world_rect(cam: Camera, x1: float, y1: float, x2: float, y2: float) -> pygame.Rect:
    """Convert two world-space corners to a screen-space Rect (y-flipped)."""
    sx1, sy1 = cam.world_to_screen(min(x1, x2), max(y1, y2))
    sx2, sy2 = cam.world_to_screen(max(x1, x2), min(y1, y2))
    return pygame.Rect(int(sx1), int(sy1), max(1, int(sx2 - sx1)), max(1, int(sy2 - sy1)))


def _dashes(start: float, end: float, dash: float, gap: float) -> Iterator[Tuple[float, float]]:
    """Dash intervals from *start* towards *end* (either order)."""
    step = 1.0 if end >= start else -1.0
    pos = start
    while (end - pos) * step > 0:
        stop = pos + step * dash
        if (end - stop) * step < 0:
            stop = end
        yield pos, stop
        pos += step * (dash + gap)


def lane_separators() -> Tuple[float, ...]:
    """Offsets from the road axis of the dashed lines between lanes."""
    return tuple(
        sign * LANE_WIDTH_M * i
        for sign in (1.0, -1.0)
        for i in range(1, LANES_PER_DIRECTION)
    )


class RoadRenderer:
    """Mixin that draws the static road layer."""

    def draw_road(self, surface: pygame.Surface) -> None:
        cam = self.camera
        hw = ROAD_HALF_W
        surface.fill(self.BG_COLOR)
        pygame.draw.rect(surface, self.ROAD_COLOR,
                         _world_rect(cam, -_ARM_LEN_M, -hw, _ARM_LEN_M, hw))
        pygame.draw.rect(surface, self.ROAD_COLOR,
                         _world_rect(cam, -hw, -_ARM_LEN_M, hw, _ARM_LEN_M))
        pygame.draw.rect(surface, self.INTERSECTION_COLOR,
                         _world_rect(cam, -hw, -hw, hw, hw))
        self._draw_edges(surface)

    def draw_lane_markings(self, surface: pygame.Surface) -> None:
        self._draw_medians(surface)
        self._draw_lane_dashes(surface)
        self._draw_stop_lines(surface)

    # ── internals ─────────────────────────────────────────────────────────────

    def _line(self, surface, color, a, b, width_m: float) -> None:
        cam = self.camera
        pygame.draw.line(surface, color, _i2(cam.world_to_screen(*a)),
                         _i2(cam.world_to_screen(*b)), cam.metres(width_m))

    def _draw_edges(self, surface: pygame.Surface) -> None:
        hw = ROAD_HALF_W
        for sign in (1.0, -1.0):
            for start, end in ((-_ARM_LEN_M, -hw), (hw, _ARM_LEN_M)):
                self._line(surface, self.LANE_EDGE_COLOR,
                           (start, sign * hw), (end, sign * hw), 0.3)
                self._line(surface, self.LANE_EDGE_COLOR,
                           (sign * hw, start), (sign * hw, end), 0.3)

    def _draw_medians(self, surface: pygame.Surface) -> None:
        hw = ROAD_HALF_W
        for start, end in ((-_ARM_LEN_M, -hw), (hw, _ARM_LEN_M)):
            for shift in (-0.2, 0.2):
                self._line(surface, self.MEDIAN_COLOR, (start, shift), (end, shift), 0.15)
                self._line(surface, self.MEDIAN_COLOR, (shift, start), (shift, end), 0.15)

    def _draw_lane_dashes(self, surface: pygame.Surface) -> None:
        hw = ROAD_HALF_W
        dash, gap = self.DASH_LEN_M, self.DASH_GAP_M
        for offset in lane_separators():
            for start, end in ((-hw, -_ARM_LEN_M), (hw, _ARM_LEN_M)):
                for a, b in _dashes(start, end, dash, gap):
                    self._line(surface, self.LANE_DASH_COLOR, (a, offset), (b, offset), 0.15)
                    self._line(surface, self.LANE_DASH_COLOR, (offset, a), (offset, b), 0.15)

    def _draw_stop_lines(self, surface: pygame.Surface) -> None:
        hw = ROAD_HALF_W
        color = self.STOP_LINE_COLOR
        # northbound arrives from the south on the east half, and so on
        self._line(surface, color, (0.0, -hw), (hw, -hw), 0.5)
        self._line(surface, color, (-hw, hw), (0.0, hw), 0.5)
        self._line(surface, color, (-hw, -hw), (-hw, 0.0), 0.5)
        self._line(surface, color, (hw, 0.0), (hw, hw), 0.5)
