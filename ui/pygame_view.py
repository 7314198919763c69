#!/usr/bin/env python3
"""
Main view class: combines all UI mixins into one runnable Pygame window.

Module layout
─────────────
    ui/
    ├── types.py           – ColorRGB, ColorRGBA, Camera
    ├── constants.py       – ViewConstants mixin (all class-level constants)
    ├── helpers.py         – ViewHelpers mixin  (fonts, accessors) + utilities
    ├── draw_road.py       – RoadRenderer mixin (roads, lanes, stop lines)
    ├── draw_vehicles.py   – VehicleRenderer mixin (sprites, debug links)
    ├── hud.py             – HudRenderer mixin  (HUD, debug, splash, statistics)
    └── pygame_view.py     – PygameIntersectionView (this file – main loop)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import pygame

from sim.sim_bridge import SimBridge
from sim.vehicle import Direction

from .constants import ViewConstants
from .draw_road import RoadRenderer
from .draw_vehicles import VehicleRenderer
from .helpers import ViewHelpers
from .hud import HudRenderer
from .types import Camera

log = logging.getLogger("ui")

# Arrow key → heading of the spawned vehicle.
_SPAWN_KEYS: Dict[int, Direction] = {
    pygame.K_UP: Direction.NORTH,
    pygame.K_DOWN: Direction.SOUTH,
    pygame.K_RIGHT: Direction.EAST,
    pygame.K_LEFT: Direction.WEST,
}


class PygameIntersectionView(
    ViewConstants,
    ViewHelpers,
    RoadRenderer,
    VehicleRenderer,
    HudRenderer,
):
    """Smart-road visualiser powered by Pygame.

    Drawing comes from the mixins listed in the module docstring; this
    class owns the window, input handling and the frame loop.
    """

    def __init__(self, bridge: SimBridge, width: int = 900, height: int = 900, fps: int = 60):
        self.bridge = bridge
        self.width = width
        self.height = height
        self.fps = fps

        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.font_small: Optional[pygame.font.Font] = None
        self.font_tiny: Optional[pygame.font.Font] = None
        self.font_title: Optional[pygame.font.Font] = None

        self.camera = Camera(width, height, zoom=self.PIXELS_PER_METER)
        self.time_seconds = 0.0
        self._sprite_cache: Dict[Any, pygame.Surface] = {}

        # UI state
        self.paused = False
        self.show_debug = False
        self.show_splash = True
        self.show_stats = False
        self.running = False

    # ------------------------------------------------------------------ #
    #  Resize                                                              #
    # ------------------------------------------------------------------ #
    def _handle_resize(self, new_w: int, new_h: int) -> None:
        self.width = max(400, new_w)
        self.height = max(400, new_h)
        self.camera.screen_w = self.width
        self.camera.screen_h = self.height
        self.screen = pygame.display.set_mode(
            (self.width, self.height), pygame.RESIZABLE
        )

    # ------------------------------------------------------------------ #
    #  Input                                                               #
    # ------------------------------------------------------------------ #
    def _set_paused(self, paused: bool) -> None:
        self.paused = paused
        self.bridge.set_paused(paused)

    def _handle_key(self, key: int) -> None:
        if self.show_splash:
            self.show_splash = False
            return
        if self.show_stats:
            if key == pygame.K_ESCAPE:
                self.running = False
            else:
                self.show_stats = False
                self._set_paused(False)
            return

        if key == pygame.K_ESCAPE:
            self.show_stats = True
            self._set_paused(True)
        elif key in _SPAWN_KEYS:
            if self.bridge.spawn(_SPAWN_KEYS[key]) is None:
                log.debug("spawn %s ignored", _SPAWN_KEYS[key].name)
        elif key == pygame.K_r:
            self.bridge.toggle_random_generation()
        elif key == pygame.K_SPACE:
            self._set_paused(not self.paused)
        elif key == pygame.K_F3:
            self.show_debug = not self.show_debug

    # ------------------------------------------------------------------ #
    #  Main loop                                                           #
    # ------------------------------------------------------------------ #
    def run(self) -> None:
        pygame.init()
        pygame.display.set_caption("SMART ROAD")
        self.screen = pygame.display.set_mode(
            (self.width, self.height), pygame.RESIZABLE
        )
        self.clock = pygame.time.Clock()
        self.font_small = self._load_font(14, bold=False)
        self.font_tiny = self._load_font(11, bold=False)
        self.font_title = self._load_font(28, bold=True)

        self.running = True
        while self.running:
            delta_time = self.clock.tick(self.fps) / 1000.0
            self.time_seconds += delta_time

            # ---- events ------------------------------------------------- #
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.VIDEORESIZE:
                    self._handle_resize(event.w, event.h)
                elif event.type == pygame.KEYDOWN:
                    self._handle_key(event.key)

            # ---- splash ------------------------------------------------- #
            if self.show_splash:
                self.screen.fill(self.HUD_BG_COLOR)
                self._draw_splash(self.screen, self.time_seconds)
                pygame.display.flip()
                continue

            # ---- simulation tick ---------------------------------------- #
            self.bridge.advance(delta_time)
            vehicles: List[Dict[str, Any]] = self.bridge.get_vehicles()
            hud = self.bridge.get_hud()

            # ---- render ------------------------------------------------- #
            self.draw_road(self.screen)
            self.draw_lane_markings(self.screen)
            self.draw_vehicles(self.screen, vehicles)

            self.draw_hud(self.screen, hud, self.time_seconds)
            if self.show_debug:
                self._draw_debug_overlay(self.screen, hud, delta_time)
            if self.show_stats:
                self._draw_stats_overlay(self.screen, self.bridge.summary())
            elif self.paused:
                self._draw_pause_banner(self.screen)

            pygame.display.flip()

        pygame.quit()


# ---------------------------------------------------------------------- #
#  Convenience entry point                                                 #
# ---------------------------------------------------------------------- #
def run_pygame_view(
    bridge: SimBridge, width: int = 900, height: int = 900, fps: int = 60
) -> None:
    view = PygameIntersectionView(bridge=bridge, width=width, height=height, fps=fps)
    view.run()


if __name__ == "__main__":
    raise SystemExit(
        "pygame_view.py needs a SimBridge. Run `python main.py` "
        "or call run_pygame_view(your_bridge)."
    )
