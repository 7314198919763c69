#!/usr/bin/env python3
"""Vehicle sprite rendering and debug annotations (mixin)."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Sequence

import pygame

from .helpers import render_text


class VehicleRenderer:
    """Mixin that draws vehicles as rotated sprites at their world position."""

    def draw_vehicles(self, surface: pygame.Surface, vehicles: Sequence[Mapping[str, Any]]) -> None:
        for vehicle in vehicles:
            self.draw_vehicle(surface, vehicle)
        if self.show_debug:
            self._draw_yield_links(surface, vehicles)
            for vehicle in vehicles:
                self._draw_vehicle_label(surface, vehicle)

    def draw_vehicle(self, surface: pygame.Surface, vehicle: Mapping[str, Any]) -> None:
        color = tuple(vehicle.get("color", (255, 255, 255)))
        sprite = self._vehicle_sprite(color)
        rotated = pygame.transform.rotate(sprite, self._heading(vehicle))
        sx, sy = self.camera.world_to_screen(*self._world_xy(vehicle))
        surface.blit(rotated, rotated.get_rect(center=(int(sx), int(sy))))

    # ------------------------------------------------------------------ #
    #  Sprite                                                              #
    # ------------------------------------------------------------------ #

    def _vehicle_sprite(self, color) -> pygame.Surface:
        """East-facing car sprite; cached per colour and zoom."""
        cache: Dict[Any, pygame.Surface] = self._sprite_cache
        key = (color, self.camera.zoom)
        sprite = cache.get(key)
        if sprite is not None:
            return sprite

        w = self.camera.metres(self.VEHICLE_LENGTH_M)
        h = self.camera.metres(self.VEHICLE_WIDTH_M)
        sprite = pygame.Surface((w, h), pygame.SRCALPHA)

        body = pygame.Rect(0, 0, w, h)
        pygame.draw.rect(sprite, color, body, border_radius=3)

        # Windshield
        ws_rect = pygame.Rect(int(w * 0.6), 2, max(2, int(w * 0.22)), max(2, h - 4))
        r, g, b = color[:3]
        glass = (max(0, r - 60), max(0, g - 60), max(0, b - 60), 180)
        pygame.draw.rect(sprite, glass, ws_rect, border_radius=2)

        # Headlights / taillights
        pygame.draw.circle(sprite, (255, 248, 200), (w - 2, 2), 1)
        pygame.draw.circle(sprite, (255, 248, 200), (w - 2, h - 3), 1)
        pygame.draw.circle(sprite, (200, 40, 40), (1, 2), 1)
        pygame.draw.circle(sprite, (200, 40, 40), (1, h - 3), 1)

        pygame.draw.rect(sprite, (235, 235, 235), body, width=1, border_radius=3)
        cache[key] = sprite
        return sprite

    # ------------------------------------------------------------------ #
    #  Debug annotations                                                   #
    # ------------------------------------------------------------------ #

    def _draw_vehicle_label(self, surface: pygame.Surface, vehicle: Mapping[str, Any]) -> None:
        if self.font_tiny is None:
            return
        sx, sy = self.camera.world_to_screen(*self._world_xy(vehicle))
        velocity = float(vehicle.get("velocity", 0.0))
        color = self.STOP_COLOR if velocity == 0.0 else self.HUD_TEXT_COLOR
        render_text(
            surface, self.font_tiny,
            f"{vehicle['id']} {vehicle.get('route', '')[:1]} {velocity:.0f}",
            (int(sx), int(sy) - 14), color, anchor="center",
        )

    def _draw_yield_links(self, surface: pygame.Surface, vehicles: Sequence[Mapping[str, Any]]) -> None:
        by_id = {self._vehicle_id(v): v for v in vehicles}
        for vehicle in vehicles:
            target = by_id.get(vehicle.get("yields_to"))
            if target is None:
                continue
            a = self.camera.world_to_screen(*self._world_xy(vehicle))
            b = self.camera.world_to_screen(*self._world_xy(target))
            pygame.draw.line(surface, self.WARNING_COLOR,
                             (int(a[0]), int(a[1])), (int(b[0]), int(b[1])), 1)
