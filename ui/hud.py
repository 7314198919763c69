#!/usr/bin/env python3
"""HUD panel, debug overlay, splash screen, pause banner and statistics screen (mixin)."""

from __future__ import annotations

from typing import Any, Mapping

import pygame

from .helpers import draw_alpha_rect, format_velocity, render_text


class HudRenderer:
    """Mixin that draws every overlay / HUD element."""

    # ------------------------------------------------------------------ #
    #  Main HUD panel                                                      #
    # ------------------------------------------------------------------ #

    def draw_hud(self, surface: pygame.Surface, hud: Mapping[str, Any], tick: float) -> None:
        if self.font_small is None or self.font_tiny is None:
            return

        per_direction = hud.get("per_direction", {})
        panel_rect = pygame.Rect(16, self.height - 128 - 16, 230, 128)
        pygame.draw.rect(surface, self.HUD_BG_COLOR, panel_rect, border_radius=6)
        pygame.draw.rect(surface, self.HUD_BORDER_COLOR, panel_rect, width=1, border_radius=6)

        x, y = panel_rect.x + 10, panel_rect.y + 8
        render_text(surface, self.font_small, f"ACTIVE {hud.get('active', 0)}", (x, y),
                    self.HUD_TEXT_COLOR)
        y += 20
        dirs = "  ".join(f"{name[:1]} {count}" for name, count in per_direction.items())
        render_text(surface, self.font_tiny, dirs, (x, y), self.HUD_DIM_COLOR)
        y += 18

        close = hud.get("close_calls", 0)
        blink_on = int((tick * 1000) // self.HUD_BLINK_MS) % 2 == 0
        close_color = self.WARNING_COLOR if close and blink_on else self.HUD_TEXT_COLOR
        render_text(surface, self.font_tiny, f"CLOSE CALLS {close}", (x, y), close_color)
        y += 18

        random_on = hud.get("random_generation", False)
        render_text(
            surface, self.font_tiny,
            f"RANDOM {'ON' if random_on else 'OFF'}",
            (x, y),
            self.GO_COLOR if random_on else self.HUD_DIM_COLOR,
        )
        y += 18
        render_text(surface, self.font_tiny, f"SIM TIME {hud.get('sim_time', 0.0):.1f}s",
                    (x, y), self.HUD_DIM_COLOR)

    # ------------------------------------------------------------------ #
    #  Splash screen                                                       #
    # ------------------------------------------------------------------ #

    def _draw_splash(self, surface: pygame.Surface, tick: float) -> None:
        if self.font_title is None or self.font_small is None:
            return
        title = self.font_title.render("SMART ROAD", True, (240, 240, 240))
        surface.blit(
            title,
            title.get_rect(center=(self.width // 2, self.height // 2 - 30)),
        )
        if int(tick * 2) % 2 == 0:
            prompt = self.font_small.render("Press any key to start", True, (160, 160, 160))
            surface.blit(
                prompt,
                prompt.get_rect(center=(self.width // 2, self.height // 2 + 20)),
            )
        y = self.height // 2 + 60
        for key, action in self.KEY_HELP:
            t = self.font_tiny.render(f"{key:<7}{action}", True, (100, 100, 100)) if self.font_tiny else None
            if t:
                surface.blit(t, t.get_rect(center=(self.width // 2, y)))
                y += 16

    # ------------------------------------------------------------------ #
    #  Debug / FPS overlay                                                 #
    # ------------------------------------------------------------------ #

    def _draw_debug_overlay(self, surface: pygame.Surface, hud: Mapping[str, Any], dt: float) -> None:
        if self.font_tiny is None:
            return
        fps = self.clock.get_fps() if self.clock else 0.0
        lines = [
            f"FPS  {fps:.1f}",
            f"DT   {dt * 1000:.1f} ms",
            f"VEH  {hud.get('active', 0)}",
            f"ZOOM {self.camera.zoom:.1f} px/m",
            f"RES  {self.width}x{self.height}",
            f"TIME {hud.get('sim_time', 0.0):.1f}s",
        ]
        x, y = 16, 16
        for line in lines:
            text = self.font_tiny.render(line, True, self.GO_COLOR)
            surface.blit(text, (x, y))
            y += 14

    # ------------------------------------------------------------------ #
    #  Pause banner                                                        #
    # ------------------------------------------------------------------ #

    def _draw_pause_banner(self, surface: pygame.Surface) -> None:
        draw_alpha_rect(surface, (0, 0, 0, 100), pygame.Rect(0, 0, self.width, self.height))
        if self.font_title:
            text = self.font_title.render("PAUSED", True, (220, 220, 220))
            surface.blit(text, text.get_rect(center=(self.width // 2, self.height // 2)))

    # ------------------------------------------------------------------ #
    #  End-of-run statistics                                               #
    # ------------------------------------------------------------------ #

    def _draw_stats_overlay(self, surface: pygame.Surface, summary: Mapping[str, Any]) -> None:
        draw_alpha_rect(surface, (0, 0, 0, self.STATS_OVERLAY_ALPHA),
                        pygame.Rect(0, 0, self.width, self.height))
        if self.font_title is None or self.font_small is None:
            return

        cx = self.width // 2
        y = self.height // 2 - 90
        render_text(surface, self.font_title, "STATISTICS", (cx, y),
                    self.HUD_TEXT_COLOR, anchor="center")
        y += 50
        rows = [
            ("Vehicles passed", str(summary.get("total_added", 0))),
            ("Close calls", str(summary.get("close_calls", 0))),
            ("Max velocity", format_velocity(summary.get("max_velocity"))),
            ("Min velocity", format_velocity(summary.get("min_velocity"))),
            ("Simulated time", f"{summary.get('sim_time', 0.0):.1f} s"),
        ]
        for label, value in rows:
            render_text(surface, self.font_small, label, (cx - 10, y),
                        self.HUD_DIM_COLOR, anchor="midright")
            render_text(surface, self.font_small, value, (cx + 10, y),
                        self.HUD_TEXT_COLOR, anchor="midleft")
            y += 24
        render_text(surface, self.font_tiny, "ESC to quit, any other key to resume",
                    (cx, y + 20), self.HUD_DIM_COLOR, anchor="center")
