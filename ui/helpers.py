"""
ui/helpers.py
=============
Pure utility functions shared across UI modules:
direction ↔ heading mapping, alpha-rectangle drawing, text rendering,
and the :class:`ViewHelpers` mixin (fonts and vehicle-dict accessors).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

import pygame

log = logging.getLogger("ui")

# ── Direction / heading ───────────────────────────────────────────────────────

_DIR_TO_HEADING: Dict[str, float] = {
    "EAST":  0.0,
    "NORTH": 90.0,
    "WEST":  180.0,
    "SOUTH": 270.0,
}


def direction_to_heading(direction: str) -> float:
    """Convert a cardinal direction string to degrees (0 = East, CCW)."""
    return _DIR_TO_HEADING.get(direction.upper(), 0.0)


# ── Alpha drawing helpers ────────────────────────────────────────────────────

def draw_alpha_rect(
    target: pygame.Surface,
    color: Tuple[int, ...],
    rect: pygame.Rect,
    border_radius: int = 0,
) -> None:
    """Draw a semi-transparent rectangle (colour tuple with 4 channels)."""
    tmp = pygame.Surface((rect.w, rect.h), pygame.SRCALPHA)
    pygame.draw.rect(tmp, color, (0, 0, rect.w, rect.h), border_radius=border_radius)
    target.blit(tmp, rect.topleft)


# ── Text helper ──────────────────────────────────────────────────────────────

def render_text(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: Tuple[int, int],
    color: Tuple[int, ...] = (230, 230, 235),
    anchor: str = "topleft",
) -> pygame.Rect:
    """Render text with flexible *anchor* ('topleft', 'center', 'midright' …)."""
    img = font.render(text, True, color)
    rect = img.get_rect(**{anchor: pos})
    surface.blit(img, rect)
    return rect


def format_velocity(velocity: Optional[float]) -> str:
    if velocity is None:
        return "n/a"
    return f"{velocity:.1f} m/s"


class ViewHelpers:
    """Mixin with font loading and vehicle-dict accessors."""

    FONT_NAMES = "dejavusansmono,consolas,menlo,couriernew"

    @classmethod
    def _load_font(cls, size: int, bold: bool = False) -> pygame.font.Font:
        """Monospace system font, or pygame's default font when none exists."""
        path = pygame.font.match_font(cls.FONT_NAMES, bold=bold)
        if path is None:
            log.warning("no monospace system font found, using pygame default")
            return pygame.font.Font(None, size + 4)
        return pygame.font.Font(path, size)

    @staticmethod
    def _vehicle_id(vehicle: Mapping[str, Any]) -> int:
        return int(vehicle["id"])

    @staticmethod
    def _world_xy(vehicle: Mapping[str, Any]) -> Tuple[float, float]:
        return float(vehicle["x"]), float(vehicle["y"])

    @staticmethod
    def _heading(vehicle: Mapping[str, Any]) -> float:
        return direction_to_heading(str(vehicle.get("direction", "EAST")))
