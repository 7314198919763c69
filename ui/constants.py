#!/usr/bin/env python3
"""Visual constants shared across all renderers."""

from __future__ import annotations

from typing import Sequence, Tuple

from .types import ColorRGB


class ViewConstants:
    """Mixin providing every visual / layout constant."""

    BG_COLOR: ColorRGB = (34, 92, 48)
    ROAD_COLOR: ColorRGB = (30, 30, 30)
    INTERSECTION_COLOR: ColorRGB = (40, 40, 40)
    LANE_DASH_COLOR: ColorRGB = (200, 200, 200)
    MEDIAN_COLOR: ColorRGB = (230, 190, 60)
    LANE_EDGE_COLOR: ColorRGB = (90, 90, 90)
    STOP_LINE_COLOR: ColorRGB = (235, 235, 235)
    HUD_BG_COLOR: ColorRGB = (22, 22, 22)
    HUD_BORDER_COLOR: ColorRGB = (42, 42, 42)
    HUD_TEXT_COLOR: ColorRGB = (230, 230, 235)
    HUD_DIM_COLOR: ColorRGB = (140, 140, 140)
    WARNING_COLOR: ColorRGB = (255, 60, 60)
    GO_COLOR: ColorRGB = (0, 255, 127)
    STOP_COLOR: ColorRGB = (255, 60, 60)

    HUD_BLINK_MS = 500
    STATS_OVERLAY_ALPHA = 190

    PIXELS_PER_METER = 3.5
    DASH_LEN_M = 3.0
    DASH_GAP_M = 3.0
    VEHICLE_LENGTH_M = 4.5
    VEHICLE_WIDTH_M = 2.2

    KEY_HELP: Sequence[Tuple[str, str]] = (
        ("ARROWS", "Spawn vehicle"),
        ("R", "Random generation"),
        ("SPACE", "Pause/Resume"),
        ("F3", "Debug overlay"),
        ("ESC", "Statistics / quit"),
    )
