#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Values can be overridden via environment variables (see :mod:`main`).
This module is import-safe: besides shared geometry from
:mod:`sim.vehicle` it never imports from other project packages.
"""

from sim.vehicle import DEFAULT_BOUNDARY_LIMIT_M

# ── Simulation defaults ──────────────────────────────────────────────────────
DEFAULT_TICK_RATE_HZ: float = 30.0
DEFAULT_SAFE_DISTANCE_M: float = 10.0
DEFAULT_SEED = None

# ── Spawner defaults ─────────────────────────────────────────────────────────
DEFAULT_SPAWN_DISTANCE_M: float = 120.0
DEFAULT_SPAWN_COOLDOWN_S: float = 0.5
DEFAULT_RANDOM_INTERVAL_S: float = 0.8
DEFAULT_MAX_RANDOM_PER_DIRECTION: int = 2

# ── UI defaults ──────────────────────────────────────────────────────────────
WINDOW_WIDTH: int = 900
WINDOW_HEIGHT: int = 900
TARGET_FPS: int = 60

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_FILE: str = "smart_road.log"
DEBUG_LOG_FILE: str = "intersection_debug.log"
DEFAULT_LOG_LEVEL: str = "INFO"

# ── Environment variable names ───────────────────────────────────────────────
ENV_SAFE_DISTANCE = "SMART_ROAD_SAFE_DISTANCE"
ENV_BOUNDARY_LIMIT = "SMART_ROAD_BOUNDARY_LIMIT"
ENV_SPAWN_DISTANCE = "SMART_ROAD_SPAWN_DISTANCE"
ENV_TICK_RATE_HZ = "SMART_ROAD_TICK_RATE_HZ"
ENV_SEED = "SMART_ROAD_SEED"
ENV_LOG_LEVEL = "SMART_ROAD_LOG_LEVEL"
