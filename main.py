#!/usr/bin/env python3
"""
main.py
=======
Interactive entry point: builds a :class:`~sim.sim_bridge.SimBridge`
from :mod:`config` defaults and environment overrides, opens the pygame
view, and prints the run summary when the window closes.
"""

import logging
import os
from typing import Any, Callable, Dict, Optional

import config
from logging_setup import setup_logging
from sim.sim_bridge import SimBridge
from ui import run_pygame_view

log = logging.getLogger("main")


def _env(name: str, parse: Callable[[str], Any], default: Any) -> Any:
    """Parsed value of environment variable *name*, or *default*."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        log.warning("ignoring %s=%r: not a valid %s", name, raw, parse.__name__)
        return default


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0.0:
        raise ValueError(raw)
    return value


def _log_level(raw: str) -> int:
    level = logging.getLevelName(raw.upper())
    if not isinstance(level, int):
        raise ValueError(raw)
    return level


def load_settings() -> Dict[str, Any]:
    """Simulation keyword arguments with environment overrides applied."""
    seed: Optional[int] = _env(config.ENV_SEED, int, config.DEFAULT_SEED)
    return {
        "tick_rate_hz": _env(config.ENV_TICK_RATE_HZ, _positive_float, config.DEFAULT_TICK_RATE_HZ),
        "safe_distance": _env(config.ENV_SAFE_DISTANCE, _positive_float, config.DEFAULT_SAFE_DISTANCE_M),
        "boundary_limit": _env(config.ENV_BOUNDARY_LIMIT, _positive_float, config.DEFAULT_BOUNDARY_LIMIT_M),
        "spawn_distance": _env(config.ENV_SPAWN_DISTANCE, _positive_float, config.DEFAULT_SPAWN_DISTANCE_M),
        "cooldown_s": config.DEFAULT_SPAWN_COOLDOWN_S,
        "random_interval_s": config.DEFAULT_RANDOM_INTERVAL_S,
        "max_random_per_direction": config.DEFAULT_MAX_RANDOM_PER_DIRECTION,
        "random_seed": seed,
    }


def format_summary(summary: Dict[str, Any]) -> str:
    def velocity(v: Optional[float]) -> str:
        return "n/a" if v is None else f"{v:.1f} m/s"

    per_direction = ", ".join(f"{k}={v}" for k, v in summary["per_direction"].items())
    return "\n".join([
        "=== Smart Road statistics ===",
        f"Vehicles added : {summary['total_added']}",
        f"Still active   : {summary['active']} ({per_direction})",
        f"Close calls    : {summary['close_calls']}",
        f"Max velocity   : {velocity(summary['max_velocity'])}",
        f"Min velocity   : {velocity(summary['min_velocity'])}",
        f"Simulated time : {summary['sim_time']:.1f} s",
    ])


def main() -> None:
    setup_logging(_log_level(config.DEFAULT_LOG_LEVEL))
    level = _env(config.ENV_LOG_LEVEL, _log_level, None)
    if level is not None:
        setup_logging(level)

    settings = load_settings()
    log.info("Starting smart road: %s", settings)
    bridge = SimBridge(**settings)

    try:
        run_pygame_view(
            bridge,
            width=config.WINDOW_WIDTH,
            height=config.WINDOW_HEIGHT,
            fps=config.TARGET_FPS,
        )
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        print(format_summary(bridge.summary()))


if __name__ == "__main__":
    main()
