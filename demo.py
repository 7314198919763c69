#!/usr/bin/env python3
"""
Quick demo: runs the simulation headless with random generation on,
then prints the same statistics the pygame view shows on exit.

Usage:
    python3 demo.py
"""

import logging

from logging_setup import setup_logging
from main import format_summary
from sim.sim_bridge import SimBridge
from sim.vehicle import Direction

DEMO_SEED = 7
DEMO_SECONDS = 60.0


def run_demo(seconds: float = DEMO_SECONDS, seed: int = DEMO_SEED) -> dict:
    """Seeded headless run; returns :meth:`SimBridge.summary`."""
    bridge = SimBridge(random_seed=seed)
    # one vehicle per approach before random traffic starts
    for direction in Direction:
        bridge.spawn(direction)
    bridge.toggle_random_generation()
    bridge.run_for(seconds)
    return bridge.summary()


if __name__ == "__main__":
    setup_logging(logging.INFO)
    print(format_summary(run_demo()))
