#!/usr/bin/env python3
"""
sim/spawner.py
==============
Creates vehicles and hands them to the :class:`~sim.intersection.Intersection`.

Two sources feed the engine:

* manual spawns (one per key press), throttled by a per-direction cooldown;
* random generation, at most one vehicle per ``random_interval_s`` in a
  random direction, skipped while that direction already holds
  ``max_random_per_direction`` vehicles.

All timing uses simulated seconds supplied by the caller so that a seeded
run replays identically.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, Optional

from sim.intersection import DIRECTIONS, Intersection
from sim.physics import Velocities
from sim.vehicle import Direction, Lane, Vehicle, spawn_position

log = logging.getLogger("spawner")


class Spawner:
    """Vehicle factory with cooldown and random generation.

    Parameters
    ----------
    engine : Intersection
        Receives every created vehicle.
    spawn_distance : float
        Distance from the centre at which vehicles appear (m).
    cooldown_s : float
        Minimum simulated time between two spawns in the same direction.
    random_interval_s : float
        Minimum simulated time between two random spawns.
    max_random_per_direction : int
        Random generation skips a direction holding this many vehicles.
    seed : int or None
        Seed of the private :class:`random.Random`.
    """

    def __init__(
        self,
        engine: Intersection,
        spawn_distance: float = 120.0,
        cooldown_s: float = 0.5,
        random_interval_s: float = 0.8,
        max_random_per_direction: int = 2,
        seed: Optional[int] = None,
    ) -> None:
        self.engine = engine
        self.spawn_distance = spawn_distance
        self.cooldown_s = cooldown_s
        self.random_interval_s = random_interval_s
        self.max_random_per_direction = max_random_per_direction
        self._rng = random.Random(seed)
        self._next_id: int = 1
        self._last_spawn: Dict[Direction, float] = {}
        self._last_random: Optional[float] = None
        self.random_generation: bool = False

    @property
    def next_id(self) -> int:
        return self._next_id

    def reset(self) -> None:
        """Forget cooldowns and stop random generation; ids keep counting."""
        self._last_spawn.clear()
        self._last_random = None
        self.random_generation = False

    def toggle_random_generation(self) -> bool:
        self.random_generation = not self.random_generation
        log.info("random generation %s", "on" if self.random_generation else "off")
        return self.random_generation

    def can_spawn(self, direction: Direction, now: float) -> bool:
        last = self._last_spawn.get(direction)
        return last is None or now - last >= self.cooldown_s

    def spawn(self, direction: Direction, now: float) -> Optional[Vehicle]:
        """Spawn one vehicle heading *direction* unless it is cooling down."""
        if not self.can_spawn(direction, now):
            log.debug("spawn %s rejected: cooldown", direction.name)
            return None
        return self._create(direction, now)

    def update(self, now: float) -> Optional[Vehicle]:
        """Random generation step; returns the spawned vehicle, if any."""
        if not self.random_generation:
            return None
        if self._last_random is not None and now - self._last_random < self.random_interval_s:
            return None
        self._last_random = now

        direction = self._rng.choice(DIRECTIONS)
        if self.engine.vehicles_in_lane(direction) >= self.max_random_per_direction:
            log.debug("random spawn %s skipped: lane full", direction.name)
            return None
        if not self.can_spawn(direction, now):
            return None
        return self._create(direction, now)

    def _create(self, direction: Direction, now: float) -> Optional[Vehicle]:
        lane = self._rng.choice(list(Lane))
        velocity = self._rng.choice(Velocities.MOVING)
        vehicle = Vehicle(
            id=self._next_id,
            position=spawn_position(direction, self.spawn_distance),
            velocity=velocity,
            route=lane.route,
            direction=direction,
            distance_to_intersection=self.spawn_distance,
        )
        self._next_id += 1
        if not self.engine.add_vehicle(direction, vehicle):
            log.error("engine rejected vehicle %d heading %s", vehicle.id, direction.name)
            return None
        self._last_spawn[direction] = now
        return vehicle
