#!/usr/bin/env python3
"""
Tests for manual and random vehicle generation.
"""

from __future__ import annotations

import unittest

from sim.intersection import Intersection
from sim.physics import Velocities
from sim.spawner import Spawner
from sim.vehicle import Direction, Lane


class SpawnerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = Intersection(safe_distance=10.0, boundary_limit=120.0)
        self.spawner = Spawner(
            self.engine,
            spawn_distance=100.0,
            cooldown_s=0.5,
            random_interval_s=0.8,
            max_random_per_direction=2,
            seed=11,
        )

    def test_manual_spawn_places_vehicle(self) -> None:
        v = self.spawner.spawn(Direction.NORTH, now=0.0)
        self.assertIsNotNone(v)
        self.assertEqual(v.id, 1)
        self.assertEqual(v.position, (0.0, -100.0))
        self.assertEqual(v.distance_to_intersection, 100.0)
        self.assertIs(v.direction, Direction.NORTH)
        self.assertIn(v.velocity, Velocities.MOVING)
        self.assertIn(v.route, {lane.route for lane in Lane})
        self.assertEqual(self.engine.vehicles_in_lane(Direction.NORTH), 1)

    def test_cooldown_is_per_direction(self) -> None:
        self.assertIsNotNone(self.spawner.spawn(Direction.EAST, now=0.0))
        self.assertIsNone(self.spawner.spawn(Direction.EAST, now=0.2))
        self.assertIsNotNone(self.spawner.spawn(Direction.WEST, now=0.2))
        self.assertIsNotNone(self.spawner.spawn(Direction.EAST, now=0.5))
        self.assertEqual(self.engine.total_added, 3)

    def test_manual_spawns_bypass_the_cap(self) -> None:
        for i in range(4):
            self.assertIsNotNone(self.spawner.spawn(Direction.SOUTH, now=float(i)))
        self.assertEqual(self.engine.vehicles_in_lane(Direction.SOUTH), 4)

    def test_ids_are_monotonic(self) -> None:
        ids = [
            self.spawner.spawn(d, now=0.0).id
            for d in (Direction.NORTH, Direction.SOUTH, Direction.EAST, Direction.WEST)
        ]
        self.assertEqual(ids, [1, 2, 3, 4])
        self.assertEqual(self.spawner.next_id, 5)

    def test_random_generation_is_off_by_default(self) -> None:
        self.assertIsNone(self.spawner.update(0.0))
        self.assertEqual(self.engine.total_added, 0)

    def test_random_generation_respects_interval(self) -> None:
        self.spawner.toggle_random_generation()
        first = self.spawner.update(0.0)
        self.assertIsNotNone(first)
        self.assertIsNone(self.spawner.update(0.5))
        self.assertEqual(self.engine.total_added, 1)

    def test_random_generation_caps_each_direction(self) -> None:
        self.assertTrue(self.spawner.toggle_random_generation())
        now = 0.0
        for _ in range(200):
            self.spawner.update(now)
            now += 1.0
        for direction in Direction:
            self.assertEqual(self.engine.vehicles_in_lane(direction), 2)
        self.assertEqual(self.engine.total_added, 8)

    def test_seeded_runs_are_reproducible(self) -> None:
        def run(seed):
            engine = Intersection()
            spawner = Spawner(engine, seed=seed)
            spawner.toggle_random_generation()
            for i in range(20):
                spawner.update(float(i))
            return [(v.id, v.direction, v.route, v.velocity) for v in engine.all_vehicles()]

        self.assertEqual(run(5), run(5))

    def test_reset_keeps_id_sequence(self) -> None:
        self.spawner.toggle_random_generation()
        self.spawner.spawn(Direction.NORTH, now=0.0)
        self.spawner.reset()
        self.assertFalse(self.spawner.random_generation)
        v = self.spawner.spawn(Direction.NORTH, now=0.0)
        self.assertEqual(v.id, 2)


if __name__ == "__main__":
    unittest.main()
