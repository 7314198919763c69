#!/usr/bin/env python3
"""
Tests for the stateless arbitration helpers: path-crossing table,
right-of-way cascade and speed mappings.
"""

from __future__ import annotations

import itertools
import math
import unittest

from sim.physics import Velocities
from sim.test_vehicle import make_vehicle
from sim.traffic_policy import (
    ArbitrationPolicy,
    context_speed,
    has_right_of_way,
    paths_cross,
    speed_for_gap,
    time_to_center,
)
from sim.vehicle import Direction, Route

N, S, E, W = Direction.NORTH, Direction.SOUTH, Direction.EAST, Direction.WEST


class PathsCrossTests(unittest.TestCase):
    def test_right_never_crosses(self) -> None:
        for d1, d2 in itertools.product(Direction, repeat=2):
            for route in Route:
                self.assertFalse(paths_cross(d1, Route.RIGHT, d2, route))
                self.assertFalse(paths_cross(d1, route, d2, Route.RIGHT))

    def test_left_crosses_everything_else(self) -> None:
        for d1, d2 in itertools.product(Direction, repeat=2):
            for route in (Route.LEFT, Route.STRAIGHT):
                self.assertTrue(paths_cross(d1, Route.LEFT, d2, route))
                self.assertTrue(paths_cross(d1, route, d2, Route.LEFT))

    def test_straight_pairs_cross_only_when_opposing(self) -> None:
        self.assertTrue(paths_cross(N, Route.STRAIGHT, S, Route.STRAIGHT))
        self.assertTrue(paths_cross(E, Route.STRAIGHT, W, Route.STRAIGHT))
        self.assertFalse(paths_cross(N, Route.STRAIGHT, E, Route.STRAIGHT))
        self.assertFalse(paths_cross(S, Route.STRAIGHT, W, Route.STRAIGHT))


class RightOfWayTests(unittest.TestCase):
    def test_past_centre_beats_approaching(self) -> None:
        past = make_vehicle(9, W, Route.LEFT, -1.0)
        approaching = make_vehicle(1, N, Route.STRAIGHT, 0.5)
        self.assertTrue(has_right_of_way(past, approaching))
        self.assertFalse(has_right_of_way(approaching, past))

    def test_closer_wins_outside_noise_band(self) -> None:
        near = make_vehicle(9, W, Route.LEFT, 10.0)
        far = make_vehicle(1, N, Route.STRAIGHT, 16.0)
        self.assertTrue(has_right_of_way(near, far))
        self.assertFalse(has_right_of_way(far, near))

    def test_route_priority_inside_noise_band(self) -> None:
        straight = make_vehicle(9, W, Route.STRAIGHT, 14.0)
        right = make_vehicle(2, N, Route.RIGHT, 12.0)
        left = make_vehicle(1, N, Route.LEFT, 10.0)
        self.assertTrue(has_right_of_way(straight, right))
        self.assertTrue(has_right_of_way(right, left))
        self.assertTrue(has_right_of_way(straight, left))

    def test_direction_priority(self) -> None:
        order = [N, E, S, W]
        for i, j in itertools.combinations(range(4), 2):
            a = make_vehicle(9, order[i], Route.STRAIGHT, 12.0)
            b = make_vehicle(1, order[j], Route.STRAIGHT, 12.0)
            self.assertTrue(has_right_of_way(a, b), (order[i], order[j]))
            self.assertFalse(has_right_of_way(b, a))

    def test_lower_id_breaks_ties(self) -> None:
        a = make_vehicle(3, E, Route.LEFT, 12.0)
        b = make_vehicle(4, E, Route.LEFT, 12.0)
        self.assertTrue(has_right_of_way(a, b))
        self.assertFalse(has_right_of_way(b, a))

    def test_noise_band_is_configurable(self) -> None:
        policy = ArbitrationPolicy(distance_noise_band_m=0.0)
        near_left = make_vehicle(1, W, Route.LEFT, 11.0)
        far_straight = make_vehicle(2, N, Route.STRAIGHT, 12.0)
        self.assertTrue(has_right_of_way(near_left, far_straight, policy))
        self.assertFalse(has_right_of_way(near_left, far_straight))

    def test_cascade_is_antisymmetric(self) -> None:
        distances = (-3.0, 0.0, 4.0, 8.0, 20.0)
        vehicles = [
            make_vehicle(vid, d, route, dist)
            for vid, (d, route, dist) in enumerate(
                itertools.product(Direction, Route, distances), start=1
            )
        ]
        for a, b in itertools.combinations(vehicles, 2):
            self.assertNotEqual(has_right_of_way(a, b), has_right_of_way(b, a), (a, b))


class SpeedMappingTests(unittest.TestCase):
    def test_gap_thresholds(self) -> None:
        self.assertEqual(speed_for_gap(None, 10.0), Velocities.FAST)
        self.assertEqual(speed_for_gap(10.0, 10.0), Velocities.STOP)
        self.assertEqual(speed_for_gap(15.0, 10.0), Velocities.SLOW)
        self.assertEqual(speed_for_gap(25.0, 10.0), Velocities.MEDIUM)
        self.assertEqual(speed_for_gap(35.0, 10.0), Velocities.FAST)

    def test_close_follower_is_never_fast(self) -> None:
        leader = make_vehicle(1, N, Route.STRAIGHT, 40.0)
        follower = make_vehicle(2, N, Route.STRAIGHT, 45.0)
        speed = speed_for_gap(follower.distance_to(leader), 10.0)
        self.assertNotEqual(speed, Velocities.FAST)
        self.assertEqual(speed, Velocities.STOP)

    def test_gap_mapping_is_monotonic(self) -> None:
        speeds = [speed_for_gap(g, 10.0) for g in range(0, 50)]
        self.assertEqual(speeds, sorted(speeds))

    def test_context_speed_uses_absolute_distance(self) -> None:
        self.assertEqual(context_speed(50.0), Velocities.FAST)
        self.assertEqual(context_speed(20.0), Velocities.MEDIUM)
        self.assertEqual(context_speed(5.0), Velocities.SLOW)
        self.assertEqual(context_speed(-5.0), Velocities.SLOW)
        self.assertEqual(context_speed(-40.0), Velocities.FAST)

    def test_time_to_center(self) -> None:
        v = make_vehicle(1, N, Route.STRAIGHT, 20.0, velocity=10.0)
        self.assertAlmostEqual(time_to_center(v), 2.0)
        self.assertAlmostEqual(time_to_center(v, Velocities.SLOW), 4.0)
        v.stop()
        self.assertTrue(math.isinf(time_to_center(v)))


class PolicyTests(unittest.TestCase):
    def test_entry_distance(self) -> None:
        self.assertAlmostEqual(ArbitrationPolicy().intersection_entry_distance, 20.5)

    def test_windows_widen_with_occupancy_and_saturate(self) -> None:
        policy = ArbitrationPolicy()
        self.assertAlmostEqual(policy.time_buffer(0), 3.0)
        self.assertAlmostEqual(policy.time_buffer(2), 4.0)
        self.assertAlmostEqual(policy.time_buffer(50), 5.0)
        self.assertAlmostEqual(policy.scan_radius(0), 21.0)
        self.assertGreater(policy.scan_radius(1), policy.scan_radius(0))
        self.assertAlmostEqual(policy.scan_radius(50), 42.0)


if __name__ == "__main__":
    unittest.main()
