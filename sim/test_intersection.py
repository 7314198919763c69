#!/usr/bin/env python3
"""
Behaviour tests for the per-tick arbitration engine.
"""

from __future__ import annotations

import itertools
import unittest

from bus.event_bus import (
    TOPIC_CLOSE_CALL,
    TOPIC_VEHICLE_ADDED,
    TOPIC_VELOCITY,
    EventBus,
)
from sim.intersection import Intersection
from sim.physics import Velocities
from sim.sim_bridge import SimBridge
from sim.spawner import Spawner
from sim.test_vehicle import make_vehicle
from sim.traffic_policy import ArbitrationPolicy, paths_cross, time_to_center
from sim.vehicle import Direction, Route

N, S, E, W = Direction.NORTH, Direction.SOUTH, Direction.EAST, Direction.WEST


def engine_with(*vehicles, **kwargs) -> Intersection:
    engine = Intersection(safe_distance=10.0, boundary_limit=120.0, **kwargs)
    for v in vehicles:
        engine.add_vehicle(v.direction, v)
    return engine


class LaneQueueTests(unittest.TestCase):
    def test_add_vehicle_and_reporting(self) -> None:
        engine = engine_with(
            make_vehicle(1, N, Route.STRAIGHT, 100.0),
            make_vehicle(2, N, Route.LEFT, 120.0),
            make_vehicle(3, W, Route.RIGHT, 100.0),
        )
        self.assertEqual(engine.total_added, 3)
        self.assertEqual(engine.total_vehicles(), 3)
        self.assertEqual(engine.vehicles_in_lane(N), 2)
        self.assertEqual(engine.lane_counts(), {"NORTH": 2, "SOUTH": 0, "EAST": 0, "WEST": 1})
        self.assertEqual(engine.report()["total_added"], 3)

    def test_unregistered_direction_is_rejected(self) -> None:
        engine = engine_with()
        self.assertFalse(engine.add_vehicle("UP", make_vehicle(1, N, Route.LEFT, 50.0)))
        self.assertEqual(engine.total_added, 0)

    def test_inactive_vehicles_are_purged(self) -> None:
        leaving = make_vehicle(1, E, Route.STRAIGHT, -119.0, velocity=15.0)
        engine = engine_with(leaving)
        engine.update(0.1)
        self.assertFalse(leaving.active)
        self.assertEqual(engine.total_vehicles(), 0)
        self.assertEqual(engine.total_added, 1)

    def test_reset(self) -> None:
        engine = engine_with(make_vehicle(1, N, Route.STRAIGHT, 50.0))
        engine.update(0.1)
        engine.reset()
        self.assertEqual(engine.total_vehicles(), 0)
        self.assertEqual(engine.total_added, 0)
        self.assertEqual(engine.last_decisions, {})

    def test_snapshot_is_detached(self) -> None:
        v = make_vehicle(1, N, Route.STRAIGHT, 50.0)
        engine = engine_with(v)
        snap = engine.snapshot()
        snap[N][0].distance_to_intersection = 0.0
        self.assertEqual(v.distance_to_intersection, 50.0)


class ArbitrationTests(unittest.TestCase):
    def test_lone_vehicle_slows_on_approach(self) -> None:
        v = make_vehicle(1, S, Route.STRAIGHT, 100.0, velocity=Velocities.SLOW)
        engine = engine_with(v)
        seen = set()
        for _ in range(300):
            engine.update(0.05)
            if v.active:
                seen.add((v.velocity, abs(v.distance_to_intersection) < 15.0))
        self.assertIn((Velocities.FAST, False), seen)
        self.assertIn((Velocities.SLOW, True), seen)
        self.assertNotIn((Velocities.FAST, True), seen)

    def test_monotonic_approach(self) -> None:
        engine = engine_with(
            make_vehicle(1, N, Route.STRAIGHT, 40.0),
            make_vehicle(2, N, Route.STRAIGHT, 52.0),
            make_vehicle(3, E, Route.LEFT, 30.0),
            make_vehicle(4, S, Route.RIGHT, 25.0),
            make_vehicle(5, W, Route.STRAIGHT, 60.0),
        )
        dt = 0.05
        for _ in range(100):
            before = {v.id: v.distance_to_intersection for v in engine.all_vehicles()}
            engine.update(dt)
            for v in engine.all_vehicles():
                self.assertIn(v.velocity, Velocities.LEVELS)
                self.assertAlmostEqual(before[v.id] - v.distance_to_intersection, v.velocity * dt)

    def test_trailing_vehicle_decides_from_snapshot(self) -> None:
        # the leader is processed first; reading its moved position would give SLOW
        leader = make_vehicle(1, N, Route.STRAIGHT, 40.0, velocity=Velocities.FAST)
        follower = make_vehicle(2, N, Route.STRAIGHT, 49.5, velocity=Velocities.FAST)
        engine = engine_with(leader, follower)
        engine.update(0.1)
        self.assertEqual(leader.velocity, Velocities.FAST)
        self.assertEqual(follower.velocity, Velocities.STOP)

    def test_lane_order_does_not_change_decisions(self) -> None:
        def build(order):
            vehicles = {
                1: make_vehicle(1, N, Route.STRAIGHT, 18.0),
                2: make_vehicle(2, S, Route.STRAIGHT, 19.0),
                3: make_vehicle(3, N, Route.STRAIGHT, 29.0),
                4: make_vehicle(4, E, Route.LEFT, 17.0),
            }
            return engine_with(*(vehicles[i] for i in order))

        first = build([1, 2, 3, 4])
        second = build([4, 3, 2, 1])
        for _ in range(10):
            first.update(0.05)
            second.update(0.05)
            self.assertEqual(
                {v.id: v.velocity for v in first.all_vehicles()},
                {v.id: v.velocity for v in second.all_vehicles()},
            )

    def test_opposing_straights_yield_by_direction(self) -> None:
        north = make_vehicle(1, N, Route.STRAIGHT, 18.0)
        south = make_vehicle(2, S, Route.STRAIGHT, 19.0)
        engine = engine_with(south, north)
        engine.update(0.05)
        self.assertGreater(north.velocity, 0.0)
        self.assertEqual(south.velocity, Velocities.STOP)
        self.assertEqual(engine.last_decisions[2].yields_to, 1)
        self.assertIsNone(engine.last_decisions[1].yields_to)

    def test_left_turn_yields_to_straight(self) -> None:
        left = make_vehicle(1, E, Route.LEFT, 15.0)
        straight = make_vehicle(2, N, Route.STRAIGHT, 16.0)
        engine = engine_with(left, straight)
        engine.update(0.05)
        self.assertEqual(left.velocity, Velocities.STOP)
        self.assertGreater(straight.velocity, 0.0)

    def test_perpendicular_straights_do_not_conflict(self) -> None:
        a = make_vehicle(1, N, Route.STRAIGHT, 18.0)
        b = make_vehicle(2, E, Route.STRAIGHT, 18.0)
        engine = engine_with(a, b)
        engine.update(0.05)
        self.assertIsNone(engine.last_decisions[1].yields_to)
        self.assertIsNone(engine.last_decisions[2].yields_to)

    def test_yielding_outside_braking_zone_only_slows(self) -> None:
        policy = ArbitrationPolicy(
            entry_margin_m=30.0, scan_radius_factor=5.0, scan_radius_max_factor=6.0,
        )
        north = make_vehicle(1, N, Route.STRAIGHT, 34.0)
        south = make_vehicle(2, S, Route.STRAIGHT, 35.0)
        engine = engine_with(north, south, policy=policy)
        engine.update(0.05)
        self.assertEqual(south.velocity, Velocities.SLOW)
        self.assertEqual(engine.last_decisions[2].yields_to, 1)

    def test_conflict_exclusivity(self) -> None:
        distances = (1.0, 6.0, 12.0, 17.0, 20.0)
        routes = (Route.STRAIGHT, Route.LEFT)
        checked = 0
        for (da, db) in itertools.permutations(Direction, 2):
            for ra, rb in itertools.product(routes, repeat=2):
                if not paths_cross(da, ra, db, rb):
                    continue
                for (xa, xb), (va, vb) in itertools.product(
                    itertools.product(distances, repeat=2),
                    itertools.product(Velocities.MOVING, repeat=2),
                ):
                    a = make_vehicle(1, da, ra, xa, velocity=va)
                    b = make_vehicle(2, db, rb, xb, velocity=vb)
                    engine = engine_with(a, b)
                    occupancy = engine.occupancy(engine.snapshot())
                    window = engine.policy.time_buffer(occupancy)
                    if abs(time_to_center(a) - time_to_center(b)) >= window:
                        continue
                    engine.update(0.05)
                    moving = [v for v in (a, b) if v.velocity > 0.0]
                    self.assertLessEqual(len(moving), 1, (a, b))
                    checked += 1
        self.assertGreater(checked, 0)

    def test_right_turner_is_never_stopped(self) -> None:
        leader = make_vehicle(1, W, Route.RIGHT, 11.0)
        follower = make_vehicle(2, W, Route.RIGHT, 13.0)
        engine = engine_with(leader, follower)
        engine.update(0.05)
        self.assertEqual(follower.velocity, Velocities.SLOW)
        self.assertEqual(leader.velocity, Velocities.SLOW)

    def test_right_turn_floor_under_random_traffic(self) -> None:
        engine = Intersection(safe_distance=10.0, boundary_limit=120.0)
        spawner = Spawner(engine, spawn_distance=120.0, random_interval_s=0.3, seed=3)
        spawner.toggle_random_generation()
        now = 0.0
        for _ in range(1500):
            spawner.update(now)
            engine.update(1.0 / 30.0)
            now += 1.0 / 30.0
            for v in engine.active_vehicles():
                if v.route is Route.RIGHT:
                    self.assertGreater(v.velocity, 0.0, v)
        self.assertGreater(engine.total_added, 10)

    def test_crossing_pair_eventually_clears(self) -> None:
        engine = engine_with(
            make_vehicle(1, N, Route.STRAIGHT, 18.0),
            make_vehicle(2, S, Route.STRAIGHT, 19.0),
        )
        for _ in range(1200):
            engine.update(0.05)
        self.assertEqual(engine.total_vehicles(), 0)


class CollisionSafetyTests(unittest.TestCase):
    def test_same_lane_follower_is_never_fast(self) -> None:
        leader = make_vehicle(1, N, Route.STRAIGHT, 40.0, velocity=Velocities.FAST)
        follower = make_vehicle(2, N, Route.STRAIGHT, 45.0, velocity=Velocities.FAST)
        engine = engine_with(leader, follower)
        engine.update(0.05)
        self.assertNotEqual(engine.last_decisions[2].proximity, Velocities.FAST)
        self.assertEqual(engine.last_decisions[2].proximity, Velocities.STOP)

    def test_right_of_way_does_not_drive_into_stopped_vehicle(self) -> None:
        # the northbound vehicle is past the centre and outranks the blocker
        mover = make_vehicle(1, N, Route.STRAIGHT, -3.0, velocity=Velocities.SLOW)
        blocker = make_vehicle(2, W, Route.STRAIGHT, 5.5, velocity=Velocities.STOP)
        engine = engine_with(mover, blocker)
        self.assertLess(mover.distance_to(blocker), 2.5)
        engine.update(0.05)
        self.assertEqual(engine.last_decisions[1].proximity, Velocities.STOP)
        self.assertEqual(mover.velocity, Velocities.STOP)

    def test_vehicle_behind_does_not_brake_leader(self) -> None:
        ahead = make_vehicle(1, E, Route.STRAIGHT, -8.0, velocity=Velocities.SLOW)
        behind = make_vehicle(2, N, Route.LEFT, 4.0, velocity=Velocities.SLOW)
        engine = engine_with(ahead, behind)
        forward, _ = ahead.relative_offset(behind)
        self.assertLess(forward, 0.0)
        self.assertFalse(engine._constrains(ahead, behind))

    def test_at_most_one_of_a_pair_is_constrained(self) -> None:
        engine = engine_with()
        distances = (-6.0, -2.0, 2.0, 5.5, 9.0, 14.0)
        checked = 0
        for da, db in itertools.permutations(Direction, 2):
            for ra, rb in itertools.product(Route, repeat=2):
                for xa, xb in itertools.product(distances, repeat=2):
                    a = make_vehicle(1, da, ra, xa)
                    b = make_vehicle(2, db, rb, xb)
                    both = engine._constrains(a, b) and engine._constrains(b, a)
                    self.assertFalse(both, (a, b))
                    checked += 1
        self.assertGreater(checked, 0)

    def test_crossing_traffic_keeps_apart(self) -> None:
        bridge = SimBridge(tick_rate_hz=30.0, random_seed=14)
        bridge.toggle_random_generation()
        closest = float("inf")
        for _ in range(1800):
            bridge.step()
            active = bridge.engine.active_vehicles()
            for a, b in itertools.combinations(active, 2):
                if a.entry_direction is b.entry_direction:
                    continue
                closest = min(closest, a.distance_to(b))
        self.assertGreater(bridge.engine.total_added, 20)
        self.assertGreater(closest, 1.0)


class EventTests(unittest.TestCase):
    def test_engine_publishes_observable_events(self) -> None:
        bus = EventBus()
        engine = Intersection(safe_distance=10.0, boundary_limit=120.0, bus=bus)
        engine.add_vehicle(N, make_vehicle(1, N, Route.STRAIGHT, 40.0))
        engine.add_vehicle(N, make_vehicle(2, N, Route.STRAIGHT, 45.0))
        self.assertEqual(bus.pending(TOPIC_VEHICLE_ADDED), 2)

        engine.update(0.05)
        self.assertEqual(bus.pending(TOPIC_VELOCITY), 2)
        calls = bus.poll(TOPIC_CLOSE_CALL)
        self.assertEqual(len(calls), 1)
        self.assertEqual(calls[0].payload["pair"], (1, 2))
        self.assertEqual(engine.close_calls.total, 1)

        engine.update(0.05)
        self.assertEqual(bus.pending(TOPIC_CLOSE_CALL), 0)


if __name__ == "__main__":
    unittest.main()
