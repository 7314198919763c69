#!/usr/bin/env python3
"""
sim/intersection.py
===================
Per-tick arbitration engine for the unsignalled intersection.

The :class:`Intersection` owns one vehicle queue per approach direction and
is their only writer.  Every tick it

1. freezes a snapshot of all queues,
2. decides a discrete speed for every active vehicle purely from that
   snapshot (proximity, intersection-zone and context stages; the most
   conservative candidate wins),
3. commits the decisions: assigns speeds, advances vehicles, deactivates
   the ones out of bounds,
4. purges inactive vehicles from every queue.

Because step 2 never reads live state, decisions for tick *N* all observe
the world as of the end of tick *N-1* and processing order cannot create
priority inversions.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from bus.event_bus import (
    TOPIC_CLOSE_CALL,
    TOPIC_VEHICLE_ADDED,
    TOPIC_VELOCITY,
    EventBus,
)
from sim.close_calls import CloseCallTracker
from sim.physics import Physics, Velocities
from sim.traffic_policy import (
    ArbitrationPolicy,
    context_speed,
    has_right_of_way,
    paths_cross,
    speed_for_gap,
    time_to_center,
)
from sim.vehicle import DEFAULT_BOUNDARY_LIMIT_M, Direction, Route, Vehicle

log = logging.getLogger("intersection")

DIRECTIONS: Tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.SOUTH,
    Direction.EAST,
    Direction.WEST,
)

Snapshot = Mapping[Direction, Tuple[Vehicle, ...]]

# Emit the per-vehicle decision dump once every this many ticks.
_DEBUG_DUMP_EVERY = 60


@dataclass(frozen=True)
class SpeedDecision:
    """Candidate speeds of one vehicle for one tick."""

    vehicle_id: int
    proximity: float
    zone: float
    context: float
    yields_to: Optional[int] = None

    @property
    def speed(self) -> float:
        return min(self.proximity, self.zone, self.context)


class Intersection:
    """Lane queues plus the per-tick decision loop.

    Parameters
    ----------
    safe_distance : float
        Minimum tolerated separation between vehicles (m).
    boundary_limit : float
        Distance past the centre at which vehicles are removed (m).
    policy : ArbitrationPolicy or None
        Tunable thresholds; uses defaults when *None*.
    bus : EventBus or None
        Receives ``vehicle.added``, ``vehicle.close_call`` and
        ``vehicle.velocity`` events.  Purely observational.
    """

    def __init__(
        self,
        safe_distance: float = 10.0,
        boundary_limit: float = DEFAULT_BOUNDARY_LIMIT_M,
        policy: Optional[ArbitrationPolicy] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.lanes: Dict[Direction, List[Vehicle]] = {d: [] for d in DIRECTIONS}
        self.safe_distance = safe_distance
        self.physics = Physics(safe_distance, boundary_limit)
        self.policy = policy or ArbitrationPolicy()
        self.intersection_entry_distance = self.policy.intersection_entry_distance
        self.close_calls = CloseCallTracker(safe_distance)
        self.bus = bus
        self.total_added: int = 0
        self.last_decisions: Dict[int, SpeedDecision] = {}
        self._tick_count: int = 0

    # ── spawner interface ─────────────────────────────────────────────────

    def add_vehicle(self, direction: Direction, vehicle: Vehicle) -> bool:
        """Queue *vehicle* on the lane approaching in *direction*.

        Returns ``False`` only for an unregistered direction, which cannot
        happen with the four pre-registered approaches.
        """
        lane = self.lanes.get(direction)
        if lane is None:
            log.error("add_vehicle: unregistered direction %r for vehicle %s",
                      direction, vehicle.id)
            return False
        lane.append(vehicle)
        self.total_added += 1
        log.info("vehicle %d added: %s %s v=%.1f",
                 vehicle.id, direction.name, vehicle.route.name, vehicle.velocity)
        self._publish(TOPIC_VEHICLE_ADDED, {
            "id": vehicle.id,
            "direction": direction.name,
            "route": vehicle.route.name,
            "velocity": vehicle.velocity,
        })
        return True

    def reset(self) -> None:
        for lane in self.lanes.values():
            lane.clear()
        self.total_added = 0
        self.last_decisions = {}
        self.close_calls.reset()
        self._tick_count = 0

    # ── queries ───────────────────────────────────────────────────────────

    def all_vehicles(self) -> List[Vehicle]:
        return [v for d in DIRECTIONS for v in self.lanes[d]]

    def active_vehicles(self) -> List[Vehicle]:
        return [v for v in self.all_vehicles() if v.active]

    def total_vehicles(self) -> int:
        return sum(len(lane) for lane in self.lanes.values())

    def vehicles_in_lane(self, direction: Direction) -> int:
        return len(self.lanes.get(direction, ()))

    def active_count(self) -> int:
        return len(self.active_vehicles())

    def lane_counts(self) -> Dict[str, int]:
        return {d.name: sum(1 for v in self.lanes[d] if v.active) for d in DIRECTIONS}

    def report(self) -> Dict[str, object]:
        """Totals for the terminal summary."""
        return {
            "total_added": self.total_added,
            "active": self.active_count(),
            "per_direction": self.lane_counts(),
            "close_calls": self.close_calls.total,
            "ticks": self._tick_count,
        }

    # ── tick ──────────────────────────────────────────────────────────────

    def snapshot(self) -> Dict[Direction, Tuple[Vehicle, ...]]:
        """Frozen copies of every queue, detached from the live vehicles."""
        return {d: tuple(copy.copy(v) for v in self.lanes[d]) for d in DIRECTIONS}

    def update(self, delta_time: float) -> None:
        """Run one arbitration tick of *delta_time* seconds."""
        self._tick_count += 1
        tick = self._tick_count
        snap = self.snapshot()
        occupancy = self.occupancy(snap)

        for (a, b), dist in self.close_calls.update([v for lane in snap.values() for v in lane]):
            self._publish(TOPIC_CLOSE_CALL, {"pair": (a, b), "distance": dist})

        # ── decide: reads the snapshot only ───────────────────────────
        decisions: Dict[int, SpeedDecision] = {}
        for direction in DIRECTIONS:
            for ego in snap[direction]:
                if ego.active:
                    decisions[ego.id] = self.decide(ego, direction, snap, occupancy)

        # ── commit: writes live state only ────────────────────────────
        for direction in DIRECTIONS:
            for vehicle in self.lanes[direction]:
                decision = decisions.get(vehicle.id)
                if decision is None:
                    continue
                vehicle.set_velocity(decision.speed)
                if vehicle.velocity > 0.0:
                    vehicle.advance(delta_time, self.physics.boundary_limit)
                if self.physics.is_out_of_bounds(vehicle):
                    vehicle.active = False
                self._publish(TOPIC_VELOCITY, {"id": vehicle.id, "velocity": vehicle.velocity})

        self.last_decisions = decisions

        if tick % _DEBUG_DUMP_EVERY == 1 and log.isEnabledFor(logging.DEBUG):
            log.debug("=== TICK %d === occupancy=%d", tick, occupancy)
            for vehicle in self.all_vehicles():
                dec = decisions.get(vehicle.id)
                if dec is None:
                    continue
                log.debug(
                    "  %d %s/%s pos=(%.1f,%.1f) d=%.1f prox=%.0f zone=%.0f ctx=%.0f "
                    "-> %.0f yields_to=%s turned=%s active=%s",
                    vehicle.id, vehicle.entry_direction.name, vehicle.route.name,
                    vehicle.position[0], vehicle.position[1],
                    vehicle.distance_to_intersection,
                    dec.proximity, dec.zone, dec.context, dec.speed,
                    dec.yields_to, vehicle.has_turned, vehicle.active,
                )

        for direction in DIRECTIONS:
            lane = self.lanes[direction]
            if any(not v.active for v in lane):
                for v in lane:
                    if not v.active:
                        log.info("vehicle %d exited after %.1fs", v.id, v.time_elapsed)
                lane[:] = [v for v in lane if v.active]

    # ── decision stages ───────────────────────────────────────────────────

    def occupancy(self, snap: Snapshot) -> int:
        """Active vehicles currently inside the footprint."""
        half = self.policy.footprint_half_width_m
        return sum(
            1
            for lane in snap.values()
            for v in lane
            if v.active and abs(v.distance_to_intersection) < half
        )

    def decide(
        self,
        ego: Vehicle,
        direction: Direction,
        snap: Snapshot,
        occupancy: int,
    ) -> SpeedDecision:
        """Combine the three stages for *ego*, queued on *direction*."""
        zone, blocker = self.zone_speed(ego, direction, snap, occupancy)
        return SpeedDecision(
            vehicle_id=ego.id,
            proximity=self.proximity_speed(ego, direction, snap),
            zone=zone,
            context=context_speed(ego.distance_to_intersection, self.policy),
            yields_to=blocker,
        )

    def proximity_speed(self, ego: Vehicle, direction: Direction, snap: Snapshot) -> float:
        """Speed from the nearest same-lane leader or cross-lane neighbour.

        Only cross-lane neighbours accepted by :meth:`_constrains` count.
        Right turners are never stopped here.
        """
        gaps = []
        ahead = self._nearest_ahead(ego, snap[direction])
        if ahead is not None:
            gaps.append(ahead)

        nearest: Optional[float] = None
        for other_dir in DIRECTIONS:
            if other_dir is direction:
                continue
            for other in snap[other_dir]:
                if not other.active:
                    continue
                d = ego.distance_to(other)
                if d > self.policy.proximity_radius_m:
                    continue
                if not self._constrains(ego, other):
                    continue
                if nearest is None or d < nearest:
                    nearest = d
        if nearest is not None:
            gaps.append(nearest)

        speed = speed_for_gap(min(gaps) if gaps else None, self.safe_distance, self.policy)
        if ego.route is Route.RIGHT:
            speed = max(speed, Velocities.SLOW)
        return speed

    def _constrains(self, ego: Vehicle, other: Vehicle) -> bool:
        """Whether cross-lane *other* limits *ego*'s proximity speed.

        Vehicles behind *ego* never do.  A vehicle inside the corridor ahead
        of *ego* does, unless *ego* is also inside *other*'s corridor: then
        the vehicle whose path is more squarely blocked brakes and the
        other clears the way.  Neighbours off both corridors constrain only
        the vehicle without right of way.  At most one vehicle of a pair is
        constrained by the other, so a pair never blocks itself.
        """
        forward, lateral = ego.relative_offset(other)
        if forward <= 0.0:
            return False
        half = self.policy.path_half_width_m
        in_my_path = abs(lateral) < half
        back, side = other.relative_offset(ego)
        in_its_path = back > 0.0 and abs(side) < half
        if in_my_path and in_its_path:
            if abs(lateral) != abs(side):
                return abs(lateral) < abs(side)
        elif in_my_path or in_its_path:
            return in_my_path
        return not has_right_of_way(ego, other, self.policy)

    def zone_speed(
        self,
        ego: Vehicle,
        direction: Direction,
        snap: Snapshot,
        occupancy: int,
    ) -> Tuple[float, Optional[int]]:
        """Speed from conflicts inside the entry zone, plus the vehicle yielded to."""
        d = ego.distance_to_intersection
        if not 0.0 < d <= self.intersection_entry_distance:
            return Velocities.FAST, None

        if ego.route is Route.RIGHT:
            ahead = self._nearest_ahead(ego, snap[direction])
            limit = self.safe_distance * self.policy.right_turn_extreme_factor
            if ahead is not None and ahead <= limit:
                return Velocities.SLOW, None
            return Velocities.FAST, None

        radius = self.policy.scan_radius(occupancy)
        buffer = self.policy.time_buffer(occupancy)
        # A stopped ego is timed at SLOW, the speed it would move off at,
        # rather than at infinity (see "Stop/go oscillation" in DESIGN.md).
        my_time = time_to_center(ego, ego.velocity if ego.velocity > 0.0 else Velocities.SLOW)
        if my_time >= self.policy.conflict_horizon_s:
            return Velocities.FAST, None

        for other_dir in DIRECTIONS:
            if other_dir is direction:
                continue
            for other in snap[other_dir]:
                if not other.active:
                    continue
                if abs(other.distance_to_intersection) >= radius:
                    continue
                if not paths_cross(ego.direction, ego.route, other.direction, other.route):
                    continue
                other_time = time_to_center(other)
                if abs(my_time - other_time) >= buffer:
                    continue
                if has_right_of_way(ego, other, self.policy):
                    continue

                to_stop_line = d - self.policy.footprint_half_width_m
                speed = (
                    Velocities.STOP
                    if to_stop_line <= self.policy.final_braking_zone_m
                    else Velocities.SLOW
                )
                log.debug(
                    "vehicle %d yields to %d (t=%.2f vs %.2f, buffer=%.1f) -> %.0f",
                    ego.id, other.id, my_time, other_time, buffer, speed,
                )
                return speed, other.id

        return Velocities.FAST, None

    # ── helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _nearest_ahead(ego: Vehicle, lane: Tuple[Vehicle, ...]) -> Optional[float]:
        """Distance to the closest active same-lane vehicle nearer the centre."""
        nearest: Optional[float] = None
        for other in lane:
            if other.id == ego.id or not other.active:
                continue
            if other.distance_to_intersection >= ego.distance_to_intersection:
                continue
            d = ego.distance_to(other)
            if nearest is None or d < nearest:
                nearest = d
        return nearest

    def _publish(self, topic: str, payload: dict) -> None:
        if self.bus is not None:
            self.bus.publish(topic, "intersection", payload)
