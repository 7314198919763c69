#!/usr/bin/env python3
"""
sim/traffic_policy.py
=====================
Tunable arbitration parameters for the intersection engine.  Every
threshold lives in the frozen :class:`ArbitrationPolicy` dataclass so that
experiments can swap policies without touching code.

Also provides the stateless decision helpers the engine is built from:

* :func:`paths_cross`: static path-crossing table.
* :func:`time_to_center`: arrival-time estimate (infinite when stopped).
* :func:`has_right_of_way`: the five-rule right-of-way cascade.
* :func:`speed_for_gap`: proximity gap → discrete speed.
* :func:`context_speed`: approach slowdown from the vehicle's own distance.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from sim.physics import Velocities
from sim.vehicle import FOOTPRINT_HALF_WIDTH_M, Direction, Route, Vehicle


@dataclass(frozen=True)
class ArbitrationPolicy:
    """Immutable bag of every tunable arbitration threshold.

    Groups: proximity stage, intersection-zone stage, right-of-way,
    context stage.
    """

    # ── Geometry ──────────────────────────────────────────────────────────
    footprint_half_width_m: float = FOOTPRINT_HALF_WIDTH_M
    """Distance from the centre to the stop line / footprint edge."""

    entry_margin_m: float = 10.0
    """Margin in front of the footprint where conflict evaluation begins."""

    # ── Proximity stage ───────────────────────────────────────────────────
    proximity_radius_m: float = 30.0
    """Radius of the any-other-lane neighbour scan."""

    stop_gap_factor: float = 1.0
    """Gap ≤ factor × safe distance ⇒ STOP."""

    slow_gap_factor: float = 2.0
    """Gap ≤ factor × safe distance ⇒ SLOW."""

    medium_gap_factor: float = 3.0
    """Gap ≤ factor × safe distance ⇒ MEDIUM; otherwise FAST."""

    path_half_width_m: float = 2.5
    """Half-width of the corridor in front of a vehicle that it must keep clear."""

    right_turn_extreme_factor: float = 0.5
    """Relaxed same-lane check for right turners inside the entry zone."""

    # ── Intersection-zone stage ───────────────────────────────────────────
    scan_radius_factor: float = 2.0
    """Base scan radius, in footprint half-widths."""

    scan_radius_growth: float = 0.5
    """Extra half-widths of scan radius per vehicle inside the footprint."""

    scan_radius_max_factor: float = 4.0
    """Upper clamp on the scan radius, in footprint half-widths."""

    time_buffer_s: float = 3.0
    """Arrival-time window within which two crossing paths conflict."""

    time_buffer_growth_s: float = 0.5
    """Window widening per vehicle already inside the footprint."""

    time_buffer_max_s: float = 5.0
    """Upper clamp on the arrival-time window."""

    conflict_horizon_s: float = 8.0
    """Conflicts further out than this (ego time-to-centre) are ignored."""

    final_braking_zone_m: float = 10.0
    """A yielding vehicle stops once this close to the stop line."""

    # ── Right-of-way ──────────────────────────────────────────────────────
    distance_noise_band_m: float = 5.0
    """Distance differences inside this band fall through to route priority."""

    # ── Context stage ─────────────────────────────────────────────────────
    context_slow_m: float = 15.0
    """|distance to centre| below this ⇒ SLOW."""

    context_medium_m: float = 30.0
    """|distance to centre| below this ⇒ MEDIUM; otherwise FAST."""

    @property
    def intersection_entry_distance(self) -> float:
        return self.footprint_half_width_m + self.entry_margin_m

    def scan_radius(self, occupancy: int) -> float:
        factor = min(
            self.scan_radius_max_factor,
            self.scan_radius_factor + self.scan_radius_growth * occupancy,
        )
        return self.footprint_half_width_m * factor

    def time_buffer(self, occupancy: int) -> float:
        return min(
            self.time_buffer_max_s,
            self.time_buffer_s + self.time_buffer_growth_s * occupancy,
        )


_ROUTE_PRIORITY = {
    Route.STRAIGHT: 3,
    Route.RIGHT: 2,
    Route.LEFT: 1,
}

_DIRECTION_PRIORITY = {
    Direction.NORTH: 4,
    Direction.EAST: 3,
    Direction.SOUTH: 2,
    Direction.WEST: 1,
}

_OPPOSING = {
    (Direction.NORTH, Direction.SOUTH),
    (Direction.SOUTH, Direction.NORTH),
    (Direction.EAST, Direction.WEST),
    (Direction.WEST, Direction.EAST),
}


def route_priority(route: Route) -> int:
    return _ROUTE_PRIORITY[route]


def direction_priority(direction: Direction) -> int:
    return _DIRECTION_PRIORITY[direction]


def paths_cross(
    direction_a: Direction,
    route_a: Route,
    direction_b: Direction,
    route_b: Route,
) -> bool:
    """Static path-crossing table.

    Right turns never cross anything, left turns cross everything, and two
    straight paths cross only when they come from opposing directions.
    """
    if route_a is Route.RIGHT or route_b is Route.RIGHT:
        return False
    if route_a is Route.LEFT or route_b is Route.LEFT:
        return True
    return (direction_a, direction_b) in _OPPOSING


def time_to_center(vehicle: Vehicle, velocity: Optional[float] = None) -> float:
    """Seconds until *vehicle* reaches the centre (``inf`` when not moving).

    Vehicles already past the centre report the time since they crossed it.
    """
    speed = vehicle.velocity if velocity is None else velocity
    if speed <= 0.0:
        return math.inf
    return abs(vehicle.distance_to_intersection) / speed


def has_right_of_way(
    vehicle: Vehicle,
    other: Vehicle,
    policy: Optional[ArbitrationPolicy] = None,
) -> bool:
    """True if *vehicle* outranks *other*.

    Rules, first discriminating one wins:

    1. past the centre beats still approaching;
    2. closer to the centre wins, unless inside the noise band;
    3. route priority: straight > right > left;
    4. direction priority: north > east > south > west;
    5. lower id.

    The cascade is a strict total order, so exactly one of
    ``has_right_of_way(a, b)`` and ``has_right_of_way(b, a)`` holds.
    """
    policy = policy or ArbitrationPolicy()
    d_self = vehicle.distance_to_intersection
    d_other = other.distance_to_intersection

    if d_self < 0.0 <= d_other:
        return True
    if d_other < 0.0 <= d_self:
        return False

    if abs(d_self - d_other) > policy.distance_noise_band_m:
        return d_self < d_other

    rp_self = route_priority(vehicle.route)
    rp_other = route_priority(other.route)
    if rp_self != rp_other:
        return rp_self > rp_other

    dp_self = direction_priority(vehicle.direction)
    dp_other = direction_priority(other.direction)
    if dp_self != dp_other:
        return dp_self > dp_other

    return vehicle.id < other.id


def speed_for_gap(
    gap: Optional[float],
    safe_distance: float,
    policy: Optional[ArbitrationPolicy] = None,
) -> float:
    """Map the distance to the nearest relevant neighbour onto a speed level.

    Closer means slower; ``None`` (no neighbour) means FAST.
    """
    if gap is None:
        return Velocities.FAST
    policy = policy or ArbitrationPolicy()
    if gap <= safe_distance * policy.stop_gap_factor:
        return Velocities.STOP
    if gap <= safe_distance * policy.slow_gap_factor:
        return Velocities.SLOW
    if gap <= safe_distance * policy.medium_gap_factor:
        return Velocities.MEDIUM
    return Velocities.FAST


def context_speed(
    distance_to_intersection: float,
    policy: Optional[ArbitrationPolicy] = None,
) -> float:
    """Speed cap from the vehicle's own distance to the centre."""
    policy = policy or ArbitrationPolicy()
    d = abs(distance_to_intersection)
    if d < policy.context_slow_m:
        return Velocities.SLOW
    if d < policy.context_medium_m:
        return Velocities.MEDIUM
    return Velocities.FAST
