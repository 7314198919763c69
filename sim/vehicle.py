#!/usr/bin/env python3
"""
sim/vehicle.py
==============
Vehicle kinematics for the unsignalled four-way intersection.

A :class:`Vehicle` stores a *base* position on the road axis of its current
heading.  The lane it actually drives in is a lateral offset that depends on
its route; :func:`lane_offset_vector` is the single source of that
convention and is shared with the renderer, so the offset itself is never
stored on the vehicle.

Right-route vehicles perform exactly one 90° clockwise turn at the entry
edge of the intersection footprint.  At that instant the base position is
shifted by the difference between the old and the new lane offset so that
the world position stays continuous.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

# ── Geometry ──────────────────────────────────────────────────────────────────
LANE_WIDTH_M: float = 3.5
LANES_PER_DIRECTION: int = 3
FOOTPRINT_HALF_WIDTH_M: float = LANE_WIDTH_M * LANES_PER_DIRECTION  # 10.5 m
TURN_SHIFT_M: float = -2.0
TURN_EDGE_M: float = FOOTPRINT_HALF_WIDTH_M + TURN_SHIFT_M

DEFAULT_BOUNDARY_LIMIT_M: float = 120.0

# Legal discrete speeds (m/s), named in :class:`sim.physics.Velocities`.
SPEED_LEVELS: Tuple[float, ...] = (0.0, 5.0, 10.0, 15.0)

Point = Tuple[float, float]


class Direction(Enum):
    """Cardinal heading of a vehicle."""
    NORTH = "N"
    SOUTH = "S"
    EAST = "E"
    WEST = "W"

    def rotated_right(self) -> "Direction":
        """Heading after a 90° clockwise turn."""
        return _RIGHT_OF[self]

    @property
    def unit_vector(self) -> Point:
        return _UNIT_VECTORS[self]


class Route(Enum):
    """Planned manoeuvre at the intersection."""
    LEFT = "LEFT"
    STRAIGHT = "STRAIGHT"
    RIGHT = "RIGHT"


class Lane(Enum):
    """Physical lane picked at spawn; maps one-to-one onto a route."""
    LEFT = 0
    MIDDLE = 1
    RIGHT = 2

    @property
    def route(self) -> Route:
        return _LANE_ROUTES[self]


_RIGHT_OF = {
    Direction.NORTH: Direction.EAST,
    Direction.EAST: Direction.SOUTH,
    Direction.SOUTH: Direction.WEST,
    Direction.WEST: Direction.NORTH,
}

_UNIT_VECTORS = {
    Direction.NORTH: (0.0, 1.0),
    Direction.SOUTH: (0.0, -1.0),
    Direction.EAST: (1.0, 0.0),
    Direction.WEST: (-1.0, 0.0),
}

_LANE_ROUTES = {
    Lane.RIGHT: Route.RIGHT,
    Lane.MIDDLE: Route.STRAIGHT,
    Lane.LEFT: Route.LEFT,
}

# Lane-centre distance from the road axis, in lane widths.
_LANE_OFFSET_FACTOR = {
    Route.RIGHT: 2.5,
    Route.STRAIGHT: 1.5,
    Route.LEFT: 0.5,
}


def lane_offset(route: Route) -> float:
    """Distance (m) between the road axis and the centre of *route*'s lane."""
    return LANE_WIDTH_M * _LANE_OFFSET_FACTOR[route]


def lane_offset_vector(direction: Direction, route: Route) -> Point:
    """Lateral offset from the road axis to the lane centre.

    Traffic drives on the right: a northbound vehicle sits east of the axis,
    a southbound one west of it, eastbound south, westbound north.
    """
    o = lane_offset(route)
    if direction is Direction.NORTH:
        return (o, 0.0)
    if direction is Direction.SOUTH:
        return (-o, 0.0)
    if direction is Direction.EAST:
        return (0.0, -o)
    return (0.0, o)


def spawn_position(direction: Direction, distance: float) -> Point:
    """Base position *distance* metres behind the centre for *direction*."""
    dx, dy = direction.unit_vector
    return (-dx * distance, -dy * distance)


def _move_along(position: Point, direction: Direction, distance: float) -> Point:
    dx, dy = direction.unit_vector
    return (position[0] + dx * distance, position[1] + dy * distance)


@dataclass
class Vehicle:
    """A kinematic entity driven by the arbitration engine.

    Attributes
    ----------
    id : int
        Unique, monotonically increasing identifier (never reused).
    position : tuple of float
        Base position (m) on the road axis of the current heading.
    velocity : float
        Scalar speed along the heading; one of the discrete levels in
        :class:`sim.physics.Velocities`.
    route : Route
        Planned manoeuvre.
    direction : Direction
        Current heading.  Changes once, for :attr:`Route.RIGHT` only.
    distance_to_intersection : float
        Signed distance (m) to the centre; negative after crossing it.
    """

    id: int
    position: Point
    velocity: float
    route: Route
    direction: Direction
    distance_to_intersection: float
    active: bool = True
    has_turned: bool = False
    time_elapsed: float = 0.0
    entry_direction: Optional[Direction] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.position = (float(self.position[0]), float(self.position[1]))
        if self.entry_direction is None:
            self.entry_direction = self.direction

    # ── geometry ──────────────────────────────────────────────────────────
    @property
    def world_position(self) -> Point:
        """Lane-centre position: base position plus the route's lane offset."""
        ox, oy = lane_offset_vector(self.direction, self.route)
        return (self.position[0] + ox, self.position[1] + oy)

    def distance_to(self, other: "Vehicle") -> float:
        """Euclidean distance between the two vehicles' world positions."""
        ax, ay = self.world_position
        bx, by = other.world_position
        return math.hypot(ax - bx, ay - by)

    def is_too_close(self, other: "Vehicle", threshold: float) -> bool:
        return self.distance_to(other) < threshold

    def relative_offset(self, other: "Vehicle") -> Point:
        """*other*'s world position in this vehicle's frame: (ahead, lateral).

        ``ahead`` is positive when *other* lies in front along the current
        heading; ``lateral`` is the signed sideways distance from the path.
        """
        ax, ay = self.world_position
        bx, by = other.world_position
        hx, hy = self.direction.unit_vector
        dx, dy = bx - ax, by - ay
        return (dx * hx + dy * hy, dx * hy - dy * hx)

    # ── control ───────────────────────────────────────────────────────────
    def stop(self) -> None:
        self.velocity = 0.0

    def set_velocity(self, velocity: float) -> None:
        """Assign one of the discrete speed levels; anything else is rejected."""
        if velocity not in SPEED_LEVELS:
            raise ValueError(f"illegal speed {velocity!r}, expected one of {SPEED_LEVELS}")
        self.velocity = velocity

    def is_stopped(self) -> bool:
        return self.velocity == 0.0

    # ── movement ──────────────────────────────────────────────────────────
    def advance(
        self,
        delta_time: float,
        boundary_limit: float = DEFAULT_BOUNDARY_LIMIT_M,
    ) -> None:
        """Move the vehicle for *delta_time* seconds at its current velocity.

        Right-route vehicles that reach the turn edge this tick travel up to
        the edge, rotate clockwise with the lane offset transferred into the
        base position, then cover the rest of the distance on the new
        heading.  The vehicle deactivates once it is more than
        *boundary_limit* metres past the centre.
        """
        traveled = self.velocity * delta_time

        if self.route is Route.RIGHT and not self.has_turned:
            to_edge = max(0.0, self.distance_to_intersection - TURN_EDGE_M)
            if to_edge <= traveled:
                if to_edge > 0.0:
                    self.position = _move_along(self.position, self.direction, to_edge)
                self._turn_right()
                after_turn = traveled - to_edge
                if after_turn > 0.0:
                    self.position = _move_along(self.position, self.direction, after_turn)
            else:
                self.position = _move_along(self.position, self.direction, traveled)
        else:
            self.position = _move_along(self.position, self.direction, traveled)

        self.distance_to_intersection -= traveled
        self.time_elapsed += delta_time
        if self.distance_to_intersection < -boundary_limit:
            self.active = False

    def _turn_right(self) -> None:
        old_dir = self.direction
        new_dir = old_dir.rotated_right()
        old_ox, old_oy = lane_offset_vector(old_dir, self.route)
        new_ox, new_oy = lane_offset_vector(new_dir, self.route)
        # base + new offset must equal base + old offset at the turn instant
        self.position = (
            self.position[0] + old_ox - new_ox,
            self.position[1] + old_oy - new_oy,
        )
        self.direction = new_dir
        self.has_turned = True

    def as_dict(self) -> dict:
        """Serialisable view used by the renderer and the event bus."""
        wx, wy = self.world_position
        return {
            "id": self.id,
            "x": wx,
            "y": wy,
            "base_x": self.position[0],
            "base_y": self.position[1],
            "velocity": self.velocity,
            "direction": self.direction.name,
            "entry_direction": self.entry_direction.name,
            "route": self.route.name,
            "distance_to_intersection": self.distance_to_intersection,
            "has_turned": self.has_turned,
        }
