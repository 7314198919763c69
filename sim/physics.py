#!/usr/bin/env python3
"""
sim/physics.py
==============
Discrete speed levels and stateless physics helpers used by
:mod:`sim.intersection` and :mod:`sim.close_calls`.

Keeping these in a separate module avoids circular imports and makes unit
testing straightforward.
"""

from __future__ import annotations

from typing import Optional, Tuple

from sim.vehicle import SPEED_LEVELS, Vehicle


class Velocities:
    """The only legal vehicle speeds (m/s).  Nothing interpolates between them."""
    STOP: float = 0.0
    SLOW: float = 5.0      # ~18 km/h
    MEDIUM: float = 10.0   # ~36 km/h
    FAST: float = 15.0     # ~54 km/h

    LEVELS: Tuple[float, ...] = SPEED_LEVELS
    MOVING: Tuple[float, ...] = (SLOW, MEDIUM, FAST)


def time_to_cover(distance: float, velocity: float) -> Optional[float]:
    """Seconds needed to travel *distance* at *velocity*; ``None`` unless moving."""
    if velocity > 0.0:
        return distance / velocity
    return None


class Physics:
    """Boundary and separation checks parameterised by two constants.

    Parameters
    ----------
    safe_distance : float
        Minimum tolerated separation between two vehicles (m).
    boundary_limit : float
        Distance past the centre at which a vehicle leaves the simulation (m).
    """

    def __init__(self, safe_distance: float, boundary_limit: float) -> None:
        self.safe_distance = safe_distance
        self.boundary_limit = boundary_limit

    def __repr__(self) -> str:
        return (
            f"Physics(safe_distance={self.safe_distance}, "
            f"boundary_limit={self.boundary_limit})"
        )

    @staticmethod
    def time_to_cover(distance: float, velocity: float) -> Optional[float]:
        return time_to_cover(distance, velocity)

    def is_safe_distance(self, vehicle1: Vehicle, vehicle2: Vehicle) -> bool:
        return not vehicle1.is_too_close(vehicle2, self.safe_distance)

    def is_out_of_bounds(self, vehicle: Vehicle) -> bool:
        """True once *vehicle* is more than ``boundary_limit`` past the centre."""
        return vehicle.distance_to_intersection < -self.boundary_limit
