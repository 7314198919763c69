"""
sim/sim_bridge.py
=================
Orchestrator tying :class:`~sim.intersection.Intersection`,
:class:`~sim.spawner.Spawner`, the :class:`~bus.event_bus.EventBus` and
:class:`~bus.metrics.SimulationStats` together on one simulated clock.

The pygame view drives it frame by frame through :meth:`SimBridge.advance`;
headless runs and tests call :meth:`SimBridge.step` directly.

Public API consumed by :mod:`ui.pygame_view`
--------------------------------------------
* ``advance(real_dt)``            → ``int`` ticks run
* ``spawn(direction)``            → ``Optional[Vehicle]``
* ``toggle_random_generation()``  → ``bool``
* ``get_vehicles()``              → ``List[dict]``
* ``get_hud()``                   → ``dict``
* ``summary()``                   → ``dict``
* ``reset()``                     → ``None``
* ``set_paused(bool)``            → ``None``
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bus.event_bus import EventBus
from bus.metrics import SimulationStats
from sim.intersection import Intersection
from sim.spawner import Spawner
from sim.traffic_policy import ArbitrationPolicy
from sim.vehicle import DEFAULT_BOUNDARY_LIMIT_M, Direction, Vehicle

log = logging.getLogger("sim_bridge")

# Vehicle palette, cycled by id in the render payloads
_VEHICLE_COLORS: Sequence[Tuple[int, int, int]] = (
    (86, 168, 255),
    (255, 88, 88),
    (100, 226, 170),
    (246, 191, 90),
    (180, 120, 255),
    (255, 160, 100),
)

# Frames that fall this far behind drop the remaining backlog.
_MAX_TICKS_PER_FRAME = 5


class SimBridge:
    """Fixed-timestep driver for the intersection simulation.

    Parameters
    ----------
    tick_rate_hz : float
        Simulation ticks per simulated second.
    safe_distance : float
        Minimum tolerated separation (m).
    boundary_limit : float
        Distance past the centre at which vehicles are removed (m).
    spawn_distance : float
        Distance from the centre at which vehicles appear (m).
    cooldown_s, random_interval_s : float
        Spawner timing, see :class:`~sim.spawner.Spawner`.
    max_random_per_direction : int
        Random generation cap per direction.
    random_seed : int or None
        Seed for reproducibility.
    policy : ArbitrationPolicy or None
        Tunable thresholds.
    """

    def __init__(
        self,
        tick_rate_hz: float = 30.0,
        safe_distance: float = 10.0,
        boundary_limit: float = DEFAULT_BOUNDARY_LIMIT_M,
        spawn_distance: float = 120.0,
        cooldown_s: float = 0.5,
        random_interval_s: float = 0.8,
        max_random_per_direction: int = 2,
        random_seed: Optional[int] = None,
        policy: Optional[ArbitrationPolicy] = None,
    ) -> None:
        self._tick_dt = 1.0 / tick_rate_hz
        self._sim_time = 0.0
        self._accumulator = 0.0
        self._paused = False

        self._bus = EventBus(clock=lambda: self._sim_time)
        self._stats = SimulationStats()
        self._engine = Intersection(
            safe_distance=safe_distance,
            boundary_limit=boundary_limit,
            policy=policy,
            bus=self._bus,
        )
        self._spawner = Spawner(
            self._engine,
            spawn_distance=spawn_distance,
            cooldown_s=cooldown_s,
            random_interval_s=random_interval_s,
            max_random_per_direction=max_random_per_direction,
            seed=random_seed,
        )
        log.info("SimBridge ready: %.1f Hz, %r, policy=%r",
                 tick_rate_hz, self._engine.physics, self._engine.policy)

    # ── accessors ─────────────────────────────────────────────────────────────

    @property
    def engine(self) -> Intersection:
        return self._engine

    @property
    def spawner(self) -> Spawner:
        return self._spawner

    @property
    def stats(self) -> SimulationStats:
        return self._stats

    @property
    def sim_time(self) -> float:
        return self._sim_time

    @property
    def tick_dt(self) -> float:
        return self._tick_dt

    @property
    def random_generation(self) -> bool:
        return self._spawner.random_generation

    # ── control ───────────────────────────────────────────────────────────────

    def spawn(self, direction: Direction) -> Optional[Vehicle]:
        """Manual spawn heading *direction*, subject to the cooldown."""
        vehicle = self._spawner.spawn(direction, self._sim_time)
        self._stats.consume(self._bus)
        return vehicle

    def toggle_random_generation(self) -> bool:
        return self._spawner.toggle_random_generation()

    def set_paused(self, paused: bool) -> None:
        """Pause / unpause :meth:`advance`; :meth:`step` always runs."""
        self._paused = paused

    def is_paused(self) -> bool:
        return self._paused

    def reset(self) -> None:
        """Clear every vehicle and statistic; vehicle ids keep counting."""
        self._engine.reset()
        self._spawner.reset()
        self._bus.clear()
        self._stats.reset()
        self._sim_time = 0.0
        self._accumulator = 0.0
        log.info("SimBridge reset")

    # ── stepping ──────────────────────────────────────────────────────────────

    def step(self, dt: Optional[float] = None) -> None:
        """Run exactly one tick of *dt* seconds (defaults to the tick length)."""
        dt = self._tick_dt if dt is None else dt
        self._spawner.update(self._sim_time)
        self._engine.update(dt)
        self._stats.consume(self._bus)
        self._sim_time += dt

    def run_for(self, seconds: float) -> int:
        """Run whole ticks covering *seconds* of simulated time."""
        ticks = int(round(seconds / self._tick_dt))
        for _ in range(ticks):
            self.step()
        return ticks

    def advance(self, real_dt: float) -> int:
        """Accumulate frame time and run the fixed ticks it covers."""
        if self._paused:
            return 0
        self._accumulator += real_dt
        ticks = 0
        while self._accumulator >= self._tick_dt and ticks < _MAX_TICKS_PER_FRAME:
            self.step()
            self._accumulator -= self._tick_dt
            ticks += 1
        if ticks == _MAX_TICKS_PER_FRAME and self._accumulator >= self._tick_dt:
            log.debug("dropping %.3fs of simulation backlog", self._accumulator)
            self._accumulator = 0.0
        return ticks

    # ── render / report data ──────────────────────────────────────────────────

    def get_vehicles(self) -> List[Dict[str, Any]]:
        """Render dicts for every active vehicle."""
        vehicles = []
        for vehicle in self._engine.active_vehicles():
            data = vehicle.as_dict()
            data["color"] = _VEHICLE_COLORS[vehicle.id % len(_VEHICLE_COLORS)]
            data["yields_to"] = self._yield_target(vehicle.id)
            vehicles.append(data)
        return vehicles

    def get_hud(self) -> Dict[str, Any]:
        return {
            "active": self._engine.active_count(),
            "per_direction": self._engine.lane_counts(),
            "close_calls": self._engine.close_calls.total,
            "random_generation": self._spawner.random_generation,
            "paused": self._paused,
            "sim_time": self._sim_time,
        }

    def summary(self) -> Dict[str, Any]:
        """Totals for the statistics overlay and the terminal report."""
        stats = self._stats.report()
        return {
            "total_added": self._engine.total_added,
            "active": self._engine.active_count(),
            "per_direction": self._engine.lane_counts(),
            "close_calls": self._engine.close_calls.total,
            "max_velocity": stats["max_velocity"],
            "min_velocity": stats["min_velocity"],
            "sim_time": self._sim_time,
        }

    def _yield_target(self, vehicle_id: int) -> Optional[int]:
        decision = self._engine.last_decisions.get(vehicle_id)
        return decision.yields_to if decision is not None else None
