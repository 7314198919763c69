#!/usr/bin/env python3
"""
sim/close_calls.py
==================
Encounter-based close-call counting.

A pair of vehicles counts once when its separation first drops below the
threshold.  The pair is only forgotten after the separation exceeds the
threshold again, so a later encounter of the same two vehicles counts
again while a continuous violation counts once.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Sequence, Set, Tuple

import numpy as np

from sim.vehicle import Vehicle

log = logging.getLogger("close_calls")

Pair = Tuple[int, int]


def pairwise_distances(vehicles: Sequence[Vehicle]) -> np.ndarray:
    """Symmetric matrix of world-position distances between *vehicles*."""
    if not vehicles:
        return np.zeros((0, 0), dtype=float)
    pos = np.array([v.world_position for v in vehicles], dtype=float)
    diff = pos[:, None, :] - pos[None, :, :]
    return np.hypot(diff[..., 0], diff[..., 1])


class CloseCallTracker:
    """Pairwise proximity telemetry over one tick's snapshot.

    Parameters
    ----------
    threshold : float
        Separation (m) below which two vehicles are in a close call.
    """

    def __init__(self, threshold: float) -> None:
        self.threshold = threshold
        self.total: int = 0
        self._recorded: Set[Pair] = set()

    @property
    def recorded_pairs(self) -> FrozenSet[Pair]:
        return frozenset(self._recorded)

    def reset(self) -> None:
        self.total = 0
        self._recorded.clear()

    def update(self, vehicles: Sequence[Vehicle]) -> List[Tuple[Pair, float]]:
        """Scan every unordered pair of active *vehicles*.

        Returns the pairs that became close calls this tick, with their
        distance.  Recorded pairs that separated beyond the threshold, or
        that reference a vehicle no longer active, are released.
        """
        active = [v for v in vehicles if v.active]
        dist = pairwise_distances(active)
        ids = [v.id for v in active]
        present = set(ids)

        distances: Dict[Pair, float] = {}
        for i, j in zip(*np.triu_indices(len(active), k=1)):
            a, b = ids[i], ids[j]
            distances[(a, b) if a < b else (b, a)] = float(dist[i, j])

        new_calls: List[Tuple[Pair, float]] = []
        for pair, d in distances.items():
            if d < self.threshold and pair not in self._recorded:
                self._recorded.add(pair)
                self.total += 1
                new_calls.append((pair, d))
                log.info("close call #%d: %d <-> %d at %.2f m", self.total, pair[0], pair[1], d)

        for pair in list(self._recorded):
            if pair[0] not in present or pair[1] not in present:
                self._recorded.discard(pair)
            elif distances[pair] > self.threshold:
                self._recorded.discard(pair)

        return new_calls
