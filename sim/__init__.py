"""
sim — Simulation core
=====================

Modules
-------
vehicle
    :class:`Vehicle` kinematics, :class:`Direction` / :class:`Route` enums
    and the shared lane-offset convention.
physics
    Discrete :class:`Velocities` and :class:`Physics` distance helpers.
traffic_policy
    :class:`ArbitrationPolicy` thresholds, right-of-way cascade and
    path-crossing table.
close_calls
    :class:`CloseCallTracker` encounter-based proximity telemetry.
intersection
    :class:`Intersection` snapshot-isolated per-tick arbitration engine.
spawner
    :class:`Spawner` manual and random vehicle generation.
sim_bridge
    :class:`SimBridge` fixed-timestep orchestrator used by the UI.
"""
