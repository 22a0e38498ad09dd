# MIT License (see LICENSE)
"""
Physical and numerical constants used throughout the simulation.

Units are SI. The y axis points up, so gravity is negative.
"""
from __future__ import annotations

# Acceleration due to gravity along +y, in m/s².
GRAVITY_ACCEL: float = -9.81

# Below this speed (m/s) the drag law treats a particle as at rest.
DRAG_REST_SPEED: float = 0.01

# Separation (m) under which a two-body law has no usable direction.
MIN_SEPARATION: float = 1e-12

# Fixed substep count used by the semi-implicit Euler integrator.
DEFAULT_SUBSTEPS: int = 100

# Integrator used when neither the caller nor the environment picks one.
DEFAULT_INTEGRATOR: str = "euler"
