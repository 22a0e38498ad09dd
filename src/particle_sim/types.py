# MIT License (see LICENSE)
"""
Core type definitions for the particle simulation.

Defines:
- Particle: a point mass with kinematic state, damping, a local clock and
  the registry of forces acting on it.
- ParticleState (re-exported from core.forces): the immutable snapshot of
  a particle that force laws read.

Equations of motion (per particle):
  dx/dt = v
  dv/dt = a + F·(1/m)      (a: constant base acceleration)
  v    *= damping^dt       (fraction of velocity kept per second)

Mass is stored as inverse mass. An inverse mass of 0 is an immovable
particle: no force or acceleration reaches it, but it still drifts with
whatever velocity it has.
"""
from __future__ import annotations
import itertools
import math

import numpy as np

from .core.forces import ParticleState
from .core.registry import ForceRegistry
from .errors import ErrorCode, ParticleError
from .util import readonly, scalar, vec3, zeros3

_ids = itertools.count(1)


def _inverse_mass(mass: float) -> float:
    mass = scalar(mass, "mass", ErrorCode.INVALID_MASS)
    # `not mass > 0` also rejects NaN
    if not mass > 0.0:
        raise ParticleError(ErrorCode.INVALID_MASS, f"mass must be > 0, got {mass}")
    return 0.0 if math.isinf(mass) else 1.0 / mass


class Particle:
    """
    A point mass advanced by the integrators.

    Position, velocity and acceleration are exposed as read-only views;
    only the integrators change them after construction.

    Attributes:
        inverse_mass: 1/m (0 = infinite mass).
        damping: Fraction of velocity retained per second, in [0, 1].
        time: Local simulation clock (s); force windows are checked against it.
        registry: The ForceRegistry owned by this particle.
        id: Unique identifier, used by two-body laws to tell self from other.
    """

    def __init__(
        self,
        position=(0.0, 0.0, 0.0),
        velocity=(0.0, 0.0, 0.0),
        acceleration=(0.0, 0.0, 0.0),
        mass: float = 1.0,
        damping: float = 0.99,
        start_time: float = 0.0,
    ) -> None:
        """
        Raises:
            ParticleError: INVALID_MASS (mass <= 0), INVALID_DAMPING (outside
                [0, 1]), INVALID_TIME (start_time < 0), INVALID_PARAM
                (vector with wrong shape or non-finite components). A
                non-numeric scalar raises the code of its parameter.
        """
        inverse_mass = _inverse_mass(mass)
        damping = scalar(damping, "damping", ErrorCode.INVALID_DAMPING)
        start_time = scalar(start_time, "start time", ErrorCode.INVALID_TIME)
        if not 0.0 <= damping <= 1.0:
            raise ParticleError(ErrorCode.INVALID_DAMPING, f"damping must be in [0, 1], got {damping}")
        if not (start_time >= 0.0 and math.isfinite(start_time)):
            raise ParticleError(ErrorCode.INVALID_TIME, f"start time must be finite and >= 0, got {start_time}")

        self._position = vec3(position, "position")
        self._velocity = vec3(velocity, "velocity")
        self._acceleration = vec3(acceleration, "acceleration")
        self._force = zeros3()
        self.inverse_mass = inverse_mass
        self.damping = damping
        self.time = start_time
        self.registry = ForceRegistry()
        self.id = next(_ids)

    def __repr__(self) -> str:
        return (
            f"Particle(id={self.id}, position={self._position.tolist()}, "
            f"velocity={self._velocity.tolist()}, mass={self.mass}, time={self.time:g})"
        )

    @property
    def position(self) -> np.ndarray:
        return readonly(self._position)

    @property
    def velocity(self) -> np.ndarray:
        return readonly(self._velocity)

    @property
    def acceleration(self) -> np.ndarray:
        """Constant base acceleration supplied at construction."""
        return readonly(self._acceleration)

    @property
    def resultant_force(self) -> np.ndarray:
        """Transient force accumulator; zero outside an integration step."""
        return readonly(self._force)

    @property
    def mass(self) -> float:
        """Mass in kg (inf for immovable particles)."""
        return math.inf if self.inverse_mass == 0.0 else 1.0 / self.inverse_mass

    def set_mass(self, mass: float) -> None:
        """
        Set the mass (kg). math.inf makes the particle immovable.

        Raises:
            ParticleError(INVALID_MASS): mass <= 0, NaN or not numeric. The
                particle is unchanged.
        """
        self.inverse_mass = _inverse_mass(mass)

    @property
    def is_static(self) -> bool:
        """True iff the inverse mass is exactly zero."""
        return self.inverse_mass == 0.0

    def state(self) -> ParticleState:
        """Copy of the current kinematic state."""
        return ParticleState(
            self.id, self._position.copy(), self._velocity.copy(), self.inverse_mass, self.time
        )

    def clear_forces(self) -> None:
        """Reset the force accumulator and empty the registry (logical clear)."""
        self._force[:] = 0.0
        self.registry.clear()

    def destroy(self) -> None:
        """Release the registry. Safe to call more than once."""
        self.clear_forces()
