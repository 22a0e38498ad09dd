# MIT License (see LICENSE)
"""
Numerical integrators for particle dynamics.

Both integrators solve
    dx/dt = v,    dv/dt = a + F(x, v, t)/m
and apply damping as v *= damping^dt, so the velocity lost to damping over a
frame does not depend on how the frame is sliced.

Available integrators:
- euler_step: Semi-implicit Euler with a fixed number of substeps. Position
  moves with the old velocity, then velocity picks up the new acceleration.
- rk4_step: Classical 4th-order Runge-Kutta; four force evaluations per call.
- integrate: Validating entry point that dispatches to one of the above.

Acceleration convention: Particle.acceleration is a constant base
acceleration that no integrator ever modifies. Acceleration derived from
forces is transient and recomputed for every sample. Immovable particles
(inverse mass 0) get neither and drift with their damped velocity.

Reference:
    Semi-implicit Euler: https://en.wikipedia.org/wiki/Semi-implicit_Euler_method
    Runge-Kutta methods: https://en.wikipedia.org/wiki/Runge-Kutta_methods
"""
from __future__ import annotations
from typing import TYPE_CHECKING

import numpy as np

from ..errors import ErrorCode, ParticleError
from ..util import check_duration, check_substeps, default_integrator, default_substeps, zeros3
from .forces import ParticleState, evaluate_force

if TYPE_CHECKING:
    from ..types import Particle

INTEGRATORS = ("euler", "rk4")


def accumulate_forces(
    particle: "Particle",
    position: np.ndarray,
    velocity: np.ndarray,
    time: float,
) -> np.ndarray:
    """
    Sum the forces of every registry entry active at `time`.

    The particle is evaluated as if it were at (position, velocity); its
    stored state is not touched. Each active entry is evaluated exactly once.
    """
    state = ParticleState(particle.id, position, velocity, particle.inverse_mass, time)
    total = zeros3()
    for entry in particle.registry.active_at(time):
        total += evaluate_force(entry.law, state)
    return total


def _acceleration(particle: "Particle", force: np.ndarray) -> np.ndarray:
    """Base plus force-derived acceleration; zero for immovable particles."""
    if particle.is_static:
        return zeros3()
    return particle._acceleration + force * particle.inverse_mass


def euler_step(particle: "Particle", duration: float, substeps: int | None = None) -> None:
    """
    Advance a particle by `duration` with semi-implicit Euler substepping.

    The frame is cut into `substeps` equal slices d = duration/substeps. For
    each slice:
        x += v·d
        F  = Σ active forces at the current local time
        v  = v·damping^d + (a + F/m)·d
        t += d
    The force accumulator is zero again when the call returns. If a force law
    raises, position, velocity and local time are restored to their values
    at the start of the call before the error propagates.

    Args:
        particle: Particle to integrate (modified in-place).
        duration: Frame duration in seconds, > 0.
        substeps: Number of slices; defaults to PARTICLE_SIM_SUBSTEPS or 100.

    Raises:
        ParticleError: INVALID_DURATION, INVALID_PARAM (bad substeps), or
            any error raised by a force law.
    """
    duration = check_duration(duration)
    n = default_substeps() if substeps is None else check_substeps(substeps)
    d = duration / n
    retain = particle.damping ** d
    x, v, F = particle._position, particle._velocity, particle._force
    x0, v0, t0 = x.copy(), v.copy(), particle.time

    try:
        for _ in range(n):
            x += v * d

            F += accumulate_forces(particle, x, v, particle.time)
            a = _acceleration(particle, F)

            v *= retain
            v += a * d

            F[:] = 0.0
            particle.time += d
    except Exception:
        x[:] = x0
        v[:] = v0
        particle.time = t0
        raise
    finally:
        F[:] = 0.0


def rk4_step(particle: "Particle", duration: float) -> None:
    """
    Advance a particle by `duration` using classical 4th-order Runge-Kutta.

    Forces are sampled at t, t+h/2 (twice) and t+h against perturbed copies of
    the state, then combined with weights (1, 2, 2, 1)/6. Damping is applied
    to the starting velocity as damping^h, the same factor Euler accumulates
    over a frame of length h.

    Args:
        particle: Particle to integrate (modified in-place).
        duration: Timestep h in seconds, > 0.

    Raises:
        ParticleError(INVALID_DURATION): bad duration. Force-law errors
            propagate with the particle untouched.
    """
    h = check_duration(duration)
    t0 = particle.time
    x0 = particle._position.copy()
    v0 = particle._velocity.copy()

    def f(x, v, t):
        """Return (dx/dt, dv/dt) at an arbitrary state."""
        return v, _acceleration(particle, accumulate_forces(particle, x, v, t))

    k1 = f(x0, v0, t0)
    k2 = f(x0 + 0.5 * h * k1[0], v0 + 0.5 * h * k1[1], t0 + 0.5 * h)
    k3 = f(x0 + 0.5 * h * k2[0], v0 + 0.5 * h * k2[1], t0 + 0.5 * h)
    k4 = f(x0 + h * k3[0], v0 + h * k3[1], t0 + h)

    particle._position[:] = x0 + (h / 6.0) * (k1[0] + 2 * k2[0] + 2 * k3[0] + k4[0])
    particle._velocity[:] = v0 * particle.damping ** h + (h / 6.0) * (k1[1] + 2 * k2[1] + 2 * k3[1] + k4[1])
    particle._force[:] = 0.0
    particle.time = t0 + h


def integrate(
    particle: "Particle",
    duration: float,
    method: str | None = None,
    substeps: int | None = None,
) -> None:
    """
    Advance one particle by one frame.

    Args:
        particle: Particle to integrate (modified in-place).
        duration: Frame duration in seconds, > 0.
        method: "euler" or "rk4"; defaults to PARTICLE_SIM_INTEGRATOR or "euler".
        substeps: Euler slices per frame; ignored by rk4.

    Raises:
        ParticleError: INVALID_PARAM (None particle, unknown method,
            substeps not an integer >= 1), INVALID_DURATION (duration not
            finite and > 0), or any error raised by a force law.
    """
    if particle is None:
        raise ParticleError(ErrorCode.INVALID_PARAM, "particle is None")
    duration = check_duration(duration)
    if substeps is not None:
        substeps = check_substeps(substeps)

    method = default_integrator() if method is None else method
    if method == "euler":
        euler_step(particle, duration, substeps)
    elif method == "rk4":
        rk4_step(particle, duration)
    else:
        raise ParticleError(ErrorCode.INVALID_PARAM, f"Unknown integrator: {method}")
