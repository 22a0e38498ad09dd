# MIT License (see LICENSE)
"""
Utilities for calculating physical invariants and conserved quantities.

Used for verifying simulation correctness and debugging stability issues.
Two particles joined by an undamped spring, with no gravity, drag or
particle damping, form a closed system: total momentum stays constant and
kinetic plus spring energy stays constant within integration error.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Iterable

import numpy as np

from ..util import norm
from .forces import AnchoredBungee, AnchoredSpring, Bungee, Spring

if TYPE_CHECKING:
    from ..types import Particle


def kinetic_energy(particles: Iterable["Particle"]) -> float:
    """
    Total kinetic energy T = Σ 0.5 m v² in joules.

    Immovable particles are skipped.
    """
    ke = 0.0
    for p in particles:
        if p.is_static:
            continue
        v = p.velocity
        ke += 0.5 * p.mass * float(np.dot(v, v))
    return ke


def linear_momentum(particles: Iterable["Particle"]) -> np.ndarray:
    """
    Total linear momentum P = Σ m v as [Px, Py, Pz] in kg·m/s.

    Immovable particles are skipped.
    """
    total = np.zeros(3, dtype=np.float64)
    for p in particles:
        if p.is_static:
            continue
        total += p.mass * p.velocity
    return total


def spring_potential_energy(particles: Iterable["Particle"]) -> float:
    """
    Elastic energy Σ 0.5 k (|d| - L)² stored in the springs of `particles`.

    Every spring-like law found in the particles' registries is counted once,
    even when it is registered on both of its endpoints. Bungees contribute
    only while stretched.
    """
    seen: set = set()
    pe = 0.0
    for p in particles:
        for law in p.registry.laws():
            # Two-body laws once per law, anchored laws once per particle.
            key = id(law) if isinstance(law, Spring) else (id(law), p.id)
            if key in seen:
                continue
            seen.add(key)

            if isinstance(law, Spring):
                length = norm(law.a.position - law.b.position)
            elif isinstance(law, AnchoredSpring):
                length = norm(p.position - law.anchor)
            else:
                continue

            extension = length - law.rest_length
            if isinstance(law, (Bungee, AnchoredBungee)) and extension <= 0.0:
                continue
            pe += 0.5 * law.spring_constant * extension * extension
    return pe
