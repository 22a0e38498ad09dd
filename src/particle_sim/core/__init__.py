# MIT License (see LICENSE)
"""
Core particle simulation components.

This subpackage provides:
    - Force laws: Gravity, Drag, Spring, AnchoredSpring, Bungee, AnchoredBungee.
    - Registry: per-particle force registration with activation windows.
    - Integrators: semi-implicit Euler with substeps, RK4.
    - Islands: partitioning of linked particles for parallel callers.

Typical usage:
    from particle_sim.core import add_gravity, integrate

    add_gravity(particle)
    integrate(particle, 1/60)
"""
from .forces import (
    ForceKind,
    ForceLaw,
    ParticleState,
    Gravity,
    Drag,
    Spring,
    Bungee,
    AnchoredSpring,
    AnchoredBungee,
    evaluate_force,
)
from .registry import (
    ForceGenerator,
    ForceRegistry,
    add_force,
    add_gravity,
    add_drag,
    add_spring,
    add_bungee,
    add_anchored_spring,
    add_anchored_bungee,
    remove_force,
    clear_forces,
)
from .integrators import accumulate_forces, euler_step, rk4_step, integrate
from .island import find_islands

__all__ = [
    # Force laws
    "ForceKind",
    "ForceLaw",
    "ParticleState",
    "Gravity",
    "Drag",
    "Spring",
    "Bungee",
    "AnchoredSpring",
    "AnchoredBungee",
    "evaluate_force",
    # Registry
    "ForceGenerator",
    "ForceRegistry",
    "add_force",
    "add_gravity",
    "add_drag",
    "add_spring",
    "add_bungee",
    "add_anchored_spring",
    "add_anchored_bungee",
    "remove_force",
    "clear_forces",
    # Integrators
    "accumulate_forces",
    "euler_step",
    "rk4_step",
    "integrate",
    # Islands
    "find_islands",
]
