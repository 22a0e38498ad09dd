# MIT License (see LICENSE)
"""
particle_sim - A real-time 3D particle physics core.

This package advances point masses under a composable set of force laws,
using either fixed-substep semi-implicit Euler or classical RK4 integration.

Main entry points:
    - Particle: A point mass with kinematic state and its force registry.
    - Scene: A world owning particles and the springs between them.
    - add_gravity, add_drag, add_spring, ...: Force registration.
    - integrate: Advance one particle by one frame.
    - ParticleError / ErrorCode: Error signalling.

Submodules:
    - core: Force laws, registry, integrators, islands, invariants.

Example:
    from particle_sim import Particle, add_gravity, integrate

    ball = Particle(position=(0, 5, 0), velocity=(35, 0, 0), mass=2.0, damping=0.99)
    add_gravity(ball)
    integrate(ball, 1.0, substeps=60)
"""
from .errors import ErrorCode, ParticleError
from .types import Particle, ParticleState
from .scene import Scene
from .core import (
    ForceKind,
    Gravity,
    Drag,
    Spring,
    Bungee,
    AnchoredSpring,
    AnchoredBungee,
    evaluate_force,
    add_force,
    add_gravity,
    add_drag,
    add_spring,
    add_bungee,
    add_anchored_spring,
    add_anchored_bungee,
    remove_force,
    clear_forces,
    integrate,
)

__all__ = [
    # Core simulation
    "Particle",
    "ParticleState",
    "Scene",
    "integrate",
    # Errors
    "ErrorCode",
    "ParticleError",
    # Force laws
    "ForceKind",
    "Gravity",
    "Drag",
    "Spring",
    "Bungee",
    "AnchoredSpring",
    "AnchoredBungee",
    "evaluate_force",
    # Registration
    "add_force",
    "add_gravity",
    "add_drag",
    "add_spring",
    "add_bungee",
    "add_anchored_spring",
    "add_anchored_bungee",
    "remove_force",
    "clear_forces",
]
