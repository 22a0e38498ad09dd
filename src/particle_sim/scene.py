# MIT License (see LICENSE)
"""
The simulation world and its stepping loop.

The Scene class is the world container. It manages:
- The particles taking part in the simulation.
- The two-body laws (springs, bungees) linking them. The scene owns these
  shared laws; the particles' registries only reference them.
- Simulation parameters (frame duration, integrator choice, substeps).

Removing a particle detaches every link it takes part in from the other
endpoint as well, so no registry is left pointing at a particle that is gone.

The scene is single-threaded. Callers that want parallelism ask for
islands() and integrate each island with step_island() on a worker of their
choosing; particles in different islands never read each other's state.

Structure:
    - User creates a Scene.
    - User adds particles via add_particle() / create_particle().
    - User links them via add_spring() / add_bungee().
    - User calls scene.step() once per frame.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable

from .core.forces import Bungee, Spring
from .core.integrators import INTEGRATORS, integrate
from .core.island import find_islands
from .core.registry import add_bungee, add_spring, remove_force
from .errors import ErrorCode, ParticleError
from .types import Particle
from .util import check_duration, check_substeps, default_integrator, default_substeps

logger = logging.getLogger(__name__)


@dataclass
class Scene:
    """
    Particle simulation world.

    Attributes:
        dt: Default frame duration in seconds (default: 1/60).
        integrator: Integration scheme ("euler" or "rk4"). Defaults to
                    PARTICLE_SIM_INTEGRATOR, else "euler".
        substeps: Euler substeps per frame. Defaults to PARTICLE_SIM_SUBSTEPS,
                  else 100.
        particles: Particles in the scene.
        links: Two-body laws owned by the scene.
        time: Total simulated time advanced by step().
    """
    dt: float = 1 / 60
    integrator: str = field(default_factory=default_integrator)
    substeps: int = field(default_factory=default_substeps)

    # Internal state
    particles: list[Particle] = field(default_factory=list)
    links: list[Spring] = field(default_factory=list)
    time: float = 0.0

    def __post_init__(self) -> None:
        """Validate configuration after dataclass creation."""
        if self.integrator not in INTEGRATORS:
            raise ParticleError(ErrorCode.INVALID_PARAM, f"Unknown integrator: {self.integrator}")
        self.substeps = check_substeps(self.substeps)
        self.dt = check_duration(self.dt)

    def _require(self, particle: Particle) -> None:
        if particle is None or not any(p is particle for p in self.particles):
            raise ParticleError(ErrorCode.INVALID_PARAM, f"{particle!r} is not part of this scene")

    def add_particle(self, particle: Particle) -> Particle:
        """
        Add an existing particle to the simulation.

        Returns:
            The same particle, for chaining.
        """
        if particle is None:
            raise ParticleError(ErrorCode.INVALID_PARAM, "particle is None")
        if any(p is particle for p in self.particles):
            raise ParticleError(ErrorCode.INVALID_PARAM, f"particle {particle.id} is already in the scene")
        self.particles.append(particle)
        logger.debug("scene: added particle %d", particle.id)
        return particle

    def create_particle(
        self,
        position=(0.0, 0.0, 0.0),
        velocity=(0.0, 0.0, 0.0),
        acceleration=(0.0, 0.0, 0.0),
        mass: float = 1.0,
        damping: float = 0.99,
        start_time: float = 0.0,
    ) -> Particle:
        """Construct a Particle with the given state and add it."""
        return self.add_particle(Particle(position, velocity, acceleration, mass, damping, start_time))

    def add_spring(
        self,
        a: Particle,
        b: Particle,
        spring_constant: float,
        rest_length: float,
        damping_coeff: float = 0.0,
        start_time: float = 0.0,
        end_time: float = math.inf,
    ) -> Spring:
        """Link two particles of this scene with a damped spring the scene owns."""
        self._require(a)
        self._require(b)
        law = add_spring(a, b, spring_constant, rest_length, damping_coeff, start_time, end_time)
        self.links.append(law)
        logger.debug("scene: spring between %d and %d", a.id, b.id)
        return law

    def add_bungee(
        self,
        a: Particle,
        b: Particle,
        spring_constant: float,
        rest_length: float,
        damping_coeff: float = 0.0,
        start_time: float = 0.0,
        end_time: float = math.inf,
    ) -> Bungee:
        """Link two particles of this scene with a bungee the scene owns."""
        self._require(a)
        self._require(b)
        law = add_bungee(a, b, spring_constant, rest_length, damping_coeff, start_time, end_time)
        self.links.append(law)
        logger.debug("scene: bungee between %d and %d", a.id, b.id)
        return law

    def remove_link(self, link: Spring) -> None:
        """Detach a link from both endpoints and drop it."""
        if not any(owned is link for owned in self.links):
            raise ParticleError(ErrorCode.INVALID_PARAM, "link is not owned by this scene")
        remove_force(link.a, link)
        remove_force(link.b, link)
        self.links = [owned for owned in self.links if owned is not link]

    def remove_particle(self, particle: Particle) -> None:
        """
        Remove a particle and every link it takes part in.

        The other endpoint of each such link loses its registry entry too,
        then the particle's own registry is released.
        """
        self._require(particle)
        for link in [owned for owned in self.links if owned.involves(particle)]:
            self.remove_link(link)
        particle.destroy()
        self.particles = [p for p in self.particles if p is not particle]
        logger.debug("scene: removed particle %d", particle.id)

    def islands(self) -> list[list[Particle]]:
        """Connected components of the link graph (see core.island)."""
        return find_islands(self.particles, self.links)

    def step_island(self, island: Iterable[Particle], dt: float | None = None) -> None:
        """
        Integrate one group of particles by dt, in id order.

        Does not advance scene time; step() does that.
        """
        dt = check_duration(self.dt if dt is None else dt)
        for p in sorted(island, key=lambda x: x.id):
            integrate(p, dt, self.integrator, self.substeps)

    def step(self, dt: float | None = None) -> None:
        """
        Advance the simulation by one frame (dt).

        Every particle is integrated once, in id order for determinism.
        """
        dt = check_duration(self.dt if dt is None else dt)
        self.step_island(self.particles, dt)
        self.time += dt
