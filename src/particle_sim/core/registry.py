# MIT License (see LICENSE)
"""
Per-particle force registry and the registration API.

A particle owns one ForceRegistry: an ordered list of ForceGenerator entries,
each pairing a force law with an activation window [start_time, end_time]
measured on the particle's local clock. Integrators ask the registry for the
entries active at a given time and evaluate each one exactly once.

All validation happens here, at registration time. A failed registration
leaves every registry it touched exactly as it was.

Typical usage:
    add_gravity(p)
    add_drag(p, linear=0.05, quadratic=0.005)
    spring = add_spring(p, q, spring_constant=50.0, rest_length=1.0, damping_coeff=0.1)
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

from ..errors import ErrorCode, ParticleError
from ..util import scalar
from .forces import (
    ForceKind,
    ForceLaw,
    Gravity,
    Drag,
    Spring,
    Bungee,
    AnchoredSpring,
    AnchoredBungee,
    kind_of,
)

if TYPE_CHECKING:
    from ..types import Particle

logger = logging.getLogger(__name__)


@dataclass
class ForceGenerator:
    """
    One registry entry.

    Attributes:
        law: The force law evaluated for this entry.
        kind: Identifier of the law (always kind_of(law)).
        start_time: First local time (s) at which the entry applies.
        end_time: Last local time (s) at which the entry applies (may be inf).
        is_active: Inactive entries are skipped regardless of the window.
    """
    law: ForceLaw
    kind: ForceKind
    start_time: float = 0.0
    end_time: float = math.inf
    is_active: bool = True

    def covers(self, t: float) -> bool:
        """True if the entry is active and t lies inside its window."""
        return self.is_active and self.start_time <= t <= self.end_time


class ForceRegistry:
    """Ordered, growable collection of ForceGenerator entries."""

    def __init__(self) -> None:
        self._entries: list[ForceGenerator] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ForceGenerator]:
        return iter(self._entries)

    def add(self, entry: ForceGenerator) -> None:
        self._entries.append(entry)

    def remove(self, law: ForceLaw) -> int:
        """Remove every entry referencing `law` (by identity). Returns how many."""
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.law is not law]
        return before - len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def active_at(self, t: float) -> Iterator[ForceGenerator]:
        """Entries whose window contains local time t, in registration order."""
        return (e for e in self._entries if e.covers(t))

    def laws(self) -> list[ForceLaw]:
        """Distinct laws referenced by this registry, in registration order."""
        seen: list[ForceLaw] = []
        for e in self._entries:
            if not any(law is e.law for law in seen):
                seen.append(e.law)
        return seen

    def set_active(self, law: ForceLaw, active: bool) -> int:
        """Toggle every entry referencing `law`. Returns how many changed."""
        n = 0
        for e in self._entries:
            if e.law is law:
                e.is_active = active
                n += 1
        return n


def _check_window(start_time: float, end_time: float) -> tuple[float, float]:
    start_time = scalar(start_time, "start time", ErrorCode.INVALID_TIME)
    end_time = scalar(end_time, "end time", ErrorCode.INVALID_TIME)
    if not (start_time >= 0.0 and end_time >= 0.0):
        raise ParticleError(ErrorCode.INVALID_TIME, f"activation window must be non-negative, got [{start_time}, {end_time}]")
    if start_time > end_time:
        raise ParticleError(ErrorCode.INVALID_TIME, f"activation window is inverted: [{start_time}, {end_time}]")
    return start_time, end_time


def _check_particle(particle: "Particle | None") -> None:
    if particle is None:
        raise ParticleError(ErrorCode.INVALID_PARAM, "particle is None")


def add_force(
    particle: "Particle",
    law: ForceLaw,
    start_time: float = 0.0,
    end_time: float = math.inf,
) -> ForceGenerator:
    """
    Register a force law on a particle.

    Args:
        particle: The particle whose registry receives the entry.
        law: A force-law instance (Gravity, Drag, Spring, ...).
        start_time: Window start on the particle's clock (s), >= 0.
        end_time: Window end (s), >= start_time. Defaults to unbounded.

    Returns:
        The appended ForceGenerator entry.

    Raises:
        ParticleError: INVALID_PARAM (None particle or law, or a two-body
            law the particle is not an endpoint of), INVALID_FORCE_ID
            (unrecognised law), INVALID_TIME (negative, inverted or
            non-numeric window).
    """
    _check_particle(particle)
    if law is None:
        raise ParticleError(ErrorCode.INVALID_PARAM, "force law is None")
    start_time, end_time = _check_window(start_time, end_time)
    kind = kind_of(law)
    if kind in (ForceKind.SPRING, ForceKind.BUNGEE) and not law.involves(particle):
        raise ParticleError(
            ErrorCode.INVALID_PARAM,
            f"particle {particle.id} is not an endpoint of this {type(law).__name__}",
        )

    entry = ForceGenerator(law=law, kind=kind, start_time=start_time, end_time=end_time)
    particle.registry.add(entry)
    logger.debug("particle %d: registered %s over [%g, %g]", particle.id, kind.name, start_time, end_time)
    return entry


def _add_pair(a: "Particle", b: "Particle", law: Spring, start_time: float, end_time: float) -> None:
    """Register a two-body law on both endpoints, or on neither."""
    add_force(a, law, start_time, end_time)
    try:
        add_force(b, law, start_time, end_time)
    except Exception:
        a.registry.remove(law)
        logger.warning(
            "particle %d: rolled back %s after registration on particle %d failed",
            a.id, law.kind.name, b.id,
        )
        raise


def add_gravity(particle: "Particle", start_time: float = 0.0, end_time: float = math.inf) -> Gravity:
    """Attach uniform gravity. Unbounded window by default."""
    law = Gravity()
    add_force(particle, law, start_time, end_time)
    return law


def add_drag(
    particle: "Particle",
    linear: float,
    quadratic: float,
    start_time: float = 0.0,
    end_time: float = math.inf,
) -> Drag:
    """Attach drag with coefficients k1 (linear) and k2 (quadratic), both >= 0."""
    _check_particle(particle)
    law = Drag(linear=linear, quadratic=quadratic)
    add_force(particle, law, start_time, end_time)
    return law


def add_spring(
    a: "Particle",
    b: "Particle",
    spring_constant: float,
    rest_length: float,
    damping_coeff: float = 0.0,
    start_time: float = 0.0,
    end_time: float = math.inf,
) -> Spring:
    """
    Connect two particles with a damped spring.

    The returned law is registered once on each particle; each side feels
    the reaction from its own perspective.

    Raises:
        ParticleError: INVALID_PARAM (None particle), NULL_SPRING_OTHER
            (same particle twice), INVALID_SPRING_CONSTANT,
            INVALID_REST_LENGTH, INVALID_DAMPING_COEFF, INVALID_TIME.
    """
    _check_particle(a)
    _check_particle(b)
    _check_window(start_time, end_time)
    law = Spring(a, b, spring_constant, rest_length, damping_coeff)
    _add_pair(a, b, law, start_time, end_time)
    return law


def add_bungee(
    a: "Particle",
    b: "Particle",
    spring_constant: float,
    rest_length: float,
    damping_coeff: float = 0.0,
    start_time: float = 0.0,
    end_time: float = math.inf,
) -> Bungee:
    """Connect two particles with an elastic bungee (pulls only when stretched)."""
    _check_particle(a)
    _check_particle(b)
    _check_window(start_time, end_time)
    law = Bungee(a, b, spring_constant, rest_length, damping_coeff)
    _add_pair(a, b, law, start_time, end_time)
    return law


def add_anchored_spring(
    particle: "Particle",
    anchor,
    spring_constant: float,
    rest_length: float,
    damping_coeff: float = 0.0,
    start_time: float = 0.0,
    end_time: float = math.inf,
) -> AnchoredSpring:
    """Tie a particle to a fixed world-space point with a damped spring."""
    _check_particle(particle)
    law = AnchoredSpring(anchor, spring_constant, rest_length, damping_coeff)
    add_force(particle, law, start_time, end_time)
    return law


def add_anchored_bungee(
    particle: "Particle",
    anchor,
    spring_constant: float,
    rest_length: float,
    damping_coeff: float = 0.0,
    start_time: float = 0.0,
    end_time: float = math.inf,
) -> AnchoredBungee:
    """Tie a particle to a fixed point with a bungee."""
    _check_particle(particle)
    law = AnchoredBungee(anchor, spring_constant, rest_length, damping_coeff)
    add_force(particle, law, start_time, end_time)
    return law


def remove_force(particle: "Particle", law: ForceLaw) -> int:
    """Detach every entry referencing `law` from a particle. Returns how many."""
    _check_particle(particle)
    n = particle.registry.remove(law)
    if n:
        logger.debug("particle %d: removed %d %s entr%s", particle.id, n, law.kind.name, "y" if n == 1 else "ies")
    return n


def clear_forces(particle: "Particle") -> None:
    """Zero the force accumulator and empty the registry."""
    _check_particle(particle)
    particle.clear_forces()
