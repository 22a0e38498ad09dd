# MIT License (see LICENSE)
"""
Force laws for particle simulation.

Each force law is a small immutable dataclass tagged with a ForceKind. The
law carries its own parameters, so the kind and the payload can never
disagree. evaluate_force() is the single dispatch point: it takes a law and a
ParticleState snapshot and returns the force vector (N) acting on that
particle. Laws never mutate anything.

Laws:
- Gravity:        F = (0, g·m, 0), zero for static particles.
- Drag:           F = -(k1|v| + k2|v|²) v̂, zero below DRAG_REST_SPEED.
- Spring:         two-body Hooke spring with damping along the axis.
- AnchoredSpring: same law against a fixed world-space point.
- Bungee:         Spring that only pulls (zero when slack).
- AnchoredBungee: AnchoredSpring that only pulls.

Two-body laws hold plain references to both particles and are registered on
both of them; each particle evaluates the same law from its own side.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, ClassVar, NamedTuple

import numpy as np

from ..constants import GRAVITY_ACCEL, DRAG_REST_SPEED, MIN_SEPARATION
from ..errors import ErrorCode, ParticleError
from ..util import norm, scalar, unit, vec3, zeros3

if TYPE_CHECKING:
    from ..types import Particle


class ForceKind(IntEnum):
    """Identifier of a force law."""
    GRAVITY = 1
    DRAG = 2
    SPRING = 3
    ANCHORED_SPRING = 4
    BUNGEE = 5
    ANCHORED_BUNGEE = 6


class ParticleState(NamedTuple):
    """
    Snapshot of a particle as seen by force laws.

    Attributes:
        id: Identity of the particle the snapshot was taken from.
        position: Position [x, y, z] in meters.
        velocity: Velocity [vx, vy, vz] in m/s.
        inverse_mass: 1/m in 1/kg (0 for immovable particles).
        time: Local clock in seconds.
    """
    id: int
    position: np.ndarray
    velocity: np.ndarray
    inverse_mass: float
    time: float


def _set_spring_constants(law) -> None:
    spring_constant = scalar(law.spring_constant, "spring constant", ErrorCode.INVALID_SPRING_CONSTANT)
    rest_length = scalar(law.rest_length, "rest length", ErrorCode.INVALID_REST_LENGTH)
    damping_coeff = scalar(law.damping_coeff, "damping coefficient", ErrorCode.INVALID_DAMPING_COEFF)
    # `not x >= 0` also rejects NaN
    if not spring_constant >= 0.0:
        raise ParticleError(ErrorCode.INVALID_SPRING_CONSTANT, f"spring constant must be >= 0, got {spring_constant}")
    if not rest_length >= 0.0:
        raise ParticleError(ErrorCode.INVALID_REST_LENGTH, f"rest length must be >= 0, got {rest_length}")
    if not damping_coeff >= 0.0:
        raise ParticleError(ErrorCode.INVALID_DAMPING_COEFF, f"damping coefficient must be >= 0, got {damping_coeff}")
    object.__setattr__(law, "spring_constant", spring_constant)
    object.__setattr__(law, "rest_length", rest_length)
    object.__setattr__(law, "damping_coeff", damping_coeff)


@dataclass(frozen=True, eq=False)
class Gravity:
    """Uniform gravity along y. Takes no parameters."""
    kind: ClassVar[ForceKind] = ForceKind.GRAVITY


@dataclass(frozen=True, eq=False)
class Drag:
    """
    Velocity-dependent drag.

    Attributes:
        linear: k1, drag proportional to speed (N·s/m).
        quadratic: k2, drag proportional to speed squared (N·s²/m²).
    """
    linear: float
    quadratic: float
    kind: ClassVar[ForceKind] = ForceKind.DRAG

    def __post_init__(self) -> None:
        object.__setattr__(self, "linear", scalar(self.linear, "linear drag", ErrorCode.INVALID_DRAG_COEFFS))
        object.__setattr__(self, "quadratic", scalar(self.quadratic, "quadratic drag", ErrorCode.INVALID_DRAG_COEFFS))
        if not (self.linear >= 0.0 and self.quadratic >= 0.0):
            raise ParticleError(
                ErrorCode.INVALID_DRAG_COEFFS,
                f"drag coefficients must be >= 0, got ({self.linear}, {self.quadratic})",
            )


@dataclass(frozen=True, eq=False)
class Spring:
    """
    Damped spring between two particles.

    The same instance is registered on both endpoints. Whoever created it
    (usually a Scene) owns it; the endpoints only reference it.

    Attributes:
        a, b: The two endpoint particles.
        spring_constant: k (N/m).
        rest_length: L (m).
        damping_coeff: c (N·s/m), applied to the relative speed along the axis.
    """
    a: "Particle"
    b: "Particle"
    spring_constant: float
    rest_length: float
    damping_coeff: float = 0.0
    kind: ClassVar[ForceKind] = ForceKind.SPRING

    def __post_init__(self) -> None:
        if self.a is None or self.b is None:
            raise ParticleError(ErrorCode.NULL_SPRING_OTHER, "two-body law needs both endpoints")
        if self.a is self.b:
            raise ParticleError(ErrorCode.NULL_SPRING_OTHER, "two-body law endpoints must be distinct particles")
        _set_spring_constants(self)

    def involves(self, particle: "Particle") -> bool:
        return particle is self.a or particle is self.b

    def other(self, particle_id: int) -> "Particle":
        """
        Return the endpoint that is not `particle_id`.

        Raises:
            ParticleError(INVALID_PARAM): particle_id is neither endpoint.
        """
        if self.a.id == particle_id:
            return self.b
        if self.b.id == particle_id:
            return self.a
        raise ParticleError(
            ErrorCode.INVALID_PARAM,
            f"particle {particle_id} is not an endpoint of this {type(self).__name__}",
        )


@dataclass(frozen=True, eq=False)
class Bungee(Spring):
    """Spring that exerts force only while stretched beyond its rest length."""
    kind: ClassVar[ForceKind] = ForceKind.BUNGEE


@dataclass(frozen=True, eq=False)
class AnchoredSpring:
    """
    Damped spring between a particle and a fixed world-space point.

    Attributes:
        anchor: Anchor position [x, y, z] (m).
        spring_constant: k (N/m).
        rest_length: L (m).
        damping_coeff: c (N·s/m).
    """
    anchor: np.ndarray
    spring_constant: float
    rest_length: float
    damping_coeff: float = 0.0
    kind: ClassVar[ForceKind] = ForceKind.ANCHORED_SPRING

    def __post_init__(self) -> None:
        anchor = vec3(self.anchor, "anchor")
        anchor.flags.writeable = False
        object.__setattr__(self, "anchor", anchor)
        _set_spring_constants(self)


@dataclass(frozen=True, eq=False)
class AnchoredBungee(AnchoredSpring):
    """Anchored spring that only pulls."""
    kind: ClassVar[ForceKind] = ForceKind.ANCHORED_BUNGEE


ForceLaw = Gravity | Drag | Spring | Bungee | AnchoredSpring | AnchoredBungee

# Exact type for every kind; subclasses do not count as their parent kind.
LAW_TYPES: dict[ForceKind, type] = {
    ForceKind.GRAVITY: Gravity,
    ForceKind.DRAG: Drag,
    ForceKind.SPRING: Spring,
    ForceKind.ANCHORED_SPRING: AnchoredSpring,
    ForceKind.BUNGEE: Bungee,
    ForceKind.ANCHORED_BUNGEE: AnchoredBungee,
}


def kind_of(law: object) -> ForceKind:
    """
    Identify a force law.

    Raises:
        ParticleError(INVALID_FORCE_ID): law is not one of the known variants.
    """
    kind = getattr(type(law), "kind", None)
    if not isinstance(kind, ForceKind) or LAW_TYPES.get(kind) is not type(law):
        raise ParticleError(ErrorCode.INVALID_FORCE_ID, f"unrecognised force law: {law!r}")
    return kind


def _spring_law(
    displacement: np.ndarray,
    rel_velocity: np.ndarray,
    spring_constant: float,
    rest_length: float,
    damping_coeff: float,
    slack_free: bool,
) -> np.ndarray:
    """
    Damped Hooke law along `displacement` (self minus other end).

    f = -k(|d| - L) - c (d·v_rel)/|d|, applied along d̂. With slack_free the
    result is exactly zero whenever |d| <= L.
    """
    length = norm(displacement)
    extension = length - rest_length
    if slack_free and extension <= 0.0:
        return zeros3()
    if length < MIN_SEPARATION:
        # Coincident ends: no direction to push along.
        return zeros3()
    direction = displacement / length
    magnitude = -spring_constant * extension - damping_coeff * float(np.dot(direction, rel_velocity))
    return magnitude * direction


def evaluate_force(law: ForceLaw, state: "ParticleState") -> np.ndarray:
    """
    Compute the force a law exerts on the particle described by `state`.

    For two-body laws the far endpoint is read from its live particle, the
    near endpoint from `state`, so integrators can sample perturbed states.

    Args:
        law: One of the force-law variants.
        state: Snapshot of the particle being integrated.

    Returns:
        Force vector [Fx, Fy, Fz] in newtons (a new array).

    Raises:
        ParticleError(INVALID_FORCE_ID): unknown law.
        ParticleError(INVALID_PARAM): two-body law that does not involve state.id.
    """
    kind = kind_of(law)

    if kind is ForceKind.GRAVITY:
        if state.inverse_mass == 0.0:
            return zeros3()
        return np.array([0.0, GRAVITY_ACCEL / state.inverse_mass, 0.0], dtype=np.float64)

    if kind is ForceKind.DRAG:
        speed = norm(state.velocity)
        if speed < DRAG_REST_SPEED:
            return zeros3()
        magnitude = law.linear * speed + law.quadratic * speed * speed
        return -magnitude * unit(state.velocity)

    if kind in (ForceKind.SPRING, ForceKind.BUNGEE):
        other = law.other(state.id)
        return _spring_law(
            state.position - other.position,
            state.velocity - other.velocity,
            law.spring_constant,
            law.rest_length,
            law.damping_coeff,
            slack_free=kind is ForceKind.BUNGEE,
        )

    # ANCHORED_SPRING / ANCHORED_BUNGEE
    return _spring_law(
        state.position - law.anchor,
        state.velocity,
        law.spring_constant,
        law.rest_length,
        law.damping_coeff,
        slack_free=kind is ForceKind.ANCHORED_BUNGEE,
    )
