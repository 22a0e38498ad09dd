# MIT License (see LICENSE)
"""
Error signalling for the particle engine.

Every failure the engine reports belongs to the closed set in ErrorCode and
is raised as a ParticleError carrying that code. ParticleError derives from
ValueError, so callers that only care about "bad input" can catch that.

Typical usage:
    try:
        particle.set_mass(0.0)
    except ParticleError as exc:
        if exc.code is ErrorCode.INVALID_MASS:
            ...
"""
from __future__ import annotations
from enum import Enum


class ErrorCode(Enum):
    """Closed set of failure kinds."""
    INVALID_PARAM = "invalid_param"
    INVALID_MASS = "invalid_mass"
    INVALID_DAMPING = "invalid_damping"
    INVALID_TIME = "invalid_time"
    INVALID_SPRING_CONSTANT = "invalid_spring_constant"
    INVALID_REST_LENGTH = "invalid_rest_length"
    INVALID_DAMPING_COEFF = "invalid_damping_coeff"
    NULL_SPRING_OTHER = "null_spring_other"
    INVALID_DRAG_COEFFS = "invalid_drag_coeffs"
    INVALID_FORCE_ID = "invalid_force_id"
    INVALID_DURATION = "invalid_duration"


class ParticleError(ValueError):
    """
    Raised for any invalid argument, physical parameter or duration.

    Attributes:
        code: The ErrorCode describing the failure.
    """

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        self.code = code
        super().__init__(message or code.value)

    def __repr__(self) -> str:
        return f"ParticleError({self.code.name}, {str(self)!r})"
