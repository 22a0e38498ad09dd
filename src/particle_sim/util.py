# MIT License (see LICENSE)
"""
Utility functions for vector math and process configuration.

Vectors are numpy float64 arrays of shape (3,). Addition, scaling and dot
products are plain numpy operations; the helpers here cover conversion,
magnitudes, safe normalisation and read-only views.
"""
from __future__ import annotations
import math
import operator
import os

import numpy as np

from .constants import DEFAULT_INTEGRATOR, DEFAULT_SUBSTEPS
from .errors import ErrorCode, ParticleError


def f64(x) -> np.ndarray:
    """Convert any array-like to a (copied) float64 numpy array."""
    return np.array(x, dtype=np.float64)


def vec3(x, name: str = "vector") -> np.ndarray:
    """
    Convert an array-like to a finite 3-component float64 vector.

    Raises:
        ParticleError(INVALID_PARAM): wrong shape or non-finite components.
    """
    try:
        v = f64(x)
    except (TypeError, ValueError) as exc:
        raise ParticleError(ErrorCode.INVALID_PARAM, f"{name} is not numeric: {x!r}") from exc
    if v.shape != (3,):
        raise ParticleError(ErrorCode.INVALID_PARAM, f"{name} must have 3 components, got shape {v.shape}")
    if not np.all(np.isfinite(v)):
        raise ParticleError(ErrorCode.INVALID_PARAM, f"{name} must be finite, got {v}")
    return v


def scalar(x, name: str, code: ErrorCode = ErrorCode.INVALID_PARAM) -> float:
    """
    Convert a number-like to float.

    Raises:
        ParticleError(code): x is not numeric.
    """
    try:
        return float(x)
    except (TypeError, ValueError) as exc:
        raise ParticleError(code, f"{name} is not numeric: {x!r}") from exc


def check_substeps(n, name: str = "substeps") -> int:
    """
    Validate a substep count.

    Raises:
        ParticleError(INVALID_PARAM): n is not an integer or is < 1.
    """
    try:
        count = operator.index(n)
    except TypeError as exc:
        raise ParticleError(ErrorCode.INVALID_PARAM, f"{name} must be an integer, got {n!r}") from exc
    if count < 1:
        raise ParticleError(ErrorCode.INVALID_PARAM, f"{name} must be >= 1, got {count}")
    return count


def check_duration(duration) -> float:
    """
    Validate a step duration.

    Raises:
        ParticleError(INVALID_DURATION): not numeric, <= 0, infinite or NaN.
    """
    dt = scalar(duration, "duration", ErrorCode.INVALID_DURATION)
    if not (dt > 0.0 and math.isfinite(dt)):
        raise ParticleError(ErrorCode.INVALID_DURATION, f"duration must be finite and > 0, got {duration}")
    return dt


def zeros3() -> np.ndarray:
    return np.zeros(3, dtype=np.float64)


def norm2(v: np.ndarray) -> float:
    """Squared magnitude of a 3D vector. Avoids sqrt."""
    return float(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def norm(v: np.ndarray) -> float:
    """Magnitude (length) of a 3D vector."""
    return float(np.sqrt(norm2(v)))


def unit(v: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """
    Return a unit (normalized) vector in the same direction as v.

    Returns zero vector if |v| < eps to avoid division by zero.
    """
    n = norm(v)
    if n < eps:
        return zeros3()
    return v / n


def readonly(v: np.ndarray) -> np.ndarray:
    """Non-writeable view of v. Writes through the view raise ValueError."""
    view = v.view()
    view.flags.writeable = False
    return view


def default_integrator() -> str:
    """Integrator name from PARTICLE_SIM_INTEGRATOR ("euler" or "rk4")."""
    return os.environ.get("PARTICLE_SIM_INTEGRATOR", DEFAULT_INTEGRATOR).strip().lower()


def default_substeps() -> int:
    """Euler substep count from PARTICLE_SIM_SUBSTEPS."""
    raw = os.environ.get("PARTICLE_SIM_SUBSTEPS")
    if raw is None:
        return DEFAULT_SUBSTEPS
    try:
        n = int(raw)
    except ValueError as exc:
        raise ParticleError(ErrorCode.INVALID_PARAM, f"PARTICLE_SIM_SUBSTEPS must be an integer, got {raw!r}") from exc
    return check_substeps(n, "PARTICLE_SIM_SUBSTEPS")
