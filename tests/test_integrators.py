# MIT License (see LICENSE)
import math

import numpy as np
import pytest

from particle_sim import (
    ErrorCode,
    Particle,
    ParticleError,
    add_anchored_spring,
    add_drag,
    add_gravity,
    add_spring,
    integrate,
)
from particle_sim.constants import GRAVITY_ACCEL
from particle_sim.core import euler_step, rk4_step
from particle_sim.core import integrators as integrators_module


def test_bullet_matches_reference_recurrence():
    """
    Mass 2, damping 0.99, gravity only, 60 substeps over 1 s.
    Each substep: x += v d; v = v·0.99^d + g d.
    """
    p = Particle(position=(0, 5, 0), velocity=(35, 0, 0), mass=2.0, damping=0.99)
    add_gravity(p)
    integrate(p, 1.0, "euler", substeps=60)

    d = 1.0 / 60
    retain = 0.99 ** d
    x, y, vx, vy = 0.0, 5.0, 35.0, 0.0
    for _ in range(60):
        x += vx * d
        y += vy * d
        vx = vx * retain
        vy = vy * retain + GRAVITY_ACCEL * d

    print("bullet", p.position, "ref", (x, y))
    assert abs(p.position[0] - 35.0) < 0.5
    assert p.position[0] == pytest.approx(x, abs=1e-9)
    assert p.position[1] == pytest.approx(y, abs=1e-9)
    assert p.velocity[0] == pytest.approx(vx, abs=1e-9)
    assert p.velocity[1] == pytest.approx(vy, abs=1e-9)
    assert p.time == pytest.approx(1.0)


def test_gravity_velocity_converges():
    p = Particle(damping=1.0)
    add_gravity(p)
    integrate(p, 1.0, "euler", substeps=1000)
    assert p.velocity[1] == pytest.approx(GRAVITY_ACCEL, rel=1e-9)


@pytest.mark.parametrize("method", ["euler", "rk4"])
def test_damping_does_not_depend_on_frame_slicing(method):
    v0 = np.array([3.0, -2.0, 1.0])
    whole = Particle(velocity=v0, damping=0.5)
    halves = Particle(velocity=v0, damping=0.5)

    integrate(whole, 0.5, method, substeps=10)
    integrate(halves, 0.25, method, substeps=10)
    integrate(halves, 0.25, method, substeps=10)

    assert np.allclose(whole.velocity, v0 * 0.5 ** 0.5, rtol=1e-12)
    assert np.allclose(halves.velocity, whole.velocity, rtol=1e-12)


@pytest.mark.parametrize("method", ["euler", "rk4"])
def test_static_particle_only_drifts(method):
    v0 = np.array([1.0, 2.0, 0.0])
    a0 = np.array([0.0, -1.0, 0.0])
    p = Particle(velocity=v0, acceleration=a0, mass=math.inf, damping=0.9)
    other = Particle(position=(5, 0, 0))
    add_gravity(p)
    add_drag(p, 0.5, 0.5)
    add_anchored_spring(p, (0, 10, 0), 100.0, 1.0, 1.0)
    add_spring(p, other, 100.0, 1.0, 1.0)

    integrate(p, 1.0, method, substeps=50)

    assert np.array_equal(p.acceleration, a0)
    assert np.allclose(p.velocity, v0 * 0.9, rtol=1e-12)
    assert np.all(p.resultant_force == 0.0)


@pytest.mark.parametrize("method", ["euler", "rk4"])
def test_base_acceleration_is_not_overwritten(method):
    p = Particle(acceleration=(1.0, 0.0, 0.0), damping=1.0)
    add_gravity(p)
    integrate(p, 0.5, method, substeps=10)
    assert np.array_equal(p.acceleration, [1.0, 0.0, 0.0])
    assert np.allclose(p.velocity, [0.5, 0.5 * GRAVITY_ACCEL, 0.0])


@pytest.mark.parametrize("method", ["euler", "rk4"])
def test_force_accumulator_is_cleared(method):
    p = Particle()
    add_gravity(p)
    add_drag(p, 0.1, 0.1)
    integrate(p, 0.1, method, substeps=5)
    assert np.all(p.resultant_force == 0.0)


@pytest.mark.parametrize("method, steps", [("euler", 1), ("rk4", 200)])
def test_anchored_oscillator_half_period(method, steps):
    """
    k = 4, m = 1, L = 0: x(t) = cos(2t). After half a period x = -1.
    """
    p = Particle(position=(1.0, 0.0, 0.0), damping=1.0)
    add_anchored_spring(p, (0, 0, 0), spring_constant=4.0, rest_length=0.0)

    T = math.pi / 2
    for _ in range(steps):
        integrate(p, T / steps, method, substeps=20000)

    print(method, "oscillator x", p.position[0])
    assert p.position[0] == pytest.approx(-1.0, abs=1e-2)
    assert abs(p.velocity[0]) < 2e-2


def test_integrate_rejects_bad_arguments():
    p = Particle()
    cases = [
        (lambda: integrate(None, 1.0), ErrorCode.INVALID_PARAM),
        (lambda: integrate(p, 0.0), ErrorCode.INVALID_DURATION),
        (lambda: integrate(p, -1.0), ErrorCode.INVALID_DURATION),
        (lambda: integrate(p, float("nan")), ErrorCode.INVALID_DURATION),
        (lambda: integrate(p, 1.0, "verlet"), ErrorCode.INVALID_PARAM),
        (lambda: integrate(p, 1.0, "euler", substeps=0), ErrorCode.INVALID_PARAM),
    ]
    for call, code in cases:
        with pytest.raises(ParticleError) as excinfo:
            call()
        assert excinfo.value.code is code
    assert p.time == 0.0


def test_environment_selects_default_integrator(monkeypatch):
    """A single 1 s step: RK4 is exact for gravity, one-slice Euler is not."""
    monkeypatch.setenv("PARTICLE_SIM_INTEGRATOR", "RK4")
    monkeypatch.setenv("PARTICLE_SIM_SUBSTEPS", "1")
    p = Particle(position=(0, 10, 0), damping=1.0)
    add_gravity(p)
    integrate(p, 1.0)
    assert p.position[1] == pytest.approx(10.0 + 0.5 * GRAVITY_ACCEL)

    monkeypatch.setenv("PARTICLE_SIM_INTEGRATOR", "euler")
    q = Particle(position=(0, 10, 0), damping=1.0)
    add_gravity(q)
    integrate(q, 1.0)
    # x moves with the old velocity first, so one slice leaves y untouched
    assert q.position[1] == pytest.approx(10.0)
    assert q.velocity[1] == pytest.approx(GRAVITY_ACCEL)


def test_bad_substep_environment(monkeypatch):
    monkeypatch.setenv("PARTICLE_SIM_SUBSTEPS", "lots")
    with pytest.raises(ParticleError) as excinfo:
        integrate(Particle(), 1.0, "euler")
    assert excinfo.value.code is ErrorCode.INVALID_PARAM


def test_failed_step_leaves_particle_untouched(monkeypatch):
    p = Particle(position=(1, 2, 3), velocity=(1, 0, 0), start_time=0.5)
    add_gravity(p)
    real_accumulate = integrators_module.accumulate_forces
    calls = []

    def failing_accumulate(particle, position, velocity, time):
        calls.append(time)
        if len(calls) == 2:
            raise ParticleError(ErrorCode.INVALID_PARAM, "bad force")
        return real_accumulate(particle, position, velocity, time)

    monkeypatch.setattr(integrators_module, "accumulate_forces", failing_accumulate)
    for method in ("euler", "rk4"):
        calls.clear()
        with pytest.raises(ParticleError) as excinfo:
            integrate(p, 0.1, method, substeps=2)
        assert excinfo.value.code is ErrorCode.INVALID_PARAM
        assert np.array_equal(p.position, [1, 2, 3])
        assert np.array_equal(p.velocity, [1, 0, 0])
        assert p.time == 0.5
        assert np.all(p.resultant_force == 0.0)


@pytest.mark.parametrize("substeps", [2.5, "3", 0, -1])
def test_substeps_must_be_positive_integer(substeps):
    p = Particle()
    with pytest.raises(ParticleError) as excinfo:
        integrate(p, 1.0, "euler", substeps=substeps)
    assert excinfo.value.code is ErrorCode.INVALID_PARAM
    with pytest.raises(ParticleError) as excinfo:
        euler_step(p, 1.0, substeps)
    assert excinfo.value.code is ErrorCode.INVALID_PARAM
    assert p.time == 0.0


def test_step_functions_validate_duration():
    p = Particle()
    for call in (lambda: euler_step(p, 0.0, 10), lambda: rk4_step(p, -1.0), lambda: integrate(p, None)):
        with pytest.raises(ParticleError) as excinfo:
            call()
        assert excinfo.value.code is ErrorCode.INVALID_DURATION
    assert p.time == 0.0
