# MIT License (see LICENSE)
import math

import numpy as np
import pytest

from particle_sim import (
    ErrorCode,
    ForceKind,
    Gravity,
    Particle,
    ParticleError,
    add_anchored_bungee,
    add_bungee,
    add_drag,
    add_force,
    add_gravity,
    add_spring,
    clear_forces,
    evaluate_force,
    integrate,
    remove_force,
)
from particle_sim.core import accumulate_forces
from particle_sim.core import registry as registry_module


def test_add_force_appends_entry():
    p = Particle()
    entry = add_force(p, Gravity(), start_time=1.0, end_time=2.0)
    assert len(p.registry) == 1
    assert entry.kind is ForceKind.GRAVITY
    assert entry.start_time == 1.0
    assert entry.end_time == 2.0
    assert entry.is_active


@pytest.mark.parametrize("start, end", [(-1.0, 2.0), (0.0, -2.0), (3.0, 1.0), (float("nan"), 1.0)])
def test_invalid_window_leaves_registry_unchanged(start, end):
    p = Particle()
    add_gravity(p)
    with pytest.raises(ParticleError) as excinfo:
        add_force(p, Gravity(), start, end)
    assert excinfo.value.code is ErrorCode.INVALID_TIME
    assert len(p.registry) == 1


def test_missing_particle_or_law():
    with pytest.raises(ParticleError) as excinfo:
        add_force(None, Gravity())
    assert excinfo.value.code is ErrorCode.INVALID_PARAM

    with pytest.raises(ParticleError) as excinfo:
        add_force(Particle(), None)
    assert excinfo.value.code is ErrorCode.INVALID_PARAM


def test_unknown_law_is_not_registered():
    p = Particle()
    with pytest.raises(ParticleError) as excinfo:
        add_force(p, object())
    assert excinfo.value.code is ErrorCode.INVALID_FORCE_ID
    assert len(p.registry) == 0


def test_drag_validation_leaves_registry_unchanged():
    p = Particle()
    with pytest.raises(ParticleError) as excinfo:
        add_drag(p, -1.0, 0.0)
    assert excinfo.value.code is ErrorCode.INVALID_DRAG_COEFFS
    assert len(p.registry) == 0


def test_spring_registers_once_on_each_endpoint():
    a = Particle()
    b = Particle(position=(1, 0, 0))
    law = add_spring(a, b, 10.0, 0.5, 0.1)
    assert len(a.registry) == 1
    assert len(b.registry) == 1
    assert a.registry.laws()[0] is law
    assert b.registry.laws()[0] is law


def test_spring_is_evaluated_once_per_step():
    a = Particle()
    b = Particle(position=(2, 0, 0))
    law = add_spring(a, b, 10.0, 1.0)
    total = accumulate_forces(a, a.position, a.velocity, a.time)
    assert np.allclose(total, evaluate_force(law, a.state()))


def test_invalid_spring_registers_nothing():
    a, b = Particle(), Particle()
    with pytest.raises(ParticleError) as excinfo:
        add_spring(a, b, -5.0, 1.0)
    assert excinfo.value.code is ErrorCode.INVALID_SPRING_CONSTANT
    with pytest.raises(ParticleError) as excinfo:
        add_bungee(a, a, 5.0, 1.0)
    assert excinfo.value.code is ErrorCode.NULL_SPRING_OTHER
    with pytest.raises(ParticleError) as excinfo:
        add_spring(a, None, 5.0, 1.0)
    assert excinfo.value.code is ErrorCode.INVALID_PARAM
    assert len(a.registry) == 0
    assert len(b.registry) == 0


def test_failed_second_registration_rolls_back_first(monkeypatch):
    a, b = Particle(), Particle()
    real_add_force = registry_module.add_force

    def failing_add_force(particle, law, start_time=0.0, end_time=math.inf):
        if particle is b:
            raise MemoryError("registry full")
        return real_add_force(particle, law, start_time, end_time)

    monkeypatch.setattr(registry_module, "add_force", failing_add_force)
    with pytest.raises(MemoryError):
        add_spring(a, b, 1.0, 1.0)
    assert len(a.registry) == 0
    assert len(b.registry) == 0


def test_remove_force_by_identity():
    a, b = Particle(), Particle()
    g = add_gravity(a)
    other_gravity = add_gravity(a)
    law = add_spring(a, b, 1.0, 1.0)

    assert remove_force(a, law) == 1
    assert remove_force(a, law) == 0
    assert len(b.registry) == 1
    assert remove_force(a, g) == 1
    assert a.registry.laws() == [other_gravity]


def test_clear_forces_empties_registry():
    p = Particle()
    add_gravity(p)
    add_drag(p, 0.1, 0.01)
    add_anchored_bungee(p, (0, 1, 0), 5.0, 1.0)
    clear_forces(p)
    assert len(p.registry) == 0
    assert np.all(p.resultant_force == 0.0)


def test_set_active_skips_entry():
    p = Particle()
    g = add_gravity(p)
    assert p.registry.set_active(g, False) == 1
    integrate(p, 0.5, "euler", substeps=10)
    assert np.all(p.velocity == 0.0)


def test_window_gates_force_on_local_clock():
    """Gravity active from t=1 s: nothing happens before, ~0.5 s of it after t=1.5 s."""
    p = Particle(damping=1.0)
    add_gravity(p, start_time=1.0)

    integrate(p, 0.5, "euler", substeps=50)
    assert p.time == pytest.approx(0.5)
    assert np.all(p.velocity == 0.0)

    integrate(p, 1.0, "euler", substeps=100)
    assert p.time == pytest.approx(1.5)
    # Substep boundaries may land either side of t=1, so allow one slice.
    assert -9.81 * 0.52 <= p.velocity[1] <= -9.81 * 0.48


def test_window_end_is_inclusive_then_stops():
    p = Particle(damping=1.0)
    add_gravity(p, start_time=0.0, end_time=0.25)
    integrate(p, 1.0, "euler", substeps=100)
    assert -9.81 * 0.27 <= p.velocity[1] <= -9.81 * 0.24


def test_two_body_law_only_registers_on_its_endpoints():
    a, b = Particle(), Particle(position=(1, 0, 0))
    stranger = Particle(velocity=(1, 0, 0))
    for law in (add_spring(a, b, 1.0, 1.0), add_bungee(a, b, 1.0, 1.0)):
        with pytest.raises(ParticleError) as excinfo:
            add_force(stranger, law)
        assert excinfo.value.code is ErrorCode.INVALID_PARAM
    assert len(stranger.registry) == 0

    integrate(stranger, 0.1, "euler", substeps=2)
    assert np.allclose(stranger.position, [0.1 * 0.99 ** 0.05, 0.0, 0.0], rtol=1e-3)
    assert stranger.time == pytest.approx(0.1)


@pytest.mark.parametrize("start, end", [(None, 1.0), (0.0, "later")])
def test_non_numeric_window_is_invalid_time(start, end):
    p = Particle()
    with pytest.raises(ParticleError) as excinfo:
        add_force(p, Gravity(), start, end)
    assert excinfo.value.code is ErrorCode.INVALID_TIME
    assert len(p.registry) == 0


def test_non_numeric_drag_coefficients():
    p = Particle()
    with pytest.raises(ParticleError) as excinfo:
        add_drag(p, None, 0.1)
    assert excinfo.value.code is ErrorCode.INVALID_DRAG_COEFFS
    assert len(p.registry) == 0
