"""
Unit tests for the simulation engine lifecycle and controls.
"""

import numpy as np
import pytest

from diffusion_sim import (
    CapacityExceeded,
    EngineConfig,
    InvalidCase,
    InvalidParameter,
    SimulationEngine,
    WalkParameters,
)
from diffusion_sim.cases import DOMAIN_WIDTH


def _engine(**kwargs):
    cfg = {"num_atoms": 300, "seed": 2024}
    cfg.update(kwargs)
    return SimulationEngine.from_config(cfg)


def _run(engine, frames=20, dt=0.05):
    engine.running = True
    for _ in range(frames):
        engine.step(dt)


def test_defaults():
    engine = SimulationEngine(EngineConfig(seed=0))
    assert engine.case_num == 1
    assert engine.num_atoms == 2000
    assert engine.time == 0.0
    assert engine.running is False
    assert engine.speed == 1.0
    assert engine.D == pytest.approx(20.0 * 0.5**2 / 6.0)
    assert np.all(engine.particles.x_coords() == 0.0)


def test_fresh_particles_start_on_source_plane():
    engine = _engine(case=2)
    pos = engine.particles.active_positions()
    assert np.all(pos[:, 0] == 0.0)
    assert np.all(np.abs(pos[:, 1:]) <= DOMAIN_WIDTH / 2)


def test_step_is_noop_while_paused():
    engine = _engine()
    before = engine.particles.positions.copy()
    assert engine.step(0.05) == 0
    assert engine.time == 0.0
    assert np.array_equal(engine.particles.positions, before)


def test_step_advances_clock_by_dt_times_speed():
    engine = _engine(speed=2.0)
    engine.running = True
    engine.step(0.05)
    engine.step(0.0)
    engine.step(-0.1)
    assert engine.time == pytest.approx(0.1)


def test_step_rejects_non_finite_dt():
    engine = _engine()
    engine.running = True
    with pytest.raises(InvalidParameter):
        engine.step(float("nan"))
    assert engine.time == 0.0


def test_substeps_follow_jump_frequency():
    engine = _engine(jump_frequency=1000.0)
    engine.running = True
    assert engine.step(0.05) == 50


def test_invariants_after_steps():
    for case in (1, 2, 3):
        engine = _engine(case=case, jump_length=2.0)
        _run(engine, frames=40)
        x = engine.particles.x_coords()
        assert np.all((x >= engine.domain_min) & (x <= engine.domain_max))
        lateral = engine.particles.positions[1:, : engine.num_atoms]
        assert np.all(np.abs(lateral) <= DOMAIN_WIDTH / 2)
        counts = engine.get_histogram()
        assert counts.sum() <= engine.num_atoms
        assert engine.count_in_view() >= counts.sum()
        assert np.all(np.isfinite(engine.normalized_histogram()))


def test_thin_film_keeps_mass_on_positive_side():
    engine = _engine(case=3)
    _run(engine, frames=30)
    assert np.all(engine.particles.x_coords() >= 0.0)


def test_reset_restores_source_plane_and_time():
    engine = _engine(case=2)
    _run(engine)
    assert engine.time > 0.0
    engine.reset()
    assert engine.time == 0.0
    assert engine.num_atoms == 300
    assert np.all(engine.particles.x_coords() == 0.0)


def test_set_case_resets_and_pauses():
    engine = _engine()
    _run(engine)
    engine.set_case(2)
    assert engine.case_num == 2
    assert engine.running is False
    assert engine.time == 0.0
    assert (engine.visible_min, engine.visible_max) == (-5.0, 5.0)
    assert (engine.domain_min, engine.domain_max) == (-50.0, 50.0)
    assert np.all(engine.particles.x_coords() == 0.0)


def test_invalid_case_leaves_state_unchanged():
    engine = _engine()
    _run(engine, frames=5)
    before = engine.particles.positions.copy()
    t = engine.time
    with pytest.raises(InvalidCase):
        engine.set_case(4)
    assert engine.case_num == 1
    assert engine.time == t
    assert engine.running is True
    assert np.array_equal(engine.particles.positions, before)


def test_growing_particle_count_initialises_only_new_slots():
    engine = _engine(case=3)
    _run(engine, frames=10)
    old = engine.particles.positions[:, :300].copy()
    engine.set_particle_count(450)
    assert engine.num_atoms == 450
    assert np.array_equal(engine.particles.positions[:, :300], old)
    new = engine.particles.positions[:, 300:450]
    assert np.all(new[0] == 0.0)
    assert np.all(np.abs(new[1:]) <= DOMAIN_WIDTH / 2)


def test_shrinking_then_growing_reseeds():
    engine = _engine()
    _run(engine, frames=10)
    engine.set_particle_count(100)
    assert engine.num_atoms == 100
    assert engine.particles.x_coords().shape == (100,)
    engine.set_particle_count(150)
    assert np.all(engine.particles.positions[0, 100:150] == 0.0)


def test_particle_count_over_capacity_fails_without_change():
    engine = _engine(capacity=500)
    with pytest.raises(CapacityExceeded):
        engine.set_particle_count(501)
    assert engine.num_atoms == 300
    with pytest.raises(InvalidParameter):
        engine.set_particle_count(-1)
    assert engine.num_atoms == 300


def test_config_validation():
    with pytest.raises(CapacityExceeded):
        _engine(num_atoms=6000)
    with pytest.raises(InvalidCase):
        _engine(case=0)
    with pytest.raises(InvalidParameter):
        _engine(jump_frequency=0.0)


@pytest.mark.parametrize(
    "gamma,lam,speed",
    [(0.0, 0.5, 1.0), (-1.0, 0.5, 1.0), (20.0, 0.0, 1.0), (20.0, 0.5, 0.0), (float("nan"), 0.5, 1.0)],
)
def test_invalid_parameters_leave_state_unchanged(gamma, lam, speed):
    engine = _engine()
    with pytest.raises(InvalidParameter):
        engine.set_parameters(gamma, lam, speed)
    assert engine.jump_frequency == 20.0
    assert engine.jump_length == 0.5
    assert engine.speed == 1.0


def test_set_parameters_updates_derived_coefficient():
    engine = _engine()
    engine.set_parameters(60.0, 0.2, 3.0)
    assert engine.D == pytest.approx(60.0 * 0.04 / 6.0)
    assert engine.speed == 3.0
    engine.set_parameters(10.0, 1.0)
    assert engine.speed == 3.0
    assert engine.D == pytest.approx(10.0 / 6.0)


def test_walk_parameters_validate():
    assert WalkParameters(6.0, 1.0).diffusion_coefficient == pytest.approx(1.0)
    with pytest.raises(InvalidParameter):
        WalkParameters(6.0, -1.0)


def test_same_seed_replays_identically():
    a = _engine(case=2, seed=99)
    b = _engine(case=2, seed=99)
    _run(a, frames=15)
    _run(b, frames=15)
    assert np.array_equal(a.particles.positions, b.particles.positions)
    assert np.array_equal(a.get_histogram(), b.get_histogram())


def test_analytical_queries_follow_clock():
    engine = _engine()
    assert engine.analytical_at(0.0) == 1.0
    assert engine.analytical_at(1.0) == 0.0
    assert engine.diffusion_length() == 0.0
    _run(engine, frames=20)
    assert 0.0 < engine.analytical_at(1.0) < 1.0
    assert engine.diffusion_length() == pytest.approx(np.sqrt(2.0 * engine.D * engine.time))
    xs, ys = engine.analytical_curve()
    assert xs[0] == engine.visible_min and xs[-1] == engine.visible_max
    assert np.all(np.isfinite(ys))


def test_snapshot_reports_control_values():
    engine = _engine(case=3)
    snap = engine.snapshot()
    assert snap["case"] == 3
    assert snap["num_atoms"] == 300
    assert snap["in_view"] == 300
    assert snap["D"] == pytest.approx(engine.D)


def test_toggle_running():
    engine = _engine()
    assert engine.toggle_running() is True
    assert engine.toggle_running() is False


def test_step_with_huge_jump_length_finishes():
    """Every particle lands inside the domain even when λ dwarfs it."""
    engine = _engine(case=2, num_atoms=5)
    engine.set_parameters(20.0, 1e17)
    engine.running = True
    engine.step(0.05)
    x = engine.particles.x_coords()
    yz = engine.particles.positions[1:, :5]
    assert np.all(np.isfinite(engine.particles.positions[:, :5]))
    assert np.all((x >= engine.domain_min) & (x <= engine.domain_max))
    assert np.all(np.abs(yz) <= DOMAIN_WIDTH / 2)


@pytest.mark.parametrize("bad", [2.5, 3.9, "x", None])
def test_set_case_rejects_non_integral_values(bad):
    engine = _engine(case=1)
    with pytest.raises(InvalidCase):
        engine.set_case(bad)
    assert engine.case_num == 1


@pytest.mark.parametrize("bad", [2.7, float("nan"), float("inf"), "many"])
def test_particle_count_rejects_non_integral_values(bad):
    engine = _engine()
    with pytest.raises(InvalidParameter):
        engine.set_particle_count(bad)
    assert engine.num_atoms == 300
    with pytest.raises(InvalidParameter):
        _engine(num_atoms=bad)


def test_particle_count_accepts_whole_floats():
    engine = _engine()
    engine.set_particle_count(120.0)
    assert engine.num_atoms == 120


def test_snapshot_names_boundary_rule():
    assert "reflect" in _engine(case=3).snapshot()["boundary"]
    assert "clamp" in _engine(case=1).snapshot()["boundary"]
