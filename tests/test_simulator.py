"""Tests for the simulation controller."""

import numpy as np
import pytest
from solar_nbody import (
    InvalidIdError,
    InvalidMethodError,
    InvalidParameterError,
    InvalidStateError,
    Method,
    NonFiniteStateError,
    SimulationConfig,
    SimulationState,
    Simulator,
)
from solar_nbody.presets import TwoBodyCircular, populate


def _unit_simulator(**overrides):
    """Simulator in G = 1 units."""
    return Simulator(SimulationConfig(G=1.0, epsilon=1e-6, **overrides))


def _three_body(sim):
    sim.init_body(0, 1.0, 0.0, 0.0, 0.0, 0.0, -0.1, 0.0)
    sim.init_body(1, 0.5, 1.0, 0.0, 0.0, 0.0, 0.6, 0.05)
    sim.init_body(2, 0.8, 0.0, 1.5, 0.2, -0.4, 0.0, 0.0)


def _circular_orbit(method, steps_per_orbit=1000):
    """Integrate one analytic period of a two-body circular orbit."""
    sim = _unit_simulator()
    preset = TwoBodyCircular(central_mass=1.0, orbiting_mass=1e-6, radius=1.0, G=1.0)
    populate(sim, preset)
    E0 = sim.get_energy()
    dt = preset.period / steps_per_orbit
    for _ in range(steps_per_orbit):
        sim.simulate_step(method, dt)
    return sim, abs(sim.get_energy() - E0) / abs(E0)


def test_lifecycle_states():
    sim = _unit_simulator()
    assert sim.state is SimulationState.UNINITIALIZED

    sim.init_body(0, 1.0, 1.0, 2.0, 3.0, 0.0, 0.0, 0.0)
    assert sim.state is SimulationState.READY

    sim.simulate_step(Method.VERLET, 0.1)
    assert sim.state is SimulationState.READY

    sim.release_all()
    assert sim.state is SimulationState.RELEASED

    sim.init_body(0, 1.0, 1.0, 2.0, 3.0, 0.0, 0.0, 0.0)
    assert sim.state is SimulationState.READY
    assert sim.time == 0.0
    assert sim.step_count == 0


def test_release_from_uninitialized():
    sim = _unit_simulator()
    sim.release_all()
    assert sim.state is SimulationState.RELEASED


@pytest.mark.parametrize("call", [
    lambda sim: sim.get_x(0),
    lambda sim: sim.get_y(0),
    lambda sim: sim.get_z(0),
    lambda sim: sim.get_position(0),
    lambda sim: sim.simulate_step(0, 0.1),
    lambda sim: sim.step(),
    lambda sim: sim.run(3),
    lambda sim: sim.simulate_all(2, 3, 0.1),
    lambda sim: sim.get_energy(),
    lambda sim: sim.get_momentum(),
])
def test_uninitialized_and_released_fail(call):
    sim = _unit_simulator()
    with pytest.raises(InvalidStateError):
        call(sim)

    sim.init_body(0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    sim.release_all()
    with pytest.raises(InvalidStateError):
        call(sim)


def test_position_queries():
    sim = _unit_simulator()
    sim.init_body(0, 1.0, 1.5, -2.5, 3.5, 0.0, 0.0, 0.0)

    assert sim.get_x(0) == 1.5
    assert sim.get_y(0) == -2.5
    assert sim.get_z(0) == 3.5
    assert sim.get_position(0) == (1.5, -2.5, 3.5)

    with pytest.raises(InvalidIdError):
        sim.get_x(1)
    with pytest.raises(InvalidIdError):
        sim.get_y(-1)


def test_stale_epoch_query_fails():
    sim = _unit_simulator()
    sim.init_body(0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    epoch = sim.epoch
    sim.release_all()
    sim.init_body(0, 1.0, 2.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    with pytest.raises(InvalidIdError):
        sim.get_position(0, epoch=epoch)
    assert sim.get_position(0, epoch=sim.epoch) == (2.0, 0.0, 0.0)


@pytest.mark.parametrize("method", [3, -1, 7, "leapfrog", None, True])
def test_invalid_method_leaves_state_untouched(method):
    sim = _unit_simulator()
    _three_body(sim)
    before = sim.get_state()

    with pytest.raises(InvalidMethodError):
        sim.simulate_step(method, 0.1)

    after = sim.get_state()
    assert np.array_equal(before[1], after[1])
    assert np.array_equal(before[2], after[2])
    assert sim.step_count == 0


@pytest.mark.parametrize("dt", [0.0, float("nan"), float("-inf")])
def test_invalid_timestep_rejected(dt):
    sim = _unit_simulator()
    _three_body(sim)
    with pytest.raises(InvalidParameterError):
        sim.simulate_step(Method.RK4, dt)
    assert sim.step_count == 0


def test_invalid_init_keeps_existing_bodies():
    sim = _unit_simulator()
    sim.init_body(0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    with pytest.raises(InvalidParameterError):
        sim.init_body(1, -5.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    assert sim.n_bodies == 1
    assert sim.get_position(0) == (1.0, 0.0, 0.0)


def test_invalid_first_init_stays_uninitialized():
    sim = _unit_simulator()
    with pytest.raises(InvalidParameterError):
        sim.init_body(0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    assert sim.state is SimulationState.UNINITIALIZED


@pytest.mark.parametrize("method", [Method.VERLET, Method.RK4])
def test_circular_orbit_conserves_energy(method):
    _, drift = _circular_orbit(method)
    assert drift < 1e-3


def test_euler_drifts_more_than_symplectic_and_rk4():
    _, euler_drift = _circular_orbit(Method.EULER)
    _, verlet_drift = _circular_orbit(Method.VERLET)
    _, rk4_drift = _circular_orbit(Method.RK4)

    assert euler_drift > 1e-3
    assert euler_drift > 10 * verlet_drift
    assert euler_drift > 10 * rk4_drift


def test_rk4_orbit_closes():
    sim, _ = _circular_orbit(Method.RK4)
    x, y, z = sim.get_position(1)
    assert np.hypot(x - 1.0, y) < 1e-2
    assert abs(z) < 1e-12


@pytest.mark.parametrize("method", list(Method))
def test_momentum_conserved(method):
    sim = _unit_simulator()
    _three_body(sim)
    P0 = sim.get_momentum()

    sim.simulate_step(method, 0.001)
    assert np.allclose(sim.get_momentum(), P0, atol=1e-13)

    for _ in range(200):
        sim.simulate_step(method, 0.001)
    assert np.allclose(sim.get_momentum(), P0, atol=1e-12)


@pytest.mark.parametrize("force_method", ["vectorized", "direct"])
def test_force_methods_agree_through_controller(force_method):
    reference = _unit_simulator()
    sim = _unit_simulator(force_method=force_method)
    _three_body(reference)
    _three_body(sim)
    for _ in range(20):
        reference.simulate_step(Method.RK4, 0.01)
        sim.simulate_step(Method.RK4, 0.01)
    assert np.allclose(reference.get_state()[1], sim.get_state()[1], rtol=1e-10, atol=1e-12)


def test_release_twice_then_reinit_matches_fresh_engine():
    used = _unit_simulator()
    _three_body(used)
    for method in (0, 1, 2):
        used.simulate_step(method, 0.01)
    used.release_all()
    used.release_all()

    fresh = _unit_simulator()
    for sim in (used, fresh):
        _three_body(sim)
        for method in (1, 2, 1):
            sim.simulate_step(method, 0.01)

    for body_id in range(3):
        assert used.get_position(body_id) == fresh.get_position(body_id)
    assert used.time == fresh.time
    assert used.step_count == fresh.step_count


def test_overwrite_keeps_body_count():
    sim = _unit_simulator()
    _three_body(sim)
    sim.init_body(1, 4.0, 9.0, 9.0, 9.0, 1.0, 1.0, 1.0)

    assert sim.n_bodies == 3
    assert sim.get_position(1) == (9.0, 9.0, 9.0)
    assert sim.get_velocity(1) == (1.0, 1.0, 1.0)
    _, _, _, masses, _, _ = sim.get_state()
    assert np.array_equal(masses, [1.0, 4.0, 0.8])


def test_method_switch_takes_effect_immediately():
    switched = _unit_simulator()
    _three_body(switched)
    switched.simulate_step(Method.VERLET, 0.01)
    switched.simulate_step(Method.EULER, 0.01)

    # Rebuild the post-(Verlet, Euler) state in a second engine
    ids, positions, velocities, masses, _, _ = switched.get_state()
    rebuilt = _unit_simulator()
    for i in ids:
        rebuilt.init_body(int(i), masses[i], *positions[i], *velocities[i])

    switched.simulate_step(Method.VERLET, 0.01)
    rebuilt.simulate_step(Method.VERLET, 0.01)

    assert np.array_equal(switched.get_state()[1], rebuilt.get_state()[1])
    assert np.array_equal(switched.get_state()[2], rebuilt.get_state()[2])


@pytest.mark.parametrize("method", list(Method))
def test_single_body_drifts_freely(method):
    sim = _unit_simulator()
    sim.init_body(0, 3.0, 1.0, 1.0, 1.0, 0.2, 0.0, -0.1)
    for _ in range(5):
        sim.simulate_step(method, 2.0)
    assert np.allclose(sim.get_position(0), [3.0, 1.0, 0.0], atol=1e-12)


def test_backward_step_direction():
    sim = _unit_simulator()
    sim.init_body(0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0)
    sim.simulate_step(Method.RK4, -0.5)
    assert sim.get_x(0) == pytest.approx(-0.5)
    assert sim.time == pytest.approx(-0.5)


def test_non_finite_step_not_committed():
    sim = Simulator(SimulationConfig(G=1e300, epsilon=1e-6))
    sim.init_body(0, 1e300, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    sim.init_body(1, 1e300, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    with np.errstate(all="ignore"):
        with pytest.raises(NonFiniteStateError):
            sim.simulate_step(Method.EULER, 1.0)

    assert sim.get_position(1) == (1.0, 0.0, 0.0)
    assert sim.step_count == 0


def test_simulate_all_records_history():
    sim = _unit_simulator()
    _three_body(sim)
    initial = sim.get_state()[1]

    history = sim.simulate_all(Method.RK4, 10, 0.01)

    assert history.shape == (11, 3, 3)
    assert np.array_equal(history[0], initial)
    assert np.array_equal(history[-1], sim.get_state()[1])
    assert sim.step_count == 10


def test_simulate_all_rejects_bad_arguments():
    sim = _unit_simulator()
    _three_body(sim)
    with pytest.raises(InvalidMethodError):
        sim.simulate_all(5, 10, 0.01)
    with pytest.raises(InvalidParameterError):
        sim.simulate_all(0, -1, 0.01)
    with pytest.raises(InvalidParameterError):
        sim.simulate_all(0, 10, 0.0)
    with pytest.raises(InvalidParameterError):
        sim.simulate_all(0, 2.5, 0.01)
    with pytest.raises(InvalidParameterError):
        sim.simulate_all(0, True, 0.01)
    assert sim.step_count == 0


def test_simulate_all_failure_rolls_back_every_step():
    sim = _unit_simulator()
    sim.init_body(0, 1.0, 0.0, 0.0, 0.0, 1e307, 0.0, 0.0)

    # x overflows after 18 steps
    with pytest.raises(NonFiniteStateError):
        sim.simulate_all(Method.EULER, 50, 1.0)

    assert sim.step_count == 0
    assert sim.time == 0.0
    assert sim.get_position(0) == (0.0, 0.0, 0.0)
    assert sim.get_velocity(0) == (1e307, 0.0, 0.0)

    sim.simulate_step(Method.EULER, 1.0)
    assert sim.get_x(0) == 1e307


def test_run_failure_rolls_back_every_step():
    sim = _unit_simulator(method="verlet", dt=1.0)
    sim.init_body(0, 1.0, 0.0, 0.0, 0.0, 1e307, 0.0, 0.0)
    sim.run(2)

    with pytest.raises(NonFiniteStateError):
        sim.run(50)

    assert sim.step_count == 2
    assert sim.time == 2.0
    assert sim.get_x(0) == 2e307


def test_run_rejects_bad_step_count():
    sim = _unit_simulator()
    _three_body(sim)
    for n_steps in (-1, 1.5, True):
        with pytest.raises(InvalidParameterError):
            sim.run(n_steps)
    assert sim.step_count == 0


def test_step_uses_configured_method_and_timestep():
    sim = _unit_simulator(method="euler", dt=0.25)
    assert sim.method is Method.EULER
    sim.init_body(0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    sim.run(4)
    assert sim.get_x(0) == pytest.approx(1.0)
    assert sim.time == pytest.approx(1.0)

    sim.set_method(2)
    sim.set_timestep(0.5)
    sim.step()
    assert sim.method is Method.RK4
    assert sim.get_x(0) == pytest.approx(1.5)

    with pytest.raises(InvalidMethodError):
        sim.set_method(9)
    with pytest.raises(InvalidParameterError):
        sim.set_timestep(0.0)


def test_pause_and_resume():
    sim = _unit_simulator()
    sim.init_body(0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0)
    sim.pause()
    sim.run(3)
    assert sim.step_count == 0
    sim.resume()
    sim.run(3)
    assert sim.step_count == 3


def test_step_callback():
    sim = _unit_simulator()
    sim.init_body(0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0)
    seen = []
    sim.on_step_callback = lambda s: seen.append(s.step_count)
    sim.run(3)
    assert seen == [1, 2, 3]


def test_verbose_prints_diagnostics(capsys):
    sim = _unit_simulator(verbose=True, debug_interval=2)
    _three_body(sim)
    sim.run(4)
    out = capsys.readouterr().out
    assert out.count("[Diag]") == 2
    assert "step=4" in out


def test_simulators_are_independent():
    a = _unit_simulator()
    b = _unit_simulator()
    a.init_body(0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    assert b.state is SimulationState.UNINITIALIZED
    with pytest.raises(InvalidStateError):
        b.get_x(0)

    b.init_body(0, 1.0, 5.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    a.release_all()
    assert b.get_x(0) == 5.0


def test_default_units_earth_orbit():
    """In AU/day/kg, an Earth on a circular 1 AU orbit returns after ~365 days."""
    sim = Simulator()
    populate(sim, TwoBodyCircular(central_mass=1.989e30, orbiting_mass=5.972e24, radius=1.0))
    for _ in range(365):
        sim.simulate_step(Method.RK4, 1.0)
    x, y, _ = sim.get_position(1)
    assert np.hypot(x, y) == pytest.approx(1.0, rel=1e-3)
    # 365 days is within a few days of the period for these constants
    assert abs(np.degrees(np.arctan2(y, x))) < 5.0
