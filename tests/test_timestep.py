import numpy as np
import pytest

OMEGA_EPS = 1e-14


def wave_limit(config, D0=1.0):
    return config.cfls * D0 / config.wave_speed


def test_wave_speed(config):
    assert config.wave_speed == pytest.approx(np.sqrt(1.2))


def test_bond_limit(make_solid, config):
    solid = make_solid([(0, 0, 0), (1, 0, 0)])
    assert solid.pas_temps(0.0, 100.0) == pytest.approx(wave_limit(config))


def test_bond_limit_scales_with_spacing(make_solid, config):
    solid = make_solid([(0, 0, 0), (1, 0, 0)], spacing=0.5)
    assert solid.pas_temps(0.0, 100.0) == pytest.approx(wave_limit(config, 0.5))


def test_rotation_limit(make_solid, config):
    solid = make_solid([(0, 0, 0), (1, 0, 0)])
    omega = np.zeros((2, 3))
    omega[0] = [1.0, -0.5, 0.5]
    solid.set_state("omega", omega)
    assert solid.pas_temps(0.0, 100.0) == pytest.approx(config.cfls * 0.26 / (2.0 + OMEGA_EPS))

    omega[0] *= 2.0
    solid.set_state("omega", omega)
    assert solid.pas_temps(0.0, 100.0) == pytest.approx(config.cfls * 0.26 / 4.0)


def test_step_ends_on_final_time(make_solid):
    solid = make_solid([(0, 0, 0), (1, 0, 0)])
    assert solid.pas_temps(9.99, 10.0) == pytest.approx(0.01)


def test_unbonded_solid_at_rest_uses_max_dt(make_solid, config):
    solid = make_solid([(0, 0, 0)])
    assert solid.pas_temps(0.0, 1e9) == config.max_dt
    capped = make_solid([(0, 0, 0)], config=config.set_solver_options(max_dt=0.1))
    assert capped.pas_temps(0.0, 1e9) == pytest.approx(0.1)


def test_broken_bonds_do_not_limit_the_step(make_solid, config):
    solid = make_solid([(0, 0, 0), (1, 0, 0)])
    Dx = solid.state("Dx")
    Dx[1] = [0.5, 0.0, 0.0]
    solid.set_state("Dx", Dx)
    solid.breaking_criterion()
    assert solid.pas_temps(0.0, 1e9) == config.max_dt
