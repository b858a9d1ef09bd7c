import numpy as np
import pytest

from bdem3d import FixityMode


def step(solid, dt):
    solid.solve_position(dt)
    solid.solve_vitesse(dt)
    solid.internal_forces()


def test_free_particle_drifts_and_spins(make_solid):
    omega0 = np.array([0.1, 0.2, 0.3])
    solid = make_solid([(0, 0, 0)], velocities={0: (1.0, 0.0, 0.0)}, omegas={0: omega0})
    E0 = solid.kinetic_energy()
    assert E0 == pytest.approx(0.5 + 0.5 / 6.0 * omega0 @ omega0)

    dt = 0.01
    for _ in range(100):
        step(solid, dt)

    np.testing.assert_allclose(solid.state("u")[0], [1.0, 0.0, 0.0], atol=1e-14)
    np.testing.assert_allclose(solid.state("Dx")[0], [1.0, 0.0, 0.0], atol=1e-12)
    assert np.linalg.norm(solid.state("omega")[0]) == pytest.approx(np.linalg.norm(omega0), rel=1e-9)
    assert solid.kinetic_energy() == pytest.approx(E0, rel=1e-9)

    e = solid.state("e")[0]
    assert e @ e <= 1.0
    R = solid.state("rot")[0]
    np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-9)
    # isotropic body: fixed axis, sin(angle per step) = dt |omega0|
    expected = solid.rotation_parameter(0)
    angle = 100 * np.arcsin(dt * np.linalg.norm(omega0))
    np.testing.assert_allclose(expected.vector, np.sin(angle / 2.0) * omega0 / np.linalg.norm(omega0),
                               atol=1e-9)


def angular_momentum(solid, i):
    Q = solid.state("rot")[i] @ solid.state("rotref")[i]
    Omega = Q.T @ solid.state("omega")[i]
    return Q @ (solid.state("I")[i] * Omega)


def test_free_box_keeps_angular_momentum(make_solid, config):
    steel_like = config.set_material_properties(density=2700.0)
    omega0 = np.array([0.3, 0.2, 0.1])
    solid = make_solid([(0, 0, 0)], config=steel_like, spacing=(1.0, 2.0, 3.0), omegas={0: omega0})
    m = 2700.0 * 6.0
    np.testing.assert_allclose(np.sort(solid.state("I")[0]), m / 12.0 * np.array([5.0, 10.0, 13.0]),
                               rtol=1e-12)
    L0 = angular_momentum(solid, 0)
    E0 = solid.kinetic_energy()
    np.testing.assert_allclose(L0, m / 12.0 * np.array([13.0, 10.0, 5.0]) * omega0, rtol=1e-12)

    dt = 0.01
    for _ in range(200):
        step(solid, dt)

    np.testing.assert_allclose(angular_momentum(solid, 0), L0, rtol=1e-8)
    assert solid.kinetic_energy() == pytest.approx(E0, rel=1e-4)
    # the spin axis precesses for a box with three distinct moments
    assert not np.allclose(solid.state("omega")[0], omega0, rtol=1e-3)
    R = solid.state("rot")[0]
    np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-9)
    assert solid.diagnostics.codes() == []


def test_surface_follows_the_particle(make_solid):
    solid = make_solid([(0, 0, 0)], velocities={0: (0.0, 0.0, 2.0)})
    before = solid.particles[0].triangles.copy()
    step(solid, 0.05)
    after = solid.particles[0].triangles
    np.testing.assert_allclose(after - before, np.broadcast_to([0.0, 0.0, 0.1], before.shape), atol=1e-14)
    np.testing.assert_allclose(solid.particles[0].triangles_prev, before)
    assert solid.volume() == pytest.approx(1.0)


def test_fully_fixed_particle_does_not_move(make_solid):
    solid = make_solid([(0, 0, 0)], fixities={0: FixityMode.FULLY_FIXED},
                       velocities={0: (1.0, 0.0, 0.0)}, omegas={0: (0.0, 1.0, 0.0)})
    step(solid, 0.01)
    for name in ("Dx", "u", "e", "omega"):
        np.testing.assert_array_equal(solid.state(name)[0], 0.0)
    np.testing.assert_array_equal(solid.state("rot")[0], np.eye(3))


def test_translation_fixed_particle_only_rotates(make_solid):
    solid = make_solid([(0, 0, 0)], fixities={0: FixityMode.TRANSLATION_FIXED},
                       velocities={0: (1.0, 0.0, 0.0)}, omegas={0: (0.0, 0.0, 1.0)})
    step(solid, 0.01)
    np.testing.assert_array_equal(solid.state("Dx")[0], 0.0)
    np.testing.assert_array_equal(solid.state("u")[0], 0.0)
    assert solid.state("e")[0][2] > 0.0
    assert solid.state("omega")[0][2] == pytest.approx(1.0, rel=1e-9)


def test_y_axis_only_particle_keeps_y_rotation(make_solid):
    solid = make_solid([(0, 0, 0)], fixities={0: FixityMode.TRANSLATION_FIXED_Y_AXIS_ONLY},
                       omegas={0: (0.1, 0.2, 0.3)})
    step(solid, 0.01)
    omega = solid.state("omega")[0]
    assert omega[0] == 0.0
    assert omega[2] == 0.0
    np.testing.assert_array_equal(solid.state("Dx")[0], 0.0)


def test_planar_flag_keeps_only_z_rotation(make_solid, config):
    planar = config.set_solver_options(flag_2d=True)
    solid = make_solid([(0, 0, 0)], config=planar, omegas={0: (0.1, 0.2, 0.3)})
    step(solid, 0.01)
    omega = solid.state("omega")[0]
    assert omega[0] == 0.0 and omega[1] == 0.0
    assert omega[2] == pytest.approx(0.3, rel=1e-9)


def test_fluid_load_accelerates_free_particle(make_solid):
    solid = make_solid([(0, 0, 0)])
    n = len(solid)
    solid.set_fluid_forces(np.tile([0.0, 2.0, 0.0], (n, 1)), np.zeros((n, 3)))
    dt = 0.1
    step(solid, dt)
    # constant force: exact velocity Verlet
    np.testing.assert_allclose(solid.state("u")[0], [0.0, 0.2, 0.0], atol=1e-14)
    np.testing.assert_allclose(solid.state("Dx")[0], [0.0, 0.01, 0.0], atol=1e-14)
    np.testing.assert_allclose(solid.state("u_half")[0], [0.0, 0.1, 0.0], atol=1e-14)


def test_velocity_at_point(make_solid):
    solid = make_solid([(0, 0, 0)])
    solid.set_state("u_half", [[1.0, 0.0, 0.0]])
    solid.set_state("omega_half", [[0.0, 0.0, 2.0]])
    v = solid.velocity_at_point(0, [1.5, 0.5, 0.5])
    np.testing.assert_allclose(v, [1.0, 2.0, 0.0])
    solid.set_state("Dxprev", [[0.0, -1.0, 0.0]])
    v = solid.velocity_at_point_prev(0, [0.5, 0.5, 0.5])
    np.testing.assert_allclose(v, [1.0 - 2.0, 0.0, 0.0])
