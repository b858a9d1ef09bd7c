import numpy as np
import pytest

from bdem3d import FixedPointCoupler, error, copy_fluid_forces


class ConstantPull:
    """Fluid stand-in applying a fixed force on one particle."""

    def __init__(self, particle, force):
        self.particle = particle
        self.force = np.asarray(force, dtype=np.float64)
        self.calls = 0

    def update(self, solid):
        self.calls += 1
        Ff = np.zeros((len(solid), 3))
        Ff[self.particle] = self.force
        solid.set_fluid_forces(Ff, np.zeros((len(solid), 3)))


class Spring:
    """Fluid stand-in pulling every particle back to its reference centre."""

    def __init__(self, stiffness):
        self.stiffness = stiffness

    def update(self, solid):
        solid.set_fluid_forces(-self.stiffness * solid.state("Dx"), np.zeros((len(solid), 3)))


def test_error_between_copies(make_solid):
    solid = make_solid([(0, 0, 0), (1, 0, 0)])
    other = solid.copy()
    assert error(solid, other) == 0.0
    Dx = other.state("Dx")
    Dx[1] = [0.0, 1e-3, 0.0]
    other.set_state("Dx", Dx)
    assert error(solid, other) == pytest.approx(1e-3)
    e = other.state("e")
    e[1] = [0.0, 0.0, 1e-2]
    other.set_state("e", e)
    # unit boxes: h_max = 1
    assert error(solid, other) == pytest.approx(1e-3 + 1e-2)


def test_copy_is_independent(make_solid):
    solid = make_solid([(0, 0, 0), (1, 0, 0)])
    other = solid.copy()
    Dx = other.state("Dx")
    Dx[1] = [0.5, 0.0, 0.0]
    other.set_state("Dx", Dx)
    other.breaking_criterion()
    assert other.broken_faces() == 2
    assert solid.broken_faces() == 0
    np.testing.assert_array_equal(solid.state("Dx"), 0.0)
    assert solid.bond_active(0, 5)


def test_copy_fluid_forces(make_solid):
    a = make_solid([(0, 0, 0)])
    b = a.copy()
    b.set_fluid_forces([[1.0, 2.0, 3.0]], [[0.0, 0.0, 1.0]])
    copy_fluid_forces(a, b)
    Ff, Mf = a.fluid_forces()
    np.testing.assert_array_equal(Ff, [[1.0, 2.0, 3.0]])
    np.testing.assert_array_equal(Mf, [[0.0, 0.0, 1.0]])


def test_constant_load_converges_once_the_load_is_known(make_solid):
    solid = make_solid([(0, 0, 0), (1, 0, 0)])
    fluid = ConstantPull(1, [0.01, 0.0, 0.0])
    coupler = FixedPointCoupler(solid, fluid)
    result = coupler.advance(0.01, t=0.0, T=1.0)
    assert result.converged
    # first pass without the load, then two identical iterates
    assert result.iterations == 3
    assert result.error == 0.0
    assert fluid.calls == 3
    assert result.dt_next == pytest.approx(solid.pas_temps(0.01, 1.0))
    # the load enters the velocity step
    assert solid.state("u")[1][0] > 0.0
    np.testing.assert_array_equal(solid.state("Ffprev"), 0.0)


def test_position_dependent_load_converges(make_solid):
    solid = make_solid([(0, 0, 0)], velocities={0: (1.0, 0.0, 0.0)})
    coupler = FixedPointCoupler(solid, Spring(1.0), tolerance=1e-12)
    t = 0.0
    for _ in range(3):
        result = coupler.advance(0.01, t)
        t += 0.01
        assert result.converged
        assert result.iterations <= 5
    Ff, _ = solid.fluid_forces()
    np.testing.assert_allclose(Ff[0], -solid.state("Dx")[0], rtol=1e-9)


def test_iteration_cap_is_reported(make_solid):
    solid = make_solid([(0, 0, 0)], velocities={0: (1.0, 0.0, 0.0)})
    coupler = FixedPointCoupler(solid, Spring(1.0), max_iterations=1)
    result = coupler.advance(0.01)
    assert not result.converged
    assert result.iterations == 1
    assert "COUPLING_NOT_CONVERGED" in solid.diagnostics.codes()
    # the step is still taken
    assert solid.state("Dx")[0][0] == pytest.approx(0.01)


@pytest.mark.parametrize("kwargs", [{"tolerance": 0.0}, {"max_iterations": 0}])
def test_invalid_coupler_settings(make_solid, kwargs):
    with pytest.raises(ValueError):
        FixedPointCoupler(make_solid([(0, 0, 0)]), Spring(1.0), **kwargs)
