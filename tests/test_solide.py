import numpy as np
import pytest

from bdem3d import Solide, NullMassError
from bdem3d.process import read_mesh


def test_mass_properties_reach_the_fields(make_solid):
    solid = make_solid([(0, 0, 0), (1, 0, 0)])
    assert len(solid) == solid.size() == 2
    np.testing.assert_allclose(solid.state("m"), 1.0)
    np.testing.assert_allclose(solid.state("I"), 1.0 / 6.0)
    np.testing.assert_allclose(solid.state("Vl"), 5.0 / 6.0)
    np.testing.assert_allclose(solid.centres(), [[0.5, 0.5, 0.5], [1.5, 0.5, 0.5]], atol=1e-14)
    np.testing.assert_array_equal(solid.state("rot"), np.tile(np.eye(3), (2, 1, 1)))
    assert solid.volume() == pytest.approx(2.0)


def test_energies(make_solid):
    solid = make_solid([(0, 0, 0), (1, 0, 0)], velocities={0: (2.0, 0.0, 0.0)}, omegas={1: (0.0, 3.0, 0.0)})
    assert solid.kinetic_energy() == pytest.approx(0.5 * 4.0 + 0.5 / 6.0 * 9.0)
    assert solid.potential_energy() == pytest.approx(0.0, abs=1e-14)
    assert solid.energy() == pytest.approx(solid.kinetic_energy())


def test_bonded_pair_oscillates_without_drift(make_solid):
    solid = make_solid([(0, 0, 0), (1, 0, 0)], velocities={1: (0.01, 0.0, 0.0)})
    solid.internal_forces()
    E0 = solid.energy()
    dt = 0.1 * solid.pas_temps(0.0, 10.0)
    for _ in range(400):
        solid.solve_position(dt)
        solid.solve_vitesse(dt)
        solid.internal_forces()
    assert solid.energy() == pytest.approx(E0, rel=1e-2)
    # momentum is conserved by the pairwise forces
    np.testing.assert_allclose(solid.state("u").sum(axis=0), [0.01, 0.0, 0.0], atol=1e-12)
    assert solid.broken_faces() == 0


def test_assign_requires_same_size(make_solid):
    one = make_solid([(0, 0, 0)])
    two = make_solid([(0, 0, 0), (1, 0, 0)])
    with pytest.raises(ValueError):
        one.assign(two)


def test_null_mass_particle_is_rejected(make_mesh, config):
    particles = read_mesh(make_mesh([(0, 0, 0)]))
    for face in particles[0].faces:
        face.vertex.reverse()
        face.normale = -face.normale
    with pytest.raises(NullMassError):
        Solide(particles, config)


def test_summary(make_solid):
    solid = make_solid([(0, 0, 0), (1, 0, 0)])
    text = solid.summary()
    assert text.startswith("Solide: 2 particles, 1 bonds, 0 broken")
    assert "voisin 1" in text
