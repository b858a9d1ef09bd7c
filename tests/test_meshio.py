import numpy as np
import pytest

from bdem3d import FixityMode, MeshFileError
from bdem3d.process import cube_grid_mesh, read_mesh


def write(tmp_path, text, name="mesh.txt"):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_read_two_cubes(make_mesh):
    particles = read_mesh(make_mesh([(0, 0, 0), (1, 0, 0)], velocities={1: (0.0, 0.5, 0.0)}))
    assert len(particles) == 2
    A, B = particles
    assert [f.voisin for f in A.faces] == [-1, -1, -1, -1, -1, 1]
    assert [f.voisin for f in B.faces] == [-1, -1, -1, -1, 0, -1]
    np.testing.assert_allclose(B.x0, [1.5, 0.5, 0.5], atol=1e-14)
    np.testing.assert_allclose(B.initial_velocity, [0.0, 0.5, 0.0])
    np.testing.assert_allclose(A.bbox, [0.0, 0.0, 0.0, 1.0, 1.0, 1.0])
    for vertex in A.faces[5].vertex:
        assert vertex.particules == [0, 1]
    for vertex in A.faces[4].vertex:
        assert vertex.particules == [0]
    assert A.faces[5].D0 == pytest.approx(1.0)
    np.testing.assert_allclose(A.faces[5].normale, [1.0, 0.0, 0.0])
    assert A.n_triangles == 24


def test_fixity_and_reference_centre(tmp_path):
    text = cube_grid_mesh([(0, 0, 0), (1, 0, 0)], fixities={0: 2, 1: 1})
    text = text.replace("Centre 0.5 0.5 0.5", "Centre 0.4 0.5 0.5")
    text = text.replace("Centre 1.5 0.5 0.5", "Centre 1.6 0.5 0.5")
    A, B = read_mesh(write(tmp_path, text))
    assert A.fixe is FixityMode.TRANSLATION_FIXED
    assert B.fixe is FixityMode.FULLY_FIXED
    # translation fixed particles keep the given centre, the others use the centre of mass
    np.testing.assert_allclose(A.x0, [0.4, 0.5, 0.5])
    np.testing.assert_allclose(B.x0, [1.5, 0.5, 0.5], atol=1e-14)
    assert A.faces[5].D0 == pytest.approx(1.1)


def test_missing_file(tmp_path):
    with pytest.raises(MeshFileError, match="not found"):
        read_mesh(str(tmp_path / "nope.txt"))


def test_truncated_file(tmp_path):
    lines = cube_grid_mesh([(0, 0, 0)]).splitlines()
    with pytest.raises(MeshFileError, match="unexpected end of file"):
        read_mesh(write(tmp_path, "\n".join(lines[: len(lines) - 3])))


def test_bad_number_reports_line(tmp_path):
    text = cube_grid_mesh([(0, 0, 0)]).replace("Vitesse 0.0", "Vitesse zero", 1)
    with pytest.raises(MeshFileError) as info:
        read_mesh(write(tmp_path, text))
    lines = text.splitlines()
    assert info.value.line == next(n + 1 for n, l in enumerate(lines) if l.startswith("Vitesse"))


def test_point_index_out_of_range(tmp_path):
    text = cube_grid_mesh([(0, 0, 0)]).replace("4 0 1 2 3 -1", "4 0 1 2 99 -1")
    with pytest.raises(MeshFileError, match="out of range"):
        read_mesh(write(tmp_path, text))


def test_one_sided_bond(tmp_path):
    text = cube_grid_mesh([(0, 0, 0), (1, 0, 0)])
    # drop the reverse face of the bond 0 -> 1
    lines = text.splitlines()
    k = max(n for n, l in enumerate(lines) if l.split()[-1:] == ["0"] and l.startswith("4 "))
    lines[k] = lines[k].rsplit(" ", 1)[0] + " -1"
    with pytest.raises(MeshFileError, match="no reverse face"):
        read_mesh(write(tmp_path, "\n".join(lines)))


@pytest.mark.parametrize("old, new, message", [
    ("Particule 6 0", "Particule 6 7", "fixity"),
    ("Particules 1", "Particules 0", "at least one particle"),
    ("4 0 1 2 3 -1", "2 0 1 -1", "vertices"),
    ("4 0 1 2 3 -1", "4 0 1 2 3 5", "invalid neighbour"),
])
def test_inconsistent_descriptions(tmp_path, old, new, message):
    text = cube_grid_mesh([(0, 0, 0)])
    assert old in text
    with pytest.raises(MeshFileError, match=message):
        read_mesh(write(tmp_path, text.replace(old, new, 1)))
