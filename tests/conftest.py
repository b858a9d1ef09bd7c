import pytest
import taichi as ti

from bdem3d import SolidSolverConfig, MaterialProperties, FractureProperties, Solide
from bdem3d.process import write_cube_grid_mesh


@pytest.fixture(scope="session", autouse=True)
def taichi_runtime():
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=0)
    yield


@pytest.fixture
def config():
    return SolidSolverConfig(
        material=MaterialProperties(density=1.0, elastic_modulus=1.0, poisson_ratio=0.25),
        fracture=FractureProperties(k_max=0.05),
        cfls=0.5,
    )


@pytest.fixture
def make_mesh(tmp_path):
    counter = {"n": 0}

    def _make(cells, **kwargs):
        counter["n"] += 1
        return write_cube_grid_mesh(tmp_path / f"mesh{counter['n']}.txt", cells, **kwargs)

    return _make


@pytest.fixture
def make_solid(make_mesh, config):
    def _make(cells, config=config, diagnostics=None, **kwargs):
        return Solide.from_mesh_file(make_mesh(cells, **kwargs), config, diagnostics)

    return _make
