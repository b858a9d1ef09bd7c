"""
bdem3d: bonded rigid-polyhedron discrete element solid for fluid-structure
interaction.

Taichi must be initialised by the caller before a Solide is built, in double
precision:

    ti.init(arch=ti.cpu, default_fp=ti.f64)
"""

# bondmanager needs demsolver.utils, import demsolver first
from .demsolver import Solide, FixedPointCoupler, FluidSolver, CouplingResult, error, copy_fluid_forces
from .demconfig import SolidSolverConfig, MaterialProperties, FractureProperties, FixityMode
from .dateclass import Particule, Face, Vertex, RotationParameter, FREE_SURFACE, BROKEN
from .diagnostics import Diagnostic, DiagnosticsChannel, Severity
from .errors import SolidError, MeshFileError, NullMassError, ConfigurationError, DiagnosticError
from .logging_config import setup_logging

__version__ = "0.1.0"

__all__ = [
    "Solide",
    "FixedPointCoupler",
    "FluidSolver",
    "CouplingResult",
    "error",
    "copy_fluid_forces",
    "SolidSolverConfig",
    "MaterialProperties",
    "FractureProperties",
    "FixityMode",
    "Particule",
    "Face",
    "Vertex",
    "RotationParameter",
    "FREE_SURFACE",
    "BROKEN",
    "Diagnostic",
    "DiagnosticsChannel",
    "Severity",
    "SolidError",
    "MeshFileError",
    "NullMassError",
    "ConfigurationError",
    "DiagnosticError",
    "setup_logging",
]
