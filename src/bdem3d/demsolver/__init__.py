"""
Solver of the bonded solid: pose integration, time step control, the Solide
assembly and its fixed-point coupling with a fluid solver.
"""

from .integrator import PoseIntegrator, RotationIncrement
from .timestep import TimeStepController
from .solide import Solide, error, copy_fluid_forces
from .coupling import FixedPointCoupler, FluidSolver, CouplingResult

__all__ = [
    "PoseIntegrator",
    "RotationIncrement",
    "TimeStepController",
    "Solide",
    "error",
    "copy_fluid_forces",
    "FixedPointCoupler",
    "FluidSolver",
    "CouplingResult",
]
