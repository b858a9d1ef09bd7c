"""
Configuration and data types of the bonded solid solver.
"""

from .types import FixityMode, MaterialProperties, FractureProperties
from .demconfig import SolidSolverConfig

__all__ = [
    "FixityMode",
    "MaterialProperties",
    "FractureProperties",
    "SolidSolverConfig",
]
