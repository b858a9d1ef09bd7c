"""
Core data structures of the bonded polyhedral solid.

- ParticleState: taichi struct row with the mass properties, pose and loads of
  one particle.
- Bond: taichi struct row describing one side of an elastic face bond.
- Vertex, Face, Particule: Python-side geometry and connectivity.
- RotationParameter: orientation as the vector part of a unit quaternion.
"""

from .particle import ParticleState
from .bond import Bond
from .topology import Vertex, Face, Particule, FREE_SURFACE, BROKEN
from .rotation import RotationParameter, quaternion_matrix

__all__ = [
    "ParticleState",
    "Bond",
    "Vertex",
    "Face",
    "Particule",
    "FREE_SURFACE",
    "BROKEN",
    "RotationParameter",
    "quaternion_matrix",
]
