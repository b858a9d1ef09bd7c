"""
Mass properties of polyhedral particles and in-plane moments of their faces.
"""

from .jacobi import JacobiResult, jacobi_eigen
from .mirtich import VolumeIntegrals, volume_integrals, center_of_mass, inertia_tensor
from .facemoments import FaceMoments, face_moments, initial_frame

__all__ = [
    "JacobiResult",
    "jacobi_eigen",
    "VolumeIntegrals",
    "volume_integrals",
    "center_of_mass",
    "inertia_tensor",
    "FaceMoments",
    "face_moments",
    "initial_frame",
]
