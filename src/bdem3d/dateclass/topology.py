"""
Geometry and connectivity of the polyhedral particles.

The objects in this module live on the Python side: they are built once when
the mesh description is read, mass properties are derived from them, and only
the fracture manager mutates them afterwards (neighbour relations and vertex
membership lists). The per-step kinematics are held in the ParticleState rows
of the Solide.
"""

import logging
from typing import List, Optional

import numpy as np

from ..demconfig.types import FixityMode
from ..diagnostics import Severity
from ..errors import NullMassError
from ..inertia import face_moments, jacobi_eigen, volume_integrals, center_of_mass, inertia_tensor

logger = logging.getLogger(__name__)

FREE_SURFACE = -1
BROKEN = -2

MASS_EPS = 1e-14
ORTHOGONALITY_EPS = 1e-10


class Vertex:
    """Mesh point of a face, with the ids of every particle sharing it."""

    def __init__(self, pos, num: int = -1, particules: Optional[List[int]] = None):
        self.pos = np.array(pos, dtype=np.float64)
        self.num = num
        self.particules = list(particules) if particules is not None else []

    def __repr__(self):
        return f"Vertex(num={self.num}, pos={self.pos.tolist()}, particules={self.particules})"


class Face:
    """Planar polygonal face of a particle."""

    def __init__(self, vertex: List[Vertex], voisin: int = FREE_SURFACE, D0: float = 1.0):
        self.vertex = vertex
        self.voisin = voisin
        self.D0 = D0
        self.centre = np.mean(self.points, axis=0)
        self.normale = self._unit_normal()
        self.S = 0.0
        self.s = np.zeros(3)
        self.t = np.zeros(3)
        self.Is = 0.0
        self.It = 0.0

    def size(self) -> int:
        return len(self.vertex)

    @property
    def points(self) -> np.ndarray:
        return np.array([v.pos for v in self.vertex])

    @property
    def bonded(self) -> bool:
        return self.voisin >= 0

    def _unit_normal(self) -> np.ndarray:
        p = self.points
        n = np.cross(p[1] - p[0], p[2] - p[0])
        return n / np.linalg.norm(n)

    def area_vector(self) -> np.ndarray:
        """Area vector of the vertex loop (fan from the first vertex)."""
        p = self.points
        Sn = np.zeros(3)
        for k in range(1, len(p) - 1):
            Sn += 0.5 * np.cross(p[k] - p[0], p[k + 1] - p[0])
        return Sn

    def inertie(self):
        """Area, area centroid and principal in-plane frame of the face."""
        moments = face_moments(self.points, self.centre, self.normale)
        self.centre = moments.centre
        self.S = moments.area
        self.s = moments.s
        self.t = moments.t
        self.Is = moments.Is
        self.It = moments.It


class Particule:
    """
    Rigid polyhedral particle.

    Args:
        x0: Reference centre.
        bbox: (xmin, ymin, zmin, xmax, ymax, zmax).
        faces: Closed, outward oriented set of faces.
        fixe: FixityMode of the particle.
        cube: True for axis aligned boxes.
    """

    def __init__(self, x0, bbox, faces: List[Face], fixe=FixityMode.FREE, cube: bool = False):
        self.x0 = np.asarray(x0, dtype=np.float64)
        self.bbox = np.asarray(bbox, dtype=np.float64)
        self.faces = faces
        self.fixe = FixityMode(fixe)
        self.cube = cube

        self.initial_velocity = np.zeros(3)
        self.initial_omega = np.zeros(3)

        # mass properties, filled by inertie()
        self.m = 0.0
        self.V = 0.0
        self.Vl = 0.0
        self.I = np.zeros(3)
        self.rotref = np.eye(3)

        # world-space triangulation of the surface
        self.triangles = np.zeros((0, 3, 3))
        self.normales = np.zeros((0, 3))
        self.fluide = np.zeros(0, dtype=bool)
        self.vide = np.zeros(0, dtype=bool)
        self.triangles_prev = self.triangles.copy()
        self.normales_prev = self.normales.copy()
        self.fluide_prev = self.fluide.copy()
        self.vide_prev = self.vide.copy()

        # interface polygons given by the fluid side, one list per triangle
        self.points_interface = []
        self.triangles_interface = []
        self.position_triangles_interface = []
        self.points_interface_prev = []
        self.triangles_interface_prev = []
        self.position_triangles_interface_prev = []

    @property
    def n_triangles(self) -> int:
        return sum(1 if f.size() == 3 else f.size() for f in self.faces)

    def is_bonded_to(self, other: int) -> bool:
        return any(f.voisin == other for f in self.faces)

    def volume_integrals(self):
        return volume_integrals([(f.points, f.normale) for f in self.faces])

    def center_of_mass(self) -> np.ndarray:
        return center_of_mass(self.volume_integrals())

    def inertie(self, density: float, index: int = -1, diagnostics=None):
        """
        Mass, volume, principal inertia and reference axes of the particle,
        about x0. Also computes the in-plane moments of every face and the
        free volume.

        Raises:
            NullMassError: if the mass is not positive.
        """
        integrals = self.volume_integrals()
        self.V = integrals.T1
        self.m = density * integrals.T1
        if self.m < MASS_EPS:
            raise NullMassError(index, self.m)

        tensor = inertia_tensor(integrals, self.x0, density)
        result = jacobi_eigen(tensor)
        if not result.converged and diagnostics is not None:
            diagnostics.report("JACOBI_NOT_CONVERGED", Severity.WARNING, index,
                               "Jacobi eigen-solver reached the sweep limit", rotations=result.rotations)

        rotref = result.eigenvectors.copy()
        if np.linalg.det(rotref) < 0.0:
            rotref[:, 2] *= -1.0
        for k in range(3):
            scal = float(np.dot(rotref[:, k], rotref[:, (k + 1) % 3]))
            if abs(scal) > ORTHOGONALITY_EPS:
                logger.warning("particle %d: principal axes %d and %d not orthogonal (%.3e)",
                               index, k, (k + 1) % 3, scal)
        self.I = np.asarray(result.eigenvalues, dtype=np.float64)
        self.rotref = rotref

        for face in self.faces:
            face.inertie()
        self.Vl = self.free_volume()

    def free_volume(self) -> float:
        """Signed volume of the fans from x0 over the free-surface faces."""
        Vl = 0.0
        for face in self.faces:
            if face.voisin != FREE_SURFACE:
                continue
            p = face.points
            for k in range(1, len(p) - 1):
                Vl += np.dot(np.cross(p[k] - p[0], p[k + 1] - p[0]), p[0] - self.x0) / 6.0
        return float(Vl)

    def volume(self) -> float:
        """Volume enclosed by the current triangulation."""
        if len(self.triangles) == 0:
            return 0.0
        center = self.triangles.reshape(-1, 3).mean(axis=0)
        vol = 0.0
        for tri in self.triangles:
            vol += abs(np.dot(np.cross(tri[0] - center, tri[1] - center), tri[2] - center)) / 6.0
        return float(vol)

    def describe(self) -> str:
        lines = [f"Particle centre {self.x0.tolist()}, fixity {self.fixe.name}, {len(self.faces)} faces"]
        for k, face in enumerate(self.faces):
            lines.append(f"  face {k}: {face.size()} vertices, voisin {face.voisin}, D0 {face.D0:.6g}")
        return "\n".join(lines)
