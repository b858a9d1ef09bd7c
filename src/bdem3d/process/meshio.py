"""
Reader of the solid mesh description.

Layout (whitespace separated, labels are free words):

    Points <Npoints>
    x y z                                   (Npoints lines)
    Particules <Nparticles>
    Particule <Nfaces> <fixe>               (then, per particle)
    Centre X Y Z
    Vitesse u v w
    Rotation wx wy wz                       (initial angular velocity)
    <Nvertex> <idx_1> ... <idx_Nvertex> <voisin>    (Nfaces lines)
"""

import logging
import os
from typing import List

import numpy as np

from ..demconfig.types import FixityMode
from ..dateclass.topology import Face, Particule, Vertex
from ..errors import MeshFileError

logger = logging.getLogger(__name__)


class _Tokens:
    """Whitespace token stream that remembers line numbers."""

    def __init__(self, path, text: str):
        self.path = path
        self.items = [(tok, n + 1) for n, line in enumerate(text.splitlines()) for tok in line.split()]
        self.pos = 0

    def _next(self, what):
        if self.pos >= len(self.items):
            raise MeshFileError(self.path, f"unexpected end of file while reading {what}")
        tok, line = self.items[self.pos]
        self.pos += 1
        return tok, line

    def label(self, what):
        return self._next(what)[0]

    def int(self, what) -> int:
        tok, line = self._next(what)
        try:
            return int(tok)
        except ValueError:
            raise MeshFileError(self.path, f"expected an integer for {what}, got '{tok}'", line) from None

    def float(self, what) -> float:
        tok, line = self._next(what)
        try:
            return float(tok)
        except ValueError:
            raise MeshFileError(self.path, f"expected a number for {what}, got '{tok}'", line) from None

    def vector(self, what) -> np.ndarray:
        return np.array([self.float(what) for _ in range(3)])


def read_mesh(path) -> List[Particule]:
    """
    Read a mesh description and build the particle topology.

    The reference centre of free and fully fixed particles is the centre of
    mass of the polyhedron, the centre given in the file is kept for the
    other fixity modes. Vertex membership lists and the equilibrium distances
    D0 of the bonded faces are filled.

    Raises:
        MeshFileError: if the file cannot be read or is inconsistent.
    """
    if not os.path.isfile(path):
        raise MeshFileError(path, "mesh file not found")
    with open(path, encoding="UTF-8") as fp:
        tokens = _Tokens(path, fp.read())

    tokens.label("points header")
    n_points = tokens.int("number of points")
    points = np.array([tokens.vector(f"point {k}") for k in range(n_points)]).reshape(-1, 3)

    tokens.label("particles header")
    n_particles = tokens.int("number of particles")
    if n_particles <= 0:
        raise MeshFileError(path, f"the solid needs at least one particle, got {n_particles}")

    particles = []
    used_by = [set() for _ in range(n_points)]
    for i in range(n_particles):
        tokens.label(f"particle {i} header")
        n_faces = tokens.int(f"number of faces of particle {i}")
        fixe = tokens.int(f"fixity of particle {i}")
        try:
            fixe = FixityMode(fixe)
        except ValueError:
            raise MeshFileError(path, f"unknown fixity mode {fixe} for particle {i}") from None
        tokens.label("centre label")
        centre = tokens.vector(f"centre of particle {i}")
        tokens.label("velocity label")
        velocity = tokens.vector(f"velocity of particle {i}")
        tokens.label("rotation label")
        omega = tokens.vector(f"angular velocity of particle {i}")

        lo = centre.copy()
        hi = centre.copy()
        faces = []
        for f in range(n_faces):
            n_vertex = tokens.int(f"vertex count of face {f} of particle {i}")
            if n_vertex < 3:
                raise MeshFileError(path, f"face {f} of particle {i} has {n_vertex} vertices")
            vertices = []
            for _ in range(n_vertex):
                p = tokens.int(f"vertex index of face {f} of particle {i}")
                if not 0 <= p < n_points:
                    raise MeshFileError(path, f"point index {p} out of range in particle {i}")
                used_by[p].add(i)
                vertices.append(Vertex(points[p], p))
                lo = np.minimum(lo, points[p])
                hi = np.maximum(hi, points[p])
            voisin = tokens.int(f"neighbour of face {f} of particle {i}")
            if voisin >= n_particles or voisin < -2 or voisin == i:
                raise MeshFileError(path, f"invalid neighbour {voisin} for face {f} of particle {i}")
            faces.append(Face(vertices, voisin))

        particle = Particule(centre, np.concatenate([lo, hi]), faces, fixe)
        if fixe in (FixityMode.FREE, FixityMode.FULLY_FIXED):
            particle.x0 = particle.center_of_mass()
        particle.initial_velocity = velocity
        particle.initial_omega = omega
        particles.append(particle)

    for i, particle in enumerate(particles):
        for f, face in enumerate(particle.faces):
            for vertex in face.vertex:
                vertex.particules = sorted(used_by[vertex.num])
            if face.bonded:
                if not particles[face.voisin].is_bonded_to(i):
                    raise MeshFileError(path, f"bond {i} -> {face.voisin} has no reverse face")
                face.D0 = float(np.linalg.norm(particle.x0 - particles[face.voisin].x0))

    logger.info("read %d particles and %d points from %s", n_particles, n_points, path)
    return particles
