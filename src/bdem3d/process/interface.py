"""
World-space surface of the particles, as seen by the fluid solver.

Every face is triangulated with the current poses: a vertex shared by several
particles is placed at the mean of its images by the poses of all the
particles that still share it, so that intact bonds produce a watertight
surface while broken bonds open a gap between the two sides.
"""

from typing import Sequence

import numpy as np

from ..dateclass.topology import BROKEN, Particule

EPS_RELAT = 1e-6


class InterfaceMeshUpdater:
    """
    Rebuilds the triangulation of every particle from the pose arrays.

    The poses are given as numpy arrays (rot: (n, 3, 3), x0 and Dx: (n, 3)),
    mvt_k(p) = rot[k] (p - x0[k]) + x0[k] + Dx[k].
    """

    def __init__(self, particles: Sequence[Particule]):
        self.particles = particles

    @staticmethod
    def _transform(rot, x0, Dx, k, p):
        return rot[k] @ (p - x0[k]) + x0[k] + Dx[k]

    def _shared_image(self, rot, x0, Dx, vertex):
        owners = vertex.particules
        return np.mean([self._transform(rot, x0, Dx, p, vertex.pos) for p in owners], axis=0)

    def update(self, rot, x0, Dx):
        for i, particle in enumerate(self.particles):
            self._snapshot(particle)
            triangles, normales, fluide, vide = [], [], [], []
            for face in particle.faces:
                face_normal = rot[i] @ face.normale
                if face.size() == 3:
                    r, v, s = (self._shared_image(rot, x0, Dx, vx) for vx in face.vertex)
                    loops = [(r, v, s)]
                else:
                    images = [self._transform(rot, x0, Dx, i, face.centre)]
                    if face.bonded:
                        images.append(self._transform(rot, x0, Dx, face.voisin, face.centre))
                    s = np.mean(images, axis=0)
                    points = [self._shared_image(rot, x0, Dx, vx) for vx in face.vertex]
                    n = len(points)
                    loops = [(s, points[k], points[(k + 1) % n]) for k in range(n)]

                for a, b, c in loops:
                    normale = np.cross(b - a, c - a)
                    normale /= np.linalg.norm(normale)
                    if np.dot(normale, face_normal) < 0.0:
                        b, c = c, b
                        normale = -normale
                    triangles.append((a, b, c))
                    normales.append(normale)
                    fluide.append(not face.bonded)
                    vide.append(face.voisin == BROKEN)

            particle.triangles = np.array(triangles, dtype=np.float64).reshape(-1, 3, 3)
            particle.normales = np.array(normales, dtype=np.float64).reshape(-1, 3)
            particle.fluide = np.array(fluide, dtype=bool)
            particle.vide = np.array(vide, dtype=bool)
            self._grow_bbox(particle)
            if len(particle.points_interface) != len(particle.triangles):
                n = len(particle.triangles)
                particle.points_interface = [[] for _ in range(n)]
                particle.triangles_interface = [[] for _ in range(n)]
                particle.position_triangles_interface = [[] for _ in range(n)]

    @staticmethod
    def _snapshot(particle: Particule):
        particle.triangles_prev = particle.triangles.copy()
        particle.normales_prev = particle.normales.copy()
        particle.fluide_prev = particle.fluide.copy()
        particle.vide_prev = particle.vide.copy()
        particle.points_interface_prev = particle.points_interface
        particle.triangles_interface_prev = particle.triangles_interface
        particle.position_triangles_interface_prev = particle.position_triangles_interface
        n = len(particle.points_interface)
        particle.points_interface = [[] for _ in range(n)]
        particle.triangles_interface = [[] for _ in range(n)]
        particle.position_triangles_interface = [[] for _ in range(n)]

    @staticmethod
    def _grow_bbox(particle: Particule):
        if len(particle.triangles) == 0:
            return
        pts = particle.triangles.reshape(-1, 3)
        particle.bbox[:3] = np.minimum(particle.bbox[:3], pts.min(axis=0))
        particle.bbox[3:] = np.maximum(particle.bbox[3:], pts.max(axis=0))


def inside_box(cell, P) -> bool:
    """True if P lies in the box (xmin, ymin, zmin, xmax, ymax, zmax), up to EPS_RELAT."""
    cell = np.asarray(cell, dtype=np.float64)
    P = np.asarray(P, dtype=np.float64)
    return bool(np.all(cell[:3] - P <= EPS_RELAT) and np.all(cell[3:] - P >= -EPS_RELAT))


def _boxes_overlap(a, b) -> bool:
    return bool(np.all(a[:3] <= b[3:]) and np.all(b[:3] <= a[3:]))


def inside_convex_polygon(particle: Particule, P) -> bool:
    """True if P is inside the (convex) current surface of the particle."""
    P = np.asarray(P, dtype=np.float64)
    if not _boxes_overlap(particle.bbox, np.concatenate([P, P])):
        return False
    if particle.cube:
        return True
    for tri, normale in zip(particle.triangles, particle.normales):
        if np.dot(tri[0] - P, normale) < 0.0:
            return False
    return True


def box_inside_convex_polygon(particle: Particule, cell) -> bool:
    """True if the whole box cell lies inside the particle."""
    cell = np.asarray(cell, dtype=np.float64)
    if not _boxes_overlap(particle.bbox, cell):
        return False
    if particle.cube:
        return True
    lo, hi = cell[:3], cell[3:]
    for cx in (lo[0], hi[0]):
        for cy in (lo[1], hi[1]):
            for cz in (lo[2], hi[2]):
                if not inside_convex_polygon(particle, (cx, cy, cz)):
                    return False
    return True
