"""
Bond breaking.

A bond breaks for good when the distance between the two particle centres
exceeds its equilibrium length D0 by a relative amount k_max. Breaking marks
both faces BROKEN and scrubs the vertex membership lists so that the two
particles (and the particles touching the broken face only through a vertex
or an edge) no longer see each other.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ..dateclass.topology import BROKEN, Particule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FractureEvent:
    particle: int
    neighbour: int
    face: int
    neighbour_face: int
    strain: float


def _remove_member(particle: Particule, member: int, nums=None):
    """Drop member from the vertex lists of particle (only vertices in nums if given)."""
    for face in particle.faces:
        for vertex in face.vertex:
            if nums is None or vertex.num in nums:
                vertex.particules = [p for p in vertex.particules if p != member]


class FractureManager:
    """
    Args:
        k_max: Critical relative elongation of a bond.
    """

    def __init__(self, k_max: float):
        self.k_max = k_max

    def strain(self, particles: Sequence[Particule], centres: np.ndarray, it: int, face: int) -> float:
        iter_ = particles[it].faces[face].voisin
        D0 = particles[it].faces[face].D0
        distance = float(np.linalg.norm(centres[iter_] - centres[it]))
        return (distance - D0) / D0

    def breaking_criterion(self, particles: Sequence[Particule], centres: np.ndarray) -> List[FractureEvent]:
        """
        Check every intact bond and break those stretched beyond k_max.

        Args:
            particles: Topology of the solid, mutated in place.
            centres: (n, 3) current centres x0 + Dx.

        Returns:
            The bonds broken by this call.
        """
        events = []
        for it, particle in enumerate(particles):
            for i, face in enumerate(particle.faces):
                if face.voisin < 0:
                    continue
                strain = self.strain(particles, centres, it, i)
                if strain >= self.k_max:
                    events.append(self._break(particles, it, i, strain))
        return events

    def _break(self, particles, it: int, i: int, strain: float) -> FractureEvent:
        iter_ = particles[it].faces[i].voisin
        particles[it].faces[i].voisin = BROKEN
        j = -1
        for f, face in enumerate(particles[iter_].faces):
            if face.voisin == it:
                face.voisin = BROKEN
                j = f

        _remove_member(particles[it], iter_)
        _remove_member(particles[iter_], it)

        broken_it = {v.num for v in particles[it].faces[i].vertex}
        broken_iter = {v.num for v in particles[iter_].faces[j].vertex} if j >= 0 else set()
        for count, other in enumerate(particles):
            if count in (it, iter_):
                continue
            if not other.is_bonded_to(it):
                _remove_member(other, it, broken_it)
                _remove_member(particles[it], count, broken_it)
            if not other.is_bonded_to(iter_):
                _remove_member(other, iter_, broken_iter)
                _remove_member(particles[iter_], count, broken_iter)

        logger.info("bond broken between particles %d (face %d) and %d (face %d), strain %.6g",
                    it, i, iter_, j, strain)
        return FractureEvent(it, iter_, i, j, strain)
