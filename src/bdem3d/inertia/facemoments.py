"""
In-plane moments of a planar face, used by the bending and torsion terms of
the bonds.
"""

from typing import NamedTuple

import numpy as np

RELATIVE_EPS = 1e-12


class FaceMoments(NamedTuple):
    centre: np.ndarray      # area centroid
    area: float
    s: np.ndarray           # principal axis of Is
    t: np.ndarray           # principal axis of It, t = normal x s
    Is: float
    It: float


def initial_frame(normal):
    """Any right-handed (s, t, normal) frame of the face plane."""
    if normal[0] != 0.0 or normal[1] != 0.0:
        s = np.array([-normal[1], normal[0], 0.0])
    else:
        s = np.array([1.0, 0.0, 0.0])
    s /= np.linalg.norm(s)
    t = np.cross(normal, s)
    return s, t


def face_moments(points, centre, normal) -> FaceMoments:
    """
    Area, area centroid and principal second moments of area of a planar
    polygon.

    The polygon is split in a fan of triangles around ``centre`` (any point of
    the plane inside the polygon, usually the vertex centroid).
    """
    points = np.asarray(points, dtype=np.float64)
    normal = np.asarray(normal, dtype=np.float64)
    centre = np.asarray(centre, dtype=np.float64)
    s, t = initial_frame(normal)
    n = len(points)

    T1 = Ts = Tt = 0.0
    for i in range(n):
        v1 = points[i] - centre
        v2 = points[(i + 1) % n] - centre
        twice_area = float(np.dot(np.cross(v1, v2), normal))
        T1 += twice_area / 2.0
        Ts += twice_area / 6.0 * float(np.dot(v1 + v2, s))
        Tt += twice_area / 6.0 * float(np.dot(v1 + v2, t))
    centre = centre + (Ts / T1) * s + (Tt / T1) * t
    area = T1

    Tss = Ttt = Tst = 0.0
    for i in range(n):
        v1 = points[i] - centre
        v2 = points[(i + 1) % n] - centre
        twice_area = float(np.dot(np.cross(v1, v2), normal))
        As, At = float(np.dot(v1, s)), float(np.dot(v1, t))
        Bs, Bt = float(np.dot(v2, s)), float(np.dot(v2, t))
        Tss += twice_area / 12.0 * (As * As + As * Bs + Bs * Bs)
        Ttt += twice_area / 12.0 * (At * At + At * Bt + Bt * Bt)
        Tst += twice_area / 24.0 * (2.0 * As * At + As * Bt + At * Bs + 2.0 * Bs * Bt)

    delta = (Tss - Ttt) ** 2 + 4.0 * Tst * Tst
    Is = (Tss + Ttt + np.sqrt(delta)) / 2.0
    It = (Tss + Ttt - np.sqrt(delta)) / 2.0

    eps = RELATIVE_EPS * max(abs(Tss) + abs(Ttt), np.finfo(float).tiny)
    if abs(Tss - Ttt) > eps:
        if abs(Tss - Is) > eps:
            stemp = -Tst * s + (Tss - Is) * t
        else:
            stemp = -Tst * t + (Ttt - Is) * s
        s = stemp / np.linalg.norm(stemp)
        t = np.cross(normal, s)
    elif abs(Tst) > eps:
        stemp = s + t if Tst > 0.0 else s - t
        s = stemp / np.linalg.norm(stemp)
        t = np.cross(normal, s)

    return FaceMoments(centre, float(area), s, t, float(Is), float(It))
