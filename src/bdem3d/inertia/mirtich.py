"""
Volume integrals of closed polyhedra (B. Mirtich, "Fast and accurate
computation of polyhedral mass properties", 1996).

Each face is projected on the coordinate plane where its area is largest,
the projection integrals are lifted back to face integrals, and the
divergence theorem turns them into the volume integrals

    T1 = ∫dV, Tx = ∫x dV, Txx = ∫x² dV, Txy = ∫xy dV, ...
"""

from typing import NamedTuple, Sequence, Tuple

import numpy as np


class VolumeIntegrals(NamedTuple):
    T1: float
    Tx: float
    Ty: float
    Tz: float
    Txx: float
    Tyy: float
    Tzz: float
    Txy: float
    Tyz: float
    Tzx: float

    @property
    def first(self) -> np.ndarray:
        return np.array([self.Tx, self.Ty, self.Tz])


def projection_integrals(points: np.ndarray, a: int, b: int):
    """Integrals over the projection of a planar loop on the (a, b) plane."""
    P1 = Pa = Pb = Paa = Pab = Pbb = Paaa = Paab = Pabb = Pbbb = 0.0
    n = len(points)
    for i in range(n):
        j = (i + 1) % n
        a0, b0 = points[i][a], points[i][b]
        a1, b1 = points[j][a], points[j][b]
        da = a1 - a0
        db = b1 - b0
        a02 = a0 * a0
        a03 = a0 * a02
        a04 = a0 * a03
        b02 = b0 * b0
        b03 = b0 * b02
        b04 = b0 * b03
        a12 = a1 * a1
        a13 = a1 * a12
        b12 = b1 * b1
        b13 = b1 * b12

        C1 = a1 + a0
        Ca = a1 * C1 + a02
        Caa = a1 * Ca + a03
        Caaa = a1 * Caa + a04
        Cb = b12 + b1 * b0 + b02
        Cbb = b1 * Cb + b03
        Cbbb = b1 * Cbb + b04
        Cab = 3.0 * a12 + 2.0 * a1 * a0 + a02
        Kab = a12 + 2.0 * a1 * a0 + 3.0 * a02
        Caab = a0 * Cab + 4.0 * a13
        Kaab = a1 * Kab + 4.0 * a03
        Cabb = 4.0 * b13 + 3.0 * b12 * b0 + 2.0 * b1 * b02 + b03
        Kabb = b13 + 2.0 * b12 * b0 + 3.0 * b1 * b02 + 4.0 * b03

        P1 += db * C1
        Pa += db * Ca
        Paa += db * Caa
        Paaa += db * Caaa
        Pb += da * Cb
        Pbb += da * Cbb
        Pbbb += da * Cbbb
        Pab += db * (b1 * Cab + b0 * Kab)
        Paab += db * (b1 * Caab + b0 * Kaab)
        Pabb += da * (a1 * Cabb + a0 * Kabb)

    P1 /= 2.0
    Pa /= 6.0
    Paa /= 12.0
    Paaa /= 20.0
    Pb /= -6.0
    Pbb /= -12.0
    Pbbb /= -20.0
    Pab /= 24.0
    Paab /= 60.0
    Pabb /= -60.0
    return P1, Pa, Pb, Paa, Pab, Pbb, Paaa, Paab, Pabb, Pbbb


def face_integrals(points: np.ndarray, normal: np.ndarray, a: int, b: int, c: int):
    """
    Surface integrals of one planar face, in the (a, b, c) axis order.

    Returns:
        (Fa, Fb, Fc, Faa, Fbb, Fcc, Faaa, Fbbb, Fccc, Faab, Fbbc, Fcca)
    """
    P1, Pa, Pb, Paa, Pab, Pbb, Paaa, Paab, Pabb, Pbbb = projection_integrals(points, a, b)
    na, nb, nc = normal[a], normal[b], normal[c]
    w = -float(np.dot(normal, points[0]))
    k1 = 1.0 / nc
    k2 = k1 * k1
    k3 = k1 * k2
    k4 = k1 * k3

    Fa = k1 * Pa
    Fb = k1 * Pb
    Fc = -k2 * (na * Pa + nb * Pb + w * P1)
    Faa = k1 * Paa
    Fbb = k1 * Pbb
    Fcc = k3 * (na * na * Paa + 2.0 * na * nb * Pab + nb * nb * Pbb
                + 2.0 * na * w * Pa + 2.0 * nb * w * Pb + w * w * P1)
    Faaa = k1 * Paaa
    Fbbb = k1 * Pbbb
    Fccc = -k4 * (na ** 3 * Paaa + 3.0 * na * na * nb * Paab + 3.0 * na * nb * nb * Pabb
                  + nb ** 3 * Pbbb + 3.0 * na * na * w * Paa + 6.0 * na * nb * w * Pab
                  + 3.0 * nb * nb * w * Pbb + 3.0 * na * w * w * Pa + 3.0 * nb * w * w * Pb
                  + w ** 3 * P1)
    Faab = k1 * Paab
    Fbbc = -k2 * (na * Pabb + nb * Pbbb + w * Pbb)
    Fcca = k3 * (na * na * Paaa + 2.0 * na * nb * Paab + nb * nb * Pabb
                 + 2.0 * na * w * Paa + 2.0 * nb * w * Pab + w * w * Pa)
    return Fa, Fb, Fc, Faa, Fbb, Fcc, Faaa, Fbbb, Fccc, Faab, Fbbc, Fcca


def _projection_axes(normal) -> Tuple[int, int, int]:
    # c is the axis of largest normal component, (a, b, c) a direct permutation
    nx, ny, nz = abs(normal[0]), abs(normal[1]), abs(normal[2])
    if nx > ny:
        if nx > nz:
            return 1, 2, 0
        return 0, 1, 2
    if ny > nz:
        return 2, 0, 1
    return 0, 1, 2


def volume_integrals(faces: Sequence[Tuple[np.ndarray, np.ndarray]]) -> VolumeIntegrals:
    """
    Args:
        faces: (points, unit outward normal) for every face of a closed
            polyhedron, each loop counter-clockwise seen from outside.
    """
    T1 = 0.0
    T = np.zeros(3)
    TT = np.zeros(3)
    TP = np.zeros(3)    # Txy, Tyz, Tzx
    for points, normal in faces:
        points = np.asarray(points, dtype=np.float64)
        normal = np.asarray(normal, dtype=np.float64)
        a, b, c = _projection_axes(normal)
        Fa, Fb, Fc, Faa, Fbb, Fcc, Faaa, Fbbb, Fccc, Faab, Fbbc, Fcca = face_integrals(points, normal, a, b, c)

        F1 = np.empty(3)
        F2 = np.empty(3)
        F3 = np.empty(3)
        mixed = np.empty(3)  # mixed[k] = F_{k k k+1}
        F1[a], F1[b], F1[c] = Fa, Fb, Fc
        F2[a], F2[b], F2[c] = Faa, Fbb, Fcc
        F3[a], F3[b], F3[c] = Faaa, Fbbb, Fccc
        mixed[a], mixed[b], mixed[c] = Faab, Fbbc, Fcca

        T1 += normal[0] * F1[0]
        T += normal * F2
        TT += normal * F3
        TP += normal * mixed

    T /= 2.0
    TT /= 3.0
    TP /= 2.0
    return VolumeIntegrals(T1, T[0], T[1], T[2], TT[0], TT[1], TT[2], TP[0], TP[1], TP[2])


def center_of_mass(integrals: VolumeIntegrals) -> np.ndarray:
    return integrals.first / integrals.T1


def inertia_tensor(integrals: VolumeIntegrals, center, density: float) -> np.ndarray:
    """Inertia tensor of the homogeneous body about center."""
    T1, Tx, Ty, Tz, Txx, Tyy, Tzz, Txy, Tyz, Tzx = integrals
    xG, yG, zG = (float(v) for v in center)

    # second moments about the center
    Sxx = Txx - 2.0 * xG * Tx + xG * xG * T1
    Syy = Tyy - 2.0 * yG * Ty + yG * yG * T1
    Szz = Tzz - 2.0 * zG * Tz + zG * zG * T1
    Sxy = Txy - yG * Tx - xG * Ty + xG * yG * T1
    Syz = Tyz - zG * Ty - yG * Tz + yG * zG * T1
    Szx = Tzx - zG * Tx - xG * Tz + xG * zG * T1

    return density * np.array([
        [Syy + Szz, -Sxy, -Szx],
        [-Sxy, Sxx + Szz, -Syz],
        [-Szx, -Syz, Sxx + Syy],
    ])
