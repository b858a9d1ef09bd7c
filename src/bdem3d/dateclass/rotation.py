"""
Orientation parameterisation by the vector part of a unit quaternion.

A rotation is stored as e = (e1, e2, e3) with the scalar part implied,
e0 = sqrt(1 - |e|^2) >= 0. The parameter is valid as long as |e| <= 1.
"""

from dataclasses import dataclass

import numpy as np

NORM_TOLERANCE = 1e-12


def quaternion_matrix(e0, e):
    """Rotation matrix of the unit quaternion (e0, e)."""
    e1, e2, e3 = e
    return np.array([
        [1.0 - 2.0 * (e2 * e2 + e3 * e3), 2.0 * (-e0 * e3 + e1 * e2), 2.0 * (e0 * e2 + e1 * e3)],
        [2.0 * (e0 * e3 + e2 * e1), 1.0 - 2.0 * (e1 * e1 + e3 * e3), 2.0 * (-e0 * e1 + e2 * e3)],
        [2.0 * (-e0 * e2 + e3 * e1), 2.0 * (e0 * e1 + e3 * e2), 1.0 - 2.0 * (e1 * e1 + e2 * e2)],
    ])


@dataclass(frozen=True)
class RotationParameter:
    """Vector part of a unit quaternion with non-negative scalar part."""
    e1: float = 0.0
    e2: float = 0.0
    e3: float = 0.0

    def __post_init__(self):
        if self.norm2 > 1.0 + NORM_TOLERANCE:
            raise ValueError(f"rotation parameter must satisfy |e| <= 1, got |e| = {np.sqrt(self.norm2):.15g}")

    @classmethod
    def from_vector(cls, e) -> 'RotationParameter':
        return cls(float(e[0]), float(e[1]), float(e[2]))

    @classmethod
    def from_matrix(cls, rot) -> 'RotationParameter':
        """Recover e from a rotation matrix, choosing e0 >= 0."""
        r = np.asarray(rot, dtype=np.float64)
        q = (r[2, 1] - r[1, 2], r[0, 2] - r[2, 0], r[1, 0] - r[0, 1])
        diag = (
            1.0 + r[0, 0] - r[1, 1] - r[2, 2],
            1.0 - r[0, 0] + r[1, 1] - r[2, 2],
            1.0 - r[0, 0] - r[1, 1] + r[2, 2],
        )
        e = [np.sign(qk) * np.sqrt(max(dk, 0.0) / 4.0) for qk, dk in zip(q, diag)]
        norm2 = sum(v * v for v in e)
        if norm2 > 1.0:
            e = [v / np.sqrt(norm2) for v in e]
        return cls(*(float(v) for v in e))

    @classmethod
    def from_axis_angle(cls, axis, angle: float) -> 'RotationParameter':
        axis = np.asarray(axis, dtype=np.float64)
        axis = axis / np.linalg.norm(axis)
        return cls.from_vector(np.sin(angle / 2.0) * axis)

    @property
    def norm2(self) -> float:
        return self.e1 * self.e1 + self.e2 * self.e2 + self.e3 * self.e3

    @property
    def e0(self) -> float:
        return float(np.sqrt(max(1.0 - self.norm2, 0.0)))

    @property
    def vector(self) -> np.ndarray:
        return np.array([self.e1, self.e2, self.e3])

    def matrix(self) -> np.ndarray:
        return quaternion_matrix(self.e0, self.vector)
