"""
Cyclic Jacobi eigen-solver for small symmetric matrices.
"""

from typing import NamedTuple

import numpy as np

MAX_SWEEPS = 50


class JacobiResult(NamedTuple):
    eigenvalues: np.ndarray     # (n,)
    eigenvectors: np.ndarray    # (n, n), column k belongs to eigenvalues[k]
    rotations: int
    converged: bool


def _rotate(a, s, tau, i, j, k, l):
    g = a[i, j]
    h = a[k, l]
    a[i, j] = g - s * (h + g * tau)
    a[k, l] = h + s * (g - h * tau)


def jacobi_eigen(matrix, max_sweeps: int = MAX_SWEEPS) -> JacobiResult:
    """
    Diagonalise a real symmetric matrix with cyclic Jacobi rotations.

    During the first three sweeps only the off-diagonal entries larger than
    0.2*sm/n^2 are rotated, sm being the sum of the absolute off-diagonal
    entries. After the fourth sweep entries that are negligible against both
    diagonal terms are set to zero without a rotation.

    Args:
        matrix: Symmetric (n, n) array. It is not modified.
        max_sweeps: Maximum number of sweeps.

    Returns:
        JacobiResult. When converged is False the current best estimate is
        returned.
    """
    a = np.array(matrix, dtype=np.float64)
    n = a.shape[0]
    v = np.eye(n)
    d = np.diag(a).copy()
    b = d.copy()
    z = np.zeros(n)
    nrot = 0

    for sweep in range(1, max_sweeps + 1):
        sm = sum(abs(a[p, q]) for p in range(n - 1) for q in range(p + 1, n))
        if sm == 0.0:
            return JacobiResult(d, v, nrot, True)

        tresh = 0.2 * sm / (n * n) if sweep < 4 else 0.0

        for p in range(n - 1):
            for q in range(p + 1, n):
                g = 100.0 * abs(a[p, q])
                if sweep > 4 and abs(d[p]) + g == abs(d[p]) and abs(d[q]) + g == abs(d[q]):
                    a[p, q] = 0.0
                elif abs(a[p, q]) > tresh:
                    h = d[q] - d[p]
                    if abs(h) + g == abs(h):
                        t = a[p, q] / h
                    else:
                        theta = 0.5 * h / a[p, q]
                        t = 1.0 / (abs(theta) + np.sqrt(1.0 + theta * theta))
                        if theta < 0.0:
                            t = -t
                    c = 1.0 / np.sqrt(1.0 + t * t)
                    s = t * c
                    tau = s / (1.0 + c)
                    h = t * a[p, q]
                    z[p] -= h
                    z[q] += h
                    d[p] -= h
                    d[q] += h
                    a[p, q] = 0.0
                    for j in range(p):
                        _rotate(a, s, tau, j, p, j, q)
                    for j in range(p + 1, q):
                        _rotate(a, s, tau, p, j, j, q)
                    for j in range(q + 1, n):
                        _rotate(a, s, tau, p, j, q, j)
                    for j in range(n):
                        _rotate(v, s, tau, j, p, j, q)
                    nrot += 1
        b += z
        d[:] = b
        z[:] = 0.0

    return JacobiResult(d, v, nrot, False)
