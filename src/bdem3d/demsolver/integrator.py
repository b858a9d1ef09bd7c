"""
Time integration of the particle poses.

Translation uses a velocity Verlet split: the position step advances the
velocity by half the mean of the loads and moves the centre, the velocity
step completes the velocity with the new loads. Rotation is integrated in the
principal frame of each particle with an implicit, energy preserving scheme
written for the vector part e of the orientation quaternion:

- position step: solve the non-linear increment equations by fixed point,
  compose Q_{n+1} = Q_n R(increment), recover e and the mid-step angular
  velocity from Q_n, Q_{n+1};
- velocity step: the same equations are linear in the new body angular
  velocity once the increment is known, they are solved directly.

Numerical invariant violations are written as bits of ParticleState.diag and
decoded by the caller after each kernel.
"""

from typing import NamedTuple

import numpy as np
import taichi as ti

from ..diagnostics import (ROTREF_DRIFT, INVALID_ROTATION_PARAMETER, EXCESSIVE_ANGULAR_STEP,
                           EXCESSIVE_TORQUE_STEP, DEGENERATE_INERTIA, ROTATION_NOT_CONVERGED,
                           ROTATION_RENORMALIZED, ROTATION_NOT_ORTHONORMAL, VELOCITY_STEP_TOO_LARGE)
from .utils import *


class RotationIncrement(NamedTuple):
    e0: float
    e: np.ndarray
    last_update: float
    iterations: int
    converged: bool


@ti.data_oriented
class PoseIntegrator:
    """
    Position and velocity steps over a ParticleState field.

    Args:
        sf: ParticleState struct field.
        flag_2d: Planar simulation, only the rotation about z is kept.
    """

    def __init__(self, sf, flag_2d: bool = False):
        self.sf = sf
        self.flag_2d = 1 if flag_2d else 0
        # scratch fields of the isolated increment solver
        self.probe_in = ti.Vector.field(3, dtype=ti.f64, shape=2)
        self.probe_out = ti.Vector.field(6, dtype=ti.f64, shape=())

    # >>> position step
    ###------------------###

    @ti.kernel
    def solve_position(self, dt: ti.f64):
        sf = ti.static(self.sf)
        for i in sf:
            sf[i].diag = 0
            rot_old = sf[i].rot
            rot_new = Matrix3x3([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
            zero = Vector3(0.0, 0.0, 0.0)
            if sf[i].fixe == FULLY_FIXED:
                sf[i].Dx = zero
                sf[i].Dxprev = zero
                sf[i].u = zero
                sf[i].u_half = zero
                sf[i].e = zero
                sf[i].eprev = zero
                sf[i].omega = zero
                sf[i].omega_half = zero
            else:
                if sf[i].fixe == FREE:
                    sf[i].Dxprev = sf[i].Dx
                    sf[i].u += (sf[i].Fi + sf[i].Ff) / 2.0 * (dt / sf[i].m)
                    sf[i].u_half = sf[i].u
                    sf[i].Dx += sf[i].u * dt
                else:
                    sf[i].Dx = zero
                    sf[i].Dxprev = zero
                    sf[i].u = zero
                    sf[i].u_half = zero
                rot_new = self.rotate_position(i, dt)
            sf[i].rotprev = rot_old
            sf[i].rot = rot_new

    @ti.func
    def rotate_position(self, i, dt):
        sf = ti.static(self.sf)
        diag = 0
        rotref = sf[i].rotref
        if row_norm_defect(rotref) > ORTHONORMALITY_TOLERANCE or cross_defect(rotref) > ORTHONORMALITY_TOLERANCE:
            diag |= ROTREF_DRIFT

        e = sf[i].e
        if e.dot(e) > 1.0:
            diag |= INVALID_ROTATION_PARAMETER
        Qprev = quaternion_matrix(scalar_part(e), e) @ rotref
        sf[i].eprev = e

        I = sf[i].I
        Omega = Qprev.transpose() @ sf[i].omega
        if dt * (ti.abs(Omega[0]) + ti.abs(Omega[1]) + ti.abs(Omega[2])) > 0.25:
            diag |= EXCESSIVE_ANGULAR_STEP
        M = Qprev.transpose() @ (sf[i].Mi + sf[i].Mf)
        if dt * dt / 2.0 * (ti.abs(M[0]) / I[0] + ti.abs(M[1]) / I[1] + ti.abs(M[2]) / I[2]) > 0.25:
            diag |= EXCESSIVE_TORQUE_STEP
        d = inertia_split(I)
        if d[1] + d[2] < DEGENERACY_EPS or d[0] + d[2] < DEGENERACY_EPS or d[0] + d[1] < DEGENERACY_EPS:
            diag |= DEGENERATE_INERTIA

        a = I * Omega + dt / 2.0 * M
        y_axis_only = 0
        if sf[i].fixe == TRANSLATION_FIXED_Y_AXIS_ONLY:
            y_axis_only = 1
        inc = rotation_increment(I, a, dt, y_axis_only)
        if inc[4] > ROTATION_TOLERANCE:
            diag |= ROTATION_NOT_CONVERGED

        Q = Qprev @ quaternion_matrix(inc[0], Vector3(inc[1], inc[2], inc[3]))
        for r in ti.static(range(3)):
            n2 = Q[r, 0] * Q[r, 0] + Q[r, 1] * Q[r, 1] + Q[r, 2] * Q[r, 2]
            if ti.abs(n2 - 1.0) > ORTHONORMALITY_TOLERANCE:
                diag |= ROTATION_RENORMALIZED
            norm = ti.sqrt(n2)
            for c in ti.static(range(3)):
                Q[r, c] /= norm
        if cross_defect(Q) > ORTHONORMALITY_TOLERANCE:
            diag |= ROTATION_NOT_ORTHONORMAL

        rot = Q @ rotref.transpose()
        sf[i].e = rotation_parameter(rot)

        # angular velocity at mid-step from the two consecutive frames
        W = (Q @ Qprev.transpose() - Qprev @ Q.transpose()) / (2.0 * dt)
        omega = Vector3(W[2, 1], W[0, 2], W[1, 0])
        if self.flag_2d != 0:
            omega[0] = 0.0
            omega[1] = 0.0
        sf[i].omega = omega
        sf[i].omega_half = omega
        sf[i].diag = diag
        return rot

    # >>> velocity step
    ###------------------###

    @ti.kernel
    def solve_vitesse(self, dt: ti.f64):
        sf = ti.static(self.sf)
        for i in sf:
            sf[i].diag = 0
            zero = Vector3(0.0, 0.0, 0.0)
            if sf[i].fixe == FULLY_FIXED:
                sf[i].u = zero
                sf[i].omega = zero
            else:
                if sf[i].fixe == FREE:
                    sf[i].u += (sf[i].Fi + sf[i].Ff) / 2.0 * (dt / sf[i].m)
                else:
                    sf[i].u = zero
                sf[i].omega = self.rotate_velocity(i, dt)

    @ti.func
    def rotate_velocity(self, i, dt):
        sf = ti.static(self.sf)
        diag = 0
        rotref = sf[i].rotref
        e = sf[i].e
        Q = quaternion_matrix(scalar_part(e), e) @ rotref
        Omega = Q.transpose() @ sf[i].omega

        norm2 = dt * dt * Omega.dot(Omega)
        if norm2 > 1.0:
            diag |= VELOCITY_STEP_TOO_LARGE
            norm2 = 1.0
        g0 = ti.sqrt((1.0 + ti.sqrt(1.0 - norm2)) / 2.0)
        g = dt * Omega / (2.0 * g0)
        Z = (quaternion_matrix(g0, g) - Matrix3x3([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])) / dt

        I = sf[i].I
        d = inertia_split(I)
        M = Q.transpose() @ (sf[i].Mi + sf[i].Mf)
        a = Vector3(-(d[1] * Z[1, 2] - d[2] * Z[2, 1] - dt / 2.0 * M[0]),
                    d[0] * Z[0, 2] - d[2] * Z[2, 0] + dt / 2.0 * M[1],
                    -(d[0] * Z[0, 1] - d[1] * Z[1, 0] - dt / 2.0 * M[2]))
        W = Q @ skew(a / I) @ Q.transpose()
        omega = Vector3(-W[1, 2], W[0, 2], -W[0, 1])
        if self.flag_2d != 0:
            omega[0] = 0.0
            omega[1] = 0.0
        if sf[i].fixe == TRANSLATION_FIXED_Y_AXIS_ONLY:
            omega[0] = 0.0
            omega[2] = 0.0
        sf[i].diag = diag
        return omega

    # >>> isolated increment solver
    ###------------------###

    @ti.kernel
    def _increment_kernel(self, dt: ti.f64, y_axis_only: ti.i32):
        I = self.probe_in[0]
        a = self.probe_in[1]
        self.probe_out[None] = rotation_increment(I, a, dt, y_axis_only)

    def solve_rotation_increment(self, I, Omega, M, dt: float, y_axis_only: bool = False) -> RotationIncrement:
        """
        Quaternion increment of one position step for principal moments I,
        body angular velocity Omega and body torque M.
        """
        I = np.asarray(I, dtype=np.float64)
        a = I * np.asarray(Omega, dtype=np.float64) + dt / 2.0 * np.asarray(M, dtype=np.float64)
        self.probe_in.from_numpy(np.stack([I, a]))
        self._increment_kernel(dt, 1 if y_axis_only else 0)
        out = self.probe_out.to_numpy()
        last_update = float(out[4])
        return RotationIncrement(float(out[0]), out[1:4].copy(), last_update, int(out[5]),
                                 last_update <= ROTATION_TOLERANCE)
