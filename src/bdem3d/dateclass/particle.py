"""
Kinematic state of a rigid polyhedral particle.

One ParticleState row per particle is stored in a taichi struct field owned by
the Solide. The topology (faces, vertices, triangulation) lives on the Python
side in dateclass.topology.Particule; rows and Particule objects share the same
index.
"""

import taichi as ti

#=====================================
# Type Definitions
#=====================================

Vector3 = ti.types.vector(3, ti.f64)
Matrix3x3 = ti.types.matrix(3, 3, ti.f64)


@ti.dataclass
class ParticleState:
    """Mass properties, pose and loads of one particle."""
    fixe: ti.i32            # FixityMode
    diag: ti.i32            # diagnostic bits set by the last kernel

    m: ti.f64               # mass
    V: ti.f64               # volume
    Vl: ti.f64              # free volume (fan over the free-surface faces)
    epsilon: ti.f64         # volumetric strain

    I: Vector3              # principal moments of inertia
    rotref: Matrix3x3       # principal axes (columns) in the reference frame
    x0: Vector3             # reference centre

    # Translation
    Dx: Vector3             # displacement at t
    Dxprev: Vector3         # displacement at t-dt
    u: Vector3              # velocity
    u_half: Vector3         # velocity at t-dt/2

    # Rotation
    e: Vector3              # vector part of the orientation quaternion
    eprev: Vector3
    omega: Vector3          # angular velocity (world frame)
    omega_half: Vector3     # angular velocity at t-dt/2
    rot: Matrix3x3          # linear part of the pose at t
    rotprev: Matrix3x3      # linear part of the pose at t-dt

    # Loads
    Fi: Vector3             # internal (bond) force
    Mi: Vector3             # internal (bond) moment
    Ff: Vector3             # fluid force
    Mf: Vector3             # fluid moment
    Ffprev: Vector3
    Mfprev: Vector3
