"""
Elastic bond carried by a face shared by two particles.

Each bonded face of each particle owns one Bond row, so every physical link
appears twice (once per side). The geometric data are those of the owner's
face in its reference configuration.
"""

import taichi as ti

Vector3 = ti.types.vector(3, ti.f64)


@ti.dataclass
class Bond:
    i: ti.i32               # owner particle
    j: ti.i32               # neighbour particle
    face: ti.i32            # face index on the owner
    active: ti.i32          # 0 once the bond is broken

    D0: ti.f64              # equilibrium distance between the centres
    S: ti.f64               # face area
    alpha: ti.f64           # |lever| / D0
    Is: ti.f64              # principal second moments of area
    It: ti.f64

    centre: Vector3         # area centroid of the face
    lever: Vector3          # centre - x0 of the owner
    normal: Vector3
    s: Vector3
    t: Vector3
    Sn: Vector3             # area vector of the vertex loop
