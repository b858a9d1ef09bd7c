import taichi as ti

#=====================================
# Type Definition
#=====================================
Vector3 = ti.types.vector(3, ti.f64)
Vector6 = ti.types.vector(6, ti.f64)
Matrix3x3 = ti.types.matrix(3, 3, ti.f64)

# FixityMode values, usable inside kernels
FREE = 0
FULLY_FIXED = 1
TRANSLATION_FIXED = 2
TRANSLATION_FIXED_Y_AXIS_ONLY = 3

ROTATION_TOLERANCE = 1e-15
MAX_ROTATION_ITERATIONS = 1000
ORTHONORMALITY_TOLERANCE = 1e-10
DEGENERACY_EPS = 1e-14


# Rotation matrix of the unit quaternion (e0, e)
# References:
# https://en.wikipedia.org/wiki/Quaternions_and_spatial_rotation
@ti.func
def quaternion_matrix(e0: ti.f64, e: Vector3) -> Matrix3x3:
    return Matrix3x3([
        [1.0 - 2.0 * (e[1] * e[1] + e[2] * e[2]), 2.0 * (-e0 * e[2] + e[0] * e[1]), 2.0 * (e0 * e[1] + e[0] * e[2])],
        [2.0 * (e0 * e[2] + e[1] * e[0]), 1.0 - 2.0 * (e[0] * e[0] + e[2] * e[2]), 2.0 * (-e0 * e[0] + e[1] * e[2])],
        [2.0 * (-e0 * e[1] + e[2] * e[0]), 2.0 * (e0 * e[0] + e[2] * e[1]), 1.0 - 2.0 * (e[0] * e[0] + e[1] * e[1])],
    ])


@ti.func
def scalar_part(e: Vector3) -> ti.f64:
    return ti.sqrt(ti.max(1.0 - e.dot(e), 0.0))


@ti.func
def rotation_parameter(r: Matrix3x3) -> Vector3:
    """Vector part of the quaternion of r, with e0 >= 0."""
    q = Vector3(r[2, 1] - r[1, 2], r[0, 2] - r[2, 0], r[1, 0] - r[0, 1])
    d = Vector3(1.0 + r[0, 0] - r[1, 1] - r[2, 2],
                1.0 - r[0, 0] + r[1, 1] - r[2, 2],
                1.0 - r[0, 0] - r[1, 1] + r[2, 2])
    e = Vector3(0.0, 0.0, 0.0)
    for k in ti.static(range(3)):
        e[k] = ti.math.sign(q[k]) * ti.sqrt(ti.max(d[k], 0.0) / 4.0)
    return e


@ti.func
def skew(w: Vector3) -> Matrix3x3:
    return Matrix3x3([[0.0, -w[2], w[1]], [w[2], 0.0, -w[0]], [-w[1], w[0], 0.0]])


@ti.func
def column(m: Matrix3x3, k: ti.template()) -> Vector3:
    return Vector3(m[0, k], m[1, k], m[2, k])


@ti.func
def cross_defect(m: Matrix3x3) -> ti.f64:
    """|c2 - c0 x c1|, zero for a direct orthonormal basis of columns."""
    c = column(m, 0).cross(column(m, 1))
    return (column(m, 2) - c).norm()


@ti.func
def row_norm_defect(m: Matrix3x3) -> ti.f64:
    defect = 0.0
    for r in ti.static(range(3)):
        n2 = m[r, 0] * m[r, 0] + m[r, 1] * m[r, 1] + m[r, 2] * m[r, 2]
        defect = ti.max(defect, ti.abs(n2 - 1.0))
    return defect


@ti.func
def inertia_split(I: Vector3) -> Vector3:
    """d_k = (I0 + I1 + I2)/2 - I_k, so that I_k = sum of the other two d."""
    half = 0.5 * (I[0] + I[1] + I[2])
    return Vector3(half - I[0], half - I[1], half - I[2])


@ti.func
def rotation_increment(I: Vector3, a: Vector3, dt: ti.f64, y_axis_only: ti.i32) -> Vector6:
    """
    Solve for the quaternion increment (e0, e) of one position step:

        2 (d_j + d_k) e0 e_i + 2 (d_j - d_k) e_j e_k = dt a_i

    with (i, j, k) cyclic, by fixed point iterations.

    The iterations stop when no component of e moves by more than
    ROTATION_TOLERANCE. Returns (e0, e1, e2, e3, last update, iterations).
    """
    d = inertia_split(I)
    e0: ti.f64 = 1.0
    e1: ti.f64 = 0.0
    e2: ti.f64 = 0.0
    e3: ti.f64 = 0.0
    err: ti.f64 = 1.0
    k: ti.i32 = 0
    while err > ROTATION_TOLERANCE and k < MAX_ROTATION_ITERATIONS:
        x1 = (dt * a[0] - 2.0 * (d[1] - d[2]) * e2 * e3) / (2.0 * (d[1] + d[2]) * e0)
        x2 = (dt * a[1] - 2.0 * (d[2] - d[0]) * e1 * e3) / (2.0 * (d[0] + d[2]) * e0)
        x3 = (dt * a[2] - 2.0 * (d[0] - d[1]) * e1 * e2) / (2.0 * (d[0] + d[1]) * e0)
        e1_old = e1
        e2_old = e2
        e3_old = e3
        e1 = x1
        e2 = x2
        e3 = x3
        if y_axis_only != 0:
            e1 = 0.0
            e3 = 0.0
        if e1 * e1 + e2 * e2 + e3 * e3 > 0.5:
            e1 /= 2.0
            e2 /= 2.0
            e3 /= 2.0
        e0 = ti.sqrt(ti.max(1.0 - e1 * e1 - e2 * e2 - e3 * e3, 0.0))
        err = ti.max(ti.abs(e1 - e1_old), ti.max(ti.abs(e2 - e2_old), ti.abs(e3 - e3_old)))
        k += 1
    return Vector6(e0, e1, e2, e3, err, ti.cast(k, ti.f64))


@ti.func
def apply_pose(rot: Matrix3x3, x0: Vector3, Dx: Vector3, p: Vector3) -> Vector3:
    """mvt(p) = rot (p - x0) + x0 + Dx"""
    return rot @ (p - x0) + x0 + Dx
