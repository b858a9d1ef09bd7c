"""
Elastic face bonds between rigid particles.

For a bond of face f of particle i towards particle j, with c the face centre
in the reference configuration and mvt_k the current pose of particle k:

    Δu   = mvt_j(c) - mvt_i(c)
    ε_i  = Σ_bonds Sn·Δu / (2 (V_i + N_dim ν/(1-2ν) Vl_i))
    F    = S/D0 E/(1+ν) Δu
           + S E ν/((1+ν)(1-2ν)) ε_ij (n + Δu/D - (Δu·n)/D n)
    M    = (rot_i lever) x F + S/D0 Σ_k α_k (rot_i a_k) x (rot_j a_k)

where n, D are the direction and distance of the current centres,
ε_ij = α ε_i + (1-α) ε_j, and a_k runs over the face normal and its two
principal in-plane axes with the bending/torsion stiffnesses α_n, α_s, α_t.
"""

import taichi as ti

from ..demsolver.utils import Vector3, apply_pose

KAPPA = 1.0


@ti.data_oriented
class BondModel:
    """
    Internal forces, moments and energies of the bonded solid.

    Args:
        sf: ParticleState struct field.
        bf: Bond struct field.
        config: SolidSolverConfig.
    """

    def __init__(self, sf, bf, config):
        self.sf = sf
        self.bf = bf
        self.E = config.material.elastic_modulus
        self.nu = config.material.poisson_ratio
        self.n_dim = config.n_dim
        self.energy_sum = ti.field(dtype=ti.f64, shape=())

    @ti.func
    def pose(self, k, p):
        sf = ti.static(self.sf)
        return apply_pose(sf[k].rot, sf[k].x0, sf[k].Dx, p)

    @ti.func
    def centre_gap(self, b):
        """Relative displacement of the bonded face centre, seen from the owner."""
        bf = ti.static(self.bf)
        return self.pose(bf[b].j, bf[b].centre) - self.pose(bf[b].i, bf[b].centre)

    @ti.func
    def weighted_volume(self, k):
        sf = ti.static(self.sf)
        return sf[k].V + self.n_dim * self.nu / (1.0 - 2.0 * self.nu) * sf[k].Vl

    @ti.func
    def stiffnesses(self, b):
        bf = ti.static(self.bf)
        S = bf[b].S
        Is = bf[b].Is
        It = bf[b].It
        c = self.E / 4.0 / (1.0 + self.nu) / S
        alphan = (2.0 + 2.0 * self.nu - KAPPA) * c * (Is + It)
        alphas = c * ((2.0 + 2.0 * self.nu + KAPPA) * Is - (2.0 + 2.0 * self.nu - KAPPA) * It)
        alphat = c * ((2.0 + 2.0 * self.nu + KAPPA) * It - (2.0 + 2.0 * self.nu - KAPPA) * Is)
        return Vector3(alphan, alphas, alphat)

    @ti.kernel
    def compute_epsilon(self):
        sf = ti.static(self.sf)
        bf = ti.static(self.bf)
        for i in sf:
            sf[i].epsilon = 0.0
        for b in bf:
            if bf[b].active != 0:
                i = bf[b].i
                du = self.centre_gap(b)
                sf[i].epsilon += bf[b].Sn.dot(du) / (2.0 * self.weighted_volume(i))

    @ti.kernel
    def compute_forces(self):
        sf = ti.static(self.sf)
        bf = ti.static(self.bf)
        for i in sf:
            sf[i].Fi = Vector3(0.0, 0.0, 0.0)
            sf[i].Mi = Vector3(0.0, 0.0, 0.0)
        for b in bf:
            if bf[b].active != 0:
                i = bf[b].i
                j = bf[b].j
                S = bf[b].S
                D0 = bf[b].D0
                X1X2 = (sf[j].x0 + sf[j].Dx) - (sf[i].x0 + sf[i].Dx)
                DIJ = X1X2.norm()
                nIJ = X1X2 / DIJ
                du = self.centre_gap(b)
                alpha = bf[b].alpha
                epsIJ = alpha * sf[i].epsilon + (1.0 - alpha) * sf[j].epsilon

                F = S / D0 * self.E / (1.0 + self.nu) * du
                F += S * self.E * self.nu / (1.0 + self.nu) / (1.0 - 2.0 * self.nu) * epsIJ * (
                    nIJ + du / DIJ - du.dot(nIJ) / DIJ * nIJ)

                arm = sf[i].rot @ bf[b].lever
                k = self.stiffnesses(b)
                Ri = sf[i].rot
                Rj = sf[j].rot
                M = arm.cross(F)
                M += S / D0 * (k[0] * (Ri @ bf[b].normal).cross(Rj @ bf[b].normal)
                               + k[1] * (Ri @ bf[b].s).cross(Rj @ bf[b].s)
                               + k[2] * (Ri @ bf[b].t).cross(Rj @ bf[b].t))
                sf[i].Fi += F
                sf[i].Mi += M

    def internal_forces(self):
        self.compute_epsilon()
        self.compute_forces()

    @ti.kernel
    def _potential_energy(self):
        sf = ti.static(self.sf)
        bf = ti.static(self.bf)
        self.energy_sum[None] = 0.0
        for i in sf:
            self.energy_sum[None] += self.E * self.nu / 2.0 / (1.0 + self.nu) / (1.0 - 2.0 * self.nu) \
                * self.weighted_volume(i) * sf[i].epsilon ** 2
        for b in bf:
            if bf[b].active != 0:
                i = bf[b].i
                j = bf[b].j
                S = bf[b].S
                D0 = bf[b].D0
                du = self.centre_gap(b)
                k = self.stiffnesses(b)
                Ri = sf[i].rot
                Rj = sf[j].rot
                Ep = 0.25 * S / D0 * self.E / (1.0 + self.nu) * du.dot(du)
                Ep += S / 2.0 / D0 * (k[0] * (1.0 - (Ri @ bf[b].normal).dot(Rj @ bf[b].normal))
                                      + k[1] * (1.0 - (Ri @ bf[b].s).dot(Rj @ bf[b].s))
                                      + k[2] * (1.0 - (Ri @ bf[b].t).dot(Rj @ bf[b].t)))
                self.energy_sum[None] += Ep

    def potential_energy(self) -> float:
        self.compute_epsilon()
        self._potential_energy()
        return float(self.energy_sum[None])

    @ti.kernel
    def _kinetic_energy(self):
        sf = ti.static(self.sf)
        self.energy_sum[None] = 0.0
        for i in sf:
            Q = sf[i].rot @ sf[i].rotref
            Omega = Q.transpose() @ sf[i].omega
            I = sf[i].I
            self.energy_sum[None] += 0.5 * sf[i].m * sf[i].u.dot(sf[i].u) \
                + 0.5 * (I[0] * Omega[0] ** 2 + I[1] * Omega[1] ** 2 + I[2] * Omega[2] ** 2)

    def kinetic_energy(self) -> float:
        self._kinetic_energy()
        return float(self.energy_sum[None])

    def energy(self) -> float:
        return self.kinetic_energy() + self.potential_energy()
