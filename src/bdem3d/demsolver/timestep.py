import taichi as ti

OMEGA_EPS = 1e-14


@ti.data_oriented
class TimeStepController:
    """
    Stable time step of the solid: rotation CFL on every particle and wave
    propagation CFL on every intact bond,

        dt = min(T - t, cfls 0.26 / (|wx|+|wy|+|wz|+eps), cfls D0 / c_s)
    """

    def __init__(self, sf, bf, config):
        self.sf = sf
        self.bf = bf
        self.cfls = config.cfls
        self.max_dt = config.max_dt
        self.cs = config.wave_speed
        self.dt_min = ti.field(dtype=ti.f64, shape=())

    @ti.kernel
    def _reduce(self):
        sf = ti.static(self.sf)
        bf = ti.static(self.bf)
        self.dt_min[None] = self.max_dt
        for i in sf:
            w = sf[i].omega
            ti.atomic_min(self.dt_min[None],
                          self.cfls * 0.26 / (ti.abs(w[0]) + ti.abs(w[1]) + ti.abs(w[2]) + OMEGA_EPS))
        for b in bf:
            if bf[b].active != 0:
                ti.atomic_min(self.dt_min[None], self.cfls * bf[b].D0 / self.cs)

    def pas_temps(self, t: float, T: float) -> float:
        self._reduce()
        return min(float(self.dt_min[None]), T - t)
