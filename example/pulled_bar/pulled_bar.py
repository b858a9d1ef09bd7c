import os
import pickle
import sys
import time

import numpy as np

# Add the project sources to Python path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "src"))

# Taichi packages (set backend, default precision and device memory)
import taichi as ti
ti.init(arch=ti.cpu, default_fp=ti.f64)

# Source packages
from bdem3d import Solide, SolidSolverConfig, MaterialProperties, FractureProperties, FixedPointCoupler, FixityMode
from bdem3d import setup_logging
from bdem3d.process import write_cube_grid_mesh, SolidVtkWriter

# =====================================
# Simulation Constants
# =====================================
n_cubes = 4                 # bar of cubes along x, the first one clamped
spacing = 0.01              # edge length (m)
pull_rate = 1.0e5           # growth rate of the end load (N/s)
target_time = 2e-3          # total simulation time (s)
saving_interval_time = 1e-4

material = MaterialProperties(density=2700.0, elastic_modulus=7e7, poisson_ratio=0.3)
fracture = FractureProperties(k_max=0.02)

mesh_file = "pulled_bar.txt"
output_dir = "resultats"


class EndPull:
    """Stand-in for the fluid solver: a load growing in time on the free end."""

    def __init__(self, rate):
        self.rate = rate
        self.t = 0.0

    def update(self, solid):
        n = len(solid)
        Ff = np.zeros((n, 3))
        Ff[-1, 0] = self.rate * self.t
        solid.set_fluid_forces(Ff, np.zeros((n, 3)))


def main():
    logger = setup_logging(log_file="pulled_bar.log")

    config = SolidSolverConfig(material=material, fracture=fracture, cfls=0.5)
    print(config.summary())

    write_cube_grid_mesh(mesh_file, [(i, 0, 0) for i in range(n_cubes)], spacing=spacing,
                         fixities={0: FixityMode.FULLY_FIXED})
    solid = Solide.from_mesh_file(mesh_file, config)
    solid.internal_forces()
    print(solid.summary())

    fluid = EndPull(pull_rate)
    coupler = FixedPointCoupler(solid, fluid, tolerance=1e-12)
    writer = SolidVtkWriter(output_dir)

    t = 0.0
    dt = solid.pas_temps(t, target_time)
    frame = 0
    next_save = 0.0
    history = {"time": [], "kinetic": [], "potential": [], "iterations": [], "broken": []}
    start_time = time.time()

    while t < target_time:
        if t >= next_save:
            solid.write_vtk(frame, writer)
            frame += 1
            next_save += saving_interval_time
            logger.info("t = %.4e s, dt = %.3e s, broken bonds %d", t, dt, len(solid.fracture_events))

        fluid.t = t + dt
        result = coupler.advance(dt, t, target_time)
        t += dt
        dt = result.dt_next

        history["time"].append(t)
        history["kinetic"].append(solid.kinetic_energy())
        history["potential"].append(solid.potential_energy())
        history["iterations"].append(result.iterations)
        history["broken"].append(len(solid.fracture_events))

    solid.write_vtk(frame, writer)
    with open(os.path.join(output_dir, "history.pkl"), "wb") as fid:
        pickle.dump(history, fid)

    for event in solid.fracture_events:
        print(f"bond {event.particle}-{event.neighbour} broken at strain {event.strain:.4f}")
    print(f"Diagnostics: {len(solid.diagnostics)}")
    print(f"Total execution time: {time.time() - start_time:.2f} seconds")


if __name__ == '__main__':
    main()
