"""
The bonded solid: particle topology, taichi state fields and the per-step
pipeline

    solve_position -> breaking_criterion -> update_triangles
    [fluid exchange]
    solve_vitesse -> internal_forces -> pas_temps
"""

import copy
import logging
from typing import List, Optional, Sequence

import numpy as np
import taichi as ti

from ..bondmanager import BondModel, FractureEvent, FractureManager
from ..dateclass import Bond, BROKEN, ParticleState, Particule, RotationParameter
from ..demconfig import SolidSolverConfig
from ..diagnostics import DiagnosticsChannel
from ..errors import MeshFileError
from ..process import InterfaceMeshUpdater, SolidVtkWriter, read_mesh
from .integrator import PoseIntegrator
from .timestep import TimeStepController

logger = logging.getLogger(__name__)

INT_MEMBERS = ("fixe", "diag")
SCALAR_MEMBERS = ("m", "V", "Vl", "epsilon")
VECTOR_MEMBERS = ("I", "x0", "Dx", "Dxprev", "u", "u_half", "e", "eprev", "omega", "omega_half",
                  "Fi", "Mi", "Ff", "Mf", "Ffprev", "Mfprev")
MATRIX_MEMBERS = ("rotref", "rot", "rotprev")


class Solide:
    """
    Set of rigid polyhedral particles linked by elastic face bonds.

    Args:
        particles: Topology of the particles, index = particle id.
        config: Solver configuration.
        diagnostics: Channel receiving the numerical diagnostics. A new one
            following config.diagnostics is created when omitted.
    """

    def __init__(self, particles: List[Particule], config: SolidSolverConfig,
                 diagnostics: Optional[DiagnosticsChannel] = None, compute_inertia: bool = True):
        config.validate()
        self.config = config
        self.particles = particles
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticsChannel(config.diagnostics)
        self.fracture_events: List[FractureEvent] = []

        n = len(particles)
        if compute_inertia:
            for i, particle in enumerate(particles):
                particle.inertie(config.material.density, i, self.diagnostics)

        self.sf = ParticleState.field(shape=n)
        self._bond_rows = [(i, f) for i, p in enumerate(particles)
                           for f, face in enumerate(p.faces) if face.bonded]
        self._bond_index = {key: k for k, key in enumerate(self._bond_rows)}
        self.bf = Bond.field(shape=max(len(self._bond_rows), 1))

        self.integrator = PoseIntegrator(self.sf, config.flag_2d)
        self.bond_model = BondModel(self.sf, self.bf, config)
        self.timestep = TimeStepController(self.sf, self.bf, config)
        self.fracture = FractureManager(config.fracture.k_max)
        self.interface = InterfaceMeshUpdater(self.particles)

        if compute_inertia:
            self._init_particle_fields()
            self._init_bond_fields()
            self.update_triangles()
            logger.info("solid with %d particles and %d bonds", n, len(self._bond_rows) // 2)

    @classmethod
    def from_mesh_file(cls, path, config: SolidSolverConfig,
                       diagnostics: Optional[DiagnosticsChannel] = None) -> 'Solide':
        return cls(read_mesh(path), config, diagnostics)

    def __len__(self):
        return len(self.particles)

    def size(self) -> int:
        return len(self.particles)

    # >>> field initialisation
    ###------------------###

    def _init_particle_fields(self):
        n = len(self.particles)
        arrays = {name: np.zeros(n, dtype=np.int32) for name in INT_MEMBERS}
        arrays.update({name: np.zeros(n) for name in SCALAR_MEMBERS})
        arrays.update({name: np.zeros((n, 3)) for name in VECTOR_MEMBERS})
        arrays.update({name: np.tile(np.eye(3), (n, 1, 1)) for name in MATRIX_MEMBERS})
        for i, p in enumerate(self.particles):
            arrays["fixe"][i] = int(p.fixe)
            arrays["m"][i] = p.m
            arrays["V"][i] = p.V
            arrays["Vl"][i] = p.Vl
            arrays["I"][i] = p.I
            arrays["rotref"][i] = p.rotref
            arrays["x0"][i] = p.x0
            arrays["u"][i] = p.initial_velocity
            arrays["u_half"][i] = p.initial_velocity
            arrays["omega"][i] = p.initial_omega
            arrays["omega_half"][i] = p.initial_omega
        self._upload(arrays)

    def _init_bond_fields(self):
        nb = self.bf.shape[0]
        ints = {name: np.zeros(nb, dtype=np.int32) for name in ("i", "j", "face", "active")}
        scalars = {name: np.ones(nb) for name in ("D0", "S", "alpha", "Is", "It")}
        vectors = {name: np.zeros((nb, 3)) for name in ("centre", "lever", "normal", "s", "t", "Sn")}
        for k, (i, f) in enumerate(self._bond_rows):
            particle = self.particles[i]
            face = particle.faces[f]
            lever = face.centre - particle.x0
            ints["i"][k] = i
            ints["j"][k] = face.voisin
            ints["face"][k] = f
            ints["active"][k] = 1
            scalars["D0"][k] = face.D0
            scalars["S"][k] = face.S
            scalars["alpha"][k] = np.linalg.norm(lever) / face.D0
            scalars["Is"][k] = face.Is
            scalars["It"][k] = face.It
            vectors["centre"][k] = face.centre
            vectors["lever"][k] = lever
            vectors["normal"][k] = face.normale
            vectors["s"][k] = face.s
            vectors["t"][k] = face.t
            vectors["Sn"][k] = face.area_vector()
        for arrays in (ints, scalars, vectors):
            for name, values in arrays.items():
                getattr(self.bf, name).from_numpy(values)

    def _upload(self, arrays):
        for name, values in arrays.items():
            getattr(self.sf, name).from_numpy(values)

    # >>> state access
    ###------------------###

    def state(self, name: str) -> np.ndarray:
        """Copy of one ParticleState member for all particles."""
        return getattr(self.sf, name).to_numpy()

    def set_state(self, name: str, values):
        dtype = np.int32 if name in INT_MEMBERS else np.float64
        getattr(self.sf, name).from_numpy(np.ascontiguousarray(values, dtype=dtype))

    def _row(self, name: str, i: int) -> np.ndarray:
        return np.asarray(getattr(self.sf, name)[i].to_numpy(), dtype=np.float64)

    def centres(self) -> np.ndarray:
        return self.state("x0") + self.state("Dx")

    def rotation_parameter(self, i: int) -> RotationParameter:
        return RotationParameter.from_vector(self._row("e", i))

    def bond_active(self, i: int, face: int) -> bool:
        k = self._bond_index.get((i, face))
        return k is not None and int(self.bf.active[k]) != 0

    # >>> time stepping
    ###------------------###

    def solve_position(self, dt: float):
        """Position step, fracture check and surface update."""
        self.integrator.solve_position(dt)
        self.diagnostics.report_kernel_flags(self.state("diag"), "solve_position", dt=dt)
        self.breaking_criterion()
        self.update_triangles()

    def solve_vitesse(self, dt: float):
        """Velocity step with the internal forces and the fluid loads at t+dt."""
        self.integrator.solve_vitesse(dt)
        self.diagnostics.report_kernel_flags(self.state("diag"), "solve_vitesse", dt=dt)

    def internal_forces(self):
        self.bond_model.internal_forces()

    def kinetic_energy(self) -> float:
        return self.bond_model.kinetic_energy()

    def potential_energy(self) -> float:
        return self.bond_model.potential_energy()

    def energy(self) -> float:
        return self.bond_model.energy()

    def pas_temps(self, t: float, T: float) -> float:
        return self.timestep.pas_temps(t, T)

    def breaking_criterion(self) -> List[FractureEvent]:
        events = self.fracture.breaking_criterion(self.particles, self.centres())
        for event in events:
            for key in ((event.particle, event.face), (event.neighbour, event.neighbour_face)):
                k = self._bond_index.get(key)
                if k is not None:
                    self.bf.active[k] = 0
        self.fracture_events.extend(events)
        return events

    def update_triangles(self):
        self.interface.update(self.state("rot"), self.state("x0"), self.state("Dx"))

    # >>> fluid coupling
    ###------------------###

    def velocity_at_point(self, i: int, X) -> np.ndarray:
        """Rigid velocity of particle i at point X, at mid-step."""
        centre = self._row("x0", i) + self._row("Dx", i)
        return self._row("u_half", i) + np.cross(self._row("omega_half", i), np.asarray(X) - centre)

    def velocity_at_point_prev(self, i: int, X) -> np.ndarray:
        centre = self._row("x0", i) + self._row("Dxprev", i)
        return self._row("u_half", i) + np.cross(self._row("omega_half", i), np.asarray(X) - centre)

    def set_fluid_forces(self, Ff, Mf):
        n = len(self.particles)
        self.set_state("Ff", np.reshape(Ff, (n, 3)))
        self.set_state("Mf", np.reshape(Mf, (n, 3)))

    def fluid_forces(self):
        return self.state("Ff"), self.state("Mf")

    def store_fluid_forces(self):
        self.set_state("Ffprev", self.state("Ff"))
        self.set_state("Mfprev", self.state("Mf"))

    def bounding_extent(self) -> np.ndarray:
        """Largest bounding box extent of each particle."""
        bbox = np.array([p.bbox for p in self.particles])
        return (bbox[:, 3:] - bbox[:, :3]).max(axis=1)

    # >>> copies
    ###------------------###

    def copy(self) -> 'Solide':
        """Independent solid with the same topology and state."""
        other = Solide(copy.deepcopy(self.particles), self.config, self.diagnostics, compute_inertia=False)
        other.assign(self)
        return other

    def assign(self, other: 'Solide'):
        """Overwrite topology and state with those of other (same particle count)."""
        if len(other) != len(self) or other.bf.shape != self.bf.shape:
            raise ValueError("cannot assign solids of different sizes")
        self.particles[:] = copy.deepcopy(other.particles)
        self.fracture_events = list(other.fracture_events)
        self.sf.from_numpy(other.sf.to_numpy())
        self.bf.from_numpy(other.bf.to_numpy())

    # >>> files
    ###------------------###

    def write_vtk(self, index: int, writer: Optional[SolidVtkWriter] = None) -> str:
        writer = writer if writer is not None else SolidVtkWriter()
        vectors = {
            "displacement": self.state("Dx"),
            "velocity": self.state("u"),
            "e": self.state("e"),
            "omega": self.state("omega"),
        }
        return writer.write(index, [p.triangles for p in self.particles], vectors)

    def load_restart(self, path, writer: Optional[SolidVtkWriter] = None):
        """Restore Dx, u, e and omega from an output file and rebuild the poses."""
        writer = writer if writer is not None else SolidVtkWriter()
        data = writer.read_restart(path, [p.n_triangles for p in self.particles])
        rot = np.zeros((len(self), 3, 3))
        for i, e in enumerate(data["e"]):
            try:
                rot[i] = RotationParameter.from_vector(e).matrix()
            except ValueError as exc:
                raise MeshFileError(path, f"particle {i}: {exc}") from None
        self.set_state("rotprev", self.state("rot"))
        self.set_state("rot", rot)
        self.set_state("Dx", data["displacement"])
        self.set_state("Dxprev", data["displacement"])
        self.set_state("u", data["velocity"])
        self.set_state("u_half", data["velocity"])
        self.set_state("e", data["e"])
        self.set_state("eprev", data["e"])
        self.set_state("omega", data["omega"])
        self.set_state("omega_half", data["omega"])
        self.update_triangles()

    # >>> misc
    ###------------------###

    def volume(self) -> float:
        return sum(p.volume() for p in self.particles)

    def broken_faces(self) -> int:
        return sum(1 for p in self.particles for f in p.faces if f.voisin == BROKEN)

    def summary(self) -> str:
        lines = [f"Solide: {len(self)} particles, {len(self._bond_rows) // 2} bonds, "
                 f"{len(self.fracture_events)} broken"]
        lines += [p.describe() for p in self.particles]
        return "\n".join(lines)


def error(S1: Solide, S2: Solide) -> float:
    """
    Distance between two candidate states of the same solid,

        max_i ( |Dx1 - Dx2|_inf + h_max |e1 - e2|_inf )

    with h_max the largest bounding box extent of particle i in either state.
    """
    h_max = np.maximum(S1.bounding_extent(), S2.bounding_extent())
    err_dx = np.abs(S1.state("Dx") - S2.state("Dx")).max(axis=1)
    err_e = np.abs(S1.state("e") - S2.state("e")).max(axis=1)
    return float(np.max(err_dx + h_max * err_e))


def copy_fluid_forces(S1: Solide, S2: Solide):
    """Copy the fluid loads Ff, Mf of S2 into S1."""
    S1.set_state("Ff", S2.state("Ff"))
    S1.set_state("Mf", S2.state("Mf"))
