"""
Fixed-point (Picard) coupling of the solid with a fluid solver.

Within one time step the solid position is recomputed with the latest fluid
loads until two successive candidate states agree; the velocity step then
uses the converged loads.
"""

import logging
from typing import NamedTuple, Protocol

from ..diagnostics import Severity
from .solide import Solide, copy_fluid_forces, error

logger = logging.getLogger(__name__)


class FluidSolver(Protocol):
    def update(self, solid: Solide) -> None:
        """Advance the fluid against the candidate solid and store the new
        loads with solid.set_fluid_forces()."""
        ...


class CouplingResult(NamedTuple):
    iterations: int
    error: float
    converged: bool
    dt_next: float


class FixedPointCoupler:
    """
    Args:
        solid: Solid at time t, advanced in place by advance().
        fluid: Object implementing FluidSolver.
        tolerance: Stopping threshold on error() between two iterates.
        max_iterations: Iteration cap of one time step.
    """

    def __init__(self, solid: Solide, fluid: FluidSolver, tolerance: float = 1e-10, max_iterations: int = 50):
        if tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
        self.solid = solid
        self.fluid = fluid
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self._candidate = solid.copy()
        self._previous = solid.copy()

    def advance(self, dt: float, t: float = 0.0, T: float = float("inf")) -> CouplingResult:
        """
        Advance the coupled system by dt.

        Returns:
            CouplingResult with the stable time step of the next step
            (pas_temps(t + dt, T)).
        """
        self.solid.store_fluid_forces()
        candidate, previous = self._candidate, self._previous
        err = float("inf")
        converged = False
        k = 0
        while k < self.max_iterations and not converged:
            k += 1
            candidate.assign(self.solid)
            if k > 1:
                copy_fluid_forces(candidate, previous)
            candidate.solve_position(dt)
            self.fluid.update(candidate)
            if k > 1:
                err = error(candidate, previous)
                converged = err < self.tolerance
                logger.debug("fixed point iteration %d, error %.3e", k, err)
            candidate, previous = previous, candidate

        accepted = previous
        if not converged:
            self.solid.diagnostics.report("COUPLING_NOT_CONVERGED", Severity.WARNING, None,
                                          f"fixed point stopped after {k} iterations",
                                          error=err, tolerance=self.tolerance)
        self._candidate, self._previous = candidate, previous

        self.solid.assign(accepted)
        self.solid.solve_vitesse(dt)
        self.solid.internal_forces()
        dt_next = self.solid.pas_temps(t + dt, T)
        return CouplingResult(k, err, converged, dt_next)
