"""
Runtime diagnostics of the solid solver.

Numerical invariant violations (drifting rotation matrices, non converged
rotation increments, too large steps, ...) are not fatal by themselves: they
are recorded as Diagnostic objects, logged, and optionally turned into a
DiagnosticError when the channel runs with the 'abort' policy.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import ConfigurationError, DiagnosticError

logger = logging.getLogger("bdem3d.diagnostics")


class Severity(enum.IntEnum):
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


# Bits written by the taichi kernels in ParticleState.diag
ROTREF_DRIFT = 1 << 0
INVALID_ROTATION_PARAMETER = 1 << 1
EXCESSIVE_ANGULAR_STEP = 1 << 2
EXCESSIVE_TORQUE_STEP = 1 << 3
DEGENERATE_INERTIA = 1 << 4
ROTATION_NOT_CONVERGED = 1 << 5
ROTATION_RENORMALIZED = 1 << 6
ROTATION_NOT_ORTHONORMAL = 1 << 7
VELOCITY_STEP_TOO_LARGE = 1 << 8

KERNEL_FLAGS = {
    ROTREF_DRIFT: ("ROTREF_DRIFT", Severity.WARNING,
                   "reference rotation is no longer orthonormal"),
    INVALID_ROTATION_PARAMETER: ("INVALID_ROTATION_PARAMETER", Severity.ERROR,
                                 "rotation parameter has norm larger than 1"),
    EXCESSIVE_ANGULAR_STEP: ("EXCESSIVE_ANGULAR_STEP", Severity.WARNING,
                             "rotation per step too large, dt*|Omega| > 0.25"),
    EXCESSIVE_TORQUE_STEP: ("EXCESSIVE_TORQUE_STEP", Severity.WARNING,
                            "torque per step too large, dt^2/2*|M|/I > 0.25"),
    DEGENERATE_INERTIA: ("DEGENERATE_INERTIA", Severity.ERROR,
                         "degenerate principal moments of inertia"),
    ROTATION_NOT_CONVERGED: ("ROTATION_NOT_CONVERGED", Severity.WARNING,
                             "rotation increment did not converge"),
    ROTATION_RENORMALIZED: ("ROTATION_RENORMALIZED", Severity.WARNING,
                            "rotation matrix rows renormalised"),
    ROTATION_NOT_ORTHONORMAL: ("ROTATION_NOT_ORTHONORMAL", Severity.WARNING,
                               "rotation matrix failed the orthonormality check"),
    VELOCITY_STEP_TOO_LARGE: ("VELOCITY_STEP_TOO_LARGE", Severity.ERROR,
                              "dt^2*|Omega|^2 > 1 in the velocity step"),
}


@dataclass
class Diagnostic:
    """One reported invariant violation."""
    code: str
    severity: Severity
    particle: Optional[int] = None
    message: str = ""
    values: Dict[str, float] = field(default_factory=dict)

    def __str__(self):
        where = f"particle {self.particle}: " if self.particle is not None else ""
        extra = ", ".join(f"{k}={v:.6g}" for k, v in self.values.items())
        if extra:
            extra = f" ({extra})"
        return f"[{self.code}] {where}{self.message}{extra}"


class DiagnosticsChannel:
    """
    Collects diagnostics and applies the configured policy.

    Args:
        policy: 'warn' to log and continue, 'abort' to raise DiagnosticError
            for every diagnostic of severity WARNING or above.
    """

    POLICIES = ("warn", "abort")

    def __init__(self, policy: str = "warn"):
        if policy not in self.POLICIES:
            raise ConfigurationError(f"Unknown diagnostics policy '{policy}', expected one of {self.POLICIES}")
        self.policy = policy
        self.records: List[Diagnostic] = []

    def report(self, code: str, severity: Severity, particle: Optional[int] = None,
               message: str = "", **values) -> Diagnostic:
        diagnostic = Diagnostic(code, Severity(severity), particle, message,
                                {k: float(v) for k, v in values.items()})
        self.records.append(diagnostic)
        logger.log(int(diagnostic.severity), "%s", diagnostic)
        if self.policy == "abort" and diagnostic.severity >= Severity.WARNING:
            raise DiagnosticError(diagnostic)
        return diagnostic

    def report_kernel_flags(self, flags, stage: str, **values) -> int:
        """Decode the per-particle bitmasks written by a kernel.

        Returns the number of diagnostics emitted.
        """
        count = 0
        for particle, mask in enumerate(flags):
            mask = int(mask)
            if mask == 0:
                continue
            for bit, (code, severity, message) in KERNEL_FLAGS.items():
                if mask & bit:
                    count += 1
                    self.report(code, severity, particle, f"{stage}: {message}", **values)
        return count

    def codes(self) -> List[str]:
        return [d.code for d in self.records]

    def clear(self):
        self.records.clear()

    def __len__(self):
        return len(self.records)
