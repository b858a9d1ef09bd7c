"""
Exception hierarchy of the bonded DEM solid.
"""


class SolidError(Exception):
    """Base class of every error raised by bdem3d."""


class MeshFileError(SolidError):
    """The mesh description or restart file is missing or malformed."""

    def __init__(self, path, message, line=None):
        self.path = str(path)
        self.line = line
        where = f"{self.path}:{line}" if line is not None else self.path
        super().__init__(f"{where}: {message}")


class NullMassError(SolidError):
    """A particle has zero (or negative) mass after the inertia computation."""

    def __init__(self, particle, mass):
        self.particle = particle
        self.mass = mass
        super().__init__(f"particle {particle} has null mass ({mass:.6e})")


class ConfigurationError(SolidError, ValueError):
    """Invalid solver configuration."""


class DiagnosticError(SolidError):
    """Raised by a DiagnosticsChannel running with the 'abort' policy."""

    def __init__(self, diagnostic):
        self.diagnostic = diagnostic
        super().__init__(str(diagnostic))
