import dataclasses
from dataclasses import dataclass, field

from ..errors import ConfigurationError
from .types import MaterialProperties, FractureProperties


@dataclass(frozen=True)
class SolidSolverConfig:
    """Configuration for the bonded solid solver."""

    material: MaterialProperties = field(default_factory=MaterialProperties)
    fracture: FractureProperties = field(default_factory=FractureProperties)
    cfls: float = 0.5
    n_dim: int = 3
    flag_2d: bool = False
    diagnostics: str = "warn"
    max_dt: float = 1e4

    def __post_init__(self):
        self.validate()

    def validate(self):
        self.material.validate()
        self.fracture.validate()
        if not (0 < self.cfls < 1):
            raise ConfigurationError(f"cfls must be in (0, 1), got {self.cfls}")
        if self.n_dim not in (2, 3):
            raise ConfigurationError(f"n_dim must be 2 or 3, got {self.n_dim}")
        if self.diagnostics not in ("warn", "abort"):
            raise ConfigurationError(f"diagnostics policy must be 'warn' or 'abort', got '{self.diagnostics}'")
        if self.max_dt <= 0:
            raise ConfigurationError(f"max_dt must be positive, got {self.max_dt}")

    def set_material_properties(self, **kwargs) -> 'SolidSolverConfig':
        material = _replace(self.material, "material property", kwargs)
        return dataclasses.replace(self, material=material)

    def set_fracture_properties(self, **kwargs) -> 'SolidSolverConfig':
        fracture = _replace(self.fracture, "fracture property", kwargs)
        return dataclasses.replace(self, fracture=fracture)

    def set_solver_options(self, **kwargs) -> 'SolidSolverConfig':
        names = {f.name for f in dataclasses.fields(self)} - {"material", "fracture"}
        for key in kwargs:
            if key not in names:
                raise ConfigurationError(f"Unknown solver option: {key}")
        return dataclasses.replace(self, **kwargs)

    @property
    def wave_speed(self) -> float:
        return self.material.wave_speed

    def summary(self) -> str:
        """Return a human-readable summary of the configuration."""
        m = self.material
        return f"""
Solid Solver Configuration:
===========================
Dimension: {self.n_dim}{' (planar)' if self.flag_2d else ''}
CFL number: {self.cfls}
Maximum time step: {self.max_dt} s
Diagnostics policy: {self.diagnostics}

Material Properties:
- Density: {m.density} kg/m³
- Elastic modulus: {m.elastic_modulus} Pa
- Poisson ratio: {m.poisson_ratio}
- Wave speed: {m.wave_speed:.6g} m/s

Fracture:
- Critical elongation k_max: {self.fracture.k_max}
"""


def _replace(properties, kind, kwargs):
    for key in kwargs:
        if not hasattr(properties, key):
            raise ConfigurationError(f"Unknown {kind}: {key}")
    new = dataclasses.replace(properties, **kwargs)
    new.validate()
    return new
