"""
Material, fracture and fixity definitions.
"""

import enum
import math
from dataclasses import dataclass

from ..errors import ConfigurationError


class FixityMode(enum.IntEnum):
    """Kinematic constraint applied to one particle."""
    FREE = 0
    FULLY_FIXED = 1
    TRANSLATION_FIXED = 2
    TRANSLATION_FIXED_Y_AXIS_ONLY = 3


@dataclass(frozen=True)
class MaterialProperties:
    """Elastic material of the solid."""
    density: float = 1.0            # kg/m³
    elastic_modulus: float = 1.0    # Pa
    poisson_ratio: float = 0.0

    def validate(self):
        if self.density <= 0:
            raise ConfigurationError(f"density must be positive, got {self.density}")
        if self.elastic_modulus <= 0:
            raise ConfigurationError(f"elastic_modulus must be positive, got {self.elastic_modulus}")
        if not (0 <= self.poisson_ratio < 0.5):
            raise ConfigurationError(f"poisson_ratio must be in [0, 0.5), got {self.poisson_ratio}")

    @property
    def wave_speed(self) -> float:
        """P-wave speed sqrt(E(1-nu)/(rho(1+nu)(1-2nu)))."""
        E, nu, rho = self.elastic_modulus, self.poisson_ratio, self.density
        return math.sqrt(E * (1.0 - nu) / (rho * (1.0 + nu) * (1.0 - 2.0 * nu)))


@dataclass(frozen=True)
class FractureProperties:
    """Bond breaking criterion."""
    k_max: float = 1.0              # critical relative elongation

    def validate(self):
        if self.k_max <= 0:
            raise ConfigurationError(f"k_max must be positive, got {self.k_max}")
