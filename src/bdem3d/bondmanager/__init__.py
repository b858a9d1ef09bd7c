"""
Elastic face bonds: force model and fracture.
"""

from .bondmodel import BondModel
from .fracture import FractureEvent, FractureManager

__all__ = [
    "BondModel",
    "FractureEvent",
    "FractureManager",
]
