"""
Input/output and interface surface of the solid.
"""

from .meshio import read_mesh
from .generate import cube_grid_mesh, write_cube_grid_mesh
from .vtkwriter import SolidVtkWriter, CELL_VECTORS
from .interface import InterfaceMeshUpdater, inside_box, inside_convex_polygon, box_inside_convex_polygon

__all__ = [
    "read_mesh",
    "cube_grid_mesh",
    "write_cube_grid_mesh",
    "SolidVtkWriter",
    "CELL_VECTORS",
    "InterfaceMeshUpdater",
    "inside_box",
    "inside_convex_polygon",
    "box_inside_convex_polygon",
]
