"""
VTK output of the solid surface and restart from it.

The solid is written as a legacy ASCII unstructured grid of triangles, one
cell per surface triangle, carrying the kinematics of the owning particle as
cell vectors.
"""

import logging
import os
from typing import Dict, Optional, Sequence

import numpy as np

from ..errors import MeshFileError
from .iobase import IOBase

logger = logging.getLogger(__name__)

CELL_VECTORS = ("displacement", "velocity", "e", "omega")


def _fmt(v) -> str:
    return f"{v:.15g}"


class SolidVtkWriter(IOBase):
    """
    Writer/reader of the solideN.vtk files.

    Args:
        outputDir: Directory of the result files (default 'resultats').
    """

    def __init__(self, outputDir: Optional[str] = None, prefix: str = "solide"):
        super().__init__(outputDir if outputDir is not None else "resultats", prefix, "vtk")

    def write(self, index: int, triangles: Sequence[np.ndarray], vectors: Dict[str, np.ndarray]) -> str:
        """
        Write output number index.

        Args:
            triangles: Per particle (n_k, 3, 3) array of surface triangles.
            vectors: For each name of CELL_VECTORS, a (n_particles, 3) array.

        Returns:
            Path of the written file.
        """
        self.createOutputDir()
        path = self.getFullPath(index)
        counts = [len(t) for t in triangles]
        nb_triangles = sum(counts)

        with open(path, "w", encoding="UTF-8") as f:
            f.write("# vtk DataFile Version 3.0\n")
            f.write("#Simulation Euler\n")
            f.write("ASCII\n")
            f.write("\n")
            f.write("DATASET UNSTRUCTURED_GRID\n")
            f.write(f"POINTS {3 * nb_triangles} DOUBLE\n")
            for tris in triangles:
                for tri in tris:
                    for p in tri:
                        f.write(f"{_fmt(p[0])} {_fmt(p[1])} {_fmt(p[2])}\n")
            f.write("\n")
            f.write(f"CELLS {nb_triangles} {4 * nb_triangles}\n")
            for num in range(nb_triangles):
                f.write(f"3 {3 * num} {3 * num + 1} {3 * num + 2}\n")
            f.write("\n")
            f.write(f"CELL_TYPES {nb_triangles}\n")
            for _ in range(nb_triangles):
                f.write("5\n")
            f.write("\n")
            f.write(f"CELL_DATA {nb_triangles}\n")
            for name in CELL_VECTORS:
                data = np.asarray(vectors[name], dtype=np.float64)
                f.write(f"VECTORS {name} double\n")
                for it, count in enumerate(counts):
                    line = f"{_fmt(data[it][0])} {_fmt(data[it][1])} {_fmt(data[it][2])}\n"
                    for _ in range(count):
                        f.write(line)
                f.write("\n")

        logger.debug("wrote %s (%d triangles)", path, nb_triangles)
        return path

    def read_restart(self, path, counts: Sequence[int]) -> Dict[str, np.ndarray]:
        """
        Read the per-particle cell vectors of a file written by write().

        The geometry part (5 N + 13 lines for N triangles) is skipped, then the
        four vector blocks are read in order, one value per particle.

        Args:
            path: File to read, or an output index in outputDir.
            counts: Number of triangles of each particle.
        """
        if isinstance(path, int):
            path = self.getFullPath(path)
        if not os.path.isfile(path):
            raise MeshFileError(path, "restart file not found")
        with open(path, encoding="UTF-8") as f:
            lines = f.read().splitlines()

        nb_triangles = sum(counts)
        pos = 5 * nb_triangles + 13
        out = {}
        for name in CELL_VECTORS:
            header = lines[pos - 1].split() if 0 < pos <= len(lines) else []
            if header[:2] != ["VECTORS", name]:
                raise MeshFileError(path, f"expected 'VECTORS {name}' block", pos)
            values = np.zeros((len(counts), 3))
            for it, count in enumerate(counts):
                try:
                    values[it] = [float(v) for v in lines[pos].split()[:3]]
                except (IndexError, ValueError):
                    raise MeshFileError(path, f"malformed '{name}' value for particle {it}", pos + 1) from None
                pos += count
            out[name] = values
            pos += 2
        logger.info("restart read from %s", path)
        return out
