"""
Mesh descriptions of bonded box particles laid out on a regular grid.

Each occupied cell (ix, iy, iz) becomes one box particle of size spacing,
a scalar for cubes or one edge length per axis.
Particles of face-adjacent cells are bonded through their common face and
share its mesh points.
"""

import logging
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Cell = Tuple[int, int, int]

# corners (dx, dy, dz) of each box face, counter-clockwise seen from outside,
# with the offset of the neighbouring cell across the face
BOX_FACES = (
    (((0, 0, 0), (0, 1, 0), (1, 1, 0), (1, 0, 0)), (0, 0, -1)),
    (((0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1)), (0, 0, 1)),
    (((0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)), (0, -1, 0)),
    (((0, 1, 0), (0, 1, 1), (1, 1, 1), (1, 1, 0)), (0, 1, 0)),
    (((0, 0, 0), (0, 0, 1), (0, 1, 1), (0, 1, 0)), (-1, 0, 0)),
    (((1, 0, 0), (1, 1, 0), (1, 1, 1), (1, 0, 1)), (1, 0, 0)),
)


def cube_grid_mesh(cells: Sequence[Cell], spacing=1.0, origin=(0.0, 0.0, 0.0),
                   fixities: Optional[Dict[int, int]] = None,
                   velocities: Optional[Dict[int, Sequence[float]]] = None,
                   omegas: Optional[Dict[int, Sequence[float]]] = None,
                   bonded: bool = True) -> str:
    """
    Text of a mesh description for boxes on the given grid cells.

    Args:
        cells: Integer cell coordinates, particle k is cells[k].
        spacing: Edge length of the boxes, or their (x, y, z) sizes.
        origin: Position of the corner of cell (0, 0, 0).
        fixities: Fixity mode per particle index (default FREE).
        velocities: Initial velocity per particle index.
        omegas: Initial angular velocity per particle index.
        bonded: Bond face-adjacent boxes (otherwise every face is free).
    """
    cells = [tuple(int(v) for v in c) for c in cells]
    index = {c: k for k, c in enumerate(cells)}
    if len(index) != len(cells):
        raise ValueError("cells must be distinct")
    fixities = fixities or {}
    velocities = velocities or {}
    omegas = omegas or {}
    origin = np.asarray(origin, dtype=np.float64)
    spacing = np.broadcast_to(np.asarray(spacing, dtype=np.float64), (3,))

    point_ids: Dict[Cell, int] = {}
    points = []

    def point_id(corner):
        if corner not in point_ids:
            point_ids[corner] = len(points)
            points.append(origin + spacing * np.asarray(corner, dtype=np.float64))
        return point_ids[corner]

    blocks = []
    for k, (ix, iy, iz) in enumerate(cells):
        lines = []
        for corners, (ox, oy, oz) in BOX_FACES:
            ids = [point_id((ix + dx, iy + dy, iz + dz)) for dx, dy, dz in corners]
            voisin = index.get((ix + ox, iy + oy, iz + oz), -1) if bonded else -1
            lines.append(f"4 {' '.join(str(p) for p in ids)} {voisin}")
        centre = origin + spacing * (np.array([ix, iy, iz], dtype=np.float64) + 0.5)
        u = velocities.get(k, (0.0, 0.0, 0.0))
        w = omegas.get(k, (0.0, 0.0, 0.0))
        header = [
            f"Particule 6 {int(fixities.get(k, 0))}",
            "Centre " + " ".join(repr(float(v)) for v in centre),
            "Vitesse " + " ".join(repr(float(v)) for v in u),
            "Rotation " + " ".join(repr(float(v)) for v in w),
        ]
        blocks.append("\n".join(header + lines))

    out = [f"Points {len(points)}"]
    out += [" ".join(repr(float(v)) for v in p) for p in points]
    out.append(f"Particules {len(cells)}")
    out += blocks
    return "\n".join(out) + "\n"


def write_cube_grid_mesh(path, cells: Iterable[Cell], **kwargs) -> str:
    """Write cube_grid_mesh(cells, **kwargs) to path and return the path."""
    text = cube_grid_mesh(list(cells), **kwargs)
    with open(path, "w", encoding="UTF-8") as fp:
        fp.write(text)
    logger.info("mesh description written to %s", path)
    return str(path)
