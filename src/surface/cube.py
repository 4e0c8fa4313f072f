"""
Cube surface builder.

Lays an n x n grid on each of the six faces of the [-1, 1] cube and links
cells whose centers are close enough to touch, which also stitches the
faces together along their shared edges.
"""
import logging
from typing import List

import numpy as np

from .cells import CubeMeta, SurfaceCell, to_vector


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

# (normal, u axis, v axis) per face. Position = local_u * U + local_v * V + N.
# The axes are chosen so cells along a shared edge line up exactly.
FACE_FRAMES = (
    ((0, 0, 1), (1, 0, 0), (0, 1, 0)),     # front  (+z)
    ((0, 0, -1), (-1, 0, 0), (0, 1, 0)),   # back   (-z)
    ((0, 1, 0), (1, 0, 0), (0, 0, -1)),    # top    (+y)
    ((0, -1, 0), (1, 0, 0), (0, 0, 1)),    # bottom (-y)
    ((1, 0, 0), (0, 0, -1), (0, 1, 0)),    # right  (+x)
    ((-1, 0, 0), (0, 0, 1), (0, 1, 0)),    # left   (-x)
)

FACE_NAMES = ("front", "back", "top", "bottom", "right", "left")

# Neighbor threshold as a multiple of the cell step. Diagonals sit at
# sqrt(2) steps, same-face cells two apart at 2 steps.
NEIGHBOR_THRESHOLD = 1.5


# ============================================================================
# Layout (Low-level)
# ============================================================================

def face_offsets(size: int) -> np.ndarray:
    """Local coordinates of cell centers along one face edge."""
    step = 2.0 / size
    return -1.0 + (np.arange(size) + 0.5) * step


def cube_layout(size: int) -> tuple:
    """
    Compute centers, normals and metadata for every cube cell.

    Args:
        size: Cells per face edge.

    Returns:
        Tuple of (positions (6n^2, 3), normals (6n^2, 3), list of CubeMeta).
    """
    offsets = face_offsets(size)
    positions = []
    normals = []
    metas = []
    for face, (normal, u_axis, v_axis) in enumerate(FACE_FRAMES):
        normal_vec = np.array(normal, dtype=float)
        u_vec = np.array(u_axis, dtype=float)
        v_vec = np.array(v_axis, dtype=float)
        for u in range(size):
            for v in range(size):
                positions.append(offsets[u] * u_vec + offsets[v] * v_vec + normal_vec)
                normals.append(normal_vec)
                metas.append(CubeMeta(face=face, u=u, v=v, size=size))
    return np.array(positions), np.array(normals), metas


# ============================================================================
# Adjacency (Mid-level)
# ============================================================================

def proximity_adjacency(positions: np.ndarray, threshold: float) -> np.ndarray:
    """
    Boolean adjacency matrix of points closer than threshold.

    Compares all pairs, so time and memory are quadratic in the number of
    points. Fine up to the 864 cells of the largest cube preset; larger
    boards should bucket points spatially first.
    """
    diff = positions[:, np.newaxis, :] - positions[np.newaxis, :, :]
    dist_sq = np.einsum("ijk,ijk->ij", diff, diff)
    adjacency = dist_sq < threshold * threshold
    np.fill_diagonal(adjacency, False)
    return adjacency


# ============================================================================
# Builder (High-level)
# ============================================================================

def build_cube(size: int) -> List[SurfaceCell]:
    """
    Build the cells of a cube with size x size cells per face.

    Args:
        size: Cells per face edge (at least 2).

    Returns:
        6 * size^2 surface cells, faces in FACE_FRAMES order.
    """
    if size < 2:
        raise ValueError("Cube size must be at least 2")

    positions, normals, metas = cube_layout(size)
    step = 2.0 / size
    adjacency = proximity_adjacency(positions, NEIGHBOR_THRESHOLD * step)

    cells = []
    for index, meta in enumerate(metas):
        neighbors = tuple(int(i) for i in np.flatnonzero(adjacency[index]))
        cells.append(SurfaceCell(
            position=to_vector(positions[index]),
            normal=to_vector(normals[index]),
            neighbors=neighbors,
            meta=meta,
        ))

    logger.debug("Built cube surface: size=%d cells=%d", size, len(cells))
    return cells
