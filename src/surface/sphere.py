"""
Sphere surface builder (Goldberg polyhedron).

Subdivides an icosahedron into a geodesic sphere, merges the duplicated
vertices of the resulting triangle soup, then turns every vertex into a
cell of the dual polyhedron: its outline runs through the centroids of
the triangles around it and its neighbors are the vertices it shares an
edge with. The 12 original icosahedron vertices become pentagons, every
other vertex a hexagon.
"""
import logging
from typing import Dict, List, Set, Tuple

import numpy as np

from .cells import SphereMeta, SurfaceCell, to_vector


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

_PHI = (1.0 + 5.0 ** 0.5) / 2.0

ICOSAHEDRON_VERTICES = np.array([
    (-1, _PHI, 0), (1, _PHI, 0), (-1, -_PHI, 0), (1, -_PHI, 0),
    (0, -1, _PHI), (0, 1, _PHI), (0, -1, -_PHI), (0, 1, -_PHI),
    (_PHI, 0, -1), (_PHI, 0, 1), (-_PHI, 0, -1), (-_PHI, 0, 1),
], dtype=float)

ICOSAHEDRON_FACES = np.array([
    (0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
    (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
    (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
    (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1),
], dtype=np.int64)

# Decimal places used to recognise coincident vertices.
MERGE_PRECISION = 4


# ============================================================================
# Vector Helpers (Low-level)
# ============================================================================

def normalize(vectors: np.ndarray) -> np.ndarray:
    """Scale vectors along the last axis to unit length."""
    return vectors / np.linalg.norm(vectors, axis=-1, keepdims=True)


def tangent_frame(normal: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build a tangent and bitangent orthogonal to a unit normal.

    (tangent, bitangent, normal) is right handed, so increasing angle in
    the tangent plane runs counterclockwise seen from outside.
    """
    if abs(normal[1]) < 0.9:
        reference = np.array([0.0, 1.0, 0.0])
    else:
        reference = np.array([1.0, 0.0, 0.0])
    tangent = normalize(np.cross(reference, normal))
    bitangent = normalize(np.cross(normal, tangent))
    return tangent, bitangent


def sort_around(center: np.ndarray, normal: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Order points counterclockwise around center as seen along -normal."""
    tangent, bitangent = tangent_frame(normal)
    offsets = points - center
    angles = np.arctan2(offsets @ bitangent, offsets @ tangent)
    return points[np.argsort(angles, kind="stable")]


# ============================================================================
# Geodesic Mesh (Mid-level)
# ============================================================================

def icosphere_triangles(level: int) -> np.ndarray:
    """
    Subdivide the unit icosahedron level times.

    Every pass splits each triangle into four, pushing the new edge
    midpoints out onto the unit sphere. Triangles keep their own copies
    of their corners, so shared vertices appear once per triangle.

    Returns:
        Array of shape (20 * 4^level, 3, 3).
    """
    if level < 0:
        raise ValueError("Subdivision level cannot be negative")

    triangles = normalize(ICOSAHEDRON_VERTICES)[ICOSAHEDRON_FACES]
    for _ in range(level):
        a, b, c = triangles[:, 0], triangles[:, 1], triangles[:, 2]
        ab = normalize(a + b)
        bc = normalize(b + c)
        ca = normalize(c + a)
        triangles = np.concatenate([
            np.stack([a, ab, ca], axis=1),
            np.stack([b, bc, ab], axis=1),
            np.stack([c, ca, bc], axis=1),
            np.stack([ab, bc, ca], axis=1),
        ])
    return triangles


def merge_vertices(
    triangles: np.ndarray, precision: int = MERGE_PRECISION
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Collapse coincident triangle corners into shared vertices.

    Corners are keyed by their coordinates rounded to precision decimal
    places; the first corner seen with a key becomes the canonical vertex.
    Triangles that end up referencing the same vertex twice are dropped.

    Args:
        triangles: Triangle soup of shape (F, 3, 3).
        precision: Decimal places compared when matching corners.

    Returns:
        Tuple of (vertices (V, 3), faces (F', 3) of vertex indices).
    """
    corners = triangles.reshape(-1, 3)
    keys = np.rint(corners * 10 ** precision).astype(np.int64)

    canonical: Dict[Tuple[int, int, int], int] = {}
    remap = np.empty(len(corners), dtype=np.int64)
    vertices = []
    for corner_index, key in enumerate(map(tuple, keys.tolist())):
        index = canonical.get(key)
        if index is None:
            index = len(vertices)
            canonical[key] = index
            vertices.append(corners[corner_index])
        remap[corner_index] = index

    faces = remap.reshape(-1, 3)
    valid = (
        (faces[:, 0] != faces[:, 1])
        & (faces[:, 1] != faces[:, 2])
        & (faces[:, 0] != faces[:, 2])
    )
    return np.array(vertices), faces[valid]


def vertex_connectivity(
    vertex_count: int, faces: np.ndarray
) -> Tuple[List[List[int]], List[Set[int]]]:
    """
    Collect incident faces and adjacent vertices for each vertex.

    Returns:
        Tuple of (incident face indices per vertex,
        adjacent vertex indices per vertex).
    """
    incident: List[List[int]] = [[] for _ in range(vertex_count)]
    adjacent: List[Set[int]] = [set() for _ in range(vertex_count)]
    for face_index, (a, b, c) in enumerate(faces.tolist()):
        incident[a].append(face_index)
        incident[b].append(face_index)
        incident[c].append(face_index)
        adjacent[a].update((b, c))
        adjacent[b].update((a, c))
        adjacent[c].update((a, b))
    return incident, adjacent


# ============================================================================
# Builder (High-level)
# ============================================================================

def build_sphere(level: int) -> List[SurfaceCell]:
    """
    Build the Goldberg cells of a sphere subdivided level times.

    Args:
        level: Icosahedron subdivision level (0 gives the 12 pentagons of a
            dodecahedron).

    Returns:
        10 * 4^level + 2 surface cells, one per geodesic vertex.
    """
    vertices, faces = merge_vertices(icosphere_triangles(level))
    incident, adjacent = vertex_connectivity(len(vertices), faces)
    centroids = vertices[faces].mean(axis=1)

    cells = []
    for index, position in enumerate(vertices):
        normal = normalize(position)
        polygon = sort_around(position, normal, centroids[incident[index]])
        cells.append(SurfaceCell(
            position=to_vector(position),
            normal=to_vector(normal),
            neighbors=tuple(sorted(adjacent[index])),
            meta=SphereMeta(index=index),
            boundary=tuple(to_vector(point) for point in polygon),
        ))

    logger.debug(
        "Built sphere surface: level=%d cells=%d faces=%d",
        level, len(cells), len(faces),
    )
    return cells
