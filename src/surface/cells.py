"""
Geometry records produced by the surface builders.

A surface cell knows where it sits, which way it faces and which other
cells touch it. Neighbors are stored as indices into the builder's output
list; game cells map them onto ids later.
"""
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np


Vector = Tuple[float, float, float]


def to_vector(array: np.ndarray) -> Vector:
    """Convert a numpy 3-vector to a plain float tuple."""
    return (float(array[0]), float(array[1]), float(array[2]))


# ============================================================================
# Topology Metadata
# ============================================================================

@dataclass(frozen=True)
class CubeMeta:
    """Location of a cell on the cube: face index and (u, v) grid slot."""

    face: int
    u: int
    v: int
    size: int

    @property
    def shade(self) -> bool:
        """Checkerboard parity for cosmetic coloring."""
        return (self.u + self.v) % 2 == 0


@dataclass(frozen=True)
class SphereMeta:
    """Sequential vertex index on the geodesic sphere."""

    index: int

    @property
    def shade(self) -> bool:
        """Alternating parity for cosmetic coloring."""
        return self.index % 2 == 0


SurfaceMeta = Union[CubeMeta, SphereMeta]


# ============================================================================
# Surface Cell
# ============================================================================

@dataclass(frozen=True)
class SurfaceCell:
    """
    One playable unit of a generated surface.

    Attributes:
        position: Cell center.
        normal: Outward unit normal.
        neighbors: Indices of adjacent cells in the builder output.
        meta: Topology-specific location data.
        boundary: Polygon outline ordered counterclockwise around the
            normal (sphere only).
    """

    position: Vector
    normal: Vector
    neighbors: Tuple[int, ...]
    meta: SurfaceMeta
    boundary: Optional[Tuple[Vector, ...]] = None

    @property
    def degree(self) -> int:
        """Number of adjacent cells."""
        return len(self.neighbors)

    @property
    def sides(self) -> int:
        """Number of boundary polygon corners, 0 when there is no outline."""
        return len(self.boundary) if self.boundary else 0
