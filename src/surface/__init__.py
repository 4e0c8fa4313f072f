"""
Surface geometry module.

Builds the cell graphs the game is played on: a cube of six stitched
grids or a Goldberg sphere. Output is deterministic for a given
configuration.
"""
from typing import List

from .cells import CubeMeta, SphereMeta, SurfaceCell, SurfaceMeta, Vector
from .cube import build_cube
from .presets import (
    BoardConfig,
    Topology,
    CUBE_SIZES,
    SPHERE_SUBDIVISIONS,
    SIZE_LABELS,
    DEFAULT_DENSITY,
    DIFFICULTY_DENSITIES,
)
from .sphere import build_sphere


def build_surface(config: BoardConfig) -> List[SurfaceCell]:
    """Build the surface cells described by a board configuration."""
    if config.topology is Topology.CUBE:
        return build_cube(config.resolution_or_preset)
    return build_sphere(config.resolution_or_preset)


__all__ = [
    "BoardConfig",
    "Topology",
    "CUBE_SIZES",
    "SPHERE_SUBDIVISIONS",
    "SIZE_LABELS",
    "DEFAULT_DENSITY",
    "DIFFICULTY_DENSITIES",
    "CubeMeta",
    "SphereMeta",
    "SurfaceCell",
    "SurfaceMeta",
    "Vector",
    "build_cube",
    "build_sphere",
    "build_surface",
]
