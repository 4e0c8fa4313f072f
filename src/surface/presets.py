"""
Board presets and configuration.

Maps the five size indices onto cube edge sizes and sphere subdivision
levels, and validates the parameters a board is generated from.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


# ============================================================================
# Constants
# ============================================================================

class Topology(Enum):
    """Board shape family."""

    CUBE = "cube"
    SPHERE = "sphere"


SIZE_LABELS = ("Mini", "Small", "Medium", "Large", "Extra Large")

# Cells per face edge; a face holds size * size cells.
CUBE_SIZES = (4, 6, 8, 10, 12)

# Icosahedron subdivision levels (42, 162, 642, 642, 2562 cells).
# Level 0 (12 cells) is too small to play; Large repeats Medium because
# level 4 jumps straight to 2562 cells.
SPHERE_SUBDIVISIONS = (1, 2, 3, 3, 4)

MAX_SUBDIVISION = 5

DEFAULT_DENSITY = 0.15

DIFFICULTY_DENSITIES = {
    "easy": 0.10,
    "medium": 0.15,
    "hard": 0.20,
    "extreme": 0.25,
    "hell": 0.30,
}


# ============================================================================
# Board Configuration
# ============================================================================

@dataclass(frozen=True)
class BoardConfig:
    """
    Parameters a board is generated from.

    Attributes:
        topology: Cube or sphere (a Topology member or its string value).
        size_index: Preset index into the size tables (0-4).
        density: Fraction of cells that are mines (0-1).
        resolution: Optional explicit cube edge size or subdivision level,
            overriding the preset for custom boards.
    """

    topology: Topology = Topology.CUBE
    size_index: int = 1
    density: float = DEFAULT_DENSITY
    resolution: Optional[int] = None

    def __post_init__(self) -> None:
        """Coerce the topology and validate the configuration."""
        object.__setattr__(self, "topology", _coerce_topology(self.topology))
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if isinstance(self.size_index, bool) or not isinstance(self.size_index, int):
            raise ValueError(f"Size index must be an integer, got {self.size_index!r}")
        if not 0 <= self.size_index < len(SIZE_LABELS):
            raise ValueError(
                f"Size index out of range (0-{len(SIZE_LABELS) - 1}): {self.size_index}"
            )
        if not 0.0 <= self.density <= 1.0:
            raise ValueError(f"Density must be within [0, 1], got {self.density}")
        if self.resolution is None:
            return
        if isinstance(self.resolution, bool) or not isinstance(self.resolution, int):
            raise ValueError(f"Resolution must be an integer, got {self.resolution!r}")
        if self.topology is Topology.CUBE and self.resolution < 2:
            raise ValueError("Cube resolution must be at least 2")
        if self.topology is Topology.SPHERE and not 0 <= self.resolution <= MAX_SUBDIVISION:
            raise ValueError(
                f"Subdivision level out of range (0-{MAX_SUBDIVISION}): {self.resolution}"
            )

    @property
    def resolution_or_preset(self) -> int:
        """Cube edge size or subdivision level this board is built with."""
        if self.resolution is not None:
            return self.resolution
        if self.topology is Topology.CUBE:
            return CUBE_SIZES[self.size_index]
        return SPHERE_SUBDIVISIONS[self.size_index]

    @property
    def label(self) -> str:
        """Human readable size name."""
        return SIZE_LABELS[self.size_index]

    @property
    def expected_cells(self) -> int:
        """Cell count the geometry builder will produce."""
        resolution = self.resolution_or_preset
        if self.topology is Topology.CUBE:
            return 6 * resolution * resolution
        return 10 * 4 ** resolution + 2


def _coerce_topology(value: Union[Topology, str]) -> Topology:
    """Accept a Topology member or its string value."""
    if isinstance(value, Topology):
        return value
    try:
        return Topology(value)
    except ValueError:
        choices = ", ".join(t.value for t in Topology)
        raise ValueError(f"Unknown topology {value!r} (expected one of: {choices})") from None
