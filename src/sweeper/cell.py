"""
Cell module for Surface Sweeper.

Represents individual cells on a surface board with their geometry,
their state (hidden/revealed/flagged) and content (mine/number).
"""
from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Optional, Tuple

from surface import SurfaceMeta, Vector


# ============================================================================
# Constants
# ============================================================================

class CellState(Enum):
    """Possible visual states of a cell."""

    HIDDEN = auto()
    REVEALED = auto()
    FLAGGED = auto()


# Observation values shared with the agents.
OBS_HIDDEN = -1
OBS_FLAGGED = -2
OBS_MINE = 9


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass(eq=False)
class Cell:
    """
    Represents a single cell on a surface board.

    Attributes:
        id: Unique opaque identifier.
        position: Center of the cell.
        normal: Outward unit normal.
        neighbors: Ids of adjacent cells (symmetric, fixed).
        meta: Topology-specific location, for cosmetic use only.
        boundary: Outline polygon, counterclockwise around the normal.
        is_mine: Whether this cell contains a mine.
        neighbor_count: Count of mines among the neighbors.
        state: Current visual state (hidden, revealed, or flagged).
    """

    id: str
    position: Vector
    normal: Vector
    neighbors: Tuple[str, ...] = ()
    meta: Optional[SurfaceMeta] = None
    boundary: Optional[Tuple[Vector, ...]] = field(default=None, repr=False)
    is_mine: bool = False
    neighbor_count: int = 0
    state: CellState = CellState.HIDDEN

    def reveal(self) -> bool:
        """
        Reveal this cell.

        Returns:
            True if cell was successfully revealed, False if already
            revealed or flagged.
        """
        if self.state != CellState.HIDDEN:
            return False
        self.state = CellState.REVEALED
        return True

    def toggle_flag(self) -> bool:
        """
        Toggle flag on this cell.

        Returns:
            True if flag was toggled, False if cell is revealed.
        """
        if self.state == CellState.REVEALED:
            return False
        if self.state == CellState.HIDDEN:
            self.state = CellState.FLAGGED
        else:
            self.state = CellState.HIDDEN
        return True

    @property
    def is_hidden(self) -> bool:
        """Check if cell is hidden."""
        return self.state == CellState.HIDDEN

    @property
    def is_revealed(self) -> bool:
        """Check if cell is revealed."""
        return self.state == CellState.REVEALED

    @property
    def is_flagged(self) -> bool:
        """Check if cell is flagged."""
        return self.state == CellState.FLAGGED

    def to_observation(self) -> int:
        """
        Convert cell to observation value for ML agent.

        Returns:
            -1: Hidden cell
            -2: Flagged cell
            0-8: Revealed cell with neighboring mine count
            9: Revealed mine (game over state)
        """
        if self.state == CellState.HIDDEN:
            return OBS_HIDDEN
        if self.state == CellState.FLAGGED:
            return OBS_FLAGGED
        if self.is_mine:
            return OBS_MINE
        return self.neighbor_count

    def view(self) -> "CellView":
        """Immutable copy of the current cell state."""
        return CellView(
            id=self.id,
            position=self.position,
            normal=self.normal,
            neighbors=self.neighbors,
            meta=self.meta,
            boundary=self.boundary,
            is_mine=self.is_mine,
            neighbor_count=self.neighbor_count,
            state=self.state,
        )


@dataclass(frozen=True)
class CellView:
    """Read-only snapshot of a cell handed to renderers and agents."""

    id: str
    position: Vector
    normal: Vector
    neighbors: Tuple[str, ...]
    meta: Optional[SurfaceMeta]
    boundary: Optional[Tuple[Vector, ...]] = field(repr=False)
    is_mine: bool
    neighbor_count: int
    state: CellState

    @property
    def is_hidden(self) -> bool:
        return self.state == CellState.HIDDEN

    @property
    def is_revealed(self) -> bool:
        return self.state == CellState.REVEALED

    @property
    def is_flagged(self) -> bool:
        return self.state == CellState.FLAGGED
