"""
Game session module for Surface Sweeper.

Holds the mutable state of one game: the board, counters, timestamps
and the ready -> playing -> won/lost state machine. All changes go
through reveal and toggle_flag; readers get immutable snapshots.
"""
import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

from surface import BoardConfig, Topology

from .cell import CellView
from .generator import CellSet, generate_board


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

class GameStatus(Enum):
    """Possible states of a game session."""

    READY = "ready"
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        """Won and lost games accept no further moves."""
        return self in (GameStatus.WON, GameStatus.LOST)


TRAVERSALS = ("stack", "queue")


# ============================================================================
# Flood Fill
# ============================================================================

def flood_fill(
    cells: CellSet, origin_id: str, traversal: str = "stack"
) -> List[str]:
    """
    Reveal origin and spread across zero-count cells.

    Cells with a nonzero count are revealed but do not spread further;
    flagged and already revealed cells are never touched. The revealed set
    depends only on the board, not on visiting order.

    Args:
        cells: Board cells keyed by id (mutated in place).
        origin_id: Cell to start from.
        traversal: "stack" (depth first) or "queue" (breadth first).

    Returns:
        Ids of the newly revealed cells in reveal order.
    """
    if traversal not in TRAVERSALS:
        raise ValueError(f"Unknown traversal {traversal!r}")

    pending = deque([origin_id])
    queued = {origin_id}
    revealed = []

    while pending:
        cell_id = pending.pop() if traversal == "stack" else pending.popleft()
        cell = cells[cell_id]
        if not cell.reveal():
            continue
        revealed.append(cell_id)

        if cell.neighbor_count != 0 or cell.is_mine:
            continue
        for neighbor_id in cell.neighbors:
            if neighbor_id not in queued and cells[neighbor_id].is_hidden:
                queued.add(neighbor_id)
                pending.append(neighbor_id)

    return revealed


# ============================================================================
# Snapshots
# ============================================================================

@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session after the latest operation."""

    cells: Mapping[str, CellView]
    status: GameStatus
    config: BoardConfig
    total_cells: int
    mine_count: int
    revealed_count: int
    flagged_count: int
    start_time: Optional[float]
    end_time: Optional[float]

    @property
    def topology(self) -> Topology:
        return self.config.topology

    @property
    def size_index(self) -> int:
        return self.config.size_index

    @property
    def density(self) -> float:
        return self.config.density

    @property
    def remaining_mines(self) -> int:
        """Mines minus flags, as a HUD counter would show it."""
        return self.mine_count - self.flagged_count

    def elapsed(self, now: Optional[float] = None) -> float:
        """Seconds played so far, frozen once the game ends."""
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else now
        if end is None:
            end = time.time()
        return end - self.start_time


@dataclass(frozen=True)
class GameResult:
    """Outcome of a finished game, the record a leaderboard would keep."""

    topology: Topology
    size_index: int
    density: float
    status: GameStatus
    total_cells: int
    mine_count: int
    elapsed: float

    @property
    def won(self) -> bool:
        return self.status == GameStatus.WON

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "mode": self.topology.value,
            "size": self.size_index,
            "density": self.density,
            "status": self.status.value,
            "total_cells": self.total_cells,
            "mine_count": self.mine_count,
            "time": self.elapsed,
        }


# ============================================================================
# Game Session
# ============================================================================

class GameSession:
    """
    One game on a cube or sphere board.

    Owns its cells exclusively. Reveal and flag calls that cannot apply
    (finished game, unknown id, revealed or flagged target) are silent
    no-ops returning False.
    """

    def __init__(
        self,
        config: Optional[BoardConfig] = None,
        rng: Optional[np.random.Generator] = None,
        clock: Callable[[], float] = time.time,
        traversal: str = "stack",
    ) -> None:
        """
        Create a session and generate its first board.

        Args:
            config: Board configuration (default: small cube, 15% mines).
            rng: Random generator for mine placement.
            clock: Time source for start and end timestamps.
            traversal: Flood fill order, "stack" or "queue".
        """
        if traversal not in TRAVERSALS:
            raise ValueError(f"Unknown traversal {traversal!r}")
        self._rng = rng or np.random.default_rng()
        self._clock = clock
        self._traversal = traversal
        self._load(config or BoardConfig())

    # ========================================================================
    # Initialization (Low-level)
    # ========================================================================

    def _load(self, config: BoardConfig) -> None:
        """Replace the whole session state with a fresh board."""
        cells = generate_board(config, self._rng)
        self._config = config
        self._cells = cells
        self._order: Tuple[str, ...] = tuple(cells)
        self._index = {cell_id: index for index, cell_id in enumerate(self._order)}
        self._status = GameStatus.READY
        self._total_cells = len(cells)
        self._mine_count = sum(1 for cell in cells.values() if cell.is_mine)
        self._revealed_count = 0
        self._flagged_count = 0
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        logger.debug(
            "Session initialized: mode=%s size=%d density=%.2f cells=%d mines=%d",
            config.topology.value, config.size_index, config.density,
            self._total_cells, self._mine_count,
        )

    def initialize(
        self,
        topology: Union[Topology, str],
        size_index: int,
        density: float,
        resolution: Optional[int] = None,
    ) -> None:
        """
        Start a new game, discarding the current one.

        Raises:
            ValueError: If the parameters do not describe a valid board.
        """
        self._load(BoardConfig(topology, size_index, density, resolution))

    def reset(self) -> None:
        """Start a new game with the current parameters."""
        self._load(self._config)

    # ========================================================================
    # Game Actions (Mid-level)
    # ========================================================================

    def reveal(self, cell_id: str) -> bool:
        """
        Reveal a cell.

        The first reveal starts the clock. A mine loses the game at once;
        a safe cell flood fills across zero-count cells and may win it.

        Args:
            cell_id: Id of the cell to reveal.

        Returns:
            True if any cell was revealed, False for a no-op.
        """
        if not self._can_reveal(cell_id):
            return False

        if self._status == GameStatus.READY:
            self._status = GameStatus.PLAYING
            self._start_time = self._clock()

        cell = self._cells[cell_id]
        if cell.is_mine:
            cell.reveal()
            self._finish(GameStatus.LOST)
            return True

        revealed = flood_fill(self._cells, cell_id, self._traversal)
        self._revealed_count += len(revealed)
        self._check_win_condition()
        return True

    def _can_reveal(self, cell_id: str) -> bool:
        """Check if a cell can be revealed."""
        if self._status.is_terminal:
            return False
        cell = self._cells.get(cell_id)
        return cell is not None and cell.is_hidden

    def _check_win_condition(self) -> None:
        """Win once every safe cell is revealed."""
        if self._revealed_count == self._total_cells - self._mine_count:
            self._finish(GameStatus.WON)

    def _finish(self, status: GameStatus) -> None:
        """Enter a terminal state and stop the clock."""
        self._status = status
        self._end_time = self._clock()
        logger.info(
            "Game %s: mode=%s size=%d revealed=%d/%d",
            status.value, self._config.topology.value, self._config.size_index,
            self._revealed_count, self._total_cells - self._mine_count,
        )

    def toggle_flag(self, cell_id: str) -> bool:
        """
        Toggle the flag on a hidden cell.

        Flags are unlimited and not checked against the mines.

        Returns:
            True if flag was toggled, False otherwise.
        """
        if self._status.is_terminal:
            return False
        cell = self._cells.get(cell_id)
        if cell is None or not cell.toggle_flag():
            return False
        self._flagged_count += 1 if cell.is_flagged else -1
        return True

    # ========================================================================
    # State Accessors (High-level)
    # ========================================================================

    @property
    def status(self) -> GameStatus:
        """Get current game status."""
        return self._status

    @property
    def config(self) -> BoardConfig:
        """Parameters the current board was generated from."""
        return self._config

    @property
    def is_over(self) -> bool:
        """Check if the game has been won or lost."""
        return self._status.is_terminal

    @property
    def total_cells(self) -> int:
        return self._total_cells

    @property
    def mine_count(self) -> int:
        return self._mine_count

    @property
    def revealed_count(self) -> int:
        return self._revealed_count

    @property
    def flagged_count(self) -> int:
        return self._flagged_count

    @property
    def cell_ids(self) -> Tuple[str, ...]:
        """Cell ids in generation order."""
        return self._order

    def index_of(self, cell_id: str) -> int:
        """Position of a cell in generation order."""
        return self._index[cell_id]

    def get_cell(self, cell_id: str) -> Optional[CellView]:
        """Get a read-only view of a cell, or None if the id is unknown."""
        cell = self._cells.get(cell_id)
        return cell.view() if cell is not None else None

    def snapshot(self) -> SessionSnapshot:
        """Capture the full session state as an immutable snapshot."""
        return SessionSnapshot(
            cells=MappingProxyType(
                {cell_id: cell.view() for cell_id, cell in self._cells.items()}
            ),
            status=self._status,
            config=self._config,
            total_cells=self._total_cells,
            mine_count=self._mine_count,
            revealed_count=self._revealed_count,
            flagged_count=self._flagged_count,
            start_time=self._start_time,
            end_time=self._end_time,
        )

    def result(self) -> Optional[GameResult]:
        """Outcome record of a finished game, None while still running."""
        if not self._status.is_terminal:
            return None
        return GameResult(
            topology=self._config.topology,
            size_index=self._config.size_index,
            density=self._config.density,
            status=self._status,
            total_cells=self._total_cells,
            mine_count=self._mine_count,
            elapsed=self._end_time - self._start_time,
        )

    def get_observation(self) -> np.ndarray:
        """
        Get board state as a flat numpy array for ML agents.

        Returns:
            1D int8 array in generation order where:
                -1 = hidden
                -2 = flagged
                0-8 = revealed with neighboring mine count
                9 = revealed mine
        """
        return np.fromiter(
            (self._cells[cell_id].to_observation() for cell_id in self._order),
            dtype=np.int8,
            count=self._total_cells,
        )

    def get_valid_actions(self) -> List[int]:
        """Indices of hidden cells, the cells that can be revealed."""
        return [
            index for index, cell_id in enumerate(self._order)
            if self._cells[cell_id].is_hidden
        ]

    def neighbor_indices(self) -> List[Tuple[int, ...]]:
        """Neighbor lists by generation index instead of id."""
        return [
            tuple(self._index[n] for n in self._cells[cell_id].neighbors)
            for cell_id in self._order
        ]
