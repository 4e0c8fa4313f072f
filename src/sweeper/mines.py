"""
Mine placement for Surface Sweeper boards.

Picks mine cells uniformly at random and fills in every cell's count of
neighboring mines.
"""
import math
from typing import Dict, Optional

import numpy as np

from .cell import Cell


def mine_count_for(total_cells: int, density: float) -> int:
    """Number of mines for a board: floor(total * density), capped at total."""
    return min(math.floor(total_cells * density), total_cells)


def place_mines(
    cells: Dict[str, Cell],
    density: float,
    rng: Optional[np.random.Generator] = None,
) -> int:
    """
    Mark mines on a board and compute neighbor counts.

    Uses rejection sampling: draw a random cell, keep it if it is not a
    mine yet. Work grows as density approaches 1, which is acceptable at
    the preset board sizes. A partial shuffle would keep it O(mines).

    Args:
        cells: Board cells keyed by id, all initially mine-free.
        density: Fraction of cells to turn into mines.
        rng: Random generator (a fresh unseeded one if None).

    Returns:
        Number of mines placed.
    """
    rng = rng or np.random.default_rng()
    ids = list(cells)
    target = mine_count_for(len(ids), density)

    placed = 0
    while placed < target:
        cell = cells[ids[rng.integers(len(ids))]]
        if not cell.is_mine:
            cell.is_mine = True
            placed += 1

    count_neighbor_mines(cells)
    return placed


def count_neighbor_mines(cells: Dict[str, Cell]) -> None:
    """Set each cell's neighbor_count from the current mine layout."""
    for cell in cells.values():
        cell.neighbor_count = sum(
            1 for neighbor_id in cell.neighbors if cells[neighbor_id].is_mine
        )
