"""
Logic-based agent for Surface Sweeper.

Uses constraint propagation over the board's neighbor graph to make
safe deductions without guessing when possible.
"""
import random
from typing import Optional, Sequence, Set, Tuple, Dict, List, FrozenSet
from dataclasses import dataclass
from collections import defaultdict

import numpy as np

from .base_agent import BaseAgent


# ============================================================================
# Constraint Types
# ============================================================================

@dataclass(frozen=True)
class Constraint:
    """
    A constraint representing: sum of cells in 'cells' == mine_count.

    For example, if a revealed "2" has 3 hidden neighbors and 0 flagged,
    the constraint is: cells={A, B, C}, mine_count=2
    """

    cells: FrozenSet[int]
    mine_count: int


@dataclass
class CellInfo:
    """Information about a revealed cell for constraint analysis."""

    index: int
    neighbor_count: int
    hidden_neighbors: Set[int]
    flagged_neighbors: Set[int]

    @property
    def remaining_mines(self) -> int:
        """Mines still to be found among hidden neighbors."""
        return self.neighbor_count - len(self.flagged_neighbors)


# ============================================================================
# Logic Agent with Constraint Propagation
# ============================================================================

class LogicAgent(BaseAgent):
    """
    Agent that deduces safe cells from revealed counts.

    Strategy:
        1. Build constraints from all revealed numbered cells
        2. Propagate single-constraint rules (all safe / all mines)
        3. Apply subset reduction for advanced deductions
        4. If no certain moves, estimate mine probabilities and pick safest
        5. Open on a cell with the fewest neighbors (cube corners,
           sphere pentagons), which is least likely to touch a mine
    """

    MAX_ITERATIONS = 100

    def __init__(self, neighbor_indices: Sequence[Sequence[int]]) -> None:
        """
        Initialize the logic agent.

        Args:
            neighbor_indices: Per-cell neighbor index lists of the board.
        """
        super().__init__(neighbor_indices)
        self._first_move = True

    def select_action(
        self,
        observation: np.ndarray,
        valid_actions: Optional[np.ndarray] = None,
    ) -> int:
        """
        Select the best action using constraint propagation.

        Args:
            observation: 1D array of cell states.
            valid_actions: Optional mask of valid actions.

        Returns:
            Best action index based on analysis.
        """
        valid_indices = self.candidates(observation, valid_actions)

        if self._first_move:
            self._first_move = False
            return self._select_first_move(valid_indices)

        safe_cells, mine_cells = self._solve_constraints(observation)

        valid_set = set(int(i) for i in valid_indices)
        for index in sorted(safe_cells):
            if index in valid_set:
                return index

        return self._select_by_probability(observation, valid_indices, mine_cells)

    def _select_first_move(self, valid_indices: np.ndarray) -> int:
        """Pick a random cell among those with the fewest neighbors."""
        fewest = min(len(self.neighbors[i]) for i in valid_indices)
        candidates = [int(i) for i in valid_indices if len(self.neighbors[i]) == fewest]
        return random.choice(candidates)

    def _get_cell_info(self, observation: np.ndarray, index: int) -> CellInfo:
        """Get analysis info for a revealed cell."""
        hidden_neighbors: Set[int] = set()
        flagged_neighbors: Set[int] = set()

        for neighbor in self.neighbors[index]:
            value = observation[neighbor]
            if value == -1:
                hidden_neighbors.add(neighbor)
            elif value == -2:
                flagged_neighbors.add(neighbor)

        return CellInfo(
            index=index,
            neighbor_count=int(observation[index]),
            hidden_neighbors=hidden_neighbors,
            flagged_neighbors=flagged_neighbors,
        )

    def _numbered_cells(self, observation: np.ndarray) -> np.ndarray:
        """Indices of revealed cells showing a count between 1 and 8."""
        return np.where((observation >= 1) & (observation <= 8))[0]

    def _build_constraints(self, observation: np.ndarray) -> List[Constraint]:
        """
        Build constraints from revealed numbered cells.

        Each revealed number N with hidden neighbors creates a constraint:
        "exactly (N - flagged_count) of these hidden cells are mines"
        """
        constraints = []

        for index in self._numbered_cells(observation):
            info = self._get_cell_info(observation, int(index))

            if not info.hidden_neighbors:
                continue
            # Wrong flags make a constraint unsatisfiable; ignore it
            if not 0 <= info.remaining_mines <= len(info.hidden_neighbors):
                continue

            constraints.append(Constraint(
                cells=frozenset(info.hidden_neighbors),
                mine_count=info.remaining_mines,
            ))

        return constraints

    def _solve_constraints(
        self, observation: np.ndarray
    ) -> Tuple[Set[int], Set[int]]:
        """
        Propagate constraints to find definite safe and mine cells.

        Returns:
            Tuple of (safe_cells, mine_cells) sets.
        """
        safe_cells: Set[int] = set()
        mine_cells: Set[int] = set()

        constraints = self._build_constraints(observation)

        changed = True
        iterations = 0

        while changed and iterations < self.MAX_ITERATIONS:
            changed = False
            iterations += 1

            reduced = []
            for constraint in constraints:
                remaining_cells = constraint.cells - safe_cells - mine_cells
                remaining_mines = constraint.mine_count - len(constraint.cells & mine_cells)

                if not remaining_cells:
                    continue

                if remaining_mines == 0:
                    safe_cells.update(remaining_cells)
                    changed = True
                    continue

                if remaining_mines == len(remaining_cells):
                    mine_cells.update(remaining_cells)
                    changed = True
                    continue

                reduced.append(Constraint(
                    cells=frozenset(remaining_cells),
                    mine_count=remaining_mines,
                ))

            subset_safe, subset_mines, constraints = self._subset_reduction(reduced)
            new_safe = subset_safe - safe_cells
            new_mines = subset_mines - mine_cells
            if new_safe or new_mines:
                safe_cells.update(new_safe)
                mine_cells.update(new_mines)
                changed = True

        return safe_cells, mine_cells

    def _subset_reduction(
        self, constraints: List[Constraint]
    ) -> Tuple[Set[int], Set[int], List[Constraint]]:
        """
        Apply subset reduction to find additional deductions.

        If constraint A's cells are a subset of constraint B's cells, the
        difference (B - A) holds exactly (B.mines - A.mines) mines.

        Example:
            A: {X, Y} has 1 mine
            B: {X, Y, Z} has 1 mine
            -> Z must be safe
        """
        safe_cells: Set[int] = set()
        mine_cells: Set[int] = set()
        derived: List[Constraint] = []

        for i, first in enumerate(constraints):
            for second in constraints[i + 1:]:
                if first.cells < second.cells:
                    small, large = first, second
                elif second.cells < first.cells:
                    small, large = second, first
                else:
                    continue

                diff_cells = large.cells - small.cells
                diff_mines = large.mine_count - small.mine_count

                if diff_mines == 0:
                    safe_cells.update(diff_cells)
                elif diff_mines == len(diff_cells):
                    mine_cells.update(diff_cells)
                elif 0 < diff_mines < len(diff_cells):
                    derived.append(Constraint(
                        cells=frozenset(diff_cells),
                        mine_count=diff_mines,
                    ))

        # Deduplicate, keeping first occurrence order
        unique = list(dict.fromkeys(constraints + derived))
        return safe_cells, mine_cells, unique

    def _select_by_probability(
        self,
        observation: np.ndarray,
        valid_indices: np.ndarray,
        known_mines: Set[int],
    ) -> int:
        """
        Select cell with lowest estimated mine probability.

        Cells no constraint mentions are treated as a coin flip.
        """
        probabilities = self._estimate_mine_probabilities(observation, known_mines)
        default = 0.5

        best_action = int(valid_indices[0])
        best_prob = 1.0

        for action in valid_indices:
            action = int(action)
            if action in known_mines:
                continue

            prob = probabilities.get(action, default)
            if prob < best_prob:
                best_prob = prob
                best_action = action

        return best_action

    def _estimate_mine_probabilities(
        self,
        observation: np.ndarray,
        known_mines: Set[int],
    ) -> Dict[int, float]:
        """
        Estimate mine probability for each hidden cell.

        Returns:
            Dict mapping cell index to probability of being a mine.
        """
        probabilities: Dict[int, List[float]] = defaultdict(list)

        for index in self._numbered_cells(observation):
            info = self._get_cell_info(observation, int(index))

            if not info.hidden_neighbors:
                continue

            unknown_neighbors = info.hidden_neighbors - known_mines
            remaining = info.remaining_mines - len(info.hidden_neighbors & known_mines)

            if not unknown_neighbors or remaining < 0:
                continue

            prob = remaining / len(unknown_neighbors)
            for neighbor in unknown_neighbors:
                probabilities[neighbor].append(prob)

        # Take maximum (most conservative estimate)
        return {cell: max(probs) for cell, probs in probabilities.items()}

    def reset(self) -> None:
        """Reset for new game."""
        self._first_move = True
