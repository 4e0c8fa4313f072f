"""
Base agent interface for Surface Sweeper AI.

Defines the abstract interface that all agents must implement.
"""
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple

import numpy as np


# ============================================================================
# Base Agent Interface
# ============================================================================

class BaseAgent(ABC):
    """
    Abstract base class for Surface Sweeper agents.

    Boards are graphs rather than grids, so agents are built from the
    per-cell neighbor index lists of the board they will play.
    """

    def __init__(self, neighbor_indices: Sequence[Sequence[int]]) -> None:
        """
        Initialize the agent.

        Args:
            neighbor_indices: For each cell index, the indices of its
                neighbors (see SurfaceSweeperEnv.neighbor_indices).
        """
        self.neighbors: Tuple[Tuple[int, ...], ...] = tuple(
            tuple(int(n) for n in cell) for cell in neighbor_indices
        )
        self.total_cells = len(self.neighbors)

    @abstractmethod
    def select_action(
        self,
        observation: np.ndarray,
        valid_actions: Optional[np.ndarray] = None,
    ) -> int:
        """
        Select an action based on the current observation.

        Args:
            observation: 1D array of cell states.
            valid_actions: Optional mask of valid actions.

        Returns:
            Index of the cell to reveal.
        """
        pass

    def check_observation(self, observation: np.ndarray) -> None:
        """Ensure the observation belongs to a board of this agent's size."""
        if observation.shape != (self.total_cells,):
            raise ValueError(
                f"Observation shape {observation.shape} does not match "
                f"board of {self.total_cells} cells"
            )

    def candidates(
        self,
        observation: np.ndarray,
        valid_actions: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Indices of the cells the agent may reveal.

        Falls back to the hidden cells of the observation when no mask is
        given.

        Raises:
            ValueError: If the observation has the wrong size or no cell
                is left to reveal.
        """
        self.check_observation(observation)
        if valid_actions is None:
            valid_actions = self.get_valid_actions_from_obs(observation)
        indices = np.flatnonzero(valid_actions)
        if indices.size == 0:
            raise ValueError("No hidden cell left to reveal")
        return indices

    def get_valid_actions_from_obs(self, observation: np.ndarray) -> np.ndarray:
        """
        Get valid actions mask from observation.

        Args:
            observation: 1D array of cell states.

        Returns:
            Boolean mask where True = valid action.
        """
        # Hidden cells (value -1) are valid actions
        return observation == -1

    def reset(self) -> None:
        """Reset agent state for new episode."""
        pass
