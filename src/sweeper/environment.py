"""
Gymnasium environment wrapper for Surface Sweeper.

Provides a standard RL interface for training agents on cube and
sphere boards.
"""
from typing import Any, Dict, List, Optional, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from surface import BoardConfig

from .cell import OBS_FLAGGED, OBS_MINE
from .render import render_ansi
from .session import GameSession, GameStatus


# ============================================================================
# Surface Sweeper Environment
# ============================================================================

class SurfaceSweeperEnv(gym.Env):
    """
    Gymnasium environment for Surface Sweeper.

    Observation:
        1D array with one entry per cell, in generation order:
        - -1 = hidden cell
        - -2 = flagged cell
        - 0-8 = revealed cell with neighboring mine count
        - 9 = revealed mine

    Actions:
        Discrete action space with one action per cell (reveal).

    Rewards:
        - +1 for revealing a safe cell
        - +10 for winning the game
        - -10 for hitting a mine
        - -0.1 for invalid action (already revealed/flagged)
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        config: Optional[BoardConfig] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the Surface Sweeper environment.

        Args:
            config: Board configuration (default: small cube, 15% mines).
            render_mode: How to render the environment.
        """
        super().__init__()

        self.config = config or BoardConfig()
        self.render_mode = render_mode
        self.session = GameSession(self.config, rng=self.np_random)
        self.n_cells = self.session.total_cells

        # Geometry is fixed per config, so index-based neighbors survive resets
        self.neighbor_indices: List[Tuple[int, ...]] = self.session.neighbor_indices()

        self.observation_space = spaces.Box(
            low=OBS_FLAGGED,
            high=OBS_MINE,
            shape=(self.n_cells,),
            dtype=np.int8,
        )
        self.action_space = spaces.Discrete(self.n_cells)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Reset the environment for a new episode.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        self.session = GameSession(self.config, rng=self.np_random)
        self._steps = 0

        return self.session.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action in the environment.

        Args:
            action: Index of the cell to reveal.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        self._steps += 1
        reward = self._calculate_reward(int(action))

        observation = self.session.get_observation()
        terminated = self.session.is_over
        truncated = False

        return observation, reward, terminated, truncated, self._get_info()

    def _calculate_reward(self, action: int) -> float:
        """
        Reveal a cell and score the result.

        Args:
            action: Cell index.

        Returns:
            Reward value.
        """
        cell_id = self.session.cell_ids[action]
        if not self.session.reveal(cell_id):
            return -0.1

        if self.session.status == GameStatus.WON:
            return 10.0
        if self.session.status == GameStatus.LOST:
            return -10.0
        return 1.0

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        return {
            "steps": self._steps,
            "revealed": self.session.revealed_count,
            "total_safe": self.session.total_cells - self.session.mine_count,
            "game_state": self.session.status.name,
            "valid_actions": len(self.session.get_valid_actions()),
        }

    def render(self) -> Optional[str]:
        """Render the current board state."""
        if self.render_mode == "ansi":
            return render_ansi(self.session.snapshot())
        if self.render_mode == "human":
            print(render_ansi(self.session.snapshot()))
        return None

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of valid actions.

        Returns:
            Boolean array where True = valid action.
        """
        mask = np.zeros(self.n_cells, dtype=bool)
        mask[self.session.get_valid_actions()] = True
        return mask
