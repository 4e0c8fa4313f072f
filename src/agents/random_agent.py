"""
Uniform baseline for Surface Sweeper.
"""
from typing import Optional, Sequence

import numpy as np

from .base_agent import BaseAgent


class RandomAgent(BaseAgent):
    """Reveals a hidden cell chosen uniformly, ignoring the numbers shown.

    Its win rate on a board is the floor the logic and DQN agents are
    compared against.
    """

    def __init__(
        self,
        neighbor_indices: Sequence[Sequence[int]],
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(neighbor_indices)
        self.rng = np.random.default_rng(seed)

    def select_action(
        self,
        observation: np.ndarray,
        valid_actions: Optional[np.ndarray] = None,
    ) -> int:
        return int(self.rng.choice(self.candidates(observation, valid_actions)))
