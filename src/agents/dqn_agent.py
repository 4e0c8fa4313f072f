"""
Graph Q-learning agent for Surface Sweeper.

Cube and sphere boards are cell graphs rather than grids, so the
Q-network convolves over the board's normalized adjacency and scores
every cell with one shared head. A network is tied to the graph it was
built from: checkpoints carry a digest of that graph and refuse to load
onto any other board, even one with the same number of cells.
"""
import hashlib
import logging
from typing import Optional, Sequence, List, Tuple

import numpy as np
import torch
import torch.nn as nn
import torch.nn.functional as F
import torch.optim as optim

from .base_agent import BaseAgent

logger = logging.getLogger(__name__)


def get_device(preferred: Optional[str] = None) -> torch.device:
    """Use the requested device, else CUDA when present, else CPU."""
    if preferred:
        return torch.device(preferred)
    return torch.device("cuda" if torch.cuda.is_available() else "cpu")


# ============================================================================
# Board Graph
# ============================================================================

def normalized_adjacency(neighbor_indices: Sequence[Sequence[int]]) -> torch.Tensor:
    """
    Symmetrically normalized adjacency with self loops, D^-1/2 (A + I) D^-1/2.

    Args:
        neighbor_indices: Per-cell neighbor index lists.

    Returns:
        Dense (N, N) float tensor.
    """
    n_cells = len(neighbor_indices)
    adjacency = np.eye(n_cells, dtype=np.float32)
    for index, neighbors in enumerate(neighbor_indices):
        adjacency[index, list(neighbors)] = 1.0
    inv_sqrt_degree = 1.0 / np.sqrt(adjacency.sum(axis=1))
    adjacency *= inv_sqrt_degree[:, np.newaxis]
    adjacency *= inv_sqrt_degree[np.newaxis, :]
    return torch.from_numpy(adjacency)


def relative_degree(neighbor_indices: Sequence[Sequence[int]]) -> torch.Tensor:
    """Neighbor count of each cell over the board's largest, in (0, 1].

    Separates pentagons from hexagons on a sphere and corner cells from
    the rest on a cube, where a revealed number means a different risk.
    """
    degree = np.array([len(n) for n in neighbor_indices], dtype=np.float32)
    return torch.from_numpy(degree / max(degree.max(), 1.0))


def board_signature(neighbor_indices: Sequence[Sequence[int]]) -> str:
    """Digest of a neighbor graph, stable across runs."""
    digest = hashlib.blake2b(digest_size=16)
    for neighbors in neighbor_indices:
        digest.update(",".join(str(n) for n in sorted(neighbors)).encode())
        digest.update(b";")
    return digest.hexdigest()


# Observation channels per cell: hidden, flagged, revealed, count / 8
N_FEATURES = 4


def observation_features(observation: np.ndarray) -> np.ndarray:
    """
    One-hot cell states plus the scaled count, for one board or a batch.

    Args:
        observation: Cell states of shape (N,) or (batch, N).

    Returns:
        Float32 array of shape observation.shape + (N_FEATURES,).
    """
    features = np.zeros(observation.shape + (N_FEATURES,), dtype=np.float32)
    revealed = observation >= 0
    features[..., 0] = observation == -1
    features[..., 1] = observation == -2
    features[..., 2] = revealed
    features[..., 3] = np.where(revealed, observation, 0) / 8.0
    return features


# ============================================================================
# Q-Network
# ============================================================================

class GraphQNetwork(nn.Module):
    """
    Stacked graph convolutions with a dueling per-cell head.

    Each layer computes relu(norm(W (A_hat H))). The cell degree is
    appended to the observation channels so the network can tell cells
    of different shape apart.
    """

    def __init__(
        self,
        neighbor_indices: Sequence[Sequence[int]],
        hidden_size: int = 64,
        depth: int = 3,
    ) -> None:
        super().__init__()
        if depth < 1:
            raise ValueError("Network needs at least one graph layer")
        self.n_cells = len(neighbor_indices)
        self.register_buffer("adjacency", normalized_adjacency(neighbor_indices))
        self.register_buffer("degree", relative_degree(neighbor_indices))

        widths = [N_FEATURES + 1] + [hidden_size] * depth
        self.layers = nn.ModuleList(
            nn.Linear(width_in, width_out)
            for width_in, width_out in zip(widths, widths[1:])
        )
        self.norms = nn.ModuleList(nn.LayerNorm(hidden_size) for _ in range(depth))
        self.value_head = nn.Linear(hidden_size, 1)
        self.advantage_head = nn.Linear(hidden_size, 1)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Args:
            x: Features of shape (n_cells, N_FEATURES) or
                (batch, n_cells, N_FEATURES).

        Returns:
            Q-values of shape (batch, n_cells).
        """
        if x.dim() == 2:
            x = x.unsqueeze(0)
        degree = self.degree.expand(x.shape[0], -1).unsqueeze(-1)
        h = torch.cat([x, degree], dim=-1)
        for layer, norm in zip(self.layers, self.norms):
            h = F.relu(norm(layer(self.adjacency @ h)))

        value = self.value_head(h.mean(dim=1))
        advantage = self.advantage_head(h).squeeze(-1)
        return value + advantage - advantage.mean(dim=1, keepdim=True)


# ============================================================================
# Transition Memory
# ============================================================================

class TransitionMemory:
    """
    Ring buffer of transitions for one board size.

    Boards are stored as int8 rows in preallocated arrays, so an Extra
    Large sphere costs 2.5 KB per board instead of a Python object per
    transition.
    """

    def __init__(self, capacity: int, n_cells: int) -> None:
        if capacity < 1:
            raise ValueError("Memory capacity must be positive")
        self.capacity = capacity
        self.states = np.zeros((capacity, n_cells), dtype=np.int8)
        self.next_states = np.zeros((capacity, n_cells), dtype=np.int8)
        self.actions = np.zeros(capacity, dtype=np.int64)
        self.rewards = np.zeros(capacity, dtype=np.float32)
        self.done = np.zeros(capacity, dtype=bool)
        self._cursor = 0
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def push(
        self,
        state: np.ndarray,
        action: int,
        reward: float,
        next_state: np.ndarray,
        done: bool,
    ) -> None:
        """Store a transition, overwriting the oldest once full."""
        slot = self._cursor
        self.states[slot] = state
        self.next_states[slot] = next_state
        self.actions[slot] = action
        self.rewards[slot] = reward
        self.done[slot] = done
        self._cursor = (slot + 1) % self.capacity
        self._size = min(self._size + 1, self.capacity)

    def sample(
        self, batch_size: int, rng: np.random.Generator
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Draw distinct stored transitions as (states, actions, rewards, next_states, done)."""
        rows = rng.choice(self._size, size=batch_size, replace=False)
        return (
            self.states[rows],
            self.actions[rows],
            self.rewards[rows],
            self.next_states[rows],
            self.done[rows],
        )


# ============================================================================
# DQN Agent
# ============================================================================

class DQNAgent(BaseAgent):
    """
    Double DQN over the board graph.

    Exploration falls linearly from epsilon_start to epsilon_end over
    exploration_steps updates. Bootstrapped targets only consider cells
    still hidden in the next board, and finished or fully revealed boards
    contribute no future value.
    """

    def __init__(
        self,
        neighbor_indices: Sequence[Sequence[int]],
        hidden_size: int = 64,
        depth: int = 3,
        learning_rate: float = 1e-4,
        gamma: float = 0.99,
        epsilon_start: float = 1.0,
        epsilon_end: float = 0.05,
        exploration_steps: int = 20000,
        memory_size: int = 10000,
        batch_size: int = 64,
        sync_every: int = 1000,
        seed: Optional[int] = None,
        device: Optional[torch.device] = None,
    ) -> None:
        """
        Args:
            neighbor_indices: Per-cell neighbor index lists of the board.
            hidden_size: Width of the cell embeddings.
            depth: Number of graph convolution layers.
            learning_rate: Adam learning rate.
            gamma: Discount factor.
            epsilon_start: Exploration rate before any update.
            epsilon_end: Exploration rate once the schedule is spent.
            exploration_steps: Updates over which epsilon falls.
            memory_size: Transitions kept for replay.
            batch_size: Transitions per learning step.
            sync_every: Updates between target network copies.
            seed: Seed for exploration and replay sampling.
            device: Torch device, CUDA when available if None.
        """
        super().__init__(neighbor_indices)
        self.device = device or get_device()
        self.signature = board_signature(self.neighbors)
        self.gamma = gamma
        self.epsilon_start = epsilon_start
        self.epsilon_end = epsilon_end
        self.exploration_steps = exploration_steps
        self.batch_size = batch_size
        self.sync_every = sync_every
        self.rng = np.random.default_rng(seed)
        if seed is not None:
            torch.manual_seed(seed)

        self.policy_net = GraphQNetwork(self.neighbors, hidden_size, depth).to(self.device)
        self.target_net = GraphQNetwork(self.neighbors, hidden_size, depth).to(self.device)
        self.target_net.load_state_dict(self.policy_net.state_dict())
        self.target_net.eval()
        self.optimizer = optim.Adam(self.policy_net.parameters(), lr=learning_rate)

        self.memory = TransitionMemory(memory_size, self.total_cells)
        self.steps = 0
        self.losses: List[float] = []

    @property
    def epsilon(self) -> float:
        """Current exploration rate."""
        if self.exploration_steps <= 0:
            return self.epsilon_end
        progress = min(1.0, self.steps / self.exploration_steps)
        return self.epsilon_start + progress * (self.epsilon_end - self.epsilon_start)

    def _tensor(self, boards: np.ndarray) -> torch.Tensor:
        return torch.from_numpy(observation_features(boards)).to(self.device)

    def q_values(self, observation: np.ndarray) -> np.ndarray:
        """Policy network scores for every cell of one board."""
        self.check_observation(observation)
        with torch.no_grad():
            return self.policy_net(self._tensor(observation))[0].cpu().numpy()

    def select_action(
        self,
        observation: np.ndarray,
        valid_actions: Optional[np.ndarray] = None,
        training: bool = True,
    ) -> int:
        """
        Pick a cell to reveal, epsilon-greedy while training.

        Args:
            observation: 1D array of cell states.
            valid_actions: Optional mask of valid actions.
            training: Explore with probability epsilon when True.

        Returns:
            Index of the chosen cell.
        """
        candidates = self.candidates(observation, valid_actions)
        if training and self.rng.random() < self.epsilon:
            return int(self.rng.choice(candidates))
        scores = self.q_values(observation)
        return int(candidates[np.argmax(scores[candidates])])

    def update(
        self,
        observation: np.ndarray,
        action: int,
        reward: float,
        next_observation: np.ndarray,
        done: bool,
    ) -> None:
        """Remember a transition, then learn from replay once enough is stored."""
        self.memory.push(observation, action, reward, next_observation, done)
        self.steps += 1
        if self.steps % self.sync_every == 0:
            self.target_net.load_state_dict(self.policy_net.state_dict())
            logger.debug("Target network synced at step %d", self.steps)
        if len(self.memory) >= self.batch_size:
            self._learn()

    def _learn(self) -> None:
        states, actions, rewards, next_states, done = self.memory.sample(
            self.batch_size, self.rng
        )
        actions_t = torch.from_numpy(actions).to(self.device)
        rewards_t = torch.from_numpy(rewards).to(self.device)
        live = torch.from_numpy(~done).to(self.device)
        hidden_next = torch.from_numpy(next_states == -1).to(self.device)

        predicted = self.policy_net(self._tensor(states))
        predicted = predicted.gather(1, actions_t.unsqueeze(1)).squeeze(1)

        with torch.no_grad():
            next_x = self._tensor(next_states)
            online = self.policy_net(next_x).masked_fill(~hidden_next, float("-inf"))
            best = online.argmax(dim=1, keepdim=True)
            future = self.target_net(next_x).gather(1, best).squeeze(1)
            bootstrap = live & hidden_next.any(dim=1)
            future = torch.where(bootstrap, future, torch.zeros_like(future))
            target = rewards_t + self.gamma * future

        loss = F.smooth_l1_loss(predicted, target)
        self.optimizer.zero_grad()
        loss.backward()
        nn.utils.clip_grad_norm_(self.policy_net.parameters(), 1.0)
        self.optimizer.step()
        self.losses.append(loss.item())

    def save(self, path: str) -> None:
        """Write weights, optimizer state and step count for this board."""
        torch.save({
            "board": self.signature,
            "cells": self.total_cells,
            "policy": self.policy_net.state_dict(),
            "target": self.target_net.state_dict(),
            "optimizer": self.optimizer.state_dict(),
            "steps": self.steps,
        }, path)

    def load(self, path: str) -> None:
        """
        Restore a checkpoint written by save.

        Raises:
            ValueError: If the checkpoint was trained on a different board graph.
        """
        checkpoint = torch.load(path, map_location=self.device)
        if checkpoint["board"] != self.signature:
            raise ValueError(
                f"Checkpoint was trained on another board "
                f"({checkpoint['cells']} cells), agent plays {self.total_cells}"
            )
        self.policy_net.load_state_dict(checkpoint["policy"])
        self.target_net.load_state_dict(checkpoint["target"])
        self.optimizer.load_state_dict(checkpoint["optimizer"])
        self.steps = checkpoint["steps"]
