"""
Training and evaluation loops for Surface Sweeper agents.

Both loops go through play_episode, which drives one game of a
SurfaceSweeperEnv and keeps the session's GameResult for finished games.
Checkpoints and reports are filed per board, under a directory named
after the topology and size.
"""
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence
import json
import logging
import time

import numpy as np

from surface import BoardConfig
from sweeper import GameResult, SurfaceSweeperEnv
from agents.base_agent import BaseAgent
from agents.dqn_agent import DQNAgent


logger = logging.getLogger(__name__)


def board_directory(board: BoardConfig, root: str = "checkpoints") -> Path:
    """Where checkpoints for a board shape live, e.g. checkpoints/sphere_2."""
    name = f"{board.topology.value}_{board.size_index}"
    if board.resolution is not None:
        name += f"_r{board.resolution}"
    return Path(root) / name


# ============================================================================
# Episodes
# ============================================================================

@dataclass(frozen=True)
class Episode:
    """One game played by an agent."""

    reward: float
    steps: int
    revealed: int
    total_safe: int
    result: Optional[GameResult]  # None when the step cap ended the game

    @property
    def won(self) -> bool:
        return self.result is not None and self.result.won

    @property
    def cleared(self) -> float:
        """Fraction of the safe cells uncovered."""
        if self.total_safe == 0:
            return 1.0
        return self.revealed / self.total_safe


def play_episode(
    env: SurfaceSweeperEnv,
    agent: BaseAgent,
    max_steps: int,
    learn: bool = False,
    seed: Optional[int] = None,
) -> Episode:
    """
    Play one game from a fresh board.

    Args:
        env: Environment to reset and step.
        agent: Agent choosing the cells.
        max_steps: Moves allowed before the game is abandoned.
        learn: Feed transitions to the agent's update; DQN agents only.
            Learning agents also explore while playing.
        seed: Mine layout seed, a fresh layout when None.

    Returns:
        The finished or abandoned game.
    """
    if learn and not isinstance(agent, DQNAgent):
        raise ValueError(f"{type(agent).__name__} does not learn")

    observation, info = env.reset(seed=seed)
    agent.reset()
    reward_sum = 0.0
    steps = 0
    while steps < max_steps and not env.session.is_over:
        mask = env.get_action_mask()
        if isinstance(agent, DQNAgent):
            action = agent.select_action(observation, mask, training=learn)
        else:
            action = agent.select_action(observation, mask)
        next_observation, reward, terminated, _, info = env.step(action)
        if learn:
            agent.update(observation, action, float(reward), next_observation, terminated)
        observation = next_observation
        reward_sum += float(reward)
        steps += 1

    return Episode(
        reward=reward_sum,
        steps=steps,
        revealed=info["revealed"],
        total_safe=info["total_safe"],
        result=env.session.result(),
    )


@dataclass(frozen=True)
class Summary:
    """Aggregate of a batch of episodes."""

    games: int = 0
    wins: int = 0
    mean_reward: float = 0.0
    mean_steps: float = 0.0
    mean_cleared: float = 0.0

    @property
    def win_rate(self) -> float:
        return self.wins / self.games if self.games else 0.0

    @classmethod
    def of(cls, episodes: Sequence[Episode]) -> "Summary":
        if not episodes:
            return cls()
        return cls(
            games=len(episodes),
            wins=sum(episode.won for episode in episodes),
            mean_reward=float(np.mean([e.reward for e in episodes])),
            mean_steps=float(np.mean([e.steps for e in episodes])),
            mean_cleared=float(np.mean([e.cleared for e in episodes])),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["win_rate"] = self.win_rate
        return data


# ============================================================================
# Evaluation
# ============================================================================

class Evaluator:
    """
    Plays agents on a fixed board without learning or exploration.

    With a seed, game i of every evaluation uses the same mine layout, so
    agents compared against each other face identical boards.
    """

    def __init__(
        self,
        board: Optional[BoardConfig] = None,
        games: int = 100,
        max_steps: int = 1000,
        seed: Optional[int] = 0,
    ) -> None:
        self.board = board or BoardConfig(size_index=0)
        self.games = games
        self.max_steps = max_steps
        self.seed = seed

    def _layout_seed(self, game: int) -> Optional[int]:
        return None if self.seed is None else self.seed + game

    def evaluate(self, agent: BaseAgent) -> Summary:
        """Play the configured number of games and summarise them."""
        env = SurfaceSweeperEnv(config=self.board)
        episodes = [
            play_episode(env, agent, self.max_steps, seed=self._layout_seed(game))
            for game in range(self.games)
        ]
        return Summary.of(episodes)

    def compare(self, agents: Dict[str, BaseAgent]) -> Dict[str, Summary]:
        """Evaluate each named agent on the same sequence of boards."""
        summaries = {}
        for name, agent in agents.items():
            logger.info("Evaluating %s on %s / %s", name,
                        self.board.topology.value, self.board.label)
            summaries[name] = self.evaluate(agent)
            logger.info("%s: win rate %.1f%%, cleared %.1f%%", name,
                        summaries[name].win_rate * 100,
                        summaries[name].mean_cleared * 100)
        return summaries


# ============================================================================
# Training
# ============================================================================

@dataclass
class TrainingConfig:
    """Schedule for training a DQN agent on one board."""

    board: BoardConfig = field(default_factory=lambda: BoardConfig(size_index=0))
    episodes: int = 5000
    max_steps: int = 200
    eval_every: int = 100
    eval_games: int = 50
    save_every: int = 1000
    log_every: int = 10
    window: int = 100
    checkpoint_root: str = "checkpoints"

    def __post_init__(self) -> None:
        for name in ("episodes", "max_steps", "eval_every", "eval_games",
                     "save_every", "log_every", "window"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

    @property
    def checkpoint_dir(self) -> Path:
        return board_directory(self.board, self.checkpoint_root)


@dataclass
class TrainingReport:
    """What a training run produced."""

    episodes: int
    recent: Summary
    evaluations: List[Summary]
    elapsed: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "episodes": self.episodes,
            "recent": self.recent.to_dict(),
            "evaluations": [summary.to_dict() for summary in self.evaluations],
            "elapsed": self.elapsed,
        }


class Trainer:
    """
    Trains a DQN agent on the board named by its config.

    Every log_every episodes the rolling window is logged, every
    eval_every episodes the agent is evaluated greedily, and every
    save_every episodes a numbered checkpoint is written. A run always
    ends with latest.pt and report.json in the board's directory.
    """

    def __init__(
        self,
        agent: DQNAgent,
        config: TrainingConfig,
        callback: Optional[Callable[[int, Episode], None]] = None,
    ) -> None:
        self.agent = agent
        self.config = config
        self.callback = callback
        self.history: List[Episode] = []
        self.evaluations: List[Summary] = []
        self.evaluator = Evaluator(
            config.board, games=config.eval_games, max_steps=config.max_steps
        )

    def recent(self) -> Summary:
        """Summary of the last window episodes."""
        return Summary.of(self.history[-self.config.window:])

    def train(self) -> TrainingReport:
        """
        Run the configured number of episodes.

        Raises:
            ValueError: If the agent was built for a different board.
        """
        env = SurfaceSweeperEnv(config=self.config.board)
        if env.n_cells != self.agent.total_cells:
            raise ValueError(
                f"Agent plays {self.agent.total_cells} cells, "
                f"{self.config.board.label} {self.config.board.topology.value} "
                f"has {env.n_cells}"
            )
        directory = self.config.checkpoint_dir
        directory.mkdir(parents=True, exist_ok=True)

        logger.info("Training on %s / %s (%d cells) for %d episodes, device %s",
                    self.config.board.topology.value, self.config.board.label,
                    env.n_cells, self.config.episodes, self.agent.device)
        started = time.perf_counter()

        for number in range(1, self.config.episodes + 1):
            episode = play_episode(env, self.agent, self.config.max_steps, learn=True)
            self.history.append(episode)

            if number % self.config.log_every == 0:
                self._log(number, started)
            if number % self.config.eval_every == 0:
                summary = self.evaluator.evaluate(self.agent)
                self.evaluations.append(summary)
                logger.info("Evaluation after %d episodes: win rate %.1f%%",
                            number, summary.win_rate * 100)
            if number % self.config.save_every == 0:
                self.agent.save(str(directory / f"checkpoint_{number}.pt"))
            if self.callback is not None:
                self.callback(number, episode)

        report = TrainingReport(
            episodes=len(self.history),
            recent=self.recent(),
            evaluations=list(self.evaluations),
            elapsed=time.perf_counter() - started,
        )
        self.agent.save(str(directory / "latest.pt"))
        (directory / "report.json").write_text(json.dumps(report.to_dict(), indent=2))
        logger.info("Training finished in %.1fs, saved to %s", report.elapsed, directory)
        return report

    def _log(self, number: int, started: float) -> None:
        window = self.recent()
        rate = number / max(time.perf_counter() - started, 1e-9)
        logger.info(
            "Episode %5d | win %5.1f%% | cleared %5.1f%% | reward %7.2f | "
            "eps %.3f | %.1f ep/s",
            number, window.win_rate * 100, window.mean_cleared * 100,
            window.mean_reward, self.agent.epsilon, rate,
        )
