"""
Unit tests for the episode runner, training loop and evaluator.
"""
import json
import logging
from pathlib import Path

import pytest
import torch
from surface import BoardConfig, Topology
from sweeper import GameStatus, SurfaceSweeperEnv
from sweeper.logging_setup import setup_logging
from agents import DQNAgent, LogicAgent, RandomAgent
from training import (
    Episode,
    Evaluator,
    Summary,
    Trainer,
    TrainingConfig,
    board_directory,
    play_episode,
)


EMPTY_CUBE = BoardConfig(Topology.CUBE, 0, 0.0, resolution=2)


# ============================================================================
# Episode Tests
# ============================================================================

class TestPlayEpisode:
    """Test a single game driven through the environment."""

    def test_empty_board_won_in_one_move(self) -> None:
        env = SurfaceSweeperEnv(config=EMPTY_CUBE)
        episode = play_episode(env, RandomAgent(env.neighbor_indices, seed=0), max_steps=10)

        assert episode.won
        assert episode.steps == 1
        assert episode.reward == 10.0
        assert episode.cleared == 1.0
        assert episode.result.status == GameStatus.WON
        assert episode.result.total_cells == 24

    def test_step_cap_abandons_game(self) -> None:
        env = SurfaceSweeperEnv(config=BoardConfig(Topology.CUBE, 0, 0.15))
        episode = play_episode(env, LogicAgent(env.neighbor_indices), max_steps=1, seed=0)

        assert episode.steps == 1
        assert (episode.result is None) == (not env.session.is_over)

    def test_all_mine_board_lost_with_nothing_revealed(self) -> None:
        """A board that is all mines is lost on the first click with nothing cleared."""
        env = SurfaceSweeperEnv(config=BoardConfig(Topology.CUBE, 0, 1.0, resolution=2))
        episode = play_episode(env, RandomAgent(env.neighbor_indices, seed=0), max_steps=10)

        assert not episode.won
        assert episode.result.status == GameStatus.LOST
        assert episode.revealed == 0
        assert episode.total_safe == 0
        assert episode.reward == -10.0

    def test_cleared_fraction(self) -> None:
        episode = Episode(reward=3.0, steps=3, revealed=20, total_safe=80, result=None)
        assert episode.cleared == 0.25
        assert not episode.won

    def test_only_dqn_learns(self) -> None:
        env = SurfaceSweeperEnv(config=EMPTY_CUBE)
        with pytest.raises(ValueError):
            play_episode(env, RandomAgent(env.neighbor_indices), max_steps=5, learn=True)


class TestSummary:
    """Test aggregation of episodes."""

    def test_empty_summary(self) -> None:
        summary = Summary.of([])
        assert summary.games == 0
        assert summary.win_rate == 0.0

    def test_means(self) -> None:
        episodes = [
            Episode(reward=1.0, steps=2, revealed=5, total_safe=10, result=None),
            Episode(reward=3.0, steps=4, revealed=10, total_safe=10, result=None),
        ]
        summary = Summary.of(episodes)
        assert summary.mean_reward == 2.0
        assert summary.mean_steps == 3.0
        assert summary.mean_cleared == 0.75
        assert summary.to_dict()["win_rate"] == 0.0


# ============================================================================
# Evaluator Tests
# ============================================================================

class TestEvaluator:
    """Test agent evaluation."""

    def test_empty_board_always_won(self) -> None:
        env = SurfaceSweeperEnv(config=EMPTY_CUBE)
        evaluator = Evaluator(EMPTY_CUBE, games=3)

        summary = evaluator.evaluate(RandomAgent(env.neighbor_indices, seed=0))

        assert summary.games == 3
        assert summary.win_rate == 1.0
        assert summary.mean_steps == 1.0
        assert summary.mean_cleared == 1.0
        assert summary.mean_reward == 10.0

    def test_seeded_layouts_repeat(self) -> None:
        """Two identical agents score identically on the seeded boards."""
        config = BoardConfig(Topology.CUBE, 0, 0.15)
        env = SurfaceSweeperEnv(config=config)
        evaluator = Evaluator(config, games=4, seed=7)

        first = evaluator.evaluate(RandomAgent(env.neighbor_indices, seed=3))
        second = evaluator.evaluate(RandomAgent(env.neighbor_indices, seed=3))
        assert first == second

    def test_compare_returns_every_agent(self, caplog) -> None:
        config = BoardConfig(Topology.SPHERE, 0, 0.1)
        env = SurfaceSweeperEnv(config=config)
        evaluator = Evaluator(config, games=2)

        with caplog.at_level(logging.INFO, logger="training"):
            results = evaluator.compare({
                "Random": RandomAgent(env.neighbor_indices, seed=0),
                "Logic": LogicAgent(env.neighbor_indices),
            })

        assert set(results) == {"Random", "Logic"}
        assert 0.0 <= results["Logic"].win_rate <= 1.0
        assert "Evaluating Logic on sphere / Mini" in caplog.text


# ============================================================================
# Trainer Tests
# ============================================================================

class TestTrainer:
    """Test a short DQN training run."""

    @pytest.fixture
    def config(self, tmp_path) -> TrainingConfig:
        return TrainingConfig(
            board=BoardConfig(Topology.CUBE, 0, 0.15),
            episodes=3,
            max_steps=5,
            eval_every=2,
            eval_games=1,
            save_every=2,
            log_every=1,
            checkpoint_root=str(tmp_path / "checkpoints"),
        )

    def test_training_run(self, config: TrainingConfig, tmp_path) -> None:
        env = SurfaceSweeperEnv(config=config.board)
        agent = DQNAgent(
            env.neighbor_indices, hidden_size=8, batch_size=4, device=torch.device("cpu")
        )
        seen = []
        trainer = Trainer(agent, config, callback=lambda number, episode: seen.append(number))

        report = trainer.train()

        assert report.episodes == 3
        assert report.recent.games == 3
        assert len(report.evaluations) == 1
        assert seen == [1, 2, 3]
        assert agent.steps == sum(episode.steps for episode in trainer.history)

        directory = tmp_path / "checkpoints" / "cube_0"
        assert config.checkpoint_dir == directory
        assert (directory / "latest.pt").exists()
        assert (directory / "checkpoint_2.pt").exists()
        saved = json.loads((directory / "report.json").read_text())
        assert saved["episodes"] == 3
        assert saved["recent"]["games"] == 3

    def test_board_mismatch_raises(self, config: TrainingConfig) -> None:
        agent = DQNAgent([(1,), (0,)], hidden_size=8, device=torch.device("cpu"))
        with pytest.raises(ValueError):
            Trainer(agent, config).train()

    def test_schedule_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="episodes"):
            TrainingConfig(episodes=0)

    def test_board_directory_names(self) -> None:
        assert board_directory(BoardConfig(Topology.SPHERE, 2, 0.2)) == Path("checkpoints/sphere_2")
        assert board_directory(
            BoardConfig(Topology.SPHERE, 0, 0.2, resolution=1), "runs"
        ) == Path("runs/sphere_0_r1")


# ============================================================================
# Logging Tests
# ============================================================================

class TestLoggingSetup:
    """Test the command line logging configuration."""

    def test_package_levels(self, tmp_path) -> None:
        log_file = tmp_path / "logs" / "run.log"
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        setup_logging(logging.DEBUG, str(log_file))
        try:
            assert logging.getLogger("sweeper").level == logging.DEBUG
            assert logging.getLogger().level == logging.WARNING
            logging.getLogger("sweeper.session").debug("hello")
            for handler in logging.getLogger().handlers:
                handler.flush()
            assert "hello" in log_file.read_text()
        finally:
            for handler in list(root.handlers):
                handler.close()
                root.removeHandler(handler)
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)
            for name in ("surface", "sweeper", "agents", "training"):
                logging.getLogger(name).setLevel(logging.NOTSET)
