"""
Training module for Surface Sweeper agents.

Provides the episode runner, training loop, evaluation and checkpointing.
"""
from .trainer import (
    Episode,
    Evaluator,
    Summary,
    Trainer,
    TrainingConfig,
    TrainingReport,
    board_directory,
    play_episode,
)

__all__ = [
    "Episode",
    "Evaluator",
    "Summary",
    "Trainer",
    "TrainingConfig",
    "TrainingReport",
    "board_directory",
    "play_episode",
]
