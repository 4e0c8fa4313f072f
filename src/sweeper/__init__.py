"""
Surface Sweeper game module.

Provides core game logic including board generation, mine placement,
the game session state machine and the RL environment.
"""
from .cell import Cell, CellState, CellView
from .generator import CellSet, generate, generate_board
from .mines import place_mines, mine_count_for
from .session import GameSession, GameStatus, GameResult, SessionSnapshot, flood_fill
from .render import render_ansi
from .environment import SurfaceSweeperEnv

__all__ = [
    "Cell",
    "CellState",
    "CellView",
    "CellSet",
    "generate",
    "generate_board",
    "place_mines",
    "mine_count_for",
    "GameSession",
    "GameStatus",
    "GameResult",
    "SessionSnapshot",
    "flood_fill",
    "render_ansi",
    "SurfaceSweeperEnv",
]
