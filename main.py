#!/usr/bin/env python3
"""
Surface Sweeper - Main entry point.

Usage:
    python main.py info [--mode {cube,sphere}] [--size N]
    python main.py play [--mode {cube,sphere}] [--size N] [--density D]
    python main.py train [--episodes N] [--eval]
    python main.py evaluate [--agent {random,logic,dqn}]
    python main.py compare
"""
import argparse
import logging
import sys
from collections import Counter
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

import numpy as np

from surface import BoardConfig, Topology, DIFFICULTY_DENSITIES, DEFAULT_DENSITY, build_surface
from sweeper import GameSession, SurfaceSweeperEnv, mine_count_for, render_ansi
from sweeper.logging_setup import setup_logging
from agents import RandomAgent, LogicAgent, DQNAgent, get_device
from training import Evaluator, Trainer, TrainingConfig, board_directory


def board_config(args: argparse.Namespace) -> BoardConfig:
    """Build the board configuration from common arguments."""
    return BoardConfig(Topology(args.mode), args.size, args.density)


def checkpoint_file(config: BoardConfig) -> Path:
    """Latest DQN checkpoint for a board shape."""
    return board_directory(config) / "latest.pt"


def info(args: argparse.Namespace) -> None:
    """Print geometry statistics for a board preset."""
    config = board_config(args)
    cells = build_surface(config)

    degrees = Counter(cell.degree for cell in cells)
    sides = Counter(cell.sides for cell in cells if cell.boundary)

    print(f"{config.topology.value} / {config.label} "
          f"(resolution {config.resolution_or_preset})")
    print(f"  Cells: {len(cells)}")
    print(f"  Mines at {config.density:.0%}: "
          f"{mine_count_for(len(cells), config.density)}")
    print("  Neighbors per cell:")
    for degree, count in sorted(degrees.items()):
        print(f"    {degree}: {count}")
    if sides:
        print("  Polygon sides:")
        for side, count in sorted(sides.items()):
            print(f"    {side}: {count}")


def play(args: argparse.Namespace) -> None:
    """Play an interactive text game."""
    rng = np.random.default_rng(args.seed)
    session = GameSession(board_config(args), rng=rng)

    print("Commands: r <index> reveal, f <index> flag, n new game, q quit")
    while True:
        print()
        print(render_ansi(session.snapshot()))

        result = session.result()
        if result is not None:
            outcome = "You won!" if result.won else "Game over."
            print(f"{outcome} Time: {result.elapsed:.1f} seconds")

        try:
            line = input("> ").strip().split()
        except EOFError:
            break
        if not line:
            continue

        command = line[0].lower()
        if command == "q":
            break
        if command == "n":
            session.reset()
            continue
        if command not in ("r", "f") or len(line) != 2 or not line[1].isdigit():
            print("Unknown command")
            continue

        index = int(line[1])
        if index >= session.total_cells:
            print(f"Cell index must be below {session.total_cells}")
            continue
        cell_id = session.cell_ids[index]
        if command == "r":
            session.reveal(cell_id)
        else:
            session.toggle_flag(cell_id)


def train(args: argparse.Namespace) -> None:
    """Train a DQN agent."""
    config = board_config(args)
    env = SurfaceSweeperEnv(config=config)

    print(f"Training DQN agent for {args.episodes} episodes "
          f"on {config.topology.value} / {config.label} ({env.n_cells} cells)...")
    print(f"Using device: {get_device()}")

    agent = DQNAgent(env.neighbor_indices)

    trainer = Trainer(agent, TrainingConfig(board=config, episodes=args.episodes))
    report = trainer.train()

    print("\nTraining complete!")
    print(f"Win rate over last {report.recent.games} episodes: {report.recent.win_rate:.1%}")
    print(f"Total episodes: {report.episodes}")
    print(f"Model saved to: {checkpoint_file(config)}")

    if args.eval:
        evaluate_agent(agent, "DQN (trained)", config)


def make_agent(name: str, env: SurfaceSweeperEnv, config: BoardConfig):
    """Create an agent by name, loading the DQN checkpoint if present."""
    if name == "random":
        return RandomAgent(env.neighbor_indices), "Random"
    if name == "logic":
        return LogicAgent(env.neighbor_indices), "Logic"

    agent = DQNAgent(env.neighbor_indices)
    checkpoint = checkpoint_file(config)
    if checkpoint.exists():
        agent.load(str(checkpoint))
        return agent, "DQN (trained)"
    return agent, "DQN (untrained)"


def evaluate(args: argparse.Namespace) -> None:
    """Evaluate a specific agent."""
    config = board_config(args)
    env = SurfaceSweeperEnv(config=config)
    agent, name = make_agent(args.agent, env, config)
    evaluate_agent(agent, name, config, args.games)


def evaluate_agent(
    agent,
    name: str,
    config: BoardConfig,
    games: int = 100,
) -> None:
    """Evaluate a single agent and print results."""
    evaluator = Evaluator(config, games=games)

    print(f"\nEvaluating {name} over {games} games...")
    summary = evaluator.evaluate(agent)

    print(f"Results for {name}:")
    print(f"  Win rate: {summary.win_rate:.1%}")
    print(f"  Avg reward: {summary.mean_reward:.2f}")
    print(f"  Avg steps: {summary.mean_steps:.1f}")
    print(f"  Safe cells cleared: {summary.mean_cleared:.1%}")


def compare(args: argparse.Namespace) -> None:
    """Compare all agents."""
    config = board_config(args)
    env = SurfaceSweeperEnv(config=config)

    agents = {}
    for key in ("random", "logic", "dqn"):
        agent, name = make_agent(key, env, config)
        agents[name] = agent

    evaluator = Evaluator(config, games=args.games)
    results = evaluator.compare(agents)

    print("\n" + "=" * 62)
    print("Agent Comparison Results (same boards for every agent)")
    print("=" * 62)
    print(f"{'Agent':<20} {'Win Rate':<12} {'Cleared':<10} {'Avg Reward':<12} {'Avg Steps':<8}")
    print("-" * 62)

    for name, summary in results.items():
        print(
            f"{name:<20} {summary.win_rate:>10.1%} "
            f"{summary.mean_cleared:>9.1%} "
            f"{summary.mean_reward:>11.2f} "
            f"{summary.mean_steps:>10.1f}"
        )


def parse_density(value: str) -> float:
    """Accept a difficulty name or a fraction."""
    if value in DIFFICULTY_DENSITIES:
        return DIFFICULTY_DENSITIES[value]
    try:
        return float(value)
    except ValueError:
        names = ", ".join(DIFFICULTY_DENSITIES)
        raise argparse.ArgumentTypeError(
            f"density must be a number or one of: {names}"
        ) from None


def add_board_arguments(parser: argparse.ArgumentParser, size: int = 1) -> None:
    """Board shape options shared by every command."""
    parser.add_argument(
        "--mode", choices=[t.value for t in Topology], default="cube",
        help="Board shape",
    )
    parser.add_argument(
        "--size", type=int, default=size, choices=range(5),
        help="Size preset (0=Mini .. 4=Extra Large)",
    )
    parser.add_argument(
        "--density", type=parse_density, default=DEFAULT_DENSITY,
        help="Mine density as a fraction or a difficulty name",
    )


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Surface Sweeper - minesweeper on cubes and spheres"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", default=None, help="Also write logs here")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    info_parser = subparsers.add_parser("info", help="Show board statistics")
    add_board_arguments(info_parser)

    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    add_board_arguments(play_parser)
    play_parser.add_argument("--seed", type=int, default=None, help="Mine layout seed")

    train_parser = subparsers.add_parser("train", help="Train a DQN agent")
    add_board_arguments(train_parser, size=0)
    train_parser.add_argument(
        "--episodes", type=int, default=5000, help="Number of training episodes"
    )
    train_parser.add_argument(
        "--eval", action="store_true", help="Evaluate after training"
    )

    eval_parser = subparsers.add_parser("evaluate", help="Evaluate an agent")
    add_board_arguments(eval_parser, size=0)
    eval_parser.add_argument(
        "--agent",
        choices=["random", "logic", "dqn"],
        default="logic",
        help="Agent to evaluate",
    )
    eval_parser.add_argument(
        "--games", type=int, default=100, help="Number of games to play"
    )

    compare_parser = subparsers.add_parser("compare", help="Compare all agents")
    add_board_arguments(compare_parser, size=0)
    compare_parser.add_argument(
        "--games", type=int, default=100, help="Number of games per agent"
    )

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    commands = {
        "info": info,
        "play": play,
        "train": train,
        "evaluate": evaluate,
        "compare": compare,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return
    command(args)


if __name__ == "__main__":
    main()
