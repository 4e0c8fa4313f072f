#!/usr/bin/env python3
"""Watch the Logic agent play Surface Sweeper."""
import sys
import time
import os
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from surface import BoardConfig, Topology
from sweeper import SurfaceSweeperEnv
from agents import LogicAgent


def clear_screen():
    os.system('cls' if os.name == 'nt' else 'clear')


def demo(delay: float = 0.3, games: int = 5, mode: str = "cube", size: int = 0, density: float = 0.15):
    """Run demo games with visualization."""
    config = BoardConfig(Topology(mode), size, density)
    env = SurfaceSweeperEnv(config=config, render_mode="ansi")
    agent = LogicAgent(env.neighbor_indices)

    print(f"Board: {mode} / {config.label} with {env.n_cells} cells ({100 * density:.0f}% density)")
    print("Starting in 2 seconds...")
    time.sleep(2)

    wins = 0

    for game in range(games):
        obs, _ = env.reset()
        agent.reset()

        clear_screen()
        print(f"=== Game {game + 1}/{games} ===")
        print(f"Wins so far: {wins}\n")
        print(env.render())
        time.sleep(delay)

        done = False
        step = 0

        while not done:
            valid_actions = env.get_action_mask()
            action = agent.select_action(obs, valid_actions)

            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            step += 1

            clear_screen()
            print(f"=== Game {game + 1}/{games} | Step {step} ===")
            print(f"Wins so far: {wins}")
            print(f"Last move: cell {action}\n")
            print(env.render())

            if done:
                if info.get("game_state") == "WON":
                    wins += 1
                    print("\n*** WIN! ***")
                else:
                    print("\n*** LOST (hit mine) ***")

            time.sleep(delay)

        time.sleep(1.0)  # Pause between games

    print(f"\n=== Final: {wins}/{games} wins ({100 * wins / games:.0f}%) ===")


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument("--delay", type=float, default=0.3, help="Delay between moves")
    parser.add_argument("--games", type=int, default=5, help="Number of games")
    parser.add_argument("--mode", choices=["cube", "sphere"], default="cube", help="Board shape")
    parser.add_argument("--size", type=int, default=0, help="Size preset (0-4)")
    parser.add_argument("--density", type=float, default=0.15, help="Mine density")
    args = parser.parse_args()

    demo(delay=args.delay, games=args.games, mode=args.mode, size=args.size, density=args.density)
