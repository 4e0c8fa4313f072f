"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path

import numpy as np

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from surface import BoardConfig, Topology, build_cube, build_sphere
from sweeper import Cell, GameSession


class FakeClock:
    """Deterministic time source advancing one second per call."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


# ============================================================================
# Surface Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def cube4():
    """Cube with 4x4 cells per face (96 cells)."""
    return build_cube(4)


@pytest.fixture(scope="session")
def sphere_levels():
    """Sphere surfaces for subdivision levels 0 through 3."""
    return {level: build_sphere(level) for level in range(4)}


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator for reproducible mine layouts."""
    return np.random.default_rng(1234)


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock for timestamp assertions."""
    return FakeClock()


@pytest.fixture
def cube_session(rng, clock) -> GameSession:
    """Mini cube board (96 cells) at 15% density."""
    return GameSession(BoardConfig(Topology.CUBE, 0, 0.15), rng=rng, clock=clock)


@pytest.fixture
def empty_cube_session(rng, clock) -> GameSession:
    """Mini cube board with no mines for cascade testing."""
    return GameSession(BoardConfig(Topology.CUBE, 0, 0.0), rng=rng, clock=clock)


@pytest.fixture
def tiny_sphere_session(rng, clock) -> GameSession:
    """Level 0 sphere (12 pentagons) with exactly one mine."""
    config = BoardConfig(Topology.SPHERE, 0, 0.1, resolution=0)
    return GameSession(config, rng=rng, clock=clock)


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def hidden_cell() -> Cell:
    """Create a hidden cell."""
    return Cell(id="a", position=(0.0, 0.0, 1.0), normal=(0.0, 0.0, 1.0))


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(id="m", position=(0.0, 0.0, 1.0), normal=(0.0, 0.0, 1.0), is_mine=True)


@pytest.fixture
def numbered_cell() -> Cell:
    """Create a revealed cell with neighboring mines."""
    cell = Cell(id="n", position=(0.0, 0.0, 1.0), normal=(0.0, 0.0, 1.0), neighbor_count=3)
    cell.reveal()
    return cell

