"""
Unit tests for Cell class.

Tests cell state management, reveal/flag behavior, observation conversion
and read-only views.
"""
import dataclasses

import pytest
from sweeper import Cell, CellState, CellView


# ============================================================================
# Cell Initialization Tests
# ============================================================================

class TestCellInitialization:
    """Test cell creation and default values."""

    def test_default_cell_is_not_mine(self, hidden_cell: Cell) -> None:
        """New cell should not be a mine by default."""
        assert hidden_cell.is_mine is False

    def test_default_cell_is_hidden(self, hidden_cell: Cell) -> None:
        """New cell should be hidden by default."""
        assert hidden_cell.state == CellState.HIDDEN
        assert hidden_cell.is_hidden is True

    def test_default_cell_has_zero_neighbor_mines(self, hidden_cell: Cell) -> None:
        """New cell should have 0 neighboring mines by default."""
        assert hidden_cell.neighbor_count == 0
        assert hidden_cell.neighbors == ()

    def test_mine_cell_creation(self, mine_cell: Cell) -> None:
        """Can create a cell that is a mine."""
        assert mine_cell.is_mine is True

    def test_cells_compare_by_identity(self) -> None:
        """Two cells with equal fields are still different cells."""
        first = Cell(id="x", position=(0.0, 0.0, 1.0), normal=(0.0, 0.0, 1.0))
        second = Cell(id="x", position=(0.0, 0.0, 1.0), normal=(0.0, 0.0, 1.0))
        assert first != second


# ============================================================================
# Cell Reveal Tests
# ============================================================================

class TestCellReveal:
    """Test cell reveal behavior."""

    def test_reveal_hidden_cell_returns_true(self, hidden_cell: Cell) -> None:
        """Revealing a hidden cell should succeed."""
        assert hidden_cell.reveal() is True

    def test_reveal_changes_state_to_revealed(self, hidden_cell: Cell) -> None:
        """Revealing a cell should change its state."""
        hidden_cell.reveal()
        assert hidden_cell.state == CellState.REVEALED
        assert hidden_cell.is_revealed is True

    def test_reveal_already_revealed_returns_false(self, hidden_cell: Cell) -> None:
        """Revealing an already revealed cell should fail."""
        hidden_cell.reveal()
        assert hidden_cell.reveal() is False

    def test_reveal_flagged_cell_returns_false(self, hidden_cell: Cell) -> None:
        """Cannot reveal a flagged cell."""
        hidden_cell.toggle_flag()
        assert hidden_cell.reveal() is False
        assert hidden_cell.is_flagged is True


# ============================================================================
# Cell Flag Tests
# ============================================================================

class TestCellFlag:
    """Test cell flagging behavior."""

    def test_flag_hidden_cell(self, hidden_cell: Cell) -> None:
        """Flagging a hidden cell should succeed."""
        assert hidden_cell.toggle_flag() is True
        assert hidden_cell.state == CellState.FLAGGED

    def test_unflag_cell(self, hidden_cell: Cell) -> None:
        """Toggling a flagged cell should hide it again."""
        hidden_cell.toggle_flag()
        assert hidden_cell.toggle_flag() is True
        assert hidden_cell.is_hidden is True

    def test_cannot_flag_revealed_cell(self, numbered_cell: Cell) -> None:
        """Revealed cells cannot be flagged."""
        assert numbered_cell.toggle_flag() is False
        assert numbered_cell.is_revealed is True

    def test_flag_does_not_check_mine(self, mine_cell: Cell) -> None:
        """Flags are allowed on mines and non-mines alike."""
        assert mine_cell.toggle_flag() is True
        assert mine_cell.is_flagged is True


# ============================================================================
# Observation Tests
# ============================================================================

class TestCellObservation:
    """Test conversion of cells to agent observations."""

    def test_hidden_observation(self, hidden_cell: Cell) -> None:
        assert hidden_cell.to_observation() == -1

    def test_flagged_observation(self, hidden_cell: Cell) -> None:
        hidden_cell.toggle_flag()
        assert hidden_cell.to_observation() == -2

    def test_revealed_number_observation(self, numbered_cell: Cell) -> None:
        assert numbered_cell.to_observation() == 3

    def test_revealed_mine_observation(self, mine_cell: Cell) -> None:
        mine_cell.reveal()
        assert mine_cell.to_observation() == 9


# ============================================================================
# Cell View Tests
# ============================================================================

class TestCellView:
    """Test read-only cell views."""

    def test_view_copies_state(self, numbered_cell: Cell) -> None:
        """View should carry the cell's current fields."""
        view = numbered_cell.view()
        assert isinstance(view, CellView)
        assert view.id == "n"
        assert view.neighbor_count == 3
        assert view.is_revealed is True

    def test_view_is_frozen(self, hidden_cell: Cell) -> None:
        """Views cannot be modified."""
        view = hidden_cell.view()
        with pytest.raises(dataclasses.FrozenInstanceError):
            view.state = CellState.REVEALED

    def test_view_does_not_follow_cell(self, hidden_cell: Cell) -> None:
        """Later changes to the cell do not leak into an earlier view."""
        view = hidden_cell.view()
        hidden_cell.reveal()
        assert view.is_hidden is True
