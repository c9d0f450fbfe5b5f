"""Tests for the selection and scroll window."""

from __future__ import annotations

from nlauncher.selection import SelectionState


class TestSelectionState:
    """Test SelectionState."""

    def test_reset_points_at_first_item(self) -> None:
        state = SelectionState(visible_items=5)
        state.reset(20)
        assert (state.selected_index, state.scroll_offset) == (0, 0)
        assert state.visible_range() == (0, 5)

    def test_move_clamps_at_both_ends(self) -> None:
        state = SelectionState(visible_items=5)
        state.reset(3)

        assert not state.move(-1)
        assert state.selected_index == 0
        assert state.move(10)
        assert state.selected_index == 2
        assert not state.move(1)

    def test_move_on_empty_list(self) -> None:
        state = SelectionState()
        state.reset(0)
        assert not state.move(1)
        assert state.selected_index == 0
        assert state.visible_range() == (0, 0)

    def test_selection_is_centered(self) -> None:
        state = SelectionState(visible_items=10)
        state.reset(50)

        state.move(20)

        assert state.scroll_offset == 15
        start, end = state.visible_range()
        assert start <= state.selected_index < end

    def test_window_clamped_at_end(self) -> None:
        state = SelectionState(visible_items=10)
        state.reset(50)

        state.move(48)

        assert state.visible_range() == (40, 50)

    def test_shrinking_list_clamps_selection(self) -> None:
        state = SelectionState(visible_items=10)
        state.reset(30)
        state.move(25)

        state.update_item_count(4)

        assert state.selected_index == 3
        assert state.visible_range() == (0, 4)

    def test_select_ignores_out_of_range(self) -> None:
        state = SelectionState()
        state.reset(3)
        assert not state.select(5)
        assert state.select(2)
        assert state.selected_index == 2
