"""Selection index and scroll window over the result list."""

from typing import Tuple


class SelectionState:
    """
    Tracks the selected row and the first visible row.

    The selection is clamped to the list (no wraparound) and the window is
    scrolled so the selected row sits in the middle when possible.
    """

    def __init__(self, visible_items: int = 10):
        self.visible_items = max(1, visible_items)
        self.item_count = 0
        self.selected_index = 0
        self.scroll_offset = 0

    def reset(self, item_count: int) -> None:
        """Point at the first item of a freshly built list."""
        self.item_count = max(0, item_count)
        self.selected_index = 0
        self.scroll_offset = 0

    def update_item_count(self, item_count: int) -> None:
        """Keep the current selection, clamped to a list that changed size."""
        self.item_count = max(0, item_count)
        self.selected_index = self._clamp(self.selected_index)
        self._reveal(self.selected_index)

    def move(self, delta: int) -> bool:
        """
        Move the selection.

        Returns:
            True if the selection changed
        """
        if self.item_count == 0:
            return False
        target = self._clamp(self.selected_index + delta)
        if target == self.selected_index:
            return False
        self.selected_index = target
        self._reveal(target)
        return True

    def select(self, index: int) -> bool:
        """Select an absolute index; out-of-range indices are ignored."""
        if not 0 <= index < self.item_count:
            return False
        self.selected_index = index
        self._reveal(index)
        return True

    def visible_range(self) -> Tuple[int, int]:
        """Return (start, end) of the rows currently in the window."""
        start = self.scroll_offset
        return start, min(start + self.visible_items, self.item_count)

    def _clamp(self, index: int) -> int:
        if self.item_count == 0:
            return 0
        return max(0, min(index, self.item_count - 1))

    def _reveal(self, index: int) -> None:
        half_visible = self.visible_items // 2
        if index < half_visible:
            offset = 0
        elif index + half_visible >= self.item_count:
            offset = max(0, self.item_count - self.visible_items)
        else:
            offset = index - half_visible
        self.scroll_offset = offset
