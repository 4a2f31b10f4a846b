"""Keyboard cursor over the grouped board."""

from typing import List, Optional

from ..models import Issue
from . import state as board_state
from .grouping import ColumnGroup, group_issues


class FocusNavigator:
    """Keeps ``(focused_column, focused_issue)`` within the board's bounds.

    The column index stays in ``[0, columns)`` whenever a column exists and
    the row index in ``[0, len(column))``, or ``-1`` for an empty column.
    All writes go through the state setters.
    """

    def __init__(self, state: board_state.BoardState):
        self.state = state
        self._unsubscribe = [
            state.subscribe(board_state.FILTER_DIMENSION_CHANGED, self._on_dimension),
            state.subscribe(board_state.ISSUES_UPDATED, self._on_data),
            state.subscribe(board_state.STATES_UPDATED, self._on_data),
        ]

    def close(self):
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    def columns(self) -> List[ColumnGroup]:
        """Columns as currently grouped; none at all without issues."""
        if not self.state.issues:
            return []
        return list(
            group_issues(
                self.state.issues,
                self.state.filter_dimension,
                self.state.workflow_states,
            ).values()
        )

    def focused_issue(self) -> Optional[Issue]:
        columns = self.columns()
        column, row = self.state.focused_column, self.state.focused_issue
        if not columns or row < 0 or column >= len(columns):
            return None
        issues = columns[column].issues
        return issues[row] if row < len(issues) else None

    def move_left(self):
        self._move_column(-1)

    def move_right(self):
        self._move_column(1)

    def move_up(self):
        columns = self.columns()
        if not columns:
            return
        count = self._column_size(columns)
        row = max(self.state.focused_issue - 1, 0) if count else -1
        self._set_row(row)

    def move_down(self):
        columns = self.columns()
        if not columns:
            return
        count = self._column_size(columns)
        row = min(self.state.focused_issue + 1, count - 1)
        self._set_row(row)

    def reset(self):
        """Jump to the first column and its first card, if any."""
        columns = self.columns()
        self._set_column(0)
        self._set_row(0 if columns and columns[0].issues else -1)

    def clamp(self):
        """Pull the cursor back inside the board after the data changed."""
        columns = self.columns()
        if not columns:
            self._set_column(0)
            self._set_row(-1)
            return
        column = min(max(self.state.focused_column, 0), len(columns) - 1)
        self._set_column(column)
        self._set_row(self._clamp_row(self.state.focused_issue, columns[column]))

    def _move_column(self, delta: int):
        columns = self.columns()
        if not columns:
            return
        column = min(max(self.state.focused_column + delta, 0), len(columns) - 1)
        self._set_column(column)
        self._set_row(self._clamp_row(self.state.focused_issue, columns[column]))

    @staticmethod
    def _clamp_row(row: int, column: ColumnGroup) -> int:
        count = len(column.issues)
        if count == 0:
            return -1
        return min(max(row, 0), count - 1)

    def _set_column(self, index: int):
        if index != self.state.focused_column:
            self.state.set_focused_column(index)

    def _set_row(self, index: int):
        if index != self.state.focused_issue:
            self.state.set_focused_issue(index)

    def _on_dimension(self, _dimension):
        self.reset()

    def _on_data(self, _payload):
        self.clamp()

    def _column_size(self, columns: List[ColumnGroup]) -> int:
        return len(columns[min(self.state.focused_column, len(columns) - 1)].issues)
