"""Kanban columns and issue cards."""

from typing import Callable, List, Optional

from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Static

from ...board import state as board_state
from ...board.focus import FocusNavigator
from ...board.grouping import ColumnGroup
from ...board.modes import ViewModeMachine
from ...board.state import BoardState, FilterDimension
from ...config import defaults
from ...models import Issue
from ...utils import truncate

NO_ISSUES = "No issues found. Press t to pick a team or f to change filters."
MAX_CARD_LABELS = 3


def column_width(total_width: int, columns: int) -> int:
    """Even share of ``total_width`` per column, never under the minimum."""
    if columns <= 0:
        return max(total_width, 0)
    return max(total_width // columns, defaults.MIN_COLUMN_WIDTH)


def priority_name(priority: int) -> str:
    return defaults.PRIORITY_NAMES.get(priority, defaults.PRIORITY_NAMES[0])


def card_lines(issue: Issue, dimension: FilterDimension, width: int) -> List[str]:
    """Text lines of a card; secondary fields depend on the grouping."""
    assignee = issue.assignee.name if issue.assignee else "Unassigned"
    lines = [
        f"{issue.identifier}: {truncate(issue.title, max(width - 10, 3))}",
        truncate(f"Assignee: {assignee}", width),
    ]
    priority = f"Priority: {priority_name(issue.priority)}"
    state = truncate(f"State: {issue.state.name}", width)
    labels = ", ".join(label.name for label in issue.labels[:MAX_CARD_LABELS])
    labels_line = truncate(f"Labels: {labels}", width) if labels else None

    dimension = FilterDimension(dimension)
    if dimension == FilterDimension.STATE:
        lines.append(priority)
        if labels_line:
            lines.append(labels_line)
    elif dimension == FilterDimension.PRIORITY:
        lines.append(state)
        if labels_line:
            lines.append(labels_line)
    else:
        lines.extend([state, priority])
    return lines


class IssueCard(Static):
    """A single issue on the board."""

    class Selected(Message):
        def __init__(self, issue_id: str):
            self.issue_id = issue_id
            super().__init__()

    def __init__(self, issue: Issue, dimension: FilterDimension, width: int, focused: bool):
        super().__init__(
            Text("\n".join(card_lines(issue, dimension, width - 4))),
            classes="issue-card -focused" if focused else "issue-card",
        )
        self.issue_id = issue.id
        self.styles.border_left = (
            "thick",
            defaults.PRIORITY_COLORS.get(issue.priority, defaults.PRIORITY_COLORS[0]),
        )

    def on_click(self, event: events.Click) -> None:
        event.stop()
        self.post_message(self.Selected(self.issue_id))


class BoardView(Widget, can_focus=True):
    """Columns of issue cards, rebuilt from scratch whenever the board changes."""

    DEFAULT_CSS = """
    BoardView {
        layout: horizontal;
        height: 1fr;
        overflow-x: auto;
        overflow-y: hidden;
    }
    BoardView .board-column {
        height: 100%;
        overflow-y: auto;
        border-right: solid $panel;
    }
    BoardView .column-header {
        width: 100%;
        text-style: bold;
        content-align: center middle;
        background: $boost;
    }
    BoardView .column-header.-focused {
        text-style: bold reverse;
    }
    BoardView .issue-card {
        width: 100%;
        height: auto;
        padding: 0 1;
        margin: 1 0 0 0;
    }
    BoardView .issue-card.-focused {
        text-style: reverse;
    }
    BoardView .column-empty, BoardView .board-placeholder {
        width: 100%;
        color: $text-muted;
        content-align: center middle;
    }
    BoardView .board-placeholder {
        height: 100%;
    }
    """

    BINDINGS = [
        Binding("left", "focus_left", "Left", show=False),
        Binding("right", "focus_right", "Right", show=False),
        Binding("up", "focus_up", "Up", show=False),
        Binding("down", "focus_down", "Down", show=False),
        Binding("enter", "select_issue", "Details"),
    ]

    def __init__(
        self,
        state: BoardState,
        navigator: FocusNavigator,
        modes: ViewModeMachine,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.state = state
        self.navigator = navigator
        self.modes = modes
        self.column_count = 0
        self._render_pending = False
        self._unsubscribe: List[Callable[[], None]] = []

    def compose(self) -> ComposeResult:
        yield from self.build_columns()

    def on_mount(self) -> None:
        for event in (
            board_state.ISSUES_UPDATED,
            board_state.STATES_UPDATED,
            board_state.FILTER_DIMENSION_CHANGED,
            board_state.FOCUSED_COLUMN_CHANGED,
            board_state.FOCUSED_ISSUE_CHANGED,
        ):
            self._unsubscribe.append(self.state.subscribe(event, self.request_render))

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    def on_resize(self, event: events.Resize) -> None:
        self.request_render()

    def request_render(self, _payload=None) -> None:
        """Schedule one rebuild, however many changes arrive before it runs."""
        if self._render_pending or not self.is_mounted:
            return
        self._render_pending = True
        self.call_later(self.rebuild)

    async def rebuild(self) -> None:
        self._render_pending = False
        # old columns are fully gone before the new ones are mounted
        await self.remove_children()
        await self.mount_all(self.build_columns())
        for card in self.query(".issue-card.-focused"):
            card.scroll_visible(animate=False)

    def build_columns(self) -> List[Widget]:
        columns = self.navigator.columns()
        self.column_count = len(columns)
        if not columns:
            return [Static(NO_ISSUES, classes="board-placeholder")]

        width = column_width(self.size.width, len(columns))
        return [
            self._build_column(group, index, width)
            for index, group in enumerate(columns)
        ]

    def _build_column(self, group: ColumnGroup, index: int, width: int) -> Widget:
        focused_column = index == self.state.focused_column
        header = Static(
            Text(truncate(f"{group.name} ({len(group.issues)})", width - 2)),
            classes="column-header -focused" if focused_column else "column-header",
        )
        if group.color:
            header.styles.color = group.color

        children: List[Widget] = [header]
        if not group.issues:
            children.append(Static("No issues", classes="column-empty"))
        for row, issue in enumerate(group.issues):
            focused = focused_column and row == self.state.focused_issue
            children.append(
                IssueCard(issue, self.state.filter_dimension, width, focused)
            )

        column = Vertical(*children, classes="board-column")
        column.styles.width = width
        return column

    def focused_issue(self) -> Optional[Issue]:
        return self.navigator.focused_issue()

    def action_focus_left(self) -> None:
        self.navigator.move_left()

    def action_focus_right(self) -> None:
        self.navigator.move_right()

    def action_focus_up(self) -> None:
        self.navigator.move_up()

    def action_focus_down(self) -> None:
        self.navigator.move_down()

    def action_select_issue(self) -> None:
        issue = self.navigator.focused_issue()
        if issue is None:
            self.notify("No issue under the cursor", severity="warning")
            return
        self.modes.select_issue(issue.id)

    def on_issue_card_selected(self, message: IssueCard.Selected) -> None:
        self.modes.select_issue(message.issue_id)
