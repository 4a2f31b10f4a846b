"""Which panel of the board is active, and how it may change."""

import enum
from typing import Dict, Optional

from .state import BoardState, ViewMode


class Action(str, enum.Enum):
    SELECT_ISSUE = "select_issue"
    SHOW_GRAPH = "show_graph"
    CANCEL = "cancel"
    CONFIRM = "confirm"
    OPEN_TEAM_SELECT = "open_team_select"
    OPEN_FILTER = "open_filter"
    OPEN_CREATE = "open_create"
    OPEN_HELP = "open_help"


TRANSITIONS: Dict[Action, Dict[ViewMode, ViewMode]] = {
    Action.SELECT_ISSUE: {
        ViewMode.KANBAN: ViewMode.DETAIL,
        ViewMode.RELATIONSHIP_GRAPH: ViewMode.DETAIL,
    },
    Action.SHOW_GRAPH: {ViewMode.DETAIL: ViewMode.RELATIONSHIP_GRAPH},
    Action.CANCEL: {mode: ViewMode.KANBAN for mode in ViewMode if mode != ViewMode.KANBAN},
    Action.CONFIRM: {
        ViewMode.TEAM_SELECT: ViewMode.KANBAN,
        ViewMode.FILTER: ViewMode.KANBAN,
        ViewMode.CREATE: ViewMode.KANBAN,
    },
    Action.OPEN_TEAM_SELECT: {ViewMode.KANBAN: ViewMode.TEAM_SELECT},
    Action.OPEN_FILTER: {ViewMode.KANBAN: ViewMode.FILTER},
    Action.OPEN_CREATE: {ViewMode.KANBAN: ViewMode.CREATE},
    Action.OPEN_HELP: {ViewMode.KANBAN: ViewMode.HELP},
}


class ViewModeMachine:
    """Applies :data:`TRANSITIONS` to the board state.

    Actions not allowed from the current mode change nothing and return
    False.
    """

    def __init__(self, state: BoardState):
        self.state = state

    @property
    def mode(self) -> ViewMode:
        return self.state.view_mode

    def target(self, action: Action) -> Optional[ViewMode]:
        return TRANSITIONS[Action(action)].get(self.state.view_mode)

    def can(self, action: Action) -> bool:
        return self.target(action) is not None

    def dispatch(self, action: Action) -> bool:
        target = self.target(action)
        if target is None:
            return False
        self.state.set_view_mode(target)
        return True

    def select_issue(self, issue_id: str) -> bool:
        if not self.can(Action.SELECT_ISSUE):
            return False
        self.state.set_selected_issue(issue_id)
        return self.dispatch(Action.SELECT_ISSUE)

    def show_graph(self) -> bool:
        if not self.can(Action.SHOW_GRAPH):
            return False
        if self.state.selected_issue_id is None:
            self.state.notify("No issue selected", "warning")
            return False
        return self.dispatch(Action.SHOW_GRAPH)

    def cancel(self) -> bool:
        return self.dispatch(Action.CANCEL)

    def confirm(self) -> bool:
        return self.dispatch(Action.CONFIRM)

    def open_team_select(self) -> bool:
        return self.dispatch(Action.OPEN_TEAM_SELECT)

    def open_filter(self) -> bool:
        return self.dispatch(Action.OPEN_FILTER)

    def open_create(self) -> bool:
        return self.dispatch(Action.OPEN_CREATE)

    def open_help(self) -> bool:
        return self.dispatch(Action.OPEN_HELP)
