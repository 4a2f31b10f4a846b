"""Board state shared by every part of the board, and its event bus.

``BoardState`` is the single owner of the board data. Fields are exposed
read-only; each named setter stores the new value and publishes an event
before returning, so subscribers always observe changes in call order.
"""

import enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from ..models import Issue, Label, Team, User, WorkflowState

Handler = Callable[[Any], Any]

ISSUES_UPDATED = "issues-updated"
TEAMS_UPDATED = "teams-updated"
STATES_UPDATED = "states-updated"
USERS_UPDATED = "users-updated"
LABELS_UPDATED = "labels-updated"
TEAM_SELECTED = "team-selected"
ISSUE_SELECTED = "issue-selected"
STATE_SELECTED = "state-selected"
ASSIGNEE_SELECTED = "assignee-selected"
VIEW_MODE_CHANGED = "view-mode-changed"
FILTER_DIMENSION_CHANGED = "filter-dimension-changed"
LOADING_CHANGED = "loading-changed"
ERROR_CHANGED = "error-changed"
DATE_RANGE_CHANGED = "date-range-changed"
FOCUSED_COLUMN_CHANGED = "focused-column-changed"
FOCUSED_ISSUE_CHANGED = "focused-issue-changed"
DETAIL_ISSUE_UPDATED = "detail-issue-updated"
NOTICE = "notice"


class ViewMode(str, enum.Enum):
    KANBAN = "kanban"
    DETAIL = "detail"
    TEAM_SELECT = "team_select"
    FILTER = "filter"
    CREATE = "create"
    HELP = "help"
    RELATIONSHIP_GRAPH = "relationship_graph"


class FilterDimension(str, enum.Enum):
    STATE = "state"
    ASSIGNEE = "assignee"
    PRIORITY = "priority"
    LABEL = "label"


class Notice(NamedTuple):
    message: str
    severity: str = "information"


class DateRange(NamedTuple):
    start: Optional[str] = None
    end: Optional[str] = None


class EventBus:
    """Synchronous publish/subscribe keyed by event name."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for ``event``; returns a callable that undoes it."""
        handlers = self._handlers.setdefault(event, [])
        handlers.append(handler)

        def unsubscribe():
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, event: str, payload: Any = None) -> None:
        """Call every handler of ``event`` in subscription order."""
        # a handler may unsubscribe itself while we iterate
        for handler in list(self._handlers.get(event, ())):
            handler(payload)


class BoardState:
    """Mutable aggregate behind the board, mutated only through its setters."""

    def __init__(self, events: Optional[EventBus] = None):
        self.events = events or EventBus()
        self._issues: tuple[Issue, ...] = ()
        self._teams: tuple[Team, ...] = ()
        self._workflow_states: tuple[WorkflowState, ...] = ()
        self._users: tuple[User, ...] = ()
        self._labels: tuple[Label, ...] = ()
        self._selected_team_id: Optional[str] = None
        self._selected_team_name: Optional[str] = None
        self._selected_issue_id: Optional[str] = None
        self._selected_state_id: Optional[str] = None
        self._selected_assignee_id: Optional[str] = None
        self._view_mode = ViewMode.KANBAN
        self._filter_dimension = FilterDimension.STATE
        self._loading = False
        self._error: Optional[str] = None
        self._date_range = DateRange()
        self._focused_column = 0
        self._focused_issue = -1
        # snapshot of a selected issue that is not on the board
        self._detail_issue: Optional[Issue] = None

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        return self.events.subscribe(event, handler)

    # read-only views

    @property
    def issues(self) -> tuple[Issue, ...]:
        return self._issues

    @property
    def teams(self) -> tuple[Team, ...]:
        return self._teams

    @property
    def workflow_states(self) -> tuple[WorkflowState, ...]:
        return self._workflow_states

    @property
    def users(self) -> tuple[User, ...]:
        return self._users

    @property
    def labels(self) -> tuple[Label, ...]:
        return self._labels

    @property
    def selected_team_id(self) -> Optional[str]:
        return self._selected_team_id

    @property
    def selected_team_name(self) -> Optional[str]:
        return self._selected_team_name

    @property
    def selected_issue_id(self) -> Optional[str]:
        return self._selected_issue_id

    @property
    def selected_state_id(self) -> Optional[str]:
        return self._selected_state_id

    @property
    def selected_assignee_id(self) -> Optional[str]:
        return self._selected_assignee_id

    @property
    def view_mode(self) -> ViewMode:
        return self._view_mode

    @property
    def filter_dimension(self) -> FilterDimension:
        return self._filter_dimension

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def date_range(self) -> DateRange:
        return self._date_range

    @property
    def focused_column(self) -> int:
        return self._focused_column

    @property
    def focused_issue(self) -> int:
        return self._focused_issue

    @property
    def detail_issue(self) -> Optional[Issue]:
        return self._detail_issue

    @property
    def selected_issue(self) -> Optional[Issue]:
        if self._selected_issue_id is None:
            return None
        return self.lookup_issue(self._selected_issue_id)

    def find_issue(self, issue_id: str) -> Optional[Issue]:
        return next((i for i in self._issues if i.id == issue_id), None)

    def lookup_issue(self, issue_id: str) -> Optional[Issue]:
        """Board issue, or the off-board detail snapshot with that id."""
        issue = self.find_issue(issue_id)
        if issue is None and self._detail_issue and self._detail_issue.id == issue_id:
            return self._detail_issue
        return issue

    def find_team(self, team_id: str) -> Optional[Team]:
        return next((t for t in self._teams if t.id == team_id), None)

    def find_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self._users if u.id == user_id), None)

    # setters

    def set_issues(self, issues: Sequence[Issue]) -> None:
        self._issues = tuple(issues)
        self.events.publish(ISSUES_UPDATED, self._issues)

    def upsert_issue(self, issue: Issue) -> None:
        """Replace the snapshot with the same id, or append a new one."""
        issues = list(self._issues)
        for index, current in enumerate(issues):
            if current.id == issue.id:
                issues[index] = issue
                break
        else:
            issues.append(issue)
        self.set_issues(issues)

    def set_detail_issue(self, issue: Optional[Issue]) -> None:
        """Keep an issue for the detail panel without putting it on the board."""
        self._detail_issue = issue
        self.events.publish(DETAIL_ISSUE_UPDATED, issue)

    def set_teams(self, teams: Sequence[Team]) -> None:
        self._teams = tuple(teams)
        self.events.publish(TEAMS_UPDATED, self._teams)

    def set_workflow_states(self, states: Sequence[WorkflowState]) -> None:
        self._workflow_states = tuple(states)
        self.events.publish(STATES_UPDATED, self._workflow_states)

    def set_users(self, users: Sequence[User]) -> None:
        self._users = tuple(users)
        self.events.publish(USERS_UPDATED, self._users)

    def set_labels(self, labels: Sequence[Label]) -> None:
        self._labels = tuple(labels)
        self.events.publish(LABELS_UPDATED, self._labels)

    def set_selected_team(
        self, team_id: Optional[str], team_name: Optional[str] = None
    ) -> None:
        self._selected_team_id = team_id
        if team_name is None and team_id is not None:
            team = self.find_team(team_id)
            team_name = team.name if team else None
        self._selected_team_name = team_name
        self.events.publish(TEAM_SELECTED, team_id)

    def set_selected_issue(self, issue_id: Optional[str]) -> None:
        self._selected_issue_id = issue_id
        self.events.publish(ISSUE_SELECTED, issue_id)

    def set_selected_state(self, state_id: Optional[str]) -> None:
        self._selected_state_id = state_id
        self.events.publish(STATE_SELECTED, state_id)

    def set_selected_assignee(self, assignee_id: Optional[str]) -> None:
        self._selected_assignee_id = assignee_id
        self.events.publish(ASSIGNEE_SELECTED, assignee_id)

    def set_view_mode(self, mode: ViewMode) -> None:
        self._view_mode = ViewMode(mode)
        self.events.publish(VIEW_MODE_CHANGED, self._view_mode)

    def set_filter_dimension(self, dimension: FilterDimension) -> None:
        self._filter_dimension = FilterDimension(dimension)
        self.events.publish(FILTER_DIMENSION_CHANGED, self._filter_dimension)

    def set_loading(self, loading: bool) -> None:
        self._loading = bool(loading)
        self.events.publish(LOADING_CHANGED, self._loading)

    def set_error(self, error: Optional[str]) -> None:
        self._error = error
        self.events.publish(ERROR_CHANGED, error)

    def set_date_range(self, start: Optional[str], end: Optional[str]) -> None:
        self._date_range = DateRange(start, end)
        self.events.publish(DATE_RANGE_CHANGED, self._date_range)

    def set_focused_column(self, index: int) -> None:
        self._focused_column = index
        self.events.publish(FOCUSED_COLUMN_CHANGED, index)

    def set_focused_issue(self, index: int) -> None:
        self._focused_issue = index
        self.events.publish(FOCUSED_ISSUE_CHANGED, index)

    def notify(self, message: str, severity: str = "information") -> None:
        """Publish a transient message; no field changes."""
        self.events.publish(NOTICE, Notice(message, severity))
