"""The kanban board application."""

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, List, Optional

from rich.text import Text
from textual import log
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from ... import utils
from ...api import LinearAPIError, LinearService
from ...board import state as board_state
from ...board.focus import FocusNavigator
from ...board.modes import ViewModeMachine
from ...board.refresher import DataRefresher
from ...board.relations import RelationPipeline
from ...board.state import BoardState, FilterDimension, Notice, ViewMode
from ...config import defaults
from ...models import User
from .base import BaseModalScreen
from .board import BoardView, priority_name
from .detail import DetailView
from .graph import RelationshipGraphView
from .screens import (
    ChoiceScreen,
    CreateIssueScreen,
    FilterForm,
    FilterScreen,
    HelpScreen,
    RelationPromptScreen,
    TeamSelectScreen,
)

TITLES = {
    ViewMode.KANBAN: "Linear CLI - Enhanced Kanban",
    ViewMode.DETAIL: "Issue Details",
    ViewMode.TEAM_SELECT: "Select Team",
    ViewMode.FILTER: "Filter Issues",
    ViewMode.CREATE: "Create Issue",
    ViewMode.HELP: "Help",
    ViewMode.RELATIONSHIP_GRAPH: "Relationship Graph",
}

MODE_SCREENS = {
    ViewMode.TEAM_SELECT: TeamSelectScreen,
    ViewMode.FILTER: FilterScreen,
    ViewMode.CREATE: CreateIssueScreen,
    ViewMode.HELP: HelpScreen,
}

# app actions only reachable from some view modes
ACTION_MODES = {
    "team_select": {ViewMode.KANBAN},
    "filter": {ViewMode.KANBAN},
    "create": {ViewMode.KANBAN},
    "help": {ViewMode.KANBAN},
    "dimension": {ViewMode.KANBAN},
    "clear_assignee": {ViewMode.KANBAN},
    "reload": {ViewMode.KANBAN},
    "set_parent": {ViewMode.DETAIL},
    "remove_parent": {ViewMode.DETAIL},
    "add_blocking": {ViewMode.DETAIL},
    "add_related": {ViewMode.DETAIL},
    "delete_relation": {ViewMode.DETAIL},
    "change_state": {ViewMode.DETAIL},
    "change_assignee": {ViewMode.DETAIL},
    "change_priority": {ViewMode.DETAIL},
    "show_graph": {ViewMode.DETAIL},
}


class BoardStartupError(Exception):
    """The board could not start: no connection or an unknown team."""


@dataclass
class BoardOptions:
    team_id: Optional[str] = None
    team_name: Optional[str] = None
    assignee_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    issue_limit: int = defaults.ISSUE_LIMIT


class BoardApp(App):
    """Kanban board, issue details and relationship graph for Linear."""

    CSS = """
    #status-bar {
        dock: bottom;
        height: 1;
        width: 100%;
        padding: 0 1;
        background: $panel;
        color: $text-muted;
    }
    #status-bar.-error {
        color: $error;
    }
    """

    BINDINGS = [
        Binding("q", "back", "Quit"),
        Binding("escape", "back", "Back", show=False),
        Binding("t", "team_select", "Team"),
        Binding("f", "filter", "Filter"),
        Binding("n", "create", "New"),
        Binding("question_mark", "help", "Help"),
        Binding("1", "dimension('state')", "By state", show=False),
        Binding("2", "dimension('assignee')", "By assignee", show=False),
        Binding("3", "dimension('priority')", "By priority", show=False),
        Binding("4", "dimension('label')", "By label", show=False),
        Binding("c", "clear_assignee", "Clear assignee", show=False),
        Binding("R", "reload", "Reload"),
    ]

    def __init__(
        self,
        service,
        options: Optional[BoardOptions] = None,
        viewer: Optional[User] = None,
    ):
        super().__init__()
        self.service = service
        self.options = options or BoardOptions()
        self.viewer = viewer
        self.state = BoardState()
        self.modes = ViewModeMachine(self.state)
        self.navigator = FocusNavigator(self.state)
        self.refresher = DataRefresher(service, self.state, self.options.issue_limit)
        self.relations = RelationPipeline(service, self.state, self.refresher)
        self._unsubscribe: List[Callable[[], None]] = []

    @property
    def viewer_id(self) -> Optional[str]:
        return self.viewer.id if self.viewer else None

    def compose(self) -> ComposeResult:
        self.board_view = BoardView(self.state, self.navigator, self.modes, id="board")
        self.detail_view = DetailView(self.state, id="detail")
        self.graph_view = RelationshipGraphView(
            self.state, self.service, self.modes, id="graph"
        )
        self.status_bar = Static("", id="status-bar")
        yield Header()
        yield self.board_view
        yield self.detail_view
        yield self.graph_view
        yield self.status_bar
        yield Footer()

    def on_mount(self) -> None:
        options = self.options
        if options.team_id:
            self.state.set_selected_team(options.team_id, options.team_name)
        if options.assignee_id:
            self.state.set_selected_assignee(options.assignee_id)
        if options.start_date or options.end_date:
            self.state.set_date_range(options.start_date, options.end_date)

        for event, handler in (
            (board_state.VIEW_MODE_CHANGED, self._on_view_mode),
            (board_state.NOTICE, self._on_notice),
            (board_state.ERROR_CHANGED, self._on_error),
            (board_state.LOADING_CHANGED, self._update_status),
            (board_state.ISSUES_UPDATED, self._update_status),
            (board_state.FOCUSED_COLUMN_CHANGED, self._update_status),
            (board_state.FOCUSED_ISSUE_CHANGED, self._update_status),
            (board_state.TEAM_SELECTED, self._update_header),
            (board_state.TEAMS_UPDATED, self._update_header),
            (board_state.ASSIGNEE_SELECTED, self._update_header),
            (board_state.USERS_UPDATED, self._update_header),
        ):
            self._unsubscribe.append(self.state.subscribe(event, handler))

        self._on_view_mode(self.state.view_mode)
        self._update_header()
        self.run_remote(self.refresher.refresh_all())

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        self.navigator.close()

    def run_remote(self, coroutine: Awaitable[Any]) -> None:
        """Run a remote operation without blocking the interface."""
        self.run_worker(coroutine, group="linear")

    # state subscribers

    def _on_view_mode(self, mode: ViewMode) -> None:
        self.title = TITLES[mode]
        board, detail, graph = self.board_view, self.detail_view, self.graph_view

        if mode in MODE_SCREENS:
            self.push_screen(MODE_SCREENS[mode](self))
        else:
            while isinstance(self.screen, BaseModalScreen):
                if not self.screen.safe_pop_screen():
                    break
            board.display = mode == ViewMode.KANBAN
            detail.display = mode == ViewMode.DETAIL
            graph.display = mode == ViewMode.RELATIONSHIP_GRAPH

        if mode == ViewMode.KANBAN:
            board.focus()
        elif mode == ViewMode.DETAIL:
            issue_id = self.state.selected_issue_id
            detail.show_issue()
            detail.focus()
            if issue_id and self.state.find_issue(issue_id) is None:
                # reached from the graph: fetched for the detail panel only
                self.run_remote(self.refresher.refresh_issue(issue_id))
        elif mode == ViewMode.RELATIONSHIP_GRAPH:
            graph.load()
            graph.focus()
        self.refresh_bindings()

    def _on_notice(self, notice: Notice) -> None:
        self.notify(notice.message, severity=notice.severity, timeout=3)

    def _on_error(self, error: Optional[str]) -> None:
        if error:
            self.notify(error, severity="error", timeout=3)
        self._update_status()

    def _update_status(self, _payload=None) -> None:
        status = self.status_bar
        state = self.state
        status.set_class(bool(state.error), "-error")
        if state.loading:
            status.update("Loading...")
            return
        if state.error:
            status.update(Text(f"Error: {state.error}"))
            return
        columns = self.navigator.columns()
        if not columns:
            status.update(f"{len(state.issues)} issues")
            return
        column = columns[min(state.focused_column, len(columns) - 1)]
        position = (
            f"Issue {state.focused_issue + 1}/{len(column.issues)}"
            if state.focused_issue >= 0
            else "No issue"
        )
        status.update(
            Text(
                f"{column.name} ({state.focused_column + 1}/{len(columns)}) "
                f"• {position} • {len(state.issues)} issues"
            )
        )

    def _update_header(self, _payload=None) -> None:
        state = self.state
        if state.selected_team_id:
            team = state.find_team(state.selected_team_id)
            name = state.selected_team_name or (team.name if team else state.selected_team_id)
            subtitle = f"Team: {name}"
        else:
            subtitle = "All Teams"
        if state.selected_assignee_id:
            user = state.find_user(state.selected_assignee_id)
            subtitle += f" - Assignee: {user.name if user else state.selected_assignee_id}"
        self.sub_title = subtitle

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        modes = ACTION_MODES.get(action)
        if modes is None:
            return True
        return self.state.view_mode in modes

    # navigation

    def action_back(self) -> None:
        if self.state.view_mode == ViewMode.KANBAN:
            self.exit()
        else:
            self.modes.cancel()

    def action_team_select(self) -> None:
        self.modes.open_team_select()

    def action_filter(self) -> None:
        self.modes.open_filter()

    def action_create(self) -> None:
        if not self.state.selected_team_id:
            self.notify("Select a team before creating an issue", severity="warning")
            return
        self.modes.open_create()

    def action_help(self) -> None:
        self.modes.open_help()

    def action_dimension(self, dimension: str) -> None:
        self.state.set_filter_dimension(FilterDimension(dimension))

    def action_clear_assignee(self) -> None:
        self.notify("Assignee filter cleared")
        self.run_remote(self.refresher.change_assignee(None))

    def action_reload(self) -> None:
        self.run_remote(self.refresher.refresh_all())

    def action_show_graph(self) -> None:
        self.modes.show_graph()

    # callbacks of the mode screens

    def choose_team(self, team_id: Optional[str]) -> None:
        self.run_remote(self.refresher.change_team(team_id))

    def apply_filters(self, form: FilterForm) -> None:
        if form.dimension != self.state.filter_dimension:
            self.state.set_filter_dimension(form.dimension)
        self.run_remote(
            self.refresher.change_filters(
                form.assignee_id, form.state_id, form.start_date, form.end_date
            )
        )

    def create_issue(
        self, title: str, description: Optional[str], priority: Optional[int]
    ) -> None:
        self.run_remote(self.refresher.create_issue(title, description, priority))

    # issue detail actions

    def _detail_issue(self):
        issue = self.state.selected_issue
        if issue is None:
            self.notify("No issue selected", severity="warning")
        return issue

    def _prompt_relation(
        self, title: str, prompt: str, run: Callable[[str], Awaitable[bool]]
    ) -> None:
        suggestions = [issue.identifier for issue in self.state.issues]
        self.push_screen(
            RelationPromptScreen(
                self,
                title,
                prompt,
                lambda identifier: self.run_remote(run(identifier)),
                suggestions=suggestions,
            )
        )

    def action_set_parent(self) -> None:
        issue = self._detail_issue()
        if issue is None:
            return
        self._prompt_relation(
            "Set Parent Issue",
            "Enter parent issue identifier (e.g., ENG-123):",
            lambda identifier: self.relations.set_parent(issue.id, identifier),
        )

    def action_add_blocking(self) -> None:
        issue = self._detail_issue()
        if issue is None:
            return
        self._prompt_relation(
            "Add Blocking Relationship",
            f"Enter the identifier of the issue {issue.identifier} blocks (e.g., ENG-123):",
            lambda identifier: self.relations.add_blocking(issue.id, identifier),
        )

    def action_add_related(self) -> None:
        issue = self._detail_issue()
        if issue is None:
            return
        self._prompt_relation(
            "Add Related Issue",
            "Enter related issue identifier (e.g., ENG-123):",
            lambda identifier: self.relations.add_related(issue.id, identifier),
        )

    def action_remove_parent(self) -> None:
        issue = self._detail_issue()
        if issue is None:
            return
        if issue.parent is None:
            self.notify(f"{issue.identifier} has no parent", severity="warning")
            return
        self.run_remote(self.relations.remove_parent(issue.id))

    def action_delete_relation(self) -> None:
        issue = self._detail_issue()
        if issue is None:
            return
        options = [
            (
                edge.relation_id,
                f"{edge.type.value.replace('_', ' ')} {edge.target.identifier} "
                f"{edge.target.title}",
            )
            for edge in issue.relations
            if edge.relation_id
        ]
        if not options:
            self.notify(f"{issue.identifier} has no relations to delete", severity="warning")
            return
        self.push_screen(
            ChoiceScreen(
                self,
                f"Delete a relation of {issue.identifier}",
                options,
                lambda relation_id: self.run_remote(
                    self.relations.delete_relation(issue.id, relation_id)
                ),
            )
        )

    def action_change_state(self) -> None:
        issue = self._detail_issue()
        if issue is None:
            return
        states = [
            s for s in self.state.workflow_states if s.team_id in (None, issue.team.id)
        ]
        if not states:
            self.notify("No workflow states loaded", severity="warning")
            return
        self.push_screen(
            ChoiceScreen(
                self,
                f"Change state of {issue.identifier}",
                [(s.id, s.name) for s in sorted(states, key=lambda s: s.position)],
                lambda state_id: self.run_remote(
                    self.refresher.update_issue_state(issue.id, state_id)
                ),
                current=issue.state.id,
            )
        )

    def action_change_assignee(self) -> None:
        issue = self._detail_issue()
        if issue is None:
            return
        options = [("", "Unassigned")]
        options.extend((user.id, user.name) for user in self.state.users)
        self.push_screen(
            ChoiceScreen(
                self,
                f"Change assignee of {issue.identifier}",
                options,
                lambda user_id: self.run_remote(
                    self.refresher.update_issue_assignee(issue.id, user_id or None)
                ),
                current=issue.assignee.id if issue.assignee else "",
            )
        )

    def action_change_priority(self) -> None:
        issue = self._detail_issue()
        if issue is None:
            return
        self.push_screen(
            ChoiceScreen(
                self,
                f"Change priority of {issue.identifier}",
                [(str(p), priority_name(p)) for p in (1, 2, 3, 4, 0)],
                lambda value: self.run_remote(
                    self.refresher.update_issue_priority(issue.id, int(value))
                ),
                current=str(issue.priority),
            )
        )


async def show_board(service, options: Optional[BoardOptions] = None) -> None:
    """Check the connection, resolve the startup filters and run the board."""
    options = options or BoardOptions()
    try:
        viewer = await service.test_connection()
    except LinearAPIError as e:
        raise BoardStartupError(f"Could not connect to Linear: {e}") from e

    if options.assignee_id == "me":
        options = replace(options, assignee_id=viewer.id)

    if options.team_name and not options.team_id:
        try:
            teams = await service.get_teams()
        except LinearAPIError as e:
            raise BoardStartupError(f"Could not load teams: {e}") from e
        wanted = options.team_name.lower()
        team = next(
            (t for t in teams if wanted in (t.key.lower(), t.name.lower())), None
        )
        if team is None:
            raise BoardStartupError(f"Team {options.team_name} not found")
        options = replace(options, team_id=team.id, team_name=team.name)

    # the screen belongs to Textual from here on
    service.use_log(log)
    app = BoardApp(service, options, viewer=viewer)
    await app.run_async()


def run_board(config: dict, options: Optional[BoardOptions] = None) -> None:
    """Blocking entry point used by the ``board`` command."""
    service = LinearService.from_config(config, log=utils.log)
    asyncio.run(show_board(service, options))
