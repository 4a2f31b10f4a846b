"""Modal screens: team selection, filters, issue creation, help and prompts."""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.suggester import SuggestFromList
from textual.widgets import DataTable, Label, Markdown

from ...board.state import FilterDimension
from ...config import defaults
from ...models import User, WorkflowState
from .base import BaseModalScreen, ModeScreen
from .widgets import IdentifierInput, ReadlineInput

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

PRIORITY_ALIASES = {
    "urgent": 1,
    "high": 2,
    "medium": 3,
    "low": 4,
    "none": 0,
    "no priority": 0,
}

HELP_TEXT = """\
# Keyboard shortcuts

## Board

| Key | Action |
|---|---|
| ←/→/↑/↓ | Move between columns and cards |
| Enter | Open the focused issue |
| t | Select team |
| f | Filters |
| n | New issue |
| 1 / 2 / 3 / 4 | Group by state / assignee / priority / label |
| c | Clear the assignee filter |
| R | Reload everything |
| ? | This help |
| q / Escape | Quit |

## Issue details

| Key | Action |
|---|---|
| p | Set parent issue |
| u | Remove parent issue |
| b | Add an issue this one blocks |
| r | Add a related issue |
| x | Delete a relation |
| s / a / P | Change state / assignee / priority |
| g | Relationship graph |
| Escape | Back to the board |

## Relationship graph

| Key | Action |
|---|---|
| Tab / arrows | Highlight the next related issue |
| Enter / click | Open the highlighted issue |
| r | Refresh relationships |
| Escape | Back to the board |
"""

MODAL_CSS = """
.modal-container {
    dock: bottom;
    padding: 1;
    width: 100%;
    height: auto;
    max-height: 80%;
    background: $surface;
    border-top: thick $primary;
    margin: 0;
}

.modal-title {
    text-align: center;
    text-style: bold;
    width: 100%;
    height: 1;
    content-align: center middle;
}

.modal-table {
    width: 100%;
    height: auto;
    max-height: 15;
}

.modal-help {
    text-align: center;
    color: $text-muted;
    width: 100%;
}

.modal-field {
    color: $text-muted;
    margin-top: 1;
}
"""


class ChoiceScreen(BaseModalScreen):
    """Pick one option from a table."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    CSS = MODAL_CSS

    def __init__(
        self,
        parent,
        title: str,
        options: Sequence[Tuple[str, str]],
        on_choose: Callable[[str], Any],
        current: Optional[str] = None,
    ):
        super().__init__(parent)
        self.title_text = title
        self.options = list(options)
        self.on_choose = on_choose
        self.current = current

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal-container"):
            yield Label(self.title_text, classes="modal-title")
            table = DataTable(classes="modal-table")
            table.cursor_type = "row"
            table.add_columns("Name")
            for key, name in self.options:
                marker = "● " if key == self.current else "  "
                table.add_row(f"{marker}{name}", key=key)
            yield table
            yield Label("Press Enter to select, Escape to cancel", classes="modal-help")

    def on_mount(self) -> None:
        keys = [key for key, _ in self.options]
        if self.current in keys:
            self.query_one(DataTable).move_cursor(row=keys.index(self.current))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.choose(str(event.row_key.value))

    def choose(self, key: str) -> None:
        self.finish()
        self.on_choose(key)


class TeamSelectScreen(ModeScreen, ChoiceScreen):
    """Switch the board to another team."""

    def __init__(self, parent):
        state = parent.state
        options = [("", "All Teams")]
        options.extend(
            (team.id, f"{team.name} ({team.key})" if team.key else team.name)
            for team in state.teams
        )
        super().__init__(
            parent,
            "Select Team",
            options,
            lambda key: parent.choose_team(key or None),
            current=state.selected_team_id or "",
        )


@dataclass
class FilterForm:
    dimension: FilterDimension
    assignee_id: Optional[str] = None
    state_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


def parse_filter_form(
    dimension: str,
    assignee: str,
    state_name: str,
    start_date: str,
    end_date: str,
    users: Sequence[User] = (),
    states: Sequence[WorkflowState] = (),
    viewer_id: Optional[str] = None,
) -> FilterForm:
    """Validate the filter screen's fields; raises ValueError with a message."""
    dimension = (dimension or "state").strip().lower()
    try:
        parsed_dimension = FilterDimension(dimension)
    except ValueError as e:
        choices = ", ".join(d.value for d in FilterDimension)
        raise ValueError(f"Unknown grouping '{dimension}', use one of: {choices}") from e

    form = FilterForm(parsed_dimension)

    assignee = (assignee or "").strip()
    if assignee.lower() == "me":
        if not viewer_id:
            raise ValueError("Current user is unknown")
        form.assignee_id = viewer_id
    elif assignee:
        wanted = assignee.lower()
        user = next(
            (
                u
                for u in users
                if u.name.lower() == wanted or (u.email or "").lower() == wanted
            ),
            None,
        )
        if user is None:
            raise ValueError(f"No user named '{assignee}'")
        form.assignee_id = user.id

    state_name = (state_name or "").strip()
    if state_name:
        match = next((s for s in states if s.name.lower() == state_name.lower()), None)
        if match is None:
            raise ValueError(f"No workflow state named '{state_name}'")
        form.state_id = match.id

    for field_name, value in (("start_date", start_date), ("end_date", end_date)):
        value = (value or "").strip()
        if value and not DATE_RE.match(value):
            raise ValueError(f"Dates must look like YYYY-MM-DD, got '{value}'")
        setattr(form, field_name, value or None)
    if form.start_date and form.end_date and form.start_date > form.end_date:
        raise ValueError("Start date is after end date")
    return form


def parse_priority(text: str) -> Optional[int]:
    """Priority number from a name or digit; None when left empty."""
    text = (text or "").strip().lower()
    if not text:
        return None
    if text.isdigit() and int(text) in defaults.PRIORITY_NAMES:
        return int(text)
    if text in PRIORITY_ALIASES:
        return PRIORITY_ALIASES[text]
    raise ValueError(f"Unknown priority '{text}'")


class FilterScreen(ModeScreen):
    """Grouping dimension, assignee, state and creation date range."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    CSS = MODAL_CSS

    def compose(self) -> ComposeResult:
        state = self._parent.state
        assignee = state.find_user(state.selected_assignee_id or "")
        if state.selected_assignee_id and state.selected_assignee_id == self._parent.viewer_id:
            assignee_value = "me"
        else:
            assignee_value = assignee.name if assignee else ""
        workflow_state = next(
            (s for s in state.workflow_states if s.id == state.selected_state_id), None
        )

        with Vertical(classes="modal-container"):
            yield Label("Filter Issues", classes="modal-title")
            yield Label("Group by (state, assignee, priority, label)", classes="modal-field")
            yield ReadlineInput(
                value=state.filter_dimension.value,
                id="filter-dimension",
                suggester=SuggestFromList(
                    [d.value for d in FilterDimension], case_sensitive=False
                ),
            )
            yield Label("Assignee (name, email or me; empty for anyone)", classes="modal-field")
            yield ReadlineInput(
                value=assignee_value,
                id="filter-assignee",
                suggester=SuggestFromList(
                    ["me", *(u.name for u in state.users)], case_sensitive=False
                ),
            )
            yield Label("Workflow state (empty for all)", classes="modal-field")
            yield ReadlineInput(
                value=workflow_state.name if workflow_state else "",
                id="filter-state",
                suggester=SuggestFromList(
                    [s.name for s in state.workflow_states], case_sensitive=False
                ),
            )
            yield Label("Created after (YYYY-MM-DD)", classes="modal-field")
            yield ReadlineInput(value=state.date_range.start or "", id="filter-start")
            yield Label("Created before (YYYY-MM-DD)", classes="modal-field")
            yield ReadlineInput(value=state.date_range.end or "", id="filter-end")
            yield Label("Press Enter to apply, Escape to cancel", classes="modal-help")

    def _value(self, widget_id: str) -> str:
        return self.query_one(f"#{widget_id}", ReadlineInput).value

    def on_input_submitted(self, event: ReadlineInput.Submitted) -> None:
        self.action_apply()

    def action_apply(self) -> None:
        state = self._parent.state
        try:
            form = parse_filter_form(
                self._value("filter-dimension"),
                self._value("filter-assignee"),
                self._value("filter-state"),
                self._value("filter-start"),
                self._value("filter-end"),
                users=state.users,
                states=state.workflow_states,
                viewer_id=self._parent.viewer_id,
            )
        except ValueError as e:
            self._parent.notify(str(e), severity="warning")
            return
        self.finish()
        self._parent.apply_filters(form)


class CreateIssueScreen(ModeScreen):
    """Create an issue in the selected team."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    CSS = MODAL_CSS

    def compose(self) -> ComposeResult:
        team = self._parent.state.selected_team_name or "no team selected"
        with Vertical(classes="modal-container"):
            yield Label(f"Create Issue ({team})", classes="modal-title")
            yield Label("Title", classes="modal-field")
            yield ReadlineInput(id="create-title", placeholder="Issue title")
            yield Label("Description", classes="modal-field")
            yield ReadlineInput(id="create-description", placeholder="Optional")
            yield Label("Priority (urgent, high, medium, low, none)", classes="modal-field")
            yield ReadlineInput(
                id="create-priority",
                placeholder="Optional",
                suggester=SuggestFromList(list(PRIORITY_ALIASES), case_sensitive=False),
            )
            yield Label("Press Enter to create, Escape to cancel", classes="modal-help")

    def on_input_submitted(self, event: ReadlineInput.Submitted) -> None:
        self.action_apply()

    def action_apply(self) -> None:
        title = self.query_one("#create-title", ReadlineInput).value.strip()
        if not title:
            self._parent.notify("Title cannot be empty", severity="warning")
            return
        try:
            priority = parse_priority(
                self.query_one("#create-priority", ReadlineInput).value
            )
        except ValueError as e:
            self._parent.notify(str(e), severity="warning")
            return
        description = self.query_one("#create-description", ReadlineInput).value
        self.finish()
        self._parent.create_issue(title, description.strip() or None, priority)


class HelpScreen(ModeScreen):
    """Keyboard reference."""

    BINDINGS = [
        Binding("escape", "cancel", "Close"),
        Binding("q", "cancel", "Close"),
        Binding("question_mark", "cancel", "Close", show=False),
    ]

    CSS = MODAL_CSS

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal-container"):
            yield Markdown(HELP_TEXT)
            yield Label("Press Escape or Q to close", classes="modal-help")


class RelationPromptScreen(BaseModalScreen):
    """Ask for the identifier of the issue on the other end of a relation."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    CSS = MODAL_CSS

    def __init__(
        self,
        parent,
        title: str,
        prompt: str,
        on_submit: Callable[[str], Any],
        suggestions: Sequence[str] = (),
    ):
        super().__init__(parent)
        self.title_text = title
        self.prompt = prompt
        self.on_submit = on_submit
        self.suggestions = list(suggestions)

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal-container"):
            yield Label(self.title_text, classes="modal-title")
            yield Label(self.prompt, classes="modal-field")
            yield IdentifierInput(
                id="relation-identifier",
                suggester=SuggestFromList(self.suggestions, case_sensitive=False),
            )
            yield Label("Press Enter to confirm, Escape to cancel", classes="modal-help")

    def on_input_submitted(self, event: IdentifierInput.Submitted) -> None:
        identifier = self.query_one(IdentifierInput).identifier
        self.safe_pop_screen()
        if identifier:
            self.on_submit(identifier)
