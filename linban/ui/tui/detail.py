"""Detail panel for the selected issue."""

from typing import Callable, List, Optional, Sequence

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Markdown

from ...board import state as board_state
from ...board.state import BoardState, ViewMode
from ...models import Issue, RelationEdge
from .board import priority_name

NO_SELECTION = "Select an issue on the board to view its details"

RELATION_SECTIONS = (
    ("Blocked By", "blocked_by"),
    ("Blocking", "blocking"),
    ("Related To", "related"),
)


def _ref_line(edge: RelationEdge) -> str:
    line = f"- **{edge.target.identifier}** {edge.target.title}"
    if edge.type.value == "duplicate":
        line += " *(duplicate)*"
    return line


def _timestamp(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def issue_markdown(issue: Optional[Issue]) -> str:
    """Markdown document describing ``issue``."""
    if issue is None:
        return NO_SELECTION

    labels = ", ".join(label.name for label in issue.labels) or "None"
    lines: List[str] = [
        f"# {issue.identifier}: {issue.title}",
        "",
        "| Field | Value |",
        "|---|---|",
        f"| State | {issue.state.name} |",
        f"| Priority | {priority_name(issue.priority)} |",
        f"| Assignee | {issue.assignee.name if issue.assignee else 'Unassigned'} |",
        f"| Creator | {issue.creator.name if issue.creator else 'Unknown'} |",
        f"| Team | {issue.team.name} |",
    ]
    if issue.project:
        lines.append(f"| Project | {issue.project.name} |")
    lines.extend(
        [
            f"| Labels | {labels} |",
            f"| Created | {_timestamp(issue.created_at)} |",
            f"| Updated | {_timestamp(issue.updated_at)} |",
        ]
    )
    if issue.url:
        lines.append(f"| URL | {issue.url} |")

    lines.extend(["", "## Description", "", issue.description or "No description"])

    lines.extend(["", "## Relationships", ""])
    relationships: List[str] = []
    if issue.parent:
        relationships.extend(["**Parent:**", "", _ref_line(issue.parent), ""])
    if issue.children:
        relationships.extend(["**Children:**", ""])
        relationships.extend(_ref_line(edge) for edge in issue.children)
        relationships.append("")
    for title, attribute in RELATION_SECTIONS:
        edges: Sequence[RelationEdge] = getattr(issue, attribute)
        if edges:
            relationships.extend([f"**{title}:**", ""])
            relationships.extend(_ref_line(edge) for edge in edges)
            relationships.append("")
    lines.extend(relationships or ["No relationships found."])

    lines.extend(["", "## Comments", ""])
    if not issue.comments:
        lines.append("None")
    for comment in issue.comments:
        author = comment.author.name if comment.author else "Unknown"
        lines.extend(
            [f"### {author} ({_timestamp(comment.created_at)})", "", comment.body, ""]
        )
    return "\n".join(lines)


class DetailView(VerticalScroll):
    """Scrollable details of the selected issue, with relation editing keys."""

    DEFAULT_CSS = """
    DetailView {
        height: 1fr;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "app.back", "Back"),
        Binding("q", "app.back", "Back", show=False),
        Binding("p", "app.set_parent", "Parent"),
        Binding("u", "app.remove_parent", "Unparent"),
        Binding("b", "app.add_blocking", "Blocks"),
        Binding("r", "app.add_related", "Related"),
        Binding("x", "app.delete_relation", "Unlink"),
        Binding("s", "app.change_state", "State"),
        Binding("a", "app.change_assignee", "Assignee"),
        Binding("P", "app.change_priority", "Priority"),
        Binding("g", "app.show_graph", "Graph"),
    ]

    def __init__(self, state: BoardState, **kwargs):
        super().__init__(**kwargs)
        self.state = state
        self._unsubscribe: List[Callable[[], None]] = []

    def compose(self) -> ComposeResult:
        yield Markdown(NO_SELECTION)

    def on_mount(self) -> None:
        for event in (
            board_state.ISSUE_SELECTED,
            board_state.ISSUES_UPDATED,
            board_state.DETAIL_ISSUE_UPDATED,
        ):
            self._unsubscribe.append(self.state.subscribe(event, self._on_change))

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    def _on_change(self, _payload) -> None:
        if self.state.view_mode == ViewMode.DETAIL:
            self.show_issue()

    def show_issue(self) -> None:
        self.query_one(Markdown).update(issue_markdown(self.state.selected_issue))
        self.scroll_home(animate=False)
