"""Relationship graph panel."""

from typing import List, Optional

from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Static

from ...board.graph import GraphLayout, layout_graph, render_canvas
from ...board.modes import ViewModeMachine
from ...board.state import BoardState
from ...models import IssueRef, RelationEdge
from ...utils import truncate


class GraphCanvas(Static):
    """Static text canvas that maps clicks back to graph nodes."""

    class NodeClicked(Message):
        def __init__(self, issue_id: str):
            self.issue_id = issue_id
            super().__init__()

    def __init__(self, **kwargs):
        super().__init__("", **kwargs)
        self.graph_layout: Optional[GraphLayout] = None

    def on_click(self, event: events.Click) -> None:
        if self.graph_layout is None or self.graph_layout.empty:
            return
        offset = event.get_content_offset(self)
        if offset is None:
            return
        node = self.graph_layout.node_at(offset.x, offset.y)
        if node is not None:
            event.stop()
            self.post_message(self.NodeClicked(node.issue_id))


class RelationshipGraphView(Widget, can_focus=True):
    """Focal issue in the middle, related issues on a circle around it.

    Relations are fetched again each time the panel is shown and on ``r``.
    """

    DEFAULT_CSS = """
    RelationshipGraphView {
        height: 1fr;
        overflow: auto auto;
    }
    RelationshipGraphView #graph-title {
        width: 100%;
        text-style: bold;
        content-align: center middle;
        background: $primary;
    }
    RelationshipGraphView #graph-canvas {
        width: auto;
        height: auto;
    }
    """

    BINDINGS = [
        Binding("escape", "app.back", "Close"),
        Binding("r", "refresh_graph", "Refresh"),
        Binding("enter", "open_highlighted", "Select Issue"),
        Binding("tab", "cycle(1)", "Next", show=False),
        Binding("shift+tab", "cycle(-1)", "Previous", show=False),
        Binding("right", "cycle(1)", "Next", show=False),
        Binding("down", "cycle(1)", "Next", show=False),
        Binding("left", "cycle(-1)", "Previous", show=False),
        Binding("up", "cycle(-1)", "Previous", show=False),
    ]

    def __init__(self, state: BoardState, service, modes: ViewModeMachine, **kwargs):
        super().__init__(**kwargs)
        self.state = state
        self.service = service
        self.modes = modes
        self.edges: List[RelationEdge] = []
        self.highlighted: Optional[str] = None
        self._request = 0

    def compose(self) -> ComposeResult:
        yield Static("Issue Relationship Graph", id="graph-title")
        yield GraphCanvas(id="graph-canvas")

    @property
    def canvas(self) -> GraphCanvas:
        return self.query_one(GraphCanvas)

    @property
    def graph_layout(self) -> Optional[GraphLayout]:
        return self.canvas.graph_layout

    def load(self) -> None:
        """Fetch the selected issue's relations and draw them."""
        issue_id = self.state.selected_issue_id
        if issue_id is None:
            self.canvas.update("No issue selected")
            return
        issue = self.state.selected_issue
        if issue is not None:
            self.query_one("#graph-title", Static).update(
                Text(f"Relationships for {issue.identifier}: {truncate(issue.title, 30)}")
            )
        self.canvas.graph_layout = None
        self.canvas.update("Loading relationship data...")
        self._request += 1
        self.run_worker(
            self._fetch(issue_id, self._request), exclusive=True, group="graph"
        )

    async def _fetch(self, issue_id: str, request: int) -> None:
        try:
            edges = await self.service.get_issue_relations(issue_id)
        except Exception as e:
            if request == self._request:
                self.canvas.update(Text(f"Error loading relationship data: {e}"))
                self.state.set_error(f"Failed to load relationships: {e}")
            self.log.error(f"Failed to load relations of {issue_id}: {e}")
            return
        if request != self._request:
            return
        self.show_edges(issue_id, edges)

    def show_edges(self, issue_id: str, edges: List[RelationEdge]) -> None:
        focal = self.state.lookup_issue(issue_id) or IssueRef(
            id=issue_id, identifier=issue_id
        )
        self.edges = list(edges)
        self.canvas.graph_layout = layout_graph(focal, self.edges)
        self.highlighted = None
        self.redraw()

    def redraw(self) -> None:
        if self.graph_layout is None:
            return
        self.canvas.update(render_canvas(self.graph_layout, self.highlighted))

    def action_refresh_graph(self) -> None:
        self.load()

    def action_cycle(self, step: int) -> None:
        if self.graph_layout is None or self.graph_layout.empty:
            return
        ids = [node.issue_id for node in self.graph_layout.nodes]
        if self.highlighted in ids:
            index = (ids.index(self.highlighted) + step) % len(ids)
        else:
            index = 0 if step > 0 else len(ids) - 1
        self.highlighted = ids[index]
        self.redraw()

    def action_open_highlighted(self) -> None:
        issue_id = self.highlighted or self.state.selected_issue_id
        if issue_id:
            self.modes.select_issue(issue_id)

    def on_graph_canvas_node_clicked(self, message: GraphCanvas.NodeClicked) -> None:
        self.modes.select_issue(message.issue_id)
