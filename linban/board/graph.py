"""Circular layout and text rendering of an issue's relationships.

The focal issue sits at a fixed point; the i-th of N related issues is
placed on a circle around it at angle ``2π·i/N``, stretched horizontally
by the cell aspect ratio. Node coordinates are the top-left cell of a
bordered box, like widgets placed on a terminal.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from rich.text import Text

from ..config import defaults
from ..models import Issue, IssueRef, RelationEdge, RelationType

NO_RELATIONSHIPS = "No relationships found for this issue"

RELATION_GLYPHS: Dict[RelationType, str] = {
    RelationType.PARENT: "↑",
    RelationType.CHILD: "↓",
    RelationType.BLOCKS: "→",
    RelationType.BLOCKED_BY: "←",
    RelationType.RELATED: "↔",
    RelationType.DUPLICATE: "─",
}

RELATION_COLORS: Dict[RelationType, str] = {
    RelationType.PARENT: "green",
    RelationType.CHILD: "green",
    RelationType.BLOCKS: "red",
    RelationType.BLOCKED_BY: "red",
    RelationType.RELATED: "cyan",
    RelationType.DUPLICATE: "yellow",
}


@dataclass
class GraphNode:
    issue_id: str
    identifier: str
    title: str
    x: int
    y: int
    angle: Optional[float] = None
    relation: Optional[RelationType] = None
    width: int = defaults.GRAPH_NODE_WIDTH
    height: int = defaults.GRAPH_NODE_HEIGHT

    @property
    def color(self) -> str:
        return RELATION_COLORS[self.relation] if self.relation else "white"

    @property
    def middle(self) -> Tuple[int, int]:
        return self.x + self.width // 2, self.y + self.height // 2

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height


@dataclass
class Connector:
    """Glyph and label drawn halfway between the focal node and a neighbour."""

    relation: RelationType
    x: int
    y: int

    @property
    def glyph(self) -> str:
        return RELATION_GLYPHS[self.relation]

    @property
    def color(self) -> str:
        return RELATION_COLORS[self.relation]


@dataclass
class GraphLayout:
    center: GraphNode
    nodes: List[GraphNode] = field(default_factory=list)
    connectors: List[Connector] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.nodes

    @property
    def message(self) -> Optional[str]:
        return NO_RELATIONSHIPS if self.empty else None

    @property
    def size(self) -> Tuple[int, int]:
        boxes = [self.center, *self.nodes]
        return (
            max(node.x + node.width for node in boxes),
            max(node.y + node.height for node in boxes),
        )

    def node_at(self, x: int, y: int) -> Optional[GraphNode]:
        """Topmost node covering cell ``(x, y)``; neighbours are drawn last."""
        for node in reversed([self.center, *self.nodes]):
            if node.contains(x, y):
                return node
        return None


def node_angle(index: int, count: int) -> float:
    return 2 * math.pi * index / count


def layout_graph(
    focal,
    edges: Sequence[RelationEdge],
    center: Tuple[int, int] = (defaults.GRAPH_CENTER_X, defaults.GRAPH_CENTER_Y),
    radius: int = defaults.GRAPH_RADIUS,
    aspect: float = defaults.GRAPH_CELL_ASPECT,
) -> GraphLayout:
    """Place ``focal`` (an :class:`Issue` or :class:`IssueRef`) and its edges.

    No nodes are created for an issue without relations; the layout then
    only carries :data:`NO_RELATIONSHIPS`.
    """
    cx, cy = center
    layout = GraphLayout(center=_node(focal, cx, cy))
    count = len(edges)
    for index, edge in enumerate(edges):
        angle = node_angle(index, count)
        node = _node(
            edge.target,
            cx + math.floor(radius * aspect * math.cos(angle)),
            cy + math.floor(radius * math.sin(angle)),
            angle=angle,
            relation=edge.type,
        )
        layout.nodes.append(node)
        (fx, fy), (tx, ty) = layout.center.middle, node.middle
        layout.connectors.append(Connector(edge.type, (fx + tx) // 2, (fy + ty) // 2))
    return layout


def _node(issue, x: int, y: int, angle=None, relation=None) -> GraphNode:
    if not isinstance(issue, (Issue, IssueRef)):
        raise TypeError(f"cannot place {type(issue).__name__} in a graph")
    return GraphNode(
        issue_id=issue.id,
        identifier=issue.identifier,
        title=issue.title,
        x=x,
        y=y,
        angle=angle,
        relation=relation,
    )


class _Canvas:
    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.cells: List[List[Tuple[str, str]]] = [
            [(" ", "")] * width for _ in range(height)
        ]

    def put(self, x: int, y: int, char: str, style: str = ""):
        if 0 <= x < self.width and 0 <= y < self.height:
            self.cells[y][x] = (char, style)

    def write(self, x: int, y: int, text: str, style: str = ""):
        for offset, char in enumerate(text):
            self.put(x + offset, y, char, style)

    def box(self, node: GraphNode, style: str, label_style: str):
        right, bottom = node.x + node.width - 1, node.y + node.height - 1
        for x in range(node.x + 1, right):
            self.put(x, node.y, "─", style)
            self.put(x, bottom, "─", style)
        for y in range(node.y + 1, bottom):
            self.put(node.x, y, "│", style)
            self.put(right, y, "│", style)
            for x in range(node.x + 1, right):
                self.put(x, y, " ", label_style)
        self.put(node.x, node.y, "┌", style)
        self.put(right, node.y, "┐", style)
        self.put(node.x, bottom, "└", style)
        self.put(right, bottom, "┘", style)
        inner = node.width - 2
        label = node.identifier[:inner].center(inner)
        self.write(node.x + 1, node.y + node.height // 2, label, label_style)

    def to_text(self) -> Text:
        text = Text()
        for row_index, row in enumerate(self.cells):
            if row_index:
                text.append("\n")
            for char, style in row:
                text.append(char, style=style or None)
        return text


def render_canvas(layout: GraphLayout, highlighted: Optional[str] = None) -> Text:
    """Draw ``layout`` as styled text; ``highlighted`` is an issue id."""
    if layout.empty:
        return Text(NO_RELATIONSHIPS, justify="center")

    width, height = layout.size
    canvas = _Canvas(width + 1, height + 1)
    for node in [layout.center, *layout.nodes]:
        selected = node.issue_id == highlighted
        label_style = "bold reverse" if selected else "bold"
        canvas.box(node, node.color, label_style)
    # connectors stay readable where boxes overlap
    for connector in layout.connectors:
        canvas.write(
            connector.x,
            connector.y,
            f"{connector.glyph} {connector.relation.value}",
            connector.color,
        )
    return canvas.to_text()
