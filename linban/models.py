"""Typed snapshots of the records returned by the Linear API.

Every record is a frozen pydantic model: the board replaces snapshots
wholesale (or one issue at a time) and never edits them in place.

GraphQL payloads can be fed straight to ``model_validate``: connection
wrappers (``{"nodes": [...]}``), camelCase keys and the ``relations`` /
``inverseRelations`` lists are normalized on the way in.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class StateType(str, enum.Enum):
    BACKLOG = "backlog"
    UNSTARTED = "unstarted"
    STARTED = "started"
    COMPLETED = "completed"
    CANCELED = "canceled"


class RelationType(str, enum.Enum):
    PARENT = "parent"
    CHILD = "child"
    BLOCKS = "blocks"
    BLOCKED_BY = "blocked_by"
    RELATED = "related"
    DUPLICATE = "duplicate"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


def _nodes(value: Any) -> Any:
    """Unwrap a GraphQL connection into its node list."""
    if isinstance(value, dict) and "nodes" in value:
        return value["nodes"] or []
    return value


class Team(_Record):
    id: str
    name: str
    key: str = ""


class User(_Record):
    id: str
    name: str
    email: Optional[str] = None


class Label(_Record):
    id: str
    name: str
    color: str = "white"


class Project(_Record):
    id: str
    name: str
    description: Optional[str] = None


class WorkflowState(_Record):
    id: str
    name: str
    type: StateType
    color: Optional[str] = None
    position: float = 0.0
    team_id: Optional[str] = Field(default=None, alias="teamId")

    @model_validator(mode="before")
    @classmethod
    def _flatten_team(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("team"), dict):
            data = dict(data)
            data.setdefault("teamId", data["team"].get("id"))
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, value: Any) -> Any:
        # Linear's "triage" inbox behaves like a backlog on the board
        if value == "triage":
            return StateType.BACKLOG
        if value == "cancelled":
            return StateType.CANCELED
        return value


class IssueRef(_Record):
    """Denormalized summary of the issue at the far end of a relation."""

    id: str
    identifier: str
    title: str = ""
    state: Optional[WorkflowState] = None


class RelationEdge(_Record):
    type: RelationType
    target: IssueRef
    # None for parent/child links, which live on the issue itself
    relation_id: Optional[str] = Field(default=None, alias="relationId")


class Comment(_Record):
    id: str = ""
    body: str = ""
    created_at: datetime = Field(alias="createdAt")
    author: Optional[User] = Field(default=None, alias="user")


# Relation record types as named by the API, seen from the owning issue
_OUTGOING_TYPES = {
    "blocks": RelationType.BLOCKS,
    "related": RelationType.RELATED,
    "duplicate": RelationType.DUPLICATE,
}
_INCOMING_TYPES = {
    "blocks": RelationType.BLOCKED_BY,
    "related": RelationType.RELATED,
    "duplicate": RelationType.DUPLICATE,
}


def normalize_relations(node: dict) -> list[dict]:
    """Flatten an issue payload's links into relation-edge dictionaries.

    Order: parent, children, blocked by, blocking, then related and
    duplicate records. Relation kinds the board does not draw (``similar``)
    are dropped.
    """
    edges: list[dict] = []
    parent = node.get("parent")
    if parent:
        edges.append({"type": RelationType.PARENT, "target": parent})
    for child in _nodes(node.get("children")) or []:
        edges.append({"type": RelationType.CHILD, "target": child})

    incoming = []
    for relation in _nodes(node.get("inverseRelations")) or []:
        kind = _INCOMING_TYPES.get(relation.get("type"))
        if kind and relation.get("issue"):
            incoming.append(
                {"type": kind, "target": relation["issue"], "relationId": relation.get("id")}
            )
    outgoing = []
    for relation in _nodes(node.get("relations")) or []:
        kind = _OUTGOING_TYPES.get(relation.get("type"))
        if kind and relation.get("relatedIssue"):
            outgoing.append(
                {
                    "type": kind,
                    "target": relation["relatedIssue"],
                    "relationId": relation.get("id"),
                }
            )

    edges.extend(e for e in incoming if e["type"] == RelationType.BLOCKED_BY)
    edges.extend(e for e in outgoing if e["type"] == RelationType.BLOCKS)
    edges.extend(e for e in outgoing if e["type"] != RelationType.BLOCKS)
    edges.extend(e for e in incoming if e["type"] != RelationType.BLOCKED_BY)
    return edges


class Issue(_Record):
    id: str
    identifier: str
    title: str
    description: Optional[str] = None
    priority: int = 0
    state: WorkflowState
    team: Team
    creator: Optional[User] = None
    assignee: Optional[User] = None
    project: Optional[Project] = None
    labels: tuple[Label, ...] = ()
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    url: Optional[str] = None
    comments: tuple[Comment, ...] = ()
    parent: Optional[RelationEdge] = None
    children: tuple[RelationEdge, ...] = ()
    blocked_by: tuple[RelationEdge, ...] = Field(default=(), alias="blockedBy")
    blocking: tuple[RelationEdge, ...] = ()
    related: tuple[RelationEdge, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _from_payload(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("labels", "comments"):
            data[key] = _nodes(data.get(key)) or []

        raw_links = "relations" in data or "inverseRelations" in data
        raw_parent = isinstance(data.get("parent"), dict) and "target" not in data["parent"]
        raw_children = isinstance(data.get("children"), dict)
        if raw_links or raw_parent or raw_children:
            edges = normalize_relations(data)
            data["parent"] = next(
                (e for e in edges if e["type"] == RelationType.PARENT), None
            )
            data["children"] = [e for e in edges if e["type"] == RelationType.CHILD]
            data["blockedBy"] = [
                e for e in edges if e["type"] == RelationType.BLOCKED_BY
            ]
            data["blocking"] = [e for e in edges if e["type"] == RelationType.BLOCKS]
            data["related"] = [
                e
                for e in edges
                if e["type"] in (RelationType.RELATED, RelationType.DUPLICATE)
            ]
        return data

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def relations(self) -> list[RelationEdge]:
        """All links of this issue as one list, parent first."""
        edges: list[RelationEdge] = []
        if self.parent:
            edges.append(self.parent)
        edges.extend(self.children)
        edges.extend(self.blocked_by)
        edges.extend(self.blocking)
        edges.extend(self.related)
        return edges


class IssueFilter(_Record):
    """Server-side filter for an issue fetch."""

    team_ids: tuple[str, ...] = ()
    assignee_ids: tuple[str, ...] = ()
    state_ids: tuple[str, ...] = ()
    priorities: tuple[int, ...] = ()
    label_ids: tuple[str, ...] = ()
    created_after: Optional[str] = None
    created_before: Optional[str] = None
    limit: int = 100
    cursor: Optional[str] = None


class IssuePage(_Record):
    issues: tuple[Issue, ...] = ()
    has_more: bool = False
    cursor: Optional[str] = None


class MutationResult(_Record):
    success: bool
    issue: Optional[Issue] = None
