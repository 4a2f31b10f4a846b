"""Partition issues into the board's columns."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..config import defaults
from ..models import Issue, WorkflowState
from .state import FilterDimension

UNASSIGNED = "unassigned"
NO_LABELS = "no-labels"


@dataclass
class ColumnGroup:
    """One board column: a display name and the issues it holds."""

    key: str
    name: str
    issues: List[Issue] = field(default_factory=list)
    color: Optional[str] = None


def group_issues(
    issues: Sequence[Issue],
    dimension: FilterDimension,
    workflow_states: Sequence[WorkflowState] = (),
) -> Dict[str, ColumnGroup]:
    """Group ``issues`` by ``dimension``, in column order.

    Every issue lands in exactly one column, except with the label
    dimension: an issue with several labels appears once in each of its
    label columns. Callers counting cards must not assume a partition there.
    """
    dimension = FilterDimension(dimension)
    if dimension == FilterDimension.STATE:
        return _by_state(issues, workflow_states)
    if dimension == FilterDimension.ASSIGNEE:
        return _by_assignee(issues)
    if dimension == FilterDimension.PRIORITY:
        return _by_priority(issues)
    return _by_label(issues)


def _by_state(issues, workflow_states) -> Dict[str, ColumnGroup]:
    groups: Dict[str, ColumnGroup] = {}
    # sorted() is stable, so states sharing a position keep their given order
    for state in sorted(workflow_states, key=lambda s: s.position):
        groups[state.id] = ColumnGroup(state.id, state.name, color=state.color)

    for issue in issues:
        if issue.state.id not in groups:
            groups[issue.state.id] = ColumnGroup(
                issue.state.id, issue.state.name, color=issue.state.color
            )
        groups[issue.state.id].issues.append(issue)
    return groups


def _by_assignee(issues) -> Dict[str, ColumnGroup]:
    groups = {UNASSIGNED: ColumnGroup(UNASSIGNED, "Unassigned")}
    for issue in issues:
        if issue.assignee is None:
            groups[UNASSIGNED].issues.append(issue)
            continue
        key = issue.assignee.id
        if key not in groups:
            groups[key] = ColumnGroup(key, issue.assignee.name)
        groups[key].issues.append(issue)
    return groups


def priority_key(priority: Optional[int]) -> str:
    """Column key for a priority; unknown values count as no priority."""
    return str(priority) if priority in defaults.PRIORITY_NAMES else "0"


def _by_priority(issues) -> Dict[str, ColumnGroup]:
    groups = {
        str(value): ColumnGroup(str(value), name, color=defaults.PRIORITY_COLORS[value])
        for value, name in defaults.PRIORITY_NAMES.items()
    }
    for issue in issues:
        groups[priority_key(issue.priority)].issues.append(issue)
    return groups


def _by_label(issues) -> Dict[str, ColumnGroup]:
    groups = {NO_LABELS: ColumnGroup(NO_LABELS, "No Labels")}
    for issue in issues:
        if not issue.labels:
            groups[NO_LABELS].issues.append(issue)
            continue
        # fan-out: one card per label
        for label in issue.labels:
            if label.id not in groups:
                groups[label.id] = ColumnGroup(label.id, label.name, color=label.color)
            groups[label.id].issues.append(issue)
    return groups
