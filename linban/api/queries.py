"""GraphQL documents and filter builders for the Linear API."""

import re
from typing import Any, Dict, Optional, Tuple

from ..models import IssueFilter

ISSUE_REF_FIELDS = """
    id
    identifier
    title
    state { id name type color position }
"""

ISSUE_FIELDS = f"""
    id
    identifier
    title
    description
    priority
    url
    createdAt
    updatedAt
    state {{ id name type color position team {{ id }} }}
    team {{ id name key }}
    creator {{ id name email }}
    assignee {{ id name email }}
    project {{ id name description }}
    labels {{ nodes {{ id name color }} }}
    comments {{ nodes {{ id body createdAt user {{ id name email }} }} }}
    parent {{ {ISSUE_REF_FIELDS} }}
    children {{ nodes {{ {ISSUE_REF_FIELDS} }} }}
    relations {{ nodes {{ id type relatedIssue {{ {ISSUE_REF_FIELDS} }} }} }}
    inverseRelations {{ nodes {{ id type issue {{ {ISSUE_REF_FIELDS} }} }} }}
"""

VIEWER = """
query Viewer {
  viewer { id name email }
}
"""

ISSUES = f"""
query Issues($first: Int, $after: String, $filter: IssueFilter) {{
  issues(first: $first, after: $after, filter: $filter) {{
    nodes {{ {ISSUE_FIELDS} }}
    pageInfo {{ hasNextPage endCursor }}
  }}
}}
"""

ISSUE = f"""
query Issue($id: String!) {{
  issue(id: $id) {{ {ISSUE_FIELDS} }}
}}
"""

ISSUE_RELATIONS = f"""
query IssueRelations($id: String!) {{
  issue(id: $id) {{
    id
    identifier
    parent {{ {ISSUE_REF_FIELDS} }}
    children {{ nodes {{ {ISSUE_REF_FIELDS} }} }}
    relations {{ nodes {{ id type relatedIssue {{ {ISSUE_REF_FIELDS} }} }} }}
    inverseRelations {{ nodes {{ id type issue {{ {ISSUE_REF_FIELDS} }} }} }}
  }}
}}
"""

TEAMS = """
query Teams {
  teams { nodes { id name key } }
}
"""

USERS = """
query Users {
  users { nodes { id name email } }
}
"""

LABELS = """
query Labels {
  issueLabels { nodes { id name color } }
}
"""

WORKFLOW_STATES = """
query WorkflowStates($filter: WorkflowStateFilter) {
  workflowStates(filter: $filter) {
    nodes { id name type color position team { id } }
  }
}
"""

CREATE_ISSUE_RELATION = """
mutation CreateIssueRelation($input: IssueRelationCreateInput!) {
  issueRelationCreate(input: $input) {
    success
    issueRelation { id type }
  }
}
"""

DELETE_ISSUE_RELATION = """
mutation DeleteIssueRelation($id: String!) {
  issueRelationDelete(id: $id) { success }
}
"""

UPDATE_ISSUE = f"""
mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) {{
  issueUpdate(id: $id, input: $input) {{
    success
    issue {{ {ISSUE_FIELDS} }}
  }}
}}
"""

CREATE_ISSUE = f"""
mutation CreateIssue($input: IssueCreateInput!) {{
  issueCreate(input: $input) {{
    success
    issue {{ {ISSUE_FIELDS} }}
  }}
}}
"""

IDENTIFIER_RE = re.compile(r"^\s*([A-Za-z][A-Za-z0-9_]*)-(\d+)\s*$")


def split_identifier(identifier: str) -> Optional[Tuple[str, int]]:
    """Split ``ENG-123`` into ``("ENG", 123)``; None when malformed."""
    match = IDENTIFIER_RE.match(identifier or "")
    if not match:
        return None
    return match.group(1).upper(), int(match.group(2))


def _id_comparator(values) -> Dict[str, Any]:
    values = list(values)
    if len(values) == 1:
        return {"eq": values[0]}
    return {"in": values}


def build_issue_filter(issue_filter: IssueFilter) -> Dict[str, Any]:
    """Translate an :class:`IssueFilter` into GraphQL ``IssueFilter`` input."""
    gql: Dict[str, Any] = {}
    if issue_filter.team_ids:
        gql["team"] = {"id": _id_comparator(issue_filter.team_ids)}
    if issue_filter.assignee_ids:
        gql["assignee"] = {"id": _id_comparator(issue_filter.assignee_ids)}
    if issue_filter.state_ids:
        gql["state"] = {"id": _id_comparator(issue_filter.state_ids)}
    if issue_filter.label_ids:
        gql["labels"] = {"id": _id_comparator(issue_filter.label_ids)}
    if issue_filter.priorities:
        gql["priority"] = _id_comparator(issue_filter.priorities)
    if issue_filter.created_after or issue_filter.created_before:
        created: Dict[str, str] = {}
        if issue_filter.created_after:
            created["gte"] = issue_filter.created_after
        if issue_filter.created_before:
            created["lte"] = issue_filter.created_before
        gql["createdAt"] = created
    return gql


def build_identifier_filter(team_key: str, number: int) -> Dict[str, Any]:
    return {"team": {"key": {"eq": team_key}}, "number": {"eq": number}}
