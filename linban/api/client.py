"""Blocking Linear GraphQL client."""

from typing import Any, Callable, Dict, List, Optional

import click

from .. import utils
from ..config import defaults
from ..models import (
    Issue,
    IssueFilter,
    IssuePage,
    Label,
    MutationResult,
    RelationEdge,
    Team,
    User,
    WorkflowState,
    normalize_relations,
)
from . import queries, request_handler


class LinearClient:
    """Linear API client returning typed snapshots."""

    def __init__(self, config: Dict[str, Any], log: Callable[..., Any] = utils.log):
        """Initialize the Linear client.

        Args:
            config: Configuration dictionary, see :mod:`linban.config`
            log: Logger used for verbose output
        """
        self.config = config
        self.verbose = config.get("verbose", False)
        self.log = log

        api_key = config.get("api_key")
        if not api_key:
            raise click.ClickException("api_key not configured")

        self.headers = {
            "Content-Type": "application/json",
            "Authorization": api_key,
        }
        self.request_handler = request_handler.GraphQLRequestHandler(
            url=config.get("api_url") or defaults.API_URL,
            headers=self.headers,
            timeout=config.get("request_timeout") or defaults.REQUEST_TIMEOUT,
            verbose=self.verbose,
            log=log,
        )

    def _request(
        self, query: str, variables: Optional[Dict[str, Any]] = None, label: str = ""
    ) -> Dict[str, Any]:
        return self.request_handler.request(query, variables, operation=label)

    def test_connection(self) -> User:
        """Fetch the authenticated user; raises when the key is rejected."""
        data = self._request(queries.VIEWER, label="viewer")
        return User.model_validate(data["viewer"])

    def get_issues(self, issue_filter: Optional[IssueFilter] = None) -> IssuePage:
        issue_filter = issue_filter or IssueFilter()
        variables: Dict[str, Any] = {
            "first": issue_filter.limit,
            "filter": queries.build_issue_filter(issue_filter),
        }
        if issue_filter.cursor:
            variables["after"] = issue_filter.cursor

        if self.verbose:
            self.log(f"Fetching issues with filter: {variables['filter']}")

        data = self._request(queries.ISSUES, variables, label="issues")
        connection = data.get("issues") or {}
        page_info = connection.get("pageInfo") or {}
        return IssuePage(
            issues=tuple(
                Issue.model_validate(node) for node in connection.get("nodes") or []
            ),
            has_more=bool(page_info.get("hasNextPage")),
            cursor=page_info.get("endCursor"),
        )

    def get_issue(self, issue_id: str) -> Optional[Issue]:
        """Fetch one issue by id or identifier."""
        data = self._request(queries.ISSUE, {"id": issue_id}, label="issue")
        node = data.get("issue")
        return Issue.model_validate(node) if node else None

    def find_issue_by_identifier(self, identifier: str) -> Optional[Issue]:
        """Look up an issue by its ``TEAM-123`` identifier.

        Malformed identifiers return None without a remote call.
        """
        parts = queries.split_identifier(identifier)
        if parts is None:
            if self.verbose:
                self.log(f"Not an issue identifier: {identifier!r}")
            return None
        team_key, number = parts
        data = self._request(
            queries.ISSUES,
            {"first": 1, "filter": queries.build_identifier_filter(team_key, number)},
            label="issue by identifier",
        )
        nodes = (data.get("issues") or {}).get("nodes") or []
        return Issue.model_validate(nodes[0]) if nodes else None

    def get_teams(self) -> List[Team]:
        data = self._request(queries.TEAMS, label="teams")
        return [Team.model_validate(n) for n in (data.get("teams") or {}).get("nodes") or []]

    def get_users(self) -> List[User]:
        data = self._request(queries.USERS, label="users")
        return [User.model_validate(n) for n in (data.get("users") or {}).get("nodes") or []]

    def get_labels(self) -> List[Label]:
        data = self._request(queries.LABELS, label="labels")
        return [
            Label.model_validate(n)
            for n in (data.get("issueLabels") or {}).get("nodes") or []
        ]

    def get_workflow_states(self, team_id: Optional[str] = None) -> List[WorkflowState]:
        variables = {"filter": {"team": {"id": {"eq": team_id}}}} if team_id else {}
        data = self._request(queries.WORKFLOW_STATES, variables, label="workflow states")
        return [
            WorkflowState.model_validate(n)
            for n in (data.get("workflowStates") or {}).get("nodes") or []
        ]

    def get_issue_relations(self, issue_id: str) -> List[RelationEdge]:
        """Every link of an issue as relation edges, parent first."""
        data = self._request(
            queries.ISSUE_RELATIONS, {"id": issue_id}, label="issue relations"
        )
        node = data.get("issue")
        if not node:
            return []
        return [RelationEdge.model_validate(edge) for edge in normalize_relations(node)]

    def create_issue_relation(
        self, issue_id: str, related_issue_id: str, relation_type: str
    ) -> bool:
        """Create a ``blocks``, ``related`` or ``duplicate`` link."""
        data = self._request(
            queries.CREATE_ISSUE_RELATION,
            {
                "input": {
                    "issueId": issue_id,
                    "relatedIssueId": related_issue_id,
                    "type": relation_type,
                }
            },
            label="create relation",
        )
        return bool((data.get("issueRelationCreate") or {}).get("success"))

    def delete_issue_relation(self, relation_id: str) -> bool:
        data = self._request(
            queries.DELETE_ISSUE_RELATION, {"id": relation_id}, label="delete relation"
        )
        return bool((data.get("issueRelationDelete") or {}).get("success"))

    def set_parent_issue(self, issue_id: str, parent_id: Optional[str]) -> MutationResult:
        """Set the parent of an issue; ``None`` detaches it."""
        return self.update_issue(issue_id, {"parentId": parent_id})

    def update_issue(self, issue_id: str, fields: Dict[str, Any]) -> MutationResult:
        """Update an issue with raw ``IssueUpdateInput`` fields."""
        data = self._request(
            queries.UPDATE_ISSUE,
            {"id": issue_id, "input": fields},
            label="update issue",
        )
        return self._mutation_result(data.get("issueUpdate"))

    def create_issue(
        self,
        team_id: str,
        title: str,
        description: Optional[str] = None,
        priority: Optional[int] = None,
        assignee_id: Optional[str] = None,
        state_id: Optional[str] = None,
        label_ids: Optional[List[str]] = None,
    ) -> MutationResult:
        payload: Dict[str, Any] = {"teamId": team_id, "title": title}
        if description:
            payload["description"] = description
        if priority is not None:
            payload["priority"] = priority
        if assignee_id:
            payload["assigneeId"] = assignee_id
        if state_id:
            payload["stateId"] = state_id
        if label_ids:
            payload["labelIds"] = label_ids

        data = self._request(queries.CREATE_ISSUE, {"input": payload}, label="create issue")
        return self._mutation_result(data.get("issueCreate"))

    @staticmethod
    def _mutation_result(payload: Optional[Dict[str, Any]]) -> MutationResult:
        payload = payload or {}
        issue = payload.get("issue")
        return MutationResult(
            success=bool(payload.get("success")),
            issue=Issue.model_validate(issue) if issue else None,
        )
