"""Async facade over :class:`LinearClient`.

The board runs on a single asyncio loop; every remote call is pushed to a
worker thread and bounded by the configured timeout so a stalled request
never hangs the interface.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

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
)
from .client import LinearClient
from .exceptions import LinearTimeoutError


class LinearService:
    """Awaitable Linear API used by the board."""

    def __init__(self, client: LinearClient, timeout: Optional[float] = None):
        self.client = client
        self.timeout = timeout or defaults.REQUEST_TIMEOUT

    @classmethod
    def from_config(
        cls, config: Dict[str, Any], log: Callable[..., Any] = utils.log
    ) -> "LinearService":
        return cls(LinearClient(config, log=log), config.get("request_timeout"))

    def use_log(self, log: Callable[..., Any]) -> None:
        """Send verbose transport output to ``log`` from now on."""
        self.client.log = log
        self.client.request_handler.log = log

    async def _call(self, operation: str, func: Callable[..., Any], *args, **kwargs):
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args, **kwargs), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise LinearTimeoutError(operation, self.timeout) from e

    async def test_connection(self) -> User:
        return await self._call("testConnection", self.client.test_connection)

    async def get_issues(self, issue_filter: Optional[IssueFilter] = None) -> IssuePage:
        return await self._call("getIssues", self.client.get_issues, issue_filter)

    async def get_issue(self, issue_id: str) -> Optional[Issue]:
        return await self._call("getIssue", self.client.get_issue, issue_id)

    async def find_issue_by_identifier(self, identifier: str) -> Optional[Issue]:
        return await self._call(
            "findIssueByIdentifier", self.client.find_issue_by_identifier, identifier
        )

    async def get_teams(self) -> List[Team]:
        return await self._call("getTeams", self.client.get_teams)

    async def get_users(self) -> List[User]:
        return await self._call("getUsers", self.client.get_users)

    async def get_labels(self) -> List[Label]:
        return await self._call("getLabels", self.client.get_labels)

    async def get_workflow_states(
        self, team_id: Optional[str] = None
    ) -> List[WorkflowState]:
        return await self._call(
            "getWorkflowStates", self.client.get_workflow_states, team_id
        )

    async def get_issue_relations(self, issue_id: str) -> List[RelationEdge]:
        return await self._call(
            "getIssueRelations", self.client.get_issue_relations, issue_id
        )

    async def create_issue_relation(
        self, issue_id: str, related_issue_id: str, relation_type: str
    ) -> bool:
        return await self._call(
            "createIssueRelation",
            self.client.create_issue_relation,
            issue_id,
            related_issue_id,
            relation_type,
        )

    async def delete_issue_relation(self, relation_id: str) -> bool:
        return await self._call(
            "deleteIssueRelation", self.client.delete_issue_relation, relation_id
        )

    async def set_parent_issue(
        self, issue_id: str, parent_id: Optional[str]
    ) -> MutationResult:
        return await self._call(
            "setParentIssue", self.client.set_parent_issue, issue_id, parent_id
        )

    async def update_issue(self, issue_id: str, **changes: Any) -> MutationResult:
        """Update an issue; keyword names are Linear ``IssueUpdateInput`` fields."""
        return await self._call(
            "updateIssue", self.client.update_issue, issue_id, changes
        )

    async def create_issue(self, team_id: str, title: str, **params: Any) -> MutationResult:
        return await self._call(
            "createIssue", self.client.create_issue, team_id, title, **params
        )
