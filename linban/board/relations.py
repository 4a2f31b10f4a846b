"""Create and delete issue relations from human-entered identifiers."""

from typing import Awaitable, Callable, Optional

from textual import log

from .refresher import DataRefresher
from .state import BoardState


class RelationPipeline:
    """Drives relation mutations and reports their outcome on the board.

    Every operation flags the board as loading while it runs, refreshes the
    touched issue when it succeeds and returns True. Failures never raise:
    the message lands in the board's error field and the call returns
    False.
    """

    def __init__(self, service, state: BoardState, refresher: DataRefresher):
        self.service = service
        self.state = state
        self.refresher = refresher

    async def resolve_identifier(self, identifier: str) -> Optional[str]:
        """Issue id for a ``TEAM-123`` identifier, None if there is none.

        Transport errors propagate.
        """
        identifier = (identifier or "").strip()
        if not identifier:
            return None
        issue = await self.service.find_issue_by_identifier(identifier)
        return issue.id if issue else None

    async def set_parent(self, issue_id: str, parent_identifier: str) -> bool:
        async def mutate(parent_id):
            result = await self.service.set_parent_issue(issue_id, parent_id)
            return result.success

        return await self._run(
            issue_id,
            parent_identifier,
            mutate,
            f"set parent to {parent_identifier}",
            f"Parent set to {parent_identifier}",
        )

    async def add_blocking(self, issue_id: str, blocked_identifier: str) -> bool:
        async def mutate(blocked_id):
            return await self.service.create_issue_relation(issue_id, blocked_id, "blocks")

        return await self._run(
            issue_id,
            blocked_identifier,
            mutate,
            f"add blocking relation to {blocked_identifier}",
            f"Now blocking {blocked_identifier}",
        )

    async def add_related(self, issue_id: str, related_identifier: str) -> bool:
        async def mutate(related_id):
            return await self.service.create_issue_relation(
                issue_id, related_id, "related"
            )

        return await self._run(
            issue_id,
            related_identifier,
            mutate,
            f"add related issue {related_identifier}",
            f"Now related to {related_identifier}",
        )

    async def delete_relation(self, issue_id: str, relation_id: str) -> bool:
        async def mutate(_target):
            return await self.service.delete_issue_relation(relation_id)

        return await self._run(
            issue_id, None, mutate, "delete relation", "Relation deleted"
        )

    async def remove_parent(self, issue_id: str) -> bool:
        async def mutate(_target):
            result = await self.service.set_parent_issue(issue_id, None)
            return result.success

        return await self._run(issue_id, None, mutate, "remove parent", "Parent removed")

    async def _run(
        self,
        issue_id: str,
        identifier: Optional[str],
        mutate: Callable[[Optional[str]], Awaitable[bool]],
        what: str,
        done: str,
    ) -> bool:
        self.refresher.begin()
        try:
            target_id = None
            if identifier is not None:
                try:
                    target_id = await self.resolve_identifier(identifier)
                except Exception as e:
                    return self._fail(f"Failed to look up issue {identifier}: {e}")
                if target_id is None:
                    return self._fail(f"Could not find issue {identifier}")

            try:
                success = await mutate(target_id)
            except Exception as e:
                return self._fail(f"Failed to {what}: {e}")
            if not success:
                return self._fail(f"Failed to {what}: request was not successful")

            await self.refresher.refresh_issue(issue_id)
            self.state.notify(done)
            return True
        finally:
            self.refresher.end()

    def _fail(self, message: str) -> bool:
        log.error(message)
        self.state.set_error(message)
        return False
