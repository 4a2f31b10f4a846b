"""Fetch board data through the service and feed it into the board state."""

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from textual import log

from ..config import defaults
from ..models import Issue, IssueFilter
from .state import BoardState


class DataRefresher:
    """Loads snapshots into :class:`BoardState`.

    Overlapping refreshes are not cancelled. Each one takes a generation
    number when it starts and its results are dropped if a newer refresh
    started in the meantime, so the last refresh *initiated* wins.

    Single issues fetched or mutated while a list refresh is running are
    newer than that list: their snapshots are kept when the list lands.
    """

    def __init__(self, service, state: BoardState, issue_limit: int = defaults.ISSUE_LIMIT):
        self.service = service
        self.state = state
        self.issue_limit = issue_limit
        self._generation = 0
        self._issue_generation = 0
        self._in_flight = 0
        self._clock = 0
        # clock reading at which each issue snapshot was last stored alone
        self._issue_stamps: Dict[str, int] = {}

    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def issue_filter(self) -> IssueFilter:
        state = self.state
        return IssueFilter(
            team_ids=(state.selected_team_id,) if state.selected_team_id else (),
            assignee_ids=(
                (state.selected_assignee_id,) if state.selected_assignee_id else ()
            ),
            state_ids=(state.selected_state_id,) if state.selected_state_id else (),
            created_after=state.date_range.start,
            created_before=state.date_range.end,
            limit=self.issue_limit,
        )

    def begin(self):
        """Mark a remote operation as running; the first one raises loading."""
        self._in_flight += 1
        if self._in_flight == 1:
            self.state.set_loading(True)

    def end(self):
        self._in_flight -= 1
        if self._in_flight == 0:
            self.state.set_loading(False)

    async def refresh_all(self) -> bool:
        """Reload teams, users, labels, workflow states and issues.

        Each data set fails on its own: what loaded is applied, the
        failures end up in the error field. Returns False when nothing was
        applied because a newer refresh took over.
        """
        self._generation += 1
        self._issue_generation += 1
        generation, issue_generation = self._generation, self._issue_generation
        started = self._tick()
        team_id = self.state.selected_team_id

        self.begin()
        try:
            self.state.set_error(None)
            results = await asyncio.gather(
                self.service.get_teams(),
                self.service.get_users(),
                self.service.get_labels(),
                self.service.get_workflow_states(team_id),
                self.service.get_issues(self.issue_filter()),
                return_exceptions=True,
            )
            if generation != self._generation:
                log.debug(f"Discarding stale refresh #{generation}")
                return False

            teams, users, labels, states, page = results
            errors = []
            for name, value, setter in (
                ("teams", teams, self.state.set_teams),
                ("users", users, self.state.set_users),
                ("labels", labels, self.state.set_labels),
                ("workflow states", states, self.state.set_workflow_states),
            ):
                if isinstance(value, BaseException):
                    errors.append(self._failure(name, value))
                else:
                    setter(value)

            if isinstance(page, BaseException):
                errors.append(self._failure("issues", page))
            elif issue_generation == self._issue_generation:
                self.state.set_issues(self._merge(page.issues, started))

            if errors:
                self.state.set_error("; ".join(errors))
            return True
        finally:
            self.end()

    async def refresh_issues(self) -> bool:
        """Reload only the issue list with the current filters."""
        self._issue_generation += 1
        generation = self._issue_generation
        started = self._tick()
        self.begin()
        try:
            try:
                page = await self.service.get_issues(self.issue_filter())
            except Exception as e:
                if generation == self._issue_generation:
                    self.state.set_error(self._failure("issues", e))
                return False
            if generation != self._issue_generation:
                log.debug(f"Discarding stale issue refresh #{generation}")
                return False
            self.state.set_issues(self._merge(page.issues, started))
            return True
        finally:
            self.end()

    async def refresh_issue(self, issue_id: str) -> Optional[Issue]:
        """Replace a single issue's snapshot with a fresh copy.

        Issues that are not on the board only become the detail snapshot;
        the board list keeps matching its filters.
        """
        try:
            issue = await self.service.get_issue(issue_id)
        except Exception as e:
            self.state.set_error(self._failure("issue", e))
            return None
        if issue is not None:
            self.store_issue(issue)
        return issue

    def store_issue(self, issue: Issue, add: bool = False) -> None:
        """Put a fresh snapshot on the board, or aside for the detail panel.

        ``add`` appends an issue the board does not hold yet.
        """
        self._issue_stamps[issue.id] = self._tick()
        if add or self.state.find_issue(issue.id) is not None:
            self.state.upsert_issue(issue)
        else:
            self.state.set_detail_issue(issue)

    def _merge(self, issues: Sequence[Issue], started: int) -> List[Issue]:
        """Fetched list, with snapshots stored after ``started`` taking precedence."""

        def is_newer(issue):
            return self._issue_stamps.get(issue.id, 0) > started

        newer = {issue.id: issue for issue in self.state.issues if is_newer(issue)}
        detail = self.state.detail_issue
        pending = dict(newer)
        if detail is not None and is_newer(detail):
            newer.setdefault(detail.id, detail)
        merged = []
        for issue in issues:
            merged.append(newer.get(issue.id, issue))
            pending.pop(issue.id, None)
        # board issues stored while the list was loading
        merged.extend(pending.values())
        return merged

    async def change_team(self, team_id: Optional[str]) -> bool:
        self.state.set_selected_team(team_id)
        # states belong to the previous team's workflow
        self.state.set_selected_state(None)
        return await self.refresh_all()

    async def change_assignee(self, assignee_id: Optional[str]) -> bool:
        self.state.set_selected_assignee(assignee_id)
        return await self.refresh_issues()

    async def change_state_filter(self, state_id: Optional[str]) -> bool:
        self.state.set_selected_state(state_id)
        return await self.refresh_issues()

    async def change_date_range(self, start: Optional[str], end: Optional[str]) -> bool:
        self.state.set_date_range(start, end)
        return await self.refresh_issues()

    async def change_filters(
        self,
        assignee_id: Optional[str],
        state_id: Optional[str],
        start: Optional[str],
        end: Optional[str],
    ) -> bool:
        """Set every issue filter at once and reload the issues a single time."""
        self.state.set_selected_assignee(assignee_id)
        self.state.set_selected_state(state_id)
        self.state.set_date_range(start, end)
        return await self.refresh_issues()

    async def update_issue_state(self, issue_id: str, state_id: str) -> bool:
        return await self._update(issue_id, "update state", stateId=state_id)

    async def update_issue_assignee(self, issue_id: str, assignee_id: Optional[str]) -> bool:
        return await self._update(issue_id, "update assignee", assigneeId=assignee_id)

    async def update_issue_priority(self, issue_id: str, priority: int) -> bool:
        return await self._update(issue_id, "update priority", priority=priority)

    async def _update(self, issue_id: str, what: str, **changes: Any) -> bool:
        self.begin()
        try:
            result = await self.service.update_issue(issue_id, **changes)
            if not result.success:
                self.state.set_error(f"Failed to {what}: request was not successful")
                return False
            if result.issue is not None:
                self.store_issue(result.issue)
            else:
                await self.refresh_issue(issue_id)
            return True
        except Exception as e:
            self.state.set_error(f"Failed to {what}: {e}")
            return False
        finally:
            self.end()

    async def create_issue(
        self,
        title: str,
        description: Optional[str] = None,
        priority: Optional[int] = None,
        state_id: Optional[str] = None,
        assignee_id: Optional[str] = None,
    ) -> Optional[Issue]:
        team_id = self.state.selected_team_id
        if not team_id:
            self.state.set_error("Select a team before creating an issue")
            return None
        if not title.strip():
            self.state.set_error("An issue needs a title")
            return None

        self.begin()
        try:
            result = await self.service.create_issue(
                team_id,
                title.strip(),
                description=description or None,
                priority=priority,
                state_id=state_id,
                assignee_id=assignee_id,
            )
            if not result.success or result.issue is None:
                self.state.set_error("Failed to create issue: request was not successful")
                return None
            self.store_issue(result.issue, add=True)
            self.state.notify(f"Created {result.issue.identifier}")
            return result.issue
        except Exception as e:
            self.state.set_error(f"Failed to create issue: {e}")
            return None
        finally:
            self.end()

    @staticmethod
    def _failure(name: str, error: BaseException) -> str:
        log.error(f"Failed to load {name}: {error!r}")
        return f"Failed to load {name}: {error}"
