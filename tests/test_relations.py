"""Tests for the relation mutation pipeline."""

import asyncio

import pytest
from conftest import make_issue, ref

from linban.api import LinearAPIError, LinearTimeoutError
from linban.board.refresher import DataRefresher
from linban.board.relations import RelationPipeline
from linban.board.state import LOADING_CHANGED, NOTICE, Notice
from linban.models import IssuePage, MutationResult


@pytest.fixture
def eng1():
    return make_issue(1)


@pytest.fixture
def pipeline(service, board_state, eng1):
    board_state.set_issues([eng1])
    return RelationPipeline(service, board_state, DataRefresher(service, board_state))


def loading_events(events):
    return [payload for event, payload in events if event == LOADING_CHANGED]


class TestResolveIdentifier:
    """Identifier to id resolution."""

    @pytest.mark.asyncio
    async def test_found(self, pipeline, service):
        service.find_issue_by_identifier.return_value = make_issue(2)

        assert await pipeline.resolve_identifier("ENG-2") == "issue-2"
        service.find_issue_by_identifier.assert_awaited_once_with("ENG-2")

    @pytest.mark.asyncio
    async def test_unknown(self, pipeline, service):
        service.find_issue_by_identifier.return_value = None

        assert await pipeline.resolve_identifier("ENG-404") is None

    @pytest.mark.asyncio
    async def test_blank_input_skips_the_lookup(self, pipeline, service):
        assert await pipeline.resolve_identifier("   ") is None
        service.find_issue_by_identifier.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self, pipeline, service):
        service.find_issue_by_identifier.side_effect = LinearAPIError("Connection error")

        with pytest.raises(LinearAPIError):
            await pipeline.resolve_identifier("ENG-2")


class TestSetParent:
    """Parent assignment."""

    @pytest.mark.asyncio
    async def test_unknown_parent_never_mutates(self, pipeline, service, board_state, events):
        service.find_issue_by_identifier.return_value = None

        assert await pipeline.set_parent("issue-1", "UNKNOWN-1") is False

        service.set_parent_issue.assert_not_awaited()
        assert board_state.error == "Could not find issue UNKNOWN-1"
        assert loading_events(events) == [True, False]

    @pytest.mark.asyncio
    async def test_success_refreshes_the_issue(self, pipeline, service, board_state, events):
        service.find_issue_by_identifier.return_value = make_issue(9)
        service.set_parent_issue.return_value = MutationResult(success=True)
        service.get_issue.return_value = make_issue(1, parent=ref(9))

        assert await pipeline.set_parent("issue-1", "ENG-9") is True

        service.set_parent_issue.assert_awaited_once_with("issue-1", "issue-9")
        service.get_issue.assert_awaited_once_with("issue-1")
        assert board_state.find_issue("issue-1").parent.target.identifier == "ENG-9"
        assert (NOTICE, Notice("Parent set to ENG-9")) in events
        assert board_state.loading is False

    @pytest.mark.asyncio
    async def test_unsuccessful_mutation(self, pipeline, service, board_state):
        service.find_issue_by_identifier.return_value = make_issue(9)
        service.set_parent_issue.return_value = MutationResult(success=False)

        assert await pipeline.set_parent("issue-1", "ENG-9") is False

        assert board_state.error == (
            "Failed to set parent to ENG-9: request was not successful"
        )
        service.get_issue.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remove_parent(self, pipeline, service, board_state):
        service.set_parent_issue.return_value = MutationResult(success=True)
        service.get_issue.return_value = make_issue(1)

        assert await pipeline.remove_parent("issue-1") is True

        service.set_parent_issue.assert_awaited_once_with("issue-1", None)
        service.find_issue_by_identifier.assert_not_awaited()


class TestAddBlocking:
    """Blocking relations."""

    @pytest.mark.asyncio
    async def test_success(self, pipeline, service, board_state):
        service.find_issue_by_identifier.return_value = make_issue(2)
        service.create_issue_relation.return_value = True
        service.get_issue.return_value = make_issue(
            1,
            relations={
                "nodes": [{"id": "rel-1", "type": "blocks", "relatedIssue": ref(2)}]
            },
        )

        assert await pipeline.add_blocking("issue-1", "ENG-2") is True

        service.create_issue_relation.assert_awaited_once_with(
            "issue-1", "issue-2", "blocks"
        )
        blocking = board_state.find_issue("issue-1").blocking
        assert [e.target.identifier for e in blocking] == ["ENG-2"]
        assert blocking[0].relation_id == "rel-1"
        assert board_state.error is None

    @pytest.mark.asyncio
    async def test_unknown_target_leaves_issue_unchanged(
        self, pipeline, service, board_state, eng1
    ):
        service.find_issue_by_identifier.return_value = None

        assert await pipeline.add_blocking("issue-1", "ENG-2") is False

        service.create_issue_relation.assert_not_awaited()
        service.get_issue.assert_not_awaited()
        assert board_state.find_issue("issue-1") == eng1
        assert "could not find issue" in board_state.error.lower()

    @pytest.mark.asyncio
    async def test_lookup_failure(self, pipeline, service, board_state):
        service.find_issue_by_identifier.side_effect = LinearAPIError("Connection error")

        assert await pipeline.add_blocking("issue-1", "ENG-2") is False

        assert board_state.error == "Failed to look up issue ENG-2: Connection error"
        assert board_state.loading is False

    @pytest.mark.asyncio
    async def test_edge_survives_an_older_full_refresh(
        self, pipeline, service, board_state, eng1
    ):
        list_started, release_list = asyncio.Event(), asyncio.Event()

        async def get_issues(_issue_filter):
            list_started.set()
            await release_list.wait()
            return IssuePage(issues=(eng1,))

        service.get_issues.side_effect = get_issues
        service.find_issue_by_identifier.return_value = make_issue(2)
        service.create_issue_relation.return_value = True
        service.get_issue.return_value = make_issue(
            1,
            relations={
                "nodes": [{"id": "rel-1", "type": "blocks", "relatedIssue": ref(2)}]
            },
        )

        full = asyncio.create_task(pipeline.refresher.refresh_all())
        await list_started.wait()
        assert await pipeline.add_blocking("issue-1", "ENG-2") is True
        release_list.set()
        await full

        blocking = board_state.find_issue("issue-1").blocking
        assert [e.target.identifier for e in blocking] == ["ENG-2"]
        assert board_state.loading is False


class TestAddRelated:
    """Related relations."""

    @pytest.mark.asyncio
    async def test_timeout_is_reported(self, pipeline, service, board_state):
        service.find_issue_by_identifier.return_value = make_issue(3)
        service.create_issue_relation.side_effect = LinearTimeoutError(
            "createIssueRelation", 30
        )

        assert await pipeline.add_related("issue-1", "ENG-3") is False

        assert board_state.error == (
            "Failed to add related issue ENG-3: createIssueRelation timed out after 30s"
        )
        assert board_state.loading is False

    @pytest.mark.asyncio
    async def test_success_notifies(self, pipeline, service, events):
        service.find_issue_by_identifier.return_value = make_issue(3)
        service.create_issue_relation.return_value = True
        service.get_issue.return_value = make_issue(1)

        assert await pipeline.add_related("issue-1", "ENG-3") is True

        service.create_issue_relation.assert_awaited_once_with(
            "issue-1", "issue-3", "related"
        )
        assert (NOTICE, Notice("Now related to ENG-3")) in events


class TestDeleteRelation:
    """Relation removal."""

    @pytest.mark.asyncio
    async def test_success(self, pipeline, service, board_state):
        service.delete_issue_relation.return_value = True
        service.get_issue.return_value = make_issue(1)

        assert await pipeline.delete_relation("issue-1", "rel-1") is True

        service.delete_issue_relation.assert_awaited_once_with("rel-1")
        service.find_issue_by_identifier.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure(self, pipeline, service, board_state):
        service.delete_issue_relation.return_value = False

        assert await pipeline.delete_relation("issue-1", "rel-1") is False

        assert board_state.error == "Failed to delete relation: request was not successful"
