"""Tests for the Textual board application."""

from unittest.mock import AsyncMock, patch

import pytest
from conftest import DONE, IN_PROGRESS, TODO, make_issue

from linban import utils
from linban.api import LinearAPIError
from linban.board.state import FilterDimension, ViewMode
from linban.models import IssuePage, MutationResult, User
from linban.ui.tui import app as app_module
from linban.ui.tui.app import (
    BoardApp,
    BoardOptions,
    BoardStartupError,
    run_board,
    show_board,
)
from linban.ui.tui.board import IssueCard
from linban.ui.tui.graph import RelationshipGraphView
from linban.ui.tui.screens import (
    HelpScreen,
    RelationPromptScreen,
    TeamSelectScreen,
)
from linban.ui.tui.widgets import IdentifierInput


@pytest.fixture
def loaded_service(service, team):
    service.get_teams.return_value = [team]
    service.get_workflow_states.return_value = [TODO, IN_PROGRESS, DONE]
    service.get_issues.return_value = IssuePage(
        issues=(make_issue(1), make_issue(2), make_issue(3, state=DONE))
    )
    service.get_issue_relations.return_value = []
    return service


async def settle(app, pilot):
    await app.workers.wait_for_complete()
    await pilot.pause()
    # board columns are rebuilt on the next idle
    await pilot.pause()


@pytest.mark.asyncio
async def test_board_shows_cards(loaded_service):
    app = BoardApp(loaded_service, BoardOptions(team_id="team-eng"))
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        assert len(app.query(IssueCard)) == 3
        assert app.title == "Linear CLI - Enhanced Kanban"
        assert app.sub_title == "Team: Engineering"
        issue_filter = loaded_service.get_issues.await_args.args[0]
        assert issue_filter.team_ids == ("team-eng",)


@pytest.mark.asyncio
async def test_empty_board_shows_placeholder(service):
    service.get_issues.return_value = IssuePage()
    app = BoardApp(service)
    async with app.run_test() as pilot:
        await settle(app, pilot)

        assert len(app.query(IssueCard)) == 0
        assert len(app.query(".board-placeholder")) == 1
        assert app.sub_title == "All Teams"


@pytest.mark.asyncio
async def test_enter_opens_details_and_escape_returns(loaded_service):
    app = BoardApp(loaded_service)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        await pilot.press("down", "enter")
        await pilot.pause()
        assert app.state.view_mode == ViewMode.DETAIL
        assert app.state.selected_issue_id == "issue-2"
        assert app.title == "Issue Details"
        assert app.detail_view.display and not app.board_view.display

        await pilot.press("escape")
        await pilot.pause()
        assert app.state.view_mode == ViewMode.KANBAN
        assert app.board_view.display


@pytest.mark.asyncio
async def test_number_keys_change_grouping(loaded_service):
    app = BoardApp(loaded_service)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        await pilot.press("3")
        await pilot.pause()

        assert app.state.filter_dimension == FilterDimension.PRIORITY
        assert len(app.navigator.columns()) == 5


@pytest.mark.asyncio
async def test_team_select_is_a_modal_mode(loaded_service):
    app = BoardApp(loaded_service)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        await pilot.press("t")
        await pilot.pause()
        assert app.state.view_mode == ViewMode.TEAM_SELECT
        assert isinstance(app.screen, TeamSelectScreen)

        await pilot.press("escape")
        await pilot.pause()
        assert app.state.view_mode == ViewMode.KANBAN
        assert not isinstance(app.screen, TeamSelectScreen)


@pytest.mark.asyncio
async def test_choosing_a_team_reloads(loaded_service):
    app = BoardApp(loaded_service)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        await pilot.press("t")
        await pilot.pause()
        # first row is "All Teams", the second one Engineering
        await pilot.press("down", "enter")
        await settle(app, pilot)

        assert app.state.view_mode == ViewMode.KANBAN
        assert app.state.selected_team_id == "team-eng"
        loaded_service.get_workflow_states.assert_awaited_with("team-eng")


@pytest.mark.asyncio
async def test_help_opens_and_closes(loaded_service):
    app = BoardApp(loaded_service)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        await pilot.press("question_mark")
        await pilot.pause()
        assert isinstance(app.screen, HelpScreen)

        await pilot.press("q")
        await pilot.pause()
        assert app.state.view_mode == ViewMode.KANBAN
        assert app.is_running


@pytest.mark.asyncio
async def test_board_keys_are_ignored_in_detail(loaded_service):
    app = BoardApp(loaded_service)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        await pilot.press("enter")
        await pilot.pause()

        await pilot.press("t")
        await pilot.pause()

        assert app.state.view_mode == ViewMode.DETAIL


@pytest.mark.asyncio
async def test_set_parent_from_detail(loaded_service):
    loaded_service.find_issue_by_identifier.return_value = make_issue(3)
    loaded_service.set_parent_issue.return_value = MutationResult(success=True)
    loaded_service.get_issue.return_value = make_issue(1)
    app = BoardApp(loaded_service)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        await pilot.press("enter")
        await pilot.pause()

        await pilot.press("p")
        await pilot.pause()
        assert isinstance(app.screen, RelationPromptScreen)
        app.screen.query_one(IdentifierInput).value = "eng-3"
        await pilot.press("enter")
        await settle(app, pilot)

        loaded_service.find_issue_by_identifier.assert_awaited_once_with("ENG-3")
        loaded_service.set_parent_issue.assert_awaited_once_with("issue-1", "issue-3")
        assert app.state.view_mode == ViewMode.DETAIL
        assert app.state.error is None


@pytest.mark.asyncio
async def test_graph_mode_fetches_relations(loaded_service):
    app = BoardApp(loaded_service)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        await pilot.press("enter")
        await pilot.pause()

        await pilot.press("g")
        await settle(app, pilot)

        assert app.state.view_mode == ViewMode.RELATIONSHIP_GRAPH
        assert app.title == "Relationship Graph"
        loaded_service.get_issue_relations.assert_awaited_once_with("issue-1")
        graph = app.query_one(RelationshipGraphView)
        assert graph.graph_layout is not None and graph.graph_layout.empty

        await pilot.press("r")
        await settle(app, pilot)
        assert loaded_service.get_issue_relations.await_count == 2


@pytest.mark.asyncio
async def test_load_errors_reach_the_status_bar(loaded_service):
    loaded_service.get_issues.side_effect = LinearAPIError("Connection error")
    app = BoardApp(loaded_service)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        assert app.state.error == "Failed to load issues: Connection error"
        assert app.status_bar.has_class("-error")


class TestShowBoard:
    """Startup checks before the board opens."""

    @pytest.mark.asyncio
    async def test_connection_failure(self, service):
        service.test_connection.side_effect = LinearAPIError("Authentication failed")

        with pytest.raises(BoardStartupError, match="Could not connect"):
            await show_board(service, BoardOptions())

    @pytest.mark.asyncio
    async def test_unknown_team(self, service, team):
        service.test_connection.return_value = User(id="user-me", name="Me")
        service.get_teams.return_value = [team]

        with pytest.raises(BoardStartupError, match="Team OPS not found"):
            await show_board(service, BoardOptions(team_name="OPS"))

    @pytest.mark.asyncio
    async def test_app_output_goes_to_the_textual_log(self, service):
        service.test_connection.return_value = User(id="user-me", name="Me")

        with patch("linban.ui.tui.app.BoardApp") as mock_app:
            mock_app.return_value.run_async = AsyncMock()
            await show_board(service, BoardOptions(assignee_id="me"))

        service.use_log.assert_called_once_with(app_module.log)
        assert mock_app.call_args.args[1].assignee_id == "user-me"


def test_run_board_logs_startup_through_click(sample_config):
    with patch("linban.ui.tui.app.LinearService") as mock_service, patch(
        "linban.ui.tui.app.asyncio.run"
    ) as mock_run:
        run_board(sample_config)

    mock_service.from_config.assert_called_once_with(sample_config, log=utils.log)
    # never awaited here
    mock_run.call_args.args[0].close()
