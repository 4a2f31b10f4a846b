"""Tests for the view-mode state machine."""

import pytest

from linban.board.modes import TRANSITIONS, Action, ViewModeMachine
from linban.board.state import NOTICE, VIEW_MODE_CHANGED, Notice, ViewMode


@pytest.fixture
def modes(board_state):
    return ViewModeMachine(board_state)


def go_to(modes, mode):
    """Drive the machine from KANBAN to ``mode`` through allowed actions."""
    paths = {
        ViewMode.KANBAN: [],
        ViewMode.TEAM_SELECT: [modes.open_team_select],
        ViewMode.FILTER: [modes.open_filter],
        ViewMode.CREATE: [modes.open_create],
        ViewMode.HELP: [modes.open_help],
        ViewMode.DETAIL: [lambda: modes.select_issue("issue-1")],
        ViewMode.RELATIONSHIP_GRAPH: [
            lambda: modes.select_issue("issue-1"),
            modes.show_graph,
        ],
    }
    for step in paths[mode]:
        assert step()
    assert modes.mode == mode


@pytest.mark.parametrize("mode", list(ViewMode))
def test_every_mode_is_reachable_and_cancels_to_kanban(modes, mode):
    go_to(modes, mode)

    if mode == ViewMode.KANBAN:
        assert not modes.cancel()
    else:
        assert modes.cancel()
    assert modes.mode == ViewMode.KANBAN


def test_transitions_only_target_known_modes():
    for table in TRANSITIONS.values():
        for source, target in table.items():
            assert source in ViewMode
            assert target in ViewMode


def test_select_issue_stores_selection(modes, board_state):
    assert modes.select_issue("issue-7")

    assert board_state.selected_issue_id == "issue-7"
    assert modes.mode == ViewMode.DETAIL


def test_select_issue_from_graph_goes_to_detail(modes, board_state):
    go_to(modes, ViewMode.RELATIONSHIP_GRAPH)

    assert modes.select_issue("issue-2")

    assert modes.mode == ViewMode.DETAIL
    assert board_state.selected_issue_id == "issue-2"


def test_select_issue_is_ignored_outside_board_and_graph(modes, board_state):
    go_to(modes, ViewMode.FILTER)

    assert not modes.select_issue("issue-2")
    assert board_state.selected_issue_id is None


def test_show_graph_needs_a_selection(modes, board_state, events):
    board_state.set_view_mode(ViewMode.DETAIL)
    events.clear()

    assert not modes.show_graph()

    assert modes.mode == ViewMode.DETAIL
    assert events == [(NOTICE, Notice("No issue selected", "warning"))]


def test_show_graph_only_from_detail(modes):
    assert not modes.show_graph()
    assert modes.mode == ViewMode.KANBAN


@pytest.mark.parametrize(
    "mode,accepted",
    [
        (ViewMode.TEAM_SELECT, True),
        (ViewMode.FILTER, True),
        (ViewMode.CREATE, True),
        (ViewMode.HELP, False),
        (ViewMode.DETAIL, False),
    ],
)
def test_confirm(modes, mode, accepted):
    go_to(modes, mode)

    assert modes.confirm() is accepted
    assert modes.mode == (ViewMode.KANBAN if accepted else mode)


def test_refused_action_publishes_nothing(modes, events):
    go_to(modes, ViewMode.HELP)
    events.clear()

    assert not modes.open_filter()
    assert not modes.can(Action.OPEN_CREATE)
    assert events == []


def test_dispatch_publishes_the_new_mode(modes, events):
    modes.dispatch(Action.OPEN_HELP)

    assert events == [(VIEW_MODE_CHANGED, ViewMode.HELP)]
