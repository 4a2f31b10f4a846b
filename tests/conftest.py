from unittest.mock import AsyncMock

import pytest
import yaml

from linban.api import LinearService
from linban.board.state import BoardState
from linban.models import Issue, Label, Team, User, WorkflowState

TEAM = {"id": "team-eng", "name": "Engineering", "key": "ENG"}


def make_state(state_id, name, position, type_="unstarted", color=None):
    return WorkflowState(
        id=state_id, name=name, type=type_, position=position, color=color, teamId="team-eng"
    )


TODO = make_state("state-todo", "Todo", 1)
IN_PROGRESS = make_state("state-progress", "In Progress", 2, "started")
DONE = make_state("state-done", "Done", 3, "completed")


def make_issue(number, state=TODO, priority=0, assignee=None, labels=(), **payload):
    """Build an :class:`Issue` the way the API would return it."""
    data = {
        "id": f"issue-{number}",
        "identifier": f"ENG-{number}",
        "title": f"Issue number {number}",
        "priority": priority,
        "state": state,
        "team": TEAM,
        "assignee": assignee,
        "labels": {"nodes": list(labels)},
        "createdAt": "2024-01-01T10:00:00.000Z",
        "updatedAt": "2024-01-02T10:00:00.000Z",
    }
    data.update(payload)
    return Issue.model_validate(data)


def ref(number):
    return {"id": f"issue-{number}", "identifier": f"ENG-{number}", "title": f"Issue number {number}"}


@pytest.fixture
def workflow_states():
    return [TODO, IN_PROGRESS, DONE]


@pytest.fixture
def alice():
    return User(id="user-alice", name="Alice", email="alice@example.com")


@pytest.fixture
def bob():
    return User(id="user-bob", name="Bob", email="bob@example.com")


@pytest.fixture
def bug_label():
    return Label(id="label-bug", name="bug", color="red")


@pytest.fixture
def ui_label():
    return Label(id="label-ui", name="ui", color="blue")


@pytest.fixture
def team():
    return Team.model_validate(TEAM)


@pytest.fixture
def board_state():
    return BoardState()


@pytest.fixture
def events(board_state):
    """Every (event, payload) published on the board state, in order."""
    seen = []
    original = board_state.events.publish

    def record(event, payload=None):
        seen.append((event, payload))
        original(event, payload)

    board_state.events.publish = record
    return seen


@pytest.fixture
def service():
    """Async Linear service with every remote call mocked."""
    mock = AsyncMock(spec=LinearService)
    mock.get_teams.return_value = []
    mock.get_users.return_value = []
    mock.get_labels.return_value = []
    mock.get_workflow_states.return_value = []
    return mock


@pytest.fixture
def sample_config():
    """Return a sample configuration dictionary."""
    return {
        "api_key": "lin_api_test",
        "default_team": "ENG",
        "request_timeout": 5,
        "issue_limit": 50,
        "verbose": False,
    }


@pytest.fixture
def temp_config_file(tmp_path, sample_config):
    """Create a temporary config file with sample data."""
    config_file = tmp_path / "config.yaml"
    with open(config_file, "w") as f:
        yaml.dump({"general": sample_config}, f)
    return config_file


@pytest.fixture(autouse=True)
def no_api_key_env(monkeypatch):
    monkeypatch.delenv("LINEAR_API_KEY", raising=False)


@pytest.fixture(autouse=True)
def mock_prompt_ask(monkeypatch):
    from rich.prompt import Prompt

    monkeypatch.setattr(Prompt, "ask", lambda *args, **kwargs: "fakeinput")
