"""Tests for the async service wrapper."""

import time
from unittest.mock import MagicMock

import pytest

from linban.api import LinearService, LinearTimeoutError
from linban.models import Team


@pytest.fixture
def client():
    return MagicMock()


@pytest.mark.asyncio
async def test_calls_are_forwarded(client):
    team = Team(id="team-eng", name="Engineering", key="ENG")
    client.get_teams.return_value = [team]
    service = LinearService(client, timeout=5)

    assert await service.get_teams() == [team]
    client.get_teams.assert_called_once_with()


@pytest.mark.asyncio
async def test_update_issue_passes_changes_as_fields(client):
    service = LinearService(client, timeout=5)

    await service.update_issue("issue-1", stateId="state-done", priority=1)

    client.update_issue.assert_called_once_with(
        "issue-1", {"stateId": "state-done", "priority": 1}
    )


@pytest.mark.asyncio
async def test_slow_call_times_out(client):
    client.get_issue.side_effect = lambda _id: time.sleep(0.5)
    service = LinearService(client, timeout=0.05)

    with pytest.raises(LinearTimeoutError) as excinfo:
        await service.get_issue("issue-1")

    assert excinfo.value.operation == "getIssue"
    assert "timed out" in str(excinfo.value)


@pytest.mark.asyncio
async def test_client_errors_propagate(client):
    client.delete_issue_relation.side_effect = RuntimeError("boom")
    service = LinearService(client, timeout=5)

    with pytest.raises(RuntimeError):
        await service.delete_issue_relation("rel-1")


def test_from_config_uses_request_timeout(sample_config):
    service = LinearService.from_config(sample_config)

    assert service.timeout == 5
    assert service.client.headers["Authorization"] == "lin_api_test"


def test_use_log_switches_the_transport_logger(sample_config):
    service = LinearService.from_config(sample_config)
    textual_log = MagicMock()

    service.use_log(textual_log)

    assert service.client.log is textual_log
    assert service.client.request_handler.log is textual_log
