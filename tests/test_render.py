"""Tests for the text produced by the board, detail panel and forms."""

import pytest
from conftest import DONE, IN_PROGRESS, make_issue, make_state, ref

from linban.board.state import FilterDimension
from linban.ui.tui.board import card_lines, column_width, priority_name
from linban.ui.tui.detail import NO_SELECTION, issue_markdown
from linban.ui.tui.screens import parse_filter_form, parse_priority


class TestCards:
    """Board cards and columns."""

    @pytest.mark.parametrize(
        "total,columns,expected",
        [(120, 3, 40), (120, 10, 24), (50, 0, 50), (-5, 0, 0)],
    )
    def test_column_width(self, total, columns, expected):
        assert column_width(total, columns) == expected

    def test_priority_name_falls_back(self):
        assert priority_name(1) == "Urgent"
        assert priority_name(42) == "No Priority"

    def test_state_grouping_shows_priority_and_labels(self, alice, bug_label):
        issue = make_issue(1, priority=2, assignee=alice, labels=[bug_label])

        lines = card_lines(issue, FilterDimension.STATE, 40)

        assert lines == [
            "ENG-1: Issue number 1",
            "Assignee: Alice",
            "Priority: High",
            "Labels: bug",
        ]

    def test_priority_grouping_shows_state(self):
        lines = card_lines(make_issue(1, state=IN_PROGRESS), FilterDimension.PRIORITY, 40)

        assert lines[1] == "Assignee: Unassigned"
        assert lines[2] == "State: In Progress"

    def test_assignee_grouping_shows_state_and_priority(self):
        lines = card_lines(make_issue(1, priority=4), "assignee", 40)

        assert lines[2:] == ["State: Todo", "Priority: Low"]

    def test_long_titles_are_truncated(self):
        issue = make_issue(1, title="A very long title that will never fit in a card")

        first = card_lines(issue, FilterDimension.STATE, 30)[0]

        assert first.startswith("ENG-1: ")
        assert first.endswith("...")
        assert len(first) <= 30 - 10 + len("ENG-1: ")


class TestIssueMarkdown:
    """Detail panel document."""

    def test_nothing_selected(self):
        assert issue_markdown(None) == NO_SELECTION

    def test_metadata_and_description(self, alice):
        issue = make_issue(
            1, state=DONE, assignee=alice, description="Steps to reproduce", priority=1
        )

        text = issue_markdown(issue)

        assert text.startswith("# ENG-1: Issue number 1")
        assert "| State | Done |" in text
        assert "| Priority | Urgent |" in text
        assert "| Assignee | Alice |" in text
        assert "Steps to reproduce" in text
        assert "No relationships found." in text

    def test_relationship_sections(self):
        issue = make_issue(
            1,
            parent=ref(9),
            children={"nodes": [ref(10)]},
            relations={"nodes": [{"id": "r1", "type": "related", "relatedIssue": ref(3)}]},
            inverseRelations={"nodes": [{"id": "r2", "type": "blocks", "issue": ref(5)}]},
        )

        text = issue_markdown(issue)

        for section in ("**Parent:**", "**Children:**", "**Blocked By:**", "**Related To:**"):
            assert section in text
        assert "**Blocking:**" not in text
        assert text.index("**Parent:**") < text.index("**Children:**")
        assert "- **ENG-5** Issue number 5" in text

    def test_comments(self, alice):
        issue = make_issue(
            1,
            comments={
                "nodes": [
                    {
                        "id": "c1",
                        "body": "Looks good",
                        "createdAt": "2024-01-03T08:30:00.000Z",
                        "user": {"id": alice.id, "name": alice.name},
                    }
                ]
            },
        )

        text = issue_markdown(issue)

        assert "### Alice (2024-01-03 08:30)" in text
        assert "Looks good" in text


class TestFilterForm:
    """Parsing the filter screen's fields."""

    @pytest.fixture
    def users(self, alice, bob):
        return [alice, bob]

    def test_empty_form(self):
        form = parse_filter_form("", "", "", "", "")

        assert form.dimension == FilterDimension.STATE
        assert form.assignee_id is None
        assert form.state_id is None
        assert (form.start_date, form.end_date) == (None, None)

    def test_full_form(self, users, workflow_states):
        form = parse_filter_form(
            "Label",
            "bob@example.com",
            "done",
            "2024-01-01",
            "2024-01-31",
            users=users,
            states=workflow_states,
        )

        assert form.dimension == FilterDimension.LABEL
        assert form.assignee_id == "user-bob"
        assert form.state_id == DONE.id
        assert (form.start_date, form.end_date) == ("2024-01-01", "2024-01-31")

    def test_me_is_the_viewer(self):
        form = parse_filter_form("state", "me", "", "", "", viewer_id="user-me")

        assert form.assignee_id == "user-me"

    @pytest.mark.parametrize(
        "fields,message",
        [
            (("colour", "", "", "", ""), "Unknown grouping"),
            (("state", "carol", "", "", ""), "No user named 'carol'"),
            (("state", "", "Shipped", "", ""), "No workflow state named 'Shipped'"),
            (("state", "", "", "01/02/2024", ""), "YYYY-MM-DD"),
            (("state", "", "", "2024-03-01", "2024-02-01"), "Start date is after end date"),
            (("state", "me", "", "", ""), "Current user is unknown"),
        ],
    )
    def test_invalid_fields(self, users, fields, message):
        states = [make_state("s", "Todo", 0)]
        with pytest.raises(ValueError, match=message):
            parse_filter_form(*fields, users=users, states=states)

    @pytest.mark.parametrize(
        "text,expected",
        [("", None), ("urgent", 1), ("Low", 4), ("3", 3), ("no priority", 0), ("0", 0)],
    )
    def test_parse_priority(self, text, expected):
        assert parse_priority(text) == expected

    @pytest.mark.parametrize("text", ["9", "critical"])
    def test_parse_priority_rejects(self, text):
        with pytest.raises(ValueError):
            parse_priority(text)
