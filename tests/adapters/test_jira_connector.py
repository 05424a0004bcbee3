"""Tests for the Jira connector."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from imssync.adapters.jira import JiraConnector, JiraMappingConfiguration
from imssync.adapters.memory import InMemoryMappingConfiguration
from imssync.core.domain import (
    CreateIssueInput,
    EventType,
    FoundIssue,
    IssueNotFound,
    IssuePriority,
    IssueState,
    TShirtSizeEstimation,
)
from imssync.core.exceptions import (
    ConfigurationError,
    NotFoundError,
    TrackerRejectedError,
    TransitionError,
    UnmappedValueError,
)
from imssync.core.ports import TrackerConfig


def jira_issue(key="GAME-1", **overrides):
    fields = {
        "project": {"key": "GAME"},
        "summary": "Build the login page",
        "description": {
            "type": "doc",
            "version": 1,
            "content": [{"type": "paragraph", "content": [{"type": "text", "text": "Log in"}]}],
        },
        "status": {"name": "To Do"},
        "priority": {"name": "Medium"},
        "issuetype": {"name": "Story"},
        "assignee": {"accountId": "acc-alice"},
        "comment": {"comments": []},
        "labels": [],
        "created": "2024-05-01T09:00:00.000+0000",
        "updated": "2024-05-02T09:00:00.000+0000",
        "customfield_10016": 3.0,
        "customfield_10020": [
            {"id": 10, "state": "closed"},
            {"id": 11, "state": "active"},
        ],
    }
    fields.update(overrides)
    return {"key": key, "fields": fields}


@pytest.fixture
def config(project_id, alice):
    return JiraMappingConfiguration(
        project_id=project_id,
        project_key="GAME",
        state_mapping={
            IssueState.TODO: "To Do",
            IssueState.IN_PROGRESS: "In Progress",
            IssueState.DONE: "Done",
        },
        priority_mapping={IssuePriority.MEDIUM: "Medium", IssuePriority.HIGH: "High"},
        estimation_mapping={TShirtSizeEstimation.M: 3, TShirtSizeEstimation.L: 5},
        user_mapping={alice: "acc-alice"},
        sprint_mapping={1: 10, 2: 11},
    )


@pytest.fixture
def client():
    client = Mock()
    client.get.return_value = jira_issue()
    client.post.return_value = {}
    client.put.return_value = {}
    client.agile_post.return_value = {}
    return client


@pytest.fixture
def connector(client):
    return JiraConnector(
        TrackerConfig(url="https://example.atlassian.net", email="a@b.c", api_token="t"),
        client=client,
    )


class TestReadOperations:
    """Tests for list, find and parsing."""

    def test_parse_issue(self, connector, config, project_id, alice):
        issue = connector.find_issue("GAME-1", config).issue

        assert issue.id == "GAME-1"
        assert issue.project_id == project_id
        assert issue.title == "Build the login page"
        assert issue.description == "Log in"
        assert issue.state == IssueState.TODO
        assert issue.priority == IssuePriority.MEDIUM
        assert issue.type_name == "Story"
        assert issue.sprint_number == 2
        assert issue.estimation == TShirtSizeEstimation.M
        assert issue.assignee_ids == [alice]
        assert issue.created_at == datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def test_unknown_vendor_values_become_none(self, connector, client, config):
        client.get.return_value = jira_issue(
            status={"name": "Blocked"},
            assignee=None,
            customfield_10016=None,
            customfield_10020=None,
        )

        issue = connector.find_issue("GAME-1", config).issue

        assert issue.state is None
        assert issue.assignee_ids == []
        assert issue.estimation is None
        assert issue.sprint_number is None

    def test_find_returns_found(self, connector, config):
        assert isinstance(connector.find_issue("GAME-1", config), FoundIssue)

    def test_find_missing(self, connector, client, config):
        client.get.side_effect = NotFoundError("Not found")

        lookup = connector.find_issue("GAME-404", config)

        assert lookup == IssueNotFound("GAME-404")

    def test_list_issues(self, connector, client, config, project_id):
        client.search_jql.return_value = [jira_issue("GAME-1"), jira_issue("GAME-2")]

        issues = connector.list_issues(project_id, config)

        assert [i.id for i in issues] == ["GAME-1", "GAME-2"]
        jql = client.search_jql.call_args[0][0]
        assert jql.startswith('project = "GAME"')

    def test_wrong_configuration_type(self, connector, project_id):
        with pytest.raises(ConfigurationError):
            connector.find_issue("GAME-1", InMemoryMappingConfiguration(project_id=project_id))

    def test_issue_of_other_project_is_not_found(self, connector, client, config):
        client.get.return_value = jira_issue("OPS-4", project={"key": "OPS"})

        lookup = connector.find_issue("OPS-4", config)

        assert lookup == IssueNotFound("OPS-4")


class TestWriteOperations:
    """Writes send vendor vocabulary and return the re-read issue."""

    def test_change_title(self, connector, client, config):
        client.get.return_value = jira_issue(summary="Renamed")

        issue = connector.change_issue_title("GAME-1", "Renamed", config)

        client.put.assert_called_once_with("issue/GAME-1", json={"fields": {"summary": "Renamed"}})
        assert issue.title == "Renamed"

    def test_change_description_uses_adf(self, connector, client, config):
        connector.change_issue_description("GAME-1", "**bold**", config)

        body = client.put.call_args[1]["json"]["fields"]["description"]
        assert body["type"] == "doc"
        assert body["content"][0]["content"][0]["marks"] == [{"type": "strong"}]

    def test_change_priority(self, connector, client, config):
        connector.change_issue_priority("GAME-1", IssuePriority.HIGH, config)

        client.put.assert_called_once_with(
            "issue/GAME-1", json={"fields": {"priority": {"name": "High"}}}
        )

    def test_returned_issue_reflects_tracker(self, connector, client, config):
        # Tracker ignored the priority change
        issue = connector.change_issue_priority("GAME-1", IssuePriority.HIGH, config)

        assert issue.priority == IssuePriority.MEDIUM

    def test_change_estimation(self, connector, client, config):
        connector.change_estimation_of_issue("GAME-1", TShirtSizeEstimation.L, config)

        client.put.assert_called_once_with(
            "issue/GAME-1", json={"fields": {"customfield_10016": 5.0}}
        )

    def test_unmapped_estimation_makes_no_call(self, connector, client, config):
        with pytest.raises(UnmappedValueError) as exc_info:
            connector.change_estimation_of_issue("GAME-1", TShirtSizeEstimation.XS, config)

        client.put.assert_not_called()
        assert exc_info.value.operation == "change_estimation_of_issue"

    def test_change_type(self, connector, client, config):
        connector.change_issue_type("GAME-1", "Bug", config)

        client.put.assert_called_once_with(
            "issue/GAME-1", json={"fields": {"issuetype": {"name": "Bug"}}}
        )

    def test_change_sprint(self, connector, client, config):
        connector.change_sprint_of_issue("GAME-1", 1, config)

        client.agile_post.assert_called_once_with("sprint/10/issue", json={"issues": ["GAME-1"]})

    def test_move_to_backlog(self, connector, client, config):
        connector.change_sprint_of_issue("GAME-1", None, config)

        client.agile_post.assert_called_once_with("backlog/issue", json={"issues": ["GAME-1"]})

    def test_assign(self, connector, client, config, alice):
        connector.assign_issue("GAME-1", alice, config)

        client.put.assert_called_once_with("issue/GAME-1/assignee", json={"accountId": "acc-alice"})

    def test_add_comment(self, connector, client, config):
        connector.add_comment_to_issue("GAME-1", "Done!", config)

        endpoint = client.post.call_args[0][0]
        assert endpoint == "issue/GAME-1/comment"
        assert client.post.call_args[1]["json"]["body"]["type"] == "doc"

    def test_write_on_missing_issue(self, connector, client, config):
        client.put.side_effect = NotFoundError("Not found")

        with pytest.raises(NotFoundError) as exc_info:
            connector.change_issue_title("GAME-404", "x", config)

        assert exc_info.value.issue_id == "GAME-404"
        assert exc_info.value.operation == "change_issue_title"

    @pytest.mark.parametrize("method, value", [
        ("change_issue_title", "x"),
        ("change_issue_priority", IssuePriority.HIGH),
        ("change_sprint_of_issue", 1),
        ("add_comment_to_issue", "hello"),
    ])
    def test_write_on_other_projects_issue(self, connector, client, config, method, value):
        client.get.return_value = jira_issue("OPS-4", project={"key": "OPS"})

        with pytest.raises(NotFoundError) as exc_info:
            getattr(connector, method)("OPS-4", value, config)

        assert exc_info.value.issue_id == "OPS-4"
        client.put.assert_not_called()
        client.post.assert_not_called()
        client.agile_post.assert_not_called()

    def test_title_over_jira_limit_is_rejected(self, connector, client, config):
        with pytest.raises(TrackerRejectedError) as exc_info:
            connector.change_issue_title("GAME-1", "x" * 300, config)

        assert exc_info.value.detail["length"] == 300
        client.put.assert_not_called()

    def test_title_at_jira_limit_is_sent_whole(self, connector, client, config):
        connector.change_issue_title("GAME-1", "x" * 255, config)

        assert client.put.call_args[1]["json"]["fields"]["summary"] == "x" * 255


class TestStateTransitions:
    """Tests for change_issue_state."""

    def test_runs_matching_transition(self, connector, client, config):
        client.get.side_effect = lambda endpoint, **kwargs: (
            {"transitions": [
                {"id": "21", "name": "Start", "to": {"name": "In Progress"}},
                {"id": "31", "name": "Finish", "to": {"name": "Done"}},
            ]}
            if endpoint.endswith("/transitions")
            else jira_issue()
        )

        connector.change_issue_state("GAME-1", IssueState.DONE, config)

        client.post.assert_called_once_with(
            "issue/GAME-1/transitions", json={"transition": {"id": "31"}}
        )

    def test_already_in_state(self, connector, client, config):
        connector.change_issue_state("GAME-1", IssueState.TODO, config)

        client.post.assert_not_called()

    def test_no_transition(self, connector, client, config):
        client.get.side_effect = lambda endpoint, **kwargs: (
            {"transitions": [{"id": "21", "name": "Start", "to": {"name": "In Progress"}}]}
            if endpoint.endswith("/transitions")
            else jira_issue()
        )

        with pytest.raises(TransitionError) as exc_info:
            connector.change_issue_state("GAME-1", IssueState.DONE, config)

        assert exc_info.value.detail == {"available": ["In Progress"]}
        assert exc_info.value.issue_id == "GAME-1"

    def test_issue_of_other_project(self, connector, client, config):
        client.get.return_value = jira_issue("OPS-4", project={"key": "OPS"})

        with pytest.raises(NotFoundError):
            connector.change_issue_state("OPS-4", IssueState.DONE, config)

        client.post.assert_not_called()


class TestCreateIssue:
    """Tests for create_issue."""

    def test_create(self, connector, client, config, project_id, alice):
        client.post.return_value = {"key": "GAME-7"}
        client.get.return_value = jira_issue("GAME-7")

        issue = connector.create_issue(
            project_id,
            CreateIssueInput(
                title="New",
                priority=IssuePriority.HIGH,
                estimation=TShirtSizeEstimation.M,
                assignee_ids=[alice],
                sprint_number=1,
            ),
            config,
        )

        fields = client.post.call_args[1]["json"]["fields"]
        assert fields["project"] == {"key": "GAME"}
        assert fields["issuetype"] == {"name": "Task"}
        assert fields["priority"] == {"name": "High"}
        assert fields["customfield_10016"] == 3.0
        assert fields["assignee"] == {"accountId": "acc-alice"}
        client.agile_post.assert_called_once_with("sprint/10/issue", json={"issues": ["GAME-7"]})
        assert issue.id == "GAME-7"

    def test_existing_reference_is_returned(self, connector, client, config, project_id):
        client.search_jql.return_value = [jira_issue("GAME-3")]

        issue = connector.create_issue(
            project_id, CreateIssueInput(title="New", client_reference="req 1"), config
        )

        assert issue.id == "GAME-3"
        client.post.assert_not_called()
        assert 'labels = "imssync-ref-req_1"' in client.search_jql.call_args[0][0]

    def test_reference_label_added(self, connector, client, config, project_id):
        client.search_jql.return_value = []
        client.post.return_value = {"key": "GAME-8"}

        connector.create_issue(
            project_id, CreateIssueInput(title="New", client_reference="req-2"), config
        )

        assert client.post.call_args[1]["json"]["fields"]["labels"] == ["imssync-ref-req-2"]

    def test_unmapped_sprint_creates_nothing(self, connector, client, config, project_id):
        with pytest.raises(UnmappedValueError):
            connector.create_issue(project_id, CreateIssueInput(title="New", sprint_number=9), config)

        client.post.assert_not_called()

    def test_long_title_creates_nothing(self, connector, client, config, project_id):
        with pytest.raises(TrackerRejectedError):
            connector.create_issue(project_id, CreateIssueInput(title="x" * 300), config)

        client.post.assert_not_called()

    def test_reference_with_quotes_is_escaped(self, connector, client, config, project_id):
        client.search_jql.return_value = []
        client.post.return_value = {"key": "GAME-9"}

        connector.create_issue(
            project_id, CreateIssueInput(title="New", client_reference='a"b'), config
        )

        jql = client.search_jql.call_args[0][0]
        assert 'labels = "imssync-ref-a\\"b"' in jql


class TestEvents:
    """get_events_for_issue combines changelog and comments."""

    def test_events(self, connector, client, config):
        client.get.return_value = jira_issue()
        client.get_changelog.return_value = [{
            "id": "500",
            "created": "2024-05-03T10:00:00.000+0000",
            "author": {"accountId": "acc-alice"},
            "items": [{"field": "status", "fromString": "To Do", "toString": "In Progress"}],
        }]
        client.get_comments.return_value = []

        events = connector.get_events_for_issue(
            "GAME-1", datetime(2024, 5, 2, tzinfo=timezone.utc), config
        )

        assert [e.event_type for e in events] == [EventType.ISSUE_STATE_CHANGED]
        assert events[0].source_id == "GAME-1:500:0"
