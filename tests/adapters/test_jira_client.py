"""Tests for the low-level Jira API client."""

from unittest.mock import Mock

import pytest
import requests

from imssync.adapters.jira import JiraApiClient
from imssync.core.exceptions import (
    AuthenticationError,
    ImsConnectorError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    TrackerRejectedError,
    TrackerUnreachableError,
    TransientError,
)


def make_response(status=200, body=None, headers=None):
    response = Mock()
    response.status_code = status
    response.ok = status < 400
    response.headers = headers or {}
    if body is None:
        response.text = ""
        response.json.side_effect = ValueError("no body")
    else:
        response.text = "x"
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    return JiraApiClient(
        base_url="https://example.atlassian.net/",
        email="bot@example.com",
        api_token="secret",
        timeout=5,
        session=session,
    )


class TestRequests:
    """Tests for request construction."""

    def test_auth_and_headers(self, client, session):
        assert session.auth == ("bot@example.com", "secret")
        assert session.headers["Accept"] == "application/json"

    def test_get_url_and_timeout(self, client, session):
        session.request.return_value = make_response(body={"key": "PROJ-1"})

        result = client.get("issue/PROJ-1", params={"fields": "summary"})

        assert result == {"key": "PROJ-1"}
        session.request.assert_called_once_with(
            "GET",
            "https://example.atlassian.net/rest/api/3/issue/PROJ-1",
            params={"fields": "summary"},
            timeout=5,
        )

    def test_agile_post(self, client, session):
        session.request.return_value = make_response(status=204)

        assert client.agile_post("sprint/7/issue", json={"issues": ["PROJ-1"]}) == {}
        method, url = session.request.call_args[0]
        assert method == "POST"
        assert url == "https://example.atlassian.net/rest/agile/1.0/sprint/7/issue"


class TestErrorMapping:
    """HTTP failures become typed connector errors."""

    @pytest.mark.parametrize("status, error_type", [
        (401, AuthenticationError),
        (403, PermissionError),
        (404, NotFoundError),
        (400, TrackerRejectedError),
        (409, TrackerRejectedError),
        (503, TransientError),
    ])
    def test_status_codes(self, client, session, status, error_type):
        session.request.return_value = make_response(status=status, body={"errorMessages": ["nope"]})

        with pytest.raises(error_type) as exc_info:
            client.get("issue/PROJ-1")

        assert exc_info.value.detail == "nope"

    def test_field_errors_in_detail(self, client, session):
        session.request.return_value = make_response(
            status=400,
            body={"errorMessages": [], "errors": {"priority": "invalid priority"}},
        )

        with pytest.raises(TrackerRejectedError) as exc_info:
            client.put("issue/PROJ-1", json={"fields": {}})

        assert "priority: invalid priority" in exc_info.value.detail

    def test_success_body_not_json(self, client, session):
        response = make_response(status=200)
        response.text = "<html>Gateway login</html>"
        session.request.return_value = response

        with pytest.raises(ImsConnectorError) as exc_info:
            client.get("issue/PROJ-1")

        assert "not JSON" in str(exc_info.value)
        assert exc_info.value.detail.startswith("<html>")
        assert isinstance(exc_info.value.cause, ValueError)

    def test_rate_limit_retry_after(self, client, session):
        session.request.return_value = make_response(status=429, headers={"Retry-After": "30"})

        with pytest.raises(RateLimitError) as exc_info:
            client.get("myself")

        assert exc_info.value.retry_after == 30.0

    def test_connection_error(self, client, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(TrackerUnreachableError):
            client.get("myself")

    def test_timeout(self, client, session):
        session.request.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(TrackerUnreachableError):
            client.get("myself")


class TestPagination:
    """Tests for paginated endpoints."""

    def test_search_follows_page_token(self, client, session):
        session.request.side_effect = [
            make_response(body={"issues": [{"key": "P-1"}], "nextPageToken": "abc"}),
            make_response(body={"issues": [{"key": "P-2"}]}),
        ]

        issues = client.search_jql("project = P", ["summary"])

        assert [i["key"] for i in issues] == ["P-1", "P-2"]
        second_payload = session.request.call_args_list[1][1]["json"]
        assert second_payload["nextPageToken"] == "abc"

    def test_search_max_results(self, client, session):
        session.request.return_value = make_response(
            body={"issues": [{"key": "P-1"}, {"key": "P-2"}], "nextPageToken": "abc"}
        )

        issues = client.search_jql("project = P", ["summary"], max_results=1)

        assert [i["key"] for i in issues] == ["P-1"]
        assert session.request.call_count == 1

    def test_changelog_pages(self, client, session):
        session.request.side_effect = [
            make_response(body={"values": [{"id": "1"}], "isLast": False}),
            make_response(body={"values": [{"id": "2"}], "isLast": True}),
        ]

        histories = client.get_changelog("P-1")

        assert [h["id"] for h in histories] == ["1", "2"]
        assert session.request.call_args_list[1][1]["params"]["startAt"] == 1

    def test_comments_pages(self, client, session):
        session.request.side_effect = [
            make_response(body={"comments": [{"id": "10"}], "total": 2}),
            make_response(body={"comments": [{"id": "11"}], "total": 2}),
        ]

        assert [c["id"] for c in client.get_comments("P-1")] == ["10", "11"]


class TestConnection:
    def test_success_caches_user(self, client, session):
        session.request.return_value = make_response(body={"accountId": "abc"})

        assert client.test_connection()
        assert client.is_connected
        client.get_myself()
        assert session.request.call_count == 1

    def test_failure(self, client, session):
        session.request.return_value = make_response(status=401)

        assert not client.test_connection()
        assert not client.is_connected
