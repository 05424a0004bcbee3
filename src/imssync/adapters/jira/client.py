"""
Jira API Client - Low-level HTTP client for the Jira Cloud REST API.

This handles the raw HTTP communication with Jira (platform API v3 and
the Agile API for sprints). The JiraConnector uses this to implement the
ImsConnectorPort.
"""

import logging
from typing import Any, Optional

import requests

from ...core.exceptions import (
    AuthenticationError,
    ImsConnectorError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    TrackerRejectedError,
    TrackerUnreachableError,
    TransientError,
)


class JiraApiClient:
    """
    Low-level Jira REST API client.

    Handles authentication, request/response, pagination and error mapping.
    It never retries; RateLimitError carries the server's Retry-After hint.
    """

    API_VERSION = "3"
    AGILE_VERSION = "1.0"
    PAGE_SIZE = 100

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the Jira client.

        Args:
            base_url: Jira instance URL (e.g., https://company.atlassian.net)
            email: User email for authentication
            api_token: API token
            timeout: Seconds to wait for each request
            session: Pre-configured session (mainly for tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/rest/api/{self.API_VERSION}"
        self.agile_url = f"{self.base_url}/rest/agile/{self.AGILE_VERSION}"
        self.timeout = timeout
        self.logger = logging.getLogger("JiraApiClient")

        self._session = session or requests.Session()
        self._session.auth = (email, api_token)
        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

        self._current_user: Optional[dict] = None

    # -------------------------------------------------------------------------
    # Core Request Methods
    # -------------------------------------------------------------------------

    def request(self, method: str, url: str, **kwargs) -> dict[str, Any]:
        """
        Make an authenticated request.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            url: Absolute URL
            **kwargs: Additional arguments for requests

        Returns:
            JSON response as dict (empty for 204 responses)

        Raises:
            ImsConnectorError: On transport or API errors
        """
        kwargs.setdefault("timeout", self.timeout)
        self.logger.debug(f"{method} {url}")

        try:
            response = self._session.request(method, url, **kwargs)
        except requests.exceptions.Timeout as e:
            raise TrackerUnreachableError(f"Request timed out: {e}", cause=e)
        except requests.exceptions.ConnectionError as e:
            raise TrackerUnreachableError(f"Connection failed: {e}", cause=e)

        return self._handle_response(response, url)

    def get(self, endpoint: str, **kwargs) -> dict[str, Any]:
        return self.request("GET", f"{self.api_url}/{endpoint}", **kwargs)

    def post(self, endpoint: str, json: Optional[dict] = None, **kwargs) -> dict[str, Any]:
        return self.request("POST", f"{self.api_url}/{endpoint}", json=json, **kwargs)

    def put(self, endpoint: str, json: Optional[dict] = None, **kwargs) -> dict[str, Any]:
        return self.request("PUT", f"{self.api_url}/{endpoint}", json=json, **kwargs)

    def agile_post(self, endpoint: str, json: Optional[dict] = None, **kwargs) -> dict[str, Any]:
        return self.request("POST", f"{self.agile_url}/{endpoint}", json=json, **kwargs)

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------

    def _handle_response(self, response: requests.Response, url: str) -> dict[str, Any]:
        """Handle API response and errors."""
        if response.ok:
            if not response.text:
                return {}
            try:
                return response.json()
            except ValueError as e:
                raise ImsConnectorError(
                    f"Jira returned a response that is not JSON for {url}",
                    detail=response.text[:500],
                    cause=e,
                ) from e

        status = response.status_code
        detail = self._error_detail(response)

        if status == 401:
            raise AuthenticationError(
                "Authentication failed. Check JIRA_EMAIL and JIRA_API_TOKEN.",
                detail=detail,
            )

        if status == 403:
            raise PermissionError(f"Permission denied for {url}", detail=detail)

        if status == 404:
            raise NotFoundError(f"Not found: {url}", detail=detail)

        if status == 429:
            raise RateLimitError(
                "Rate limited by Jira",
                retry_after=self._retry_after(response),
                detail=detail,
            )

        if status in (400, 409, 422):
            raise TrackerRejectedError(f"Jira rejected the request: {detail}", detail=detail)

        if status >= 500:
            raise TransientError(f"Jira server error {status}", detail=detail)

        raise ImsConnectorError(f"API error {status}: {detail}", detail=detail)

    def _error_detail(self, response: requests.Response) -> Any:
        """Extract Jira's errorMessages/errors, falling back to the raw body."""
        try:
            body = response.json()
        except ValueError:
            return response.text[:500] if response.text else ""

        if isinstance(body, dict):
            messages = list(body.get("errorMessages") or [])
            errors = body.get("errors") or {}
            messages.extend(f"{key}: {value}" for key, value in errors.items())
            if messages:
                return "; ".join(messages)
        return body

    def _retry_after(self, response: requests.Response) -> Optional[float]:
        value = response.headers.get("Retry-After")
        try:
            return float(value) if value is not None else None
        except ValueError:
            return None

    # -------------------------------------------------------------------------
    # Convenience Methods
    # -------------------------------------------------------------------------

    def get_myself(self) -> dict[str, Any]:
        """Get current authenticated user."""
        if self._current_user is None:
            self._current_user = self.get("myself")
        return self._current_user

    def search_jql(self, jql: str, fields: list[str], max_results: Optional[int] = None) -> list[dict]:
        """
        Execute a JQL search and return all matching issues.

        Follows nextPageToken until the result set is exhausted or
        max_results issues were collected.
        """
        issues: list[dict] = []
        token: Optional[str] = None

        while True:
            payload: dict[str, Any] = {
                "jql": jql,
                "maxResults": self.PAGE_SIZE,
                "fields": fields,
            }
            if token:
                payload["nextPageToken"] = token

            data = self.post("search/jql", json=payload)
            issues.extend(data.get("issues", []))

            token = data.get("nextPageToken")
            if not token or (max_results is not None and len(issues) >= max_results):
                break

        return issues[:max_results] if max_results is not None else issues

    def get_changelog(self, issue_key: str) -> list[dict]:
        """Fetch the complete changelog of an issue."""
        histories: list[dict] = []
        start_at = 0

        while True:
            data = self.get(
                f"issue/{issue_key}/changelog",
                params={"startAt": start_at, "maxResults": self.PAGE_SIZE},
            )
            values = data.get("values", [])
            histories.extend(values)

            if data.get("isLast", True) or not values:
                break
            start_at += len(values)

        return histories

    def get_comments(self, issue_key: str) -> list[dict]:
        """Fetch all comments of an issue, oldest first."""
        comments: list[dict] = []
        start_at = 0

        while True:
            data = self.get(
                f"issue/{issue_key}/comment",
                params={"startAt": start_at, "maxResults": self.PAGE_SIZE, "orderBy": "created"},
            )
            values = data.get("comments", [])
            comments.extend(values)

            start_at += len(values)
            if not values or start_at >= data.get("total", 0):
                break

        return comments

    def test_connection(self) -> bool:
        """Test if connection is valid."""
        try:
            self.get_myself()
            return True
        except ImsConnectorError:
            return False

    @property
    def is_connected(self) -> bool:
        return self._current_user is not None
