"""
Jira Connector - Implements ImsConnectorPort for Atlassian Jira Cloud.

This is the main entry point for Jira integration.
"""

import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from ...core.domain.entities import (
    CreateEventInput,
    CreateIssueInput,
    Issue,
    IssueComment,
)
from ...core.domain.enums import IssuePriority, IssueState, TShirtSizeEstimation
from ...core.domain.lookup import FoundIssue, IssueLookup, IssueNotFound
from ...core.exceptions import (
    ConfigurationError,
    NotFoundError,
    TrackerRejectedError,
    TransitionError,
    annotate_errors,
)
from ...core.ports.config_provider import TrackerConfig
from ...core.ports.ims_connector import ImsConnectorPort
from ..formatters.adf import ADFFormatter
from .changelog import ChangelogTranslator, parse_jira_datetime
from .client import JiraApiClient
from .mapping import JiraMappingConfiguration


def _jql_string(value: str) -> str:
    """Escape a value for use inside a double-quoted JQL string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


class JiraConnector(ImsConnectorPort[JiraMappingConfiguration]):
    """
    Jira implementation of the ImsConnectorPort.

    Translates between Scrum game issues and Jira's API. After every write
    the issue is read back so callers see what Jira actually stored.
    """

    mapping_configuration_type = JiraMappingConfiguration

    SUMMARY_MAX_LENGTH = 255

    BASE_FIELDS = [
        "project",
        "summary",
        "description",
        "status",
        "priority",
        "issuetype",
        "assignee",
        "reporter",
        "comment",
        "labels",
        "created",
        "updated",
    ]

    def __init__(
        self,
        config: TrackerConfig,
        formatter: Optional[ADFFormatter] = None,
        client: Optional[JiraApiClient] = None,
    ):
        """
        Initialize the Jira connector.

        Args:
            config: Tracker connection settings
            formatter: Optional custom ADF formatter
            client: Optional pre-built API client
        """
        self.config = config
        self.formatter = formatter or ADFFormatter()
        self.logger = logging.getLogger("JiraConnector")

        self._client = client or JiraApiClient(
            base_url=config.url,
            email=config.email,
            api_token=config.api_token,
            timeout=config.timeout,
        )

    # -------------------------------------------------------------------------
    # ImsConnectorPort Implementation - Properties
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return "Jira"

    @property
    def is_connected(self) -> bool:
        return self._client.is_connected

    def test_connection(self) -> bool:
        return self._client.test_connection()

    # -------------------------------------------------------------------------
    # ImsConnectorPort Implementation - Read Operations
    # -------------------------------------------------------------------------

    def list_issues(
        self,
        project_id: UUID,
        mapping_configuration: JiraMappingConfiguration,
    ) -> list[Issue]:
        with annotate_errors("list_issues"):
            self._check_project(project_id, mapping_configuration)
            project_key = _jql_string(mapping_configuration.project_key)
            jql = f'project = "{project_key}" ORDER BY created ASC'
            issues = self._client.search_jql(jql, self._fields(mapping_configuration))
            self.logger.debug(f"Found {len(issues)} issues in {mapping_configuration.project_key}")
            return [self._parse_issue(data, mapping_configuration) for data in issues]

    def find_issue(
        self,
        issue_id: str,
        mapping_configuration: JiraMappingConfiguration,
    ) -> IssueLookup:
        with annotate_errors("find_issue", issue_id):
            self.check_configuration(mapping_configuration)
            try:
                return FoundIssue(self._fetch(issue_id, mapping_configuration))
            except NotFoundError:
                self.logger.debug(f"Issue {issue_id} not found")
                return IssueNotFound(issue_id)

    def get_events_for_issue(
        self,
        issue_id: str,
        since: datetime,
        mapping_configuration: JiraMappingConfiguration,
    ) -> list[CreateEventInput]:
        with annotate_errors("get_events_for_issue", issue_id):
            self.check_configuration(mapping_configuration)
            issue_data = self._get_in_project(
                issue_id, mapping_configuration, "project,summary,created,reporter"
            )
            histories = self._client.get_changelog(issue_id)
            comments = self._client.get_comments(issue_id)

            translator = ChangelogTranslator(issue_id, mapping_configuration, self.formatter)
            events = translator.translate(issue_data, histories, comments, since)
            self.logger.debug(f"{len(events)} events for {issue_id} since {since.isoformat()}")
            return events

    # -------------------------------------------------------------------------
    # ImsConnectorPort Implementation - Write Operations
    # -------------------------------------------------------------------------

    def change_issue_title(
        self,
        issue_id: str,
        title: str,
        mapping_configuration: JiraMappingConfiguration,
    ) -> Issue:
        with annotate_errors("change_issue_title", issue_id):
            self.check_configuration(mapping_configuration)
            self._check_summary(title)
            self._get_in_project(issue_id, mapping_configuration)
            self._update_fields(issue_id, {"summary": title})
            self.logger.info(f"Changed title of {issue_id}")
            return self._fetch(issue_id, mapping_configuration)

    def change_issue_description(
        self,
        issue_id: str,
        description: str,
        mapping_configuration: JiraMappingConfiguration,
    ) -> Issue:
        with annotate_errors("change_issue_description", issue_id):
            self.check_configuration(mapping_configuration)
            self._get_in_project(issue_id, mapping_configuration)
            self._update_fields(issue_id, {"description": self.formatter.format_text(description)})
            self.logger.info(f"Changed description of {issue_id}")
            return self._fetch(issue_id, mapping_configuration)

    def change_issue_state(
        self,
        issue_id: str,
        issue_state: IssueState,
        mapping_configuration: JiraMappingConfiguration,
    ) -> Issue:
        with annotate_errors("change_issue_state", issue_id):
            self.check_configuration(mapping_configuration)
            target = mapping_configuration.vendor_state(issue_state)
            self._transition(issue_id, target, mapping_configuration)
            return self._fetch(issue_id, mapping_configuration)

    def change_issue_priority(
        self,
        issue_id: str,
        priority: IssuePriority,
        mapping_configuration: JiraMappingConfiguration,
    ) -> Issue:
        with annotate_errors("change_issue_priority", issue_id):
            self.check_configuration(mapping_configuration)
            vendor = mapping_configuration.vendor_priority(priority)
            self._get_in_project(issue_id, mapping_configuration)
            self._update_fields(issue_id, {"priority": {"name": vendor}})
            self.logger.info(f"Changed priority of {issue_id} to {vendor}")
            return self._fetch(issue_id, mapping_configuration)

    def change_issue_type(
        self,
        issue_id: str,
        type_name: str,
        mapping_configuration: JiraMappingConfiguration,
    ) -> Issue:
        with annotate_errors("change_issue_type", issue_id):
            self.check_configuration(mapping_configuration)
            vendor = mapping_configuration.vendor_type(type_name)
            self._get_in_project(issue_id, mapping_configuration)
            self._update_fields(issue_id, {"issuetype": {"name": vendor}})
            self.logger.info(f"Changed type of {issue_id} to {vendor}")
            return self._fetch(issue_id, mapping_configuration)

    def change_sprint_of_issue(
        self,
        issue_id: str,
        sprint_number: Optional[int],
        mapping_configuration: JiraMappingConfiguration,
    ) -> Issue:
        with annotate_errors("change_sprint_of_issue", issue_id):
            self.check_configuration(mapping_configuration)
            sprint_id = (
                mapping_configuration.vendor_sprint(sprint_number)
                if sprint_number is not None else None
            )
            self._get_in_project(issue_id, mapping_configuration)
            self._move_to_sprint(issue_id, sprint_id)
            return self._fetch(issue_id, mapping_configuration)

    def change_estimation_of_issue(
        self,
        issue_id: str,
        estimation: TShirtSizeEstimation,
        mapping_configuration: JiraMappingConfiguration,
    ) -> Issue:
        with annotate_errors("change_estimation_of_issue", issue_id):
            self.check_configuration(mapping_configuration)
            points = mapping_configuration.vendor_estimation(estimation)
            self._get_in_project(issue_id, mapping_configuration)
            self._update_fields(
                issue_id,
                {mapping_configuration.story_points_field: float(points)},
            )
            self.logger.info(f"Changed estimation of {issue_id} to {points} points")
            return self._fetch(issue_id, mapping_configuration)

    def assign_issue(
        self,
        issue_id: str,
        assignee_id: UUID,
        mapping_configuration: JiraMappingConfiguration,
    ) -> Issue:
        with annotate_errors("assign_issue", issue_id):
            self.check_configuration(mapping_configuration)
            account_id = mapping_configuration.vendor_user(assignee_id)
            self._get_in_project(issue_id, mapping_configuration)
            self._client.put(f"issue/{issue_id}/assignee", json={"accountId": account_id})
            self.logger.info(f"Assigned {issue_id} to {account_id}")
            return self._fetch(issue_id, mapping_configuration)

    def add_comment_to_issue(
        self,
        issue_id: str,
        comment: str,
        mapping_configuration: JiraMappingConfiguration,
    ) -> Issue:
        with annotate_errors("add_comment_to_issue", issue_id):
            self.check_configuration(mapping_configuration)
            self._get_in_project(issue_id, mapping_configuration)
            self._client.post(
                f"issue/{issue_id}/comment",
                json={"body": self.formatter.format_text(comment)},
            )
            self.logger.info(f"Added comment to {issue_id}")
            return self._fetch(issue_id, mapping_configuration)

    def create_issue(
        self,
        project_id: UUID,
        create_issue_input: CreateIssueInput,
        mapping_configuration: JiraMappingConfiguration,
    ) -> Issue:
        with annotate_errors("create_issue"):
            self._check_project(project_id, mapping_configuration)
            cfg = mapping_configuration
            data = create_issue_input

            # Translate everything up front so nothing is created on a mapping failure
            self._check_summary(data.title)
            fields: dict[str, Any] = {
                "project": {"key": cfg.project_key},
                "summary": data.title,
                "description": self.formatter.format_text(data.description or ""),
                "issuetype": {"name": cfg.vendor_type(data.type_name or cfg.default_issue_type)},
            }
            if data.priority is not None:
                fields["priority"] = {"name": cfg.vendor_priority(data.priority)}
            if data.estimation is not None:
                fields[cfg.story_points_field] = float(cfg.vendor_estimation(data.estimation))
            if data.assignee_ids:
                if len(data.assignee_ids) > 1:
                    self.logger.warning("Jira supports one assignee; using the first")
                fields["assignee"] = {"accountId": cfg.vendor_user(data.assignee_ids[0])}
            target_state = cfg.vendor_state(data.state) if data.state is not None else None
            sprint_id = (
                cfg.vendor_sprint(data.sprint_number) if data.sprint_number is not None else None
            )

            if data.client_reference:
                label = cfg.reference_label(data.client_reference)
                existing = self._find_by_label(label, cfg)
                if existing is not None:
                    self.logger.info(
                        f"Issue {existing.id} already exists for reference {data.client_reference}"
                    )
                    return existing
                fields["labels"] = [label]

            result = self._client.post("issue", json={"fields": fields})
            new_key = result["key"]
            self.logger.info(f"Created issue {new_key} in {cfg.project_key}")

            with annotate_errors("create_issue", new_key):
                if data.sprint_number is not None:
                    self._move_to_sprint(new_key, sprint_id)
                if target_state is not None:
                    self._transition(new_key, target_state, cfg)
                return self._fetch(new_key, cfg)

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _fields(self, cfg: JiraMappingConfiguration) -> list[str]:
        return self.BASE_FIELDS + [cfg.story_points_field, cfg.sprint_field]

    def _fetch(self, issue_key: str, cfg: JiraMappingConfiguration) -> Issue:
        data = self._get_in_project(issue_key, cfg, ",".join(self._fields(cfg)))
        return self._parse_issue(data, cfg)

    def _get_in_project(
        self,
        issue_key: str,
        cfg: JiraMappingConfiguration,
        fields: str = "project",
    ) -> dict:
        """Read an issue, treating issues of other projects as missing."""
        data = self._client.get(f"issue/{issue_key}", params={"fields": fields})
        project = (data.get("fields") or {}).get("project") or {}
        if (project.get("key") or "").upper() != cfg.project_key.upper():
            raise NotFoundError(
                f"Issue {issue_key} does not belong to project {cfg.project_key}",
                issue_id=issue_key,
            )
        return data

    def _check_summary(self, title: str) -> None:
        if len(title) > self.SUMMARY_MAX_LENGTH:
            raise TrackerRejectedError(
                f"Title is {len(title)} characters; Jira allows {self.SUMMARY_MAX_LENGTH}",
                detail={"length": len(title), "limit": self.SUMMARY_MAX_LENGTH},
            )

    def _update_fields(self, issue_key: str, fields: dict[str, Any]) -> None:
        self._client.put(f"issue/{issue_key}", json={"fields": fields})

    def _check_project(self, project_id: UUID, cfg: JiraMappingConfiguration) -> None:
        self.check_configuration(cfg)
        if cfg.project_id != project_id:
            raise ConfigurationError(
                f"Mapping configuration belongs to project {cfg.project_id}, not {project_id}"
            )
        if not cfg.project_key:
            raise ConfigurationError("Mapping configuration has no Jira project key")

    def _find_by_label(self, label: str, cfg: JiraMappingConfiguration) -> Optional[Issue]:
        jql = (
            f'project = "{_jql_string(cfg.project_key)}" '
            f'AND labels = "{_jql_string(label)}" ORDER BY created ASC'
        )
        matches = self._client.search_jql(jql, self._fields(cfg), max_results=1)
        if not matches:
            return None
        return self._parse_issue(matches[0], cfg)

    def _transition(
        self,
        issue_key: str,
        target_status: str,
        cfg: JiraMappingConfiguration,
    ) -> None:
        """Run the workflow transition that leads to target_status."""
        current = self._get_in_project(issue_key, cfg, "project,status")
        current_name = current.get("fields", {}).get("status", {}).get("name", "")
        if current_name.lower() == target_status.lower():
            self.logger.debug(f"{issue_key} already in {target_status}")
            return

        data = self._client.get(f"issue/{issue_key}/transitions")
        transitions = data.get("transitions", [])

        for transition in transitions:
            to_name = transition.get("to", {}).get("name", "")
            if to_name.lower() == target_status.lower():
                self._client.post(
                    f"issue/{issue_key}/transitions",
                    json={"transition": {"id": transition["id"]}},
                )
                self.logger.info(f"Transitioned {issue_key} to {to_name}")
                return

        available = [t.get("to", {}).get("name", t.get("name", "")) for t in transitions]
        raise TransitionError(
            f"No transition from '{current_name}' to '{target_status}'",
            issue_id=issue_key,
            detail={"available": available},
        )

    def _move_to_sprint(self, issue_key: str, sprint_id: Optional[int]) -> None:
        if sprint_id is None:
            self._client.agile_post("backlog/issue", json={"issues": [issue_key]})
            self.logger.info(f"Moved {issue_key} to backlog")
            return

        self._client.agile_post(f"sprint/{sprint_id}/issue", json={"issues": [issue_key]})
        self.logger.info(f"Moved {issue_key} to Jira sprint {sprint_id}")

    def _parse_issue(self, data: dict, cfg: JiraMappingConfiguration) -> Issue:
        """Parse Jira API response into an Issue."""
        fields = data.get("fields", {})

        assignee = fields.get("assignee") or {}
        assignee_id = cfg.generic_user(assignee.get("accountId"))

        comments = [
            IssueComment(
                id=str(comment.get("id", "")),
                body=self.formatter.to_text(comment.get("body")),
                author_id=cfg.generic_user((comment.get("author") or {}).get("accountId")),
                created_at=parse_jira_datetime(comment.get("created")),
            )
            for comment in (fields.get("comment") or {}).get("comments", [])
        ]

        return Issue(
            id=data["key"],
            project_id=cfg.project_id,
            title=fields.get("summary") or "",
            description=self.formatter.to_text(fields.get("description")),
            state=cfg.generic_state((fields.get("status") or {}).get("name")),
            priority=cfg.generic_priority((fields.get("priority") or {}).get("name")),
            type_name=cfg.generic_type((fields.get("issuetype") or {}).get("name")),
            sprint_number=self._parse_sprint(fields.get(cfg.sprint_field), cfg),
            estimation=cfg.generic_estimation(fields.get(cfg.story_points_field)),
            assignee_ids=[assignee_id] if assignee_id else [],
            comments=comments,
            created_at=parse_jira_datetime(fields.get("created")),
            updated_at=parse_jira_datetime(fields.get("updated")),
        )

    def _parse_sprint(self, value: Any, cfg: JiraMappingConfiguration) -> Optional[int]:
        """Pick the active sprint, else the most recent one the issue belongs to."""
        if not value:
            return None
        sprints = value if isinstance(value, list) else [value]
        sprints = [s for s in sprints if isinstance(s, dict)]
        if not sprints:
            return None

        active = [s for s in sprints if s.get("state") == "active"]
        current = active[0] if active else sprints[-1]
        return cfg.generic_sprint(current.get("id"))
