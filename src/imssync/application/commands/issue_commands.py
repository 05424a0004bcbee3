"""
Issue Commands - Write operations on issues.

Each command wraps one connector write. Successful results carry the
issue as returned by the connector.
"""

from typing import Any, Optional
from uuid import UUID

from ...core.domain.entities import CreateIssueInput, Issue
from ...core.domain.enums import IssueField, IssuePriority, IssueState, TShirtSizeEstimation
from ...core.domain.mapping import IssueMappingConfiguration
from ...core.ports.ims_connector import ImsConnectorPort
from .base import Command


# Accepted value types per field
_FIELD_TYPES: dict[IssueField, tuple] = {
    IssueField.TITLE: (str,),
    IssueField.DESCRIPTION: (str,),
    IssueField.STATE: (IssueState,),
    IssueField.PRIORITY: (IssuePriority,),
    IssueField.TYPE: (str,),
    IssueField.SPRINT: (int, type(None)),
    IssueField.ESTIMATION: (TShirtSizeEstimation,),
    IssueField.ASSIGNEE: (UUID,),
}


def _translate(cfg: IssueMappingConfiguration, field: IssueField, value: Any) -> None:
    """Run the forward translation a connector write of field would use."""
    if field == IssueField.STATE:
        cfg.vendor_state(value)
    elif field == IssueField.PRIORITY:
        cfg.vendor_priority(value)
    elif field == IssueField.ESTIMATION:
        cfg.vendor_estimation(value)
    elif field == IssueField.TYPE:
        cfg.vendor_type(value)
    elif field == IssueField.ASSIGNEE:
        cfg.vendor_user(value)
    elif field == IssueField.SPRINT and value is not None and hasattr(cfg, "vendor_sprint"):
        cfg.vendor_sprint(value)


class ChangeIssueFieldCommand(Command):
    """Change one field of an issue."""

    def __init__(
        self,
        connector: ImsConnectorPort,
        issue_id: str,
        field: IssueField,
        value: Any,
        mapping_configuration: IssueMappingConfiguration,
        dry_run: bool = True,
    ):
        super().__init__(dry_run=dry_run)
        self.connector = connector
        self.issue_id = issue_id
        self.field = field
        self.value = value
        self.mapping_configuration = mapping_configuration

    @property
    def name(self) -> str:
        return f"change {self.field.value} of {self.issue_id} to {self._display_value()}"

    def validate(self) -> Optional[str]:
        if not self.issue_id:
            return "Issue id is required"
        if not isinstance(self.value, _FIELD_TYPES[self.field]) or isinstance(self.value, bool):
            return f"Invalid value for {self.field.value}: {self.value!r}"
        if self.field in (IssueField.TITLE, IssueField.TYPE) and not self.value.strip():
            return f"{self.field.value.capitalize()} must not be empty"
        return None

    def check_mapping(self) -> None:
        _translate(self.mapping_configuration, self.field, self.value)

    def _run(self) -> Issue:
        operations = {
            IssueField.TITLE: self.connector.change_issue_title,
            IssueField.DESCRIPTION: self.connector.change_issue_description,
            IssueField.STATE: self.connector.change_issue_state,
            IssueField.PRIORITY: self.connector.change_issue_priority,
            IssueField.TYPE: self.connector.change_issue_type,
            IssueField.SPRINT: self.connector.change_sprint_of_issue,
            IssueField.ESTIMATION: self.connector.change_estimation_of_issue,
            IssueField.ASSIGNEE: self.connector.assign_issue,
        }
        return operations[self.field](self.issue_id, self.value, self.mapping_configuration)

    def _display_value(self) -> str:
        if self.value is None:
            return "backlog" if self.field == IssueField.SPRINT else "none"
        if hasattr(self.value, "name") and not isinstance(self.value, str):
            return self.value.name
        text = str(self.value)
        return text if len(text) <= 40 else text[:37] + "..."


class AddCommentCommand(Command):
    """Add a comment to an issue."""

    def __init__(
        self,
        connector: ImsConnectorPort,
        issue_id: str,
        comment: str,
        mapping_configuration: IssueMappingConfiguration,
        dry_run: bool = True,
    ):
        super().__init__(dry_run=dry_run)
        self.connector = connector
        self.issue_id = issue_id
        self.comment = comment
        self.mapping_configuration = mapping_configuration

    @property
    def name(self) -> str:
        return f"add comment to {self.issue_id}"

    def validate(self) -> Optional[str]:
        if not self.issue_id:
            return "Issue id is required"
        if not self.comment or not self.comment.strip():
            return "Comment is required"
        return None

    def _run(self) -> Issue:
        return self.connector.add_comment_to_issue(
            self.issue_id, self.comment, self.mapping_configuration
        )


class CreateIssueCommand(Command):
    """Create a new issue in a project."""

    def __init__(
        self,
        connector: ImsConnectorPort,
        project_id: UUID,
        create_issue_input: CreateIssueInput,
        mapping_configuration: IssueMappingConfiguration,
        dry_run: bool = True,
    ):
        super().__init__(dry_run=dry_run)
        self.connector = connector
        self.project_id = project_id
        self.create_issue_input = create_issue_input
        self.mapping_configuration = mapping_configuration

    @property
    def name(self) -> str:
        return f"create issue '{self.create_issue_input.title[:50]}'"

    def validate(self) -> Optional[str]:
        if self.project_id is None:
            return "Project id is required"
        if not self.create_issue_input.title or not self.create_issue_input.title.strip():
            return "Title is required"
        return None

    def check_mapping(self) -> None:
        data = self.create_issue_input
        values = [
            (IssueField.STATE, data.state),
            (IssueField.PRIORITY, data.priority),
            (IssueField.ESTIMATION, data.estimation),
            (IssueField.TYPE, data.type_name),
            (IssueField.SPRINT, data.sprint_number),
        ] + [(IssueField.ASSIGNEE, assignee) for assignee in data.assignee_ids[:1]]
        for field, value in values:
            if value is not None:
                _translate(self.mapping_configuration, field, value)

    def _run(self) -> Issue:
        return self.connector.create_issue(
            self.project_id, self.create_issue_input, self.mapping_configuration
        )
