"""
IMS Connector Port - Abstract interface for issue management systems.

Implementations: Jira, InMemory
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Generic, Optional, TypeVar
from uuid import UUID

from ..domain.entities import CreateEventInput, CreateIssueInput, Issue
from ..domain.enums import IssuePriority, IssueState, TShirtSizeEstimation
from ..domain.lookup import IssueLookup
from ..domain.mapping import IssueMappingConfiguration
from ..exceptions import ConfigurationError


C = TypeVar("C", bound=IssueMappingConfiguration)


class ImsConnectorPort(ABC, Generic[C]):
    """
    Abstract interface for querying and mutating issues in an external tracker.

    Each operation receives the mapping configuration that selects the
    tracker project and the vocabulary translation to apply. A connector
    instance is bound to one tracker instance / credentials pair and holds
    no per-call state.

    Every write operation returns the issue as the tracker reports it after
    the write, never an echo of the requested value. Writes against a
    missing issue raise NotFoundError; generic values the configuration
    cannot translate raise UnmappedValueError before the tracker is called.
    """

    # Concrete connectors bind their own configuration subclass
    mapping_configuration_type: type[IssueMappingConfiguration] = IssueMappingConfiguration

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the tracker name (e.g., 'Jira')."""
        ...

    @abstractmethod
    def test_connection(self) -> bool:
        """Check whether the tracker accepts our credentials."""
        ...

    def check_configuration(self, mapping_configuration: IssueMappingConfiguration) -> None:
        """Reject configurations made for a different connector type."""
        if not isinstance(mapping_configuration, self.mapping_configuration_type):
            raise ConfigurationError(
                f"{self.name} connector requires "
                f"{self.mapping_configuration_type.__name__}, "
                f"got {type(mapping_configuration).__name__}"
            )

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    @abstractmethod
    def list_issues(self, project_id: UUID, mapping_configuration: C) -> list[Issue]:
        """
        List the issues of a Scrum game project.

        Args:
            project_id: The Scrum game project
            mapping_configuration: Mapping for this project and connector

        Returns:
            Issues in tracker order
        """
        ...

    @abstractmethod
    def find_issue(self, issue_id: str, mapping_configuration: C) -> IssueLookup:
        """
        Find an issue by its tracker id.

        Returns:
            FoundIssue, or IssueNotFound when the tracker has no such issue
        """
        ...

    @abstractmethod
    def get_events_for_issue(
        self,
        issue_id: str,
        since: datetime,
        mapping_configuration: C,
    ) -> list[CreateEventInput]:
        """
        Translate the issue's tracker history into Scrum game events.

        The bound is inclusive: events with timestamp >= since are returned,
        sorted by timestamp. Naive datetimes are taken as UTC. Each event
        carries a stable source_id so overlapping windows can be deduplicated.
        """
        ...

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    @abstractmethod
    def change_issue_title(self, issue_id: str, title: str, mapping_configuration: C) -> Issue:
        ...

    @abstractmethod
    def change_issue_description(
        self,
        issue_id: str,
        description: str,
        mapping_configuration: C,
    ) -> Issue:
        """Replace the description (markdown text)."""
        ...

    @abstractmethod
    def change_issue_state(
        self,
        issue_id: str,
        issue_state: IssueState,
        mapping_configuration: C,
    ) -> Issue:
        """
        Request a state transition.

        The tracker's workflow decides whether the transition is allowed;
        the returned issue shows the state the tracker ended up in.
        """
        ...

    @abstractmethod
    def change_issue_priority(
        self,
        issue_id: str,
        priority: IssuePriority,
        mapping_configuration: C,
    ) -> Issue:
        ...

    @abstractmethod
    def change_issue_type(self, issue_id: str, type_name: str, mapping_configuration: C) -> Issue:
        ...

    @abstractmethod
    def change_sprint_of_issue(
        self,
        issue_id: str,
        sprint_number: Optional[int],
        mapping_configuration: C,
    ) -> Issue:
        """Move the issue into a sprint, or to the backlog when sprint_number is None."""
        ...

    @abstractmethod
    def change_estimation_of_issue(
        self,
        issue_id: str,
        estimation: TShirtSizeEstimation,
        mapping_configuration: C,
    ) -> Issue:
        ...

    @abstractmethod
    def assign_issue(self, issue_id: str, assignee_id: UUID, mapping_configuration: C) -> Issue:
        """Make the given Scrum game user the issue's only assignee."""
        ...

    @abstractmethod
    def add_comment_to_issue(self, issue_id: str, comment: str, mapping_configuration: C) -> Issue:
        """Add a comment, possibly markdown-formatted."""
        ...

    @abstractmethod
    def create_issue(
        self,
        project_id: UUID,
        create_issue_input: CreateIssueInput,
        mapping_configuration: C,
    ) -> Issue:
        """
        Create an issue in the tracker.

        When create_issue_input.client_reference is set and an issue with
        that reference already exists, that issue is returned instead.
        """
        ...
