"""
Jira Mapping Configuration - Jira-specific vocabulary and field settings.
"""

from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import UUID

from ...core.domain.enums import IssuePriority, IssueState, TShirtSizeEstimation
from ...core.domain.mapping import IssueMappingConfiguration
from ...core.exceptions import ConfigurationError, UnmappedValueError


@dataclass
class JiraMappingConfiguration(IssueMappingConfiguration):
    """
    Mapping between one Scrum game project and one Jira project.

    Estimations map to story point values; sprint numbers map to the ids
    of Jira sprints on the project's board.
    """

    project_key: str = ""
    story_points_field: str = "customfield_10016"
    sprint_field: str = "customfield_10020"
    sprint_mapping: dict[int, int] = field(default_factory=dict)
    idempotency_label_prefix: str = "imssync-ref-"

    # -------------------------------------------------------------------------
    # Sprints
    # -------------------------------------------------------------------------

    def vendor_sprint(self, sprint_number: int) -> int:
        try:
            return self.sprint_mapping[sprint_number]
        except KeyError:
            raise UnmappedValueError(
                f"No Jira sprint mapped for sprint {sprint_number}",
                value=sprint_number,
                vocabulary="sprint",
            ) from None

    def generic_sprint(self, jira_sprint_id: Optional[int]) -> Optional[int]:
        if jira_sprint_id is None:
            return None
        for number, sprint_id in self.sprint_mapping.items():
            if sprint_id == jira_sprint_id:
                return number
        return None

    def reference_label(self, client_reference: str) -> str:
        """Jira label that tags an issue created for a client reference."""
        return f"{self.idempotency_label_prefix}{client_reference}".replace(" ", "_")

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JiraMappingConfiguration":
        """
        Build a configuration from a JSON-style dict.

        Enumerated keys use member names, e.g.
        {"states": {"TODO": "To Do"}, "estimations": {"M": 3}}. Estimations
        are story points and are stored as numbers.
        """
        try:
            return cls(
                project_id=UUID(str(data["project_id"])),
                project_key=data["project_key"],
                state_mapping=_enum_keys(IssueState, data.get("states", {})),
                priority_mapping=_enum_keys(IssuePriority, data.get("priorities", {})),
                estimation_mapping={
                    size: float(points)
                    for size, points in _enum_keys(
                        TShirtSizeEstimation, data.get("estimations", {})
                    ).items()
                },
                type_mapping=dict(data.get("types", {})),
                user_mapping={UUID(k): v for k, v in data.get("users", {}).items()},
                default_issue_type=data.get("default_issue_type", "Task"),
                story_points_field=data.get("story_points_field", cls.story_points_field),
                sprint_field=data.get("sprint_field", cls.sprint_field),
                sprint_mapping={int(k): int(v) for k, v in data.get("sprints", {}).items()},
                idempotency_label_prefix=data.get(
                    "idempotency_label_prefix", cls.idempotency_label_prefix
                ),
            )
        except KeyError as e:
            raise ConfigurationError(f"Mapping configuration is missing {e}") from e
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid mapping configuration: {e}") from e


def _enum_keys(enum_cls, raw: dict[str, Any]) -> dict:
    return {enum_cls.from_string(key): value for key, value in raw.items()}
