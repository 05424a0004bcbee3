"""
Issue Mapping Configuration - Vocabulary translation per project/connector.

One configuration belongs to exactly one Scrum game project and one
connector type. Writes translate generic -> vendor and fail loudly on
unknown values; reads translate vendor -> generic and yield None for
vendor values the configuration does not know.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import UUID

from ..exceptions import UnmappedValueError
from .enums import IssuePriority, IssueState, TShirtSizeEstimation


logger = logging.getLogger("IssueMappingConfiguration")


@dataclass
class IssueMappingConfiguration:
    """
    Base mapping configuration shared by all connectors.

    Connectors subclass this to add tracker-specific settings and bind
    the subclass as their mapping_configuration_type.
    """

    project_id: UUID
    state_mapping: dict[IssueState, str] = field(default_factory=dict)
    priority_mapping: dict[IssuePriority, str] = field(default_factory=dict)
    estimation_mapping: dict[TShirtSizeEstimation, Any] = field(default_factory=dict)

    # Empty type_mapping passes type names through unchanged
    type_mapping: dict[str, str] = field(default_factory=dict)
    user_mapping: dict[UUID, str] = field(default_factory=dict)
    default_issue_type: str = "Task"

    # -------------------------------------------------------------------------
    # Generic -> Vendor (writes)
    # -------------------------------------------------------------------------

    def vendor_state(self, state: IssueState) -> str:
        return self._forward(self.state_mapping, state, "state")

    def vendor_priority(self, priority: IssuePriority) -> str:
        return self._forward(self.priority_mapping, priority, "priority")

    def vendor_estimation(self, estimation: TShirtSizeEstimation) -> Any:
        return self._forward(self.estimation_mapping, estimation, "estimation")

    def vendor_type(self, type_name: str) -> str:
        if not self.type_mapping:
            return type_name
        for generic, vendor in self.type_mapping.items():
            if generic.lower() == type_name.lower():
                return vendor
        raise UnmappedValueError(
            f"No issue type mapped for '{type_name}'",
            value=type_name,
            vocabulary="type",
        )

    def vendor_user(self, user_id: UUID) -> str:
        return self._forward(self.user_mapping, user_id, "user")

    # -------------------------------------------------------------------------
    # Vendor -> Generic (reads)
    # -------------------------------------------------------------------------

    def generic_state(self, vendor_value: Optional[str]) -> Optional[IssueState]:
        return self._reverse(self.state_mapping, vendor_value, "state")

    def generic_priority(self, vendor_value: Optional[str]) -> Optional[IssuePriority]:
        return self._reverse(self.priority_mapping, vendor_value, "priority")

    def generic_estimation(self, vendor_value: Any) -> Optional[TShirtSizeEstimation]:
        return self._reverse(self.estimation_mapping, vendor_value, "estimation")

    def generic_type(self, vendor_value: Optional[str]) -> str:
        if not vendor_value:
            return ""
        for generic, vendor in self.type_mapping.items():
            if vendor.lower() == vendor_value.lower():
                return generic
        return vendor_value

    def generic_user(self, vendor_value: Optional[str]) -> Optional[UUID]:
        return self._reverse(self.user_mapping, vendor_value, "user")

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def supported_states(self) -> list[IssueState]:
        return list(self.state_mapping)

    def supported_priorities(self) -> list[IssuePriority]:
        return list(self.priority_mapping)

    def supported_estimations(self) -> list[TShirtSizeEstimation]:
        return list(self.estimation_mapping)

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _forward(self, mapping: dict, generic: Any, vocabulary: str) -> Any:
        try:
            return mapping[generic]
        except KeyError:
            label = generic.name if hasattr(generic, "name") else generic
            raise UnmappedValueError(
                f"No {vocabulary} mapped for {label}",
                value=generic,
                vocabulary=vocabulary,
            ) from None

    def _reverse(self, mapping: dict, vendor_value: Any, vocabulary: str) -> Any:
        if vendor_value is None or vendor_value == "":
            return None
        for generic, vendor in mapping.items():
            if _same_vendor_value(vendor, vendor_value):
                return generic
        logger.debug(f"Unmapped vendor {vocabulary} value: {vendor_value!r}")
        return None


def _same_vendor_value(configured: Any, actual: Any) -> bool:
    if isinstance(configured, str) and isinstance(actual, str):
        return configured.lower() == actual.lower()
    if isinstance(configured, (int, float)) and isinstance(actual, (int, float)):
        return float(configured) == float(actual)
    return str(configured) == str(actual)
