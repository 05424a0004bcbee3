"""Tests for IssueMappingConfiguration."""

from uuid import uuid4

import pytest

from imssync.core.domain import (
    IssueMappingConfiguration,
    IssuePriority,
    IssueState,
    TShirtSizeEstimation,
)
from imssync.core.exceptions import UnmappedValueError


@pytest.fixture
def config(project_id, alice):
    return IssueMappingConfiguration(
        project_id=project_id,
        state_mapping={IssueState.TODO: "To Do", IssueState.DONE: "Done"},
        priority_mapping={IssuePriority.HIGH: "Critical"},
        estimation_mapping={TShirtSizeEstimation.M: 3, TShirtSizeEstimation.L: 5},
        user_mapping={alice: "acc-1"},
    )


class TestForwardMapping:
    """Generic -> vendor translation."""

    def test_state(self, config):
        assert config.vendor_state(IssueState.TODO) == "To Do"

    def test_unmapped_state(self, config):
        with pytest.raises(UnmappedValueError) as exc_info:
            config.vendor_state(IssueState.IN_PROGRESS)

        assert exc_info.value.value == IssueState.IN_PROGRESS
        assert exc_info.value.vocabulary == "state"

    def test_estimation(self, config):
        assert config.vendor_estimation(TShirtSizeEstimation.L) == 5

    def test_user(self, config, alice):
        assert config.vendor_user(alice) == "acc-1"

    def test_unmapped_user(self, config):
        with pytest.raises(UnmappedValueError):
            config.vendor_user(uuid4())

    def test_types_pass_through_without_mapping(self, config):
        assert config.vendor_type("Story") == "Story"

    def test_types_strict_once_mapped(self, config):
        config.type_mapping = {"Story": "User Story"}

        assert config.vendor_type("story") == "User Story"
        with pytest.raises(UnmappedValueError):
            config.vendor_type("Epic")


class TestReverseMapping:
    """Vendor -> generic translation."""

    def test_state_case_insensitive(self, config):
        assert config.generic_state("done") == IssueState.DONE

    def test_unknown_state_is_none(self, config):
        assert config.generic_state("Blocked") is None

    def test_empty_is_none(self, config):
        assert config.generic_state(None) is None
        assert config.generic_priority("") is None

    def test_estimation_float_points(self, config):
        assert config.generic_estimation(3.0) == TShirtSizeEstimation.M

    def test_type_reverse(self, config):
        config.type_mapping = {"Story": "User Story"}

        assert config.generic_type("User Story") == "Story"
        assert config.generic_type("Bug") == "Bug"
        assert config.generic_type(None) == ""

    def test_user(self, config, alice):
        assert config.generic_user("acc-1") == alice
        assert config.generic_user("someone-else") is None


class TestEnums:
    """Tests for vocabulary parsing."""

    @pytest.mark.parametrize("text, expected", [
        ("IN_PROGRESS", IssueState.IN_PROGRESS),
        ("in progress", IssueState.IN_PROGRESS),
        ("todo", IssueState.TODO),
        ("To Do", IssueState.TODO),
    ])
    def test_state_from_string(self, text, expected):
        assert IssueState.from_string(text) == expected

    def test_size_from_string(self):
        assert TShirtSizeEstimation.from_string("xl") == TShirtSizeEstimation.XL

    def test_unknown(self):
        with pytest.raises(ValueError):
            IssuePriority.from_string("urgent")
