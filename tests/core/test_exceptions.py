"""Tests for connector exceptions."""

import pytest

from imssync.core.exceptions import (
    ImsConnectorError,
    NotFoundError,
    RateLimitError,
    TransientError,
    annotate_errors,
)


class TestAnnotateErrors:
    """Tests for annotate_errors."""

    def test_fills_operation_and_issue(self):
        with pytest.raises(NotFoundError) as exc_info:
            with annotate_errors("change_issue_title", "PROJ-1"):
                raise NotFoundError("gone")

        assert exc_info.value.operation == "change_issue_title"
        assert exc_info.value.issue_id == "PROJ-1"
        assert str(exc_info.value) == "[change_issue_title PROJ-1] gone"

    def test_keeps_existing_values(self):
        with pytest.raises(ImsConnectorError) as exc_info:
            with annotate_errors("create_issue"):
                with annotate_errors("create_issue", "PROJ-9"):
                    raise ImsConnectorError("failed")

        assert exc_info.value.issue_id == "PROJ-9"

    def test_other_exceptions_untouched(self):
        with pytest.raises(KeyError):
            with annotate_errors("find_issue", "PROJ-1"):
                raise KeyError("x")


class TestRateLimitError:
    def test_is_transient(self):
        error = RateLimitError("slow down", retry_after=12.0, issue_id="PROJ-1")

        assert isinstance(error, TransientError)
        assert error.retry_after == 12.0
        assert error.issue_id == "PROJ-1"
