"""Tests for the typed client-call boundary."""

import pytest

from azorch.client import PROJECT_EXISTS_MESSAGE, CallResult, CallStatus, classify, is_project_exists
from azorch.errors import AzkabanApiError, SessionExpiredError


class TestIsProjectExists:
    @pytest.mark.parametrize("message", [
        "Project already exists.",
        "project already exists.",
        "PROJECT ALREADY EXISTS.",
    ])
    def test_matches_any_case(self, message):
        assert is_project_exists(AzkabanApiError(message))

    @pytest.mark.parametrize("message", [
        "Project already exists",
        "Project already exists. Choose another name.",
        "Project azorch_a doesn't exist.",
        "",
    ])
    def test_other_messages(self, message):
        assert not is_project_exists(AzkabanApiError(message))


class TestClassify:
    def test_success_carries_value(self):
        result = classify(lambda: "42")

        assert result == CallResult(CallStatus.SUCCESS, value="42")
        assert result.ok

    def test_conflict(self):
        def create():
            raise AzkabanApiError(PROJECT_EXISTS_MESSAGE)

        result = classify(create)

        assert result.status is CallStatus.CONFLICT
        assert not result.ok
        assert result.error.message == PROJECT_EXISTS_MESSAGE

    def test_failure(self):
        error = AzkabanApiError("Installation Failed.")

        def upload():
            raise error

        result = classify(upload)

        assert result.status is CallStatus.FAILURE
        assert result.error is error

    def test_expired_session_is_failure(self):
        """An expiry that reaches the boundary is an ordinary failure."""
        def call():
            raise SessionExpiredError("Azkaban session expired")

        assert classify(call).status is CallStatus.FAILURE

    def test_unrelated_exceptions_propagate(self):
        def call():
            raise KeyError("projectId")

        with pytest.raises(KeyError):
            classify(call)
