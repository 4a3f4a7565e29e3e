"""Unit tests for the exception hierarchy and its string forms."""

import pytest

from browser_cli.exceptions import (
    CDPCommandError,
    CDPConnectionError,
    CDPError,
    CDPTargetNotFoundError,
    CDPTimeoutError,
    CommandFailedError,
    ConnectionClosedError,
    ConnectionFailedError,
    ElementNotFoundError,
    EvalError,
)


@pytest.mark.unit
class TestCDPError:

    def test_message(self):
        error = CDPError("Test error")
        assert str(error) == "Test error"
        assert error.details == {}

    def test_details_in_str(self):
        error = CDPError("Test error", details={"key": "value", "count": 42})
        assert str(error) == "Test error (key=value, count=42)"

    def test_recovery_hint_kept_out_of_str(self):
        error = CDPError("Cannot reach Chrome", details={"recovery": "start chrome"})
        assert str(error) == "Cannot reach Chrome"
        assert error.details["recovery"] == "start chrome"


@pytest.mark.unit
@pytest.mark.parametrize(
    "error, base",
    [
        (ConnectionFailedError("x"), CDPConnectionError),
        (ConnectionClosedError("x"), CDPConnectionError),
        (CommandFailedError("x"), CDPCommandError),
        (CDPTimeoutError("x"), CDPError),
        (EvalError("x"), CDPError),
        (ElementNotFoundError("#x"), CDPError),
        (CDPTargetNotFoundError("x"), CDPError),
    ],
)
def test_hierarchy(error, base):
    assert isinstance(error, base)
    assert isinstance(error, CDPError)


@pytest.mark.unit
class TestStringForms:

    def test_command_failed(self):
        error = CommandFailedError("Cannot find context", method="Runtime.evaluate", error_code=-32000)
        assert str(error) == "Runtime.evaluate failed: Cannot find context (code -32000)"

    def test_command_failed_without_code(self):
        error = CommandFailedError("net::ERR_ABORTED", method="Page.navigate")
        assert str(error) == "Page.navigate failed: net::ERR_ABORTED"

    def test_timeout_with_method(self):
        error = CDPTimeoutError("Command timed out", command_method="Runtime.evaluate", timeout=30.0)
        assert str(error) == "Command 'Runtime.evaluate' timed out after 30.0s"

    def test_eval_error(self):
        error = EvalError("ReferenceError: foo is not defined")
        assert error.description == "ReferenceError: foo is not defined"
        assert str(error) == "Evaluation failed: ReferenceError: foo is not defined"

    def test_element_not_found(self):
        error = ElementNotFoundError("#missing")
        assert error.selector == "#missing"
        assert str(error) == "Element not found: #missing"

    def test_tab_index(self):
        error = CDPTargetNotFoundError("out of range", index=4)
        assert str(error) == "Tab index out of range: 4"

    def test_target_id(self):
        error = CDPTargetNotFoundError("gone", target_id="ABC123")
        assert "ABC123" in str(error)
