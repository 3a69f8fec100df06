"""
Tests for result models and exceptions.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from opchain.core.errors import (
    AuthSignal,
    ContractDefinitionError,
    InterruptSignal,
    OpchainError,
    OperationFailed,
    ValidationFailed,
)
from opchain.core.result import (
    AuthError,
    Error,
    Interrupt,
    Ok,
    ResultStatus,
    ValidationError,
    is_error,
)


class TestResults:
    """Tests for the result models."""

    def test_status(self):
        assert Ok(1).status is ResultStatus.OK
        assert Error("x").status is ResultStatus.ERROR
        assert ValidationError({}).status is ResultStatus.ERROR
        assert AuthError("x").status is ResultStatus.ERROR
        assert Interrupt("x").status is ResultStatus.INTERRUPT

    def test_positional_and_keyword(self):
        assert Ok(1) == Ok(value=1)
        assert Error("x") == Error(reason="x")

    def test_error_shape(self):
        """Validation and auth errors are error-shaped; interrupts are not."""
        assert is_error(ValidationError({"a": ["is required"]}))
        assert is_error(AuthError("banned"))
        assert not is_error(Interrupt("stop"))
        assert not is_error(Ok(1))
        assert not is_error({"error": True})

    def test_kinds_are_distinct(self):
        assert Error("x") != AuthError("x")
        assert Error({"a": ["m"]}) != ValidationError({"a": ["m"]})

    def test_frozen(self):
        result = Ok(1)
        with pytest.raises(PydanticValidationError):
            result.value = 2

    def test_validation_errors_accessor(self):
        errors = {"a": ["is required"]}
        assert ValidationError(errors).errors == errors

    def test_is_ok(self):
        assert Ok().is_ok
        assert not Interrupt().is_ok


class TestExceptions:
    """Tests for exception types."""

    def test_hierarchy(self):
        assert issubclass(ContractDefinitionError, OpchainError)
        assert issubclass(ValidationFailed, OpchainError)
        assert issubclass(OperationFailed, OpchainError)

    def test_signals_escape_broad_handlers(self):
        """Control signals are not caught by `except Exception`."""
        assert not issubclass(InterruptSignal, Exception)
        assert not issubclass(AuthSignal, Exception)

    def test_payloads(self):
        assert ValidationFailed("m", {"a": ["x"]}).errors == {"a": ["x"]}
        assert OperationFailed("m", Error(1)).result == Error(1)
        assert InterruptSignal("r").reason == "r"
        assert AuthSignal("r").reason == "r"
