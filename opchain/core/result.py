"""
Results — Pydantic models for everything an operation can return.

A run never raises for an expected failure. It returns one of:

- Ok: business logic succeeded
- Error: business logic reported a failure (opaque payload)
- ValidationError: the contract rejected the params
- AuthError: the attached policy denied the action
- Interrupt: business logic returned early on purpose
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ResultStatus(str, Enum):
    """Discriminator shared by all results."""

    OK = "ok"
    ERROR = "error"
    INTERRUPT = "interrupt"


class Result(BaseModel):
    """Base class for operation results."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def status(self) -> ResultStatus:
        raise NotImplementedError

    @property
    def is_ok(self) -> bool:
        return self.status == ResultStatus.OK


class Ok(Result):
    """Successful result carrying the business-logic return value."""

    value: Any = None

    def __init__(self, value: Any = None, **data: Any) -> None:
        super().__init__(value=value, **data)

    @property
    def status(self) -> ResultStatus:
        return ResultStatus.OK


class Error(Result):
    """
    Failed result.

    Returned as-is when business logic (or a coercion) hands one back,
    so `reason` is whatever payload the caller chose.
    """

    reason: Any = None

    def __init__(self, reason: Any = None, **data: Any) -> None:
        super().__init__(reason=reason, **data)

    @property
    def status(self) -> ResultStatus:
        return ResultStatus.ERROR


class ValidationError(Error):
    """Contract validation failure; `reason` maps field name to messages."""

    @property
    def errors(self) -> dict:
        return self.reason


class AuthError(Error):
    """Authorization denial; `reason` is the denial reason."""


class Interrupt(Result):
    """Early return requested from inside business logic."""

    reason: Any = None

    def __init__(self, reason: Any = None, **data: Any) -> None:
        super().__init__(reason=reason, **data)

    @property
    def status(self) -> ResultStatus:
        return ResultStatus.INTERRUPT


def is_error(value: Any) -> bool:
    """Whether a value is error-shaped."""
    return isinstance(value, Error)
