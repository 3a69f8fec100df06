"""
Errors — Exceptions raised by opchain.

Expected failures are returned as results (see opchain.core.result).
Exceptions are reserved for:
- contract definition mistakes, raised while a contract is built
- strict runs (`Operation.run_strict`), which turn error results into raises
"""

from __future__ import annotations

from typing import Any, Optional


class OpchainError(Exception):
    """Base class for all opchain exceptions."""


class ContractDefinitionError(OpchainError):
    """A contract declares something that can never be checked."""

    def __init__(self, message: str, field: Any = None) -> None:
        super().__init__(message)
        self.field = field


class ValidationFailed(OpchainError):
    """Strict run rejected by contract validation."""

    def __init__(self, message: str, errors: Optional[dict] = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class OperationFailed(OpchainError):
    """Strict run whose business logic returned an error result."""

    def __init__(self, message: str, result: Any = None) -> None:
        super().__init__(message)
        self.result = result


# =============================================================================
# Control signals
# =============================================================================
# Raised from inside business logic and caught only at the business-logic
# call boundary. They derive from BaseException so that a broad
# `except Exception` in user code does not swallow them.

class InterruptSignal(BaseException):
    """Early return requested by business logic."""

    def __init__(self, reason: Any = None) -> None:
        super().__init__(reason)
        self.reason = reason


class AuthSignal(BaseException):
    """Authorization denied inside business logic."""

    def __init__(self, reason: Any = None) -> None:
        super().__init__(reason)
        self.reason = reason
