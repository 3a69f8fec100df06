"""
Validation — Contract checks and the validator that runs them.

- checks: the closed check registry
- types: type predicates for `type` and `struct`
- validator: runs a contract against params and groups failures
- loader: reads contracts from YAML files
"""

from opchain.validation.checks import CheckKind, CheckResult, run_check
from opchain.validation.validator import (
    errors_message,
    group_errors,
    valid,
    validate,
    validate_field,
)

__all__ = [
    "CheckKind",
    "CheckResult",
    "run_check",
    "errors_message",
    "group_errors",
    "valid",
    "validate",
    "validate_field",
]
