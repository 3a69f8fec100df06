"""
Policy Engine — Authorization and interruption from inside business logic.

Business logic calls `authorize(context)` to check the policy attached to
its operation, or `interrupt(reason)` to return early. Both leave the
business logic through a control signal that the pipeline turns into an
AuthError or Interrupt result. Neither can be called outside a run.

Decision rules for `authorize`:
- no policy attached       → denied with "undefined_policy"
- no action attached       → denied with "undefined_action"
- action not on the policy → denied with "unknown_policy"
- action returns True      → proceed
- action returns False     → denied with the action name
- action returns anything  → denied with that value
"""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional

from opchain.core.errors import AuthSignal, InterruptSignal
from opchain.core.logging import LogChannel, get_logger

if TYPE_CHECKING:
    from opchain.core.engine import Operation

log = get_logger(LogChannel.POLICY)

UNDEFINED_POLICY = "undefined_policy"
UNDEFINED_ACTION = "undefined_action"
UNKNOWN_POLICY = "unknown_policy"

_current_operation: ContextVar[Optional["Operation"]] = ContextVar(
    "opchain_current_operation", default=None
)


@contextmanager
def running(operation: "Operation") -> Iterator[None]:
    """Mark an operation as the one whose business logic is executing."""
    token = _current_operation.set(operation)
    try:
        yield
    finally:
        _current_operation.reset(token)


def current_operation() -> "Operation":
    """
    The operation whose business logic is executing.

    Raises:
        RuntimeError: Outside of a running operation
    """
    operation = _current_operation.get()
    if operation is None:
        raise RuntimeError("authorize() and interrupt() can only be called inside a running operation")
    return operation


def resolve_action(policy: Any, action: Any) -> Optional[Callable]:
    """Find the callable implementing an action on a policy."""
    if isinstance(policy, Mapping):
        handler = policy.get(action)
    elif isinstance(action, str):
        handler = getattr(policy, action, None)
    else:
        handler = None
    return handler if callable(handler) else None


def authorize(context: Any = None) -> bool:
    """
    Check the attached policy action against a context.

    Returns True when allowed. A denial leaves the business logic
    immediately; the run returns AuthError(reason).
    """
    operation = current_operation()
    policy = operation.policy
    action = operation.action

    if policy is None:
        _deny(operation, UNDEFINED_POLICY)
    if action is None:
        _deny(operation, UNDEFINED_ACTION)

    handler = resolve_action(policy, action)
    if handler is None:
        _deny(operation, UNKNOWN_POLICY)

    outcome = handler(context)
    if outcome is True:
        log.debug("authorized", operation=operation.name, action=str(action))
        return True
    if outcome is False:
        _deny(operation, action)
    _deny(operation, outcome)


def interrupt(reason: Any = None) -> None:
    """Leave the business logic early; the run returns Interrupt(reason)."""
    operation = current_operation()
    log.verbose("interrupted", operation=operation.name, reason=repr(reason))
    raise InterruptSignal(reason)


def _deny(operation: "Operation", reason: Any) -> None:
    log.info("authorization_denied", operation=operation.name, reason=repr(reason))
    raise AuthSignal(reason)


class Policy:
    """
    Optional base class for policies.

    Actions are methods taking a single context argument:

        class UserPolicy(Policy):
            def read(self, context):
                return context["user"].is_admin
    """

    def authorize(self, action: str, context: Any = None) -> bool:
        """Evaluate an action directly, outside any operation. Only True allows."""
        handler = resolve_action(self, action)
        if handler is None:
            return False
        return handler(context) is True
