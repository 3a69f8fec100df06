"""
Pass 50 — Business Logic Invocation

Calls the operation's process function with only the declared fields.

Return values:
- a Result (Ok, Error, ...) is kept as-is
- anything else is wrapped in Ok

Control signals raised inside the call become results: an interrupt
becomes Interrupt(reason), an authorization denial becomes
AuthError(reason). Any other exception propagates to the caller.
"""

from opchain.core.context import RunContext
from opchain.core.errors import AuthSignal, InterruptSignal
from opchain.core.logging import get_pass_logger
from opchain.core.params import has_item
from opchain.core.result import AuthError, Interrupt, Ok, Result
from opchain.policy.engine import running

PASS_NAME = "p50_invoke"
log = get_pass_logger(PASS_NAME)


def invoke(ctx: RunContext) -> RunContext:
    operation = ctx.operation
    declared = {
        spec.name: ctx.params[spec.name]
        for spec in operation.contract
        if has_item(ctx.params, spec.name)
    }

    try:
        with running(operation):
            returned = operation.process(declared)
    except InterruptSignal as signal:
        result = Interrupt(signal.reason)
    except AuthSignal as signal:
        result = AuthError(signal.reason)
    else:
        result = returned if isinstance(returned, Result) else Ok(returned)

    log.verbose(
        "processed",
        operation=operation.name,
        status=result.status.value,
        result_type=type(result).__name__,
    )
    ctx.add_trace(
        pass_name=PASS_NAME,
        action="invoked_process",
        status=result.status.value,
    )
    ctx.result = result
    return ctx
