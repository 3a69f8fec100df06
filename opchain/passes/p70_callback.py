"""
Pass 70 — Success Callback

When the run succeeded and a callback is configured, calls
`callback(operation, params, result, opts)`. Its return value is ignored.
"""

from opchain.core.context import RunContext
from opchain.core.logging import get_pass_logger
from opchain.core.result import Ok
from opchain.policy.handlers import invoke_handler

PASS_NAME = "p70_callback"
log = get_pass_logger(PASS_NAME)


def handle_callback(ctx: RunContext) -> RunContext:
    operation = ctx.operation
    if operation.callback is None or not isinstance(ctx.result, Ok):
        return ctx

    invoke_handler(
        operation.callback,
        operation,
        ctx.resolved_params,
        ctx.result,
        operation.callback_opts,
    )

    log.verbose("callback_invoked", operation=operation.name)
    ctx.add_trace(pass_name=PASS_NAME, action="invoked_callback")
    return ctx
