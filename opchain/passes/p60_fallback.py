"""
Pass 60 — Fallback

When the run did not succeed and a fallback is configured, calls
`fallback(operation, params, error)` with the params as they were after
alias and default resolution. The fallback's return value replaces the
result only when the operation was built with `fallback_returns=True`.
"""

from opchain.core.context import RunContext
from opchain.core.logging import get_pass_logger
from opchain.core.result import Ok
from opchain.policy.handlers import invoke_handler

PASS_NAME = "p60_fallback"
log = get_pass_logger(PASS_NAME)


def handle_fallback(ctx: RunContext) -> RunContext:
    operation = ctx.operation
    if operation.fallback is None or isinstance(ctx.result, Ok):
        return ctx

    returned = invoke_handler(operation.fallback, operation, ctx.resolved_params, ctx.result)

    log.info(
        "fallback_invoked",
        operation=operation.name,
        replaces_result=operation.fallback_returns,
    )
    ctx.add_trace(
        pass_name=PASS_NAME,
        action="invoked_fallback",
        replaced=operation.fallback_returns,
    )

    if operation.fallback_returns:
        ctx.result = returned
    return ctx
