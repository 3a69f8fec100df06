"""
Pass 20 — Default Resolution

Injects defaults for declared fields absent from the params. A default is
either a literal or a one-argument callable that receives the full
params (after alias resolution), so defaults may depend on other fields.
"""

from opchain.core.context import RunContext
from opchain.core.logging import get_pass_logger
from opchain.core.params import has_item

PASS_NAME = "p20_resolve_defaults"
log = get_pass_logger(PASS_NAME)


def resolve_defaults(ctx: RunContext) -> RunContext:
    received = ctx.params
    params = dict(received)
    applied = []

    for spec in ctx.operation.contract:
        if not spec.has_default or has_item(params, spec.name):
            continue
        default = spec.default
        if callable(default) and not isinstance(default, type):
            default = default(received)
        params[spec.name] = default
        applied.append(spec.name)

    if applied:
        log.debug("defaults_applied", fields=[repr(name) for name in applied])
        ctx.add_trace(
            pass_name=PASS_NAME,
            action="applied_defaults",
            fields=applied,
        )

    ctx.params = params
    ctx.resolved_params = dict(params)
    return ctx
