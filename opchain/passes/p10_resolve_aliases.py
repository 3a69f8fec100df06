"""
Pass 10 — Alias Resolution

For every field declaring an alternate input name, moves the value found
under the alternate key to the canonical field name and drops the
alternate key.
"""

from opchain.core.context import RunContext
from opchain.core.logging import get_pass_logger
from opchain.core.params import has_item

PASS_NAME = "p10_resolve_aliases"
log = get_pass_logger(PASS_NAME)


def resolve_aliases(ctx: RunContext) -> RunContext:
    params = dict(ctx.params)
    moved = []

    for spec in ctx.operation.contract:
        alias = spec.alias
        if alias is None or not has_item(params, alias):
            continue
        params[spec.name] = params.pop(alias)
        moved.append((alias, spec.name))

    if moved:
        log.debug("aliases_resolved", count=len(moved))
        ctx.add_trace(
            pass_name=PASS_NAME,
            action="resolved_aliases",
            moved=[f"{alias!r} -> {name!r}" for alias, name in moved],
        )

    ctx.params = params
    return ctx
