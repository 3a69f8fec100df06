"""
Pass 00 — Input Normalization

Turns whatever the caller passed into a fresh params dict:
- mappings are copied
- lists of (key, value) pairs become dicts
- dataclasses, namedtuples and pydantic models are read field by field
- None becomes {}

Unsupported input raises TypeError.
"""

from opchain.core.context import RunContext
from opchain.core.logging import get_pass_logger
from opchain.core.params import to_params

PASS_NAME = "p00_normalize"
log = get_pass_logger(PASS_NAME)


def normalize(ctx: RunContext) -> RunContext:
    """Normalize the received input into a params dict."""
    params = to_params(ctx.received)

    log.debug(
        "normalized",
        input_type=type(ctx.received).__name__,
        keys=len(params),
    )

    ctx.params = dict(params)
    ctx.add_trace(
        pass_name=PASS_NAME,
        action="normalized_input",
        input_type=type(ctx.received).__name__,
    )
    return ctx
