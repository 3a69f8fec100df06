"""
Pass 40 — Contract Validation

Validates the coerced params against the operation's contract. A failure
halts the run with a ValidationError.
"""

from opchain.core.context import RunContext
from opchain.core.logging import get_pass_logger
from opchain.core.result import ValidationError
from opchain.validation.validator import valid

PASS_NAME = "p40_validate"
log = get_pass_logger(PASS_NAME)


def validate_params(ctx: RunContext) -> RunContext:
    """Run the validator; halt on failure."""
    outcome = valid(ctx.operation.contract, ctx.params)

    if isinstance(outcome, ValidationError):
        log.warning(
            "validation_error",
            operation=ctx.operation.name,
            errors={str(field): messages for field, messages in outcome.errors.items()},
        )
        ctx.add_trace(
            pass_name=PASS_NAME,
            action="rejected_params",
            fields=list(outcome.errors),
        )
        ctx.halt(outcome)
        return ctx

    ctx.add_trace(pass_name=PASS_NAME, action="validated_params")
    return ctx
