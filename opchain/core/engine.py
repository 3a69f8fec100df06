"""
Engine — Operation orchestration.

An Operation binds a contract to a process function and runs the fixed
pipeline of passes around it:

    normalize → aliases → defaults → coerce → validate → invoke
    → fallback → callback

A pass halts the run by setting a result on the context. Once halted,
only the fallback and callback passes still run.

The engine is NOT where checks or policies live.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from opchain.core.context import RunContext
from opchain.core.contracts import Contract
from opchain.core.errors import OperationFailed, ValidationFailed
from opchain.core.logging import LogChannel, RunLogger, get_logger
from opchain.core.result import Error, Ok, Result, ValidationError
from opchain.passes import (
    coerce,
    handle_callback,
    handle_fallback,
    invoke,
    normalize,
    resolve_aliases,
    resolve_defaults,
    validate_params,
)
from opchain.validation.validator import errors_message

log = get_logger(LogChannel.SYSTEM)

# Type alias for a pass function
PassFn = Callable[[RunContext], RunContext]


@dataclass
class Pipeline:
    """A named sequence of passes."""

    id: str
    name: str
    passes: list[PassFn]
    # Passes that still run after a halt
    finalizers: tuple = ()


DEFAULT_PIPELINE = Pipeline(
    id="default",
    name="Operation pipeline",
    passes=[
        normalize,
        resolve_aliases,
        resolve_defaults,
        coerce,
        validate_params,
        invoke,
        handle_fallback,
        handle_callback,
    ],
    finalizers=(handle_fallback, handle_callback),
)


class Operation:
    """
    Contract-checked business logic.

    Usage:
        contract = ContractBuilder().parameter("a", type="integer", required=True).build()
        op = Operation("double", contract, lambda params: params["a"] * 2)
        op.run({"a": 2})  # Ok(value=4)
    """

    def __init__(
        self,
        name: str,
        contract: Any,
        process: Callable[[dict], Any],
        *,
        policy: Any = None,
        action: Any = None,
        fallback: Any = None,
        fallback_returns: bool = False,
        callback: Any = None,
        callback_opts: Any = None,
        pipeline: Pipeline = DEFAULT_PIPELINE,
    ) -> None:
        if contract is None:
            contract = Contract(name=name)
        elif not isinstance(contract, Contract):
            contract = Contract.from_list(contract, name=name)

        self.name = name
        self.contract = contract
        self.process = process
        self.policy = policy
        self.action = action
        self.fallback = fallback
        self.fallback_returns = fallback_returns
        self.callback = callback
        self.callback_opts = callback_opts
        self.pipeline = pipeline

        if contract.is_empty:
            log.warning("empty_contract", operation=name)

    def __repr__(self) -> str:
        return f"Operation({self.name!r})"

    def run(self, params: Any = None) -> Any:
        """
        Run the pipeline.

        Returns:
            Ok, Error, ValidationError, AuthError or Interrupt, or the
            fallback's return value when it replaces the result

        Raises:
            TypeError: If params cannot be read as a params map
        """
        ctx = RunContext(operation=self, received=params)
        rlog = RunLogger(self.name, ctx.run_id)

        try:
            for pass_fn in self.pipeline.passes:
                if ctx.halted and pass_fn not in self.pipeline.finalizers:
                    continue

                pass_name = pass_fn.__module__.rsplit(".", 1)[-1]
                rlog.pass_start(pass_name)
                try:
                    ctx = pass_fn(ctx)
                except Exception as e:
                    rlog.pass_error(pass_name, e)
                    raise
                rlog.pass_end(pass_name)

            rlog.run_complete(
                status=_status_of(ctx.result),
                halted=ctx.halted,
                passes=len(ctx.trace),
            )
        finally:
            rlog.close()

        return ctx.result

    def run_strict(self, params: Any = None) -> Any:
        """
        Run the pipeline and unwrap the result.

        Returns the Ok value. Interrupt results and fallback values that
        are not results are returned unchanged.

        Raises:
            ValidationFailed: If the contract rejected the params
            OperationFailed: If the run ended with any other Error
        """
        result = self.run(params)

        if isinstance(result, ValidationError):
            raise ValidationFailed(errors_message(result.errors), errors=result.errors)
        if isinstance(result, Error):
            raise OperationFailed(
                f"operation {self.name!r} failed: {result.reason!r}", result=result
            )
        if isinstance(result, Ok):
            return result.value
        return result


def operation(
    contract: Any = None,
    *,
    name: Optional[str] = None,
    **options: Any,
) -> Callable[[Callable[[dict], Any]], Operation]:
    """
    Decorator turning a process function into an Operation.

        @operation(ContractBuilder().parameter("a", type="integer").build())
        def double(params):
            return params["a"] * 2
    """

    def wrap(process: Callable[[dict], Any]) -> Operation:
        op = Operation(name or process.__name__, contract, process, **options)
        op.__doc__ = process.__doc__
        return op

    return wrap


def _status_of(result: Any) -> str:
    if isinstance(result, Result):
        return result.status.value
    return "replaced"
