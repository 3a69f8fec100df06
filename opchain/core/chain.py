"""
Chain — Run operations in sequence, feeding each output into the next.

For every step, given the params carried so far:
1. apply the step's coercion (if any) to the normalized params
2. merge the step's additional params (they win; zero-argument
   callables are resolved now)
3. if the step's condition is false, skip the step: carry the merged
   params forward, or return them unwrapped if this was the last step
4. run the step's operation; continue with its Ok value, unwrap it at
   the last step, or stop and return any other result

A skipped step does not validate the params it carries forward.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from opchain.core.engine import Operation
from opchain.core.logging import LogChannel, get_logger
from opchain.core.params import to_params
from opchain.core.result import Ok, Result

log = get_logger(LogChannel.CHAIN)


@dataclass(frozen=True)
class ChainStep:
    """One operation of a chain and how to feed it."""

    operation: Operation
    additional_params: dict = field(default_factory=dict)
    condition: Optional[Callable[[dict], Any]] = None
    coerce: Optional[Callable[[dict], Any]] = None

    def prepare(self, params: Any) -> dict:
        """Params this step's operation receives (or carries forward)."""
        prepared = to_params(params)
        if self.coerce is not None:
            prepared = to_params(self.coerce(prepared))
        return {**prepared, **resolve_thunks(self.additional_params)}

    def should_run(self, params: dict) -> bool:
        return self.condition is None or bool(self.condition(params))


def resolve_thunks(additional: dict) -> dict:
    """Call zero-argument callables among additional params."""
    return {
        key: value() if callable(value) and not isinstance(value, type) else value
        for key, value in additional.items()
    }


class Chain:
    """
    Ordered sequence of operations.

    Usage:
        chain = (
            Chain("checkout", name_in_errors=True)
            .step(reserve_stock)
            .step(charge_card, additional_params={"currency": "EUR"})
            .step(send_receipt, condition=lambda params: params["email"])
        )
        chain.run({"order_id": 42})
    """

    def __init__(self, name: str, name_in_errors: bool = False) -> None:
        self.name = name
        self.name_in_errors = name_in_errors
        self._steps: list[ChainStep] = []

    def __repr__(self) -> str:
        return f"Chain({self.name!r}, steps={len(self._steps)})"

    def __len__(self) -> int:
        return len(self._steps)

    @property
    def steps(self) -> tuple:
        return tuple(self._steps)

    def step(
        self,
        operation: Operation,
        additional_params: Optional[dict] = None,
        condition: Optional[Callable[[dict], Any]] = None,
        coerce: Optional[Callable[[dict], Any]] = None,
    ) -> "Chain":
        """Append a step and return the chain."""
        self._steps.append(
            ChainStep(
                operation=operation,
                additional_params=dict(additional_params or {}),
                condition=condition,
                coerce=coerce,
            )
        )
        return self

    def run(self, params: Any = None) -> Any:
        """
        Run every step in order.

        Returns:
            The last step's unwrapped value; the first non-Ok result (as
            `(operation, result)` with name_in_errors); Ok(params) for a
            chain without steps
        """
        if not self._steps:
            return Ok(params)

        carried: Any = params
        last = len(self._steps) - 1

        for index, step in enumerate(self._steps):
            merged = step.prepare(carried)

            if not step.should_run(merged):
                log.verbose(
                    "step_skipped",
                    chain=self.name,
                    step=index,
                    operation=step.operation.name,
                )
                carried = merged
                if index == last:
                    return merged
                continue

            result = step.operation.run(merged)

            if isinstance(result, Ok):
                log.debug("step_completed", chain=self.name, step=index, operation=step.operation.name)
                if index == last:
                    return result.value
                carried = result.value
                continue

            log.info(
                "chain_halted",
                chain=self.name,
                step=index,
                operation=step.operation.name,
                result_type=type(result).__name__,
            )
            if self.name_in_errors and isinstance(result, Result):
                return (step.operation, result)
            return result

        return carried
