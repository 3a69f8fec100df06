"""
Pass 30 — Coercion

Runs each present field's `coerce_with` callable before validation, so
validation sees the coerced value.

A coercion is called as:
- coerce((name, value), params) when it takes two positional parameters
- coerce(value) when it takes one

Coercions declared inside `inner` contracts and `list_item` specs are
applied recursively. Coerced children are merged into a copy of the
parent value; undeclared keys of the parent value are kept.

A coercion returning an Error halts the run with that Error.
"""

from typing import Any, Callable, Optional

from opchain.core.context import RunContext
from opchain.core.logging import get_pass_logger
from opchain.core.params import has_item, is_map_like, merge_into, to_params
from opchain.core.result import is_error
from opchain.validation.checks import call_arity

PASS_NAME = "p30_coerce"
log = get_pass_logger(PASS_NAME)


def coerce(ctx: RunContext) -> RunContext:
    """Apply field coercions; halt on an error-shaped coercion result."""
    contract = ctx.operation.contract
    if not any(_needs_coercion(spec) for spec in contract):
        return ctx

    coerced = coerce_params(contract, ctx.params, ctx.params)

    if is_error(coerced):
        log.verbose("coercion_failed", reason=repr(coerced.reason))
        ctx.add_trace(pass_name=PASS_NAME, action="coercion_failed")
        ctx.halt(coerced)
        return ctx

    log.debug("coerced", fields=len(coerced))
    ctx.add_trace(pass_name=PASS_NAME, action="coerced_params")
    ctx.params = coerced
    return ctx


def coerce_params(contract: Any, params: dict, received: dict) -> Any:
    """Coerce every present field of a contract. Returns a new dict or an Error."""
    coerced = dict(params)
    for spec in contract:
        if not _needs_coercion(spec) or not has_item(coerced, spec.name):
            continue
        value = coerce_value(spec, spec.name, coerced[spec.name], received)
        if is_error(value):
            return value
        coerced[spec.name] = value
    return coerced


def coerce_value(spec: Any, name: Any, value: Any, received: dict) -> Any:
    """Coerce one value, then its nested children or list items."""
    if spec.coerce_with is not None:
        value = apply_coercion(spec.coerce_with, name, value, received)
        if is_error(value):
            return value

    inner = spec.inner
    if inner is not None and is_map_like(value) and any(_needs_coercion(s) for s in inner):
        children = to_params(value)
        coerced = coerce_params(inner, children, children)
        if is_error(coerced):
            return coerced
        updates = {
            child.name: coerced[child.name]
            for child in inner
            if _needs_coercion(child) and has_item(children, child.name)
        }
        value = merge_into(value, updates)

    item_spec = spec.list_item
    if item_spec is not None and isinstance(value, list) and _needs_coercion(item_spec):
        items = []
        for index, item in enumerate(value):
            coerced_item = coerce_value(item_spec, f"{name}[{index}]", item, received)
            if is_error(coerced_item):
                return coerced_item
            items.append(coerced_item)
        value = items

    return value


def apply_coercion(fn: Callable, name: Any, value: Any, received: dict) -> Any:
    if call_arity(fn, (1, 2)) == 1:
        return fn(value)
    return fn((name, value), received)


def _needs_coercion(spec: Optional[Any]) -> bool:
    if spec is None:
        return False
    if spec.coerce_with is not None:
        return True
    if spec.inner is not None and any(_needs_coercion(child) for child in spec.inner):
        return True
    return _needs_coercion(spec.list_item)
