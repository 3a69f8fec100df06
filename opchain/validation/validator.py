"""
Validator — Runs a contract's checks against a params map.

For each field, in contract order:
- absent and not required: no results
- absent and required: exactly one "is required" failure
- present: allow_nil handling, then every declared check in order

Failures are grouped by field in first-seen order, keeping each
field's message order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from opchain.core.logging import LogChannel, get_logger
from opchain.core.params import has_item, to_params
from opchain.core.result import Ok, ValidationError
from opchain.validation.checks import CheckResult, run_check

if TYPE_CHECKING:
    from opchain.core.contracts import Contract, FieldSpec

log = get_logger(LogChannel.VALIDATION)


def validate_field(spec: "FieldSpec", params: Mapping) -> list[CheckResult]:
    """Run every check declared for one field."""
    name = spec.name

    if not has_item(params, name):
        if spec.required:
            return [CheckResult.fail(name, "is required")]
        return []

    if params[name] is None:
        allow_nil = spec.allow_nil
        if allow_nil is True:
            return []
        if allow_nil is False:
            return [CheckResult.fail(name, "doesn't allow nil")]

    results: list[CheckResult] = []
    for kind, arg in spec.checks.items():
        results.extend(run_check(kind, params, name, arg))
    return results


def validate(contract: "Contract", params: Mapping) -> list[CheckResult]:
    """Run all checks of a contract and return the flat result list."""
    results: list[CheckResult] = []
    for spec in contract:
        results.extend(validate_field(spec, params))
    return results


def validate_nested(contract: "Contract", parent: Any, value: Any) -> list[CheckResult]:
    """
    Validate a nested map-like value.

    Both the child specs and the child params are renamed to
    "<parent>[:<child>]", so deeper nesting composes.
    """
    child_params = to_params(value)
    synthetic = {}
    results: list[CheckResult] = []

    renamed = []
    for spec in contract:
        qualified = f"{parent}[:{spec.name}]"
        renamed.append(spec.renamed(qualified))
        if has_item(child_params, spec.name):
            synthetic[qualified] = child_params[spec.name]

    for spec in renamed:
        results.extend(validate_field(spec, synthetic))
    return results


def validate_items(item_spec: "FieldSpec", parent: Any, items: list) -> list[CheckResult]:
    """Validate every element of a list under "<parent>[<index>]"."""
    results: list[CheckResult] = []
    for index, item in enumerate(items):
        name = f"{parent}[{index}]"
        results.extend(validate_field(item_spec.renamed(name), {name: item}))
    return results


def group_errors(results: Iterable[CheckResult]) -> dict:
    """Group failing results by field, preserving first-seen order."""
    errors: dict = {}
    for result in results:
        if result.passes:
            continue
        errors.setdefault(result.field, []).append(result.message)
    return errors


def valid(contract: "Contract", params: Any) -> Ok | ValidationError:
    """
    Validate params against a contract.

    Returns:
        Ok(params) when every check passes, ValidationError(errors) otherwise
    """
    params = to_params(params)
    errors = group_errors(validate(contract, params))

    if errors:
        log.verbose(
            "validation_failed",
            contract=contract.name,
            fields=len(errors),
        )
        return ValidationError(errors)

    log.debug("validation_passed", contract=contract.name, fields=len(contract))
    return Ok(params)


def errors_message(errors: Mapping) -> str:
    """
    Render grouped errors as text.

        a: is required
        b: has wrong type; expected type: integer, got: 'x'
        \tnot a number
    """
    lines = []
    for field, messages in errors.items():
        first, *rest = messages or [""]
        lines.append(f"{field}: {first}")
        lines.extend(f"\t{message}" for message in rest)
    return "\n".join(lines)
