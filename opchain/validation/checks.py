"""
Check Registry — The closed set of field checks.

Every check has the signature:

    check(params, field, arg) -> CheckResult | list[CheckResult]

`numericality` and `length` test several constraints at once and return
one result per constraint. `inner` and `list_item` recurse through the
validator.

Dispatch goes through CHECKS, a table keyed by CheckKind that is built
once at import time. Modifier kinds (default, coerce_with, alias,
allow_nil) shape the pipeline and produce no results. Unknown kinds pass.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from opchain.core.params import MISSING, has_item, is_map_like, is_record, record_fields
from opchain.core.result import Error
from opchain.validation.types import is_number, matches_type, type_label


# =============================================================================
# Kinds
# =============================================================================

class CheckKind(str, Enum):
    """All check and modifier kinds a field may declare."""

    # Checks
    TYPE = "type"
    REQUIRED = "required"
    NUMERICALITY = "numericality"
    LENGTH = "length"
    IN = "in"
    NOT_IN = "not_in"
    FORMAT = "format"
    EQUALS = "equals"
    STRUCT = "struct"
    SUBSET_OF = "subset_of"
    FUNC = "func"
    INNER = "inner"
    LIST_ITEM = "list_item"

    # Modifiers
    DEFAULT = "default"
    COERCE_WITH = "coerce_with"
    ALIAS = "alias"
    ALLOW_NIL = "allow_nil"

    @classmethod
    def lookup(cls, key: Any) -> Optional["CheckKind"]:
        """Resolve a declared key (or one of its aliases) to a kind."""
        if isinstance(key, cls):
            return key
        name = canonical_key(key)
        try:
            return cls(name)
        except ValueError:
            return None


ALIASES = {
    "regex": "format",
    "exactly": "equals",
    "function": "func",
    "from": "alias",
}

MODIFIERS = frozenset({
    CheckKind.DEFAULT,
    CheckKind.COERCE_WITH,
    CheckKind.ALIAS,
    CheckKind.ALLOW_NIL,
})


def canonical_key(key: Any) -> Any:
    """
    Canonical spelling of a declared key.

    Strips one trailing underscore (`in_` → `in`) and resolves aliases.
    """
    if isinstance(key, Enum):
        key = key.value
    if not isinstance(key, str):
        return key
    if key.endswith("_") and len(key) > 1:
        key = key[:-1]
    return ALIASES.get(key, key)


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check (or one constraint of a multi-constraint check)."""

    field: Any
    passes: bool
    message: Optional[str] = None

    @classmethod
    def ok(cls, field: Any) -> "CheckResult":
        return cls(field=field, passes=True)

    @classmethod
    def fail(cls, field: Any, message: str) -> "CheckResult":
        return cls(field=field, passes=False, message=message)

    def __repr__(self) -> str:
        if self.passes:
            return f"CheckResult({self.field!r}, pass)"
        return f"CheckResult({self.field!r}, fail: {self.message})"


CheckOutput = Union[CheckResult, list]


# =============================================================================
# Helpers
# =============================================================================

def positional_arity(fn: Callable) -> tuple[int, int]:
    """
    Required and maximum number of positional parameters of a callable.

    The maximum is -1 for callables taking *args. Callables without an
    inspectable signature count as taking exactly one.
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return 1, 1
    required = maximum = 0
    for param in sig.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            maximum = -1
        elif param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            if param.default is inspect.Parameter.empty:
                required += 1
            if maximum != -1:
                maximum += 1
    return required, maximum


def call_arity(fn: Callable, shapes: tuple) -> int:
    """
    Pick the argument count to call fn with, out of the given shapes.

    The smallest shape covering every required parameter wins. Callables
    taking only *args get the largest shape.
    """
    required, maximum = positional_arity(fn)
    if maximum == -1 and required == 0:
        return shapes[-1]
    for count in shapes:
        if count >= required and (maximum == -1 or count <= maximum):
            return count
    return shapes[-1] if required > shapes[-1] else shapes[0]


def _member(value: Any, collection: Any) -> bool:
    """Membership by equality, so unhashable values work against sets."""
    return any(value is item or value == item for item in collection)

def strict_equal(left: Any, right: Any) -> bool:
    """Equality without numeric widening, recursing into containers."""
    if type(left) is not type(right):
        return False
    if isinstance(left, Mapping):
        if set(left) != set(right):
            return False
        return all(strict_equal(left[k], right[k]) for k in left)
    if isinstance(left, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(strict_equal(a, b) for a, b in zip(left, right))
    return left == right


def measure_length(value: Any) -> Union[int, float]:
    """Numeric length of a value for the `length` check."""
    if is_number(value):
        return value
    if isinstance(value, Enum):
        return len(value.name)
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value)
    if isinstance(value, Mapping):
        return len(value)
    if is_record(value):
        return len(record_fields(value))
    return 0


def _listing(values: Any) -> str:
    return repr(list(values))


# =============================================================================
# Checks
# =============================================================================

def check_type(params: Mapping, field: Any, ref: Any) -> CheckResult:
    """Value (when present) must be of the declared type."""
    value = params.get(field, MISSING)
    if value is MISSING or matches_type(value, ref):
        return CheckResult.ok(field)
    return CheckResult.fail(
        field, f"has wrong type; expected type: {type_label(ref)}, got: {value!r}"
    )


def check_required(params: Mapping, field: Any, required: Any) -> CheckResult:
    """Key must be present. An explicit None counts as present."""
    if required and not has_item(params, field):
        return CheckResult.fail(field, "is required")
    return CheckResult.ok(field)


_NUMERICALITY = {
    "equal_to": (lambda v, n: v == n, "must be equal to"),
    "equals": (lambda v, n: v == n, "must be equal to"),
    "is": (lambda v, n: v == n, "must be equal to"),
    "greater_than": (lambda v, n: v > n, "must be greater than"),
    "gt": (lambda v, n: v > n, "must be greater than"),
    "greater_than_or_equal_to": (lambda v, n: v >= n, "must be greater than or equal to"),
    "gte": (lambda v, n: v >= n, "must be greater than or equal to"),
    "min": (lambda v, n: v >= n, "must be greater than or equal to"),
    "less_than": (lambda v, n: v < n, "must be less than"),
    "lt": (lambda v, n: v < n, "must be less than"),
    "less_than_or_equal_to": (lambda v, n: v <= n, "must be less than or equal to"),
    "lte": (lambda v, n: v <= n, "must be less than or equal to"),
    "max": (lambda v, n: v <= n, "must be less than or equal to"),
}


def check_numericality(params: Mapping, field: Any, constraints: Mapping) -> list:
    """One result per numeric constraint; a non-number fails once."""
    value = params.get(field)
    if not is_number(value):
        return [CheckResult.fail(field, "not a number")]

    results = []
    for key, bound in constraints.items():
        rule = _NUMERICALITY.get(canonical_key(key))
        if rule is None:
            results.append(CheckResult.ok(field))
            continue
        predicate, message = rule
        if predicate(value, bound):
            results.append(CheckResult.ok(field))
        else:
            results.append(CheckResult.fail(field, f"{message} {bound}"))
    return results


def _length_in(length: Any, bounds: Any) -> tuple[bool, str]:
    if isinstance(bounds, range):
        return length in bounds, f"{bounds.start}..{bounds.stop - 1}"
    low, high = bounds
    return low <= length <= high, f"{low}..{high}"


_LENGTH = {
    "min": (lambda l, n: l >= n, "length must be greater than or equal to"),
    "gte": (lambda l, n: l >= n, "length must be greater than or equal to"),
    "gt": (lambda l, n: l > n, "length must be greater than"),
    "max": (lambda l, n: l <= n, "length must be less than or equal to"),
    "lte": (lambda l, n: l <= n, "length must be less than or equal to"),
    "lt": (lambda l, n: l < n, "length must be less than"),
    "is": (lambda l, n: l == n, "length must be equal to"),
}


def bound_problem(kind: CheckKind, constraints: Mapping) -> Optional[str]:
    """
    Describe the first malformed bound of a numericality or length check.

    Returns None when every known constraint has a usable bound. Unknown
    constraint keys are left to validation time.
    """
    for key, bound in constraints.items():
        name = canonical_key(key)
        if kind is CheckKind.NUMERICALITY:
            if name in _NUMERICALITY and not is_number(bound):
                return f"numericality '{key}' needs a number, got {bound!r}"
        elif name == "in":
            if isinstance(bound, range):
                continue
            if not (
                isinstance(bound, (list, tuple))
                and len(bound) == 2
                and all(_is_count(b) for b in bound)
            ):
                return f"length 'in' needs a range or a (low, high) pair, got {bound!r}"
        elif name in _LENGTH and not _is_count(bound):
            return f"length '{key}' needs an integer, got {bound!r}"
    return None


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_length(params: Mapping, field: Any, constraints: Mapping) -> list:
    """One result per length constraint; unknown constraint keys fail."""
    length = measure_length(params.get(field))

    results = []
    for key, bound in constraints.items():
        name = canonical_key(key)
        if name == "in":
            inside, label = _length_in(length, bound)
            if inside:
                results.append(CheckResult.ok(field))
            else:
                results.append(CheckResult.fail(field, f"length must be in range {label}"))
            continue

        rule = _LENGTH.get(name)
        if rule is None:
            results.append(CheckResult.fail(field, f"unknown check '{key}'"))
            continue
        predicate, message = rule
        if predicate(length, bound):
            results.append(CheckResult.ok(field))
        else:
            results.append(CheckResult.fail(field, f"{message} {bound}"))
    return results


def check_in(params: Mapping, field: Any, allowed: Any) -> CheckResult:
    if not isinstance(allowed, (list, tuple, set, frozenset)):
        return CheckResult.ok(field)
    if _member(params.get(field), allowed):
        return CheckResult.ok(field)
    return CheckResult.fail(field, f"must be one of {_listing(allowed)}")


def check_not_in(params: Mapping, field: Any, excluded: Any) -> CheckResult:
    if not isinstance(excluded, (list, tuple, set, frozenset)):
        return CheckResult.ok(field)
    if not _member(params.get(field), excluded):
        return CheckResult.ok(field)
    return CheckResult.fail(field, f"must not be included in {_listing(excluded)}")


def check_format(params: Mapping, field: Any, pattern: Any) -> CheckResult:
    """String values must match the pattern (re.search)."""
    value = params.get(field)
    if not isinstance(value, str):
        return CheckResult.ok(field)
    if re.search(pattern, value):
        return CheckResult.ok(field)
    return CheckResult.fail(field, "has invalid format")


def check_equals(params: Mapping, field: Any, expected: Any) -> CheckResult:
    value = params.get(field)
    if strict_equal(value, expected):
        return CheckResult.ok(field)
    return CheckResult.fail(field, f"must be equal to {expected!r}; got: {value!r}")


def check_struct(params: Mapping, field: Any, cls: type) -> CheckResult:
    """Value's class must be exactly the expected class."""
    if type(params.get(field)) is cls:
        return CheckResult.ok(field)
    return CheckResult.fail(field, "is not expected struct")


def check_subset_of(params: Mapping, field: Any, allowed: Any) -> CheckResult:
    value = params.get(field)
    if not isinstance(value, list):
        return CheckResult.fail(field, "must be a list")
    if value and all(_member(item, allowed) for item in value):
        return CheckResult.ok(field)
    return CheckResult.fail(field, f"must be a subset of {_listing(allowed)}")


def check_func(params: Mapping, field: Any, fn: Callable) -> CheckResult:
    """
    Custom predicate.

    Called as fn(value), fn(params, value) or fn(params, field, value)
    depending on how many positional parameters it requires. Returning False
    fails with "isn't valid"; returning an Error fails with its reason.
    """
    value = params.get(field)
    arity = call_arity(fn, (1, 2, 3))
    if arity == 3:
        outcome = fn(params, field, value)
    elif arity == 2:
        outcome = fn(params, value)
    else:
        outcome = fn(value)

    if outcome is False:
        return CheckResult.fail(field, "isn't valid")
    if isinstance(outcome, Error):
        message = outcome.reason if outcome.reason is not None else "isn't valid"
        return CheckResult.fail(field, str(message))
    return CheckResult.ok(field)


def check_inner(params: Mapping, field: Any, contract: Any) -> list:
    """
    Validate a map-like value against a nested contract.

    Child results are keyed "<field>[:<child>]".
    """
    from opchain.validation.validator import validate_nested

    value = params.get(field)
    if not is_map_like(value):
        return [CheckResult.fail(field, "has wrong type")]
    return validate_nested(contract, field, value)


def check_list_item(params: Mapping, field: Any, item_spec: Any) -> list:
    """
    Validate each element of a list with the same checks.

    Element results are keyed "<field>[<index>]".
    """
    from opchain.validation.validator import validate_items

    value = params.get(field)
    if not isinstance(value, list):
        return [CheckResult.fail(field, "is not a list")]
    return validate_items(item_spec, field, value)


# =============================================================================
# Dispatch
# =============================================================================

CheckFn = Callable[[Mapping, Any, Any], CheckOutput]

CHECKS: dict[CheckKind, CheckFn] = {
    CheckKind.TYPE: check_type,
    CheckKind.REQUIRED: check_required,
    CheckKind.NUMERICALITY: check_numericality,
    CheckKind.LENGTH: check_length,
    CheckKind.IN: check_in,
    CheckKind.NOT_IN: check_not_in,
    CheckKind.FORMAT: check_format,
    CheckKind.EQUALS: check_equals,
    CheckKind.STRUCT: check_struct,
    CheckKind.SUBSET_OF: check_subset_of,
    CheckKind.FUNC: check_func,
    CheckKind.INNER: check_inner,
    CheckKind.LIST_ITEM: check_list_item,
}


def run_check(kind: Any, params: Mapping, field: Any, arg: Any) -> list:
    """Run one declared check and return its results as a list."""
    resolved = CheckKind.lookup(kind)
    if resolved is None:
        return [CheckResult.ok(field)]
    if resolved in MODIFIERS:
        return []

    output = CHECKS[resolved](params, field, arg)
    if isinstance(output, list):
        return output
    return [output]
