"""
Type predicates for the `type` and `struct` checks.

The set of type names is closed. Contracts naming anything else are
rejected while they are built.
"""

from __future__ import annotations

import importlib
import numbers
from collections.abc import Mapping
from enum import Enum
from types import ModuleType
from typing import Any, Callable

from opchain.core.errors import ContractDefinitionError
from opchain.core.params import is_record


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_float(value: Any) -> bool:
    return isinstance(value, float)


def is_number(value: Any) -> bool:
    """Real numbers, excluding booleans."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_keyword(value: Any) -> bool:
    # A list of (str, value) pairs
    return isinstance(value, list) and all(
        isinstance(item, tuple) and len(item) == 2 and isinstance(item[0], str)
        for item in value
    )


TYPE_PREDICATES: dict[str, Callable[[Any], bool]] = {
    "boolean": lambda v: isinstance(v, bool),
    "integer": _is_integer,
    "float": _is_float,
    "number": is_number,
    "string": lambda v: isinstance(v, str),
    "bytes": lambda v: isinstance(v, (bytes, bytearray)),
    "tuple": lambda v: isinstance(v, tuple),
    "list": lambda v: isinstance(v, list),
    "set": lambda v: isinstance(v, (set, frozenset)),
    "map": lambda v: isinstance(v, Mapping),
    "keyword": _is_keyword,
    "struct": is_record,
    "enum": lambda v: isinstance(v, Enum),
    "callable": callable,
    "module": lambda v: isinstance(v, ModuleType),
    "none": lambda v: v is None,
}

KNOWN_TYPES = frozenset(TYPE_PREDICATES)


def check_type_ref(ref: Any, field: Any = None) -> Any:
    """
    Validate a `type` check argument at contract build time.

    Returns the argument unchanged.

    Raises:
        ContractDefinitionError: If the name is not a known type
    """
    if isinstance(ref, type):
        return ref
    if isinstance(ref, tuple) and ref and all(isinstance(t, type) for t in ref):
        return ref
    if isinstance(ref, str) and ref in KNOWN_TYPES:
        return ref
    raise ContractDefinitionError(
        f"unknown type {ref!r} for field {field!r}; known types: {sorted(KNOWN_TYPES)}",
        field=field,
    )


def type_label(ref: Any) -> str:
    """Human-readable name of a type reference."""
    if isinstance(ref, type):
        return ref.__name__
    if isinstance(ref, tuple):
        return " | ".join(t.__name__ for t in ref)
    return str(ref)


def matches_type(value: Any, ref: Any) -> bool:
    """Whether a value is of the referenced type."""
    if isinstance(ref, (type, tuple)):
        return isinstance(value, ref)
    return TYPE_PREDICATES[ref](value)


def resolve_struct(ref: Any, field: Any = None) -> type:
    """
    Resolve a `struct` check argument to a class.

    Accepts a class, a dotted import path ("package.module.Class"), or an
    instance used as a template (its class is taken).

    Raises:
        ContractDefinitionError: If a dotted path cannot be imported
    """
    if isinstance(ref, type):
        return ref
    if isinstance(ref, str):
        module_name, _, attr = ref.rpartition(".")
        if not module_name:
            raise ContractDefinitionError(
                f"unknown struct {ref!r} for field {field!r}", field=field
            )
        try:
            module = importlib.import_module(module_name)
            resolved = getattr(module, attr)
        except (ImportError, AttributeError) as exc:
            raise ContractDefinitionError(
                f"unknown struct {ref!r} for field {field!r}: {exc}", field=field
            ) from exc
        if not isinstance(resolved, type):
            raise ContractDefinitionError(
                f"struct {ref!r} for field {field!r} is not a class", field=field
            )
        return resolved
    return type(ref)
