"""
Params — Helpers for turning heterogeneous input into a params map.

Accepted shapes:
- any Mapping
- a list/tuple of (key, value) pairs (later pairs win)
- record-like values: dataclass instances, namedtuples, pydantic models
- None (empty params)
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

# Marker for "key not present", distinct from an explicit None.
MISSING = object()


def is_pairs(value: Any) -> bool:
    """Check whether a value is a list of (key, value) pairs."""
    if not isinstance(value, (list, tuple)) or _is_namedtuple(value):
        return False
    return all(isinstance(item, tuple) and len(item) == 2 for item in value)


def is_record(value: Any) -> bool:
    """Check whether a value is a record-like object (not a plain mapping)."""
    if isinstance(value, type):
        return False
    return (
        dataclasses.is_dataclass(value)
        or _is_namedtuple(value)
        or isinstance(value, BaseModel)
    )


def is_map_like(value: Any) -> bool:
    """Check whether a value can be read as a params map."""
    return isinstance(value, Mapping) or is_pairs(value) or is_record(value)


def to_params(value: Any) -> dict:
    """
    Normalize input into a new params dict.

    Raises:
        TypeError: If the value has no key/value reading
    """
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    if is_record(value):
        return record_fields(value)
    if is_pairs(value):
        return dict(value)
    raise TypeError(f"Cannot read params from {type(value).__name__}: {value!r}")


def record_fields(value: Any) -> dict:
    """Shallow field dict of a record-like value."""
    if dataclasses.is_dataclass(value):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if _is_namedtuple(value):
        return dict(value._asdict())
    if isinstance(value, BaseModel):
        return {name: getattr(value, name) for name in type(value).model_fields}
    raise TypeError(f"Not a record: {value!r}")


def has_item(params: Mapping, name: Any) -> bool:
    """Whether a param was provided at all (None counts as provided)."""
    return params.get(name, MISSING) is not MISSING


def merge_into(value: Any, updates: dict) -> Any:
    """
    Return a copy of a map-like value with `updates` applied.

    Keeps the original shape where it can: mappings stay dicts,
    dataclasses and pydantic models are copied with the new field values,
    pairs stay pairs.
    """
    if not updates:
        return value
    if isinstance(value, Mapping):
        return {**value, **updates}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.replace(value, **updates)
    if _is_namedtuple(value):
        return value._replace(**updates)
    if isinstance(value, BaseModel):
        return value.model_copy(update=updates)
    if is_pairs(value):
        merged = dict(value)
        merged.update(updates)
        return list(merged.items())
    return {**to_params(value), **updates}


def _is_namedtuple(value: Any) -> bool:
    return isinstance(value, tuple) and hasattr(value, "_fields") and hasattr(value, "_asdict")
