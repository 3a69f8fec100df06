"""
Contracts — Immutable declarations of the fields an operation accepts.

A Contract is an ordered tuple of FieldSpec values. Each FieldSpec holds
an insertion-ordered mapping of check kind to argument. Arguments that
need compiling are compiled here, once, while the contract is built:

- `type` names are checked against the closed type set
- `struct` references are resolved to a class
- `inner` check maps become a nested Contract
- `list_item` check maps become a nested FieldSpec

Definition mistakes raise ContractDefinitionError here and never while
validating.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Hashable, Iterator, Optional

from opchain.core.errors import ContractDefinitionError
from opchain.validation.checks import CheckKind, bound_problem, canonical_key
from opchain.validation.types import check_type_ref, resolve_struct


def _freeze(checks: dict) -> Mapping:
    return MappingProxyType(dict(checks))


@dataclass(frozen=True)
class FieldSpec:
    """One declared field and its checks, in declaration order."""

    name: Hashable
    checks: Mapping = field(default_factory=lambda: _freeze({}))

    @classmethod
    def build(cls, name: Hashable, opts: Optional[Mapping] = None) -> "FieldSpec":
        """Compile raw check options into a FieldSpec."""
        return cls(name=name, checks=_freeze(compile_checks(name, opts or {})))

    # -------------------------------------------------------------------------
    # Derived accessors
    # -------------------------------------------------------------------------

    @property
    def required(self) -> bool:
        return bool(self.checks.get(CheckKind.REQUIRED.value, False))

    @property
    def has_default(self) -> bool:
        return CheckKind.DEFAULT.value in self.checks

    @property
    def default(self) -> Any:
        return self.checks.get(CheckKind.DEFAULT.value)

    @property
    def coerce_with(self) -> Optional[Callable]:
        return self.checks.get(CheckKind.COERCE_WITH.value)

    @property
    def alias(self) -> Optional[Hashable]:
        return self.checks.get(CheckKind.ALIAS.value)

    @property
    def allow_nil(self) -> Optional[bool]:
        """True, False, or None when not declared."""
        return self.checks.get(CheckKind.ALLOW_NIL.value)

    @property
    def inner(self) -> Optional["Contract"]:
        return self.checks.get(CheckKind.INNER.value)

    @property
    def list_item(self) -> Optional["FieldSpec"]:
        return self.checks.get(CheckKind.LIST_ITEM.value)

    def renamed(self, name: Hashable) -> "FieldSpec":
        """Same checks under another name."""
        return dataclasses.replace(self, name=name)


def compile_checks(name: Hashable, opts: Mapping) -> dict:
    """
    Normalize and compile the check options of one field.

    Keys are canonicalized (`in_` → `in`, `regex` → `format`). Unknown
    keys are kept as given and pass at validation time.
    """
    if not isinstance(opts, Mapping):
        raise ContractDefinitionError(
            f"checks for field {name!r} must be a mapping, got {type(opts).__name__}",
            field=name,
        )

    checks: dict = {}
    for key, arg in opts.items():
        kind = CheckKind.lookup(key)
        if kind is None:
            checks[canonical_key(key)] = arg
            continue

        if kind is CheckKind.TYPE:
            arg = check_type_ref(arg, field=name)
        elif kind is CheckKind.STRUCT:
            arg = resolve_struct(arg, field=name)
        elif kind is CheckKind.INNER:
            arg = _compile_inner(name, arg)
        elif kind is CheckKind.LIST_ITEM:
            arg = _compile_list_item(name, arg)
        elif kind in (CheckKind.NUMERICALITY, CheckKind.LENGTH) and not isinstance(arg, Mapping):
            raise ContractDefinitionError(
                f"{kind.value} for field {name!r} must be a mapping of constraints",
                field=name,
            )
        elif kind in (CheckKind.NUMERICALITY, CheckKind.LENGTH):
            problem = bound_problem(kind, arg)
            if problem is not None:
                raise ContractDefinitionError(f"{problem} for field {name!r}", field=name)

        checks[kind.value] = arg
    return checks


def _compile_inner(name: Hashable, arg: Any) -> "Contract":
    if isinstance(arg, Contract):
        return arg
    return Contract.from_list(arg, name=str(name))


def _compile_list_item(name: Hashable, arg: Any) -> FieldSpec:
    if isinstance(arg, FieldSpec):
        return arg
    return FieldSpec.build(name, arg)


@dataclass(frozen=True)
class Contract:
    """Ordered, immutable set of field declarations with unique names."""

    fields: tuple = ()
    name: Optional[str] = None

    def __post_init__(self) -> None:
        seen = set()
        for spec in self.fields:
            if spec.name in seen:
                raise ContractDefinitionError(
                    f"duplicate field {spec.name!r} in contract {self.name!r}",
                    field=spec.name,
                )
            seen.add(spec.name)

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: Any) -> bool:
        return any(spec.name == name for spec in self.fields)

    @property
    def names(self) -> list:
        return [spec.name for spec in self.fields]

    @property
    def is_empty(self) -> bool:
        return not self.fields

    def get(self, name: Any) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    @classmethod
    def from_list(cls, items: Any, name: Optional[str] = None) -> "Contract":
        """
        Build a contract from plain data.

        Accepts:
        - a list of (field_name, options) pairs
        - a mapping of field_name → options
        - a list of {"name": ..., "checks": {...}} dicts
        - FieldSpec instances (used as-is)
        """
        if isinstance(items, Mapping):
            items = list(items.items())

        builder = ContractBuilder()
        for item in items:
            if isinstance(item, FieldSpec):
                builder.add(item)
            elif isinstance(item, Mapping):
                if "name" not in item:
                    raise ContractDefinitionError(f"field entry without a name: {item!r}")
                builder.add(FieldSpec.build(item["name"], item.get("checks") or {}))
            elif isinstance(item, tuple) and len(item) == 2:
                field_name, opts = item
                builder.add(FieldSpec.build(field_name, opts or {}))
            else:
                raise ContractDefinitionError(f"cannot read field entry: {item!r}")
        return builder.build(name=name)


class ContractBuilder:
    """
    Fluent builder for contracts.

    Usage:
        contract = (
            ContractBuilder()
            .parameter("a", type="integer", required=True, default=1)
            .parameter("b", type="integer", numericality={"greater_than": 0})
            .build("sum")
        )
    """

    def __init__(self) -> None:
        self._fields: list[FieldSpec] = []

    def parameter(self, name: Hashable, **opts: Any) -> "ContractBuilder":
        """Declare a field. Keyword options are its checks, in order."""
        return self.add(FieldSpec.build(name, opts))

    def add(self, spec: FieldSpec) -> "ContractBuilder":
        """Append an already built FieldSpec."""
        if any(existing.name == spec.name for existing in self._fields):
            raise ContractDefinitionError(f"duplicate field {spec.name!r}", field=spec.name)
        self._fields.append(spec)
        return self

    def build(self, name: Optional[str] = None) -> Contract:
        return Contract(fields=tuple(self._fields), name=name)
