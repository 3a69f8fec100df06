"""
Contract Loader — Load contracts from YAML files.

File format:

    name: create_user
    fields:
      - name: email
        checks:
          required: true
          type: string
          format: "^[^@]+@[^@]+$"
      - name: age
        checks:
          type: integer
          numericality: {gte: 18}

`fields` may also be a mapping of field name to checks. Only checks that
can be written as data apply; `func`, `coerce_with` and callable
defaults need the Python builder.
"""

from pathlib import Path
from typing import Any, Optional, Union

import yaml

from opchain.core.contracts import Contract
from opchain.core.errors import ContractDefinitionError
from opchain.core.logging import LogChannel, get_logger

log = get_logger(LogChannel.VALIDATION)


def load_contract(path: Union[str, Path]) -> Contract:
    """
    Load a contract from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ContractDefinitionError: If the contract is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Contract not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return parse_contract(data, default_name=path.stem)


def parse_contract(data: Any, default_name: Optional[str] = None) -> Contract:
    """Parse contract data (as loaded from YAML) into a Contract."""
    if not isinstance(data, dict):
        raise ContractDefinitionError(
            f"contract must be a mapping, got {type(data).__name__}"
        )

    name = data.get("name", default_name)
    fields = data.get("fields") or []

    if isinstance(fields, dict):
        entries = [
            {"name": field_name, "checks": checks or {}}
            for field_name, checks in fields.items()
        ]
    elif isinstance(fields, list):
        entries = [_parse_field(entry) for entry in fields]
    else:
        raise ContractDefinitionError(f"fields of contract {name!r} must be a list or mapping")

    contract = Contract.from_list(entries, name=name)
    log.verbose("contract_loaded", contract=name, fields=len(contract))
    return contract


def _parse_field(entry: Any) -> dict:
    if isinstance(entry, str):
        return {"name": entry, "checks": {}}
    if not isinstance(entry, dict) or "name" not in entry:
        raise ContractDefinitionError(f"cannot read field entry: {entry!r}")
    return {"name": entry["name"], "checks": entry.get("checks") or {}}


# Cached contracts
_cache: dict[str, Contract] = {}


def get_contract(path: Union[str, Path], use_cache: bool = True) -> Contract:
    """Get a contract, using the cache if available."""
    key = str(Path(path).resolve())
    if use_cache and key in _cache:
        return _cache[key]

    contract = load_contract(path)
    _cache[key] = contract
    return contract


def clear_cache() -> None:
    """Clear the contract cache."""
    _cache.clear()
