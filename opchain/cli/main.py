"""
opchain CLI — Check params files against contract files.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

import yaml

from opchain import __version__
from opchain.core.errors import ContractDefinitionError
from opchain.core.result import ValidationError
from opchain.validation.loader import load_contract
from opchain.validation.validator import errors_message, valid


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="opchain",
        description="Contract-checked operations",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"opchain {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Validate a params file against a contract"
    )
    validate_parser.add_argument(
        "contract",
        type=str,
        help="Path to a YAML contract file",
    )
    validate_parser.add_argument(
        "params",
        type=str,
        help="Path to a JSON or YAML params file (use - for stdin)",
    )
    validate_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    # Logging configuration
    validate_parser.add_argument(
        "--log-level",
        type=str,
        choices=["silent", "info", "verbose", "debug"],
        default=None,
        help="Log verbosity level (default: info, or OPCHAIN_LOG_LEVEL env var)",
    )
    validate_parser.add_argument(
        "--log-channel",
        type=str,
        default=None,
        help="Comma-separated log channels to show (pipeline,validation,policy,chain,system). Default: all",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "validate":
        return run_validate(args)

    return 0


def run_validate(args: argparse.Namespace) -> int:
    """Run the validate command. Exit status 0 when valid, 1 when not."""
    from opchain.core.logging import configure_logging

    channels = None
    if args.log_channel:
        channels = [ch.strip() for ch in args.log_channel.split(",")]

    configure_logging(
        level=args.log_level,
        channels=channels,
        force=True,
    )

    try:
        contract = load_contract(args.contract)
    except (FileNotFoundError, ContractDefinitionError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        params = read_params(args.params)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        result = valid(contract, params)
    except TypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.format == "json":
        print(json.dumps(format_json(result), indent=2, default=repr))
    elif isinstance(result, ValidationError):
        print(errors_message(result.errors))
    else:
        print("valid")

    return 1 if isinstance(result, ValidationError) else 0


def read_params(source: str) -> Any:
    """Read params from a JSON/YAML file, or stdin for '-'."""
    if source == "-":
        text = sys.stdin.read()
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Params file not found: {path}")
        text = path.read_text()
        if path.suffix == ".json":
            return json.loads(text)

    # YAML is a superset of JSON
    return yaml.safe_load(text)


def format_json(result: Any) -> dict:
    if isinstance(result, ValidationError):
        return {
            "valid": False,
            "errors": {str(field): messages for field, messages in result.errors.items()},
        }
    return {"valid": True}


if __name__ == "__main__":
    sys.exit(main())
