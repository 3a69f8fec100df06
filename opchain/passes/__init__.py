"""Passes — Pipeline stages for an operation run."""

from opchain.passes.p00_normalize import normalize
from opchain.passes.p10_resolve_aliases import resolve_aliases
from opchain.passes.p20_resolve_defaults import resolve_defaults
from opchain.passes.p30_coerce import coerce
from opchain.passes.p40_validate import validate_params
from opchain.passes.p50_invoke import invoke
from opchain.passes.p60_fallback import handle_fallback
from opchain.passes.p70_callback import handle_callback

__all__ = [
    "normalize",
    "resolve_aliases",
    "resolve_defaults",
    "coerce",
    "validate_params",
    "invoke",
    "handle_fallback",
    "handle_callback",
]
