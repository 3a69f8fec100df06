"""
RunContext — Mutable state passed between pipeline passes.

One context is created per Operation.run call and never shared. Each
pass reads what earlier passes produced and writes only its own fields.
Params dicts are replaced, never mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional
from uuid import uuid4

if TYPE_CHECKING:
    from opchain.core.engine import Operation


@dataclass
class TraceEntry:
    """What a pass did, for debugging a run."""

    pass_name: str
    action: str
    details: dict = field(default_factory=dict)


@dataclass
class RunContext:
    """
    State of one operation run.

    A pass may halt the run by calling `halt(result)`. Passes after a
    halt are skipped, except fallback and callback handling.
    """

    operation: "Operation"
    received: Any = None

    # Params as they move through the pipeline
    params: dict = field(default_factory=dict)
    resolved_params: dict = field(default_factory=dict)

    # Outcome
    result: Any = None
    halted: bool = False

    # Internal
    run_id: str = field(default_factory=lambda: str(uuid4()))
    trace: list[TraceEntry] = field(default_factory=list)

    def halt(self, result: Any) -> None:
        """Stop the run with a final result."""
        self.result = result
        self.halted = True

    def add_trace(self, pass_name: str, action: str, **details: Any) -> None:
        self.trace.append(TraceEntry(pass_name=pass_name, action=action, details=details))

    def last_trace(self) -> Optional[TraceEntry]:
        return self.trace[-1] if self.trace else None
