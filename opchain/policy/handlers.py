"""
Handlers — Fallback and callback contracts.

A fallback runs when an operation does not succeed:

    fallback(operation, params, error) -> any

A callback runs when an operation succeeds, and its return value is
discarded:

    callback(operation, params, result, opts) -> any

Either may be a plain callable, or a subclass (or instance) of the
classes below.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Fallback(ABC):
    """Base class for fallbacks."""

    @abstractmethod
    def process(self, operation: Any, params: dict, error: Any) -> Any:
        ...


class Callback(ABC):
    """Base class for success callbacks."""

    @abstractmethod
    def process(self, operation: Any, params: dict, result: Any, opts: Any) -> Any:
        ...


def invoke_handler(handler: Any, *args: Any) -> Any:
    """Call a fallback/callback however it was given."""
    if isinstance(handler, type) and issubclass(handler, (Fallback, Callback)):
        return handler().process(*args)
    if isinstance(handler, (Fallback, Callback)):
        return handler.process(*args)
    return handler(*args)
