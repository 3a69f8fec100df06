"""
opchain — Contract-checked operations and operation chains.

Declare the fields an operation accepts, attach composable checks to each
of them, and run business logic behind a fixed pipeline:
normalize → alias → default → coerce → validate → process → fallback/callback.

Operations can be chained so that the output of one becomes the input of
the next.
"""

__version__ = "0.1.0"
