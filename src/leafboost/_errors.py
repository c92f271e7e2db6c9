"""Error types for leafboost.

Two kinds of failure are distinguished:

- ConfigurationError: the caller asked for something that cannot be built
  (bad leaf budget, sampling rate out of range, too few sampled examples).
  Raised before any tree growth starts.
- InvariantError: an internal consistency check failed. This is a bug in
  the tree builder, not a data problem.

A node that finds no improving split is not an error.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid arguments to a tree-building call."""


class InvariantError(RuntimeError):
    """Internal consistency check failed during tree construction."""


def check(condition: bool, message: str) -> None:
    """Raise InvariantError with `message` unless `condition` holds."""
    if not condition:
        raise InvariantError(message)
