"""Process-wide settings for leafboost.

The minimum number of examples per leaf is shared by every tree built in
the process unless a build call passes its own value. It can be set with
the LEAFBOOST_MIN_LEAF_EXAMPLES environment variable or at runtime:

    >>> import leafboost as lb
    >>> lb.set_min_leaf_examples(50)
    >>> lb.get_min_leaf_examples()
    50

Each build call reads the value once when it starts, so changing it only
affects trees built afterwards.
"""

from __future__ import annotations

import numbers
import os

DEFAULT_MIN_LEAF_EXAMPLES = 256


def _read_env_default() -> int:
    raw = os.environ.get("LEAFBOOST_MIN_LEAF_EXAMPLES")
    if raw is None:
        return DEFAULT_MIN_LEAF_EXAMPLES
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"LEAFBOOST_MIN_LEAF_EXAMPLES must be an integer, got {raw!r}"
        ) from None
    if value < 1:
        raise ValueError(f"LEAFBOOST_MIN_LEAF_EXAMPLES must be >= 1, got {value}")
    return value


_min_leaf_examples = _read_env_default()


def get_min_leaf_examples() -> int:
    """Get the process-wide minimum number of examples per leaf."""
    return _min_leaf_examples


def set_min_leaf_examples(n: int) -> None:
    """Set the process-wide minimum number of examples per leaf.

    Args:
        n: New minimum, an integer >= 1.
    """
    global _min_leaf_examples
    if not isinstance(n, numbers.Integral) or n < 1:
        raise ValueError(f"min_leaf_examples must be an integer >= 1, got {n!r}")
    _min_leaf_examples = int(n)
