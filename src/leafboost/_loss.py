"""Leaf value functions for leafboost.

A leaf value function turns the targets of the examples in a leaf into the
value the tree predicts there. The targets are whatever the boosting loop
fits at this round (residuals or pseudo-residuals), so each loss has its own
way of summarizing them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

# (subset, y) -> leaf value
LeafFunction = Callable[[np.ndarray, np.ndarray], float]


def get_leaf_function(leaf_fn: str | LeafFunction) -> LeafFunction:
    """Get a leaf value function by name or return a custom callable.

    Args:
        leaf_fn: Either a string name ('mse', 'lad', 'logistic', 'huber')
                 or a callable that takes (subset, y) and returns a float.

    Returns:
        Leaf value function.
    """
    if callable(leaf_fn):
        return leaf_fn

    leaf_map = {
        'mse': mean_leaf_value,
        'least_squares': mean_leaf_value,
        'lad': median_leaf_value,
        'mae': median_leaf_value,
        'logistic': logistic_leaf_value,
        'logloss': logistic_leaf_value,
        'huber': huber_leaf_value(),
    }

    if leaf_fn not in leaf_map:
        available = ', '.join(leaf_map.keys())
        raise ValueError(f"Unknown leaf function '{leaf_fn}'. Available: {available}")

    return leaf_map[leaf_fn]


# =============================================================================
# Least Squares
# =============================================================================

def mean_leaf_value(subset: NDArray, y: NDArray) -> float:
    """Mean of the targets: the least-squares optimum."""
    return float(np.mean(y[subset]))


# =============================================================================
# Least Absolute Deviation
# =============================================================================

def median_leaf_value(subset: NDArray, y: NDArray) -> float:
    """Median of the targets: the L1 optimum for residual targets."""
    return float(np.median(y[subset]))


# =============================================================================
# Logistic (Binary Classification)
# =============================================================================

def logistic_leaf_value(subset: NDArray, y: NDArray) -> float:
    """One Newton step for binomial deviance.

    With pseudo-residuals r = 2y / (1 + exp(2yF)), y in {-1, 1}, the step is
    sum(r) / sum(|r| * (2 - |r|)).
    """
    r = y[subset]
    denom = float(np.sum(np.abs(r) * (2.0 - np.abs(r))))
    if denom == 0.0:
        return 0.0
    return float(np.sum(r)) / denom


# =============================================================================
# Huber (Robust Regression)
# =============================================================================

def huber_leaf_value(delta: float = 1.0) -> LeafFunction:
    """Build a Huber leaf value function.

    The value is the median plus the mean of the deviations from the median
    clipped to [-delta, delta], so outliers pull it by at most delta.
    """
    if delta <= 0:
        raise ValueError(f"delta must be positive, got {delta}")

    def leaf_value(subset: NDArray, y: NDArray) -> float:
        r = y[subset]
        median = float(np.median(r))
        clipped = np.clip(r - median, -delta, delta)
        return median + float(np.mean(clipped))

    return leaf_value
