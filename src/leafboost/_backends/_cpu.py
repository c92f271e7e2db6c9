"""CPU kernels using Numba JIT."""

from __future__ import annotations

import numpy as np
from numba import jit


# =============================================================================
# Histogram Functions
# =============================================================================

@jit(nopython=True, nogil=True, cache=True)
def _build_histogram_cpu(
    codes: np.ndarray,   # (n_samples,) uint8 or uint16
    y: np.ndarray,       # (n_samples,) float64
    subset: np.ndarray,  # (n_subset,) int64
    cnt: np.ndarray,     # (n_buckets,) int64
    sumy: np.ndarray,    # (n_buckets,) float64
):
    """Accumulate per-bucket count and target sum over a subset of rows."""
    for k in range(subset.shape[0]):
        row = subset[k]
        b = codes[row]
        cnt[b] += 1
        sumy[b] += y[row]


def build_histogram_cpu(
    codes: np.ndarray,
    y: np.ndarray,
    subset: np.ndarray,
    n_buckets: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Build one feature's histogram on CPU.

    Args:
        codes: Bucket codes of one feature, shape (n_samples,)
        y: Target vector, shape (n_samples,), float64
        subset: Row indices to aggregate, int64
        n_buckets: Number of buckets of the feature

    Returns:
        cnt: Example count per bucket, shape (n_buckets,), int64
        sumy: Target sum per bucket, shape (n_buckets,), float64
    """
    cnt = np.zeros(n_buckets, dtype=np.int64)
    sumy = np.zeros(n_buckets, dtype=np.float64)

    _build_histogram_cpu(codes, y, subset, cnt, sumy)

    return cnt, sumy


# =============================================================================
# Split Finding
# =============================================================================

@jit(nopython=True, nogil=True, cache=True)
def _scan_histogram_cpu(
    cnt: np.ndarray,    # (n_buckets,) int64
    sumy: np.ndarray,   # (n_buckets,) float64
    total_cnt: int,
    total_sum: float,
    min_leaf_examples: int,
):
    """Scan cumulative sums for the best "bucket <= i" threshold.

    Returns (-1, 0.0) unless some threshold strictly improves on not
    splitting. Ties keep the lowest bucket index.
    """
    # Squared-error loss up to a constant (sum of y^2 does not depend on
    # the split point)
    loss_before = -1.0 * total_sum * total_sum / total_cnt

    cnt_left = 0
    sum_left = 0.0

    best_gain = 0.0
    best_idx = -1

    for i in range(cnt.shape[0] - 1):
        cnt_left += cnt[i]
        sum_left += sumy[i]

        sum_right = total_sum - sum_left
        cnt_right = total_cnt - cnt_left

        if cnt_left < min_leaf_examples:
            continue
        # cnt_right only shrinks from here on
        if cnt_right < min_leaf_examples:
            break

        loss_after = (
            -1.0 * sum_left * sum_left / cnt_left
            - 1.0 * sum_right * sum_right / cnt_right
        )

        gain = loss_before - loss_after
        if gain > best_gain:
            best_gain = gain
            best_idx = i

    return best_idx, best_gain


def scan_histogram_cpu(
    cnt: np.ndarray,
    sumy: np.ndarray,
    total_cnt: int,
    total_sum: float,
    min_leaf_examples: int,
) -> tuple[int, float]:
    """Find the best split threshold of one histogram (CPU).

    Returns:
        best_idx: Bucket index i, left side is buckets <= i (-1 if none)
        best_gain: Gain of that split (0.0 if none)
    """
    idx, gain = _scan_histogram_cpu(
        cnt, sumy, int(total_cnt), float(total_sum), int(min_leaf_examples)
    )
    return int(idx), float(gain)
