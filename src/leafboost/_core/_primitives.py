"""Tree building primitives: histograms and example partitioning.

These are the building blocks the growth loop composes:

- build_histogram: per-bucket (count, target sum) of one feature over a subset
- partition_subset: route a subset left/right on a bucket threshold
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .._backends import build_histogram_cpu
from .._errors import check

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from .._array import BucketedFeature


@dataclass
class Histogram:
    """Histogram of one feature over one example subset.

    Attributes:
        cnt: Examples per bucket, shape (n_buckets,), int64
        sumy: Target sum per bucket, shape (n_buckets,), float64
        total_cnt: Size of the subset
        total_sum: Target sum over the subset
    """
    cnt: NDArray[np.int64]
    sumy: NDArray[np.float64]
    total_cnt: int
    total_sum: float

    @property
    def n_buckets(self) -> int:
        return len(self.cnt)


def as_subset(rows) -> NDArray[np.int64]:
    """Coerce row indices to a contiguous int64 subset array."""
    return np.ascontiguousarray(np.asarray(rows, dtype=np.int64))


def build_histogram(
    feature: BucketedFeature,
    y: NDArray[np.float64],
    subset: NDArray[np.int64],
    total_sum: float | None = None,
) -> Histogram:
    """Build the histogram of one feature over a subset of examples.

    Args:
        feature: Non-empty bucketized feature
        y: Target vector, shape (n_samples,), float64
        subset: Row indices, non-empty
        total_sum: Target sum over the subset, computed if None. It does not
            depend on the feature, so callers scanning many features pass it.

    Returns:
        Histogram with one slot per bucket of the feature.
    """
    check(subset is not None and len(subset) > 0, "histogram requested for an empty subset")
    check(not feature.is_empty, "histogram requested for an EMPTY feature")

    subset = as_subset(subset)
    y = np.ascontiguousarray(y, dtype=np.float64)
    # The kernel does not bounds-check row indices
    check(
        int(subset.min()) >= 0 and int(subset.max()) < len(feature.codes),
        f"subset rows must lie in [0, {len(feature.codes)})",
    )
    check(len(y) == len(feature.codes), f"y has {len(y)} values, feature has {len(feature.codes)}")
    if total_sum is None:
        total_sum = float(np.sum(y[subset]))

    cnt, sumy = build_histogram_cpu(feature.codes, y, subset, feature.n_buckets)

    return Histogram(
        cnt=cnt,
        sumy=sumy,
        total_cnt=len(subset),
        total_sum=float(total_sum),
    )


def partition_subset(
    feature: BucketedFeature,
    subset: NDArray[np.int64],
    threshold: int,
) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
    """Split a subset on `code <= threshold`.

    Relative order is preserved on both sides.

    Returns:
        left: Rows whose bucket code is <= threshold
        right: Rows whose bucket code is > threshold
    """
    check(not feature.is_empty, "cannot partition on an EMPTY feature")

    subset = as_subset(subset)
    goes_left = feature.codes[subset] <= threshold
    return subset[goes_left], subset[~goes_left]
