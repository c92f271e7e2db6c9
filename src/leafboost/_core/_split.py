"""Split finding for leaf-wise regression trees."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from .._backends import scan_histogram_cpu
from .._errors import check
from ._primitives import Histogram, as_subset, build_histogram

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from .._array import BucketedDataset


class SplitInfo(NamedTuple):
    """Information about a split."""
    feature: int      # Feature index (-1 if no valid split)
    threshold: int    # Bucket threshold (go left if code <= threshold)
    gain: float       # Reduction in squared-error loss

    @property
    def is_valid(self) -> bool:
        """Check if this is a valid split."""
        return self.feature >= 0 and self.gain > 0


NO_SPLIT = SplitInfo(feature=-1, threshold=0, gain=0.0)


def evaluate_histogram(hist: Histogram, min_leaf_examples: int) -> tuple[int, float]:
    """Find the gain-maximizing threshold of one histogram.

    Splitting at bucket i sends buckets <= i left and the rest right. With
    the constant sum of squares dropped, the loss of a node is
    -sum**2 / count, so

        gain(i) = -S**2/N + S_left**2/N_left + S_right**2/N_right

    Only thresholds leaving at least `min_leaf_examples` on both sides are
    considered.

    Args:
        hist: Histogram of one feature over one subset
        min_leaf_examples: Minimum examples per child

    Returns:
        (index, gain), or (-1, 0.0) if no threshold has positive gain.
    """
    check(hist.n_buckets >= 1, "histogram has no buckets")
    check(hist.total_cnt > 0, "histogram is empty")

    if hist.n_buckets == 1:
        return -1, 0.0

    return scan_histogram_cpu(
        hist.cnt, hist.sumy, hist.total_cnt, hist.total_sum, min_leaf_examples
    )


def find_best_split(
    dataset: BucketedDataset,
    y: NDArray[np.float64],
    subset: NDArray[np.int64],
    feature_ids: list[int],
    min_leaf_examples: int,
    *,
    n_jobs: int = 1,
) -> SplitInfo:
    """Find the best split of a node across the given features.

    Each feature is evaluated independently on read-only inputs; with
    n_jobs != 1 the evaluations run on a joblib thread pool. Results are
    reduced in feature order with a strict comparison, so the lowest
    feature id wins ties whatever the scheduling.

    Args:
        dataset: Bucketized features
        y: Target vector, float64
        subset: Rows of the node
        feature_ids: Sampled non-empty features to evaluate
        min_leaf_examples: Minimum examples per child
        n_jobs: Number of threads for per-feature evaluation

    Returns:
        SplitInfo with best feature, threshold, and gain (NO_SPLIT if none).
    """
    check(subset is not None and len(subset) > 0, "split search on an empty subset")

    subset = as_subset(subset)
    total_sum = float(np.sum(y[subset]))

    def evaluate_feature(fid: int) -> tuple[int, float]:
        hist = build_histogram(dataset.features[fid], y, subset, total_sum)
        return evaluate_histogram(hist, min_leaf_examples)

    if n_jobs == 1 or len(feature_ids) <= 1:
        results = [evaluate_feature(fid) for fid in feature_ids]
    else:
        from joblib import Parallel, delayed
        results = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(evaluate_feature)(fid) for fid in feature_ids
        )

    best = NO_SPLIT
    for fid, (threshold, gain) in zip(feature_ids, results):
        if gain > best.gain:
            best = SplitInfo(feature=fid, threshold=threshold, gain=gain)

    return best
