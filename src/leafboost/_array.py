"""Bucketed feature storage for leafboost.

Trees are grown on features that have already been mapped to small integer
bucket codes. `lb.array()` does that mapping for raw data;
`BucketedDataset.from_codes()` wraps codes produced elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

MAX_BYTE_BUCKETS = 256
MAX_SHORT_BUCKETS = 65536


class Encoding(Enum):
    """Storage width of a feature's bucket codes."""
    EMPTY = "empty"   # Constant or unused, never split on
    BYTE = "byte"     # uint8 codes
    SHORT = "short"   # uint16 codes


_ENCODING_DTYPES = {
    Encoding.BYTE: np.uint8,
    Encoding.SHORT: np.uint16,
}


@dataclass
class BucketedFeature:
    """One bucketized feature column.

    Attributes:
        encoding: Code width, or EMPTY for a feature that is never split on
        transitions: Bucket boundary values, bucket i holds values below
            transitions[i] (and at or above transitions[i-1])
        codes: Bucket code per example, None for EMPTY features
    """
    encoding: Encoding
    transitions: NDArray[np.float64]
    codes: NDArray | None = None

    def __post_init__(self):
        self.transitions = np.asarray(self.transitions, dtype=np.float64)
        if self.encoding is Encoding.EMPTY:
            self.codes = None
            return

        if self.codes is None:
            raise ValueError(f"{self.encoding.name} feature requires codes")

        codes = np.asarray(self.codes)
        expected = _ENCODING_DTYPES[self.encoding]
        if codes.dtype != expected:
            raise ValueError(
                f"{self.encoding.name} feature requires {np.dtype(expected).name} codes, "
                f"got {codes.dtype}"
            )
        if codes.ndim != 1:
            raise ValueError(f"codes must be 1D, got shape {codes.shape}")
        if len(codes) > 0 and int(codes.max()) >= self.n_buckets:
            raise ValueError(
                f"bucket code {int(codes.max())} out of range for "
                f"{self.n_buckets} buckets"
            )
        self.codes = np.ascontiguousarray(codes)

    @property
    def n_transitions(self) -> int:
        """Number of bucket boundaries."""
        return len(self.transitions)

    @property
    def n_buckets(self) -> int:
        """Number of buckets (boundaries + 1)."""
        return self.n_transitions + 1

    @property
    def is_empty(self) -> bool:
        return self.encoding is Encoding.EMPTY


@dataclass
class BucketedDataset:
    """Bucketized feature matrix ready for tree building.

    Read-only once built; one dataset is shared by every tree of an ensemble.

    Attributes:
        features: One BucketedFeature per column
        n_samples: Number of examples (rows)
    """
    features: list[BucketedFeature]
    n_samples: int

    def __post_init__(self):
        for fid, f in enumerate(self.features):
            if not f.is_empty and len(f.codes) != self.n_samples:
                raise ValueError(
                    f"feature {fid} has {len(f.codes)} codes, expected {self.n_samples}"
                )

    @property
    def n_features(self) -> int:
        return len(self.features)

    def __repr__(self) -> str:
        n_empty = sum(f.is_empty for f in self.features)
        return (
            f"BucketedDataset(n_features={self.n_features}, n_samples={self.n_samples}, "
            f"n_empty={n_empty})"
        )

    @classmethod
    def from_codes(
        cls,
        codes: ArrayLike,
        n_buckets: int | list[int] | None = None,
    ) -> BucketedDataset:
        """Wrap pre-bucketized integer codes.

        Args:
            codes: Bucket codes, shape (n_features, n_samples)
            n_buckets: Bucket count, either one for all features or one per
                feature. Inferred as max code + 1 per feature if None.

        Returns:
            BucketedDataset. Features with a single bucket are EMPTY.

        Example:
            >>> ds = BucketedDataset.from_codes([[0, 0, 1, 1]])
            >>> ds.features[0].n_buckets
            2
        """
        codes = np.asarray(codes)
        if codes.ndim != 2:
            raise ValueError(
                f"codes must be 2D (n_features, n_samples), got shape {codes.shape}"
            )
        if codes.size and codes.min() < 0:
            raise ValueError("bucket codes must be non-negative")

        n_features, n_samples = codes.shape
        if n_buckets is None:
            per_feature = [int(codes[f].max()) + 1 if n_samples else 1 for f in range(n_features)]
        elif np.isscalar(n_buckets):
            per_feature = [int(n_buckets)] * n_features
        else:
            per_feature = [int(b) for b in n_buckets]
            if len(per_feature) != n_features:
                raise ValueError(
                    f"n_buckets has {len(per_feature)} entries, expected {n_features}"
                )

        features = []
        for f in range(n_features):
            # Boundaries are synthetic here, only their count matters for splitting
            transitions = np.arange(1, per_feature[f], dtype=np.float64)
            features.append(_make_feature(codes[f], transitions))

        return cls(features=features, n_samples=n_samples)


def _make_feature(codes: NDArray, transitions: NDArray[np.float64]) -> BucketedFeature:
    """Pick the narrowest encoding that holds len(transitions) + 1 buckets."""
    n_buckets = len(transitions) + 1
    if n_buckets <= 1:
        return BucketedFeature(Encoding.EMPTY, transitions)
    if n_buckets <= MAX_BYTE_BUCKETS:
        return BucketedFeature(Encoding.BYTE, transitions, codes.astype(np.uint8))
    if n_buckets <= MAX_SHORT_BUCKETS:
        return BucketedFeature(Encoding.SHORT, transitions, codes.astype(np.uint16))
    raise ValueError(f"at most {MAX_SHORT_BUCKETS} buckets are supported, got {n_buckets}")


def array(
    X: ArrayLike,
    n_buckets: int = 256,
    *,
    n_jobs: int = -1,
) -> BucketedDataset:
    """Bucketize raw features for tree building.

    Bucketing is done once, then the dataset can be used for training many
    trees.

    Args:
        X: Input features, shape (n_samples, n_features)
        n_buckets: Maximum number of buckets per feature (max 65536).
            Features needing at most 256 buckets are stored as uint8.
        n_jobs: Number of threads used to bucketize features.

    Returns:
        BucketedDataset in feature-major layout.

    Example:
        >>> import leafboost as lb
        >>> ds = lb.array(X_train)  # Bucketize once
        >>> tree = lb.fit_tree(ds, residuals, num_leaves=8)
    """
    if n_buckets < 2 or n_buckets > MAX_SHORT_BUCKETS:
        raise ValueError(f"n_buckets must be in [2, {MAX_SHORT_BUCKETS}], got {n_buckets}")

    X_np = np.asarray(X)

    if X_np.ndim != 2:
        raise ValueError(f"X must be 2D (n_samples, n_features), got shape {X_np.shape}")

    n_samples, n_features = X_np.shape
    if n_samples == 0:
        raise ValueError("X is empty")
    if not np.all(np.isfinite(X_np)):
        raise ValueError("X contains NaN or infinite values")

    features = _quantile_bucketize(X_np, n_buckets, n_jobs)
    return BucketedDataset(features=features, n_samples=n_samples)


def _quantile_bucketize(
    X: NDArray[np.floating],
    n_buckets: int,
    n_jobs: int,
) -> list[BucketedFeature]:
    """Bucketize features using quantiles (parallelized across features)."""
    from joblib import Parallel, delayed

    n_features = X.shape[1]

    # Shared across all features
    percentiles = np.linspace(0, 100, n_buckets + 1)[1:-1]

    def bucketize_single_feature(f: int) -> BucketedFeature:
        col = X[:, f].astype(np.float64)

        edges = np.unique(np.percentile(col, percentiles))

        # An edge at the minimum would leave bucket 0 empty; a constant
        # column ends up with no edges at all
        edges = edges[edges > col.min()]

        # Maps values to bucket indices 0..len(edges)
        codes = np.digitize(col, edges)

        return _make_feature(codes, edges)

    # Threads, not processes, to avoid copying X
    return Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(bucketize_single_feature)(f) for f in range(n_features)
    )
