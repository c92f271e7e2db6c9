"""Example and feature subsampling.

Rows are sampled once per tree, features once per node. Every draw is a
biased coin flip on a numpy Generator owned by a `Sampler`, so a seeded
sampler reproduces the same trees.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from ._array import BucketedDataset


class Sampler:
    """Biased coin flips for subsampling.

    Not thread-safe: draw all coins for a node before fanning work out.

    Args:
        seed: Seed or Generator. None draws fresh OS entropy.
    """

    def __init__(self, seed: int | np.random.Generator | None = None):
        self.rng = np.random.default_rng(seed)

    def biased_coin_flip(self, p: float) -> bool:
        """Return True with probability `p`."""
        return bool(self.rng.random() < p)

    def sample_examples(self, n_samples: int, rate: float) -> NDArray[np.int64]:
        """Keep each row independently with probability `rate`.

        Returns:
            Sorted row indices, dtype int64.
        """
        if rate >= 1.0:
            return np.arange(n_samples, dtype=np.int64)
        keep = self.rng.random(n_samples) < rate
        return np.flatnonzero(keep).astype(np.int64)

    def sample_features(self, dataset: BucketedDataset, rate: float) -> list[int]:
        """Pick the features evaluated for one node.

        EMPTY features are skipped without consuming a coin flip.
        """
        return [
            fid for fid, f in enumerate(dataset.features)
            if not f.is_empty and self.biased_coin_flip(rate)
        ]


_default_sampler: Sampler | None = None


def get_default_sampler() -> Sampler:
    """Shared sampler used when a caller does not supply one."""
    global _default_sampler
    if _default_sampler is None:
        _default_sampler = Sampler()
    return _default_sampler
