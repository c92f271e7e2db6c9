"""Single-tree regressor: the base learner of a boosting ensemble.

Provides `TreeRegressor`, which binds a dataset, targets and a leaf value
function once and then builds any number of trees from them, and
`fit_tree()` for one-off use.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from ._array import BucketedDataset
from ._core._growth import GrowthConfig, LeafWiseGrowth
from ._core._tree import Tree, export_tree
from ._errors import ConfigurationError
from ._loss import LeafFunction, get_leaf_function
from ._sampling import Sampler, get_default_sampler

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

logger = logging.getLogger(__name__)


class TreeRegressor:
    """Builds histogram-based, leaf-wise regression trees.

    The dataset and targets are shared and never modified; one instance
    builds any number of trees on the same targets.

    Args:
        dataset: Bucketized features
        y: Targets (residuals or gradients), shape (n_samples,)
        leaf_fn: Leaf value function or its name ('mse', 'lad', ...)
        sampler: Source of sampling randomness (shared default if None)
        n_jobs: Threads for per-feature split evaluation

    Example:
        >>> import leafboost as lb
        >>> ds = lb.array(X)
        >>> reg = lb.TreeRegressor(ds, y - y.mean(), sampler=lb.Sampler(0))
        >>> tree = reg.build_tree(num_leaves=16, min_leaf_examples=20)
        >>> pred = tree(ds)
    """

    def __init__(
        self,
        dataset: BucketedDataset,
        y: ArrayLike,
        leaf_fn: str | LeafFunction = 'mse',
        *,
        sampler: Sampler | None = None,
        n_jobs: int = 1,
    ):
        if not isinstance(dataset, BucketedDataset):
            raise TypeError(
                f"dataset must be a BucketedDataset, got {type(dataset).__name__}. "
                "Use lb.array(X) to bucketize raw features."
            )
        y = np.ascontiguousarray(np.asarray(y, dtype=np.float64).ravel())
        if len(y) != dataset.n_samples:
            raise ConfigurationError(
                f"y has {len(y)} values, dataset has {dataset.n_samples} examples"
            )

        self.dataset = dataset
        self.y = y
        self.leaf_fn = get_leaf_function(leaf_fn)
        self.sampler = sampler if sampler is not None else get_default_sampler()
        self.n_jobs = n_jobs

    def build_tree(
        self,
        num_leaves: int,
        example_sampling_rate: float = 1.0,
        feature_sampling_rate: float = 1.0,
        feature_importances: NDArray[np.float64] | None = None,
        *,
        min_leaf_examples: int | None = None,
    ) -> Tree:
        """Grow one tree.

        Args:
            num_leaves: Leaf budget (>= 1)
            example_sampling_rate: Probability of keeping each row
            feature_sampling_rate: Probability of evaluating each feature at
                each node
            feature_importances: Caller-owned accumulator of length
                n_features; the gain of every split is added to it. Never
                zeroed here.
            min_leaf_examples: Minimum examples per leaf, process default
                (lb.get_min_leaf_examples()) if None

        Returns:
            The exported Tree. Its feature_importances hold this tree's gains.

        Raises:
            ConfigurationError: invalid arguments, or fewer than
                min_leaf_examples * num_leaves examples were sampled.
        """
        config = GrowthConfig(
            num_leaves=num_leaves,
            example_sampling_rate=example_sampling_rate,
            feature_sampling_rate=feature_sampling_rate,
            min_leaf_examples=min_leaf_examples,
            n_jobs=self.n_jobs,
        )
        config.validate()
        config = config.resolved()

        n_features = self.dataset.n_features
        if feature_importances is not None:
            if not isinstance(feature_importances, np.ndarray) or not np.issubdtype(
                feature_importances.dtype, np.floating
            ):
                raise ConfigurationError("feature_importances must be a float numpy array")
            if feature_importances.shape != (n_features,):
                raise ConfigurationError(
                    f"feature_importances has shape {feature_importances.shape}, "
                    f"expected ({n_features},)"
                )

        subset = self.sampler.sample_examples(self.dataset.n_samples, config.example_sampling_rate)

        growth = LeafWiseGrowth(self.dataset, self.y, config, self.sampler)
        arena, root = growth.grow(subset)

        tree_importances = np.zeros(n_features, dtype=np.float64)
        root_node = export_tree(
            arena, root, self.y, self.leaf_fn, tree_importances, config.min_leaf_examples
        )
        tree = Tree(root=root_node, n_features=n_features, feature_importances=tree_importances)

        if feature_importances is not None:
            feature_importances += tree_importances

        logger.info(
            "built tree: %d leaves, %d splits, %d sampled examples",
            tree.n_leaves, tree.n_internal, len(subset),
        )
        return tree


def fit_tree(
    dataset: BucketedDataset,
    y: ArrayLike,
    num_leaves: int = 31,
    *,
    leaf_fn: str | LeafFunction = 'mse',
    example_sampling_rate: float = 1.0,
    feature_sampling_rate: float = 1.0,
    min_leaf_examples: int | None = None,
    sampler: Sampler | None = None,
    n_jobs: int = 1,
) -> Tree:
    """Fit a single leaf-wise regression tree.

    Args:
        dataset: Bucketized features (see lb.array)
        y: Targets, shape (n_samples,)
        num_leaves: Leaf budget
        leaf_fn: Leaf value function or its name
        example_sampling_rate: Probability of keeping each row
        feature_sampling_rate: Probability of evaluating each feature per node
        min_leaf_examples: Minimum examples per leaf (process default if None)
        sampler: Source of sampling randomness
        n_jobs: Threads for per-feature split evaluation

    Returns:
        Fitted Tree.

    Example:
        >>> import leafboost as lb
        >>> ds = lb.array(X)
        >>> pred = np.zeros(len(y))
        >>> for _ in range(10):
        ...     tree = lb.fit_tree(ds, y - pred, num_leaves=8, min_leaf_examples=20)
        ...     pred += 0.1 * tree(ds)
    """
    regressor = TreeRegressor(dataset, y, leaf_fn, sampler=sampler, n_jobs=n_jobs)
    return regressor.build_tree(
        num_leaves,
        example_sampling_rate,
        feature_sampling_rate,
        min_leaf_examples=min_leaf_examples,
    )
