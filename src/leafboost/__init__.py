"""leafboost: histogram-based, leaf-wise regression trees.

The base learner of a gradient-boosting ensemble. Trees are grown best-first
on bucketized features: the open leaf whose best split reduces squared error
the most is split next, until the leaf budget is used up.

Quick Start:
    >>> import leafboost as lb
    >>>
    >>> # Bucketize once, reuse for every tree
    >>> ds = lb.array(X_train)
    >>>
    >>> # You own the boosting loop
    >>> pred = np.zeros(len(y_train))
    >>> importances = np.zeros(ds.n_features)
    >>> for round in range(100):
    ...     residual = y_train - pred
    ...     reg = lb.TreeRegressor(ds, residual, 'mse')
    ...     tree = reg.build_tree(num_leaves=16, example_sampling_rate=0.8,
    ...                           feature_sampling_rate=0.8,
    ...                           feature_importances=importances,
    ...                           min_leaf_examples=50)
    ...     pred = pred + 0.1 * tree(ds)

Reproducible Sampling:
    >>> reg = lb.TreeRegressor(ds, residual, sampler=lb.Sampler(seed=0))
"""

__version__ = "0.1.0"

# Data
from ._array import BucketedDataset, BucketedFeature, Encoding, array

# Tree building
from ._regressor import TreeRegressor, fit_tree
from ._core import (
    GrowthConfig, LeafWiseGrowth, NodeArena, SplitNode,
    Histogram, build_histogram, partition_subset,
    SplitInfo, evaluate_histogram, find_best_split,
    Tree, PartitionNode, LeafNode, export_tree,
)

# Sampling
from ._sampling import Sampler, get_default_sampler

# Leaf values
from ._loss import (
    get_leaf_function, mean_leaf_value, median_leaf_value,
    logistic_leaf_value, huber_leaf_value,
)

# Configuration and errors
from ._config import get_min_leaf_examples, set_min_leaf_examples, DEFAULT_MIN_LEAF_EXAMPLES
from ._errors import ConfigurationError, InvariantError

__all__ = [
    # Version
    "__version__",
    # Data
    "array",
    "BucketedDataset",
    "BucketedFeature",
    "Encoding",
    # Training (high level)
    "TreeRegressor",
    "fit_tree",
    "Tree",
    "PartitionNode",
    "LeafNode",
    # Training (low level)
    "GrowthConfig",
    "LeafWiseGrowth",
    "NodeArena",
    "SplitNode",
    "Histogram",
    "build_histogram",
    "partition_subset",
    "SplitInfo",
    "evaluate_histogram",
    "find_best_split",
    "export_tree",
    # Sampling
    "Sampler",
    "get_default_sampler",
    # Leaf values
    "get_leaf_function",
    "mean_leaf_value",
    "median_leaf_value",
    "logistic_leaf_value",
    "huber_leaf_value",
    # Configuration
    "get_min_leaf_examples",
    "set_min_leaf_examples",
    "DEFAULT_MIN_LEAF_EXAMPLES",
    "ConfigurationError",
    "InvariantError",
]
