"""Exported tree representation and prediction.

Growth works on a NodeArena of SplitNodes; once growth stops the arena is
walked once and turned into plain PartitionNode / LeafNode objects that
hold no reference to training data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Union

import numpy as np

from .._errors import check

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from .._array import BucketedDataset
    from ._growth import NodeArena

logger = logging.getLogger(__name__)


@dataclass
class LeafNode:
    """Terminal node holding a predicted value."""
    value: float
    n_samples: int = 0

    def eval(self, dataset: BucketedDataset, row: int) -> float:
        return self.value


@dataclass
class PartitionNode:
    """Internal node: rows with code <= threshold on `feature` go left.

    `value` is the leaf value the node would have had without the split.
    It is kept for inspection and is not used for prediction.
    """
    feature: int
    threshold: int
    value: float = 0.0
    left: TreeNode | None = None
    right: TreeNode | None = None

    def eval(self, dataset: BucketedDataset, row: int) -> float:
        """Predict a single row."""
        code = dataset.features[self.feature].codes[row]
        child = self.left if code <= self.threshold else self.right
        return child.eval(dataset, row)


TreeNode = Union[PartitionNode, LeafNode]


@dataclass
class Tree:
    """A regression tree produced by one build call.

    Attributes:
        root: Root node
        n_features: Number of features of the training dataset
        feature_importances: Gain contributed by each feature in this tree
    """
    root: TreeNode
    n_features: int
    feature_importances: NDArray[np.float64] | None = field(default=None, repr=False)

    def __post_init__(self):
        if self.feature_importances is None:
            self.feature_importances = np.zeros(self.n_features, dtype=np.float64)

    def predict(self, dataset: BucketedDataset) -> NDArray[np.float64]:
        """Predict every row of a bucketized dataset.

        Args:
            dataset: Dataset bucketized with the same boundaries as training

        Returns:
            predictions: Shape (n_samples,), float64
        """
        if dataset.n_features != self.n_features:
            raise ValueError(
                f"dataset has {dataset.n_features} features, tree expects {self.n_features}"
            )
        out = np.empty(dataset.n_samples, dtype=np.float64)
        _route(self.root, dataset, np.arange(dataset.n_samples, dtype=np.int64), out)
        return out

    def __call__(self, dataset: BucketedDataset) -> NDArray[np.float64]:
        return self.predict(dataset)

    def leaves(self) -> list[LeafNode]:
        """Leaves from left to right."""
        out = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            if isinstance(node, PartitionNode):
                stack.append(node.right)
                stack.append(node.left)
            else:
                out.append(node)
        return out

    @property
    def n_leaves(self) -> int:
        return len(self.leaves())

    @property
    def n_internal(self) -> int:
        return _count_internal(self.root)

    @property
    def depth(self) -> int:
        return _depth(self.root)


def _route(node: TreeNode, dataset: BucketedDataset, rows: NDArray[np.int64], out: NDArray) -> None:
    if isinstance(node, LeafNode):
        out[rows] = node.value
        return
    goes_left = dataset.features[node.feature].codes[rows] <= node.threshold
    _route(node.left, dataset, rows[goes_left], out)
    _route(node.right, dataset, rows[~goes_left], out)


def _count_internal(node: TreeNode) -> int:
    if isinstance(node, LeafNode):
        return 0
    return 1 + _count_internal(node.left) + _count_internal(node.right)


def _depth(node: TreeNode) -> int:
    if isinstance(node, LeafNode):
        return 0
    return 1 + max(_depth(node.left), _depth(node.right))


# =============================================================================
# Export
# =============================================================================

def export_tree(
    arena: NodeArena,
    root: int,
    y: NDArray[np.float64],
    leaf_fn: Callable[[NDArray[np.int64], NDArray[np.float64]], float],
    feature_importances: NDArray[np.float64],
    min_leaf_examples: int,
) -> TreeNode:
    """Convert the grown split graph into PartitionNodes and LeafNodes.

    Args:
        arena: Nodes created during growth
        root: Arena index of the root
        y: Target vector
        leaf_fn: Leaf value function (subset, y) -> value
        feature_importances: Accumulator, gain of every split is added at
            the index of its feature
        min_leaf_examples: Minimum examples every leaf must hold

    Returns:
        Root of the exported tree.
    """
    node = arena[root]
    value = float(leaf_fn(node.subset, y))

    if not node.selected:
        check(
            node.n_samples >= min_leaf_examples,
            f"leaf holds {node.n_samples} examples, minimum is {min_leaf_examples}",
        )
        logger.debug("leaf: %.6g, #examples: %d", value, node.n_samples)
        return LeafNode(value=value, n_samples=node.n_samples)

    feature_importances[node.feature] += node.gain
    return PartitionNode(
        feature=node.feature,
        threshold=node.threshold,
        value=value,
        left=export_tree(arena, node.left, y, leaf_fn, feature_importances, min_leaf_examples),
        right=export_tree(arena, node.right, y, leaf_fn, feature_importances, min_leaf_examples),
    )
