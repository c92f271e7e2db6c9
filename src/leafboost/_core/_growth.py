"""Leaf-wise (best-first) tree growth for leafboost.

The tree is grown as a graph of SplitNodes held in a NodeArena and
addressed by index. A node is reachable both from its parent and, while it
is an open leaf, from the frontier list; indices let both structures point
at the same node without either owning it. The arena lives for one build
call and is dropped once the tree has been exported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from .._config import get_min_leaf_examples
from .._errors import ConfigurationError, check
from ._primitives import partition_subset
from ._split import find_best_split

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from .._array import BucketedDataset
    from .._sampling import Sampler

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class GrowthConfig:
    """Configuration for growing one tree.

    Args:
        num_leaves: Leaf budget; at most num_leaves - 1 splits are accepted
        example_sampling_rate: Probability of keeping each row for this tree
        feature_sampling_rate: Probability of evaluating each feature, drawn
            again for every node
        min_leaf_examples: Minimum examples per leaf (process default if None)
        n_jobs: Threads for per-feature split evaluation (-1 for all cores)
    """
    num_leaves: int = 31
    example_sampling_rate: float = 1.0
    feature_sampling_rate: float = 1.0
    min_leaf_examples: int | None = None
    n_jobs: int = 1

    def resolved(self) -> GrowthConfig:
        """Copy with min_leaf_examples taken from the process default if unset."""
        if self.min_leaf_examples is not None:
            return self
        return GrowthConfig(
            num_leaves=self.num_leaves,
            example_sampling_rate=self.example_sampling_rate,
            feature_sampling_rate=self.feature_sampling_rate,
            min_leaf_examples=get_min_leaf_examples(),
            n_jobs=self.n_jobs,
        )

    def validate(self) -> None:
        """Raise ConfigurationError for values no tree can be built with."""
        if not isinstance(self.num_leaves, (int, np.integer)) or self.num_leaves < 1:
            raise ConfigurationError(f"num_leaves must be an integer >= 1, got {self.num_leaves!r}")
        for name in ("example_sampling_rate", "feature_sampling_rate"):
            rate = getattr(self, name)
            if not 0.0 <= rate <= 1.0:
                raise ConfigurationError(f"{name} must be in [0, 1], got {rate}")
        if self.min_leaf_examples is not None and (
            not isinstance(self.min_leaf_examples, (int, np.integer)) or self.min_leaf_examples < 1
        ):
            raise ConfigurationError(
                f"min_leaf_examples must be an integer >= 1, got {self.min_leaf_examples!r}"
            )
        if self.n_jobs == 0:
            raise ConfigurationError("n_jobs must be non-zero")

    @property
    def num_splits(self) -> int:
        return self.num_leaves - 1


# =============================================================================
# Node Arena
# =============================================================================

@dataclass(eq=False)
class SplitNode:
    """A node of the tree under construction.

    The split fields are filled once by the split search; `selected`,
    `left` and `right` are set once when the node is chosen for splitting.
    """
    subset: NDArray[np.int64]
    feature: int = -1
    threshold: int = 0
    gain: float = 0.0
    terminal: bool = False
    selected: bool = False
    left: int = -1    # Arena index of left child (-1 until selected)
    right: int = -1   # Arena index of right child (-1 until selected)

    @property
    def n_samples(self) -> int:
        return len(self.subset)


@dataclass
class NodeArena:
    """Owns every SplitNode created while growing one tree."""
    nodes: list[SplitNode] = field(default_factory=list)

    def add(self, node: SplitNode) -> int:
        """Store a node and return its index."""
        self.nodes.append(node)
        return len(self.nodes) - 1

    def __getitem__(self, index: int) -> SplitNode:
        return self.nodes[index]

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def selected(self) -> list[int]:
        """Indices of nodes that were split."""
        return [i for i, node in enumerate(self.nodes) if node.selected]

    def leaves(self, root: int = 0) -> list[int]:
        """Indices of leaves reachable from `root`, left to right."""
        out = []
        stack = [root]
        while stack:
            idx = stack.pop()
            node = self.nodes[idx]
            if node.selected:
                stack.append(node.right)
                stack.append(node.left)
            else:
                out.append(idx)
        return out


# =============================================================================
# Leaf-Wise Growth
# =============================================================================

class LeafWiseGrowth:
    """Leaf-wise (best-first) tree growth.

    Repeatedly splits the open leaf with the highest gain until the split
    budget (num_leaves - 1) is used up or no open leaf has positive gain.

    Characteristics:
    - Unbalanced trees (deeper on informative branches)
    - Feature sampling is redrawn for every node
    - Children of the last allowed split are terminal: they skip split
      search and never enter the frontier
    """

    def __init__(
        self,
        dataset: BucketedDataset,
        y: NDArray[np.float64],
        config: GrowthConfig,
        sampler: Sampler,
    ):
        config.validate()
        self.dataset = dataset
        self.y = np.ascontiguousarray(y, dtype=np.float64)
        self.config = config.resolved()
        self.sampler = sampler

    def grow(self, subset: NDArray[np.int64]) -> tuple[NodeArena, int]:
        """Grow a tree over the sampled examples.

        Args:
            subset: Rows sampled for this tree

        Returns:
            (arena, root index)
        """
        config = self.config
        check(subset is not None, "growth requires an example subset")
        if len(subset) < config.min_leaf_examples * config.num_leaves:
            raise ConfigurationError(
                f"{len(subset)} sampled examples cannot fill {config.num_leaves} leaves "
                f"of at least {config.min_leaf_examples} examples"
            )

        arena = NodeArena()
        frontier: list[int] = []

        root = self._make_node(arena, frontier, subset, terminal=False)

        n_splits = config.num_splits
        n_selected = 0
        # Checked after the first iteration: num_leaves=1 still allows one split
        while True:
            # leaves == internal nodes + 1
            check(
                len(frontier) == n_selected + 1,
                f"frontier has {len(frontier)} nodes after {n_selected} splits",
            )

            # Linear scan; ties keep the earliest frontier entry
            best_pos = -1
            best_gain = 0.0
            for pos, idx in enumerate(frontier):
                if arena[idx].gain > best_gain:
                    best_gain = arena[idx].gain
                    best_pos = pos

            if best_pos < 0:
                # No positive gain anywhere, open leaves stay leaves
                break

            best_idx = frontier.pop(best_pos)
            node = arena[best_idx]
            node.selected = True
            n_selected += 1

            left, right = partition_subset(
                self.dataset.features[node.feature], node.subset, node.threshold
            )
            terminal = n_selected == n_splits

            node.left = self._make_node(arena, frontier, left, terminal)
            node.right = self._make_node(arena, frontier, right, terminal)

            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "split %d: feature %d <= %d gain %.6g, #examples %d, min partition %d",
                    n_selected, node.feature, node.threshold, node.gain,
                    node.n_samples, min(len(left), len(right)),
                )

            if n_selected >= n_splits:
                break

        return arena, root

    def _make_node(
        self,
        arena: NodeArena,
        frontier: list[int],
        subset: NDArray[np.int64],
        terminal: bool,
    ) -> int:
        """Create a node, searching for its best split unless terminal."""
        check(len(subset) > 0, "node created with an empty subset")

        node = SplitNode(subset=subset, terminal=terminal)
        idx = arena.add(node)
        if terminal:
            return idx

        feature_ids = self.sampler.sample_features(
            self.dataset, self.config.feature_sampling_rate
        )
        split = find_best_split(
            self.dataset,
            self.y,
            subset,
            feature_ids,
            self.config.min_leaf_examples,
            n_jobs=self.config.n_jobs,
        )
        node.feature = split.feature
        node.threshold = split.threshold
        node.gain = split.gain

        frontier.append(idx)
        return idx
