"""Tree construction core: primitives, split finding, growth and export."""

from ._growth import GrowthConfig, LeafWiseGrowth, NodeArena, SplitNode
from ._primitives import Histogram, build_histogram, partition_subset
from ._split import NO_SPLIT, SplitInfo, evaluate_histogram, find_best_split
from ._tree import LeafNode, PartitionNode, Tree, TreeNode, export_tree

__all__ = [
    "GrowthConfig",
    "LeafWiseGrowth",
    "NodeArena",
    "SplitNode",
    "Histogram",
    "build_histogram",
    "partition_subset",
    "NO_SPLIT",
    "SplitInfo",
    "evaluate_histogram",
    "find_best_split",
    "LeafNode",
    "PartitionNode",
    "Tree",
    "TreeNode",
    "export_tree",
]
