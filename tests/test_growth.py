"""Tests for leaf-wise growth and the node arena."""

import logging

import numpy as np
import pytest

import leafboost as lb


def _make_data(n_samples=2000, n_features=5, seed=42):
    np.random.seed(seed)
    X = np.random.randn(n_samples, n_features)
    y = X[:, 0] + 0.5 * X[:, 1] + 0.1 * np.random.randn(n_samples)
    return lb.array(X, n_buckets=32), y.astype(np.float64)


def _grow(ds, y, num_leaves, min_leaf_examples, seed=0, subset=None):
    config = lb.GrowthConfig(num_leaves=num_leaves, min_leaf_examples=min_leaf_examples)
    growth = lb.LeafWiseGrowth(ds, y, config, lb.Sampler(seed))
    if subset is None:
        subset = np.arange(ds.n_samples, dtype=np.int64)
    return growth.grow(subset)


def _structure(node):
    """Nested tuples describing a tree, for equality checks."""
    if isinstance(node, lb.LeafNode):
        return ("leaf", node.value, node.n_samples)
    return (node.feature, node.threshold, _structure(node.left), _structure(node.right))


class TestGrowthConfig:
    """Tests for GrowthConfig."""

    def test_default_config(self):
        """Test default configuration values."""
        config = lb.GrowthConfig()

        assert config.num_leaves == 31
        assert config.example_sampling_rate == 1.0
        assert config.feature_sampling_rate == 1.0
        assert config.min_leaf_examples is None
        assert config.n_jobs == 1

    def test_resolved_uses_process_default(self):
        """Test that an unset minimum leaf size takes the process default."""
        config = lb.GrowthConfig(num_leaves=4).resolved()

        assert config.min_leaf_examples == lb.get_min_leaf_examples()
        assert config.num_leaves == 4

    def test_resolved_keeps_explicit_value(self):
        config = lb.GrowthConfig(min_leaf_examples=7)

        assert config.resolved().min_leaf_examples == 7

    @pytest.mark.parametrize("kwargs", [
        {"num_leaves": 0},
        {"num_leaves": -3},
        {"num_leaves": 2.5},
        {"example_sampling_rate": 1.5},
        {"example_sampling_rate": -0.1},
        {"feature_sampling_rate": 2.0},
        {"min_leaf_examples": 0},
        {"min_leaf_examples": 1.5},
        {"n_jobs": 0},
    ])
    def test_validate_rejects(self, kwargs):
        """Test that invalid values raise ConfigurationError."""
        with pytest.raises(lb.ConfigurationError):
            lb.GrowthConfig(**kwargs).validate()

    def test_validate_accepts_bounds(self):
        lb.GrowthConfig(
            num_leaves=1, example_sampling_rate=0.0, feature_sampling_rate=1.0,
            min_leaf_examples=1,
        ).validate()


class TestLeafWiseGrowth:
    """Tests for LeafWiseGrowth."""

    def test_partition_laws(self):
        """Test that every split partitions its subset and respects the minimum."""
        ds, y = _make_data()
        min_leaf = 50

        arena, root = _grow(ds, y, num_leaves=12, min_leaf_examples=min_leaf)

        assert arena.selected()
        for idx in arena.selected():
            node = arena[idx]
            left = arena[node.left].subset
            right = arena[node.right].subset

            assert len(np.intersect1d(left, right)) == 0
            np.testing.assert_array_equal(
                np.sort(np.concatenate([left, right])), np.sort(node.subset)
            )
            assert len(left) >= min_leaf
            assert len(right) >= min_leaf

            codes = ds.features[node.feature].codes
            assert np.all(codes[left] <= node.threshold)
            assert np.all(codes[right] > node.threshold)

    def test_leaves_partition_root(self):
        """Test that leaf subsets cover the sampled rows exactly once."""
        ds, y = _make_data()

        arena, root = _grow(ds, y, num_leaves=10, min_leaf_examples=40)

        rows = np.concatenate([arena[i].subset for i in arena.leaves(root)])
        np.testing.assert_array_equal(np.sort(rows), np.arange(ds.n_samples))

    def test_leaf_budget(self):
        """Test that the leaf budget is used when every split has gain."""
        ds, y = _make_data()

        for num_leaves in (2, 4, 8, 16):
            arena, root = _grow(ds, y, num_leaves=num_leaves, min_leaf_examples=30)

            n_internal = len(arena.selected())
            n_leaves = len(arena.leaves(root))
            assert n_leaves == num_leaves
            assert n_internal == n_leaves - 1

    def test_arena_size(self):
        """Test that each accepted split creates exactly two nodes."""
        ds, y = _make_data()

        arena, root = _grow(ds, y, num_leaves=6, min_leaf_examples=30)

        assert root == 0
        assert len(arena) == 1 + 2 * len(arena.selected())

    def test_last_split_children_are_terminal(self):
        """Test that children of the final allowed split skip split search."""
        ds, y = _make_data()

        arena, root = _grow(ds, y, num_leaves=4, min_leaf_examples=30)

        terminal = [node for node in arena if node.terminal]
        assert len(terminal) == 2
        for node in terminal:
            assert not node.selected
            assert node.feature == -1
            assert node.gain == 0.0

    def test_stops_when_no_gain(self):
        """Test early stop when no open leaf can be improved."""
        ds = lb.BucketedDataset.from_codes([[0, 0, 1, 1]])
        y = np.array([1.0, 2.0, 3.0, 10.0])

        arena, root = _grow(ds, y, num_leaves=4, min_leaf_examples=1)

        # Children hold one bucket each and cannot split further
        assert len(arena.selected()) == 1
        assert len(arena.leaves(root)) == 2

    def test_constant_target_gives_single_leaf(self):
        ds, _ = _make_data(n_samples=400)
        y = np.full(400, 3.0)

        arena, root = _grow(ds, y, num_leaves=8, min_leaf_examples=10)

        assert len(arena) == 1
        assert not arena[root].selected

    def test_single_leaf_request_still_splits_once(self):
        """Test num_leaves=1: the budget check runs after the first split."""
        ds = lb.BucketedDataset.from_codes([[0, 0, 1, 1]])
        y = np.array([1.0, 2.0, 3.0, 10.0])

        arena, root = _grow(ds, y, num_leaves=1, min_leaf_examples=1)

        assert arena[root].selected
        assert len(arena.leaves(root)) == 2
        # Budget 0 never equals the selected count, so children were searched
        assert not arena[arena[root].left].terminal

    def test_best_first_order(self):
        """Test that the highest-gain open leaf is split first."""
        rng = np.random.default_rng(0)
        n = 800
        a = rng.integers(0, 2, size=n)
        b = rng.integers(0, 2, size=n)
        # Large effect on the a=1 side, small on the a=0 side
        y = 10.0 * a + np.where(a == 1, 4.0 * b, 0.5 * b)
        ds = lb.BucketedDataset.from_codes([a, b], n_buckets=2)

        arena, root = _grow(ds, y, num_leaves=3, min_leaf_examples=10)

        root_node = arena[root]
        assert root_node.feature == 0
        assert arena[root_node.right].selected
        assert not arena[root_node.left].selected

    def test_subset_too_small_raises(self):
        """Test fail-fast when the sample cannot fill the leaf budget."""
        ds, y = _make_data(n_samples=300)

        with pytest.raises(lb.ConfigurationError, match="sampled examples"):
            _grow(ds, y, num_leaves=4, min_leaf_examples=100)

    def test_logs_splits(self, caplog):
        """Test that accepted splits are logged at DEBUG."""
        ds, y = _make_data(n_samples=500)

        with caplog.at_level(logging.DEBUG, logger="leafboost"):
            _grow(ds, y, num_leaves=3, min_leaf_examples=20)

        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("split 1:") for m in messages)
        assert any(m.startswith("split 2:") for m in messages)


class TestDeterminism:
    """Tests for reproducibility of tree structure."""

    def test_full_sampling_is_deterministic(self):
        """Test that rates of 1.0 remove all randomness."""
        ds, y = _make_data()

        t1 = lb.fit_tree(ds, y, num_leaves=8, min_leaf_examples=30, sampler=lb.Sampler(1))
        t2 = lb.fit_tree(ds, y, num_leaves=8, min_leaf_examples=30, sampler=lb.Sampler(2))

        assert _structure(t1.root) == _structure(t2.root)

    def test_seeded_sampler_is_reproducible(self):
        """Test that equal seeds give equal trees under subsampling."""
        ds, y = _make_data()
        kwargs = dict(
            num_leaves=8, example_sampling_rate=0.7, feature_sampling_rate=0.6,
            min_leaf_examples=30,
        )

        t1 = lb.fit_tree(ds, y, sampler=lb.Sampler(123), **kwargs)
        t2 = lb.fit_tree(ds, y, sampler=lb.Sampler(123), **kwargs)

        assert _structure(t1.root) == _structure(t2.root)

    def test_parallel_features_same_tree(self):
        """Test that threaded feature evaluation does not change the tree."""
        ds, y = _make_data()

        t1 = lb.fit_tree(ds, y, num_leaves=8, min_leaf_examples=30, n_jobs=1)
        t2 = lb.fit_tree(ds, y, num_leaves=8, min_leaf_examples=30, n_jobs=3)

        assert _structure(t1.root) == _structure(t2.root)
