"""Tests for example and feature sampling."""

import numpy as np

import leafboost as lb


class TestSampler:
    """Tests for Sampler."""

    def test_coin_extremes(self):
        """Test that p=0 never and p=1 always comes up True."""
        sampler = lb.Sampler(0)

        assert not any(sampler.biased_coin_flip(0.0) for _ in range(1000))
        assert all(sampler.biased_coin_flip(1.0) for _ in range(1000))

    def test_coin_rate(self):
        sampler = lb.Sampler(0)

        hits = sum(sampler.biased_coin_flip(0.3) for _ in range(10000))

        assert 2700 < hits < 3300

    def test_sample_examples_full(self):
        subset = lb.Sampler(0).sample_examples(50, 1.0)

        np.testing.assert_array_equal(subset, np.arange(50))
        assert subset.dtype == np.int64

    def test_sample_examples_none(self):
        subset = lb.Sampler(0).sample_examples(50, 0.0)

        assert len(subset) == 0

    def test_sample_examples_sorted_unique(self):
        subset = lb.Sampler(0).sample_examples(10000, 0.5)

        assert 4700 < len(subset) < 5300
        assert np.all(np.diff(subset) > 0)

    def test_seeded_reproducible(self):
        a = lb.Sampler(42).sample_examples(1000, 0.4)
        b = lb.Sampler(42).sample_examples(1000, 0.4)

        np.testing.assert_array_equal(a, b)

    def test_sample_features_skips_empty(self):
        """Test that EMPTY features are never sampled."""
        ds = lb.BucketedDataset.from_codes([[0, 0, 0, 0], [0, 1, 0, 1], [1, 0, 1, 0]])

        assert lb.Sampler(0).sample_features(ds, 1.0) == [1, 2]
        assert lb.Sampler(0).sample_features(ds, 0.0) == []

    def test_sample_features_redrawn(self):
        """Test that successive nodes get independent feature samples."""
        codes = np.tile([0, 1], (20, 2))
        ds = lb.BucketedDataset.from_codes(codes)
        sampler = lb.Sampler(0)

        draws = {tuple(sampler.sample_features(ds, 0.5)) for _ in range(10)}

        assert len(draws) > 1

    def test_default_sampler_shared(self):
        assert lb.get_default_sampler() is lb.get_default_sampler()
