"""Tests for leaf value functions."""

import numpy as np
import pytest

import leafboost as lb


class TestLeafFunctions:
    """Tests for the built-in leaf value functions."""

    def test_mean(self):
        y = np.array([1.0, 2.0, 3.0, 10.0])

        assert lb.mean_leaf_value(np.arange(4), y) == pytest.approx(4.0)
        assert lb.mean_leaf_value(np.array([0, 1]), y) == pytest.approx(1.5)

    def test_median(self):
        y = np.array([1.0, 2.0, 3.0, 100.0, 5.0])

        assert lb.median_leaf_value(np.arange(5), y) == pytest.approx(3.0)

    def test_logistic_newton_step(self):
        """Test sum(r) / sum(|r| * (2 - |r|))."""
        y = np.array([1.0, -0.5])

        value = lb.logistic_leaf_value(np.arange(2), y)

        assert value == pytest.approx(0.5 / 1.75)

    def test_logistic_zero_denominator(self):
        y = np.zeros(3)

        assert lb.logistic_leaf_value(np.arange(3), y) == 0.0

    def test_huber_limits_outliers(self):
        """Test that an outlier moves the value by at most delta / n."""
        y = np.array([0.0, 0.0, 0.0, 100.0])
        huber = lb.huber_leaf_value(delta=1.0)

        assert huber(np.arange(4), y) == pytest.approx(0.25)

    def test_huber_invalid_delta(self):
        with pytest.raises(ValueError, match="delta"):
            lb.huber_leaf_value(delta=0.0)


class TestGetLeafFunction:
    """Tests for get_leaf_function()."""

    @pytest.mark.parametrize("name,expected", [
        ("mse", 4.0),
        ("least_squares", 4.0),
        ("lad", 2.5),
        ("mae", 2.5),
    ])
    def test_by_name(self, name, expected):
        y = np.array([1.0, 2.0, 3.0, 10.0])
        fn = lb.get_leaf_function(name)

        assert fn(np.arange(4), y) == pytest.approx(expected)

    def test_huber_and_logistic_names(self):
        assert callable(lb.get_leaf_function("huber"))
        assert lb.get_leaf_function("logloss") is lb.logistic_leaf_value

    def test_callable_passthrough(self):
        def custom(subset, y):
            return 0.0

        assert lb.get_leaf_function(custom) is custom

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown leaf function"):
            lb.get_leaf_function("poisson")
