#!/usr/bin/env python
"""Basic regression example with leafboost.

This example demonstrates:
- Bucketizing raw features once with lb.array()
- Running a small boosting loop around TreeRegressor
- Row and feature subsampling with a seeded sampler
- Accumulating feature importance across trees

Dataset: synthetic, non-linear
"""

import logging

import numpy as np

import leafboost as lb


def generate_synthetic_data(n_samples: int = 20000, n_features: int = 8, seed: int = 42):
    """Generate synthetic regression data."""
    np.random.seed(seed)
    X = np.random.randn(n_samples, n_features)
    y = (
        2 * X[:, 0]
        + X[:, 1] ** 2
        - 0.5 * X[:, 2] * X[:, 3]
        + np.sin(X[:, 4])
        + np.random.randn(n_samples) * 0.5
    )
    return X, y


def main():
    logging.basicConfig(level=logging.WARNING)

    print("=" * 60)
    print("leafboost Basic Regression Example")
    print("=" * 60)

    # --- Data ---
    print("\n1. Generating data...")
    X, y = generate_synthetic_data()
    n_train = 16000
    X_train, X_test = X[:n_train], X[n_train:]
    y_train, y_test = y[:n_train], y[n_train:]
    print(f"   Train: {len(X_train)}, Test: {len(X_test)}")

    # --- Bucketize ---
    print("\n2. Bucketizing features...")
    ds_train = lb.array(X_train, n_buckets=64)
    print(f"   {ds_train}")

    # Test rows must use the training boundaries
    test_codes = np.stack([
        np.digitize(X_test[:, f], feature.transitions)
        for f, feature in enumerate(ds_train.features)
    ])
    ds_test = lb.BucketedDataset.from_codes(
        test_codes, n_buckets=[f.n_buckets for f in ds_train.features]
    )

    # --- Boosting loop ---
    print("\n3. Training 50 trees...")
    learning_rate = 0.1
    base = float(np.mean(y_train))
    pred_train = np.full(len(y_train), base)
    pred_test = np.full(len(y_test), base)
    importances = np.zeros(ds_train.n_features)
    sampler = lb.Sampler(seed=0)

    for i in range(50):
        reg = lb.TreeRegressor(ds_train, y_train - pred_train, 'mse', sampler=sampler)
        tree = reg.build_tree(
            num_leaves=16,
            example_sampling_rate=0.8,
            feature_sampling_rate=0.8,
            feature_importances=importances,
            min_leaf_examples=100,
        )
        pred_train += learning_rate * tree(ds_train)
        pred_test += learning_rate * tree(ds_test)

        if (i + 1) % 10 == 0:
            rmse = np.sqrt(np.mean((pred_test - y_test) ** 2))
            print(f"   Tree {i + 1:3d}: test RMSE = {rmse:.4f}, leaves = {tree.n_leaves}")

    # --- Feature importance ---
    print("\n4. Feature importance (total gain):")
    order = np.argsort(importances)[::-1]
    total = importances.sum()
    for f in order:
        print(f"   feature_{f}: {importances[f] / total:.3f}")


if __name__ == "__main__":
    main()
