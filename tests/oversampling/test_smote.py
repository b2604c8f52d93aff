"""
Testing the SMOTE.
"""

import numpy as np
import pytest

from hypersmurf import SMOTE, Dataset
from hypersmurf.exceptions import ConfigError, InsufficientMinorityInstancesError
from hypersmurf.smote import _distance_space

from hypersmurf.datasets import load_imbalanced_binary, load_mixed_binary


def test_specific():
    """
    Oversampler specific testing
    """

    dataset = load_imbalanced_binary(n_minority=20, n_majority=200)

    obj = SMOTE(percentage=150, k_neighbors=5, random_state=1)
    resampled = obj.fit_resample(dataset)

    assert len(resampled) == len(dataset) + 30
    assert obj.target_class_ == 1
    assert np.all(resampled.y[len(dataset):] == 1)
    np.testing.assert_array_equal(resampled.X[:len(dataset)], dataset.X)


def test_synthetic_within_minority_hull():
    """
    Interpolated values stay between the minority extremes
    """

    dataset = load_imbalanced_binary(n_minority=20, n_majority=200)
    minority = dataset.X[dataset.y == 1]

    synthetic = SMOTE(percentage=300, random_state=3).fit(dataset).sample()

    assert len(synthetic) == 60
    assert np.all(synthetic.X >= minority.min(axis=0) - 1e-12)
    assert np.all(synthetic.X <= minority.max(axis=0) + 1e-12)


def test_zero_percentage():
    """
    No synthetic instances are created for percentage 0
    """

    dataset = load_imbalanced_binary(n_minority=20, n_majority=200)

    resampled = SMOTE(percentage=0, random_state=1).fit_resample(dataset)

    assert len(resampled) == len(dataset)


def test_reproducible():
    """
    The same seed generates the same instances
    """

    dataset = load_imbalanced_binary(n_minority=20, n_majority=200)

    first = SMOTE(percentage=70, random_state=42).fit(dataset).sample()
    second = SMOTE(percentage=70, random_state=42).fit(dataset).sample()

    assert len(first) == 14
    np.testing.assert_array_equal(first.X, second.X)


def test_categorical_and_missing():
    """
    Categorical values are voted and missing values are copied from the seed
    """

    dataset = load_mixed_binary(n_minority=30, n_majority=300, n_features=5)
    dataset.X[dataset.y == 1, 1] = np.nan
    codes = set(np.unique(dataset.X[:, 4]))

    synthetic = SMOTE(percentage=100, random_state=0).fit(dataset).sample()

    assert len(synthetic) == 30
    assert np.all(np.isnan(synthetic.X[:, 1]))
    assert set(np.unique(synthetic.X[:, 4])) <= codes


def test_weights_follow_seeds():
    """
    Synthetic instances inherit the weight of their seed
    """

    dataset = load_imbalanced_binary(n_minority=20, n_majority=200)
    dataset.sample_weight[dataset.y == 1] = 3.0

    synthetic = SMOTE(percentage=100, random_state=0).fit(dataset).sample()

    assert np.all(synthetic.sample_weight == 3.0)


def test_class_value_index():
    """
    A 1-based class index selects the oversampled class
    """

    dataset = load_imbalanced_binary(n_minority=20, n_majority=40)

    obj = SMOTE(percentage=50, class_value_index=1, random_state=0)
    resampled = obj.fit_resample(dataset)

    assert obj.target_class_ == 0
    assert len(resampled) == len(dataset) + 20
    assert np.all(resampled.y[len(dataset):] == 0)


def test_too_few_minority_instances():
    """
    At least k + 1 minority instances are needed
    """

    X = np.arange(40, dtype=float).reshape(20, 2)
    y = np.array([0] * 15 + [1] * 5)
    dataset = Dataset(X, y)

    with pytest.raises(InsufficientMinorityInstancesError):
        SMOTE(k_neighbors=5).fit(dataset)

    resampled = SMOTE(k_neighbors=4, random_state=0).fit_resample(dataset)
    assert len(resampled) == 25


def test_invalid_parameters():
    """
    Parameter validation
    """

    with pytest.raises(ConfigError):
        SMOTE(percentage=-1)
    with pytest.raises(ConfigError):
        SMOTE(k_neighbors=0)
    with pytest.raises(ConfigError):
        SMOTE(class_value_index=-2)


def test_distance_space():
    """
    Numeric features span [0, 1] and a categorical mismatch costs exactly 1
    """

    X = np.array([
        [0.0, 10.0, 0.0],
        [5.0, np.nan, 1.0],
        [10.0, 30.0, 0.0],
        [2.5, 20.0, 2.0],
    ])

    Z = _distance_space(3, [2]).fit_transform(X)

    assert Z.shape == (4, 2 + 3)
    np.testing.assert_allclose(Z[:, 0], [0.0, 0.5, 1.0, 0.25])
    np.testing.assert_allclose(Z[1, 1], 0.5)
    np.testing.assert_allclose(np.sum((Z[0, 2:] - Z[2, 2:]) ** 2), 0.0)
    np.testing.assert_allclose(np.sum((Z[0, 2:] - Z[1, 2:]) ** 2), 1.0)


def test_constant_and_empty_columns():
    """
    Constant and all-missing numeric columns do not break the neighbour search
    """

    rng = np.random.RandomState(0)
    X = rng.normal(size=(40, 3))
    X[:, 1] = 7.0
    y = np.array([0] * 30 + [1] * 10)
    X[y == 1, 2] = np.nan
    dataset = Dataset(X, y)

    synthetic = SMOTE(percentage=100, k_neighbors=3, random_state=0).fit(dataset).sample()

    assert len(synthetic) == 10
    assert np.all(synthetic.X[:, 1] == 7.0)
    assert np.all(np.isnan(synthetic.X[:, 2]))


def test_fit_resample_releases_training_state():
    """
    Only the fit summary is kept once the synthetic instances exist
    """

    dataset = load_imbalanced_binary(n_minority=20, n_majority=200)

    obj = SMOTE(percentage=100, random_state=0)
    obj.fit_resample(dataset)

    assert obj.n_minority_samples_ == 20
    assert obj.n_synthetic() == 20
    assert not hasattr(obj, "minority_")
    assert not hasattr(obj, "neigh_")
    with pytest.raises(ValueError):
        obj.sample()
