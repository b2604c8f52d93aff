"""
Testing the SpreadSubsample.
"""

import numpy as np
import pytest

from hypersmurf import Dataset, SpreadSubsample
from hypersmurf.exceptions import ConfigError


def _dataset(n_majority=100, n_minority=10):
    n_samples = n_majority + n_minority
    X = np.arange(n_samples, dtype=float).reshape(-1, 1)
    y = np.array([0] * n_majority + [1] * n_minority)
    return Dataset(X, y)


def test_uniform():
    """
    Spread 1 balances the classes
    """

    dataset = _dataset()

    subsample = SpreadSubsample(distribution_spread=1.0, random_state=0).fit_resample(dataset)

    assert subsample.class_counts().tolist() == [10, 10]


def test_spread_ratio():
    """
    Spread 2 keeps at most twice the minority count
    """

    obj = SpreadSubsample(distribution_spread=2.0)

    assert obj.target_counts([100, 10]).tolist() == [20, 10]
    assert obj.target_counts([15, 10]).tolist() == [15, 10]


def test_spread_below_one_keeps_minority():
    """
    Spreads below 1 cap the other classes but never the minority class
    """

    obj = SpreadSubsample(distribution_spread=0.5)

    assert obj.target_counts([100, 10]).tolist() == [5, 10]


def test_max_count():
    """
    max_count caps every class
    """

    obj = SpreadSubsample(max_count=8)

    assert obj.target_counts([100, 10]).tolist() == [8, 8]
    assert SpreadSubsample().target_counts([100, 10]).tolist() == [100, 10]


def test_empty_classes():
    """
    Empty classes are ignored; all-empty input is returned unchanged
    """

    obj = SpreadSubsample(distribution_spread=1.0)

    assert obj.target_counts([0, 30, 10]).tolist() == [0, 10, 10]
    assert obj.target_counts([0, 0]) is None

    dataset = Dataset(np.zeros((3, 1)), np.array([np.nan] * 3), classes=[0.0, 1.0])
    assert len(obj.fit_resample(dataset)) == 3


def test_order_preserved():
    """
    Kept instances keep their relative order
    """

    dataset = _dataset()

    subsample = SpreadSubsample(distribution_spread=1.5, random_state=4).fit_resample(dataset)

    positions = subsample.X[:, 0]
    assert np.all(np.diff(positions) > 0)
    assert subsample.class_counts().tolist() == [15, 10]


def test_adjust_weights():
    """
    Total weight per class is maintained when adjusting weights
    """

    dataset = _dataset()
    dataset.sample_weight[:100] = 0.5

    subsample = SpreadSubsample(
        distribution_spread=1.0, adjust_weights=True, random_state=0
    ).fit_resample(dataset)

    majority = subsample.sample_weight[subsample.y == 0]
    minority = subsample.sample_weight[subsample.y == 1]
    assert majority.sum() == pytest.approx(50.0)
    assert np.allclose(majority, 5.0)
    assert minority.sum() == pytest.approx(10.0)


def test_weights_untouched_by_default():
    """
    Without adjustment the kept weights are copied
    """

    dataset = _dataset()
    dataset.sample_weight[:] = 2.0

    subsample = SpreadSubsample(distribution_spread=1.0, random_state=0).fit_resample(dataset)

    assert np.all(subsample.sample_weight == 2.0)


def test_invalid_parameters():
    """
    Parameter validation
    """

    with pytest.raises(ConfigError):
        SpreadSubsample(distribution_spread=-1)
    with pytest.raises(ConfigError):
        SpreadSubsample(max_count=-1)
