"""
Testing the combination of member predictions.
"""

import numpy as np
import pytest

from hypersmurf import EnsembleMember, PredictionAggregator, ResamplingPipeline
from hypersmurf.exceptions import PredictionError


class FixedProba:
    """Predicts the same class distribution for every instance."""

    def __init__(self, classes, proba):
        self.classes_ = np.asarray(classes)
        self.proba = np.asarray(proba, dtype=float)

    def predict_proba(self, X):
        return np.tile(self.proba, (len(X), 1))


class FixedValue:
    """Predicts the same number for every instance."""

    def __init__(self, value):
        self.value = value

    def predict(self, X):
        return np.full(len(X), self.value)


class Broken:
    def predict_proba(self, X):
        raise RuntimeError("broken")

    def predict(self, X):
        raise RuntimeError("broken")


def _members(estimators):
    return [
        EnsembleMember(i, ResamplingPipeline([], est), est)
        for i, est in enumerate(estimators)
    ]


X = np.zeros((3, 2))


def test_distributions_summed_and_normalized():
    """
    Rows of the aggregated distribution sum to one
    """

    members = _members([
        FixedProba([0, 1], [0.2, 0.8]),
        FixedProba([0, 1], [0.6, 0.4]),
    ])

    proba = PredictionAggregator(members, [0, 1]).predict_distribution(X)

    np.testing.assert_allclose(proba, [[0.4, 0.6]] * 3)
    np.testing.assert_allclose(proba.sum(axis=1), 1.0)


def test_member_classes_aligned():
    """
    Members that never saw a class contribute 0 for it
    """

    members = _members([
        FixedProba([0, 1, 2], [0.2, 0.2, 0.6]),
        FixedProba([2], [1.0]),
    ])

    proba = PredictionAggregator(members, [0, 1, 2]).predict_instance([0.0, 0.0])

    np.testing.assert_allclose(proba, [0.1, 0.1, 0.8])


def test_all_zero_distribution():
    """
    An all-zero sum stays all zero
    """

    members = _members([FixedProba([0, 1], [0.0, 0.0])] * 3)

    proba = PredictionAggregator(members, [0, 1]).predict_distribution(X)

    assert np.all(proba == 0.0)


def test_numeric_mean_skips_missing():
    """
    Missing member predictions are left out of the mean
    """

    members = _members([
        FixedValue(1.0), FixedValue(np.nan), FixedValue(3.0),
        FixedValue(np.nan), FixedValue(5.0),
    ])

    y_pred = PredictionAggregator(members, [], target_type="numeric").aggregate(X)

    np.testing.assert_allclose(y_pred, [3.0, 3.0, 3.0])


def test_numeric_all_missing():
    """
    No member prediction gives a missing ensemble prediction
    """

    members = _members([FixedValue(np.nan)] * 4)

    y_pred = PredictionAggregator(members, [], target_type="numeric").predict_numeric(X)

    assert np.all(np.isnan(y_pred))


@pytest.mark.parametrize("target_type", ["categorical", "numeric"])
def test_prediction_error_reports_member(target_type):
    """
    A failing member is reported with its index
    """

    working = FixedValue(1.0) if target_type == "numeric" else FixedProba([0, 1], [0.5, 0.5])
    members = _members([working, working, Broken(), working])

    with pytest.raises(PredictionError) as excinfo:
        PredictionAggregator(members, [0, 1], target_type=target_type).aggregate(X)

    assert excinfo.value.member_index == 2
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_member_predictions():
    """
    One column per member with the probability of the requested class
    """

    members = _members([
        FixedProba([0, 1], [0.2, 0.8]),
        FixedProba([0, 1], [0.7, 0.3]),
    ])

    columns = PredictionAggregator(members, [0, 1]).member_predictions(X, positive_index=1)

    assert columns.shape == (3, 2)
    np.testing.assert_allclose(columns[0], [0.8, 0.3])
