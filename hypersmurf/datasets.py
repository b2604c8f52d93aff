"""
Synthetic imbalanced datasets for examples, tests and benchmarks.

The features come from scikit-learn's ``make_classification``; the class
counts are then fixed exactly with imbalanced-learn's ``make_imbalance``.
"""

from typing import Dict, Optional

import numpy as np
from imblearn.datasets import make_imbalance
from sklearn.datasets import make_classification
from sklearn.utils import check_random_state, shuffle

from .dataset import Dataset


def _make_counts(
    counts: Dict[int, int],
    n_features: int,
    n_informative: int,
    random_state,
):
    n_classes = len(counts)
    n_samples = n_classes * max(counts.values())
    X, y = make_classification(
        n_samples=n_samples,
        n_features=n_features,
        n_informative=n_informative,
        n_redundant=0,
        n_classes=n_classes,
        n_clusters_per_class=1,
        weights=None,
        flip_y=0.0,
        random_state=random_state,
    )
    X, y = make_imbalance(X, y, sampling_strategy=counts, random_state=random_state)
    return shuffle(X, y, random_state=random_state)


def load_imbalanced_binary(
    n_minority: int = 50,
    n_majority: int = 500,
    n_features: int = 8,
    random_state: Optional[int] = 0,
) -> Dataset:
    """
    Binary problem with label 0 as the majority and 1 as the minority class.

    Parameters
    ----------
    n_minority : int, default=50
        Number of instances of class 1.
    n_majority : int, default=500
        Number of instances of class 0.
    n_features : int, default=8
        Number of numeric features.
    random_state : int or None, default=0
        Seed of the generator.

    Returns
    -------
    dataset : Dataset
        Instances in random order, all weights 1.

    Examples
    --------
    >>> dataset = load_imbalanced_binary(n_minority=20, n_majority=200)
    >>> dataset.class_counts().tolist()
    [200, 20]
    """
    X, y = _make_counts(
        {0: n_majority, 1: n_minority},
        n_features=n_features,
        n_informative=min(n_features, 4),
        random_state=random_state,
    )
    return Dataset(X, y, classes=[0, 1])


def load_imbalanced_multiclass(
    counts=(400, 100, 25),
    n_features: int = 8,
    random_state: Optional[int] = 0,
) -> Dataset:
    """Multiclass problem; class ``i`` has ``counts[i]`` instances."""
    X, y = _make_counts(
        dict(enumerate(counts)),
        n_features=n_features,
        n_informative=min(n_features, max(4, len(counts))),
        random_state=random_state,
    )
    return Dataset(X, y, classes=list(range(len(counts))))


def load_mixed_binary(
    n_minority: int = 50,
    n_majority: int = 500,
    n_features: int = 6,
    n_categories: int = 3,
    missing_rate: float = 0.0,
    random_state: Optional[int] = 0,
) -> Dataset:
    """
    Binary problem whose last feature is categorical.

    The categorical column holds the codes ``0 .. n_categories - 1``, obtained
    by binning one informative feature. A fraction ``missing_rate`` of all
    feature values is replaced by ``NaN``.
    """
    X, y = _make_counts(
        {0: n_majority, 1: n_minority},
        n_features=n_features,
        n_informative=min(n_features, 4),
        random_state=random_state,
    )
    edges = np.quantile(X[:, 0], np.linspace(0, 1, n_categories + 1)[1:-1])
    X[:, -1] = np.digitize(X[:, 0], edges).astype(np.float64)

    if missing_rate > 0:
        rng = check_random_state(random_state)
        X[rng.random_sample(X.shape) < missing_rate] = np.nan

    return Dataset(X, y, classes=[0, 1], categorical_features=[n_features - 1])
