"""
Synthetic Minority Over-Sampling Technique (SMOTE) on mixed-type data.

Given a minority sample :math:`x_i`, SMOTE generates a synthetic sample as:

.. math::
    x_{syn} = x_i + \\lambda \\cdot (x_{nn} - x_i)

where :math:`x_{nn}` is one of the k nearest minority neighbours of
:math:`x_i` and :math:`\\lambda \\in [0, 1]` is a random interpolation factor.
Categorical features are not interpolated; they take the most frequent value
among the seed and its neighbours.

References
----------
.. [1] Chawla, N. V., Bowyer, K. W., Hall, L. O., & Kegelmeyer, W. P. (2002).
       "SMOTE: Synthetic Minority Over-Sampling Technique."
       Journal of Artificial Intelligence Research (JAIR), 16, 321-357.
"""

import logging
import math
from collections import Counter
from typing import Sequence

import numpy as np
from sklearn.compose import ColumnTransformer
from sklearn.impute import SimpleImputer
from sklearn.neighbors import NearestNeighbors
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import MinMaxScaler, OneHotEncoder
from sklearn.utils import check_random_state

from .dataset import Dataset, minority_class_index
from .exceptions import ConfigError, InsufficientMinorityInstancesError

logger = logging.getLogger(__name__)


def _distance_space(
    n_features: int, categorical_features: Sequence[int]
) -> ColumnTransformer:
    """
    Embedding in which Euclidean distance matches the SMOTE metric.

    Numeric features are min-max scaled to [0, 1]; missing values are
    replaced by the column median for the neighbour search only. Categorical
    features are one-hot encoded, with a missing value as its own category,
    and scaled by 1/sqrt(2) so a mismatch adds exactly 1 to the squared
    distance.
    """
    categorical = list(categorical_features)
    numeric = [j for j in range(n_features) if j not in set(categorical)]

    transformers = []
    if numeric:
        transformers.append((
            "numeric",
            make_pipeline(
                SimpleImputer(strategy="median", keep_empty_features=True),
                MinMaxScaler(),
            ),
            numeric,
        ))
    if categorical:
        transformers.append((
            "categorical",
            OneHotEncoder(sparse_output=False, handle_unknown="ignore"),
            categorical,
        ))
    weights = {"categorical": 1.0 / math.sqrt(2.0)} if categorical else None
    return ColumnTransformer(
        transformers, sparse_threshold=0.0, transformer_weights=weights
    )


class SMOTE:
    """
    Synthetic Minority Over-Sampling Technique (SMOTE).

    Parameters
    ----------
    percentage : float, default=100.0
        Amount of synthetic data to create, as a percentage of the number of
        target-class instances. Values above 100 run several rounds over the
        minority seeds.
    k_neighbors : int, default=5
        Number of nearest neighbours to use for generating synthetic samples.
        Valid range: k_neighbors >= 1.
    class_value_index : int, default=0
        1-based index of the class to oversample. 0 detects the smallest
        non-empty class automatically.
    random_state : int, RandomState instance or None, default=None
        Controls the choice of seeds, neighbours and interpolation factors.

    Attributes
    ----------
    target_index_ : int
        Index of the oversampled class in the dataset's class list.
    target_class_ : object
        Label of the oversampled class.
    n_minority_samples_ : int
        Number of target-class instances seen in ``fit``.
    n_features_ : int
        Number of features in the training data.
    neigh_ : NearestNeighbors
        Fitted nearest neighbours estimator over the minority instances.

    ``fit_resample`` drops the training-only state (the minority copy and the
    neighbour search structures) once the synthetic instances exist.

    Examples
    --------
    >>> from hypersmurf.datasets import load_imbalanced_binary
    >>> dataset = load_imbalanced_binary(n_minority=20, n_majority=200)
    >>> smote = SMOTE(percentage=150, k_neighbors=5, random_state=1)
    >>> len(smote.fit_resample(dataset)) - len(dataset)
    30
    """

    def __init__(
        self,
        percentage: float = 100.0,
        k_neighbors: int = 5,
        class_value_index: int = 0,
        random_state=None,
    ) -> None:
        if percentage < 0:
            raise ConfigError(f"percentage must be >= 0, got {percentage}")
        if k_neighbors < 1:
            raise ConfigError(f"k_neighbors must be >= 1, got {k_neighbors}")
        if class_value_index < 0:
            raise ConfigError(
                f"class_value_index must be >= 0, got {class_value_index}"
            )

        self.percentage = percentage
        self.k = k_neighbors
        self.class_value_index = class_value_index
        self.random_state = random_state

    def __repr__(self) -> str:
        return (
            f"SMOTE(percentage={self.percentage}, k_neighbors={self.k}, "
            f"class_value_index={self.class_value_index}, "
            f"random_state={self.random_state})"
        )

    def _resolve_target(self, dataset: Dataset) -> int:
        if self.class_value_index == 0:
            return minority_class_index(dataset)
        index = self.class_value_index - 1
        if index >= dataset.n_classes:
            raise ConfigError(
                f"class_value_index {self.class_value_index} out of range for "
                f"{dataset.n_classes} classes"
            )
        return index

    def fit(self, dataset: Dataset) -> "SMOTE":
        """
        Fit the SMOTE model on the target-class instances of ``dataset``.

        Parameters
        ----------
        dataset : Dataset
            Training data; only the target class is used.

        Returns
        -------
        self : SMOTE
            Fitted SMOTE instance.

        Raises
        ------
        InsufficientMinorityInstancesError
            If the target class has no more than ``k_neighbors`` instances.
        """
        self.target_index_ = self._resolve_target(dataset)
        self.target_class_ = dataset.classes[self.target_index_]
        self.minority_ = dataset.subset(dataset.class_codes() == self.target_index_)
        self.n_minority_samples_ = len(self.minority_)
        self.n_features_ = dataset.n_features

        # Check if we have enough samples
        if self.n_minority_samples_ <= self.k:
            raise InsufficientMinorityInstancesError(self.k, self.n_minority_samples_)

        self.numeric_features_ = [
            j for j in range(self.n_features_) if j not in dataset.categorical_features
        ]
        self.space_ = _distance_space(self.n_features_, dataset.categorical_features)
        Z = self.space_.fit_transform(self.minority_.X)

        # k+1 to include the sample itself
        self.neigh_ = NearestNeighbors(n_neighbors=self.k + 1)
        self.neigh_.fit(Z)
        candidates = self.neigh_.kneighbors(Z, return_distance=False)
        self.neighbors_ = np.array([
            _drop_self(row, i, self.k) for i, row in enumerate(candidates)
        ])

        self.votes_ = self._categorical_votes(dataset.categorical_features)
        return self

    def _categorical_votes(self, categorical_features: Sequence[int]) -> np.ndarray:
        votes = np.full(
            (self.n_minority_samples_, len(categorical_features)), np.nan
        )
        X = self.minority_.X
        for i in range(self.n_minority_samples_):
            members = np.concatenate(([i], self.neighbors_[i]))
            for c, j in enumerate(categorical_features):
                values = [v for v in X[members, j] if not np.isnan(v)]
                if values:
                    # Counter keeps insertion order on ties, so the seed wins
                    votes[i, c] = Counter(values).most_common(1)[0][0]
        return votes

    def n_synthetic(self) -> int:
        """Number of synthetic instances ``sample`` will generate."""
        if not hasattr(self, "n_minority_samples_"):
            raise ValueError("SMOTE instance is not fitted. Call 'fit' first.")
        amount = self.n_minority_samples_ * self.percentage / 100.0
        return int(math.ceil(round(amount, 9)))

    def sample(self) -> Dataset:
        """
        Generate synthetic target-class instances.

        Seeds are visited in full rounds over the minority instances; the
        remainder uses a random subset of seeds without replacement.

        Returns
        -------
        synthetic : Dataset
            ``n_synthetic()`` new instances labelled with the target class.
        """
        if not hasattr(self, "minority_"):
            raise ValueError("SMOTE instance is not fitted. Call 'fit' first.")
        n_samples = self.n_synthetic()
        random_state = check_random_state(self.random_state)

        n_rounds, remainder = divmod(n_samples, self.n_minority_samples_)
        seeds = np.concatenate((
            np.tile(np.arange(self.n_minority_samples_), n_rounds),
            np.sort(random_state.choice(
                self.n_minority_samples_, size=remainder, replace=False
            )),
        )).astype(np.int64)

        X = self.minority_.X
        numeric = self.numeric_features_
        categorical = list(self.minority_.categorical_features)

        X_synthetic = np.zeros((n_samples, self.n_features_), dtype=np.float64)
        for row, seed in enumerate(seeds):
            neighbor = random_state.choice(self.neighbors_[seed])
            lambda_interp = random_state.random_sample()

            diff_vector = X[neighbor, numeric] - X[seed, numeric]
            values = X[seed, numeric] + lambda_interp * diff_vector
            missing = np.isnan(diff_vector)
            values[missing] = X[seed, numeric][missing]

            X_synthetic[row, numeric] = values
            X_synthetic[row, categorical] = self.votes_[seed]

        y_synthetic = np.full(n_samples, self.target_class_, dtype=self.minority_.y.dtype)
        weights = self.minority_.sample_weight[seeds]

        logger.debug(
            "SMOTE generated %d synthetic instances of class %r from %d seeds",
            n_samples, self.target_class_, self.n_minority_samples_
        )
        return Dataset(
            X_synthetic,
            y_synthetic,
            sample_weight=weights,
            classes=self.minority_.classes,
            categorical_features=self.minority_.categorical_features,
            target_type=self.minority_.target_type,
        )

    def fit_resample(self, dataset: Dataset) -> Dataset:
        """Original instances followed by the synthetic ones."""
        self.fit(dataset)
        if self.n_synthetic() == 0:
            resampled = dataset.copy()
        else:
            resampled = dataset.concat(self.sample())
        self._release_training_state()
        return resampled

    def _release_training_state(self) -> None:
        for name in ("minority_", "space_", "neigh_", "neighbors_", "votes_"):
            self.__dict__.pop(name, None)


def _drop_self(row: np.ndarray, index: int, k: int) -> np.ndarray:
    """Neighbour indices without the query point itself."""
    others = row[row != index]
    return others[:k]
