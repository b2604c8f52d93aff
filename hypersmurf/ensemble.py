"""
EasyEnsemble and HyperSMURF estimators.

EasyEnsemble splits the majority class into ``n_partitions`` folds and trains
one base learner per fold, each on the fold plus the full minority class.
HyperSMURF (Hyper-ensemble of SMOTE Undersampled Random Forests) additionally
oversamples the minority class with SMOTE and undersamples the result with
SpreadSubsample inside every partition, and uses a random forest as the
default base learner.

References
----------
.. [1] Liu, X. Y., Wu, J., & Zhou, Z. H. (2009).
       "Exploratory Undersampling for Class-Imbalance Learning."
       IEEE Transactions on Systems, Man, and Cybernetics, Part B, 39(2), 539-550.

.. [2] Schubach, M., Re, M., Robinson, P. N., & Valentini, G. (2017).
       "Imbalance-Aware Machine Learning for Predicting Rare and Common
       Disease-Associated Non-Coding Variants." Scientific Reports, 7, 2959.
"""

import logging
from numbers import Integral
from typing import Any, Dict

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils import check_array, check_consistent_length, check_random_state
from sklearn.utils.validation import check_is_fitted

from .aggregation import PredictionAggregator
from .dataset import (
    TARGET_TYPES,
    Dataset,
    minority_class_index,
    smallest_class_index,
)
from .exceptions import (
    ConfigError,
    InsufficientDataError,
    InsufficientMinorityInstancesError,
)
from .partition import MajorityPartitioner
from .pipeline import MAX_SEED, PartitionPipelineFactory, RandomStream
from .trainer import ParallelEnsembleTrainer

logger = logging.getLogger(__name__)


class EasyEnsembleClassifier(ClassifierMixin, BaseEstimator):
    """
    EasyEnsemble for imbalanced datasets.

    Can do classification or, with ``target_type="numeric"`` and a regressor
    as base learner, regression on a discrete numeric target.

    Parameters
    ----------
    n_partitions : int, default=10
        Number of partitions of the majority class, i.e. of ensemble members.
    random_state : int, RandomState instance or None, default=1
        Top-level seed. All member seeds are derived from it.
    execution_slots : int, default=1
        Number of members trained concurrently (1 = no parallelism,
        0 = one per CPU).
    estimator : object, default=None
        Base learner, cloned for every member. A random forest when None.
    categorical_features : sequence of int, default=None
        Column indices of categorical features (holding numeric codes).
    target_type : {"categorical", "numeric"}, default="categorical"
        Whether members are aggregated as distributions or as scalars.

    Attributes
    ----------
    classes_ : np.ndarray
        Class labels seen during ``fit``.
    minority_class_ : object
        Label of the minority class.
    members_ : list of EnsembleMember
        Fitted members, ``members_[i]`` trained on partition ``i``.
    """

    _resample = False

    def __init__(
        self,
        n_partitions: int = 10,
        random_state=1,
        execution_slots: int = 1,
        estimator=None,
        categorical_features=None,
        target_type: str = "categorical",
    ) -> None:
        self.n_partitions = n_partitions
        self.random_state = random_state
        self.execution_slots = execution_slots
        self.estimator = estimator
        self.categorical_features = categorical_features
        self.target_type = target_type

    def _check_config(self) -> None:
        if self.n_partitions <= 0:
            raise ConfigError(f"n_partitions must be > 0, got {self.n_partitions}")
        if self.execution_slots < 0:
            raise ConfigError(
                f"Number of execution slots needs to be >= 0, got {self.execution_slots}"
            )
        if self.target_type not in TARGET_TYPES:
            raise ConfigError(
                f"target_type must be one of {TARGET_TYPES}, got {self.target_type!r}"
            )

    def _check_data(self, dataset: Dataset) -> None:
        if len(dataset) == 0:
            raise InsufficientDataError("No training instances with a known target")
        counts = dataset.class_counts()
        if np.count_nonzero(counts) < 2:
            raise InsufficientDataError(
                f"Need at least two non-empty classes, got counts "
                f"{dict(zip(dataset.classes.tolist(), counts.tolist()))}"
            )

    def _forest_params(self) -> Dict[str, Any]:
        return {}

    def _smote_params(self) -> Dict[str, Any]:
        return {}

    def _spread_params(self) -> Dict[str, Any]:
        return {}

    def _top_level_seed(self) -> int:
        if isinstance(self.random_state, Integral):
            return int(self.random_state)
        return int(check_random_state(self.random_state).randint(0, MAX_SEED))

    def fit(self, X, y, sample_weight=None) -> "EasyEnsembleClassifier":
        """
        Build the ensemble from the training set (X, y).

        Instances with a missing target are removed first. Configuration and
        data errors are raised before any partitioning or training.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Training instances; ``NaN`` marks missing values.
        y : array-like of shape (n_samples,)
            Targets; ``NaN`` or ``None`` marks a missing target.
        sample_weight : array-like of shape (n_samples,), optional
            Instance weights, carried through the resampling steps.

        Returns
        -------
        self : object
            Returns self.

        Raises
        ------
        ConfigError
            If an option is out of range.
        InsufficientDataError
            If the data cannot be partitioned as requested.
        TrainingError
            If a member could not be trained.
        """
        self._check_config()

        X = check_array(X, dtype=np.float64, ensure_all_finite="allow-nan")
        y = np.asarray(y)
        check_consistent_length(X, y)

        dataset = Dataset(
            X,
            y,
            sample_weight=sample_weight,
            categorical_features=self.categorical_features,
            target_type=self.target_type,
        ).drop_missing_target()
        dropped = X.shape[0] - len(dataset)
        if dropped:
            logger.info("Removed %d instances with a missing target", dropped)

        self._check_data(dataset)
        self.classes_ = dataset.classes
        self.n_features_in_ = X.shape[1]
        self.minority_class_ = dataset.classes[minority_class_index(dataset)]

        partitions = MajorityPartitioner(self.n_partitions).partitions(dataset)
        factory = PartitionPipelineFactory(
            RandomStream(self._top_level_seed()),
            estimator=self.estimator,
            smote_params=self._smote_params(),
            spread_params=self._spread_params(),
            forest_params=self._forest_params(),
            resample=self._resample,
            target_type=self.target_type,
        )
        pipelines = factory.build_all(self.n_partitions, dataset.n_features)
        del dataset

        logger.info(
            "Training %d ensemble members (execution_slots=%d)",
            self.n_partitions, self.execution_slots
        )
        trainer = ParallelEnsembleTrainer(self.execution_slots)
        self.members_ = trainer.train(partitions, pipelines)
        del partitions

        self.aggregator_ = PredictionAggregator(
            self.members_, self.classes_, target_type=self.target_type
        )
        return self

    def _validate_X(self, X) -> np.ndarray:
        check_is_fitted(self, "members_")
        X = check_array(X, dtype=np.float64, ensure_all_finite="allow-nan")
        if X.shape[1] != self.n_features_in_:
            raise ValueError(
                f"X has {X.shape[1]} features, but the ensemble was fitted "
                f"with {self.n_features_in_} features"
            )
        return X

    def predict_proba(self, X) -> np.ndarray:
        """
        Ensemble class distribution of every instance.

        Returns
        -------
        proba : np.ndarray of shape (n_samples, n_classes)
            Rows sum to one, except rows where every member predicted an
            all-zero distribution, which stay all zero.
        """
        X = self._validate_X(X)
        if self.target_type == "numeric":
            raise ValueError("predict_proba is not available for numeric targets")
        return self.aggregator_.predict_distribution(X)

    def predict(self, X) -> np.ndarray:
        """Most probable class, or the averaged prediction for numeric targets."""
        X = self._validate_X(X)
        if self.target_type == "numeric":
            return self.aggregator_.predict_numeric(X)
        proba = self.aggregator_.predict_distribution(X)
        return self.classes_[np.argmax(proba, axis=1)]

    def member_predictions(self, X, positive_class=None) -> np.ndarray:
        """
        Output of every member, one column per member.

        This is the input consumed by stacking models built on top of the
        ensemble.

        Parameters
        ----------
        positive_class : object, optional
            Class whose probability is reported. Defaults to the minority
            class. Ignored for numeric targets.

        Returns
        -------
        predictions : np.ndarray of shape (n_samples, n_partitions)
        """
        X = self._validate_X(X)
        if positive_class is None:
            positive_class = self.minority_class_
        matches = np.flatnonzero(self.classes_ == positive_class)
        if self.target_type != "numeric" and matches.size == 0:
            raise ValueError(f"Unknown class {positive_class!r}")
        positive_index = int(matches[0]) if matches.size else 0
        return self.aggregator_.member_predictions(X, positive_index=positive_index)

    def describe(self) -> str:
        """Textual dump of every member model."""
        if not hasattr(self, "members_"):
            return f"{type(self).__name__}: No model built yet."
        text = ["All the base classifiers: ", ""]
        for member in self.members_:
            text.append(str(member))
            text.append("")
        return "\n".join(text)

    def __str__(self) -> str:
        return self.describe()


class HyperSMURFClassifier(EasyEnsembleClassifier):
    """
    Hyper-ensemble of SMOTE Undersampled Random Forests.

    Every member oversamples the minority class of its partition with SMOTE,
    undersamples the result with SpreadSubsample, and fits its own base
    learner (a random forest by default).

    Parameters
    ----------
    n_partitions, random_state, execution_slots, estimator,
    categorical_features, target_type
        See :class:`EasyEnsembleClassifier`.
    percentage : float, default=100.0
        Percentage of SMOTE instances to create.
    k_neighbors : int, default=5
        Number of nearest neighbours used by SMOTE.
    class_value_index : int, default=0
        1-based index of the class to oversample (0 = auto-detect the
        non-empty minority class).
    distribution_spread : float, default=0.0
        Maximum class distribution spread (0 = no maximum, 1 = uniform,
        10 = at most 10:1).
    max_count : int, default=0
        Maximum count for any class value (0 = unlimited).
    adjust_weights : bool, default=False
        Adjust weights so that the total weight per class is maintained.
    num_trees : int, default=10
        Number of trees of the default random forest.
    num_features : int, default=0
        Features considered per split (< 1 uses ``int(log2(M) + 1)``).
    max_depth : int, default=0
        Maximum depth of the trees (0 = unlimited).
    num_rf_execution_slots : int, default=1
        Threads used by each default random forest.

    Examples
    --------
    >>> from hypersmurf.datasets import load_imbalanced_binary
    >>> dataset = load_imbalanced_binary(n_minority=30, n_majority=600)
    >>> clf = HyperSMURFClassifier(n_partitions=5).fit(dataset.X, dataset.y)
    >>> clf.predict_proba(dataset.X[:2]).shape
    (2, 2)
    """

    _resample = True

    def __init__(
        self,
        n_partitions: int = 10,
        random_state=1,
        execution_slots: int = 1,
        estimator=None,
        categorical_features=None,
        target_type: str = "categorical",
        percentage: float = 100.0,
        k_neighbors: int = 5,
        class_value_index: int = 0,
        distribution_spread: float = 0.0,
        max_count: int = 0,
        adjust_weights: bool = False,
        num_trees: int = 10,
        num_features: int = 0,
        max_depth: int = 0,
        num_rf_execution_slots: int = 1,
    ) -> None:
        super().__init__(
            n_partitions=n_partitions,
            random_state=random_state,
            execution_slots=execution_slots,
            estimator=estimator,
            categorical_features=categorical_features,
            target_type=target_type,
        )
        self.percentage = percentage
        self.k_neighbors = k_neighbors
        self.class_value_index = class_value_index
        self.distribution_spread = distribution_spread
        self.max_count = max_count
        self.adjust_weights = adjust_weights
        self.num_trees = num_trees
        self.num_features = num_features
        self.max_depth = max_depth
        self.num_rf_execution_slots = num_rf_execution_slots

    @classmethod
    def from_config(cls, config) -> "HyperSMURFClassifier":
        """Build an unfitted classifier from an :class:`EnsembleConfig`."""
        config.validate()
        return cls(**config.estimator_params())

    def _check_config(self) -> None:
        super()._check_config()
        if self.percentage < 0:
            raise ConfigError(f"percentage must be >= 0, got {self.percentage}")
        if self.k_neighbors < 1:
            raise ConfigError(f"k_neighbors must be >= 1, got {self.k_neighbors}")
        if self.class_value_index < 0:
            raise ConfigError(
                f"class_value_index must be >= 0, got {self.class_value_index}"
            )
        if self.distribution_spread < 0:
            raise ConfigError(
                f"distribution_spread must be >= 0, got {self.distribution_spread}"
            )
        if self.max_count < 0:
            raise ConfigError(f"max_count must be >= 0, got {self.max_count}")
        if self.num_trees < 1:
            raise ConfigError(f"num_trees must be >= 1, got {self.num_trees}")
        if self.max_depth < 0:
            raise ConfigError(f"max_depth must be >= 0, got {self.max_depth}")

    def _check_data(self, dataset: Dataset) -> None:
        super()._check_data(dataset)
        if self.class_value_index > dataset.n_classes:
            raise ConfigError(
                f"class_value_index {self.class_value_index} out of range for "
                f"{dataset.n_classes} classes"
            )

        # SMOTE runs per partition and sees only one majority fold
        partition_counts = MajorityPartitioner(self.n_partitions).class_counts(dataset)
        for counts in partition_counts:
            if self.class_value_index == 0:
                target_index = smallest_class_index(counts)
            else:
                target_index = self.class_value_index - 1
            n_target = int(counts[target_index])
            if n_target <= self.k_neighbors:
                raise InsufficientMinorityInstancesError(self.k_neighbors, n_target)

    def _smote_params(self) -> Dict[str, Any]:
        return {
            "percentage": self.percentage,
            "k_neighbors": self.k_neighbors,
            "class_value_index": self.class_value_index,
        }

    def _spread_params(self) -> Dict[str, Any]:
        return {
            "distribution_spread": self.distribution_spread,
            "max_count": self.max_count,
            "adjust_weights": self.adjust_weights,
        }

    def _forest_params(self) -> Dict[str, Any]:
        return {
            "num_trees": self.num_trees,
            "num_features": self.num_features,
            "max_depth": self.max_depth,
            "n_jobs": self.num_rf_execution_slots,
        }
