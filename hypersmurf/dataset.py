"""
Instance container used by the resampling filters and the ensemble.

A :class:`Dataset` bundles a feature matrix, a target vector, per-instance
weights and the schema needed by the filters: the ordered class labels, the
categorical feature indices and whether the target is categorical or
numeric. Missing feature values are stored as ``NaN``; missing targets may be
``NaN`` or ``None``.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .exceptions import ConfigError, InsufficientDataError

TARGET_TYPES = ("categorical", "numeric")


@dataclass(frozen=True)
class ClassPartition:
    """A class label together with its position and instance count."""

    label: object
    index: int
    count: int


class Dataset:
    """
    Feature matrix, target and weights sharing one schema.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        Feature values. Categorical features hold numeric codes.
    y : array-like of shape (n_samples,)
        Target values.
    sample_weight : array-like of shape (n_samples,), optional
        Instance weights. Defaults to 1.0 for every instance.
    classes : array-like, optional
        Ordered class labels. Inferred from the non-missing targets
        (sorted) when omitted.
    categorical_features : sequence of int, optional
        Column indices of categorical features.
    target_type : {"categorical", "numeric"}, default="categorical"
        Whether the members are queried for distributions or scalars.
    """

    def __init__(
        self,
        X,
        y,
        sample_weight=None,
        classes=None,
        categorical_features: Optional[Sequence[int]] = None,
        target_type: str = "categorical",
    ) -> None:
        if target_type not in TARGET_TYPES:
            raise ConfigError(
                f"target_type must be one of {TARGET_TYPES}, got {target_type!r}"
            )

        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2:
            raise ValueError(f"X must be 2D array, got shape {X.shape}")

        y = np.asarray(y)
        if y.ndim != 1:
            raise ValueError(f"y must be 1D array, got shape {y.shape}")

        if X.shape[0] != y.shape[0]:
            raise ValueError(
                f"X and y have different sample counts: "
                f"{X.shape[0]} vs {y.shape[0]}"
            )

        if sample_weight is None:
            sample_weight = np.ones(X.shape[0], dtype=np.float64)
        else:
            sample_weight = np.asarray(sample_weight, dtype=np.float64)
            if sample_weight.shape != (X.shape[0],):
                raise ValueError(
                    f"sample_weight must have shape ({X.shape[0]},), "
                    f"got {sample_weight.shape}"
                )

        if classes is None:
            present = y[~pd.isna(y)]
            classes = np.unique(present) if present.size else np.array([])
        self.X = X
        self.y = y
        self.sample_weight = sample_weight
        self.classes = np.asarray(classes)
        self.categorical_features = tuple(sorted(categorical_features or ()))
        self.target_type = target_type

        for j in self.categorical_features:
            if not 0 <= j < self.n_features:
                raise ConfigError(
                    f"categorical feature index {j} out of range for "
                    f"{self.n_features} features"
                )

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        target: str,
        target_type: str = "categorical",
        weight_column: Optional[str] = None,
    ) -> "Dataset":
        """
        Build a dataset from a DataFrame.

        Non-numeric columns (object, string or category dtype) become
        categorical features encoded by their category codes; missing values
        become ``NaN``.
        """
        features = frame.drop(columns=[c for c in (target, weight_column) if c])
        columns = []
        categorical = []
        for j, name in enumerate(features.columns):
            column = features[name]
            if not pd.api.types.is_numeric_dtype(column):
                codes = pd.Categorical(column).codes.astype(np.float64)
                codes[codes < 0] = np.nan
                columns.append(codes)
                categorical.append(j)
            else:
                columns.append(
                    column.to_numpy(dtype=np.float64, na_value=np.nan, copy=True)
                )

        X = np.column_stack(columns) if columns else np.empty((len(frame), 0))
        weights = None
        if weight_column is not None:
            weights = frame[weight_column].to_numpy(dtype=np.float64, copy=True)
        return cls(
            X,
            frame[target].to_numpy(copy=True),
            sample_weight=weights,
            categorical_features=categorical,
            target_type=target_type,
        )

    @property
    def n_features(self) -> int:
        return self.X.shape[1]

    @property
    def n_classes(self) -> int:
        return len(self.classes)

    def __len__(self) -> int:
        return self.X.shape[0]

    def __iter__(self) -> Iterator[Tuple[np.ndarray, object, float]]:
        for i in range(len(self)):
            yield self.X[i], self.y[i], self.sample_weight[i]

    def __repr__(self) -> str:
        return (
            f"Dataset(n_samples={len(self)}, n_features={self.n_features}, "
            f"classes={list(self.classes)}, target_type={self.target_type!r})"
        )

    def class_codes(self) -> np.ndarray:
        """Index of each target in ``classes``; -1 for missing or unknown."""
        return np.asarray(
            pd.Categorical(self.y, categories=self.classes).codes, dtype=np.int64
        )

    def class_counts(self) -> np.ndarray:
        """Number of instances per class, in ``classes`` order."""
        codes = self.class_codes()
        return np.bincount(codes[codes >= 0], minlength=self.n_classes)

    def class_partitions(self) -> List[ClassPartition]:
        counts = self.class_counts()
        return [
            ClassPartition(label=label, index=i, count=int(counts[i]))
            for i, label in enumerate(self.classes)
        ]

    def missing_target_mask(self) -> np.ndarray:
        return np.asarray(pd.isna(self.y), dtype=bool)

    def is_missing(self, i: int, j: int) -> bool:
        """Whether feature ``j`` of instance ``i`` is missing."""
        return bool(np.isnan(self.X[i, j]))

    def _with(self, X, y, sample_weight) -> "Dataset":
        return Dataset(
            X,
            y,
            sample_weight=sample_weight,
            classes=self.classes,
            categorical_features=self.categorical_features,
            target_type=self.target_type,
        )

    def subset(self, indices) -> "Dataset":
        """Instances at ``indices`` (integer positions or a boolean mask)."""
        indices = np.asarray(indices)
        return self._with(
            self.X[indices], self.y[indices], self.sample_weight[indices]
        )

    def concat(self, other: "Dataset") -> "Dataset":
        """This dataset followed by the instances of ``other``."""
        if other.n_features != self.n_features:
            raise ValueError(
                f"Cannot concatenate datasets with {self.n_features} and "
                f"{other.n_features} features"
            )
        if other.categorical_features != self.categorical_features:
            raise ValueError("Cannot concatenate datasets with different schemas")
        return self._with(
            np.vstack((self.X, other.X)),
            np.concatenate((self.y, other.y)),
            np.concatenate((self.sample_weight, other.sample_weight)),
        )

    def copy(self) -> "Dataset":
        return self._with(self.X.copy(), self.y.copy(), self.sample_weight.copy())

    def drop_missing_target(self) -> "Dataset":
        """Copy without the instances whose target is missing."""
        return self.subset(~self.missing_target_mask())


def minority_class_index(dataset: Dataset) -> int:
    """
    Index of the smallest non-empty class.

    Ties are broken in favour of the lowest class index.

    Raises
    ------
    InsufficientDataError
        If no class has any instances.
    """
    return smallest_class_index(dataset.class_counts())


def smallest_class_index(counts: Sequence[int]) -> int:
    """Index of the smallest non-zero entry of ``counts``, lowest on ties."""
    min_index = -1
    for i, count in enumerate(counts):
        if count != 0 and (min_index < 0 or count < counts[min_index]):
            min_index = i
    if min_index < 0:
        raise InsufficientDataError("None of the classes has any instances")
    return min_index
