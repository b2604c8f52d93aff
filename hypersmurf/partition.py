"""
Majority-class partitioning.

The majority instances are split into ``fold_count`` disjoint folds by
position (instance ``i`` belongs to fold ``i mod fold_count``). Every
partition is one majority fold joined with the complete minority set, so the
minority data is never subsampled.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from .dataset import Dataset, minority_class_index
from .exceptions import InsufficientDataError, InvalidFoldError

logger = logging.getLogger(__name__)


def split_minority_majority(dataset: Dataset) -> Tuple[Dataset, Dataset]:
    """
    Split ``dataset`` into its minority class and everything else.

    Returns
    -------
    minority : Dataset
        Instances of the smallest non-empty class.
    majority : Dataset
        All remaining instances, in their original order.
    """
    min_index = minority_class_index(dataset)
    is_minority = dataset.class_codes() == min_index
    return dataset.subset(is_minority), dataset.subset(~is_minority)


def fold_indices(n_instances: int, fold_count: int, fold_index: int) -> np.ndarray:
    """Positions of the instances that belong to fold ``fold_index``."""
    if fold_count <= 0 or not 0 <= fold_index < fold_count:
        raise InvalidFoldError(fold_count, fold_index)
    return np.arange(fold_index, n_instances, fold_count)


def partition(
    majority: Dataset,
    fold_count: int,
    fold_index: int,
    minority: Optional[Dataset] = None,
) -> Dataset:
    """
    Training set of one partition.

    Parameters
    ----------
    majority : Dataset
        Majority-class instances.
    fold_count : int
        Number of folds; must be > 0.
    fold_index : int
        Fold to return; must be in ``[0, fold_count)``.
    minority : Dataset, optional
        Minority-class instances appended after the fold.

    Raises
    ------
    InvalidFoldError
        If the fold count or index is out of range.
    """
    fold = majority.subset(fold_indices(len(majority), fold_count, fold_index))
    if minority is None:
        return fold
    return fold.concat(minority)


class MajorityPartitioner:
    """
    Carves a training set into ``n_partitions`` balanced views.

    Parameters
    ----------
    n_partitions : int
        Number of majority folds, one per ensemble member.
    """

    def __init__(self, n_partitions: int) -> None:
        if n_partitions <= 0:
            raise InvalidFoldError(n_partitions, 0)
        self.n_partitions = n_partitions

    def _split(self, dataset: Dataset) -> Tuple[Dataset, Dataset]:
        minority, majority = split_minority_majority(dataset)
        if len(majority) == 0:
            raise InsufficientDataError(
                "The majority partition is empty: the training data holds a "
                "single class"
            )
        if len(majority) < self.n_partitions:
            raise InsufficientDataError(
                f"Cannot split {len(majority)} majority instances into "
                f"{self.n_partitions} non-empty partitions"
            )
        return minority, majority

    def partitions(self, dataset: Dataset) -> List[Dataset]:
        """
        Training sets of every partition, in fold order.

        Raises
        ------
        InsufficientDataError
            If there are fewer majority instances than partitions, which
            would leave a partition without any majority data.
        """
        minority, majority = self._split(dataset)
        logger.debug(
            "Partitioning %d majority instances into %d folds (+%d minority each)",
            len(majority), self.n_partitions, len(minority)
        )
        return [
            partition(majority, self.n_partitions, fold_index, minority)
            for fold_index in range(self.n_partitions)
        ]

    def class_counts(self, dataset: Dataset) -> np.ndarray:
        """
        Class counts of every partition without building the partitions.

        Returns
        -------
        counts : np.ndarray of shape (n_partitions, n_classes)
            Row ``i`` holds the counts of ``partitions(dataset)[i]``.
        """
        minority, majority = self._split(dataset)
        codes = majority.class_codes()
        counts = np.zeros((self.n_partitions, dataset.n_classes), dtype=np.int64)
        for fold_index in range(self.n_partitions):
            fold = codes[fold_indices(len(majority), self.n_partitions, fold_index)]
            counts[fold_index] = np.bincount(fold[fold >= 0], minlength=dataset.n_classes)
        return counts + minority.class_counts()
