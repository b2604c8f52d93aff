"""
Random undersampling to a maximum class distribution spread.
"""

import logging

import numpy as np
from sklearn.utils import check_random_state

from .dataset import Dataset
from .exceptions import ConfigError

logger = logging.getLogger(__name__)


class SpreadSubsample(object):
    """Undersample classes so that the largest is at most ``spread`` times
    the smallest non-empty one.

    Parameters
    ----------
    distribution_spread : float, optional (default=0.0)
        Maximum ratio between any class and the smallest non-empty class.
        0 means no limit, 1 a uniform distribution, 10 at most 10:1.
    max_count : int, optional (default=0)
        Maximum number of instances kept for any class (0 = unlimited).
    adjust_weights : bool, optional (default=False)
        Reweight the kept instances so each class keeps its total weight.
    random_state : int or None, optional (default=None)
        Seed of the random number generator used to pick instances.
    """

    def __init__(self, distribution_spread=0.0, max_count=0,
                 adjust_weights=False, random_state=None):
        if distribution_spread < 0:
            raise ConfigError(
                "distribution_spread must be >= 0, got %s" % distribution_spread)
        if max_count < 0:
            raise ConfigError("max_count must be >= 0, got %s" % max_count)

        self.distribution_spread = distribution_spread
        self.max_count = int(max_count)
        self.adjust_weights = adjust_weights
        self.random_state = random_state

    def __repr__(self):
        return ("SpreadSubsample(distribution_spread=%s, max_count=%d, "
                "adjust_weights=%s, random_state=%s)"
                % (self.distribution_spread, self.max_count,
                   self.adjust_weights, self.random_state))

    def target_counts(self, counts):
        """Number of instances to keep for each class.

        Parameters
        ----------
        counts : array-like of int
            Instance count of every class.

        Returns
        -------
        new_counts : np.ndarray of int, or None if every class is empty.
        """
        counts = np.asarray(counts, dtype=np.int64)
        non_empty = counts[counts > 0]
        if non_empty.size == 0:
            return None

        min_count = non_empty.min()
        min_index = int(np.flatnonzero(counts == min_count)[0])
        spread = self.distribution_spread

        new_counts = counts.copy()
        if spread > 0:
            cap = int(min_count * spread)
            for k in range(len(counts)):
                # Never undersample the minority class itself.
                if k == min_index and spread < 1.0:
                    continue
                new_counts[k] = min(counts[k], cap)
        if self.max_count > 0:
            new_counts = np.minimum(new_counts, self.max_count)
        return new_counts

    def fit(self, dataset):
        """Record the class distribution of the training data.

        Parameters
        ----------
        dataset : Dataset
            Holds the instances to subsample.
        """
        self.classes_ = dataset.classes
        self.counts_ = dataset.class_counts()
        self.new_counts_ = self.target_counts(self.counts_)

        return self

    def sample(self, dataset):
        """Perform undersampling.

        Returns
        -------
        subsample : Dataset
            Kept instances in their original relative order.
        """
        if self.new_counts_ is None:
            logger.warning(
                "SpreadSubsample: none of the classes have any instances")
            return dataset.copy()

        random_state = check_random_state(self.random_state)
        codes = dataset.class_codes()
        weights = dataset.sample_weight.copy()

        keep = [np.flatnonzero(codes < 0)]
        for k in range(len(self.classes_)):
            idx = np.flatnonzero(codes == k)
            n_keep = self.new_counts_[k]
            if n_keep < idx.size:
                idx = np.sort(random_state.choice(idx, size=n_keep,
                                                  replace=False))
            if self.adjust_weights and idx.size > 0:
                total = dataset.sample_weight[codes == k].sum()
                weights[idx] = total / idx.size
            keep.append(idx)

        keep = np.sort(np.concatenate(keep))
        subsample = dataset.subset(keep)
        subsample.sample_weight = weights[keep]

        logger.debug("SpreadSubsample kept %d of %d instances (%s -> %s)",
                     keep.size, len(dataset), list(self.counts_),
                     list(self.new_counts_))
        return subsample

    def fit_resample(self, dataset):
        """Fit on ``dataset`` and return its subsample."""
        return self.fit(dataset).sample(dataset)
