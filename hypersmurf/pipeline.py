"""
Per-member resampling pipelines and the seed stream that feeds them.

Every ensemble member gets its own pipeline: a fixed sequence of samplers
(SMOTE, then SpreadSubsample) followed by a fresh clone of the base learner.
The three seeds of a member are drawn from one :class:`RandomStream` in a
fixed order (oversampler, balancer, learner) and all members are built before
any training starts, so the ensemble is reproducible for a given top-level
seed regardless of how training is scheduled.
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.base import clone
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.utils.validation import has_fit_parameter

from .dataset import Dataset
from .smote import SMOTE
from .spread_subsample import SpreadSubsample

logger = logging.getLogger(__name__)

MAX_SEED = np.iinfo(np.int32).max


class RandomStream:
    """
    Seeded source of member seeds.

    Draws are serialized by a lock so the order in which seeds are handed out
    is the order of the ``next_seed`` calls.

    Parameters
    ----------
    seed : int, default=1
        Top-level seed of the ensemble.
    """

    def __init__(self, seed: int = 1) -> None:
        self.seed = seed
        self._random = np.random.RandomState(seed % 2 ** 32)
        self._lock = threading.Lock()

    def next_seed(self) -> int:
        with self._lock:
            return int(self._random.randint(0, MAX_SEED))


@dataclass(frozen=True)
class MemberSeeds:
    """Seeds resolved for one ensemble member."""

    oversampler: int
    balancer: int
    learner: int


def default_forest(
    random_state: int,
    n_features: int,
    target_type: str = "categorical",
    num_trees: int = 10,
    num_features: int = 0,
    max_depth: int = 0,
    n_jobs: int = 1,
):
    """
    Random forest used when no base learner is configured.

    ``num_features <= 0`` considers ``int(log2(M) + 1)`` features per split
    and ``max_depth == 0`` grows trees without a depth limit.
    """
    if num_features <= 0:
        num_features = int(math.log2(n_features) + 1) if n_features > 0 else 1
    max_features = max(1, min(num_features, max(n_features, 1)))

    forest_cls = RandomForestRegressor if target_type == "numeric" else RandomForestClassifier
    return forest_cls(
        n_estimators=num_trees,
        max_depth=max_depth if max_depth > 0 else None,
        max_features=max_features,
        n_jobs=n_jobs,
        random_state=random_state,
    )


class ResamplingPipeline:
    """
    Samplers applied in order to a training set, then a base learner.

    The samplers only ever see training data; fitted members predict on raw
    instances.

    Parameters
    ----------
    samplers : list of (str, sampler) tuples
        Objects exposing ``fit_resample(dataset) -> Dataset``.
    estimator : object
        Unfitted scikit-learn estimator.
    seeds : MemberSeeds, optional
        Seeds the pipeline was built with.
    """

    def __init__(
        self,
        samplers: Sequence[Tuple[str, Any]],
        estimator,
        seeds: Optional[MemberSeeds] = None,
    ) -> None:
        self.samplers = list(samplers)
        self.estimator = estimator
        self.seeds = seeds

    def __repr__(self) -> str:
        steps = [name for name, _ in self.samplers] + [type(self.estimator).__name__]
        return f"ResamplingPipeline({' -> '.join(steps)})"

    def resample(self, dataset: Dataset) -> Dataset:
        for name, sampler in self.samplers:
            before = len(dataset)
            dataset = sampler.fit_resample(dataset)
            logger.debug("%s: %d -> %d instances", name, before, len(dataset))
        return dataset

    def fit(self, dataset: Dataset):
        """Resample ``dataset`` and fit the estimator on the result."""
        data = self.resample(dataset)

        y = data.y.astype(np.float64) if data.target_type == "numeric" else data.y
        fit_params: Dict[str, Any] = {}
        uniform = np.all(data.sample_weight == data.sample_weight[0]) if len(data) else True
        if not uniform and has_fit_parameter(self.estimator, "sample_weight"):
            fit_params["sample_weight"] = data.sample_weight

        self.estimator.fit(data.X, y, **fit_params)
        return self.estimator


class PartitionPipelineFactory:
    """
    Builds the pipeline of every ensemble member.

    Parameters
    ----------
    random_stream : RandomStream
        Source of the member seeds.
    estimator : object, optional
        Base learner prototype; cloned for every member. A random forest
        is used when None.
    smote_params : dict, optional
        Keyword arguments of :class:`SMOTE` (without ``random_state``).
    spread_params : dict, optional
        Keyword arguments of :class:`SpreadSubsample` (without ``random_state``).
    forest_params : dict, optional
        Keyword arguments of :func:`default_forest`.
    resample : bool, default=True
        Whether members run the SMOTE and SpreadSubsample steps.
    target_type : {"categorical", "numeric"}, default="categorical"
        Target type, used to pick the default forest.
    """

    def __init__(
        self,
        random_stream: RandomStream,
        estimator=None,
        smote_params: Optional[Dict[str, Any]] = None,
        spread_params: Optional[Dict[str, Any]] = None,
        forest_params: Optional[Dict[str, Any]] = None,
        resample: bool = True,
        target_type: str = "categorical",
    ) -> None:
        self.random_stream = random_stream
        self.estimator = estimator
        self.smote_params = dict(smote_params or {})
        self.spread_params = dict(spread_params or {})
        self.forest_params = dict(forest_params or {})
        self.resample = resample
        self.target_type = target_type

    def _make_estimator(self, seed: int, n_features: int):
        if self.estimator is None:
            return default_forest(
                seed, n_features, target_type=self.target_type, **self.forest_params
            )
        estimator = clone(self.estimator)
        if "random_state" in estimator.get_params(deep=False):
            estimator.set_params(random_state=seed)
        return estimator

    def build(self, n_features: int) -> ResamplingPipeline:
        """Pipeline of the next member; draws its three seeds in order."""
        seeds = MemberSeeds(
            oversampler=self.random_stream.next_seed(),
            balancer=self.random_stream.next_seed(),
            learner=self.random_stream.next_seed(),
        )
        samplers: List[Tuple[str, Any]] = []
        if self.resample:
            samplers = [
                ("smote", SMOTE(random_state=seeds.oversampler, **self.smote_params)),
                ("spread_subsample",
                 SpreadSubsample(random_state=seeds.balancer, **self.spread_params)),
            ]
        return ResamplingPipeline(
            samplers, self._make_estimator(seeds.learner, n_features), seeds=seeds
        )

    def build_all(self, n_members: int, n_features: int) -> List[ResamplingPipeline]:
        """Pipelines of members ``0 .. n_members - 1``, in member order."""
        return [self.build(n_features) for _ in range(n_members)]
