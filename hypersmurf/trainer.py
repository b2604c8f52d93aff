"""
Training of the ensemble members, sequentially or on a bounded thread pool.
"""

import logging
import threading
from typing import List, Optional, Sequence

import numpy as np
from joblib import Parallel, delayed

from .dataset import Dataset
from .exceptions import ConfigError, TrainingError
from .pipeline import MemberSeeds, ResamplingPipeline

logger = logging.getLogger(__name__)


class EnsembleMember:
    """
    One fitted member: its pipeline and the base learner it produced.

    Parameters
    ----------
    index : int
        Position of the member (and of its partition) in the ensemble.
    pipeline : ResamplingPipeline
        Pipeline the member was trained with.
    estimator : object
        Fitted base learner.
    """

    def __init__(self, index: int, pipeline: ResamplingPipeline, estimator) -> None:
        self.index = index
        self.pipeline = pipeline
        self.estimator = estimator

    @property
    def seeds(self) -> MemberSeeds:
        return self.pipeline.seeds

    def __repr__(self) -> str:
        return f"EnsembleMember(index={self.index}, seeds={self.seeds})"

    def __str__(self) -> str:
        return f"Member {self.index} {self.pipeline!r} seeds={self.seeds}\n{describe_model(self.estimator)}"


def describe_model(estimator) -> str:
    """Textual dump of a fitted base learner."""
    if hasattr(estimator, "tree_"):
        from sklearn.tree import export_text
        return f"{estimator!r}\n{export_text(estimator)}"
    if hasattr(estimator, "estimators_"):
        depths = [
            est.get_depth() for est in estimator.estimators_ if hasattr(est, "get_depth")
        ]
        text = f"{estimator!r}\n{len(estimator.estimators_)} estimators"
        if depths:
            text += f", mean depth {np.mean(depths):.1f}"
        return text
    return repr(estimator)


def fit_member(
    index: int,
    partition: Dataset,
    pipeline: ResamplingPipeline,
    failed: Optional[threading.Event] = None,
) -> Optional[EnsembleMember]:
    """
    Fit one member; failures are wrapped with the member index.

    When ``failed`` is given, a member whose turn comes after another member
    failed returns None without fitting, and a failure sets the event.
    """
    if failed is not None and failed.is_set():
        return None
    try:
        estimator = pipeline.fit(partition)
    except Exception as exc:
        if failed is not None:
            failed.set()
        raise TrainingError(index, exc) from exc
    logger.info("Trained ensemble member %d on %d instances", index, len(partition))
    return EnsembleMember(index, pipeline, estimator)


class ParallelEnsembleTrainer:
    """
    Fits every (partition, pipeline) pair.

    Parameters
    ----------
    execution_slots : int, default=1
        Maximum number of members trained at once. 1 trains sequentially,
        0 uses one thread per CPU.

    Raises
    ------
    ConfigError
        If ``execution_slots`` is negative.
    """

    def __init__(self, execution_slots: int = 1) -> None:
        if execution_slots < 0:
            raise ConfigError(
                f"Number of execution slots needs to be >= 0, got {execution_slots}"
            )
        self.execution_slots = execution_slots

    @property
    def n_jobs(self) -> int:
        return -1 if self.execution_slots == 0 else self.execution_slots

    def train(
        self,
        partitions: Sequence[Dataset],
        pipelines: Sequence[ResamplingPipeline],
    ) -> List[EnsembleMember]:
        """
        Train member ``i`` on ``partitions[i]`` with ``pipelines[i]``.

        Returns
        -------
        members : list of EnsembleMember
            ``members[i]`` belongs to partition ``i`` whatever the completion
            order.

        Raises
        ------
        TrainingError
            For the first member that failed. No further members are started;
            members already running finish and are discarded.
        """
        if len(partitions) != len(pipelines):
            raise ValueError(
                f"Got {len(partitions)} partitions but {len(pipelines)} pipelines"
            )

        if self.execution_slots == 1:
            return [
                fit_member(i, partition, pipeline)
                for i, (partition, pipeline) in enumerate(zip(partitions, pipelines))
            ]

        failed = threading.Event()
        try:
            members = Parallel(n_jobs=self.n_jobs, prefer="threads")(
                delayed(fit_member)(i, partition, pipeline, failed)
                for i, (partition, pipeline) in enumerate(zip(partitions, pipelines))
            )
        except TrainingError as exc:
            # joblib replaces __cause__ with the worker traceback
            raise exc from exc.cause
        return list(members)
