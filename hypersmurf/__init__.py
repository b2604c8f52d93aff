"""
Imbalance-aware ensembles for classification.

This package implements partition-based ensembles designed for datasets
where one class is much rarer than the others, including:
- HyperSMURF: Hyper-ensemble of SMOTE Undersampled Random Forests
- EasyEnsemble: one base learner per majority-class partition
- SMOTE and SpreadSubsample resampling filters on mixed-type data
"""

__version__ = "0.1.0"

from .dataset import Dataset, minority_class_index
from .smote import SMOTE
from .spread_subsample import SpreadSubsample
from .partition import MajorityPartitioner
from .pipeline import PartitionPipelineFactory, RandomStream, ResamplingPipeline
from .trainer import EnsembleMember, ParallelEnsembleTrainer
from .aggregation import PredictionAggregator
from .ensemble import EasyEnsembleClassifier, HyperSMURFClassifier
from .config import EnsembleConfig
from .exceptions import (
    ConfigError,
    HyperSMURFError,
    InsufficientDataError,
    InsufficientMinorityInstancesError,
    InvalidConfigError,
    InvalidFoldError,
    PredictionError,
    TrainingError,
)

__all__ = [
    "Dataset",
    "minority_class_index",
    "SMOTE",
    "SpreadSubsample",
    "MajorityPartitioner",
    "PartitionPipelineFactory",
    "RandomStream",
    "ResamplingPipeline",
    "EnsembleMember",
    "ParallelEnsembleTrainer",
    "PredictionAggregator",
    "EasyEnsembleClassifier",
    "HyperSMURFClassifier",
    "EnsembleConfig",
    "ConfigError",
    "HyperSMURFError",
    "InsufficientDataError",
    "InsufficientMinorityInstancesError",
    "InvalidConfigError",
    "InvalidFoldError",
    "PredictionError",
    "TrainingError",
]
