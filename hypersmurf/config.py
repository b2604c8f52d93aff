"""
Configuration of HyperSMURF ensembles and of the evaluation runs around them.

Usage:
    config = EnsembleConfig.from_yaml("experiments/configs/default.yaml")
    clf = HyperSMURFClassifier.from_config(config)
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional

from .exceptions import ConfigError
from .utils import load_config


@dataclass
class EnsembleConfig:
    """Options of a HyperSMURF ensemble plus experiment settings.

    Ensemble defaults follow the HyperSMURF paper (Schubach et al., 2017):
        - 10 partitions of the majority class
        - SMOTE with 5 neighbours creating 100% new minority instances
        - random forests of 10 trees as base learners
    """
    # Ensemble settings
    n_partitions: int = 10
    random_state: int = 1
    execution_slots: int = 1
    categorical_features: Optional[List[int]] = None
    target_type: str = "categorical"

    # SMOTE settings
    percentage: float = 100.0
    k_neighbors: int = 5
    class_value_index: int = 0

    # SpreadSubsample settings
    distribution_spread: float = 0.0
    max_count: int = 0
    adjust_weights: bool = False

    # Random forest settings
    num_trees: int = 10
    num_features: int = 0
    max_depth: int = 0
    num_rf_execution_slots: int = 1

    # Evaluation settings
    n_runs: int = 1
    n_splits: int = 5
    seed: int = 1203

    # Output settings
    save_path: str = "./results"
    log_level: str = "INFO"
    datasets: List[str] = field(default_factory=lambda: ["synthetic_binary"])

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "EnsembleConfig":
        """Build a configuration, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {unknown}")
        config = cls(**config_dict)
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "EnsembleConfig":
        """Load configuration from YAML file."""
        return cls.from_dict(load_config(yaml_path))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> None:
        """Raise ConfigError for the first option out of range."""
        if self.n_partitions <= 0:
            raise ConfigError(f"n_partitions must be > 0, got {self.n_partitions}")
        if self.execution_slots < 0:
            raise ConfigError(
                f"Number of execution slots needs to be >= 0, got {self.execution_slots}"
            )
        if self.target_type not in ("categorical", "numeric"):
            raise ConfigError(f"Unknown target_type {self.target_type!r}")
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
        if self.n_runs < 1:
            raise ConfigError(f"n_runs must be >= 1, got {self.n_runs}")
        if self.n_splits < 2:
            raise ConfigError(f"n_splits must be >= 2, got {self.n_splits}")

    def estimator_params(self) -> Dict[str, Any]:
        """Keyword arguments of :class:`HyperSMURFClassifier`."""
        return {
            "n_partitions": self.n_partitions,
            "random_state": self.random_state,
            "execution_slots": self.execution_slots,
            "categorical_features": self.categorical_features,
            "target_type": self.target_type,
            "percentage": self.percentage,
            "k_neighbors": self.k_neighbors,
            "class_value_index": self.class_value_index,
            "distribution_spread": self.distribution_spread,
            "max_count": self.max_count,
            "adjust_weights": self.adjust_weights,
            "num_trees": self.num_trees,
            "num_features": self.num_features,
            "max_depth": self.max_depth,
            "num_rf_execution_slots": self.num_rf_execution_slots,
        }
