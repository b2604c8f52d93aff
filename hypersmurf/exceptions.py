"""
Exceptions raised by the imbalance-aware ensemble.

Configuration and data-sufficiency errors subclass ``ValueError`` so that
callers using scikit-learn conventions can catch them as usual. Training and
prediction failures wrap the underlying error of a single ensemble member and
record its index.
"""

from typing import Optional


class HyperSMURFError(Exception):
    """Base exception for all ensemble errors."""
    pass


class ConfigError(HyperSMURFError, ValueError):
    """Raised when an option or a combination of options is invalid."""
    pass


InvalidConfigError = ConfigError


class InvalidFoldError(ConfigError):
    """Raised when a fold count or fold index is out of range."""

    def __init__(self, fold_count: int, fold_index: int) -> None:
        self.fold_count = fold_count
        self.fold_index = fold_index
        if fold_count <= 0:
            reason = f"fold_count must be > 0, got {fold_count}"
        else:
            reason = (
                f"fold_index must be in [0, {fold_count}), got {fold_index}"
            )
        super().__init__(reason)


class InsufficientDataError(HyperSMURFError, ValueError):
    """Raised when the training data cannot support the requested setup."""
    pass


class InsufficientMinorityInstancesError(InsufficientDataError):
    """Raised when SMOTE has fewer minority instances than it needs."""

    def __init__(self, k_neighbors: int, n_minority: int) -> None:
        self.k_neighbors = k_neighbors
        self.n_minority = n_minority
        super().__init__(
            f"Cannot use SMOTE with k_neighbors={k_neighbors} when only "
            f"{n_minority} minority samples are available. "
            f"Need at least {k_neighbors + 1} samples."
        )


class _MemberError(HyperSMURFError, RuntimeError):
    """Failure of one ensemble member, identified by its index."""

    action = "failed"

    def __init__(self, member_index: int, cause: Optional[BaseException] = None) -> None:
        self.member_index = member_index
        self.cause = cause
        message = f"Ensemble member {member_index} {self.action}"
        if cause is not None:
            message += f": {type(cause).__name__}: {cause}"
        super().__init__(message)


class TrainingError(_MemberError):
    """Raised when the base learner of a member could not be fitted."""

    action = "failed to train"


class PredictionError(_MemberError):
    """Raised when a member could not produce a prediction."""

    action = "failed to predict"
