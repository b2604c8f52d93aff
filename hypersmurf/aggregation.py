"""
Combination of member predictions into one ensemble prediction.

Categorical targets: the member class-probability vectors are summed
element-wise and every row is normalized to sum to one. A row whose raw sum
is exactly zero is returned as the all-zero vector.

Numeric targets: the member predictions are averaged over the members that
did not predict a missing value (``NaN``). If every member is missing, the
ensemble prediction is ``NaN`` as well.
"""

from typing import List, Sequence

import numpy as np
import pandas as pd

from .exceptions import PredictionError
from .trainer import EnsembleMember


class PredictionAggregator:
    """
    Queries every member and aggregates their outputs.

    Parameters
    ----------
    members : sequence of EnsembleMember
        Fitted members.
    classes : array-like
        Class labels of the ensemble, in output column order.
    target_type : {"categorical", "numeric"}, default="categorical"
        Selects distribution summing or numeric averaging.
    """

    def __init__(
        self,
        members: Sequence[EnsembleMember],
        classes,
        target_type: str = "categorical",
    ) -> None:
        self.members = list(members)
        self.classes = np.asarray(classes)
        self.target_type = target_type

    def member_distribution(self, member: EnsembleMember, X: np.ndarray) -> np.ndarray:
        """
        Class probabilities of one member, aligned to ``classes``.

        Classes the member never saw during training get probability 0.
        """
        try:
            proba = np.asarray(member.estimator.predict_proba(X), dtype=np.float64)
        except Exception as exc:
            raise PredictionError(member.index, exc) from exc

        member_classes = getattr(member.estimator, "classes_", self.classes)
        positions = pd.Index(self.classes).get_indexer(np.asarray(member_classes))
        known = positions >= 0

        aligned = np.zeros((X.shape[0], len(self.classes)), dtype=np.float64)
        aligned[:, positions[known]] = proba[:, known]
        return aligned

    def member_numeric(self, member: EnsembleMember, X: np.ndarray) -> np.ndarray:
        try:
            return np.asarray(member.estimator.predict(X), dtype=np.float64).reshape(-1)
        except Exception as exc:
            raise PredictionError(member.index, exc) from exc

    def predict_distribution(self, X: np.ndarray) -> np.ndarray:
        """
        Summed and normalized class distribution of every instance.

        Returns
        -------
        proba : np.ndarray of shape (n_samples, n_classes)
        """
        sums = np.zeros((X.shape[0], len(self.classes)), dtype=np.float64)
        for member in self.members:
            sums += self.member_distribution(member, X)

        totals = sums.sum(axis=1)
        nonzero = totals != 0
        sums[nonzero] /= totals[nonzero, np.newaxis]
        return sums

    def predict_numeric(self, X: np.ndarray) -> np.ndarray:
        """
        Mean of the non-missing member predictions of every instance.

        Returns
        -------
        y_pred : np.ndarray of shape (n_samples,)
            ``NaN`` where no member produced a prediction.
        """
        predictions = np.vstack([self.member_numeric(member, X) for member in self.members])
        valid = ~np.isnan(predictions)
        n_valid = valid.sum(axis=0)
        totals = np.where(valid, predictions, 0.0).sum(axis=0)

        y_pred = np.full(X.shape[0], np.nan)
        has_prediction = n_valid > 0
        y_pred[has_prediction] = totals[has_prediction] / n_valid[has_prediction]
        return y_pred

    def aggregate(self, X: np.ndarray) -> np.ndarray:
        if self.target_type == "numeric":
            return self.predict_numeric(X)
        return self.predict_distribution(X)

    def predict_instance(self, x) -> np.ndarray:
        """Aggregated prediction for a single instance."""
        X = np.asarray(x, dtype=np.float64).reshape(1, -1)
        return self.aggregate(X)[0]

    def member_predictions(self, X: np.ndarray, positive_index: int = 1) -> np.ndarray:
        """
        Per-member outputs, one column per member.

        Categorical targets give each member's probability of the class at
        ``positive_index``; numeric targets give each member's prediction.
        """
        columns: List[np.ndarray] = []
        for member in self.members:
            if self.target_type == "numeric":
                columns.append(self.member_numeric(member, X))
            else:
                columns.append(self.member_distribution(member, X)[:, positive_index])
        return np.column_stack(columns)
