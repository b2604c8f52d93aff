"""
Cross-validated comparison of HyperSMURF against reference learners.

Every run draws a new stratified K-fold split; every fold fits a fresh clone
of each estimator on the training part and scores it on the test part with
:class:`hypersmurf.metrics.Metrics`, the minority class being the positive
class.
"""

import logging
import os
from collections import defaultdict
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import StratifiedKFold
from tqdm import tqdm

from .config import EnsembleConfig
from .dataset import Dataset, minority_class_index
from .ensemble import EasyEnsembleClassifier, HyperSMURFClassifier
from .metrics import Metrics

logger = logging.getLogger(__name__)


def get_reference_estimators(config: EnsembleConfig) -> Dict[str, Any]:
    """
    Estimators compared in a benchmark.

    HyperSMURF as configured, EasyEnsemble with the same partitioning and
    a single random forest trained on the whole, unbalanced training set.
    """
    hypersmurf = HyperSMURFClassifier.from_config(config)
    return {
        "HyperSMURF": hypersmurf,
        "EasyEnsemble": EasyEnsembleClassifier(
            n_partitions=config.n_partitions,
            random_state=config.random_state,
            execution_slots=config.execution_slots,
            categorical_features=config.categorical_features,
        ),
        "RandomForest": RandomForestClassifier(
            n_estimators=config.num_trees * config.n_partitions,
            random_state=config.seed,
        ),
    }


def _positive_scores(estimator, X: np.ndarray, pos_label) -> np.ndarray:
    proba = estimator.predict_proba(X)
    matches = np.flatnonzero(np.asarray(estimator.classes_) == pos_label)
    if matches.size == 0:
        return np.zeros(X.shape[0])
    return proba[:, matches[0]]


def cross_validate_ensemble(
    dataset: Dataset,
    config: Optional[EnsembleConfig] = None,
    estimators: Optional[Dict[str, Any]] = None,
    data_name: str = "dataset",
    show_progress: bool = True,
) -> pd.DataFrame:
    """
    Repeated stratified K-fold evaluation.

    Parameters
    ----------
    dataset : Dataset
        Data to evaluate on; instances with a missing target are dropped.
    config : EnsembleConfig, optional
        Ensemble options plus ``n_runs``, ``n_splits`` and ``seed``.
    estimators : dict, optional
        Name to unfitted estimator. Defaults to
        :func:`get_reference_estimators`.
    data_name : str, default="dataset"
        Value of the ``Dataset`` column of the result.
    show_progress : bool, default=True
        Display a tqdm progress bar over the folds.

    Returns
    -------
    results : pd.DataFrame
        One row per (run, fold, method, metric) with columns
        ``Dataset, Run, Fold, Method, Metric, Value``.
    """
    config = config or EnsembleConfig()
    config.validate()
    if estimators is None:
        estimators = get_reference_estimators(config)

    dataset = dataset.drop_missing_target()
    X, y = dataset.X, dataset.y
    pos_label = dataset.classes[minority_class_index(dataset)]
    logger.info(
        "Evaluating %d methods on %s: %d instances, minority class %r (%d)",
        len(estimators), data_name, len(dataset), pos_label,
        int(np.sum(y == pos_label))
    )

    rows = []
    fold_pbar = tqdm(
        total=config.n_runs * config.n_splits,
        desc=f"Folds ({data_name})",
        leave=False,
        disable=not show_progress,
    )
    for run in range(config.n_runs):
        skf = StratifiedKFold(
            n_splits=config.n_splits,
            random_state=config.seed + run,
            shuffle=True
        )
        for fold, (train_idx, test_idx) in enumerate(skf.split(X, y)):
            fold_seed = config.seed + fold + 10 * run
            X_train, X_test = X[train_idx], X[test_idx]
            y_train, y_test = y[train_idx], y[test_idx]
            w_train = dataset.sample_weight[train_idx]

            for method, prototype in estimators.items():
                model = clone(prototype)
                if "random_state" in model.get_params(deep=False):
                    model.set_params(random_state=fold_seed)
                if isinstance(model, EasyEnsembleClassifier):
                    model.fit(X_train, y_train, sample_weight=w_train)
                else:
                    model.fit(X_train, y_train)

                y_pred = model.predict(X_test)
                y_score = _positive_scores(model, X_test, pos_label)
                scores = Metrics(y_test, y_pred, y_score, pos_label=pos_label)
                for metric_name, metric_value in scores.all_metrics().items():
                    rows.append({
                        "Dataset": data_name,
                        "Run": run,
                        "Fold": fold,
                        "Method": method,
                        "Metric": metric_name,
                        "Value": float(np.round(metric_value, 4)),
                    })
            fold_pbar.update(1)
    fold_pbar.close()

    return pd.DataFrame(
        rows, columns=["Dataset", "Run", "Fold", "Method", "Metric", "Value"]
    )


def summarize_results(results: pd.DataFrame) -> pd.DataFrame:
    """Mean and standard deviation of every (dataset, method, metric)."""
    summary = (
        results.groupby(["Dataset", "Method", "Metric"])["Value"]
        .agg(["mean", "std"])
        .reset_index()
    )
    return summary


def save_results(results: pd.DataFrame, data_name: str, save_path: str = "./results") -> str:
    """
    Save the per-fold results and their summary as CSV files.

    Returns
    -------
    save_file : str
        Path of the summary file.
    """
    os.makedirs(save_path, exist_ok=True)
    results.to_csv(os.path.join(save_path, f"{data_name}_folds.csv"), index=False)

    save_file = os.path.join(save_path, f"{data_name}_results.csv")
    summarize_results(results).to_csv(save_file, index=False)
    logger.info("Final results are saved to %s", save_file)
    return save_file


def metric_table(results: pd.DataFrame) -> pd.DataFrame:
    """Mean value per method (rows) and metric (columns)."""
    means = defaultdict(dict)
    for (method, metric), value in results.groupby(["Method", "Metric"])["Value"].mean().items():
        means[method][metric] = value
    return pd.DataFrame.from_dict(means, orient="index").sort_index()
