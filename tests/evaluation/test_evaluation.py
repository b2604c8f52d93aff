"""
Testing the cross-validated comparison.
"""

from sklearn.tree import DecisionTreeClassifier

from hypersmurf import EnsembleConfig, HyperSMURFClassifier
from hypersmurf.evaluation import (
    cross_validate_ensemble,
    get_reference_estimators,
    metric_table,
    save_results,
)

from hypersmurf.datasets import load_imbalanced_binary


def test_cross_validate():
    """
    One row per run, fold, method and metric
    """

    dataset = load_imbalanced_binary(n_minority=40, n_majority=300)
    config = EnsembleConfig(n_partitions=3, n_splits=2, n_runs=1, num_trees=5)

    results = cross_validate_ensemble(
        dataset, config=config, data_name="toy", show_progress=False
    )

    assert list(results.columns) == ["Dataset", "Run", "Fold", "Method", "Metric", "Value"]
    assert set(results["Method"]) == {"HyperSMURF", "EasyEnsemble", "RandomForest"}
    assert set(results["Fold"]) == {0, 1}
    assert {"G-mean", "F1-score", "MCC", "AUROC", "mAP"} <= set(results["Metric"])
    assert results["Value"].between(-1, 1).all()


def test_custom_estimators(tmp_path):
    """
    Any estimators can be compared and saved
    """

    dataset = load_imbalanced_binary(n_minority=40, n_majority=300)
    config = EnsembleConfig(n_splits=2, n_runs=2)
    estimators = {
        "HyperSMURF-tree": HyperSMURFClassifier(
            n_partitions=2, estimator=DecisionTreeClassifier()
        ),
        "Tree": DecisionTreeClassifier(),
    }

    results = cross_validate_ensemble(
        dataset, config=config, estimators=estimators, show_progress=False
    )
    save_file = save_results(results, "toy", str(tmp_path))

    assert set(results["Run"]) == {0, 1}
    assert (tmp_path / "toy_results.csv").exists()
    assert (tmp_path / "toy_folds.csv").exists()
    assert save_file.endswith("toy_results.csv")
    assert sorted(metric_table(results).index) == ["HyperSMURF-tree", "Tree"]


def test_reference_estimators():
    """
    HyperSMURF is configured from the config
    """

    estimators = get_reference_estimators(EnsembleConfig(n_partitions=7))

    assert estimators["HyperSMURF"].n_partitions == 7
    assert estimators["EasyEnsemble"].n_partitions == 7
