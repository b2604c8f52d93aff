"""
Testing the configuration and utility helpers.
"""

import pytest
import yaml

from hypersmurf import EnsembleConfig
from hypersmurf.exceptions import ConfigError
from hypersmurf.utils import load_config


def test_from_yaml(tmp_path):
    """
    YAML files override the defaults
    """

    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "n_partitions": 20,
        "distribution_spread": 1.0,
        "categorical_features": [3],
        "n_splits": 3,
    }))

    config = EnsembleConfig.from_yaml(str(path))

    assert config.n_partitions == 20
    assert config.distribution_spread == 1.0
    assert config.categorical_features == [3]
    assert config.n_splits == 3
    assert config.k_neighbors == 5
    assert config.estimator_params()["n_partitions"] == 20
    assert "n_splits" not in config.estimator_params()


def test_empty_yaml(tmp_path):
    """
    An empty file gives the default configuration
    """

    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert EnsembleConfig.from_yaml(str(path)) == EnsembleConfig()
    assert load_config(str(path)) == {}


def test_unknown_key(tmp_path):
    """
    Misspelled options are rejected
    """

    path = tmp_path / "config.yaml"
    path.write_text("n_partition: 4\n")

    with pytest.raises(ConfigError):
        EnsembleConfig.from_yaml(str(path))


@pytest.mark.parametrize("option, value", [
    ("n_partitions", 0),
    ("execution_slots", -1),
    ("percentage", -1.0),
    ("k_neighbors", 0),
    ("distribution_spread", -0.5),
    ("n_splits", 1),
])
def test_validate(option, value):
    """
    Options out of range raise ConfigError
    """

    config = EnsembleConfig(**{option: value})

    with pytest.raises(ConfigError):
        config.validate()


def test_config_error_is_value_error():
    """
    Configuration errors can be caught as ValueError
    """

    with pytest.raises(ValueError):
        EnsembleConfig(n_partitions=-3).validate()


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))
