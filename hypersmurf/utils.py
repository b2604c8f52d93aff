"""
Utility Functions for Imbalanced Learning.

This module provides helper functions for configuration loading and
logging in imbalanced learning experiments.
"""

from typing import Dict, Any, Optional
from pathlib import Path
import logging

import yaml


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Parameters
    ----------
    config_path : str
        Path to the YAML configuration file.

    Returns
    -------
    config : Dict[str, Any]
        Loaded configuration dictionary. An empty file gives ``{}``.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    yaml.YAMLError
        If the file contains invalid YAML.

    Examples
    --------
    >>> config = load_config("experiments/configs/default.yaml")
    >>> print(config['k_neighbors'])
    5
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}"
        )

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(
            f"Error parsing configuration file {config_path}: {e}"
        ) from e
    return config or {}


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging for the ``hypersmurf`` package.

    Parameters
    ----------
    level : str, default="INFO"
        Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL.
    log_file : Optional[str], default=None
        Path to log file. If None, logs only to console.
    format_string : Optional[str], default=None
        Custom log format string. If None, uses default format.

    Returns
    -------
    logger : logging.Logger
        The package logger.

    Examples
    --------
    >>> logger = setup_logging(level="DEBUG", log_file="experiment.log")
    >>> logger.info("Experiment started")
    """
    if format_string is None:
        format_string = (
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string,
        handlers=[
            logging.StreamHandler(),
        ]
    )

    logger = logging.getLogger("hypersmurf")
    logger.setLevel(getattr(logging, level.upper()))

    # Add file handler if log_file is specified
    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(format_string))
        logger.addHandler(file_handler)

    return logger
