"""
Configuration Loader
====================

Defaults for the pipeline, optionally overridden by a YAML file.

Usage:
    from tssvd.config import load_config

    config = load_config()                   # defaults (+ ./tssvd.yaml if present)
    config = load_config('runs/big.yaml')    # explicit file

Example tssvd.yaml:
    eigensolver: scipy
    n_partitions: 16
    n_jobs: 4
    sum_duplicates: true
    log_level: INFO
"""

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from tssvd.core.eigen import EIGENSOLVERS
from tssvd.errors import ConfigError

CONFIG_FILENAME = 'tssvd.yaml'

DEFAULTS: Dict[str, Any] = {
    'eigensolver': 'eigh',
    'n_partitions': 8,
    'n_jobs': 1,
    'sum_duplicates': False,
    'log_level': 'WARNING',
}


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Reject unknown keys and invalid values. Returns *config* unchanged."""
    unknown = sorted(set(config) - set(DEFAULTS))
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {unknown}")

    if config['eigensolver'] not in EIGENSOLVERS:
        raise ConfigError(
            f"eigensolver must be one of {EIGENSOLVERS}, got {config['eigensolver']!r}"
        )

    n_partitions = config['n_partitions']
    if not isinstance(n_partitions, int) or isinstance(n_partitions, bool) or n_partitions < 1:
        raise ConfigError(f"n_partitions must be an integer >= 1, got {n_partitions!r}")

    n_jobs = config['n_jobs']
    if not isinstance(n_jobs, int) or isinstance(n_jobs, bool) or (n_jobs < 1 and n_jobs != -1):
        raise ConfigError(f"n_jobs must be an integer >= 1 or -1, got {n_jobs!r}")

    if not isinstance(config['sum_duplicates'], bool):
        raise ConfigError(f"sum_duplicates must be true or false, got {config['sum_duplicates']!r}")

    level = config['log_level']
    if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
        raise ConfigError(f"log_level must be a logging level name, got {level!r}")

    return config


def load_config(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Load configuration.

    Args:
        path: YAML file. If None, ./tssvd.yaml is used when it exists.
        overrides: Values that win over both defaults and the file
            (None values are ignored, so CLI flags can be passed straight through)

    Returns:
        Validated configuration dict
    """
    config = deepcopy(DEFAULTS)

    if path is not None:
        config_file = Path(path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
    else:
        config_file = Path(CONFIG_FILENAME)

    if config_file.exists():
        with open(config_file) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"{config_file} must contain a mapping, got {type(loaded).__name__}")
        config.update(loaded)

    if overrides:
        config.update({k: v for k, v in overrides.items() if v is not None})

    return validate_config(config)
