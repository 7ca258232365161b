"""Configuration loader with YAML merging and hashing."""

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from loguru import logger
from ruamel.yaml import YAML

from .schema import BacktestConfig


def deep_merge(base: Dict, override: Mapping) -> Dict:
    """Deep merge two dictionaries (override takes precedence).

    Args:
        base: Base dictionary.
        override: Override dictionary.

    Returns:
        Merged dictionary.
    """
    result = dict(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file to dict.

    Args:
        path: Path to YAML file.

    Returns:
        Dictionary with YAML contents.

    Raises:
        FileNotFoundError: If file doesn't exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    yaml = YAML(typ="safe")
    with path.open("r") as f:
        data = yaml.load(f)

    return data if data is not None else {}


def load_config(
    path: Optional[Path | str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> BacktestConfig:
    """Load backtest configuration from YAML with optional overrides.

    Only the fields present in the file (and in ``overrides``) replace the
    documented defaults; nested sections such as ``strategy`` merge key by key.

    Args:
        path: Path to a YAML configuration file. If None, defaults are used.
        overrides: Extra values merged on top of the file contents.

    Returns:
        Validated BacktestConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    raw_config: Dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        raw_config = load_yaml(path)
        logger.debug(f"Loaded configuration file {path}")

    if overrides:
        raw_config = deep_merge(raw_config, overrides)

    try:
        config = BacktestConfig(**raw_config)
    except Exception as e:
        raise ValueError(f"Config validation failed: {e}") from e

    logger.info(f"Loaded configuration: {config.name} ({config.ticker}, {config.num_days} days)")
    return config


def resolved_config_hash(config: BacktestConfig) -> str:
    """Generate stable hash of configuration for reproducibility.

    Uses canonical JSON serialization to ensure consistent hashing.

    Args:
        config: BacktestConfig instance.

    Returns:
        SHA256 hash (first 16 characters).
    """
    config_dict = config.model_dump(mode="json")

    canonical_json = json.dumps(
        config_dict,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
    )

    config_hash = hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()[:16]

    logger.debug(f"Config hash: {config_hash}")

    return config_hash


def save_config(config: BacktestConfig, path: Path) -> None:
    """Save configuration to YAML file.

    Args:
        config: BacktestConfig to save.
        path: Output path.
    """
    config_dict = config.model_dump(mode="json")

    yaml = YAML()
    yaml.default_flow_style = False

    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w") as f:
        yaml.dump(config_dict, f)

    logger.info(f"Saved configuration to {path}")
