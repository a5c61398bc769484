"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in quakefeed/core/config.py to avoid
information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from quakefeed.core.config import (
    Config,
    DEFAULT_API_PORT,
    DEFAULT_FAVORITES_PATH,
    DEFAULT_FEED_URL,
    DEFAULT_POLLING_INTERVAL_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
)


logger = logging.getLogger(__name__)


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _resolve_value(value: Any) -> Any:
    """Resolve a ${VAR} placeholder from the environment.

    Non-string values and plain strings are returned unchanged. An unset
    variable leaves the placeholder in place.
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _parse_bool(value: Any, default: bool) -> bool:
    """Parse a boolean from YAML or an environment string."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object

    Raises:
        ValueError: If a value cannot be converted to its field type
    """
    data = {key: _resolve_value(value) for key, value in data.items()}

    return Config(
        polling_interval_seconds=int(
            data.get("polling_interval_seconds", DEFAULT_POLLING_INTERVAL_SECONDS)
        ),
        min_magnitude=float(data.get("min_magnitude", 0.0)),
        sort_by_magnitude=_parse_bool(data.get("sort_by_magnitude"), True),
        feed_url=str(data.get("feed_url", DEFAULT_FEED_URL)),
        request_timeout_seconds=float(
            data.get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS)
        ),
        api_enabled=_parse_bool(data.get("api_enabled"), True),
        api_host=str(data.get("api_host", "0.0.0.0")),
        api_port=int(data.get("api_port", DEFAULT_API_PORT)),
        favorites_path=str(data.get("favorites_path", DEFAULT_FAVORITES_PATH)),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
        ValueError: If a config value has the wrong type
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: interval=%ds, min_magnitude=%.1f, sort_by_magnitude=%s",
        config.polling_interval_seconds,
        config.min_magnitude,
        config.sort_by_magnitude,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file. Unset variables
    keep their defaults.

    Environment variables:
        POLLING_INTERVAL_SECONDS: Seconds between poll cycles
        MIN_MAGNITUDE: Minimum magnitude admitted
        SORT_BY_MAGNITUDE: Sort snapshots by magnitude (true/false)
        FEED_URL: USGS GeoJSON feed URL
        REQUEST_TIMEOUT: Feed request timeout in seconds
        API_ENABLED: Run the status endpoint (true/false)
        API_HOST: Status endpoint bind address
        API_PORT: Status endpoint port
        FAVORITES_PATH: Favorites JSON file

    Returns:
        Config object from environment
    """
    env_keys = {
        "POLLING_INTERVAL_SECONDS": "polling_interval_seconds",
        "MIN_MAGNITUDE": "min_magnitude",
        "SORT_BY_MAGNITUDE": "sort_by_magnitude",
        "FEED_URL": "feed_url",
        "REQUEST_TIMEOUT": "request_timeout_seconds",
        "API_ENABLED": "api_enabled",
        "API_HOST": "api_host",
        "API_PORT": "api_port",
        "FAVORITES_PATH": "favorites_path",
    }

    data = {
        key: os.environ[env_name]
        for env_name, key in env_keys.items()
        if os.environ.get(env_name)
    }

    return load_config_from_dict(data)
