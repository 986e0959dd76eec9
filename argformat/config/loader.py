"""
Formatter Configuration Loader

Loads formatter configuration from YAML with support for:
- Custom config file paths
- Environment variable overrides
- Fallback to the shipped formatter_defaults.yaml
- Schema validation

Configuration is only loaded when asked for; ``Formatter()`` always starts
from the documented defaults.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from argformat.config.schema import FormatterConfig
from argformat.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "ARGFORMAT_CONFIG"
ENV_PREFIX = "ARGFORMAT_FORMATTER_"
SECTION = "formatter"


def _find_config_file(path: str | Path | None, env: Mapping[str, str]) -> Path:
    """Find the configuration file to load."""
    if path is not None:
        config_path = Path(path)
    elif env.get(CONFIG_PATH_ENV):
        config_path = Path(env[CONFIG_PATH_ENV])
    else:
        # Default location: argformat/config/formatter_defaults.yaml
        config_path = Path(__file__).resolve().parent / "formatter_defaults.yaml"

    if not config_path.exists():
        msg = (
            f"Formatter config file not found at {config_path}. "
            f"Set {CONFIG_PATH_ENV} or pass a path to specify a custom location."
        )
        raise ConfigError(msg, source=str(config_path))

    return config_path


def _read_section(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", source=str(config_path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML value must be a mapping", source=str(config_path))

    section = data.get(SECTION) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{SECTION}' section must be a mapping", source=str(config_path))

    return dict(section)


def _apply_env_overrides(section: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    """
    Apply environment variable overrides to the formatter section.

    Environment variables follow the pattern ARGFORMAT_FORMATTER_<KEY>=value.
    Values are taken verbatim: every formatter setting is a string.

    Example:
    ARGFORMAT_FORMATTER_LEFT_DELIMITER=<<
    """
    result = section.copy()

    for env_key, env_value in env.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        key = env_key[len(ENV_PREFIX) :].lower()
        logger.debug("Overriding formatter.%s from %s", key, env_key)
        result[key] = env_value

    return result


def load_formatter_config(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> FormatterConfig:
    """
    Load formatter configuration.

    Args:
        path: YAML file to read. Defaults to $ARGFORMAT_CONFIG, then the shipped
              formatter_defaults.yaml
        env: Environment mapping (defaults to os.environ)

    Returns:
        Validated formatter configuration

    Raises:
        ConfigError: If the file is missing, unparsable or invalid

    Examples:
        >>> config = load_formatter_config()
        >>> config.placeholder
        'p'
    """
    env = os.environ if env is None else env

    config_path = _find_config_file(path, env)
    section = _apply_env_overrides(_read_section(config_path), env)

    try:
        config = FormatterConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigError(f"Invalid formatter configuration: {e}", source=str(config_path)) from e

    logger.debug("Loaded formatter config from %s: %s", config_path, config.model_dump())
    return config
