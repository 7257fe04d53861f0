"""
Configuration Parser Module
Loads provider settings from a YAML configuration file
"""
from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from .settings import ProviderSettings
from ..core.exceptions import ConfigurationError
from ..core.unified_logger import get_logger


logger = get_logger(__name__, "parser")


def parse_config(config_file: Union[str, Path]) -> ProviderSettings:
    """
    Parse YAML format configuration file

    The file holds the ProviderSettings keys, either at the top level or
    below a ``libvirt`` section.

    Args:
        config_file: Configuration file path

    Returns:
        ProviderSettings: Parsed configuration object

    Raises:
        ConfigurationError: Configuration file parsing or validation failed
    """
    config_file = Path(config_file)

    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_file}", operation="parse_config")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"YAML parsing error: {e}", operation="parse_config") from e

    if not isinstance(config_data, dict):
        raise ConfigurationError(
            f"Configuration root must be a mapping, got {type(config_data).__name__}",
            operation="parse_config"
        )

    if isinstance(config_data.get('libvirt'), dict):
        config_data = config_data['libvirt']

    try:
        settings = ProviderSettings(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}", operation="parse_config") from e

    logger.debug(f"Parsed config: uri={settings.uri}, address_source={settings.address_source}")
    return settings
