"""
Configuration Loader - Bridge Between JSON Config and AppSettings
=================================================================
Loads configuration from a JSON file and maps it onto AppSettings.
"""

import json
import os
from pathlib import Path
from typing import Any

from .settings import AppSettings, LoggingSettings, MarketPriceSettings


def _resolve_env_vars(data: Any) -> Any:
    """Replace "${VAR}" string values with the environment variable value."""
    if isinstance(data, dict):
        return {k: _resolve_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars(i) for i in data]
    elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
        return os.getenv(data[2:-1], "")
    return data


def load_app_settings_from_json(config_path: str = "config/config.json") -> AppSettings:
    """
    Load AppSettings from a JSON configuration file.

    Sections present in the file replace the matching defaults field by
    field; missing sections keep their environment/default values.

    Args:
        config_path: Path to the JSON config file

    Returns:
        Configured AppSettings instance
    """
    with open(config_path, 'r', encoding='utf-8') as f:
        config_data = json.load(f)

    resolved_data = _resolve_env_vars(config_data)
    settings = AppSettings()

    if 'market_price' in resolved_data:
        merged = settings.market_price.model_dump()
        merged.update(resolved_data['market_price'])
        settings.market_price = MarketPriceSettings(**merged)

    if 'logging' in resolved_data:
        logging_config = dict(resolved_data['logging'])
        if 'level' in logging_config:
            logging_config['level'] = str(logging_config['level']).upper()
        merged = settings.logging.model_dump()
        merged.update(logging_config)
        settings.logging = LoggingSettings(**merged)

    return settings


def get_settings_from_working_directory() -> AppSettings:
    """
    Load settings from config.json in the current working directory.

    Returns:
        Configured AppSettings instance, defaults when no file is found
    """
    possible_paths = [
        "config/config.json",
        "config.json",
    ]

    for config_path in possible_paths:
        if Path(config_path).exists():
            return load_app_settings_from_json(config_path)

    return AppSettings()
