"""
Infrastructure Configuration - Unified Configuration System
===========================================================
Single source of truth for market price service configuration.
"""

from .settings import AppSettings, LoggingSettings, MarketPriceSettings
from .config_loader import load_app_settings_from_json, get_settings_from_working_directory

__all__ = [
    'AppSettings',
    'LoggingSettings',
    'MarketPriceSettings',
    'load_app_settings_from_json',
    'get_settings_from_working_directory',
]
