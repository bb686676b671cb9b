"""Configuration management for the database/XML conversion system."""

from .config_manager import ConfigManager, ConverterSettings, get_config_manager, reset_config_manager
from .processing_defaults import ConverterDefaults

__all__ = ['ConfigManager', 'ConverterSettings', 'ConverterDefaults', 'get_config_manager', 'reset_config_manager']
