"""
Centralized configuration management for the database/XML conversion system.

Settings are resolved in three layers: ConverterDefaults, then an optional
JSON or YAML settings file, then ``DBXML_*`` environment variables.
"""

import os
import json
import logging
import yaml

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..exceptions import ConfigurationError
from ..models import ReplaceStrategy
from .processing_defaults import ConverterDefaults


ENVIRONMENT_VARIABLES = {
    'database_tag': 'DBXML_DATABASE_TAG',
    'replace_strategy': 'DBXML_REPLACE_STRATEGY',
    'tables': 'DBXML_TABLES',
    'id_column': 'DBXML_ID_COLUMN',
    'chunk_size': 'DBXML_CHUNK_SIZE',
    'encoding': 'DBXML_ENCODING',
    'log_level': 'DBXML_LOG_LEVEL',
    'connection_string': 'DBXML_CONNECTION_STRING',
}


def _split_tables(value: Union[str, List[str], None]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [name.strip() for name in value.split(',') if name.strip()]
    return [str(name) for name in value]


@dataclass
class ConverterSettings:
    """Converter settings with environment variable support."""
    database_tag: str = ConverterDefaults.DATABASE_TAG
    replace_strategy: ReplaceStrategy = ConverterDefaults.REPLACE_STRATEGY  # parsed in __post_init__
    tables: List[str] = field(default_factory=list)
    id_column: str = ConverterDefaults.ID_COLUMN
    chunk_size: int = ConverterDefaults.CHUNK_SIZE
    encoding: str = ConverterDefaults.ENCODING
    log_level: str = ConverterDefaults.LOG_LEVEL
    connection_string: Optional[str] = None

    def __post_init__(self):
        """Normalize and validate settings."""
        self.replace_strategy = ReplaceStrategy.from_name(self.replace_strategy)
        self.tables = _split_tables(self.tables)
        try:
            self.chunk_size = int(self.chunk_size)
        except (TypeError, ValueError):
            raise ConfigurationError(f"chunk_size must be an integer, got {self.chunk_size!r}")
        if self.chunk_size <= 0:
            raise ConfigurationError("chunk_size must be positive")
        if not self.database_tag:
            raise ConfigurationError("database_tag cannot be empty")
        if not self.id_column:
            raise ConfigurationError("id_column cannot be empty")
        self.log_level = str(self.log_level).upper()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base: Optional['ConverterSettings'] = None) -> 'ConverterSettings':
        """
        Build settings from a mapping, on top of ``base`` (defaults when None).

        Raises:
            ConfigurationError: If the mapping contains unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(unknown)}")
        return replace(base or cls(), **dict(data))

    @classmethod
    def from_environment(cls, base: Optional['ConverterSettings'] = None,
                         environ: Optional[Mapping[str, str]] = None) -> 'ConverterSettings':
        """Create settings from environment variables, on top of ``base``."""
        environ = os.environ if environ is None else environ
        overrides = {
            name: environ[variable]
            for name, variable in ENVIRONMENT_VARIABLES.items()
            if environ.get(variable)
        }
        return cls.from_dict(overrides, base)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'database_tag': self.database_tag,
            'replace_strategy': self.replace_strategy.value,
            'tables': list(self.tables),
            'id_column': self.id_column,
            'chunk_size': self.chunk_size,
            'encoding': self.encoding,
            'log_level': self.log_level,
            'connection_string': self.connection_string,
        }


class ConfigManager:
    """
    Centralized configuration manager serving as single source of truth.

    Loads the optional settings file once and applies environment overrides.
    """

    def __init__(self, settings_path: Optional[Union[str, Path]] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Args:
            settings_path: Optional JSON or YAML settings file
            environ: Environment mapping; os.environ when None
        """
        self.logger = logging.getLogger(__name__)
        self.settings_path = Path(settings_path) if settings_path else None

        file_settings = self.load_settings_file(self.settings_path) if self.settings_path else None
        self.settings = ConverterSettings.from_environment(file_settings, environ)

        self.logger.debug(f"ConfigManager initialized: {self.get_configuration_summary()}")

    @staticmethod
    def load_settings_file(path: Union[str, Path]) -> ConverterSettings:
        """
        Load settings from a JSON or YAML file.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        full_path = Path(path)
        if not full_path.exists():
            raise ConfigurationError(f"Settings file not found: {full_path}")

        try:
            with open(full_path, 'r', encoding='utf-8') as file:
                if full_path.suffix.lower() in ['.yaml', '.yml']:
                    data = yaml.safe_load(file)
                elif full_path.suffix.lower() == '.json':
                    data = json.load(file)
                else:
                    raise ConfigurationError(f"Unsupported file format: {full_path.suffix}")
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to parse settings file {full_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to read settings file {full_path}: {e}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {full_path} must contain a mapping")
        return ConverterSettings.from_dict(data)

    def get_settings(self) -> ConverterSettings:
        return self.settings

    def get_configuration_summary(self) -> Dict[str, Any]:
        """Settings as a dictionary with the connection string masked."""
        summary = self.settings.to_dict()
        if summary['connection_string']:
            summary['connection_string'] = '***'
        return summary


# Global configuration manager instance
_global_config_manager: Optional[ConfigManager] = None


def get_config_manager(settings_path: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        settings_path: Settings file to load. Only used on first call.

    Returns:
        Global ConfigManager instance
    """
    global _global_config_manager

    if _global_config_manager is None:
        _global_config_manager = ConfigManager(settings_path)

    return _global_config_manager


def reset_config_manager() -> None:
    """Reset the global configuration manager instance."""
    global _global_config_manager
    _global_config_manager = None
