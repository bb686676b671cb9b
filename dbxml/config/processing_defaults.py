"""
Centralized configuration defaults for conversion operations.

These values are used whenever neither the environment, a settings file nor a
CLI argument provides one.
"""

import logging


class ConverterDefaults:
    """
    Centralized operational configuration for export and import.

    All values are defaults that can be overridden via CLI arguments:
    - dbxml import --sqlite app.db --input dump.xml --strategy replace_all
    - dbxml export --sqlite app.db --log-level DEBUG
    """

    # Document format
    DATABASE_TAG = "database"  # Root element of exported documents
    ENCODING = "utf-8"

    # Import behavior
    REPLACE_STRATEGY = "replace_existing"
    ID_COLUMN = "_id"  # Column matched when replacing a conflicting row
    CHUNK_SIZE = 64 * 1024  # Bytes fed to the XML parser per read

    # Database connection (ODBC)
    CONNECTION_TIMEOUT = 30  # Connection timeout in seconds

    # Logging
    LOG_LEVEL = "WARNING"  # Default logging level (CRITICAL, ERROR, WARNING, INFO, DEBUG)

    @classmethod
    def to_dict(cls) -> dict:
        """
        Export all defaults as a dictionary.

        Returns:
            Dictionary of all ConverterDefaults class attributes.
        """
        return {
            key: getattr(cls, key)
            for key in dir(cls)
            if not key.startswith('_') and key.isupper()
        }

    @classmethod
    def log_summary(cls, logger: logging.Logger, level: int = logging.DEBUG) -> None:
        """Log every default, one per line, at ``level``."""
        lines = "\n".join(f"  {key}: {value}" for key, value in sorted(cls.to_dict().items()))
        logger.log(level, f"Converter defaults:\n{lines}")
