"""
Command-line interface for the database/XML conversion system.

Examples:
    dbxml export --sqlite app.db --output dump.xml
    dbxml import --sqlite app.db --input dump.xml --strategy replace_all
    dbxml export --connection-string "DRIVER={...};SERVER=...;DATABASE=..." --table notes
"""

import sys
import argparse
import logging

from contextlib import contextmanager
from typing import Optional

from .config.config_manager import ConverterSettings, get_config_manager
from .config.processing_defaults import ConverterDefaults
from .converter import DatabaseXmlConverter
from .database.sqlite_database import SQLiteDatabase
from .exceptions import DbXmlError
from .models import ReplaceStrategy


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dbxml", description="Export a database to XML or import it back")
    parser.add_argument("--config", help="JSON or YAML settings file")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help=f"Logging level (default: {ConverterDefaults.LOG_LEVEL})")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(sub):
        source = sub.add_mutually_exclusive_group()
        source.add_argument("--sqlite", help="Path of the SQLite database file")
        source.add_argument("--connection-string", help="ODBC connection string")
        sub.add_argument("--table", action="append", dest="tables", default=None,
                         help="Table to include (repeatable; default: all user tables)")
        sub.add_argument("--database-tag", help="Root element name")

    export_parser = subparsers.add_parser("export", help="Write database tables as XML")
    add_common(export_parser)
    export_parser.add_argument("--output", "-o", default="-", help="Output file (default: stdout)")
    export_parser.add_argument("--pretty", action="store_true", help="One element per line")

    import_parser = subparsers.add_parser("import", help="Load an XML document into the database")
    add_common(import_parser)
    import_parser.add_argument("--input", "-i", required=True, help="Input file ('-' for stdin)")
    import_parser.add_argument("--strategy", choices=[s.value for s in ReplaceStrategy],
                               help=f"Conflict handling (default: {ConverterDefaults.REPLACE_STRATEGY})")
    return parser


def setup_logging(log_level: str) -> None:
    # Set up logging without reconfiguring root if already configured
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))
    logging.getLogger('lxml').setLevel(logging.WARNING)


def resolve_settings(args: argparse.Namespace) -> ConverterSettings:
    """Apply CLI arguments on top of defaults, settings file and environment."""
    settings = get_config_manager(args.config).get_settings()
    overrides = {}
    if args.log_level:
        overrides['log_level'] = args.log_level
    if args.tables:
        overrides['tables'] = args.tables
    if args.database_tag:
        overrides['database_tag'] = args.database_tag
    if args.connection_string:
        overrides['connection_string'] = args.connection_string
    if getattr(args, 'strategy', None):
        overrides['replace_strategy'] = args.strategy
    return ConverterSettings.from_dict(overrides, settings)


@contextmanager
def open_database(args: argparse.Namespace, settings: ConverterSettings):
    if args.sqlite:
        db = SQLiteDatabase(args.sqlite)
    elif settings.connection_string:
        from .database.odbc_database import OdbcDatabase
        db = OdbcDatabase(settings.connection_string, timeout=ConverterDefaults.CONNECTION_TIMEOUT)
    else:
        raise DbXmlError("No database given: use --sqlite or --connection-string")
    with db:
        yield db


def main(args: Optional[list] = None) -> int:
    """
    Main entry point for the CLI application.

    Args:
        args: Optional command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for a conversion error, 2 for usage errors)
    """
    if args is None:
        args = sys.argv[1:]

    try:
        parsed = build_parser().parse_args(args)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 2

    logger = logging.getLogger(__name__)
    try:
        settings = resolve_settings(parsed)
        setup_logging(settings.log_level)
        ConverterDefaults.log_summary(logger)

        with open_database(parsed, settings) as db:
            converter = DatabaseXmlConverter.from_settings(db, settings)
            if parsed.command == "export":
                output = sys.stdout.buffer if parsed.output == "-" else parsed.output
                result = converter.export_to(output, pretty_print=parsed.pretty)
                logger.info(f"Exported {result.rows_exported} rows from {result.tables_exported} tables")
            else:
                source = sys.stdin.buffer if parsed.input == "-" else parsed.input
                result = converter.import_from(source)
                logger.info(f"Import summary: {result.summary()}")
        return 0

    except (DbXmlError, OSError) as e:
        logger.error(f"{parsed.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
