from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

from prometheus_client import start_http_server
from rich.console import Console
from rich.logging import RichHandler

from .config import (
    DEFAULT_HOST,
    DEFAULT_POLLING_INTERVAL_MS,
    DEFAULT_PORT,
    DEFAULT_SCHEMA,
    DEFAULT_USER,
    ConnectionConfig,
    WatchConfig,
    resolve_password,
)
from .db import ConnectionKeeper, PostgresSource, connect
from .display import Display
from .errors import ConfigError, DatabaseRequiredError, TableTraceError
from .interactive import InputReader, select_tables_interactively
from .state import SessionState
from .watcher import Watcher

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "TABLETRACE_LOG_LEVEL"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabletrace",
        description="Real-time PostgreSQL change monitoring",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    watch = subparsers.add_parser("watch", help="Watch PostgreSQL tables for changes in real-time")
    watch.add_argument(
        "--preset",
        help="Preset connection: 'supabase' (local Docker), 'postgres' (local default)",
    )
    watch.add_argument("-H", "--host", default=DEFAULT_HOST, help="Database host")
    watch.add_argument("-P", "--port", type=int, default=DEFAULT_PORT, help="Database port")
    watch.add_argument("-d", "--database", help="Database name")
    watch.add_argument("-u", "--user", default=DEFAULT_USER, help="Database user")
    watch.add_argument(
        "-W",
        "--password",
        help="Database password (or use PGPASSWORD environment variable)",
    )
    watch.add_argument(
        "-s",
        "--schema",
        default=DEFAULT_SCHEMA,
        help="Schema to filter tables (use 'all' for all schemas)",
    )
    watch.add_argument(
        "-i",
        "--interval",
        type=int,
        default=DEFAULT_POLLING_INTERVAL_MS,
        help="Polling interval in milliseconds",
    )
    watch.add_argument(
        "--interactive",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Keyboard commands for history and details",
    )
    watch.add_argument(
        "--log-level",
        default=os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or WARNING)",
    )
    watch.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port",
    )
    return parser


def build_config(args: argparse.Namespace) -> WatchConfig:
    """
    Raises:
        ConfigError: On missing or invalid connection settings
    """
    if args.preset:
        connection = ConnectionConfig.from_preset(args.preset)
    else:
        if not args.database:
            raise DatabaseRequiredError()
        connection = ConnectionConfig(
            host=args.host,
            port=args.port,
            database=args.database,
            user=args.user,
            password=resolve_password(args.password),
        )

    return WatchConfig(
        connection=connection,
        schema=args.schema,
        interval_ms=args.interval,
        interactive=args.interactive,
        metrics_port=args.metrics_port,
    )


def configure_logging(level: str) -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ConfigError(f"Unknown log level: {level}")
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def run_watch(config: WatchConfig, display: Optional[Display] = None) -> int:
    """
    Connect, pick tables and run the watch loop. Returns the exit status.
    """
    display = display or Display()
    display.banner()
    display.connecting()

    try:
        engine = connect(config.connection.url())
    except TableTraceError as exc:
        display.connection_error(exc)
        return 1

    state = SessionState()
    keeper = ConnectionKeeper(engine, state, config.keepalive_interval_s).start()
    display.connected()

    if config.metrics_port:
        start_http_server(config.metrics_port)
        logger.info("Serving metrics on port %d", config.metrics_port)

    source = PostgresSource(engine, max_rows=config.max_rows_per_table)
    reader: Optional[InputReader] = None
    try:
        all_tables = source.list_tables(config.schema)
        if not all_tables:
            display.warning("No tables found in database.")
            return 0

        if config.interactive:
            tables = select_tables_interactively(all_tables, display)
            if not tables:
                display.warning("No tables selected. Exiting.")
                return 0
        else:
            tables = all_tables

        display.watching_tables(tables, "👁 Watching")
        if config.interactive:
            display.interactive_hint()
            reader = InputReader()

        watcher = Watcher(source, display, config, all_tables, state=state, reader=reader)
        watcher.start(tables)
        if reader is not None:
            reader.start()
        watcher.run()
    except TableTraceError as exc:
        display.connection_error(exc)
        return 1
    except KeyboardInterrupt:
        display.goodbye()
        return 0
    finally:
        if reader is not None:
            reader.stop()
        keeper.stop()
        engine.dispose()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(args.log_level)
        config = build_config(args)
    except ConfigError as exc:
        Display().error(str(exc))
        return 1

    return run_watch(config)
