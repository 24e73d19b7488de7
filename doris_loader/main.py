#!/usr/bin/env python3
"""Command line entrypoint for stream loading files into Doris."""

import argparse
import json
import logging
import sys
from os import environ
from pathlib import Path
from typing import Any, TypeVar, cast

import requests
import yaml
from pydantic import ValidationError

from doris_loader import options as opts
from doris_loader.enums import LOAD_FORMATS, PROTOCOLS
from doris_loader.errors import ConfigurationError, StreamLoaderError
from doris_loader.settings import LoadSettings
from doris_loader.stream_loader import StreamLoader


class Args(argparse.Namespace):
    files: list[Path]
    config: Path | None
    fe_nodes: list[str] | None
    be_nodes: list[str] | None
    database: str | None
    table: str | None
    protocol: str | None
    username: str | None
    password: str | None
    load_format: str | None
    columns: list[str] | None
    column_separator: str | None
    label: str | None
    max_filter_ratio: float | None
    header: list[str] | None
    max_attempts: int | None
    retry_delay: float | None
    timeout: float | None
    log_level: str
    rich_logs: bool
    print_config_and_exit: bool


logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> Args:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Stream load files into a Doris table",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Files to load, each one in its own stream load",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML configuration file",
    )

    # Configuration overrides (optional when using config file)
    parser.add_argument(
        "--fe-nodes",
        nargs="+",
        help="Frontend endpoints (host:port) tried in round-robin order",
    )

    parser.add_argument(
        "--be-nodes",
        nargs="+",
        help="Backend endpoints (host:port) redirects are resolved to",
    )

    parser.add_argument("--database", help="Target database name")

    parser.add_argument("--table", help="Target table name")

    parser.add_argument("--protocol", choices=PROTOCOLS, help="Transport scheme")

    parser.add_argument("--username", help="Username for Basic-Auth")

    parser.add_argument(
        "--password",
        help="Password for Basic-Auth. Also accepted in the DORIS_PASSWORD envvar.",
    )

    parser.add_argument(
        "--load-format",
        choices=LOAD_FORMATS,
        help="Data format of the loaded files",
    )

    parser.add_argument(
        "--columns",
        nargs="+",
        help="Column names of the loaded data (space-separated)",
    )

    parser.add_argument("--column-separator", help="Column separator of CSV data")

    parser.add_argument(
        "--label",
        help="Load label used to reject duplicate loads. Suffixed with the file index when loading several files.",
    )

    parser.add_argument(
        "--max-filter-ratio",
        type=float,
        help="Fraction of rows that may be filtered out before the load fails",
    )

    parser.add_argument(
        "--header",
        action="append",
        metavar="KEY=VALUE",
        help="Extra stream load header, may be repeated",
    )

    parser.add_argument(
        "--max-attempts",
        type=int,
        help="Attempts per file before giving up on transport errors",
    )

    parser.add_argument(
        "--retry-delay",
        type=float,
        help="Delay between attempts in seconds",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Timeout of a single HTTP exchange in seconds",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set the logging level",
    )

    parser.add_argument(
        "--rich-logs",
        action="store_true",
        help="Enable rich colored logging output",
    )

    parser.add_argument(
        "--print-config-and-exit",
        action="store_true",
        help="Print the resolved configuration as JSON and exit without loading",
    )

    return cast(Args, parser.parse_args(argv))


def configure_logging(log_level: str, use_rich: bool = False) -> None:
    """Configure logging with optional rich formatting.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_rich: Whether to use rich colored logging
    """
    if use_rich:
        try:
            from rich.logging import RichHandler
            from rich.console import Console

            # log to stderr, stdout carries the results
            console = Console(stderr=True)

            logging.basicConfig(
                level=getattr(logging, log_level),
                format="%(message)s",
                datefmt="[%X]",
                handlers=[
                    RichHandler(
                        console=console,
                        show_path=True,
                        show_time=True,
                        show_level=True,
                        markup=True,
                        rich_tracebacks=True,
                    )
                ],
            )
        except ImportError:
            # Fall back to standard logging if rich is not available
            logging.basicConfig(
                level=getattr(logging, log_level),
                format="%(asctime)s [%(name)s:%(filename)s:%(lineno)d] %(levelname)s: %(message)s",
            )
    else:
        logging.basicConfig(
            level=getattr(logging, log_level),
            format="%(asctime)s [%(name)s:%(filename)s:%(lineno)d] %(levelname)s: %(message)s",
        )

    # silence urllib3 connection debug logs
    logging.getLogger("urllib3").setLevel(logging.WARNING)


T = TypeVar("T")


def first_not_none(*values: T | None) -> T | None:
    for v in values:
        if v is not None:
            return v
    return None


def parse_headers(pairs: list[str] | None) -> dict[str, str]:
    """Parse KEY=VALUE pairs from the command line into a header mapping."""
    headers = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid header '{pair}', expected KEY=VALUE")
        headers[key.strip()] = value.strip()
    return headers


def collect_options(
    args: Args, config_dict: dict[str, Any]
) -> list[opts.StreamLoaderOption]:
    """Resolve CLI flags over config file values into builder options.

    The label is left out, it is applied per file.
    """
    options = []

    def add(option_factory, *values):
        value = first_not_none(*values)
        if value is not None:
            options.append(option_factory(value))

    add(opts.with_be_nodes, args.be_nodes, config_dict.get("be_nodes"))
    add(opts.with_protocol, args.protocol, config_dict.get("protocol"))
    add(opts.with_username, args.username, config_dict.get("username"))
    add(
        opts.with_password,
        args.password,
        environ.get("DORIS_PASSWORD"),
        config_dict.get("password"),
    )
    add(opts.with_load_format, args.load_format, config_dict.get("load_format"))
    add(opts.with_columns, args.columns, config_dict.get("columns"))
    add(
        opts.with_column_separator,
        args.column_separator,
        config_dict.get("column_separator"),
    )
    add(
        opts.with_max_filter_ratio,
        args.max_filter_ratio,
        config_dict.get("max_filter_ratio"),
    )
    add(opts.with_max_attempts, args.max_attempts, config_dict.get("max_attempts"))
    add(opts.with_retry_delay, args.retry_delay, config_dict.get("retry_delay"))
    add(opts.with_timeout, args.timeout, config_dict.get("timeout"))

    # headers from the command line are merged over the config file ones
    if config_dict.get("headers"):
        options.append(opts.with_headers(config_dict["headers"]))
    if args.header:
        options.append(opts.with_headers(parse_headers(args.header)))

    return options


def file_label(label: str | None, index: int, file_count: int) -> str | None:
    """Derive a unique label per file when several files are loaded."""
    if label is None or file_count == 1:
        return label
    return f"{label}_{index}"


def dump_settings(settings: LoadSettings) -> str:
    """Render settings as JSON with the password masked."""
    settings_dict = settings.model_dump(mode="json")
    if settings_dict.get("password"):
        settings_dict["password"] = "********"
    return json.dumps(settings_dict, indent=2, sort_keys=True)


def main(argv: list[str] | None = None) -> int:
    """Main function."""
    args = parse_args(argv)

    configure_logging(args.log_level, args.rich_logs)

    try:
        config_dict = {}
        if args.config:
            logger.info("Loading configuration from %s", args.config)
            with open(args.config, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}

        fe_nodes = first_not_none(args.fe_nodes, config_dict.get("fe_nodes"))
        database = first_not_none(args.database, config_dict.get("database"))
        table = first_not_none(args.table, config_dict.get("table"))
        label = first_not_none(args.label, config_dict.get("label"))
        options = collect_options(args, config_dict)

        def settings_for(index: int, file_count: int) -> LoadSettings:
            file_options = list(options)
            derived_label = file_label(label, index, file_count)
            if derived_label is not None:
                file_options.append(opts.with_label(derived_label))
            return opts.build_settings(fe_nodes, database, table, *file_options)

        # If print-config-and-exit flag is set, output config and exit
        if args.print_config_and_exit:
            logger.info("Printing resolved configuration")
            print(dump_settings(settings_for(0, 1)))
            return 0

        if not args.files:
            logger.error("No files to load")
            return 1

        all_succeeded = True
        for index, path in enumerate(args.files):
            logger.info("Loading file %d/%d: %s", index + 1, len(args.files), path)
            loader = StreamLoader(settings_for(index, len(args.files)))
            result = loader.load_file(path)
            print(result.model_dump_json(by_alias=True, indent=2))

            if not result.is_success:
                logger.error(
                    "Loading %s failed with status '%s': %s",
                    path,
                    result.status,
                    result.describe_failure(),
                )
                all_succeeded = False

        return 0 if all_succeeded else 1

    except ConfigurationError as e:
        logger.error("Invalid config: %s", e)
        return 1
    except ValidationError as e:
        logger.error(
            "Invalid config\n"
            + "\n".join(
                [
                    f"{'.'.join([str(loc) for loc in err['loc']])}: {err['msg']} (got {err['input']})"
                    for err in e.errors()
                ]
            )
        )
        return 1
    except (StreamLoaderError, requests.RequestException, OSError) as e:
        logger.error("Stream load failed: %s", e)
        return 1
    except ValueError as e:
        logger.error("Invalid arguments: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Loader stopped by user")
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
