"""CLI entry point for pg-catcheck."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from pg_catcheck import __version__
from pg_catcheck.catalog import Flavor

# Exit status for usage, configuration and connection problems.
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pg-catcheck",
        description="Check the PostgreSQL system catalogs for referential inconsistencies.",
    )
    parser.add_argument("--version", action="version", version=f"pg-catcheck {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands (default: check)")

    # -- check --
    check_parser = subparsers.add_parser("check", help="Check the catalogs of a database")
    _add_connection_args(check_parser)
    _add_selection_args(check_parser)
    _add_server_args(check_parser)
    _add_output_args(check_parser)
    check_parser.add_argument(
        "--config", help="Path to pg-catcheck.yaml (default: ./pg-catcheck.yaml or ~/pg-catcheck.yaml)"
    )
    check_parser.add_argument(
        "--quiet", "-q", action="store_true", help="Do not display progress messages"
    )
    check_parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Print progress of the checks; repeat for debugging output",
    )

    # -- list-tables --
    list_parser = subparsers.add_parser("list-tables", help="List the catalog tables and their checks")
    _add_server_args(list_parser)

    return parser


def _add_connection_args(parser: argparse.ArgumentParser):
    grp = parser.add_argument_group("connection")
    grp.add_argument("--dsn", help="PostgreSQL connection URI (postgres://...)")
    grp.add_argument("--host", "-H", default=None, help="Database host")
    grp.add_argument("--port", "-p", type=int, default=None, help="Database port (default: 5432)")
    grp.add_argument("--dbname", "-d", default=None, help="Database name")
    grp.add_argument("--user", "-U", default=None, help="Database user")
    grp.add_argument("--password", "-W", default=None, help="Database password")


def _add_selection_args(parser: argparse.ArgumentParser):
    grp = parser.add_argument_group("selection")
    grp.add_argument(
        "--table", "-t", action="append", default=[], help="Check only the named table (repeatable)"
    )
    grp.add_argument(
        "--exclude-table", "-T", action="append", default=[], help="Do NOT check the named table"
    )
    grp.add_argument(
        "--column",
        "-c",
        action="append",
        default=[],
        help="Check only the named column, as NAME or TABLE.NAME (repeatable)",
    )
    grp.add_argument(
        "--exclude-column", "-C", action="append", default=[], help="Do NOT check the named column"
    )


def _add_server_args(parser: argparse.ArgumentParser):
    grp = parser.add_argument_group("server")
    grp.add_argument(
        "--target-version",
        default=None,
        help="Assume this server version (MAJOR.MINOR or server_version_num)",
    )
    flavor = grp.add_mutually_exclusive_group()
    flavor.add_argument(
        "--enterprisedb",
        dest="flavor",
        action="store_const",
        const=Flavor.ENTERPRISEDB,
        help="Assume an EnterpriseDB server",
    )
    flavor.add_argument(
        "--postgresql",
        dest="flavor",
        action="store_const",
        const=Flavor.POSTGRESQL,
        help="Assume a PostgreSQL server",
    )


def _add_output_args(parser: argparse.ArgumentParser):
    grp = parser.add_argument_group("output")
    grp.add_argument(
        "--format",
        "-f",
        choices=["text", "json"],
        default="text",
        help="Report format (default: text)",
    )
    grp.add_argument("--output", "-o", help="Write the report to this file instead of stdout")


def main(argv: list[str] | None = None):
    parser = build_parser()

    # Default to "check" when no subcommand is given
    raw_args = argv if argv is not None else sys.argv[1:]
    known_commands = {"check", "list-tables"}
    if not raw_args or (
        raw_args[0] not in known_commands and raw_args[0] not in ("--version", "--help", "-h")
    ):
        raw_args = ["check"] + list(raw_args)

    args = parser.parse_args(raw_args)

    if args.command == "list-tables":
        _cmd_list_tables(args)
    else:
        _cmd_check(args)


def _fatal(message: str):
    print(f"fatal: {message}", file=sys.stderr)
    sys.exit(EXIT_FATAL)


def _configure_logging(verbose: int):
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def _cmd_check(args):
    import psycopg2
    import yaml

    from pg_catcheck.auditor import run_audit
    from pg_catcheck.config import ConfigError, load_config, merge_cli_with_config
    from pg_catcheck.connection import connect
    from pg_catcheck.reporters.text_reporter import TextSink, format_completion

    _configure_logging(args.verbose)

    try:
        config = merge_cli_with_config(
            load_config(args.config),
            cli_tables=args.table,
            cli_exclude_tables=args.exclude_table,
            cli_columns=args.column,
            cli_exclude_columns=args.exclude_column,
            cli_target_version=args.target_version,
            cli_flavor=args.flavor,
        )
    except (ConfigError, FileNotFoundError, yaml.YAMLError) as e:
        _fatal(str(e))

    try:
        conn = connect(
            host=args.host,
            port=args.port,
            dbname=args.dbname,
            user=args.user,
            password=args.password,
            dsn=args.dsn,
        )
    except psycopg2.OperationalError as e:
        error_msg = str(e).strip()
        print("fatal: could not connect to server.", file=sys.stderr)
        print(f"       {error_msg}", file=sys.stderr)
        if "no password supplied" in error_msg:
            print("\nHint: Use --password to provide a password, or set PGPASSWORD environment variable.", file=sys.stderr)
        elif "does not exist" in error_msg:
            print("\nHint: Check that the database name is correct.", file=sys.stderr)
        elif "Connection refused" in error_msg or "could not connect" in error_msg.lower():
            print(f"\nHint: Check that PostgreSQL is running on {args.host or 'localhost'}:{args.port or 5432}.", file=sys.stderr)
        sys.exit(EXIT_FATAL)

    # Text goes straight to the terminal as it is found, unless it is
    # headed for a file.
    streaming = args.format == "text" and not args.output
    try:
        report = run_audit(
            conn,
            host=args.host or conn.info.host or "localhost",
            port=args.port or conn.info.port,
            dbname=args.dbname or conn.info.dbname,
            config=config,
            sink=TextSink() if streaming else None,
        )
    except ConfigError as e:
        _fatal(str(e))
    finally:
        conn.close()

    if not streaming:
        _write_output(_render_report(report, args.format), args)

    if not args.quiet:
        stream = sys.stdout if streaming else sys.stderr
        print(format_completion(report), file=stream)

    sys.exit(report.exit_status)


def _cmd_list_tables(args):
    from pg_catcheck.config import ConfigError, parse_target_version
    from pg_catcheck.definitions import CATALOG_TABLES
    from pg_catcheck.registry import discover_validators
    from pg_catcheck.resolver import column_is_available

    version = None
    if args.target_version is not None:
        try:
            version = parse_target_version(args.target_version)
        except ConfigError as e:
            _fatal(str(e))
    flavor = args.flavor or Flavor.POSTGRESQL

    for spec in CATALOG_TABLES:
        columns = [
            c for c in spec.columns
            if version is None or column_is_available(c, version, flavor)
        ]
        if not columns:
            continue
        print(f"\n[{spec.name}]")
        for col in columns:
            if col.check is None:
                kind = "key" if col.key else ""
            elif col.check.references:
                kind = f"{col.check.kind} -> {col.check.references}"
            else:
                kind = col.check.kind
            print(f"  {col.name:24s} {kind}")

    print("\n[checks]")
    for kind, validator in discover_validators().items():
        print(f"  {kind:24s} {validator.description}")


def _write_output(output: str, args):
    """Write report to the --output file, or stdout."""
    if not args.output:
        sys.stdout.write(output)
        return

    parent = os.path.dirname(args.output)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(args.output, "w") as f:
        f.write(output)
    print(f"Report written to {args.output}", file=sys.stderr)


def _render_report(report, fmt: str) -> str:
    if fmt == "json":
        from pg_catcheck.reporters.json_reporter import render
    elif fmt == "text":
        from pg_catcheck.reporters.text_reporter import render
    else:
        raise ValueError(f"Unknown format: {fmt}")
    return render(report)
