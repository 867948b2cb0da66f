"""Audit orchestrator: resolves what to check, then drives the scheduler."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import psycopg2

from pg_catcheck.config import MINIMUM_SUPPORTED_VERSION, Config, ConfigError
from pg_catcheck.connection import (
    CatalogSource,
    detect_flavor,
    get_database_oid,
    get_server_version,
)
from pg_catcheck.context import AuditContext
from pg_catcheck.models import AuditReport, CollectingSink, DiagnosticSink
from pg_catcheck.registry import discover_validators
from pg_catcheck.resolver import resolve
from pg_catcheck.scheduler import Scheduler

logger = logging.getLogger(__name__)


def run_audit(
    conn: Any,
    host: str,
    port: int,
    dbname: str,
    config: Config | None = None,
    sink: DiagnosticSink | None = None,
    source: Any = None,
) -> AuditReport:
    """Check the catalogs of the connected database.

    Args:
        conn: psycopg2 connection.
        host: Display hostname for the report.
        port: Display port for the report.
        dbname: Database name for the report.
        config: Table/column selection and version/flavor overrides.
        sink: Optional sink that sees every event as it happens.
        source: Object with a ``fetch(table, query, column_names)`` method;
            defaults to a CatalogSource on ``conn``.

    Returns:
        AuditReport with every event and the summary counts.

    Raises:
        ConfigError: if the selection cannot be honored, or the server
            flavor cannot be detected.  Nothing has been fetched yet.
    """
    config = config or Config()
    collector = CollectingSink(downstream=sink)
    report = AuditReport(
        database=dbname,
        host=host,
        port=port,
        timestamp=datetime.now(timezone.utc),
    )

    if config.target_version is None:
        server_version = get_server_version(conn)
        logger.info("detected server version %d", server_version)
    else:
        server_version = config.target_version
        logger.info("assuming server version %d", server_version)

    if config.flavor is None:
        try:
            flavor = detect_flavor(conn)
        except psycopg2.Error as exc:
            raise ConfigError(
                f"could not detect the server type ({str(exc).strip()}); "
                "use --enterprisedb or --postgresql"
            ) from exc
        logger.info("detected %s server", flavor.value)
    else:
        flavor = config.flavor
        logger.info("assuming %s server", flavor.value)

    ctx = AuditContext.from_definitions(
        server_version,
        flavor,
        sink=collector,
        summary=report.summary,
    )

    if server_version < MINIMUM_SUPPORTED_VERSION:
        ctx.warning(
            f"server version ({server_version}) is older than the minimum version "
            f"supported by this tool ({MINIMUM_SUPPORTED_VERSION})"
        )

    validators = discover_validators()
    resolve(ctx, config.selection, validators)

    try:
        ctx.database_oid = get_database_oid(conn)
    except (psycopg2.Error, ValueError) as exc:
        ctx.error(f"could not determine database OID: {str(exc).strip()}")

    scheduler = Scheduler(ctx, source or CatalogSource(conn), validators)
    scheduler.run()

    report.server_version = server_version
    report.flavor = flavor.value
    report.database_oid = ctx.database_oid
    report.tables_loaded = scheduler.tables_loaded
    report.tables_checked = scheduler.tables_checked
    report.diagnostics = collector.diagnostics
    return report
