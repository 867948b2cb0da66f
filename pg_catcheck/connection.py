"""Database connection management and catalog fetching."""

from __future__ import annotations

import logging
import os

import psycopg2
import psycopg2.extensions

from pg_catcheck.catalog import Flavor
from pg_catcheck.rowindex import RowSet

logger = logging.getLogger(__name__)


def connect(
    host: str | None = None,
    port: int | None = None,
    dbname: str | None = None,
    user: str | None = None,
    password: str | None = None,
    dsn: str | None = None,
) -> psycopg2.extensions.connection:
    """Create a database connection from explicit args or a DSN string.

    Falls back to standard PG* environment variables.  The session is
    read-only; nothing this tool does should ever write.
    """
    if dsn:
        conn = psycopg2.connect(dsn, application_name="pg_catcheck")
    else:
        params = {"application_name": "pg_catcheck"}
        if host:
            params["host"] = host
        if port:
            params["port"] = port
        if dbname:
            params["dbname"] = dbname
        if user:
            params["user"] = user
        if password:
            params["password"] = password
        elif os.environ.get("PGPASSWORD"):
            params["password"] = os.environ["PGPASSWORD"]
        conn = psycopg2.connect(**params)

    conn.set_session(readonly=True, autocommit=True)
    return conn


def get_server_version(conn) -> int:
    """Return the server version in server_version_num form, e.g. 90603."""
    return conn.server_version


def detect_flavor(conn) -> Flavor:
    """Tell PostgreSQL from EnterpriseDB by looking at version()."""
    with conn.cursor() as cur:
        cur.execute("SELECT strpos(version(), 'EnterpriseDB')")
        position = cur.fetchone()[0]
    return Flavor.ENTERPRISEDB if position else Flavor.POSTGRESQL


def get_database_oid(conn) -> str:
    """OID of the database being checked, as text.

    Raises psycopg2.Error if the query fails and ValueError if it does not
    return exactly one row.
    """
    with conn.cursor() as cur:
        cur.execute("SELECT oid FROM pg_database WHERE datname = current_database()")
        rows = cur.fetchall()

    if len(rows) != 1:
        raise ValueError(f"query for database OID returned {len(rows)} values")

    oid = str(rows[0][0])
    logger.debug("database OID is %s", oid)
    return oid


class CatalogSource:
    """Runs one catalog query per table and returns the rows as text."""

    def __init__(self, conn):
        self.conn = conn

    def fetch(self, table: str, query: str, column_names: list[str]) -> RowSet:
        logger.debug("executing query: %s", query)
        try:
            with self.conn.cursor() as cur:
                cur.execute(query)
                rows = cur.fetchall()
        except psycopg2.Error as exc:
            return RowSet(table=table, columns=list(column_names), error=str(exc).strip())

        # NULL becomes the empty string, as libpq renders it in text mode.
        return RowSet(
            table=table,
            columns=list(column_names),
            rows=[tuple("" if v is None else v for v in row) for row in rows],
        )
