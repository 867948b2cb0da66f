"""Shared fixtures for pg-catcheck tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from pg_catcheck.catalog import CheckSpec, ColumnSpec, Flavor, TableSpec
from pg_catcheck.config import Selection
from pg_catcheck.context import AuditContext
from pg_catcheck.models import AuditReport, Diagnostic, Severity
from pg_catcheck.registry import discover_validators
from pg_catcheck.resolver import resolve
from pg_catcheck.rowindex import RowSet
from pg_catcheck.scheduler import Scheduler


class FakeSource:
    """Serves catalog rows from dicts instead of a database.

    Tables not listed come back empty; tables in ``failing`` come back as a
    failed fetch.
    """

    def __init__(self, tables: dict[str, list[dict]] | None = None, failing: set[str] | None = None):
        self.tables = tables or {}
        self.failing = failing or set()
        self.fetched: list[str] = []
        self.queries: dict[str, str] = {}

    def fetch(self, table: str, query: str, column_names: list[str]) -> RowSet:
        self.fetched.append(table)
        self.queries[table] = query
        if table in self.failing:
            return RowSet(table=table, columns=list(column_names), error="permission denied")
        rows = [
            tuple(str(row.get(name, "")) for name in column_names)
            for row in self.tables.get(table, [])
        ]
        return RowSet(table=table, columns=list(column_names), rows=rows)


def key(name: str, **kwargs) -> ColumnSpec:
    return ColumnSpec(name, key=True, display=True, **kwargs)


def col(name: str, check: CheckSpec | None = None, **kwargs) -> ColumnSpec:
    return ColumnSpec(name, check=check, **kwargs)


def table(name: str, *columns: ColumnSpec) -> TableSpec:
    return TableSpec(name, tuple(columns))


def run_checks(
    specs: tuple[TableSpec, ...],
    data: dict[str, list[dict]] | None = None,
    selection: Selection | None = None,
    server_version: int = 170000,
    flavor: Flavor = Flavor.POSTGRESQL,
    database_oid: str | None = None,
    failing: set[str] | None = None,
    validators=None,
):
    """Resolve and run a whole audit over fake data.

    Returns (ctx, scheduler, source); events are in ``ctx.sink.diagnostics``.
    """
    ctx = AuditContext.from_definitions(
        server_version, flavor, specs=specs, database_oid=database_oid
    )
    validators = validators if validators is not None else discover_validators()
    resolve(ctx, selection or Selection(), validators)
    source = FakeSource(data, failing)
    scheduler = Scheduler(ctx, source, validators)
    scheduler.run()
    return ctx, scheduler, source


def skipped_checks(caplog, column: str) -> list[str]:
    """Log messages saying the checks of ``table.column`` were skipped."""
    prefix = f"skipping checks of {column}:"
    return [r.getMessage() for r in caplog.records if r.getMessage().startswith(prefix)]


def messages(ctx: AuditContext, severity: Severity | None = None) -> list[str]:
    return [
        d.message
        for d in ctx.sink.diagnostics
        if severity is None or d.severity == severity
    ]


def make_diagnostic(
    severity: Severity = Severity.INCONSISTENCY,
    message: str = "no matching entry in pg_namespace",
    table: str = "pg_class",
    column: str = "relnamespace",
    **kwargs,
) -> Diagnostic:
    """Factory for creating Diagnostic instances with sensible defaults."""
    kwargs.setdefault("row", 0)
    kwargs.setdefault("value", "99999")
    kwargs.setdefault("identity", [("oid", "16384"), ("relname", "widgets"), ("relkind", "r")])
    return Diagnostic(severity=severity, message=message, table=table, column=column, **kwargs)


@pytest.fixture
def empty_report() -> AuditReport:
    """AuditReport with no events."""
    return AuditReport(
        database="testdb",
        host="localhost",
        port=5432,
        timestamp=datetime(2026, 1, 27, 12, 0, 0, tzinfo=timezone.utc),
        server_version=170000,
        database_oid="16385",
    )


@pytest.fixture
def sample_report() -> AuditReport:
    """AuditReport with inconsistencies in two tables, a warning and an error."""
    report = AuditReport(
        database="testdb",
        host="localhost",
        port=5432,
        timestamp=datetime(2026, 1, 27, 12, 0, 0, tzinfo=timezone.utc),
        server_version=170000,
        database_oid="16385",
        tables_loaded=["pg_namespace", "pg_class", "pg_depend", "pg_proc"],
        tables_checked=["pg_class", "pg_depend"],
    )
    events = [
        make_diagnostic(),
        make_diagnostic(
            message="unexpected zero value",
            table="pg_depend",
            column="classid",
            row=3,
            value="0",
            identity=[("classid", "0"), ("objid", "0"), ("deptype", "n")],
        ),
        make_diagnostic(
            message="pg_class row duplicates existing key",
            column="",
            row=7,
            value="",
        ),
        Diagnostic(severity=Severity.WARNING, message="can't identify class IDs: no pg_class data"),
        Diagnostic(
            severity=Severity.ERROR,
            message="could not load table pg_proc: permission denied",
            table="pg_proc",
        ),
    ]
    for d in events:
        report.diagnostics.append(d)
        report.summary.count(d.severity)
    return report
