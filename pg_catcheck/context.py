"""Run-scoped state shared by the resolver, the scheduler and the validators."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pg_catcheck.catalog import (
    Flavor,
    ResolvedColumn,
    ResolvedTable,
    TableSpec,
)
from pg_catcheck.config import ConfigError
from pg_catcheck.definitions import CATALOG_TABLES
from pg_catcheck.models import AuditSummary, CollectingSink, Diagnostic, DiagnosticSink, Severity

logger = logging.getLogger(__name__)

# OID of the pg_catalog namespace; fixed since the earliest supported release.
PG_CATALOG_NAMESPACE_OID = "11"


@dataclass
class ClassIdMap:
    """Maps the text OID of each known system catalog to its table."""

    tables: dict[str, ResolvedTable] = field(default_factory=dict)
    pg_class_oid: str = ""

    def lookup(self, oid: str) -> ResolvedTable | None:
        return self.tables.get(oid)


class AuditContext:
    """Everything one audit run knows about the target database.

    Holds the arena of resolved tables (dependency edges refer to tables by
    their position in it), the server version and flavor being checked, and
    the event sink and summary counters that diagnostics go to.
    """

    def __init__(
        self,
        tables: list[ResolvedTable],
        server_version: int,
        flavor: Flavor = Flavor.POSTGRESQL,
        database_oid: str | None = None,
        sink: DiagnosticSink | None = None,
        summary: AuditSummary | None = None,
    ):
        self.tables = tables
        self.server_version = server_version
        self.flavor = flavor
        self.database_oid = database_oid
        self.sink = sink if sink is not None else CollectingSink()
        self.summary = summary if summary is not None else AuditSummary()
        self._by_name = {t.name: t for t in tables}
        self._class_ids: ClassIdMap | None = None
        self._class_ids_attempted = False

    @classmethod
    def from_definitions(
        cls,
        server_version: int,
        flavor: Flavor = Flavor.POSTGRESQL,
        specs: tuple[TableSpec, ...] = CATALOG_TABLES,
        **kwargs,
    ) -> AuditContext:
        tables = [ResolvedTable.from_spec(spec, i) for i, spec in enumerate(specs)]
        return cls(tables, server_version, flavor, **kwargs)

    @property
    def is_edb(self) -> bool:
        return self.flavor == Flavor.ENTERPRISEDB

    # -- Lookup --------------------------------------------------------------

    def find_table(self, name: str) -> ResolvedTable:
        try:
            return self._by_name[name]
        except KeyError:
            raise ConfigError(f"no metadata found for table {name}") from None

    def find_column(self, table: ResolvedTable, name: str) -> ResolvedColumn:
        col = table.column(name)
        if col is None:
            raise ConfigError(f"no metadata found for column {table.name}.{name}")
        return col

    def table_at(self, position: int) -> ResolvedTable:
        return self.tables[position]

    # -- Dependency declaration ----------------------------------------------

    def add_dependency(self, dependent: ResolvedTable, required: ResolvedTable) -> None:
        """Record that ``required`` must be loaded before ``dependent`` is checked."""
        if not dependent.available or not required.available:
            return
        # Tables are always loaded before being checked.
        if dependent is required:
            return
        if required.position in dependent.needs:
            return
        logger.debug("table %s depends on table %s", dependent.name, required.name)
        dependent.needs.append(required.position)
        required.needed_by.append(dependent.position)

    def require_column(self, table: ResolvedTable, name: str) -> ResolvedColumn:
        """Make sure a column will be fetched, if this server has it."""
        col = self.find_column(table, name)
        if col.available:
            col.needed = True
        return col

    # -- Events --------------------------------------------------------------

    def record(self, diagnostic: Diagnostic) -> None:
        self.summary.count(diagnostic.severity)
        self.sink.record(diagnostic)

    def report(
        self,
        table: ResolvedTable,
        column: ResolvedColumn | None,
        rownum: int,
        message: str,
    ) -> None:
        """Report an inconsistency found in one row of a table."""
        self.record(
            Diagnostic(
                severity=Severity.INCONSISTENCY,
                message=message,
                table=table.name,
                column=column.name if column is not None else "",
                row=rownum,
                value=table.value(rownum, column) if column is not None else "",
                identity=table.identity(rownum),
            )
        )

    def warning(self, message: str) -> None:
        self.record(Diagnostic(severity=Severity.WARNING, message=message))

    def error(self, message: str, table: str = "") -> None:
        self.record(Diagnostic(severity=Severity.ERROR, message=message, table=table))

    # -- Class ID mapping ----------------------------------------------------

    def class_ids(self) -> ClassIdMap | None:
        """The class ID map, built from pg_class on first use.

        Returns None if it could not be built; the failure is reported once
        and not retried.
        """
        if not self._class_ids_attempted:
            self._class_ids_attempted = True
            self._class_ids = self._build_class_ids()
        return self._class_ids

    def _build_class_ids(self) -> ClassIdMap | None:
        pg_class = self.find_table("pg_class")
        data = pg_class.data
        if data is None or data.failed or len(data) == 0:
            self.warning("can't identify class IDs: no pg_class data")
            return None

        oid_column = data.column_index("oid")
        relnamespace_column = data.column_index("relnamespace")
        relname_column = data.column_index("relname")
        if oid_column is None or relnamespace_column is None or relname_column is None:
            self.warning("can't identify class IDs: missing pg_class columns")
            return None

        mapping = ClassIdMap()
        for row in data.rows:
            if row[relnamespace_column] != PG_CATALOG_NAMESPACE_OID:
                continue
            tab = self._by_name.get(row[relname_column])
            if tab is None or not tab.available or not tab.key_is_oid():
                continue
            mapping.tables[row[oid_column]] = tab
            if tab is pg_class:
                mapping.pg_class_oid = row[oid_column]

        if not mapping.tables:
            self.warning("can't identify class IDs: no catalog tables found in pg_class")
            return None
        # Sub-ID checks need to know which class ID is pg_class.
        if not mapping.pg_class_oid:
            self.warning("can't identify class IDs: pg_class not found in pg_class")
            return None

        logger.debug("identified %d system catalog class IDs", len(mapping.tables))
        return mapping
