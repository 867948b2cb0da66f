"""Check class ID / object ID / sub-ID triples.

pg_depend, pg_shdepend, pg_description, pg_seclabel and their shared
counterparts refer to arbitrary catalog rows with a triple: the OID of the
catalog (its pg_class row), the OID of the row within that catalog, and for
columns of a relation, the attribute number.  Three column naming styles are
in use:

* ``classid``/``objid``/``objsubid`` in pg_(sh)depend, with a ``deptype``
  companion column;
* ``refclassid``/``refobjid``/``refobjsubid`` in pg_(sh)depend;
* ``classoid``/``objoid``/``objsubid`` everywhere else.

The style is derived from the column and table names alone.
"""

from __future__ import annotations

import logging

from pg_catcheck.catalog import DependCache, DependStyle, ResolvedColumn, ResolvedTable
from pg_catcheck.checks.base import Validator, skip_unavailable
from pg_catcheck.rowindex import RowIndex

logger = logging.getLogger(__name__)

# Class and object column names for each style.
STYLE_COLUMNS = {
    DependStyle.OBJID: ("classid", "objid"),
    DependStyle.REFOBJID: ("refclassid", "refobjid"),
    DependStyle.OBJOID: ("classoid", "objoid"),
}

PIN_DEPTYPE = "p"
OWNER_DEPTYPE = "o"

# Dependencies on pg_proc (1255) and pg_operator (2617) entries that some
# EnterpriseDB releases before 9.4 left behind after dropping the objects.
_EDB_PROC_ENTRIES = frozenset(
    ("pg_depend", "1255", oid) for oid in ("877", "883", "1777", "1780", "2049")
)
_EDB_OPERATOR_ENTRIES = frozenset(("pg_depend", "2617", oid) for oid in ("2779", "2780"))

EDB84_EXCEPTIONS = _EDB_PROC_ENTRIES | _EDB_OPERATOR_ENTRIES
EDB90_EXCEPTIONS = EDB84_EXCEPTIONS
EDB91_92_EXCEPTIONS = EDB90_EXCEPTIONS | frozenset(
    ("pg_description", "2617", oid) for oid in ("2779", "2780")
)
EDB93_EXCEPTIONS = _EDB_PROC_ENTRIES


def get_style(table_name: str, column_name: str) -> DependStyle:
    if column_name.startswith("ref"):
        return DependStyle.REFOBJID
    if "depend" in table_name:
        return DependStyle.OBJID
    return DependStyle.OBJOID


def exceptions_for(server_version: int, is_edb: bool) -> frozenset[tuple[str, str, str]]:
    """Known-bogus (table, class ID, object ID) references for a server."""
    if not is_edb or server_version >= 90400:
        return frozenset()
    if server_version >= 90300:
        return EDB93_EXCEPTIONS
    if server_version >= 90100:
        return EDB91_92_EXCEPTIONS
    if server_version >= 90000:
        return EDB90_EXCEPTIONS
    return EDB84_EXCEPTIONS


def is_known_exception(ctx, table_name: str, classval: str, objval: str) -> bool:
    if (table_name, classval, objval) not in exceptions_for(ctx.server_version, ctx.is_edb):
        return False
    logger.debug(
        "ignoring reference to class ID %s object ID %s in %s", classval, objval, table_name
    )
    return True


class _DependencyValidator(Validator):
    """Shared setup and per-column cache for the three triple validators."""

    def prepare(self, ctx, table: ResolvedTable, column: ResolvedColumn) -> None:
        # pg_class maps class IDs to catalogs.
        pg_class = ctx.find_table("pg_class")
        ctx.add_dependency(table, pg_class)
        ctx.require_column(pg_class, "relname")
        ctx.require_column(pg_class, "relnamespace")

        if get_style(table.name, column.name) == DependStyle.OBJID:
            ctx.require_column(table, "deptype")
        if table.column("dbid") is not None:
            ctx.require_column(table, "dbid")

    def _cache(self, ctx, table: ResolvedTable, column: ResolvedColumn) -> DependCache:
        if column.cache is not None:
            return column.cache

        style = get_style(table.name, column.name)
        class_name, object_name = STYLE_COLUMNS[style]
        data = table.data
        cache = DependCache(
            style=style,
            class_column=data.column_index(class_name),
            object_column=data.column_index(object_name),
        )
        if style == DependStyle.OBJID:
            # Only pg_shdepend has one.
            cache.database_column = data.column_index("dbid")
            cache.deptype_column = data.column_index("deptype")

        missing = cache.class_column is None or cache.object_column is None
        if style == DependStyle.OBJID and cache.deptype_column is None:
            missing = True
        # Complain once here rather than once per row.
        if missing:
            ctx.warning(f"can't identify class IDs: columns missing from {table.name}")
            cache.is_broken = True

        if ctx.class_ids() is None:
            cache.is_broken = True

        self._setup(ctx, table, column, cache)
        column.cache = cache
        return cache

    def _setup(self, ctx, table: ResolvedTable, column: ResolvedColumn, cache: DependCache) -> None:
        """Hook for validator-specific cache contents."""

    @staticmethod
    def not_for_this_database(ctx, table: ResolvedTable, cache: DependCache, rownum: int) -> bool:
        """True if the row describes an object of some other database."""
        if cache.database_column is None:
            return False
        dbid = table.data.value(rownum, cache.database_column)
        # Shared objects belong to every database.
        if dbid == "0":
            return False
        # Without our own OID we can't tell, so stay quiet.
        if ctx.database_oid is None:
            return True
        return dbid != ctx.database_oid


class DependencyClassIdValidator(_DependencyValidator):
    name = "dependency_class_id"
    kinds = ("dependency_class_id",)
    description = "Class IDs name a known system catalog"

    def check(self, ctx, table: ResolvedTable, column: ResolvedColumn, rownum: int) -> None:
        cache = self._cache(ctx, table, column)
        if cache.is_broken or self.not_for_this_database(ctx, table, cache, rownum):
            return

        value = table.value(rownum, column)

        # Pin dependencies have no dependent object.
        if value == "0":
            if cache.style == DependStyle.OBJID:
                if table.data.value(rownum, cache.deptype_column) == PIN_DEPTYPE:
                    return
            ctx.report(table, column, rownum, "unexpected zero value")
            return

        if ctx.class_ids().lookup(value) is None:
            # EnterpriseDB 8.4 installed a dependency with class ID 16722.
            if ctx.is_edb and ctx.server_version <= 90000 and value == "16722":
                logger.debug("ignoring reference to class ID 16722")
                return
            ctx.report(table, column, rownum, "not a system catalog OID")


class DependencyIdValidator(_DependencyValidator):
    name = "dependency_id"
    kinds = ("dependency_id",)
    description = "Object IDs exist in the catalog named by the class ID"

    def prepare(self, ctx, table: ResolvedTable, column: ResolvedColumn) -> None:
        super().prepare(ctx, table, column)

        # Any OID-keyed catalog might be referenced.
        for cattab in ctx.tables:
            if cattab.key_is_oid():
                ctx.add_dependency(table, cattab)

        class_name, _object_name = STYLE_COLUMNS[get_style(table.name, column.name)]
        ctx.require_column(table, class_name)

    def _setup(self, ctx, table: ResolvedTable, column: ResolvedColumn, cache: DependCache) -> None:
        # Each object may have at most one owner; only pg_shdepend records owners.
        if (
            not cache.is_broken
            and cache.database_column is not None
            and cache.deptype_column is not None
        ):
            cache.duplicate_owner_index = RowIndex(
                table.data,
                [cache.database_column, cache.class_column, cache.object_column],
            )

    def check(self, ctx, table: ResolvedTable, column: ResolvedColumn, rownum: int) -> None:
        cache = self._cache(ctx, table, column)
        if cache.is_broken or self.not_for_this_database(ctx, table, cache, rownum):
            return

        if (
            cache.duplicate_owner_index is not None
            and table.data.value(rownum, cache.deptype_column) == OWNER_DEPTYPE
            and cache.duplicate_owner_index.insert(rownum) is not None
        ):
            ctx.report(table, None, rownum, "duplicate owner dependency")

        classval = table.data.value(rownum, cache.class_column)
        value = table.value(rownum, column)

        if classval == "0":
            if value != "0":
                ctx.report(table, column, rownum, "class ID is zero, but object ID is non-zero")
            return

        object_tab = ctx.class_ids().lookup(classval)
        # An unknown class ID is reported by the class ID check.
        if object_tab is None:
            return
        if object_tab.index is None:
            skip_unavailable(cache, table, column, object_tab.name)
            return

        # EnterpriseDB before 9.4 sometimes recorded dependencies on type 0.
        if (
            ctx.is_edb
            and ctx.server_version < 90400
            and object_tab.name == "pg_type"
            and value == "0"
        ):
            logger.debug("ignoring reference to pg_type OID 0")
            return

        if object_tab.index.get((value,)) is None and not is_known_exception(
            ctx, table.name, classval, value
        ):
            ctx.report(table, column, rownum, f"no matching entry in {object_tab.name}")


class DependencySubIdValidator(_DependencyValidator):
    name = "dependency_subid"
    kinds = ("dependency_subid",)
    description = "Non-zero sub-IDs name an existing column of a relation"

    def prepare(self, ctx, table: ResolvedTable, column: ResolvedColumn) -> None:
        super().prepare(ctx, table, column)
        ctx.add_dependency(table, ctx.find_table("pg_attribute"))

        class_name, object_name = STYLE_COLUMNS[get_style(table.name, column.name)]
        ctx.require_column(table, class_name)
        ctx.require_column(table, object_name)

    def check(self, ctx, table: ResolvedTable, column: ResolvedColumn, rownum: int) -> None:
        cache = self._cache(ctx, table, column)
        if cache.is_broken or self.not_for_this_database(ctx, table, cache, rownum):
            return

        subid = table.value(rownum, column)
        if subid == "0":
            return

        classval = table.data.value(rownum, cache.class_column)
        class_ids = ctx.class_ids()
        if classval != class_ids.pg_class_oid:
            ctx.report(
                table,
                column,
                rownum,
                f"class ID {classval} is not pg_class, but sub-ID is non-zero",
            )
            return

        pg_attribute = ctx.find_table("pg_attribute")
        if pg_attribute.index is None:
            skip_unavailable(cache, table, column, "pg_attribute")
            return
        objval = table.data.value(rownum, cache.object_column)
        if pg_attribute.index.get((objval, subid)) is None:
            ctx.report(table, column, rownum, "no matching entry in pg_attribute")
