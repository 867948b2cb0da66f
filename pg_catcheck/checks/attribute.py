"""Check pg_attribute.attnum."""

from __future__ import annotations

from pg_catcheck.catalog import AttnumCache, ResolvedColumn, ResolvedTable
from pg_catcheck.checks.base import Validator, parse_int, skip_unavailable

# Lowest system attribute number; EnterpriseDB has one more system column.
MIN_ATTNUM = -7
MIN_ATTNUM_EDB = -8


class AttnumValidator(Validator):
    name = "attnum"
    kinds = ("attnum",)
    description = "Attribute numbers are non-zero, above the system column floor, and within relnatts"

    def prepare(self, ctx, table: ResolvedTable, column: ResolvedColumn) -> None:
        pg_class = ctx.find_table("pg_class")
        ctx.add_dependency(table, pg_class)
        ctx.require_column(pg_class, "relnatts")
        if table.column("attrelid") is not None:
            ctx.require_column(table, "attrelid")

    def check(self, ctx, table: ResolvedTable, column: ResolvedColumn, rownum: int) -> None:
        attnum = parse_int(table.value(rownum, column))
        if attnum is None:
            ctx.report(table, column, rownum, "must be an integer")
            return
        if attnum == 0:
            ctx.report(table, column, rownum, "must not be zero")
            return

        min_attnum = MIN_ATTNUM_EDB if ctx.is_edb else MIN_ATTNUM
        if attnum < min_attnum:
            ctx.report(table, column, rownum, f"must be at least {min_attnum}")
            return

        cache = column.cache
        if cache is None:
            pg_class = ctx.find_table("pg_class")
            cache = column.cache = AttnumCache(
                pg_class=pg_class,
                attrelid_column=table.data.column_index("attrelid"),
                relnatts_column=pg_class.data.column_index("relnatts") if pg_class.loaded else None,
            )

        # Upper bound checking needs pg_class.relnatts.
        if cache.pg_class.index is None:
            skip_unavailable(cache, table, column, "pg_class")
            return
        if cache.relnatts_column is None:
            skip_unavailable(cache, table, column, "pg_class.relnatts")
            return
        if cache.attrelid_column is None:
            skip_unavailable(cache, table, column, f"{table.name}.attrelid")
            return

        class_row = cache.pg_class.index.get((table.data.value(rownum, cache.attrelid_column),))
        # A dangling attrelid is reported by the attrelid check.
        if class_row is None:
            return

        relnatts = parse_int(cache.pg_class.data.value(class_row, cache.relnatts_column))
        # So is a bad relnatts.
        if relnatts is None or relnatts < 0:
            return

        if attnum > relnatts:
            ctx.report(table, column, rownum, f"exceeds relnatts value of {relnatts}")
