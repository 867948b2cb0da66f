"""Check pg_class.relnatts against pg_attribute."""

from __future__ import annotations

from pg_catcheck.catalog import RelnattsCache, ResolvedColumn, ResolvedTable
from pg_catcheck.checks.base import Validator, parse_int, skip_unavailable

# MaxHeapAttributeNumber: no relation can have more user columns.
MAX_RELNATTS = 1600


class RelnattsValidator(Validator):
    name = "relnatts"
    kinds = ("relnatts",)
    description = "Every user attribute counted by relnatts exists in pg_attribute"

    def prepare(self, ctx, table: ResolvedTable, column: ResolvedColumn) -> None:
        ctx.add_dependency(table, ctx.find_table("pg_attribute"))

    def check(self, ctx, table: ResolvedTable, column: ResolvedColumn, rownum: int) -> None:
        relnatts = parse_int(table.value(rownum, column))
        if relnatts is None or relnatts < 0:
            ctx.report(table, column, rownum, "must be a non-negative integer")
            return
        if relnatts > MAX_RELNATTS:
            ctx.report(
                table,
                column,
                rownum,
                f"exceeds the maximum number of columns ({MAX_RELNATTS})",
            )
            return

        cache = column.cache
        if cache is None:
            cache = column.cache = RelnattsCache(
                pg_attribute=ctx.find_table("pg_attribute"),
                oid_column=table.data.column_index("oid"),
            )

        if cache.pg_attribute.index is None:
            skip_unavailable(cache, table, column, "pg_attribute")
            return
        if cache.oid_column is None:
            skip_unavailable(cache, table, column, f"{table.name}.oid")
            return

        # Only positive attribute numbers: which system columns exist
        # depends on the relation kind.
        relid = table.data.value(rownum, cache.oid_column)
        for attnum in range(1, relnatts + 1):
            if cache.pg_attribute.index.get((relid, str(attnum))) is None:
                ctx.report(table, column, rownum, f"attribute {attnum} does not exist in pg_attribute")
