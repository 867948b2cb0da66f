"""Check OID references: scalar OIDs, OID vectors and OID arrays."""

from __future__ import annotations

from pg_catcheck.catalog import OidCache, ResolvedColumn, ResolvedTable
from pg_catcheck.checks.base import Validator, skip_unavailable
from pg_catcheck.oidlist import OidList, is_overlong, parse_oid_array, parse_oid_vector


class OidReferenceValidator(Validator):
    name = "oid_reference"
    kinds = ("oid", "oid_vector", "oid_array")
    description = "Every OID stored in the column names an existing row of the referenced catalog"

    def prepare(self, ctx, table: ResolvedTable, column: ResolvedColumn) -> None:
        ctx.add_dependency(table, ctx.find_table(column.spec.check.references))

    def check(self, ctx, table: ResolvedTable, column: ResolvedColumn, rownum: int) -> None:
        check = column.spec.check
        cache = column.cache
        if cache is None:
            cache = column.cache = OidCache(references=ctx.find_table(check.references))
        reftab = cache.references

        # The referenced catalog may not exist in this server version, or we
        # may have failed to read it.
        if reftab.index is None:
            skip_unavailable(cache, table, column, reftab.name)
            return

        value = table.value(rownum, column)

        if check.kind == "oid":
            if check.zero_ok and value == "0":
                return
            if reftab.index.get((value,)) is None:
                ctx.report(table, column, rownum, f"no matching entry in {reftab.name}")
            return

        if check.kind == "oid_vector":
            tokens = parse_oid_vector(value)
        else:
            tokens = parse_oid_array(value)
            if not tokens.well_formed:
                ctx.report(table, column, rownum, "not a valid 1-D array")
                return

        self._check_tokens(ctx, table, column, rownum, reftab, tokens)

    def _check_tokens(
        self,
        ctx,
        table: ResolvedTable,
        column: ResolvedColumn,
        rownum: int,
        reftab: ResolvedTable,
        tokens: OidList,
    ) -> None:
        zero_ok = column.spec.check.zero_ok
        for token in tokens:
            if is_overlong(token):
                ctx.report(table, column, rownum, f"contains a token of {len(token)} characters")
                return
            if zero_ok and token == "0":
                continue
            if reftab.index.get((token,)) is None:
                ctx.report(table, column, rownum, f'"{token}" not found in {reftab.name}')
