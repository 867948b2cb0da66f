"""Decide the order in which catalog tables are loaded and checked.

Each table is fetched at most once.  A table can be checked as soon as it and
every table it depends on are in memory; when no table is ready, the scheduler
greedily picks the pending table with the fewest outstanding dependencies
(preferring, among equals, the one the most other tables are waiting for),
loads what it needs and checks it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pg_catcheck.catalog import ResolvedTable, TriState
from pg_catcheck.context import AuditContext
from pg_catcheck.rowindex import RowIndex, RowSet

logger = logging.getLogger(__name__)


def build_query(tab: ResolvedTable) -> tuple[str, list[str]] | None:
    """Build the SELECT for a table's needed columns, in registry order.

    Records each column's position in the result.  Returns the query text and
    the result column names, or None if no column is needed.
    """
    select_list = []
    names = []
    for col in tab.columns:
        if not col.needed:
            col.result_column = None
            continue
        expr = col.name
        if col.spec.cast:
            expr += f"::{col.spec.cast}"
        select_list.append(f"{expr}::pg_catalog.text AS {col.name}")
        col.result_column = len(names)
        names.append(col.name)

    if not names:
        return None
    return f"SELECT {', '.join(select_list)} FROM pg_catalog.{tab.name}", names


class Scheduler:
    def __init__(self, ctx: AuditContext, source, validators: Mapping[str, object]):
        self.ctx = ctx
        self.source = source
        self.validators = validators
        self.tables_loaded: list[str] = []
        self.tables_checked: list[str] = []

    def run(self) -> None:
        """Load and check tables until no table is left to check."""
        self._mark_work()

        while True:
            remaining = 0
            for tab in self.ctx.tables:
                if tab.needs_check and not tab.needs_load and not tab.needs:
                    self.check_table(tab)
                if tab.needs_check:
                    remaining += 1

            if remaining == 0:
                break

            best = self._pick_next()
            self._load_needs(best, set())
            if best.needs_load:
                logger.info("loading table %s", best.name)
                self.load_table(best)
            self.check_table(best)

    def _mark_work(self) -> None:
        for tab in self.ctx.tables:
            if tab.needed_by:
                tab.needs_load = True
            for col in tab.columns:
                if col.needed:
                    tab.needs_load = True
                if col.checked == TriState.YES:
                    tab.needs_check = True

    def _pick_next(self) -> ResolvedTable:
        best = None
        for tab in self.ctx.tables:
            if not tab.needs_check:
                continue
            if (
                best is None
                or len(tab.needs) < len(best.needs)
                or (len(tab.needs) == len(best.needs) and len(tab.needed_by) > len(best.needed_by))
            ):
                best = tab
        return best

    def _load_needs(self, tab: ResolvedTable, in_progress: set[int]) -> None:
        """Load every table ``tab`` still needs, each after its own needs.

        ``in_progress`` breaks dependency cycles: a table whose needs are
        already being loaded further up the stack is loaded directly.
        """
        in_progress.add(tab.position)
        while tab.needs:
            reftab = self.ctx.table_at(tab.needs[-1])
            if reftab.position not in in_progress:
                self._load_needs(reftab, in_progress)
            if reftab.needs_load:
                logger.info(
                    "preloading table %s because it is required in order to check %s",
                    reftab.name,
                    tab.name,
                )
                self.load_table(reftab)
            else:
                tab.needs.remove(reftab.position)

    def load_table(self, tab: ResolvedTable) -> None:
        """Fetch a table, index it on its key columns and release its dependents."""
        built = build_query(tab)
        if built is None:
            logger.debug("table %s has no columns to fetch", tab.name)
            tab.data = RowSet(table=tab.name, error="no columns selected")
        else:
            query, names = built
            tab.data = self.source.fetch(tab.name, query, names)
            if tab.data.failed:
                self.ctx.error(f"could not load table {tab.name}: {tab.data.error}", table=tab.name)
            else:
                self._build_index(tab)
            self.tables_loaded.append(tab.name)

        tab.needs_load = False

        for position in tab.needed_by:
            dependent = self.ctx.table_at(position)
            if tab.position in dependent.needs:
                dependent.needs.remove(tab.position)
        tab.needed_by = []

    def _build_index(self, tab: ResolvedTable) -> None:
        keycols = [
            col.result_column
            for col in tab.columns
            if col.available and col.spec.key and col.result_column is not None
        ]
        # pg_depend and friends have no key, and get no index.
        if not keycols:
            return

        tab.index, duplicates = RowIndex.build(tab.data, keycols)
        for rownum, _existing in duplicates:
            self.ctx.report(tab, None, rownum, f"{tab.name} row duplicates existing key")

    def check_table(self, tab: ResolvedTable) -> None:
        """Run every checked column's validator over every row of a loaded table."""
        tab.needs_check = False

        # A failed load has already been reported.
        if not tab.loaded:
            return

        logger.info("checking table %s (%d rows)", tab.name, len(tab.data))
        columns = [col for col in tab.columns if col.is_checked]
        try:
            for rownum in range(len(tab.data)):
                for col in columns:
                    self.validators[col.spec.check.kind].check(self.ctx, tab, col, rownum)
        except Exception as exc:
            self.ctx.error(
                f"checking table {tab.name} failed: {type(exc).__name__}: {exc}",
                table=tab.name,
            )
        self.tables_checked.append(tab.name)
