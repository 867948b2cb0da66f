"""Decide which catalog columns are available, checked and fetched."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pg_catcheck.catalog import ColumnSpec, Flavor, ResolvedTable, TriState
from pg_catcheck.config import ConfigError, Selection
from pg_catcheck.context import AuditContext

logger = logging.getLogger(__name__)


def column_is_available(spec: ColumnSpec, server_version: int, flavor: Flavor) -> bool:
    """Whether a column exists on a server of this version and flavor.

    Version bounds are half-open: a column with ``max_version=90600`` exists
    up to 9.5 and is gone in 9.6.  Zero means unbounded.
    """
    if spec.edb_only and flavor != Flavor.ENTERPRISEDB:
        return False
    if spec.min_version and server_version < spec.min_version:
        return False
    if spec.max_version and server_version >= spec.max_version:
        return False
    return True


def apply_selection(ctx: AuditContext, selection: Selection) -> None:
    """Turn the user's include/exclude lists into explicit checked flags.

    Exclusions are applied first, so naming something in both lists checks it.
    """
    for name in selection.exclude_tables:
        _select_table(ctx, name, TriState.NO)
    for name in selection.include_tables:
        _select_table(ctx, name, TriState.YES)
    for name in selection.exclude_columns:
        _select_column(ctx, name, TriState.NO)
    for name in selection.include_columns:
        _select_column(ctx, name, TriState.YES)


def _select_table(ctx: AuditContext, name: str, whether: TriState) -> None:
    matched = [t for t in ctx.tables if t.name == name]
    if not matched:
        raise ConfigError(f'table name "{name}" not recognized')
    for tab in matched:
        tab.checked = whether


def _select_column(ctx: AuditContext, name: str, whether: TriState) -> None:
    table_name, sep, column_name = name.rpartition(".")
    nmatched = 0
    for tab in ctx.tables:
        if sep and tab.name != table_name:
            continue
        col = tab.column(column_name)
        if col is not None:
            col.checked = whether
            nmatched += 1
    if nmatched == 0:
        raise ConfigError(f'column name "{name}" not recognized')


def resolve(
    ctx: AuditContext,
    selection: Selection,
    validators: Mapping[str, object],
) -> None:
    """Resolve availability and checked/needed flags, then let validators prepare.

    Raises ConfigError for selections that cannot be honored; nothing has
    been fetched at that point.
    """
    apply_selection(ctx, selection)

    for tab in ctx.tables:
        _resolve_table(ctx, tab, selection.selected_only, validators)

    # Validators may add needed columns and inter-table edges, so this pass
    # can only start once every column's flags are final.
    for tab in ctx.tables:
        for col in tab.columns:
            if col.is_checked:
                validators[col.spec.check.kind].prepare(ctx, tab, col)

    logger.debug(
        "%d of %d catalog tables available",
        sum(1 for t in ctx.tables if t.available),
        len(ctx.tables),
    )


def _resolve_table(
    ctx: AuditContext,
    tab: ResolvedTable,
    selected_only: bool,
    validators: Mapping[str, object],
) -> None:
    tab.available = False

    for col in tab.columns:
        check = col.spec.check
        if col.checked == TriState.YES and check is None:
            raise ConfigError(f"no check defined for column {tab.name}.{col.name}")
        if check is not None and check.kind not in validators:
            raise ConfigError(
                f"no validator registered for check kind {check.kind!r} "
                f"(column {tab.name}.{col.name})"
            )

        col.available = column_is_available(col.spec, ctx.server_version, ctx.flavor)

        # Never silently drop a column the user asked for by name.
        if not col.available and col.checked == TriState.YES:
            col.available = True
            ctx.warning(f"column {tab.name}.{col.name} is not supported by this server version")

        if col.available:
            tab.available = True

        if col.checked == TriState.DEFAULT:
            if check is None:
                col.checked = TriState.NO
            elif not col.available:
                col.checked = TriState.NO
            elif tab.checked != TriState.DEFAULT:
                col.checked = tab.checked
            elif selected_only:
                col.checked = TriState.NO
            else:
                col.checked = TriState.YES

        col.needed = col.available and (
            col.checked == TriState.YES or col.spec.key or col.spec.display
        )
