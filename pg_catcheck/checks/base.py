"""Base class for all column validators."""

from __future__ import annotations

import abc
import logging
import re

from pg_catcheck.catalog import ResolvedColumn, ResolvedTable

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_int(value: str) -> int | None:
    """Parse a catalog integer rendered as text; None if it isn't one."""
    if _INTEGER_RE.fullmatch(value.strip()) is None:
        return None
    return int(value)


def skip_unavailable(cache, table: ResolvedTable, column: ResolvedColumn, missing: str) -> None:
    """Log, once per column, that checks of a column are skipped for lack of data.

    ``cache`` is the column's validator cache; its ``reported_unavailable``
    flag is set on the first call.
    """
    if cache.reported_unavailable:
        return
    cache.reported_unavailable = True
    logger.info(
        "skipping checks of %s.%s: no data available for %s",
        table.name,
        column.name,
        missing,
    )


class Validator(abc.ABC):
    """Abstract base class for catalog column validators.

    To add a validator, subclass this, list the check kinds it handles in
    ``kinds`` and implement ``check()``.  The registry auto-discovers all
    subclasses found in the checks/ directory.

    Attributes:
        name: Unique identifier for this validator.
        kinds: Check kinds (``CheckSpec.kind`` values) this validator handles.
        description: Human-readable summary of what this validator checks.
    """

    name: str = ""
    kinds: tuple[str, ...] = ()
    description: str = ""

    def prepare(self, ctx, table: ResolvedTable, column: ResolvedColumn) -> None:
        """Declare the columns and tables a check of this column needs.

        Called once per checked column, before anything is fetched.  Use
        ``ctx.require_column`` and ``ctx.add_dependency``.
        """

    @abc.abstractmethod
    def check(self, ctx, table: ResolvedTable, column: ResolvedColumn, rownum: int) -> None:
        """Check one row's value of ``column``, reporting problems via ``ctx.report``.

        Args:
            ctx: the AuditContext of the current run.
            table: the table being checked; its data is loaded.
            column: the column being checked.
            rownum: row number within ``table.data``.
        """
        ...

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not cls.name:
            cls.name = cls.__name__

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name} ({', '.join(self.kinds)})>"
