"""Catalog metadata and the per-run state derived from it.

The ``*Spec`` classes are immutable descriptions taken from
:mod:`pg_catcheck.definitions`.  ``ResolvedTable`` and ``ResolvedColumn`` are
created once per run and mutated by the resolver and the scheduler.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union

from pg_catcheck.rowindex import RowIndex, RowSet


class TriState(enum.Enum):
    DEFAULT = "default"
    NO = "no"
    YES = "yes"


class Flavor(enum.Enum):
    POSTGRESQL = "postgresql"
    ENTERPRISEDB = "enterprisedb"


@dataclass(frozen=True)
class CheckSpec:
    """Which validator applies to a column, and its parameters.

    kind: validator kind, e.g. "oid", "oid_array", "dependency_id".
    references: catalog table referenced by OID checks.
    zero_ok: whether OID 0 is a legal value for OID checks.
    """

    kind: str
    references: str | None = None
    zero_ok: bool = False


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    cast: str | None = None
    min_version: int = 0
    max_version: int = 0
    edb_only: bool = False
    key: bool = False
    display: bool = False
    check: CheckSpec | None = None


@dataclass(frozen=True)
class TableSpec:
    name: str
    columns: tuple[ColumnSpec, ...]


# -- Validator workspaces ------------------------------------------------------
#
# Each validator family keeps a small cache on the column it checks, built the
# first time a row of that column is checked.


@dataclass
class OidCache:
    references: ResolvedTable
    reported_unavailable: bool = False


@dataclass
class AttnumCache:
    pg_class: ResolvedTable
    attrelid_column: int | None
    relnatts_column: int | None
    reported_unavailable: bool = False


@dataclass
class RelnattsCache:
    pg_attribute: ResolvedTable
    oid_column: int | None
    reported_unavailable: bool = False


class DependStyle(enum.Enum):
    OBJID = "objid"  # pg_(sh)depend, referring side
    REFOBJID = "refobjid"  # pg_(sh)depend, referenced side
    OBJOID = "objoid"  # pg_(sh)description, pg_(sh)seclabel


@dataclass
class DependCache:
    style: DependStyle
    is_broken: bool = False
    database_column: int | None = None
    class_column: int | None = None
    object_column: int | None = None
    deptype_column: int | None = None
    duplicate_owner_index: RowIndex | None = None
    reported_unavailable: bool = False


ValidatorCache = Union[OidCache, AttnumCache, RelnattsCache, DependCache]


@dataclass
class ResolvedColumn:
    spec: ColumnSpec
    available: bool = False
    checked: TriState = TriState.DEFAULT
    needed: bool = False
    result_column: int | None = None
    cache: ValidatorCache | None = None

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def is_checked(self) -> bool:
        return self.checked == TriState.YES and self.spec.check is not None


@dataclass
class ResolvedTable:
    spec: TableSpec
    position: int
    columns: list[ResolvedColumn] = field(default_factory=list)
    available: bool = False
    checked: TriState = TriState.DEFAULT
    needs_load: bool = False
    needs_check: bool = False
    data: RowSet | None = None
    index: RowIndex | None = None
    needs: list[int] = field(default_factory=list)
    needed_by: list[int] = field(default_factory=list)

    @classmethod
    def from_spec(cls, spec: TableSpec, position: int) -> ResolvedTable:
        return cls(
            spec=spec,
            position=position,
            columns=[ResolvedColumn(spec=c) for c in spec.columns],
        )

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def loaded(self) -> bool:
        return self.data is not None and not self.data.failed

    def column(self, name: str) -> ResolvedColumn | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def key_is_oid(self) -> bool:
        """True if "oid" is this table's only key column."""
        keys = [c.name for c in self.spec.columns if c.key]
        return keys == ["oid"]

    def value(self, rownum: int, column: ResolvedColumn) -> str:
        return self.data.value(rownum, column.result_column)

    def identity(self, rownum: int) -> list[tuple[str, str]]:
        """(name, value) pairs of the fetched display columns of a row."""
        return [
            (col.name, self.data.value(rownum, col.result_column))
            for col in self.columns
            if col.spec.display and col.result_column is not None
        ]
