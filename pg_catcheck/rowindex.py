"""Fetched catalog rows and an in-memory hash index over them.

Catalog data is kept in text form, exactly as the server renders it, and all
cross-table lookups are done with :class:`RowIndex` rather than with
server-side joins.
"""

from __future__ import annotations

from dataclasses import dataclass, field

MAX_KEY_COLUMNS = 10

_HASH_MASK = 0xFFFFFFFF


@dataclass
class RowSet:
    """The result of fetching one catalog table.

    ``rows`` holds text values; SQL NULL is stored as an empty string.  When
    the fetch did not produce a tabular result, ``error`` is set and
    ``rows`` is empty.
    """

    table: str
    columns: list[str] = field(default_factory=list)
    rows: list[tuple[str, ...]] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def __len__(self) -> int:
        return len(self.rows)

    def column_index(self, name: str) -> int | None:
        """Position of the named result column, or None if it was not fetched."""
        try:
            return self.columns.index(name)
        except ValueError:
            return None

    def value(self, rownum: int, column: int) -> str:
        return self.rows[rownum][column]


def sdbm_hash(value: str) -> int:
    """SDBM string hash, truncated to 32 bits."""
    h = 0
    for c in value.encode("utf-8"):
        h = (c + (h << 6) + (h << 16) - h) & _HASH_MASK
    return h


def _combined_hash(keyvals) -> int:
    h = 0
    for v in keyvals:
        h ^= sdbm_hash(v)
    return h


class RowIndex:
    """Chained hash index over a RowSet, keyed by an ordered set of columns.

    The index is created empty; rows are added one at a time with
    :meth:`insert`, which lets the caller notice duplicate keys as they
    happen.  :meth:`build` does both steps for the common case.
    """

    def __init__(self, rowset: RowSet, key_columns: list[int]):
        if not 1 <= len(key_columns) <= MAX_KEY_COLUMNS:
            raise ValueError(
                f"a row index needs between 1 and {MAX_KEY_COLUMNS} key columns, "
                f"got {len(key_columns)}"
            )
        self.rowset = rowset
        self.key_columns = list(key_columns)
        nrows = len(rowset.rows)
        self.nbuckets = 1 << max(nrows - 1, 0).bit_length()
        self._buckets: list[list[tuple[int, int]]] = [[] for _ in range(self.nbuckets)]
        self._size = 0

    @classmethod
    def build(cls, rowset: RowSet, key_columns: list[int]) -> tuple[RowIndex, list[tuple[int, int]]]:
        """Index every row; returns the index and a list of (row, existing_row) duplicates."""
        index = cls(rowset, key_columns)
        duplicates = []
        for rownum in range(len(rowset.rows)):
            existing = index.insert(rownum)
            if existing is not None:
                duplicates.append((rownum, existing))
        return index, duplicates

    def __len__(self) -> int:
        return self._size

    def key_of(self, rownum: int) -> tuple[str, ...]:
        row = self.rowset.rows[rownum]
        return tuple(row[c] for c in self.key_columns)

    def insert(self, rownum: int) -> int | None:
        """Add a row unless its key is already present.

        Returns None when the row was added, or the number of the row that
        already holds the same key.
        """
        keyvals = self.key_of(rownum)
        hashvalue = _combined_hash(keyvals)
        bucket = self._buckets[hashvalue & (self.nbuckets - 1)]
        for entry_hash, entry_row in bucket:
            if entry_hash == hashvalue and self.key_of(entry_row) == keyvals:
                return entry_row
        bucket.append((hashvalue, rownum))
        self._size += 1
        return None

    def get(self, keyvals) -> int | None:
        """Row number matching the given key values, or None."""
        keyvals = tuple(keyvals)
        if len(keyvals) != len(self.key_columns):
            raise ValueError(
                f"expected {len(self.key_columns)} key values, got {len(keyvals)}"
            )
        hashvalue = _combined_hash(keyvals)
        for entry_hash, entry_row in self._buckets[hashvalue & (self.nbuckets - 1)]:
            if entry_hash == hashvalue and self.key_of(entry_row) == keyvals:
                return entry_row
        return None

    def __contains__(self, keyvals) -> bool:
        return self.get(keyvals) is not None
