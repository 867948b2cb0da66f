"""Tokenizers for multi-valued OID columns.

Two encodings appear in the catalogs:

* OID vectors (``oidvector``, ``int2vector``): space-separated, e.g. ``"23 25"``.
* OID arrays (``oid[]``): brace-delimited and comma-separated, e.g.
  ``"{23,25}"``; an empty string (SQL NULL) and ``"{}"`` both mean "no
  elements".

Parsing produces an :class:`OidList`, which carries a well-formedness verdict
and can be iterated any number of times.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

# Longest token we are willing to treat as an OID.
MAX_TOKEN_LENGTH = 31

_ARRAY_RE = re.compile(r"\{(?:[^,{}]+(?:,[^,{}]+)*)?\}")


@dataclass(frozen=True)
class OidList:
    text: str
    form: str
    well_formed: bool = True

    def __iter__(self) -> Iterator[str]:
        if not self.well_formed:
            return iter(())
        if self.form == "vector":
            return (t for t in self.text.split(" ") if t)
        inner = self.text[1:-1]
        return iter(inner.split(",") if inner else ())

    def __len__(self) -> int:
        return sum(1 for _ in self)


def parse_oid_vector(text: str) -> OidList:
    return OidList(text, "vector")


def parse_oid_array(text: str) -> OidList:
    """Parse a 1-D array literal; malformed input yields no tokens."""
    if text == "":
        return OidList(text, "array")
    return OidList(text, "array", well_formed=_ARRAY_RE.fullmatch(text) is not None)


def is_overlong(token: str) -> bool:
    return len(token) > MAX_TOKEN_LENGTH
