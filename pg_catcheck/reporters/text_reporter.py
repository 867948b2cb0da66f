"""Plain text reporter, in the classic pg_catcheck output format."""

from __future__ import annotations

import sys
from typing import TextIO

from pg_catcheck.models import AuditReport, Diagnostic, Severity


def format_diagnostic(d: Diagnostic) -> str:
    """Render one event, without a trailing newline.

    Row-level events get a second line identifying the row.
    """
    if d.severity != Severity.INCONSISTENCY:
        return f"{d.severity.value}: {d.message}"

    if d.column:
        line = f'{d.severity.value}: {d.table} row has invalid {d.column} "{d.value}": {d.message}'
    else:
        line = f"{d.severity.value}: {d.message}"
    if d.identity:
        pairs = " ".join(f'{name}="{value}"' for name, value in d.identity)
        line += f"\nrow identity: {pairs}"
    return line


def format_completion(report: AuditReport) -> str:
    return f"progress: done ({report.summary.describe()})"


class TextSink:
    """Prints events as they are recorded: inconsistencies to ``out``, others to ``err``."""

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr

    def record(self, diagnostic: Diagnostic) -> None:
        stream = self.out if diagnostic.severity == Severity.INCONSISTENCY else self.err
        print(format_diagnostic(diagnostic), file=stream)


def render(report: AuditReport) -> str:
    """Render a whole AuditReport as text, ending with the completion line."""
    lines = [format_diagnostic(d) for d in report.diagnostics]
    lines.append(format_completion(report))
    return "\n".join(lines) + "\n"
