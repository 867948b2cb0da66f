"""Data models for audit events, run summaries and reports."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol


class Severity(enum.Enum):
    INCONSISTENCY = "notice"
    WARNING = "warning"
    ERROR = "error"

    def __lt__(self, other):
        order = {Severity.INCONSISTENCY: 0, Severity.WARNING: 1, Severity.ERROR: 2}
        return order[self] < order[other]


@dataclass
class Diagnostic:
    """One audit event.

    Row-level inconsistencies carry the table, row number and the identity
    columns of the offending row; ``column`` and ``value`` are empty for
    table-level findings such as duplicate keys.  Operational warnings and
    errors usually carry only a message.
    """

    severity: Severity
    message: str
    table: str = ""
    column: str = ""
    row: int | None = None
    value: str = ""
    identity: list[tuple[str, str]] = field(default_factory=list)


class DiagnosticSink(Protocol):
    def record(self, diagnostic: Diagnostic) -> None: ...


class CollectingSink:
    """Sink that keeps every event in memory, in arrival order.

    Events are also passed on to ``downstream``, if given, so a streaming
    reporter can print them as they happen.
    """

    def __init__(self, downstream: DiagnosticSink | None = None):
        self.diagnostics: list[Diagnostic] = []
        self.downstream = downstream

    def record(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        if self.downstream is not None:
            self.downstream.record(diagnostic)


@dataclass
class AuditSummary:
    inconsistencies: int = 0
    warnings: int = 0
    errors: int = 0

    def count(self, severity: Severity) -> None:
        if severity == Severity.INCONSISTENCY:
            self.inconsistencies += 1
        elif severity == Severity.WARNING:
            self.warnings += 1
        else:
            self.errors += 1

    @property
    def exit_status(self) -> int:
        """0 if nothing was found, 1 for inconsistencies only, 2 for warnings or errors."""
        if self.warnings or self.errors:
            return 2
        if self.inconsistencies:
            return 1
        return 0

    def describe(self) -> str:
        return (
            f"{self.inconsistencies} inconsistencies, "
            f"{self.warnings} warnings, {self.errors} errors"
        )


@dataclass
class AuditReport:
    database: str
    host: str
    port: int
    timestamp: datetime
    server_version: int = 0
    flavor: str = "postgresql"
    database_oid: str | None = None
    tables_checked: list[str] = field(default_factory=list)
    tables_loaded: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    summary: AuditSummary = field(default_factory=AuditSummary)

    @property
    def inconsistencies(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.INCONSISTENCY]

    @property
    def exit_status(self) -> int:
        return self.summary.exit_status
