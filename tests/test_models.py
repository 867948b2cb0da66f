"""Tests for data models."""

from __future__ import annotations

from conftest import make_diagnostic

from pg_catcheck.models import AuditSummary, CollectingSink, Diagnostic, Severity


class TestSeverity:
    def test_values(self):
        assert Severity.INCONSISTENCY.value == "notice"
        assert Severity.WARNING.value == "warning"
        assert Severity.ERROR.value == "error"

    def test_ordering(self):
        assert Severity.INCONSISTENCY < Severity.WARNING < Severity.ERROR
        assert sorted([Severity.ERROR, Severity.INCONSISTENCY, Severity.WARNING]) == [
            Severity.INCONSISTENCY,
            Severity.WARNING,
            Severity.ERROR,
        ]


class TestDiagnostic:
    def test_defaults(self):
        d = Diagnostic(severity=Severity.WARNING, message="something odd")
        assert d.table == ""
        assert d.column == ""
        assert d.row is None
        assert d.identity == []

    def test_identity_not_shared(self):
        a = Diagnostic(severity=Severity.ERROR, message="a")
        b = Diagnostic(severity=Severity.ERROR, message="b")
        a.identity.append(("oid", "1"))
        assert b.identity == []


class TestAuditSummary:
    def test_counts(self):
        summary = AuditSummary()
        for severity in [Severity.INCONSISTENCY, Severity.INCONSISTENCY, Severity.WARNING, Severity.ERROR]:
            summary.count(severity)
        assert (summary.inconsistencies, summary.warnings, summary.errors) == (2, 1, 1)

    def test_exit_status_clean(self):
        assert AuditSummary().exit_status == 0

    def test_exit_status_inconsistencies_only(self):
        assert AuditSummary(inconsistencies=12).exit_status == 1

    def test_exit_status_warning(self):
        assert AuditSummary(inconsistencies=3, warnings=1).exit_status == 2

    def test_exit_status_error(self):
        assert AuditSummary(errors=1).exit_status == 2

    def test_describe(self):
        summary = AuditSummary(inconsistencies=2, warnings=0, errors=1)
        assert summary.describe() == "2 inconsistencies, 0 warnings, 1 errors"


class TestCollectingSink:
    def test_keeps_order(self):
        sink = CollectingSink()
        first = make_diagnostic(row=1)
        second = make_diagnostic(row=2)
        sink.record(first)
        sink.record(second)
        assert sink.diagnostics == [first, second]

    def test_forwards_downstream(self):
        downstream = CollectingSink()
        sink = CollectingSink(downstream=downstream)
        d = make_diagnostic()
        sink.record(d)
        assert downstream.diagnostics == [d]


class TestAuditReport:
    def test_empty(self, empty_report):
        assert empty_report.inconsistencies == []
        assert empty_report.exit_status == 0

    def test_inconsistencies_filter(self, sample_report):
        assert len(sample_report.diagnostics) == 5
        assert len(sample_report.inconsistencies) == 3
        assert all(d.severity == Severity.INCONSISTENCY for d in sample_report.inconsistencies)

    def test_exit_status_from_summary(self, sample_report):
        assert sample_report.exit_status == 2
