"""JSON report renderer."""

from __future__ import annotations

import json
from itertools import groupby

from pg_catcheck import __version__
from pg_catcheck.models import AuditReport, Severity


def render(report: AuditReport) -> str:
    """Render an AuditReport as a JSON string.

    Inconsistencies are grouped by table under ``results``; operational
    warnings and errors are listed under ``messages``, errors first.
    """
    data = {
        "meta": {
            "tool": "pg-catcheck",
            "version": __version__,
            "timestamp": report.timestamp.isoformat(),
            "database": report.database,
            "host": report.host,
            "port": report.port,
            "server_version": report.server_version,
            "flavor": report.flavor,
            "database_oid": report.database_oid,
        },
        "summary": {
            "tables_loaded": len(report.tables_loaded),
            "tables_checked": len(report.tables_checked),
            "inconsistencies": report.summary.inconsistencies,
            "warnings": report.summary.warnings,
            "errors": report.summary.errors,
            "exit_status": report.exit_status,
        },
        "results": [],
        "messages": [
            {"severity": d.severity.value, "message": d.message, "table": d.table or None}
            for d in sorted(report.diagnostics, key=lambda d: d.severity, reverse=True)
            if d.severity != Severity.INCONSISTENCY
        ],
    }

    findings = sorted(report.inconsistencies, key=lambda d: d.table)
    for table, group in groupby(findings, key=lambda d: d.table):
        data["results"].append(
            {
                "table": table,
                "findings": [
                    {
                        "column": d.column or None,
                        "value": d.value if d.column else None,
                        "message": d.message,
                        "row": d.row,
                        "identity": dict(d.identity),
                    }
                    for d in group
                ],
            }
        )

    return json.dumps(data, indent=2, default=str)
