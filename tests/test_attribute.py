"""Tests for the attnum and relnatts validators."""

from __future__ import annotations

import logging

from conftest import col, key, messages, run_checks, skipped_checks, table

from pg_catcheck.catalog import CheckSpec, Flavor
from pg_catcheck.checks.base import parse_int
from pg_catcheck.checks.relnatts import MAX_RELNATTS
from pg_catcheck.config import Selection
from pg_catcheck.models import Severity

SPECS = (
    table(
        "pg_class",
        key("oid"),
        col("relname", display=True),
        col("relnatts", CheckSpec("relnatts")),
    ),
    table(
        "pg_attribute",
        key("attrelid", check=CheckSpec("oid", references="pg_class")),
        col("attname", display=True),
        key("attnum", check=CheckSpec("attnum")),
    ),
)


def _attrs(relid: str, *attnums: int, **extra) -> list[dict]:
    return [{"attrelid": relid, "attname": f"a{n}", "attnum": str(n), **extra} for n in attnums]


def _check(classes, attributes, **kwargs):
    ctx, _scheduler, _source = run_checks(
        SPECS, {"pg_class": classes, "pg_attribute": attributes}, **kwargs
    )
    return ctx


class TestParseInt:
    def test_values(self):
        assert parse_int("12") == 12
        assert parse_int("-7") == -7
        assert parse_int("+3") == 3
        assert parse_int("") is None
        assert parse_int("1.5") is None
        assert parse_int("abc") is None


class TestAttnum:
    def test_consistent(self):
        ctx = _check(
            [{"oid": "16384", "relname": "t", "relnatts": "2"}],
            _attrs("16384", -7, -1, 1, 2),
        )
        assert ctx.sink.diagnostics == []

    def test_exceeds_relnatts(self):
        ctx = _check(
            [{"oid": "16384", "relname": "t", "relnatts": "2"}],
            _attrs("16384", 1, 2, 3),
        )
        assert messages(ctx) == ["exceeds relnatts value of 2"]
        d = ctx.sink.diagnostics[0]
        assert d.table == "pg_attribute"
        assert d.value == "3"
        assert d.identity == [("attrelid", "16384"), ("attname", "a3"), ("attnum", "3")]

    def test_zero(self):
        ctx = _check([{"oid": "16384", "relname": "t", "relnatts": "0"}], _attrs("16384", 0))
        assert messages(ctx) == ["must not be zero"]

    def test_not_an_integer(self):
        ctx = _check(
            [{"oid": "16384", "relname": "t", "relnatts": "0"}],
            [{"attrelid": "16384", "attname": "x", "attnum": "abc"}],
        )
        assert messages(ctx) == ["must be an integer"]

    def test_floor_on_postgresql(self):
        ctx = _check([{"oid": "16384", "relname": "t", "relnatts": "0"}], _attrs("16384", -8))
        assert messages(ctx) == ["must be at least -7"]

    def test_floor_on_enterprisedb(self):
        ctx = _check(
            [{"oid": "16384", "relname": "t", "relnatts": "0"}],
            _attrs("16384", -8, -9),
            flavor=Flavor.ENTERPRISEDB,
        )
        assert messages(ctx) == ["must be at least -8"]

    def test_unknown_relation_not_bounded(self):
        ctx = _check(
            [{"oid": "16384", "relname": "t", "relnatts": "0"}],
            _attrs("16399", 5),
            selection=Selection(include_columns=["attnum"]),
        )
        assert ctx.sink.diagnostics == []

    def test_bad_relnatts_not_used_as_bound(self):
        ctx = _check(
            [{"oid": "16384", "relname": "t", "relnatts": "x"}],
            _attrs("16384", 5),
            selection=Selection(include_columns=["attnum"]),
        )
        assert ctx.sink.diagnostics == []

    def test_pg_class_unreadable_skips_upper_bound(self, caplog):
        caplog.set_level(logging.INFO, logger="pg_catcheck")
        ctx = _check([], _attrs("16384", 1, 2, 3, 9), failing={"pg_class"})
        assert ctx.summary.inconsistencies == 0
        assert skipped_checks(caplog, "pg_attribute.attnum") == [
            "skipping checks of pg_attribute.attnum: no data available for pg_class"
        ]

    def test_floor_still_checked_without_pg_class(self):
        ctx = _check([], _attrs("16384", 0, 1), failing={"pg_class"})
        assert messages(ctx, Severity.INCONSISTENCY) == ["must not be zero"]


class TestRelnatts:
    def test_missing_attributes(self):
        ctx = _check(
            [{"oid": "16384", "relname": "t", "relnatts": "4"}],
            _attrs("16384", 1, 3),
            selection=Selection(include_columns=["relnatts"]),
        )
        assert messages(ctx) == [
            "attribute 2 does not exist in pg_attribute",
            "attribute 4 does not exist in pg_attribute",
        ]
        assert {d.column for d in ctx.sink.diagnostics} == {"relnatts"}

    def test_negative(self):
        ctx = _check([{"oid": "16384", "relname": "t", "relnatts": "-1"}], [])
        assert messages(ctx) == ["must be a non-negative integer"]

    def test_not_an_integer(self):
        ctx = _check([{"oid": "16384", "relname": "t", "relnatts": "two"}], [])
        assert messages(ctx) == ["must be a non-negative integer"]

    def test_system_columns_not_required(self):
        ctx = _check([{"oid": "16384", "relname": "t", "relnatts": "1"}], _attrs("16384", 1))
        assert ctx.sink.diagnostics == []

    def test_pg_attribute_unreadable(self):
        ctx = _check(
            [{"oid": "16384", "relname": "t", "relnatts": "3"}],
            [],
            failing={"pg_attribute"},
        )
        assert ctx.summary.inconsistencies == 0
        assert ctx.summary.errors == 1

    def test_pg_attribute_unreadable_logged_once(self, caplog):
        caplog.set_level(logging.INFO, logger="pg_catcheck")
        classes = [{"oid": str(16384 + i), "relname": f"t{i}", "relnatts": "3"} for i in range(5)]
        ctx = _check(classes, [], failing={"pg_attribute"})
        assert ctx.summary.inconsistencies == 0
        assert skipped_checks(caplog, "pg_class.relnatts") == [
            "skipping checks of pg_class.relnatts: no data available for pg_attribute"
        ]

    def test_maximum_columns(self):
        ctx = _check([{"oid": "16384", "relname": "t", "relnatts": "300000"}], _attrs("16384", 1))
        assert messages(ctx) == [f"exceeds the maximum number of columns ({MAX_RELNATTS})"]

    def test_maximum_columns_is_allowed(self):
        ctx = _check(
            [{"oid": "16384", "relname": "t", "relnatts": str(MAX_RELNATTS)}],
            _attrs("16384", *range(1, MAX_RELNATTS + 1)),
        )
        assert ctx.sink.diagnostics == []


class TestMutualDependency:
    def test_each_table_loaded_once(self):
        _ctx, scheduler, source = run_checks(
            SPECS,
            {
                "pg_class": [{"oid": "16384", "relname": "t", "relnatts": "1"}],
                "pg_attribute": _attrs("16384", 1),
            },
        )
        assert sorted(source.fetched) == ["pg_attribute", "pg_class"]
        assert sorted(scheduler.tables_checked) == ["pg_attribute", "pg_class"]
