"""Tests for configuration loading and merging."""

from __future__ import annotations

import pytest

from pg_catcheck.catalog import Flavor
from pg_catcheck.config import (
    Config,
    ConfigError,
    Selection,
    load_config,
    merge_cli_with_config,
    parse_flavor,
    parse_target_version,
)


class TestSelection:
    """Tests for Selection dataclass."""

    def test_defaults(self):
        sel = Selection()
        assert sel.include_tables == []
        assert sel.exclude_columns == []
        assert not sel.selected_only

    def test_includes_select_only(self):
        assert Selection(include_tables=["pg_class"]).selected_only
        assert Selection(include_columns=["relowner"]).selected_only

    def test_excludes_do_not_select_only(self):
        assert not Selection(exclude_tables=["pg_class"], exclude_columns=["relam"]).selected_only


class TestParseTargetVersion:
    def test_major_minor(self):
        assert parse_target_version("9.6") == 90600
        assert parse_target_version("8.4") == 80400

    def test_two_part_new_style(self):
        assert parse_target_version("16.0") == 160000
        assert parse_target_version("16.2") == 160002

    def test_bare_major(self):
        assert parse_target_version("15") == 150000

    def test_server_version_num(self):
        assert parse_target_version("100004") == 100004
        assert parse_target_version(90603) == 90603

    @pytest.mark.parametrize("value", ["", "9", "abc", "9.x", "9.", ".6", "1.2.3"])
    def test_invalid(self, value):
        with pytest.raises(ConfigError, match="invalid target version"):
            parse_target_version(value)


class TestParseFlavor:
    def test_values(self):
        assert parse_flavor("postgresql") == Flavor.POSTGRESQL
        assert parse_flavor("EnterpriseDB") == Flavor.ENTERPRISEDB

    def test_invalid(self):
        with pytest.raises(ConfigError, match="expected one of: postgresql, enterprisedb"):
            parse_flavor("oracle")


class TestLoadConfig:
    """Tests for load_config function."""

    def test_no_file_returns_defaults(self):
        cfg = load_config(config_path=None, auto_discover=False)
        assert cfg.selection == Selection()
        assert cfg.target_version is None
        assert cfg.flavor is None

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "pg-catcheck.yaml"
        path.write_text("")
        assert load_config(str(path)) == Config()

    def test_full_file(self, tmp_path):
        path = tmp_path / "pg-catcheck.yaml"
        path.write_text(
            "tables:\n"
            "  include: [pg_class, pg_depend]\n"
            "  exclude: [pg_proc]\n"
            "columns:\n"
            "  include: [pg_class.relnamespace]\n"
            "  exclude: [relowner]\n"
            "target_version: '9.6'\n"
            "flavor: enterprisedb\n"
        )
        cfg = load_config(str(path))
        assert cfg.selection.include_tables == ["pg_class", "pg_depend"]
        assert cfg.selection.exclude_tables == ["pg_proc"]
        assert cfg.selection.include_columns == ["pg_class.relnamespace"]
        assert cfg.selection.exclude_columns == ["relowner"]
        assert cfg.target_version == 90600
        assert cfg.flavor == Flavor.ENTERPRISEDB

    def test_invalid_version_in_file(self, tmp_path):
        path = tmp_path / "pg-catcheck.yaml"
        path.write_text("target_version: nine\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_auto_discover_in_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "pg-catcheck.yaml").write_text("tables:\n  exclude: [pg_am]\n")
        cfg = load_config()
        assert cfg.selection.exclude_tables == ["pg_am"]


class TestMergeCliWithConfig:
    """Tests for merge_cli_with_config function."""

    def test_no_cli_args(self):
        cfg = Config(selection=Selection(include_tables=["pg_class"]), target_version=90600)
        merged = merge_cli_with_config(cfg)
        assert merged == cfg

    def test_selections_are_added(self):
        cfg = Config(selection=Selection(exclude_tables=["pg_proc"], include_columns=["relowner"]))
        merged = merge_cli_with_config(
            cfg,
            cli_tables=["pg_class"],
            cli_exclude_tables=["pg_am"],
            cli_columns=["relam"],
            cli_exclude_columns=["pg_type.typowner"],
        )
        assert merged.selection.include_tables == ["pg_class"]
        assert merged.selection.exclude_tables == ["pg_proc", "pg_am"]
        assert merged.selection.include_columns == ["relowner", "relam"]
        assert merged.selection.exclude_columns == ["pg_type.typowner"]

    def test_does_not_mutate_input(self):
        cfg = Config(selection=Selection(exclude_tables=["pg_proc"]))
        merge_cli_with_config(cfg, cli_exclude_tables=["pg_am"])
        assert cfg.selection.exclude_tables == ["pg_proc"]

    def test_cli_version_and_flavor_override(self):
        cfg = Config(target_version=90600, flavor=Flavor.POSTGRESQL)
        merged = merge_cli_with_config(cfg, cli_target_version="12", cli_flavor=Flavor.ENTERPRISEDB)
        assert merged.target_version == 120000
        assert merged.flavor == Flavor.ENTERPRISEDB

    def test_config_version_and_flavor_kept(self):
        cfg = Config(target_version=90600, flavor=Flavor.ENTERPRISEDB)
        merged = merge_cli_with_config(cfg)
        assert merged.target_version == 90600
        assert merged.flavor == Flavor.ENTERPRISEDB
