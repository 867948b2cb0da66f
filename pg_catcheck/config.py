"""Configuration loading and management for pg-catcheck."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from pg_catcheck.catalog import Flavor

CONFIG_FILE_NAME = "pg-catcheck.yaml"

# Oldest server version the catalog definitions are written for.
MINIMUM_SUPPORTED_VERSION = 80400


class ConfigError(ValueError):
    """A usage or configuration problem; fatal before any table is read."""


@dataclass
class Selection:
    """Which tables and columns the user asked to check, or not to check.

    Column names are either bare (matching that column in every table) or
    qualified as ``table.column``.
    """

    include_tables: list[str] = field(default_factory=list)
    exclude_tables: list[str] = field(default_factory=list)
    include_columns: list[str] = field(default_factory=list)
    exclude_columns: list[str] = field(default_factory=list)

    @property
    def selected_only(self) -> bool:
        """True when only explicitly selected columns should be checked."""
        return bool(self.include_tables or self.include_columns)


@dataclass
class Config:
    """Complete configuration for pg-catcheck."""

    selection: Selection = field(default_factory=Selection)
    target_version: int | None = None
    flavor: Flavor | None = None  # None = detect from the server


def parse_target_version(version: str) -> int:
    """Parse a version given as MAJOR.MINOR, a bare major (10+) or server_version_num.

    "9.6" becomes 90600, "16.2" becomes 160002 and "100004" is returned
    unchanged.
    """
    version = str(version).strip()
    if version.isdigit():
        number = int(version)
        if number >= 10000:
            return number
        if number >= 10:
            return number * 10000
        raise ConfigError(f"invalid target version: {version!r} (expected MAJOR.MINOR)")

    major, sep, minor = version.partition(".")
    if not sep or not major.isdigit() or not minor.isdigit():
        raise ConfigError(f"invalid target version: {version!r} (expected MAJOR.MINOR)")
    if int(major) >= 10:
        return int(major) * 10000 + int(minor)
    return int(major) * 10000 + int(minor) * 100


def parse_flavor(value: str) -> Flavor:
    try:
        return Flavor(str(value).lower())
    except ValueError:
        choices = ", ".join(f.value for f in Flavor)
        raise ConfigError(f"invalid flavor: {value!r} (expected one of: {choices})") from None


def find_config_file() -> str | None:
    """Search for pg-catcheck.yaml in cwd, then home dir.

    Returns:
        Path to config file if found, None otherwise.
    """
    cwd_config = Path.cwd() / CONFIG_FILE_NAME
    if cwd_config.is_file():
        return str(cwd_config)

    home_config = Path.home() / CONFIG_FILE_NAME
    if home_config.is_file():
        return str(home_config)

    return None


def load_config(config_path: str | None = None, auto_discover: bool = True) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Explicit path to config file. If None and auto_discover is True,
                     searches default locations.
        auto_discover: If True and config_path is None, search for config file.

    Returns:
        Config object. Returns default config if no file found.
    """
    if config_path is None and auto_discover:
        config_path = find_config_file()

    if config_path is None:
        return Config()

    if not os.path.isfile(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return _parse_config(data)


def _parse_config(data: dict) -> Config:
    """Parse YAML data into Config object."""
    config = Config()

    tables = data.get("tables") or {}
    columns = data.get("columns") or {}
    config.selection = Selection(
        include_tables=list(tables.get("include", [])),
        exclude_tables=list(tables.get("exclude", [])),
        include_columns=list(columns.get("include", [])),
        exclude_columns=list(columns.get("exclude", [])),
    )

    if data.get("target_version") is not None:
        config.target_version = parse_target_version(data["target_version"])

    if data.get("flavor") is not None:
        config.flavor = parse_flavor(data["flavor"])

    return config


def merge_cli_with_config(
    config: Config,
    cli_tables: list[str] | None = None,
    cli_exclude_tables: list[str] | None = None,
    cli_columns: list[str] | None = None,
    cli_exclude_columns: list[str] | None = None,
    cli_target_version: str | None = None,
    cli_flavor: Flavor | None = None,
) -> Config:
    """Merge CLI arguments with config file settings.

    Table and column selections from the command line are added to those
    from the config file; an explicit target version or flavor on the
    command line replaces the configured one.
    """
    sel = config.selection
    selection = Selection(
        include_tables=sel.include_tables + list(cli_tables or []),
        exclude_tables=sel.exclude_tables + list(cli_exclude_tables or []),
        include_columns=sel.include_columns + list(cli_columns or []),
        exclude_columns=sel.exclude_columns + list(cli_exclude_columns or []),
    )

    target_version = config.target_version
    if cli_target_version is not None:
        target_version = parse_target_version(cli_target_version)

    return Config(
        selection=selection,
        target_version=target_version,
        flavor=cli_flavor if cli_flavor is not None else config.flavor,
    )
