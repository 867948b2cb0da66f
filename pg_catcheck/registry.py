"""Auto-discovery and registration of validator modules."""

from __future__ import annotations

import importlib
import inspect
import pkgutil
from pathlib import Path

from pg_catcheck.checks.base import Validator


def discover_validators() -> dict[str, Validator]:
    """Discover and instantiate all Validator subclasses under pg_catcheck.checks.

    Returns:
        dict mapping each check kind to the validator instance handling it.

    Raises:
        ValueError: if two validators claim the same kind.
    """
    checks_package = importlib.import_module("pg_catcheck.checks")
    assert checks_package.__file__ is not None
    checks_dir = Path(checks_package.__file__).parent

    _import_submodules("pg_catcheck.checks", checks_dir)

    validators: dict[str, Validator] = {}
    seen = set()
    for cls in _all_subclasses(Validator):
        if cls in seen or not cls.kinds or inspect.isabstract(cls):
            continue
        seen.add(cls)
        instance = cls()
        for kind in cls.kinds:
            if kind in validators:
                raise ValueError(
                    f"check kind {kind!r} is handled by both "
                    f"{validators[kind].name} and {instance.name}"
                )
            validators[kind] = instance
    return validators


def _import_submodules(package_name: str, package_dir: Path):
    """Recursively import all submodules in a package directory."""
    for _importer, modname, _ispkg in pkgutil.walk_packages(
        path=[str(package_dir)],
        prefix=package_name + ".",
    ):
        importlib.import_module(modname)


def _all_subclasses(cls):
    """Collect all subclasses of a class recursively, depth first."""
    result = []
    for sub in cls.__subclasses__():
        result.append(sub)
        result.extend(_all_subclasses(sub))
    return result
