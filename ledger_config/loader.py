"""
Settings loader (``ledger_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the frozen dataclasses of
``ledger_config.schema``. Runtime callers go through
``ledger_config.get_settings()``.

Invariants enforced
-------------------
* Unknown keys raise ``ValueError``; a typo never silently falls back to a
  default.
* Missing keys take the dataclass default.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown key or wrong section shape  -> ``ValueError``.
"""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import DatabaseSettings, HelpSettings, LedgerSettings


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _check_keys(section: str, data: Any, cls: type) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"'{section}' must be a mapping, got {type(data).__name__}")
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(f"Unknown key(s) in '{section}': {', '.join(unknown)}")
    return data


def parse_database(data: Any) -> DatabaseSettings:
    """Parse the ``database`` section."""
    return DatabaseSettings(**_check_keys("database", data, DatabaseSettings))


def parse_help(data: Any) -> HelpSettings:
    """Parse the ``help`` section; ``routes`` becomes a tuple."""
    values = dict(_check_keys("help", data, HelpSettings))
    if "routes" in values:
        values["routes"] = tuple(values["routes"] or ())
    return HelpSettings(**values)


def parse_settings(data: dict[str, Any]) -> LedgerSettings:
    """
    Parse a whole settings document.

    Expected top-level keys (all optional): ``database``, ``help``,
    ``cash_account_name``, ``log_level``.
    """
    values = dict(_check_keys("root", data, LedgerSettings))
    if "database" in values:
        values["database"] = parse_database(values["database"])
    if "help" in values:
        values["help"] = parse_help(values["help"])
    if "log_level" in values:
        values["log_level"] = str(values["log_level"]).upper()
    return LedgerSettings(**values)


def load_settings(path: Path) -> LedgerSettings:
    """Load and parse the YAML settings file at ``path``."""
    return parse_settings(load_yaml_file(path))
