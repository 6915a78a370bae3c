"""
ledger_config -- single public entrypoint for ledger kernel settings.

Responsibility:
    ``get_settings()`` is the only way runtime code obtains configuration.
    It returns a frozen ``LedgerSettings`` parsed from YAML: the bundled
    ``defaults.yaml`` unless a path is given.

Architecture position:
    Configuration sits above ``ledger_kernel``. The kernel never imports
    ``ledger_config``; ``ledger_config.bridges`` turns settings into
    configured kernel objects.

Failure modes:
    - ``FileNotFoundError`` -- the given settings file does not exist.
    - ``ValueError`` -- unknown keys or malformed sections.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ledger_config.loader import load_settings
from ledger_config.schema import DatabaseSettings, HelpSettings, LedgerSettings

_logger = logging.getLogger("ledger_kernel.config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_settings(path: Path | str | None = None) -> LedgerSettings:
    """
    Load settings from ``path`` (or the bundled defaults).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file contains unknown keys.
    """
    source = Path(path) if path is not None else DEFAULTS_PATH
    settings = load_settings(source)
    _logger.info(
        "settings_loaded",
        extra={
            "source": str(source),
            "cash_account_name": settings.cash_account_name,
            "help_routes": len(settings.help.routes),
        },
    )
    return settings


__all__ = [
    "DEFAULTS_PATH",
    "DatabaseSettings",
    "HelpSettings",
    "LedgerSettings",
    "get_settings",
]
