"""
LedgerSettings schema.

Frozen dataclasses the YAML loader parses into. Every field has a default,
so a partial file only overrides what it names.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseSettings:
    """Engine options passed to ``init_engine_from_url``."""

    url: str = "sqlite://"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 5
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class HelpSettings:
    """Remote help source and cache policy."""

    base_url: str = "http://localhost:8000/help"
    timeout_seconds: float = 5.0
    cache_ttl_days: int = 7
    default_language: str = "en_US"
    routes: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerSettings:
    """Complete runtime settings for the ledger kernel."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    help: HelpSettings = field(default_factory=HelpSettings)
    cash_account_name: str = "Cash account"
    log_level: str = "INFO"
