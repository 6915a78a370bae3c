"""
Config -> Kernel bridges.

Functions that turn LedgerSettings into configured kernel objects. They
live in ledger_config because the kernel never imports ledger_config.

Usage:
    from ledger_config import get_settings
    from ledger_config.bridges import build_help_service, init_engine

    settings = get_settings()
    init_engine(settings)
    help_service = build_help_service(settings, preferences=PreferenceService(session))
"""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy.engine import Engine

from ledger_config.schema import LedgerSettings
from ledger_kernel.db.engine import init_engine_from_url
from ledger_kernel.domain.clock import Clock
from ledger_kernel.logging_config import configure_logging
from ledger_kernel.services.help_service import HelpService, MemoryHelpCache, RemoteHelpSource
from ledger_kernel.services.journal_builder import JournalBuilder
from ledger_kernel.services.preference_service import PreferenceService


def init_engine(settings: LedgerSettings) -> Engine:
    """Initialize the kernel engine from ``settings.database``."""
    db = settings.database
    return init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
    )


def init_logging(settings: LedgerSettings) -> None:
    configure_logging(level=settings.log_level)


def build_journal_builder(settings: LedgerSettings, session, **kwargs) -> JournalBuilder:
    """JournalBuilder using the configured cash account name."""
    return JournalBuilder(session, cash_account_name=settings.cash_account_name, **kwargs)


def build_help_service(
    settings: LedgerSettings,
    preferences: PreferenceService | None = None,
    clock: Clock | None = None,
) -> HelpService:
    """HelpService backed by the configured remote source and a TTL cache."""
    help_settings = settings.help
    return HelpService(
        source=RemoteHelpSource(help_settings.base_url, timeout=help_settings.timeout_seconds),
        cache=MemoryHelpCache(clock=clock, ttl=timedelta(days=help_settings.cache_ttl_days)),
        routes=help_settings.routes,
        preferences=preferences,
        default_language=help_settings.default_language,
    )
