"""
Tests for ledger_config settings loading and the config -> kernel bridges.

Covers:
- Bundled defaults
- Partial overrides and unknown keys
- Bridges build configured kernel objects
"""

from datetime import timedelta
from pathlib import Path

import pytest

from ledger_config import DEFAULTS_PATH, get_settings
from ledger_config.bridges import build_help_service, build_journal_builder
from ledger_config.loader import parse_settings
from ledger_config.schema import DatabaseSettings, LedgerSettings


class TestDefaults:
    def test_bundled_defaults_load(self):
        settings = get_settings()

        assert isinstance(settings, LedgerSettings)
        assert settings.cash_account_name == "Cash account"
        assert settings.help.default_language == "en_US"
        assert settings.help.cache_ttl_days == 7
        assert "index" in settings.help.routes
        assert settings.database.url == "sqlite://"

    def test_defaults_file_is_packaged(self):
        assert DEFAULTS_PATH.name == "defaults.yaml"
        assert DEFAULTS_PATH.exists()


class TestOverrides:
    def test_partial_file_keeps_other_defaults(self, tmp_path: Path):
        path = tmp_path / "ledger.yaml"
        path.write_text(
            "cash_account_name: Wallet\n"
            "log_level: debug\n"
            "help:\n"
            "  default_language: de_DE\n"
            "  routes: [index]\n"
        )

        settings = get_settings(path)

        assert settings.cash_account_name == "Wallet"
        assert settings.log_level == "DEBUG"
        assert settings.help.default_language == "de_DE"
        assert settings.help.routes == ("index",)
        assert settings.help.cache_ttl_days == 7
        assert settings.database == DatabaseSettings()

    def test_empty_document(self):
        assert parse_settings({}) == LedgerSettings()

    def test_unknown_root_key(self):
        with pytest.raises(ValueError, match="cash_acount_name"):
            parse_settings({"cash_acount_name": "typo"})

    def test_unknown_section_key(self):
        with pytest.raises(ValueError, match="database"):
            parse_settings({"database": {"uri": "sqlite://"}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError):
            parse_settings({"help": ["index"]})

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            get_settings(tmp_path / "absent.yaml")

    def test_settings_are_frozen(self):
        settings = get_settings()

        with pytest.raises(AttributeError):
            settings.cash_account_name = "other"


class TestBridges:
    def test_help_service_uses_configured_routes(self):
        settings = parse_settings(
            {"help": {"routes": ["index"], "default_language": "nl_NL", "cache_ttl_days": 1}}
        )

        service = build_help_service(settings)

        assert service.has_route("index")
        assert not service.has_route("budgets.index")
        assert service.language_for(None) == "nl_NL"
        assert service._cache._ttl == timedelta(days=1)

    def test_journal_builder_uses_cash_account_name(self, session):
        settings = parse_settings({"cash_account_name": "Petty cash"})

        builder = build_journal_builder(settings, session)

        assert builder._resolver._cash_account_name == "Petty cash"
