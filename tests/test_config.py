"""
Tests for configuration management.

Covers defaults, TOML loading, ``NIFTYSCAN_*`` environment overrides and the
delivery settings check.
"""

from pathlib import Path

import pytest

from niftyscan.core.config import (
    ConfigManager,
    EmailConfig,
    NiftyScanConfig,
    load_config_from_env,
    validate_config,
)
from niftyscan.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove any NIFTYSCAN_* variables from the host environment."""
    import os

    for name in list(os.environ):
        if name.startswith("NIFTYSCAN_"):
            monkeypatch.delenv(name)


class TestNiftyScanConfig:
    """Test the configuration dataclass tree."""

    def test_defaults(self):
        """Defaults match the documented behaviour."""
        config = NiftyScanConfig()

        assert config.market.index_symbol == "^NSEI"
        assert config.market.ema_period == 20
        assert config.enrichment.batch_size == 5
        assert config.enrichment.pacing_delay == 1.0
        assert config.email.smtp_host == "smtp.gmail.com"
        assert config.email.smtp_port == 465
        assert config.scheduler.cron_time == "0 17 * * *"
        assert config.scheduler.timezone == "Asia/Kolkata"
        assert config.scheduler.run_timeout is None
        assert config.server.port == 3000

    def test_round_trip_through_dict(self):
        """from_dict(to_dict()) preserves every section."""
        config = NiftyScanConfig()
        config.market.ema_period = 50

        assert NiftyScanConfig.from_dict(config.to_dict()) == config


class TestConfigManager:
    """Test ConfigManager loading."""

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        manager = ConfigManager(tmp_path / "missing.toml")

        assert manager.get_config() == NiftyScanConfig()

    def test_loads_toml_file(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text(
            """
[chartink]
url = "https://chartink.com/screener/my-scan"
scan_clause = "( {cash} ( latest close > 100 ) )"

[market]
ema_period = 50

[email]
user = "bot@example.com"
recipient = "me@example.com"
smtp_port = 587
security = "starttls"
""",
            encoding="utf-8",
        )

        config = ConfigManager(path).get_config()

        assert config.chartink.url == "https://chartink.com/screener/my-scan"
        assert config.market.ema_period == 50
        assert config.market.index_symbol == "^NSEI"
        assert config.email.smtp_port == 587
        assert config.email.security == "starttls"

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "config.toml"
        path.write_text('[market]\nema_period = 50\n[server]\nport = 8080\n', encoding="utf-8")
        monkeypatch.setenv("NIFTYSCAN_EMA_PERIOD", "30")
        monkeypatch.setenv("NIFTYSCAN_EMAIL_PASSWORD", "app-pass")
        monkeypatch.setenv("NIFTYSCAN_RUN_TIMEOUT", "90")

        config = ConfigManager(path).get_config()

        assert config.market.ema_period == 30
        assert config.server.port == 8080
        assert config.email.password == "app-pass"
        assert config.scheduler.run_timeout == 90.0

    def test_environment_ignored_when_disabled(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("NIFTYSCAN_EMA_PERIOD", "30")

        config = ConfigManager(tmp_path / "missing.toml", use_env=False).get_config()

        assert config.market.ema_period == 20

    def test_malformed_toml_raises(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text("[market\nema_period = ", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigManager(path)

    def test_unknown_key_raises(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text("[market]\nbogus = 1\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigManager(path)

    def test_update_config(self, tmp_path: Path):
        manager = ConfigManager(tmp_path / "missing.toml")

        manager.update_config(enrichment={"batch_size": 10})

        assert manager.get_config().enrichment.batch_size == 10
        assert manager.get_config().enrichment.pacing_delay == 1.0


class TestEnvironment:
    """Test environment variable parsing."""

    def test_empty_values_are_ignored(self, monkeypatch):
        monkeypatch.setenv("NIFTYSCAN_EMAIL_USER", "")

        assert load_config_from_env() == {}

    def test_invalid_number_raises(self, monkeypatch):
        monkeypatch.setenv("NIFTYSCAN_BATCH_SIZE", "five")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_env()

        assert exc_info.value.details["variable"] == "NIFTYSCAN_BATCH_SIZE"


class TestValidateConfig:
    """Test the delivery settings check."""

    def test_complete_settings_pass(self):
        config = NiftyScanConfig(email=EmailConfig(user="u@example.com", password="p", recipient="r@example.com"))

        validate_config(config)

    def test_missing_settings_listed(self):
        config = NiftyScanConfig(email=EmailConfig(user="u@example.com"))

        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(config)

        assert exc_info.value.missing == ["NIFTYSCAN_EMAIL_PASSWORD", "NIFTYSCAN_EMAIL_RECIPIENT"]
        assert "NIFTYSCAN_EMAIL_PASSWORD" in exc_info.value.message
