"""Configuration management: dataclass tree loaded from TOML plus environment overrides."""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from niftyscan.core.exceptions import ConfigurationError
from niftyscan.core.logging import logger


@dataclass
class ChartinkConfig:
    """Screener endpoints and scan clause."""

    url: str = "https://chartink.com/screener/your-screener"
    scan_clause: str = "your-scan-clause-here"
    process_url: str = "https://chartink.com/screener/process"
    timeout: float = 30.0


@dataclass
class MarketConfig:
    """Regime index and target market."""

    index_symbol: str = "^NSEI"
    ema_period: int = 20
    market: str = "nse"


@dataclass
class EnrichmentConfig:
    """Batching and pacing of per-candidate quote fetches."""

    batch_size: int = 5
    pacing_delay: float = 1.0
    lookback_padding_days: int = 20


@dataclass
class EmailConfig:
    """SMTP delivery settings."""

    user: str | None = None
    password: str | None = None
    recipient: str | None = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    security: str = "ssl"
    timeout: float = 30.0


@dataclass
class SchedulerConfig:
    """Schedule metadata plus the run time budget.

    Scheduling is external only: nothing in the process fires at ``cron_time``.
    A system cron job or hosting scheduler calls ``/api/cron`` (or runs
    ``main.py once``) at that time; ``cron_time`` is reported by ``/health``.
    """

    cron_time: str = "0 17 * * *"
    timezone: str = "Asia/Kolkata"
    run_timeout: float | None = None


@dataclass
class ServerConfig:
    """HTTP service settings."""

    host: str = "0.0.0.0"
    port: int = 3000
    cron_secret: str | None = None


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    format: str = "json"
    file: str | None = None


@dataclass
class NiftyScanConfig:
    """Top-level niftyscan configuration."""

    chartink: ChartinkConfig = field(default_factory=ChartinkConfig)
    market: MarketConfig = field(default_factory=MarketConfig)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)
    email: EmailConfig = field(default_factory=EmailConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "NiftyScanConfig":
        """Build a configuration from a nested dictionary."""
        return cls(
            chartink=ChartinkConfig(**config_dict.get("chartink", {})),
            market=MarketConfig(**config_dict.get("market", {})),
            enrichment=EnrichmentConfig(**config_dict.get("enrichment", {})),
            email=EmailConfig(**config_dict.get("email", {})),
            scheduler=SchedulerConfig(**config_dict.get("scheduler", {})),
            server=ServerConfig(**config_dict.get("server", {})),
            logging=LoggingConfig(**config_dict.get("logging", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a nested dictionary."""
        return asdict(self)


def _deep_update(target: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict):
            target[key] = _deep_update(target.get(key, {}), value)
        else:
            target[key] = value
    return target


class ConfigManager:
    """Loads the TOML configuration file and applies environment overrides."""

    def __init__(self, config_path: Path | None = None, *, use_env: bool = True):
        """
        Args:
            config_path: configuration file; defaults to ``~/.niftyscan/config.toml``
            use_env: overlay ``NIFTYSCAN_*`` environment variables
        """
        self.config_path = config_path or Path.home() / ".niftyscan" / "config.toml"
        self.use_env = use_env
        self.config = self._load_config()

    def _load_config(self) -> NiftyScanConfig:
        config_dict: dict[str, Any] = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "rb") as f:
                    config_dict = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                raise ConfigurationError(
                    f"Failed to load config from {self.config_path}: {e}",
                    details={"path": str(self.config_path)},
                ) from e

        if self.use_env:
            _deep_update(config_dict, load_config_from_env())

        try:
            return NiftyScanConfig.from_dict(config_dict)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def get_config(self) -> NiftyScanConfig:
        """Return the loaded configuration."""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """Deep-merge ``updates`` into the current configuration."""
        config_dict = _deep_update(self.config.to_dict(), updates)
        self.config = NiftyScanConfig.from_dict(config_dict)


# (env var, section, field, converter)
_ENV_BINDINGS: list[tuple[str, str, str, Any]] = [
    ("NIFTYSCAN_CHARTINK_URL", "chartink", "url", str),
    ("NIFTYSCAN_CHARTINK_SCAN_CLAUSE", "chartink", "scan_clause", str),
    ("NIFTYSCAN_INDEX_SYMBOL", "market", "index_symbol", str),
    ("NIFTYSCAN_EMA_PERIOD", "market", "ema_period", int),
    ("NIFTYSCAN_MARKET", "market", "market", str),
    ("NIFTYSCAN_BATCH_SIZE", "enrichment", "batch_size", int),
    ("NIFTYSCAN_PACING_DELAY", "enrichment", "pacing_delay", float),
    ("NIFTYSCAN_EMAIL_USER", "email", "user", str),
    ("NIFTYSCAN_EMAIL_PASSWORD", "email", "password", str),
    ("NIFTYSCAN_EMAIL_RECIPIENT", "email", "recipient", str),
    ("NIFTYSCAN_SMTP_HOST", "email", "smtp_host", str),
    ("NIFTYSCAN_SMTP_PORT", "email", "smtp_port", int),
    ("NIFTYSCAN_SMTP_SECURITY", "email", "security", str),
    ("NIFTYSCAN_CRON_TIME", "scheduler", "cron_time", str),
    ("NIFTYSCAN_TIMEZONE", "scheduler", "timezone", str),
    ("NIFTYSCAN_RUN_TIMEOUT", "scheduler", "run_timeout", float),
    ("NIFTYSCAN_CRON_SECRET", "server", "cron_secret", str),
    ("NIFTYSCAN_HOST", "server", "host", str),
    ("NIFTYSCAN_PORT", "server", "port", int),
    ("NIFTYSCAN_LOGGING_LEVEL", "logging", "level", str),
    ("NIFTYSCAN_LOGGING_FILE", "logging", "file", str),
]


def load_config_from_env() -> dict[str, Any]:
    """Collect ``NIFTYSCAN_*`` environment variables into a nested dictionary."""
    config: dict[str, dict[str, Any]] = {}
    for env_name, section, key, convert in _ENV_BINDINGS:
        raw = os.getenv(env_name)
        if raw is None or raw == "":
            continue
        try:
            value = convert(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"Environment variable {env_name} has invalid value {raw!r}",
                details={"variable": env_name},
            ) from e
        config.setdefault(section, {})[key] = value
    return config


def validate_config(config: NiftyScanConfig) -> None:
    """Ensure the settings needed to deliver a report are present."""
    required = {
        "NIFTYSCAN_EMAIL_USER": config.email.user,
        "NIFTYSCAN_EMAIL_PASSWORD": config.email.password,
        "NIFTYSCAN_EMAIL_RECIPIENT": config.email.recipient,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        logger.error(f"Missing required configuration: {', '.join(missing)}")
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}",
            missing=missing,
        )
