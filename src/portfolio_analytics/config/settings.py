"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# US top 20 + IBEX 35 names always kept in sync, independent of holdings
DEFAULT_WATCH_LIST: list[str] = [
    "AAPL", "MSFT", "GOOGL", "AMZN", "NVDA", "META", "TSLA", "JPM", "V", "JNJ",
    "WMT", "PG", "HD", "MA", "BAC", "XOM", "PFE", "CSCO", "INTC", "DIS",
    "ITX.MC", "SAN.MC", "BBVA.MC", "IBE.MC", "TEF.MC", "REP.MC", "ACS.MC", "FER.MC",
    "ENG.MC", "GRF.MC", "AMS.MC", "CABK.MC", "MAP.MC", "AENA.MC", "IAG.MC", "CLNX.MC",
    "RED.MC", "IDR.MC", "MTS.MC", "COL.MC", "SAB.MC", "MEL.MC", "LOG.MC", "ACX.MC",
    "PHM.MC", "SGRE.MC", "NTGY.MC", "ROV.MC", "VIS.MC", "CIE.MC", "ANA.MC", "GCO.MC",
    "SLR.MC", "UNI.MC", "BKT.MC",
]


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".portfolio-analytics"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Portfolio Analytics Engine"
    app_version: str = "0.1.0"

    # Data directory (all app data lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"

    # Valuation
    reporting_currency: str = "EUR"
    benchmark_ticker: str = "^GSPC"
    risk_free_rate: float = 0.05
    trading_days_per_year: int = 252
    min_history_points: int = 30
    price_history_years: int = 1

    # PnL recompute windows
    daily_lookback_days: int = 5
    weekly_lookback_months: int = 6

    # Background sync
    sync_batch_size: int = 4
    sync_startup_batch_size: int = 3
    sync_interval_seconds: float = 120.0
    sync_max_retries: int = 3
    sync_startup_delay_seconds: float = 60.0
    watch_list: list[str] = DEFAULT_WATCH_LIST

    # Scheduling (wall-clock hours in scheduler_timezone)
    scheduler_timezone: str = "Europe/Madrid"
    pnl_run_hour: int = 4
    events_run_hour: int = 1
    risk_refresh_hours: int = 6

    risk_cache_ttl_seconds: int = 6 * 60 * 60

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "analytics.db"
        return f"sqlite:///{db_path}"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
