"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "cashflow-calendar"
    log_level: str = "INFO"
    calendar_verbose: bool = False  # Per-day debug logging from the walker

    # User setting fallbacks
    default_safety_buffer: float = 500.0  # Major units, e.g. dollars
    default_timezone: str = "UTC"
    default_currency: str = "USD"

    # Projection window
    forecast_days: int = 60
    max_forecast_days: int = 365

    # Risk analysis
    safe_to_spend_horizon_days: int = 14
    collision_min_bills_warning: int = 2
    collision_min_bills_critical: int = 4
    collision_critical_amount: float = 1000.0

    # Scenario preview
    preview_radius_days: int = 3


settings = Settings()
