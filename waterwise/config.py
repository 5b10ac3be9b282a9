"""WaterWise — Central Configuration via Pydantic Settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Database ──
    database_url: str = ""

    # ── Public APIs ──
    open_meteo_base_url: str = "https://api.open-meteo.com/v1"
    world_bank_base_url: str = "https://api.worldbank.org/v2"
    http_timeout_seconds: float = 15.0
    http_max_retries: int = 3
    http_retry_base_delay: float = 2.0  # seconds

    # ── Location (used for regional recommendations) ──
    default_latitude: float = 40.4168
    default_longitude: float = -3.7038

    # ── Usage & billing ──
    default_currency: str = "USD"
    recommended_daily_liters: float = 100.0
    daily_goal_liters: float = 100.0

    # ── Cache TTLs (minutes) ──
    weather_cache_ttl_minutes: int = 60
    climate_cache_ttl_minutes: int = 360
    drought_cache_ttl_minutes: int = 120
    stats_cache_ttl_minutes: int = 360
    cache_max_age_minutes: int = 360

    # ── App ──
    log_level: str = "INFO"
    scheduler_enabled: bool = True
    usage_alert_hour: int = 20  # Evening check at 8 PM

    @property
    def effective_database_url(self) -> str:
        """Return the configured URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        return "sqlite:///./waterwise.db"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
