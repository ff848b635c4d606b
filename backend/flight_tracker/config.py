from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class DestinationConfig(BaseModel):
    code: str = Field(..., min_length=3, max_length=3)
    name: str


class TargetDateConfig(BaseModel):
    name: str
    outbound: str  # ISO date, e.g. "2026-04-18"
    return_date: str = Field(..., alias="return")

    model_config = ConfigDict(populate_by_name=True)


class Settings(BaseSettings):
    # App Settings
    app_name: str = "Flight Tracker"
    env: str = "development"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./flight_tracker.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Tracked routes (JSON in env, e.g. DESTINATIONS='[{"code": "PMI", "name": "Palma"}]')
    origin_airport: str = "FRA"
    destinations: List[DestinationConfig] = []
    target_dates: List[TargetDateConfig] = []

    # Flight provider: "Mock" or "BookingCom"
    flight_provider_type: str = "Mock"
    flight_provider_api_key: str = ""
    flight_provider_api_host: str = "booking-com15.p.rapidapi.com"

    # Price checks
    request_delay_seconds: float = 2.0
    cache_max_age_hours: int = 6
    retention_days: int = 90

    # Scheduler (wall-clock slots in scheduler_timezone)
    scheduler_enabled: bool = True
    scheduler_times: List[str] = ["08:00", "20:00"]
    scheduler_timezone: str = "Europe/Berlin"
    scheduler_interval_hours: Optional[float] = None

    # CORS
    cors_origins: str = ""  # Comma-separated production origins

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
