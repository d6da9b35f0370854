"""Configuration management for the vitals trend Lambda functions."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase REST configuration
    # Base URL: https://<project>.supabase.co (PostgREST lives under /rest/v1)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""  # Publishable key, sent as apikey and bearer token
    SUPABASE_TIMEOUT: float = 30.0
    VITALS_FETCH_LIMIT: int = 500

    # Local zone for day/week/month bucket boundaries
    LOCAL_TIMEZONE: str = "UTC"

    # Chart canvas defaults (pixels)
    CHART_WIDTH: float = 340.0
    CHART_HEIGHT: float = 180.0
    CHART_MARGIN: float = 8.0

    # Abnormal reading thresholds
    TEMP_HIGH: float = 37.5
    HR_LOW: float = 60.0
    HR_HIGH: float = 100.0
    SYSTOLIC_HIGH: float = 130.0
    DIASTOLIC_HIGH: float = 80.0
    BP_INCLUSIVE: bool = True

    # Logging configuration
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
