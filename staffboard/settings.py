from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "StaffBoard"
    backend_api_url: str = "https://qrbackend-doo3.onrender.com"
    backend_timeout_seconds: float = 15.0
    business_utc_offset_minutes: int = 9 * 60
    default_start_time: str = "09:00"
    cors_allow_origins: str = "http://127.0.0.1:3000,http://localhost:3000"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    raw = get_settings().cors_allow_origins
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_backend_api_url() -> str:
    return get_settings().backend_api_url.rstrip("/")


def get_business_offset_minutes() -> int:
    return int(get_settings().business_utc_offset_minutes)
