from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from timeclock.services.schedule_resolver import parse_hhmm


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DATABASE_URL: str = "postgresql+asyncpg://timeclock:timeclock_secret@db:5432/timeclock"
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15

    # Local calendar used to decide "today" and the scheduled start of a check-in
    ATTENDANCE_TIMEZONE: str = "UTC"

    GRACE_PERIOD_MINUTES: int = Field(default=15, ge=0)
    DEFAULT_START_TIME: str = "09:00"
    DEFAULT_END_TIME: str = "17:00"

    CORS_ALLOW_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"

    @field_validator("ATTENDANCE_TIMEZONE")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone {v!r}") from None
        return v

    @field_validator("DEFAULT_START_TIME", "DEFAULT_END_TIME")
    @classmethod
    def hhmm(cls, v: str) -> str:
        parse_hhmm(v)
        return v


settings = Settings()


def get_cors_origins() -> list[str]:
    return [origin.strip() for origin in settings.CORS_ALLOW_ORIGINS.split(",") if origin.strip()]
