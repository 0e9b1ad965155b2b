"""
Application configuration.
Values are read from environment variables, falling back to a local .env
file so development works without exporting anything.
"""
import logging
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    # Return raw database errors in 500 bodies; local debugging only
    EXPOSE_DB_ERRORS: bool = False
    DATABASE_URL: str = "sqlite+aiosqlite:///./clinic.db"
    CORS_ORIGINS: list[str] = ["*"]

    # Auth
    JWT_SECRET_KEY: str = "dev-insecure-change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    # Legacy clients send x-user-id / x-user-role; never enable in production
    ALLOW_HEADER_IDENTITY: bool = False

    # Booking policy
    MAX_APPOINTMENTS_PER_DAY: int = 5
    DAILY_LIMIT_ACTIVE_ONLY: bool = False
    BOOKED_SLOTS_ACTIVE_ONLY: bool = False

    # Clinic slot grid ("HH:MM")
    CLINIC_OPENS: str = "09:00"
    CLINIC_CLOSES: str = "17:30"
    SLOT_MINUTES: int = 30

    # Seeded on startup when both are set
    SEED_ADMIN_EMAIL: str = ""
    SEED_ADMIN_PASSWORD: str = ""

    class Config:
        env_file = ".env"


settings = Settings()

if settings.APP_ENV != "development" and settings.JWT_SECRET_KEY == "dev-insecure-change-me":
    raise ValueError(
        "JWT_SECRET_KEY is not set. Generate one with: "
        "python -c 'import secrets; print(secrets.token_urlsafe(32))'"
    )

if settings.ALLOW_HEADER_IDENTITY:
    logger.warning("ALLOW_HEADER_IDENTITY is on: x-user-id / x-user-role headers are accepted without a token")
