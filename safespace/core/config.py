from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ORG_TIMEZONE: str = "America/Denver"

    BOOKING_WINDOW_DAYS: int = 14
    BOOKING_CUTOFF: str = "16:30"
    SLOT_DAY_START: str = "09:00"
    SLOT_DAY_END: str = "16:30"
    SLOT_INTERVAL_MINUTES: int = 30

    NOTES_MAX_LENGTH: int = 500
    WORKER_NAME_PLACEHOLDER: str = "Support Worker"

    BACKEND_PROVIDER: str = "memory"
    BACKEND_BASE_URL: str = "http://localhost:3001"
    BACKEND_API_KEY: str | None = None
    BACKEND_TIMEOUT_SECONDS: float = 10.0

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"


settings = Settings()
