from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    DEBUG: bool = True
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    # Database – SQLite for local development, asyncpg URL in production
    DATABASE_URL: str = "sqlite+aiosqlite:///./shiftwatch.db"

    # Redis (optional – Celery and distributed sweep locks are off unless enabled)
    REDIS_URL: str = "redis://localhost:6379/0"
    USE_CELERY: bool = False

    # Telegram – without a token notifications are only logged
    TELEGRAM_BOT_TOKEN: str = ""

    # Shift monitoring
    MONITORING_INTERVAL_MINUTES: int = 5
    MONITORING_COMPANY_TIMEOUT_SECONDS: float = 60.0
    SWEEP_LOCK_TIMEOUT_SECONDS: int = 300

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
