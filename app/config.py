from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

from app.core.exception import MissingConfigurationException

BASE_DIR = Path(__file__).resolve().parent.parent
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "The Two of Us"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    # Default to a local sqlite file for development; override via .env in production.
    DATABASE_URL: str = "sqlite:///./two_of_us.db"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
    ]

    # Jobs and push dispatch
    SERVICE_ROLE_KEY: str = ""
    VAPID_PUBLIC_KEY: str = ""
    VAPID_PRIVATE_KEY: str = ""
    VAPID_SUBJECT: str = "mailto:hello@us2.one"

    # Business day: a new day starts at DAY_CUTOFF_HOUR in DAY_TIMEZONE
    DAY_TIMEZONE: str = "Europe/Oslo"
    DAY_CUTOFF_HOUR: int = 6

    RECENT_QUESTION_WINDOW: int = 60
    REMINDER_BATCH_LIMIT: int = 50
    ACTIVITY_WINDOW_DAYS: int = 90
    FEED_PAGE_SIZE: int = 10
    DEFAULT_LOCALE: str = "en"

    SEED_QUESTIONS: bool = True
    SCHEDULER_ENABLED: bool = False

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), case_sensitive=True, extra="ignore"
    )


settings = Settings()


def require_settings(*names: str) -> None:
    """
    Fail fast when configuration a job depends on is absent.

    Raises:
        MissingConfigurationException: listing every empty setting
    """
    missing = [name for name in names if not getattr(settings, name, None)]
    if missing:
        raise MissingConfigurationException(missing)
