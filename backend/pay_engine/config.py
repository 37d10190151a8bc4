"""Application configuration from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "INFO"
    environment: str = "development"
    admin_secret: str = ""

    # Fair Work rate validation; empty URL disables compliance checks
    fair_work_api_url: str = ""
    fair_work_api_key: str = ""
    fair_work_timeout_seconds: float = 10.0

    default_jurisdiction: str = "NSW"
    default_award_code: str = "MA000010"


settings = Settings()
