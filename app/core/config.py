from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./recruiting.db"

    LOG_LEVEL: str = "INFO"

    # Public origin of the candidate-facing site; used for file URLs and
    # assessment invitation links.
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Attempts left open this long are dropped from memory
    ATTEMPT_TTL_SECONDS: int = 24 * 60 * 60

    # Object store
    STORAGE_DIR: str = "storage"
    FILES_URL_PREFIX: str = "/files"

    # Transactional email (ZeptoMail REST API)
    ZEPTOMAIL_URL: str = "https://api.zeptomail.in/"
    ZEPTOMAIL_TOKEN: str = ""
    MAIL_FROM_ADDRESS: str = "no-reply@megamind.studio"
    MAIL_FROM_NAME: str = "Megamind"
    COMPANY_NAME: str = "Megamind"
    EMAIL_TEMPLATES_DIR: str = str(Path(__file__).resolve().parent.parent / "email_templates")

    # LLM extraction
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"

    REPORTS_DIR: str = "reports"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_postgres(self) -> bool:
        return self.DATABASE_URL.startswith("postgresql")


settings = Settings()
