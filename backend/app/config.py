from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


REPO_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(REPO_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DEBUG: bool = True
    PROJECT_NAME: str = "Auction Sheet Analyzer API"

    CORS_ORIGINS: List[str] = ["*"]

    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    VISION_MODEL: str = "gpt-4o-mini"
    VISION_TEMPERATURE: float = 0.2
    VISION_TIMEOUT_SECONDS: float = 60.0

    UPLOAD_MAX_SIZE_MB: int = 15
    OCR_LANG: str = "japan"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    @property
    def vision_configured(self) -> bool:
        return bool(self.OPENAI_API_KEY.strip())


settings = Settings()
