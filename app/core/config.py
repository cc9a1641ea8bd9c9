# app/core/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import List
from functools import lru_cache

PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application Settings
    APP_NAME: str = "UX Analysis API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Database Settings
    DATABASE_URL: str = "sqlite:///./ux_analysis.db"

    # Security Settings
    SECRET_KEY: str = Field(default="change-me-in-prod", alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS Settings (comma-separated)
    ALLOWED_ORIGINS: str = "http://localhost:8080"

    # File Upload Settings
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB
    MAX_REQUEST_SIZE: int = 11 * 1024 * 1024  # file plus multipart overhead
    ALLOWED_IMAGE_EXTENSIONS: List[str] = ["png", "jpg", "jpeg", "gif", "webp"]
    UPLOAD_DIR: str = "uploads"

    # AI Settings
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-pro"
    GEMINI_TIMEOUT_SECONDS: float = 120.0
    PROMPT_TEMPLATE_PATH: str = str(PROJECT_ROOT / "prompts" / "ux-analysis.txt")

    # Middleware settings
    GZIP_MIN_SIZE: int = 500
    RATE_LIMIT_PER_MINUTE: int = 60

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)


@lru_cache()
def get_settings() -> Settings:
    s = Settings()
    # CORS_ORIGINS is accepted as an alias for ALLOWED_ORIGINS
    cors_env = os.environ.get("CORS_ORIGINS")
    if cors_env:
        s.ALLOWED_ORIGINS = cors_env
    return s


settings: Settings = get_settings()
