"""
Application configuration using Pydantic Settings.

Environment-based infrastructure switching is controlled by the ENVIRONMENT variable.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "gcp"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    APP_VERSION: str = "0.1.0"

    # ===========================================
    # Database (chat session store)
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./niko.db"

    # ===========================================
    # LLM Configuration
    # ===========================================
    # Google API Key (for Gemini API)
    GOOGLE_API_KEY: str = ""

    # Gemini model name used for tutoring replies
    GEMINI_MODEL: str = "gemini-3-pro-preview"

    # ===========================================
    # Auth
    # ===========================================
    # mock: bearer token is used as the user id (local development)
    # firebase: Firebase ID tokens verified against Google's JWKS
    AUTH_PROVIDER: Literal["mock", "firebase"] = "mock"
    FIREBASE_PROJECT_ID: str = ""
    FIREBASE_JWKS_URL: str = (
        "https://www.googleapis.com/service_accounts/v1/jwk/"
        "securetoken@system.gserviceaccount.com"
    )

    # ===========================================
    # Notion (note sink)
    # ===========================================
    NOTION_API_BASE: str = "https://api.notion.com/v1"
    NOTION_VERSION: str = "2022-06-28"
    NOTION_TIMEOUT_SECONDS: float = 30.0

    # Server-side credentials for the study word list (GET /api/notion)
    NOTION_API_KEY: str = ""
    NOTION_DB_ID: str = ""
    NOTION_STUDY_STATUS: str = "학습 중"
    NOTION_QUERY_PAGE_SIZE: int = 100

    # ===========================================
    # Conversation
    # ===========================================
    SESSION_TITLE_MAX_LENGTH: int = 30
    DEFAULT_SESSION_TITLE: str = "새로운 대화"
    IMAGE_ONLY_SESSION_TITLE: str = "이미지 분석"
    MAX_TEXT_LENGTH: int = 20000

    # ===========================================
    # Local client preferences
    # ===========================================
    PREFERENCES_PATH: str = "./data/preferences.json"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @property
    def is_gcp(self) -> bool:
        """Check if running in GCP environment."""
        return self.ENVIRONMENT == "gcp"

    @property
    def inference_configured(self) -> bool:
        """Whether the Gemini backend has credentials."""
        return bool(self.GOOGLE_API_KEY)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
