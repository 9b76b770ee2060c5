"""
Application configuration settings
"""

from pydantic_settings import BaseSettings
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Contract Vault"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 4000
    API_PREFIX: str = "/api/v1"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    # Database
    DATABASE_URL: Optional[str] = None

    # Bearer token verification
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15

    # OpenAI Configuration (document and search summaries)
    OPENAI_API_KEY: Optional[str] = None
    SUMMARY_MODEL: str = "gpt-4o-mini"
    AI_CALL_TIMEOUT: float = 30.0  # seconds per summarization call

    # Mistral Configuration (OCR fallback for scanned PDFs)
    MISTRAL_API_KEY: Optional[str] = None
    DOCUMENT_FETCH_TIMEOUT: float = 30.0  # seconds per document download + parse

    # File storage
    STORAGE_PATH: str = "storage/media"
    PUBLIC_BASE_URL: str = "http://localhost:4000"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
