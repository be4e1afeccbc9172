"""
Application configuration settings.
Loads from environment variables (and .env) with type checking.
"""

from pydantic import validator
from pydantic_settings import BaseSettings
from typing import Optional, List
import base64

class Settings(BaseSettings):
    # Application Metadata
    PROJECT_TITLE: str = "Certificates API"
    PROJECT_DESCRIPTION: str = "Backend API for storing student certificates and their images"
    PROJECT_VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ENVIRONMENT: str = "development"  # or 'testing', 'production'

    # Database Configuration
    DATABASE_URL: str
    DB_ECHO: bool = False

    # Google Cloud Storage Settings
    GCS_PROJECT_ID: Optional[str] = None
    GCS_BUCKET_NAME: str = "certificates"
    GCS_CREDENTIALS_JSON_B64: Optional[str] = None
    GCS_BASE_URL: str = "https://storage.googleapis.com"
    MAX_IMAGE_SIZE: int = 50 * 1024 * 1024  # 50MB

    @property
    def GCS_PUBLIC_BASE_URL(self):
        return f"{self.GCS_BASE_URL}/{self.GCS_BUCKET_NAME}"

    # Frontend served from the same process, if set
    STATIC_DIR: Optional[str] = None

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [item.strip() for item in v.split(",")]
        return v

    @validator("DATABASE_URL")
    def use_async_driver(cls, v):
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        return v

    @validator("MAX_IMAGE_SIZE")
    def validate_max_image_size(cls, v):
        if v > 100 * 1024 * 1024:  # 100MB max
            raise ValueError("MAX_IMAGE_SIZE cannot exceed 100MB")
        return v

    @property
    def GCS_CREDENTIALS_JSON(self) -> Optional[str]:
        """Decode base64 encoded credentials if available"""
        if self.GCS_CREDENTIALS_JSON_B64:
            try:
                return base64.b64decode(self.GCS_CREDENTIALS_JSON_B64).decode('utf-8')
            except Exception as e:
                raise ValueError(f"Failed to decode GCS credentials: {str(e)}")
        return None

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
