"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, upload limits and environment variables.
"""

from pydantic import field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache
import os


DEFAULT_DATABASE_URL = "postgresql+asyncpg://postgres:postgres@db:5432/siedlisko"
DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from the environment or a .env file."""

    # Application configuration
    app_name: str = "Siedlisko Listings API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False
    log_level: str = "INFO"

    # Individual database components, used when DATABASE_URL is not set
    postgres_db: str = "siedlisko"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "db"
    postgres_port: int = 5432

    database_url: str = DEFAULT_DATABASE_URL

    # JWT configuration
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7

    # Password hashing cost
    bcrypt_rounds: int = 12

    # File upload configuration
    upload_dir: str = "./uploads"
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    max_files_per_upload: int = 10
    allowed_file_types: List[str] = ["image/jpeg", "image/png", "image/webp"]

    # Listing rules
    min_publish_images: int = 2

    # API configuration
    api_v1_prefix: str = "/api/v1"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Pagination defaults
    default_page_size: int = 20
    max_page_size: int = 100

    # Upper bound for a single request body (a full multi-image upload plus form overhead)
    max_request_size: int = 11 * 10 * 1024 * 1024

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v, info: ValidationInfo):
        """Build database URL from components if not provided directly."""
        if not v or v == DEFAULT_DATABASE_URL:
            user = info.data.get("postgres_user", "postgres")
            password = info.data.get("postgres_password", "postgres")
            host = info.data.get("postgres_host", "db")
            port = info.data.get("postgres_port", 5432)
            db = info.data.get("postgres_db", "siedlisko")
            return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"

        # Ensure async driver is used
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("upload_dir", mode="before")
    @classmethod
    def create_upload_directory(cls, v):
        """Ensure the upload directory exists."""
        if v and not os.path.exists(v):
            os.makedirs(v, exist_ok=True)
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing" or self.testing

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
