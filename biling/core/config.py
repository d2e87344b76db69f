# biling/core/config.py
from typing import List, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the environment or .env; unknown keys are ignored
    model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

    # Project Settings
    PROJECT_NAME: str = Field("Biling API")
    API_V1_STR: str = Field("/api/v1")
    ENV: str = Field("nonprod")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost", "http://localhost:3000"])

    # Database Settings
    DATABASE_URL: str = Field("sqlite:///./biling.db")

    # JWT Authentication Settings
    SECRET_KEY: SecretStr = Field(...)  # Required secret
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30)

    # Cloudinary Settings (uploads are refused while these are unset)
    CLOUDINARY_CLOUD_NAME: Optional[str] = Field(None)
    CLOUDINARY_API_KEY: Optional[str] = Field(None)
    CLOUDINARY_API_SECRET: Optional[SecretStr] = Field(None)

    # Posts
    POST_EXPIRATION_DAYS: int = Field(180)
    MAX_IMAGES_PER_POST: int = Field(10)
    IMAGE_MAX_SIZE: int = Field(1024)
    IMAGE_QUALITY: int = Field(85)

    LOG_LEVEL: str = Field("INFO")


settings = Settings()
