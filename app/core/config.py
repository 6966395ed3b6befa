from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration, loaded from the environment and `.env`."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Conference Abstracts API", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database (async driver URL: sqlite+aiosqlite://, postgresql+asyncpg://)
    database_url: str = Field(default="sqlite+aiosqlite:///./conference.db", alias="DATABASE_URL")
    db_echo: bool = Field(default=False, alias="DB_ECHO")
    db_timeout_seconds: float = Field(default=10.0, gt=0, alias="DB_TIMEOUT_SECONDS")
    create_schema: bool = Field(default=True, alias="CREATE_SCHEMA")

    # Admin bulk actions
    bulk_max_ids: int = Field(default=100, ge=1, alias="BULK_MAX_IDS")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", alias="LOG_LEVEL")
    log_format: Literal["json", "text"] = Field(default="text", alias="LOG_FORMAT")

    # Object storage (MinIO / S3)
    s3_endpoint: str | None = Field(default="http://localhost:9000", alias="S3_ENDPOINT")
    s3_access_key: str | None = Field(default=None, alias="S3_ACCESS_KEY")
    s3_secret_key: str | None = Field(default=None, alias="S3_SECRET_KEY")
    s3_region: str = Field(default="us-east-1", alias="S3_REGION")
    s3_bucket: str = Field(default="abstracts", alias="S3_BUCKET")
    upload_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1, alias="UPLOAD_MAX_BYTES")


settings = Settings()
