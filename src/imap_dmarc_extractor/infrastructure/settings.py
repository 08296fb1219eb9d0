"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from typing import Literal, get_args

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    log_level: LogLevel = "INFO"

    # IMAP
    imap_port: int = Field(993, ge=1, le=65535)
    imap_folder: str = "INBOX"
    imap_password: SecretStr | None = None
    imap_timeout: float = 30.0

    # Extraction
    sniff_octet_stream: bool = False

    # Report storage
    report_store: Literal["local", "s3"] = "local"
    output_dir: str = "reports"
    collision_policy: Literal["overwrite", "skip", "rename"] = "overwrite"

    # S3 (only used when report_store == "s3")
    s3_endpoint: str | None = None
    s3_region: str = "us-east-1"
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    s3_bucket: str | None = None
    s3_prefix: str = "dmarc-reports"

    @field_validator("imap_password", "s3_endpoint", "s3_access_key", "s3_secret_key", "s3_bucket", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
