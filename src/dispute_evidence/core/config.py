"""Application configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="dispute-evidence", description="Application name")
    environment: Literal["development", "testing", "staging", "production"] = Field(
        default="development", description="Runtime environment"
    )

    # Blockchain
    rpc_url: str = Field(
        default="https://testnet-rpc.monad.xyz",
        description="Primary chain RPC endpoint",
    )
    rpc_backup_urls: list[str] = Field(
        default=[],
        description="Backup RPC endpoints, rotated across connection attempts",
    )
    request_timeout: int = Field(
        default=30, description="HTTP timeout for a single RPC request in seconds"
    )
    provider_max_retries: int = Field(
        default=3, description="Attempts for connection and receipt/transaction fetches"
    )
    provider_retry_delay: float = Field(
        default=1.0, description="Base retry delay in seconds"
    )

    # Redis
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_password: str | None = Field(default=None, description="Redis password")

    # Evidence assembly
    cache_enabled: bool = Field(default=True, description="Enable the evidence cache")
    cache_ttl_seconds: int = Field(
        default=3600, description="TTL for cached evidence reports"
    )
    backfill_block_window: int = Field(
        default=1000, description="Recent blocks scanned when no transfers are found"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @computed_field
    @property
    def redis_url(self) -> str:
        """Construct Redis URL from components."""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @computed_field
    @property
    def rpc_urls(self) -> list[str]:
        """Primary RPC followed by backups."""
        return [self.rpc_url, *self.rpc_backup_urls]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
