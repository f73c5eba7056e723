"""
Configuration and settings for the sample backend.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    service_name: str = Field(default="sample-backend")

    # Database (SQLite file, created on demand)
    database_url: Optional[str] = Field(default=None)
    data_dir: Optional[str] = Field(default=None)
    database_filename: str = Field(default="app.db")

    # Serverless deployments only have /tmp writable.
    vercel: bool = Field(default=False)

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: Optional[int] = Field(default=None)
    default_port: int = Field(default=4000)
    port_retries: int = Field(default=10, ge=0)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    log_level: str = Field(default="INFO")

    @property
    def database_path(self) -> Path:
        if self.data_dir:
            root = Path(self.data_dir)
        elif self.vercel:
            root = Path("/tmp") / "data"
        else:
            root = Path("data")
        return root / self.database_filename

    @property
    def listen_port(self) -> int:
        return self.port if self.port is not None else self.default_port

    @property
    def retry_budget(self) -> int:
        """An explicitly configured PORT is never retried."""
        return 0 if self.port is not None else self.port_retries


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
