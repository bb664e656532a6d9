"""
Configuration and settings for the vault backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # GitHub OAuth app credentials
    client_id: str
    client_secret: str

    # HTTP server
    frontend_url: Optional[str] = Field(default=None)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4000)
    log_level: str = Field(default="INFO")

    # GitHub endpoints
    github_api_url: str = Field(default="https://api.github.com")
    github_oauth_url: str = Field(
        default="https://github.com/login/oauth/access_token"
    )
    request_timeout: float = Field(default=30.0, gt=0)
    repos_per_page: int = Field(default=30, ge=1, le=100)

    # Vault repository
    vault_repo_name: str = Field(default="test-blockbook-vault")
    vault_branch: str = Field(default="main")
    commit_message: str = Field(default="Adding a new file via API")

    @field_validator("client_id", "client_secret")
    @classmethod
    def _require_value(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must be set to a non-empty value")
        return value

    @field_validator("github_api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
