"""Configuration models for the assistant."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables or `.env`.

    The object is built once at startup and handed to every service
    explicitly. Tests construct their own instance with fake credentials.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Hosted chat model
    azure_openai_api_key: str | None = None
    azure_openai_endpoint: str | None = None
    azure_openai_deployment_name: str | None = None
    azure_openai_api_version: str = "2024-02-15-preview"

    # Moderation
    enable_moderation: bool = False
    openai_moderation_key: str | None = None
    moderation_endpoint: str = "https://api.openai.com/v1/moderations"

    # Web search
    bing_search_api_key: str | None = None
    search_endpoint: str = "https://api.bing.microsoft.com/v7.0/search"

    # Attachments
    file_max_size_mb: float = Field(default=10, gt=0)

    # Code tooling and source control
    enable_code_review: bool = False
    github_token: str | None = None
    project_root: Path = Field(default_factory=lambda: Path(os.getcwd()))
    teamsfx_env: str | None = None

    log_level: str = "INFO"

    @property
    def llm_configured(self) -> bool:
        return bool(self.azure_openai_api_key)

    @property
    def max_attachment_bytes(self) -> int:
        return int(self.file_max_size_mb * 1024 * 1024)
