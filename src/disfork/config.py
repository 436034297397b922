"""Configuration settings for DisFork."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisConfig(BaseModel):
    """Configuration for fork analysis.

    Controls the two concurrency bounds and the branch-count cutoff.
    Worst-case remote concurrency is bounded by ``parallel``; forks
    admitted by ``max_concurrent_forks`` all share that gateway.
    """

    # Concurrency
    parallel: int = Field(
        default=6,
        ge=1,
        le=100,
        description="Maximum in-flight GitHub API requests (gateway permits)",
    )
    max_concurrent_forks: int = Field(
        default=6,
        ge=1,
        le=100,
        description="Maximum forks analyzed at the same time",
    )

    # Classification policy
    max_branches: int = Field(
        default=50,
        ge=0,
        description="Forks with more branches than this are kept without comparing",
    )
    compare_errors_as_divergence: bool = Field(
        default=False,
        description="Treat any failed branch comparison (not only 404) as divergence",
    )

    # Pagination
    per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Page size for list endpoints",
    )


class DeletionConfig(BaseModel):
    """Configuration for the deletion step.

    Cooldowns give the user a last chance to abort with Ctrl+C.
    """

    single_cooldown_seconds: int = Field(
        default=5,
        ge=0,
        description="Cooldown before deleting a single repository",
    )
    batch_cooldown_seconds: int = Field(
        default=20,
        ge=0,
        description="Cooldown before deleting more than one repository",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub access token (skips the device authorization flow)",
    )

    # --------------------------------------------------------------------------
    # GitHub App (device authorization flow)
    # --------------------------------------------------------------------------
    app_client_id: str = Field(
        default="Iv23licpLWlZABwjnLK7",
        description="GitHub App client ID used for the device flow",
    )
    app_slug: str = Field(
        default="disfork",
        description="GitHub App slug (https://github.com/apps/<slug>)",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Analysis & Deletion
    # --------------------------------------------------------------------------
    analysis: AnalysisConfig = Field(
        default_factory=AnalysisConfig,
        description="Fork analysis configuration",
    )
    deletion: DeletionConfig = Field(
        default_factory=DeletionConfig,
        description="Deletion cooldown configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
