"""
Shared configuration management for the feature permissions engine.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PERMISSIONS_",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class PermissionsConfig(BaseConfig):
    """Engine-specific configuration."""

    # Evaluation
    evaluation_policy: Literal["veto_beats_allow", "allow_beats_veto"] = Field(default="veto_beats_allow")
    decision_cache_enabled: bool = Field(default=True)

    # Tenancy
    tenancy_separator: str = Field(default="/", min_length=1, max_length=1)

    # Observability
    metrics_enabled: bool = Field(default=True)


@lru_cache(maxsize=1)
def get_config() -> PermissionsConfig:
    """Get the engine configuration."""
    return PermissionsConfig()


def reset_config() -> None:
    """Drop the cached configuration so the environment is read again."""
    get_config.cache_clear()
