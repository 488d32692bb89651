"""Configuration schemas for Settings Sync.

Two families live here: the user's settings document (``ClaudeSettings``),
which must tolerate and preserve fields it does not know about, and the
application's own configuration (``AppConfig``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Fields of the settings document whose values this package owns.
OWNED_FIELDS = {
    "permissions",
    "env",
    "includeCoAuthoredBy",
    "verbose",
    "cleanupPeriodDays",
    "apiKeyHelper",
}


class PermissionsSettings(BaseModel):
    """The ``permissions`` block of the settings document."""

    model_config = ConfigDict(extra="allow")

    allow: list[str] = Field(
        default_factory=list, description="Capability rules that are allowed"
    )
    deny: list[str] = Field(
        default_factory=list, description="Capability rules that are denied"
    )


class ClaudeSettings(BaseModel):
    """Typed view over the user's settings document.

    Unknown fields are accepted and kept so that a load/save round trip never
    drops them.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    permissions: PermissionsSettings = Field(default_factory=PermissionsSettings)
    env: dict[str, str] = Field(
        default_factory=dict, description="Environment variables for sessions"
    )
    include_co_authored_by: bool = Field(
        default=True,
        alias="includeCoAuthoredBy",
        description="Add a co-authored-by trailer to commits",
    )
    verbose: bool = Field(default=False, description="Show full command output")
    cleanup_period_days: int | None = Field(
        default=None,
        gt=0,
        alias="cleanupPeriodDays",
        description="How long to retain chat transcripts",
    )
    api_key_helper: str | None = Field(
        default=None,
        alias="apiKeyHelper",
        description="Script that prints an API key",
    )

    @field_validator("env", mode="before")
    @classmethod
    def coerce_env_values(cls, v: Any) -> Any:
        """Environment values are strings; accept scalars and stringify them."""
        if isinstance(v, dict):
            return {str(k): "" if val is None else str(val) for k, val in v.items()}
        return v

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> ClaudeSettings:
        return cls.model_validate(document)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class ProviderConfig(BaseModel):
    """Configuration for the local OpenAI-compatible provider integration."""

    default_base_url: str = Field(
        default="http://localhost:1234",
        min_length=1,
        description="Base URL used when no URL preference is stored",
    )
    request_timeout: float = Field(
        default=10.0, gt=0.0, description="Timeout in seconds for model listing"
    )
    connection_test_timeout: float = Field(
        default=5.0, gt=0.0, description="Timeout in seconds for reachability checks"
    )
    refresh_interval: float = Field(
        default=300.0,
        gt=0.0,
        description="Seconds between background model list refreshes",
    )


class PathsConfig(BaseModel):
    """Locations of the persisted settings."""

    claude_dir: Path | None = Field(
        default=None, description="Directory holding settings.json (default ~/.claude)"
    )
    preferences_file: Path | None = Field(
        default=None, description="YAML file holding single-value preferences"
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        return cls.model_validate(data)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
