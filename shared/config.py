"""
Shared configuration management for the ACL Guard.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="ACL_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment")
    log_level: str = Field(default="info", description="Root log level")

    # Observability
    enable_tracing: bool = Field(default=False, description="Wrap guard decisions in spans")


class AclSettings(BaseConfig):
    """Settings for the guard and the service hosting it."""

    service_name: str = Field(default="acl")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8020)

    # Principal extraction
    principal_header: str = Field(default="x-auth", description="Header carrying a JSON principal")
    principal_field: str = Field(default="auth", description="Carrier field set by an upstream auth layer")

    # lenient: hooks resolve through parent registries and the subject is
    # written back; strict: local hooks only, no write-back.
    guard_mode: Literal["lenient", "strict"] = Field(default="lenient")


def get_settings(**overrides) -> AclSettings:
    """Get guard settings, environment first, then explicit overrides."""
    return AclSettings(**overrides)
