"""
Configuration management for the task tracker service.

Loads configuration from YAML with ZERO defaults.
Every value must be explicitly specified or startup fails.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parents[2]


class ServiceConfig(BaseModel):
    """Service identity configuration."""

    model_config = ConfigDict(extra="forbid")
    name: str
    version: str


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    model_config = ConfigDict(extra="forbid")
    host: str
    port: int
    log_level: str


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")
    level: str
    directory: str


class DatabaseConfig(BaseModel):
    """Database configuration."""

    model_config = ConfigDict(extra="forbid")
    path: str


class IdentityConfig(BaseModel):
    """Identity authority connection configuration."""

    model_config = ConfigDict(extra="forbid")
    base_url: str
    verify_token_path: str
    user_path: str
    sign_in_path: str
    sign_up_path: str
    password_reset_path: str
    revoke_path: str
    timeout_seconds: int


class RequestConfig(BaseModel):
    """Request handling configuration."""

    model_config = ConfigDict(extra="forbid")
    max_body_size: int


class CorsConfig(BaseModel):
    """Cross-origin request configuration."""

    model_config = ConfigDict(extra="forbid")
    allow_origins: list[str]


class Settings(BaseModel):
    """
    Root configuration container.

    All fields are REQUIRED. No defaults exist.
    Missing fields cause immediate startup failure.
    """

    model_config = ConfigDict(extra="forbid")
    service: ServiceConfig
    server: ServerConfig
    logging: LoggingConfig
    database: DatabaseConfig
    identity: IdentityConfig
    request: RequestConfig
    cors: CorsConfig


def get_config_path() -> Path:
    """Determine configuration file path from CONFIG_PATH or the project root."""
    env_path = os.environ.get("CONFIG_PATH")
    if env_path:
        return Path(env_path)
    return _PROJECT_ROOT / "config.yaml"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings from the configuration file."""
    config_path = get_config_path()
    if not config_path.is_file():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    raw = yaml.safe_load(config_path.read_text())
    if not isinstance(raw, dict):
        msg = f"Invalid config file: {config_path}"
        raise ValueError(msg)

    return Settings(**raw)


def clear_settings_cache() -> None:
    """Drop the cached settings so the next call reloads the file."""
    get_settings.cache_clear()
