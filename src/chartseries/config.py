"""Configuration system using pydantic-settings with environment variable loading."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Series pipeline parameters.

    Indicator periods default to the values every chart adapter has always
    used (SMA 20, EMA 20, RSI 14). All fields configurable via PIPELINE_
    environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    sma_period: int = Field(default=20, ge=1)
    ema_period: int = Field(default=20, ge=1)
    rsi_period: int = Field(default=14, ge=1)

    # Raise configuration errors instead of skipping the offending dataset
    strict: bool = False

    # >1 fans datasets out over a thread pool; output order is unchanged
    max_workers: int = Field(default=1, ge=1)


class ApiSettings(BaseSettings):
    """HTTP service configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8080


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    pipeline: PipelineSettings = PipelineSettings()
    api: ApiSettings = ApiSettings()
