"""Typedrill configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Level, PolicyKind, SessionConfig
from .telemetry import TelemetryConfig, configure_telemetry
from .wordlists import JsonDirectoryWordSource, RedisWordSource, WordSource

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class WordSourceSettings(BaseSettings):
    """Where word lists are read from."""

    backend: Literal["json", "redis"] = Field(
        default="json", description="Word source backend"
    )
    directory: str = Field(
        default="data", description="Directory holding <language>-words.json"
    )
    redis_url: str = Field(
        default="redis://localhost:6379", description="Redis connection URL"
    )
    key_prefix: str = Field(
        default="typedrill:words:", description="Redis key prefix for word data"
    )

    model_config = SettingsConfigDict(env_prefix="TYPEDRILL_WORDS_")


class TelemetrySettings(BaseSettings):
    """OpenTelemetry configuration."""

    enabled: bool = Field(default=False, description="Enable OpenTelemetry")
    service_name: str = Field(default="typedrill", description="OTel service name")
    otlp_endpoint: Optional[str] = Field(
        default=None, description="OTLP/HTTP collector base URL"
    )
    sample_ratio: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Trace sampling ratio"
    )

    model_config = SettingsConfigDict(env_prefix="TYPEDRILL_TELEMETRY_")

    def to_config(self) -> TelemetryConfig:
        return TelemetryConfig(
            enabled=self.enabled,
            service_name=self.service_name,
            otlp_endpoint=self.otlp_endpoint,
            sample_ratio=self.sample_ratio,
        )


class TypedrillSettings(BaseSettings):
    """
    Typedrill configuration.

    Configuration can be loaded from:
    1. Environment variables (TYPEDRILL_*)
    2. .env file
    3. YAML config file (config_file or TYPEDRILL_CONFIG_FILE)
    4. Direct instantiation with parameters

    Explicit parameters override YAML values.

    Example usage:

        settings = TypedrillSettings()
        settings = TypedrillSettings(config_file="typedrill.yaml")
        settings = TypedrillSettings(
            duration_seconds=120,
            words=WordSourceSettings(backend="redis"),
        )
    """

    config_file: Optional[str] = Field(
        default=None, description="Path to YAML config file"
    )

    language: str = Field(default="english", min_length=1)
    level: Level = Field(default=Level.EASY)
    duration_seconds: int = Field(default=60, gt=0, description="Session length")
    policy: PolicyKind = Field(default=PolicyKind.WHOLE_WORD)
    allow_pause: bool = Field(default=False, description="Enable pause/resume")
    tick_interval_seconds: float = Field(
        default=1.0, gt=0, description="Seconds between countdown ticks"
    )
    shuffle: bool = Field(default=True, description="Shuffle word lists on load")

    words: WordSourceSettings = Field(default_factory=WordSourceSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_prefix="TYPEDRILL_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **data: Any):
        """Initialize settings, merging a YAML config file when one is set."""
        merged = data.pop("_merged", False)
        if merged:
            super().__init__(**data)
            return

        config_file = data.get("config_file") or os.getenv("TYPEDRILL_CONFIG_FILE")
        if config_file:
            super().__init__(**self._merge_yaml(config_file, data))
        else:
            super().__init__(**data)

    @classmethod
    def _merge_yaml(cls, config_file: str, data: dict[str, Any]) -> dict[str, Any]:
        merged_data = {**cls._load_yaml(config_file), **data}
        merged_data.setdefault("config_file", config_file)
        return merged_data

    @staticmethod
    def _load_yaml(file_path: str) -> dict[str, Any]:
        """
        Load configuration from YAML file.

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {file_path}")

        with path.open("r") as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}

        return data

    @classmethod
    def from_yaml(cls, file_path: str) -> "TypedrillSettings":
        """Create settings from YAML file."""
        return cls(_merged=True, **cls._merge_yaml(file_path, {}))

    def to_yaml(self, file_path: str) -> None:
        """Export settings to YAML file."""
        data = self.model_dump(
            mode="json", exclude_none=True, exclude={"config_file"}
        )
        with Path(file_path).open("w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def summary(self) -> str:
        """Human-readable configuration summary."""
        source = (
            f"redis {self.words.redis_url} ({self.words.key_prefix}*)"
            if self.words.backend == "redis"
            else f"json {self.words.directory}/"
        )
        lines = [
            "Typedrill Configuration:",
            f"  Session: {self.language}/{self.level.value}, {self.duration_seconds}s",
            f"  Policy: {self.policy.value}",
            f"  Pause: {'✓' if self.allow_pause else '✗'}",
            f"  Words: {source}",
            f"  Telemetry: {'✓' if self.telemetry.enabled else '✗'}",
        ]
        return "\n".join(lines)

    def session_config(self) -> SessionConfig:
        """Session settings for a SessionController."""
        return SessionConfig(
            language=self.language,
            level=self.level,
            duration_seconds=self.duration_seconds,
            policy=self.policy,
            allow_pause=self.allow_pause,
        )


def load_settings(
    config_file: Optional[str] = None, **overrides: Any
) -> TypedrillSettings:
    """Load settings with optional overrides."""
    if config_file:
        overrides["config_file"] = config_file
    return TypedrillSettings(**overrides)


def build_word_source(settings: TypedrillSettings) -> WordSource:
    """Build the word source selected by ``settings.words.backend``."""
    if settings.words.backend == "redis":
        return RedisWordSource.from_url(
            settings.words.redis_url, key_prefix=settings.words.key_prefix
        )
    return JsonDirectoryWordSource(settings.words.directory)


def configure_logging(
    level: int | str = logging.INFO, settings: TypedrillSettings | None = None
) -> None:
    """Install basic logging and, when enabled, trace correlation."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if settings is not None and settings.telemetry.enabled:
        configure_telemetry(settings.telemetry.to_config())
