"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


class MonitorConfig(BaseSettings):
    sweep_interval_ms: int = Field(default=5000, gt=0)
    visit_expiry_ms: int = Field(default=2000, ge=0)
    send_timeout_ms: int = Field(default=1000, gt=0)

    @property
    def sweep_interval(self) -> float:
        return self.sweep_interval_ms / 1000

    @property
    def visit_expiry(self) -> float:
        return self.visit_expiry_ms / 1000

    @property
    def send_timeout(self) -> float:
        return self.send_timeout_ms / 1000


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML sits below the environment so PORT etc. win over config.yaml.
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=_CONFIG_PATH),
        )


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides."""
    return Settings()
