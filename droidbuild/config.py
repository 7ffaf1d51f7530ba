"""Configuration settings for droidbuild.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.

Besides the DROIDBUILD_ prefixed variables, the conventional Android
variables are honoured: ANDROID_BUILD selects the backend,
BUILD_MULTIPLE_APKS turns on per-architecture APKs for gradle, and
ANDROID_HOME locates the SDK.
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from droidbuild.errors import ConfigError
from droidbuild.types import BackendName


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the DROIDBUILD_
    prefix, or the legacy Android names where noted.
    """

    model_config = SettingsConfigDict(
        env_prefix="DROIDBUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )

    # Paths
    project_root: Path = Field(
        default_factory=Path.cwd,
        description="Root directory of the Android project",
    )
    android_home: Path | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "DROIDBUILD_ANDROID_HOME", "ANDROID_HOME", "ANDROID_SDK_ROOT"
        ),
        description="Android SDK location",
    )
    adb_path: str = Field(
        default="adb",
        description="adb executable used to talk to devices",
    )

    # Build behaviour
    backend: BackendName = Field(
        default=BackendName.ANT,
        validation_alias=AliasChoices("DROIDBUILD_BACKEND", "ANDROID_BUILD"),
        description="Default build backend when no backend option is given",
    )
    multiple_apks: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "DROIDBUILD_MULTIPLE_APKS", "BUILD_MULTIPLE_APKS"
        ),
        description="Produce one APK per CPU architecture (gradle only)",
    )
    build_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Timeout for build tools in seconds (unset waits forever)",
    )

    # Operational
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("multiple_apks", mode="before")
    @classmethod
    def validate_multiple_apks(cls, v: object) -> object:
        """Treat any non-empty string as on, like BUILD_MULTIPLE_APKS always has."""
        if isinstance(v, str):
            return bool(v.strip())
        return v


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ConfigError: If an environment variable holds an invalid value.
    """
    try:
        return Settings()
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}={err.get('input')!r}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
