"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rasterpages.exceptions import SettingsError

logger = logging.getLogger(__name__)

_SIZE_UNITS = ("KiB", "MiB", "GiB", "KB", "MB", "GB")


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_name: str = "rasterpages"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    engine_binary: str = Field(
        default="gm",
        validation_alias="ENGINE_BINARY",
        description="GraphicsMagick executable used for `convert` and `mogrify`.",
    )
    command_timeout: float = Field(
        default=300.0,
        gt=0,
        validation_alias="COMMAND_TIMEOUT",
        description="Hard wall-clock limit for one engine invocation, in seconds.",
    )
    memory_limit: str = Field(
        default="256MiB",
        validation_alias="ENGINE_MEMORY_LIMIT",
        description="Engine working memory limit (`-limit memory`).",
    )
    map_limit: str = Field(
        default="512MiB",
        validation_alias="ENGINE_MAP_LIMIT",
        description="Engine memory-mapped limit (`-limit map`).",
    )
    engine_threads: int = Field(
        default=2,
        ge=1,
        validation_alias="ENGINE_THREADS",
        description="Thread hint exported as OMP_NUM_THREADS.",
    )
    default_density: str = Field(
        default="150",
        validation_alias="DEFAULT_DENSITY",
        description="Rendering density (DPI) used when a request does not set one.",
    )
    max_output_lines: int = Field(
        default=10_000,
        ge=1,
        validation_alias="MAX_OUTPUT_LINES",
        description="Maximum number of distinct engine output lines kept per invocation.",
    )

    @field_validator("memory_limit", "map_limit")
    @classmethod
    def validate_limit(cls, value: str) -> str:
        """Ensure engine limits look like `<number><unit>`.

        Args:
            value (str): Raw limit value.

        Raises:
            ValueError: If the value has no numeric prefix or unknown unit.

        Returns:
            str: The stripped limit value.
        """
        candidate = value.strip()
        number = candidate.removesuffix(next((unit for unit in _SIZE_UNITS if candidate.endswith(unit)), ""))
        if not number.isdigit():
            message = f"Engine limit must be a size such as '256MiB', got '{value}'"
            raise ValueError(message)
        return candidate


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        if _is_missing_settings_error(exc):
            ensure_env_file_exists()
            try:
                return Settings()
            except Exception as retry_exc:
                raise SettingsError(exc=retry_exc) from retry_exc
        raise SettingsError(exc=exc) from exc


def ensure_env_file_exists(
    *,
    env_path: Path = Path(".env"),
    template_path: Path = Path(".env.template"),
) -> None:
    """Create `.env` from template when missing.

    Args:
        env_path (Path): Target environment file path.
        template_path (Path): Template file path.
    """
    if env_path.exists() or not template_path.exists():
        return
    env_path.write_text(template_path.read_text(encoding="utf-8"), encoding="utf-8")
    logger.info(
        "Created environment file from template",
        extra={"env_path": str(env_path), "template_path": str(template_path)},
    )


def _is_missing_settings_error(exc: Exception) -> bool:
    """Return whether the settings failure is due to missing values.

    Args:
        exc (Exception): Caught settings initialization error.

    Returns:
        bool: True when the error represents missing settings values.
    """
    if not isinstance(exc, ValidationError):
        return False
    return any(error.get("type") == "missing" for error in exc.errors())
