"""Configuration for the reporting core.

Settings are resolved once and then passed explicitly: the result file
manager receives a results directory instead of reading the working directory
on its own. Values come from, in order of precedence:

1. Programmatic overrides passed to ``resolve_settings``.
2. Environment variables with the ``CC_REPORT_`` prefix.
3. An optional ``.env`` file, only when explicitly requested.
4. Defaults below.

Retention limits are intentionally not settings; callers pass them to
``ResultFileManager.clean_old_result_files``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cc_report.constants import DEFAULT_COMPRESSION_PRESET, RESULTS_SUBDIR
from cc_report.exceptions import ConfigurationError


class ReportSettings(BaseSettings):
    """Pydantic settings schema for report output."""

    model_config = SettingsConfigDict(
        env_prefix="CC_REPORT_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    project_root: Path = Field(
        default_factory=Path.cwd,
        description="Directory the results subdirectory is resolved against",
    )

    results_subdir: str = Field(
        default=RESULTS_SUBDIR,
        description="Relative location of result files under project_root",
        min_length=1,
    )

    compression_preset: int = Field(
        default=DEFAULT_COMPRESSION_PRESET,
        description="xz preset used when writing result files",
        ge=0,
        le=9,
    )

    debug_log_path: str | None = Field(
        default=None,
        description="Debug log surfaced to the text consumer, if any",
    )

    @field_validator("results_subdir")
    @classmethod
    def _relative_subdir(cls, v: str) -> str:
        if Path(v).is_absolute():
            raise ValueError("results_subdir must be relative to project_root")
        return v

    @property
    def results_dir(self) -> Path:
        return self.project_root / self.results_subdir


def resolve_settings(
    overrides: dict[str, Any] | None = None,
    env_file: str | os.PathLike[str] | None = None,
) -> ReportSettings:
    """Build settings from overrides, environment and an optional .env file.

    Raises:
        ConfigurationError: If any value fails validation.
    """
    try:
        return ReportSettings(_env_file=env_file, **(overrides or {}))  # type: ignore[call-arg]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid report settings: {e}") from e
