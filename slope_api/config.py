from __future__ import annotations

import os
import subprocess
from importlib import metadata
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env", override=False)

GSI_ELEVATION_URL = "https://cyberjapandata2.gsi.go.jp/general/dem/scripts/getelevation.php"


def _get_project_version() -> str:
    try:
        return metadata.version("slope-survey-api")
    except metadata.PackageNotFoundError:
        return "0.1.0"


def _get_git_commit() -> str:
    if (value := os.getenv("GIT_COMMIT")):
        return value

    if (REPO_ROOT / ".git").exists():
        try:
            result = subprocess.run(
                ["git", "rev-parse", "HEAD"],
                cwd=REPO_ROOT,
                capture_output=True,
                text=True,
                check=True,
            )
            return result.stdout.strip()
        except (subprocess.CalledProcessError, FileNotFoundError):
            pass

    return "unknown"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    app_name: str = "Slope Survey API"
    version: str = Field(default_factory=_get_project_version)
    environment: str = Field(default="dev", validation_alias="APP_ENV")
    git_commit: str = Field(default_factory=_get_git_commit, validation_alias="GIT_COMMIT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Elevation source
    elevation_api_url: str = Field(default=GSI_ELEVATION_URL, validation_alias="ELEVATION_API_URL")
    elevation_request_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="ELEVATION_REQUEST_TIMEOUT_SECONDS",
    )
    elevation_cache_ttl_seconds: float = Field(default=3600.0, validation_alias="ELEVATION_CACHE_TTL_SECONDS")
    elevation_cache_max_entries: int = Field(default=50_000, validation_alias="ELEVATION_CACHE_MAX_ENTRIES")
    elevation_batch_concurrency: int = Field(default=10, validation_alias="ELEVATION_BATCH_CONCURRENCY")

    # Analysis limits
    slope_offset_meters: float = Field(default=10.0, validation_alias="SLOPE_OFFSET_METERS")
    max_grid_points: int = Field(default=500, validation_alias="MAX_GRID_POINTS")
    max_grid_candidates: int = Field(default=100_000, validation_alias="MAX_GRID_CANDIDATES")

    @field_validator("elevation_batch_concurrency", mode="before")
    @classmethod
    def _validate_concurrency(cls, value: object) -> int:
        val = int(value)  # raises if not numeric
        if not 1 <= val <= 50:
            raise ValueError("ELEVATION_BATCH_CONCURRENCY must be between 1 and 50")
        return val

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        if value is None:
            return "INFO"
        return str(value).strip().upper()


settings = AppSettings()
