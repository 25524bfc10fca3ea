"""Environment settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Process-level settings read from the environment or ``.env``.

    Policy values live in ``NotifierConfig``; these only select where that
    config comes from and how the process logs.
    """

    model_config = SettingsConfigDict(
        env_prefix="HNOTIFY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config: Path | None = Field(default=None, description="YAML config path")
    log_level: str = Field(default="info")
    json_logs: bool = Field(default=True)
    jsonl_path: Path | None = Field(
        default=None, description="Default output file for the jsonl sink"
    )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
