"""
wcnt Configuration — pydantic-settings based.

Runtime knobs are read from environment variables (prefix WCNT_) or a .env file.
The warning kinds themselves live in Wcnt.toml, see wcnt.core.settings_loader.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process-wide settings sourced from environment variables."""

    # ── File names ──
    config_file_name: str = Field(
        default="Wcnt.toml", description="Settings file looked up in the start directory"
    )
    limits_file_name: str = Field(
        default="Limits.toml", description="Name of the per-directory limit declarations"
    )

    # ── Scanning ──
    max_concurrency: int | None = Field(
        default=None,
        ge=1,
        description="Max log files read and scanned at once. None means one task per file.",
    )
    skip_hidden: bool = Field(
        default=True, description="Skip hidden files and directories during discovery"
    )

    # ── Reporting ──
    display_path_components: int = Field(
        default=4, ge=1, description="Trailing path components shown for limit files"
    )
    log_level: str = Field(default="WARNING", description="Root log level for the CLI")

    model_config = {
        "env_prefix": "WCNT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Shared by the worker, discovery, reporting and the API
settings = Settings()
