"""Configuration management for Veritas."""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _find_repo_root(start_dir: Path) -> Path:
    """Find repository root by walking upward looking for .git or pyproject.toml."""
    current_dir = start_dir

    while True:
        if (current_dir / ".git").exists() or (current_dir / "pyproject.toml").exists():
            return current_dir

        parent_dir = current_dir.parent

        # Stop at filesystem root; fall back to where we started
        if parent_dir == current_dir:
            return start_dir

        current_dir = parent_dir


def _load_repo_config_data(repo_root: Path) -> Optional[dict]:
    """Load the [veritas] table from .veritas/config.toml if it exists."""
    config_file = repo_root / ".veritas" / "config.toml"

    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring unreadable config file {config_file}: {e}")
        return None

    table = data.get("veritas")
    if not isinstance(table, dict):
        return None
    return table


class VeritasConfig(BaseModel):
    """Runtime settings for the veritas CLI.

    Only presentation concerns live here. The kernel identity (versions,
    hash algorithm, encoding) is fixed in code and never configurable.
    """

    log_level: str = Field(default="WARNING", description="Logging level for the CLI")
    document_indent: int = Field(default=2, ge=0, le=8, description="Indent for written ledger documents")

    model_config = {"frozen": True}

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level

    @classmethod
    def from_env(cls, cli_log_level: Optional[str] = None) -> "VeritasConfig":
        """Resolve configuration with the following precedence:

        1. CLI --log-level option (if provided)
        2. repo-local .veritas/config.toml ([veritas] table)
        3. VERITAS_* environment variables
        4. Defaults

        Raises:
            ValueError: If a resolved value is invalid
        """
        repo_config = _load_repo_config_data(_find_repo_root(Path.cwd())) or {}

        log_level = (
            cli_log_level
            or repo_config.get("log_level")
            or os.environ.get("VERITAS_LOG_LEVEL")
            or "WARNING"
        )

        indent: Any = repo_config.get("document_indent")
        if indent is None:
            indent = int(os.environ.get("VERITAS_DOCUMENT_INDENT", "2"))

        return cls(log_level=log_level, document_indent=indent)

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)
