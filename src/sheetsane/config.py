"""Processing limits and runtime settings."""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# File size limit: 10MB
MAX_FILE_BYTES = 10 * 1024 * 1024

# Workbook processing limits
MAX_SHEETS = 20
MAX_ROWS_PER_SHEET = 10_000
MAX_COLS_PER_SHEET = 200

# Stored results expire after 30 minutes
RESULT_TTL_SECONDS = 30 * 60

ALLOWED_EXTENSIONS = (".xlsx", ".xlsm", ".xltx", ".xltm", ".xls")


@dataclass(frozen=True)
class ProcessingLimits:
    """Ceilings applied before any check runs."""

    max_file_bytes: int = MAX_FILE_BYTES
    max_sheets: int = MAX_SHEETS
    max_rows_per_sheet: int = MAX_ROWS_PER_SHEET
    max_cols_per_sheet: int = MAX_COLS_PER_SHEET

    def __post_init__(self):
        for name in (
            "max_file_bytes",
            "max_sheets",
            "max_rows_per_sheet",
            "max_cols_per_sheet",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")


DEFAULT_LIMITS = ProcessingLimits()


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the processor, storage and CLI."""

    limits: ProcessingLimits = field(default_factory=ProcessingLimits)
    result_ttl_seconds: int = RESULT_TTL_SECONDS
    database_url: Optional[str] = None


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}")


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load settings from the environment, optionally seeded from a .env file.

    Args:
        env_file: Optional path to a dotenv file. Values already present in
            the process environment take precedence.

    Returns:
        Settings instance

    Raises:
        ValueError: If a configured value is not a positive integer
    """
    if env_file and Path(env_file).exists():
        load_dotenv(env_file)
        logger.info(f"Loaded settings from {env_file}")

    limits = ProcessingLimits(
        max_file_bytes=_int_from_env("SHEETSANE_MAX_FILE_BYTES", MAX_FILE_BYTES),
        max_sheets=_int_from_env("SHEETSANE_MAX_SHEETS", MAX_SHEETS),
        max_rows_per_sheet=_int_from_env("SHEETSANE_MAX_ROWS_PER_SHEET", MAX_ROWS_PER_SHEET),
        max_cols_per_sheet=_int_from_env("SHEETSANE_MAX_COLS_PER_SHEET", MAX_COLS_PER_SHEET),
    )
    ttl = _int_from_env("SHEETSANE_RESULT_TTL_SECONDS", RESULT_TTL_SECONDS)
    if ttl < 1:
        raise ValueError(f"SHEETSANE_RESULT_TTL_SECONDS must be positive, got {ttl}")

    database_url = os.getenv("SHEETSANE_DATABASE_URL") or None

    logger.debug(f"Processing limits: {limits}")
    return Settings(limits=limits, result_ttl_seconds=ttl, database_url=database_url)
