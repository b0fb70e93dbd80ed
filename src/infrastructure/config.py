"""Server settings loaded from the environment."""

import os
import sys
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv
from loguru import logger

DEFAULT_COMMIT_TIMEOUT_MINUTES = 20


@dataclass(frozen=True)
class Settings:
    """Server configuration."""

    secret: str
    log_level: str = "INFO"
    commit_timeout: timedelta = timedelta(minutes=DEFAULT_COMMIT_TIMEOUT_MINUTES)


def load_settings(env_file: str | None = None) -> Settings:
    """
    Load settings from the environment, reading a ``.env`` file first.

    Raises:
        RuntimeError: If ``CODEGRINDER_SECRET`` is not set
    """
    load_dotenv(env_file)

    secret = os.getenv("CODEGRINDER_SECRET")
    if not secret:
        raise RuntimeError("CODEGRINDER_SECRET environment variable not set")

    timeout_minutes = int(
        os.getenv("CODEGRINDER_COMMIT_TIMEOUT_MINUTES", str(DEFAULT_COMMIT_TIMEOUT_MINUTES))
    )

    return Settings(
        secret=secret,
        log_level=os.getenv("CODEGRINDER_LOG_LEVEL", "INFO").upper(),
        commit_timeout=timedelta(minutes=timeout_minutes),
    )


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level)
