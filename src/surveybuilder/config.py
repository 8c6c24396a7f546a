"""
Configuration for scripts and services built on the survey builder.

Values come from environment variables, optionally loaded from a .env file
in the working directory:

    SURVEYBUILDER_STORAGE_DIR       directory of the file store (default: surveys)
    SURVEYBUILDER_LOG_LEVEL         logging level name (default: INFO)
    SURVEYBUILDER_DEFAULT_LOCALE    locale of new surveys (default: en)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .model import Locale


DEFAULT_STORAGE_DIR = "surveys"
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    storage_dir: Path
    log_level: str = DEFAULT_LOG_LEVEL
    default_locale: Locale = Locale.EN


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Read settings from the environment.

    Args:
        env_file: Path to a .env file. If None, a .env in the current
            directory is used when present. Variables already set in the
            environment take precedence over the file.

    Raises:
        ValueError: for an unknown locale or log level
    """
    load_dotenv(env_file)

    log_level = os.getenv("SURVEYBUILDER_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Unknown log level: {log_level}")

    return Settings(
        storage_dir=Path(os.getenv("SURVEYBUILDER_STORAGE_DIR", DEFAULT_STORAGE_DIR)),
        log_level=log_level,
        default_locale=Locale(os.getenv("SURVEYBUILDER_DEFAULT_LOCALE", Locale.EN.value)),
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Set up root logging for command-line use. Libraries should not call this."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
