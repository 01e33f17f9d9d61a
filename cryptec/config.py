"""
Configuration for cryptec.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

# Library version - update this for each release
VERSION = "1.0.0"


@dataclass
class Config:
    """Library configuration."""

    # Algorithm used when a binder is created without one
    DEFAULT_ALGORITHM: str = os.getenv("CRYPTEC_ALGORITHM", "aes-256-ctr")

    # Level applied to the "cryptec" logger by configure_logging()
    LOG_LEVEL: str = os.getenv("CRYPTEC_LOG_LEVEL", "WARNING")


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Set the level of the package logger. No handlers are installed."""
    logger = logging.getLogger("cryptec")
    logger.setLevel((level or config.LOG_LEVEL).upper())
    return logger


# Global config instance
config = Config()
