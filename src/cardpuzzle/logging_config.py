import logging
import os

ENV_LOG_LEVEL = "CARDPUZZLE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-7s cardpuzzle[%(name)s] %(message)s"


def resolve_level(default_level: int = logging.INFO) -> int:
    """Level named by CARDPUZZLE_LOG_LEVEL, or ``default_level`` if unset or unknown."""
    level_name = os.getenv(ENV_LOG_LEVEL, "").strip()
    if not level_name:
        return default_level
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else default_level


def configure_logging(default_level: int = logging.INFO) -> None:
    """Configure the root logger for the CLI; the env var wins over ``default_level``."""
    logging.basicConfig(level=resolve_level(default_level), format=LOG_FORMAT, datefmt="%H:%M:%S")
