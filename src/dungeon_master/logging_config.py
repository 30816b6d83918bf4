import logging
import os

ENV_LOG_LEVEL = "DM_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def resolve_level(verbosity: int = 0, default_level: int = logging.WARNING) -> int:
    """Map -v counts to a level; DM_LOG_LEVEL wins over both when it names a level."""
    level = default_level
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    level_name = os.getenv(ENV_LOG_LEVEL)
    if level_name:
        named = logging.getLevelName(level_name.upper())
        if isinstance(named, int):
            level = named
    return level


def configure_logging(verbosity: int = 0, default_level: int = logging.WARNING) -> int:
    level = resolve_level(verbosity, default_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    return level
