"""Logging setup for scripts that drive the exercises."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import ConfigurationError

# httpx logs every request at INFO; DML traffic is only interesting at DEBUG.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _level_from_env(default: int) -> int:
    raw = optional_env_var("SFDML_LOG_LEVEL")
    if raw is None:
        return default
    level = logging.getLevelNamesMapping().get(raw.upper())
    if level is None:
        raise ConfigurationError(f"SFDML_LOG_LEVEL is not a logging level: {raw!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> int:
    """Configure the root logger and return the level in effect.

    ``level`` falls back to ``SFDML_LOG_LEVEL`` and then to INFO. HTTP client
    loggers stay at WARNING unless the root level is DEBUG. Pass
    ``force=True`` to reconfigure an already configured root logger.
    """

    resolved = level if level is not None else _level_from_env(logging.INFO)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
        )
    return resolved
