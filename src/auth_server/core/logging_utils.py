"""Central logging utilities for the authorization server.

Every module obtains its logger through ``get_logger``, so all records sit
under the ``auth_server`` namespace and share one handler setup. Token
values, client secrets and passwords are never passed to a logger; log
identifiers (client id, user id, jti) instead.
"""

from __future__ import annotations

import logging
from typing import Final

from beartype import beartype

__all__: Final = [
    "ROOT_LOGGER_NAME",
    "configure_logging",
    "get_logger",
]

ROOT_LOGGER_NAME: Final = "auth_server"
_DEFAULT_LOG_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_handler_installed: bool = False


@beartype
def configure_logging(
    *, level: int | str | None = None, fmt: str = _DEFAULT_LOG_FORMAT
) -> None:
    """Install the root handler on first use and apply ``level``.

    The handler is installed once. ``level`` is applied to the
    ``auth_server`` namespace on every call, so startup code can raise or
    lower verbosity after modules have already created their loggers.
    """
    global _handler_installed
    if not _handler_installed:
        logging.basicConfig(level=logging.INFO, format=fmt)
        _handler_installed = True

    if level is not None:
        if isinstance(level, str):
            level = level.upper()
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)


@beartype
def get_logger(name: str | None = None, *, level: int | None = None) -> logging.Logger:
    """Return a logger under the ``auth_server`` namespace."""
    configure_logging()
    logger = logging.getLogger(name or ROOT_LOGGER_NAME)
    if level is not None:
        logger.setLevel(level)
    return logger
