import logging
from typing import Optional

from colorlog import ColoredFormatter
from app.core.settings import settings

LOGGER_NAME = "marsos"

LOG_FORMAT = (
    "%(log_color)s[%(asctime)s] [%(levelname)-8s] "
    "%(reset)s%(blue)s%(name)s:%(reset)s %(message)s"
)
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def build_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(
        ColoredFormatter(
            LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
            reset=True,
            log_colors=LOG_COLORS,
        )
    )
    return handler


def configure_logger(name: str = LOGGER_NAME, level: Optional[str] = None) -> logging.Logger:
    """Colored logger for ``name``; handlers are attached only once per process."""
    log = logging.getLogger(name)
    log.setLevel((level or settings.LOG_LEVEL).upper())
    if not log.handlers:
        log.addHandler(build_handler())
    log.propagate = False
    return log


logger = configure_logger()
