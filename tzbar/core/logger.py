import logging
import logging.handlers
import os
import sys

from tzbar.core.config_paths import get_log_file

LOGGER_NAME = "tzbar"

# Optional env override for log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
_ENV_LOG_LEVEL = os.getenv("TZBAR_LOG_LEVEL", "").strip().upper()
_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "DISABLED": None,
}


def _get_log_file() -> str:
    return str(get_log_file())


def _supports_color():
    return sys.stdout.isatty()


class ColorFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record):
        msg = super().format(record)
        if _supports_color():
            color = self.COLORS.get(record.levelname)
            if color:
                return f"{color}{msg}{self.RESET}"
        return msg


def setup_logger(name: str = LOGGER_NAME, log_to_console=True, log_level=logging.INFO):
    # Allow env var override
    if _ENV_LOG_LEVEL in _LEVEL_MAP:
        log_level = _LEVEL_MAP[_ENV_LOG_LEVEL]
    logger = logging.getLogger(name)
    if logger.handlers and log_level is not None:
        # Update existing handlers if already configured
        for h in logger.handlers:
            h.setLevel(log_level)
        logger.setLevel(log_level)
        logger.disabled = False
        return logger

    logger.handlers = []
    if log_level is None:
        logger.setLevel(logging.CRITICAL + 1)
        logger.disabled = True
        return logger

    logger.setLevel(log_level)
    logger.disabled = False

    if log_to_console:
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(log_level)
        ch.setFormatter(ColorFormatter("[%(levelname)s] %(message)s"))
        logger.addHandler(ch)

    log_file = None
    try:
        log_file = _get_log_file()
        fh = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        fh.setLevel(log_level)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(fh)
        logger.debug("Logger initialized. Log file: %s", log_file)
    except Exception as e:
        logger.error("Logger: failed to open log file %s: %s", log_file, e)

    return logger


log = setup_logger()


def set_log_level(level_name: str) -> None:
    """
    Update the global logger level (both console and file handlers) at runtime.
    """
    level_name = level_name.strip().upper()
    lvl = _LEVEL_MAP.get(level_name, logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)
    if lvl is None:
        logger.disabled = True
        for h in list(logger.handlers):
            logger.removeHandler(h)
        logger.setLevel(logging.CRITICAL + 1)
        return

    # Re-enable if previously disabled
    logger.disabled = False
    if not logger.handlers:
        setup_logger(name=LOGGER_NAME, log_level=lvl)
        return
    logger.setLevel(lvl)
    for h in logger.handlers:
        h.setLevel(lvl)


def get_log_level() -> str:
    """
    Return the current global log level name.
    """
    logger = logging.getLogger(LOGGER_NAME)
    return logging.getLevelName(logger.getEffectiveLevel())
