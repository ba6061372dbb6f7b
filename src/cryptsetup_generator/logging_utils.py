from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

try:
    from systemd.journal import JournalHandler
except Exception:  # pragma: no cover
    JournalHandler = None

from . import constants

LOGGER_NAME = constants.PROGRAM_NAME

# systemd log level names, as accepted in SYSTEMD_LOG_LEVEL
_LEVELS = {
    "emerg": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "crit": logging.CRITICAL,
    "err": logging.ERROR,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "notice": logging.INFO,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def parse_level(name: Optional[str], default: int = logging.INFO) -> int:
    if not name:
        return default
    name = name.strip().lower()
    if name.isdigit():
        # syslog priorities 0..7
        prio = int(name)
        if prio <= 2:
            return logging.CRITICAL
        if prio == 3:
            return logging.ERROR
        if prio == 4:
            return logging.WARNING
        if prio <= 6:
            return logging.INFO
        return logging.DEBUG
    return _LEVELS.get(name, default)


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    env_level = os.environ.get("SYSTEMD_LOG_LEVEL")
    logger.setLevel(parse_level(env_level or level))
    if not logger.handlers:
        if JournalHandler:
            handler = JournalHandler(SYSLOG_IDENTIFIER=constants.PROGRAM_NAME)
            formatter = logging.Formatter("%(message)s")
        else:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def log_structured(logger: logging.Logger, message: str, extra_fields: Dict[str, Any]) -> None:
    # JournalHandler turns extra fields into journal fields; other handlers get them inline.
    handlers = getattr(logger, "handlers", [])
    try:
        iter(handlers)
    except TypeError:
        handlers = []
    if JournalHandler and any(isinstance(h, JournalHandler) for h in handlers):
        logger.info(message, extra=extra_fields)
        return
    if extra_fields:
        fields = " ".join(f"{key}={value}" for key, value in extra_fields.items())
        logger.info(f"{message} {fields}")
        return
    logger.info(message)
