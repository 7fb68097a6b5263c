#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging system for the Assistants bridge

Rotating file log plus console output on stderr. Level and on/off switch
come from LOG_LEVEL and LOG_ENABLED.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from ..config.settings import LOGS_DIR

LOGGER_NAME = "specialists"
LOG_FILE_NAME = "specialists_bridge.log"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class _EnabledFilter(logging.Filter):
    """Drops every record while logging is switched off."""

    enabled = True

    def filter(self, record: logging.LogRecord) -> bool:
        return self.enabled


_enabled_filter = _EnabledFilter()


def _level_from_env() -> int:
    return _LEVELS.get(os.getenv("LOG_LEVEL", "info").strip().lower(), logging.INFO)


def setup_logging() -> logging.Logger:
    """Configure the bridge logger"""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level_from_env())
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )

    try:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOGS_DIR / LOG_FILE_NAME,
            maxBytes=5*1024*1024,
            backupCount=3,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(_enabled_filter)
        logger.addHandler(file_handler)
    except OSError as e:
        print(f"Warning: file logging disabled ({e})", file=sys.stderr)

    # stdout carries the MCP stdio transport
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(_enabled_filter)
    logger.addHandler(console_handler)

    _enabled_filter.enabled = os.getenv("LOG_ENABLED", "true").strip().lower() != "false"
    return logger


def set_log_level(level: str) -> None:
    logger.setLevel(_LEVELS.get(level.strip().lower(), logging.INFO))


def set_logging_enabled(enabled: bool) -> None:
    _enabled_filter.enabled = enabled


def get_logging_config() -> dict:
    return {
        "level": logging.getLevelName(logger.level).lower(),
        "enabled": _enabled_filter.enabled,
    }


# Initialize logger
logger = setup_logging()
