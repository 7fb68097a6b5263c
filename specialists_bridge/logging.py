#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logger for the specialists_bridge package.

A child of the assistants_client logger, so it shares its handlers,
level and on/off switch.
"""
import logging

from assistants_client.core.logging import LOGGER_NAME

_logger = logging.getLogger(f"{LOGGER_NAME}.bridge")

logger = _logger
