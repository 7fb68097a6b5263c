#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings for the Assistants bridge

Contains environment variable names, defaults, tool bindings and the
immutable BridgeConfig read once at startup.
"""
import os
import pathlib
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from ..core.errors import ConfigurationError

# Load environment variables
load_dotenv()

# Path configurations
SCRIPT_DIR = pathlib.Path(__file__).resolve().parent.parent.parent
LOGS_DIR = pathlib.Path(os.getenv("LOG_DIR", str(SCRIPT_DIR / "logs")))

# Server metadata
SERVER_NAME = "openai-assistants-bridge"
SERVER_VERSION = "1.1.0"

# API configuration
DEFAULT_BASE_URL = "https://api.openai.com/v1"
OPENAI_BETA_HEADER = "assistants=v2"

DEFAULT_POLL_TIMEOUT_MS = 90_000
DEFAULT_POLL_INTERVAL_MS = 500
DEFAULT_MAX_RETRIES = 3
DEFAULT_MAX_CACHE_SIZE = 100
DEFAULT_MESSAGES_LIMIT = 10
DEFAULT_RETRY_INITIAL_DELAY_MS = 1000
DEFAULT_RETRY_MAX_DELAY_MS = 30_000
DEFAULT_RETRY_BACKOFF_MULTIPLIER = 2.0
DEFAULT_REQUEST_TIMEOUT_S = 60.0

# Environment variable names
ENV_API_KEY = "OPENAI_API_KEY"
ENV_BASE_URL = "OPENAI_BASE_URL"
ENV_POLL_TIMEOUT_MS = "OPENAI_POLL_TIMEOUT_MS"
ENV_POLL_INTERVAL_MS = "OPENAI_POLL_INTERVAL_MS"
ENV_MAX_RETRIES = "OPENAI_MAX_RETRIES"
ENV_MAX_CACHE_SIZE = "BRIDGE_MAX_CACHE_SIZE"

ENV_ASSISTANT_UX = "OPENAI_ASSISTANT_UX"
ENV_ASSISTANT_PERSONAS = "OPENAI_ASSISTANT_PERSONAS"
ENV_ASSISTANT_UI = "OPENAI_ASSISTANT_UI"
ENV_ASSISTANT_MICROCOPY = "OPENAI_ASSISTANT_MICROCOPY"
ENV_ASSISTANT_A11Y = "OPENAI_ASSISTANT_A11Y"
ENV_ASSISTANT_SUPER = "OPENAI_ASSISTANT_SUPER"

# Tool names exposed to the calling host
TOOL_UX_CONSULTANT = "ux_consultant_review"
TOOL_PERSONAS = "personas_and_journeys"
TOOL_UI_CRITIQUE = "ui_critique"
TOOL_MICROCOPY = "microcopy_rewrite"
TOOL_A11Y = "a11y_review"
TOOL_SUPER_AGENT = "super_agent_review"
TOOL_RESET_ALL = "reset_all_specialists"
TOOL_LIST_STATUS = "list_specialists_status"
TOOL_HEALTH_CHECK = "check_openai_connection"

# Specialist tool -> assistant id environment key
ASSISTANT_ENV_BY_TOOL: Dict[str, str] = {
    TOOL_UX_CONSULTANT: ENV_ASSISTANT_UX,
    TOOL_PERSONAS: ENV_ASSISTANT_PERSONAS,
    TOOL_UI_CRITIQUE: ENV_ASSISTANT_UI,
    TOOL_MICROCOPY: ENV_ASSISTANT_MICROCOPY,
    TOOL_A11Y: ENV_ASSISTANT_A11Y,
    TOOL_SUPER_AGENT: ENV_ASSISTANT_SUPER,
}


@dataclass(frozen=True)
class BridgeConfig:
    """Process-wide settings, read once at startup."""
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    poll_timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    max_cache_size: int = DEFAULT_MAX_CACHE_SIZE
    messages_limit: int = DEFAULT_MESSAGES_LIMIT
    retry_initial_delay_ms: int = DEFAULT_RETRY_INITIAL_DELAY_MS
    retry_max_delay_ms: int = DEFAULT_RETRY_MAX_DELAY_MS
    retry_backoff_multiplier: float = DEFAULT_RETRY_BACKOFF_MULTIPLIER
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S
    assistant_ids: Mapping[str, str] = field(default_factory=dict)

    def assistant_id_for(self, env_key: str) -> str:
        assistant_id = self.assistant_ids.get(env_key)
        if not assistant_id:
            raise ConfigurationError(f"Missing required environment variable: {env_key}", missing=[env_key])
        return assistant_id

    def public_view(self) -> Dict[str, object]:
        """Settings that are safe to report back to the caller."""
        return {
            "poll_timeout_ms": self.poll_timeout_ms,
            "poll_interval_ms": self.poll_interval_ms,
            "max_retries": self.max_retries,
            "base_url": self.base_url,
            "max_cache_size": self.max_cache_size,
        }


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def load_config(environ: Optional[Mapping[str, str]] = None) -> BridgeConfig:
    """Build the BridgeConfig from the environment.

    Every missing required binding is collected so the startup failure
    names all of them at once.
    """
    env = os.environ if environ is None else environ

    missing = []
    api_key = env.get(ENV_API_KEY)
    if not api_key:
        missing.append(ENV_API_KEY)

    assistant_ids: Dict[str, str] = {}
    for env_key in ASSISTANT_ENV_BY_TOOL.values():
        assistant_id = env.get(env_key)
        if assistant_id:
            assistant_ids[env_key] = assistant_id
        else:
            missing.append(env_key)

    if missing:
        raise ConfigurationError(
            f"Missing required environment variable(s): {', '.join(missing)}",
            missing=missing,
        )

    poll_timeout_ms = _env_int(env, ENV_POLL_TIMEOUT_MS, DEFAULT_POLL_TIMEOUT_MS)
    if poll_timeout_ms <= 0:
        poll_timeout_ms = DEFAULT_POLL_TIMEOUT_MS
    poll_interval_ms = _env_int(env, ENV_POLL_INTERVAL_MS, DEFAULT_POLL_INTERVAL_MS)
    if poll_interval_ms <= 0:
        poll_interval_ms = DEFAULT_POLL_INTERVAL_MS
    max_cache_size = _env_int(env, ENV_MAX_CACHE_SIZE, DEFAULT_MAX_CACHE_SIZE)
    if max_cache_size <= 0:
        max_cache_size = DEFAULT_MAX_CACHE_SIZE

    return BridgeConfig(
        api_key=api_key,
        base_url=(env.get(ENV_BASE_URL) or DEFAULT_BASE_URL).rstrip("/"),
        poll_timeout_ms=poll_timeout_ms,
        poll_interval_ms=poll_interval_ms,
        max_retries=max(0, _env_int(env, ENV_MAX_RETRIES, DEFAULT_MAX_RETRIES)),
        max_cache_size=max_cache_size,
        assistant_ids=assistant_ids,
    )
