"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from assistants_client.config.settings import BridgeConfig
from assistants_client.core.session import BridgeSession

from helpers import FakeAssistantsApi, make_config


@pytest.fixture
def config() -> BridgeConfig:
    return make_config()


@pytest.fixture
def fake_api() -> FakeAssistantsApi:
    return FakeAssistantsApi()


@pytest.fixture
def session(config: BridgeConfig) -> BridgeSession:
    return BridgeSession(config.max_cache_size)
