"""
Shared pytest fixtures for the relay test suite.

This module provides fixtures that are automatically available to all test files:
- A fresh SessionRegistry / MessageRouter / ConnectionListener per test
- A factory for in-memory connections (see tests/fakes.py)
- A FastAPI TestClient wired to a fixed-table translation gateway

Every fixture is function-scoped: relay state never leaks between tests.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from polyglot_chat.config import RelayConfig
from polyglot_chat.core.listener import ConnectionListener
from polyglot_chat.core.registry import SessionRegistry
from polyglot_chat.core.router import MessageRouter
from tests.fakes import DictionaryGateway, RecordingConnection, TaggingGateway

# ============================================================================
# CORE FIXTURES
# ============================================================================


@pytest.fixture
def registry() -> SessionRegistry:
    """Empty session registry."""
    return SessionRegistry()


@pytest.fixture
def gateway() -> TaggingGateway:
    return TaggingGateway()


@pytest.fixture
def router(registry: SessionRegistry, gateway: TaggingGateway) -> MessageRouter:
    """Router without echo, backed by the tagging gateway."""
    return MessageRouter(registry, gateway)


@pytest.fixture
def listener(registry: SessionRegistry, router: MessageRouter) -> ConnectionListener:
    return ConnectionListener(registry, router)


@pytest.fixture
def make_connection():
    """Factory for RecordingConnection instances."""

    def _make(name: str = "") -> RecordingConnection:
        return RecordingConnection(name)

    return _make


# ============================================================================
# API FIXTURES
# ============================================================================


@pytest.fixture
def relay_config() -> RelayConfig:
    """Default configuration with translation switched off."""
    cfg = RelayConfig()
    cfg.translation.enabled = False
    return cfg


@pytest.fixture
def app_gateway() -> DictionaryGateway:
    return DictionaryGateway({("hello", "fr"): "bonjour", ("bonjour", "en"): "hello"})


@pytest.fixture
def test_client(
    relay_config: RelayConfig, app_gateway: DictionaryGateway
) -> Generator[TestClient, None, None]:
    """
    FastAPI TestClient around a fresh relay.

    The client is entered as a context manager so the application lifespan
    (gateway open/close) runs.
    """
    from polyglot_chat.api.server import create_app

    app = create_app(relay_config, gateway=app_gateway)
    with TestClient(app) as client:
        yield client
