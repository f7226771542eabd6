"""
Pytest configuration and shared fixtures.

Provides isolated engine configurations and event factories for unit and
integration tests. All timestamps are explicit so results never depend on
the wall-clock hour.
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable

from src.anomaly.engine import AnomalyEngine
from src.core.config import StreamConfig
from src.data.schema import (
    FileTransferEvent,
    LoginEvent,
    NetworkEvent,
    TransferDirection,
)


# Business hours, so only the first-location rule can fire for logins
T0 = datetime(2025, 2, 7, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def stream_config() -> StreamConfig:
    """
    Fixture providing a default stream configuration.

    Built directly rather than read from the environment so .env settings
    never leak into tests.
    """
    return StreamConfig()


@pytest.fixture
def engine(stream_config):
    """Engine with default settings, closed after the test."""
    engine = AnomalyEngine(stream_config)
    yield engine
    engine.close()


@pytest.fixture
def make_login() -> Callable[..., LoginEvent]:
    counter = {"n": 0}

    def _make(user_id="alice", geo="USA", occurred_at=T0, **overrides) -> LoginEvent:
        counter["n"] += 1
        data = {
            "id": f"login-{counter['n']}",
            "user_id": user_id,
            "geo": geo,
            "occurred_at": occurred_at,
            "source_ip": "10.0.0.5",
            "device": "MacOS-Safari",
        }
        data.update(overrides)
        return LoginEvent(**data)

    return _make


@pytest.fixture
def make_network() -> Callable[..., NetworkEvent]:
    counter = {"n": 0}

    def _make(occurred_at=T0, **overrides) -> NetworkEvent:
        counter["n"] += 1
        data = {
            "id": f"net-{counter['n']}",
            "occurred_at": occurred_at,
            "requests_observed": 80,
            "source_ip": "10.0.1.7",
            "target": "api-gateway",
        }
        data.update(overrides)
        return NetworkEvent(**data)

    return _make


@pytest.fixture
def make_transfer() -> Callable[..., FileTransferEvent]:
    counter = {"n": 0}

    def _make(size_mb=5.0, occurred_at=T0, **overrides) -> FileTransferEvent:
        counter["n"] += 1
        data = {
            "id": f"xfer-{counter['n']}",
            "occurred_at": occurred_at,
            "user_id": "bob",
            "size_mb": size_mb,
            "direction": TransferDirection.UPLOAD,
            "destination": "internal_server",
        }
        data.update(overrides)
        return FileTransferEvent(**data)

    return _make


@pytest.fixture
def network_burst(make_network):
    """Factory for ``n`` network events spaced 1ms apart starting at T0."""

    def _burst(n: int, start=T0):
        return [make_network(occurred_at=start + timedelta(milliseconds=i)) for i in range(n)]

    return _burst


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
