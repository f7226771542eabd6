"""
Canonical attack scenarios for demos and integration tests.

Each scenario synthesizes ordinary events and pushes them through
AnomalyEngine.ingest, so detection runs exactly as it does for real traffic.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from enum import Enum
from math import ceil
from typing import List, Optional
from uuid import uuid4

from src.data.schema import FileTransferEvent, LoginEvent, NetworkEvent, TransferDirection

from .engine import AnomalyEngine
from .schema import IngestResult


class SimulationKind(str, Enum):
    """Available attack scenarios."""

    LOGIN = "login"
    NETWORK = "network"
    DATA_THEFT = "data_theft"


def _random_ip(prefix: str) -> str:
    return f"{prefix}.{random.randint(0, 255)}"


def high_severity_burst_size(engine: AnomalyEngine) -> int:
    """Smallest number of network events in one interval that yields a High anomaly."""
    normal = engine.settings.baselines.normal_requests_per_minute
    high_multiplier = engine.settings.detection.network_high_multiplier
    return ceil((high_multiplier + 1) * normal)


def simulate_anomaly(
    engine: AnomalyEngine,
    kind: SimulationKind,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[IngestResult]:
    """
    Inject one canonical scenario.

    - LOGIN: a login from the configured high-risk geography
    - NETWORK: a burst of network events inside one rate interval
    - DATA_THEFT: a single oversized upload to an external destination

    Args:
        engine: Engine to ingest into
        kind: Scenario to run
        user_id: Identity to use (random when omitted)
        now: Timestamp of the scenario (current UTC time when omitted)

    Returns:
        One IngestResult per injected event, in ingestion order
    """
    kind = SimulationKind(kind)
    now = now or datetime.now(timezone.utc)
    run_id = f"sim_{int(now.timestamp() * 1000)}_{uuid4().hex[:8]}"
    sim = engine.settings.simulation

    if kind == SimulationKind.LOGIN:
        event = LoginEvent(
            id=run_id,
            occurred_at=now,
            user_id=user_id or f"user_{random.randint(0, 99)}",
            geo=sim.login_geo,
            source_ip=_random_ip("185.220.101"),
            device=sim.login_device,
        )
        return [engine.ingest(event)]

    if kind == SimulationKind.NETWORK:
        burst = sim.burst_size or high_severity_burst_size(engine)
        events = [
            NetworkEvent(
                id=f"{run_id}_{i}",
                occurred_at=now + timedelta(milliseconds=i),
                requests_observed=5000,
                source_ip=_random_ip("192.168.1"),
            )
            for i in range(burst)
        ]
        return engine.ingest_many(events)

    event = FileTransferEvent(
        id=run_id,
        occurred_at=now,
        user_id=user_id or f"user_{random.randint(0, 49)}",
        size_mb=sim.exfiltration_size_mb,
        direction=TransferDirection.UPLOAD,
        destination=sim.exfiltration_destination,
        file_name="sensitive_data_export.zip",
    )
    return [engine.ingest(event)]
