"""
Schema definitions for derived facts: anomalies and metrics snapshots.

All outputs are immutable once published. Each anomaly references its source
event and carries a human-readable description citing the numbers that
triggered it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from src.data.schema import Event


class AnomalySeverity(str, Enum):
    """Severity levels for anomalies, ordered LOW < MEDIUM < HIGH."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, AnomalySeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, AnomalySeverity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, AnomalySeverity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, AnomalySeverity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_ORDER = [AnomalySeverity.LOW, AnomalySeverity.MEDIUM, AnomalySeverity.HIGH]


class AnomalyCategory(str, Enum):
    """
    Anomaly categories.

    File transfer events surface as DATA_THEFT anomalies.
    """

    LOGIN = "login"
    NETWORK = "network"
    DATA_THEFT = "data_theft"


class Anomaly(BaseModel):
    """
    A detection derived from exactly one ingested event.

    Fields:
    - id: unique identifier
    - source_event_id: id of the event that triggered the detection
    - category: login, network or data_theft
    - severity: categorical severity
    - description: explanation embedding the triggering values
    - confidence: fixed per-rule confidence in [0, 1]
    - risk_score: integer in [0, 100]
    - detected_at: detection timestamp
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    source_event_id: str
    category: AnomalyCategory
    severity: AnomalySeverity
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    risk_score: int = Field(ge=0, le=100)
    detected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MetricsSnapshot(BaseModel):
    """
    Counters after a given number of ingestions.

    Every field is monotonically non-decreasing across successive snapshots of
    the same engine, and the three category counters sum to total_anomalies.
    """

    model_config = ConfigDict(frozen=True)

    total_events: int = Field(0, ge=0)
    total_anomalies: int = Field(0, ge=0)
    login_anomalies: int = Field(0, ge=0)
    network_anomalies: int = Field(0, ge=0)
    data_theft_anomalies: int = Field(0, ge=0)


class IngestResult(BaseModel):
    """What one ingestion produced: the event, its anomaly if any, and the new metrics."""

    model_config = ConfigDict(frozen=True)

    event: Event
    anomaly: Optional[Anomaly] = None
    metrics: MetricsSnapshot
