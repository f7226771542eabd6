"""
Dashboard-side subscriber with bounded display buffers.

The engine retains nothing it has published; a rendering layer keeps its own
recent history. DashboardFeed subscribes to all three engine streams and keeps
the newest items first.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Dict, List, Optional

from src.anomaly import AnomalyEngine, Anomaly, MetricsSnapshot, overall_severity
from src.data.schema import Event

DEFAULT_EVENT_LIMIT = 100
DEFAULT_ANOMALY_LIMIT = 50


class DashboardFeed:
    """
    Recent events, recent anomalies and the latest metrics snapshot.

    Example:
        >>> feed = DashboardFeed(engine)
        >>> engine.ingest(event)
        >>> engine.flush()
        >>> feed.recent_events()[0].id
    """

    def __init__(
        self,
        engine: AnomalyEngine,
        event_limit: int = DEFAULT_EVENT_LIMIT,
        anomaly_limit: int = DEFAULT_ANOMALY_LIMIT,
    ):
        self._lock = threading.Lock()
        self._events: Deque[Event] = deque(maxlen=event_limit)
        self._anomalies: Deque[Anomaly] = deque(maxlen=anomaly_limit)
        self._metrics: MetricsSnapshot = engine.metrics()

        self._subscriptions = [
            engine.subscribe_events(self._on_event),
            engine.subscribe_anomalies(self._on_anomaly),
            engine.subscribe_metrics(self._on_metrics),
        ]

    def _on_event(self, event: Event) -> None:
        with self._lock:
            self._events.appendleft(event)

    def _on_anomaly(self, anomaly: Anomaly) -> None:
        with self._lock:
            self._anomalies.appendleft(anomaly)

    def _on_metrics(self, metrics: MetricsSnapshot) -> None:
        with self._lock:
            self._metrics = metrics

    def recent_events(self) -> List[Event]:
        with self._lock:
            return list(self._events)

    def recent_anomalies(self) -> List[Anomaly]:
        with self._lock:
            return list(self._anomalies)

    def latest_metrics(self) -> MetricsSnapshot:
        with self._lock:
            return self._metrics

    def summary(self) -> Dict[str, object]:
        """Counters plus the worst severity among the buffered anomalies."""
        with self._lock:
            anomalies = list(self._anomalies)
            metrics = self._metrics

        highest: Optional[str] = None
        if anomalies:
            highest = overall_severity(*(a.severity for a in anomalies)).value

        return {
            "metrics": metrics.model_dump(),
            "buffered_events": len(self.recent_events()),
            "buffered_anomalies": len(anomalies),
            "highest_severity": highest,
        }

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
