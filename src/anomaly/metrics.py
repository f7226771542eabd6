"""
Running counters derived from the event/anomaly stream.
"""

from __future__ import annotations

from typing import Optional

from src.data.schema import Event

from .schema import Anomaly, AnomalyCategory, MetricsSnapshot

_CATEGORY_FIELDS = {
    AnomalyCategory.LOGIN: "login_anomalies",
    AnomalyCategory.NETWORK: "network_anomalies",
    AnomalyCategory.DATA_THEFT: "data_theft_anomalies",
}


class MetricsAggregator:
    """
    Increments counters once per ingested event.

    Each call to apply() returns a fresh immutable snapshot; previously
    returned snapshots are never modified.
    """

    def __init__(self) -> None:
        self._current = MetricsSnapshot()

    def apply(self, event: Event, anomaly: Optional[Anomaly] = None) -> MetricsSnapshot:
        update = {"total_events": self._current.total_events + 1}

        if anomaly is not None:
            counter = _CATEGORY_FIELDS[anomaly.category]
            update["total_anomalies"] = self._current.total_anomalies + 1
            update[counter] = getattr(self._current, counter) + 1

        self._current = self._current.model_copy(update=update)
        return self._current

    def snapshot(self) -> MetricsSnapshot:
        return self._current
