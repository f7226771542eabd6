"""
Stream anomaly detection engine.

Consumes security telemetry events one at a time, keeps baselines and a
recent-event window, runs the per-category detectors, maintains metrics and
fans the results out to subscribers.

Per ingested event, in order:
    baseline update -> window push -> detection -> metrics -> broadcast

The five steps run under a single lock, so producers may call ingest() from
any thread and no subscriber observes a partially applied event.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional

from src.core.config import StreamConfig, config
from src.core.exceptions import EngineClosedError
from src.data.ingestion import coerce_event
from src.data.schema import Event, LoginEvent
from src.data.window import EventWindow

from .baselines import BaselineStore
from .broadcast import Broadcaster, Subscription, Topic
from .detectors import Detector
from .metrics import MetricsAggregator
from .schema import Anomaly, IngestResult, MetricsSnapshot

logger = logging.getLogger(__name__)


class AnomalyEngine:
    """
    Explicitly owned stream engine.

    Owns its BaselineStore, EventWindow and MetricsAggregator exclusively;
    diagnostics are exposed only as copies. Call close() (or use the engine as
    a context manager) to release subscriber threads.

    Example:
        >>> with AnomalyEngine() as engine:
        ...     sub = engine.subscribe_anomalies(print)
        ...     result = engine.ingest({"id": "e1", "category": "file_transfer", ...})
        ...     engine.flush()
    """

    def __init__(
        self,
        settings: Optional[StreamConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or config.stream

        window_settings = self.settings.window
        self._baselines = BaselineStore(self.settings.baselines)
        self._window = EventWindow(
            max_count=window_settings.max_count,
            max_age=timedelta(seconds=window_settings.max_age_seconds),
            clock=clock,
        )
        self._detector = Detector(
            self.settings.detection,
            rate_interval=timedelta(seconds=window_settings.rate_interval_seconds),
        )
        self._metrics = MetricsAggregator()
        self._broadcaster = Broadcaster(buffer_size=self.settings.broadcast.buffer_size)

        self._lock = threading.Lock()
        self._closed = False

    def ingest(self, event: Any) -> IngestResult:
        """
        Apply one event and publish what it produced.

        Args:
            event: An event model or a raw mapping with a ``category`` tag

        Returns:
            IngestResult with the event, its anomaly (or None) and the new metrics

        Raises:
            DataValidationError: If the event is malformed (no state is touched)
            EngineClosedError: If the engine has been closed
        """
        event = coerce_event(event)

        with self._lock:
            if self._closed:
                raise EngineClosedError("Engine is closed")

            first_location = False
            if isinstance(event, LoginEvent):
                first_location = self._baselines.record_login(event.user_id, event.geo)

            self._window.push(event)
            anomaly = self._detector.detect(
                event, self._baselines, self._window, first_location=first_location
            )
            metrics = self._metrics.apply(event, anomaly)

            self._broadcaster.publish(Topic.EVENTS, event)
            if anomaly is not None:
                self._broadcaster.publish(Topic.ANOMALIES, anomaly)
            self._broadcaster.publish(Topic.METRICS, metrics)

        logger.debug(f"Ingested {event.category} event {event.id}")
        if anomaly is not None:
            logger.info(
                f"Anomaly {anomaly.category.value}/{anomaly.severity.value} "
                f"risk={anomaly.risk_score} from event {event.id}"
            )

        return IngestResult(event=event, anomaly=anomaly, metrics=metrics)

    def ingest_many(self, events: Iterable[Any]) -> List[IngestResult]:
        """Ingest events in order; stops at the first malformed one."""
        return [self.ingest(event) for event in events]

    def subscribe_events(self, handler: Callable[[Event], None], buffer_size: Optional[int] = None) -> Subscription:
        return self._broadcaster.subscribe(Topic.EVENTS, handler, buffer_size)

    def subscribe_anomalies(self, handler: Callable[[Anomaly], None], buffer_size: Optional[int] = None) -> Subscription:
        return self._broadcaster.subscribe(Topic.ANOMALIES, handler, buffer_size)

    def subscribe_metrics(self, handler: Callable[[MetricsSnapshot], None], buffer_size: Optional[int] = None) -> Subscription:
        return self._broadcaster.subscribe(Topic.METRICS, handler, buffer_size)

    def metrics(self) -> MetricsSnapshot:
        with self._lock:
            return self._metrics.snapshot()

    def baseline_snapshot(self) -> Dict[str, FrozenSet[str]]:
        """Known geographies per user, as a copy."""
        with self._lock:
            return self._baselines.snapshot()

    def window_snapshot(self) -> List[Event]:
        """Events currently in the window, oldest first, as a copy."""
        with self._lock:
            return self._window.snapshot()

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for all subscribers to drain their buffers."""
        return self._broadcaster.flush(timeout)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self, timeout: Optional[float] = 1.0) -> None:
        """Reject further ingestion and release every subscription."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._broadcaster.close(timeout)
        logger.info("Engine closed")

    def __enter__(self) -> "AnomalyEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
