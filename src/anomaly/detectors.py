"""
Detectors for the three event categories.

Implements explainable rules:
- Login: first-seen geography, then off-hours login
- Network: event rate over the recent window against a static baseline
- File transfer: single-transfer volume against the daily baseline

Each detector returns at most one Anomaly per event and never raises on
well-formed input. All threshold comparisons are strict (value > threshold).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from math import floor
from typing import Optional

from src.core.config import DetectionConfig
from src.data.schema import (
    Event,
    EventCategory,
    FileTransferEvent,
    LoginEvent,
    NetworkEvent,
)
from src.data.window import EventWindow

from .baselines import BaselineStore
from .schema import Anomaly, AnomalyCategory, AnomalySeverity
from .scoring import (
    OFF_HOURS_RISK,
    GeoRiskMapper,
    data_theft_risk_score,
    is_off_hours,
    login_risk_score,
    network_risk_score,
)


def _is_network(event: Event) -> bool:
    return event.category == EventCategory.NETWORK


def format_quantity(value: float) -> str:
    """Render a number exactly as received: 2048.0 -> "2048", 2048.125 -> "2048.125"."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


@dataclass
class LoginDetector:
    """
    First-seen location and off-hours login rules, in that precedence.

    ``first_location`` must reflect the baseline as it was before this event
    was recorded.
    """

    settings: DetectionConfig
    geo_mapper: GeoRiskMapper = field(init=False)

    def __post_init__(self) -> None:
        self.geo_mapper = GeoRiskMapper(self.settings)

    def detect(self, event: LoginEvent, first_location: bool) -> Optional[Anomaly]:
        hour = event.occurred_at.hour
        off_hours = is_off_hours(
            hour, self.settings.business_hours_start, self.settings.business_hours_end
        )

        if first_location:
            severity = self.geo_mapper.severity(event.geo)
            return Anomaly(
                source_event_id=event.id,
                category=AnomalyCategory.LOGIN,
                severity=severity,
                description=(
                    f"New login location detected for user {event.user_id} from {event.geo} "
                    f"at {hour:02d}:00. This is the first time this user has logged in "
                    f"from this location."
                ),
                confidence=self.settings.new_location_confidence,
                risk_score=login_risk_score(severity, off_hours),
            )

        if off_hours:
            return Anomaly(
                source_event_id=event.id,
                category=AnomalyCategory.LOGIN,
                severity=AnomalySeverity.MEDIUM,
                description=(
                    f"Unusual login time: User {event.user_id} logged in at {hour:02d}:00 "
                    f"outside normal business hours "
                    f"({self.settings.business_hours_start:02d}:00-"
                    f"{self.settings.business_hours_end:02d}:00)."
                ),
                confidence=self.settings.off_hours_confidence,
                risk_score=OFF_HOURS_RISK,
            )

        return None


@dataclass
class NetworkRateDetector:
    """
    Rate detector over the recent-event window.

    The rate is the number of network events observed in the lookback
    interval (including the current one), not the sum of their
    ``requests_observed`` values.
    """

    settings: DetectionConfig
    interval: timedelta = timedelta(seconds=60)

    def detect(
        self, event: NetworkEvent, window: EventWindow, baselines: BaselineStore
    ) -> Optional[Anomaly]:
        normal = baselines.normal_requests_per_minute()
        rate = window.count_matching(_is_network, self.interval)
        threshold = self.settings.network_threshold_multiplier * normal

        if rate <= threshold:
            return None

        multiplier = floor(rate / normal)
        severity = (
            AnomalySeverity.HIGH
            if multiplier > self.settings.network_high_multiplier
            else AnomalySeverity.MEDIUM
        )
        return Anomaly(
            source_event_id=event.id,
            category=AnomalyCategory.NETWORK,
            severity=severity,
            description=(
                f"Network traffic spike detected: {rate} requests/min "
                f"({multiplier}x normal baseline of {format_quantity(normal)}) from {event.source_ip}. "
                f"Possible DDoS attack or system compromise."
            ),
            confidence=self.settings.network_confidence,
            risk_score=network_risk_score(multiplier),
        )


@dataclass
class DataTransferDetector:
    """
    Oversized transfer detector; emits DATA_THEFT anomalies.
    """

    settings: DetectionConfig

    def detect(self, event: FileTransferEvent, baselines: BaselineStore) -> Optional[Anomaly]:
        normal = baselines.normal_daily_transfer_mb()
        threshold = self.settings.transfer_threshold_multiplier * normal

        if event.size_mb <= threshold:
            return None

        multiplier = floor(event.size_mb / normal)
        severity = (
            AnomalySeverity.HIGH
            if event.size_mb > self.settings.transfer_high_factor * threshold
            else AnomalySeverity.MEDIUM
        )
        return Anomaly(
            source_event_id=event.id,
            category=AnomalyCategory.DATA_THEFT,
            severity=severity,
            description=(
                f"Suspicious data transfer: user {event.user_id} moved {format_quantity(event.size_mb)}MB "
                f"({event.direction.value}) to {event.destination} "
                f"({multiplier}x normal daily volume of {format_quantity(normal)}MB). "
                f"Potential data exfiltration attempt detected."
            ),
            confidence=self.settings.data_theft_confidence,
            risk_score=data_theft_risk_score(multiplier),
        )


@dataclass
class Detector:
    """
    Dispatches an event to the rule for its category.

    Holds no state of its own; reads the baseline store and window it is given.
    """

    settings: DetectionConfig
    rate_interval: timedelta = timedelta(seconds=60)

    def __post_init__(self) -> None:
        self._login = LoginDetector(self.settings)
        self._network = NetworkRateDetector(self.settings, interval=self.rate_interval)
        self._transfer = DataTransferDetector(self.settings)

    def detect(
        self,
        event: Event,
        baselines: BaselineStore,
        window: EventWindow,
        first_location: bool = False,
    ) -> Optional[Anomaly]:
        if isinstance(event, LoginEvent):
            return self._login.detect(event, first_location)
        if isinstance(event, NetworkEvent):
            return self._network.detect(event, window, baselines)
        if isinstance(event, FileTransferEvent):
            return self._transfer.detect(event, baselines)
        raise TypeError(f"Unsupported event type: {type(event).__name__}")
