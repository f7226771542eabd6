"""
Scoring and severity mapping for anomalies.

Maps geographies, hours, rates and volumes to severities and risk scores
with configurable thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import log10

from src.core.config import DetectionConfig

from .schema import AnomalySeverity

_GEO_RISK_BONUS = {
    AnomalySeverity.LOW: 10,
    AnomalySeverity.MEDIUM: 25,
    AnomalySeverity.HIGH: 40,
}

LOGIN_BASE_RISK = 30
OFF_HOURS_RISK_BONUS = 25
OFF_HOURS_RISK = 65
NETWORK_BASE_RISK = 50
NETWORK_MAX_RISK = 95
DATA_THEFT_BASE_RISK = 70
DATA_THEFT_MAX_RISK = 99


@dataclass
class GeoRiskMapper:
    """
    Maps a login geography to a severity using fixed risk lists.
    """

    thresholds: DetectionConfig

    def severity(self, geo: str) -> AnomalySeverity:
        if geo in self.thresholds.high_risk_geos:
            return AnomalySeverity.HIGH
        if geo in self.thresholds.medium_risk_geos:
            return AnomalySeverity.MEDIUM
        return AnomalySeverity.LOW


def is_off_hours(hour: int, start: int = 6, end: int = 22) -> bool:
    """
    True for hours before ``start`` or after ``end``.

    With the defaults, 00:00-05:59 and 23:00-23:59 are off hours; 22:xx is not.
    """
    return hour < start or hour > end


def clamp(value: float, low: int = 0, high: int = 100) -> int:
    return int(min(max(value, low), high))


def login_risk_score(geo_severity: AnomalySeverity, off_hours: bool) -> int:
    """Risk for a first-seen login location: base + geography bonus + off-hours bonus."""
    score = LOGIN_BASE_RISK + _GEO_RISK_BONUS[geo_severity]
    if off_hours:
        score += OFF_HOURS_RISK_BONUS
    return clamp(score)


def network_risk_score(multiplier: int) -> int:
    return clamp(min(NETWORK_MAX_RISK, NETWORK_BASE_RISK + multiplier))


def data_theft_risk_score(multiplier: int) -> int:
    """
    Logarithmic risk for oversized transfers, rounded to an integer.

    ``multiplier`` is always >= 1 when the rule fires; smaller values are
    floored at the base score.
    """
    if multiplier < 1:
        return DATA_THEFT_BASE_RISK
    return clamp(round(min(DATA_THEFT_MAX_RISK, DATA_THEFT_BASE_RISK + 10 * log10(multiplier))))


def overall_severity(*severities: AnomalySeverity) -> AnomalySeverity:
    """
    Return the highest severity among inputs.
    """

    return max(severities, key=lambda s: s.rank)
