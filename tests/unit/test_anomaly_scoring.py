"""
Unit tests for severity mapping and risk scores.
"""

import pytest

from src.anomaly.schema import AnomalySeverity
from src.anomaly.scoring import (
    GeoRiskMapper,
    data_theft_risk_score,
    is_off_hours,
    login_risk_score,
    network_risk_score,
    overall_severity,
)
from src.core.config import DetectionConfig


@pytest.mark.parametrize(
    "geo,expected",
    [
        ("Russia", AnomalySeverity.HIGH),
        ("North Korea", AnomalySeverity.HIGH),
        ("Romania", AnomalySeverity.MEDIUM),
        ("Germany", AnomalySeverity.LOW),
    ],
)
def test_geo_severity(geo, expected):
    assert GeoRiskMapper(DetectionConfig()).severity(geo) == expected


@pytest.mark.parametrize("hour,expected", [(0, True), (5, True), (6, False), (22, False), (23, True)])
def test_off_hours_boundaries(hour, expected):
    assert is_off_hours(hour) is expected


def test_login_risk_score():
    assert login_risk_score(AnomalySeverity.LOW, off_hours=False) == 40
    assert login_risk_score(AnomalySeverity.MEDIUM, off_hours=False) == 55
    assert login_risk_score(AnomalySeverity.HIGH, off_hours=False) == 70
    assert login_risk_score(AnomalySeverity.HIGH, off_hours=True) == 95


def test_network_risk_score_capped():
    assert network_risk_score(10) == 60
    assert network_risk_score(51) == 95
    assert network_risk_score(400) == 95


def test_data_theft_risk_score():
    assert data_theft_risk_score(100) == 90
    assert data_theft_risk_score(102) == 90
    assert data_theft_risk_score(10 ** 6) == 99
    assert data_theft_risk_score(0) == 70


def test_severity_ordering():
    assert AnomalySeverity.LOW < AnomalySeverity.MEDIUM < AnomalySeverity.HIGH
    assert overall_severity(AnomalySeverity.LOW, AnomalySeverity.HIGH, AnomalySeverity.MEDIUM) == AnomalySeverity.HIGH
