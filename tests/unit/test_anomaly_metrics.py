"""
Unit tests for the metrics aggregator.
"""

from src.anomaly.metrics import MetricsAggregator
from src.anomaly.schema import Anomaly, AnomalyCategory, AnomalySeverity, MetricsSnapshot


def _anomaly(category: AnomalyCategory) -> Anomaly:
    return Anomaly(
        source_event_id="e",
        category=category,
        severity=AnomalySeverity.MEDIUM,
        description="test",
        confidence=0.5,
        risk_score=50,
    )


def test_counts_events_without_anomalies(make_network):
    aggregator = MetricsAggregator()

    for _ in range(3):
        snapshot = aggregator.apply(make_network())

    assert snapshot == MetricsSnapshot(total_events=3)


def test_category_counters(make_login, make_network, make_transfer):
    aggregator = MetricsAggregator()

    aggregator.apply(make_login(), _anomaly(AnomalyCategory.LOGIN))
    aggregator.apply(make_network(), _anomaly(AnomalyCategory.NETWORK))
    aggregator.apply(make_transfer(), _anomaly(AnomalyCategory.DATA_THEFT))
    aggregator.apply(make_transfer(), _anomaly(AnomalyCategory.DATA_THEFT))
    snapshot = aggregator.apply(make_login())

    assert snapshot.total_events == 5
    assert snapshot.total_anomalies == 4
    assert snapshot.login_anomalies == 1
    assert snapshot.network_anomalies == 1
    assert snapshot.data_theft_anomalies == 2
    assert (
        snapshot.login_anomalies + snapshot.network_anomalies + snapshot.data_theft_anomalies
        == snapshot.total_anomalies
    )


def test_previous_snapshots_unchanged(make_login):
    aggregator = MetricsAggregator()

    first = aggregator.apply(make_login(), _anomaly(AnomalyCategory.LOGIN))
    second = aggregator.apply(make_login())

    assert first.total_events == 1
    assert second.total_events == 2
    assert first is not second
    assert aggregator.snapshot() is second
