"""
Integration test for the full streaming pipeline.

Tests end-to-end flow from producer payloads through detection to
independent subscribers.
"""

import random
from datetime import timedelta

import pytest

from src.anomaly.engine import AnomalyEngine
from src.anomaly.schema import AnomalyCategory, AnomalySeverity
from src.anomaly.simulation import SimulationKind, simulate_anomaly
from src.core.config import BaselineConfig, StreamConfig

TIMEOUT = 10.0


@pytest.mark.integration
class TestFullPipeline:
    """Test producer -> engine -> subscribers."""

    def test_mixed_traffic_metrics_consistency(self, t0):
        rng = random.Random(7)
        geos = ["USA", "UK", "Germany", "Russia", "Nigeria"]
        users = [f"user_{i}" for i in range(8)]

        with AnomalyEngine(StreamConfig()) as engine:
            anomalies, metrics = [], []
            engine.subscribe_anomalies(anomalies.append)
            engine.subscribe_metrics(metrics.append)

            expected = {c: 0 for c in AnomalyCategory}
            for i in range(300):
                when = t0 + timedelta(seconds=i)
                kind = rng.choice(["login", "network", "file_transfer"])
                if kind == "login":
                    raw = {"category": "login", "user_id": rng.choice(users), "geo": rng.choice(geos),
                           "source_ip": "10.0.0.1", "device": "Desktop"}
                elif kind == "network":
                    raw = {"category": "network", "requests_observed": rng.randint(20, 120),
                           "source_ip": "10.0.0.2"}
                else:
                    raw = {"category": "file_transfer", "user_id": rng.choice(users),
                           "size_mb": rng.choice([5, 40, 2500, 12000]), "direction": "upload",
                           "destination": "internal_server"}
                raw.update({"id": f"evt-{i}", "occurred_at": when.isoformat()})

                result = engine.ingest(raw)
                if result.anomaly is not None:
                    expected[result.anomaly.category] += 1

            assert engine.flush(TIMEOUT)

            final = engine.metrics()
            assert final.total_events == 300
            assert final.total_anomalies == len(anomalies) == sum(expected.values())
            assert final.login_anomalies == expected[AnomalyCategory.LOGIN]
            assert final.data_theft_anomalies == expected[AnomalyCategory.DATA_THEFT]
            assert final.network_anomalies == 0
            assert [m.total_events for m in metrics] == list(range(1, 301))
            assert all(
                later.total_anomalies >= earlier.total_anomalies
                for earlier, later in zip(metrics, metrics[1:])
            )

    def test_all_scenarios_reach_subscribers(self, t0):
        settings = StreamConfig(baselines=BaselineConfig(normal_requests_per_minute=4))
        with AnomalyEngine(settings) as engine:
            anomalies = []
            engine.subscribe_anomalies(anomalies.append)

            for kind in SimulationKind:
                simulate_anomaly(engine, kind, user_id="target", now=t0)

            assert engine.flush(TIMEOUT)
            categories = {a.category for a in anomalies}
            assert categories == set(AnomalyCategory)
            assert any(
                a.category == AnomalyCategory.NETWORK and a.severity == AnomalySeverity.HIGH
                for a in anomalies
            )

    def test_repeat_login_flow(self, t0):
        with AnomalyEngine(StreamConfig()) as engine:
            login = {"category": "login", "user_id": "erin", "geo": "Japan",
                     "source_ip": "10.1.1.1", "device": "Mobile-iOS"}

            first = engine.ingest({**login, "id": "l1", "occurred_at": t0.isoformat()})
            repeat = engine.ingest({**login, "id": "l2", "occurred_at": (t0 + timedelta(minutes=5)).isoformat()})
            night = engine.ingest({**login, "id": "l3", "occurred_at": t0.replace(hour=2).isoformat()})

            assert first.anomaly.confidence == 0.85
            assert repeat.anomaly is None
            assert night.anomaly.severity == AnomalySeverity.MEDIUM
            assert night.anomaly.risk_score == 65
