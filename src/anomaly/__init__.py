"""
Anomaly module: streaming detection for security telemetry.

Implements baselines, detectors, scoring, metrics, broadcast and the engine
that orchestrates them.
"""

from .baselines import BaselineStore
from .broadcast import Broadcaster, Subscription, Topic
from .detectors import DataTransferDetector, Detector, LoginDetector, NetworkRateDetector
from .engine import AnomalyEngine
from .metrics import MetricsAggregator
from .schema import Anomaly, AnomalyCategory, AnomalySeverity, IngestResult, MetricsSnapshot
from .scoring import GeoRiskMapper, overall_severity
from .simulation import SimulationKind, simulate_anomaly

__all__ = [
	"AnomalyEngine",
	"Anomaly",
	"AnomalyCategory",
	"AnomalySeverity",
	"IngestResult",
	"MetricsSnapshot",
	"MetricsAggregator",
	"BaselineStore",
	"Broadcaster",
	"Subscription",
	"Topic",
	"Detector",
	"LoginDetector",
	"NetworkRateDetector",
	"DataTransferDetector",
	"GeoRiskMapper",
	"overall_severity",
	"SimulationKind",
	"simulate_anomaly",
]
