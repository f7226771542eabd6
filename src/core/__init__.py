"""
Core module: Configuration, logging, and exception handling.
"""

from .config import Config, StreamConfig, config
from .exceptions import (
    AnomalyDetectionError,
    ConfigurationError,
    DataValidationError,
    EngineClosedError,
    SubscriptionError,
)
from .logging_config import setup_logging

__all__ = [
    "Config",
    "StreamConfig",
    "config",
    "setup_logging",
    "AnomalyDetectionError",
    "DataValidationError",
    "EngineClosedError",
    "SubscriptionError",
    "ConfigurationError",
]
