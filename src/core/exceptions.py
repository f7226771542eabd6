"""
Custom exceptions for the Stream Sentinel engine.

These exceptions provide clear error semantics across the system.
Use them to distinguish between malformed input, misuse of a closed engine,
and configuration errors.
"""

from typing import Any, Dict, List, Optional


class AnomalyDetectionError(Exception):
    """Base exception for stream engine failures."""
    pass


class DataValidationError(AnomalyDetectionError):
    """
    Raised when an event fails validation at the ingestion boundary.

    The event is rejected before it touches any engine state.
    """

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class SubscriptionError(AnomalyDetectionError):
    """Raised when subscribing to a broadcaster that has been closed."""
    pass


class EngineClosedError(AnomalyDetectionError):
    """Raised when ingesting into an engine after close()."""
    pass


class ConfigurationError(Exception):
    """Raised when configuration is invalid or inconsistent."""
    pass
