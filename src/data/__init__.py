"""
Data module: event schema, ingestion-boundary validation and the recent-event window.

Pipeline:

    Raw producer payload (dict / JSON)
        ↓
    Validation (src/data/ingestion.py) → LoginEvent | NetworkEvent | FileTransferEvent
        ↓
    Recent-event window (src/data/window.py)
        ↓
    Ready for anomaly detection (src/anomaly)
"""

from src.data.ingestion import (
    coerce_event,
    parse_event,
    parse_events,
)
from src.data.schema import (
    Event,
    EventCategory,
    FileTransferEvent,
    LoginEvent,
    NetworkEvent,
    TransferDirection,
)
from src.data.window import EventWindow

__all__ = [
    # Schema
    "Event",
    "EventCategory",
    "LoginEvent",
    "NetworkEvent",
    "FileTransferEvent",
    "TransferDirection",

    # Ingestion
    "parse_event",
    "parse_events",
    "coerce_event",

    # Window
    "EventWindow",
]
