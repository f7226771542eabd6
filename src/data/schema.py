"""
Canonical security telemetry event schema.

This module defines the closed set of events the stream engine accepts. Every
producer (telemetry adapters, simulators, the HTTP service) hands the engine
one of these three shapes; nothing else is permitted.

Design rationale:
- A tagged union discriminated on ``category`` rather than an open hierarchy,
  since the category set is fixed and handled exhaustively downstream
- Events are frozen: detection derives new facts instead of editing the event
- Timestamps default to ingestion time (UTC) when the producer omits them
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventCategory(str, Enum):
    """Closed set of ingestible event categories."""

    LOGIN = "login"
    NETWORK = "network"
    FILE_TRANSFER = "file_transfer"


class TransferDirection(str, Enum):
    """Direction of a file transfer relative to the monitored estate."""

    UPLOAD = "upload"
    DOWNLOAD = "download"


class BaseEvent(BaseModel):
    """
    Fields shared by every event category.

    Attributes:
        id: Unique identifier assigned by the producer
        occurred_at: When the event happened (producer-supplied, else ingestion time)
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(
        ...,
        min_length=1,
        max_length=256,
        description="Producer-assigned unique identifier"
    )

    occurred_at: datetime = Field(
        default_factory=_utcnow,
        description="Time the event occurred"
    )


class LoginEvent(BaseEvent):
    """
    An authentication attempt by a user.

    Identity-bearing: feeds the per-user known-geography baseline.
    """

    category: Literal["login"] = "login"

    user_id: str = Field(..., min_length=1, description="Authenticating user")
    geo: str = Field(..., min_length=1, description="Country or region of origin")
    source_ip: str = Field(..., min_length=1, description="Client IP address")
    device: str = Field(..., min_length=1, description="Client device description")
    success: bool = Field(default=True, description="Whether authentication succeeded")


class NetworkEvent(BaseEvent):
    """
    A traffic report from a network sensor.

    Rate-bearing: the engine counts these events per interval to estimate load.
    """

    category: Literal["network"] = "network"

    requests_observed: int = Field(
        ...,
        ge=0,
        description="Requests counted by the sensor in its reporting interval"
    )
    source_ip: str = Field(..., min_length=1, description="Traffic source address")
    target: Optional[str] = Field(default=None, description="Traffic destination")


class FileTransferEvent(BaseEvent):
    """
    A file moved by a user.

    Volume-bearing: compared against the normal daily transfer volume.
    """

    category: Literal["file_transfer"] = "file_transfer"

    user_id: str = Field(..., min_length=1, description="User performing the transfer")
    size_mb: float = Field(
        ..., ge=0.0, allow_inf_nan=False, description="Transfer size in megabytes"
    )
    direction: TransferDirection = Field(..., description="upload or download")
    destination: str = Field(..., min_length=1, description="Remote endpoint")
    file_name: Optional[str] = Field(default=None, description="Name of the transferred file")


Event = Annotated[
    Union[LoginEvent, NetworkEvent, FileTransferEvent],
    Field(discriminator="category"),
]

EVENT_TYPES = (LoginEvent, NetworkEvent, FileTransferEvent)
