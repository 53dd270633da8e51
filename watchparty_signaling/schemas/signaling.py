"""Data contracts for the signaling WebSocket and HTTP status endpoints."""
from __future__ import annotations

import enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class InboundEvent(str, enum.Enum):
    JOIN_ROOM = "join-room"
    LEAVE_ROOM = "leave-room"
    SIGNAL_OFFER = "signal-offer"
    SIGNAL_ANSWER = "signal-answer"
    SIGNAL_ICE = "signal-ice"


class OutboundEventName(str, enum.Enum):
    CONNECTED = "connected"
    MEMBERS = "members"
    PEER_JOINED = "peer-joined"
    PEER_LEFT = "peer-left"


class SignalKind(str, enum.Enum):
    OFFER = "offer"
    ANSWER = "answer"
    ICE_CANDIDATE = "ice-candidate"


class InboundFrame(BaseModel):
    """Envelope of every client-to-server WebSocket frame."""

    event: InboundEvent
    data: Any = None


class RoomPayload(BaseModel):
    room_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("roomId", "room_id", "room"),
        description="Room to join or leave",
    )


class _SignalPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str | None = Field(default=None, validation_alias=AliasChoices("roomId", "room_id"))
    to: str | None = Field(default=None, description="Destination connection id")


class SdpSignalPayload(_SignalPayload):
    sdp: Any = Field(default=None, description="Opaque session description")


class IceSignalPayload(_SignalPayload):
    candidate: Any = Field(default=None, description="Opaque network-path candidate")


class StatusResponse(BaseModel):
    status: str
    name: str
    version: str


class HealthResponse(BaseModel):
    status: str


class StatsResponse(BaseModel):
    rooms: int = Field(..., ge=0)
    memberships: int = Field(..., ge=0)
    connections: int = Field(..., ge=0)
