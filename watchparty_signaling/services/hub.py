"""Signaling hub: owns the registry, relay and lifecycle for one process."""
from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..core.errors import InvalidFrameError
from ..schemas.signaling import (
    IceSignalPayload,
    InboundEvent,
    InboundFrame,
    OutboundEventName,
    RoomPayload,
    SdpSignalPayload,
    SignalKind,
)
from .connections import Connection, ConnectionDirectory, OutboundEvent
from .lifecycle import LifecycleManager
from .relay import MessageRelay, SignalMessage
from .rooms import RoomRegistry

logger = logging.getLogger(__name__)

_SIGNAL_KINDS: dict[InboundEvent, SignalKind] = {
    InboundEvent.SIGNAL_OFFER: SignalKind.OFFER,
    InboundEvent.SIGNAL_ANSWER: SignalKind.ANSWER,
    InboundEvent.SIGNAL_ICE: SignalKind.ICE_CANDIDATE,
}


def parse_frame(raw: object) -> InboundFrame:
    """Validate a decoded WebSocket frame into an event envelope."""

    if not isinstance(raw, dict):
        raise InvalidFrameError("Frame must be a JSON object")
    try:
        return InboundFrame.model_validate(raw)
    except ValidationError as exc:
        raise InvalidFrameError(f"Unrecognised frame: {exc.errors()[0]['msg']}") from exc


def _room_payload(data: Any) -> RoomPayload:
    # Bare room id strings are accepted alongside {"roomId": ...}.
    if isinstance(data, str):
        data = {"roomId": data}
    try:
        return RoomPayload.model_validate(data)
    except ValidationError as exc:
        raise InvalidFrameError("Room events require a roomId") from exc


def _signal_message(kind: SignalKind, data: Any) -> SignalMessage:
    model = IceSignalPayload if kind is SignalKind.ICE_CANDIDATE else SdpSignalPayload
    try:
        payload = model.model_validate(data if data is not None else {})
    except ValidationError as exc:
        raise InvalidFrameError(f"Invalid {kind.value} payload") from exc

    blob = payload.candidate if isinstance(payload, IceSignalPayload) else payload.sdp
    return SignalMessage(kind=kind, payload=blob, to=payload.to, room_id=payload.room_id)


class SignalingHub:
    """Dispatch inbound events and hand the resulting events to recipient mailboxes.

    Every mutation and the enqueueing of its notifications happen under the
    registry lock, so each mailbox sees events in the registry's order.
    """

    def __init__(self, *, outbox_max_size: int = 0, renotify_on_rejoin: bool = False) -> None:
        self.registry = RoomRegistry(renotify_on_rejoin=renotify_on_rejoin)
        self.directory = ConnectionDirectory()
        self.relay = MessageRelay(self.registry)
        self.lifecycle = LifecycleManager(self.registry, self.directory, outbox_max_size=outbox_max_size)

    async def attach(self, connection_id: str | None = None) -> Connection:
        async with self.registry.lock:
            connection = self.lifecycle.attach_locked(connection_id)
            connection.deliver(
                OutboundEvent(
                    target=connection.connection_id,
                    event=OutboundEventName.CONNECTED.value,
                    data={"connectionId": connection.connection_id},
                )
            )
            return connection

    async def detach(self, connection_id: str) -> None:
        async with self.registry.lock:
            self.directory.deliver(self.lifecycle.detach_locked(connection_id))

    async def handle(self, connection_id: str, frame: InboundFrame) -> None:
        """Apply one inbound event from ``connection_id``."""

        event = frame.event
        if event is InboundEvent.JOIN_ROOM:
            await self.join(connection_id, _room_payload(frame.data).room_id)
        elif event is InboundEvent.LEAVE_ROOM:
            await self.leave(connection_id, _room_payload(frame.data).room_id)
        else:
            await self.signal(connection_id, _signal_message(_SIGNAL_KINDS[event], frame.data))

    async def join(self, connection_id: str, room_id: str) -> list[str]:
        async with self.registry.lock:
            result = self.registry.join_locked(connection_id, room_id)
            self.directory.deliver(
                [
                    OutboundEvent(
                        target=connection_id,
                        event=OutboundEventName.MEMBERS.value,
                        data={"members": list(result.snapshot)},
                    ),
                    *result.notifications,
                ]
            )
            return result.snapshot

    async def leave(self, connection_id: str, room_id: str) -> None:
        async with self.registry.lock:
            self.directory.deliver(self.registry.leave_locked(connection_id, room_id))

    async def signal(self, sender_id: str, message: SignalMessage) -> int:
        async with self.registry.lock:
            return self.directory.deliver(self.relay.relay_locked(sender_id, message))

    def stats(self) -> dict[str, int]:
        return {**self.registry.stats(), "connections": len(self.directory)}
