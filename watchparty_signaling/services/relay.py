"""Routing of opaque signaling payloads between connections."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..schemas.signaling import InboundEvent, SignalKind
from .connections import OutboundEvent
from .rooms import RoomRegistry

logger = logging.getLogger(__name__)

# Outbound event name and payload field for each signal kind.
_KIND_WIRE: dict[SignalKind, tuple[str, str]] = {
    SignalKind.OFFER: (InboundEvent.SIGNAL_OFFER.value, "sdp"),
    SignalKind.ANSWER: (InboundEvent.SIGNAL_ANSWER.value, "sdp"),
    SignalKind.ICE_CANDIDATE: (InboundEvent.SIGNAL_ICE.value, "candidate"),
}


@dataclass(frozen=True, slots=True)
class SignalMessage:
    """A kind-tagged negotiation blob plus its routing target."""

    kind: SignalKind
    payload: Any
    to: str | None = None
    room_id: str | None = None


class MessageRelay:
    """Forward signaling messages to one connection or to a room's other members."""

    def __init__(self, registry: RoomRegistry) -> None:
        self._registry = registry

    async def relay(self, sender_id: str, message: SignalMessage) -> list[OutboundEvent]:
        async with self._registry.lock:
            return self.relay_locked(sender_id, message)

    def relay_locked(self, sender_id: str, message: SignalMessage) -> list[OutboundEvent]:
        event_name, field_name = _KIND_WIRE[message.kind]
        data = {"from": sender_id, field_name: message.payload}

        if message.to:
            return [OutboundEvent(target=message.to, event=event_name, data=data)]

        if not message.room_id:
            logger.debug("Dropping %s from %s: no destination or room", message.kind.value, sender_id)
            return []

        targets = sorted(self._registry.members(message.room_id) - {sender_id})
        return [OutboundEvent(target=target, event=event_name, data=dict(data)) for target in targets]
