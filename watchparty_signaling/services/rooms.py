"""In-memory room membership registry."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Set

from ..schemas.signaling import OutboundEventName
from .connections import OutboundEvent

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class JoinResult:
    """Outcome of a join: the prior members and the notifications for them."""

    snapshot: list[str]
    notifications: list[OutboundEvent] = field(default_factory=list)
    already_member: bool = False


class RoomRegistry:
    """Track which connections are joined to which rooms.

    Rooms exist only while they have members. A reverse index from connection to
    rooms is kept under the same lock so a disconnect never scans every room.

    Mutating methods take the registry lock themselves. Callers that need to act
    on the result before another mutation lands (for example, to enqueue the
    notifications in order) hold ``registry.lock`` and use the ``*_locked``
    variants instead.
    """

    def __init__(self, *, renotify_on_rejoin: bool = False) -> None:
        self._rooms: Dict[str, Set[str]] = {}
        self._memberships: Dict[str, Set[str]] = {}
        self._renotify_on_rejoin = renotify_on_rejoin
        self.lock = asyncio.Lock()

    async def join(self, connection_id: str, room_id: str) -> JoinResult:
        async with self.lock:
            return self.join_locked(connection_id, room_id)

    async def leave(self, connection_id: str, room_id: str) -> list[OutboundEvent]:
        async with self.lock:
            return self.leave_locked(connection_id, room_id)

    async def remove_connection(self, connection_id: str) -> list[OutboundEvent]:
        async with self.lock:
            return self.remove_connection_locked(connection_id)

    def join_locked(self, connection_id: str, room_id: str) -> JoinResult:
        members = self._rooms.setdefault(room_id, set())
        already_member = connection_id in members
        snapshot = sorted(member for member in members if member != connection_id)

        members.add(connection_id)
        self._memberships.setdefault(connection_id, set()).add(room_id)

        notifications: list[OutboundEvent] = []
        if not already_member or self._renotify_on_rejoin:
            notifications = _address(snapshot, OutboundEventName.PEER_JOINED, connection_id)

        if already_member:
            logger.debug("Connection %s re-joined room %s", connection_id, room_id)
        else:
            logger.info("Connection %s joined room %s (%d present)", connection_id, room_id, len(snapshot))
        return JoinResult(snapshot=snapshot, notifications=notifications, already_member=already_member)

    def leave_locked(self, connection_id: str, room_id: str) -> list[OutboundEvent]:
        members = self._rooms.get(room_id)
        if not members or connection_id not in members:
            return []

        self._discard(connection_id, room_id)
        logger.info("Connection %s left room %s", connection_id, room_id)
        return _address(sorted(self._rooms.get(room_id, ())), OutboundEventName.PEER_LEFT, connection_id)

    def remove_connection_locked(self, connection_id: str) -> list[OutboundEvent]:
        room_ids = self._memberships.get(connection_id)
        if not room_ids:
            self._memberships.pop(connection_id, None)
            return []

        joined = sorted(room_ids)
        events: list[OutboundEvent] = []
        for room_id in joined:
            self._discard(connection_id, room_id)
            remaining = sorted(self._rooms.get(room_id, ()))
            events.extend(_address(remaining, OutboundEventName.PEER_LEFT, connection_id))
        logger.info("Connection %s removed from %d room(s)", connection_id, len(joined))
        return events

    def members(self, room_id: str) -> frozenset[str]:
        return frozenset(self._rooms.get(room_id, ()))

    def rooms_of(self, connection_id: str) -> frozenset[str]:
        return frozenset(self._memberships.get(connection_id, ()))

    def room_ids(self) -> list[str]:
        return sorted(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def stats(self) -> dict[str, int]:
        return {
            "rooms": len(self._rooms),
            "memberships": sum(len(members) for members in self._rooms.values()),
        }

    def _discard(self, connection_id: str, room_id: str) -> None:
        members = self._rooms.get(room_id)
        if members is not None:
            members.discard(connection_id)
            if not members:
                del self._rooms[room_id]

        joined = self._memberships.get(connection_id)
        if joined is not None:
            joined.discard(room_id)
            if not joined:
                del self._memberships[connection_id]


def _address(targets: list[str], event: OutboundEventName, peer_id: str) -> list[OutboundEvent]:
    return [OutboundEvent(target=target, event=event.value, data={"peerId": peer_id}) for target in targets]
