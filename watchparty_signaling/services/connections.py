"""Connection identity and the directory used to deliver addressed events."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OutboundEvent:
    """An event addressed to a single connection."""

    target: str
    event: str
    data: dict[str, Any]

    def to_frame(self) -> dict[str, Any]:
        return {"event": self.event, "data": self.data}


@dataclass(slots=True)
class Connection:
    """A live client session and its outbound mailbox."""

    connection_id: str
    outbox: asyncio.Queue = field(default_factory=asyncio.Queue)

    def deliver(self, event: OutboundEvent) -> bool:
        """Queue an event without blocking; returns False when the mailbox is full."""

        try:
            self.outbox.put_nowait(event.to_frame())
        except asyncio.QueueFull:
            logger.warning(
                "Dropping %s for %s: outbound queue full", event.event, self.connection_id
            )
            return False
        return True


class ConnectionDirectory:
    """Lookup of live connections by id."""

    def __init__(self) -> None:
        self._connections: Dict[str, Connection] = {}

    def add(self, connection: Connection) -> None:
        self._connections[connection.connection_id] = connection

    def pop(self, connection_id: str) -> Optional[Connection]:
        return self._connections.pop(connection_id, None)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._connections))

    def deliver(self, events: Iterable[OutboundEvent]) -> int:
        """Hand each event to its target mailbox; unknown targets are skipped."""

        delivered = 0
        for event in events:
            connection = self._connections.get(event.target)
            if connection is None:
                logger.debug("Skipping %s for unknown connection %s", event.event, event.target)
                continue
            if connection.deliver(event):
                delivered += 1
        return delivered
