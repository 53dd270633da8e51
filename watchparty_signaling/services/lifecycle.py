"""Connection attach/detach bookkeeping."""
from __future__ import annotations

import asyncio
import logging
from uuid import uuid4

from ..core.errors import ConnectionIdInUseError
from .connections import Connection, ConnectionDirectory, OutboundEvent
from .rooms import RoomRegistry

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Reconcile connection termination with room membership.

    ``detach`` is the only path that clears a connection's memberships. The id
    stays in the directory until the registry cleanup has run, so it cannot be
    handed out again while a room still lists it.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        directory: ConnectionDirectory,
        *,
        outbox_max_size: int = 0,
    ) -> None:
        self._registry = registry
        self._directory = directory
        self._outbox_max_size = outbox_max_size

    async def attach(self, connection_id: str | None = None) -> Connection:
        async with self._registry.lock:
            return self.attach_locked(connection_id)

    async def detach(self, connection_id: str) -> list[OutboundEvent]:
        async with self._registry.lock:
            return self.detach_locked(connection_id)

    def attach_locked(self, connection_id: str | None = None) -> Connection:
        resolved_id = connection_id or uuid4().hex
        if resolved_id in self._directory:
            raise ConnectionIdInUseError(resolved_id)

        connection = Connection(
            connection_id=resolved_id,
            outbox=asyncio.Queue(maxsize=self._outbox_max_size),
        )
        self._directory.add(connection)
        logger.info("Connection %s attached", resolved_id)
        return connection

    def detach_locked(self, connection_id: str) -> list[OutboundEvent]:
        if connection_id not in self._directory:
            return []

        events = self._registry.remove_connection_locked(connection_id)
        self._directory.pop(connection_id)
        logger.info("Connection %s detached", connection_id)
        return events
