"""WebSocket transport for the signaling hub."""
from __future__ import annotations

import asyncio
import json
import logging
from contextlib import suppress

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..core.errors import InvalidFrameError
from ..services.connections import Connection
from ..services.hub import SignalingHub, parse_frame

logger = logging.getLogger(__name__)

router = APIRouter()


async def _pump_outbox(websocket: WebSocket, connection: Connection) -> None:
    """Drain the connection mailbox onto the socket until it closes."""

    while True:
        frame = await connection.outbox.get()
        try:
            await websocket.send_json(frame)
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            logger.debug("Stopped writing to %s: %s", connection.connection_id, exc)
            return


async def _stop_writer(writer: asyncio.Task, connection_id: str) -> None:
    """Wait for a cancelled writer; a failure it already hit is logged, not raised."""

    with suppress(asyncio.CancelledError):
        try:
            await writer
        except Exception as exc:  # noqa: BLE001 - the session is already over
            logger.warning("Writer for %s failed: %r", connection_id, exc)


async def _receive_frame(websocket: WebSocket) -> object:
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(code=message.get("code", 1000), reason=message.get("reason"))

    text = message.get("text")
    if text is None:
        data = message.get("bytes") or b""
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidFrameError("Binary frame is not UTF-8 JSON") from exc
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise InvalidFrameError("Frame is not valid JSON") from exc


@router.websocket("/ws")
async def signaling_endpoint(websocket: WebSocket) -> None:
    """Room membership and offer/answer/candidate relay over one socket."""

    hub: SignalingHub = websocket.app.state.hub
    await websocket.accept()

    connection = await hub.attach()
    writer = asyncio.create_task(_pump_outbox(websocket, connection))

    try:
        while True:
            try:
                frame = parse_frame(await _receive_frame(websocket))
                await hub.handle(connection.connection_id, frame)
            except InvalidFrameError as exc:
                logger.warning("Ignoring frame from %s: %s", connection.connection_id, exc)
    except WebSocketDisconnect:
        pass
    finally:
        try:
            await hub.detach(connection.connection_id)
        finally:
            writer.cancel()
            await _stop_writer(writer, connection.connection_id)
