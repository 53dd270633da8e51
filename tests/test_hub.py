"""Tests for lifecycle handling and event dispatch through the signaling hub."""
from __future__ import annotations

import pytest

from watchparty_signaling.core.errors import ConnectionIdInUseError, InvalidFrameError
from watchparty_signaling.schemas.signaling import InboundEvent
from watchparty_signaling.services.connections import Connection
from watchparty_signaling.services.hub import SignalingHub, parse_frame


def drain(connection: Connection) -> list[dict]:
    frames = []
    while not connection.outbox.empty():
        frames.append(connection.outbox.get_nowait())
    return frames


async def attach(hub: SignalingHub, connection_id: str) -> Connection:
    connection = await hub.attach(connection_id)
    assert drain(connection) == [{"event": "connected", "data": {"connectionId": connection_id}}]
    return connection


async def send(hub: SignalingHub, connection_id: str, event: str, data: object) -> None:
    await hub.handle(connection_id, parse_frame({"event": event, "data": data}))


@pytest.mark.asyncio
async def test_movie_night_join_sequence():
    hub = SignalingHub()
    conn_a = await attach(hub, "A")
    conn_b = await attach(hub, "B")

    await send(hub, "A", "join-room", {"roomId": "movie-night"})
    assert drain(conn_a) == [{"event": "members", "data": {"members": []}}]

    await send(hub, "B", "join-room", {"roomId": "movie-night"})
    assert drain(conn_b) == [{"event": "members", "data": {"members": ["A"]}}]
    assert drain(conn_a) == [{"event": "peer-joined", "data": {"peerId": "B"}}]


@pytest.mark.asyncio
async def test_disconnect_notifies_remaining_members_once():
    hub = SignalingHub()
    conn_a = await attach(hub, "A")
    conn_b = await attach(hub, "B")
    await hub.join("A", "x")
    await hub.join("B", "x")
    drain(conn_a)
    drain(conn_b)

    await hub.detach("A")
    await hub.detach("A")

    assert drain(conn_b) == [{"event": "peer-left", "data": {"peerId": "A"}}]
    assert hub.registry.members("x") == {"B"}
    assert "A" not in hub.directory


@pytest.mark.asyncio
async def test_detached_id_can_be_attached_again_with_no_memberships():
    hub = SignalingHub()
    await attach(hub, "A")
    await hub.join("A", "x")

    with pytest.raises(ConnectionIdInUseError):
        await hub.attach("A")

    await hub.detach("A")
    await attach(hub, "A")
    assert hub.registry.rooms_of("A") == frozenset()
    assert "x" not in hub.registry


@pytest.mark.asyncio
async def test_direct_offer_reaches_only_destination():
    hub = SignalingHub()
    conn_a = await attach(hub, "A")
    conn_b = await attach(hub, "B")
    conn_c = await attach(hub, "C")
    await hub.join("A", "one")
    await hub.join("B", "two")
    await hub.join("C", "two")
    for connection in (conn_a, conn_b, conn_c):
        drain(connection)

    await send(hub, "A", "signal-offer", {"to": "B", "sdp": "S"})

    assert drain(conn_b) == [{"event": "signal-offer", "data": {"from": "A", "sdp": "S"}}]
    assert drain(conn_a) == []
    assert drain(conn_c) == []


@pytest.mark.asyncio
async def test_room_signals_skip_sender_and_outsiders():
    hub = SignalingHub()
    conns = {name: await attach(hub, name) for name in ("A", "B", "C", "D")}
    for name in ("A", "B", "C"):
        await hub.join(name, "x")
    for connection in conns.values():
        drain(connection)

    await send(hub, "B", "signal-ice", {"roomId": "x", "candidate": {"sdpMid": "0"}})

    expected = [{"event": "signal-ice", "data": {"from": "B", "candidate": {"sdpMid": "0"}}}]
    assert drain(conns["A"]) == expected
    assert drain(conns["C"]) == expected
    assert drain(conns["B"]) == []
    assert drain(conns["D"]) == []


@pytest.mark.asyncio
async def test_signal_without_route_and_unknown_target_are_noops():
    hub = SignalingHub()
    conn_a = await attach(hub, "A")
    await hub.join("A", "x")
    drain(conn_a)

    await send(hub, "A", "signal-answer", {"sdp": "S"})
    await send(hub, "A", "signal-answer", {"to": "ghost", "sdp": "S"})

    assert drain(conn_a) == []
    assert hub.stats() == {"rooms": 1, "memberships": 1, "connections": 1}


@pytest.mark.asyncio
async def test_leave_accepts_bare_room_string():
    hub = SignalingHub()
    conn_a = await attach(hub, "A")
    conn_b = await attach(hub, "B")
    await send(hub, "A", "join-room", "x")
    await send(hub, "B", "join-room", "x")
    drain(conn_a)

    await send(hub, "B", "leave-room", "x")
    await send(hub, "B", "leave-room", "x")

    assert drain(conn_a) == [{"event": "peer-left", "data": {"peerId": "B"}}]
    assert hub.registry.members("x") == {"A"}


@pytest.mark.asyncio
async def test_full_mailbox_drops_events_without_failing():
    hub = SignalingHub(outbox_max_size=1)
    conn_a = await hub.attach("A")
    await hub.attach("B")

    await send(hub, "B", "signal-offer", {"to": "A", "sdp": "dropped"})

    assert drain(conn_a) == [{"event": "connected", "data": {"connectionId": "A"}}]


def test_parse_frame_rejects_malformed_input():
    assert parse_frame({"event": "signal-ice", "data": {}}).event is InboundEvent.SIGNAL_ICE

    with pytest.raises(InvalidFrameError):
        parse_frame(["join-room", "x"])
    with pytest.raises(InvalidFrameError):
        parse_frame({"event": "webrtc:offer"})


@pytest.mark.asyncio
async def test_join_without_room_id_is_rejected():
    hub = SignalingHub()
    await attach(hub, "A")

    with pytest.raises(InvalidFrameError):
        await send(hub, "A", "join-room", {})
    with pytest.raises(InvalidFrameError):
        await send(hub, "A", "join-room", "")
    assert hub.registry.room_ids() == []
