"""Session registry: one live session per user, best-effort broadcast."""
import asyncio

import pytest

from community_stream.realtime import SessionRegistry


class FakeSession:
    def __init__(self, writable: bool = True, broken: bool = False) -> None:
        self.is_writable = writable
        self.broken = broken
        self.frames: list[dict] = []

    async def send_json(self, frame: dict) -> None:
        if self.broken:
            raise ConnectionError("socket gone")
        self.frames.append(frame)


class StalledSession:
    """Writable, but never finishes a send."""

    is_writable = True

    async def send_json(self, frame: dict) -> None:
        await asyncio.Event().wait()


FRAME = {"type": "newMessage", "message": {"id": "m1"}}


def test_register_replaces_previous_session():
    registry = SessionRegistry()
    old, new = FakeSession(), FakeSession()

    registry.register("alice", old)
    registry.register("alice", new)

    assert registry.get("alice") is new
    assert len(registry) == 1
    assert "alice" in registry


def test_unregister_is_idempotent():
    registry = SessionRegistry()
    registry.register("alice", FakeSession())

    registry.unregister("alice")
    registry.unregister("alice")
    registry.unregister("never-connected")

    assert "alice" not in registry
    assert registry.connected_users() == []


def test_stale_session_does_not_evict_its_successor():
    registry = SessionRegistry()
    old, new = FakeSession(), FakeSession()
    registry.register("alice", old)
    registry.register("alice", new)

    registry.unregister("alice", old)

    assert registry.get("alice") is new


@pytest.mark.asyncio
async def test_broadcast_skips_sessions_that_are_not_writable():
    registry = SessionRegistry()
    open_session, closing = FakeSession(), FakeSession(writable=False)
    registry.register("alice", open_session)
    registry.register("bob", closing)

    delivered = await registry.broadcast(FRAME)

    assert delivered == 1
    assert open_session.frames == [FRAME]
    assert closing.frames == []
    assert "bob" in registry


@pytest.mark.asyncio
async def test_broadcast_purges_sessions_whose_send_fails():
    registry = SessionRegistry()
    healthy, broken = FakeSession(), FakeSession(broken=True)
    registry.register("alice", healthy)
    registry.register("bob", broken)

    delivered = await registry.broadcast(FRAME)

    assert delivered == 1
    assert healthy.frames == [FRAME]
    assert "bob" not in registry
    assert registry.connected_users() == ["alice"]


@pytest.mark.asyncio
async def test_broadcast_with_no_sessions_delivers_nothing():
    assert await SessionRegistry().broadcast(FRAME) == 0


@pytest.mark.asyncio
async def test_send_to_targets_one_user():
    registry = SessionRegistry()
    alice, bob = FakeSession(), FakeSession()
    registry.register("alice", alice)
    registry.register("bob", bob)

    assert await registry.send_to("alice", FRAME) is True
    assert await registry.send_to("carol", FRAME) is False

    assert alice.frames == [FRAME]
    assert bob.frames == []


@pytest.mark.asyncio
async def test_stalled_session_times_out_and_is_dropped():
    registry = SessionRegistry(send_timeout=0.05)
    healthy = FakeSession()
    registry.register("alice", StalledSession())
    registry.register("bob", healthy)

    delivered = await asyncio.wait_for(registry.broadcast(FRAME), 1.0)

    assert delivered == 1
    assert healthy.frames == [FRAME]
    assert "alice" not in registry
    assert await registry.broadcast(FRAME) == 1
