import asyncio

import pytest

from exam_monitor.services.handler import ConnectionHandler, is_liveness_signal
from exam_monitor.services.sweeper import LivenessSweeper
from tests.fakes import FakeWebSocket, settle


@pytest.fixture
def handler(registry):
    return ConnectionHandler(registry)


def test_is_liveness_signal():
    assert is_liveness_signal("alive")
    assert is_liveness_signal("pong")
    assert not is_liveness_signal("Alive")
    assert not is_liveness_signal(" alive")
    assert not is_liveness_signal("hello")
    assert not is_liveness_signal(None)


async def test_missing_id_rejected_with_policy_violation(registry, handler):
    ws = FakeWebSocket()
    await handler.handle(ws)

    assert ws.closed_with == (1008, "Missing ID")
    assert registry.connection_count == 0
    assert registry.visit_count == 0


async def test_empty_id_rejected(registry, handler):
    ws = FakeWebSocket({"id": ""})
    await handler.handle(ws)

    assert ws.closed_with == (1008, "Missing ID")
    assert registry.connection_count == 0


async def test_connect_registers_and_disconnect_removes(registry, handler):
    registry.record_visit("A")
    ws = FakeWebSocket({"id": "A"})
    task = asyncio.create_task(handler.handle(ws))
    await settle()

    assert ws.accepted
    assert registry.has_connection("A")
    assert not registry.has_visit("A")

    ws.push_disconnect()
    await task
    assert not registry.has_connection("A")


async def test_alive_token_marks_connection_alive(registry, handler):
    ws = FakeWebSocket({"id": "C"})
    task = asyncio.create_task(handler.handle(ws))
    await settle()
    entry = registry.get_connection("C")
    entry.alive = False

    ws.push_text("hello")
    ws.push_text("ALIVE")
    await settle()
    assert entry.alive is False

    ws.push_text("alive")
    await settle()
    assert entry.alive is True

    ws.push_disconnect()
    await task


async def test_pong_and_bytes_payloads_mark_alive(registry, handler):
    ws = FakeWebSocket({"id": "C"})
    task = asyncio.create_task(handler.handle(ws))
    await settle()
    entry = registry.get_connection("C")

    entry.alive = False
    ws.push_text("pong")
    await settle()
    assert entry.alive is True

    entry.alive = False
    ws.push_bytes(b"alive")
    await settle()
    assert entry.alive is True

    entry.alive = False
    ws.push_bytes(b"\xff\xfe")
    await settle()
    assert entry.alive is False

    ws.push_disconnect()
    await task


async def test_reconnect_replaces_and_closes_previous(registry, handler):
    first = FakeWebSocket({"id": "A"})
    first_task = asyncio.create_task(handler.handle(first))
    await settle()

    second = FakeWebSocket({"id": "A"})
    second_task = asyncio.create_task(handler.handle(second))
    await settle()

    assert first.closed_with == (1000, "Replaced")
    assert registry.connection_count == 1
    assert registry.get_connection("A").handle.websocket is second

    # The replaced connection's own close must not evict its successor.
    first.push_disconnect()
    await first_task
    assert registry.get_connection("A").handle.websocket is second

    second.push_disconnect()
    await second_task
    assert not registry.has_connection("A")


async def test_disconnect_after_forced_removal_is_quiet(registry, handler):
    ws = FakeWebSocket({"id": "B"})
    task = asyncio.create_task(handler.handle(ws))
    await settle()

    registry.remove_connection("B")
    ws.push_disconnect()
    await task

    assert registry.connection_count == 0


async def test_sweep_during_reconnect_keeps_new_connection(registry, handler):
    close_gate = asyncio.Event()
    first = FakeWebSocket({"id": "A"}, close_gate=close_gate)
    first_task = asyncio.create_task(handler.handle(first))
    await settle()

    # The second connection is closing the first one when the sweep fires.
    second = FakeWebSocket({"id": "A"})
    second_task = asyncio.create_task(handler.handle(second))
    await settle()
    assert first.closed_with == (1000, "Replaced")

    report = await LivenessSweeper(registry).sweep()

    assert report.probed == ["A"]
    assert report.failed_probes == []
    assert second.closed_with is None
    assert len(second.sent) == 1
    assert registry.get_connection("A").handle.websocket is second

    close_gate.set()
    first.push_disconnect()
    await first_task
    await settle()
    assert registry.get_connection("A").handle.websocket is second
    assert second.closed_with is None

    second.push_disconnect()
    await second_task
    assert not registry.has_connection("A")


async def test_failed_accept_leaves_no_entry(registry, handler):
    ws = FakeWebSocket({"id": "A"})
    await ws.close()

    await handler.handle(ws)

    assert not registry.has_connection("A")
