"""Tests for the EventHub publish/subscribe."""
import asyncio

import pytest

from sensor_dashboard.core.event_hub import EventHub


def test_sync_handler_receives_message():
    hub = EventHub()
    received = []
    hub.subscribe("topic", lambda topic, message: received.append((topic, message)))

    hub.send_all_on_topic("topic", 42)

    assert received == [("topic", 42)]


def test_subscribe_twice_delivers_once():
    hub = EventHub()
    received = []

    def handler(topic, message):
        received.append(message)

    hub.subscribe("topic", handler)
    hub.subscribe("topic", handler)
    hub.send_all_on_topic("topic", "x")

    assert received == ["x"]


def test_failing_handler_does_not_stop_others():
    hub = EventHub()
    received = []

    def broken(topic, message):
        raise RuntimeError("boom")

    hub.subscribe("topic", broken)
    hub.subscribe("topic", lambda topic, message: received.append(message))
    hub.send_all_on_topic("topic", 1)

    assert received == [1]


@pytest.mark.asyncio
async def test_async_handler_runs_on_loop():
    hub = EventHub()
    received = asyncio.Event()

    async def handler(topic, message):
        received.set()

    hub.subscribe("topic", handler)
    hub.send_all_on_topic("topic", None)

    await asyncio.wait_for(received.wait(), timeout=1.0)
