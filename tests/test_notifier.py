"""
Tests for the in-process change feed.
"""

import asyncio

from salesdesk.services.notifier import ChangeEvent, ChangeFeed


class TestCallbacks:
    def test_subscribe_and_unsubscribe(self):
        feed = ChangeFeed()
        received = []
        unsubscribe = feed.subscribe(received.append)

        feed.notify("leads", "insert", "lead-1")
        unsubscribe()
        feed.notify("leads", "update", "lead-1")

        assert [(e.table, e.action, e.record_id) for e in received] == [("leads", "insert", "lead-1")]
        assert feed.listener_count == 0

    def test_unsubscribe_twice_is_harmless(self):
        feed = ChangeFeed()
        unsubscribe = feed.subscribe(lambda event: None)
        unsubscribe()
        unsubscribe()
        assert feed.listener_count == 0

    def test_failing_listener_does_not_block_others(self):
        feed = ChangeFeed()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        feed.subscribe(broken)
        feed.subscribe(received.append)
        feed.notify("users", "delete", "u1")

        assert len(received) == 1

    def test_event_to_dict(self):
        event = ChangeEvent(table="notes", action="insert", record_id="n1")
        data = event.to_dict()
        assert data["table"] == "notes"
        assert data["record_id"] == "n1"
        assert isinstance(data["at"], str)


class TestStreams:
    async def test_stream_receives_events(self):
        feed = ChangeFeed()
        queue = feed.open_stream()

        feed.notify("leads", "update", "lead-7")
        event = await asyncio.wait_for(queue.get(), timeout=1)

        assert event.record_id == "lead-7"

    async def test_full_stream_drops_events(self):
        feed = ChangeFeed(queue_size=1)
        queue = feed.open_stream()

        feed.notify("leads", "update", "first")
        feed.notify("leads", "update", "second")

        assert queue.qsize() == 1
        assert (await queue.get()).record_id == "first"

    async def test_closed_stream_gets_nothing(self):
        feed = ChangeFeed()
        queue = feed.open_stream()
        feed.close_stream(queue)

        feed.notify("leads", "insert", "lead-1")
        assert queue.empty()
