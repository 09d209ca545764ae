"""
Tests for EventChannel.
"""

import pytest

from interview_engine.events import EventChannel, EventType


class TestEventChannel:
    """Tests for publish/subscribe delivery."""

    def test_typed_and_global_handlers(self):
        channel = EventChannel("s-1")
        typed, everything = [], []
        channel.subscribe(EventType.NEW_QUESTION, typed.append)
        channel.subscribe_all(everything.append)

        channel.publish(EventType.NEW_QUESTION, index=0)
        channel.publish(EventType.SPEECH_END, transcript="done")

        assert [e.data["index"] for e in typed] == [0]
        assert [e.event_type for e in everything] == [EventType.NEW_QUESTION, EventType.SPEECH_END]
        assert everything[0].session_id == "s-1"

    def test_failing_handler_does_not_stop_delivery(self):
        channel = EventChannel()
        received = []

        def broken(event):
            raise RuntimeError("renderer crashed")

        channel.subscribe(EventType.VISEMES, broken)
        channel.subscribe(EventType.VISEMES, received.append)

        channel.publish(EventType.VISEMES, timeline=[])

        assert len(received) == 1

    def test_unsubscribe(self):
        channel = EventChannel()
        received = []
        channel.subscribe(EventType.TRANSCRIPT, received.append)
        channel.unsubscribe(EventType.TRANSCRIPT, received.append)
        channel.unsubscribe(EventType.TRANSCRIPT, received.append)

        channel.publish(EventType.TRANSCRIPT, transcript="hello")

        assert received == []

    @pytest.mark.asyncio
    async def test_stream_receives_events(self):
        channel = EventChannel()
        stream = channel.stream()

        channel.publish(EventType.EMOTION_CHANGED, emotion="happy")
        channel.close_stream(stream)
        channel.publish(EventType.EMOTION_CHANGED, emotion="neutral")

        event = stream.get_nowait()
        assert event.data == {"emotion": "happy"}
        assert stream.empty()
