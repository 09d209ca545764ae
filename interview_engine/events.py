"""
Event channel connecting speech, interview flow and orchestration.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of engine events."""

    # Interview flow
    STATE_CHANGED = "state_changed"
    NEW_QUESTION = "new_question"
    INTERVIEW_COMPLETE = "interview_complete"

    # Speech
    TRANSCRIPT = "transcript"
    SPEECH_END = "speech_end"
    SPEAKING_STARTED = "speaking_started"
    SPEAKING_ENDED = "speaking_ended"
    VISEMES = "visemes"
    SPEECH_ERROR = "speech_error"

    # Avatar
    EMOTION_CHANGED = "emotion_changed"


@dataclass
class EngineEvent:
    """A single event with its payload."""

    event_type: EventType
    session_id: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


EventHandler = Callable[[EngineEvent], None]


class EventChannel:
    """
    In-process publish/subscribe channel.

    Synchronous handlers run inline on ``emit``; a failing handler is logged
    and does not stop delivery. ``stream()`` hands out an asyncio queue that
    receives every event for consumers that need to await work per event.
    """

    def __init__(self, session_id: str = ""):
        self.session_id = session_id
        self._handlers: dict[EventType, list[EventHandler]] = {}
        self._global_handlers: list[EventHandler] = []
        self._streams: list[asyncio.Queue] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to specific event type.

        Args:
            event_type: Type of event to listen for
            handler: Function to call when event occurs
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to {event_type.value}")

    def subscribe_all(self, handler: EventHandler) -> None:
        self._global_handlers.append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        try:
            self._handlers.get(event_type, []).remove(handler)
        except ValueError:
            logger.warning(f"Handler not found for {event_type.value}")

    def stream(self) -> asyncio.Queue:
        """Open a queue that receives every event emitted from now on."""
        queue: asyncio.Queue = asyncio.Queue()
        self._streams.append(queue)
        return queue

    def close_stream(self, queue: asyncio.Queue) -> None:
        if queue in self._streams:
            self._streams.remove(queue)

    def publish(self, event_type: EventType, **data: Any) -> EngineEvent:
        """Build an event for this channel's session and emit it."""
        event = EngineEvent(event_type=event_type, session_id=self.session_id, data=data)
        self.emit(event)
        return event

    def emit(self, event: EngineEvent) -> None:
        """
        Deliver an event to handlers and streams.

        Args:
            event: Event to emit
        """
        logger.debug(f"Emitting {event.event_type.value} for session {event.session_id}")

        for handler in list(self._handlers.get(event.event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type.value}: {e}")

        for handler in list(self._global_handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in global event handler: {e}")

        for queue in self._streams:
            queue.put_nowait(event)

    def clear_handlers(self) -> None:
        self._handlers.clear()
        self._global_handlers.clear()
        self._streams.clear()
